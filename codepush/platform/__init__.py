"""Platform abstraction layer."""

from .files import ScratchDir, copy_tree, remove_dir
from .paths import (
    home,
    user_config_dir,
)

__all__ = [
    # files
    "ScratchDir",
    "copy_tree",
    "remove_dir",
    # paths
    "home",
    "user_config_dir",
]
