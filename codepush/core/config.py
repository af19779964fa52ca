"""Typed configuration loading.

Settings come from, in increasing precedence: built-in defaults, the user
config file (``<user-config-dir>/config.toml``), environment variables and
finally command-line flags (applied by the CLI layer).

Example config.toml:

    server_url = "https://api.appcenter.ms"
    api_version = "v0.1"
    token = "..."
    app = "owner/app"
    deployment_name = "Staging"
    timeout = 60
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from codepush.platform.paths import user_config_dir

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str

__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_API_VERSION",
    "DEFAULT_DEPLOYMENT_NAME",
    "DEFAULT_SERVER_URL",
    "DEFAULT_TIMEOUT",
    "ENV_ACCESS_TOKEN",
    "ENV_CONFIG_PATH",
    "ENV_SERVER_URL",
    "default_config_path",
    "load_config",
    "resolve_config",
]

DEFAULT_SERVER_URL = "https://api.appcenter.ms"
DEFAULT_API_VERSION = "v0.1"
DEFAULT_DEPLOYMENT_NAME = "Staging"
DEFAULT_TIMEOUT = 60.0

ENV_ACCESS_TOKEN = "CODEPUSH_ACCESS_TOKEN"
ENV_SERVER_URL = "CODEPUSH_SERVER_URL"
ENV_CONFIG_PATH = "CODEPUSH_CONFIG"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Resolved client settings."""

    server_url: str = DEFAULT_SERVER_URL
    api_version: str = DEFAULT_API_VERSION
    token: str | None = None
    app: str | None = None
    deployment_name: str = DEFAULT_DEPLOYMENT_NAME
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        timeout = get_int(data, "timeout")
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")

        return cls(
            server_url=(get_str(data, "server_url") or DEFAULT_SERVER_URL).rstrip("/"),
            api_version=get_str(data, "api_version") or DEFAULT_API_VERSION,
            token=get_str(data, "token"),
            app=get_str(data, "app"),
            deployment_name=get_str(data, "deployment_name") or DEFAULT_DEPLOYMENT_NAME,
            timeout=float(timeout) if timeout is not None else DEFAULT_TIMEOUT,
        )

    def with_env(self, env: Mapping[str, str]) -> Config:
        """Return a copy with environment overrides applied."""
        token = env.get(ENV_ACCESS_TOKEN, "").strip()
        server_url = env.get(ENV_SERVER_URL, "").strip()
        return replace(
            self,
            token=token or self.token,
            server_url=server_url.rstrip("/") if server_url else self.server_url,
        )


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    override = env.get(ENV_CONFIG_PATH)
    if override:
        return Path(override).expanduser()
    return user_config_dir() / "config.toml"


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to config.toml file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def resolve_config(env: Mapping[str, str] | None = None) -> Result[Config, ConfigError]:
    """Load the user config (if any) and apply environment overrides.

    A missing config file is not an error; defaults are used instead.
    """
    env = os.environ if env is None else env
    path = default_config_path(env)

    config = Config()
    if path.exists():
        loaded = load_config(path)
        if isinstance(loaded, Err):
            return loaded
        config = loaded.value

    return Ok(config.with_env(env))
