"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from codepush.core.errors import ErrorCode
from codepush.output.console import Style

if TYPE_CHECKING:
    from codepush.cli.context import CLIContext


def fail(
    ctx: CLIContext,
    message: str,
    *,
    code: ErrorCode,
    hint: str | None = None,
) -> NoReturn:
    """Report an error (and optional hint) and exit with code.

    Replaces the repeated pattern:
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(code))
    """
    ctx.console.error(message)
    if hint:
        ctx.console.print(f"hint: {hint}", Style.DIM)
    raise typer.Exit(code=int(code))
