from __future__ import annotations

from dataclasses import dataclass

import typer

from codepush import __version__
from codepush.api.http import HttpClient, RealHttpClient
from codepush.core.config import Config, resolve_config
from codepush.core.errors import ErrorCode
from codepush.core.result import Err
from codepush.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    http: HttpClient


def build_context(*, debug: bool = False) -> CLIContext:
    config_result = resolve_config()
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config = config_result.value
    return CLIContext(
        config=config,
        console=RichConsole(verbose=debug),
        http=RealHttpClient(timeout=config.timeout, user_agent=f"codepush-cli/{__version__}"),
    )
