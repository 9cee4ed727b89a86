"""Command line interface for mock-llm."""

from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import ConfigError, MockServerConfig, load_config
from .factory import build_app, build_dispatcher
from .models import Vendor
from .server import parse_listen_addr

app = typer.Typer(
    help="Mock LLM server returning canned responses for OpenAI, Anthropic and Google APIs"
)

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a YAML or JSON mock configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("mock-llm"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def serve(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    listen_addr: Annotated[
        Optional[str],
        typer.Option("--listen-addr", help="host:port to bind, e.g. 127.0.0.1:8080."),
    ] = None,
) -> None:
    """Serve the configured mocks until interrupted."""

    import uvicorn

    overrides: dict[str, Any] = {}
    if listen_addr:
        overrides["listen_addr"] = listen_addr
    config = _load_or_exit(config_path, env_file, overrides)
    try:
        host, port = parse_listen_addr(config.resolved_listen_addr())
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    typer.echo(
        f"Loaded {len(config.openai)} OpenAI, {len(config.anthropic)} Anthropic "
        f"and {len(config.google)} Google mocks"
    )
    uvicorn.run(build_app(config), host=host, port=port)


@app.command()
def check(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """Validate a configuration and list its mocks in match order."""

    config = _load_or_exit(config_path, env_file, {})
    table = Table(title="Configured mocks")
    table.add_column("Vendor")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Match type")
    for vendor, mocks in (
        (Vendor.OPENAI, config.openai),
        (Vendor.ANTHROPIC, config.anthropic),
        (Vendor.GOOGLE, config.google),
    ):
        for index, mock in enumerate(mocks):
            table.add_row(vendor.value, str(index), mock.name, mock.match.match_type.value)
    Console().print(table)


@app.command()
def match(
    request_path: Annotated[
        Path,
        typer.Argument(help="JSON file holding a vendor request body."),
    ],
    vendor: Annotated[
        Vendor,
        typer.Option("--vendor", help="API the request body is shaped for."),
    ],
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """Show which mock, if any, would answer a request."""

    config = _load_or_exit(config_path, env_file, {})
    dispatcher = build_dispatcher(config)
    try:
        payload = json.loads(request_path.read_text(encoding="utf-8"))
        conversation = dispatcher.adapter(vendor).decode_request(payload)
    except (OSError, ValueError, ValidationError) as exc:
        typer.echo(f"Invalid request: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    entry = dispatcher.match_request(vendor, conversation)
    if entry is None:
        typer.echo("No matching mock found.")
        raise typer.Exit(code=1)
    typer.echo(f"Matched mock: {entry.name}")
    typer.echo(json.dumps(entry.response, indent=2))


def _load_or_exit(
    config_path: Optional[Path],
    env_file: Optional[Path],
    overrides: dict[str, Any],
) -> MockServerConfig:
    try:
        return load_config(config_path, env_file=env_file, **overrides)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc


if __name__ == "__main__":
    app()
