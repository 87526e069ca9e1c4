"""
CLI interface for the notification gateway
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from notify_interceptors import InterceptorChain
from notify_interceptors.errors import InterceptorError

from .config import (
    GatewayConfig,
    build_chain_from_config,
    get_profile_config,
    load_config,
    validate_config,
)
from .dispatcher import NotificationDispatcher
from .message import NotificationMessage, NotificationParseError, parse_notification

app = typer.Typer(
    name="notify-interceptors",
    help="Run inbound notifications through an interceptor chain",
    rich_markup_mode="markdown"
)
console = Console()
logger = logging.getLogger(__name__)

EXIT_REJECTED = 1
EXIT_ERROR = 2


def setup_logging(level: int) -> None:
    """Route log records through rich"""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Debug mode")
):
    if debug:
        setup_logging(logging.DEBUG)
    elif verbose:
        setup_logging(logging.INFO)
    else:
        setup_logging(logging.WARNING)


def _load_gateway_config(config: Optional[Path], profile: str) -> GatewayConfig:
    if config is not None:
        data = load_config(config)
        console.print(f"Loaded config from: {config}")
    else:
        data = get_profile_config(profile)
    return GatewayConfig.from_dict(data)


def _parse_headers(headers: List[str]) -> Dict[str, str]:
    parsed = {}
    for header in headers:
        key, sep, value = header.partition('=')
        if not sep or not key.strip():
            raise typer.BadParameter(f"Header must be KEY=VALUE: {header}")
        parsed[key.strip()] = value.strip()
    return parsed


def _build_chain(config: Optional[Path], profile: str) -> InterceptorChain:
    try:
        return build_chain_from_config(_load_gateway_config(config, profile))
    except (InterceptorError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error building interceptor chain: {e}[/red]")
        sys.exit(EXIT_ERROR)


def _print_chain(chain: InterceptorChain) -> None:
    table = Table(title="Interceptor Chain")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Priority", style="yellow", justify="center")
    table.add_column("Enabled", style="green", justify="center")

    for info in chain.describe():
        table.add_row(
            str(info['position']),
            info['name'],
            info['type'],
            str(info['priority']),
            "yes" if info['enabled'] else "no"
        )

    console.print(table)


@app.command()
def check(
    identifier: str = typer.Argument(..., help="Notification identifier (route)"),
    payload: Path = typer.Argument(..., help="File holding the notification body"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    profile: str = typer.Option("default", "--profile", "-p", help="Profile used when no config file is given"),
    header: List[str] = typer.Option([], "--header", "-H", help="Request header as KEY=VALUE, repeatable"),
    stream: Optional[str] = typer.Option(None, "--stream", "-s", help="Stream id of the outgoing message")
):
    """
    Run one notification through the interceptor chain

    Exits 0 when the notification is accepted and 1 when it is discarded.

    Example:
        notify-interceptors check alerts ./alert.json --profile strict -H X-Signature=abc
    """
    if not payload.exists():
        console.print(f"[red]Payload file not found: {payload}[/red]")
        sys.exit(EXIT_ERROR)

    logger.info(f"Checking notification for {identifier} from {payload}")
    chain = _build_chain(config, profile)

    try:
        request = parse_notification(identifier, payload.read_bytes(), _parse_headers(header))
    except NotificationParseError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_ERROR)

    dispatcher = NotificationDispatcher(chain)
    result = dispatcher.dispatch(request, NotificationMessage(stream_id=stream))

    console.print(f"Invoked: {', '.join(result.invoked) or '(none)'}")
    if result.accepted:
        console.print("[green]✓ Notification accepted[/green]")
        return

    console.print(f"[red]✗ Notification discarded by {result.rejected_by}[/red]")
    sys.exit(EXIT_REJECTED)


@app.command("list")
def list_interceptors(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    profile: str = typer.Option("default", "--profile", "-p", help="Profile used when no config file is given")
):
    """
    Show the interceptor chain in invocation order
    """
    chain = _build_chain(config, profile)
    _print_chain(chain)
    console.print(f"\n[dim]Total interceptors: {len(chain)}[/dim]")


@app.command()
def validate(
    config: Path = typer.Argument(..., help="Configuration file to validate"),
    verbose: bool = typer.Option(False, "--verbose", help="Print the configuration")
):
    """
    Validate a configuration file and try to build its chain

    Example:
        notify-interceptors validate gateway.yaml
    """
    console.print(f"[bold]Validating configuration: {config}[/bold]")

    try:
        data: Dict[str, Any] = load_config(config)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(EXIT_ERROR)

    errors = validate_config(data)
    if errors:
        console.print("[red]Configuration errors:[/red]")
        for error in errors:
            console.print(f"  • {error}")
        sys.exit(EXIT_REJECTED)

    if verbose:
        console.print(json.dumps(data, indent=2, default=str))

    try:
        chain = build_chain_from_config(GatewayConfig.from_dict(data))
    except InterceptorError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(EXIT_REJECTED)

    console.print("[green]✓ Configuration is valid[/green]")
    _print_chain(chain)


def main():
    app()


if __name__ == "__main__":
    main()
