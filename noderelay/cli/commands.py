"""CLI commands for noderelay.

The CLI is a thin shell over `noderelay.client.Client`: it resolves config,
sets up logging, runs one coroutine and renders the result with rich.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from noderelay import __version__
from noderelay.auth import Auth
from noderelay.cli.shared.logging_utils import configure_stderr_logging, ensure_rotating_log_file
from noderelay.cli.shared.value_utils import parse_value
from noderelay.client import Client
from noderelay.config.access import get_config
from noderelay.types import BlockchainInfo
from noderelay.utils.exceptions import ConfigurationError, RelayError, format_error

app = typer.Typer(
    name="noderelay",
    help="noderelay - JSON-RPC client for Bitcoin Core compatible nodes",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_state: dict[str, Any] = {}


@app.callback()
def main(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file (default ~/.noderelay/config.json)"),
    url: str | None = typer.Option(None, "--url", help="RPC URL, overrides config"),
    cookie: Path | None = typer.Option(None, "--cookie", help="Cookie file with user:pass"),
    user: str | None = typer.Option(None, "--user", help="RPC user"),
    password: str | None = typer.Option(None, "--password", help="RPC password"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests at DEBUG level"),
) -> None:
    """Connect to a node over JSON-RPC."""
    _state.clear()
    _state.update(config_path=config_path, url=url, cookie=cookie, user=user, password=password, verbose=verbose)


def _resolve_auth(config: Any) -> Auth:
    if _state.get("cookie"):
        return Auth.cookie_file(_state["cookie"])
    if _state.get("user") is not None and _state.get("password") is not None:
        return Auth.user_pass(_state["user"], _state["password"])
    return config.get_auth()


def _build_client() -> Client:
    try:
        config = get_config(config_path=_state.get("config_path"))
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    configure_stderr_logging("DEBUG" if _state.get("verbose") else config.logging.level)
    if config.logging.file:
        ensure_rotating_log_file(config.logging.file, level=config.logging.level)
    return Client(_state.get("url") or config.rpc.url, _resolve_auth(config))


def _run(fn: Callable[[Client], Awaitable[Any]]) -> Any:
    """Build a client, run `fn` against it and map relay errors to exit codes."""

    async def runner() -> Any:
        async with _build_client() as client:
            return await fn(client)

    try:
        return asyncio.run(runner())
    except ConfigurationError as exc:
        err_console.print(f"[red]{escape(format_error(exc))}[/red]")
        raise typer.Exit(2)
    except RelayError as exc:
        err_console.print(f"[red]{escape(format_error(exc, include_details=True))}[/red]")
        raise typer.Exit(1)


@app.command("call")
def call_command(
    method: str = typer.Argument(..., help="RPC method, e.g. getblockcount"),
    params: list[str] | None = typer.Argument(None, help="Positional params; JSON or plain strings"),
) -> None:
    """Call any RPC method and print the JSON result."""
    args = [parse_value(p) for p in params or []]
    result = _run(lambda client: client.call(method, args))
    console.print_json(json.dumps(result))


def _render_blockchain_info(info: BlockchainInfo) -> None:
    console.print(f"Chain: [cyan]{info.chain}[/cyan]")
    console.print(f"Blocks: {info.blocks} / headers {info.headers}")
    console.print(f"Best block: {info.bestblockhash}")
    console.print(f"Verification progress: {info.verificationprogress:.4%}")
    if not info.softforks:
        return
    table = Table(title="Softforks")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Active")
    table.add_column("Status")
    for name, sf in sorted(info.softforks.items()):
        status = sf.bip9.status.value if sf.bip9 else ""
        table.add_row(name, sf.type_.value, "[green]yes[/green]" if sf.active else "[dim]no[/dim]", status)
    console.print(table)


@app.command("info")
def info_command() -> None:
    """Show blockchain state and softfork activation."""
    info = _run(lambda client: client.get_blockchain_info())
    _render_blockchain_info(info)


@app.command("version")
def version_command() -> None:
    """Show the noderelay version."""
    console.print(f"noderelay v{__version__}")
