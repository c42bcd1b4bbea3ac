"""CLI commands for swanclient.

Thin wrappers over the Lotus/Swan adapters and the deal lifecycle. This is
the only layer that turns errors into a process exit code.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from swanclient import __version__
from swanclient.cli.logging_utils import ensure_rotating_log_file
from swanclient.config.loader import get_config_path, load_config, save_config
from swanclient.config.schema import Config
from swanclient.deal import DEAL_STATUS_CREATED, DealConfig, DealLifecycle, FileDesc
from swanclient.lotus import LotusClient
from swanclient.swan import SwanClient
from swanclient.transport import HttpTransport
from swanclient.utils.exceptions import SwanAuthError, SwanClientError

app = typer.Typer(
    name="swanclient",
    help="swanclient - Filecoin deals between Lotus and Swan",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"swanclient v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file (default ~/.swanclient/config.json)"),
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
):
    """swanclient - Filecoin deals between Lotus and Swan."""
    ctx.obj = {"config_path": config_path}


def _load(ctx: typer.Context) -> Config:
    path = (ctx.obj or {}).get("config_path")
    try:
        return load_config(path)
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1) from e


def _lotus(config: Config) -> LotusClient:
    return LotusClient.from_config(config.lotus, transport=HttpTransport.from_config(config.http))


def _swan(config: Config) -> SwanClient:
    try:
        return SwanClient.from_config(config.swan, transport=HttpTransport.from_config(config.http))
    except SwanAuthError as e:
        console.print(f"[red]✗[/red] Swan authentication failed: {e.message}")
        raise typer.Exit(1) from e


def _fail(action: str, exc: SwanClientError) -> typer.Exit:
    console.print(f"[red]✗[/red] {action} failed: {exc}")
    return typer.Exit(1)


@app.command()
def init(ctx: typer.Context):
    """Write a default config file."""
    config_path = (ctx.obj or {}).get("config_path") or get_config_path()
    if config_path.exists() and not typer.confirm(f"{config_path} exists. Overwrite with defaults?"):
        raise typer.Exit()
    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")


@app.command()
def version(ctx: typer.Context):
    """Show the Lotus node version."""
    ensure_rotating_log_file("lotus")
    try:
        value = _lotus(_load(ctx)).version()
    except SwanClientError as e:
        raise _fail("Lotus version query", e) from e
    console.print(f"Lotus: [cyan]{value}[/cyan]")


@app.command()
def ask(ctx: typer.Context):
    """Show the miner's current storage ask."""
    ensure_rotating_log_file("lotus")
    try:
        snapshot = _lotus(_load(ctx)).market_get_ask()
    except SwanClientError as e:
        raise _fail("Ask query", e) from e
    table = Table(title=f"Ask of {snapshot.miner or 'miner'}")
    table.add_column("Field", style="dim")
    table.add_column("Value", style="cyan")
    for field, value in snapshot.model_dump().items():
        table.add_row(field, str(value))
    console.print(table)


@app.command()
def deals(
    ctx: typer.Context,
    miner_fid: str = typer.Argument(..., help="Miner id, e.g. f01000"),
    status: str = typer.Option(DEAL_STATUS_CREATED, "--status", "-s", help="Deal status filter"),
    limit: int = typer.Option(50, "--limit", "-n", help="Page size"),
):
    """List offline deals of a miner."""
    ensure_rotating_log_file("swan")
    rows = _swan(_load(ctx)).get_offline_deals(miner_fid, status, limit)
    if not rows:
        console.print(f"[yellow]No deals with status {status} for {miner_fid}[/yellow]")
        return
    table = Table(title=f"{miner_fid} deals ({status})")
    table.add_column("ID", style="dim")
    table.add_column("Status")
    table.add_column("Data cid", style="cyan")
    table.add_column("Piece cid")
    table.add_column("Start epoch")
    for d in rows:
        table.add_row(str(d.id), d.status, d.data_cid, d.piece_cid, str(d.start_epoch or ""))
    console.print(table)


@app.command("send-deal")
def send_deal(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Source file (or CAR) path as seen by the Lotus node"),
    miner: Optional[str] = typer.Option(None, "--miner", "-m", help="Miner id; defaults to sender.minerFid"),
    wallet: Optional[str] = typer.Option(None, "--wallet", "-w", help="Sender wallet; defaults to sender.wallet"),
    car: bool = typer.Option(False, "--car/--no-car", help="PATH already is a CAR file"),
    deal_id: Optional[int] = typer.Option(None, "--deal-id", help="Swan deal id to report the proposal to"),
    verified: Optional[bool] = typer.Option(None, "--verified/--regular", help="Verified deal"),
):
    """Import, archive, compute commP and propose a deal for one file."""
    ensure_rotating_log_file("deal")
    config = _load(ctx)
    deal_config = DealConfig.from_config(
        config.sender,
        miner_fid=miner,
        sender_wallet=wallet,
        verified_deal=verified,
    )
    if not deal_config.sender_wallet or not deal_config.miner_fid:
        raise typer.BadParameter("wallet and miner are required (options or sender config)")

    swan = _swan(config) if deal_id is not None else None
    lifecycle = DealLifecycle(_lotus(config), swan)
    try:
        outcome = lifecycle.propose_deal(FileDesc(source_file_path=path, is_car=car, deal_id=deal_id), deal_config)
    except SwanClientError as e:
        raise _fail(f"Deal for {path}", e) from e
    except ValueError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1) from e

    console.print("[green]✓[/green] Deal proposed")
    console.print(f"data cid:     [cyan]{outcome.data_cid}[/cyan]")
    console.print(f"piece cid:    [cyan]{outcome.piece_cid}[/cyan] ({outcome.piece_size} bytes)")
    console.print(f"start epoch:  {outcome.start_epoch}")
    console.print(f"proposal cid: [cyan]{outcome.proposal_cid}[/cyan]")


@app.command("update-deal")
def update_deal(
    ctx: typer.Context,
    deal_id: int = typer.Argument(..., help="Swan deal id"),
    status: str = typer.Argument(..., help="New status"),
    info: Optional[list[str]] = typer.Argument(None, help="Optional note, file path, file size (in that order)"),
):
    """Set the status of a Swan offline deal."""
    ensure_rotating_log_file("swan")
    swan = _swan(_load(ctx))
    if not swan.update_offline_deal_status(deal_id, status, *(info or [])):
        console.print(f"[red]✗[/red] Update of deal {deal_id} to {status} failed")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Deal {deal_id} -> {status}")


if __name__ == "__main__":
    app()
