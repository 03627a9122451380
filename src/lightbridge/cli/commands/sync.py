from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from lightbridge.cli.helpers import (
    build_database,
    build_platform,
    load_settings_or_exit,
    start_platform_or_exit,
)


def sync() -> None:
    """Run one discovery and reconciliation pass against the accessory cache."""
    console = Console()

    settings = load_settings_or_exit()
    db = build_database(settings)
    platform = build_platform(settings, db)
    start_platform_or_exit(platform)

    try:
        result = asyncio.run(platform.rescan())
        offline = platform.context.offline_records() if platform.context else []
    finally:
        platform.stop()

    if result is None:
        console.print("[red]✗[/red] Discovery failed, accessory cache left unchanged")
        raise typer.Exit(1)

    table = Table()
    table.add_column("Action", style="cyan")
    table.add_column("Accessory", style="green")
    table.add_column("Unique ID")
    table.add_column("IP")
    table.add_column("Detail")

    for record in result.to_register:
        table.add_row(
            "register",
            record.display_name,
            record.unique_id,
            record.proto_device.ip_address,
            record.device_api.description,
        )
    for record in result.to_update:
        table.add_row(
            "update",
            record.display_name,
            record.unique_id,
            record.proto_device.ip_address,
            record.device_api.description,
        )
    for action in result.to_prune:
        table.add_row(
            "[red]prune[/red]",
            action.record.display_name,
            action.record.unique_id,
            action.record.proto_device.ip_address,
            action.reason,
        )
    for record in offline:
        table.add_row(
            "[yellow]offline[/yellow]",
            record.display_name,
            record.unique_id,
            record.proto_device.ip_address,
            f"missed {record.restarts_since_seen} scan(s)",
        )

    if table.row_count:
        console.print(table)
    else:
        console.print("Nothing to do.")

    console.print(
        f"\n[green]{len(result.to_register)} registered, "
        f"{len(result.to_update)} updated, {len(result.to_prune)} pruned, "
        f"{len(offline)} offline[/green]"
    )


def register(app: typer.Typer) -> None:
    app.command()(sync)
