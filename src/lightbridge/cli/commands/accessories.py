from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from lightbridge.cli.helpers import build_database, load_settings_or_exit

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_accessories() -> None:
    """List cached accessories."""
    settings = load_settings_or_exit()
    db = build_database(settings)
    try:
        loaded = db.load_accessories()
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    console = Console()

    if not loaded.records:
        console.print("No accessories cached.")
        console.print("Use 'lightbridge sync' to discover controllers.")
        return

    table = Table()
    table.add_column("Record ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Unique ID")
    table.add_column("IP")
    table.add_column("Type")
    table.add_column("Missed")
    table.add_column("Last Seen")

    for record in sorted(loaded.records, key=lambda item: item.display_name):
        table.add_row(
            record.record_id,
            record.display_name,
            record.unique_id,
            record.proto_device.ip_address,
            record.device_api.description,
            str(record.restarts_since_seen),
            record.last_seen.isoformat(timespec="seconds") if record.last_seen else "",
        )

    console.print(table)
    if loaded.malformed:
        console.print(
            f"[yellow]![/yellow] {len(loaded.malformed)} malformed entry(ies) skipped"
        )


@app.command("rename")
def rename_accessory(
    record_id: str = typer.Argument(..., help="Record ID of the accessory"),
    name: str = typer.Argument(..., help="New display name"),
) -> None:
    """Rename a cached accessory.

    Names containing "delete" are pruned the next time the device is seen.
    """
    settings = load_settings_or_exit()
    db = build_database(settings)

    console = Console()
    if db.rename_accessory(record_id, name):
        console.print(f"[green]✓[/green] Renamed '{record_id}' → '{name}'")
    else:
        console.print(f"[yellow]![/yellow] Accessory '{record_id}' not found")
        raise typer.Exit(1)
