from __future__ import annotations

import typer
from rich.console import Console

from lightbridge.cli.helpers import (
    build_database,
    load_settings_or_exit,
    resolve_config_path_or_exit,
)


def register(app: typer.Typer) -> None:
    @app.command()
    def info() -> None:
        """Show data directory info and stats."""
        settings = load_settings_or_exit()
        db = build_database(settings)
        try:
            loaded = db.load_accessories()
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1) from exc
        current_scan = db.load_current_scan()

        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)
        management = settings.device_management
        prune_restarts = settings.pruning.prune_restarts

        console = Console()

        console.print("[bold]lightbridge Info[/bold]\n")
        console.print(f"Data directory: {db.path}")
        console.print(f"Accessory cache: {db.accessories_path}")
        console.print(f"Config file: {config_path if config_exists else 'defaults'}")

        console.print("\n[bold]Configuration[/bold]")
        console.print(f"Broadcast address: {settings.scanning.broadcast_address}")
        console.print(f"Timeout: {settings.scanning.timeout}s")
        console.print(f"Rescan interval: {settings.scanning.rescan_interval}s")
        console.print(
            f"Device list ({management.blacklist_or_whitelist}): "
            f"{len(management.blacklisted_unique_ids)} id(s)"
        )
        console.print(
            f"Prune after: {prune_restarts} missed scan(s)"
            if prune_restarts is not None
            else "Prune after: disabled"
        )

        console.print("\n[bold]Statistics[/bold]")
        console.print(f"Cached accessories: {len(loaded.records)}")
        offline = [record for record in loaded.records if record.restarts_since_seen]
        console.print(f"Missing from last scan: {len(offline)}")
        if loaded.malformed:
            console.print(f"[red]Malformed entries: {len(loaded.malformed)}[/red]")

        if current_scan:
            console.print(f"Last scan: {current_scan.scan_timestamp}")
            console.print(f"Controllers found: {len(current_scan.devices)}")
        else:
            console.print("No scans recorded yet")
