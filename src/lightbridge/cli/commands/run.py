from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from lightbridge.cli.helpers import (
    build_database,
    build_platform,
    load_settings_or_exit,
    start_platform_or_exit,
)


def register(app: typer.Typer) -> None:
    @app.command()
    def run(
        interval: float | None = typer.Option(
            None,
            "--interval",
            "-i",
            min=1.0,
            help="Seconds between rescans. Uses config default if omitted.",
        ),
    ) -> None:
        """Keep the accessory cache in sync, rescanning periodically."""
        console = Console()

        settings = load_settings_or_exit()
        db = build_database(settings)
        platform = build_platform(settings, db)
        start_platform_or_exit(platform)

        delay = interval or settings.scanning.rescan_interval
        console.print(f"Rescanning every {delay:g}s. Press Ctrl+C to stop.\n")

        try:
            asyncio.run(platform.run(delay))
        except KeyboardInterrupt:
            console.print("\n[green]Stopped.[/green]")
        finally:
            platform.stop()
