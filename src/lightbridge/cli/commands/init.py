from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from lightbridge.cli.helpers import build_database
from lightbridge.config import Settings, resolve_config_path, write_settings


def register(app: typer.Typer) -> None:
    @app.command()
    def init(
        data_dir: Annotated[
            Path | None,
            typer.Option("--data-dir", "--path", help="Custom data directory"),
        ] = None,
        force: Annotated[
            bool,
            typer.Option("--force", "-f", help="Overwrite existing config and cache"),
        ] = False,
    ) -> None:
        """Initialize lightbridge configuration and data directory."""
        console = Console()

        config_path, config_exists = resolve_config_path(allow_missing=True)
        if config_exists and not force:
            console.print(f"[dim]Config exists:[/dim] {config_path}")
        else:
            settings = Settings()
            if data_dir is not None:
                settings = settings.model_copy(
                    update={
                        "database": settings.database.model_copy(
                            update={"path": str(data_dir)}
                        )
                    }
                )
            write_settings(settings, config_path)
            action = "Overwrote" if config_exists else "Created"
            console.print(f"[green]✓[/green] {action} config: {config_path}")

        db = build_database(Settings(), data_dir=data_dir)
        created = db.init(force=force)

        if created:
            console.print(f"[green]✓[/green] Initialized data dir: {db.path}")
        else:
            console.print(f"[dim]Data dir exists:[/dim] {db.path}")
