from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from lightbridge.core.mock_device import run_mock_device


def register(app: typer.Typer) -> None:
    @app.command()
    def mock(
        unique_id: str = typer.Option(
            "ACCF23000001", "--unique-id", "-u", help="Unique ID to report"
        ),
        model: int = typer.Option(0x35, "--model", "-m", help="Model number to report"),
        host: str = typer.Option(
            "127.0.0.1", "--host", help="Address announced in discovery replies"
        ),
        discovery_port: int = typer.Option(48899, "--discovery-port"),
        control_port: int = typer.Option(5577, "--control-port", "-p"),
    ) -> None:
        """Run a mock lighting controller for development."""
        console = Console()
        console.print(
            f"Starting mock controller {unique_id} "
            f"(discovery {discovery_port}, control {control_port})..."
        )
        console.print("Press Ctrl+C to stop.\n")

        try:
            asyncio.run(
                run_mock_device(
                    unique_id=unique_id,
                    model_number=model,
                    host=host,
                    discovery_port=discovery_port,
                    control_port=control_port,
                )
            )
        except KeyboardInterrupt:
            console.print("\n[green]Mock controller stopped.[/green]")
