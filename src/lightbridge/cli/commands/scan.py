from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from lightbridge.cli.helpers import build_database, load_settings_or_exit
from lightbridge.core import DevicePolicy, Discovery, record_id
from lightbridge.errors import DiscoveryError
from lightbridge.models import DiscoveredDevice
from lightbridge.utils.redaction import Redactor

logger = logging.getLogger(__name__)


def scan(
    save: bool = typer.Option(False, help="Save scan results to data directory"),
    redact: bool = typer.Option(
        False,
        "--redact",
        help="Redact sensitive values in output",
    ),
) -> None:
    """Discover lighting controllers without touching the accessory cache."""
    console = Console()

    settings = load_settings_or_exit()
    db = build_database(settings)

    console.print(
        f"Discovering controllers via {settings.scanning.broadcast_address}..."
    )
    logger.info(
        "Discovery settings: timeout=%.2fs, port=%d",
        settings.scanning.timeout,
        settings.scanning.discovery_port,
    )
    try:
        controllers = asyncio.run(
            Discovery(settings.scanning).discover_controllers()
        )
    except DiscoveryError as exc:
        console.print(f"[red]Discovery failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    if not controllers:
        console.print("No controllers found.")
        return

    try:
        cached = {record.record_id: record for record in db.load_accessories().records}
    except ValueError as exc:
        logger.warning("Ignoring unreadable accessory cache: %s", exc)
        cached = {}
    policy = DevicePolicy.from_config(settings.device_management)

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("IP", style="cyan")
    table.add_column("Unique ID", style="green")
    table.add_column("Accessory", style="yellow")
    table.add_column("Type")
    table.add_column("Model")
    table.add_column("Power")
    table.add_column("Allowed")

    for unique_id, controller in sorted(controllers.items()):
        record = cached.get(record_id(unique_id))
        table.add_row(
            redactor.redact_ip(controller.identity.ip_address),
            redactor.redact_unique_id(unique_id),
            record.display_name if record else "",
            controller.capability.description,
            f"0x{controller.identity.model_number:02X}",
            "on" if controller.state.is_on else "off",
            "yes" if policy.is_allowed(unique_id) else "[red]no[/red]",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(controllers)} controller(s)[/green]")

    if save:
        db.save_scan(
            [
                DiscoveredDevice(
                    proto_device=controller.identity,
                    device_api=controller.capability,
                )
                for controller in controllers.values()
            ],
            settings.scanning.broadcast_address,
        )
        console.print(f"[green]✓[/green] Saved scan results to {db.path}")


def register(app: typer.Typer) -> None:
    app.command()(scan)
