from __future__ import annotations

from typing import Annotated

import typer

from lightbridge.utils.logging import setup_logging

from .commands import accessories as accessories_cmd
from .commands import config as config_cmd
from .commands.info import register as register_info
from .commands.init import register as register_init
from .commands.mock import register as register_mock
from .commands.run import register as register_run
from .commands.scan import register as register_scan
from .commands.sync import register as register_sync

app = typer.Typer(
    help="lightbridge - sync LAN lighting controllers into an accessory registry",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")
app.add_typer(accessories_cmd.app, name="accessories")

register_init(app)
register_info(app)
register_scan(app)
register_sync(app)
register_run(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """lightbridge CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"lightbridge version {get_version('lightbridge')}")
        raise typer.Exit()
