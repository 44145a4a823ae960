"""
Inspection commands.

Commands for viewing device status, catalogs (effects, palettes, presets,
playlists), firmware info, and for monitoring attribute changes live.
"""

import asyncio
from datetime import datetime

import click
from core.config import POLL_INTERVALS, load_config
from core.synchronizer import UNITS, DeviceAttributes
from models.types import CatalogKind
from models.utils import run_with_controller

STATUS_GROUPS = [
    ("Connection", ['connectionState', 'lastUpdate', 'firmwareVersion']),
    ("Light", ['switch', 'level', 'colorMode', 'colorName', 'colorTemperature', 'hue', 'saturation']),
    ("Effect", ['effectName', 'effectId', 'paletteName', 'paletteId', 'effectDirection']),
    ("Presets", ['presetName', 'presetValue', 'playlistName', 'playlistId', 'playlistState']),
    ("Nightlight", ['nightlightActive', 'nightlightDuration', 'nightlightMode',
                    'nightlightTargetBrightness', 'nightlightRemaining']),
]


def _format_value(name: str, value) -> str:
    unit = UNITS.get(name)
    if unit == '%':
        return f"{value}%"
    if unit:
        return f"{value} {unit}"
    return str(value)


@click.command()
def status_command():
    """Show the current state of the configured segment."""
    session = run_with_controller(lambda c: c.get_presets())
    if session is None:
        return
    controller, _ = session
    values = controller.sink.values

    click.secho(f"\n=== WLED Status ({controller.config.endpoint_address}, "
                f"segment {controller.segment_id}) ===\n", fg='cyan', bold=True)

    for title, names in STATUS_GROUPS:
        present = [n for n in names if n in values]
        if not present:
            continue
        click.secho(title, fg='yellow', bold=True)
        width = max(len(n) for n in present)
        for name in present:
            click.echo(f"  {click.style(name.ljust(width), fg='green')}  {_format_value(name, values[name])}")
        click.echo()


def _catalog_command(kind: CatalogKind, needs_presets: bool):
    """Build a command that lists one catalog."""
    label = f"{kind.value}s"

    def command():
        action = (lambda c: c.get_presets()) if needs_presets else (lambda c: None)
        session = run_with_controller(action, settle=1 if needs_presets else 0)
        if session is None:
            return
        controller, _ = session
        entries = controller.catalogs.entries(kind)

        if not entries:
            click.echo(f"No {label} found.")
            return

        click.secho(f"\n=== {label.capitalize()} ({len(entries)}) ===\n", fg='cyan', bold=True)
        id_width = len(str(max(entry_id for entry_id, _ in entries)))
        for entry_id, _ in entries:
            shown = controller.catalogs.name_of(kind, entry_id)
            click.echo(f"  {click.style(str(entry_id).rjust(id_width), fg='green')}  {shown}")
        click.echo()

    command.__doc__ = f"List available {label} with their IDs."
    return click.command()(command)


effects_command = _catalog_command(CatalogKind.EFFECT, needs_presets=False)
palettes_command = _catalog_command(CatalogKind.PALETTE, needs_presets=False)
presets_command = _catalog_command(CatalogKind.PRESET, needs_presets=True)
playlists_command = _catalog_command(CatalogKind.PLAYLIST, needs_presets=True)


@click.command()
def info_command():
    """Show device firmware information."""
    session = run_with_controller(lambda c: c.device_info, settle=0)
    if session is None:
        return
    _, info = session

    click.secho("\n=== Device Info ===\n", fg='cyan', bold=True)
    click.echo(f"  Name:     {info.name or 'Unknown'}")
    click.echo(f"  Version:  {info.version or 'Unknown'}")
    click.echo(f"  Build:    {info.build or 'Unknown'}")
    click.echo()


@click.command()
@click.option('--interval', '-i', type=click.Choice([str(i) for i in POLL_INTERVALS]),
              help='Polling interval in seconds (overrides config, 0 disables)')
def monitor_command(interval: str | None):
    """Run continuously and print attribute changes as they happen.

    Press Ctrl+C to stop.
    """
    # Import here to avoid circular dependency
    from core.controller import WledController

    config = load_config()
    if not config.endpoint_address:
        click.secho("✗ No WLED device configured.", fg='red')
        click.echo("Run 'configure' to set the device address.")
        return
    if interval is not None:
        config.poll_interval_seconds = int(interval)

    def show(events):
        stamp = datetime.now().strftime('%H:%M:%S')
        for event in events:
            click.echo(f"[{stamp}] {click.style(event.name, fg='green')}: "
                       f"{_format_value(event.name, event.value)}")

    async def run():
        controller = WledController(config, DeviceAttributes(listener=show))
        if not controller.start():
            return
        try:
            await asyncio.Event().wait()
        finally:
            controller.stop()

    click.secho(f"Monitoring {config.endpoint_address} (Ctrl+C to stop)...", fg='cyan')
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        click.echo("\nMonitoring stopped.")
