"""
Setup and help commands for WLED Control CLI.

Also holds the Click group class used by the top-level CLI, which colours the
command list and suggests close matches for mistyped commands.
"""

import click
from core.config import CONFIG_FILE, MAX_SEGMENTS, POLL_INTERVALS, TRANSITION_TIMES, load_config, save_config
from models.utils import find_similar_strings, run_with_controller


class ColouredGroup(click.Group):
    """Click group with a coloured command list and typo suggestions."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if not args or 'No such command' not in str(e):
                raise
            visible = [name for name in self.list_commands(ctx) if not self.get_command(ctx, name).hidden]
            suggestions = find_similar_strings(args[0], visible, limit=3)
            if not suggestions:
                raise
            message = f"No such command '{args[0]}'.\n\n" + click.style("Did you mean one of these?\n", fg='yellow')
            message += ''.join(click.style(f"  • {name}\n", fg='green') for name in suggestions)
            raise click.UsageError(message, ctx) from e

    def format_commands(self, ctx, formatter):
        rows = []
        for name in self.list_commands(ctx):
            command = self.get_command(ctx, name)
            if command is not None and not command.hidden:
                rows.append((name, command.get_short_help_str(limit=500)))
        if not rows:
            return

        width = max(len(name) for name, _ in rows)
        formatter.write_paragraph()
        formatter.write_text(click.style('Commands:', fg='yellow', bold=True))
        with formatter.indentation():
            for name, help_text in rows:
                formatter.write_text(click.style(name.ljust(width), fg='green') + '  ' + help_text)


# (title, [(usage, description), ...]) for the quick reference
COMMAND_SECTIONS = [
    ("📋 STATUS & CONFIGURATION", [
        ("configure", "Set device address, segment and driver options"),
        ("setup", "Show configuration and test connection"),
        ("status", "Current segment state (switch, level, colour, effect...)"),
        ("info", "Firmware version and device name"),
        ("monitor", "Print attribute changes as they happen"),
        ("refresh", "Force a full refresh of state and catalogs"),
    ]),
    ("💡 LIGHT CONTROL", [
        ("power [--on/--off]", "Turn the segment on/off"),
        ("brightness <0-100>", "Set brightness"),
        ("colour -u <hue> -s <sat>", "Set colour (HSV, 0-100)"),
        ("colour --ct <kelvin>", "Set colour temperature (2000-6500K)"),
        ("nightlight <minutes>", "Start a nightlight timer"),
        ("nightlight --off", "Cancel the nightlight"),
    ]),
    ("🌈 EFFECTS & PALETTES", [
        ("effects", "List effects with IDs"),
        ("effect <name|id> [options]", "Run an effect (partial names match)"),
        ("palettes", "List palettes with IDs"),
        ("palette <name|id>", "Set palette"),
        ("reverse on/off/toggle", "Change effect direction"),
        ("alarm siren/strobe/both", "Run an alarm effect"),
    ]),
    ("🎭 PRESETS & PLAYLISTS", [
        ("presets", "List presets with IDs"),
        ("preset <name|id>", "Activate a preset"),
        ("save-preset <name> [options]", "Save a preset from explicit settings"),
        ("save-current <name>", "Save current state as a preset"),
        ("delete-preset <id>", "Delete a preset"),
        ("playlists", "List playlists with IDs"),
        ("playlist <name|id>", "Start a playlist"),
        ("playlist --next/--stop", "Advance or stop the running playlist"),
    ]),
]


@click.command(name='help')
def help_command():
    """Display help and common commands."""
    click.secho("\n╔══════════════════════════════════════════════════════════════════════╗", fg='cyan', bold=True)
    click.secho("║                    WLED Control - Quick Reference                    ║", fg='cyan', bold=True)
    click.secho("╚══════════════════════════════════════════════════════════════════════╝", fg='cyan', bold=True)
    click.echo()

    for title, commands in COMMAND_SECTIONS:
        click.secho(title, fg='yellow', bold=True)
        for cmd, desc in commands:
            click.echo("  ", nl=False)
            click.secho(cmd, fg='green', nl=False)
            click.echo(" " * (34 - len(cmd)) + "  " + desc)
        click.echo()

    click.secho("🔧 GLOBAL FLAGS", fg='yellow', bold=True)
    click.echo("  ", nl=False)
    click.secho("--debug", fg='cyan', nl=False)
    click.echo(" " * 27 + "  Show debug logging (requests, responses, timers)")
    click.echo()

    click.secho("📖 For detailed help on any command:", fg='cyan')
    click.echo(f"  uv run python wled_control.py {click.style('<command> -h', fg='white', bold=True)}")
    click.echo()


@click.command()
@click.option('--address', '-a', help='Device address, e.g. 192.168.1.50')
@click.option('--segment', '-s', type=click.IntRange(0, MAX_SEGMENTS), help='Target segment ID')
@click.option('--transition', '-t', type=click.Choice([str(t) for t in TRANSITION_TIMES]),
              help='Default transition time (ms)')
@click.option('--poll-interval', '-p', type=click.Choice([str(p) for p in POLL_INTERVALS]),
              help='Polling interval in seconds (0 disables)')
@click.option('--retry/--no-retry', default=None, help='Retry failed requests')
@click.option('--health/--no-health', default=None, help='Monitor connection health')
@click.option('--power-off-parent/--no-power-off-parent', default=None,
              help='Also switch the whole device off when the segment is turned off')
@click.option('--debug-logging/--no-debug-logging', default=None, help='Log at DEBUG level by default')
def configure_command(address, segment, transition, poll_interval, retry, health, power_off_parent,
                      debug_logging):
    """Configure the WLED device this tool controls.

    Options not given on the command line are prompted for, with the
    current values as defaults.
    """
    config = load_config()

    click.secho("\n=== WLED Configuration ===\n", fg='cyan', bold=True)

    if address is None:
        address = click.prompt("Device address", default=config.endpoint_address or '', show_default=bool(config.endpoint_address))
    if segment is None:
        segment = click.prompt("Target segment ID", type=click.IntRange(0, MAX_SEGMENTS),
                               default=config.target_segment_id)

    config.endpoint_address = address or None
    config.target_segment_id = segment
    if transition is not None:
        config.default_transition_time = int(transition)
    if poll_interval is not None:
        config.poll_interval_seconds = int(poll_interval)
    if retry is not None:
        config.retry_enabled = retry
    if health is not None:
        config.health_monitoring_enabled = health
    if power_off_parent is not None:
        config.power_off_parent = power_off_parent
    if debug_logging is not None:
        config.debug_logging = debug_logging

    config.validate()
    if not config.endpoint_address:
        click.secho("✗ A device address is required", fg='red')
        click.echo()
        return

    save_config(config)
    click.secho(f"✓ Configuration saved to {CONFIG_FILE}", fg='green')
    click.echo(f"  Address:     {config.endpoint_address}")
    click.echo(f"  Segment:     {config.target_segment_id}")
    click.echo(f"  Transition:  {config.default_transition_time} ms")
    click.echo(f"  Polling:     {config.poll_interval_seconds or 'disabled'}"
               f"{' s' if config.poll_interval_seconds else ''}")
    click.echo()


@click.command()
def setup_command():
    """Show current configuration and test the connection."""
    config = load_config()

    click.echo()
    click.secho("=== WLED Configuration ===", fg='cyan', bold=True)
    click.echo()
    click.echo(f"   Path:        {CONFIG_FILE}")

    if not config.endpoint_address:
        click.echo(f"   Status:      {click.style('✗ Not configured', fg='yellow')}")
        click.echo()
        click.echo("Run this command to set up the device:")
        click.echo(click.style("  uv run python wled_control.py configure", fg='green', bold=True))
        click.echo()
        return

    click.echo(f"   Address:     {config.endpoint_address}")
    click.echo(f"   Segment:     {config.target_segment_id}")
    click.echo(f"   Retry:       {'on' if config.retry_enabled else 'off'}")
    click.echo(f"   Health:      {'on' if config.health_monitoring_enabled else 'off'}")
    click.echo()

    click.echo(click.style("Connection Test", fg='cyan', bold=True))
    click.echo("Testing connection to device...")

    session = run_with_controller(lambda c: c.device_info, settle=0, config=config)
    if session is None:
        click.echo()
        click.echo("Try reconfiguring:")
        click.echo(click.style("  uv run python wled_control.py configure", fg='green', bold=True))
        click.echo()
        return

    controller, info = session
    click.secho(f"✓ Successfully connected to {config.endpoint_address}!", fg='green', bold=True)
    click.echo(f"  Version:    {info.version or 'Unknown'}")
    click.echo(f"  Effects:    {len(controller.catalogs.effects)}")
    click.echo(f"  Palettes:   {len(controller.catalogs.palettes)}")
    click.echo()
