#!/usr/bin/env python3
"""
WLED Control CLI
Control a WLED segment: power, brightness, colour, effects, presets and playlists.
"""

import click

from core.config import load_config
from core.logs import setup_logging

# Import commands from command modules
from commands.setup import ColouredGroup, help_command, setup_command, configure_command
from commands.inspection import (
    status_command,
    effects_command,
    palettes_command,
    presets_command,
    playlists_command,
    info_command,
    monitor_command,
)
from commands.control import (
    power_command,
    brightness_command,
    colour_command,
    effect_command,
    palette_command,
    reverse_command,
    alarm_command,
    nightlight_command,
    refresh_command,
)
from commands.presets import (
    preset_command,
    save_preset_command,
    save_current_command,
    delete_preset_command,
    playlist_command,
)


@click.group(
    cls=ColouredGroup,
    context_settings={
        'help_option_names': ['-h', '--help'],
        'max_content_width': 999  # Very wide to prevent wrapping on wide terminals
    }
)
@click.version_option(version='0.1.0', prog_name='WLED Control')
@click.option('--debug', is_flag=True, help='Show debug logging')
def cli(debug: bool):
    """WLED Control CLI - Drive one segment of a WLED controller.

Configuration: Local config (~/.wled_control/config.json)
Run 'configure' for first-time setup or 'setup' to check configuration.

Use 'help' for a quick reference of all commands.
Use 'COMMAND -h' or 'COMMAND --help' for detailed help on a specific command."""
    setup_logging(debug or load_config().debug_logging)


# Register setup and help commands
cli.add_command(help_command)
cli.add_command(setup_command, name='setup')
cli.add_command(configure_command, name='configure')

# Register inspection commands
cli.add_command(status_command, name='status')
cli.add_command(effects_command, name='effects')
cli.add_command(palettes_command, name='palettes')
cli.add_command(presets_command, name='presets')
cli.add_command(playlists_command, name='playlists')
cli.add_command(info_command, name='info')
cli.add_command(monitor_command, name='monitor')

# Register control commands
cli.add_command(power_command, name='power')
cli.add_command(brightness_command, name='brightness')
cli.add_command(colour_command, name='colour')
cli.add_command(effect_command, name='effect')
cli.add_command(palette_command, name='palette')
cli.add_command(reverse_command, name='reverse')
cli.add_command(alarm_command, name='alarm')
cli.add_command(nightlight_command, name='nightlight')
cli.add_command(refresh_command, name='refresh')

# Register preset commands
cli.add_command(preset_command, name='preset')
cli.add_command(save_preset_command, name='save-preset')
cli.add_command(save_current_command, name='save-current')
cli.add_command(delete_preset_command, name='delete-preset')
cli.add_command(playlist_command, name='playlist')


if __name__ == '__main__':
    cli()
