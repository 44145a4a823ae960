"""
Preset and playlist commands.

Activate, save, overwrite and delete presets; start, stop and advance playlists.
"""

import click
from commands.control import _report
from models.utils import run_with_controller


@click.command()
@click.argument('preset')
def preset_command(preset: str):
    """Activate a preset by name or ID."""
    session = run_with_controller(lambda c: c.set_preset(preset))
    _report(session, f"Preset '{preset}' activated", f"Error activating preset '{preset}'")


@click.command()
@click.argument('name')
@click.option('--id', 'preset_id', type=click.IntRange(1, 250), help='Preset slot (1-250, auto if omitted)')
@click.option('--brightness', '-b', type=click.IntRange(0, 255), help='Brightness (0-255)')
@click.option('--effect', '-e', help='Effect name or ID')
@click.option('--palette', '-p', help='Palette name or ID')
@click.option('--speed', '-s', type=click.IntRange(0, 255), help='Effect speed (0-255)')
@click.option('--intensity', '-i', type=click.IntRange(0, 255), help='Effect intensity (0-255)')
@click.option('--primary', help='Primary colour as hex (e.g. FF0000)')
@click.option('--secondary', help='Secondary colour as hex')
@click.option('--tertiary', help='Tertiary colour as hex')
def save_preset_command(name, preset_id, brightness, effect, palette, speed, intensity,
                        primary, secondary, tertiary):
    """Save a preset from explicit settings.

    Settings you leave out keep the device's current value. Saving to an
    existing ID overwrites it.

    \b
    Examples:
      uv run python wled_control.py save-preset "Evening" -e "Candle" -b 120
      uv run python wled_control.py save-preset "Red" --id 12 --primary FF0000
    """
    session = run_with_controller(lambda c: c.save_preset(
        name, preset_id=preset_id, brightness=brightness, effect=effect, palette=palette,
        speed=speed, intensity=intensity, primary_color=primary, secondary_color=secondary,
        tertiary_color=tertiary), settle=3)
    _report(session, f"Preset '{name}' saved", f"Failed to save preset '{name}'")


@click.command()
@click.argument('name')
@click.option('--id', 'preset_id', type=click.IntRange(1, 250), help='Preset slot (1-250, auto if omitted)')
def save_current_command(name: str, preset_id: int | None):
    """Save the device's current state as a preset."""
    session = run_with_controller(lambda c: c.save_current_as_preset(name, preset_id), settle=3)
    _report(session, f"Current state saved as '{name}'", f"Failed to save preset '{name}'")


@click.command()
@click.argument('preset_id', type=click.IntRange(1, 250))
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
def delete_preset_command(preset_id: int, yes: bool):
    """Delete the preset with the given ID."""
    if not yes and not click.confirm(f"Delete preset {preset_id}?", default=False):
        click.echo("Cancelled.")
        return

    session = run_with_controller(lambda c: c.delete_preset(preset_id), settle=3)
    _report(session, f"Preset {preset_id} deleted", f"Failed to delete preset {preset_id}")


@click.command()
@click.argument('playlist', required=False)
@click.option('--stop', is_flag=True, help='Stop the running playlist')
@click.option('--next', 'advance', is_flag=True, help='Advance to the next preset in the running playlist')
def playlist_command(playlist: str | None, stop: bool, advance: bool):
    """Start a playlist by name or ID, or control the running one.

    \b
    Examples:
      uv run python wled_control.py playlist "Party Mix"
      uv run python wled_control.py playlist --next
      uv run python wled_control.py playlist --stop
    """
    if stop:
        session = run_with_controller(lambda c: c.stop_playlist())
        _report(session, "Playlist stopped", "Failed to stop playlist")
    elif advance:
        session = run_with_controller(lambda c: c.next_preset_in_playlist())
        _report(session, "Advanced to next preset", "No playlist is running")
    elif playlist:
        session = run_with_controller(lambda c: c.set_playlist(playlist))
        _report(session, f"Playlist '{playlist}' started", f"Error starting playlist '{playlist}'")
    else:
        click.echo("Error: Please specify a PLAYLIST, or --stop/--next")
