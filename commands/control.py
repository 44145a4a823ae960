"""
Control commands for direct manipulation of the WLED segment.

Includes power, brightness, colour, effects, palettes, direction, alarm and
nightlight control.
"""

import click
from models.types import NIGHTLIGHT_MODES
from models.utils import run_with_controller


def _report(session, success: str, failure: str):
    """Echo the outcome of a controller session."""
    if session is None:
        return
    _, ok = session
    if ok:
        click.echo(f"✓ {success}")
    else:
        click.echo(f"✗ {failure}")


@click.command()
@click.option('--on/--off', default=True, help='Turn the segment on or off')
def power_command(on: bool):
    """Turn the configured segment ON or OFF.

    \b
    Examples:
      uv run python wled_control.py power --on
      uv run python wled_control.py power --off
    """
    status = "ON" if on else "OFF"
    session = run_with_controller(lambda c: c.on() if on else c.off())
    _report(session, f"Segment turned {status}", f"Failed to turn segment {status}")


@click.command()
@click.argument('level', type=click.IntRange(0, 100))
@click.option('--rate', '-r', type=float, help='Transition time in seconds')
def brightness_command(level: int, rate: float | None):
    """Set brightness of the segment (0-100%). 0 turns it off.

    \b
    Examples:
      uv run python wled_control.py brightness 75
      uv run python wled_control.py brightness 20 --rate 3
    """
    session = run_with_controller(lambda c: c.set_level(level, rate))
    _report(session, f"Brightness set to {level}%", "Failed to set brightness")


@click.command()
@click.option('--hue', '-u', type=click.IntRange(0, 100), help='Hue (0-100)')
@click.option('--sat', '-s', type=click.IntRange(0, 100), help='Saturation (0-100)')
@click.option('--level', '-l', type=click.IntRange(0, 100), default=100, help='Brightness (0-100)')
@click.option('--ct', '-t', type=click.IntRange(2000, 6500), help='Colour temperature (2000-6500 K)')
def colour_command(hue: int | None, sat: int | None, level: int, ct: int | None):
    """Set colour or temperature of the segment. Stops any running effect.

    \b
    Examples:
      uv run python wled_control.py colour -u 66 -s 100
      uv run python wled_control.py colour --ct 2700
    """
    if ct is not None:
        session = run_with_controller(lambda c: c.set_color_temperature(ct))
        _report(session, f"Colour temperature set to {ct}K", "Failed to set colour temperature")
    elif hue is not None or sat is not None:
        hue = hue if hue is not None else 0
        sat = sat if sat is not None else 100
        session = run_with_controller(lambda c: c.set_color(hue, sat, level))
        _report(session, f"Colour set to hue {hue}, saturation {sat}", "Failed to set colour")
    else:
        click.echo("Error: Please specify --hue/-u and --sat/-s, or --ct/-t")


@click.command()
@click.argument('effect')
@click.option('--speed', '-s', type=click.IntRange(0, 255), help='Effect speed (0-255)')
@click.option('--intensity', '-i', type=click.IntRange(0, 255), help='Effect intensity (0-255)')
@click.option('--palette', '-p', help='Palette name or ID')
def effect_command(effect: str, speed: int | None, intensity: int | None, palette: str | None):
    """Run an effect by name (case-insensitive, partial match) or ID.

    \b
    Examples:
      uv run python wled_control.py effect rainbow
      uv run python wled_control.py effect 9 --speed 200 -p "Party"
    """
    session = run_with_controller(lambda c: c.set_effect(effect, speed, intensity, palette))
    _report(session, f"Effect '{effect}' started", f"Failed to set effect '{effect}'")


@click.command()
@click.argument('palette')
def palette_command(palette: str):
    """Set the colour palette by name or ID."""
    session = run_with_controller(lambda c: c.set_palette(palette))
    _report(session, f"Palette set to '{palette}'", f"Failed to set palette '{palette}'")


@click.command()
@click.argument('direction', type=click.Choice(['on', 'off', 'toggle']))
def reverse_command(direction: str):
    """Reverse the effect direction (on/off/toggle)."""
    actions = {
        'on': lambda c: c.reverse_on(),
        'off': lambda c: c.reverse_off(),
        'toggle': lambda c: c.toggle_effect_direction(),
    }
    session = run_with_controller(actions[direction])
    _report(session, f"Effect reverse {direction}", "Failed to change effect direction")


@click.command()
@click.argument('mode', type=click.Choice(['siren', 'strobe', 'both']))
def alarm_command(mode: str):
    """Run an alarm effect (siren, strobe or both)."""
    session = run_with_controller(lambda c: getattr(c, mode)())
    _report(session, f"Alarm '{mode}' started", f"Failed to start alarm '{mode}'")


@click.command()
@click.argument('duration', type=click.IntRange(1, 255), required=False)
@click.option('--mode', '-m', type=click.Choice(NIGHTLIGHT_MODES, case_sensitive=False),
              default='Fade', help='How the light changes over the duration')
@click.option('--brightness', '-b', type=click.IntRange(0, 255), default=0,
              help='Target brightness at the end (0-255)')
@click.option('--off', 'turn_off', is_flag=True, help='Cancel the running nightlight')
def nightlight_command(duration: int | None, mode: str, brightness: int, turn_off: bool):
    """Start a nightlight timer of DURATION minutes, or cancel it with --off.

    \b
    Examples:
      uv run python wled_control.py nightlight 30
      uv run python wled_control.py nightlight 60 --mode Sunrise -b 255
      uv run python wled_control.py nightlight --off
    """
    if turn_off:
        session = run_with_controller(lambda c: c.nightlight_off())
        _report(session, "Nightlight cancelled", "Failed to cancel nightlight")
        return

    if duration is None:
        click.echo("Error: Please specify a DURATION in minutes, or --off")
        return

    session = run_with_controller(lambda c: c.set_nightlight(duration, mode, brightness))
    _report(session, f"Nightlight set for {duration} min ({mode})", "Failed to set nightlight")


@click.command()
def refresh_command():
    """Force a full refresh of state, effects and palettes."""
    session = run_with_controller(lambda c: c.force_refresh())
    _report(session, "Device refreshed", "Failed to refresh device")
