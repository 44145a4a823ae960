"""CLI command modules.

This package contains:
- inspection: Inspection commands (status, effects, palettes, presets, info, monitor)
- control: Direct control commands (power, brightness, colour, effect, nightlight)
- presets: Preset and playlist commands
- setup: Setup, configure and help commands
"""
