"""Data models and utility functions.

This package contains:
- types: Snapshot, segment, nightlight and device info models
- colour: Colour space conversions and colour naming
- utils: Utility functions (check_range, run_with_controller, similarity_score)
"""
