"""Utility functions for WLED control.

This module contains helper functions used across the application:
- check_range: Validate a numeric command parameter
- run_with_controller: Run one action against a freshly initialised controller
- similarity_score: Canonical fuzzy string matching algorithm
- find_similar_strings: Find similar strings using fuzzy matching
"""

import asyncio

import click

from core.errors import InvalidParameterError


def check_range(label: str, value, low: int, high: int, error=InvalidParameterError) -> int:
    """Coerce a parameter to int and check it lies within [low, high].

    Args:
        label: Parameter name used in the error message
        value: Raw value (int, float or numeric string)
        low: Minimum allowed value
        high: Maximum allowed value
        error: Exception class to raise

    Returns:
        The value as an int

    Raises:
        InvalidParameterError (or `error`): If the value is not numeric or out of range
    """
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise error(f"Invalid {label}: {value}. Must be between {low}-{high}.")
    if not low <= number <= high:
        raise error(f"Invalid {label}: {value}. Must be between {low}-{high}.")
    return number


def run_with_controller(action, settle: float = 1.0, timeout: float = 10, config=None):
    """Start a controller, wait for it to initialise, then run an action.

    The event loop keeps running for `settle` seconds after the action so the
    command's response (and anything it schedules) can be processed.

    Args:
        action: Callable receiving the WledController; its return value is passed back
        settle: Seconds to keep the loop running after the action
        timeout: Seconds to wait for initialisation
        config: DriverConfig to use (loaded from the config file if omitted)

    Returns:
        (controller, result) tuple, or None if the controller couldn't be initialised
    """
    # Import here to avoid circular dependency
    from core.config import load_config
    from core.controller import WledController

    config = config or load_config()
    if not config.endpoint_address:
        click.secho("✗ No WLED device configured.", fg='red')
        click.echo("Run 'configure' to set the device address.")
        return None

    async def session():
        controller = WledController(config)
        if not controller.start():
            return None
        try:
            if not await controller.wait_until_ready(timeout):
                click.secho(f"✗ Could not initialise connection to {config.endpoint_address}", fg='red')
                return None
            result = action(controller)
            if settle:
                await asyncio.sleep(settle)
            await controller.transport.drain()
            return controller, result
        finally:
            controller.stop()

    return asyncio.run(session())


def similarity_score(s1: str, s2: str) -> int:
    """Calculate similarity score between two strings.

    This is the canonical implementation used throughout the application
    for fuzzy matching (command typo suggestions, effect name hints, etc.).

    Args:
        s1: First string to compare
        s2: Second string to compare

    Returns:
        Similarity score:
        - 100: Exact match (case-insensitive)
        - 80: Prefix match
        - 60: Substring match
        - 0-50: Character sequence match (proportional to matching characters)
        - 0: No match
    """
    s1_lower = s1.lower()
    s2_lower = s2.lower()

    # Exact match
    if s1_lower == s2_lower:
        return 100

    # Prefix match
    if s2_lower.startswith(s1_lower) or s1_lower.startswith(s2_lower):
        return 80

    # Contains match
    if s1_lower in s2_lower or s2_lower in s1_lower:
        return 60

    # Character sequence matching
    matches = 0
    j = 0
    for char in s1_lower:
        while j < len(s2_lower):
            if s2_lower[j] == char:
                matches += 1
                j += 1
                break
            j += 1

    if matches > 0:
        score = int((matches / max(len(s1_lower), len(s2_lower))) * 50)
        return score if score > 20 else 0

    return 0


def find_similar_strings(target: str, candidates: list[str], limit: int = 5) -> list[str]:
    """Find similar strings using simple similarity scoring.

    Args:
        target: The string to match against
        candidates: List of candidate strings to search
        limit: Maximum number of results to return

    Returns:
        List of similar strings, sorted by similarity score (most similar first)
    """
    scored = [(candidate, similarity_score(target, candidate)) for candidate in candidates]
    filtered = [(c, s) for c, s in scored if s > 0]
    sorted_matches = sorted(filtered, key=lambda x: x[1], reverse=True)

    return [c for c, s in sorted_matches[:limit]]
