"""Exceptions raised inside the engine.

None of these escape to the host: the engine catches them at the command or
response boundary and logs them.
"""


class WledError(Exception):
    """Base class for engine errors."""


class SnapshotParseError(WledError):
    """A response body did not have the shape the endpoint promises."""


class InvalidParameterError(WledError):
    """A command parameter was out of range or malformed."""


class PresetValidationError(InvalidParameterError):
    """A preset build was aborted because a parameter was invalid."""
