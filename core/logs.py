"""Logging setup for the command line host.

The engine logs through the standard logging module. When driven from the CLI
those records are echoed through click so they share the CLI's colours.
"""

import logging

import click

LEVEL_COLOURS = {
    logging.DEBUG: dict(fg='white', dim=True),
    logging.INFO: dict(fg='cyan'),
    logging.WARNING: dict(fg='yellow'),
    logging.ERROR: dict(fg='red'),
    logging.CRITICAL: dict(fg='red', bold=True),
}


class ClickEchoHandler(logging.Handler):
    """Logging handler that writes records with click.secho."""

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
            style = LEVEL_COLOURS.get(record.levelno, {})
            click.secho(message, err=record.levelno >= logging.WARNING, **style)
        except Exception:
            self.handleError(record)


def setup_logging(debug: bool = False) -> logging.Handler:
    """Install the click handler on the root logger (idempotent)."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, ClickEchoHandler):
            root.removeHandler(handler)

    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    # urllib3 is chatty at DEBUG
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    return handler
