"""Logging setup shared by the CLI and library entry-points.

The core modules only call `logging.getLogger(__name__)`; rendering is
configured once here with Rich so compiler output and log lines share the
same terminal.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "shaderc-bridge"


def configure_logging(level: str | int = "WARNING", *, console: Console | None = None) -> None:
    """Install a `RichHandler` on the root logger (idempotent)."""

    root = logging.getLogger()
    if isinstance(level, str):
        level = level.upper()
    root.setLevel(level)

    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(level)
            return

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
