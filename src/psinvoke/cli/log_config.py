"""Logging configuration for the ``psinvoke`` console script.

Library modules only create ``logging.getLogger(__name__)`` loggers;
handlers are attached here, once, by the CLI.  Output goes to stderr,
through Rich's handler when Rich is installed.
"""

from __future__ import annotations

import logging
import sys

from psinvoke.utils.log import verbosity_to_level


def configure_logging(verbosity: int = 0) -> None:
    """Route psinvoke log records to stderr at a level chosen by ``-v`` count."""
    level = verbosity_to_level(verbosity)

    handler: logging.Handler
    try:
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s"),
        )
    else:
        from psinvoke.cli.console import get_rich_console

        handler = RichHandler(console=get_rich_console(), show_path=False)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("psinvoke").setLevel(level)
    # pywinrm's HTTP stack is chatty at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests_ntlm").setLevel(logging.WARNING)
