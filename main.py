"""CursorCast — keyframed cursor and zoom effects for screen recordings."""

import logging
import sys

from cursorcast.cli import LOG_FORMAT, app

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
)

_logger = logging.getLogger(__name__)


def _global_exception_handler(exc_type, exc_value, exc_tb):
    """Log unhandled exceptions instead of crashing silently."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    _logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))


def main() -> None:
    """Command-line entry point — installs the exception hook and runs the CLI."""
    sys.excepthook = _global_exception_handler
    app(prog_name="cursorcast")


if __name__ == "__main__":
    main()
