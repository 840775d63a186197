import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

_logger = logging.getLogger(__name__)


# stdout carries stash contents, so everything we say goes to stderr
def _create_plain_handler():
    h = logging.StreamHandler(sys.stderr)
    h.setFormatter(logging.Formatter("%(message)s"))
    return h


def _create_rich_handler():
    console = Console(stderr=True)
    h = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        show_level=False,
        markup=True,
    )
    h.setFormatter(logging.Formatter("%(message)s"))
    return h


_handler = _create_rich_handler()
_logger.setLevel(logging.INFO)
_logger.propagate = False
_logger.addHandler(_handler)


def _log(level, msg):
    if not is_colorized():
        # messages are written with rich markup, drop it for plain output
        msg = Text.from_markup(msg).plain
    _logger.log(level, msg)


def debug(msg):
    _log(logging.DEBUG, msg)


def info(msg):
    _log(logging.INFO, msg)


def warning(msg):
    _log(logging.WARNING, msg)


def error(msg):
    _log(logging.ERROR, msg)


def set_default_level(level):
    if isinstance(level, str):
        level = level.upper()
    _logger.setLevel(level)


def set_colorize(colorize: bool):
    """Swap between the rich handler and a plain one (no markup, no colors)."""
    global _handler
    _logger.removeHandler(_handler)
    _handler = _create_rich_handler() if colorize else _create_plain_handler()
    _logger.addHandler(_handler)


def is_colorized() -> bool:
    return isinstance(_handler, RichHandler)
