"""
Process entry point.

run() dispatches one invocation against the command tree and converts the outcome
into an exit status: SUCCESS when the routed command returns normally, FAILURE when
any CommandException escapes. The fault message goes to stdout; the usage block that
accompanies parsing faults has already been written to stderr by the command layer.
"""
import logging
import os
import sys

from rich.console import Console
from rich.logging import RichHandler

from .commands import invoke
from .faults import CommandException
from .registry import build_root_command

logger = logging.getLogger(__name__)

SUCCESS = 0
FAILURE = 255

LOG_LEVEL_ENV = "SEQKIT_LOG_LEVEL"

console = Console(markup=False, highlight=False, emoji=False, soft_wrap=True)


def setup_logging(level=None):
    """Route the package loggers to stderr through rich; the level comes from SEQKIT_LOG_LEVEL."""
    level = level or os.environ.get(LOG_LEVEL_ENV, "WARNING")
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    package = logging.getLogger(__package__)
    package.handlers[:] = [handler]
    try:
        package.setLevel(level.upper())
    except ValueError:
        package.setLevel(logging.WARNING)
        logger.warning("unknown log level %r, using WARNING", level)
    package.propagate = False


def run(argv=None, root=None):
    """
    Dispatch `argv` (defaults to sys.argv[1:]) against `root` (defaults to the seqkit tree).

    Returns SUCCESS or FAILURE; construction errors of the tree are not caught.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    root = build_root_command() if root is None else root
    try:
        invoke(root, argv)
    except CommandException as exception:
        logger.debug("invocation failed: code=%s hint=%s", exception.code, exception.hint, exc_info=exception)
        console.file.write(f"{exception}\n")
        return FAILURE
    return SUCCESS


def main():
    setup_logging()
    sys.exit(run())


__all__ = (
    "SUCCESS",
    "FAILURE",
    "setup_logging",
    "run",
    "main",
)
