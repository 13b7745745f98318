"""
seqkit faults: execution errors and construction errors.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing execution
  fault. Codes are grouped by domain to keep messages consistent and searches predictable.
- CommandException: base type for execution faults. It carries the message shown to
  the user plus read-only options (code, hint, the command that raised it, ...).
  The entrypoint catches exactly this type, prints the message and exits non-zero.
- Construction errors (DuplicateCommandError, UnknownGroupError, ...) are ValueError
  subclasses (SealedCommandError is a RuntimeError) raised while the command tree
  is being built. They are programming errors in the composition step and are
  never caught by the entrypoint.

Message tone
- Execution messages keep a stable wording ("unknown flag: --foo",
  "flag needs an argument: --threads") so that scripts grepping the output keep working.
"""
from enum import IntEnum
from types import MappingProxyType

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, UNKNOWN_HELP_TOPIC
    - flags (1111x)
      • UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE, INVALID_CHOICE
    - delegated (1113x)
      • DELEGATED_ERROR
    - configuration (1114x)
      • INVALID_COMPRESS_LEVEL
    """
    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_HELP_TOPIC          = 11102

    # --- flag errors (11xxx) ---
    UNKNOWN_FLAG                = 11111
    MISSING_FLAG_VALUE          = 11112
    INVALID_FLAG_VALUE          = 11113
    INVALID_CHOICE              = 11114

    # --- delegated errors (11xxx) ---
    DELEGATED_ERROR             = 11131

    # --- configuration errors (11xxx) ---
    INVALID_COMPRESS_LEVEL      = 11141


class CommandException(Exception):
    """
    Execution fault raised while parsing, routing or running a command.

    str(fault) is the bare message; everything else lives in fault.options.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class UnknownCommandError(CommandException): ...
class UnknownHelpTopicError(CommandException): ...
class UnknownFlagError(CommandException): ...
class MissingFlagValueError(CommandException): ...
class InvalidFlagValueError(CommandException): ...
class InvalidChoiceError(InvalidFlagValueError): ...
class DelegatedCommandError(CommandException): ...
class InvalidCompressLevelError(CommandException): ...


class DuplicateCommandError(ValueError):
    """Two sibling commands (or a name and an alias) collide."""


class DuplicateGroupError(ValueError):
    """A group id was registered twice on the same command."""


class UnknownGroupError(ValueError):
    """A command references a group its parent never registered."""


class DuplicateFlagError(ValueError):
    """A flag name or shorthand clashes with a local or inherited flag."""


class SealedCommandError(RuntimeError):
    """The command tree was sealed and cannot be modified any more."""


def trigger(fault, /, **options):
    """
    raise a fault enriched with the given runtime options.

    contract
    - fault must be a CommandException; options are merged into a copy via __replace__
      and the copy is raised, keeping the original cause chain.
    """
    if not isinstance(fault, CommandException):
        raise TypeError("trigger() argument must be a command exception")
    raise fault.__replace__(**options)


__all__ = (
    "FaultCode",
    "CommandException",
    "UnknownCommandError",
    "UnknownHelpTopicError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "InvalidFlagValueError",
    "InvalidChoiceError",
    "DelegatedCommandError",
    "InvalidCompressLevelError",
    "DuplicateCommandError",
    "DuplicateGroupError",
    "UnknownGroupError",
    "DuplicateFlagError",
    "SealedCommandError",
    "trigger",
)
