"""
Helmsman faults (errors raised while building and running action trees) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing faults.
  Codes are grouped by domain to keep logs/searches predictable.
- ValidationError: construction-time failure of a tree (bad names, duplicates,
  conflicting built-ins). Never seen at dispatch time.
- CommandException: base of every dispatch-time fault. Carries a message plus
  read-only options and knows how to render itself through rich.
- CommandRuntimeError: uniform wrapper around any failure raised by a handler.

Rendering
- Shell transcripts must reproduce the messages verbatim, so a fault renders as
  its message alone; styling is applied only when the "colorful" option is set.
- Styles can be overridden through a __styles__ mapping in __main__.

Integration
- Resolver/coercer/dispatcher raise these faults; the execute() pipeline turns
  them into Failed outcomes; the shell prints them, invoke() re-raises them.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - construction (100xx)
      • INVALID_DEFINITION
    - routing (110xx)
      • UNKNOWN_ACTION, ILLEGAL_COMMAND
    - arguments/options (111xx)
      • ILLEGAL_ARGUMENT, UNKNOWN_OPTION, OPTION_TYPE, MISSING_REQUIRED_OPTION
    - delegated handler failures (113xx)
      • COMMAND_RUNTIME
    """
    # --- construction errors (100xx) ---
    INVALID_DEFINITION          = 10001

    # --- routing errors (110xx) ---
    UNKNOWN_ACTION              = 11001
    ILLEGAL_COMMAND             = 11002

    # --- argument/option errors (111xx) ---
    ILLEGAL_ARGUMENT            = 11101
    UNKNOWN_OPTION              = 11102
    OPTION_TYPE                 = 11103
    MISSING_REQUIRED_OPTION     = 11104

    # --- delegated errors (113xx) ---
    COMMAND_RUNTIME             = 11301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ValidationError(ValueError):
    """
    Raised while building a tree: invalid names, duplicates, inconsistent
    option types/defaults, or a child clashing with a built-in action.
    """
    code = FaultCode.INVALID_DEFINITION


class CommandException(Exception):
    """
    Base class of every fault surfaced while resolving or dispatching a command.

    Parameters
    - message: str (positional-only)
      The exact, user-facing message (also str(fault)).
    - **options:
      Context for reporters (token, path, option, cause, colorful, ...). Exposed
      read-only through .options.
    """
    code = FaultCode.ILLEGAL_ARGUMENT

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styles = defaultdict(str, {
            "error-message": "bold #FF4DA6",  # friendly pinky message
            "error-cause": "#C8C8D0",  # soft light gray cause block
        } | getattr(__import__("__main__"), "__styles__", {}))

        if not self.options.get("colorful", False):
            return Text(str(self))

        head, _, tail = str(self).partition("\n")
        if not tail:
            return Text(head, styles["error-message"])
        return Text.assemble((head, styles["error-message"]), "\n", (tail, styles["error-cause"]))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownActionError(CommandException):
    """A leading token does not name any action where one was required."""
    code = FaultCode.UNKNOWN_ACTION


class IllegalArgumentError(CommandException):
    """Structural misuse of arguments: positionals/flags where not allowed, bad values."""
    code = FaultCode.ILLEGAL_ARGUMENT


class UnknownOptionError(IllegalArgumentError):
    code = FaultCode.UNKNOWN_OPTION


class OptionTypeError(IllegalArgumentError):
    code = FaultCode.OPTION_TYPE


class MissingRequiredOptionError(IllegalArgumentError):
    code = FaultCode.MISSING_REQUIRED_OPTION


class IllegalCommandError(CommandException):
    """A structurally legal command that is forbidden in context (nested shells)."""
    code = FaultCode.ILLEGAL_COMMAND


class CommandRuntimeError(CommandException):
    """
    Wrapper around any failure raised by a handler.

    The message always reads:

        command '<path>' failed

        Cause: <Kind> - <message>

    where <Kind> is the class name of the original failure. The original
    exception is available as .cause (and as __cause__ when raised by the
    dispatcher).
    """
    code = FaultCode.COMMAND_RUNTIME

    @classmethod
    def wrap(cls, path, exception, /, **options):
        """
        Build the uniform wrapper for `exception` raised by the handler of `path`.
        """
        if not isinstance(exception, BaseException):
            raise TypeError("wrap() second argument must be an exception")
        message = "command '%s' failed\n\nCause: %s - %s" % (path, type(exception).__name__, exception)
        return cls(message, path=path, cause=exception, **options)

    @property
    def cause(self):
        return self.options.get("cause")

    @property
    def path(self):
        return self.options.get("path")


def render(fault, /, **options):
    """
    return a renderable copy of `fault` with the given display options merged in.

    contract
    - fault must provide a __replace__ method (see CommandException).
    - typical options: colorful (bool).
    """
    if not hasattr(fault, "__replace__") or not callable(fault.__replace__):
        raise TypeError("render() argument must have a __replace__ method")
    return copy.replace(fault, **options)


__all__ = (
    "FaultCode",
    "ValidationError",
    "CommandException",
    "UnknownActionError",
    "IllegalArgumentError",
    "UnknownOptionError",
    "OptionTypeError",
    "MissingRequiredOptionError",
    "IllegalCommandError",
    "CommandRuntimeError",
    "render",
)
