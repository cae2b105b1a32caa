"""
Tabwise faults (resolution errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every condition the walker
  can hit while re-simulating a command line. Codes are grouped by domain to keep
  debug logs searchable.
- CompletionError: fatal faults. Resolution stops and the response carries the
  error directive with no candidate groups.
- CompletionWarning: non-fatal faults. They are recorded on the resolution state and
  logged; candidates are still produced since the user is still typing.
- trigger(): central entry point to surface any fault with extra context.

Rendering
- Faults know how to render themselves with rich (__rich__) in the same compact
  "[ prog — code | title ]" layout for errors and warnings.
- Rendering only ever targets the debug sink: the response stream belongs to the shell.

Configuration errors (malformed command models) are not faults: the model raises
plain TypeError/ValueError at construction time, never during a request.
"""
import copy
import logging
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset

logger = logging.getLogger(__name__)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the completion engine (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND
    - switches (1120x)
      • UNKNOWN_SWITCH, ORPHANED_ARGUMENT
    - warnings (12xxx)
      • MISSING_VALUE, REQUIRED_SLOT, IGNORED_WORD

    rationale
    - numeric ranges encode domains; spacing leaves room for additions.
    - normalize() lets the host remap codes to its own labels.
    """
    # --- routing errors (111xx) ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102

    # --- switch errors (112xx) ---
    UNKNOWN_SWITCH              = 11201
    ORPHANED_ARGUMENT           = 11202

    # --- warnings (12xxx) ---
    MISSING_VALUE               = 12201
    REQUIRED_SLOT               = 12301
    IGNORED_WORD                = 12302

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class _Fault:
    """
    shared state and rendering of errors and warnings.

    options
    - code: FaultCode, title: str, hint: str (rendered)
    - prog: program name shown in the header (falls back to __main__.__prog__)
    - any other context (input, index, command) is kept for callers and logs.
    """
    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message if self.message is not Unset else ""

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, type(self).__palette__ | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        prog = text(self.options.get("prog", getattr(main, "__prog__", "tabwise")), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.options["code"].normalize(), "code"),
            " | ",
            text(self.options.get("title", "").title(), "title"),
            " ]"
        )
        message = text(self.message, "message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint"), "hint"))

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CompletionError(_Fault, Exception):
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #00E5FF",
        "title": "bold #FF4DA6",
        "message": "#C8C8D0",
        "hint-arrow": "#9CE19C dim",
        "hint": "italic #9CE19C",
    }

    def __trigger__(self):
        raise self from None


class UnknownCommandError(CompletionError): ...
class UnknownSubcommandError(UnknownCommandError): ...
class OrphanedArgumentError(CompletionError): ...


class CompletionWarning(_Fault, Warning):
    __palette__ = {
        "prog-name": "bold #E6E6F0",
        "code": "bold #FFB400",
        "title": "bold #FFC2E0",
        "message": "#D6D6DE",
        "hint-arrow": "#B8EFAF dim",
        "hint": "italic #B8EFAF",
    }

    def __trigger__(self):
        logger.debug("%s (%s)", self.message, self.options["code"].normalize())


class UnknownSwitchWarning(CompletionWarning): ...
class MissingValueWarning(CompletionWarning): ...
class RequiredSlotWarning(CompletionWarning): ...
class IgnoredWordWarning(CompletionWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - errors raise, warnings go to the debug log and are returned to the caller.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    (fault := copy.replace(fault, **options)).__trigger__()
    return fault


__all__ = (
    "FaultCode",
    "CompletionError",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "OrphanedArgumentError",
    "CompletionWarning",
    "UnknownSwitchWarning",
    "MissingValueWarning",
    "RequiredSlotWarning",
    "IgnoredWordWarning",
    "trigger",
)
