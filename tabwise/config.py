"""
Parsing-wide configuration threaded into the line walker.

Config is an immutable value: the walker never reads ambient state. Hosts either
build one explicitly or derive it from the environment with Config.from_environ().

Environment
- TABWISE_DEBUG_FILE: path of the debug sink (append mode). Unset disables it.
- TABWISE_PASS_DOUBLE_DASH: "--" ends option/positional processing (default on).
- TABWISE_PASS_AFTER_NON_OPTION: an unresolvable option stops the walk (default off).

__complete (REQUEST_COMMAND) is the hidden command the shell scripts call the program with.
"""
import os
from collections import namedtuple

REQUEST_COMMAND = "__complete"

DEBUG_FILE = "TABWISE_DEBUG_FILE"
PASS_DOUBLE_DASH = "TABWISE_PASS_DOUBLE_DASH"
PASS_AFTER_NON_OPTION = "TABWISE_PASS_AFTER_NON_OPTION"

_TRUTHY = frozenset(("1", "true", "yes", "on"))


class Config(namedtuple("Config", ("pass_double_dash", "pass_after_non_option", "debug_file"))):
    """
    immutable parsing options.

    fields
    - pass_double_dash: bool, a bare "--" drops positional slots and makes the rest opaque.
    - pass_after_non_option: bool, an option that resolves to nothing stops the walk.
    - debug_file: None | str, where diagnostics go; never the response stream.
    """
    __slots__ = ()

    def __new__(cls, pass_double_dash=True, pass_after_non_option=False, debug_file=None):
        if not isinstance(pass_double_dash, bool):
            raise TypeError("config 'pass_double_dash' must be a boolean")
        if not isinstance(pass_after_non_option, bool):
            raise TypeError("config 'pass_after_non_option' must be a boolean")
        if debug_file is not None and not isinstance(debug_file, str | os.PathLike):
            raise TypeError("config 'debug_file' must be a path")
        return super().__new__(cls, pass_double_dash, pass_after_non_option, debug_file or None)

    @classmethod
    def from_environ(cls, environ=os.environ, /):
        def flag(name, default):
            try:
                return environ[name].strip().lower() in _TRUTHY
            except KeyError:
                return default

        return cls(
            pass_double_dash=flag(PASS_DOUBLE_DASH, True),
            pass_after_non_option=flag(PASS_AFTER_NON_OPTION, False),
            debug_file=environ.get(DEBUG_FILE, "").strip() or None,
        )


__all__ = (
    "Config",
    "REQUEST_COMMAND",
)
