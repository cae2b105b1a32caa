"""
Engine: the request entry points gluing walker, builder and encoder together.

- complete(model, tokens) returns the response text for one request.
- run(model, argv) writes it to a stream; a leading REQUEST_COMMAND word (the hidden
  command the shell scripts call the program with) is dropped first.

Diagnostics go to the debug sink only (Config.debug_file): a rich Console appended
to that file, receiving the package logs through a RichHandler and the rendering of
every fault hit while resolving. The response stream never carries diagnostics.
"""
import contextlib
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from .builder import build
from .completions import Completions
from .config import Config, REQUEST_COMMAND
from .encoder import encode
from .faults import CompletionError
from .utils import *
from .walker import walk

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def _sink(config):
    """
    attach the debug sink to the package logger for the duration of one request.
    yields the sink console, or None when no debug file is configured.
    """
    if config.debug_file is None:
        yield None
        return

    package = logging.getLogger(__package__)
    with open(config.debug_file, "a", encoding="utf-8") as file:
        console = Console(file=file, force_terminal=False, width=120)
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        level = package.level
        package.addHandler(handler)
        package.setLevel(logging.DEBUG)
        try:
            yield console
        finally:
            package.removeHandler(handler)
            package.setLevel(level)


def complete(model, tokens, /, config=Unset):
    """
    resolve one completion request and return the encoded response.

    - tokens: the words after the program name, the last one being completed
      (an empty sequence completes the empty word).
    - config: Config, read from the environment when not given.
    """
    config = Config.from_environ() if config is Unset else config
    tokens = list(tokens) or [""]
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("complete() tokens must be strings")
    if not model.sealed:
        model.seal()

    with _sink(config) as console:
        logger.debug("completing %r", tokens)
        try:
            state = walk(model, tokens, config)
            completions = build(model, state, tokens[-1])
        except CompletionError as error:
            logger.debug("fatal: %s", error)
            if console is not None:
                console.print(error)
            return encode(Completions(), error)

        logger.debug("%r produced %d group(s)", state, len(completions.groups))
        if console is not None:
            for warning in state.warnings:
                console.print(warning)
        return encode(completions)


def run(model, argv=Unset, /, stream=Unset, config=Unset):
    """
    answer the request in `argv` (defaults to sys.argv[1:]) on `stream` (defaults
    to stdout). always returns 0: faults are part of the response.
    """
    argv = list(coalesce(argv, sys.argv[1:]))
    if argv and argv[0] == REQUEST_COMMAND:
        argv = argv[1:]
    stream = coalesce(stream, sys.stdout)
    stream.write(complete(model, argv, config))
    stream.flush()
    return 0


__all__ = (
    "complete",
    "run",
)
