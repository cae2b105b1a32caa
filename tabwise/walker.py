"""
Line walker: replay the complete words of a command line against the model.

The walker consumes every word but the last one (the word under completion, possibly
empty) and leaves a State describing what is being completed:
- the active command (an arena index) and its option lookup;
- the pending option, when the last complete word opened a value;
- the positional words given to the active command and their slot allocations;
- whether the rest of the line is opaque ("--" or a stop on an unresolvable option).

Per word
1. "--" with double-dash pass-through: opaque, slots dropped, walk over.
2. option-shaped words go to the option resolver (which may stop the walk).
3. a word fits the first remaining bounded slot: it is positional.
4. a word naming a subcommand descends into it (persistent groups stay visible).
5. a word fits the first remaining unbounded slot: it is positional.
6. anything else is an unknown command when the command has subcommands,
   and is skipped otherwise.
"""
import difflib
import logging
from collections import defaultdict, deque

from .config import Config
from .faults import *
from .options import Lookup, is_option, resolve
from .positionals import distribute, remaining
from .utils import *

logger = logging.getLogger(__name__)


class State:
    """
    resolution state of one request; created fresh, mutated while walking, then dropped.
    """

    def __init__(self, model, tokens, /, config=Unset):
        self.model = model
        self.config = coalesce(config, Config())
        self.tokens = deque(tokens)
        self.position = 0
        self.command = 0
        self.lookup = Lookup(model, 0)
        self.pending = None
        self.words = 0
        self.allocations = distribute(model.root.slots, 0)
        self.opaque = False
        self.values = defaultdict(list)
        self.warnings = []

    def __repr__(self):
        return (
            f"state(command={self.model[self.command].name!r}, words={self.words}, "
            f"pending={self.pending.option.names if self.pending else None!r}, opaque={self.opaque})"
        )

    @property
    def remaining(self):
        """
        slot allocations still able to take a word.
        """
        return () if self.opaque else remaining(self.allocations)

    def descend(self, command, /):
        self.command = command
        self.lookup = Lookup(self.model, command)
        self.words = 0
        self.allocations = distribute(self.model[command].slots, 0)
        logger.debug("descended into %r", self.model[command].name)

    def absorb(self):
        self.words += 1
        self.allocations = distribute(self.model[self.command].slots, self.words)

    def drop(self):
        """
        stop positional processing: no pending option, no slot left, rest opaque.
        """
        self.pending = None
        self.allocations = ()
        self.opaque = True

    def record(self, option, value, /):
        """
        remember a value given to an option, under each of its dashed names.
        """
        if value is None:
            return
        values = value.split(option.separator) if option.repeatable() else [value]
        for name in option.names:
            self.values[name].extend(values)


def _route(state, word):
    command = state.model[state.command]
    visible = [child for child in command.children if not state.model[child].hidden]

    if visible:
        suggestions = difflib.get_close_matches(word, [name for child in visible for name in state.model[child].names], 5)
        exception = UnknownSubcommandError if command.parent is not None else UnknownCommandError
        code = FaultCode.UNKNOWN_SUBCOMMAND if command.parent is not None else FaultCode.UNKNOWN_COMMAND
        kind = "subcommand" if command.parent is not None else "command"
        trigger(exception(
            "unknown %s %r at %s position" % (kind, word, ordinal(state.position)),
            title="unknown %s" % kind,
            code=code,
            hint="did you mean %r?" % suggestions[0] if suggestions else "%s takes one of: %s" % (
                command.name, ", ".join(state.model[child].name for child in visible)
            ),
            input=word,
            index=state.position,
            suggestions=suggestions,
        ))

    state.warnings.append(trigger(IgnoredWordWarning(
        "word %r at %s position is not used by %r" % (word, ordinal(state.position), command.name),
        title="ignored word",
        code=FaultCode.IGNORED_WORD,
        hint="the word is skipped",
        input=word,
        index=state.position,
    )))


def walk(model, tokens, /, config=Unset):
    """
    consume all tokens but the last one and return the resulting State.

    raises the fatal faults (UnknownCommandError, OrphanedArgumentError).
    """
    state = State(model, list(tokens)[:-1], config)

    while state.tokens:
        word = state.tokens.popleft()
        state.position += 1
        state.pending = None

        if state.config.pass_double_dash and word == "--":
            state.drop()
            break

        if is_option(word):
            if resolve(state, word):
                state.drop()
                break
            continue

        slots = state.remaining
        if slots and not slots[0].slot.unbounded():
            state.absorb()
        elif (child := model.find(state.command, word)) is not None:
            state.descend(child)
        elif slots:
            state.absorb()
        else:
            _route(state, word)

    return state


__all__ = (
    "State",
    "walk",
)
