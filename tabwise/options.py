r"""
Option resolver: classify option-shaped words against the options visible from a command.

Word shapes
- long:     "--name", "--name=value", "--ns.name"
- short:    "-x", "-x=value", "-xvalue" (x takes a value: the rest is attached)
- stacked:  "-abc" (several presence-only options, possibly ending with one taking a value)
- nested:   "-nx" where "n" is the one-character namespace of a group and x one of its options

Lookup
- built once per active command from the model's visible sections (own sections first,
  then persistent sections of ancestors); the first definition of a name wins.
- long names are matched with their full namespace ("db.host"); short names of
  short-nestable groups are only reachable through their namespace character.

resolve() applies one complete option word to the walker state: it may attach a value,
consume the next word as a value, leave the option pending (when the word was the last
complete one), raise a fatal fault, or ask the walker to stop.
"""
import logging
from collections import namedtuple

from .faults import *
from .utils import ordinal

logger = logging.getLogger(__name__)

Match = namedtuple("Match", ("section", "option"))
Stack = namedtuple("Stack", ("match", "groups", "index", "stacked", "nested", "remainder"))


def is_option(word, /):
    """
    "-x..." or "--x..." where x is not a dash.
    """
    return (len(word) > 1 and word[0] == "-" and word[1] != "-") or (len(word) > 2 and word.startswith("--") and word[2] != "-")


def starts_option(word, /):
    return word.startswith("-")


def strip(word, /):
    """
    split the leading dashes: returns (dashes, name, long).
    """
    if word.startswith("--"):
        return "--", word[2:], True
    if word.startswith("-"):
        return "-", word[1:], False
    return "", word, False


def split(name, long, /):
    """
    split an attached value: returns (name, separator, value) where value is None when
    no "=" is attached. long names split on the first "=", short names only right
    after their first character ("-o=value").
    """
    position = name.find("=")
    if (long and position >= 0) or (not long and position == 1):
        return name[:position], "=", name[position + 1:]
    return name, "", None


class Lookup:
    """
    name tables of the options visible from one command.
    """

    def __init__(self, model, command, /):
        self.sections = model.visible(command)
        self.longs = {}
        self.shorts = {}
        self.nested = {}
        for section in self.sections:
            if section.nestable():
                self.nested.setdefault(section.namespace, []).append(section)
            for option in section.options:
                if (long := section.longname(option)) is not None:
                    self.longs.setdefault(long, Match(section, option))
                if option.short is not None and not section.nestable():
                    self.shorts.setdefault(option.short, Match(section, option))

    def long(self, name, /):
        return self.longs.get(name)

    def short(self, char, /):
        return self.shorts.get(char)

    def inside(self, sections, char, /):
        for section in sections:
            for option in section.options:
                if option.short == char:
                    return Match(section, option)
        return None

    def stacked(self, word, /):
        """
        walk a short word (without its dash) left to right.

        - a first character naming a short-nestable namespace switches to nested mode;
          the next character is looked up inside that namespace.
        - every other character must be a known short option; walking stops at the
          first unknown character.
        - the first option taking a value ends the walk: the rest of the word is its
          attached value (remainder).
        """
        match = None
        groups = ()
        index = 0
        stacked = nested = False

        for char in word:
            index += 1
            if index > 1 and not nested:
                stacked = True

            if nested and groups:
                match = self.inside(groups, char)
                break

            if index == 1 and char in self.nested:
                groups, nested = tuple(self.nested[char]), True
                continue

            if (match := self.short(char)) is None or match.option.accepts():
                break

        remainder = word[index:] if match is not None and match.option.accepts() else ""
        return Stack(match, groups, index, stacked, nested, remainder)


def _unknown(state, word, position):
    state.warnings.append(trigger(UnknownSwitchWarning(
        "unknown option %r at %s position" % (word, ordinal(position)),
        title="unknown option",
        code=FaultCode.UNKNOWN_SWITCH,
        hint="the word is skipped" if not state.config.pass_after_non_option else "the rest of the line is left alone",
        input=word,
        index=position,
    )))
    return state.config.pass_after_non_option


def _orphaned(word, position):
    trigger(OrphanedArgumentError(
        "option %r at %s position does not take an argument (argument might end up orphaned)" % (word, ordinal(position)),
        title="orphaned argument",
        code=FaultCode.ORPHANED_ARGUMENT,
        hint="remove everything from '=' (for example: %s)" % word.partition("=")[0],
        input=word,
        index=position,
    ))


def _expect(state, match):
    """
    an option taking a value with nothing attached: consume the next complete word,
    or leave the option pending when there is none.
    """
    if state.tokens:
        state.position += 1
        state.record(match.option, state.tokens.popleft())
    else:
        state.pending = match


def resolve(state, word, /):
    """
    apply one complete option word to the walker state.

    returns True when the walker must stop (unresolvable option with the
    pass-after-non-option policy). raises OrphanedArgumentError when a value is
    attached to an option that takes none.
    """
    position = state.position
    dashes, name, long = strip(word)
    name, separator, value = split(name, long)

    if long or value is not None:
        match = state.lookup.long(name) if long else state.lookup.short(name)
        if match is None:
            return _unknown(state, word, position)
        if value is not None:
            if not match.option.accepts():
                _orphaned(word, position)
            state.record(match.option, value)
        elif match.option.accepts():
            _expect(state, match)
        else:
            state.record(match.option, None)
        return False

    stack = state.lookup.stacked(name)
    for char in name[:stack.index - 1] if not stack.nested else ():
        state.record(state.lookup.short(char).option, None)

    if stack.match is None:
        if stack.nested and stack.index == len(name):
            logger.debug("namespace %r given without an option", word)
            return False
        return _unknown(state, word, position)

    if stack.remainder:
        state.record(stack.match.option, stack.remainder)
    elif stack.match.option.accepts():
        _expect(state, stack.match)
    else:
        state.record(stack.match.option, None)
    return False


__all__ = (
    "Match",
    "Stack",
    "Lookup",
    "is_option",
    "starts_option",
    "strip",
    "split",
    "resolve",
)
