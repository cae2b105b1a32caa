"""
Completion candidates, groups, directives and providers.

Overview
- Directive: group-level bitmask telling the shell how to treat candidates.
- PrefixDirective: what the shell does with the computed insertion prefix.
- Kind: the type announced in a group header (command/argument/option/file/message).
- CompletionGroup: a named bag of candidates with descriptions, aliases and styles.
- Completions: every group produced for one request, plus the prefix-rewrite
  accumulators. Providers receive it and add candidates through it.
- Capability / Provider: the optional completion capabilities attached to options and
  slots when the model is built (type-level callback, declarative tag actions, choices).

Providers
- A provider is called with the Completions object and adds candidates to the current
  scope (comps.add) or to groups of its own (comps.new_group / comps.group).
- Declarative actions are strings like "files,*.py", "dirs", "filterext,go,mod",
  "filterdirs,src", "nospace", "nofiles" or "default". A leading "+" asks for the
  action to be combined with the type-level provider instead of replacing it.
"""
import contextlib
import logging
import re
from collections import namedtuple
from enum import Enum, IntFlag, StrEnum

from rich.color import Color

from .utils import *

logger = logging.getLogger(__name__)


class Directive(IntFlag):
    """
    shell directives for a group of candidates (may be combined).
    """
    DEFAULT = 0
    ERROR = 1
    NOSPACE = 2
    NOFILES = 4
    FILTER_EXT = 8
    FILTER_DIRS = 16
    FILES = 32
    DIRS = 64


class PrefixDirective(IntFlag):
    KEEP = 0
    MOVE = 1
    CUT = 2


class Kind(StrEnum):
    COMMAND = "command"
    ARGUMENT = "argument"
    OPTION = "option"
    FILE = "file"
    MESSAGE = "message"


FILESYSTEM = Directive.FILES | Directive.DIRS | Directive.FILTER_EXT | Directive.FILTER_DIRS


def sequence(color, /):
    """
    translate a rich color definition ("red", "#ff00aa", "color(33)") into the
    SGR parameters the shell scripts splice into their escape sequences.
    """
    if isinstance(color, str):
        color = Color.parse(color)
    if not isinstance(color, Color):
        raise TypeError("sequence() argument must be a color or a color definition")
    return ";".join(color.get_ansi_codes(foreground=True))


class CompletionGroup:
    """
    one group of candidates, rendered as a block under its own heading.

    candidates keep their insertion order; each candidate owns at most one
    description and one alias (emitted on the next line with the same description).
    """

    def __init__(self, name, /, kind=Kind.ARGUMENT, *, tag=Unset):
        self.name = name
        self.tag = coalesce(tag, name)
        self.kind = Kind(kind)
        self.directive = Directive.DEFAULT
        self.required = False
        self.internal = False
        self.suggestions = []
        self.descriptions = {}
        self.aliases = {}
        self.styles = {}
        self.candidate_style = None
        self.description_style = None

    def __repr__(self):
        return f"completion-group(name={self.name!r}, kind={self.kind.value!r}, suggestions={self.suggestions!r})"

    def __contains__(self, candidate):
        return candidate in self.descriptions

    def add(self, candidate, descr=None, alias=None, style=None):
        """
        add a candidate with optional description, alias and color.

        empty candidates are ignored; adding a candidate twice keeps its
        first position and refreshes description/alias.
        """
        if not candidate:
            return
        if candidate not in self.descriptions:
            self.suggestions.append(candidate)
        self.descriptions[candidate] = descr or ""
        if alias:
            self.aliases[candidate] = alias
        if style:
            self.format_match(re.escape(candidate), style)

    def format_match(self, pattern, color):
        self.styles[pattern] = sequence(color)

    def format_type(self, candidates=None, descriptions=None):
        self.candidate_style = sequence(candidates) if candidates else None
        self.description_style = sequence(descriptions) if descriptions else None

    def lines(self):
        """
        number of candidate lines the group will emit (aliases included).
        """
        return len(self.suggestions) + sum(1 for candidate in self.suggestions if self.aliases.get(candidate))


class Completions:
    """
    every completion group of a request, and how the shell must splice them in.

    prefix accumulators
    - flag_prefix: the option part of the word ("--name=", "-ab", "--ns.").
    - prefix: the whole argument part of the word (full $PREFIX).
    - last: the part relevant to one completer (one item of a "a,b,c" list).
    - split_prefix: prefix minus last, only set for separated multi-value words.

    the shell insertion prefix is flag_prefix + (split_prefix or prefix).
    """

    def __init__(self, values=None):
        self._groups = []
        self._scope = None
        self._values = dict(values or {})
        self.flag_prefix = ""
        self.prefix = ""
        self.last = ""
        self.split_prefix = ""
        self.prefix_directive = PrefixDirective.KEEP
        self.directive = Directive.DEFAULT

    @property
    def groups(self):
        return tuple(self._groups)

    @property
    def prefix_last(self):
        """
        the item currently completed, e.g. "/third/path" in "--files=/a,/b,/third/path".
        """
        return self.last

    @property
    def prefix_full(self):
        """
        the whole argument word, e.g. "/a,/b,/third/path" in "--files=/a,/b,/third/path".
        """
        return self.prefix

    def shell_prefix(self):
        return self.flag_prefix + (self.split_prefix or self.prefix)

    def values(self, name, /):
        """
        values given so far on the line to the option named `name` ("--name" or "-n").
        """
        return tuple(self._values.get(name, ()))

    def new_group(self, name, /, kind=Kind.ARGUMENT, *, tag=Unset):
        self._groups.append(group := CompletionGroup(name, kind, tag=tag))
        return group

    def group(self, name, /, kind=Kind.ARGUMENT):
        """
        the last group named `name` of that kind, created when missing.
        """
        for group in reversed(self._groups):
            if group.name == name and group.kind is Kind(kind) and not group.internal:
                return group
        return self.new_group(name, kind)

    def default(self, kind, /):
        """
        the current default group of a kind, created with the builtin naming when missing.

        names avoid the shells' own builtin group names where they can.
        """
        if kind is Kind.ARGUMENT and self._scope is not None:
            return self._scope
        for group in reversed(self._groups):
            if group.kind is kind:
                return group

        match kind:
            case Kind.COMMAND if not self._groups:
                return self.new_group("commands", kind, tag="flags-commands")
            case Kind.COMMAND:
                return self.new_group("other", kind)
            case Kind.OPTION:
                return self.new_group("options", kind)
            case Kind.FILE:
                return self.new_group("files", kind)
            case Kind.MESSAGE:
                return self.new_group("message", kind)
        return self.new_group("argument", kind)

    def clear(self, kind, /):
        self._groups = [group for group in self._groups if group.kind is not kind]

    def prune(self):
        """
        drop groups with nothing to show: no candidate, not required, no directive.
        """
        self._groups = [
            group for group in self._groups
            if group.suggestions or group.required or group.directive or group.kind in (Kind.FILE, Kind.MESSAGE)
        ]

    def add(self, candidate, descr=None, alias=None, style=None):
        self.default(Kind.ARGUMENT).add(candidate, descr, alias, style)

    def format_match(self, pattern, color):
        self.default(Kind.ARGUMENT).format_match(pattern, color)

    def format_type(self, candidates=None, descriptions=None):
        self.default(Kind.ARGUMENT).format_type(candidates, descriptions)

    def message(self, text, /):
        """
        a message group: shown by the shell when there is nothing to insert.
        """
        return self.new_group(text, Kind.MESSAGE)

    def debug(self, message, /, *args):
        logger.debug(message, *args)

    @contextlib.contextmanager
    def scope(self, name, /, *, required=False):
        """
        route default argument candidates of one field (option value or slot) into
        a group of its own. groups created inside the scope inherit `required`.
        a scope group left without candidates, requirement or directive is dropped on exit.
        """
        start = len(self._groups)
        previous, self._scope = self._scope, self.new_group(name, Kind.ARGUMENT)
        try:
            yield self._scope
        finally:
            scope, self._scope = self._scope, previous
            for group in self._groups[start:]:
                group.required = group.required or required
            if not (scope.suggestions or scope.required or scope.directive):
                self._groups.remove(scope)


class Capability(Enum):
    """
    completion capabilities a field may carry.

    - TYPE: a provider bound to the field's value type (called with Completions).
    - TAG: declarative actions, which take precedence over TYPE unless combined.
    - CHOICES: enumerated values, used verbatim when no other provider exists.
    - DIRECTIVE: shell directives only (nospace, nofiles), applied on top of the others.
    """
    TYPE = "type"
    TAG = "tag"
    CHOICES = "choices"
    DIRECTIVE = "directive"


Provider = namedtuple("Provider", ("capability", "callback", "combine"))


def _filesystem(name, directive, values):
    @rename(name)
    def action(comps):
        group = comps.new_group("directories" if directive & (Directive.DIRS | Directive.FILTER_DIRS) else "files", Kind.FILE)
        group.directive |= directive
        for value in values:
            group.add(value)
    return action


def _directive(name, directive):
    @rename(name)
    def action(comps):
        comps.default(Kind.ARGUMENT).directive |= directive
    return action


@rename("default")
def _default(comps):
    return


def action(source, /):
    """
    compile one declarative completion action into a provider.

    grammar: ["+"] name ["," value ("," value)*]
    - "+" combines the action with the type-level provider.
    - names are case-insensitive: files, dirs, filterext, filterdirs, nospace, nofiles, default.
    - a callable is accepted as-is (never combined).

    raises ValueError on unknown names or empty actions.
    """
    if callable(source):
        return Provider(Capability.TAG, source, False)
    if not isinstance(source, str):
        raise TypeError("completion action must be a string or a callable")
    if not (source := source.strip()):
        raise ValueError("completion action cannot be empty")

    combine = source.startswith("+")
    capability = Capability.TAG
    name, _, value = source.removeprefix("+").partition(",")
    values = tuple(item for item in map(str.strip, value.split(",")) if item) if value else ()

    match name.strip().lower():
        case "files":
            callback = _filesystem("files", Directive.FILES, values)
        case "dirs":
            callback = _filesystem("dirs", Directive.DIRS, values)
        case "filterext":
            callback = _filesystem("filterext", Directive.FILTER_EXT, values)
        case "filterdirs":
            callback = _filesystem("filterdirs", Directive.FILTER_DIRS, values)
        case "nospace":
            callback = _directive("nospace", Directive.NOSPACE)
            capability = Capability.DIRECTIVE
        case "nofiles":
            callback = _directive("nofiles", Directive.NOFILES)
            capability = Capability.DIRECTIVE
        case "default":
            callback = _default
        case other:
            raise ValueError(f"unknown completion action {other!r}")

    return Provider(capability, callback, combine)


def invoke(providers, comps, /):
    """
    run the providers of one field following the precedence rules.

    - TAG providers win over TYPE providers, unless one of them asks to combine:
      then TYPE runs first and TAG candidates are appended.
    - without TAG or TYPE providers, CHOICES are added verbatim.
    - DIRECTIVE providers always run, after the selected ones.
    returns True when any provider ran.
    """
    typed = [provider for provider in providers if provider.capability is Capability.TYPE]
    tagged = [provider for provider in providers if provider.capability is Capability.TAG]
    choices = [provider for provider in providers if provider.capability is Capability.CHOICES]
    directives = [provider for provider in providers if provider.capability is Capability.DIRECTIVE]

    if typed and tagged and any(provider.combine for provider in tagged):
        selected = typed + tagged
    elif tagged:
        selected = tagged
    elif typed:
        selected = typed
    else:
        selected = choices

    for provider in selected + directives:
        provider.callback(comps)
    return bool(selected or directives)


def choices(values, /):
    values = tuple(values)

    @rename("choices")
    def callback(comps):
        for value in values:
            comps.add(str(value))

    return Provider(Capability.CHOICES, callback, False)


__all__ = (
    "Directive",
    "PrefixDirective",
    "Kind",
    "CompletionGroup",
    "Completions",
    "Capability",
    "Provider",
    "action",
    "choices",
    "invoke",
    "sequence",
    "FILESYSTEM",
)
