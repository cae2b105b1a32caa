r"""
Tabwise command model: options, slots, groups, commands, and the arena holding them.

Overview
- Specs (immutable once built)
  • Option: named option with a short and/or long name, an arity (none/single/multi)
    and optional completion capabilities.
  • Slot: positional slot with a (minimum, maximum) word range; maximum -1 is unbounded.
  • Group: a bag of options sharing a namespace (prefix + delimiter), possibly persistent
    (inherited by subcommands) and possibly holding nested child groups.

- Arena
  • Model: owns every Command node and every Section (a Group placed under a command).
    Nodes are addressed by index and only hold indices of their parents/children,
    so the tree never forms reference cycles and a resolution state can point at a
    command with a plain integer.
  • Command: a node of the arena (name, aliases, children, sections, slots).
  • Section: a Group placed in the arena, with its full namespace prefix resolved.

Validation highlights (configuration errors, raised at construction time)
- Option names must look like "-x" or "--long-name"; at most one of each.
- Options of arity "none" cannot carry choices or completion providers.
- Slot ranges must satisfy 0 <= minimum <= maximum, or maximum == -1;
  a zero-width range (0, 0) is rejected.
- A command holds at most one unbounded slot, and only as its last slot.
- Sibling command names and aliases are unique; option names are unique among
  the options visible from any command.
- A sealed model rejects further changes.

Quick example
    >>> model = Model("tool")
    >>> run = model.command("run", descr="run a target")
    >>> model.group(run, Group("general", options=[Option("-v", "--verbose")]))
    0
    >>> model.slot(run, Slot("TARGET", minimum=1))
    0
"""
import functools
import operator
import re
from collections.abc import Iterable, Set

from .completions import Capability, Provider, action, choices as _choices
from .utils import *

_SHORT = re.compile(r"-[^\s=-]")
_LONG = re.compile(r"--[^\W\d_](-?[^\W_]+)*")
_COMMAND = re.compile(r"[^\s\-=][^\s=]*")

ARITIES = ("none", "single", "multi")


class NodeType(type):
    """
    Metaclass giving model declarations and nodes a stable representation and read-only fields.

    - __typename__ is derived from the class name and used in every message.
    - names listed in __introspectable__ become read-only properties (see mirror()).
    - __repr__/__rich_repr__ show the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize the description shared by every declaration.

    - descr: Unset | str, trimmed; empty strings are rejected. Unset becomes None.
    - hidden: coerced to bool when present.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if "hidden" in metadata:
        metadata["hidden"] = bool(metadata["hidden"])


def _sanitize_completion_metadata(cls, metadata, /):
    """
    Internal: turn completer/complete/choices into the field's provider tuple.

    - completer: Unset | callable, the type-level provider (Capability.TYPE).
    - complete: str | callable | Iterable of those, declarative actions
      (Capability.TAG, or Capability.DIRECTIVE for nospace/nofiles).
    - choices: Iterable, duplicates rejected unless given as a Set; kept in order.
    """
    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of values")
    if not isinstance(choices, Set):
        sanitized = []
        for choice in choices:
            if choice in sanitized:
                raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
            sanitized.append(choice)
        choices = tuple(sanitized)
    else:
        choices = tuple(sorted(choices, key=str))
    metadata["choices"] = choices

    providers = []
    if (completer := metadata.pop("completer")) is not Unset:
        if not callable(completer):
            raise TypeError(f"{cls.__typename__} 'completer' must be callable")
        providers.append(Provider(Capability.TYPE, completer, False))

    complete = metadata.pop("complete")
    if isinstance(complete, str) or callable(complete):
        complete = (complete,)
    if not isinstance(complete, Iterable):
        raise TypeError(f"{cls.__typename__} 'complete' must be a string, a callable, or an iterable of those")
    try:
        providers.extend(map(action, complete))
    except (TypeError, ValueError) as error:
        raise type(error)(f"{cls.__typename__} {error}") from None

    if choices:
        providers.append(_choices(choices))

    metadata["providers"] = tuple(providers)

    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")


class Option(metaclass=NodeType):
    """
    Named option declaration.

    Properties
    - short / long: the bare names ("v", "verbose") or None.
    - arity: "none" (presence only), "single" (one value per occurrence),
      "multi" (repeatable; several values may be joined with `separator`).
    - required, choices, descr, hidden, type: passed through for completion hints.
    - providers: completion capabilities compiled at construction time.
    """

    __introspectable__ = (
        "short",
        "long",
        "arity",
        "separator",
        "required",
        "choices",
        "descr",
        "hidden",
        "type",
        "providers",
    )

    def __new__(
            cls,
            *names,
            arity="none",
            separator=",",
            required=False,
            choices=(),
            descr=Unset,
            hidden=False,
            type=str,
            completer=Unset,
            complete=(),
    ):
        metadata = {
            "arity": arity,
            "separator": separator,
            "required": bool(required),
            "choices": choices,
            "descr": descr,
            "hidden": hidden,
            "type": type,
            "completer": completer,
            "complete": complete,
        }

        if not names:
            raise TypeError(f"{cls.__typename__} must specify at least one name")

        short = long = None
        for name in names:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} names must be strings")
            elif _SHORT.fullmatch(name := name.strip()):
                if short is not None:
                    raise ValueError(f"{cls.__typename__} cannot have more than one short name")
                short = name[1:]
            elif _LONG.fullmatch(name):
                if long is not None:
                    raise ValueError(f"{cls.__typename__} cannot have more than one long name")
                long = name[2:]
            else:
                raise ValueError(f"{cls.__typename__} names must look like '-x' or '--long-name', got {name!r}")

        if arity not in ARITIES:
            raise ValueError(f"{cls.__typename__} 'arity' must be one of {', '.join(map(repr, ARITIES))}")
        if not isinstance(separator, str) or not separator:
            raise TypeError(f"{cls.__typename__} 'separator' must be a non-empty string")

        _sanitize_metadata(cls, metadata)
        _sanitize_completion_metadata(cls, metadata)

        if arity == "none" and metadata["providers"]:
            raise TypeError(f"{cls.__typename__} of arity 'none' cannot complete values")

        self = super().__new__(cls)
        self._short = short
        self._long = long
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def names(self):
        """
        the dashed names of the option, short first.
        """
        return tuple(name for name in (
            "-" + self._short if self._short else None,
            "--" + self._long if self._long else None,
        ) if name)

    def accepts(self):
        """
        whether the option takes a value.
        """
        return self._arity != "none"

    def repeatable(self):
        return self._arity == "multi"


class Slot(metaclass=NodeType):
    """
    Positional slot declaration.

    minimum/maximum bound how many words the slot absorbs; maximum -1 is unbounded.
    """

    __introspectable__ = (
        "name",
        "minimum",
        "maximum",
        "choices",
        "descr",
        "type",
        "providers",
    )

    def __new__(
            cls,
            name,
            /,
            minimum=0,
            maximum=1,
            *,
            choices=(),
            descr=Unset,
            type=str,
            completer=Unset,
            complete=(),
    ):
        metadata = {
            "name": name,
            "minimum": minimum,
            "maximum": maximum,
            "choices": choices,
            "descr": descr,
            "type": type,
            "completer": completer,
            "complete": complete,
        }

        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
        metadata["name"] = name

        for bound in ("minimum", "maximum"):
            if not isinstance(metadata[bound], int) or isinstance(metadata[bound], bool):
                raise TypeError(f"{cls.__typename__} '{bound}' must be an integer")
        if minimum < 0:
            raise ValueError(f"{cls.__typename__} 'minimum' cannot be negative")
        if maximum < -1:
            raise ValueError(f"{cls.__typename__} 'maximum' must be -1 (unbounded) or a positive integer")
        if minimum == maximum == 0:
            raise ValueError(f"{cls.__typename__} range 0-0 cannot accept any word")
        if maximum != -1 and maximum < minimum:
            raise ValueError(f"{cls.__typename__} 'maximum' cannot be lower than 'minimum'")

        _sanitize_metadata(cls, metadata)
        _sanitize_completion_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def unbounded(self):
        return self._maximum == -1


class Group(metaclass=NodeType):
    """
    Option group declaration.

    - descr: the group's display name (required).
    - namespace/delimiter: the prefix shared by the group's long names
      ("db" + "." -> "--db.host"). A one-character namespace with no delimiter
      makes the group reachable from short words ("-dh" for option -h of "d").
    - persistent: visible from subcommands of the command holding it.
    - groups: nested child groups; their namespaces extend this one.
    """

    __introspectable__ = (
        "descr",
        "options",
        "namespace",
        "delimiter",
        "persistent",
        "hidden",
        "groups",
    )

    def __new__(
            cls,
            descr,
            /,
            options=(),
            *,
            namespace="",
            delimiter="",
            persistent=False,
            hidden=False,
            groups=(),
    ):
        metadata = {
            "descr": descr,
            "options": options,
            "namespace": namespace,
            "delimiter": delimiter,
            "persistent": bool(persistent),
            "hidden": hidden,
            "groups": groups,
        }

        _sanitize_metadata(cls, metadata)
        if metadata["descr"] is None:
            raise TypeError(f"{cls.__typename__} must specify a 'descr'")

        for field in ("namespace", "delimiter"):
            if not isinstance(metadata[field], str) or any(char.isspace() for char in metadata[field]):
                raise TypeError(f"{cls.__typename__} '{field}' must be a string without whitespace")
        if delimiter and not namespace:
            raise ValueError(f"{cls.__typename__} cannot have a 'delimiter' without a 'namespace'")
        if namespace.startswith("-"):
            raise ValueError(f"{cls.__typename__} 'namespace' cannot start with a dash")

        for field, kind in (("options", Option), ("groups", Group)):
            if not isinstance(metadata[field], Iterable):
                raise TypeError(f"{cls.__typename__} '{field}' must be an iterable of {kind.__typename__}s")
            items = tuple(metadata[field])
            if not all(isinstance(item, kind) for item in items):
                raise TypeError(f"{cls.__typename__} '{field}' must be an iterable of {kind.__typename__}s")
            metadata[field] = items

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class Section(metaclass=NodeType):
    """
    A Group placed in the arena under a command.

    - prefix: full namespace of the section followed by its delimiter ("db.pool.").
    - namespace: full namespace without the final delimiter ("db.pool").
    - persistent/hidden: inherited from the enclosing sections.
    """

    __introspectable__ = (
        "index",
        "command",
        "parent",
        "descr",
        "namespace",
        "delimiter",
        "prefix",
        "persistent",
        "hidden",
        "options",
    )

    def __init__(self, index, command, parent, group, /, *, outer=None):
        self._index = index
        self._command = command
        self._parent = parent
        self._descr = group.descr
        self._delimiter = group.delimiter
        if group.namespace:
            self._namespace = (outer.prefix if outer else "") + group.namespace
            self._prefix = self._namespace + group.delimiter
        else:
            self._namespace = outer.namespace if outer else ""
            self._delimiter = outer.delimiter if outer else ""
            self._prefix = outer.prefix if outer else ""
        self._persistent = group.persistent or bool(outer and outer.persistent)
        self._hidden = group.hidden or bool(outer and outer.hidden)
        self._options = group.options

    def longname(self, option, /):
        """
        the full long name of one of the section's options, without dashes.
        """
        return self._prefix + option.long if option.long else None

    def nestable(self):
        """
        whether the section is reached from short words ("-" + namespace + short).
        """
        return len(self._namespace) == 1 and not self._delimiter


class Command(metaclass=NodeType):
    """
    A command node of the arena.

    Nodes only reference other nodes by index: parent, children, sections.
    """

    __introspectable__ = (
        "index",
        "name",
        "aliases",
        "descr",
        "hidden",
        "group",
        "namespaced",
        "delimiter",
        "parent",
        "children",
        "sections",
        "slots",
    )

    def __init__(self, index, parent, metadata, /):
        self._index = index
        self._parent = parent
        self._children = []
        self._sections = []
        self._slots = []
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def names(self):
        return (self._name, *self._aliases)


class Model:
    """
    The arena of a command model.

    Index 0 is always the root command. Every mutation validates eagerly and raises
    TypeError/ValueError, so a model that could be built is always usable for completion.
    """

    def __init__(self, name, /, **metadata):
        self._commands = []
        self._sections = []
        self._sealed = False
        self._append(name, None, metadata)

    def __repr__(self):
        return f"model(root={self.root.name!r}, commands={len(self._commands)}, sections={len(self._sections)})"

    def __len__(self):
        return len(self._commands)

    def __getitem__(self, index):
        return self._commands[index]

    @property
    def root(self):
        return self._commands[0]

    @property
    def sealed(self):
        return self._sealed

    def section(self, index, /):
        return self._sections[index]

    def seal(self):
        """
        freeze the arena; completion requests only ever see sealed models.
        """
        self._sealed = True
        return self

    def _mutable(self):
        if self._sealed:
            raise RuntimeError("sealed model cannot be modified")

    def _append(self, name, parent, metadata):
        if not isinstance(name, str):
            raise TypeError("command 'name' must be a string")
        elif not _COMMAND.fullmatch(name := name.strip()):
            raise ValueError(f"command name {name!r} must be a single word not starting with a dash")

        metadata = {
            "name": name,
            "aliases": metadata.get("aliases", ()),
            "descr": metadata.get("descr", Unset),
            "hidden": metadata.get("hidden", False),
            "group": metadata.get("group", Unset),
            "namespaced": bool(metadata.get("namespaced", False)),
            "delimiter": metadata.get("delimiter", "."),
        }
        _sanitize_metadata(Command, metadata)

        if isinstance(metadata["aliases"], str) or not isinstance(metadata["aliases"], Iterable):
            raise TypeError("command 'aliases' must be an iterable of strings")
        aliases = []
        for alias in metadata["aliases"]:
            if not isinstance(alias, str) or not _COMMAND.fullmatch(alias):
                raise ValueError(f"command alias {alias!r} must be a single word not starting with a dash")
            aliases.append(alias)
        metadata["aliases"] = tuple(aliases)

        if not isinstance(group := metadata["group"], str | Unset):
            raise TypeError("command 'group' must be a string")
        metadata["group"] = coalesce(group and group.strip() or Unset)

        if not isinstance(delimiter := metadata["delimiter"], str) or (metadata["namespaced"] and not delimiter):
            raise TypeError("namespaced command must have a non-empty 'delimiter'")

        if parent is not None:
            taken = {name for child in self._commands[parent]._children for name in self._commands[child].names}
            for candidate in (name, *metadata["aliases"]):
                if candidate in taken:
                    raise ValueError(f"command name {candidate!r} is already in use under {self._commands[parent].name!r}")

        self._commands.append(command := Command(len(self._commands), parent, metadata))
        if parent is not None:
            self._commands[parent]._children.append(command.index)
        return command.index

    def command(self, name, /, parent=0, **metadata):
        """
        add a subcommand under `parent` and return its index.

        metadata: aliases, descr, hidden, group (display group when completing
        subcommands), namespaced and delimiter (namespaced command names).
        """
        self._mutable()
        if not isinstance(parent, int) or not 0 <= parent < len(self._commands):
            raise IndexError(f"unknown parent command index {parent!r}")
        index = self._append(name, parent, metadata)
        self._verify(index)
        return index

    def group(self, command, group, /):
        """
        place a Group (and its nested groups) under a command; returns the section index.
        """
        self._mutable()
        if not isinstance(group, Group):
            raise TypeError("group() second argument must be a group")

        def place(group, parent, outer):
            self._sections.append(section := Section(len(self._sections), command, parent, group, outer=outer))
            self._commands[command]._sections.append(section.index)
            for child in group.groups:
                place(child, section.index, section)
            return section.index

        mark, own = len(self._sections), len(self._commands[command]._sections)
        index = place(group, None, None)
        try:
            for node in self.descendants(command):
                self._verify(node)
        except ValueError:
            del self._sections[mark:]
            del self._commands[command]._sections[own:]
            raise
        return index

    def slot(self, command, slot, /):
        """
        append a positional slot to a command; returns its position.
        """
        self._mutable()
        if not isinstance(slot, Slot):
            raise TypeError("slot() second argument must be a slot")
        slots = self._commands[command]._slots
        if slots and slots[-1].unbounded():
            raise ValueError(f"slot {slot.name!r} cannot follow the unbounded slot {slots[-1].name!r}")
        slots.append(slot)
        return len(slots) - 1

    def path(self, command, /):
        """
        command indices from the root down to `command`.
        """
        path = [command]
        while (parent := self._commands[path[-1]].parent) is not None:
            path.append(parent)
        return tuple(reversed(path))

    def descendants(self, command, /):
        stack, found = [command], []
        while stack:
            found.append(node := stack.pop())
            stack.extend(reversed(self._commands[node]._children))
        return tuple(found)

    def visible(self, command, /):
        """
        sections visible from a command: its own first, then the persistent
        sections of its ancestors, nearest ancestor first.
        """
        sections = list(self._commands[command]._sections)
        for ancestor in reversed(self.path(command)[:-1]):
            sections.extend(index for index in self._commands[ancestor]._sections if self._sections[index].persistent)
        return tuple(self._sections[index] for index in sections)

    def find(self, command, word, /):
        """
        resolve a word to a subcommand of `command`: a name, an alias, or a path
        through namespaced children ("db.migrate"). returns an index or None.
        """
        for child in map(self._commands.__getitem__, self._commands[command]._children):
            if word in child.names:
                return child.index
        for child in map(self._commands.__getitem__, self._commands[command]._children):
            if child.namespaced and word.startswith(prefix := child.name + child.delimiter):
                if (found := self.find(child.index, word[len(prefix):])) is not None:
                    return found
        return None

    def _verify(self, command):
        longs, shorts = set(), set()
        for section in self.visible(command):
            for option in section.options:
                if (long := section.longname(option)) is not None:
                    if long in longs:
                        raise ValueError(f"option name '--{long}' is already in use under {self._commands[command].name!r}")
                    longs.add(long)
                if option.short is not None:
                    key = (section.namespace if section.nestable() else "", option.short)
                    if key in shorts:
                        raise ValueError(f"option name '-{''.join(key)}' is already in use under {self._commands[command].name!r}")
                    shorts.add(key)


__all__ = (
    "Option",
    "Slot",
    "Group",
    "Section",
    "Command",
    "Model",
    "ARITIES",
)

# Not part of the public API.
del NodeType
