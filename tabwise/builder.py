"""
Completion builder: turn a walked State and the word under completion into Completions.

Order of precedence
1. opaque line ("--" seen, or stopped on an unresolvable option): nothing to offer.
2. pending option: complete its value.
3. word starting with a dash: option completion (long, short, stacked, namespaced,
   "--opt=value" and "-xvalue" arguments).
4. otherwise: one value group per reached and open slot, then subcommands.

Prefix bookkeeping follows the rules documented on Completions: the option part of
the word goes to flag_prefix, the argument part to prefix, and the shell is told to
move it (PrefixDirective.MOVE) whenever candidates only complete the tail of the word.
"""
import logging

from .completions import *
from .config import REQUEST_COMMAND
from .faults import *
from .options import split, starts_option, strip
from .positionals import completable
from .utils import ordinal

logger = logging.getLogger(__name__)


class Builder:
    """
    one-shot builder bound to a model, a walked state and a Completions object.
    """

    def __init__(self, model, state, /):
        self.model = model
        self.state = state
        self.lookup = state.lookup
        self.comps = Completions(state.values)

    def _warn(self, fault, /):
        self.state.warnings.append(trigger(fault))

    # --- commands ---

    def commands(self, command, word, /):
        """
        offer the visible subcommands of `command`, never the completion request command.

        a namespaced subcommand the word may still be typing is offered as "name<delim>";
        once the word enters its namespace, its own subcommands replace every command
        group and the namespace moves into the prefix. an unrelated word gets the plain name.
        """
        for child in map(self.model.__getitem__, self.model[command].children):
            if child.hidden or child.name == REQUEST_COMMAND:
                continue

            group = self.comps.group(child.group, Kind.COMMAND) if child.group else self.comps.default(Kind.COMMAND)

            if child.namespaced:
                qualified = child.name + child.delimiter
                if word.startswith(qualified):
                    self.comps.prefix_directive = PrefixDirective.MOVE
                    self.comps.prefix += qualified
                    self.comps.clear(Kind.COMMAND)
                    self.commands(child.index, word[len(qualified):])
                    return
                if qualified.startswith(word):
                    group.add(qualified, child.descr)
                    continue

            group.add(child.name, child.descr)

    # --- options ---

    def option(self, word, /):
        dashes, name, long = strip(word)
        name, separator, value = split(name, long)

        self.comps.flag_prefix = dashes

        if value is not None:
            self.argument(name, long, value)
        elif long:
            self.options(name, False, True)
        elif not name:
            self.options(name, True, True)
        else:
            self.shorts(name)

    def _outer(self, section):
        return self.model.section(section.parent).prefix if section.parent is not None else ""

    def options(self, match, short, dashed, /):
        """
        offer every option visible from the active command that starts with `match`.

        - short: the word has a single dash; long names are only offered for a bare "-".
        - dashed: candidates carry their dashes; otherwise they extend the flag prefix
          (stacked short options).
        - namespaced groups are folded into one "--ns<delim>" candidate until `match`
          reaches their namespace, then their options are offered relative to it.
        """
        sections = [section for section in self.lookup.sections if not section.hidden]
        if short and not dashed:
            sections = [section for section in sections if not section.namespace]

        expanded = ""
        if not short:
            for section in sections:
                if section.delimiter and match.startswith(section.prefix) and len(section.prefix) > len(expanded):
                    expanded = section.prefix

        namespaces = set()
        for section in sections:
            if section.namespace and not match.startswith(section.prefix):
                if (section.prefix.startswith(match) or not match) and self._outer(section) == expanded:
                    if section.namespace not in namespaces:
                        namespaces.add(section.namespace)
                        self.namespace(section, short, expanded)
                continue

            self.group(section, match, short, dashed and not (expanded and section.prefix.startswith(expanded)), expanded)

        if expanded:
            self.comps.prefix_directive = PrefixDirective.MOVE
            self.comps.flag_prefix += expanded

    def namespace(self, section, short, expanded, /):
        """
        a namespaced group offered as a single option of the default option group.
        """
        if short and not section.delimiter:
            candidate = "-" + section.namespace
        elif expanded:
            candidate = section.prefix.removeprefix(expanded)
        else:
            candidate = "--" + section.prefix
        self.comps.default(Kind.OPTION).add(candidate, section.descr + " options")

    def group(self, section, match, short, dashed, relative="", /):
        """
        offer the options of one section in a group named after it.

        long names come first with the short name as alias; stacked short words only
        get short names.
        """
        group = self.comps.new_group(section.descr, Kind.OPTION)
        group.internal = True
        dash = "-" if dashed else ""

        for option in section.options:
            if option.hidden:
                continue

            candidate = None
            long = section.longname(option)
            if long is not None and (dashed or not short) and (not short or not match) and long.startswith(match):
                candidate = "--" + long if dashed else long.removeprefix(relative)

            if candidate is not None:
                group.add(candidate, option.descr, alias=dash + option.short if short and option.short else None)
            elif short and option.short is not None:
                group.add(dash + option.short, option.descr)

    def single(self, match, dashed, /):
        """
        offer exactly one short option, in a group named after its section.
        """
        group = self.comps.new_group(match.section.descr, Kind.OPTION)
        group.internal = True
        if not match.option.hidden:
            group.add(("-" if dashed else "") + match.option.short, match.option.descr)

    def _short_prefix(self, word, stack):
        last = stack.match.option if stack.match is not None else None

        self.comps.prefix_directive = PrefixDirective.MOVE
        self.comps.flag_prefix += word[:stack.index - 1]

        dashed = not (stack.stacked or stack.nested or (last is not None and not last.accepts()))

        if stack.nested and last is None:
            self.comps.flag_prefix += word[stack.index - 1:stack.index]
        elif not stack.nested and last is not None and not last.accepts():
            self.comps.flag_prefix += word[stack.index - 1:stack.index]
        elif not stack.nested and not stack.stacked and last is not None:
            self.comps.flag_prefix += word[stack.index - 1:stack.index]

        return dashed

    def shorts(self, word, /):
        """
        complete a single-dash word: a stack, a short namespace, or an attached value.
        """
        stack = self.lookup.stacked(word)

        if stack.remainder:
            self.comps.flag_prefix += word[:stack.index]
            self.comps.prefix_directive = PrefixDirective.MOVE
            self.value(stack.match.option, stack.remainder)
            return

        if stack.match is None:
            if stack.nested and stack.index == len(word):
                self._short_prefix(word, stack)
                for section in stack.groups:
                    self.group(section, "", True, False)
                return
            self._warn(UnknownSwitchWarning(
                "unknown option in %r at its %s character" % ("-" + word, ordinal(stack.index)),
                title="unknown option",
                code=FaultCode.UNKNOWN_SWITCH,
                hint="nothing to complete",
                input="-" + word,
            ))
            return

        dashed = self._short_prefix(word, stack)
        option = stack.match.option

        if not option.accepts():
            if stack.nested:
                self.single(stack.match, dashed)
            else:
                self.options(word, True, dashed)
        elif stack.stacked:
            self.single(stack.match, dashed)
        else:
            if not stack.nested:
                self.comps.prefix_directive = PrefixDirective.KEEP
            self.single(stack.match, dashed)

    def argument(self, name, long, value, /):
        """
        complete the value attached to "--name=value" or "-x=value".
        """
        match = self.lookup.long(name) if long else self.lookup.stacked(name).match
        if match is None:
            self._warn(UnknownSwitchWarning(
                "unknown option %r" % (self.comps.flag_prefix + name),
                title="unknown option",
                code=FaultCode.UNKNOWN_SWITCH,
                hint="nothing to complete",
                input=self.comps.flag_prefix + name,
            ))
            return

        self.comps.flag_prefix += name + "="
        self.comps.prefix_directive = PrefixDirective.MOVE
        self.value(match.option, value)

    def value(self, option, value, /):
        """
        complete the value part of an option word; separated values of repeatable
        options are completed one item at a time.
        """
        self.comps.prefix += value
        if option.repeatable() and option.separator in value:
            *done, value = value.split(option.separator)
            self.comps.split_prefix = option.separator.join(done) + option.separator
        self.comps.last += value
        self.complete(option, option.long or option.short, option.required)

    # --- values ---

    def complete(self, field, name, required, /):
        """
        run the providers of an option or a slot inside a group of their own.

        groups asking the shell for files or directories are announced as such, and
        the typed prefix is left to the shell unless a list item is being completed.
        """
        with self.comps.scope(name, required=required):
            invoke(field.providers, self.comps)

        filesystem = False
        for group in self.comps.groups:
            if group.directive & FILESYSTEM:
                group.kind = Kind.FILE
                filesystem = True

        if filesystem and not self.comps.split_prefix:
            self.comps.prefix = ""

    def pending(self, word, /):
        match = self.state.pending
        self._warn(MissingValueWarning(
            "option %s expects a value" % "/".join(match.option.names),
            title="missing value",
            code=FaultCode.MISSING_VALUE,
            hint="completing its value",
            input=word,
        ))
        self.comps.last = word
        self.complete(match.option, match.option.long or match.option.short, match.option.required)

    def positionals(self, word, /):
        self.comps.last = word
        for allocation in completable(self.state.allocations):
            slot = allocation.slot
            required = allocation.attributed < slot.minimum
            if required:
                self._warn(RequiredSlotWarning(
                    "%s needs %d more word(s)" % (slot.name, slot.minimum - allocation.attributed),
                    title="required argument",
                    code=FaultCode.REQUIRED_SLOT,
                    hint="completing %s" % slot.name,
                    input=word,
                    index=allocation.index,
                ))
            self.complete(slot, slot.name, required)

    def build(self, word, /):
        if self.state.opaque:
            logger.debug("line is opaque after position %d, nothing to complete", self.state.position)
        elif self.state.pending is not None:
            self.pending(word)
        elif starts_option(word):
            self.option(word)
        else:
            self.positionals(word)
            if any(not self.model[child].hidden for child in self.model[self.state.command].children):
                self.commands(self.state.command, word)

        self.comps.prune()
        return self.comps


def build(model, state, word, /):
    """
    build the completions of `word` (possibly empty) for a walked state.
    """
    return Builder(model, state).build(word)


__all__ = (
    "Builder",
    "build",
)
