"""
Response encoder: serialize Completions into the line protocol read by the shell scripts.

Layout
    <success> <groups> <directive> <prefix-directive>
    <prefix>
    (blank line)
    per group:
        <kind>\t<tag>\t<name>\t<lines>\t<directive>\t<required>\t<styles>
        <candidate>[\t<description>]      one line per candidate,
        <alias>[\t<description>]          followed by its alias, if any
        <regex>=<sequence>                one line per style

A fatal fault produces "0 0 1 0", an empty prefix line and the blank line.
"""
import io

from .completions import Directive, Kind, PrefixDirective

TYPE_STYLE = "=(#b)*(-- *)"

_SUFFIXES = {
    Kind.COMMAND: "commands",
    Kind.OPTION: "options",
}


def display(group, /):
    """
    the (name, tag) shown for a group: command and option groups are suffixed with
    " commands" / " options" unless their name already ends that way.
    """
    if (suffix := _SUFFIXES.get(group.kind)) and not group.name.endswith(suffix):
        return f"{group.name} {suffix}", f"{group.tag} {suffix}"
    return group.name, group.tag


def styles(group, /):
    """
    the style lines of a group, the candidate/description pair last.
    """
    lines = dict(group.styles)
    if (group.candidate_style or group.description_style) and TYPE_STYLE not in lines:
        lines[TYPE_STYLE] = f"{group.candidate_style or '0'}={group.description_style or '0'}"
    return lines


def _line(candidate, description):
    return f"{candidate}\t{description}\n" if description else f"{candidate}\n"


def encode(completions, fault=None, /):
    """
    serialize completions (or a fatal fault) into the response text.

    output only depends on the groups, their insertion order, and the prefix state.
    """
    buffer = io.StringIO()

    if fault is not None:
        buffer.write(f"0 0 {int(Directive.ERROR)} {int(PrefixDirective.KEEP)}\n")
        buffer.write("\n")
        buffer.write("\n")
        return buffer.getvalue()

    groups = completions.groups
    buffer.write(f"1 {len(groups)} {int(completions.directive)} {int(completions.prefix_directive)}\n")
    buffer.write(completions.shell_prefix() + "\n")
    buffer.write("\n")

    for group in groups:
        name, tag = display(group)
        lines = styles(group)
        buffer.write("\t".join((
            group.kind.value,
            tag,
            name,
            str(group.lines()),
            str(int(group.directive)),
            "true" if group.required else "false",
            str(len(lines)),
        )) + "\n")

        for candidate in group.suggestions:
            description = group.descriptions.get(candidate, "")
            buffer.write(_line(candidate, description))
            if alias := group.aliases.get(candidate):
                buffer.write(_line(alias, description))

        for regex, sequence in lines.items():
            buffer.write(f"{regex}={sequence}\n")

    return buffer.getvalue()


__all__ = (
    "encode",
    "display",
    "TYPE_STYLE",
)
