"""
Response encoder tests (header, prefix line, group blocks, styles, faults).

Scope
- Validate the exact line protocol for groups, aliases, descriptions and styles.
- Validate display naming of command and option groups.
- Validate the fatal response.

Conventions
- Test method names follow CamelCase per project convention.
- Expected responses are spelled out in full.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabwise import Completions, Kind, Directive, PrefixDirective, UnknownCommandError
from tabwise.encoder import encode, display


class TestEncode(TestCase):
    """Serialization of Completions."""

    def testEmptyResponse(self):
        self.assertEqual(encode(Completions()), "1 0 0 0\n\n\n")

    def testFatalResponse(self):
        comps = Completions()
        comps.add("ignored")
        self.assertEqual(encode(comps, UnknownCommandError("unknown command 'x'")), "0 0 1 0\n\n\n")

    def testGroupBlock(self):
        comps = Completions()
        comps.flag_prefix = "--name="
        comps.prefix_directive = PrefixDirective.MOVE
        group = comps.new_group("name")
        group.add("alice", "first user")
        group.add("bob")
        self.assertEqual(
            encode(comps),
            "1 1 0 1\n"
            "--name=\n"
            "\n"
            "argument\tname\tname\t2\t0\tfalse\t0\n"
            "alice\tfirst user\n"
            "bob\n",
        )

    def testAliasFollowsItsCandidate(self):
        comps = Completions()
        group = comps.new_group("reports", Kind.COMMAND)
        group.add("status", "show the state", alias="st")
        group.add("log")
        group.format_match("st.*", "red")
        self.assertEqual(
            encode(comps),
            "1 1 0 0\n"
            "\n"
            "\n"
            "command\treports commands\treports commands\t3\t0\tfalse\t1\n"
            "status\tshow the state\n"
            "st\tshow the state\n"
            "log\n"
            "st.*=31\n",
        )

    def testDirectiveAndRequiredFlags(self):
        comps = Completions()
        group = comps.new_group("files", Kind.FILE)
        group.directive |= Directive.FILES | Directive.NOSPACE
        group.required = True
        self.assertEqual(encode(comps), "1 1 0 0\n\n\nfile\tfiles\tfiles\t0\t34\ttrue\t0\n")

    def testSplitPrefixWinsOverFullPrefix(self):
        comps = Completions()
        comps.flag_prefix = "--tags="
        comps.prefix = "a,b,c"
        comps.split_prefix = "a,b,"
        self.assertEqual(encode(comps).splitlines()[1], "--tags=a,b,")

    def testTypeStyle(self):
        comps = Completions()
        group = comps.new_group("argument")
        group.add("value", "a value")
        group.format_type("red", "blue")
        self.assertEqual(encode(comps).splitlines()[-1], "=(#b)*(-- *)=31=34")

    def testOutputIsDeterministic(self):
        def make():
            comps = Completions()
            for name in ("one", "two"):
                group = comps.new_group(name, Kind.OPTION)
                group.add("--" + name, name, alias="-" + name[0])
                group.format_match(name, "green")
            return encode(comps)

        self.assertEqual(make(), make())


class TestDisplay(TestCase):
    """Group display names."""

    def testSuffixes(self):
        comps = Completions()
        self.assertEqual(display(comps.new_group("general", Kind.OPTION)), ("general options", "general options"))
        self.assertEqual(display(comps.new_group("other", Kind.COMMAND)), ("other commands", "other commands"))
        self.assertEqual(display(comps.new_group("argument")), ("argument", "argument"))

    def testNamesAlreadySuffixedAreKept(self):
        comps = Completions()
        self.assertEqual(display(comps.default(Kind.COMMAND)), ("commands", "flags-commands"))
        self.assertEqual(display(comps.new_group("options", Kind.OPTION)), ("options", "options"))


if __name__ == "__main__":
    unittest.main()
