"""
Option resolver tests (word shapes, lookup tables, stacks and short namespaces).

Scope
- Validate option-shaped word detection, dash stripping and value splitting.
- Validate lookup tables built from visible sections.
- Validate stacked short words and short namespaces.

Conventions
- Test method names follow CamelCase per project convention.
- Resolution through the walker is covered in the walker tests.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabwise import Model, Group, Option
from tabwise.options import Lookup, is_option, starts_option, strip, split


class TestWordShapes(TestCase):
    """Helpers working on a single word."""

    def testIsOption(self):
        for word in ("-v", "-abc", "--verbose", "--db.host=x"):
            with self.subTest(word=word):
                self.assertTrue(is_option(word))
        for word in ("", "-", "--", "---x", "value"):
            with self.subTest(word=word):
                self.assertFalse(is_option(word))

    def testStartsOption(self):
        self.assertTrue(starts_option("-"))
        self.assertTrue(starts_option("--"))
        self.assertFalse(starts_option("push"))

    def testStrip(self):
        self.assertEqual(strip("--verbose"), ("--", "verbose", True))
        self.assertEqual(strip("-v"), ("-", "v", False))
        self.assertEqual(strip("value"), ("", "value", False))

    def testSplitLongOnFirstEquals(self):
        self.assertEqual(split("name=a=b", True), ("name", "=", "a=b"))
        self.assertEqual(split("name=", True), ("name", "=", ""))
        self.assertEqual(split("name", True), ("name", "", None))

    def testSplitShortOnlyAfterFirstCharacter(self):
        self.assertEqual(split("o=value", False), ("o", "=", "value"))
        self.assertEqual(split("ab=c", False), ("ab=c", "", None))


class TestLookup(TestCase):
    """Lookup tables and stacked short words."""

    def setUp(self):
        self.model = Model("tool")
        self.model.group(0, Group("general", [
            Option("-a", "--all"),
            Option("-b", "--brief"),
            Option("-c", "--count", arity="single"),
        ], persistent=True))
        self.model.group(0, Group("database", [Option("--host", arity="single")], namespace="db", delimiter="."))
        self.model.group(0, Group("nested", [Option("-x"), Option("-y", arity="single")], namespace="n"))
        self.lookup = Lookup(self.model, 0)

    def testLongNamesIncludeNamespaces(self):
        self.assertEqual(self.lookup.long("db.host").option.long, "host")
        self.assertIsNone(self.lookup.long("host"))

    def testShortNamesOfNestableGroupsAreHidden(self):
        self.assertIsNotNone(self.lookup.short("a"))
        self.assertIsNone(self.lookup.short("x"))
        self.assertEqual(list(self.lookup.nested), ["n"])

    def testStackOfSwitches(self):
        stack = self.lookup.stacked("ab")
        self.assertEqual(stack.match.option.short, "b")
        self.assertEqual(stack.index, 2)
        self.assertTrue(stack.stacked)
        self.assertFalse(stack.nested)
        self.assertEqual(stack.remainder, "")

    def testStackStopsAtFirstValueOption(self):
        stack = self.lookup.stacked("acbx")
        self.assertEqual(stack.match.option.short, "c")
        self.assertEqual(stack.index, 2)
        self.assertEqual(stack.remainder, "bx")

    def testStackStopsAtUnknownCharacter(self):
        stack = self.lookup.stacked("azb")
        self.assertIsNone(stack.match)
        self.assertEqual(stack.index, 2)

    def testShortNamespace(self):
        stack = self.lookup.stacked("nx")
        self.assertTrue(stack.nested)
        self.assertEqual(stack.match.option.short, "x")
        self.assertEqual([section.descr for section in stack.groups], ["nested"])

    def testShortNamespaceWithoutOption(self):
        stack = self.lookup.stacked("n")
        self.assertTrue(stack.nested)
        self.assertIsNone(stack.match)
        self.assertEqual(stack.index, 1)

    def testShortNamespaceAttachedValue(self):
        stack = self.lookup.stacked("nyvalue")
        self.assertEqual(stack.match.option.short, "y")
        self.assertEqual(stack.remainder, "value")

    def testSubcommandSeesPersistentOptions(self):
        child = self.model.command("run")
        lookup = Lookup(self.model, child)
        self.assertIsNotNone(lookup.short("a"))
        self.assertIsNone(lookup.long("db.host"))


if __name__ == "__main__":
    unittest.main()
