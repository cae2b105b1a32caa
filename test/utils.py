"""
Utilities tests (Unset sentinel, coalesce, rename, mirror, ordinal).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabwise.utils import Unset, UnsetType, coalesce, rename, mirror, ordinal


class TestUnset(TestCase):

    def testSingletonAndFalsey(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("value", str | Unset))

    def testCoalesceKeepsFalseyValues(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)


class TestHelpers(TestCase):

    def testRename(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(rename(lambda: None, "other").__qualname__, "other")
        with self.assertRaises(TypeError):
            rename()

    def testMirrorHandsOutCopies(self):
        class Node:
            items = mirror("items")

            def __init__(self):
                self._items = ["a"]

        node = Node()
        self.assertEqual(node.items, ("a",))
        with self.assertRaises(AttributeError):
            node.items = ()

    def testOrdinal(self):
        self.assertEqual([ordinal(number) for number in (1, 2, 10)], ["first", "second", "tenth"])
        self.assertEqual([ordinal(number) for number in (11, 12, 13, 21, 22, 23, 101, 112)],
                         ["11th", "12th", "13th", "21st", "22nd", "23rd", "101st", "112th"])


if __name__ == "__main__":
    unittest.main()
