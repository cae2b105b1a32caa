"""
Completion types tests (groups, default naming, scopes, actions, provider precedence).

Scope
- Validate CompletionGroup candidate bookkeeping (order, dedup, aliases, styles).
- Validate default group naming and value scopes on Completions.
- Validate declarative action parsing and provider precedence.

Conventions
- Test method names follow CamelCase per project convention.
- Providers are plain functions receiving the Completions object.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from tabwise import Completions, CompletionGroup, Capability, Directive, Kind, Provider, action, choices, invoke
from tabwise.completions import sequence


class TestCompletionGroup(TestCase):
    """Candidate bookkeeping."""

    def testCandidatesKeepInsertionOrderAndDeduplicate(self):
        group = CompletionGroup("values")
        group.add("b", "second")
        group.add("a")
        group.add("b", "again")
        group.add("")
        self.assertEqual(group.suggestions, ["b", "a"])
        self.assertEqual(group.descriptions["b"], "again")
        self.assertIn("a", group)

    def testLinesCountAliases(self):
        group = CompletionGroup("flags", Kind.OPTION)
        group.add("--verbose", alias="-v")
        group.add("--quiet")
        self.assertEqual(group.lines(), 3)

    def testStyledCandidate(self):
        group = CompletionGroup("values")
        group.add("a.b", style="#ff0000")
        self.assertEqual(group.styles, {r"a\.b": "38;2;255;0;0"})

    def testSequence(self):
        self.assertEqual(sequence("red"), "31")
        self.assertEqual(sequence("bright_blue"), "94")
        with self.assertRaises(TypeError):
            sequence(12)


class TestCompletions(TestCase):
    """Group routing on Completions."""

    def testDefaultNames(self):
        comps = Completions()
        self.assertEqual(comps.default(Kind.COMMAND).tag, "flags-commands")
        self.assertEqual(comps.default(Kind.OPTION).name, "options")
        self.assertEqual(comps.default(Kind.ARGUMENT).name, "argument")
        self.assertEqual(comps.default(Kind.FILE).name, "files")

    def testCommandGroupAfterOthersIsOther(self):
        comps = Completions()
        comps.new_group("TARGET")
        self.assertEqual(comps.default(Kind.COMMAND).name, "other")

    def testGroupLookupByNameAndKind(self):
        comps = Completions()
        first = comps.group("reports", Kind.COMMAND)
        self.assertIs(comps.group("reports", Kind.COMMAND), first)
        self.assertIsNot(comps.group("reports"), first)

    def testScopeCollectsCandidates(self):
        comps = Completions()
        with comps.scope("TARGET", required=True) as scope:
            comps.add("one")
            extra = comps.new_group("extra")
        self.assertEqual(scope.suggestions, ["one"])
        self.assertTrue(scope.required)
        self.assertTrue(extra.required)
        # outside the scope, the last argument group is the default again
        comps.add("two")
        self.assertEqual(extra.suggestions, ["two"])

    def testEmptyOptionalScopeIsDropped(self):
        comps = Completions()
        with comps.scope("TARGET"):
            pass
        self.assertEqual(comps.groups, ())

    def testClearAndPrune(self):
        comps = Completions()
        comps.default(Kind.COMMAND).add("build")
        comps.new_group("empty", Kind.OPTION)
        comps.message("nothing to complete")
        comps.clear(Kind.COMMAND)
        comps.prune()
        self.assertEqual([group.kind for group in comps.groups], [Kind.MESSAGE])

    def testValuesGivenOnTheLine(self):
        comps = Completions({"--tags": ["a", "b"]})
        self.assertEqual(comps.values("--tags"), ("a", "b"))
        self.assertEqual(comps.values("--other"), ())


class TestProviders(TestCase):
    """Declarative actions and precedence."""

    def testActionParsing(self):
        provider = action("+filterext, go ,mod")
        self.assertEqual(provider.capability, Capability.TAG)
        self.assertTrue(provider.combine)
        comps = Completions()
        provider.callback(comps)
        files, = comps.groups
        self.assertEqual(files.directive, Directive.FILTER_EXT)
        self.assertEqual(files.suggestions, ["go", "mod"])

    def testDirectoryActionsUseDirectoryGroups(self):
        comps = Completions()
        action("dirs").callback(comps)
        action("filterdirs,src").callback(comps)
        self.assertEqual([group.name for group in comps.groups], ["directories", "directories"])

    def testDirectiveAction(self):
        comps = Completions()
        with comps.scope("value") as scope:
            action("NoSpace").callback(comps)
        self.assertEqual(scope.directive, Directive.NOSPACE)

    def testDirectiveOnlyScopeIsKept(self):
        comps = Completions()
        with comps.scope("name"):
            action("nofiles").callback(comps)
        scope, = comps.groups
        self.assertEqual(scope.suggestions, [])
        self.assertEqual(scope.directive, Directive.NOFILES)

    def testUnknownActionRejected(self):
        with self.assertRaises(ValueError):
            action("folders")
        with self.assertRaises(ValueError):
            action("  ")
        with self.assertRaises(TypeError):
            action(3)

    def testTagWinsOverType(self):
        comps = Completions()
        typed = Provider(Capability.TYPE, lambda comps: comps.add("typed"), False)
        tagged = Provider(Capability.TAG, lambda comps: comps.add("tagged"), False)
        self.assertTrue(invoke((typed, tagged, choices(("choice",))), comps))
        self.assertEqual(comps.groups[0].suggestions, ["tagged"])

    def testCombinedTagRunsAfterType(self):
        comps = Completions()
        typed = Provider(Capability.TYPE, lambda comps: comps.add("typed"), False)
        tagged = Provider(Capability.TAG, lambda comps: comps.add("tagged"), True)
        invoke((tagged, typed), comps)
        self.assertEqual(comps.groups[0].suggestions, ["typed", "tagged"])

    def testDirectiveActionsKeepChoices(self):
        comps = Completions()
        nospace = action("nospace")
        self.assertIs(nospace.capability, Capability.DIRECTIVE)
        with comps.scope("name") as scope:
            self.assertTrue(invoke((nospace, choices(("alice", "bob"))), comps))
        self.assertEqual(scope.suggestions, ["alice", "bob"])
        self.assertEqual(scope.directive, Directive.NOSPACE)

    def testChoicesAsLastResort(self):
        comps = Completions()
        self.assertTrue(invoke((choices((1, 2)),), comps))
        self.assertEqual(comps.groups[0].suggestions, ["1", "2"])
        self.assertFalse(invoke((), Completions()))


if __name__ == "__main__":
    unittest.main()
