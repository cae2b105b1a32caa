"""
Faults tests (codes, trigger, replacement, rich rendering).

Scope
- Validate the stable numeric codes and host normalization.
- Validate trigger(): errors raise, warnings are returned with merged options.
- Validate rich rendering of the compact fault layout.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from rich.console import Console

from tabwise.faults import (
    FaultCode,
    CompletionError,
    UnknownCommandError,
    UnknownSubcommandError,
    MissingValueWarning,
    trigger,
)


class TestFaults(TestCase):

    def testCodesAreStable(self):
        self.assertEqual(FaultCode.UNKNOWN_COMMAND, 11101)
        self.assertEqual(FaultCode.ORPHANED_ARGUMENT, 11202)
        self.assertEqual(FaultCode.REQUIRED_SLOT.normalize(), "12301")

    def testSubcommandErrorIsACommandError(self):
        self.assertTrue(issubclass(UnknownSubcommandError, UnknownCommandError))
        self.assertTrue(issubclass(UnknownCommandError, CompletionError))

    def testTriggerRaisesErrorsWithOptions(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(UnknownCommandError("unknown command 'x'"), code=FaultCode.UNKNOWN_COMMAND, input="x")
        self.assertEqual(str(context.exception), "unknown command 'x'")
        self.assertEqual(context.exception.options["input"], "x")

    def testTriggerReturnsWarnings(self):
        original = MissingValueWarning("option --name expects a value", code=FaultCode.MISSING_VALUE)
        warning = trigger(original, input="al")
        self.assertIsNot(warning, original)
        self.assertEqual(warning.options["input"], "al")
        self.assertNotIn("input", original.options)

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testOptionsAreReadOnly(self):
        fault = MissingValueWarning("message", code=FaultCode.MISSING_VALUE)
        with self.assertRaises(TypeError):
            fault.options["code"] = FaultCode.REQUIRED_SLOT

    def testReplaceKeepsMessage(self):
        fault = copy.replace(MissingValueWarning("message", code=FaultCode.MISSING_VALUE), title="missing value")
        self.assertEqual(str(fault), "message")
        self.assertEqual(fault.options["title"], "missing value")

    def testRichRendering(self):
        console = Console(width=100, record=True, force_terminal=False)
        console.print(UnknownCommandError(
            "unknown command 'x' at first position",
            code=FaultCode.UNKNOWN_COMMAND,
            title="unknown command",
            hint="did you mean 'push'?",
            prog="deploy",
        ))
        text = console.export_text()
        self.assertIn("[ deploy — 11101 | Unknown Command ]", text)
        self.assertIn("unknown command 'x' at first position", text)
        self.assertIn("did you mean 'push'?", text)


if __name__ == "__main__":
    unittest.main()
