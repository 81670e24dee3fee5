"""
Faults tests (codes, replacement, triggering and rendering).

Conventions
- Test method names follow CamelCase per project convention.
- The module console is patched with a capturing Console.
"""
import io
import sys
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argtree.faults import *


def fault(**options):
    return UnknownOptionError(
        "Unknown option '--nope' at first position.",
        **{
            "code": FaultCode.UNKNOWN_OPTION,
            "title": "unknown option",
            "hint": "run with '--help' to list the available options",
            "input": "--nope",
            "index": 1,
        } | options,
    )


class TestFaultCode(TestCase):

    def testGroups(self):
        self.assertTrue(all(11100 < code < 11200 for code in (
            FaultCode.EQUAL_ASSIGNMENT,
            FaultCode.UNKNOWN_OPTION,
            FaultCode.INVALID_OPTION_VALUE,
        )))
        self.assertTrue(all(11200 < code < 11300 for code in (
            FaultCode.MISSING_ARGUMENTS,
            FaultCode.INVALID_ARGUMENT_VALUE,
            FaultCode.UNEXPECTED_ARGUMENTS,
        )))

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "11102")

    def testNormalizeUsesHostCodes(self):
        with mock.patch.object(sys.modules["__main__"], "__codes__", {FaultCode.UNKNOWN_OPTION: "E-UNK"}, create=True):
            self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E-UNK")


class TestParseError(TestCase):

    def testHierarchy(self):
        for error in (EqualAssignmentError, RequiredOptionError, UnexpectedArgumentsError):
            self.assertTrue(issubclass(error, ParseError))
        self.assertTrue(issubclass(AskOverridesDefaultWarning, UserWarning))

    def testMessageAndOptions(self):
        error = fault()
        self.assertEqual(str(error), "Unknown option '--nope' at first position.")
        self.assertEqual(error.options["index"], 1)
        with self.assertRaises(TypeError):
            error.options["index"] = 2  # type: ignore[index]

    def testReplaceMergesOptions(self):
        replaced = fault().__replace__(fancy=True)
        self.assertIsInstance(replaced, UnknownOptionError)
        self.assertEqual(replaced.message, fault().message)
        self.assertTrue(replaced.options["fancy"])
        self.assertEqual(replaced.options["input"], "--nope")


class TestTrigger(TestCase):

    def setUp(self):
        self.console = Console(file=io.StringIO(), width=120, color_system=None)
        patcher = mock.patch("argtree.faults.console", self.console)
        patcher.start()
        self.addCleanup(patcher.stop)

    def testRaisesOutsideShell(self):
        with self.assertRaises(UnknownOptionError) as context:
            trigger(fault(), colorful=False)
        self.assertFalse(context.exception.options["colorful"])
        self.assertEqual(self.console.file.getvalue(), "")

    def testShellPrintsAndExits(self):
        with self.assertRaises(SystemExit) as context:
            trigger(fault(), shell=True)
        self.assertEqual(context.exception.code, 1)
        output = self.console.file.getvalue()
        self.assertIn("11102", output)
        self.assertIn("Unknown Option", output)
        self.assertIn("'--nope'", output)
        self.assertIn("--help", output)

    def testShellWithoutExit(self):
        trigger(fault(), shell=True, exit=False, fancy=True)
        self.assertIn("Unknown Option", self.console.file.getvalue())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("x"))


class TestRendering(TestCase):

    def render(self, error):
        console = Console(file=io.StringIO(), width=120, force_terminal=True, color_system="truecolor")
        console.print(error)
        return console.file.getvalue()

    def testColorful(self):
        self.assertIn("\x1b[", self.render(fault()))

    def testColorless(self):
        self.assertNotIn("\x1b[", self.render(fault(colorful=False)))

    def testStylesOverride(self):
        with mock.patch.object(sys.modules["__main__"], "__styles__", {"code": "bold red"}, create=True):
            self.assertIn("\x1b[", self.render(fault()))


if __name__ == "__main__":
    unittest.main()
