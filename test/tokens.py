"""
Token classification tests (classify, divide, split_trailing, verify_name).

Conventions
- Test method names follow CamelCase per project convention.
- Positions in records are 1-based.
"""
import unittest
from unittest import TestCase

from argtree import System, EqualAssignmentError, FaultCode
from argtree.tokens import TokenKind, classify, divide, split_trailing, verify_name


class TestClassify(TestCase):

    def setUp(self):
        self.system = System()

    def testFlag(self):
        record = classify("--name", self.system, 3)
        self.assertIs(record.kind, TokenKind.FLAG)
        self.assertEqual(record.key, "name")
        self.assertIsNone(record.value)
        self.assertEqual(record.index, 3)

    def testAlias(self):
        record = classify("-n", self.system)
        self.assertIs(record.kind, TokenKind.ALIAS)
        self.assertEqual(record.key, "n")

    def testValues(self):
        for token in ("value", "-", "--", "---x", ""):
            with self.subTest(token=token):
                record = classify(token, self.system)
                self.assertIs(record.kind, TokenKind.VALUE)
                self.assertIsNone(record.key)
                self.assertEqual(record.value, token)

    def testEqualAssignment(self):
        record = classify("--name=a=b", self.system)
        self.assertEqual((record.key, record.value), ("name", "a=b"))
        record = classify("-n=x", self.system)
        self.assertEqual((record.kind, record.key, record.value), (TokenKind.ALIAS, "n", "x"))

    def testEqualAssignmentDisabled(self):
        with self.assertRaises(EqualAssignmentError) as context:
            classify("--name=x", System(allow_equal_assign=False), 2)
        self.assertEqual(context.exception.options["index"], 2)
        self.assertIs(context.exception.options["code"], FaultCode.EQUAL_ASSIGNMENT)
        self.assertIn("second position", str(context.exception))

    def testEmptyAssignedValueIsKeptInKey(self):
        record = classify("--name=", self.system)
        self.assertEqual(record.key, "name=")
        self.assertIsNone(record.value)

    def testNegation(self):
        record = classify("--debug\\", self.system)
        self.assertEqual(record.key, "debug")
        self.assertTrue(record.negated)

    def testEqualAssignmentTakesPrecedenceOverNegation(self):
        record = classify("--debug\\=yes", self.system)
        self.assertEqual((record.key, record.value, record.negated), ("debug\\", "yes", False))

    def testNegationDisabled(self):
        record = classify("--debug\\", System(boolean_not_syntax_ending=None))
        self.assertEqual(record.key, "debug\\")
        self.assertFalse(record.negated)

    def testCustomNegationSuffix(self):
        record = classify("--debug!", System(boolean_not_syntax_ending="!"))
        self.assertEqual(record.key, "debug")
        self.assertTrue(record.negated)


class TestDivide(TestCase):

    def testPositionalZoneEndsAtFirstFlag(self):
        positionals, records = divide(["a", "b", "--x", "c", "-y"], System())
        self.assertEqual(positionals, ["a", "b"])
        self.assertEqual([record.kind for record in records], [TokenKind.FLAG, TokenKind.VALUE, TokenKind.ALIAS])
        self.assertEqual([record.index for record in records], [3, 4, 5])

    def testOffsetShiftsPositions(self):
        _, records = divide(["--x"], System(), 2)
        self.assertEqual(records[0].index, 3)

    def testNoFlags(self):
        self.assertEqual(divide(["a", "b"], System()), (["a", "b"], []))


class TestSplitTrailing(TestCase):

    def testSplitsAtFirstSeparator(self):
        self.assertEqual(split_trailing(["a", "--", "b", "--", "c"], "--"), (["a"], ["b", "--", "c"]))

    def testWithoutSeparator(self):
        self.assertEqual(split_trailing(["a", "b"], "--"), (["a", "b"], []))

    def testCustomSeparator(self):
        self.assertEqual(split_trailing(["a", "::", "b"], "::"), (["a"], ["b"]))


class TestVerifyName(TestCase):

    def testValid(self):
        self.assertEqual(verify_name("flag", "dry-run", "\\"), "dry-run")

    def testInvalid(self):
        for name in ("", "bad name", "-x", "a=b", "debug\\"):
            with self.subTest(name=name), self.assertRaises(ValueError):
                verify_name("flag", name, "\\")

    def testNonString(self):
        with self.assertRaises(TypeError):
            verify_name("flag", 1)


if __name__ == "__main__":
    unittest.main()
