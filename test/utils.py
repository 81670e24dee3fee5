"""
Tests for the internal helpers.

This module verifies:
- Unset: singleton identity, falsy semantics, copy identity, finality, union support.
- coalesce/rename/replace contracts.
- ReflectiveType: typename derivation, read-only mirrors, stable repr.
- ordinal: words for the first ten positions, English suffixes afterwards.
"""
import copy
import unittest
from unittest import TestCase

from argtree.utils import *


class UnsetTest(TestCase):

    def testSingletonIdentity(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, 0)
        self.assertEqual(repr(Unset), "Unset")

    def testCopyPreservesIdentity(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy([Unset])[0], Unset)

    def testCannotSubclass(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))


class HelpersTest(TestCase):

    def testCoalesceOnlyReplacesUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRenameBothForms(self):
        def function():
            pass

        self.assertEqual(rename(function, "renamed").__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "x")
        with self.assertRaises(TypeError):
            rename()

    def testReplaceRequiresProtocol(self):
        with self.assertRaises(TypeError):
            replace(object(), a=1)

    def testOrdinal(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(13), "13th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(103), "103rd")
        self.assertEqual(ordinal(112), "112th")


class ReflectiveTypeTest(TestCase):

    def setUp(self):
        class SampleRecord(metaclass=ReflectiveType):
            __introspectable__ = ("items", "label")

            def __init__(self, items, label):
                self._items = items
                self._label = label

        self.SampleRecord = SampleRecord

    def testTypenameIsHyphenated(self):
        self.assertEqual(self.SampleRecord.__typename__, "sample-record")

    def testMirrorsAreReadOnlyViews(self):
        record = self.SampleRecord([1, 2], "x")
        self.assertEqual(record.items, (1, 2))
        with self.assertRaises(AttributeError):
            record.label = "y"

    def testRepr(self):
        self.assertEqual(repr(self.SampleRecord([1], "x")), "sample-record(items=(1,), label='x')")


if __name__ == "__main__":
    unittest.main()
