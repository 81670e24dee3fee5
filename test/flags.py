"""
Flag resolution and accumulation tests.

Scope
- resolve(): own flags shadow global flags, aliases resolve to their key.
- Accumulator policies: duplicates, multiple values, comma splitting, negation,
  missing values, unknown flags, defaults, required flags and deferred prompts.

Conventions
- Test method names follow CamelCase per project convention.
- Records are produced with divide() exactly like a command does.
"""
import unittest
from unittest import TestCase

from argtree import (
    System,
    UnknownOptionError,
    NegationAssignmentError,
    MissingOptionValueError,
    DuplicateOptionError,
    MultipleValuesError,
    UnexpectedValueError,
    RequiredOptionError,
    InvalidOptionValueError,
)
from argtree.builders import string, number, boolean, array, tuple
from argtree.flags import Accumulator, State, accumulate, resolve
from argtree.tokens import classify, divide


def run(tokens, flags, global_flags=None, **system):
    system = System(**system)
    _, records = divide(tokens, system)
    return accumulate(records, flags, global_flags or {}, system)


class TestResolve(TestCase):

    def testOwnShadowsGlobal(self):
        own, shared = string(), number()
        record = classify("--name", System())
        self.assertEqual(resolve(record, {"name": own}, {"name": shared}), ("name", own))
        self.assertEqual(resolve(record, {}, {"name": shared}), ("name", shared))

    def testShadowedGlobalAliasIsUnreachable(self):
        own, shared = string(), number().aliases("n")
        self.assertIsNone(resolve(classify("-n", System()), {"name": own}, {"name": shared}))
        with self.assertRaises(UnknownOptionError):
            run(["-n", "5"], {"name": own}, {"name": shared})

    def testAlias(self):
        schema = boolean().aliases("v")
        self.assertEqual(resolve(classify("-v", System()), {"verbose": schema}, {}), ("verbose", schema))

    def testAliasIsNotAFlagName(self):
        schema = boolean().aliases("v")
        self.assertIsNone(resolve(classify("--v", System()), {"verbose": schema}, {}))

    def testUnknown(self):
        self.assertIsNone(resolve(classify("--nope", System()), {"name": string()}, {}))


class TestBooleanFlags(TestCase):

    def testPresenceMeansTrue(self):
        values, _ = run(["--b"], {"b": boolean()})
        self.assertIs(values["b"], True)

    def testNegation(self):
        values, _ = run(["--b\\"], {"b": boolean()})
        self.assertIs(values["b"], False)

    def testExplicitValue(self):
        self.assertIs(run(["--b", "no"], {"b": boolean()})[0]["b"], False)
        self.assertIs(run(["--b=yes"], {"b": boolean()})[0]["b"], True)

    def testInvalidValue(self):
        with self.assertRaises(InvalidOptionValueError):
            run(["--b", "maybe"], {"b": boolean()})

    def testNegationOnlyForBooleans(self):
        with self.assertRaises(NegationAssignmentError):
            run(["--name\\"], {"name": string()})

    def testBooleanFollowedByFlag(self):
        values, _ = run(["--b", "--name", "x"], {"b": boolean(), "name": string()})
        self.assertEqual(values, {"b": True, "name": "x"})


class TestValues(TestCase):

    def testSpacedAndEqualAssignmentAgree(self):
        flags = {"name": string()}
        self.assertEqual(run(["--name", "x"], flags)[0], run(["--name=x"], flags)[0])

    def testAlias(self):
        self.assertEqual(run(["-n", "x"], {"name": string().aliases("n")})[0], {"name": "x"})

    def testMissingValue(self):
        with self.assertRaises(MissingOptionValueError) as context:
            run(["--name", "--b"], {"name": string(), "b": boolean()})
        self.assertEqual(context.exception.options["index"], 1)

    def testMissingValueAtEnd(self):
        with self.assertRaises(MissingOptionValueError):
            run(["--count"], {"count": number()})

    def testMultipleValuesForPrimitive(self):
        with self.assertRaises(MultipleValuesError):
            run(["--name", "a", "b"], {"name": string()})
        values, _ = run(["--name", "a", "b"], {"name": string()}, allow_multiple_values_for_primitive=True)
        self.assertEqual(values["name"], "b")

    def testInvalidValue(self):
        with self.assertRaises(InvalidOptionValueError) as context:
            run(["--count", "x"], {"count": number()})
        self.assertEqual(context.exception.options["input"], "--count")

    def testUnexpectedValueBeforeAnyFlag(self):
        accumulator = Accumulator({}, {}, System())
        self.assertIs(accumulator.state, State.EXPECTING)
        with self.assertRaises(UnexpectedValueError):
            accumulator.feed(classify("stray", System(), 1))


class TestDuplicates(TestCase):

    def testListAccumulates(self):
        values, _ = run(["--tags", "a", "b", "--tags", "c"], {"tags": array(string())})
        self.assertEqual(values["tags"], ["a", "b", "c"])

    def testListOverwrite(self):
        values, _ = run(
            ["--tags", "a", "b", "--tags", "c"],
            {"tags": array(string())},
            overwrite_duplicate_flag_for_list=True,
        )
        self.assertEqual(values["tags"], ["c"])

    def testListDuplicatesDisallowed(self):
        with self.assertRaises(DuplicateOptionError):
            run(["--tags", "a", "--tags", "c"], {"tags": array(string())}, allow_duplicate_flag_for_list=False)

    def testPrimitiveDuplicate(self):
        with self.assertRaises(DuplicateOptionError) as context:
            run(["--name", "a", "--name", "b"], {"name": string()})
        self.assertEqual(context.exception.options["index"], 3)
        self.assertIn("third position", str(context.exception))

    def testPrimitiveDuplicateAllowed(self):
        values, _ = run(["--name", "a", "--name", "b"], {"name": string()}, allow_duplicate_flag_for_primitive=True)
        self.assertEqual(values["name"], "b")

    def testAliasAndNameAreTheSameFlag(self):
        with self.assertRaises(DuplicateOptionError):
            run(["--name", "a", "-n", "b"], {"name": string().aliases("n")})


class TestLists(TestCase):

    def testCommaSplitting(self):
        values, _ = run(["--tags", "a, b,,c", "d"], {"tags": array(string())}, split_list_by_comma=True)
        self.assertEqual(values["tags"], ["a", "b", "c", "d"])

    def testCommaKeptWithoutSplitting(self):
        values, _ = run(["--tags", "a,b"], {"tags": array(string())})
        self.assertEqual(values["tags"], ["a,b"])

    def testTuple(self):
        values, _ = run(["--point", "1", "2"], {"point": tuple(number(), number())})
        self.assertEqual(values["point"], [1, 2])

    def testListLengthValidated(self):
        with self.assertRaises(InvalidOptionValueError):
            run(["--tags", "a"], {"tags": array(string()).min_length(2)})


class TestUnknownFlags(TestCase):

    def testUnknownRaises(self):
        with self.assertRaises(UnknownOptionError) as context:
            run(["--nope"], {"name": string()})
        self.assertEqual(context.exception.options["input"], "--nope")

    def testUnknownSkippedWithItsValues(self):
        values, _ = run(["--nope", "1", "2", "--name", "x"], {"name": string()}, skip_unknown_flag=True)
        self.assertEqual(values, {"name": "x"})


class TestDefaults(TestCase):

    def testDefaultUsedAsIs(self):
        values, _ = run([], {"count": number().default("not validated")})
        self.assertEqual(values["count"], "not validated")

    def testAbsentOptionalFlagIsOmitted(self):
        self.assertEqual(run([], {"name": string()}), ({}, []))

    def testRequired(self):
        with self.assertRaises(RequiredOptionError):
            run([], {"name": string().required()})

    def testRequiredWithDefault(self):
        self.assertEqual(run([], {"name": string().required().default("x")})[0], {"name": "x"})

    def testAskIsDeferred(self):
        schema = string().required().ask("Name?")
        values, pending = run([], {"name": schema})
        self.assertEqual(values, {})
        self.assertEqual(pending, [("name", schema)])

    def testGlobalFlagsAreDefined(self):
        values, _ = run(["--debug"], {}, {"debug": boolean(), "level": number().default(1)})
        self.assertEqual(values, {"debug": True, "level": 1})


if __name__ == "__main__":
    unittest.main()
