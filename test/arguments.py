# python
"""
Arguments module behavioral tests.

Scope
- Validate Argument construction: names, short flags, arity, required-ness,
  default/factory exclusivity, help and metavar normalization.
- Validate the generated __call__ across arities (implicit and bound readers).
- Validate defaults (produce), required predicates, flag matching, release and
  help text substitution.
- Validate the @argument decorator (single assignment, no 'read' keyword).

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Argument, argument, NoDefault).
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argdef import Argument, argument, NoDefault


class TestArgumentConstruction(TestCase):
    """Validation and normalization of Argument metadata."""

    def testLongFlagIsDashifiedName(self):
        a = Argument("dry_run")
        self.assertEqual(a.long, "--dry-run")
        self.assertEqual(a.name, "dry_run")

    def testShortDefaultsToNone(self):
        self.assertIsNone(Argument("verbose").short)

    def testShortFlagKept(self):
        self.assertEqual(Argument("count", "-c").short, "-c")

    def testShortFlagMustBeSingleDash(self):
        with self.assertRaises(ValueError):
            Argument("count", "--c")
        with self.assertRaises(ValueError):
            Argument("count", "c")

    def testShortFlagMustBeString(self):
        with self.assertRaises(TypeError):
            Argument("count", 3)

    def testNameMustBeIdentifier(self):
        with self.assertRaises(ValueError):
            Argument("dry-run")
        with self.assertRaises(ValueError):
            Argument("_hidden")
        with self.assertRaises(TypeError):
            Argument(42)

    def testArityValidation(self):
        with self.assertRaises(ValueError):
            Argument("count", arity=-1)
        with self.assertRaises(TypeError):
            Argument("count", arity=True)
        with self.assertRaises(TypeError):
            Argument("count", arity=1.0)

    def testRequiredMustBeBoolOrPredicate(self):
        with self.assertRaises(TypeError):
            Argument("count", required="yes")
        Argument("count", required=lambda state: True)

    def testDefaultAndFactoryAreExclusive(self):
        with self.assertRaises(TypeError):
            Argument("count", default=1, factory=lambda: 1)

    def testCallablesAreChecked(self):
        for name in ("factory", "read", "release"):
            with self.subTest(name=name):
                with self.assertRaises(TypeError):
                    Argument("count", **{name: "nope"})

    def testHelpIsStripped(self):
        self.assertEqual(Argument("count", help="  How many \n").help, "How many")

    def testHelpMustBeString(self):
        with self.assertRaises(TypeError):
            Argument("count", help=3)

    def testMetavarDefaultsToUpperName(self):
        self.assertEqual(Argument("count").metavar, "COUNT")
        self.assertEqual(Argument("count", metavar="N").metavar, "N")

    def testMetavarCannotBeEmpty(self):
        with self.assertRaises(ValueError):
            Argument("count", metavar="  ")

    def testNoneMeansOmitted(self):
        a = Argument("count", None, release=None, metavar=None)
        self.assertIsNone(a.short)
        self.assertIsNone(a.release)
        self.assertEqual(a.metavar, "COUNT")
        a.cleanup(1)

    def testDefaultReadsAsNoDefaultWhenOmitted(self):
        a = Argument("count")
        self.assertIs(a.default, NoDefault)
        self.assertIs(a.factory, NoDefault)
        self.assertFalse(a.hasdefault)

    def testPropertiesAreReadOnly(self):
        a = Argument("count")
        with self.assertRaises(AttributeError):
            a.name = "other"

    def testFactoryBackedTypeIsSealed(self):
        a = Argument("count")
        with self.assertRaises(TypeError):
            class Derived(type(a)):  # NOQA: F-841
                pass

    def testReprShowsKeyFields(self):
        text = repr(Argument("count", "-c", arity=1))
        self.assertTrue(text.startswith("argument(name='count', short='-c', arity=1"))


class TestArgumentCall(TestCase):
    """Generated __call__ forwarding across arities."""

    def testImplicitReaderArityZeroIsTrue(self):
        self.assertIs(Argument("verbose")(), True)

    def testImplicitReaderArityOneIsRawString(self):
        self.assertEqual(Argument("name", arity=1)("alice"), "alice")

    def testImplicitReaderArityManyIsTuple(self):
        self.assertEqual(Argument("point", arity=3)("1", "2", "3"), ("1", "2", "3"))

    def testBoundReaderReceivesValues(self):
        received = []
        a = Argument("pair", arity=2, read=lambda x, y: received.append((x, y)) or int(x) + int(y))
        self.assertEqual(a("2", "3"), 5)
        self.assertEqual(received, [("2", "3")])

    def testWrongValueCountIsTypeError(self):
        a = Argument("count", arity=1)
        with self.assertRaises(TypeError):
            a()
        with self.assertRaises(TypeError):
            a("1", "2")

    def testReaderExceptionPropagates(self):
        a = Argument("count", arity=1, read=int)
        with self.assertRaises(ValueError):
            a("ten")


class TestArgumentBehavior(TestCase):
    """Defaults, required-ness, matching, release and help text."""

    def testProduceConstantDefault(self):
        self.assertEqual(Argument("count", default=0).produce(), 0)

    def testProduceCallsFactoryEachTime(self):
        calls = []
        a = Argument("items", factory=lambda: calls.append(1) or [])
        first, second = a.produce(), a.produce()
        self.assertEqual(len(calls), 2)
        self.assertIsNot(first, second)

    def testProduceWithoutDefaultRaises(self):
        with self.assertRaises(LookupError):
            Argument("count").produce()

    def testFalsyDefaultsCount(self):
        for default in (None, 0, "", False):
            with self.subTest(default=default):
                self.assertTrue(Argument("count", default=default).hasdefault)

    def testRequiresBoolean(self):
        self.assertTrue(Argument("count", required=True).requires(None))
        self.assertFalse(Argument("count").requires(None))

    def testRequiresPredicateGetsState(self):
        seen = []
        a = Argument("count", required=lambda state: seen.append(state) or 1)
        self.assertIs(a.requires("STATE"), True)
        self.assertEqual(seen, ["STATE"])

    def testMatchesLongAndShort(self):
        a = Argument("dry_run", "-n")
        self.assertTrue(a.matches("--dry-run"))
        self.assertTrue(a.matches("-n"))
        self.assertFalse(a.matches("--dry_run"))
        self.assertFalse(a.matches("--dry-run=1"))
        self.assertFalse(a.matches("dry-run"))

    def testCleanupRunsRelease(self):
        released = []
        Argument("out", release=released.append).cleanup("handle")
        self.assertEqual(released, ["handle"])

    def testCleanupWithoutReleaseIsNoop(self):
        Argument("out").cleanup("handle")

    def testDescribeSubstitutesConstantDefault(self):
        a = Argument("count", default=3, help="How many (default: %s)")
        self.assertEqual(a.describe(), "How many (default: 3)")

    def testDescribeWithoutDefaultSaysNone(self):
        self.assertEqual(Argument("count", help="default %s").describe(), "default none")
        self.assertEqual(Argument("count", factory=list, help="default %s").describe(), "default none")

    def testDescribeReplacesFirstPlaceholderOnly(self):
        self.assertEqual(Argument("count", default=1, help="%s and %s").describe(), "1 and %s")

    def testDescribeWithoutPlaceholder(self):
        self.assertEqual(Argument("count", default=1, help="How many").describe(), "How many")


class TestArgumentDecorator(TestCase):
    """@argument binds the decorated function as reader."""

    def testDecoratorBindsReader(self):
        @argument("count", "-c", arity=1, help="How many")
        def count(value):
            return int(value)

        self.assertIsInstance(count, Argument)
        self.assertEqual(count.long, "--count")
        self.assertEqual(count("7"), 7)

    def testDecoratorSingleAssignmentGuard(self):
        decorator = argument("count", arity=1)

        @decorator
        def first(value):
            return value

        with self.assertRaises(TypeError):
            @decorator
            def second(value):
                return value

    def testDecoratorRejectsReadKeyword(self):
        with self.assertRaises(TypeError):
            argument("count", arity=1, read=int)

    def testDecoratorRejectsNonCallable(self):
        with self.assertRaises(TypeError):
            argument("count", arity=1)("int")


if __name__ == "__main__":
    unittest.main()
