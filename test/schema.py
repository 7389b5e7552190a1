# python
"""
Schema module behavioral tests.

Scope
- Validate registration order, uniqueness of names and flags, reserved help
  flags and the frozen lifecycle.
- Validate lookups (match, membership, indexing) and the help header width.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argdef import Argument, Schema, HELP_FLAGS


class TestSchemaRegistration(TestCase):

    def testDeclarationOrderIsKept(self):
        schema = Schema(Argument("zeta"), Argument("alpha"))
        schema.argument("mid", "-m")
        self.assertEqual([a.name for a in schema], ["zeta", "alpha", "mid"])
        self.assertEqual(len(schema), 3)

    def testAddReturnsArgument(self):
        schema = Schema()
        a = Argument("count")
        self.assertIs(schema.add(a), a)
        self.assertIs(schema["count"], a)

    def testDuplicateNameRejected(self):
        with self.assertRaises(ValueError):
            Schema(Argument("count"), Argument("count", "-c"))

    def testDuplicateShortFlagRejected(self):
        with self.assertRaises(ValueError):
            Schema(Argument("count", "-c"), Argument("color", "-c"))

    def testShortFlagShadowingNothingIsAccepted(self):
        Schema(Argument("count", "-c"), Argument("c"))

    def testHelpFlagsAreReserved(self):
        self.assertEqual(HELP_FLAGS, ("--help", "-h"))
        with self.assertRaises(ValueError):
            Schema(Argument("help"))
        with self.assertRaises(ValueError):
            Schema(Argument("host", "-h"))

    def testOnlyArgumentsAccepted(self):
        with self.assertRaises(TypeError):
            Schema("--count")

    def testExtend(self):
        schema = Schema()
        schema.extend([Argument("a"), Argument("b")])
        self.assertEqual([a.name for a in schema], ["a", "b"])
        with self.assertRaises(TypeError):
            schema.extend(3)

    def testFrozenSchemaRejectsRegistration(self):
        schema = Schema(Argument("a"))
        self.assertIs(schema.freeze(), schema)
        self.assertTrue(schema.frozen)
        schema.freeze()
        with self.assertRaises(TypeError):
            schema.argument("b")


class TestSchemaLookup(TestCase):

    def setUp(self):
        self.schema = Schema(
            Argument("count", "-c", arity=1),
            Argument("dry_run"),
        )

    def testMatchLongAndShort(self):
        self.assertIs(self.schema.match("--count"), self.schema["count"])
        self.assertIs(self.schema.match("-c"), self.schema["count"])
        self.assertIs(self.schema.match("--dry-run"), self.schema["dry_run"])

    def testMatchUnknownIsNone(self):
        for token in ("--unknown", "count", "--dry_run", "-", "--"):
            with self.subTest(token=token):
                self.assertIsNone(self.schema.match(token))

    def testContains(self):
        self.assertIn("count", self.schema)
        self.assertNotIn("--count", self.schema)

    def testHeaderWidth(self):
        # "--count, -c" is 11 columns, "--dry-run" is 9
        self.assertEqual(self.schema.header_width, 11)

    def testHeaderWidthOfEmptySchema(self):
        self.assertEqual(Schema().header_width, 0)

    def testRepr(self):
        self.assertEqual(repr(self.schema), "schema(count, dry_run)")


if __name__ == "__main__":
    unittest.main()
