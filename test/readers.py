# python
"""
Readers module behavioral tests.

Scope
- Validate the scalar readers (integer, positive, number, boolean, path).
- Validate the reader factories (choice, separated, file) and their naming.
- Validate the release action (close) and the environ default factory.
- Validate readers plugged into a schema through parse().

Conventions
- Test method names follow CamelCase per project convention.
- Files are created in a temporary directory removed after each test.
"""

from __future__ import annotations

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import TestCase, mock

from argdef import Argument, Schema, Status, parse, InvalidValueError
from argdef.readers import integer, positive, number, boolean, path, choice, separated, file, close, environ


class TestScalarReaders(TestCase):

    def testInteger(self):
        self.assertEqual(integer("42"), 42)
        self.assertEqual(integer("-7"), -7)
        with self.assertRaises(ValueError):
            integer("4.2")
        with self.assertRaises(ValueError):
            integer("0x10")

    def testPositive(self):
        self.assertEqual(positive("3"), 3)
        for value in ("0", "-1", "many"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    positive(value)

    def testNumber(self):
        self.assertEqual(number("2.5"), 2.5)
        with self.assertRaises(ValueError):
            number("two")

    def testBoolean(self):
        for value in ("1", "true", "Yes", "ON"):
            with self.subTest(value=value):
                self.assertIs(boolean(value), True)
        for value in ("0", "false", "No", "off"):
            with self.subTest(value=value):
                self.assertIs(boolean(value), False)
        with self.assertRaises(ValueError):
            boolean("maybe")

    def testPath(self):
        self.assertEqual(path("a/b.txt"), Path("a/b.txt"))
        with self.assertRaises(ValueError):
            path("")


class TestReaderFactories(TestCase):

    def testChoice(self):
        reader = choice("fast", "safe")
        self.assertEqual(reader("safe"), "safe")
        self.assertEqual(reader.__name__, "choice")
        with self.assertRaises(ValueError):
            reader("slow")

    def testChoiceValidation(self):
        with self.assertRaises(TypeError):
            choice()
        with self.assertRaises(TypeError):
            choice("a", 1)

    def testSeparated(self):
        reader = separated(integer)
        self.assertEqual(reader("1,2,3"), (1, 2, 3))
        self.assertEqual(separated(str, ":")("a:b"), ("a", "b"))
        with self.assertRaises(ValueError):
            reader("1,x")

    def testSeparatedValidation(self):
        with self.assertRaises(TypeError):
            separated("int")
        with self.assertRaises(ValueError):
            separated(int, "")

    def testFileModeValidation(self):
        with self.assertRaises(ValueError):
            file("q")

    def testFileDashSelectsStandardStreams(self):
        self.assertIs(file("r")("-"), sys.stdin)
        self.assertIs(file("w")("-"), sys.stdout)


class TestFiles(TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.directory.name, "data.txt")

    def tearDown(self):
        self.directory.cleanup()

    def testReadAndClose(self):
        with open(self.path, "w", encoding="utf-8") as stream:
            stream.write("héllo")
        handle = file()(self.path)
        self.assertEqual(handle.read(), "héllo")
        close(handle)
        self.assertTrue(handle.closed)

    def testMissingFileIsRejected(self):
        with self.assertRaises(OSError):
            file()(os.path.join(self.directory.name, "missing.txt"))

    def testCloseFlushesStandardStreams(self):
        close(sys.stdout)
        self.assertFalse(sys.stdout.closed)
        close(None)

    def testFileArgumentIsReleased(self):
        schema = Schema(Argument("output", "-o", arity=1, read=file("w"), release=close))
        outcome = parse(schema, ["-o", self.path])
        self.assertIs(outcome.status, Status.OK)
        handle = outcome.state["output"]
        handle.write("done")
        outcome.state.release()
        self.assertTrue(handle.closed)
        with open(self.path, encoding="utf-8") as stream:
            self.assertEqual(stream.read(), "done")

    def testUnopenableFileIsInvalid(self):
        schema = Schema(Argument("input", "-i", arity=1, read=file(), release=close))
        outcome = parse(schema, ["-i", os.path.join(self.directory.name, "missing.txt")])
        self.assertIsInstance(outcome.fault, InvalidValueError)
        self.assertIsInstance(outcome.fault.__cause__, OSError)


class TestEnviron(TestCase):

    def testEnvironFactory(self):
        factory = environ("ARGDEF_TEST_VALUE", "fallback")
        with mock.patch.dict(os.environ, {"ARGDEF_TEST_VALUE": "set"}):
            self.assertEqual(factory(), "set")
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(factory(), "fallback")

    def testEnvironAsDefault(self):
        schema = Schema(Argument("token", arity=1, factory=environ("ARGDEF_TEST_TOKEN")))
        with mock.patch.dict(os.environ, {"ARGDEF_TEST_TOKEN": "secret"}):
            self.assertEqual(parse(schema, []).state["token"], "secret")
        self.assertEqual(parse(schema, ["--token", "given"]).state["token"], "given")

    def testEnvironValidation(self):
        with self.assertRaises(ValueError):
            environ("")


if __name__ == "__main__":
    unittest.main()
