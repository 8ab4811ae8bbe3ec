"""
Command base class tests.

Scope
- The execution context is attached once and frozen.
- log() writes "[level] message" to stderr; debug only when verbose.

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import unittest
from contextlib import redirect_stderr
from unittest import TestCase

from clidispatch import Command, OptionSpec


class Echo(Command):
    options = ("pretty|p", OptionSpec("output", "o", arity="single"))

    def run(self, *args):
        return args


class TestCommand(TestCase):

    def testContextIsFrozenCopy(self):
        context = {"verbose": True, "namespace": "myscript"}
        command = Echo()
        command.set_options(context)
        context["verbose"] = False
        self.assertTrue(command.verbose)
        self.assertEqual(command.namespace, "myscript")
        with self.assertRaises(TypeError):
            command.context["verbose"] = False

    def testOption(self):
        command = Echo()
        command.set_options({"output": "out.txt"})
        self.assertEqual(command.option("output"), "out.txt")
        self.assertIsNone(command.option("pretty"))
        self.assertEqual(command.option("pretty", False), False)

    def testDefaultsBeforeDispatch(self):
        command = Echo()
        self.assertEqual(dict(command.context), {})
        self.assertIsNone(command.namespace)
        self.assertFalse(command.verbose)

    def testLog(self):
        command = Echo()
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            command.log("info", "dumping", 2, "arguments")
            command.log("debug", "hidden")
        self.assertEqual(stderr.getvalue(), "[info] dumping 2 arguments\n")

    def testDebugLogWhenVerbose(self):
        command = Echo()
        command.set_options({"verbose": True})
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            command.log("debug", "shown")
        self.assertEqual(stderr.getvalue(), "[debug] shown\n")

    def testRunIsAbstract(self):
        with self.assertRaises(NotImplementedError):
            Command().run()


if __name__ == "__main__":
    unittest.main()
