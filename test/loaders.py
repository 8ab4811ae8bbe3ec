"""
Loader tests (qualify, ModuleLoader, Registry, mglob).

Scope
- Missing vs broken commands are classified by exception type.
- Documentation is read from source without running the command module.
- Discovery lists the public modules of a namespace.
- Registries chain to a parent loader for identities they do not know.

Conventions
- Test method names follow CamelCase per project convention.
- Command packages are written to disk with test/sandbox.py and forgotten
  after each test.
"""
import sys
import unittest
from unittest import TestCase

from clidispatch import (
    Command,
    CommandLoadError,
    CommandNotFoundError,
    FaultCode,
    ModuleLoader,
    Registry,
    qualify,
)
from clidispatch.utils import mglob

from sandbox import Sandbox

COMMANDS = {
    "dump_me": '''
        """module documentation (shadowed by the class docstring)"""
        from clidispatch import Command


        class DumpMe(Command):
            """
            dump the arguments

            usage: dump-me [args...]
            """

            def run(self, *args):
                return args
    ''',
    "escape": '''
        """escape a string (documentation only)"""
    ''',
    "broken": '''
        import clidispatch_missing_dependency
        from clidispatch import Command


        class Broken(Command):
            """needs a module that is not installed"""
    ''',
    "syntax": '''
        def run(:
    ''',
    "raising": '''
        raise RuntimeError("boom")
    ''',
    "no_class": '''
        VALUE = 1
    ''',
    "not_callable": '''
        NotCallable = 3
    ''',
    "_private": '''
        from clidispatch import Command


        class Private(Command):
            pass
    ''',
}


class TestQualify(TestCase):

    def testDefaultKey(self):
        self.assertEqual(qualify("myscript", "DumpMe"), "myscript.dump_me:DumpMe")
        self.assertEqual(qualify("my.app", "Help"), "my.app.help:Help")

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            qualify("myscript", 1)
        with self.assertRaises(TypeError):
            qualify(None, "Help")


class TestModuleLoader(TestCase):
    """Module-based lookup, classification, docs and discovery."""

    def setUp(self):
        self.sandbox = Sandbox(COMMANDS)
        self.namespace = self.sandbox.__enter__()
        self.loader = ModuleLoader()

    def tearDown(self):
        self.sandbox.__exit__(None, None, None)

    def testLoadsCommandClass(self):
        factory = self.loader.load(self.namespace, "DumpMe")
        self.assertTrue(issubclass(factory, Command))
        self.assertEqual(factory.__name__, "DumpMe")
        self.assertEqual(factory().run("a", "b"), ("a", "b"))

    def testRepeatedLoadsAreCached(self):
        self.assertIs(self.loader.load(self.namespace, "DumpMe"), self.loader.load(self.namespace, "DumpMe"))

    def testMissingModuleIsNotFound(self):
        with self.assertRaises(CommandNotFoundError) as context:
            self.loader.load(self.namespace, "Missing")
        self.assertEqual(context.exception.options["code"], FaultCode.COMMAND_NOT_FOUND)

    def testMissingNamespaceIsNotFound(self):
        with self.assertRaises(CommandNotFoundError):
            self.loader.load("clidispatch_no_such_package", "DumpMe")
        with self.assertRaises(CommandNotFoundError):
            self.loader.load(self.namespace + ".nested", "DumpMe")

    def testDocumentationOnlyModuleIsNotFound(self):
        with self.assertRaises(CommandNotFoundError):
            self.loader.load(self.namespace, "Escape")

    def testMissingOrUncallableAttributeIsNotFound(self):
        for name in ("NoClass", "NotCallable"):
            with self.subTest(name=name):
                with self.assertRaises(CommandNotFoundError):
                    self.loader.load(self.namespace, name)

    def testEmptyNameIsNotFound(self):
        with self.assertRaises(CommandNotFoundError):
            self.loader.load(self.namespace, "")

    def testMissingDependencyIsBroken(self):
        with self.assertRaises(CommandLoadError) as context:
            self.loader.load(self.namespace, "Broken")
        self.assertEqual(context.exception.options["code"], FaultCode.COMMAND_BROKEN)
        self.assertIsInstance(context.exception.__cause__, ModuleNotFoundError)
        self.assertEqual(context.exception.__cause__.name, "clidispatch_missing_dependency")

    def testSyntaxErrorIsBroken(self):
        with self.assertRaises(CommandLoadError) as context:
            self.loader.load(self.namespace, "Syntax")
        self.assertIsInstance(context.exception.__cause__, SyntaxError)

    def testExceptionAtImportIsBroken(self):
        with self.assertRaises(CommandLoadError) as context:
            self.loader.load(self.namespace, "Raising")
        self.assertIsInstance(context.exception.__cause__, RuntimeError)

    def testClassDocstringWins(self):
        self.assertEqual(self.loader.describe(self.namespace, "DumpMe"), "dump the arguments\n\nusage: dump-me [args...]")
        self.assertEqual(self.loader.summary(self.namespace, "DumpMe"), "dump the arguments")

    def testDescribeAfterLoad(self):
        self.loader.load(self.namespace, "DumpMe")
        self.assertEqual(self.loader.summary(self.namespace, "DumpMe"), "dump the arguments")

    def testModuleDocstringDocumentsCommand(self):
        self.assertEqual(self.loader.describe(self.namespace, "Escape"), "escape a string (documentation only)")

    def testBrokenCommandDocsReadWithoutImport(self):
        self.assertEqual(self.loader.describe(self.namespace, "Broken"), "needs a module that is not installed")
        self.assertNotIn(self.namespace + ".broken", sys.modules)

    def testUndocumented(self):
        for name in ("Syntax", "Missing", "NoClass", ""):
            with self.subTest(name=name):
                self.assertIsNone(self.loader.describe(self.namespace, name))
        self.assertIsNone(self.loader.describe("clidispatch_no_such_package", "Help"))
        self.assertEqual(self.loader.summary(self.namespace, "Missing"), "")

    def testDiscover(self):
        self.assertEqual(
            self.loader.discover(self.namespace),
            ("Broken", "DumpMe", "Escape", "NoClass", "NotCallable", "Raising", "Syntax"),
        )
        # discovery never runs command modules
        self.assertNotIn(self.namespace + ".raising", sys.modules)

    def testDiscoverMissingNamespace(self):
        self.assertEqual(self.loader.discover("clidispatch_no_such_package"), ())

    def testDiscoverNonIdentifierNamespace(self):
        for namespace in ("my-app", "my app", "pkg..sub", ""):
            with self.subTest(namespace=namespace):
                self.assertEqual(self.loader.discover(namespace), ())

    def testDiscoverSkipsUnreachableModules(self):
        modules = {"a_b": "from clidispatch import Command\n\n\nclass AB(Command):\n    pass\n", "a_bc": ""}
        with Sandbox(modules) as namespace:
            self.assertEqual(self.loader.discover(namespace), ("ABc",))
            with self.assertRaises(CommandNotFoundError):
                self.loader.load(namespace, "AB")

    def testBuiltinHelp(self):
        from clidispatch import Help
        self.assertIs(self.loader.load("clidispatch.commands", "Help"), Help)

    def testInjectedKeyStrategy(self):
        with Sandbox({"cmds/__init__": "", "cmds/hello": "def entry():\n    return 'hi'\n"}) as namespace:
            loader = ModuleLoader(qualify=lambda namespace, name: "%s.cmds.%s:entry" % (namespace, name.lower()))
            self.assertEqual(loader.load(namespace, "Hello")(), "hi")
            with self.assertRaises(CommandNotFoundError):
                loader.load(namespace, "Bye")

    def testQualifyMustBeCallable(self):
        with self.assertRaises(TypeError):
            ModuleLoader(qualify="%s.%s")


class TestRegistry(TestCase):
    """Explicit registration and parent chaining."""

    def testAddAndLoad(self):
        registry = Registry()

        def make():
            return "made"

        self.assertIs(registry.add("foo", "Make", make), make)
        self.assertIs(registry.load("foo", "Make"), make)

    def testRegisterDecorator(self):
        registry = Registry()

        @registry.register("foo")
        class DumpMe(Command):
            """dump the arguments"""

        @registry.register("foo", "Escape")
        class Unescaped(Command):
            pass

        self.assertIs(registry.load("foo", "DumpMe"), DumpMe)
        self.assertIs(registry.load("foo", "Escape"), Unescaped)
        self.assertEqual(registry.describe("foo", "DumpMe"), "dump the arguments")
        self.assertIsNone(registry.describe("foo", "Escape"))
        self.assertEqual(registry.discover("foo"), ("DumpMe", "Escape"))
        self.assertEqual(registry.discover("bar"), ())

    def testNamespacesAreSeparate(self):
        registry = Registry()
        registry.add("foo", "Bar", object)
        with self.assertRaises(CommandNotFoundError):
            registry.load("other", "Bar")

    def testDuplicateRejected(self):
        registry = Registry()
        registry.add("foo", "Bar", object)
        with self.assertRaises(ValueError):
            registry.add("foo", "Bar", dict)

    def testInvalidRegistrationsRejected(self):
        registry = Registry()
        with self.assertRaises(ValueError):
            registry.add("foo", "dump-me", object)
        with self.assertRaises(TypeError):
            registry.add("", "Bar", object)
        with self.assertRaises(TypeError):
            registry.add("foo", "Bar", "not callable")
        with self.assertRaises(TypeError):
            Registry(parent=object())

    def testParentConsulted(self):
        registry = Registry(parent=ModuleLoader())
        from clidispatch import Help
        self.assertIs(registry.load("clidispatch.commands", "Help"), Help)
        self.assertIn("Help", registry.discover("clidispatch.commands"))
        self.assertTrue(registry.summary("clidispatch.commands", "Help"))
        with self.assertRaises(CommandNotFoundError):
            registry.load("clidispatch_no_such_package", "Help")

    def testRegisteredShadowsParent(self):
        registry = Registry(parent=ModuleLoader())

        @registry.register("clidispatch.commands", "Help")
        def custom():
            """custom help"""

        self.assertIs(registry.load("clidispatch.commands", "Help"), custom)
        self.assertEqual(registry.describe("clidispatch.commands", "Help"), "custom help")


class TestModuleGlob(TestCase):

    def testConcreteNameReturnedAsIs(self):
        self.assertEqual(mglob("clidispatch.commands"), ["clidispatch.commands"])

    def testDirectChildren(self):
        self.assertEqual(mglob("clidispatch.commands.*"), ["clidispatch.commands.help"])

    def testRecursive(self):
        with Sandbox({"cmds/__init__": "", "cmds/hello": "", "cmds/world": "", "hat": ""}) as namespace:
            self.assertEqual(mglob(namespace + ".**.h*"), [namespace + ".cmds.hello", namespace + ".hat"])
            self.assertEqual(mglob(namespace + ".*"), [namespace + ".cmds", namespace + ".hat"])

    def testUnimportablePrefix(self):
        self.assertEqual(mglob("clidispatch_no_such_package.*"), [])

    def testBadPatterns(self):
        with self.assertRaises(ValueError):
            mglob("*.commands")
        with self.assertRaises(ValueError):
            mglob("  ")
        with self.assertRaises(TypeError):
            mglob(None)


if __name__ == "__main__":
    unittest.main()
