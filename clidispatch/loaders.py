"""
clidispatch loaders: locate command factories by (namespace, name).

A loader answers three questions for the dispatcher and the help command:
- load(namespace, name): the command factory (usually a Command subclass),
  or CommandNotFoundError / CommandLoadError. Classification is structural:
  the exception type says whether the identity is missing or broken.
- describe(namespace, name): the command's documentation, or None, obtained
  without running the command's module when possible.
- discover(namespace): the canonical names of the commands available there.

Loaders
- ModuleLoader: commands are Python modules under a package. The qualified
  key of ("myscript", "DumpMe") is "myscript.dump_me:DumpMe": module
  myscript.dump_me, attribute DumpMe. The key strategy is injectable.
- Registry: commands registered explicitly (decorator or call), optionally
  backed by a parent loader consulted for identities it does not know.

Caching
- importlib caches modules in sys.modules; ModuleLoader also remembers the
  resolved factory per key, so repeated loads are cheap and never re-run
  module code. Failures are not cached.
"""
import ast
import importlib
import importlib.util
import inspect
import re

from .faults import *
from .naming import normalize, decamelize
from .utils import *


def qualify(namespace, name, /):
    """
    default key strategy: ("myscript", "DumpMe") → "myscript.dump_me:DumpMe".
    """
    if not isinstance(namespace, str) or not isinstance(name, str):
        raise TypeError("qualify() arguments must be strings")
    return "%s.%s:%s" % (namespace, decamelize(name), name)


def _docstring(factory):
    # own docstring only; inspect.getdoc would inherit the base Command's
    if not isinstance(doc := getattr(factory, "__doc__", None), str):
        return None
    return inspect.cleandoc(doc)


def _summary(doc):
    """first non-empty line of a docstring."""
    return next((line.strip() for line in (doc or "").splitlines() if line.strip()), "")


class Loader:
    """
    Base loader. Subclasses implement load(); describe() and discover() are
    optional and default to "nothing known".
    """

    def load(self, namespace, name, /):
        raise NotImplementedError

    def describe(self, namespace, name, /):
        return None

    def discover(self, namespace, /):
        return ()

    def summary(self, namespace, name, /):
        """first line of describe(), "" when undocumented."""
        return _summary(self.describe(namespace, name))


class ModuleLoader(Loader):
    """
    Load commands from modules with importlib.

    not found (CommandNotFoundError)
    - the name is not an identifier (e.g. normalized to "").
    - the command module, or one of its parent packages, does not exist.
    - the module exists but lacks the attribute, or the attribute is not callable.

    broken (CommandLoadError)
    - importing the module raises anything else: a missing third-party
      module imported by the command, a SyntaxError, an exception at import.
    """

    def __init__(self, *, qualify=qualify):
        if not callable(qualify):
            raise TypeError("ModuleLoader 'qualify' must be callable")
        self._qualify = qualify
        self._cache = {}

    def _split(self, namespace, name):
        key = self._qualify(namespace, name)
        module, _, attribute = key.partition(":")
        return key, module, attribute or name

    def load(self, namespace, name, /):
        key, module, attribute = self._split(namespace, name)

        if key in self._cache:
            return self._cache[key]

        if not name.isidentifier() or not all(map(str.isidentifier, module.split("."))):
            raise CommandNotFoundError("no command %r in %r" % (name, namespace), code=FaultCode.COMMAND_NOT_FOUND, key=key)

        try:
            target = importlib.import_module(module)
        except ModuleNotFoundError as error:
            # only the command module (or a parent package) missing means "not found"
            if error.name and (module == error.name or module.startswith(error.name + ".")):
                raise CommandNotFoundError("no command %r in %r" % (name, namespace), code=FaultCode.COMMAND_NOT_FOUND, key=key) from None
            raise CommandLoadError("command %r cannot be loaded: %s" % (name, error), code=FaultCode.COMMAND_BROKEN, key=key) from error
        except Exception as error:
            raise CommandLoadError("command %r cannot be loaded: %s" % (name, error), code=FaultCode.COMMAND_BROKEN, key=key) from error

        factory = getattr(target, attribute, None)
        if not callable(factory):
            raise CommandNotFoundError("module %r defines no command %r" % (module, attribute), code=FaultCode.COMMAND_NOT_FOUND, key=key)

        self._cache[key] = factory
        return factory

    def describe(self, namespace, name, /):
        """
        documentation of a command, read from source without importing it.

        the class docstring wins over the module docstring; a module holding
        only a docstring still documents its command. already-loaded factories
        are asked directly.
        """
        key, module, attribute = self._split(namespace, name)

        if key in self._cache:
            return _docstring(self._cache[key])

        if not name.isidentifier():
            return None
        try:
            spec = importlib.util.find_spec(module)
        except (ImportError, ValueError):
            return None
        except Exception:
            # a parent package failed to import; a broken command has no docs to offer
            return None
        if spec is None or spec.loader is None or not hasattr(spec.loader, "get_source"):
            return None

        try:
            source = spec.loader.get_source(module)
            tree = ast.parse(source or "")
        except (ImportError, OSError, SyntaxError, ValueError):
            return None

        for node in tree.body:
            if isinstance(node, ast.ClassDef) and node.name == attribute and (doc := ast.get_docstring(node)):
                return doc
        return ast.get_docstring(tree)

    def discover(self, namespace, /):
        """
        canonical names of the command modules directly under `namespace`.

        only modules the default key strategy can reach are listed: "a_b.py"
        normalizes to "AB", which decamelizes to "ab", so it is left out.
        """
        if not all(map(str.isidentifier, namespace.split("."))):
            return ()
        names = []
        for module in mglob(namespace + ".*"):
            basename = module.rpartition(".")[2]
            if basename.startswith("_"):
                continue
            if decamelize(name := normalize(basename)) != basename:
                continue
            names.append(name)
        return tuple(sorted(set(names)))


class Registry(Loader):
    """
    Explicit command registry, optionally chained to a parent loader.

    Example
        registry = Registry(parent=ModuleLoader())

        @registry.register("myscript")
        class DumpMe(Command):
            ...

        registry.add("myscript", "Escape", make_escape)

    Lookups of unregistered identities go to the parent (when given) and are
    otherwise not found.
    """

    def __init__(self, *, parent=Unset, qualify=qualify):
        if parent is not Unset and not isinstance(parent, Loader):
            raise TypeError("Registry 'parent' must be a loader")
        if not callable(qualify):
            raise TypeError("Registry 'qualify' must be callable")
        self._parent = parent
        self._qualify = qualify
        self._factories = {}
        self._names = {}

    def add(self, namespace, name, factory, /):
        """
        register `factory` as command `name` under `namespace`.
        """
        if not isinstance(namespace, str) or not namespace:
            raise TypeError("registry namespace must be a non-empty string")
        if not isinstance(name, str) or not re.fullmatch(r"\w+", name):
            raise ValueError("registry command name must be a canonical identifier")
        if not callable(factory):
            raise TypeError("registry factory must be callable")
        if (key := self._qualify(namespace, name)) in self._factories:
            raise ValueError("command %r is already registered under %r" % (name, namespace))
        self._factories[key] = factory
        self._names.setdefault(namespace, []).append(name)
        return factory

    def register(self, namespace, name=Unset, /):
        """
        decorator form of add(); the name defaults to the factory's __name__.
        """

        @rename("register")
        def wrapper(factory):
            return self.add(namespace, coalesce(name, getattr(factory, "__name__", "")), factory)

        return wrapper

    def load(self, namespace, name, /):
        try:
            return self._factories[self._qualify(namespace, name)]
        except KeyError:
            if self._parent is Unset:
                raise CommandNotFoundError("no command %r in %r" % (name, namespace), code=FaultCode.COMMAND_NOT_FOUND) from None
        return self._parent.load(namespace, name)

    def describe(self, namespace, name, /):
        if (factory := self._factories.get(self._qualify(namespace, name))) is not None:
            return _docstring(factory)
        if self._parent is Unset:
            return None
        return self._parent.describe(namespace, name)

    def discover(self, namespace, /):
        names = set(self._names.get(namespace, ()))
        if self._parent is not Unset:
            names.update(self._parent.discover(namespace))
        return tuple(sorted(names))


__all__ = (
    "qualify",
    "Loader",
    "ModuleLoader",
    "Registry",
)
