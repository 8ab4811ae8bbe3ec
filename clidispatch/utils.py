"""
clidispatch utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the option, loader and dispatch layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level modules.

Overview
- UnsetType / Unset
  • Singleton sentinel for "value not provided", distinct from None.
  • Falsey, printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default; None/0/""/[] are preserved.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated accessors.

- mirror("attr")
  • Read-only property exposing the private backing field self._attr, handing
    out copies of containers so public state cannot be mutated in place.

- mglob(pattern)
  • Module globbing: expands "pkg.*" or "pkg.**.cmd_*" into importable module
    names without importing the matched modules themselves.

Usage guidance
- Prefer Unset for API defaults when None is a meaningful user value.
- Names not in __all__ are internal and may change without notice.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
"""
import builtins
import functools
import importlib
import pkgutil
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a singleton per process.
    """

    def __or__(self, other, /):
        """
        Support `UnsetType | T` unions in isinstance checks and annotations.
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support `T | UnsetType` unions in isinstance checks and annotations.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns `object` unless it is Unset, in which case `default` is returned.
    Falsey values such as None, 0, "" or [] are returned as-is.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Shallow-recursive copy of container values so callers get their own copy.

    Sequences (non-string) become tuples, mappings become dicts and sets become
    frozensets; anything else is returned unchanged.
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes)):
        return tuple(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return frozenset(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Example
    - Given self._names, declare names = mirror("names") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def _translate_segment(segment):
    """
    translate one glob segment into a regex snippet that never matches a dot.
      *       → zero or more non-dot chars
      ?       → exactly one non-dot char
      [...]   → character class, [!...] negated
    """
    parts = []
    index = 0
    while index < len(segment):
        char = segment[index]
        if char == "*":
            parts.append(r"[^.]*")
        elif char == "?":
            parts.append(r"[^.]")
        elif char == "[" and (end := segment.find("]", index + 2)) != -1:
            body = segment[index + 1:end]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append("[" + body + "]")
            index = end
        else:
            parts.append(re.escape(char))
        index += 1
    return "".join(parts)


@functools.cache
def _compile_pattern(pattern):
    """
    compile a dotted module glob into a regex.
    - '**' is a whole-segment wildcard for zero or more segments
    - other segments go through _translate_segment()
    """
    parts = []
    for segment in pattern.split("."):
        if segment == "**":
            parts.append(r"(?:\.[A-Za-z_]\w*)*")
        else:
            parts.append(r"\." + _translate_segment(segment))
    return re.compile("".join(parts).removeprefix(r"\."))


def mglob(source, /):
    """
    expand a dot-separated module glob into fully-qualified module names.

    rules
    - must start with at least one concrete segment (no wildcard-only prefix).
    - when no wildcard is present, returns [source] unchanged.
    - the concrete prefix is imported (to find its __path__); matched plain
      modules are only discovered, never imported ('**' walks subpackages,
      which imports them).
    - a prefix that cannot be imported yields an empty list.
    - matches are returned sorted.

    examples
    - "myscript.*"          → direct children of myscript
    - "myscript.**.cmd_*"   → any cmd_* module below myscript
    """
    if not isinstance(source, str):
        raise TypeError("mglob() argument must be a string")
    elif not (source := source.strip()):
        raise ValueError("mglob() argument must be a non-empty string")

    if re.fullmatch(r"(?!\d)\w+(\.(?!\d)\w+)*", source):
        return [source]

    prefixes = []
    for segment in source.split("."):
        if not re.fullmatch(r"(?!\d)\w+", segment):
            break
        prefixes.append(segment)

    if not prefixes:
        raise ValueError("mglob() pattern must start with a concrete package segment")

    try:
        package = importlib.import_module(prefix := ".".join(prefixes))
    except ImportError:
        return []

    pattern = _compile_pattern(source)
    matches = set()

    if pattern.fullmatch(prefix):
        matches.add(prefix)

    if hasattr(package, "__path__"):
        # iter_modules for direct children, walk only when '**' asks for depth
        walker = pkgutil.walk_packages if "**" in source else pkgutil.iter_modules
        for metadata in walker(package.__path__, prefix + "."):
            if pattern.fullmatch(name := metadata.name):
                matches.add(name)

    return sorted(matches)


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "mglob",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
