r"""
clidispatch option specifications and the pass-through option parser.

Overview
- OptionSpec: one declared option (canonical name, aliases, arity, converter).
  Specs are usually written in the compact Getopt-like string form:
  • "verbose|v"        flag (True when present)
  • "help|h|?"         flag with a symbolic alias
  • "color!"           negatable flag (--no-color / --nocolor store False)
  • "output|o=s"       mandatory string value
  • "level=i"          mandatory integer value ("=f" for floats)
  • "tag:s"            optional value ("" when absent, 0 for ":i"/":f")
  • "include|I=s@"     list; every occurrence appends

- getoptions(specs, stream): consume the declared options from an argument
  stream (a list, mutated in place) and return {canonical-name: value}.

Parsing policy (fixed for every call)
- Bundling: single-character options may be grouped ("-vh" is "-v -h"); a
  value option inside a bundle takes the rest of the bundle, or the next
  token when it is last ("-ofile", "-vo file").
- Case-insensitive matching of names; single characters prefer an exact
  match so "-v" and "-V" may still be declared separately.
- Unique prefixes of long names are accepted ("--verb" for "--verbose").
- Permutation: options are recognized anywhere in the stream; scanning stops
  at a literal "--", which stays in the stream with everything after it.
- Pass-through: anything the specs do not own is left in place, in order.
  Unknown or ambiguous names, a flag given "=value", a missing mandatory
  value or a value failing conversion never raise; the offending tokens stay
  where they were. A bundle holding any unknown character is left whole.
  This lets two passes (global, then command-local) share one stream.

Quick example
    >>> stream = ["dump-me", "-v", "--out=file.txt", "rest"]
    >>> getoptions(["verbose|v", "out=s"], stream)
    {'verbose': True, 'out': 'file.txt'}
    >>> stream
    ['dump-me', 'rest']
"""
import re
from collections import deque

from .utils import *

# single source of truth for the value letters accepted after '=' / ':'
_converters = {
    "s": str,
    "i": int,
    "f": float,
}

_arities = ("flag", "single", "list")


class OptionSpec:
    """
    Declared option: canonical name, aliases, arity and value converter.

    Fields (read-only)
    - names: tuple[str, ...]; the first entry is the canonical name used as the
      key of the parsed option set.
    - arity: "flag" | "single" | "list".
    - type: converter applied to raw values (str, int, float or any callable
      raising ValueError/TypeError on bad input); unused for flags.
    - optional: value may be omitted (single/list only).
    - negatable: flag accepts --no-<name> / --no<name> (flags only).

    Construction
    - OptionSpec("output", "o", arity="single")
    - OptionSpec.parse("output|o=s")
    - OptionSpec.coerce(x) accepts either form.
    """
    __slots__ = ("_names", "_arity", "_type", "_optional", "_negatable")

    names = mirror("names")
    arity = mirror("arity")
    type = mirror("type")
    optional = mirror("optional")
    negatable = mirror("negatable")

    def __init__(self, *names, arity="flag", type=str, optional=False, negatable=False):
        if not names:
            raise TypeError("option spec must specify at least one name")

        sanitized = []
        for name in names:
            if not isinstance(name, str):
                raise TypeError("option spec names must be strings")
            elif not (name := name.strip()):
                raise ValueError("option spec names cannot be empty")
            elif re.search(r"[\s|=:!@]", name) or name.startswith("-"):
                raise ValueError("option spec name %r is not a valid option name" % name)
            elif name in sanitized:
                raise ValueError("option spec names cannot contain duplicates")
            sanitized.append(name)

        if arity not in _arities:
            raise ValueError("option spec arity must be one of %s" % ", ".join(map(repr, _arities)))
        if not callable(type):
            raise TypeError("option spec 'type' must be callable")
        if negatable and arity != "flag":
            raise ValueError("only flags can be negatable")
        if optional and arity == "flag":
            raise ValueError("flags cannot take an optional value")

        self._names = tuple(sanitized)
        self._arity = arity
        self._type = type
        self._optional = bool(optional)
        self._negatable = bool(negatable)

    @classmethod
    def parse(cls, text, /):
        """
        Build a spec from its compact string form ("name|alias=s@", "flag!", ...).
        """
        if not isinstance(text, str):
            raise TypeError("option spec must be a string")
        match = re.fullmatch(r"(?P<names>[^=:!@]+?)(?:(?P<negatable>!)|(?P<mode>[=:])(?P<type>\w)(?P<list>@)?)?", text.strip())
        if not match:
            raise ValueError("bad option spec %r" % text)
        if match["type"] and match["type"] not in _converters:
            raise ValueError("bad value type %r in option spec %r" % (match["type"], text))

        if match["mode"]:
            arity = "list" if match["list"] else "single"
            type = _converters[match["type"]]
        else:
            arity = "flag"
            type = str

        return cls(
            *match["names"].split("|"),
            arity=arity,
            type=type,
            optional=match["mode"] == ":",
            negatable=bool(match["negatable"]),
        )

    @classmethod
    def coerce(cls, object, /):
        """
        Return `object` when it already is a spec, parse it when it is a string.
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, str):
            return cls.parse(object)
        raise TypeError("option specs must be strings or OptionSpec instances")

    @property
    def name(self):
        """Canonical name (key in the parsed option set)."""
        return self._names[0]

    def convert(self, value, /):
        """
        Convert one raw value; Unset when the converter rejects it.
        """
        try:
            return self._type(value)
        except (TypeError, ValueError):
            return Unset

    def __str__(self):
        text = "|".join(self._names)
        if self._negatable:
            return text + "!"
        if self._arity == "flag":
            return text
        letter = next((key for key, value in _converters.items() if value is self._type), "s")
        return text + (":" if self._optional else "=") + letter + ("@" if self._arity == "list" else "")

    def __eq__(self, other):
        if not isinstance(other, OptionSpec):
            return NotImplemented
        return tuple(self.__rich_repr__()) == tuple(other.__rich_repr__())

    def __hash__(self):
        return hash(tuple(self.__rich_repr__()))

    def __rich_repr__(self):
        yield "names", self._names
        yield "arity", self._arity
        yield "type", self._type
        yield "optional", self._optional
        yield "negatable", self._negatable

    def __repr__(self):
        return "option-spec(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class _Lookup:
    """
    name tables for one getoptions() call.
    - folded: lower-cased name → spec (first declaration wins on a case clash)
    - exact: name → spec, used first for single-character bundles
    """

    def __init__(self, specs):
        self.specs = tuple(specs)
        self.folded = {}
        self.exact = {}
        for spec in self.specs:
            for name in spec.names:
                if name in self.exact:
                    raise ValueError("option name %r is declared twice" % name)
                self.exact[name] = spec
                self.folded.setdefault(name.lower(), spec)

    def long(self, name):
        """
        resolve a long name into (spec, negated) or None.
        """
        key = name.lower()
        if not key:
            return None
        if spec := self.folded.get(key):
            return spec, False
        for prefix in ("no-", "no"):
            if key.startswith(prefix) and (spec := self.folded.get(key[len(prefix):])) and spec.negatable:
                return spec, True
        # unique abbreviation; several aliases of one spec still count as one
        candidates = list(dict.fromkeys(spec for folded, spec in self.folded.items() if folded.startswith(key)))
        if len(candidates) == 1:
            return candidates[0], False
        return None

    def short(self, char):
        return self.exact.get(char) or self.folded.get(char.lower())


def _is_switch(token):
    # negative numbers are values, not options
    return token.startswith("-") and len(token) > 1 and not re.fullmatch(r"-\d+(\.\d*)?", token)


def _fetch(spec, inline, tokens):
    """
    read and convert the value of a single/list option.

    inline is the text glued to the option ("--name=value", "-nvalue") or Unset.
    the next stream token is only consumed when it converts; on failure the
    stream is left untouched and Unset is returned (optional specs fall back
    to the converter's empty value instead).
    """
    if inline is not Unset:
        return spec.convert(inline)
    if tokens and tokens[0] != "--" and not (spec.optional and _is_switch(tokens[0])):
        if (value := spec.convert(tokens[0])) is not Unset:
            tokens.popleft()
            return value
    if spec.optional:
        return spec.type()
    return Unset


def _assign(options, spec, value):
    if spec.arity == "list":
        options.setdefault(spec.name, []).append(value)
    else:
        options[spec.name] = value


def _take_long(lookup, token, tokens, options):
    """
    handle one "--name[=value]" token; False when the token is not ours.
    """
    name, equals, inline = token[2:].partition("=")
    if not (match := lookup.long(name)):
        return False
    spec, negated = match

    if spec.arity == "flag":
        if equals:
            return False
        _assign(options, spec, not negated)
        return True

    if (value := _fetch(spec, inline if equals else Unset, tokens)) is Unset:
        return False
    _assign(options, spec, value)
    return True


def _take_bundle(lookup, token, tokens, options):
    """
    handle one "-abc" token; the whole bundle is ours or none of it is.
    """
    body = token[1:]
    assignments = []
    for index, char in enumerate(body):
        if not (spec := lookup.short(char)):
            return False
        if spec.arity == "flag":
            assignments.append((spec, True))
            continue
        rest = body[index + 1:]
        if (value := _fetch(spec, rest or Unset, tokens)) is Unset:
            return False
        assignments.append((spec, value))
        break

    for spec, value in assignments:
        _assign(options, spec, value)
    return True


def getoptions(specs, stream, /):
    """
    Parse declared options out of `stream` and return them as a dict.

    Parameters
    - specs: iterable of OptionSpec or compact spec strings.
    - stream: list[str]; matched tokens (and their values) are removed in
      place, everything else keeps its relative order.

    Returns
    - dict mapping canonical names to True/False (flags), converted values
      (single) or lists of converted values (list). Options absent from the
      stream are absent from the result.

    Raises
    - TypeError: stream is not a list, or a spec has the wrong type.
    - ValueError: a spec string is malformed or a name is declared twice.
    """
    if not isinstance(stream, list):
        raise TypeError("getoptions() second argument must be a list")

    lookup = _Lookup(map(OptionSpec.coerce, specs))
    options = {}

    if not lookup.specs:
        return options

    tokens = deque(stream)
    kept = []

    while tokens:
        token = tokens.popleft()

        if token == "--":
            kept.append(token)
            kept.extend(tokens)
            break

        if token.startswith("--"):
            taken = _take_long(lookup, token, tokens, options)
        elif _is_switch(token):
            taken = _take_bundle(lookup, token, tokens, options)
        else:
            taken = False

        if not taken:
            kept.append(token)

    stream[:] = kept
    return options


__all__ = (
    "OptionSpec",
    "getoptions",
)
