"""
Command-name normalization.

A command typed on the shell ("dump-me", "dump_me", "escape") is turned into a
canonical identifier ("DumpMe", "Escape") before it is looked up, and the
canonical identifier is turned back into a module basename ("dump_me") by the
module loader and the help listing.

Rules
- camelize(): split on word boundaries and on underscores sitting between two
  letters, upper-case the first letter of every piece, join. The remainder of
  each piece keeps its case ("HTTPServer" stays "HTTPServer").
- normalize(): camelize, then drop every character outside [A-Za-z0-9_].
  Total: "", "--" or "?!" all normalize to "".
- decamelize(): "DumpMe" → "dump_me", "HTTPServer" → "http_server".
  Not an exact inverse: runs of single-letter words merge ("a_b" → "AB" →
  "ab"), so such module basenames cannot be reached by name.
"""
import functools
import re


def camelize(text, /):
    """
    camel-case a command token ("dump-me" → "Dump-Me", "dump_me" → "DumpMe").

    separators other than letter_letter underscores are kept; normalize()
    strips them afterwards.
    """
    if not isinstance(text, str):
        raise TypeError("camelize() argument must be a string")
    pieces = re.split(r"(?<=[A-Za-z])_(?=[A-Za-z])|\b", text)
    return "".join(piece[:1].upper() + piece[1:] for piece in pieces)


@functools.cache
def normalize(text, /):
    """
    canonical command identifier for a raw token.

    >>> normalize("dump-me")
    'DumpMe'
    >>> normalize("--")
    ''
    """
    if not isinstance(text, str):
        raise TypeError("normalize() argument must be a string")
    return re.sub(r"[^A-Za-z0-9_]", "", camelize(text))


@functools.cache
def decamelize(name, /):
    """
    module basename for a canonical identifier ("DumpMe" → "dump_me").
    """
    if not isinstance(name, str):
        raise TypeError("decamelize() argument must be a string")
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name)
    return re.sub(r"_+", "_", name).lower()


__all__ = (
    "camelize",
    "normalize",
    "decamelize",
)
