"""
clidispatch faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every fault the dispatcher knows.
- DispatchException / DispatchWarning: base types carrying a message plus
  options, able to render themselves through rich and to trigger themselves.
- trigger(): central entry point to surface any fault (respecting shell mode).
- getdoc(): optional description lookup for a code from the host application.

Fault model
- CommandNotFoundError: the requested command does not exist. Recovered by
  the resolver (fallback to help); never reaches the user.
- CommandLoadError: the command exists but cannot be loaded (import failure,
  missing dependency, exception while constructing it). Recovered by the
  resolver the same way; surfaced as CommandLoadWarning when verbose.
- HelpUnavailableError: even the help command cannot be loaded. The only
  fatal fault: three fixed lines on stderr, then exit status 1.

Integration
- In shell mode faults are rendered on the stderr console and errors exit the
  process; otherwise errors are raised and warnings go through warnings.warn.
"""
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the dispatcher (stable identifiers).

    grouping (by high-level domain)
    - routing (2110x)
      • COMMAND_NOT_FOUND, COMMAND_BROKEN
    - installation (2120x)
      • HELP_UNAVAILABLE
    - warnings (2210x)
      • COMMAND_LOAD_WARNING
    """
    # --- routing errors (21xxx) ---
    COMMAND_NOT_FOUND           = 21101
    COMMAND_BROKEN              = 21102

    # --- installation errors (21xxx) ---
    HELP_UNAVAILABLE            = 21201

    # --- warnings (22xxx) ---
    COMMAND_LOAD_WARNING        = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        relabel codes; without one, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _palette(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _render(fault, styles, kind):
    """
    shared rich layout: "[ prog — code | title ]", message, "→ hint".

    without an explicit hint, the host documentation for the code is used.
    """
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styles[style])

    main = __import__("__main__")
    prog = getattr(main, "__prog__", fault.options.get("prog") or "clidispatch")
    code = fault.options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if code else "", "code"),
        " | ",
        text(str(fault.options.get("title", "")).title(), kind + "-title"),
        " ]"
    )
    message = text(fault.message, kind + "-message")
    if not (hint := fault.options.get("hint")) and isinstance(code, FaultCode):
        hint = getdoc(code)
    if not hint:
        return Group(header, message)
    return Group(header, message, Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))


class DispatchException(Exception):
    """
    base dispatcher error: a message plus a read-only mapping of options.

    options understood by rendering/triggering
    - shell: print and exit instead of raising (default False)
    - colorful: style the rendering (default True)
    - title, code, hint, prog: header/hint content
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }), "error")

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self, soft_wrap=True)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandNotFoundError(DispatchException):
    """the command identity does not exist under the namespace."""


class CommandLoadError(DispatchException):
    """the command identity exists but cannot be loaded or constructed."""


class HelpUnavailableError(DispatchException):
    """
    neither the requested command nor the help command can be loaded.

    the rendering is always the same three lines; the cause is an installation
    problem the user cannot fix from the command line.
    """
    lines = (
        "Help command is missing or broken.",
        "Prerequisite modules may not be installed.",
        "Please check your installation.",
    )

    def __init__(self, message=Unset, /, **options):
        super().__init__(" ".join(self.lines) if message is Unset else message, **options)

    def __rich__(self):
        return Group(*(Text(line) for line in self.lines))


class DispatchWarning(ABC, Warning):
    """
    base dispatcher warning; same option contract as DispatchException.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, _palette({
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }), "warning")

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self, soft_wrap=True)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandLoadWarning(DispatchWarning):
    """a command failed to load and the dispatcher fell back to help."""


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) first.
    - errors raise (or print and exit in shell mode); warnings warn (or print).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; None when absent.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "DispatchException",
    "CommandNotFoundError",
    "CommandLoadError",
    "HelpUnavailableError",
    "DispatchWarning",
    "CommandLoadWarning",
    "trigger",
    "getdoc",
)
