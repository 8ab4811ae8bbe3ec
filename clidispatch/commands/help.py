"""
Built-in help command.

`help` with no argument lists the commands found under the active namespace
and under clidispatch itself; `help <command>` prints that command's
documentation. The dispatcher falls back to this command whenever the
requested command cannot be loaded, so the documentation of a command whose
module is broken (or that is documentation only) is still reachable: it is
read from the source file, the module is not executed.

Rendering
- colorful: styled output (the dispatcher passes its own flag).
- fancy: wrap the output in a panel titled "[ PROG HELP ]".

Palette keys (override through a __styles__ mapping in __main__)
- usage-label, program-name, usage-section
- children-title, children, children-description
- command-title, command-doc, unknown-command, hint
- panel-title
"""
import os.path
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..command import Command
from ..loaders import ModuleLoader
from ..naming import decamelize

from . import HOME


def _display(name):
    return decamelize(name).replace("_", "-")


class Help(Command):
    """
    show the list of commands, or the documentation of one command

    usage: help [command]
    """
    fancy = False
    colorful = True

    def __init__(self):
        super().__init__()
        self.loader = ModuleLoader()

    @property
    def prog(self):
        return getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) or "clidispatch")

    def _styles(self):
        if not self.colorful:
            return defaultdict(str)
        return defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "children-title": "bold #FFFFFF",
            "children": "bold #36C5F0",
            "children-description": "#9CA3AF",
            "command-title": "bold #FF4D94",
            "command-doc": "",
            "unknown-command": "bold #FF4DA6",
            "hint": "italic #9CE19C",
            "panel-title": "bold #00E6FF",
        } | getattr(__import__("__main__"), "__styles__", {}))

    def _print(self, renderable, styles):
        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", ("%s help" % self.prog).upper(), " ", "]", style=styles["panel-title"]),
                title_align="left",
            )
        Console().print(renderable)

    def _namespaces(self):
        namespace = self.namespace or HOME
        return (namespace,) if namespace == HOME else (namespace, HOME)

    def commands(self):
        """
        (display-name, summary) pairs for every command that can be found.

        application commands shadow built-in ones of the same name.
        """
        found = {}
        for namespace in self._namespaces():
            for name in self.loader.discover(namespace):
                if name and name not in found:
                    found[name] = self.loader.summary(namespace, name)
        return [(_display(name), summary) for name, summary in sorted(found.items())]

    def describe(self, name, /):
        """Documentation of command `name`, or None."""
        for namespace in self._namespaces():
            if doc := self.loader.describe(namespace, name):
                return doc
        return None

    def overview(self):
        styles = self._styles()
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style=styles["children"], no_wrap=True)
        table.add_column(style=styles["children-description"])
        for name, summary in self.commands():
            table.add_row(name, summary)

        self._print(Group(
            Text.assemble(
                ("usage: ", styles["usage-label"]),
                (self.prog, styles["program-name"]),
                (" <command> [options] [args]", styles["usage-section"]),
            ),
            Text(""),
            Text("commands:", styles["children-title"]),
            table,
        ), styles)
        return 0

    def run(self, *args):
        if not args:
            return self.overview()

        name = args[0]
        styles = self._styles()
        if not (doc := self.describe(name)):
            Console(stderr=True).print(Group(
                Text.assemble("unknown command ", (repr(_display(name)), styles["unknown-command"])),
                Text("run '%s help' to see available commands" % self.prog, styles["hint"]),
            ), soft_wrap=True)
            return 1

        self._print(Group(
            Text(_display(name), styles["command-title"]),
            Text(""),
            Text(doc, styles["command-doc"]),
        ), styles)
        return 0


__all__ = (
    "Help",
)
