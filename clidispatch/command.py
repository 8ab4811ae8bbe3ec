"""
Base class for dispatched commands.

A command is any class that can be built with no arguments and offers:
- options: the command's own option specs (strings or OptionSpec), parsed
  from the stream after the global options;
- set_options(context): receives the merged execution context (global options,
  command options, and the reserved "namespace" key);
- run(*args): the entry point, called with the remaining positional tokens.

Command provides all three plus a couple of conveniences (context accessors
and log()). Subclass it, write a docstring (it is what `help <command>`
shows) and implement run().

    class DumpMe(Command):
        \"""dump the arguments (or the command itself)\"""

        options = ("pretty|p",)

        def run(self, *args):
            self.log("debug", "dumping %d argument(s)" % len(args))
            ...
"""
from types import MappingProxyType

from rich.console import Console
from rich.text import Text

# [level] prefix colors for Command.log()
_levels = {
    "debug": "dim",
    "info": "bold #36C5F0",
    "warn": "bold #FFB400",
    "warning": "bold #FFB400",
    "error": "bold #FF4DA6",
    "fatal": "bold #FF4DA6",
}


class Command:
    options = ()

    def __init__(self):
        self._context = MappingProxyType({})

    @property
    def context(self):
        """Merged execution context (read-only mapping)."""
        return self._context

    @property
    def namespace(self):
        return self._context.get("namespace")

    @property
    def verbose(self):
        return bool(self._context.get("verbose", False))

    def set_options(self, context, /):
        """
        Attach the merged execution context.

        The dispatcher calls this once, before run(); the mapping is frozen.
        """
        self._context = MappingProxyType(dict(context))

    def option(self, name, default=None, /):
        """Value of option `name` in the context, or `default`."""
        return self._context.get(name, default)

    def log(self, level, /, *messages):
        """
        Write "[level] message" to stderr.

        debug lines only show when the context has verbose set.
        """
        if level == "debug" and not self.verbose:
            return
        console = Console(stderr=True)
        console.print(
            Text.assemble(("[%s]" % level, _levels.get(level, "")), " ", " ".join(map(str, messages))),
            soft_wrap=True,
        )

    def run(self, *args):
        raise NotImplementedError("%s.run() is not implemented" % type(self).__name__)


__all__ = (
    "Command",
)
