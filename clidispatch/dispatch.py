"""
clidispatch dispatcher: resolve a command from the argument stream and run it.

Flow of Dispatcher.run(namespace, argv)
1. namespace: the argument, else the dispatcher's identity.
2. global options are parsed out of the stream (pass-through).
3. the leading token is the raw command name (default_command when absent).
4. load_command() resolves it to a handler instance (see below).
5. the handler's own options are parsed out of what is left.
6. {**global, **local, "namespace": namespace} is attached to the handler.
7. for the help command, the leading token is normalized ("escape" → "Escape").
8. handler.run(*stream).

Resolution (load_command)
- primary (skipped when help is requested): convert_command(raw) under the
  namespace, then under the built-in commands package when the namespace does
  not have it.
- secondary: the raw name goes back to the front of the stream (once) and
  "Help" is tried under the namespace, then under the built-in commands
  package whatever the first try gave; an application Help wins over the
  built-in one, a missing or broken one never hides it.
- neither: HelpUnavailableError (three fixed lines on stderr, exit status 1
  in shell mode; raised otherwise).

Missing and broken commands are told apart by exception type
(CommandNotFoundError / CommandLoadError), never by message text. A broken
command is skipped like a missing one, so the user still reaches help; with
--verbose the failure is reported as a CommandLoadWarning.

Customizing
    class MyScript(Dispatcher):
        options = ("help|h|?", "verbose|v", "stderr")

        def get_command(self, stream):
            # no camelization, single fixed default
            return stream.pop(0) if stream else "Help"

    MyScript().run()
"""
import sys
from collections.abc import Iterable

from .commands import HOME
from .commands.help import Help
from .faults import *
from .loaders import Loader, ModuleLoader
from .naming import normalize
from .options import getoptions
from .utils import *


class Dispatcher:
    """
    Command dispatcher.

    Class attributes (override in subclasses)
    - options: global option specs, parsed before the command is resolved.
    - default_command: raw command used when the stream has none.
    - namespace: package searched for commands; Unset means the top-level
      package of the module defining the dispatcher class.

    Keyword arguments
    - loader: Loader used to locate commands (ModuleLoader by default).
    - shell: on the fatal fault, print and exit (True) or raise (False).
    - colorful: style fault, warning and help output.
    - fancy: wrap help output in a panel.
    """
    options = ("help|h|?", "verbose|v")
    default_command = "help"
    namespace = Unset

    def __init__(self, *, loader=Unset, shell=True, colorful=True, fancy=False):
        if loader is Unset:
            loader = ModuleLoader()
        elif not isinstance(loader, Loader):
            raise TypeError("dispatcher 'loader' must be a Loader instance")
        self.loader = loader
        self.shell = bool(shell)
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self.stream = []
        self._globals = {}

    @property
    def identity(self):
        """Default namespace of this dispatcher."""
        if self.namespace is not Unset:
            return self.namespace
        if type(self) is Dispatcher:
            return HOME
        return type(self).__module__.partition(".")[0]

    def trigger(self, fault, /, **options):
        trigger(fault, **options, shell=self.shell, colorful=self.colorful)

    def get_options(self, specs, /):
        """Parse `specs` out of the stream (pass-through)."""
        return getoptions(specs, self.stream)

    def get_command(self, stream, /):
        """
        Pop the raw command name from the front of `stream`.

        Falls back to default_command when the stream is empty or its leading
        token is an empty string.
        """
        command = stream.pop(0) if stream else ""
        return command or self.default_command

    def convert_command(self, command, /):
        """Canonical form of a raw command name (normalize() by default)."""
        return normalize(command)

    def _instantiate(self, namespace, name):
        factory = self.loader.load(namespace, name)
        try:
            return factory()
        except Exception as error:
            raise CommandLoadError(
                "command %r cannot be constructed: %s" % (name, error),
                code=FaultCode.COMMAND_BROKEN,
            ) from error

    def _report(self, fault):
        if not self._globals.get("verbose"):
            return
        self.trigger(CommandLoadWarning(
            fault.message,
            title="command not loaded",
            code=FaultCode.COMMAND_LOAD_WARNING,
            hint="falling back to help; check that the command's prerequisites are installed",
        ))

    def _attempt(self, namespace, name):
        try:
            return self._instantiate(namespace, name)
        except CommandLoadError as fault:
            self._report(fault)
        except CommandNotFoundError:
            pass
        return None

    def _load_command(self, namespace, name):
        """
        One lookup attempt: `name` under `namespace`, then under the built-in
        commands when the namespace does not have it. None when nothing loads.
        """
        try:
            return self._instantiate(namespace, name)
        except CommandLoadError as fault:
            self._report(fault)
            return None
        except CommandNotFoundError:
            if namespace == HOME:
                return None
        return self._attempt(HOME, name)

    def load_command(self, namespace, command, help=False, /):
        """
        Resolve raw `command` under `namespace` to a handler instance.

        See the module docstring for the protocol. Never returns None: when
        even help cannot be loaded the fatal fault is triggered.
        """
        if not help and (instance := self._load_command(namespace, self.convert_command(command))) is not None:
            return instance

        # maybe the command is documentation only, or a typo: let help explain
        self.stream.insert(0, command)
        for home in dict.fromkeys((namespace, HOME)):
            if (instance := self._attempt(home, "Help")) is not None:
                return instance

        self.trigger(HelpUnavailableError(
            title="help unavailable",
            code=FaultCode.HELP_UNAVAILABLE,
        ))

    def run(self, namespace=Unset, /, argv=Unset):
        """
        Dispatch one invocation and return whatever the command's run() returns.

        Parameters
        - namespace: package searched for commands (default: identity).
        - argv: iterable of strings (default: sys.argv[1:]); copied, never mutated.
        """
        namespace = coalesce(namespace, "") or self.identity
        if not isinstance(namespace, str):
            raise TypeError("run() namespace must be a string")

        if argv is Unset:
            argv = sys.argv[1:]
        elif isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("run() argv must be an iterable of strings")
        self.stream = list(argv)
        if not all(isinstance(token, str) for token in self.stream):
            raise TypeError("run() argv must be an iterable of strings")

        self._globals = self.get_options(self.options)
        command = self.get_command(self.stream)
        handler = self.load_command(namespace, command, bool(self._globals.get("help", False)))
        local = self.get_options(handler.options)

        handler.set_options({**self._globals, **local, "namespace": namespace})

        if isinstance(handler, Help):
            handler.loader = self.loader
            handler.colorful = self.colorful
            handler.fancy = self.fancy
            if self.stream:
                self.stream[0] = self.convert_command(self.stream[0])

        return handler.run(*self.stream)


def invoke(namespace=Unset, argv=Unset, /, **options):
    """
    Convenience runner: Dispatcher(**options).run(namespace, argv).
    """
    return Dispatcher(**options).run(namespace, argv)


__all__ = (
    "Dispatcher",
    "invoke",
)
