"""
Interactive shell sessions.

A ShellSession is started by the built-in shell action of a command. It reads
one line at a time, runs it against the root of the tree, prints the outcome
and keeps going until the user types "exit"/"quit", input ends, or a handler
calls context.exit(code).

Transcript
    Starting shell for command "my-command"
    [my-command][1] $ foo
    foo executed
    [my-command][2] $ exit
    shell exited with code 0

Lifecycle
- STARTED: the banner is printed and "shell_start" hooks fire (shell action
  first, then each ancestor up to the root).
- RUNNING: prompt, read, echo, run; faults of a line are printed and never
  end the session.
- STOPPED: "shell_stop" hooks fire and the exit code is reported. The session
  stops this way even when a hook or a read fails; the failure then
  propagates to the shell action.
"""
import logging
import shlex
from enum import Enum

from .invocations import Completed, Failed, Stopped, execute
from .displays import materialize
from .faults import IllegalArgumentError, IllegalCommandError, render
from .resolver import NESTED_SHELL_MESSAGE

logger = logging.getLogger(__name__)

EXIT_COMMANDS = frozenset({"exit", "quit"})


class ShellState(Enum):
    STARTED = "started"
    RUNNING = "running"
    STOPPED = "stopped"


class ShellSession:
    """
    One running shell.

    Attributes
    - action: the shell action node that started the session.
    - root: root of the tree every line runs against.
    - invocation_counter: number of the line about to be read, starting at 1.
    - exit_code: code reported when the session stops (0 unless changed by
      "exit <code>" or context.exit()).
    - state: ShellState.
    """

    def __init__(self, context, /):
        self.context = context
        self.action = context.action
        self.root = self.action.root
        self.console = context.console
        self.stdin = context.stdin
        self.invocation_counter = 1
        self.exit_code = 0
        self.state = ShellState.STARTED

    def __repr__(self):
        return f"shell-session(root={self.root.name!r}, state={self.state.value!r}, exit_code={self.exit_code!r})"

    @property
    def running(self):
        return self.state is ShellState.RUNNING

    @property
    def echo(self):
        """input is echoed after the prompt when it does not come from a terminal."""
        isatty = getattr(self.stdin, "isatty", None)
        return not (callable(isatty) and isatty())

    def run(self):
        """
        Run the session to completion and return its exit code.
        """
        try:
            self.start()
            while self.running:
                self.step()
        finally:
            self.stop()
        return self.exit_code

    def start(self):
        if self.action.banner is not None:
            self.console.print(materialize(self.action.banner.render(self), colorful=self.root.color))
        self.context.fire("shell_start")
        self.state = ShellState.RUNNING
        logger.debug("shell for %r started", self.root.path)

    def stop(self):
        self.state = ShellState.STOPPED
        try:
            self.context.fire("shell_stop")
        finally:
            self.console.print("shell exited with code %d" % self.exit_code)
            logger.debug("shell for %r stopped with code %d", self.root.path, self.exit_code)

    def step(self):
        """
        Prompt for, read and run one line.
        """
        prompt = self.action.prompt.render(self)
        self.console.print(materialize(prompt, colorful=self.root.color), end="")

        line = self.stdin.readline()
        if not line:
            line = "exit"
            self.console.print(line if self.echo else "")
        else:
            line = line.rstrip("\r\n")
            if self.echo:
                self.console.print(line)

        self.invocation_counter += 1
        self.process(line)

    def process(self, line, /):
        try:
            tokens = shlex.split(line)
        except ValueError as error:
            self.report(IllegalArgumentError("invalid command line: %s" % error, line=line))
            return

        match tokens:
            case []:
                return
            case [command] if command in EXIT_COMMANDS:
                self.state = ShellState.STOPPED
            case [command, code] if command in EXIT_COMMANDS:
                try:
                    self.exit_code = int(code)
                except ValueError:
                    self.report(IllegalArgumentError('invalid exit code "%s"' % code, token=code))
                else:
                    self.state = ShellState.STOPPED
            case _:
                match execute(self.root, tokens, console=self.console, stdin=self.stdin, session=self):
                    case Failed(fault=fault):
                        self.report(fault)
                    case Stopped(code=code):
                        self.exit_code = code
                        self.state = ShellState.STOPPED
                    case Completed():
                        pass

    def report(self, fault, /):
        logger.debug("shell line failed: %s", fault.message)
        self.console.print(render(fault, colorful=self.root.color))


def shell_handler(context):
    """
    Handler of the built-in shell action: run a session and return its exit code.
    """
    if context.session is not None:
        raise IllegalCommandError(NESTED_SHELL_MESSAGE, path=context.path)
    if context.arguments:
        raise IllegalArgumentError("no arguments allowed for shell action")
    return ShellSession(context).run()


__all__ = (
    "EXIT_COMMANDS",
    "ShellState",
    "ShellSession",
    "shell_handler",
)
