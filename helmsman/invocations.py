"""
Helmsman dispatch pipeline.

Flow
- resolve(root, tokens) → (path, remaining)
- coerce(terminal, remaining) → (options, given, arguments)
- dispatch(invocation) → handler(context)

execute() runs the whole pipeline and never raises a CommandException: every
fault becomes a Failed outcome, so the shell loop can print it and go on.
invoke() is the one-shot entry point: it opens the output sink, executes the
prompt and turns the outcome back into a return value or a raised fault.

Outcomes
- Completed(result): the handler returned normally.
- Failed(fault):     a CommandException was raised somewhere in the pipeline.
- Stopped(code):     the handler asked to stop with context.exit(code).
"""
import contextlib
import logging
import shlex
import sys
from typing import NamedTuple

from rich.console import Console

from .coercion import coerce
from .faults import CommandException, CommandRuntimeError
from .help import default_help
from .resolver import resolve
from .utils import Unset, coalesce, identifier, rename

logger = logging.getLogger(__name__)


class Invocation(NamedTuple):
    """
    Resolved invocation: the action path (root first) and the coerced input of
    the terminal action.
    """
    path: tuple
    options: dict
    given: frozenset
    arguments: tuple

    @property
    def action(self):
        return self.path[-1]


class Completed(NamedTuple):
    result: object = None


class Failed(NamedTuple):
    fault: CommandException


class Stopped(NamedTuple):
    code: int = 0


class Context:
    """
    Per-invocation view handed to handlers and event hooks.

    Each action builds its own subclass (see context_type()) exposing one
    read-only property per option, with hyphens spelled as underscores:
    an option "dry-run" is read as context.dry_run.

    Accessors
    - context[name] / value(name): the option value.
    - given(name): True when the option was explicitly supplied.
    - arguments: positional tokens in encounter order.
    - action / path: the terminal action node and its display path.
    - console / print(): output sink of the invocation.
    - stdin: input stream used by interactive actions.
    - session: the running ShellSession, or None outside a shell.
    - exit(code): ask the enclosing shell (or invoke()) to stop with `code`.
    - fire(event): run the hooks registered for `event`, terminal action first,
      then each ancestor up to the root.
    """

    __slots__ = ("_invocation", "_console", "_stdin", "_session", "_exit")

    def __init__(self, invocation, /, *, console, stdin=Unset, session=None):
        self._invocation = invocation
        self._console = console
        self._stdin = stdin
        self._session = session
        self._exit = Unset

    def __getitem__(self, name):
        return self.value(name)

    def __repr__(self):
        return f"{type(self).__name__}(path={self.path!r}, options={self.options!r}, arguments={self.arguments!r})"

    def value(self, name, /):
        try:
            return self._invocation.options[name]
        except KeyError:
            raise KeyError(f"action {self.path!r} has no option {name!r}") from None

    def given(self, name, /):
        if name not in self._invocation.options:
            raise KeyError(f"action {self.path!r} has no option {name!r}")
        return name in self._invocation.given

    @property
    def options(self):
        return dict(self._invocation.options)

    @property
    def arguments(self):
        return self._invocation.arguments

    @property
    def action(self):
        return self._invocation.action

    @property
    def path(self):
        return self._invocation.action.path

    @property
    def console(self):
        return self._console

    @property
    def stdin(self):
        return coalesce(self._stdin, sys.stdin)

    @property
    def session(self):
        return self._session

    @property
    def exit_code(self):
        return coalesce(self._exit)

    def print(self, *objects, **options):
        self._console.print(*objects, **options)

    def exit(self, code=0, /):
        if isinstance(code, bool) or not isinstance(code, int):
            raise TypeError("exit() argument must be an integer")
        self._exit = code

    def fire(self, event, /):
        for node in reversed(self._invocation.path):
            for hook in node.events.get(event, ()):
                logger.debug("firing %r hook %r of %r", event, hook, node.path)
                hook(self)


def context_type(node, /):
    """
    Build the Context subclass of `node`, with one property per option.

    Options whose attribute spelling collides with a Context member stay
    reachable through context[name] only.
    """
    namespace = {"__slots__": (), "__module__": __name__}
    for name in node.options:
        attribute = identifier(name)
        if hasattr(Context, attribute) or attribute in namespace:
            continue
        namespace[attribute] = property(rename(lambda self, name=name: self.value(name), attribute))
    namespace["__qualname__"] = f"Context[{node.path}]"
    return type("Context", (Context,), namespace)


def handler_of(node, /):
    """
    Return the callable run for `node`: its handler, the default help handler
    for grouping actions, or None (no-op).
    """
    if node.handler is not None:
        return node.handler
    if node.actions and node.help:
        return default_help
    return None


def _dispatch(invocation, /, *, console, stdin=Unset, session=None):
    node = invocation.action
    context = node.context_type(invocation, console=console, stdin=stdin, session=session)
    handler = handler_of(node)
    if handler is None:
        logger.debug("action %r has no handler; nothing to do", node.path)
        return None, context

    logger.debug("dispatching %r with options=%r arguments=%r", node.path, invocation.options, invocation.arguments)
    try:
        return handler(context), context
    except Exception as exception:
        raise CommandRuntimeError.wrap(node.path, exception) from exception


def dispatch(invocation, /, *, console, stdin=Unset, session=None):
    """
    Run the handler of the terminal action of `invocation`.

    Returns
    - whatever the handler returned (None for actions without a handler).

    Raises
    - CommandRuntimeError wrapping any Exception escaping the handler
      (faults raised by the handler itself included).
    """
    result, _ = _dispatch(invocation, console=console, stdin=stdin, session=session)
    return result


def execute(root, tokens, /, *, console, stdin=Unset, session=None):
    """
    Resolve, coerce and dispatch `tokens` against `root`.

    Returns
    - Completed | Failed | Stopped; CommandException never escapes.
    """
    try:
        path, remaining = resolve(root, tokens, shell=session is not None)
        options, given, arguments = coerce(path[-1], remaining)
        result, context = _dispatch(
            Invocation(path, options, given, arguments),
            console=console,
            stdin=stdin,
            session=session,
        )
    except CommandException as fault:
        logger.debug("command %r failed: %s", root.path, fault.message)
        return Failed(fault)

    if context.exit_code is not None:
        return Stopped(context.exit_code)
    return Completed(result)


@contextlib.contextmanager
def acquire(stream, /, *, colorful):
    """
    Open a rich Console writing to `stream` for the duration of one invocation.

    Markup, emoji and highlighting are disabled so handler output and fault
    messages reach the stream verbatim; styles are emitted only when colorful.
    The stream is flushed on exit, failure included.
    """
    console = Console(
        file=stream,
        force_terminal=colorful,
        no_color=not colorful,
        color_system="standard" if colorful else None,
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )
    try:
        yield console
    finally:
        stream.flush()


def tokenize(prompt, /):
    """
    Split a prompt into tokens.

    - Unset → sys.argv[1:]
    - str → shlex.split (quotes honored)
    - iterable of str → tuple
    """
    if prompt is Unset:
        return tuple(sys.argv[1:])
    if isinstance(prompt, str):
        return tuple(shlex.split(prompt))
    tokens = tuple(prompt)
    if not all(isinstance(token, str) for token in tokens):
        raise TypeError("invoke() prompt must be a string or an iterable of strings")
    return tokens


def invoke(root, prompt=Unset, /, *, stdout=Unset, stdin=Unset):
    """
    One-shot invocation of `root` with `prompt`.

    Returns
    - the handler result, or the exit code when the handler requested one
      (the shell action returns its exit code this way).

    Raises
    - the CommandException of a Failed outcome.
    """
    tokens = tokenize(prompt)
    with acquire(coalesce(stdout, sys.stdout), colorful=root.color) as console:
        outcome = execute(root, tokens, console=console, stdin=stdin)

    match outcome:
        case Completed(result=result):
            return result
        case Stopped(code=code):
            return code
        case Failed(fault=fault):
            raise fault


__all__ = (
    "Invocation",
    "Completed",
    "Failed",
    "Stopped",
    "Context",
    "context_type",
    "handler_of",
    "dispatch",
    "execute",
    "acquire",
    "tokenize",
    "invoke",
)
