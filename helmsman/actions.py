r"""
Helmsman action trees.

Overview
- action(...): declare one action (options, handler, sub-actions, flags, hooks).
  The declaration is inert; it can also decorate its handler.
- shell(...): configure the built-in shell action (name, prompt, banner, options, hooks).
- command(...): build the root of an immutable, validated ActionNode tree.
- ActionNode: one built action with its children, read-only after construction.

Built-in actions
- help: added to every action that has help enabled (never to the built-ins).
  "help" describes its owner; "help a b" describes the sub-action "a b".
- shell: added to an action with shell enabled and at least one child action
  (help included). Shell is enabled by default on the root only.

Flags
- arguments: positionals and options accepted (default True). An action with
  arguments disabled cannot declare options.
- shell: expose the shell action (default True on the root, False elsewhere).
  Also accepts a shell(...) configuration, which implies True.
- help: expose the help action (inherited from the parent, default True).
- color: style prompts and faults (inherited from the parent, default True).

Events
- on={"shell_start": hook, "custom": [hook1, hook2]}; hooks take the context
  of the invocation that fired the event. Events bubble from the firing action
  up to the root.

Quick example:
    >>> from helmsman import action, command, option
    >>> @action("greet", options=[option("name", short="n", default="world")])
    ... def greet(context):
    ...     context.print("hello %s" % context.name)
    >>> root = command("my-command", greet, description="Test command for testing", color=False)
    >>> root.invoke("greet -n you")
    hello you
"""
import weakref
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

from .invocations import context_type, invoke
from .displays import DefaultBanner, DefaultPrompt, display
from .faults import ValidationError
from .help import help_handler
from .internals import DescriptorType, check_name, check_text
from .options import OptionType, option
from .shells import shell_handler
from .utils import Unset, coalesce

HELP_DESCRIPTION = (
    'The help action for command "%s" which provides details and usage information on how to use the command.'
)
SHELL_DESCRIPTION = 'Execute a shell in the context of "%s" command.'


class ActionDraft:
    """
    Inert declaration of an action, produced by action().

    Calling a draft that has no handler yet attaches the callable and returns
    a new draft, so action(...) works as a decorator.
    """

    __slots__ = ("_metadata",)

    def __init__(self, **metadata):
        self._metadata = MappingProxyType(metadata)

    @property
    def metadata(self):
        return self._metadata

    @property
    def name(self):
        return self._metadata["name"]

    def __call__(self, handler, /):
        if self._metadata["handler"] is not Unset:
            raise TypeError(f"action {self.name!r} already has a handler")
        if not callable(handler):
            raise TypeError("@action() must be applied to a callable")
        return ActionDraft(**self._metadata | {"handler": handler})

    def __repr__(self):
        return f"action({self.name!r})"


class ShellDraft:
    """
    Inert configuration of the built-in shell action, produced by shell().
    """

    __slots__ = ("_metadata",)

    def __init__(self, **metadata):
        self._metadata = MappingProxyType(metadata)

    @property
    def metadata(self):
        return self._metadata

    @property
    def name(self):
        return self._metadata["name"]

    @property
    def configured(self):
        """false for the implicit shell of a tree that never called shell(...)."""
        return self._metadata.get("configured", True)

    def __repr__(self):
        return f"shell({self.name!r})"


def action(
        name,
        /,
        *children,
        description=Unset,
        handler=Unset,
        options=(),
        arguments=Unset,
        shell=Unset,
        help=Unset,
        color=Unset,
        on=Unset,
):
    """
    Declare an action.

    Parameters
    - name: str matching ^[A-Za-z0-9_-]+$.
    - *children: ActionDraft declarations of sub-actions, in listing order.
    - description: str shown in help listings.
    - handler: callable(context) run when the action is the terminal one.
    - options: iterable of OptionSpec (or option names, meaning ANY options).
    - arguments, shell, help, color: flags (see module docs).
    - on: mapping of event name to a hook or an iterable of hooks.

    Returns
    - ActionDraft, also usable as a decorator of the handler.
    """
    return ActionDraft(
        name=name,
        children=children,
        description=description,
        handler=handler,
        options=options,
        arguments=arguments,
        shell=shell,
        help=help,
        color=color,
        on=on,
    )


def shell(name="shell", /, *, description=Unset, prompt=Unset, banner=Unset, options=(), on=Unset):
    """
    Configure the built-in shell action.

    Parameters
    - name: name of the shell action (default "shell").
    - description: str; defaults to 'Execute a shell in the context of "<path>" command.'
    - prompt: display source (str, rich Text, callable, or object with render(session)).
      Defaults to "[<root>][<n>] $ ".
    - banner: display source, or None for no banner.
      Defaults to 'Starting shell for command "<root>"'.
    - options: options of the shell action, readable from its hooks.
    - on: hooks, typically "shell_start"/"shell_stop".
    """
    return ShellDraft(
        name=name,
        description=description,
        prompt=prompt,
        banner=banner,
        options=options,
        on=on,
    )


def _sanitize_handler(cls, name, handler, /):
    if handler is Unset or handler is None:
        return None
    if not callable(handler):
        raise ValidationError(f"{cls.__typename__} {name!r} 'handler' must be callable")
    return handler


def _sanitize_options(cls, name, options, /):
    """
    Internal: normalize declared options into an ordered name → OptionSpec mapping.

    Rules
    - names and shorts are unique within the action.
    - a BOOLEAN option "x" reserves "no-x" for its negation.
    """
    if isinstance(options, str | Mapping) or not isinstance(options, Iterable):
        raise ValidationError(f"{cls.__typename__} {name!r} 'options' must be an iterable of option specs")

    specs = {}
    shorts = set()
    for spec in map(option, options):
        if spec.name in specs:
            raise ValidationError(f"{cls.__typename__} {name!r} declares option {spec.name!r} twice")
        if spec.short and spec.short in shorts:
            raise ValidationError(f"{cls.__typename__} {name!r} declares short option {spec.short!r} twice")
        specs[spec.name] = spec
        shorts.add(spec.short)

    for spec in specs.values():
        if spec.type is OptionType.BOOLEAN and "no-" + spec.name in specs:
            raise ValidationError(
                f"{cls.__typename__} {name!r} option {'no-' + spec.name!r} clashes with the negation of {spec.name!r}"
            )
    return specs


def _sanitize_events(cls, name, events, /):
    """
    Internal: normalize hooks into event name → tuple of callables.
    """
    if events is Unset or events is None:
        return {}
    if not isinstance(events, Mapping):
        raise ValidationError(f"{cls.__typename__} {name!r} 'on' must be a mapping of event names to hooks")

    normalized = {}
    for event, hooks in events.items():
        if not isinstance(event, str) or not event:
            raise ValidationError(f"{cls.__typename__} {name!r} event names must be non-empty strings")
        hooks = (hooks,) if isinstance(hooks, Callable) else tuple(hooks)
        if not all(map(callable, hooks)):
            raise ValidationError(f"{cls.__typename__} {name!r} hooks of event {event!r} must be callable")
        normalized[event] = hooks
    return normalized


def _sanitize_shell(cls, name, value, /, *, root):
    """
    Internal: resolve the shell flag into (enabled, ShellDraft).
    """
    if isinstance(value, ShellDraft):
        return True, value
    if value is Unset:
        return root, ShellDraft(**shell().metadata, configured=False)
    if isinstance(value, bool):
        return value, ShellDraft(**shell().metadata, configured=False)
    raise ValidationError(f"{cls.__typename__} {name!r} 'shell' must be a bool or a shell(...) configuration")


class ActionNode(metaclass=DescriptorType):
    """
    Built action: immutable once constructed, children included.

    Construct trees with command(...); ActionNode(draft) does the same for an
    existing root declaration.

    Properties
    - name, description, handler, options, children, arguments, shell, help,
      color, events, path, builtin, prompt, banner, configured (read-only;
      containers are returned as copies). configured is true on a shell action
      declared through shell(...).
    - parent / root / lineage: position in the tree (parent is held weakly).
    - actions: explicit children only (built-ins excluded).
    - context_type: Context subclass handed to the handler.
    """

    __introspectable__ = (
        "name",
        "description",
        "handler",
        "options",
        "children",
        "arguments",
        "shell",
        "help",
        "color",
        "events",
        "path",
        "builtin",
        "prompt",
        "banner",
        "configured",
    )

    __displayable__ = (
        "name",
        "path",
        "builtin",
        "options",
        "children",
    )

    def __new__(cls, draft, /, parent=Unset, *, builtin=None):
        if not isinstance(draft, ActionDraft):
            raise TypeError(f"{cls.__name__}() argument must be an action(...) declaration")
        if parent is not Unset and not isinstance(parent, ActionNode):
            raise TypeError(f"{cls.__name__}() parent must be an {cls.__name__}")

        metadata = dict(draft.metadata)
        name = check_name(cls, metadata["name"])
        inherited = parent if parent is not Unset else None

        self = super().__new__(cls)
        self._name = name
        self._description = check_text(cls, metadata["description"])
        self._handler = _sanitize_handler(cls, name, metadata["handler"])
        self._options = _sanitize_options(cls, name, metadata["options"])
        self._arguments = bool(coalesce(metadata["arguments"], True))
        self._help = bool(coalesce(metadata["help"], inherited.help if inherited else True))
        self._color = bool(coalesce(metadata["color"], inherited.color if inherited else True))
        self._shell, config = _sanitize_shell(cls, name, metadata["shell"], root=inherited is None)
        self._events = _sanitize_events(cls, name, metadata["on"])
        self._builtin = builtin
        self._parent = weakref.ref(inherited) if inherited is not None else None
        self._path = f"{inherited.path} {name}" if inherited is not None else name
        self._prompt = metadata.get("prompt")
        self._banner = metadata.get("banner")
        self._configured = bool(metadata.get("configured", False))

        if not self._arguments and self._options:
            raise ValidationError(f"{cls.__typename__} {name!r} cannot declare options with arguments disabled")

        children = {}
        for child in metadata["children"]:
            node = ActionNode(child, self)
            if node.name in children:
                raise ValidationError(f"{cls.__typename__} {name!r} declares action {node.name!r} twice")
            children[node.name] = node

        if self._help and builtin is None:
            if "help" in children:
                raise ValidationError(f"{cls.__typename__} {name!r} action 'help' clashes with the built-in help action")
            children["help"] = ActionNode(_help_draft(self), self, builtin="help")

        if self._shell and builtin is None and children:
            shell_name = check_name(cls, config.name, field="shell name")
            if shell_name in children:
                raise ValidationError(
                    f"{cls.__typename__} {name!r} action {shell_name!r} clashes with the built-in shell action"
                )
            children[shell_name] = ActionNode(_shell_draft(self, config), self, builtin="shell")

        self._children = children
        self._context_type = context_type(self)
        return self

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def root(self):
        node = self
        while (parent := node.parent) is not None:
            node = parent
        return node

    @property
    def lineage(self):
        """nodes from the root down to this action (inclusive)."""
        nodes = [self]
        while (parent := nodes[-1].parent) is not None:
            nodes.append(parent)
        return tuple(reversed(nodes))

    @property
    def actions(self):
        return {name: child for name, child in self._children.items() if child.builtin is None}

    @property
    def context_type(self):
        return self._context_type

    def invoke(self, prompt=Unset, /, *, stdout=Unset, stdin=Unset):
        """
        Run `prompt` (a string, an iterable of tokens, or sys.argv[1:] when
        omitted) against this action; see helmsman.invocations.invoke.
        """
        return invoke(self, prompt, stdout=stdout, stdin=stdin)


def _help_draft(owner, /):
    return action(
        "help",
        description=HELP_DESCRIPTION % owner.path,
        handler=help_handler,
        shell=False,
        help=False,
    )


def _shell_draft(owner, config, /):
    metadata = config.metadata
    prompt = metadata["prompt"]
    banner = metadata["banner"]
    draft = action(
        config.name,
        description=coalesce(metadata["description"], SHELL_DESCRIPTION % owner.path),
        handler=shell_handler,
        options=metadata["options"],
        shell=False,
        help=False,
        on=metadata["on"],
    )
    return ActionDraft(
        **draft.metadata,
        prompt=display(prompt) if prompt is not Unset else DefaultPrompt(),
        banner=None if banner is None else display(banner) if banner is not Unset else DefaultBanner(),
        configured=config.configured,
    )


def command(name, /, *children, **options):
    """
    Build the root of an action tree.

    Forms
    - command("my-command", *children, description=..., ...) → ActionNode
    - command(action(...)) → ActionNode

    Raises
    - ValidationError for an invalid tree.
    """
    if isinstance(name, ActionDraft):
        if children or options:
            raise TypeError("command() cannot override an existing action declaration")
        return ActionNode(name)
    return ActionNode(action(name, *children, **options))


__all__ = (
    "ActionDraft",
    "ShellDraft",
    "ActionNode",
    "action",
    "shell",
    "command",
)
