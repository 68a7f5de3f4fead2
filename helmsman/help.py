"""
Help listings for action trees.

describe(node) renders the listing of one action as plain lines:

    my-command -- Test command for testing

    Available actions:
    [ Type "help [action-name]" to get more information about that action ]

        foo -- some foo action
        help -- The help action for command "my-command" which provides details ...
        shell -- Execute a shell in the context of "my-command" command.

Actions follow declaration order, then the built-in help and shell actions.
Inside a running shell the implicit shell action is left out of listings; a
shell declared through shell(...) stays listed.
"""
from .faults import IllegalArgumentError, UnknownActionError
from .options import OptionType

INDENT = " " * 4


def _entry(name, description, /):
    return f"{name} -- {description}" if description else name


def _option(spec, /):
    line = f"{INDENT}{', '.join(spec.flags)}  :  <{spec.type}>"
    if spec.description:
        line += " " + spec.description
    if spec.required:
        line += " (required)"
    elif spec.type is OptionType.BOOLEAN or spec.default is not None:
        line += " (default => %s)" % (str(spec.default).lower() if isinstance(spec.default, bool) else spec.default)
    return line


def describe(node, /, *, session=None):
    """
    Return the help listing of `node` as a list of lines.

    Parameters
    - node: ActionNode to describe.
    - session: ShellSession | None (keyword-only)
      When set, the implicit shell action is omitted from the listing.
    """
    lines = [_entry(node.path, node.description)]

    if children := [
        child for child in node.children.values()
        if not (session is not None and child.builtin == "shell" and not child.configured)
    ]:
        lines += [
            "",
            "Available actions:",
            '[ Type "help [action-name]" to get more information about that action ]',
            "",
        ]
        lines += [INDENT + _entry(child.name, child.description) for child in children]

    if node.options:
        lines += ["", "Available options:", ""]
        lines += [_option(spec) for spec in node.options.values()]

    return lines


def help_handler(context):
    """
    Handler of the built-in help action.

    "help" describes the action owning it; "help a b" walks down to the
    sub-action "a b" of that action first.
    """
    target = context.action.parent
    for name in context.arguments:
        try:
            target = target.children[name]
        except KeyError:
            raise UnknownActionError('unknown action "%s"' % name, token=name, path=target.path) from None
    for line in describe(target, session=context.session):
        context.print(line)


def default_help(context):
    """
    Handler of actions declaring sub-actions but no handler of their own.
    """
    if context.arguments:
        raise IllegalArgumentError("no arguments allowed for default help action")
    for line in describe(context.action, session=context.session):
        context.print(line)


__all__ = (
    "describe",
    "help_handler",
    "default_help",
)
