"""
Action path resolution.

resolve(root, tokens) walks the action tree along the leading tokens and hands
the rest to the coercion layer. Matching is exact (no prefixes, no fuzzy
suggestions) and greedy: the walk stops at the first token that is empty, looks
like a flag, or does not name a child of the current node.
"""
import logging

from .faults import IllegalArgumentError, IllegalCommandError, UnknownActionError

logger = logging.getLogger(__name__)

NESTED_SHELL_MESSAGE = "Cannot run another shell within an already running shell"


def resolve(root, tokens, /, *, shell=False):
    """
    Resolve the deepest action named by the leading tokens.

    Parameters
    - root: ActionNode where the walk starts.
    - tokens: Iterable[str] of the invocation (action path first, then options/positionals).
    - shell: bool (keyword-only)
      True when resolving a line typed inside a running shell session. Lines must
      then start with an action name, and the shell action cannot be reached.

    Returns
    - tuple[tuple[ActionNode, ...], tuple[str, ...]]: (path, remaining)
      path is root-first; remaining tokens belong to the terminal node.

    Raises
    - IllegalCommandError: a shell action was named inside a shell session.
    - UnknownActionError: no action matched where one was required.
    - IllegalArgumentError: tokens remain under a node with arguments disabled.
    """
    tokens = tuple(tokens)
    path = [node := root]
    index = 0

    while index < len(tokens):
        token = tokens[index]
        if not token or token.startswith("-"):
            break
        try:
            child = node.children[token]
        except KeyError:
            break
        if shell and child.builtin == "shell":
            raise IllegalCommandError(NESTED_SHELL_MESSAGE, token=token, path=child.path)
        path.append(node := child)
        index += 1

    remaining = tokens[index:]
    logger.debug("resolved %r to %r with %d remaining token(s)", tokens, node.path, len(remaining))

    if not remaining:
        return tuple(path), remaining

    token = remaining[0]
    if shell and index == 0:
        raise UnknownActionError('unknown action "%s"' % token, token=token, path=root.path)
    if not node.arguments:
        raise IllegalArgumentError('invalid command argument "%s"' % token, token=token, path=node.path)
    if index == 0 and not token.startswith("-") and node.handler is None and node.actions:
        raise UnknownActionError('unknown action "%s"' % token, token=token, path=root.path)

    return tuple(path), remaining


__all__ = (
    "NESTED_SHELL_MESSAGE",
    "resolve",
)
