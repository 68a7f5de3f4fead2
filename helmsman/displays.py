"""
Display capability for shell prompts and banners.

A display produces the string shown to the user given the current shell
session. It comes in three variants, picked once by display(source):

- Constant: a fixed str or rich Text ("test-prompt $ ").
- Function: a zero-argument callable returning str or Text, called on every render.
- Builder:  an object exposing render(session) -> str | Text; it may keep state
            between calls (e.g., a counter).

Rendered values may carry rich styles; materialize() strips them to plain text
when the root command has color disabled.
"""
from abc import ABC, abstractmethod
from collections import defaultdict

from rich.text import Text


class Display(ABC):
    """Produce a display string for the given shell session."""

    @abstractmethod
    def render(self, session):
        raise NotImplementedError


class Constant(Display):
    def __init__(self, text):
        if not isinstance(text, str | Text):
            raise TypeError("constant display must be a string")
        self.text = text

    def render(self, session):
        return self.text

    def __repr__(self):
        return f"constant({self.text!r})"


class Function(Display):
    def __init__(self, function):
        if not callable(function):
            raise TypeError("function display must be callable")
        self.function = function

    def render(self, session):
        return self.function()

    def __repr__(self):
        return f"function({getattr(self.function, '__qualname__', self.function)!r})"


class Builder(Display):
    def __init__(self, builder):
        if not callable(getattr(builder, "render", None)):
            raise TypeError("builder display must expose a render(session) method")
        self.builder = builder

    def render(self, session):
        return self.builder.render(session)

    def __repr__(self):
        return f"builder({type(self.builder).__name__})"


class DefaultPrompt(Display):
    """
    "[<root>][<n>] $ " where n counts the prompts produced by this display.

    The counter lives on the display, not on the session: a tree that runs
    several shells keeps numbering where the previous session stopped.
    """

    def __init__(self):
        self.count = 0

    def render(self, session):
        self.count += 1
        styles = defaultdict(str, {
            "prompt-name": "cyan",
            "prompt-symbol": "bold",
        } | getattr(__import__("__main__"), "__styles__", {}))
        return Text.assemble(
            "[", (session.root.name, styles["prompt-name"]), "][%d] " % self.count,
            ("$", styles["prompt-symbol"]), " ",
        )

    def __repr__(self):
        return "default-prompt()"


class DefaultBanner(Display):
    def render(self, session):
        return 'Starting shell for command "%s"' % session.root.name

    def __repr__(self):
        return "default-banner()"


def display(source, /):
    """
    Wrap a prompt/banner source into its Display variant.

    Accepts
    - Display instances (returned as-is)
    - classes defining render(session): instantiated once, then wrapped
    - str | Text → Constant
    - objects with a callable render attribute → Builder
    - other callables → Function
    """
    if isinstance(source, Display):
        return source
    if isinstance(source, type):
        if not callable(getattr(source, "render", None)):
            raise TypeError("display() class argument must define a render(session) method")
        return display(source())
    if isinstance(source, str | Text):
        return Constant(source)
    if callable(getattr(source, "render", None)):
        return Builder(source)
    if callable(source):
        return Function(source)
    raise TypeError("display() argument must be a string, a callable, or an object with a render() method")


def materialize(rendered, /, *, colorful):
    """
    Normalize a rendered value to Text, dropping styles unless colorful.
    """
    if isinstance(rendered, Text):
        return rendered if colorful else Text(rendered.plain)
    if isinstance(rendered, str):
        return Text(rendered)
    raise TypeError("display must render a string, got %s" % type(rendered).__name__)


__all__ = (
    "Display",
    "Constant",
    "Function",
    "Builder",
    "DefaultPrompt",
    "DefaultBanner",
    "display",
    "materialize",
)
