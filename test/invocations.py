# python
"""
Invocation pipeline behavioral tests (dispatch, outcomes, contexts, help).

Scope
- Validate invoke()/execute() results and Completed/Failed/Stopped outcomes.
- Validate CommandRuntimeError wrapping of handler failures.
- Validate the handler context (typed accessors, presence, events, exit requests).
- Validate the built-in and default help listings.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with io.StringIO sinks and color disabled.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from helmsman import (
    CommandRuntimeError,
    Completed,
    Failed,
    IllegalArgumentError,
    Invocation,
    Stopped,
    UnknownActionError,
    UnknownOptionError,
    action,
    command,
    dispatch,
    execute,
    invoke,
    option,
)
from helmsman.invocations import acquire, tokenize

HELP_LINE = (
    'help -- The help action for command "%s" which provides details '
    'and usage information on how to use the command.'
)


def capture(root, prompt):
    stdout = io.StringIO()
    result = root.invoke(prompt, stdout=stdout, stdin=io.StringIO())
    return result, stdout.getvalue()


class TestInvoke(TestCase):
    """Behavioral tests for invoke()."""

    def testReturnsHandlerResult(self):
        root = command("my-command", action("foo", handler=lambda context: "foo result"), color=False)
        result, _ = capture(root, "foo")
        self.assertEqual(result, "foo result")

    def testModuleLevelInvoke(self):
        root = command("my-command", handler=lambda context: context.arguments, color=False)
        self.assertEqual(invoke(root, ["a", "b c"], stdout=io.StringIO()), ("a", "b c"))

    def testStringPromptsHonorQuotes(self):
        root = command("my-command", handler=lambda context: context.arguments, color=False)
        result, _ = capture(root, 'a "b c"')
        self.assertEqual(result, ("a", "b c"))

    def testHandlerOutput(self):
        @action("bar", options=["opt"])
        def bar(context):
            context.print("bar executed")
            if context.given("opt"):
                context.print("option: %s" % context.opt)

        root = command("my-command", action("foo", bar), color=False)
        self.assertEqual(capture(root, "foo bar --opt yes")[1], "bar executed\noption: yes\n")
        self.assertEqual(capture(root, "foo bar")[1], "bar executed\n")

    def testFaultsPropagate(self):
        root = command("my-command", action("foo"), color=False)
        with self.assertRaises(UnknownActionError):
            capture(root, "unknown")
        with self.assertRaises(UnknownOptionError):
            capture(root, "-h")

    def testHandlerFailureWrapped(self):
        def fail(context):
            raise ValueError("I failed!")

        root = command("my-command", action("foo", handler=fail), color=False)
        with self.assertRaises(CommandRuntimeError) as caught:
            capture(root, "foo")
        fault = caught.exception
        self.assertEqual(str(fault), "command 'my-command foo' failed\n\nCause: ValueError - I failed!")
        self.assertIsInstance(fault.cause, ValueError)
        self.assertIs(fault.__cause__, fault.cause)
        self.assertEqual(fault.path, "my-command foo")

    def testFaultsRaisedByHandlersAreWrappedToo(self):
        def fail(context):
            raise IllegalArgumentError("bad input")

        root = command("my-command", handler=fail, color=False)
        with self.assertRaises(CommandRuntimeError) as caught:
            capture(root, "")
        self.assertEqual(str(caught.exception), "command 'my-command' failed\n\nCause: IllegalArgumentError - bad input")

    def testNoHandlerIsNoop(self):
        root = command("my-command", help=False, color=False)
        self.assertEqual(capture(root, ""), (None, ""))

    def testExitRequestReturnsCode(self):
        root = command("my-command", handler=lambda context: context.exit(3), color=False)
        self.assertEqual(capture(root, "")[0], 3)

    def testOutputFlushed(self):
        class Stream(io.StringIO):
            flushed = 0

            def flush(self):
                type(self).flushed += 1
                super().flush()

        root = command("my-command", handler=lambda context: context.print("x"), color=False)
        root.invoke("", stdout=Stream())
        self.assertGreaterEqual(Stream.flushed, 1)


class TestExecute(TestCase):
    """Behavioral tests for execute() outcomes."""

    def setUp(self):
        def stop(context):
            context.exit(5)
            return "ignored"

        def fail(context):
            raise RuntimeError("boom")

        self.root = command(
            "my-command",
            action("ok", handler=lambda context: 42),
            action("stop", handler=stop),
            action("fail", handler=fail),
            color=False,
        )

    def outcome(self, *tokens):
        with acquire(io.StringIO(), colorful=False) as console:
            return execute(self.root, tokens, console=console)

    def testCompleted(self):
        self.assertEqual(self.outcome("ok"), Completed(42))

    def testStopped(self):
        self.assertEqual(self.outcome("stop"), Stopped(5))

    def testFailedNeverRaises(self):
        outcome = self.outcome("nope")
        self.assertIsInstance(outcome, Failed)
        self.assertIsInstance(outcome.fault, UnknownActionError)
        outcome = self.outcome("fail")
        self.assertIsInstance(outcome.fault, CommandRuntimeError)

    def testOutcomesMatch(self):
        match self.outcome("ok"):
            case Completed(result=result):
                self.assertEqual(result, 42)
            case _:
                self.fail("expected a completed outcome")


class TestDispatch(TestCase):
    """Behavioral tests for dispatch() and contexts."""

    def setUp(self):
        self.seen = []
        self.node = command(
            "tool",
            handler=self.seen.append,
            shell=False,
            options=[option("dry-run", type="boolean"), option("path"), option("count", type="numeric", default=1)],
        )

    def handle(self, options, given=(), arguments=()):
        invocation = Invocation((self.node,), options, frozenset(given), tuple(arguments))
        with acquire(io.StringIO(), colorful=False) as console:
            dispatch(invocation, console=console)
        return self.seen[-1]

    def testTypedAccessors(self):
        context = self.handle({"dry-run": True, "path": "/tmp", "count": 1}, given=["dry-run"], arguments=["x"])
        self.assertIs(context.dry_run, True)
        self.assertEqual(context["path"], "/tmp")
        self.assertEqual(context.value("count"), 1)
        self.assertEqual(context.arguments, ("x",))
        self.assertEqual(context.path, "tool")
        self.assertIs(context.action, self.node)
        self.assertIsNone(context.session)

    def testPresence(self):
        context = self.handle({"dry-run": False, "path": None, "count": 1}, given=["dry-run"])
        self.assertTrue(context.given("dry-run"))
        self.assertFalse(context.given("count"))

    def testUnknownNamesRaiseKeyError(self):
        context = self.handle({"dry-run": False, "path": None, "count": 1})
        with self.assertRaises(KeyError):
            context["nope"]
        with self.assertRaises(KeyError):
            context.given("nope")

    def testCollidingOptionOnlyByName(self):
        context = self.handle({"dry-run": False, "path": "/tmp", "count": 1})
        self.assertEqual(context.path, "tool")
        self.assertEqual(context["path"], "/tmp")

    def testExitRequiresInteger(self):
        context = self.handle({"dry-run": False, "path": None, "count": 1})
        with self.assertRaises(TypeError):
            context.exit("1")

    def testEventsBubbleToRoot(self):
        fired = []
        root = command(
            "my-command",
            action(
                "foo",
                handler=lambda context: context.fire("ping"),
                on={"ping": lambda context: fired.append(("foo", context.path))},
            ),
            on={"ping": [lambda context: fired.append(("root", context.path))]},
            color=False,
        )
        capture(root, "foo")
        self.assertEqual(fired, [("foo", "my-command foo"), ("root", "my-command foo")])


class TestHelp(TestCase):
    """Behavioral tests for help listings."""

    def setUp(self):
        self.root = command(
            "my-command",
            action("foo", description="the foo action"),
            action(
                "bar",
                action("baz"),
                description="bar command",
                options=[
                    option("count", short="c", type="numeric", default=10, description="how many"),
                    option("verbose", type="boolean"),
                    option("id", required=True),
                ],
            ),
            description="this is a test command",
            color=False,
        )

    def testRootHelp(self):
        _, output = capture(self.root, "help")
        self.assertEqual(output.splitlines(), [
            "my-command -- this is a test command",
            "",
            "Available actions:",
            '[ Type "help [action-name]" to get more information about that action ]',
            "",
            "    foo -- the foo action",
            "    bar -- bar command",
            "    " + HELP_LINE % "my-command",
            '    shell -- Execute a shell in the context of "my-command" command.',
        ])

    def testNestedHelpWithOptions(self):
        _, output = capture(self.root, "help bar")
        self.assertEqual(output.splitlines(), [
            "my-command bar -- bar command",
            "",
            "Available actions:",
            '[ Type "help [action-name]" to get more information about that action ]',
            "",
            "    baz",
            "    " + HELP_LINE % "my-command bar",
            "",
            "Available options:",
            "",
            "    --count, -c  :  <numeric> how many (default => 10)",
            "    --verbose  :  <boolean> (default => false)",
            "    --id  :  <any> (required)",
        ])

    def testHelpOfSubAction(self):
        _, first = capture(self.root, "help bar baz")
        _, second = capture(self.root, "bar baz help")
        self.assertEqual(first, second)
        self.assertTrue(first.startswith("my-command bar baz\n"))

    def testHelpOfUnknownAction(self):
        with self.assertRaises(CommandRuntimeError) as caught:
            capture(self.root, "help nope")
        self.assertIsInstance(caught.exception.cause, UnknownActionError)

    def testDefaultHelpForGroupingAction(self):
        _, output = capture(self.root, "")
        self.assertEqual(output, capture(self.root, "help")[1])

    def testDefaultHelpRejectsArguments(self):
        root = command("my-command", action("foo", action("bar")), color=False)
        with self.assertRaises(CommandRuntimeError) as caught:
            capture(root, "foo shell")
        self.assertEqual(
            str(caught.exception),
            "command 'my-command foo' failed\n\n"
            "Cause: IllegalArgumentError - no arguments allowed for default help action",
        )

    def testNoDefaultHelpWhenHelpDisabled(self):
        root = command("my-command", action("foo"), help=False, color=False)
        self.assertEqual(capture(root, ""), (None, ""))


class TestTokenize(TestCase):
    def testForms(self):
        self.assertEqual(tokenize("a 'b c'"), ("a", "b c"))
        self.assertEqual(tokenize(["a", "b"]), ("a", "b"))
        with self.assertRaises(TypeError):
            tokenize([1])


if __name__ == "__main__":
    unittest.main()
