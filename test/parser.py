"""
Parser module behavioral tests (help injection, usage, orchestration).

Scope
- Validate defaults() help injection without mutating the input.
- Validate requires() detection across options, verbs and groups.
- Validate usage() layout and printhelp() output.
- Validate parse(): argument sources, evaluation order, help on empty input,
  help before re-raising, shell mode exit.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured through a rich Console writing to a StringIO.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console
from rich.text import Text

from argverb import (
    Parameter,
    Option,
    Verb,
    Group,
    defaults,
    requires,
    usage,
    printhelp,
    parse,
    MissingOptionError,
    MissingParameterValueError,
    MultipleVerbsError,
)


def capture():
    return Console(file=io.StringIO(), color_system=None, width=200)


class TestDefaults(TestCase):
    """Behavioral tests for help injection."""

    def testDefaultsAppendsHelp(self):
        verbose = Option("--verbose")
        parsables = defaults([verbose])
        self.assertEqual(len(parsables), 2)
        self.assertIs(parsables[0], verbose)
        self.assertIsInstance(parsables[1], Option)
        self.assertEqual(parsables[1].name, "help")
        self.assertEqual(parsables[1].descr, "show help")

    def testDefaultsDoesNotMutateInput(self):
        parsables = [Option("--verbose")]
        defaults(parsables)
        self.assertEqual(len(parsables), 1)

    def testDefaultsKeepsDeclaredHelp(self):
        help = Verb("help")
        parsables = defaults([help])
        self.assertEqual(parsables, (help,))

    def testDefaultsRejectsNonParsables(self):
        with self.assertRaises(TypeError):
            defaults(["--verbose"])
        with self.assertRaises(TypeError):
            defaults([Parameter("--verbose")])

    def testDefaultHelpPrintsUsage(self):
        console = capture()
        parsables = defaults([Verb("list", descr="list files")], console=console, colorful=False)
        parsables[-1].evaluate(["help"])
        output = console.file.getvalue()
        self.assertIn("Usage:", output)
        self.assertIn("list: list files", output)
        self.assertIn("help: show help", output)


class TestRequires(TestCase):
    """Behavioral tests for required detection."""

    def testNothingRequired(self):
        self.assertFalse(requires([Option("--verbose"), Verb("list", Parameter("--all"))]))

    def testRequiredOption(self):
        self.assertTrue(requires([Option("--token", required=True)]))

    def testVerbWithRequiredParameter(self):
        self.assertTrue(requires([Verb("copy", Parameter("--source", required=True))]))

    def testVerbWithValueRequiredOnlyIsNotRequired(self):
        self.assertFalse(requires([Verb("copy", Parameter("--source", value_required=True))]))

    def testGroupWithRequiredVerbParameter(self):
        self.assertTrue(requires([Group("actions", Verb("clean"), Verb("copy", Parameter("--source", required=True)))]))

    def testGroupWithoutRequiredParameters(self):
        self.assertFalse(requires([Group("actions", Verb("clean"), Verb("build"))]))


class TestUsage(TestCase):
    """Behavioral tests for the usage listing."""

    def testUsageLayout(self):
        text = usage([
            Option("--verbose", descr="print more"),
            Verb("copy", Parameter("--source", descr="file to read"), descr="copy a file"),
            Verb("list"),
        ])
        self.assertEqual(
            text.plain,
            "Usage:\n\n"
            "\t--verbose: print more\n"
            "\tcopy: copy a file\n"
            "\t\t--source: file to read\n"
            "\n"
            "\tlist:\n"
        )

    def testUsageGroupListsGroupOnly(self):
        text = usage([Group("actions", Verb("build"), descr="pick one")])
        self.assertEqual(text.plain, "Usage:\n\n\tactions: pick one\n")

    def testUsageColorfulKeepsPlainText(self):
        parsables = [Verb("copy", Parameter("--source", required=True), descr="copy a file")]
        self.assertEqual(usage(parsables, colorful=True).plain, usage(parsables).plain)
        self.assertTrue(usage(parsables, colorful=True).spans)

    def testUsageColorfulRichDescr(self):
        text = usage([Verb("copy", Parameter("--source", descr=Text("file to read", style="italic")), descr="copy")], colorful=True)
        self.assertIn("\t\t--source: file to read\n", text.plain)
        self.assertIn("italic", [str(span.style) for span in text.spans])

    def testUsagePlainRichDescr(self):
        text = usage([Option("--token", descr=Text("auth token", style="italic"))])
        self.assertEqual(text.plain, "Usage:\n\n\t--token: auth token\n")
        self.assertFalse(text.spans)

    def testPrintHelpWritesToConsole(self):
        console = capture()
        printhelp([Verb("copy", Parameter("--source", descr="file to read"))], console=console)
        output = console.file.getvalue()
        self.assertIn("copy:", output)
        self.assertIn("--source: file to read", output)


class TestParse(TestCase):
    """Behavioral tests for the orchestration loop."""

    def setUp(self):
        self.console = capture()
        self.calls = []

    def output(self):
        return self.console.file.getvalue()

    def testParseNoArgumentsNotRequiredPrintsHelp(self):
        parse([Option("-test", descr="print test description")], [], console=self.console)
        self.assertIn("-test: print test description", self.output())

    def testParseNoArgumentsRequiredRaises(self):
        with self.assertRaises(MissingOptionError):
            parse([Option("-test", required=True)], [], console=self.console)
        self.assertEqual(self.output().count("Usage:"), 1)

    def testParseSingleOption(self):
        parse([Option("-test", required=True, callback=self.calls.append)], ["-test"], console=self.console)
        self.assertEqual(self.calls, [None])
        self.assertEqual(self.output(), "")

    def testParseSingleVerb(self):
        parse([Verb("test", callback=self.calls.append)], ["test"], console=self.console)
        self.assertEqual(self.calls, [()])

    def testParseVerbWithParameterValue(self):
        source = Parameter("--source", required=True, value_required=True)
        parse([Verb("test", source, callback=self.calls.append)], ["test", "--source", "foo"], console=self.console)
        resolved, = self.calls
        self.assertEqual(resolved.value("--source"), "foo")

    def testParseVerbWithMultipleParameters(self):
        source = Parameter("--source", required=True, value_required=True)
        output = Parameter("--output")
        parse([Verb("test", source, output, callback=self.calls.append)], ["test", "--source", "foo"], console=self.console)
        resolved, = self.calls
        self.assertEqual(len(resolved), 2)
        self.assertEqual(resolved.parameters[-1].name, "--output")

    def testParseVerbGroup(self):
        group = Group(
            "verbs",
            Verb("test1", callback=lambda _: self.calls.append("test1")),
            Verb("test2", callback=lambda _: self.calls.append("test2")),
        )
        parse([group], ["test1"], console=self.console)
        self.assertEqual(self.calls, ["test1"])

    def testParseStringArgumentsAreSplit(self):
        parse([Verb("copy", Parameter("--source", value_required=True), callback=self.calls.append)],
              "copy --source 'my file.txt'", console=self.console)
        self.assertEqual(self.calls[0].value("--source"), "my file.txt")

    def testParseDefaultsToSystemArguments(self):
        with patch("sys.argv", ["tool", "list"]):
            parse([Verb("list", callback=self.calls.append)], console=self.console)
        self.assertEqual(self.calls, [()])

    def testParseRejectsNonStringArguments(self):
        with self.assertRaises(TypeError):
            parse([Verb("list")], ["list", 1], console=self.console)

    def testParseEvaluatesInOrder(self):
        parse([
            Option("--verbose", callback=lambda _: self.calls.append("verbose")),
            Verb("list", callback=lambda _: self.calls.append("list")),
        ], ["list", "--verbose"], console=self.console)
        self.assertEqual(self.calls, ["verbose", "list"])

    def testParseFailureStopsLaterParsables(self):
        with self.assertRaises(MissingParameterValueError):
            parse([
                Verb("copy", Parameter("--source", value_required=True)),
                Option("--verbose", callback=self.calls.append),
            ], ["copy", "--verbose", "--source"], console=self.console)
        self.assertEqual(self.calls, [])

    def testParsePrintsHelpBeforeRaising(self):
        group = Group("actions", Verb("build"), Verb("clean"))
        with self.assertRaises(MultipleVerbsError):
            parse([group], ["build", "clean"], console=self.console)
        self.assertIn("actions:", self.output())

    def testParseCallbackErrorsPropagateUnchanged(self):
        def fail(_):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            parse([Verb("list", callback=fail)], ["list"], console=self.console)
        self.assertIn("Usage:", self.output())

    def testParseRichDescrKeepsOriginalFault(self):
        with self.assertRaises(MissingOptionError):
            parse([Option("--token", required=True, descr=Text("auth token"))], ["x"], console=self.console)
        self.assertIn("--token: auth token", self.output())

    def testParseHelpOption(self):
        parse([Verb("list", descr="list files")], ["help"], console=self.console)
        self.assertIn("list: list files", self.output())

    def testParseShellModeExits(self):
        errors = capture()
        with patch("argverb.faults.console", errors):
            with self.assertRaises(SystemExit) as context:
                parse([Option("--token", required=True)], ["list"], console=self.console, shell=True, prog="tool")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("11111", errors.file.getvalue())
        self.assertIn("tool", errors.file.getvalue())

    def testParseRaisedFaultCarriesRuntimeOptions(self):
        with self.assertRaises(MissingOptionError) as context:
            parse([Option("--token", required=True)], ["list"], console=self.console, prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")
        self.assertFalse(context.exception.options["shell"])


if __name__ == "__main__":
    unittest.main()
