"""
Argverb command-line orchestration.

Scope
- defaults(parsables): pure help injection (adds a "help" option when missing).
- requires(parsables): whether anything declared is required.
- usage(parsables): the usage listing as a rich Text.
- printhelp(parsables): print the usage listing to a rich console.
- parse(parsables, arguments): evaluate every parsable against the command line.

Behavior of parse()
- Arguments default to sys.argv[1:]; a string is split with shlex.split.
- Help is printed when there are no arguments and nothing is required.
- Parsables are evaluated in order; the first failure stops the evaluation.
  Help is printed first, then parsing faults are surfaced with trigger()
  (raised, or rendered and followed by sys.exit(1) in shell mode). Errors
  raised by callbacks propagate unchanged.
"""
import shlex
import sys
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .faults import *
from .parsables import *
from .utils import *

stdout = Console()


def defaults(parsables, /, *, console=Unset, colorful=True):
    """
    Return a new tuple of parsables with a default "help" option appended.

    The option is added only when no parsable is already named "help". Its
    callback prints the usage of the returned tuple. The input is not modified.
    """
    parsables = tuple(parsables)
    for parsable in parsables:
        if not isinstance(parsable, Option | Verb | Group):
            raise TypeError("parsables must be option, verb or group instances")
    if any(parsable.name == "help" for parsable in parsables):
        return parsables

    def help(_):
        printhelp(defaulted, console=console, colorful=colorful)

    defaulted = parsables + (Option("help", descr="show help", callback=help),)
    return defaulted


def requires(parsables, /):
    """
    Tell whether any parsable declares something required.

    - Option: required flag.
    - Verb: any required parameter.
    - Group: any verb with a required parameter.
    """
    def parametric(verb):
        return any(parameter.required for parameter in verb.parameters)

    for parsable in parsables:
        match parsable:
            case Group(_, verbs) if any(map(parametric, verbs)):
                return True
            case Verb() if parametric(parsable):
                return True
            case Option() if parsable.required:
                return True
    return False


def usage(parsables, /, *, colorful=False):
    """
    Build the usage listing.

    Layout
        Usage:
        <blank>
        \\t<name>: <descr>            (one line per parsable)
        \\t\\t<name>: <descr>          (verb parameters, then a blank line)

    A missing description renders as "<name>:". With colorful=True names and
    descriptions are styled (palette overridable via __styles__ in __main__).
    """
    styles = defaultdict(str, {
        "usage-label": "bold #FF4D94",
        "parsable-name": "bold #36C5F0",
        "parameter-name": "#00E6FF",
        "required-name": "bold #FFD600",
        "descr": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def line(level, name, descr, style):
        text = Text("\t" * level)
        text.append(name, styler(style))
        text.append(":")
        if descr is not None:
            text.append(" ")
            if isinstance(descr, Text) and colorful:
                text.append_text(descr)
            else:
                text.append(str(descr), styler("descr"))
        text.append("\n")
        return text

    help = Text()
    help.append("Usage", styler("usage-label"))
    help.append(":\n\n")
    for parsable in parsables:
        help.append_text(line(1, parsable.name, parsable.descr, "parsable-name"))
        match parsable:
            case Verb(_, parameters) if parameters:
                for parameter in parameters:
                    style = "required-name" if parameter.required else "parameter-name"
                    help.append_text(line(2, parameter.name, parameter.descr, style))
                help.append("\n")
    return help


def printhelp(parsables, /, *, console=Unset, colorful=True):
    """
    Print the usage listing of parsables to a rich console (stdout by default).
    """
    coalesce(console, stdout).print(usage(parsables, colorful=colorful))


def _arguments(arguments, /):
    """
    Internal: normalize the command line to a tuple of strings.

    - Unset: sys.argv without the program name.
    - str: split with shlex.split.
    - Iterable[str]: items as tokens.
    """
    if arguments is Unset:
        return tuple(sys.argv[1:])
    if isinstance(arguments, str):
        return tuple(shlex.split(arguments))
    return tokenize(arguments)


def parse(parsables, arguments=Unset, /, *, console=Unset, shell=False, colorful=True, prog=Unset):
    """
    Evaluate parsables against the command line.

    Parameters
    - parsables: Iterable of Option | Verb | Group, evaluated in order.
    - arguments: Unset | str | Iterable[str] (program name already stripped).
    - console: rich Console used for help output (stdout by default).
    - shell: render faults and exit(1) instead of raising them.
    - colorful: style help and fault output.
    - prog: program name shown in fault headers (defaults to sys.argv[0]).

    Raises
    - the first ParsingException raised by a parsable (when shell is False).
    - any exception raised by a callback, unchanged.
    """
    arguments = _arguments(arguments)
    parsables = defaults(parsables, console=console, colorful=colorful)

    if not arguments and not requires(parsables):
        printhelp(parsables, console=console, colorful=colorful)

    for parsable in parsables:
        try:
            parsable.evaluate(arguments)
        except ParsingException as exception:
            printhelp(parsables, console=console, colorful=colorful)
            trigger(exception, shell=shell, colorful=colorful, prog=prog)
        except Exception:
            printhelp(parsables, console=console, colorful=colorful)
            raise


__all__ = (
    "defaults",
    "requires",
    "usage",
    "printhelp",
    "parse",
)
