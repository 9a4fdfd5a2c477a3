"""
Argverb faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parsing issue.
- ParsingException: base type carrying a message + options that knows how to
  render itself in a friendly, lowercased and actionable way.
- MissingOptionError, MissingParameterError, MissingParameterValueError,
  MultipleVerbsError, ParameterNotResolvedError: the parsing taxonomy. Each
  exposes the offending descriptor as an attribute.
- ParsingWarning / EmptyGroupWarning: construction-time warnings.
- trigger(): central entry point to surface a fault (raise, or render and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The matching engine raises the faults directly; nothing is swallowed.
- The parser prints help and calls trigger(fault, **ctx). In non-shell mode the
  fault is raised again; in shell mode it is rendered via rich and the process exits.
"""
import copy
import inspect
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - options (1111x)
      • MISSING_OPTION
    - verbs and parameters (1112x)
      • MISSING_PARAMETER, MISSING_PARAMETER_VALUE
    - groups (1113x)
      • MULTIPLE_VERBS
    - lookups (1114x)
      • PARAMETER_NOT_RESOLVED
    - warnings (12xxx)
      • EMPTY_GROUP
    """
    # --- option errors (1111x) ---
    MISSING_OPTION              = 11111

    # --- verb/parameter errors (1112x) ---
    MISSING_PARAMETER           = 11121
    MISSING_PARAMETER_VALUE     = 11122

    # --- group errors (1113x) ---
    MULTIPLE_VERBS              = 11131

    # --- lookup errors (1114x) ---
    PARAMETER_NOT_RESOLVED      = 11141

    # --- warnings (12xxx) ---
    EMPTY_GROUP                 = 12131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    return getattr(
        __import__("__main__"),
        "__prog__",
        coalesce(options.get("prog", Unset), os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "argverb")
    )


def _render(fault, palette):
    """
    shared rich rendering for faults and warnings.

    layout
    - header: [ prog — code | title ]
    - message line
    - hint line (arrow + hint), and docs when the host provides them
    """
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    code = fault.options["code"]
    header = Text.assemble(
        "[ ",
        text(_prog(fault.options), "prog-name"),
        " — ",
        text(code.normalize(), "code"),
        " | ",
        text(fault.options["title"].title(), "title"),
        " ]"
    )
    renders = [header, text(fault.message, "message")]
    if fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(fault.options["hint"], "hint")))
    if docs := getdoc(code):
        renders.append(text(docs, "docs"))

    if fault.options.get("fancy", False):
        return Panel(Group(*renders[1:]), title=header, title_align="left")
    return Group(*renders)


class ParsingException(Exception):
    """
    base type of every fault raised while matching arguments.

    - message: one-sentence, lowercased description.
    - options: read-only mapping with at least 'code', 'title' and 'hint';
      the parser adds 'prog', 'colorful' and 'shell' before triggering.
    """
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
            "docs": "underline #00E5FF dim",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        clone = copy.copy(self)
        clone.options = MappingProxyType({**self.options, **overrides})
        return clone


class MissingOptionError(ParsingException):
    def __init__(self, option, /, **options):
        super().__init__(f"option {option.name!r} is required but was not given", **{
            "code": FaultCode.MISSING_OPTION,
            "title": "missing option",
            "hint": f"add {option.name!r} to the command line",
        } | options)
        self.option = option


class MissingParameterError(ParsingException):
    def __init__(self, parameter, /, **options):
        super().__init__(f"parameter {parameter.name!r} is required but was not given", **{
            "code": FaultCode.MISSING_PARAMETER,
            "title": "missing parameter",
            "hint": f"add {parameter.name!r} after the verb",
        } | options)
        self.parameter = parameter


class MissingParameterValueError(ParsingException):
    def __init__(self, parameter, /, **options):
        super().__init__(f"parameter {parameter.name!r} requires a value", **{
            "code": FaultCode.MISSING_PARAMETER_VALUE,
            "title": "missing parameter value",
            "hint": f"write the value right after {parameter.name!r}",
        } | options)
        self.parameter = parameter


class MultipleVerbsError(ParsingException):
    def __init__(self, group, verbs, /, **options):
        verbs = tuple(verbs)
        super().__init__(f"group {group.name!r} accepts a single verb but got {" and ".join(repr(verb.name) for verb in verbs)}", **{
            "code": FaultCode.MULTIPLE_VERBS,
            "title": "multiple verbs",
            "hint": f"choose only one of {", ".join(repr(verb.name) for verb in group.verbs)}",
        } | options)
        self.group = group
        self.verbs = verbs


class ParameterNotResolvedError(ParsingException, LookupError):
    def __init__(self, name, /, **options):
        super().__init__(f"parameter {name!r} was not resolved", **{
            "code": FaultCode.PARAMETER_NOT_RESOLVED,
            "title": "parameter not resolved",
            "hint": "look up one of the parameters declared by the verb",
        } | options)
        self.name = name


class ParsingWarning(Warning):
    """
    base type of construction-time warnings (rendered like faults).
    """
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
            "docs": "underline #FFB400 dim",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        clone = copy.copy(self)
        clone.options = MappingProxyType({**self.options, **overrides})
        return clone


class EmptyGroupWarning(ParsingWarning):
    def __init__(self, group, /, **options):
        super().__init__(f"group {group.name!r} has no verbs and will never match", **{
            "code": FaultCode.EMPTY_GROUP,
            "title": "empty group",
            "hint": "declare at least one verb in the group",
        } | options)
        self.group = group


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings are issued through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParsingException",
    "MissingOptionError",
    "MissingParameterError",
    "MissingParameterValueError",
    "MultipleVerbsError",
    "ParameterNotResolvedError",
    "ParsingWarning",
    "EmptyGroupWarning",
    "trigger",
    "getdoc",
)
