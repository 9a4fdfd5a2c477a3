r"""
Argverb parsable descriptors and the matching engine.

Overview
- Descriptors
  • Parameter: named, optionally required, optionally value-bearing modifier of a verb.
  • Option: presence-only flag matched anywhere in the argument list.
  • Verb: sub-command matched on the leading token, with its own parameters.
  • Group: exactly-one-of constraint over a set of verbs.

- Results
  • Resolved: (parameter, value) pair, value is None when absent.
  • ResolvedParameters: declaration-ordered tuple of Resolved with name lookups.

- Decorators
  • @option(...), @verb(...), @group(...): build a parsable and bind the
    decorated function as its callback.

Matching contract
- test(arguments) -> bool decides applicability and may raise a parsing fault.
- evaluate(arguments) calls test and, on a match, invokes the callback with its
  payload: None for Option and Group, ResolvedParameters for Verb.
- Invoking a parsable without a callback is a no-op.

Quick example:
    >>> from argverb import Parameter, verb
    >>> @verb("copy", Parameter("--source", required=True, value_required=True))
    ... def on_copy(parameters):
    ...     print(parameters.value("--source"))
    ...
    >>> on_copy.evaluate(["copy", "--source", "a.txt"])
    a.txt

Public API
- Classes: Parameter, Resolved, ResolvedParameters, Parsable, Option, Verb, Group
- Decorators: option, verb, group
"""
import builtins
import functools
import operator
import re
import warnings
from typing import NamedTuple

from rich.text import Text

from .faults import *
from .utils import *


class ParsableType(type):
    """
    Metaclass that turns descriptor classes into introspectable, sealed variants.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and help output.
    - Seal variant classes (sealed=True) against subclassing, so the set of
      parsables stays closed: Option, Verb and Group.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - verb(name='copy', descr=None, parameters=(...))
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared descriptor metadata.

    - name: must be a string with at least one non-blank character. Tokens are
      matched verbatim, so the name is not trimmed.
    - descr: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string (or rich Text) after trimming.
    - callback (when present): Unset or a callable.

    Raises
    - TypeError: on wrong types (including an explicit None descr).
    - ValueError: on blank strings.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name.strip():
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    elif isinstance(descr, Text) and not descr.plain.strip():
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if "callback" in metadata and not (metadata["callback"] is Unset or callable(metadata["callback"])):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")


class Parameter(metaclass=ParsableType, sealed=True):
    """
    Named modifier of a verb.

    A parameter is found anywhere after the verb token. When value_required is
    set, the token right after it must be a value (not another declared
    parameter name).

    Equality and hashing consider name, required and value_required; the
    description is presentation only.
    """

    __introspectable__ = (
        "name",
        "descr",
        "required",
        "value_required",
    )

    def __new__(cls, name, /, *, descr=Unset, required=False, value_required=False):
        metadata = {
            "name": name,
            "descr": descr,
            "required": bool(required),
            "value_required": bool(value_required),
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __eq__(self, other):
        if not isinstance(other, Parameter):
            return NotImplemented
        return (self.name, self.required, self.value_required) == (other.name, other.required, other.value_required)

    def __hash__(self):
        return hash((self.name, self.required, self.value_required))


class Resolved(NamedTuple):
    """A parameter matched by a verb, with its value (None when absent)."""
    parameter: Parameter
    value: str | None


class ResolvedParameters(tuple):
    """
    Declaration-ordered resolved parameters of a matched verb.

    It holds exactly one Resolved entry per declared parameter and is handed to
    the verb callback.
    """

    def __new__(cls, iterable=(), /):
        return super().__new__(cls, (Resolved(*entry) for entry in iterable))

    @property
    def parameters(self):
        """All Parameter descriptors, order preserved."""
        return tuple(entry.parameter for entry in self)

    def value(self, name, /):
        """
        Value of the first entry named `name`.

        Returns None when the parameter was resolved without a value; raises
        ParameterNotResolvedError when no entry carries that name at all.
        """
        for entry in self:
            if entry.parameter.name == name:
                return entry.value
        raise ParameterNotResolvedError(name)

    def __repr__(self):
        return f"resolved-parameters({", ".join(map(repr, self))})"


class Parsable(metaclass=ParsableType):
    """
    Base of every descriptor that can test/evaluate an argument list.

    The variants are closed: only Option, Verb and Group (defined in this
    module) may derive from it, and each of them is sealed. They define
    __match_args__ so callers tell them apart with structural pattern matching.
    """

    def __init_subclass__(cls, **options):
        if cls.__module__ != __name__:
            raise TypeError("type 'Parsable' is not an acceptable base type")
        super().__init_subclass__(**options)

    def __call__(self, parameters=None, /):
        """
        Invoke the bound callback with the payload; no-op without callback.
        """
        if self._callback is Unset:
            return
        return self._callback(parameters)

    @property
    def callback(self):
        return coalesce(self._callback)

    def test(self, arguments, /):
        raise NotImplementedError

    def evaluate(self, arguments, /):
        """
        Invoke the callback with no payload when test() matches.
        """
        if self.test(arguments):
            self(None)


class Option(Parsable, sealed=True):
    """
    Presence-only flag.

    test() looks for the literal name token anywhere in the arguments; a
    required option that is absent raises MissingOptionError.
    """

    __introspectable__ = (
        "name",
        "descr",
        "required",
    )
    __match_args__ = ("name",)

    def __new__(cls, name, /, *, descr=Unset, required=False, callback=Unset):
        metadata = {
            "name": name,
            "descr": descr,
            "required": bool(required),
            "callback": callback,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def test(self, arguments, /):
        if self._name not in tokenize(arguments):
            if self._required:
                raise MissingOptionError(self)
            return False
        return True


class Verb(Parsable, sealed=True):
    """
    Sub-command anchored on the leading token, with its own parameters.

    Resolution (see test())
    - the first token must equal the verb name, otherwise the verb does not match;
    - every declared parameter is then looked up, in declaration order, in the
      remaining tokens (first occurrence wins, position does not matter);
    - the token following a parameter is its value unless it is missing or is
      itself the name of a declared parameter of this verb.
    """

    __introspectable__ = (
        "name",
        "descr",
        "parameters",
    )
    __match_args__ = ("name", "parameters")

    def __new__(cls, name, /, *parameters, descr=Unset, callback=Unset):
        metadata = {
            "name": name,
            "descr": descr,
            "parameters": parameters,
            "callback": callback,
        }
        _sanitize_metadata(cls, metadata)

        names = set()
        for parameter in parameters:
            if not isinstance(parameter, Parameter):
                raise TypeError(f"{cls.__typename__} parameters must be parameter instances")
            elif parameter.name in names:
                raise ValueError(f"{cls.__typename__} parameters cannot contain duplicates")
            names.add(parameter.name)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def resolve(self, arguments, /):
        """
        Match the arguments and resolve every declared parameter.

        Returns
        - None when the leading token is not this verb.
        - ResolvedParameters (declaration order, one entry per parameter) otherwise.

        Raises
        - MissingParameterError: a required parameter is absent.
        - MissingParameterValueError: a value-required parameter has no value.
        """
        arguments = tokenize(arguments)
        if not arguments or arguments[0] != self._name:
            return None

        arguments = arguments[1:]
        names = {parameter.name for parameter in self._parameters}
        resolved = []
        for parameter in self._parameters:
            try:
                index = arguments.index(parameter.name)
            except ValueError:
                if parameter.required:
                    raise MissingParameterError(parameter) from None
                resolved.append(Resolved(parameter, None))
                continue

            # The following token is a value only if it is not another parameter.
            if index + 1 >= len(arguments) or arguments[index + 1] in names:
                if parameter.value_required:
                    raise MissingParameterValueError(parameter)
                resolved.append(Resolved(parameter, None))
                continue

            resolved.append(Resolved(parameter, arguments[index + 1]))
        return ResolvedParameters(resolved)

    def test(self, arguments, /):
        return self.resolve(arguments) is not None

    def evaluate(self, arguments, /):
        if (resolved := self.resolve(arguments)) is not None:
            self(resolved)


class Group(Parsable, sealed=True):
    """
    Exactly-one-of constraint over verbs.

    test() fails with MultipleVerbsError as soon as a second verb name is found
    while scanning the verbs in declaration order. evaluate() then hands the
    arguments to every verb, so only the verb that matches on its own fires.
    """

    __introspectable__ = (
        "name",
        "descr",
        "verbs",
    )
    __match_args__ = ("name", "verbs")

    def __new__(cls, name, /, *verbs, descr=Unset, callback=Unset):
        metadata = {
            "name": name,
            "descr": descr,
            "verbs": verbs,
            "callback": callback,
        }
        _sanitize_metadata(cls, metadata)

        for verb in verbs:
            if not isinstance(verb, Verb):
                raise TypeError(f"{cls.__typename__} verbs must be verb instances")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if not verbs:
            warnings.warn(EmptyGroupWarning(self), stacklevel=2)
        return self

    def test(self, arguments, /):
        arguments = tokenize(arguments)
        matched = Unset
        for verb in self._verbs:
            if verb.name in arguments:
                if matched is not Unset:
                    raise MultipleVerbsError(self, (matched, verb))
                matched = verb
        return matched is not Unset

    def evaluate(self, arguments, /):
        if self.test(arguments):
            for verb in self._verbs:
                verb.evaluate(arguments)
            self(None)


def option(name, /, *, descr=Unset, required=False):
    """
    Decorator building an Option bound to the decorated function.

    Usage
        @option("--verbose", descr="print more")
        def on_verbose(_): ...
    """
    @rename("option")
    def wrapper(callback, /):
        if not builtins.callable(callback):
            raise TypeError("@option() must be applied to a callable")
        return Option(name, descr=descr, required=required, callback=callback)
    return wrapper


def verb(name, /, *parameters, descr=Unset):
    """
    Decorator building a Verb bound to the decorated function.

    Usage
        @verb("build", Parameter("--target", value_required=True))
        def on_build(parameters): ...
    """
    @rename("verb")
    def wrapper(callback, /):
        if not builtins.callable(callback):
            raise TypeError("@verb() must be applied to a callable")
        return Verb(name, *parameters, descr=descr, callback=callback)
    return wrapper


def group(name, /, *verbs, descr=Unset):
    """
    Decorator building a Group bound to the decorated function.
    """
    @rename("group")
    def wrapper(callback, /):
        if not builtins.callable(callback):
            raise TypeError("@group() must be applied to a callable")
        return Group(name, *verbs, descr=descr, callback=callback)
    return wrapper


__all__ = (
    # Classes (descriptors and results)
    "Parameter",
    "Resolved",
    "ResolvedParameters",
    "Parsable",
    "Option",
    "Verb",
    "Group",

    # Decorators
    "option",
    "verb",
    "group",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports.
del ParsableType
