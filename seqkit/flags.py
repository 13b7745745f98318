r"""
seqkit flag specifications.

Overview
- Flag: a named switch with an optional one-letter shorthand, a declared type
  (str, int or bool), a default, a help text and a scope:
  • persistent=True: declared once, inherited by every descendant command.
  • persistent=False: visible on the declaring command only.
- Values: the read-only mapping of flag name to parsed value handed to callbacks,
  together with the set of names that were set on the command line.

Metadata (sanitized on construction)
- name: long name without dashes, r"[^\W\d_](-?[^\W_]+)*" (e.g. "seq-type").
- shorthand: Unset | single letter or digit without dash (e.g. "t").
- type: str | int | bool.
- default: defaults to the zero value of the type ("", 0, False); must convert cleanly.
- descr: help text, non-empty when provided.
- choices: optional closed set of accepted values (str flags only).

Conversion
- str: taken verbatim (validated against choices when present).
- int: signed 64-bit; base prefixes accepted ("0x1f", "0o17", "0b11") and a bare
  leading zero means octal ("010" is 8).
- bool: 1, t, T, TRUE, true, True, 0, f, F, FALSE, false, False.
"""
import builtins
import functools
import operator
import re
from collections.abc import Iterable, Mapping

from .utils import *

_TRUTHY = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSY = frozenset(("0", "f", "F", "FALSE", "false", "False"))

_ZERO = {str: "", int: 0, bool: False}


def parse_bool(raw, /):
    """Parse a boolean spelling; raise ValueError for anything else."""
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"parsing \"{raw}\": invalid syntax")


# Integer flags and SEQKIT_THREADS hold signed 64-bit values.
INT64 = range(-(1 << 63), 1 << 63)

_INT_SYNTAX = re.compile(r"[+-]?[0-9A-Za-z_]+")
_DECIMAL = re.compile(r"[+-]?[0-9]+")
_LEADING_ZERO_OCTAL = re.compile(r"[+-]?0(_?[0-7])+")


def parse_int(raw, /):
    """
    Parse a signed 64-bit integer; raise ValueError when malformed or out of range.

    Base prefixes 0x, 0o and 0b are accepted, a bare leading zero means octal
    ("010" is 8) and underscores may separate digits.
    """
    if not _INT_SYNTAX.fullmatch(raw):
        raise ValueError(f"parsing \"{raw}\": invalid syntax")
    try:
        value = int(raw, 8) if _LEADING_ZERO_OCTAL.fullmatch(raw) else int(raw, 0)
    except ValueError:
        # very long decimals exceed int()'s digit limit
        if _DECIMAL.fullmatch(raw) and raw.lstrip("+-")[0] != "0":
            raise ValueError(f"parsing \"{raw}\": value out of range") from None
        raise ValueError(f"parsing \"{raw}\": invalid syntax") from None
    if value not in INT64:
        raise ValueError(f"parsing \"{raw}\": value out of range")
    return value


class FlagType(type):
    """
    Metaclass giving flag specs read-only, introspectable fields.

    - __typename__ is derived from the class name and used in construction errors.
    - every name in __introspectable__ becomes a read-only property over "_<name>".
    - __repr__/__rich_repr__ list the introspectable fields.
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
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize flag metadata in place.

    Raises
    - TypeError: when a field has the wrong type.
    - ValueError: when a name is malformed, descr is blank, choices repeat,
      or the default does not convert.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not re.fullmatch(r"[^\W\d_](-?[^\W_]+)*", name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' must be a valid long flag name without dashes, got {name!r}")
    metadata["name"] = name

    if not isinstance(shorthand := metadata["shorthand"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'shorthand' must be a string")
    elif isinstance(shorthand, str) and not re.fullmatch(r"[^\W_]", shorthand):
        raise ValueError(f"{cls.__typename__} 'shorthand' must be a single letter or digit, got {shorthand!r}")
    metadata["shorthand"] = coalesce(shorthand)

    if metadata["type"] not in _ZERO:
        raise TypeError(f"{cls.__typename__} 'type' must be one of str, int or bool")

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr, "")

    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings")
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    if sanitized and metadata["type"] is not str:
        raise TypeError(f"{cls.__typename__} 'choices' are only supported on string flags")
    metadata["choices"] = tuple(sanitized)

    default = coalesce(metadata["default"], _ZERO[metadata["type"]])
    if type(default) is not metadata["type"]:
        raise TypeError(f"{cls.__typename__} 'default' must be of type {metadata['type'].__name__}")
    if metadata["choices"] and default not in metadata["choices"]:
        raise ValueError(f"{cls.__typename__} 'default' {default!r} is not one of the choices")
    metadata["default"] = default

    metadata["persistent"] = bool(metadata["persistent"])
    metadata["hidden"] = bool(metadata["hidden"])


class Flag(metaclass=FlagType):
    """
    Named switch declared on a command.

    Example
        Flag("threads", "j", type=int, default=4, descr="number of CPUs", persistent=True)
    """
    __introspectable__ = (
        "name",
        "shorthand",
        "type",
        "default",
        "descr",
        "choices",
        "persistent",
        "hidden",
    )

    def __init__(
            self,
            name,
            shorthand=Unset,
            /,
            type=str,
            default=Unset,
            descr=Unset,
            *,
            choices=(),
            persistent=False,
            hidden=False,
    ):
        metadata = {
            "name": name,
            "shorthand": shorthand,
            "type": type,
            "default": default,
            "descr": descr,
            "choices": choices,
            "persistent": persistent,
            "hidden": hidden,
        }
        _sanitize_metadata(builtins.type(self), metadata)
        for key, value in metadata.items():
            setattr(self, "_" + key, value)

    @property
    def boolean(self):
        """Presence-only flag: `--name` alone means True."""
        return self._type is bool

    @property
    def label(self):
        """Human-readable spelling used in error messages, e.g. "-j, --threads"."""
        if self._shorthand:
            return f"-{self._shorthand}, --{self._name}"
        return f"--{self._name}"

    @property
    def varname(self):
        """Value placeholder shown in the flags table ("" for booleans)."""
        return {str: "string", int: "int", bool: ""}[self._type]

    def convert(self, raw, /):
        """
        Convert a command-line string into a typed value.

        Raises ValueError with a short reason when the value is not acceptable.
        """
        if self._type is bool:
            return parse_bool(raw)
        if self._type is int:
            return parse_int(raw)
        if self._choices and raw not in self._choices:
            raise ValueError("must be one of %s" % ", ".join(self._choices))
        return raw


class Values(Mapping):
    """
    Read-only mapping of flag name to value, as handed to command callbacks.

    `changed` holds the names explicitly set on the command line.
    """

    def __init__(self, values, changed=()):
        self._values = dict(values)
        self._changed = frozenset(changed)

    changed = mirror("changed")

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return f"values({self._values!r}, changed={sorted(self._changed)!r})"


__all__ = (
    "Flag",
    "Values",
    "parse_bool",
    "parse_int",
)
