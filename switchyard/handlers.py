r"""
Switchyard value handlers.

Overview
- ValueHandler: abstract holder of one typed value. It knows how to parse and
  validate a textual value into that state, whether a following value token is
  needed at all, and how to describe its type in the usage block.
- Variants
  • IntegerHandler: signed decimal integer with an optional validator.
  • SizeHandler: byte count written as an integer with an optional K/M/G suffix.
  • StringHandler: arbitrary text, always accepted.
  • ChoiceHandler: one member of a fixed set of strings (exact match).
  • FlagHandler: presence-only boolean, false until its switch is seen.

Contract (shared by every variant)
- parse_value(text) -> bool: commit the value only when conversion and validation
  both succeed; report the outcome as a boolean, never as an exception.
- requires_value() -> bool: True for typed variants, False for FlagHandler.
- set_value(): no-op for typed variants; FlagHandler flips to True.
- value_type() -> str: short label for the usage block (" int", " size", ...).

Ownership
- Handlers belong to the hosting program. Switches only reference them, so the
  host reads the parsed values straight from its handlers after Arguments.build().

Example
    >>> port = IntegerHandler(6379, validator=lambda x: 0 < x < 65536)
    >>> port.parse_value("3333")
    True
    >>> port.value
    3333
"""
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Set

from .utils import *

_DECIMAL = re.compile(r"[+-]?[0-9]+")

_MULTIPLIERS = {
    "K": 1024,
    "M": 1024 * 1024,
    "G": 1024 * 1024 * 1024,
}


def _decimal(text, /):
    """
    convert an ASCII decimal literal to int, or return Unset when it is not one.

    int() alone is too lenient here: it accepts surrounding whitespace,
    underscores and non-ASCII digits.
    """
    if not _DECIMAL.fullmatch(text):
        return Unset
    return int(text)


def _validate(validator, value, /):
    """
    run an optional validator; a ValueError raised by it counts as a rejection,
    anything else propagates (the scanner reports it as an invalid value).
    """
    if validator is None:
        return True
    try:
        return bool(validator(value))
    except ValueError:
        return False


def _sanitize_validator(cls, validator, /):
    if validator is not Unset and validator is not None and not callable(validator):
        raise TypeError(f"{cls.__name__} 'validator' must be callable")
    return coalesce(validator)


def _sanitize_integer(cls, value, /):
    # bool is an int subclass, but True is never a meaningful port or size
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{cls.__name__} default value must be an integer")
    return value


class ValueHandler[_T](ABC):
    """
    Typed value state behind a switch.

    Subclasses implement parse_value() and value_type(); the defaults of
    requires_value() and set_value() fit every value-bearing variant.
    """

    def __init__(self, value, /):
        self._value = value

    value = mirror("value")

    def get_value(self):
        """
        Return the current value (the default until a parse commits a new one).
        """
        return self._value

    @abstractmethod
    def parse_value(self, text, /):
        """
        Convert and validate `text`; commit and return True, or return False.
        """
        raise NotImplementedError

    def requires_value(self):
        return True

    def set_value(self):
        """
        Presence trigger. Value-bearing handlers ignore it.
        """

    @abstractmethod
    def value_type(self):
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({", ".join("%s=%r" % pair for pair in self.__rich_repr__())})"

    def __rich_repr__(self):
        yield "value", self._value


class IntegerHandler(ValueHandler[int]):
    """
    Signed decimal integer, optionally checked by a validator predicate.

    parse rules
    - text must be an ASCII decimal literal with an optional sign ("42", "-7", "+3").
    - the validator (int -> bool) runs on the converted value; a falsy result or a
      ValueError rejects the input and keeps the previous value.
    """

    def __init__(self, value=0, /, validator=Unset):
        super().__init__(_sanitize_integer(type(self), value))
        self._validator = _sanitize_validator(type(self), validator)

    validator = mirror("validator")

    def parse_value(self, text, /):
        if (value := _decimal(text)) is Unset:
            return False
        if not _validate(self._validator, value):
            return False
        self._value = value
        return True

    def value_type(self):
        return " int"


class SizeHandler(ValueHandler[int]):
    """
    Byte count with an optional binary unit suffix.

    parse rules
    - the last character picks the multiplier: K → 1024, M → 1024², G → 1024³,
      anything else → 1 (the whole text is then the number).
    - the remainder must be a decimal literal; "", "K", "1.5M" and "12k" are rejected.
    - the validator sees the scaled value.

    examples
    - "64"  → 64
    - "4K"  → 4096
    - "1M"  → 1048576
    - "2G"  → 2147483648
    """

    def __init__(self, value=0, /, validator=Unset):
        super().__init__(_sanitize_integer(type(self), value))
        self._validator = _sanitize_validator(type(self), validator)

    validator = mirror("validator")

    def parse_value(self, text, /):
        if not text:
            return False

        multiplier = _MULTIPLIERS.get(text[-1], 1)
        if multiplier != 1:
            text = text[:-1]

        if (size := _decimal(text)) is Unset:
            return False
        if not _validate(self._validator, size := size * multiplier):
            return False
        self._value = size
        return True

    def value_type(self):
        return " size"


class StringHandler(ValueHandler[str]):
    """
    Arbitrary text; every input is accepted verbatim.
    """

    def __init__(self, value="", /):
        if not isinstance(value, str):
            raise TypeError(f"{type(self).__name__} default value must be a string")
        super().__init__(value)

    def parse_value(self, text, /):
        self._value = text
        return True

    def value_type(self):
        return " string"


class ChoiceHandler(ValueHandler[str]):
    """
    One member of a fixed set of allowed strings.

    rules
    - matching is exact and case-sensitive.
    - a rejected input leaves the current value untouched.
    - the default does not have to be a member; it marks “not chosen yet”.
    - choices keep their declaration order for the usage block. duplicates are
      rejected unless a Set is given (a Set is rendered in sorted order).
    """

    def __init__(self, value, choices, /):
        if not isinstance(value, str):
            raise TypeError(f"{type(self).__name__} default value must be a string")
        if not isinstance(choices, Iterable) or isinstance(choices, str):
            raise TypeError(f"{type(self).__name__} 'choices' must be an iterable of strings")

        sanitized = []
        for choice in sorted(choices) if isinstance(choices, Set) else choices:
            if not isinstance(choice, str):
                raise TypeError(f"{type(self).__name__} 'choices' must be strings")
            elif not choice:
                raise ValueError(f"{type(self).__name__} 'choices' cannot be empty-strings")
            elif choice in sanitized:
                raise ValueError(f"{type(self).__name__} 'choices' cannot contain duplicates")
            sanitized.append(choice)

        if not sanitized:
            raise ValueError(f"{type(self).__name__} must specify at least one choice")

        super().__init__(value)
        self._choices = tuple(sanitized)

    choices = property(lambda self: self._choices)

    def parse_value(self, text, /):
        if text not in self._choices:
            return False
        self._value = text
        return True

    def value_type(self):
        return " " + "|".join(self._choices)

    def __rich_repr__(self):
        yield from super().__rich_repr__()
        yield "choices", self._choices


class FlagHandler(ValueHandler[bool]):
    """
    Presence-only boolean.

    The flag starts False and becomes True when its switch occurs. It never
    consumes a value token, so feeding it text is a programming error.
    """

    def __init__(self):
        super().__init__(False)

    def parse_value(self, text, /):
        raise TypeError(f"{type(self).__name__} does not take a value")

    def requires_value(self):
        return False

    def set_value(self):
        self._value = True

    def value_type(self):
        return ""


__all__ = (
    "ValueHandler",
    "IntegerHandler",
    "SizeHandler",
    "StringHandler",
    "ChoiceHandler",
    "FlagHandler",
)
