"""
Switchyard switch declarations.

A Switch adapts one value handler to the command-line key namespace:
- switch: optional short key, a single character typed as "-x".
- ext_switch: optional long key typed as "--name".
- name: the human label shown in the usage block (never used for lookup).

Parsing calls are delegated to the handler; the switch itself only adds the
keys and the usage line. A switch without any key cannot be reached by the
parser; it is still accepted, but an UnreachableSwitchWarning is emitted.

Usage line shapes
    -p (or --port) int - port
    -m size - max memory
    --ss string - string
    -v - verbose
"""
import re

from .faults import *
from .handlers import ValueHandler
from .utils import *


def _sanitize_keys(cls, switch, ext_switch, /):
    """
    Internal: validate and normalize the short and long keys of a switch.

    rules
    - switch: Unset/None, or a single non-blank character other than '-'.
    - ext_switch: Unset/None, or a non-empty string without whitespace that
      does not start with '-' (the parser strips exactly two dashes).

    returns
    - (switch, ext_switch) with Unset normalized to None.
    """
    switch = coalesce(switch)
    ext_switch = coalesce(ext_switch)

    if switch is not None:
        if not isinstance(switch, str):
            raise TypeError(f"{cls.__name__} 'switch' must be a single character")
        elif len(switch) != 1 or switch == "-" or switch.isspace():
            raise ValueError(f"{cls.__name__} 'switch' must be a single non-blank character other than '-'")

    if ext_switch is not None:
        if not isinstance(ext_switch, str):
            raise TypeError(f"{cls.__name__} 'ext_switch' must be a string")
        elif not ext_switch or re.search(r"\s", ext_switch) or ext_switch.startswith("-"):
            raise ValueError(f"{cls.__name__} 'ext_switch' must be a non-empty name without spaces or leading dashes")

    return switch, ext_switch


class Switch[_T]:
    """
    Named, externally addressable command-line switch bound to one handler.

    Parameters
    - name: str
      Display label for the usage block. Must be non-empty after trimming.
    - switch: Unset | None | str
      Short key (single character).
    - ext_switch: Unset | None | str
      Long key (without the leading "--").
    - handler: ValueHandler
      Typed state behind the switch. The switch borrows it; the caller keeps
      ownership and reads the parsed value from it.
    """

    __introspectable__ = (
        "name",
        "switch",
        "ext_switch",
        "handler",
    )

    name = mirror("name")
    switch = mirror("switch")
    ext_switch = mirror("ext_switch")
    handler = mirror("handler")

    def __init__(self, name, switch=Unset, ext_switch=Unset, handler=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__name__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__name__} 'name' cannot be empty")

        if not isinstance(handler, ValueHandler):
            raise TypeError(f"{type(self).__name__} 'handler' must be a value handler")

        self._name = name
        self._switch, self._ext_switch = _sanitize_keys(type(self), switch, ext_switch)
        self._handler = handler

        if self._switch is None and self._ext_switch is None:
            trigger(UnreachableSwitchWarning(
                "switch %r has neither a short nor a long key" % name,
                title="unreachable switch",
                code=FaultCode.UNREACHABLE_SWITCH,
                hint="give it a short key (e.g. 'x') or a long key (e.g. 'name')",
                docs=getdoc(FaultCode.UNREACHABLE_SWITCH),
                switch=self,
            ), stacklevel=4)

    @property
    def value(self):
        """
        Current value of the bound handler.
        """
        return self._handler.get_value()

    def keys(self):
        """
        Yield the spellings of this switch as typed on the command line.
        """
        if self._switch is not None:
            yield "-" + self._switch
        if self._ext_switch is not None:
            yield "--" + self._ext_switch

    def parse_value(self, text, /):
        return self._handler.parse_value(text)

    def requires_value(self):
        return self._handler.requires_value()

    def set_value(self):
        self._handler.set_value()

    def fragments(self, *, short=True, long=True):
        """
        Yield (text, palette-key) pairs composing the usage line.

        Shared by to_string() (plain) and the rich renderers (styled).
        `short` and `long` hide a key, e.g. one taken over by another switch.
        """
        short = self._switch if short else None
        long = self._ext_switch if long else None
        if short is None and long is None:
            yield self._name, "switch-name"
            return

        if short is not None:
            yield "-" + short, "switch-key"
            if long is not None:
                yield " (or ", ""
                yield "--" + long, "switch-key"
                yield ")", ""
        else:
            yield "--" + long, "switch-key"

        if self.requires_value():
            yield self._handler.value_type(), "value-type"
        yield " - ", ""
        yield self._name, "switch-name"

    def to_string(self):
        return "".join(fragment for fragment, _ in self.fragments())

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return f"switch({", ".join("%s=%r" % pair for pair in self.__rich_repr__())})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


__all__ = (
    "Switch",
)
