"""
Switchyard argument scanner: lookup tables, parsing and usage rendering.

What this module provides
- Arguments: owns a fixed set of switches, indexed by short and long key, and
  parses a raw token list into the switches' handlers plus a list of leftover
  positional arguments.

Scanner (single left-to-right pass, two states)
- awaiting a switch or positional:
  • "--name" → long key lookup; "--" alone is malformed.
  • "-x"     → short key lookup; any other length is malformed.
  • anything else is collected verbatim as a positional argument.
  • a flag switch is applied at once; a value switch becomes pending.
- awaiting the value of a pending switch:
  • the next token is handed to the switch verbatim (even if it starts with '-').
  • a rejected value aborts the parse.
- end of input:
  • a still-pending switch is an error (“switch value expected”).
  • with expected positional names, the positional count must match exactly.

Faults
- every failure is raised as an InvalidInputError subclass with a position-first
  message; values committed before the failure are kept (no rollback).
- key collisions at construction keep the last declaration and emit a
  DuplicatedSwitchWarning.

Quick start
    from switchyard import Arguments, Switch, IntegerHandler, FlagHandler, InvalidInputError

    port = IntegerHandler(6379)
    verbose = FlagHandler()
    arguments = Arguments("server", [
        Switch("port", "p", "port", port),
        Switch("verbose", "v", handler=verbose),
    ], ["config"])

    try:
        arguments.build()
    except InvalidInputError:
        arguments.usage()
        raise
"""
import difflib
import functools
import os.path
import sys
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .faults import *
from .switches import Switch
from .utils import *


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _program_name():
    """
    Default program name: __prog__ in __main__, else the basename of argv[0].
    """
    try:
        return getattr(__import__("__main__"), "__prog__")
    except AttributeError:
        return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "program"


class Arguments:
    """
    Registered switch set plus the scanner that feeds it.

    Parameters
    - program_name: Unset | str
      Display name for the usage block and fault headers.
    - switches: Iterable[Switch]
      Declaration order matters: on a key collision the later switch wins.
    - names: Unset | Iterable[str]
      Expected positional argument names. When given, build() requires exactly
      that many positionals and usage() shows them as placeholders.
    - colorful: bool (keyword-only)
      Style the usage block and faults with the rich palette.

    Lifecycle
    - the lookup tables are built once here; build() is meant to run once per
      token list. Running it again appends further positionals and leaves the
      handlers as they are.
    """

    __introspectable__ = (
        "program_name",
        "names",
        "switches",
        "others",
        "colorful",
    )

    program_name = mirror("program_name")
    names = mirror("names")
    switches = mirror("switches")
    others = mirror("others")
    colorful = mirror("colorful")

    def __init__(self, program_name=Unset, switches=(), names=Unset, *, colorful=False):
        if program_name is Unset:
            program_name = _program_name()
        if not isinstance(program_name, str):
            raise TypeError(f"{type(self).__name__} 'program_name' must be a string")

        switches = list(switches)
        if not all(isinstance(switch, Switch) for switch in switches):
            raise TypeError(f"{type(self).__name__} 'switches' must contain switches only")

        if (names := coalesce(names)) is not None:
            if isinstance(names, str):
                raise TypeError(f"{type(self).__name__} 'names' must be an iterable of strings")
            names = list(names)
            if not all(isinstance(name, str) for name in names):
                raise TypeError(f"{type(self).__name__} 'names' must be strings")

        self._program_name = program_name
        self._names = names
        self._switches = switches
        self._colorful = bool(colorful)
        self._shorts = {}
        self._longs = {}
        self._others = []

        for switch in switches:
            for table, key, spelling in (
                    (self._shorts, switch.switch, "-%s"),
                    (self._longs, switch.ext_switch, "--%s"),
            ):
                if key is None:
                    continue
                if (previous := table.get(key)) is not None and previous is not switch:
                    self.trigger(DuplicatedSwitchWarning(
                        "key %r of switch %r replaces switch %r" % (spelling % key, switch.name, previous.name),
                        title="duplicated switch",
                        code=FaultCode.DUPLICATED_SWITCH,
                        hint="give each switch its own key; the last declaration wins",
                        docs=getdoc(FaultCode.DUPLICATED_SWITCH),
                        key=spelling % key,
                        switch=switch,
                        previous=previous,
                    ), stacklevel=5)
                table[key] = switch

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's context (program name, colors).
        """
        trigger(fault, **options, program=self._program_name, colorful=self._colorful)

    def _lookup(self, table, key, token, index):
        try:
            return table[key]
        except KeyError:
            pass

        known = [*("-" + name for name in self._shorts), *("--" + name for name in self._longs)]
        suggestions = difflib.get_close_matches(token, known, 5)
        try:
            hint = "did you mean %r? run with a valid switch or see the usage" % suggestions[0]
        except IndexError:
            hint = "see the usage for the available switches"
        self.trigger(UnknownSwitchError(
            "unknown switch %r at %s position" % (token, _ordinal(index)),
            title="unknown switch",
            code=FaultCode.UNKNOWN_SWITCH,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_SWITCH),
            token=token,
            index=index,
            suggestions=suggestions,
        ))

    def _resolve(self, token, index):
        """
        Map a dashed token to its registered switch or raise.
        """
        if token.startswith("--"):
            if len(token) == 2:
                self.trigger(MalformedSwitchError(
                    "bare '--' at %s position has no switch name" % _ordinal(index),
                    title="malformed switch",
                    code=FaultCode.MALFORMED_SWITCH,
                    hint="write a long switch as --name",
                    docs=getdoc(FaultCode.MALFORMED_SWITCH),
                    token=token,
                    index=index,
                ))
            return self._lookup(self._longs, token[2:], token, index)

        if len(token) != 2:
            self.trigger(MalformedSwitchError(
                "bad form of switch %r at %s position" % (token, _ordinal(index)),
                title="malformed switch",
                code=FaultCode.MALFORMED_SWITCH,
                hint="short switches are a dash and one character (e.g. -v); use --name for long ones",
                docs=getdoc(FaultCode.MALFORMED_SWITCH),
                token=token,
                index=index,
            ))
        return self._lookup(self._shorts, token[1], token, index)

    def build(self, tokens=Unset, /):
        """
        Parse `tokens` into the registered handlers and the positional list.

        Parameters
        - tokens: Unset | Iterable[str]
          Raw arguments, conventionally argv without the program name. When
          Unset, sys.argv[1:] is used.

        Raises
        - MalformedSwitchError: bare "--", or a short token of the wrong length.
        - UnknownSwitchError: no switch registered under the key.
        - InvalidValueError: the handler rejected the value token, or failed
          while checking it (the failure is chained as __cause__).
        - MissingValueError: input ended while a switch awaited its value.
        - ArgumentCountError: positional count differs from the expected names.
        """
        tokens = sys.argv[1:] if tokens is Unset else tokens
        pending = None  # (switch, token, index) awaiting a value

        for index, token in enumerate(tokens, 1):
            if pending is not None:
                switch, input, _ = pending
                try:
                    accepted, cause = switch.parse_value(token), None
                except Exception as exc:
                    accepted, cause = False, exc
                if not accepted:
                    self.trigger(InvalidValueError(
                        "invalid value %r for switch %r at %s position" % (token, input, _ordinal(index)),
                        title="invalid value",
                        code=FaultCode.INVALID_VALUE,
                        hint="%s expects%s" % (input, switch.handler.value_type() or " no value"),
                        docs=getdoc(FaultCode.INVALID_VALUE),
                        token=token,
                        index=index,
                        switch=switch,
                        cause=cause,
                    ))
                pending = None
            elif token.startswith("-"):
                switch = self._resolve(token, index)
                if switch.requires_value():
                    pending = switch, token, index
                else:
                    switch.set_value()
            else:
                self._others.append(token)

        if pending is not None:
            switch, input, position = pending
            self.trigger(MissingValueError(
                "switch value expected after %r at %s position" % (input, _ordinal(position)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="pass a value after it (for example: %s <value>)" % input,
                docs=getdoc(FaultCode.MISSING_VALUE),
                token=input,
                index=position,
                switch=switch,
            ))

        if self._names is not None and len(self._names) != len(self._others):
            self.trigger(ArgumentCountError(
                "incorrect number of arguments: expected %d, received %d" % (len(self._names), len(self._others)),
                title="incorrect number of arguments",
                code=FaultCode.ARGUMENT_COUNT,
                hint="expected %s" % (" ".join("<%s>" % name for name in self._names) or "no arguments"),
                docs=getdoc(FaultCode.ARGUMENT_COUNT),
                expected=len(self._names),
                received=len(self._others),
            ))

    def get_other_arguments(self):
        """
        Return the collected positional arguments, in input order.
        """
        return list(self._others)

    def _listing(self):
        """
        Reachable switches in usage order, each once.

        Switches still reachable by their short key come first, then switches
        only reachable by their long key, both in declaration order. Fully
        shadowed switches are skipped.
        """
        listed = dict.fromkeys(
            switch for switch in self._switches if self._shorts.get(switch.switch) is switch
        )
        for switch in self._switches:
            if self._longs.get(switch.ext_switch) is switch:
                listed.setdefault(switch)
        return list(listed)

    def _render(self):
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "argument-name": "bold #FFD600",  # AMBER for positional placeholders
            "switch-key": "bold #22C55E",  # GREEN for switch keys
            "value-type": "#9CA3AF",  # Muted gray
            "switch-name": "",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful and style else ""

        head = [("Usage: ", styler("usage-label")), (self._program_name, styler("program-name"))]
        for name in self._names or ():
            head.extend((" ", ("<%s>" % name, styler("argument-name"))))

        lines = [Text.assemble(*head)]
        for switch in self._listing():
            # advertise only the keys that still resolve to this switch
            fragments = switch.fragments(
                short=self._shorts.get(switch.switch) is switch,
                long=self._longs.get(switch.ext_switch) is switch,
            )
            lines.append(Text.assemble("  ", *(
                (fragment, styler(style)) for fragment, style in fragments
            )))
        return Text("\n").join(lines)

    def format_usage(self):
        """
        Return the usage block as plain text.
        """
        return self._render().plain

    def usage(self):
        """
        Print the usage block to standard output.
        """
        Console(highlight=False, soft_wrap=True).print(self)

    def __rich__(self):
        return self._render()

    def __repr__(self):
        return f"arguments({", ".join("%s=%r" % pair for pair in self.__rich_repr__())})"

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)


__all__ = (
    "Arguments",
)
