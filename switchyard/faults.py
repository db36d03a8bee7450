"""
Switchyard faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
- InvalidInputError: the single error category raised by Arguments.build(); each
  subclass names the concrete cause (malformed token, unknown key, bad value, ...).
- SwitchWarning: non-fatal declaration issues (colliding keys, unreachable switches),
  emitted through the standard warnings machinery.
- trigger(): central entry point to surface any fault.
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: every parse message carries the ordinal position of
  the offending token (“at third position”).
- Lowercased tone, one-sentence bodies, a single clear hint.

Integration
- The parser builds a fault and calls trigger(fault, **ctx). Errors are raised,
  warnings are emitted with warnings.warn(). Nothing here prints or exits; callers
  that want a friendly report can hand the fault to a rich Console.
"""
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - switches (111xx)
      • MALFORMED_SWITCH, UNKNOWN_SWITCH, INVALID_VALUE, MISSING_VALUE
    - positionals (112xx)
      • ARGUMENT_COUNT
    - declaration warnings (121xx)
      • DUPLICATED_SWITCH, UNREACHABLE_SWITCH
    """
    # --- switch errors (111xx) ---
    MALFORMED_SWITCH            = 11111
    UNKNOWN_SWITCH              = 11112
    INVALID_VALUE               = 11113
    MISSING_VALUE               = 11114

    # --- positional errors (112xx) ---
    ARGUMENT_COUNT              = 11211

    # --- declaration warnings (121xx) ---
    DUPLICATED_SWITCH           = 12111
    UNREACHABLE_SWITCH          = 12112

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderer(fault, palette):
    """
    build the (styler, text) pair shared by every fault renderer.

    styles from __styles__ in __main__ override the palette; with colorful off,
    every fragment is rendered as plain text.
    """
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    return styler, text


class InvalidInputError(Exception):
    """
    invalid command-line input (the only error category of the parser).

    carries
    - message: one lowercase sentence, position-first where a token is involved.
    - options: read-only mapping with code, title, hint and any parse context
      (token, index, switch, expected, received, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styler, text = _renderer(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(self.options.get("program", ""), styler("prog-name")),
            " — ",
            text(code.normalize() if code else "", styler("code")),
            " | ",
            text(self.options.get("title", "").title(), styler("error-title")),
            " ]"
        )
        message = text(self, styler("error-message"))
        if not (hint := self.options.get("hint")):
            return Group(header, message)
        return Group(header, message, Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    def __trigger__(self) -> None:
        # 'cause' chains the underlying exception; otherwise context is hidden
        raise self from self.options.get("cause")

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MalformedSwitchError(InvalidInputError): ...
class UnknownSwitchError(InvalidInputError): ...
class InvalidValueError(InvalidInputError): ...
class MissingValueError(InvalidInputError): ...
class ArgumentCountError(InvalidInputError): ...


class SwitchWarning(Warning):
    """
    non-fatal issue found while declaring switches.

    emitted with warnings.warn(), so hosts can silence it or turn it into an
    error with the usual warning filters.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else ""

    def __rich__(self):
        styler, text = _renderer(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(self.options.get("program", ""), styler("prog-name")),
            " — ",
            text(code.normalize() if code else "", styler("code")),
            " | ",
            text(self.options.get("title", "").title(), styler("warning-title")),
            " ]"
        )
        message = text(self, styler("warning-message"))
        if not (hint := self.options.get("hint")):
            return Group(header, message)
        return Group(header, message, Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    def __trigger__(self) -> None:
        warnings.warn(self, stacklevel=self.options.get("stacklevel", 4))

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicatedSwitchWarning(SwitchWarning): ...
class UnreachableSwitchWarning(SwitchWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - errors are raised, warnings are emitted through warnings.warn().
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings. when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "InvalidInputError",
    "MalformedSwitchError",
    "UnknownSwitchError",
    "InvalidValueError",
    "MissingValueError",
    "ArgumentCountError",
    "SwitchWarning",
    "DuplicatedSwitchWarning",
    "UnreachableSwitchWarning",
    "trigger",
    "getdoc",
)
