"""
argtree faults (parse errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing parse error.
- ParseError: base type that carries message + options and knows how to render itself.
- trigger(): central entry point to surface a fault (raise it, or print it and exit).
- AskOverridesDefaultWarning: construction-time advisory for schemas.

Construction errors (bad flag names, duplicate aliases, ...) are not faults: they are
plain TypeError/ValueError raised while the command tree is being defined.

UX goals
- Position-first messages: options and values include the ordinal position of the
  offending token (“at third position”).
- Short titles, one-sentence bodies, a single clear hint.
- Styling is configurable via __styles__ in __main__, codes via __codes__.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - options (111xx)
      • EQUAL_ASSIGNMENT, UNKNOWN_OPTION, NEGATION_ASSIGNMENT, MISSING_OPTION_VALUE,
        DUPLICATE_OPTION, MULTIPLE_VALUES, UNEXPECTED_VALUE, REQUIRED_OPTION,
        INVALID_OPTION_VALUE
    - positionals (112xx)
      • MISSING_ARGUMENTS, INVALID_ARGUMENT_VALUE, UNEXPECTED_ARGUMENTS
    """
    # --- option errors (111xx) ---
    EQUAL_ASSIGNMENT            = 11101
    UNKNOWN_OPTION              = 11102
    NEGATION_ASSIGNMENT         = 11103
    MISSING_OPTION_VALUE        = 11104
    DUPLICATE_OPTION            = 11105
    MULTIPLE_VALUES             = 11106
    UNEXPECTED_VALUE            = 11107
    REQUIRED_OPTION             = 11108
    INVALID_OPTION_VALUE        = 11109

    # --- positional errors (112xx) ---
    MISSING_ARGUMENTS           = 11201
    INVALID_ARGUMENT_VALUE      = 11202
    UNEXPECTED_ARGUMENTS        = 11203

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to override
        numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParseError(Exception):
    """
    Base class of every user-input error raised while parsing a command line.

    Options (read-only mapping)
    - code, title, hint: presentation metadata (always present).
    - input/index: offending token and its 1-based position, when known.
    - tool, shell, exit, colorful, fancy: merged in at the invocation boundary.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message or "")
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return self.message or ""

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        tool = self.options.get("tool")
        prog = text(getattr(main, "__prog__", " ".join(tool.lineage) if tool else "argtree"), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.options["code"].normalize(), "code"),
            " | ",
            text(self.options["title"].title(), "error-title"),
            " ]",
        )
        message = text(self.message, "error-message")

        parts = [message]
        if hint := self.options.get("hint"):
            parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*parts), title=header, title_align="left")
        return Group(header, *parts)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("exit", True):
            sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EqualAssignmentError(ParseError): ...
class UnknownOptionError(ParseError): ...
class NegationAssignmentError(ParseError): ...
class MissingOptionValueError(ParseError): ...
class DuplicateOptionError(ParseError): ...
class MultipleValuesError(ParseError): ...
class UnexpectedValueError(ParseError): ...
class RequiredOptionError(ParseError): ...
class InvalidOptionValueError(ParseError): ...
class MissingArgumentsError(ParseError): ...
class InvalidArgumentValueError(ParseError): ...
class UnexpectedArgumentsError(ParseError): ...


class AskOverridesDefaultWarning(UserWarning):
    """
    Emitted when a schema carries both an interactive question and a default.

    The question wins: a missing value is still prompted for, and the default only
    pre-fills the prompt.
    """


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is printed via the rich console (and the process exits
      unless exit=False); otherwise it is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "ParseError",
    "EqualAssignmentError",
    "UnknownOptionError",
    "NegationAssignmentError",
    "MissingOptionValueError",
    "DuplicateOptionError",
    "MultipleValuesError",
    "UnexpectedValueError",
    "RequiredOptionError",
    "InvalidOptionValueError",
    "MissingArgumentsError",
    "InvalidArgumentValueError",
    "UnexpectedArgumentsError",
    "AskOverridesDefaultWarning",
    "trigger",
)
