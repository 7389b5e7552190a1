"""
argdef faults (parse failures) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing failure.
- ArgumentError: base type carrying a message plus read-only options; knows
  how to render itself with rich and how to surface itself (print and exit in
  shell mode, raise otherwise).
- trigger(): central entry point to surface a fault with runtime options.

Contract with the parser
- The parser never raises these: read()/resolve()/parse() return them inside
  an Outcome. Only the program driver (or a caller) triggers them.

Integration
- Hosts may expose in __main__:
  • __prog__: program name shown in the header.
  • __codes__: mapping FaultCode → label, to replace numeric codes on screen.
"""
import copy
import sys
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True, highlight=False)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - matching (1110x): MISSING_VALUE
    - resolution (1111x): INVALID_VALUE, MISSING_REQUIRED
    - leftovers (1112x): UNPARSED_TOKENS
    """
    # --- matching errors ---
    MISSING_VALUE    = 11101

    # --- default/validation errors ---
    INVALID_VALUE    = 11111
    MISSING_REQUIRED = 11112

    # --- driver errors ---
    UNPARSED_TOKENS  = 11121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgumentError(Exception):
    """
    Base class of every parse failure.

    options (all optional, merged through __replace__/trigger)
    - code: FaultCode; title: short lowercase title; hint: one actionable line.
    - index: position in argv; input: offending token; argument: the Argument.
    - prog: program name; shell: print-and-exit instead of raising;
      deferred: in shell mode, print without exiting;
      status: process exit code used in shell mode.
    """
    __faultcode__ = Unset

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code", self.__faultcode__)

    @property
    def index(self):
        return self.options.get("index")

    @property
    def argument(self):
        return self.options.get("argument")

    def __rich__(self):
        main = __import__("__main__")

        prog = self.options.get("prog") or getattr(main, "__prog__", None) or "argdef"
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "?"

        header = Text.assemble("[ ", str(prog), " — ", code, " | ", self.options.get("title", "error").title(), " ]")
        message = Text(str(self.message or ""))

        if hint := self.options.get("hint"):
            return Group(header, message, Text.assemble(" → ", str(hint)))
        return Group(header, message)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(self.options.get("status", 1))

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class MissingValueError(ArgumentError):
    __faultcode__ = FaultCode.MISSING_VALUE

class InvalidValueError(ArgumentError):
    __faultcode__ = FaultCode.INVALID_VALUE

class MissingRequiredError(ArgumentError):
    __faultcode__ = FaultCode.MISSING_REQUIRED

class UnparsedTokensError(ArgumentError):
    __faultcode__ = FaultCode.UNPARSED_TOKENS


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ArgumentError).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode the fault is rendered on stderr and the process exits with
      options["status"] (or returns when options["deferred"] is set);
      otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ArgumentError",
    "MissingValueError",
    "InvalidValueError",
    "MissingRequiredError",
    "UnparsedTokensError",
    "trigger",
)
