"""
argdef schema registry.

A Schema is the ordered collection of Arguments a program accepts. The order
of declaration is meaningful everywhere: matching priority, help listing,
default/validation order, and the positional order of values handed to a
program callback.

Lifecycle
- Append-only while the program is being declared (Schema(...), add(), argument()).
- Frozen before the first parse (read()/parse() freeze the schema they are given);
  a frozen schema rejects further registrations.

Validation at registration
- entries must be Arguments;
- names, long flags and short flags must be unique across the schema;
- the help flags "--help" and "-h" are reserved.
"""
from collections.abc import Iterable

from .arguments import Argument
from .utils import *

HELP_FLAGS = ("--help", "-h")


class Schema:
    """
    Ordered, validated, freezable registry of Arguments.
    """

    def __init__(self, *arguments):
        self._arguments = {}
        self._flags = {}
        self._frozen = False
        for argument in arguments:
            self.add(argument)

    frozen = mirror("frozen")

    def add(self, argument, /):
        """
        Register an Argument after every previously registered one.

        Raises
        - TypeError: not an Argument, or the schema is frozen.
        - ValueError: duplicated name or flag, or a reserved help flag.
        """
        if self._frozen:
            raise TypeError("schema is frozen; arguments must be declared before parsing")
        if not hasattr(argument, "__argument__") or not callable(argument.__argument__):
            raise TypeError("schema entries must be arguments")
        argument = argument.__argument__()

        if argument.name in self._arguments:
            raise ValueError(f"argument {argument.name!r} is already declared")

        flags = [argument.long] + ([argument.short] if argument.short is not None else [])
        for flag in flags:
            if flag in HELP_FLAGS:
                raise ValueError(f"argument {argument.name!r} cannot use the reserved help flag {flag!r}")
            if flag in self._flags:
                raise ValueError(f"argument {argument.name!r} reuses flag {flag!r} of {self._flags[flag].name!r}")

        self._arguments[argument.name] = argument
        self._flags.update(dict.fromkeys(flags, argument))
        return argument

    def extend(self, arguments, /):
        if not isinstance(arguments, Iterable):
            raise TypeError("extend() argument must be an iterable of arguments")
        for argument in arguments:
            self.add(argument)

    def argument(self, *args, **kwargs):
        """
        Build an Argument from the given metadata and register it.
        """
        return self.add(Argument(*args, **kwargs))

    def freeze(self):
        """
        Make the schema read-only. Idempotent; returns the schema.
        """
        self._frozen = True
        return self

    def match(self, token, /):
        """
        Return the Argument selected by 'token', or None.

        Flags are unique by construction, so the first argument in declaration
        order is the only one that can match.
        """
        for argument in self._arguments.values():
            if argument.matches(token):
                return argument
        return None

    @property
    def header_width(self):
        """
        Columns needed by the widest help header ("--name" or "--name, -s").
        """
        return max(
            (2 + len(argument.name) + (2 + len(argument.short) if argument.short else 0) for argument in self),
            default=0,
        )

    def __iter__(self):
        return iter(self._arguments.values())

    def __len__(self):
        return len(self._arguments)

    def __contains__(self, name):
        return name in self._arguments

    def __getitem__(self, name):
        return self._arguments[name]

    def __repr__(self):
        return f"schema({", ".join(self._arguments)})"

    def __rich_repr__(self):
        yield from self._arguments.values()


__all__ = (
    "Schema",
    "HELP_FLAGS",
)
