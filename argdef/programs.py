"""
argdef program driver: run a callback against a schema.

What this module provides
- Program: binds a Schema to a callback and owns the whole run:
  • reads argv, prints help on "--help"/"-h";
  • surfaces faults (missing value, invalid value, missing required, leftover
    tokens in strict mode) and maps them to exit codes;
  • calls optional setup/teardown hooks around the callback;
  • releases every produced value whatever the outcome.

- Factories and helpers:
  • program(schema, ...): create a Program or a decorator that produces one.
  • invoke(obj, prompt): run a Program (or a plain callable) with a token stream.

Run order of Program.main(argv)
    read ─▶ help? ─▶ missing value? ─▶ leftovers (strict)? ─▶ setup
         ─▶ resolve ─▶ callback(rest, *values) ─▶ release ─▶ teardown

Quick start
    from argdef import Schema, Argument, program, invoke
    from argdef.readers import positive

    schema = Schema(
        Argument("count", "-c", arity=1, read=positive, default=1, help="How many (default: %s)"),
        Argument("verbose", default=False, help="Talk more"),
    )

    @program(schema, preamble="Count things.")
    def main(rest, count, verbose):
        print(count, verbose, rest)

    if __name__ == "__main__":
        raise SystemExit(invoke(main))
"""
import builtins
import functools
import inspect
import logging
import operator
import os.path
import re
import shlex
import sys
import textwrap
from collections.abc import Iterable
from inspect import Parameter

from .faults import *
from .help import print_help
from .parsing import Status, ParseState, read, resolve
from .schema import Schema
from .utils import *

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_INVALID = 110
EXIT_MISSING = 120


def _invoker(callback):
    """
    Build a trampoline __call__ that mirrors the callback's signature and forwards into self._callback.

    Behavior
    - Parameter names, positional-only (/) and keyword-only (*) markers, *args and **kwargs are
      reproduced as declared, so calling a Program behaves like calling its callback.
    - Defaults are bound on the generated function (__defaults__/__kwdefaults__) for inspection.
    - If the callback already has a parameter named 'self', the instance is named '__self__'.
    """
    parameters = list(inspect.signature(callback).parameters.values())

    signature = [self := "self" if "self" not in map(lambda x: x.name, parameters) else "__self__"]
    arguments = []
    starred = False

    for position, parameter in enumerate(parameters):
        name = parameter.name
        match parameter.kind:
            case Parameter.POSITIONAL_ONLY:
                signature.append(name)
                arguments.append(name)
                # Close the positional-only section after its last parameter.
                if position + 1 == len(parameters) or parameters[position + 1].kind is not Parameter.POSITIONAL_ONLY:
                    signature.append("/")
            case Parameter.POSITIONAL_OR_KEYWORD:
                signature.append(name)
                arguments.append(name)
            case Parameter.VAR_POSITIONAL:
                signature.append("*" + name)
                arguments.append("*" + name)
                starred = True
            case Parameter.KEYWORD_ONLY:
                if not starred:
                    signature.append("*")
                    starred = True
                signature.append(name)
                arguments.append(f"{name}={name}")
            case Parameter.VAR_KEYWORD:
                signature.append("**" + name)
                arguments.append("**" + name)

    positional = [
        parameter for parameter in parameters
        if parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)
    ]
    defaults = tuple(parameter.default for parameter in positional if parameter.default is not Parameter.empty)
    kwdefaults = {
        parameter.name: parameter.default for parameter in parameters
        if parameter.kind is Parameter.KEYWORD_ONLY and parameter.default is not Parameter.empty
    }
    exec(textwrap.dedent(f"""
        @rename("__call__")
        def __call__({", ".join(signature)}):
            return {self}._callback({", ".join(arguments)})
    """), globals(), namespace := locals())

    namespace["__call__"].__doc__ = textwrap.dedent(f"""
        Trampoline generated from callback={getattr(callback, "__qualname__", repr(callback))!s}.

        Calls self._callback({", ".join(arguments)}) with values as received.
    """)
    namespace["__call__"].__defaults__ = defaults or None
    namespace["__call__"].__kwdefaults__ = kwdefaults or None

    return namespace["__call__"]


class ProgramType(type):
    """
    Metaclass that turns callbacks into callable, introspectable Program classes.

    Responsibilities
    - Inject a trampoline __call__ on factory-backed Program classes that mirrors
      the wrapped callback's signature (see _invoker).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Expose the names listed in __introspectable__ as read-only properties.
    - Seal factory-backed Program classes against subclassing.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        if options.get("factory", False):
            namespace["__call__"] = _invoker(options["callback"])

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
                "__module__": "dynamic-factory::programs",
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        if options.get("factory", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_callbacks(cls, metadata, /):
    """
    Internal: validate the callback against the schema and the optional hooks.

    Rules
    - callback: callable accepting the leftover tokens plus one positional
      value per schema argument, in declaration order.
    - setup/teardown: None or callable.
    """
    if not callable(callback := metadata["callback"]):
        raise TypeError(f"{cls.__typename__} 'callback' must be callable")
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        signature = None
    if signature is not None:
        try:
            signature.bind(*[None] * (1 + len(metadata["schema"])))
        except TypeError:
            raise TypeError(
                f"{cls.__typename__} 'callback' must accept {1 + len(metadata["schema"])} positional "
                f"arguments (leftover tokens, then {", ".join(argument.name for argument in metadata["schema"]) or "nothing"})"
            ) from None

    for name in ("setup", "teardown"):
        if metadata[name] is not None and not callable(metadata[name]):
            raise TypeError(f"{cls.__typename__} {name!r} must be callable")


def _sanitize_options(cls, metadata, /):
    """
    Internal: validate naming, text and exit codes.
    """
    if not isinstance(metadata["name"], str) or not metadata["name"]:
        raise TypeError(f"{cls.__typename__} 'name' must be a non-empty string")
    if not isinstance(preamble := metadata["preamble"], str | None):
        raise TypeError(f"{cls.__typename__} 'preamble' must be a string")
    if preamble is not None:
        metadata["preamble"] = preamble.strip() or None

    for name in ("help", "strict", "shell"):
        if not isinstance(metadata[name], bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")

    for name in ("invalid", "missing"):
        if not isinstance(code := metadata[name], int) or isinstance(code, bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be an integer")
        elif not 0 < code < 256:
            raise ValueError(f"{cls.__typename__} {name!r} must be an exit code between 1 and 255")


class Program(metaclass=ProgramType):
    """
    Executable program: a Schema bound to a callback.

    Calling the Program object directly forwards to the callback unchanged;
    main(argv) runs it as a command line.
    """

    __introspectable__ = (
        "name",
        "schema",
        "preamble",
        "setup",
        "teardown",
        "help",
        "strict",
        "shell",
        "invalid",
        "missing",
    )
    __displayable__ = (
        "name",
        "schema",
        "strict",
        "shell",
    )

    def __new__(
            cls,
            schema,
            callback,
            /,
            *,
            name=Unset,
            preamble=None,
            setup=None,
            teardown=None,
            help=True,
            strict=False,
            shell=True,
            invalid=EXIT_INVALID,
            missing=EXIT_MISSING,
    ):
        """
        Construct a Program.

        Parameters
        - schema: Schema
          Declared arguments; frozen here.
        - callback: Callable[[list[str], *values], int | None]
          Receives the unconsumed tokens, then one typed value per argument.
        - name: str
          Program name in diagnostics; defaults to the callback's name.
        - preamble: str | None
          Paragraph printed before the help listing.
        - setup: Callable[[list[str]], int | None] | None
          Runs after reading and before resolving; a non-zero result aborts the
          run with that exit code.
        - teardown: Callable[[], None] | None
          Runs last whenever setup ran successfully.
        - help: bool
          Recognize "--help"/"-h".
        - strict: bool
          Treat unconsumed tokens as an error.
        - shell: bool
          Print faults and return exit codes; when False faults are raised.
        - invalid, missing: int
          Exit codes for invalid/missing values and for missing required arguments.
        """
        if not isinstance(schema, Schema):
            raise TypeError(f"{cls.__typename__} 'schema' must be a schema")

        metadata = {
            "callback": callback,
            "schema": schema,
            "name": coalesce(name, dashify(getattr(callback, "__name__", os.path.basename(sys.argv[0])))),
            "preamble": preamble,
            "setup": setup,
            "teardown": teardown,
            "help": help,
            "strict": strict,
            "shell": shell,
            "invalid": invalid,
            "missing": missing,
        }
        _sanitize_callbacks(cls, metadata)
        _sanitize_options(cls, metadata)

        try:
            inspect.signature(callback)
        except (TypeError, ValueError):
            # Builtins without a signature get a generic trampoline.
            source = lambda *args, **kwargs: None
        else:
            source = callback

        self = super().__new__(builtins.type(cls)(cls.__name__, (cls,), dict(cls.__dict__), factory=True, callback=source))
        self._callback = metadata.pop("callback")
        self._schema = metadata.pop("schema").freeze()
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def print_help(self, *, environ=None, console=None):
        """
        Print the preamble and the argument listing.
        """
        print_help(self._schema, preamble=self._preamble, environ=environ, console=console)

    def _fail(self, fault, status, /):
        logger.debug("%s: %s (exit %d)", self._name, type(fault).__name__, status)
        trigger(fault, prog=self._name, shell=self._shell, deferred=True, status=status)
        return status

    def main(self, argv=Unset, /):
        """
        Run the program on argv (sys.argv[1:] when omitted) and return the exit code.

        Exit codes
        - 0 after help, or whatever the callback returns (None counts as 0);
        - invalid: a flag lacks values, a value is rejected, or leftover tokens
          remain in strict mode;
        - missing: a required argument is absent;
        - a non-zero setup result, returned as is.

        Every produced value is released before teardown runs, on every path.
        """
        argv = list(sys.argv[1:] if argv is Unset else argv)
        state = ParseState(self._schema)

        try:
            outcome = read(self._schema, argv, state, 0, help=self._help)

            if outcome.status is Status.HELP:
                logger.debug("%s: help requested", self._name)
                self.print_help()
                return EXIT_SUCCESS

            if outcome.status is Status.ERROR:
                return self._fail(outcome.fault, self._invalid)

            rest = argv[outcome.index:]
            if self._strict and rest:
                return self._fail(UnparsedTokensError(
                    "unparsed input remains from %r at position %d" % (rest[0], outcome.index + 1),
                    title="unparsed input",
                    index=outcome.index,
                    input=rest[0],
                    leftover=tuple(rest),
                    hint="remove the extra inputs; run '%s --help' to see valid flags" % self._name,
                ), self._invalid)

            if self._setup is not None and (code := self._setup(argv)):
                logger.debug("%s: setup returned %r", self._name, code)
                return code

            try:
                outcome = resolve(self._schema, state)
                if outcome.status is Status.ERROR:
                    if isinstance(outcome.fault, MissingRequiredError):
                        return self._fail(outcome.fault, self._missing)
                    return self._fail(outcome.fault, self._invalid)

                logger.debug("%s: calling back with %d leftover token(s)", self._name, len(rest))
                result = self._callback(rest, *state.values())
                return EXIT_SUCCESS if result is None else int(result)
            finally:
                try:
                    state.release()
                finally:
                    if self._teardown is not None:
                        self._teardown()
        finally:
            state.release()

    def __invoke__(self, prompt=Unset):
        """
        Run this program with a token stream and return its exit code.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as is.

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        return self.main(tokens)


def program(schema, source=Unset, /, **options):
    """
    Create a Program or return a decorator to build it later.

    Forms
    - program(schema, callback, **options) -> Program
    - @program(schema, **options) above a callback -> Program
    """
    @rename("program")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@program() must be applied to a callable")
        return Program(schema, source, **options)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Run a program (or a plain callable) and return its exit code.

    - An object implementing __invoke__(prompt) is run directly.
    - A plain callable is wrapped in a Program with an empty schema; it then
      receives the tokens as its only argument.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if callable(object):
        return invoke(program(Schema(), object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Program",
    "program",
    "invoke",
    "EXIT_SUCCESS",
    "EXIT_INVALID",
    "EXIT_MISSING",
)

del ProgramType
