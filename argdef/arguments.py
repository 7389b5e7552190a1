r"""
argdef argument specifications.

Overview
- Argument[_T]: one declared command-line argument. It carries everything the
  parser, the default/validation pass and the help renderer need:
  • name → long flag "--name" (underscores spelled as dashes)
  • short → optional alternate flag such as "-c"
  • arity → number of tokens consumed after the flag
  • required → bool, or a predicate evaluated against the parse state once
    every argument has been resolved
  • help → help text; the first "%s" is replaced by the rendered default
  • default/factory → constant default or a producer called when absent
  • read → value reader called with the captured raw strings
  • release → cleanup action called with the typed value

- Decorator
  • @argument(...): build an Argument whose reader is the decorated function.

Calling
- An Argument is callable: argument(*values) runs its reader. The generated
  __call__ takes exactly `arity` positional-only parameters so mistakes in
  arity surface as a plain TypeError and the signature is introspectable.

Quick example:
    >>> from argdef.arguments import Argument, argument
    >>> verbose = Argument("verbose", "-v", default=False, help="Talk more")
    ...
    >>> @argument("count", "-c", arity=1, required=True, help="How many")
    >>> def count(value):
    ...     return int(value)
"""
import builtins
import functools
import operator
import re
import textwrap

from .utils import *


NoDefault = Unset
"""
Marker for arguments without a default value; equivalent to omitting both
'default' and 'factory'.
"""


@functools.cache
def _invoker(arity, /):
    """
    Build and cache a tailored __call__ method for a given arity.

    The generated trampoline takes exactly `arity` positional-only parameters
    named 'value0'..'value{arity-1}' and forwards them to self._read. When no
    reader was bound (self._read is Unset) it applies the implicit reader:
    - arity 0 → True (presence switch)
    - arity 1 → the raw string itself
    - arity n → the tuple of raw strings
    """
    signature = ["self"] + ["value" + str(index) for index in range(arity)]
    arguments = signature[1:]

    if arguments:
        signature.append("/")

    exec(textwrap.dedent(f"""
        @rename("__call__")
        def __call__({", ".join(signature)}):
            if self._read is Unset:
                return {"True" if not arity else arguments[0] if arity == 1 else "(" + ", ".join(arguments) + ",)"}
            return self._read({", ".join(arguments)})
    """), globals(), namespace := locals())

    namespace["__call__"].__doc__ = textwrap.dedent(f"""
        Dynamically generated __call__ for arity={arity!r}.

        Runs the bound reader with the {arity} captured raw value(s) and
        returns the typed value; the reader signals an invalid value by raising.
    """)

    return namespace["__call__"]


class ArgumentType(type):
    """
    Metaclass that turns argument specs into callable, introspectable descriptors.

    Responsibilities
    - Inject a tailored __call__ into factory-backed spec classes, shaped by
      'arity' (see _invoker).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.
    - Expose the names listed in __introspectable__ as read-only properties.
    - Seal factory-backed spec classes against subclassing.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        if options.get("factory", False):
            namespace["__call__"] = _invoker(options["arity"])

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
                "__module__": "dynamic-factory::arguments",
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - argument(name='count', short='-c', arity=1, ...)
            """
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


def _sanitize_names(cls, metadata, /):
    r"""
    Internal: validate the name and short flag.

    Rules
    - name: a Python identifier not starting with an underscore; it is both the
      key in parse results and, dashified, the long flag.
    - short: Unset/None, or a single-dash flag such as "-c" (r"-[^-\s]\S*"); "--x" is
      rejected because it would shadow a long flag.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name.isidentifier() or name.startswith("_"):
        raise ValueError(f"{cls.__typename__} 'name' must be an identifier not starting with '_'")

    if not isinstance(short := metadata["short"], str | Unset | None):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str) and not re.fullmatch(r"-[^-\s]\S*", short):
        raise ValueError(f"{cls.__typename__} 'short' must be a single-dash flag such as '-x'")

    metadata["long"] = "--" + dashify(name)
    metadata["short"] = coalesce(short)


def _sanitize_behavior(cls, metadata, /):
    """
    Internal: validate arity, required-ness and the callables.

    Rules
    - arity: non-negative int (bool is rejected).
    - required: bool, or a callable predicate receiving the parse state.
    - default/factory: mutually exclusive; factory must be callable.
    - read/release: callable when provided; release may be None.
    """
    if not isinstance(arity := metadata["arity"], int) or isinstance(arity, bool):
        raise TypeError(f"{cls.__typename__} 'arity' must be an integer")
    elif arity < 0:
        raise ValueError(f"{cls.__typename__} 'arity' must be a non-negative integer")

    if not isinstance(required := metadata["required"], bool) and not callable(required):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean or a predicate")

    if metadata["default"] is not Unset and metadata["factory"] is not Unset:
        raise TypeError(f"{cls.__typename__} cannot have both 'default' and 'factory'")

    if metadata["release"] is None:
        metadata["release"] = Unset

    for name in ("factory", "read", "release"):
        if metadata[name] is not Unset and not callable(metadata[name]):
            raise TypeError(f"{cls.__typename__} {name!r} must be callable")

    metadata["release"] = coalesce(metadata["release"])


def _sanitize_display(cls, metadata, /):
    """
    Internal: normalize help and metavar.

    - help: string, trimmed; may be empty.
    - metavar: Unset or a non-empty string; defaults to the upper-cased name.
    """
    if not isinstance(help := metadata["help"], str):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    metadata["help"] = help.strip()

    if not isinstance(metavar := metadata["metavar"], str | Unset | None):
        raise TypeError(f"{cls.__typename__} 'metavar' must be a string")
    elif isinstance(metavar, str) and not (metavar := metavar.strip()):
        raise ValueError(f"{cls.__typename__} 'metavar' cannot be empty")
    metadata["metavar"] = metavar or metadata["name"].upper()


class Argument[_T](metaclass=ArgumentType):
    """
    Declared command-line argument.

    Argument[_T] declares how a flag is matched, how many values follow it, how
    those values become a typed _T, what happens when it is absent, and what
    must be released afterwards. Instances are immutable: every field is a
    read-only property mirroring sanitized metadata.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
    - 'default' and 'factory' read as NoDefault (Unset) when not given.
    """

    __introspectable__ = (
        "name",
        "short",
        "long",
        "arity",
        "required",
        "help",
        "default",
        "factory",
        "release",
        "metavar",
    )
    __displayable__ = (
        "name",
        "short",
        "arity",
        "required",
        "default",
    )

    def __new__(
            cls,
            name,
            short=Unset,
            /,
            arity=0,
            required=False,
            help="",
            default=Unset,
            factory=Unset,
            read=Unset,
            release=Unset,
            *,
            metavar=Unset,
    ):
        """
        Construct an Argument with the provided metadata.

        Parameters
        - name: str
          Identifier; also the long flag "--name" with "_" spelled "-".
        - short: Unset | None | str
          Optional alternate flag ("-c").
        - arity: int
          Number of tokens consumed after the flag (0 for switches).
        - required: bool | Callable[[ParseState], bool]
          Whether the argument must be given when it has no default. A callable
          is evaluated after every argument was resolved.
        - help: str
          Help text. The first "%s" is replaced by the rendered default.
        - default: Any
          Constant used when the argument is absent.
        - factory: Callable[[], Any]
          Producer called when the argument is absent (exclusive with default).
        - read: Callable[..., _T]
          Reader receiving `arity` raw strings; raises to reject the input.
        - release: Callable[[_T], None] | None
          Cleanup called once with every produced value.
        - metavar: str
          Label for the value in diagnostics; defaults to NAME.
        """
        metadata = {
            "name": name,
            "short": short,
            "arity": arity,
            "required": required,
            "help": help,
            "default": default,
            "factory": factory,
            "read": read,
            "release": release,
            "metavar": metavar,
        }
        _sanitize_names(cls, metadata)
        _sanitize_behavior(cls, metadata)
        _sanitize_display(cls, metadata)

        # Create a sealed, factory-backed instance with a generated __call__.
        self = super().__new__(builtins.type(cls)(cls.__name__, (cls,), dict(cls.__dict__), factory=True, arity=arity))

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def hasdefault(self):
        """
        Whether a default (constant or factory) is available when absent.
        """
        return self._default is not Unset or self._factory is not Unset

    def produce(self):
        """
        Produce the default value.

        Raises
        - LookupError: when the argument has no default.
        """
        if self._factory is not Unset:
            return self._factory()
        if self._default is not Unset:
            return self._default
        raise LookupError(f"{type(self).__typename__} {self._name!r} has no default")

    def requires(self, state, /):
        """
        Evaluate required-ness against a resolved parse state.
        """
        if isinstance(self._required, bool):
            return self._required
        return bool(self._required(state))

    def matches(self, token, /):
        """
        Whether 'token' is this argument's long or short flag.

        The long form compares against the dashified name only, so "--dry_run"
        does not select an argument named "dry_run".
        """
        return token == self._long or (self._short is not None and token == self._short)

    def cleanup(self, value, /):
        """
        Run the release action, if any, on a produced value.
        """
        if self._release is not None:
            self._release(value)

    def describe(self):
        """
        Help text with the first "%s" replaced by the rendered default.

        A constant default renders with str(); factories are not called here,
        so arguments without a constant default render as "none".
        """
        if "%s" not in self._help:
            return self._help
        return self._help.replace("%s", "none" if self._default is Unset else str(self._default), 1)

    def __argument__(self):
        """
        Introspection hook: identify this spec as an Argument.
        """
        return self


def argument(*args, **kwargs):
    """
    Decorator/factory for declaring an argument whose reader is a function.

    Usage
        @argument("count", "-c", arity=1, required=True, help="How many")
        def count(value):
            return int(value)

    Behavior
    - Builds the Argument from *args/**kwargs (a 'read' keyword is rejected).
    - Binds the decorated function as the reader, exactly once.
    - Returns the Argument itself, ready to be registered in a Schema.
    """
    if "read" in kwargs:
        raise TypeError("@argument() takes the reader from the decorated function")
    argument = Argument(*args, **kwargs)

    @rename("argument")
    def wrapper(read, /):
        if not callable(read):
            raise TypeError("@argument() must be applied to a callable")
        if argument._read is not Unset:
            raise TypeError("@argument() must be applied only once")
        argument._read = read
        return argument

    return wrapper


__all__ = (
    # Classes (specifications)
    "Argument",

    # Decorators
    "argument",

    # Constants
    "NoDefault",
)

# The metaclass is internal; keep it out of star-imports and autocompletion.
del ArgumentType
