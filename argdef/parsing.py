"""
argdef parser: argument matcher and default/validation pass.

Pipeline
- read(): walk argv against the schema, marking arguments present and
  capturing their raw values. Stops at the first token that is not a declared
  flag; that token and the rest are left to the caller.
- resolve(): once reading stopped cleanly, run readers for present arguments,
  produce defaults for absent ones, then evaluate required-ness of the
  arguments that ended up without a value.
- parse(): read() + resolve() on a fresh ParseState.

Results
- Every step returns an Outcome(status, index, fault, state). Failures are
  returned, never raised: status is Status.ERROR and fault is the
  ArgumentError describing it. Status.HELP means the help flag was met.

Resources
- Values produced by readers or defaults may own resources (open files…).
  ParseState.release() runs each argument's release action exactly once per
  produced value, whatever the outcome; `with ParseState(schema) as state:`
  does it on exit.

State machine of read()
    scanning ──match──▶ scanning
       │ unmatched token / end of input ──▶ stopped (OK)
       │ help flag ──────────────────────▶ help (HELP)
       └ too few values after a flag ────▶ failed (ERROR, MissingValueError)
"""
import logging
from enum import IntEnum
from types import MappingProxyType
from typing import NamedTuple

from .faults import *
from .schema import HELP_FLAGS
from .utils import *

logger = logging.getLogger(__name__)


class Status(IntEnum):
    OK = 0
    ERROR = 1
    HELP = 2


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

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class ArgumentState:
    """
    Per-run state of one Argument.

    - present: matched on the command line.
    - values: raw strings captured after the flag (shared with argv).
    - index: position of the flag in argv, None when absent.
    - initialized: a value was produced (reader or default) and may need release.
    - value: the typed value, None until produced.
    """
    __slots__ = ("_argument", "_present", "_values", "_index", "_initialized", "_value", "_released")

    argument = mirror("argument")
    present = mirror("present")
    values = mirror("values")
    index = mirror("index")
    initialized = mirror("initialized")

    @property
    def value(self):
        return self._value

    def __init__(self, argument, /):
        self._argument = argument
        self._present = False
        self._values = ()
        self._index = None
        self._initialized = False
        self._value = None
        self._released = False

    def __repr__(self):
        return "argument-state(name=%r, present=%r, values=%r, initialized=%r, value=%r)" % (
            self._argument.name, self._present, self._values, self._initialized, self._value
        )


class ParseState:
    """
    Argument states for one schema during one parse run.

    Access
    - state["name"] / state.value("name"): typed value.
    - state.present("name"): whether the flag was given.
    - state.states: read-only mapping name → ArgumentState (declaration order).
    - state.values(): typed values in declaration order.
    - state.namespace(): read-only mapping name → typed value.
    """

    def __init__(self, schema, /):
        self._schema = schema.freeze()
        self._states = {argument.name: ArgumentState(argument) for argument in schema}
        self._stop = 0

    schema = mirror("schema")
    stop = mirror("stop")

    @property
    def states(self):
        return MappingProxyType(self._states)

    def present(self, name, /):
        return self._states[name].present

    def value(self, name, /):
        return self._states[name].value

    def __getitem__(self, name):
        return self.value(name)

    def __contains__(self, name):
        return name in self._states

    def values(self):
        return tuple(state.value for state in self._states.values())

    def namespace(self):
        return MappingProxyType({name: state.value for name, state in self._states.items()})

    def reset(self):
        """
        Release what was produced, then zero every argument state.
        """
        self.release()
        self._states = {argument.name: ArgumentState(argument) for argument in self._schema}
        self._stop = 0

    def release(self):
        """
        Run the release action of every initialized argument, once.

        Idempotent: an argument released by an earlier call is skipped. Every
        argument is attempted even if a release action fails; failures are
        raised together afterwards as an ExceptionGroup.
        """
        errors = []
        for state in self._states.values():
            if not state._initialized or state._released:
                continue
            state._released = True
            logger.debug("releasing argument %r", state._argument.name)
            try:
                state._argument.cleanup(state._value)
            except Exception as exception:
                errors.append(exception)
        if errors:
            raise ExceptionGroup("releasing arguments failed", errors)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.release()

    def __repr__(self):
        return "parse-state(%s)" % ", ".join(map(repr, self._states.values()))


class Outcome(NamedTuple):
    """
    Result of read(), resolve() and parse().

    - status: Status.OK, Status.ERROR or Status.HELP.
    - index: where reading stopped (OK), the help flag position (HELP), or the
      offending position (ERROR).
    - fault: the ArgumentError on ERROR, None otherwise.
    - state: the ParseState that was filled.
    """
    status: Status
    index: int
    fault: ArgumentError | None
    state: ParseState


def _claim(schema, state):
    if state is None:
        return ParseState(schema)
    if not isinstance(state, ParseState):
        raise TypeError("state must be a parse-state")
    if state.schema is not schema:
        raise ValueError("state was created for another schema")
    return state


def read(schema, argv, state=None, index=0, /, *, help=True):
    """
    Match argv against the schema, starting at 'index'.

    Parameters
    - schema: Schema (frozen on first use).
    - argv: sequence of tokens (without the program name).
    - state: ParseState to fill; a fresh one is created when omitted. Passing
      the same state again continues a previous read.
    - index: first position to examine (negative values count as 0).
    - help: recognize "--help"/"-h".

    Returns
    - Outcome(OK, k): stopped at k, the first unconsumed token (len(argv) at
      the end of input).
    - Outcome(HELP, k): argv[k] is a help flag; nothing else was touched.
    - Outcome(ERROR, k, MissingValueError): the flag at k lacks values; its
      values are not captured, earlier matches are kept.
    """
    state = _claim(schema, state)
    index = max(index, 0)

    while index < len(argv):
        token = argv[index]

        if help and token in HELP_FLAGS:
            logger.debug("help flag %r at index %d", token, index)
            return Outcome(Status.HELP, index, None, state)

        if (argument := schema.match(token)) is None:
            logger.debug("stopped at index %d on %r", index, token)
            break

        current = state._states[argument.name]
        current._present = True
        current._index = index

        if index + argument.arity < len(argv):
            current._values = tuple(argv[index + 1:index + 1 + argument.arity])
            logger.debug("matched %r at index %d with values %r", argument.name, index, current._values)
            index += 1 + argument.arity
        else:
            logger.debug("missing values for %r at index %d", argument.name, index)
            missing = index + argument.arity - len(argv) + 1
            fault = MissingValueError(
                "argument %r at %s position expects %d value(s) but %d %s missing" % (
                    token, _ordinal(index + 1), argument.arity, missing, "is" if missing == 1 else "are"
                ),
                title="missing value",
                index=index,
                input=token,
                argument=argument,
                hint="add %s after %s" % (" ".join([argument.metavar] * argument.arity), token),
            )
            state._stop = index
            return Outcome(Status.ERROR, index, fault, state)

    state._stop = index
    return Outcome(Status.OK, index, None, state)


def resolve(schema, state, /):
    """
    Produce typed values for every argument of the schema.

    Pass one (declaration order)
    - present → run the reader on the captured values; a raising reader
      fails the pass at once with InvalidValueError (later arguments are left
      untouched, the reader's exception is the fault's __cause__);
    - absent with a default → produce it (a raising factory fails the same way);
    - absent without default → deferred.

    Pass two (declaration order, deferred arguments only)
    - evaluate required-ness against the state; the first required one fails
      the pass with MissingRequiredError.

    Arguments already initialized by an earlier resolve() are kept as they are.
    """
    state = _claim(schema, state)
    deferred = []

    for argument in schema:
        current = state._states[argument.name]
        if current._initialized:
            continue

        if current._present:
            try:
                value = argument(*current._values)
            except Exception as exception:
                logger.debug("reader of %r rejected %r: %r", argument.name, current._values, exception)
                fault = InvalidValueError(
                    "invalid value %s for argument %r at %s position" % (
                        " ".join(map(repr, current._values)) or "(none)",
                        argument.long,
                        _ordinal(current._index + 1),
                    ),
                    title="invalid value",
                    index=current._index,
                    input=argument.long,
                    argument=argument,
                    hint=str(exception) or "check the expected format of %s" % argument.metavar,
                )
                fault.__cause__ = exception
                return Outcome(Status.ERROR, current._index, fault, state)
        elif argument.hasdefault:
            try:
                value = argument.produce()
            except Exception as exception:
                logger.debug("default of %r failed: %r", argument.name, exception)
                fault = InvalidValueError(
                    "default value of argument %r could not be produced" % argument.long,
                    title="invalid default",
                    argument=argument,
                    hint=str(exception) or "pass %s explicitly" % argument.long,
                )
                fault.__cause__ = exception
                return Outcome(Status.ERROR, state._stop, fault, state)
        else:
            deferred.append(argument)
            continue

        current._value = value
        current._initialized = True

    for argument in deferred:
        if argument.requires(state):
            logger.debug("required argument %r is missing", argument.name)
            fault = MissingRequiredError(
                "required argument %r is missing" % argument.long,
                title="missing argument",
                argument=argument,
                hint="add %s%s" % (argument.long, "".join(" " + argument.metavar for _ in range(argument.arity))),
            )
            return Outcome(Status.ERROR, state._stop, fault, state)

    return Outcome(Status.OK, state._stop, None, state)


def parse(schema, argv, index=0, /, *, help=True):
    """
    Read argv on a fresh ParseState and resolve it when reading stopped cleanly.

    The caller owns the returned state and must release it (or use it as a
    context manager), including after a failure.
    """
    outcome = read(schema, argv, ParseState(schema), index, help=help)
    if outcome.status is not Status.OK:
        return outcome
    return resolve(schema, outcome.state)


__all__ = (
    "Status",
    "Outcome",
    "ArgumentState",
    "ParseState",
    "read",
    "resolve",
    "parse",
)
