"""
Reusable value readers and release actions.

A reader receives the raw strings captured after a flag and returns the typed
value; it rejects input by raising (ValueError, OSError, ...). Readers built by
a factory (choice, file, separated) are renamed so diagnostics show what they
read rather than a "<locals>" path.

    Argument("count", "-c", arity=1, read=positive)
    Argument("mode", arity=1, read=choice("fast", "safe"), default="safe")
    Argument("output", "-o", arity=1, read=file("w"), release=close, factory=lambda: sys.stdout)
"""
import os
import sys
from pathlib import Path

from .utils import rename

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def integer(value, /):
    """
    Read a base-10 integer.
    """
    try:
        return int(value, 10)
    except ValueError:
        raise ValueError(f"{value!r} is not an integer") from None


def positive(value, /):
    """
    Read a strictly positive base-10 integer.
    """
    if (number := integer(value)) <= 0:
        raise ValueError(f"{value!r} is not a positive integer")
    return number


def number(value, /):
    """
    Read a floating point number.
    """
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{value!r} is not a number") from None


def boolean(value, /):
    """
    Read yes/no style booleans (1/0, true/false, yes/no, on/off; any case).
    """
    if (lowered := value.strip().lower()) in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{value!r} is not a boolean; use one of yes, no, true, false, on, off, 1, 0")


def path(value, /):
    """
    Read a filesystem path (not required to exist).
    """
    if not value:
        raise ValueError("path cannot be empty")
    return Path(value)


def choice(*choices):
    """
    Build a reader accepting only one of 'choices' (compared as strings).
    """
    if not choices:
        raise TypeError("choice() must be given at least one choice")
    if not all(isinstance(choice, str) for choice in choices):
        raise TypeError("choice() arguments must be strings")

    @rename("choice")
    def reader(value, /):
        if value not in choices:
            raise ValueError(f"{value!r} is not one of {", ".join(map(repr, choices))}")
        return value

    return reader


def separated(reader, /, separator=","):
    """
    Build a reader splitting one raw value on 'separator' and reading each part.
    """
    if not callable(reader):
        raise TypeError("separated() argument must be callable")
    if not isinstance(separator, str) or not separator:
        raise ValueError("separated() separator must be a non-empty string")

    @rename("separated")
    def wrapper(value, /):
        return tuple(reader(part) for part in value.split(separator))

    return wrapper


def file(mode="r", /, encoding=None):
    """
    Build a reader opening the named file with 'mode'.

    "-" selects stdin (read modes) or stdout (write/append modes). Opening
    errors propagate as the reader's rejection; pair with release=close.
    """
    if not isinstance(mode, str) or not set(mode) & set("rwax"):
        raise ValueError("file() mode must be a valid open() mode")

    @rename("file")
    def reader(value, /):
        if value == "-":
            return sys.stdin if "r" in mode and "+" not in mode else sys.stdout
        return open(value, mode, encoding=None if "b" in mode else (encoding or "utf-8"))

    return reader


def close(stream, /):
    """
    Release action closing a stream produced by a file() reader.

    Standard streams are flushed, never closed.
    """
    if stream is None:
        return
    if stream in (sys.stdin, sys.stdout, sys.stderr):
        if stream.writable():
            stream.flush()
        return
    stream.close()


def environ(name, /, default=None):
    """
    Build a default factory reading an environment variable at resolve time.
    """
    if not isinstance(name, str) or not name:
        raise ValueError("environ() name must be a non-empty string")

    @rename("environ")
    def factory():
        return os.environ.get(name, default)

    return factory


__all__ = (
    "integer",
    "positive",
    "number",
    "boolean",
    "path",
    "choice",
    "separated",
    "file",
    "close",
    "environ",
)
