import sys

from rich.pretty import pprint

from argdef import *
from argdef.readers import positive

schema = Schema(
    Argument("count", "-c", arity=1, read=positive, default=1, help="Number of widgets to process (default: %s)"),
    Argument("verbose", help="Talk more"),
)


@program(schema, preamble="Process widgets, once per count.")
def callback(rest, count, verbose):
    if verbose:
        pprint(callback)
    for _ in range(count):
        print(*rest)


if __name__ == '__main__':
    sys.exit(invoke(callback))
