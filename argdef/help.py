"""
argdef help renderer.

Layout (one entry per argument, declaration order)

    <preamble, wrapped to the terminal>

    --count, -c Number of widgets to
                process

    --verbose   Talk more

- left column: "--name" or "--name, -s", padded to the widest header;
- right column: help text wrapped by argdef.wrapping, continuation lines
  indented by header width + 1 so the text stays aligned;
- a line that exactly fills the terminal gets no newline of its own (the
  terminal already moved to the next row);
- an unknown terminal width disables wrapping.

Terminal width
- COLUMNS unset → 80; COLUMNS a positive integer → that value;
  COLUMNS 0, negative or not a number → unknown (None).
"""
import os

from rich.console import Console
from rich.text import Text

from .wrapping import measure, columns

DEFAULT_WIDTH = 80


def terminal_width(environ=None, /):
    """
    Width of the terminal in columns, or None when it cannot be determined.
    """
    environ = os.environ if environ is None else environ
    try:
        value = environ["COLUMNS"]
    except KeyError:
        return DEFAULT_WIDTH
    try:
        width = int(value.strip())
    except ValueError:
        return None
    return width if width > 0 else None


def header(argument, /):
    """
    Header column text of an argument: "--long" or "--long, -s".
    """
    if argument.short:
        return f"{argument.long}, {argument.short}"
    return argument.long


def header_width(schema, /):
    """
    Width of the header column: the widest "--name, -s" of the schema, 0 when empty.
    """
    return schema.header_width


def render_entry(header, help, header_width, terminal_width, /):
    """
    Render one help entry.

    Parameters
    - header: str | None
      Header column text; None renders a free paragraph (used for the preamble)
      with no header column at all.
    - help: str
      Help text to wrap in the right column.
    - header_width: int
      Width of the header column (ignored when header is None).
    - terminal_width: int | None
      Terminal columns; None disables wrapping.

    Returns
    - str: the rendered entry; with a header it starts with a newline, which
      separates entries by a blank line.
    """
    rendered = []

    if header is not None:
        rendered.append("\n" + header.ljust(header_width) + " ")
    else:
        header_width = 0

    # A header-less paragraph has no separating space to reserve.
    width = available = None
    if terminal_width is not None:
        width = terminal_width - header_width + (0 if header is not None else 1)
        available = terminal_width - header_width - (1 if header is not None else 0)
        if width < 1:
            # header column wider than the terminal: give up on wrapping
            width = available = None

    buffer = help.encode("utf-8", "surrogateescape")
    offset = 0
    while offset < len(buffer):
        end, next = measure(buffer, width, offset)
        line = buffer[offset:end].decode("utf-8", "surrogateescape")
        rendered.append(line)

        if available is None or columns(line) != available:
            rendered.append("\n")
        offset = next

        if offset < len(buffer) and header is not None:
            rendered.append(" " * (header_width + 1))

    return "".join(rendered)


def render_help(schema, terminal_width, /, preamble=None):
    """
    Render the full help listing of a schema.

    The optional preamble is rendered first as a header-less paragraph; every
    argument follows in declaration order with its help text (see
    Argument.describe for the default substitution).
    """
    width = header_width(schema)
    rendered = []

    if preamble:
        rendered.append(render_entry(None, preamble, 0, terminal_width))

    for argument in schema:
        rendered.append(render_entry(header(argument), argument.describe(), width, terminal_width))

    return "".join(rendered)


def print_help(schema, /, *, preamble=None, environ=None, console=None):
    """
    Print the help listing through a rich console.

    The console defaults to stdout with markup, emoji, highlighting and soft
    wrapping handled so the rendered text arrives byte-for-byte.
    """
    if console is None:
        console = Console(markup=False, emoji=False, highlight=False, soft_wrap=True)
    console.print(Text(render_help(schema, terminal_width(environ), preamble=preamble)), end="", soft_wrap=True)


__all__ = (
    "DEFAULT_WIDTH",
    "terminal_width",
    "header",
    "header_width",
    "render_entry",
    "render_help",
    "print_help",
)
