"""
argdef line wrapper.

Pure functions that decide where help text breaks. The wrapper works on UTF-8
bytes so it can walk multibyte sequences one character at a time and survive
malformed input: an invalid or truncated sequence counts as one character of
one byte, and scanning always continues.

Functions
- measure(buffer, width, start): the (end, next) byte offsets of one line.
- lines(text, width): iterate the produced lines (str in → str out, bytes in → bytes out).
- wrap(text, width): list of the produced lines.
- columns(text): number of characters as counted by the wrapper.

Break rules (per line)
- a newline ends the line unconditionally;
- otherwise the line ends after the last complete word that fits in `width`
  characters, and the next line starts at the following word;
- a single token longer than `width` is cut at exactly `width` characters;
- spaces at a break are dropped, so no line starts with a space carried over
  from the previous one;
- width None disables wrapping (only newlines break).
"""
_NEWLINE = 0x0A
_SPACE = 0x20
_WHITESPACE = frozenset(b" \t\n\v\f\r")


def _advance(buffer, index, /):
    """
    Number of bytes taken by the character starting at buffer[index].

    Falls back to 1 for anything that is not a complete, valid UTF-8 sequence.
    """
    lead = buffer[index]
    if lead < 0x80:
        return 1
    size = 2 if 0xC0 <= lead < 0xE0 else 3 if 0xE0 <= lead < 0xF0 else 4 if 0xF0 <= lead < 0xF8 else 1
    try:
        bytes(buffer[index:index + size]).decode("utf-8")
    except UnicodeDecodeError:
        return 1
    return size


def _check(width):
    if width is None:
        return
    if not isinstance(width, int) or isinstance(width, bool):
        raise TypeError("width must be an integer or None")
    if width < 1:
        raise ValueError("width must be a positive integer")


def measure(buffer, width, start=0, /):
    """
    Locate the line of 'buffer' starting at byte offset 'start'.

    Parameters
    - buffer: bytes-like text, UTF-8 encoded.
    - width: maximum characters on the line, or None for no limit.
    - start: byte offset of the first character of the line.

    Returns
    - (end, next): print buffer[start:end]; the following line begins at
      byte offset next (next == len(buffer) once everything was consumed).
    """
    if not isinstance(buffer, bytes | bytearray | memoryview):
        raise TypeError("measure() argument must be a bytes-like object")
    _check(width)

    stop = len(buffer)
    end = next = start
    count = 0
    was_space = seen_space = False
    index = start

    while index < stop and (width is None or count < width):
        if buffer[index] == _NEWLINE:
            end, next = index, index + 1
            break

        # Until a space shows up the whole line is one word; it has to be
        # squeezed in, so the break follows the scan.
        if not seen_space:
            end = next = index

        count += 1

        is_space = buffer[index] in _WHITESPACE
        seen_space |= is_space
        if is_space and not was_space:
            # previous character closed a word
            end = index
        elif not is_space and was_space:
            # this character opens a word
            next = index
        was_space = is_space

        index += _advance(buffer, index)

        if index == stop:
            end = next = index
    else:
        # Ran out of columns inside a single token: cut it at `width` characters.
        if not seen_space and count == width and index < stop:
            end = next = index
            if buffer[index] == _NEWLINE:
                next += 1

    if next < end:
        next = end

    while next < stop and buffer[next] == _SPACE:
        next += 1

    # Leading whitespace other than spaces on a one-column line; consume a
    # character so callers always make progress.
    if next == start and start < stop:
        end = next = start + _advance(buffer, start)

    return end, next


def lines(text, width, /):
    """
    Iterate the lines 'text' wraps into at 'width' characters.

    Accepts str (encoded as UTF-8, lines decoded back) or bytes (lines are
    bytes slices). An empty text yields nothing.
    """
    if isinstance(text, str):
        buffer = text.encode("utf-8", "surrogateescape")
        decode = lambda chunk: chunk.decode("utf-8", "surrogateescape")
    elif isinstance(text, bytes | bytearray):
        buffer = bytes(text)
        decode = lambda chunk: chunk
    else:
        raise TypeError("lines() argument must be a string or bytes")
    _check(width)

    offset = 0
    while offset < len(buffer):
        end, next = measure(buffer, width, offset)
        yield decode(buffer[offset:end])
        offset = next


def wrap(text, width, /):
    """
    Return the list of lines 'text' wraps into at 'width' characters.
    """
    return list(lines(text, width))


def columns(text, /):
    """
    Count characters the way the wrapper does (one per valid UTF-8 sequence,
    one per stray byte).
    """
    if isinstance(text, str):
        return len(text)
    if not isinstance(text, bytes | bytearray | memoryview):
        raise TypeError("columns() argument must be a string or bytes")
    count = index = 0
    while index < len(text):
        index += _advance(text, index)
        count += 1
    return count


__all__ = (
    "measure",
    "lines",
    "wrap",
    "columns",
)
