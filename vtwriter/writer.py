"""
The SequenceWriter: a fluent builder for terminal control sequences.

Operations append an escape sequence to an internal buffer and return
the writer, so they can be chained. Nothing is written until flush()::

    writer = SequenceWriter()
    writer.cursor_position(3, 10).sgr([SGR.BOLD]).flush("hi", reset_sgr=True)

The exception is query_cursor_position(), which sends its request right
away and waits for the terminal to answer.
"""

import re
import sys
import logging
import threading
from typing import NamedTuple

from .errors import (
    InvalidParameter,
    IOUnavailable,
    ResponseParseError,
    VTWriterError,
)
from .sequences import format_sequence
from .term import TerminalInput


logger = logging.getLogger("vtwriter")

DEFAULT_QUERY_TIMEOUT = 2.0

CURSOR_POSITION_REPORT = re.compile(r"\[(\d+);(\d+)R")

_UNSET = object()


class CursorPosition(NamedTuple):
    """The cursor position as reported by the terminal (1-based)."""

    row: int
    column: int


def parse_cursor_position(data: bytes) -> CursorPosition:
    """Parse a cursor position report (``ESC [ row ; col R``) from raw input.

    Raises ResponseParseError (carrying the data) if there is none, or
    if it reports a row or column below 1.
    """
    text = data.decode("utf-8", errors="replace")
    match = CURSOR_POSITION_REPORT.search(text)
    if match is None:
        raise ResponseParseError(data)
    row, column = int(match.group(1)), int(match.group(2))
    if row < 1 or column < 1:
        raise ResponseParseError(data)
    return CursorPosition(row, column)


def _check_int(name, value, minimum=0):
    # bool is an int, but True would format as "True"
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameter(f"{name} must be an int, not {value!r}")
    if value < minimum:
        raise InvalidParameter(f"{name} must be >= {minimum}, not {value}")
    return value


def _clamp_erase_mode(mode):
    # Anything not understood means "erase all"
    if isinstance(mode, bool) or not isinstance(mode, int) or mode not in (0, 1, 2):
        return 2
    return mode


class SequenceWriter:
    """Accumulates control sequences and writes them to a terminal.

    Parameters:
        stdout: the text stream to write to. Default ``sys.__stdout__``.
        stdin: the input to read terminal replies from. Either a
            TerminalInput (or an object with the same ``isatty()``,
            ``raw_mode()`` and ``read_chunk()`` methods), or a file
            object, which is wrapped in a TerminalInput. Default stdin.
        query_timeout: default timeout (in seconds) for the cursor
            position query. None means wait forever.

    The streams are typically shared with the rest of the process. While a
    query is waiting for its reply, nobody else should read from stdin.
    """

    def __init__(self, stdout=None, stdin=None, query_timeout=DEFAULT_QUERY_TIMEOUT):
        self._file_out = stdout or sys.__stdout__
        if stdin is None or not hasattr(stdin, "read_chunk"):
            stdin = TerminalInput(stdin=stdin)
        self._input = stdin
        self.query_timeout = query_timeout
        self._buffer = ""
        self._query_lock = threading.Lock()

    def __len__(self):
        return len(self._buffer)

    @property
    def pending(self):
        """The sequences (and text) that have not been flushed yet."""
        return self._buffer

    def _add(self, name, *params):
        self._buffer += format_sequence(name, *params)
        return self

    # %% Cursor movement

    def cursor_up(self, lines=1):
        """Move the cursor up N lines."""
        return self._add("CUU", _check_int("lines", lines))

    def cursor_down(self, lines=1):
        """Move the cursor down N lines."""
        return self._add("CUD", _check_int("lines", lines))

    def cursor_forward(self, columns=1):
        """Move the cursor right N columns."""
        return self._add("CUF", _check_int("columns", columns))

    def cursor_back(self, columns=1):
        """Move the cursor left N columns."""
        return self._add("CUB", _check_int("columns", columns))

    def cursor_next_line(self, lines=1):
        """Move the cursor to the beginning of the line, N lines down."""
        return self._add("CNL", _check_int("lines", lines))

    def cursor_previous_line(self, lines=1):
        """Move the cursor to the beginning of the line, N lines up."""
        return self._add("CPL", _check_int("lines", lines))

    def cursor_position(self, row=1, column=1):
        """Move the cursor to the given row and column (1-based)."""
        row = _check_int("row", row)
        column = _check_int("column", column)
        return self._add("CUP", row, column)

    # %% Erasing

    def erase_display(self, mode=2):
        """Erase (part of) the display.

        Mode 0 erases from the cursor to the end of the display, mode 1
        from the beginning of the display to the cursor, and mode 2 the
        full display. Any other mode is taken as 2.
        """
        return self._add("ED", _clamp_erase_mode(mode))

    def erase_line(self, mode=2):
        """Erase (part of) the line.

        Mode 0 erases from the cursor to the end of the line, mode 1
        from the beginning of the line to the cursor, and mode 2 the
        full line. Any other mode is taken as 2.
        """
        return self._add("EL", _clamp_erase_mode(mode))

    def erase_characters(self, spaces=1):
        """Overwrite N characters from the cursor with a space."""
        return self._add("ECH", _check_int("spaces", spaces))

    # %% Scrolling and editing

    def scroll_up(self, lines=1):
        """Scroll up N lines, new lines fill in from the bottom."""
        return self._add("SU", _check_int("lines", lines))

    def scroll_down(self, lines=1):
        """Scroll down N lines, new lines fill in from the top."""
        return self._add("SD", _check_int("lines", lines))

    def insert_characters(self, spaces=1):
        """Insert N spaces at the cursor, shifting text to the right."""
        return self._add("ICH", _check_int("spaces", spaces))

    def delete_characters(self, spaces=1):
        """Delete N characters at the cursor, shifting in spaces from the right."""
        return self._add("DCH", _check_int("spaces", spaces))

    def insert_lines(self, lines=1):
        return self._add("IL", _check_int("lines", lines))

    def delete_lines(self, lines=1):
        return self._add("DL", _check_int("lines", lines))

    # %% Attributes, modes, state

    def set_graphics_rendition(self, params):
        """Set the format of the text that follows.

        The params are a sequence of codes, see the SGR class. They are
        emitted in the given order.
        """
        params = [_check_int("SGR code", p) for p in params]
        return self._add("SGR", *params)

    def save_cursor(self):
        """Save the cursor position (and attributes) in terminal memory."""
        return self._add("DECSC")

    def restore_cursor(self):
        """Restore the cursor position saved with save_cursor()."""
        return self._add("DECRC")

    def private_mode_set(self, mode):
        """Enable a DEC private mode, see the DECSET class."""
        return self._add("DECSET", _check_int("mode", mode))

    def private_mode_reset(self, mode):
        """Disable a DEC private mode."""
        return self._add("DECRST", _check_int("mode", mode))

    def select_charset(self, mode):
        """Select the character set (G0), see the CHARSET class."""
        if not isinstance(mode, str) or not mode:
            raise InvalidParameter(f"charset must be a non-empty str, not {mode!r}")
        return self._add("SCS", mode)

    def append(self, text):
        """Append text to the buffer, without writing it yet."""
        self._buffer += str(text)
        return self

    # Mnemonic aliases
    cuu = cursor_up
    cud = cursor_down
    cuf = cursor_forward
    cub = cursor_back
    cnl = cursor_next_line
    cpl = cursor_previous_line
    cup = cursor_position
    ed = erase_display
    el = erase_line
    ech = erase_characters
    su = scroll_up
    sd = scroll_down
    ich = insert_characters
    dch = delete_characters
    il = insert_lines
    dl = delete_lines
    sgr = set_graphics_rendition
    decsc = save_cursor
    decrc = restore_cursor
    decset = private_mode_set
    decrst = private_mode_reset
    scs = select_charset

    # %% Output

    def flush(self, msg=None, reset_sgr=False):
        """Write the buffer to the output stream and clear it.

        Optionally write ``msg`` after the sequences, and reset all
        graphics attributes after that. The buffer is cleared even if
        writing fails.
        """
        file_out = self._file_out
        try:
            file_out.write(self._buffer)
            if msg:
                file_out.write(msg)
            if reset_sgr:
                file_out.write(format_sequence("SGR", 0))
        finally:
            self._buffer = ""
        file_out.flush()

    # %% Requests

    def query_cursor_position(self, timeout=_UNSET, cancel=None):
        """Ask the terminal where the cursor is.

        Unlike the other methods, this writes its request immediately (the
        buffer is left alone) and blocks until the terminal replies.
        Returns a CursorPosition.

        Raises IOUnavailable if the input cannot be put in raw mode,
        ResponseTimeout if there is no reply within ``timeout`` seconds
        (defaults to ``query_timeout``), QueryCancelled if the ``cancel``
        event is set, and ResponseParseError if the reply is not a
        cursor position report. The input mode is restored in all cases.
        Concurrent queries on the same writer wait for each other.
        """
        if timeout is _UNSET:
            timeout = self.query_timeout

        with self._query_lock:
            if not self._input.isatty():
                raise IOUnavailable(f"Input is not a terminal: {self._input!r}")
            logger.info("Querying cursor position")
            try:
                with self._input.raw_mode():
                    self._file_out.write(format_sequence("CPR"))
                    self._file_out.flush()
                    data = self._input.read_chunk(timeout=timeout, cancel=cancel)
            except VTWriterError as err:
                logger.warning(f"Cursor position query failed: {err}")
                raise

            try:
                return parse_cursor_position(data)
            except ResponseParseError:
                logger.warning(f"Unexpected reply to cursor position query: {data!r}")
                raise
