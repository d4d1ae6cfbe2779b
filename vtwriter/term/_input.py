import os
import sys
import time
import logging
import threading

from ..errors import IOUnavailable, QueryCancelled, ResponseTimeout


logger = logging.getLogger("vtwriter")

# The longest we block in one go when the wait can be cancelled
POLL_INTERVAL = 0.05

# One lock per file descriptor, so that raw mode is entered by one
# TerminalInput at a time, even when several wrap the same stdin.
_fd_locks = {}
_fd_locks_lock = threading.Lock()


def _get_fd_lock(fd):
    with _fd_locks_lock:
        return _fd_locks.setdefault(fd, threading.RLock())


class TerminalInput:
    """The input side of a terminal.

    Instantiating this class produces a class corresponding with the
    current platform. Use it as a context manager (or via ``raw_mode()``)
    to put the terminal in raw mode for the duration of the context.
    """

    def __new__(cls, *args, **kwargs):
        # Select input class, unless a subclass was asked for explicitly
        impl = cls
        if cls is TerminalInput:
            if sys.platform.startswith("win"):
                from ._input_windows import WindowsTerminalInput as impl
            else:
                from ._input_unix import UnixTerminalInput as impl
        return super().__new__(impl)

    def __init__(self, stdin=None):
        self._entered = False
        self._file_in = stdin or sys.__stdin__
        try:
            self.fd_in = self._file_in.fileno()
        except (AttributeError, OSError, ValueError):
            # E.g. a StringIO, a closed file, or no stdin at all
            self.fd_in = None

    def __repr__(self):
        return f"<{self.__class__.__name__} fd={self.fd_in}>"

    def isatty(self):
        """Get whether the input is an interactive terminal."""
        return self.fd_in is not None and os.isatty(self.fd_in)

    def raw_mode(self):
        """Get a context manager that puts the input in raw mode."""
        return self

    def __enter__(self):
        if self._entered:
            raise RuntimeError("Can only enter raw mode once.")
        if not self.isatty():
            raise IOUnavailable(f"Input is not a terminal: {self._file_in!r}")
        # Blocks while another TerminalInput has this fd in raw mode
        fd_lock = _get_fd_lock(self.fd_in)
        fd_lock.acquire()
        try:
            self._store_terminal_mode()
            try:
                self._set_terminal_mode()
            except BaseException:
                self._reset_terminal_mode()
                raise
        except BaseException:
            fd_lock.release()
            raise
        self._fd_lock = fd_lock
        self._entered = True
        return self

    def __exit__(self, *args):
        self._entered = False
        try:
            self._reset_terminal_mode()
        finally:
            self._fd_lock.release()

    def read_chunk(self, timeout=None, cancel=None):
        """Wait for input and return the bytes that are available (at most 1024).

        Raises ResponseTimeout if nothing arrives within ``timeout``
        seconds (None means wait forever). If ``cancel`` is given, it
        should be a ``threading.Event``; setting it from another thread
        makes this raise QueryCancelled.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if cancel is not None and cancel.is_set():
                raise QueryCancelled("Stopped waiting for input.")
            wait = None if cancel is None else POLL_INTERVAL
            if deadline is not None:
                remaining = max(0.0, deadline - time.monotonic())
                wait = remaining if wait is None else min(wait, remaining)
            if self._wait_for_input(wait):
                return os.read(self.fd_in, 1024)
            if deadline is not None and time.monotonic() >= deadline:
                raise ResponseTimeout(f"No input within {timeout} seconds.")

    # For subclasses to implement

    def _store_terminal_mode(self):
        raise NotImplementedError()

    def _set_terminal_mode(self):
        raise NotImplementedError()

    def _reset_terminal_mode(self):
        raise NotImplementedError()

    def _wait_for_input(self, timeout):
        raise NotImplementedError()
