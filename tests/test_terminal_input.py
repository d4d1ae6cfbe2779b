import io
import os
import sys
import time
import threading

import pytest

from vtwriter import SequenceWriter
from vtwriter.term import TerminalInput
from vtwriter.errors import (
    IOUnavailable,
    QueryCancelled,
    ResponseParseError,
    ResponseTimeout,
)


skip_on_windows = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="Uses select on pipes and ptys"
)


@pytest.fixture
def pipe():
    r, w = os.pipe()
    f = os.fdopen(r, "rb", buffering=0)
    yield f, w
    f.close()
    os.close(w)


def test_platform_class():
    term = TerminalInput(stdin=io.StringIO())
    assert isinstance(term, TerminalInput)
    if sys.platform.startswith("win"):
        assert type(term).__name__ == "WindowsTerminalInput"
    else:
        assert type(term).__name__ == "UnixTerminalInput"


def test_no_fileno():
    term = TerminalInput(stdin=io.StringIO())
    assert term.fd_in is None
    assert not term.isatty()
    with pytest.raises(IOUnavailable):
        with term.raw_mode():
            pass


@skip_on_windows
def test_pipe_is_not_a_terminal(pipe):
    f, w = pipe
    term = TerminalInput(stdin=f)
    assert term.fd_in == f.fileno()
    assert not term.isatty()
    with pytest.raises(IOUnavailable):
        with term.raw_mode():
            pass

    # The writer refuses before writing anything
    out = io.StringIO()
    writer = SequenceWriter(stdout=out, stdin=f)
    with pytest.raises(IOUnavailable):
        writer.query_cursor_position()
    assert out.getvalue() == ""


@skip_on_windows
def test_read_chunk(pipe):
    f, w = pipe
    term = TerminalInput(stdin=f)
    os.write(w, b"\x1b[12;5R")
    assert term.read_chunk(timeout=1) == b"\x1b[12;5R"

    os.write(w, b"xyz")
    assert term.read_chunk(cancel=threading.Event()) == b"xyz"


@skip_on_windows
def test_read_chunk_timeout(pipe):
    f, w = pipe
    term = TerminalInput(stdin=f)
    with pytest.raises(ResponseTimeout):
        term.read_chunk(timeout=0.05)
    with pytest.raises(ResponseTimeout):
        term.read_chunk(timeout=0)


@skip_on_windows
def test_read_chunk_cancel(pipe):
    f, w = pipe
    term = TerminalInput(stdin=f)

    cancel = threading.Event()
    cancel.set()
    with pytest.raises(QueryCancelled):
        term.read_chunk(cancel=cancel)

    cancel = threading.Event()
    timer = threading.Timer(0.05, cancel.set)
    timer.start()
    try:
        with pytest.raises(QueryCancelled):
            term.read_chunk(timeout=10, cancel=cancel)
    finally:
        timer.cancel()


def test_positional_stdin():
    f = io.StringIO()
    term = TerminalInput(f)
    assert term._file_in is f
    assert term.fd_in is None


@pytest.fixture
def pty_pair():
    pty = pytest.importorskip("pty")
    master, slave = pty.openpty()
    slave_file = os.fdopen(slave, "rb", buffering=0)
    yield master, slave_file
    slave_file.close()
    os.close(master)


def make_terminal(master, slave, reply):
    termios = pytest.importorskip("termios")

    class Terminal(io.StringIO):
        """Plays the terminal: answers the request via the pty."""

        def write(self, text):
            if text == "\x1b[6n":
                assert not termios.tcgetattr(slave)[3] & termios.ICANON
                if reply:
                    os.write(master, reply)
            return super().write(text)

    return Terminal()


@skip_on_windows
def test_query_over_a_pty(pty_pair):
    termios = pytest.importorskip("termios")
    master, slave_file = pty_pair
    slave = slave_file.fileno()
    attrs_before = termios.tcgetattr(slave)

    term = TerminalInput(stdin=slave_file)
    assert term.isatty()

    out = make_terminal(master, slave, b"\x1b[7;3R")
    writer = SequenceWriter(stdout=out, stdin=term)
    assert writer.query_cursor_position(timeout=5) == (7, 3)
    assert termios.tcgetattr(slave) == attrs_before

    # Cannot nest raw mode
    with term.raw_mode():
        with pytest.raises(RuntimeError):
            term.__enter__()
    assert termios.tcgetattr(slave) == attrs_before


@skip_on_windows
def test_failed_queries_over_a_pty_restore_mode(pty_pair):
    termios = pytest.importorskip("termios")
    master, slave_file = pty_pair
    slave = slave_file.fileno()
    attrs_before = termios.tcgetattr(slave)

    out = make_terminal(master, slave, b"garbage")
    writer = SequenceWriter(stdout=out, stdin=slave_file)
    with pytest.raises(ResponseParseError) as err:
        writer.query_cursor_position(timeout=5)
    assert err.value.data == b"garbage"
    assert termios.tcgetattr(slave) == attrs_before

    out = make_terminal(master, slave, None)
    writer = SequenceWriter(stdout=out, stdin=slave_file)
    with pytest.raises(ResponseTimeout):
        writer.query_cursor_position(timeout=0.1)
    assert termios.tcgetattr(slave) == attrs_before

    # The lock is released, so raw mode can be entered again
    with TerminalInput(stdin=slave_file):
        assert termios.tcgetattr(slave) != attrs_before
    assert termios.tcgetattr(slave) == attrs_before


@skip_on_windows
def test_raw_mode_rolls_back_when_setting_fails(pty_pair, monkeypatch):
    termios = pytest.importorskip("termios")
    from vtwriter.term._input_unix import UnixTerminalInput

    master, slave_file = pty_pair
    slave = slave_file.fileno()
    attrs_before = termios.tcgetattr(slave)

    set_terminal_mode = UnixTerminalInput._set_terminal_mode

    def set_then_fail(self):
        set_terminal_mode(self)
        assert termios.tcgetattr(slave) != attrs_before
        raise IOUnavailable("nope")

    monkeypatch.setattr(UnixTerminalInput, "_set_terminal_mode", set_then_fail)
    term = TerminalInput(stdin=slave_file)
    with pytest.raises(IOUnavailable):
        with term.raw_mode():
            pass
    assert termios.tcgetattr(slave) == attrs_before
    assert not term._entered

    # Nothing stays locked
    monkeypatch.setattr(UnixTerminalInput, "_set_terminal_mode", set_terminal_mode)
    with term.raw_mode():
        pass
    assert termios.tcgetattr(slave) == attrs_before


@skip_on_windows
def test_inputs_on_the_same_fd_take_turns(pty_pair):
    termios = pytest.importorskip("termios")
    master, slave_file = pty_pair
    slave = slave_file.fileno()
    attrs_before = termios.tcgetattr(slave)

    term1 = TerminalInput(stdin=slave_file)
    term2 = TerminalInput(stdin=slave_file)
    entered = threading.Event()
    stored = []

    def use_term2():
        with term2.raw_mode():
            entered.set()
            stored.append(term2._ori_term_attr)

    with term1.raw_mode():
        thread = threading.Thread(target=use_term2)
        thread.start()
        time.sleep(0.1)
        assert not entered.is_set()
    thread.join(5)

    assert entered.is_set()
    # term2 saw the original mode, not term1's raw mode
    assert stored == [attrs_before]
    assert termios.tcgetattr(slave) == attrs_before
