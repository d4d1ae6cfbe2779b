import time
import msvcrt
import ctypes
import logging
from ctypes import wintypes

from ..errors import IOUnavailable
from ._input import TerminalInput


logger = logging.getLogger("vtwriter")

KERNEL32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore
KERNEL32.WaitForSingleObject.argtypes = (wintypes.HANDLE, wintypes.DWORD)
KERNEL32.WaitForSingleObject.restype = wintypes.DWORD

ENABLE_VIRTUAL_TERMINAL_INPUT = 0x0200
WAIT_OBJECT_0 = 0x0
INFINITE = 0xFFFFFFFF

# How often to check for a key while the handle is signalled by other events
KBHIT_INTERVAL = 0.01


def get_console_mode(fd):
    """Get the console mode for a given file descriptor, or None if it's not a console."""
    windows_filehandle = msvcrt.get_osfhandle(fd)  # type: ignore
    mode = wintypes.DWORD()
    if not KERNEL32.GetConsoleMode(windows_filehandle, ctypes.byref(mode)):
        return None
    return mode.value


def set_console_mode(fd, mode: int) -> bool:
    """Set the console mode for a given file descriptor."""
    windows_filehandle = msvcrt.get_osfhandle(fd)  # type: ignore
    success = KERNEL32.SetConsoleMode(windows_filehandle, mode)
    return bool(success)


class WindowsTerminalInput(TerminalInput):

    def __init__(self, *args, **kwargs):
        self._ori_mode_in = None
        super().__init__(*args, **kwargs)

    def _store_terminal_mode(self):
        mode = get_console_mode(self.fd_in)
        if mode is None:
            raise IOUnavailable("Cannot get console mode of input.")
        self._ori_mode_in = mode

    def _set_terminal_mode(self):
        # No line input, no echo, and key presses as vt100 sequences
        if not set_console_mode(self.fd_in, ENABLE_VIRTUAL_TERMINAL_INPUT):
            raise IOUnavailable("Cannot set console mode of input.")

    def _reset_terminal_mode(self):
        if self._ori_mode_in is not None:
            if not set_console_mode(self.fd_in, self._ori_mode_in):
                logger.warning("Could not restore console mode of input.")
            self._ori_mode_in = None

    def _wait_for_input(self, timeout):
        handle = msvcrt.get_osfhandle(self.fd_in)  # type: ignore
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if deadline is None:
                ms = INFINITE
            else:
                ms = int(max(0.0, deadline - time.monotonic()) * 1000)
            if KERNEL32.WaitForSingleObject(handle, ms) != WAIT_OBJECT_0:
                return False
            # The handle is also signalled by focus, mouse and resize events,
            # in which case os.read() would block until a key comes in.
            if msvcrt.kbhit():
                return True
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(KBHIT_INTERVAL)
