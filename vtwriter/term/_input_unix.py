import tty  # Unix
import select
import logging
import termios  # Unix

from ..errors import IOUnavailable
from ._input import TerminalInput


logger = logging.getLogger("vtwriter")


def patch_lflag(attrs: int) -> int:
    return attrs & ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)


def patch_iflag(attrs: int) -> int:
    return attrs & ~(
        # Disable XON/XOFF flow control on output and input.
        # (Don't capture Ctrl-S and Ctrl-Q.)
        # Like executing: "stty -ixon."
        termios.IXON
        | termios.IXOFF
        |
        # Don't translate carriage return into newline on input.
        termios.ICRNL
        | termios.INLCR
        | termios.IGNCR
    )


class UnixTerminalInput(TerminalInput):

    def __init__(self, *args, **kwargs):
        self._ori_term_attr = None
        super().__init__(*args, **kwargs)

    def _store_terminal_mode(self):
        try:
            self._ori_term_attr = termios.tcgetattr(self.fd_in)
        except termios.error as err:
            raise IOUnavailable(f"Cannot get terminal attributes: {err}") from None

    def _set_terminal_mode(self):
        newattr = list(self._ori_term_attr)
        newattr[tty.CC] = list(newattr[tty.CC])
        newattr[tty.LFLAG] = patch_lflag(newattr[tty.LFLAG])
        newattr[tty.IFLAG] = patch_iflag(newattr[tty.IFLAG])

        # VMIN defines the number of characters read at a time in
        # non-canonical mode. It seems to default to 1 on Linux, but on
        # Solaris and derived operating systems it defaults to 4. (This is
        # because the VMIN slot is the same as the VEOF slot, which
        # defaults to ASCII EOT = Ctrl-D = 4.)
        newattr[tty.CC][termios.VMIN] = 1

        try:
            termios.tcsetattr(self.fd_in, termios.TCSANOW, newattr)
        except termios.error as err:
            # E.g. when we're a background process
            raise IOUnavailable(f"Cannot set terminal attributes: {err}") from None

    def _reset_terminal_mode(self):
        if self._ori_term_attr is not None:
            try:
                termios.tcsetattr(self.fd_in, termios.TCSANOW, self._ori_term_attr)
            except termios.error as err:
                logger.warning(f"Could not restore terminal mode: {err}")
            self._ori_term_attr = None

    def _wait_for_input(self, timeout):
        ready, _, _ = select.select([self.fd_in], [], [], timeout)
        return bool(ready)
