"""
Access to the terminal's input stream.

Writing escape sequences needs nothing but a text stream. Reading the
terminal's reply to a request (like the cursor position) is harder: the
input must be put in raw mode, so that the reply is delivered right
away and is not echoed back to the screen. That part differs between
Unix and Windows, which is why there is a base TerminalInput class
with implementations for each.
"""

from ._input import TerminalInput, POLL_INTERVAL  # noqa
