"""
The exceptions raised by vtwriter.

Only the cursor-position query talks to the terminal, so apart from
InvalidParameter, these all come from that single request/response
exchange.
"""


class VTWriterError(Exception):
    """Base class for all vtwriter errors."""


class InvalidParameter(VTWriterError, ValueError):
    """A parameter would produce a malformed escape sequence."""


class IOUnavailable(VTWriterError, OSError):
    """Raw input mode cannot be established, e.g. stdin is not a terminal."""


class ResponseParseError(VTWriterError, ValueError):
    """The terminal's reply did not look like a cursor position report."""

    def __init__(self, data):
        self.data = data
        super().__init__(f"Could not parse cursor position from {data!r}")


class ResponseTimeout(VTWriterError, TimeoutError):
    """The terminal did not reply in time."""


class QueryCancelled(VTWriterError):
    """The caller abandoned the wait for a reply."""
