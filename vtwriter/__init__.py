"""
vtwriter - build VT100/ANSI terminal control sequences.
"""

from .errors import (  # noqa
    VTWriterError,
    InvalidParameter,
    IOUnavailable,
    ResponseParseError,
    ResponseTimeout,
    QueryCancelled,
)
from .sequences import ESC, CSI, SGR, DECSET, CHARSET, format_sequence  # noqa
from .writer import SequenceWriter, CursorPosition, parse_cursor_position  # noqa
from ._cli import cli  # noqa

__version__ = "0.1.0"
version_info = tuple(map(int, __version__.split(".")))
