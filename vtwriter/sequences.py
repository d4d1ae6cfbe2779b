"""
The catalog of escape sequences that vtwriter knows how to produce.

Each entry maps a VT100 mnemonic to a template and the number of
parameters it takes. Parameters are formatted as decimal numbers (or
verbatim strings, for the character set designator). An arity of None
means the sequence takes any number of parameters, joined with ";".

NOTE: not all sequences work with all terminals.
"""

from .errors import InvalidParameter


ESC = "\x1b"  # ^[
CSI = ESC + "["  # ^[[  (7-bit form, the single byte \x9b is not utf-8)
DCS = ESC + "P"  # ^[P
OSC = ESC + "]"  # ^[]
BEL = "\x07"
DEL = "\x7f"


SEQUENCES = {
    # Cursor movement
    "CUU": (CSI + "{}A", 1),  # cursor up
    "CUD": (CSI + "{}B", 1),  # cursor down
    "CUF": (CSI + "{}C", 1),  # cursor forward
    "CUB": (CSI + "{}D", 1),  # cursor back
    "CNL": (CSI + "{}E", 1),  # cursor next line
    "CPL": (CSI + "{}F", 1),  # cursor previous line
    "CUP": (CSI + "{};{}H", 2),  # cursor position
    # Erasing
    "ED": (CSI + "{}J", 1),  # erase in display
    "EL": (CSI + "{}K", 1),  # erase in line
    "ECH": (CSI + "{}X", 1),  # erase characters
    # Scrolling
    "SU": (CSI + "{}S", 1),
    "SD": (CSI + "{}T", 1),
    # Editing
    "ICH": (CSI + "{}@", 1),  # insert characters
    "DCH": (CSI + "{}P", 1),  # delete characters
    "IL": (CSI + "{}L", 1),  # insert lines
    "DL": (CSI + "{}M", 1),  # delete lines
    # Attributes
    "SGR": (CSI + "{}m", None),
    # Cursor state
    "DECSC": (ESC + "7", 0),
    "DECRC": (ESC + "8", 0),
    # Modes and character sets
    "DECSET": (CSI + "?{}h", 1),
    "DECRST": (CSI + "?{}l", 1),
    "SCS": (ESC + "({}", 1),
    # Requests
    "CPR": (CSI + "6n", 0),  # device status report: cursor position
}


def format_sequence(name, *params):
    """Format the sequence with the given mnemonic.

    Raises KeyError for an unknown name, and InvalidParameter when the
    number of parameters does not match the sequence.
    """
    template, arity = SEQUENCES[name]
    if arity is None:
        return template.format(";".join(str(p) for p in params))
    if len(params) != arity:
        raise InvalidParameter(
            f"{name} takes {arity} parameter(s), got {len(params)}"
        )
    return template.format(*params)


class SGR:
    """Codes for SequenceWriter.sgr().

    Example, set italic red text, and reset afterwards::

        writer.sgr([SGR.ITALICS, SGR.FOREGROUND_RED]).flush("red!", True)

    For extended colors, follow FOREGROUND_EXTENDED or BACKGROUND_EXTENDED
    with EXTENDED_RGB and three values 0-255, or EXTENDED_256 and one
    value from the 256-color table::

        writer.sgr([SGR.FOREGROUND_EXTENDED, SGR.EXTENDED_RGB, 0, 255, 255])
        writer.sgr([SGR.FOREGROUND_EXTENDED, SGR.EXTENDED_256, 51])
    """

    DEFAULT = 0  # reset all attributes
    BOLD = 1
    DIM = 2
    ITALICS = 3
    UNDERLINE = 4
    BLINKING = 5  # not widely supported
    NEGATIVE = 7  # swap foreground and background, undo with POSITIVE
    HIDDEN = 8
    STRIKETHROUGH = 9
    DOUBLE_UNDERLINE = 21  # not widely supported
    BOLD_RESET = 22
    DIM_RESET = 22
    ITALIC_RESET = 23
    UNDERLINE_RESET = 24  # also resets DOUBLE_UNDERLINE
    BLINKING_RESET = 25
    POSITIVE = 27
    HIDDEN_RESET = 28
    STRIKETHROUGH_RESET = 29

    FOREGROUND_BLACK = 30
    FOREGROUND_RED = 31
    FOREGROUND_GREEN = 32
    FOREGROUND_YELLOW = 33
    FOREGROUND_BLUE = 34
    FOREGROUND_MAGENTA = 35
    FOREGROUND_CYAN = 36
    FOREGROUND_WHITE = 37
    FOREGROUND_EXTENDED = 38
    FOREGROUND_DEFAULT = 39

    BACKGROUND_BLACK = 40
    BACKGROUND_RED = 41
    BACKGROUND_GREEN = 42
    BACKGROUND_YELLOW = 43
    BACKGROUND_BLUE = 44
    BACKGROUND_MAGENTA = 45
    BACKGROUND_CYAN = 46
    BACKGROUND_WHITE = 47
    BACKGROUND_EXTENDED = 48
    BACKGROUND_DEFAULT = 49

    EXTENDED_RGB = 2  # truecolor, not supported everywhere
    EXTENDED_256 = 5


class DECSET:
    """Modes for SequenceWriter.decset() and decrst()."""

    SHOW_CURSOR = 25
    SAVE_SCREEN = 47
    VT200_MOUSE = 1000
    ANY_EVENT_MOUSE = 1003
    VT200_HIGHLIGHT_MOUSE = 1015
    SGR_EXT_MODE_MOUSE = 1006
    USE_ALT_BUFFER = 1049
    BRACKETED_PASTE = 2004


class CHARSET:
    """Designators for SequenceWriter.scs()."""

    US_ASCII = "B"
    LINE = "0"  # DEC special graphics, for line drawing
