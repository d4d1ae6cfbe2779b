import sys

from .utils import enable_log_forwarding, listen_to_logs


def cli(argv=None):
    argv = sys.argv if argv is None else argv
    if "--version" in argv or "version" in argv[1:]:
        from . import __version__

        print("vtwriter", __version__)
    elif "--listen" in argv:
        listen_to_logs()
    else:
        demo()


def demo(stdout=None, stdin=None):
    """Write some styled text, and report where the cursor ended up."""
    from .sequences import SGR
    from .writer import SequenceWriter
    from .errors import VTWriterError

    enable_log_forwarding()
    writer = SequenceWriter(stdout=stdout, stdin=stdin)
    writer.sgr([SGR.BOLD, SGR.FOREGROUND_CYAN]).flush("vtwriter", reset_sgr=True)
    writer.append(" says hi").flush("\n")

    try:
        pos = writer.query_cursor_position()
    except VTWriterError as err:
        writer.sgr([SGR.FOREGROUND_RED]).flush(f"No cursor position: {err}\n", True)
    else:
        writer.flush(f"The cursor is at row {pos.row}, column {pos.column}\n")
