"""Constants and configuration for the rilo editor."""


class EditorConstants:
    """Central configuration constants for the editor."""

    # Rendering defaults (overridable through settings)
    DEFAULT_TAB_WIDTH = 4  # Columns a tab character occupies on screen
    DEFAULT_MESSAGE_TIMEOUT = 5.0  # Seconds a status message stays visible

    # Keyboard timing
    ESCAPE_SEQUENCE_TIMEOUT = 0.1  # Wait for the bytes following ESC (seconds)

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Screen text
    EMPTY_ROW_MARKER = "~"
    NO_FILE_NAME = "[No Name]"
    WELCOME_MESSAGE = "rilo editor -- version {}"
    SAVE_PROMPT = "Save as: {}"

    # Status messages
    HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-X = refresh"
    SAVED_MESSAGE = "{} bytes written to disk"
    SAVE_FAILED_MESSAGE = "Can't save! {}"
    SAVE_CANCELLED_MESSAGE = "Save aborted"
    NEW_FILE_MESSAGE = "New file"


class Ansi:
    """VT100 control sequences written by the renderer."""

    ESC = "\x1b"
    CLEAR_LINE = "\x1b[K"
    CLEAR_SCREEN = "\x1b[2J"
    CURSOR_HOME = "\x1b[H"
    HIDE_CURSOR = "\x1b[?25l"
    SHOW_CURSOR = "\x1b[?25h"
    INVERSE = "\x1b[7m"
    NORMAL = "\x1b[m"

    @staticmethod
    def move(row: int, col: int) -> str:
        """Cursor move to a 0-based (row, col); the wire format is 1-based."""
        return f"\x1b[{row + 1};{col + 1}H"


def ctrl_key(c: str) -> int:
    """Byte produced by Ctrl plus the given letter."""
    return ord(c) & 0x1f
