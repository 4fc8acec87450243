"""Keyboard input decoding from raw terminal bytes."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .constants import EditorConstants, ctrl_key
from .errors import InvalidEscapeSequence

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Kinds of decoded actions."""
    QUIT = "quit"
    REFRESH = "refresh"
    SAVE = "save"
    ESCAPE = "escape"
    ENTER = "enter"
    BACKSPACE = "backspace"
    DELETE = "delete"  # Delete key: removes the character under the cursor
    MOVE = "move"
    INSERT = "insert"


class ArrowKey(Enum):
    """Navigation keys."""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    HOME = "home"
    END = "end"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"


@dataclass(frozen=True)
class Action:
    """One decoded keystroke."""
    action_type: ActionType
    key: Optional[ArrowKey] = None  # Set for MOVE
    char: Optional[str] = None  # Set for INSERT


QUIT = Action(ActionType.QUIT)
REFRESH = Action(ActionType.REFRESH)
SAVE = Action(ActionType.SAVE)
ESCAPE = Action(ActionType.ESCAPE)
ENTER = Action(ActionType.ENTER)
BACKSPACE = Action(ActionType.BACKSPACE)
DELETE = Action(ActionType.DELETE)


def move(key: ArrowKey) -> Action:
    return Action(ActionType.MOVE, key=key)


def insert(char: str) -> Action:
    return Action(ActionType.INSERT, char=char)


CONTROL_BYTES = {
    ctrl_key('q'): QUIT,
    ctrl_key('x'): REFRESH,
    ctrl_key('s'): SAVE,
    ord('\r'): ENTER,
    ord('\n'): ENTER,
    127: BACKSPACE,
    ctrl_key('h'): BACKSPACE,
}

# Final byte of ESC [ <letter>
CSI_LETTERS = {
    ord('A'): move(ArrowKey.UP),
    ord('B'): move(ArrowKey.DOWN),
    ord('C'): move(ArrowKey.RIGHT),
    ord('D'): move(ArrowKey.LEFT),
    ord('H'): move(ArrowKey.HOME),
    ord('F'): move(ArrowKey.END),
}

# Digit of ESC [ <digit> ~ (linux console, tmux, rxvt variants)
CSI_TILDE_CODES = {
    ord('1'): move(ArrowKey.HOME),
    ord('7'): move(ArrowKey.HOME),
    ord('4'): move(ArrowKey.END),
    ord('8'): move(ArrowKey.END),
    ord('3'): DELETE,
    ord('5'): move(ArrowKey.PAGE_UP),
    ord('6'): move(ArrowKey.PAGE_DOWN),
}

# Final byte of ESC O <letter> (application cursor mode)
SS3_LETTERS = {
    ord('H'): move(ArrowKey.HOME),
    ord('F'): move(ArrowKey.END),
}

# ECMA-48 byte classes: parameters/intermediates, then one final byte
PARAMETER_BYTES = (0x20, 0x3F)
FINAL_BYTES = (0x40, 0x7E)
MAX_SEQUENCE_LENGTH = 32


def _utf8_length(lead: int) -> int:
    """Total length of a UTF-8 sequence from its lead byte, 1 if not a lead."""
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


class InputDecoder:
    """Turns a byte source into Actions.

    ``read_byte(timeout)`` returns the next byte as an int, or None when no
    byte arrived within ``timeout`` seconds (``None`` timeout blocks).
    """

    def __init__(self, read_byte: Callable[[Optional[float]], Optional[int]],
                 escape_timeout: float = EditorConstants.ESCAPE_SEQUENCE_TIMEOUT):
        self.read_byte = read_byte
        self.escape_timeout = escape_timeout

    def read_action(self, timeout: Optional[float] = None) -> Optional[Action]:
        """Read and decode one keystroke.

        Returns:
            The Action, or None on timeout or for an unbound control byte.

        Raises:
            InvalidEscapeSequence: an escape sequence matched no key.
        """
        byte = self.read_byte(timeout)
        if byte is None:
            return None
        return self.decode(byte)

    def decode(self, byte: int) -> Optional[Action]:
        """Decode a keystroke starting with ``byte``, reading more as needed."""
        if byte == 0x1b:
            return self._decode_escape()
        action = CONTROL_BYTES.get(byte)
        if action is not None:
            return action
        if byte == ord('\t'):
            return insert('\t')
        if byte < 32:
            logger.debug(f"Ignoring control byte {byte:#04x}")
            return None
        if byte < 128:
            return insert(chr(byte))
        return self._decode_utf8(byte)

    def _next(self) -> Optional[int]:
        return self.read_byte(self.escape_timeout)

    def _read_sequence_body(self, data: bytearray) -> bool:
        """Append parameter bytes and the final byte of a CSI/SS3 sequence.

        Returns:
            True if a final byte arrived, False if the sequence was cut off.
        """
        while len(data) < MAX_SEQUENCE_LENGTH:
            byte = self._next()
            if byte is None:
                return False
            data.append(byte)
            if FINAL_BYTES[0] <= byte <= FINAL_BYTES[1]:
                return True
            if not PARAMETER_BYTES[0] <= byte <= PARAMETER_BYTES[1]:
                return False
        return False

    def _decode_escape(self) -> Action:
        first = self._next()
        if first is None:
            return ESCAPE
        if first not in (ord('['), ord('O')):
            raise InvalidEscapeSequence(bytes([0x1b, first]))

        data = bytearray([0x1b, first])
        if not self._read_sequence_body(data):
            raise InvalidEscapeSequence(bytes(data))
        params, final = bytes(data[2:-1]), data[-1]

        if first == ord('O'):
            if not params and final in SS3_LETTERS:
                return SS3_LETTERS[final]
        elif not params and final in CSI_LETTERS:
            return CSI_LETTERS[final]
        elif len(params) == 1 and final == ord('~') and params[0] in CSI_TILDE_CODES:
            return CSI_TILDE_CODES[params[0]]
        raise InvalidEscapeSequence(bytes(data))

    def _decode_utf8(self, lead: int) -> Optional[Action]:
        data = bytearray([lead])
        for _ in range(_utf8_length(lead) - 1):
            byte = self._next()
            if byte is None:
                break
            data.append(byte)
        try:
            char = data.decode('utf-8')
        except UnicodeDecodeError:
            logger.debug(f"Ignoring malformed UTF-8 input {bytes(data)!r}")
            return None
        return insert(char)
