"""Frame rendering.

:func:`render_frame` is a pure function of the editor state: it builds the
whole screen (text rows, status bar, cursor placement) as one byte string,
which the terminal driver then writes in a single call.
"""

import os
import re
from dataclasses import dataclass
from typing import List, Optional

from .buffer import TextBuffer
from .constants import Ansi, EditorConstants
from .version import get_version
from .viewport import Viewport, expand_tabs

# C0, DEL and C1; tabs are expanded before masking
_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


@dataclass
class StatusMessage:
    """Transient message shown in the status bar."""
    text: str
    created: float

    def is_active(self, now: float, timeout: float) -> bool:
        return now - self.created < timeout


def mask_controls(text: str) -> str:
    """Show terminal control characters as ``?``."""
    return _CONTROL_CHARS.sub('?', text)


def visible_slice(line: str, col_offset: int, term_cols: int, tab_width: int) -> str:
    """The part of ``line`` shown on screen, tabs expanded, cut to the width."""
    text = expand_tabs(line[col_offset:col_offset + term_cols], tab_width)
    return mask_controls(text)[:term_cols]


def _welcome_row(term_cols: int) -> str:
    message = EditorConstants.WELCOME_MESSAGE.format(get_version())[:term_cols]
    padding = (term_cols - len(message)) // 2
    if padding:
        return EditorConstants.EMPTY_ROW_MARKER + " " * (padding - 1) + message
    return message


def render_rows(buffer: TextBuffer, viewport: Viewport) -> List[str]:
    """Text for each screen row of the document area."""
    rows = []
    for screen_row in range(viewport.term_rows):
        idx = screen_row + viewport.row_offset
        if idx < buffer.line_count:
            rows.append(visible_slice(buffer.line(idx), viewport.col_offset,
                                      viewport.term_cols, viewport.tab_width))
        elif buffer.is_empty and screen_row == viewport.term_rows // 3:
            rows.append(_welcome_row(viewport.term_cols))
        else:
            rows.append(EditorConstants.EMPTY_ROW_MARKER)
    return rows


def scroll_percent(row: int, line_count: int) -> int:
    """Position of ``row`` in the document as a percentage, 0 when empty."""
    if line_count == 0:
        return 0
    return min(100, (row + 1) * 100 // line_count)


def status_bar(buffer: TextBuffer, viewport: Viewport, message: Optional[str] = None) -> str:
    """Status bar text, exactly ``term_cols`` wide."""
    width = viewport.term_cols
    name = os.path.basename(buffer.path) if buffer.path else EditorConstants.NO_FILE_NAME
    left = f"{name} - {buffer.line_count} lines"
    if buffer.dirty:
        left += " (modified)"
    if message:
        left += f" | {message}"
    left = mask_controls(left)

    line_count = buffer.line_count
    row = viewport.file_row
    right = (f"{min(row + 1, line_count)}/{line_count} "
             f"{scroll_percent(row, line_count)}%")
    if len(left) + 1 + len(right) <= width:
        return left + " " * (width - len(left) - len(right)) + right
    return left[:width].ljust(width)


def render_frame(buffer: TextBuffer, viewport: Viewport,
                 message: Optional[StatusMessage] = None, now: float = 0.0,
                 message_timeout: float = EditorConstants.DEFAULT_MESSAGE_TIMEOUT,
                 prompt: Optional[str] = None) -> bytes:
    """Build one complete frame.

    Args:
        buffer: Document being edited.
        viewport: Scroll offsets, dimensions and cursor.
        message: Status message, shown while younger than ``message_timeout``.
        now: Current time, in the same clock as ``message.created``.
        message_timeout: Seconds a message stays visible.
        prompt: When set, the status bar shows this prompt and the cursor
            sits at its end.

    Returns:
        The bytes to write to the terminal.
    """
    out = [Ansi.HIDE_CURSOR, Ansi.CURSOR_HOME]
    for row in render_rows(buffer, viewport):
        out.append(Ansi.CLEAR_LINE)
        out.append(row)
        out.append("\r\n")

    if prompt is not None:
        bar = mask_controls(prompt)[:viewport.term_cols].ljust(viewport.term_cols)
        cursor_row, cursor_col = viewport.term_rows, min(len(prompt), viewport.term_cols - 1)
    else:
        text = message.text if message and message.is_active(now, message_timeout) else None
        bar = status_bar(buffer, viewport, text)
        cursor_row, cursor_col = viewport.screen_position()
    out.append(Ansi.INVERSE + bar + Ansi.NORMAL)

    out.append(Ansi.move(cursor_row, cursor_col))
    out.append(Ansi.SHOW_CURSOR)
    return ''.join(out).encode('utf-8', errors='replace')
