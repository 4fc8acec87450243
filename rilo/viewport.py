"""Cursor and viewport model.

The cursor ``(x, y)`` is kept relative to the scroll offsets: the absolute
document position is ``(x + col_offset, y + row_offset)``. Every motion is
computed on absolute coordinates and then handed to :meth:`Viewport.place`,
which scrolls the viewport just enough to keep the cursor on screen.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .buffer import TextBuffer
from .constants import EditorConstants
from .errors import BufferBoundsViolation
from .keyboard import ArrowKey


def render_column(line: str, col: int, tab_width: int = EditorConstants.DEFAULT_TAB_WIDTH) -> int:
    """Screen column of logical column ``col`` once tabs are expanded."""
    prefix = line[:col]
    return len(prefix) + prefix.count('\t') * (tab_width - 1)


def expand_tabs(text: str, tab_width: int = EditorConstants.DEFAULT_TAB_WIDTH) -> str:
    """Replace every tab with ``tab_width`` spaces."""
    return text.replace('\t', ' ' * tab_width)


@dataclass
class CursorPosition:
    """Cursor position relative to the viewport offsets."""
    x: int = 0
    y: int = 0


class Viewport:
    """Scroll offsets, terminal dimensions and the cursor inside them."""

    def __init__(self, buffer: TextBuffer, term_rows: int, term_cols: int,
                 tab_width: int = EditorConstants.DEFAULT_TAB_WIDTH):
        self.buffer = buffer
        self.term_rows = max(1, term_rows)
        self.term_cols = max(1, term_cols)
        self.tab_width = tab_width
        self.row_offset = 0
        self.col_offset = 0
        self.cursor = CursorPosition()
        # Column that vertical motion tries to return to
        self.desired_col: Optional[int] = None

    @property
    def file_row(self) -> int:
        return self.cursor.y + self.row_offset

    @property
    def file_col(self) -> int:
        return self.cursor.x + self.col_offset

    @property
    def render_x(self) -> int:
        """Screen column of the cursor, relative to the left edge."""
        line = self.buffer.line(self.file_row)
        return (render_column(line, self.file_col, self.tab_width)
                - render_column(line, self.col_offset, self.tab_width))

    def screen_position(self) -> Tuple[int, int]:
        """0-based (row, col) where the terminal cursor goes."""
        return (self.cursor.y, self.render_x)

    def place(self, col: int, row: int, keep_desired: bool = False):
        """Move the cursor to absolute ``(col, row)`` and scroll to show it."""
        if not 0 <= row <= self.buffer.line_count:
            raise BufferBoundsViolation(f"Row {row} outside document")
        line = self.buffer.line(row)
        if not 0 <= col <= len(line):
            raise BufferBoundsViolation(f"Column {col} outside line {row}")

        if row < self.row_offset:
            self.row_offset = row
        elif row >= self.row_offset + self.term_rows:
            self.row_offset = row - self.term_rows + 1

        if col < self.col_offset:
            self.col_offset = col
        # The cursor cell itself has to fit on screen
        while (self.col_offset < col and
               render_column(line, col, self.tab_width)
               - render_column(line, self.col_offset, self.tab_width) >= self.term_cols):
            self.col_offset += 1

        self.cursor.x = col - self.col_offset
        self.cursor.y = row - self.row_offset
        if not keep_desired:
            self.desired_col = None

    def resize(self, term_rows: int, term_cols: int):
        """Adopt new terminal dimensions, keeping the cursor where it is."""
        col, row = self.file_col, self.file_row
        self.term_rows = max(1, term_rows)
        self.term_cols = max(1, term_cols)
        self.place(col, row, keep_desired=True)

    # --- Motion ---

    def move(self, key: ArrowKey):
        """Apply one navigation key."""
        handlers = {
            ArrowKey.LEFT: self._left,
            ArrowKey.RIGHT: self._right,
            ArrowKey.UP: self._up,
            ArrowKey.DOWN: self._down,
            ArrowKey.HOME: self._home,
            ArrowKey.END: self._end,
            ArrowKey.PAGE_UP: self._page_up,
            ArrowKey.PAGE_DOWN: self._page_down,
        }
        handlers[key]()

    def _left(self):
        col, row = self.file_col, self.file_row
        if col > 0:
            self.place(col - 1, row)
        elif row > 0:
            self.place(self.buffer.line_length(row - 1), row - 1)

    def _right(self):
        col, row = self.file_col, self.file_row
        if col < self.buffer.line_length(row):
            self.place(col + 1, row)
        elif row + 1 < self.buffer.line_count:
            self.place(0, row + 1)

    def _vertical_to(self, row: int):
        if self.desired_col is None:
            self.desired_col = self.file_col
        col = min(self.desired_col, self.buffer.line_length(row))
        self.place(col, row, keep_desired=True)

    def _up(self):
        if self.file_row > 0:
            self._vertical_to(self.file_row - 1)

    def _down(self):
        # The append row is reachable
        if self.file_row < self.buffer.line_count:
            self._vertical_to(self.file_row + 1)

    def _home(self):
        self.place(0, self.file_row)

    def _end(self):
        row = self.file_row
        self.place(self.buffer.line_length(row), row)

    def _page_up(self):
        if self.cursor.y > 0:
            self._vertical_to(self.row_offset)
            return
        self.row_offset = max(0, self.row_offset - self.term_rows)
        self._vertical_to(self.row_offset)

    def _page_down(self):
        line_count = self.buffer.line_count
        bottom = min(self.row_offset + self.term_rows - 1, line_count)
        if self.file_row < bottom:
            self._vertical_to(bottom)
            return
        max_offset = max(0, line_count - self.term_rows - 1)
        self.row_offset = min(self.row_offset + self.term_rows,
                              max(max_offset, self.row_offset))
        self._vertical_to(min(self.row_offset + self.term_rows - 1, line_count))

    def check(self):
        """Raise BufferBoundsViolation if the cursor state is inconsistent."""
        row, col = self.file_row, self.file_col
        if not 0 <= row <= self.buffer.line_count:
            raise BufferBoundsViolation(f"Cursor row {row} outside document")
        length = self.buffer.line_length(row)
        if not 0 <= col <= length:
            raise BufferBoundsViolation(f"Cursor column {col} outside line of length {length}")
        if not 0 <= self.cursor.y < self.term_rows:
            raise BufferBoundsViolation(f"Cursor y {self.cursor.y} outside viewport")
        if not 0 <= self.col_offset <= col:
            raise BufferBoundsViolation(f"Column offset {self.col_offset} past cursor")
        if self.render_x >= self.term_cols:
            raise BufferBoundsViolation(f"Render column {self.render_x} off screen")
