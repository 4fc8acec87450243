"""Text buffer: the document as an ordered list of lines.

An empty document has zero lines. The row index equal to ``line_count`` is
the append row: it reads as an empty line, and the first insertion on it
creates a real line at the end of the document.
"""

import logging
import os
import stat
import tempfile
from typing import List, Optional, Tuple

from .errors import BufferBoundsViolation, FileAccessError, FileNotFound

logger = logging.getLogger(__name__)

# Undecodable bytes are carried through as lone surrogates so they are
# written back unchanged on save.
ENCODING = 'utf-8'
ENCODING_ERRORS = 'surrogateescape'


def _default_file_mode() -> int:
    """Permission bits a newly created file would get under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


class TextBuffer:
    """Ordered, mutable sequence of lines plus the document metadata."""

    def __init__(self, lines: Optional[List[str]] = None, path: Optional[str] = None):
        self._lines: List[str] = list(lines) if lines else []
        self.path = path
        self.dirty = False

    # --- Queries ---

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def lines(self) -> List[str]:
        """Copy of the document lines."""
        return list(self._lines)

    def line(self, y: int) -> str:
        """Return line ``y``; the append row reads as an empty line."""
        self._check_row(y)
        if y == len(self._lines):
            return ""
        return self._lines[y]

    def line_length(self, y: int) -> int:
        return len(self.line(y))

    def _check_row(self, y: int):
        if not 0 <= y <= len(self._lines):
            raise BufferBoundsViolation(
                f"Row {y} outside document of {len(self._lines)} lines")

    def _check_position(self, x: int, y: int):
        self._check_row(y)
        length = self.line_length(y)
        if not 0 <= x <= length:
            raise BufferBoundsViolation(
                f"Column {x} outside line {y} of length {length}")

    # --- File I/O ---

    def load(self, path: str):
        """Replace the buffer with the contents of ``path``.

        Raises:
            FileNotFound: the path does not exist.
            FileAccessError: the path is not a regular file or can't be read.
        """
        if not os.path.lexists(path):
            raise FileNotFound(f"{path}: no such file", path=path)
        if not os.path.isfile(path):
            raise FileAccessError(f"{path}: not a regular file", path=path)
        try:
            with open(path, 'r', encoding=ENCODING, errors=ENCODING_ERRORS,
                      newline='') as f:
                content = f.read()
        except OSError as e:
            raise FileAccessError(f"{path}: {e.strerror or e}", path=path) from e

        lines = content.split('\n')
        # The newline ending the last line does not start another one
        if lines and lines[-1] == "":
            lines.pop()
        self._lines = lines
        self.path = path
        self.dirty = False
        logger.info(f"Loaded {len(lines)} lines from {path}")

    def _serialize(self) -> str:
        return ''.join(line + '\n' for line in self._lines)

    def save(self) -> int:
        """Write every line, each followed by one newline, to the backing file.

        The file is replaced atomically: the text goes to a temporary file in
        the same directory, which is then renamed over the target. A failed
        save leaves the original file untouched and the dirty flag set.

        Returns:
            Number of bytes written.

        Raises:
            FileAccessError: no path is set or the file could not be written.
        """
        if not self.path:
            raise FileAccessError("No file name")
        filename = self.path
        data = self._serialize().encode(ENCODING, ENCODING_ERRORS)

        dir_name = os.path.dirname(filename) or '.'
        temp_filename = None
        try:
            try:
                mode = stat.S_IMODE(os.stat(filename).st_mode)
            except FileNotFoundError:
                mode = _default_file_mode()
            with tempfile.NamedTemporaryFile(mode='wb', dir=dir_name,
                                             prefix='.rilo-', suffix='.tmp',
                                             delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.chmod(temp_filename, mode)
            os.replace(temp_filename, filename)
            temp_filename = None
        except OSError as e:
            logger.warning(f"Could not save {filename}: {e}")
            raise FileAccessError(f"{e.strerror or e}", path=filename) from e
        finally:
            if temp_filename is not None:
                try:
                    os.remove(temp_filename)
                except OSError:
                    pass

        self.dirty = False
        logger.info(f"Saved {len(data)} bytes to {filename}")
        return len(data)

    def save_as(self, path: str) -> int:
        """Save to a new path; the path is kept only if the save succeeds."""
        previous = self.path
        self.path = path
        try:
            return self.save()
        except FileAccessError:
            self.path = previous
            raise

    # --- Editing ---

    def insert_char(self, x: int, y: int, c: str):
        """Insert ``c`` at column ``x`` of line ``y``."""
        self._check_position(x, y)
        if y == len(self._lines):
            self._lines.append(c)
        else:
            line = self._lines[y]
            self._lines[y] = line[:x] + c + line[x:]
        self.dirty = True

    def insert_newline(self, x: int, y: int):
        """Split line ``y`` at column ``x``."""
        self._check_position(x, y)
        if y == len(self._lines):
            self._lines.append("")
        else:
            line = self._lines[y]
            self._lines[y] = line[:x]
            self._lines.insert(y + 1, line[x:])
        self.dirty = True

    def delete_char(self, x: int, y: int) -> Tuple[int, int]:
        """Backspace at ``(x, y)``.

        Removes the character left of ``x``, or joins line ``y`` onto the
        previous line when ``x`` is 0.

        Returns:
            The absolute position of the edit point afterwards.
        """
        self._check_position(x, y)
        if x == 0 and y == 0:
            return (0, 0)
        if y == len(self._lines):
            # Nothing to delete on the append row; step back to the last line
            return (len(self._lines[y - 1]), y - 1)
        if x > 0:
            line = self._lines[y]
            self._lines[y] = line[:x - 1] + line[x:]
            self.dirty = True
            return (x - 1, y)
        previous = self._lines[y - 1]
        self._lines[y - 1] = previous + self._lines[y]
        del self._lines[y]
        self.dirty = True
        return (len(previous), y - 1)
