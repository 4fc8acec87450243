"""Terminal driver using Blessed for raw mode, screen modes and size."""

import os
import select
import sys
import termios
from contextlib import ExitStack, contextmanager
from typing import Iterator, Optional, Tuple

import blessed

from .constants import Ansi
from .errors import StartupFailure


class TerminalInterface:
    """Handles raw byte I/O with the controlling terminal."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 input_fd: Optional[int] = None, output_fd: Optional[int] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.input_fd = sys.__stdin__.fileno() if input_fd is None else input_fd
        self.output_fd = sys.__stdout__.fileno() if output_fd is None else output_fd
        self.is_active = False

    def size(self) -> Tuple[int, int]:
        """Terminal dimensions as (rows, cols).

        Raises:
            StartupFailure: the size can't be determined or is zero.
        """
        try:
            rows, cols = self.term.height, self.term.width
        except OSError as e:
            raise StartupFailure(f"Cannot query terminal size: {e}") from e
        if not rows or not cols:
            raise StartupFailure(f"Terminal reports unusable size {rows}x{cols}")
        return rows, cols

    @contextmanager
    def session(self) -> Iterator["TerminalInterface"]:
        """Raw mode on the alternate screen for the duration of the block.

        The previous terminal configuration is restored when the block exits,
        whether it returns normally or raises.
        """
        if not os.isatty(self.input_fd) or not os.isatty(self.output_fd):
            raise StartupFailure("rilo must be run in an interactive terminal")
        stack = ExitStack()
        try:
            stack.enter_context(self.term.raw())
            stack.enter_context(self.term.fullscreen())
        except (termios.error, OSError) as e:
            stack.close()
            raise StartupFailure(f"Cannot configure terminal: {e}") from e
        with stack:
            self.is_active = True
            try:
                yield self
            finally:
                self.is_active = False

    def read_byte(self, timeout: Optional[float] = None) -> Optional[int]:
        """Read one byte, waiting at most ``timeout`` seconds (None blocks).

        Returns:
            The byte value, or None on timeout.

        Raises:
            EOFError: the terminal was closed.
        """
        if timeout is not None:
            ready, _, _ = select.select([self.input_fd], [], [], timeout)
            if not ready:
                return None
        data = os.read(self.input_fd, 1)
        if not data:
            raise EOFError("Terminal input closed")
        return data[0]

    def write(self, data: bytes):
        """Write all of ``data`` to the terminal."""
        view = memoryview(data)
        while view:
            written = os.write(self.output_fd, view)
            view = view[written:]

    def clear_screen(self):
        """Clear the entire screen and home the cursor."""
        self.write((Ansi.CLEAR_SCREEN + Ansi.CURSOR_HOME).encode('ascii'))
