"""Main editor controller."""

import logging
import os
import select
import signal
import time
from typing import Callable, Optional

from .buffer import TextBuffer
from .commands import CommandRegistry
from .constants import EditorConstants
from .errors import FileAccessError, FileNotFound, InvalidEscapeSequence, StartupFailure
from .keyboard import Action, ActionType, InputDecoder
from .renderer import StatusMessage, render_frame
from .settings import EditorSettings
from .terminal import TerminalInterface
from .viewport import Viewport

logger = logging.getLogger(__name__)


class Editor:
    """Editor application controller.

    Owns the buffer and viewport, reads one action at a time from the
    terminal, dispatches it through the command registry and redraws.
    """

    def __init__(self, terminal: Optional[TerminalInterface] = None,
                 settings: Optional[EditorSettings] = None,
                 rows: int = 24, cols: int = 80,
                 clock: Callable[[], float] = time.time):
        """Initialize the editor components.

        Args:
            terminal: Terminal driver; a real one is created if omitted.
            settings: User settings; defaults if omitted.
            rows: Initial terminal height, replaced by the real size in run().
            cols: Initial terminal width.
            clock: Time source for status message expiry.
        """
        self.terminal = terminal or TerminalInterface()
        self.settings = settings or EditorSettings()
        self.clock = clock
        self.buffer = TextBuffer()
        # One row is reserved for the status bar
        self.viewport = Viewport(self.buffer, rows - 1, cols,
                                 tab_width=self.settings.tab_width)
        self.decoder = InputDecoder(self.terminal.read_byte)
        self.command_registry = CommandRegistry()
        self.running = False
        self.status_message: Optional[StatusMessage] = None
        self.prompt_input: Optional[str] = None  # Save-as filename being typed
        self._resize_pipe_r: Optional[int] = None
        self._resize_pipe_w: Optional[int] = None

    # --- Status and drawing ---

    def set_status_message(self, text: str):
        self.status_message = StatusMessage(text, self.clock())

    def frame(self) -> bytes:
        """Render the current state into a frame."""
        prompt = None
        if self.prompt_input is not None:
            prompt = EditorConstants.SAVE_PROMPT.format(self.prompt_input)
        return render_frame(self.buffer, self.viewport, self.status_message,
                            now=self.clock(),
                            message_timeout=self.settings.message_timeout,
                            prompt=prompt)

    def draw(self):
        """Write the current frame in a single write."""
        self.terminal.write(self.frame())

    def refresh(self):
        """Clear the screen so the next draw repaints from scratch."""
        self.terminal.clear_screen()

    def resize(self, rows: int, cols: int):
        self.viewport.resize(rows - 1, cols)

    def _update_size(self):
        rows, cols = self.terminal.size()
        self.resize(rows, cols)

    # --- Files ---

    def load_file(self, path: str):
        """Open ``path``; a missing file starts a new document bound to it."""
        try:
            self.buffer.load(path)
        except FileNotFound:
            self.buffer.path = path
            self.set_status_message(EditorConstants.NEW_FILE_MESSAGE)
        except FileAccessError as e:
            logger.warning(f"Could not open {path}: {e}")
            self.set_status_message(f"Can't open! {e}")
        self.viewport.place(0, 0)

    def _save(self, path: Optional[str] = None):
        try:
            if path is None:
                written = self.buffer.save()
            else:
                written = self.buffer.save_as(path)
        except FileAccessError as e:
            self.set_status_message(EditorConstants.SAVE_FAILED_MESSAGE.format(e))
            return
        self.set_status_message(EditorConstants.SAVED_MESSAGE.format(written))

    def handle_save(self):
        """Save to the current file, or prompt for a name if there is none."""
        if self.buffer.path:
            self._save()
        else:
            self.prompt_input = ""

    def _handle_prompt(self, action: Action):
        """Handle an action while the save-as prompt is open."""
        action_type = action.action_type
        if action_type in (ActionType.ESCAPE, ActionType.QUIT):
            self.prompt_input = None
            self.set_status_message(EditorConstants.SAVE_CANCELLED_MESSAGE)
        elif action_type == ActionType.ENTER:
            if self.prompt_input:
                filename = self.prompt_input
                self.prompt_input = None
                self._save(filename)
        elif action_type == ActionType.BACKSPACE:
            self.prompt_input = self.prompt_input[:-1]
        elif action_type == ActionType.INSERT and action.char != '\t':
            self.prompt_input += action.char
        elif action_type == ActionType.REFRESH:
            self.refresh()

    # --- Input ---

    def handle_action(self, action: Optional[Action]):
        """Dispatch one decoded action."""
        if action is None:
            return
        if self.prompt_input is not None:
            self._handle_prompt(action)
            return
        self.command_registry.execute(self, action)

    def process_input(self, timeout: Optional[float] = 0):
        """Read one keystroke from the terminal and handle it."""
        try:
            action = self.decoder.read_action(timeout)
        except InvalidEscapeSequence as e:
            logger.debug(f"Ignored: {e}")
            return
        self.handle_action(action)

    # --- Main loop ---

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        # Write to pipe to wake up select()
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def _handle_terminate(self, signum, frame):
        """Turn SIGTERM/SIGHUP into SystemExit so cleanup code runs."""
        del frame  # Unused
        raise SystemExit(128 + signum)

    def run(self):
        """Run the main editor loop.

        Raises:
            StartupFailure: the terminal can't be configured or sized.
        """
        with self.terminal.session():
            self._update_size()
            if self.status_message is None:
                self.set_status_message(EditorConstants.HELP_MESSAGE)
            self._resize_pipe_r, self._resize_pipe_w = os.pipe()
            original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)
            original_term_handler = signal.signal(signal.SIGTERM, self._handle_terminate)
            original_hup_handler = signal.signal(signal.SIGHUP, self._handle_terminate)
            self.running = True
            try:
                while self.running:
                    self.draw()
                    ready, _, _ = select.select(
                        [self.terminal.input_fd, self._resize_pipe_r], [], [])
                    if self._resize_pipe_r in ready:
                        os.read(self._resize_pipe_r, 1024)
                        try:
                            self._update_size()
                        except StartupFailure as e:
                            logger.warning(f"Ignoring resize: {e}")
                    if self.terminal.input_fd in ready:
                        self.process_input(timeout=0)
                self.terminal.clear_screen()
            except EOFError:
                logger.warning("Terminal input closed, exiting")
            finally:
                self.running = False
                signal.signal(signal.SIGWINCH, original_winch_handler)
                signal.signal(signal.SIGTERM, original_term_handler)
                signal.signal(signal.SIGHUP, original_hup_handler)
                os.close(self._resize_pipe_r)
                os.close(self._resize_pipe_w)
                self._resize_pipe_r = self._resize_pipe_w = None
