"""Command pattern implementation for editor actions."""

from abc import ABC, abstractmethod
from typing import Dict, TYPE_CHECKING

from .keyboard import ActionType, ArrowKey

if TYPE_CHECKING:
    from .editor import Editor
    from .keyboard import Action


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'Editor', action: 'Action') -> bool:
        """Execute the command.

        Args:
            editor: Editor instance
            action: The decoded action that triggered this command

        Returns:
            True if the command modified the document
        """
        pass


class MovementCommand(EditorCommand):
    """Cursor navigation; never modifies the document."""

    def execute(self, editor: 'Editor', action: 'Action') -> bool:
        editor.viewport.move(action.key)
        return False


class EditCommand(EditorCommand):
    """Base class for editing commands.

    Edits happen at the absolute cursor position, after which the cursor is
    placed on the edit point.
    """

    def execute(self, editor: 'Editor', action: 'Action') -> bool:
        viewport = editor.viewport
        return self._edit(editor, action, viewport.file_col, viewport.file_row)

    @abstractmethod
    def _edit(self, editor: 'Editor', action: 'Action', col: int, row: int) -> bool:
        """Perform the edit at absolute (col, row)."""
        pass


class InsertTextCommand(EditCommand):
    def _edit(self, editor, action, col, row):
        editor.buffer.insert_char(col, row, action.char)
        editor.viewport.place(col + 1, row)
        return True


class InsertNewlineCommand(EditCommand):
    def _edit(self, editor, action, col, row):
        editor.buffer.insert_newline(col, row)
        editor.viewport.place(0, row + 1)
        return True


class BackspaceCommand(EditCommand):
    def _edit(self, editor, action, col, row):
        on_append_row = row == editor.buffer.line_count
        new_col, new_row = editor.buffer.delete_char(col, row)
        editor.viewport.place(new_col, new_row)
        return (col, row) != (0, 0) and not on_append_row


class DeleteCommand(EditCommand):
    """Delete key: remove the character under the cursor."""

    def _edit(self, editor, action, col, row):
        buffer = editor.buffer
        at_line_end = col >= buffer.line_length(row)
        if at_line_end and row + 1 >= buffer.line_count:
            return False
        editor.viewport.move(ArrowKey.RIGHT)
        return BackspaceCommand().execute(editor, action)


class SystemCommand(EditorCommand):
    """Base class for system commands like save, quit, refresh."""

    def execute(self, editor: 'Editor', action: 'Action') -> bool:
        """System commands don't modify document content directly."""
        self._execute_system(editor, action)
        return False

    @abstractmethod
    def _execute_system(self, editor: 'Editor', action: 'Action'):
        """Perform the system action."""
        pass


class QuitCommand(SystemCommand):
    def _execute_system(self, editor, action):
        editor.running = False


class RefreshCommand(SystemCommand):
    def _execute_system(self, editor, action):
        editor.refresh()


class SaveCommand(SystemCommand):
    def _execute_system(self, editor, action):
        editor.handle_save()


class EscapeCommand(SystemCommand):
    def _execute_system(self, editor, action):
        # A lone ESC has no binding outside prompts
        pass


class CommandRegistry:
    """Registry mapping every action type to a command."""

    def __init__(self):
        self._commands: Dict[ActionType, EditorCommand] = {}
        self._setup_default_commands()
        missing = set(ActionType) - set(self._commands)
        if missing:
            names = ', '.join(sorted(t.value for t in missing))
            raise TypeError(f"No command registered for: {names}")

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        self.register(ActionType.MOVE, MovementCommand())

        # Editing commands
        self.register(ActionType.INSERT, InsertTextCommand())
        self.register(ActionType.ENTER, InsertNewlineCommand())
        self.register(ActionType.BACKSPACE, BackspaceCommand())
        self.register(ActionType.DELETE, DeleteCommand())

        # System commands
        self.register(ActionType.QUIT, QuitCommand())
        self.register(ActionType.REFRESH, RefreshCommand())
        self.register(ActionType.SAVE, SaveCommand())
        self.register(ActionType.ESCAPE, EscapeCommand())

    def register(self, action_type: ActionType, command: EditorCommand):
        """Register a command for an action type."""
        self._commands[action_type] = command

    def get_command(self, action_type: ActionType) -> EditorCommand:
        return self._commands[action_type]

    def execute(self, editor: 'Editor', action: 'Action') -> bool:
        """Execute the command for the given action.

        Returns:
            True if the document was modified
        """
        return self.get_command(action.action_type).execute(editor, action)
