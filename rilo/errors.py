"""Exception hierarchy for the rilo editor."""


class RiloError(Exception):
    """Base class for all editor errors."""


class StartupFailure(RiloError):
    """The terminal cannot be put into a usable state. Fatal."""


class FileAccessError(RiloError):
    """A file could not be opened, read or written.

    Recoverable: the editor reports it in the status bar and keeps the
    buffer intact.
    """

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class FileNotFound(FileAccessError):
    """The path given to load does not exist."""


class InvalidEscapeSequence(RiloError):
    """An escape sequence from the keyboard did not map to any key."""

    def __init__(self, sequence: bytes):
        super().__init__(f"Unrecognized escape sequence {sequence!r}")
        self.sequence = sequence


class BufferBoundsViolation(RiloError):
    """A coordinate fell outside the buffer. Always a programming error."""
