"""rilo - a minimal screen-oriented terminal text editor."""

from .buffer import TextBuffer
from .keyboard import Action, ActionType, ArrowKey, InputDecoder
from .renderer import render_frame
from .viewport import CursorPosition, Viewport

__all__ = [
    'TextBuffer',
    'Action',
    'ActionType',
    'ArrowKey',
    'InputDecoder',
    'render_frame',
    'CursorPosition',
    'Viewport',
]
