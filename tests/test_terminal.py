"""Tests for the terminal driver."""

import os
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from rilo.errors import StartupFailure
from rilo.terminal import TerminalInterface


def make_terminal(height=24, width=80):
    term = MagicMock()
    term.height = height
    term.width = width
    return term


def test_size():
    terminal = TerminalInterface(make_terminal(30, 100), input_fd=0, output_fd=1)
    assert terminal.size() == (30, 100)


@pytest.mark.parametrize("height,width", [(0, 80), (24, 0)])
def test_zero_size_is_startup_failure(height, width):
    terminal = TerminalInterface(make_terminal(height, width), input_fd=0, output_fd=1)
    with pytest.raises(StartupFailure):
        terminal.size()


def test_session_requires_a_tty():
    r, w = os.pipe()
    try:
        terminal = TerminalInterface(make_terminal(), input_fd=r, output_fd=w)
        with pytest.raises(StartupFailure):
            with terminal.session():
                pass
    finally:
        os.close(r)
        os.close(w)


def test_session_restores_modes_on_error():
    events = []

    @contextmanager
    def mode(name):
        events.append(f"enter {name}")
        try:
            yield
        finally:
            events.append(f"exit {name}")

    term = make_terminal()
    term.raw.side_effect = lambda: mode("raw")
    term.fullscreen.side_effect = lambda: mode("fullscreen")
    terminal = TerminalInterface(term, input_fd=0, output_fd=1)

    with patch('rilo.terminal.os.isatty', return_value=True):
        with pytest.raises(ValueError):
            with terminal.session():
                assert terminal.is_active
                raise ValueError("inside")

    assert events == ["enter raw", "enter fullscreen", "exit fullscreen", "exit raw"]
    assert not terminal.is_active


def test_session_setup_error_is_startup_failure():
    term = make_terminal()
    term.raw.side_effect = OSError("no termios")
    terminal = TerminalInterface(term, input_fd=0, output_fd=1)
    with patch('rilo.terminal.os.isatty', return_value=True):
        with pytest.raises(StartupFailure):
            with terminal.session():
                pass


def test_read_write_through_pipe():
    r, w = os.pipe()
    try:
        terminal = TerminalInterface(make_terminal(), input_fd=r, output_fd=w)
        assert terminal.read_byte(timeout=0) is None
        terminal.write(b"hi")
        assert terminal.read_byte(timeout=1) == ord("h")
        assert terminal.read_byte() == ord("i")
    finally:
        os.close(r)
        os.close(w)


def test_closed_input_raises_eof():
    r, w = os.pipe()
    os.close(w)
    try:
        terminal = TerminalInterface(make_terminal(), input_fd=r, output_fd=1)
        with pytest.raises(EOFError):
            terminal.read_byte()
    finally:
        os.close(r)


def test_clear_screen_sequence():
    r, w = os.pipe()
    try:
        terminal = TerminalInterface(make_terminal(), input_fd=r, output_fd=w)
        terminal.clear_screen()
        assert os.read(r, 64) == b"\x1b[2J\x1b[H"
    finally:
        os.close(r)
        os.close(w)
