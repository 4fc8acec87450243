"""Tests for the text buffer: edits, load and save."""

import os
import tempfile

import pytest

from rilo.buffer import TextBuffer
from rilo.errors import BufferBoundsViolation, FileAccessError, FileNotFound


def test_insert_char_into_empty_buffer_appends_line():
    buffer = TextBuffer()
    assert buffer.line_count == 0

    buffer.insert_char(0, 0, 'x')

    assert buffer.lines == ["x"]
    assert buffer.dirty


def test_insert_char_middle_of_line():
    buffer = TextBuffer(["helo"])
    buffer.insert_char(3, 0, 'l')
    assert buffer.lines == ["hello"]


def test_insert_char_on_append_row():
    buffer = TextBuffer(["abc"])
    buffer.insert_char(0, 1, 'z')
    assert buffer.lines == ["abc", "z"]


def test_insert_newline_splits_line():
    buffer = TextBuffer(["abc", "de"])
    buffer.insert_newline(1, 1)
    assert buffer.lines == ["abc", "d", "e"]
    assert buffer.dirty


def test_insert_newline_at_line_edges():
    buffer = TextBuffer(["abc"])
    buffer.insert_newline(0, 0)
    assert buffer.lines == ["", "abc"]
    buffer.insert_newline(3, 1)
    assert buffer.lines == ["", "abc", ""]


def test_insert_newline_on_append_row():
    buffer = TextBuffer()
    buffer.insert_newline(0, 0)
    assert buffer.lines == [""]


def test_delete_char_removes_left_character():
    buffer = TextBuffer(["hello"])
    assert buffer.delete_char(5, 0) == (4, 0)
    assert buffer.lines == ["hell"]
    assert buffer.dirty


def test_delete_char_at_line_start_joins_previous():
    buffer = TextBuffer(["abc", "de"])
    assert buffer.delete_char(0, 1) == (3, 0)
    assert buffer.lines == ["abcde"]


def test_delete_char_at_document_start_is_noop():
    buffer = TextBuffer(["abc"])
    assert buffer.delete_char(0, 0) == (0, 0)
    assert buffer.lines == ["abc"]
    assert not buffer.dirty


def test_delete_char_on_append_row_steps_back():
    buffer = TextBuffer(["abc"])
    assert buffer.delete_char(0, 1) == (3, 0)
    assert buffer.lines == ["abc"]
    assert not buffer.dirty


def test_insert_then_delete_restores_line():
    original = ["some\ttext", "second line"]
    for y, line in enumerate(original):
        for x in range(len(line) + 1):
            buffer = TextBuffer(original)
            buffer.insert_char(x, y, 'Q')
            buffer.delete_char(x + 1, y)
            assert buffer.lines == original


def test_out_of_bounds_edits_raise():
    buffer = TextBuffer(["abc"])
    with pytest.raises(BufferBoundsViolation):
        buffer.insert_char(4, 0, 'x')
    with pytest.raises(BufferBoundsViolation):
        buffer.insert_char(0, 2, 'x')
    with pytest.raises(BufferBoundsViolation):
        buffer.delete_char(-1, 0)
    with pytest.raises(BufferBoundsViolation):
        buffer.line(5)


def test_line_reads_append_row_as_empty():
    buffer = TextBuffer(["abc"])
    assert buffer.line(1) == ""
    assert buffer.line_length(1) == 0


def test_load_splits_lines():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "doc.txt")
        with open(path, 'w', encoding='utf-8') as f:
            f.write("Line 1\nLine 2\n\nLine 4\n")

        buffer = TextBuffer()
        buffer.dirty = True
        buffer.load(path)

        assert buffer.lines == ["Line 1", "Line 2", "", "Line 4"]
        assert buffer.path == path
        assert not buffer.dirty


def test_load_without_trailing_newline():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "doc.txt")
        with open(path, 'w', encoding='utf-8') as f:
            f.write("a\nb")
        buffer = TextBuffer()
        buffer.load(path)
        assert buffer.lines == ["a", "b"]


def test_load_empty_file_gives_zero_lines():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "empty.txt")
        open(path, 'w').close()
        buffer = TextBuffer(["old"])
        buffer.load(path)
        assert buffer.lines == []
        assert buffer.is_empty


def test_load_missing_file_raises_not_found():
    with tempfile.TemporaryDirectory() as tmp:
        buffer = TextBuffer(["keep"])
        with pytest.raises(FileNotFound):
            buffer.load(os.path.join(tmp, "missing.txt"))
        assert buffer.lines == ["keep"]


def test_load_directory_raises_file_access_error():
    with tempfile.TemporaryDirectory() as tmp:
        buffer = TextBuffer()
        with pytest.raises(FileAccessError) as excinfo:
            buffer.load(tmp)
        assert not isinstance(excinfo.value, FileNotFound)


def test_save_writes_newline_after_every_line():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "out.txt")
        buffer = TextBuffer(["First line", "Second line", ""], path=path)
        buffer.dirty = True

        written = buffer.save()

        with open(path, 'rb') as f:
            data = f.read()
        assert data == b"First line\nSecond line\n\n"
        assert written == len(data)
        assert not buffer.dirty


def test_save_then_load_round_trip():
    lines = ["alpha", "\tindented", "", "café", "last"]
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "round.txt")
        TextBuffer(lines, path=path).save()

        loaded = TextBuffer()
        loaded.load(path)
        assert loaded.lines == lines


def test_undecodable_bytes_survive_round_trip():
    raw = b"ok\n\xff\xfe bytes\n"
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "binary.txt")
        with open(path, 'wb') as f:
            f.write(raw)

        buffer = TextBuffer()
        buffer.load(path)
        buffer.save()

        with open(path, 'rb') as f:
            assert f.read() == raw


def test_save_without_path_fails():
    buffer = TextBuffer(["text"])
    buffer.dirty = True
    with pytest.raises(FileAccessError):
        buffer.save()
    assert buffer.dirty


def test_save_failure_keeps_original_and_dirty_flag():
    with tempfile.TemporaryDirectory() as tmp:
        target = os.path.join(tmp, "missing_dir", "out.txt")
        buffer = TextBuffer(["unsaved"], path=target)
        buffer.dirty = True

        with pytest.raises(FileAccessError):
            buffer.save()

        assert buffer.dirty
        assert not os.path.exists(target)
        assert os.listdir(tmp) == []


def test_save_preserves_file_mode():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "mode.txt")
        with open(path, 'w') as f:
            f.write("old\n")
        os.chmod(path, 0o640)

        TextBuffer(["new"], path=path).save()

        assert os.stat(path).st_mode & 0o777 == 0o640


def test_save_leaves_no_temp_files():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "doc.txt")
        TextBuffer(["x"], path=path).save()
        assert os.listdir(tmp) == ["doc.txt"]


def test_save_as_keeps_old_path_on_failure():
    with tempfile.TemporaryDirectory() as tmp:
        good = os.path.join(tmp, "good.txt")
        bad = os.path.join(tmp, "nope", "bad.txt")
        buffer = TextBuffer(["x"], path=good)

        with pytest.raises(FileAccessError):
            buffer.save_as(bad)
        assert buffer.path == good

        buffer.save_as(os.path.join(tmp, "other.txt"))
        assert buffer.path == os.path.join(tmp, "other.txt")
