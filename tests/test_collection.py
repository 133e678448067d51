"""Test the buffer collection: open, select, close and index rebasing."""

import os

import pytest

from termpad.buffer import TextBuffer
from termpad.collection import BufferCollection
from termpad.errors import InvalidIndexError


def _collection(count, current=None):
    c = BufferCollection()
    for i in range(count):
        c.add(TextBuffer(file_path=f"file{i}.txt"))
    if current is not None:
        c.select(current)
    return c


def test_empty_collection_has_no_current():
    c = BufferCollection()
    assert len(c) == 0
    assert c.current is None
    assert c.current_buffer is None


def test_open_without_path():
    c = BufferCollection()
    b = c.open()
    assert c.current == 0
    assert c.current_buffer is b
    assert b.file_path is None


def test_open_existing_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("one\ntwo\n", encoding="utf-8")
    c = BufferCollection()
    b = c.open(str(path))
    assert b.lines() == ["one", "two"]
    assert b.file_path == str(path)


def test_open_missing_file_gives_empty_buffer(tmp_path):
    path = tmp_path / "later.txt"
    c = BufferCollection()
    b = c.open(str(path))
    assert b.content == ""
    assert b.file_path == str(path)
    # Nothing is written until the buffer is saved
    assert not path.exists()


def test_open_makes_new_buffer_current():
    c = _collection(2)
    c.select(0)
    c.open()
    assert c.current == 2


def test_open_unreadable_path_raises_and_leaves_collection(tmp_path):
    c = _collection(1)
    with pytest.raises(OSError):
        c.open(str(tmp_path))  # a directory
    assert len(c) == 1
    assert c.current == 0


def test_create_writes_empty_file(tmp_path):
    path = tmp_path / "new.txt"
    c = BufferCollection()
    b = c.create(str(path))
    assert path.exists()
    assert path.read_text(encoding="utf-8") == ""
    assert c.current_buffer is b


def test_create_existing_file_raises(tmp_path):
    path = tmp_path / "there.txt"
    path.write_text("keep me", encoding="utf-8")
    c = BufferCollection()
    with pytest.raises(FileExistsError):
        c.create(str(path))
    assert len(c) == 0
    assert path.read_text(encoding="utf-8") == "keep me"


def test_select():
    c = _collection(3)
    c.select(1)
    assert c.current == 1
    assert c.current_buffer.file_path == "file1.txt"


def test_select_out_of_range():
    c = _collection(2)
    with pytest.raises(InvalidIndexError):
        c.select(2)
    with pytest.raises(IndexError):
        c.select(-1)
    assert c.current == 1


def test_close_last_remaining_buffer_refused():
    c = _collection(1)
    assert c.close(0) is False
    assert len(c) == 1
    assert c.current == 0


def test_close_active_buffer_moves_to_previous():
    c = _collection(4, current=2)
    assert c.close(2)
    assert c.current == 1
    assert [b.file_path for b in c] == ["file0.txt", "file1.txt", "file3.txt"]


def test_close_active_first_buffer_stays_at_zero():
    c = _collection(3, current=0)
    assert c.close(0)
    assert c.current == 0
    assert c.current_buffer.file_path == "file1.txt"


def test_close_before_current_shifts_down():
    c = _collection(4, current=3)
    assert c.close(1)
    assert c.current == 2
    assert c.current_buffer.file_path == "file3.txt"


def test_close_after_current_leaves_current():
    c = _collection(4, current=1)
    assert c.close(3)
    assert c.current == 1
    assert c.current_buffer.file_path == "file1.txt"


def test_close_out_of_range_is_noop():
    c = _collection(3, current=1)
    assert c.close(5) is False
    assert c.close(-1) is False
    assert len(c) == 3


def test_current_always_in_range_after_closes():
    c = _collection(6, current=5)
    while len(c) > 1:
        c.close(c.current)
        assert 0 <= c.current < len(c)
    assert c.close(0) is False


def test_rename_or_associate():
    c = BufferCollection()
    c.open()
    c.rename_or_associate(0, "saved.txt")
    assert c.current_buffer.file_path == "saved.txt"
    with pytest.raises(InvalidIndexError):
        c.rename_or_associate(3, "nope.txt")


def test_find_index_uses_absolute_paths():
    c = _collection(3)
    assert c.find_index("file2.txt") == 2
    assert c.find_index(os.path.abspath("file1.txt")) == 1
    assert c.find_index("other.txt") is None


def test_modified_buffers():
    c = _collection(3)
    c.buffers[1].insert_char("x")
    assert c.modified_buffers() == [c.buffers[1]]


def test_open_invalid_utf8_raises_and_leaves_collection(tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9")
    c = _collection(1)
    with pytest.raises(OSError):
        c.open(str(path))
    assert len(c) == 1
    assert c.current == 0
