"""Test the editor shell: key routing, prompts, saving and drawing."""

import errno
import unicodedata

import pytest
from unittest.mock import patch

from termpad.actions import Mode
from termpad.editor import Editor, Screen
from termpad.keyboard import char, ctrl, special
from termpad.settings import Settings


class FakeTerm:
    """Minimal blessed.Terminal stand-in."""

    width = 40
    height = 12
    home = clear = reverse = bold = blue = normal = ""
    normal_cursor = hide_cursor = enter_fullscreen = exit_fullscreen = ""

    def move(self, y, x):
        return ""

    def length(self, text):
        return sum(2 if unicodedata.east_asian_width(c) in "WF" else 1 for c in text)


class SmallTerm(FakeTerm):
    height = 6


@pytest.fixture
def settings(tmp_path):
    return Settings(config_dir=tmp_path / "config")


@pytest.fixture
def editor(settings):
    with patch("blessed.Terminal", FakeTerm):
        ed = Editor(settings)
    ed.running = True
    return ed


def press(editor, *keys):
    for key in keys:
        editor._handle_key_event(key)


def type_text(editor, text):
    press(editor, *(char(c) for c in text))


def test_starts_on_home_screen(editor):
    assert editor.screen is Screen.HOME
    assert editor.collection.current_buffer is None
    assert (editor.view.width, editor.view.height) == (40, 11)


def test_scratch_buffer_from_home(editor):
    press(editor, ctrl('t'))
    assert editor.screen is Screen.EDITOR
    assert len(editor.collection) == 1
    type_text(editor, "hi")
    assert editor.collection.current_buffer.content == "hi"


def test_scratch_key_only_on_home(editor):
    press(editor, ctrl('t'), ctrl('t'))
    assert len(editor.collection) == 1


def test_typing_is_ignored_on_home(editor):
    type_text(editor, "abc")
    assert editor.screen is Screen.HOME


def test_editing_keys(editor):
    press(editor, ctrl('t'))
    type_text(editor, "ab")
    press(editor, special('enter'))
    type_text(editor, "cd")
    press(editor, special('left'), special('backspace'))
    buffer = editor.collection.current_buffer
    assert buffer.content == "ab\nd"
    assert buffer.cursor_line_col == (1, 0)
    press(editor, special('up'), special('end'))
    assert buffer.cursor_line_col == (0, 2)


def test_tab_inserts_spaces(editor):
    press(editor, ctrl('t'), char('\t'))
    assert editor.collection.current_buffer.content == "    "


def test_tab_size_from_settings(settings):
    settings.set("tab_size", 2)
    with patch("blessed.Terminal", FakeTerm):
        ed = Editor(settings)
    press(ed, ctrl('t'), char('\t'))
    assert ed.collection.current_buffer.content == "  "


def test_view_follows_cursor(settings):
    with patch("blessed.Terminal", SmallTerm):
        ed = Editor(settings)
    assert ed.view.height == 5
    press(ed, ctrl('t'))
    buffer = ed.collection.current_buffer
    buffer.insert_text("\n".join(str(i) for i in range(20)))
    buffer.point.position = 0
    ed.follow_cursor()
    for _ in range(7):
        press(ed, special('down'))
    assert buffer.cursor_line == 7
    assert ed.view.first_visible_line == 3


def test_load_missing_file_opens_empty_buffer(editor, tmp_path):
    path = tmp_path / "later.txt"
    assert editor.load_file(str(path))
    assert editor.collection.current_buffer.file_path == str(path)
    assert not path.exists()


def test_load_unreadable_path_sets_status(editor, tmp_path):
    assert editor.load_file(str(tmp_path)) is False
    assert editor.status_message == f"Error: Cannot open {tmp_path}"
    assert editor.screen is Screen.HOME


def test_save_as_prompt(editor, tmp_path):
    path = tmp_path / "saved.txt"
    press(editor, ctrl('t'))
    type_text(editor, "text")
    press(editor, ctrl('s'))
    assert editor.prompt_mode == 'save_filename'
    type_text(editor, str(path))
    press(editor, special('enter'))
    assert editor.prompt_mode is None
    assert path.read_text(encoding="utf-8") == "text"
    buffer = editor.collection.current_buffer
    assert buffer.file_path == str(path)
    assert not buffer.modified
    assert editor.status_message == f"Saved to {path}"


def test_save_prompt_ignores_empty_name(editor):
    press(editor, ctrl('t'), ctrl('s'), special('enter'))
    assert editor.prompt_mode == 'save_filename'


def test_save_prompt_cancel(editor):
    press(editor, ctrl('t'), ctrl('s'))
    type_text(editor, "x.txt")
    press(editor, special('escape'))
    assert editor.prompt_mode is None
    assert editor.prompt_input.text == ""
    assert editor.collection.current_buffer.file_path is None


def test_save_named_buffer_directly(editor, tmp_path):
    path = tmp_path / "named.txt"
    editor.load_file(str(path))
    type_text(editor, "abc")
    press(editor, ctrl('s'))
    assert editor.prompt_mode is None
    assert path.read_text(encoding="utf-8") == "abc"


def test_save_permission_denied(editor, tmp_path):
    editor.load_file(str(tmp_path / "locked.txt"))
    buffer = editor.collection.current_buffer
    with patch.object(buffer, "save", side_effect=PermissionError(errno.EACCES, "denied")):
        assert editor.save_buffer() is False
    assert editor.status_message.startswith("Error: Permission denied saving")


def test_save_disk_full(editor, tmp_path):
    editor.load_file(str(tmp_path / "big.txt"))
    buffer = editor.collection.current_buffer
    with patch.object(buffer, "save", side_effect=OSError(errno.ENOSPC, "full")):
        assert editor.save_buffer() is False
    assert editor.status_message == "Error: No space left on device"


def test_save_into_missing_directory(editor, tmp_path):
    target = tmp_path / "nodir" / "x.txt"
    editor.load_file(str(target))
    type_text(editor, "x")
    assert editor.save_buffer() is False
    assert editor.status_message == f"Error: Cannot save to {target}"
    assert editor.collection.current_buffer.modified


def test_status_message_cleared_by_next_key(editor, tmp_path):
    editor.load_file(str(tmp_path / "a.txt"))
    editor.status_message = "Saved to a.txt"
    press(editor, special('right'))
    assert editor.status_message is None


def test_quit_without_changes(editor):
    press(editor, ctrl('t'), ctrl('q'))
    assert editor.running is False


def test_quit_with_changes_asks(editor):
    press(editor, ctrl('t'))
    type_text(editor, "unsaved")
    press(editor, ctrl('q'))
    assert editor.running
    assert editor.prompt_mode == 'quit_confirm'
    press(editor, char('n'))
    assert editor.running
    assert editor.prompt_mode is None
    press(editor, ctrl('q'), char('y'))
    assert editor.running is False


def test_quit_from_home(editor):
    press(editor, ctrl('q'))
    assert editor.running is False


def test_buffer_flows_ignored_on_home(editor):
    press(editor, ctrl('b'))
    assert not editor.controller.is_active
    press(editor, ctrl('w'))
    assert not editor.controller.is_active


def test_new_file_flow_from_home(editor, tmp_path):
    path = tmp_path / "new.txt"
    press(editor, ctrl('n'))
    assert editor.controller.mode is Mode.NEW_FILE
    type_text(editor, str(path))
    press(editor, special('enter'))
    assert not editor.controller.is_active
    assert editor.screen is Screen.EDITOR
    assert path.exists()


def test_flow_owns_keys_while_active(editor):
    press(editor, ctrl('t'))
    press(editor, ctrl('o'))
    type_text(editor, "abc")
    assert editor.collection.current_buffer.content == ""
    assert editor.controller.active_flow.input.text == "abc"


def test_flow_os_error_becomes_status(editor, tmp_path):
    press(editor, ctrl('n'))
    type_text(editor, str(tmp_path / "missing" / "new.txt"))
    press(editor, special('enter'))
    assert editor.status_message == "Error: No such file or directory"
    assert editor.controller.mode is Mode.NEW_FILE
    assert len(editor.collection) == 0


def test_switch_buffers(editor, tmp_path):
    editor.load_file(str(tmp_path / "one.txt"))
    editor.load_file(str(tmp_path / "two.txt"))
    assert editor.collection.current == 1
    press(editor, ctrl('b'), char('a'), special('enter'))
    assert not editor.controller.is_active
    assert editor.collection.current == 0


def test_close_buffer(editor, tmp_path):
    editor.load_file(str(tmp_path / "one.txt"))
    editor.load_file(str(tmp_path / "two.txt"))
    press(editor, ctrl('w'), char('b'), special('enter'))
    assert len(editor.collection) == 1
    assert editor.collection.current_buffer.file_path == str(tmp_path / "one.txt")


def test_action_bar_letters(editor, tmp_path):
    editor.load_file(str(tmp_path / "a.txt"))
    press(editor, ctrl('a'))
    assert editor.controller.action_bar_visible
    assert editor._text_height() == 10
    press(editor, char('o'))
    assert editor.controller.mode is Mode.OPEN_FILE
    assert not editor.controller.action_bar_visible
    assert editor.collection.current_buffer.content == ""


def test_escape_hides_action_bar(editor, tmp_path):
    editor.load_file(str(tmp_path / "a.txt"))
    press(editor, ctrl('a'), special('escape'))
    assert not editor.controller.action_bar_visible


def test_action_bar_toggle_on_home(editor):
    press(editor, ctrl('a'))
    assert editor.controller.action_bar_visible
    press(editor, char('n'))
    assert editor.controller.mode is Mode.NEW_FILE


def test_action_bar_setting(settings):
    settings.set("show_action_bar", True)
    with patch("blessed.Terminal", FakeTerm):
        ed = Editor(settings)
    assert ed.controller.action_bar_visible
    assert ed.view.height == 10


def test_help_screen(editor):
    press(editor, ctrl('t'), special('f1'))
    assert editor.help_visible
    press(editor, char('x'))
    assert not editor.help_visible
    assert editor.collection.current_buffer.content == ""


def test_help_from_home(editor):
    press(editor, special('f1'))
    assert editor.help_visible


def test_draw_home(editor, capsys):
    editor._draw()
    out = capsys.readouterr().out
    assert "New File" in out
    assert "Ctrl-A for actions" in out


def test_draw_editor(editor, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    editor.load_file("notes.txt")
    type_text(editor, "hello")
    editor._draw()
    out = capsys.readouterr().out
    assert "hello" in out
    assert "notes.txt [+]  (1/1)" in out
    assert "Ln 1, Col 6" in out


def test_draw_with_overlay(editor, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    editor.load_file("notes.txt")
    press(editor, ctrl('b'))
    editor._draw()
    out = capsys.readouterr().out
    assert "Buffer List" in out
    assert "notes.txt" in out


def test_draw_help(editor, capsys):
    editor.show_help()
    editor._draw()
    out = capsys.readouterr().out
    assert "TERMPAD HELP" in out
    assert "Press any key to continue" in out


def test_draw_prompts(editor, capsys):
    press(editor, ctrl('t'), ctrl('s'))
    type_text(editor, "f.txt")
    editor._draw()
    assert "File to save in: f.txt" in capsys.readouterr().out


def test_load_non_utf8_file_sets_status(editor, tmp_path):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9\n")
    assert editor.load_file(str(path)) is False
    assert editor.status_message == f"Error: Cannot open {path}"
    assert len(editor.collection) == 0


def test_open_non_utf8_file_keeps_session(editor, tmp_path):
    path = tmp_path / "bin.dat"
    path.write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")
    press(editor, ctrl('t'))
    type_text(editor, "unsaved work")
    press(editor, ctrl('o'))
    type_text(editor, str(path))
    press(editor, special('enter'))
    assert editor.status_message == f"Error: {path} is not valid UTF-8"
    assert editor.controller.mode is Mode.OPEN_FILE
    assert len(editor.collection) == 1
    assert editor.collection.current_buffer.content == "unsaved work"


def test_save_as_refuses_path_open_elsewhere(editor, tmp_path):
    path = tmp_path / "shared.txt"
    path.write_text("original", encoding="utf-8")
    editor.load_file(str(path))
    editor.collection.open()
    type_text(editor, "other")
    press(editor, ctrl('s'))
    type_text(editor, str(path))
    press(editor, special('enter'))
    assert editor.status_message == f"Error: {path} is open in another buffer"
    assert path.read_text(encoding="utf-8") == "original"
    assert editor.collection.current_buffer.file_path is None
    assert editor.collection.current_buffer.modified


def test_save_to_own_path_is_allowed(editor, tmp_path):
    path = tmp_path / "mine.txt"
    editor.load_file(str(path))
    type_text(editor, "x")
    assert editor.save_buffer(str(path))
    assert path.read_text(encoding="utf-8") == "x"


def test_draw_expands_tabs_and_hides_escapes(editor, tmp_path, capsys):
    path = tmp_path / "Makefile"
    path.write_text("all:\n\techo hi\x1b[2J\n", encoding="utf-8")
    editor.load_file(str(path))
    editor._draw()
    out = capsys.readouterr().out
    assert "\t" not in out
    assert "\x1b" not in out
    assert "    echo hi^[[2J" in out


def test_cursor_column_after_tab(editor, tmp_path):
    path = tmp_path / "Makefile"
    path.write_text("all:\n\techo\n", encoding="utf-8")
    editor.load_file(str(path))
    editor.collection.current_buffer.move_point_to(1, 2)
    with patch.object(editor.terminal, "place_cursor") as place_cursor:
        editor._draw()
    place_cursor.assert_called_with(1, 5)


def test_cursor_column_after_wide_characters(editor):
    press(editor, ctrl('t'))
    type_text(editor, "漢字a")
    with patch.object(editor.terminal, "place_cursor") as place_cursor:
        editor._draw()
    place_cursor.assert_called_with(0, 5)


def test_pending_keys_are_all_handled(editor):
    press(editor, ctrl('t'))
    events = [char('a'), char('b'), char('c'), None]
    with patch.object(editor.keyboard, "get_key_event", side_effect=events) as get_key_event:
        editor._process_pending_keys()
    assert editor.collection.current_buffer.content == "abc"
    assert get_key_event.call_count == 4


def test_pending_keys_stop_after_quit(editor):
    press(editor, ctrl('t'))
    events = [ctrl('q'), char('a'), None]
    with patch.object(editor.keyboard, "get_key_event", side_effect=events):
        editor._process_pending_keys()
    assert editor.running is False
    assert editor.collection.current_buffer.content == ""
