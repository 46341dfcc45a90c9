import pytest

from deskmenu.dmenu import Dmenu, DmenuError


def _menu(command):
    menu = Dmenu(command, "/bin/sh")
    menu.run()
    return menu


def test_choice_is_read_without_trailing_newline():
    menu = _menu("sed -n 2p")
    for entry in ["Firefox", "Terminal", "Editor"]:
        menu.write(entry)
    menu.display()
    assert menu.read_choice() == "Terminal"


def test_entries_pass_through_unchanged():
    menu = _menu("cat")
    menu.write("Only Entry")
    menu.display()
    assert menu.read_choice() == "Only Entry"


def test_output_without_newline_is_kept_whole():
    menu = _menu("printf choice")
    menu.display()
    assert menu.read_choice() == "choice"


def test_escape_exit_status_means_no_choice():
    menu = _menu("cat >/dev/null; echo ignored; exit 1")
    menu.write("Firefox")
    menu.display()
    assert menu.read_choice() == ""


def test_unexpected_exit_status_means_no_choice():
    menu = _menu("cat >/dev/null; exit 3")
    menu.display()
    assert menu.read_choice() == ""


def test_abnormal_exit_raises():
    menu = _menu("kill -9 $$")
    menu.display()
    with pytest.raises(DmenuError):
        menu.read_choice()


def test_write_before_run_raises():
    menu = Dmenu("cat", "/bin/sh")
    with pytest.raises(DmenuError):
        menu.write("Firefox")


def test_write_after_display_raises():
    menu = _menu("cat")
    menu.display()
    with pytest.raises(DmenuError):
        menu.write("late")
    assert menu.read_choice() == ""


def test_missing_shell_raises():
    menu = Dmenu("cat", "/nonexistent/shell")
    with pytest.raises(DmenuError):
        menu.run()