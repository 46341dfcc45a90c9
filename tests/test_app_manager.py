from pathlib import Path

import pytest

from deskmenu.app_manager import (
    AppManager,
    DesktopFileRank,
    InconsistentStateError,
    get_desktop_id,
)


class _NoLocale:
    def match(self, locale):
        return -1


def _write(directory: Path, filename, name, generic=None, exec_="prog", extra=""):
    directory.mkdir(parents=True, exist_ok=True)
    lines = ["[Desktop Entry]", f"Name={name}"]
    if generic:
        lines.append(f"GenericName={generic}")
    if exec_:
        lines.append(f"Exec={exec_}")
    if extra:
        lines.append(extra)
    path = directory / filename
    path.write_text("\n".join(lines) + "\n")
    return str(path)


@pytest.fixture
def dirs(tmp_path):
    low = tmp_path / "low"
    high = tmp_path / "high"
    low.mkdir()
    high.mkdir()
    return str(low) + "/", str(high) + "/", low, high


def _manager(ranks):
    return AppManager(
        [DesktopFileRank(base, files) for base, files in ranks], [], _NoLocale()
    )


def test_get_desktop_id_replaces_slashes():
    assert get_desktop_id("/usr/share/applications/kde/foo.desktop",
                          "/usr/share/applications/") == "kde-foo.desktop"
    assert get_desktop_id("a/b.desktop") == "a-b.desktop"


def test_get_desktop_id_requires_base_prefix():
    with pytest.raises(ValueError):
        get_desktop_id("/elsewhere/foo.desktop", "/usr/share/applications/")


def test_lower_rank_wins_id_collision(dirs):
    low_base, high_base, low, high = dirs
    first = _write(low, "app.desktop", "First")
    second = _write(high, "app.desktop", "Second")
    manager = _manager([(low_base, [first]), (high_base, [second])])
    assert len(manager) == 1
    assert manager.lookup_by_id("app.desktop").name == "First"
    assert set(manager.name_mapping()) == {"First"}


def test_names_and_generic_names_registered(dirs):
    low_base, _, low, _ = dirs
    path = _write(low, "ed.desktop", "Editor", generic="Text Editor")
    manager = _manager([(low_base, [path])])
    mapping = manager.name_mapping()
    assert mapping["Editor"].is_generic is False
    assert mapping["Text Editor"].is_generic is True
    assert mapping["Editor"].app is manager.lookup_by_id("ed.desktop")
    manager.check_inner_state()
    assert len(manager) == 1


def test_name_collision_first_rank_wins(dirs):
    low_base, high_base, low, high = dirs
    a = _write(low, "a.desktop", "Shared", exec_="a")
    b = _write(high, "b.desktop", "Shared", exec_="b")
    manager = _manager([(low_base, [a]), (high_base, [b])])
    assert len(manager) == 2
    assert manager.name_mapping()["Shared"].app.exec == "a"


def test_disabled_files_are_skipped(dirs):
    low_base, _, low, _ = dirs
    hidden = _write(low, "h.desktop", "Hidden", extra="NoDisplay=true")
    shown = _write(low, "s.desktop", "Shown")
    manager = _manager([(low_base, [hidden, shown])])
    assert len(manager) == 1
    assert manager.lookup_by_id("h.desktop") is None
    assert "Hidden" not in manager.name_mapping()


def test_subdirectory_id(dirs):
    low_base, _, low, _ = dirs
    path = _write(low / "kde", "tool.desktop", "Tool")
    manager = _manager([(low_base, [path])])
    assert manager.lookup_by_id("kde-tool.desktop").name == "Tool"


def test_remove_restores_replacement_name(dirs):
    low_base, high_base, low, high = dirs
    a = _write(low, "a.desktop", "Shared", exec_="a")
    b = _write(high, "b.desktop", "Other", generic="Shared", exec_="b")
    manager = _manager([(low_base, [a]), (high_base, [b])])
    assert manager.name_mapping()["Shared"].app.exec == "a"
    manager.remove(a, low_base)
    assert len(manager) == 1
    resolved = manager.name_mapping()["Shared"]
    assert resolved.app.exec == "b"
    assert resolved.is_generic is True
    manager.check_inner_state()


def test_remove_unknown_raises(dirs):
    low_base, _, low, _ = dirs
    manager = _manager([(low_base, [])])
    with pytest.raises(InconsistentStateError):
        manager.remove(str(low / "missing.desktop"), low_base)


def test_add_new_file(dirs):
    low_base, _, low, _ = dirs
    manager = _manager([(low_base, [])])
    path = _write(low, "n.desktop", "New", generic="Fresh")
    manager.add(path, low_base, 0)
    assert len(manager) == 1
    assert set(manager.name_mapping()) == {"New", "Fresh"}
    manager.check_inner_state()


def test_add_with_higher_rank_collision_is_skipped(dirs):
    low_base, high_base, low, high = dirs
    a = _write(low, "app.desktop", "Kept")
    manager = _manager([(low_base, [a]), (high_base, [])])
    b = _write(high, "app.desktop", "Ignored")
    manager.add(b, high_base, 1)
    assert manager.lookup_by_id("app.desktop").name == "Kept"
    assert "Ignored" not in manager.name_mapping()


def test_add_with_lower_rank_collision_replaces(dirs):
    low_base, high_base, low, high = dirs
    old = _write(high, "app.desktop", "Old")
    manager = _manager([(low_base, []), (high_base, [old])])
    new = _write(low, "app.desktop", "New")
    manager.add(new, low_base, 0)
    assert len(manager) == 1
    assert manager.lookup_by_id("app.desktop").name == "New"
    assert set(manager.name_mapping()) == {"New"}
    manager.check_inner_state()


def test_add_disabled_collision_keeps_old(dirs):
    low_base, high_base, low, high = dirs
    old = _write(high, "app.desktop", "Old")
    manager = _manager([(low_base, []), (high_base, [old])])
    new = _write(low, "app.desktop", "New", extra="Hidden=true")
    manager.add(new, low_base, 0)
    assert manager.lookup_by_id("app.desktop").name == "Old"
    assert "New" not in manager.name_mapping()


def test_add_lower_rank_takes_colliding_name(dirs):
    low_base, high_base, low, high = dirs
    x = _write(high, "x.desktop", "Shared", exec_="x")
    manager = _manager([(low_base, []), (high_base, [x])])
    y = _write(low, "y.desktop", "Shared", exec_="y")
    manager.add(y, low_base, 0)
    assert manager.name_mapping()["Shared"].app.exec == "y"
    manager.remove(y, low_base)
    assert manager.name_mapping()["Shared"].app.exec == "x"
    assert len(manager) == 1


def test_check_inner_state_detects_missing_exec(dirs):
    low_base, _, low, _ = dirs
    path = _write(low, "e.desktop", "NoExec", exec_=None)
    manager = _manager([(low_base, [path])])
    with pytest.raises(InconsistentStateError):
        manager.check_inner_state()


def test_lookup_by_id_missing_returns_none(dirs):
    low_base, _, low, _ = dirs
    path = _write(low, "a.desktop", "A")
    manager = _manager([(low_base, [path])])
    assert manager.lookup_by_id("b.desktop") is None
    assert manager.lookup_by_id("a.desktop").location == path