"""Persistent usage counts of the names chosen from the menu."""

from __future__ import annotations

import bisect
import logging
import re
from pathlib import Path
from typing import Optional, Protocol

from deskmenu.application import Application

logger = logging.getLogger(__name__)

MAJOR_VERSION = 1
MINOR_VERSION = 0
HEADER = "j4dd history v"
_VERSION_RE = re.compile(r"\s*(\d+)\.\s*(\d+)")
_COUNT_RE = re.compile(r"\s*(\d+),")
_DIGITS = frozenset("0123456789")


class HistoryError(RuntimeError):
    """The history file cannot be read or is malformed."""


class V0VersionError(HistoryError):
    """The history file uses the old format without a version header."""


class _AppLookup(Protocol):
    def lookup_by_id(self, desktop_id: str) -> Optional[Application]: ...


def _compare_versions(major: int, minor: int) -> int:
    if major != MAJOR_VERSION:
        return (major > MAJOR_VERSION) - (major < MAJOR_VERSION)
    return (minor > MINOR_VERSION) - (minor < MINOR_VERSION)


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def _is_v0(text: str) -> bool:
    """Tell whether ``text`` looks like the header-less old format.

    The old format is lines of ``<count>,<desktop file ID>`` where the ID
    ends in ``.desktop``.
    """
    pos = 0
    length = len(text)
    while pos < length:
        char = text[pos]
        pos += 1
        if char in _DIGITS:
            continue
        if char != ",":
            return False
        if pos >= length:
            return True
        pos += 1  # the first character of the file name
        end = text.find("\n", pos)
        if end == -1:
            return False
        line = text[pos:end + 1]
        if len(line) < 9 or not line.endswith(".desktop\n"):
            return False
        pos = end + 1
    return True


class HistoryManager:
    """Usage counts of names, ordered from the most to the least used.

    Entries with equal counts keep the order in which they were added.
    Every increment is written back to the history file at once.
    """

    def __init__(self, path: str | Path) -> None:
        self._filename = str(path)
        self._history: list[tuple[int, str]] = []
        try:
            text = _read_text(self._filename)
        except FileNotFoundError:
            try:
                open(self._filename, "w").close()
            except OSError as exc:
                raise HistoryError(
                    f"Couldn't open file '{self._filename}': {exc.strerror}"
                ) from exc
            return
        except OSError as exc:
            raise HistoryError(
                f"Couldn't open file '{self._filename}': {exc.strerror}"
            ) from exc
        self._parse(text)

    @classmethod
    def _from_entries(
        cls, path: str, entries: list[tuple[int, str]]
    ) -> "HistoryManager":
        manager = cls.__new__(cls)
        manager._filename = path
        manager._history = []
        for count, name in entries:
            manager._insert(count, name)
        return manager

    @property
    def filename(self) -> str:
        """Path of the history file."""
        return self._filename

    def _parse(self, text: str) -> None:
        path = self._filename
        if not text.startswith(HEADER):
            if _is_v0(text):
                raise V0VersionError(f"History file '{path}' is outdated!")
            raise HistoryError(f"History file '{path}' is malformed!")

        match = _VERSION_RE.match(text, len(HEADER))
        if match is None:
            raise HistoryError(f"Couldn't read history file version of '{path}'!")
        pos = match.end()
        if text[pos:pos + 1] != "\n":
            raise HistoryError(f"Format error in history file '{path}'!")
        pos += 1

        major, minor = int(match.group(1)), int(match.group(2))
        cmp = _compare_versions(major, minor)
        if cmp != 0:
            raise HistoryError(
                "History file is incompatible with the current build! History "
                f"file format is too {'old' if cmp < 0 else 'new'}! Expected "
                f"version {MAJOR_VERSION}.{MINOR_VERSION}, got version "
                f"{major}.{minor}"
            )

        while (match := _COUNT_RE.match(text, pos)) is not None:
            start = match.end()
            end = text.find("\n", start)
            if end == -1:
                name, pos = text[start:], len(text)
            else:
                name, pos = text[start:end], end + 1
            if not name:
                raise HistoryError(
                    f"Error while reading history file '{path}': "
                    "Empty history entry present!"
                )
            self._insert(int(match.group(1)), name)

    def _insert(self, count: int, name: str) -> None:
        index = bisect.bisect_right(
            self._history, -count, key=lambda entry: -entry[0]
        )
        self._history.insert(index, (count, name))

    def _index_of(self, name: str) -> int:
        return next(
            (i for i, (_, entry) in enumerate(self._history) if entry == name),
            -1,
        )

    def increment(self, name: str) -> None:
        """Add one use of ``name`` and save the history."""
        index = self._index_of(name)
        if index == -1:
            self._insert(1, name)
        else:
            count, _ = self._history.pop(index)
            self._insert(count + 1, name)
        self._write()

    def remove_obsolete_entry(self, name: str) -> None:
        """Drop the entry of ``name``; the file is rewritten on the next save."""
        index = self._index_of(name)
        if index == -1:
            raise KeyError(name)
        del self._history[index]

    def view(self) -> list[tuple[int, str]]:
        """Return the ``(count, name)`` entries, most used first."""
        return list(self._history)

    def _write(self) -> None:
        with open(
            self._filename, "w", encoding="utf-8", errors="surrogateescape",
            newline="",
        ) as f:
            f.write(f"{HEADER}{MAJOR_VERSION}.{MINOR_VERSION}\n")
            f.writelines(f"{count},{name}\n" for count, name in self._history)

    @classmethod
    def convert_history_from_v0(
        cls, path: str | Path, app_manager: _AppLookup
    ) -> "HistoryManager":
        """Rewrite an old format history file in the current format.

        Desktop file IDs are resolved to their Name and GenericName; IDs
        that cannot be resolved and duplicate names are left out.
        """
        path = str(path)
        try:
            text = _read_text(path)
        except OSError as exc:
            raise HistoryError(
                f"Couldn't open file '{path}' for conversion: {exc.strerror}"
            ) from exc

        entries: list[tuple[int, str]] = []
        seen: set[str] = set()
        pos = 0
        while (match := _COUNT_RE.match(text, pos)) is not None:
            start = match.end()
            if start >= len(text):
                raise HistoryError("Read error: unexpected end of file")
            end = text.find("\n", start)
            line_end = len(text) if end == -1 else end + 1
            desktop_id = text[start:line_end - 1]
            pos = line_end
            count = int(match.group(1))

            app = app_manager.lookup_by_id(desktop_id)
            if app is None:
                logger.warning(
                    "While converting history file '%s' to format 1.0, desktop "
                    "file ID '%s' couldn't be resolved. This desktop file will "
                    "be omitted from the history.", path, desktop_id,
                )
                continue
            names = [app.name] + ([app.generic_name] if app.generic_name else [])
            for name in names:
                if name in seen:
                    logger.info(
                        "History conversion v0 -> v1: Prevented duplicate "
                        "name '%s' from appearing in history", name,
                    )
                    continue
                seen.add(name)
                entries.append((count, name))

        manager = cls._from_entries(path, entries)
        manager._write()
        return manager