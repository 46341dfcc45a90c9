"""Parsing of desktop entry files into Application records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)

# Match value used for an unlocalised key; real locale matches are 0..3.
_DEFAULT_MATCH = 4
_NO_MATCH = -1

_ESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


class DisabledError(Exception):
    """The desktop file must not be shown (hidden or filtered by desktop)."""


class EscapeError(ValueError):
    """A value holds an invalid escape sequence."""


class _LocaleMatcher(Protocol):
    def match(self, locale: str) -> int: ...


def convert_escape(char: str) -> str:
    """Return the character that the escape sequence ``\\<char>`` stands for."""
    try:
        return _ESCAPES[char]
    except KeyError:
        raise EscapeError(
            f"Tried to interpret invalid escape sequence \\{char}."
        ) from None


def expand(key: str, value: str) -> str:
    """Resolve the escape sequences of a string value."""
    result: list[str] = []
    escape = False
    try:
        for char in value:
            if escape:
                result.append(convert_escape(char))
                escape = False
            elif char == "\\":
                escape = True
            else:
                result.append(char)
        if escape:
            raise EscapeError("Invalid escape character at end of line.")
    except EscapeError as exc:
        raise EscapeError(f"{key}: {exc}") from None
    return "".join(result)


def expand_list(key: str, value: str) -> list[str]:
    """Split a ``;`` separated list value, resolving escape sequences."""
    result: list[str] = []
    current: list[str] = []
    escape = False
    try:
        for char in value:
            if escape:
                current.append(";" if char == ";" else convert_escape(char))
                escape = False
            elif char == "\\":
                escape = True
            elif char == ";":
                result.append("".join(current))
                current = []
            else:
                current.append(char)
        if escape:
            raise EscapeError("Invalid escape character at end of line.")
    except EscapeError as exc:
        raise EscapeError(f"{key}: {exc}") from None
    if current:
        result.append("".join(current))
    return result


def _split_key_value(line: str) -> tuple[str, str]:
    positions = [pos for pos in (line.find(" "), line.find("=")) if pos != -1]
    if not positions or min(positions) == 0:
        raise ValueError("Malformed file.")
    split_at = min(positions)
    key = line[:split_at]
    if line[split_at] == "=":
        value = line[split_at + 1:]
    else:
        equals = line.find("=", split_at + 1)
        if equals == -1:
            raise ValueError("Malformed file.")
        value = line[equals + 1:]
    return key, value.lstrip(" ")


@dataclass
class Application:
    """A parsed desktop entry."""

    name: str = ""
    generic_name: str = ""
    exec: str = ""
    path: str = ""
    location: str = ""
    terminal: bool = False
    id: str = ""

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        locale_suffixes: _LocaleMatcher,
        desktopenvs: Iterable[str],
    ) -> "Application":
        """Parse the ``[Desktop Entry]`` section of the file at ``path``.

        If ``desktopenvs`` is empty, OnlyShowIn and NotShowIn are ignored.
        Raises DisabledError for entries that must not be shown.
        """
        envs = list(desktopenvs)
        app = cls(location=str(path))
        matches = {"Name": _NO_MATCH, "GenericName": _NO_MATCH}
        in_section = False

        with open(path, encoding="utf-8", errors="surrogateescape") as handle:
            for raw_line in handle:
                line = raw_line[:-1] if raw_line.endswith("\n") else raw_line
                if not line or line.startswith("#"):
                    continue
                if not in_section:
                    if line == "[Desktop Entry]":
                        in_section = True
                    continue
                if line.startswith("["):
                    break
                key, value = _split_key_value(line)
                try:
                    app._apply(key, value, matches, locale_suffixes, envs)
                except EscapeError as exc:
                    logger.error("%s: %s", app.location, exc)
                    raise
        return app

    def _apply(
        self,
        key: str,
        value: str,
        matches: dict[str, int],
        locale_suffixes: _LocaleMatcher,
        envs: list[str],
    ) -> None:
        if key.startswith("Name"):
            self.name = self._localestring(
                key, "Name", matches, value, self.name, locale_suffixes
            )
        elif key.startswith("GenericName"):
            self.generic_name = self._localestring(
                key, "GenericName", matches, value, self.generic_name,
                locale_suffixes,
            )
        elif key == "Exec":
            self.exec = expand("Exec", value)
        elif key == "Path":
            self.path = expand("Path", value)
        elif key == "OnlyShowIn":
            if envs and not set(envs) & set(expand_list("OnlyShowIn", value)):
                raise DisabledError(
                    "Refusing to parse desktop file whose OnlyShowIn field "
                    "doesn't match current desktop."
                )
        elif key == "NotShowIn":
            if envs and set(envs) & set(expand_list("NotShowIn", value)):
                raise DisabledError(
                    "Refusing to parse desktop file whose NotShowIn field "
                    "matches current desktop."
                )
        elif key in ("Hidden", "NoDisplay"):
            if value == "true":
                raise DisabledError(
                    "Refusing to parse Hidden or NoDisplay desktop file."
                )
        elif key == "Terminal":
            self.terminal = value == "true"

    @staticmethod
    def _localestring(
        key: str,
        base: str,
        matches: dict[str, int],
        value: str,
        current: str,
        locale_suffixes: _LocaleMatcher,
    ) -> str:
        """Return the new field value; better or equal matches override."""
        match = matches[base]
        rest = key[len(base):]
        if rest.startswith("["):
            new_match = locale_suffixes.match(rest[1:-1])
            if new_match == _NO_MATCH:
                return current
            if new_match <= match or match == _NO_MATCH:
                matches[base] = new_match
                return expand(key, value)
            return current
        if match in (_NO_MATCH, _DEFAULT_MATCH):
            matches[base] = _DEFAULT_MATCH
            return expand(key, value)
        return current