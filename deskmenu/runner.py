"""Expansion of Exec field codes into a shell command line."""

from __future__ import annotations

from deskmenu.application import Application

_SHELL_SPECIAL = frozenset('$`\\"')
_IGNORED_CODES = frozenset("idDnNvm")
_FILE_CODES = frozenset("fFuU")


def _quote(text: str) -> str:
    if not text:
        return ""
    escaped = "".join("\\" + c if c in _SHELL_SPECIAL else c for c in text)
    return f'"{escaped}"'


def application_command(app: Application, args: str) -> str:
    """Expand the field codes of ``app.exec`` and return a shell command.

    ``args`` holds space separated arguments substituted for %f, %F, %u
    and %U. Raises ValueError for unknown or truncated field codes.
    """
    result: list[str] = []
    field = False
    for char in app.exec:
        if not field:
            if char == "%":
                field = True
            else:
                result.append(char)
            continue
        field = False
        if char == "%":
            result.append("%")
        elif char in _FILE_CODES:
            result.append(" ".join(_quote(a) for a in args.split(" ") if a))
        elif char == "c":
            result.append(_quote(app.name))
        elif char == "k":
            result.append(_quote(app.location))
        elif char not in _IGNORED_CODES:
            raise ValueError(f"Invalid field code %{char}.")
    if field:
        raise ValueError("Invalid field code at the end of Exec.")
    return "".join(result).rstrip(" ")