"""Formatting of the names shown in the menu."""

from __future__ import annotations

from typing import Callable

from deskmenu.application import Application

ApplicationFormatter = Callable[[str, Application], str]


def format_default(name: str, app: Application) -> str:
    """Show the name as it is, as a plain string."""
    return str(name)


def format_with_binary_name(name: str, app: Application) -> str:
    """Show the name followed by the command of Exec."""
    command = app.exec.split(" ", 1)[0]
    return f"{name} ({command})"


def format_with_base_binary_name(name: str, app: Application) -> str:
    """Show the name followed by the base name of the command of Exec."""
    command_end = app.exec.find(" ")
    command = app.exec if command_end == -1 else app.exec[:command_end]
    base = command[command.rfind("/") + 1:]
    return f"{name} ({base})"