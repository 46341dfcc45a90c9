"""Desktop entry parsing, ranking, history, menu and i3 helpers for launchers."""

__version__ = "0.1.0"