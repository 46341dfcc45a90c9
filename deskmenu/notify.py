"""Interface of watchers that report changes to desktop files."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass


class ChangeType(enum.Enum):
    """Kind of change; creation and modification are not told apart."""

    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class FileChange:
    """A changed desktop file, its absolute path and the rank it belongs to."""

    rank: int
    name: str
    status: ChangeType


class NotifyBase(ABC):
    """Watches the desktop file directories for changes."""

    @abstractmethod
    def fileno(self) -> int:
        """Return a file descriptor that becomes readable on changes."""

    @abstractmethod
    def get_changes(self) -> list[FileChange]:
        """Return the changes collected since the last call."""