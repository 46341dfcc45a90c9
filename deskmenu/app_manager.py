"""Bookkeeping of desktop files, their ranks and the names they provide."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol

from deskmenu.application import Application, DisabledError

logger = logging.getLogger(__name__)


class InconsistentStateError(RuntimeError):
    """The manager's internal bookkeeping does not add up."""


class _LocaleMatcher(Protocol):
    def match(self, locale: str) -> int: ...


def get_desktop_id(filename: str, base: str = "") -> str:
    """Return the desktop file ID of ``filename`` relative to ``base``.

    ``base`` must be a prefix of ``filename``; slashes in the remaining
    relative path are replaced by dashes.
    """
    if not filename.startswith(base):
        raise ValueError(
            f"Filename '{filename}' must begin with base path '{base}'!"
        )
    return filename[len(base):].replace("/", "-")


@dataclass
class DesktopFileRank:
    """Desktop files found below one base path; the list index is the rank."""

    base_path: str
    files: list[str] = field(default_factory=list)


@dataclass
class ResolvedApplication:
    """The application a displayed name refers to."""

    app: Application
    is_generic: bool


@dataclass(eq=False)
class _ManagedApplication:
    app: Application
    rank: int


class AppManager:
    """Holds the parsed desktop files and maps their names to applications.

    Files are ranked by the position of their base path; a lower rank takes
    precedence both for desktop file ID collisions and name collisions.
    """

    def __init__(
        self,
        files: Iterable[DesktopFileRank],
        desktopenvs: Iterable[str],
        locale_suffixes: _LocaleMatcher,
    ) -> None:
        self._suffixes = locale_suffixes
        self._desktopenvs = list(desktopenvs)
        self._applications: dict[str, _ManagedApplication] = {}
        self._names: dict[str, ResolvedApplication] = {}

        for rank, file_rank in enumerate(files):
            logger.debug(
                "Processing rank %d (base: %s)", rank, file_rank.base_path
            )
            for filename in file_rank.files:
                desktop_id = get_desktop_id(filename, file_rank.base_path)
                if desktop_id in self._applications:
                    logger.debug("Collision detected for %s, skipping", desktop_id)
                    continue
                try:
                    app = self._load(filename)
                except DisabledError as exc:
                    logger.debug("Desktop file is skipped: %s", exc)
                    continue
                self._applications[desktop_id] = _ManagedApplication(app, rank)
                if app.name in self._names:
                    logger.debug("Name '%s' is already taken", app.name)
                else:
                    self._names[app.name] = ResolvedApplication(app, False)
                if app.generic_name:
                    if app.generic_name in self._names:
                        logger.debug(
                            "GenericName '%s' is already taken", app.generic_name
                        )
                    else:
                        self._names[app.generic_name] = ResolvedApplication(
                            app, True
                        )

    def _load(self, filename: str) -> Application:
        return Application.from_file(filename, self._suffixes, self._desktopenvs)

    def remove(self, filename: str, base_path: str) -> None:
        """Forget the desktop file ``filename`` found below ``base_path``."""
        desktop_id = get_desktop_id(filename, base_path)
        logger.info(
            "Removing file '%s' (ID: %s, base path: %s)",
            filename, desktop_id, base_path,
        )
        managed = self._applications.get(desktop_id)
        if managed is None:
            raise InconsistentStateError(
                f"Removal of desktop file '{filename}' has been requested "
                f"(desktop id: {desktop_id}). Desktop id couldn't be found."
            )
        self._remove_name_mapping(managed, managed.app.name)
        if managed.app.generic_name:
            self._remove_name_mapping(managed, managed.app.generic_name)
        del self._applications[desktop_id]

    def add(self, filename: str, base_path: str, rank: int) -> None:
        """Add or update the desktop file ``filename`` with the given rank."""
        desktop_id = get_desktop_id(filename, base_path)
        logger.info(
            "Adding file '%s' (ID: %s, base path: %s, rank: %d)",
            filename, desktop_id, base_path, rank,
        )
        managed = self._applications.get(desktop_id)
        if managed is not None:
            if managed.rank < rank:
                logger.debug("Older app takes precedence, skipping addition")
                return
            try:
                new_app = self._load(filename)
            except DisabledError as exc:
                logger.debug("App is disabled: %s", exc)
                return
            self._remove_name_mapping(managed, managed.app.name)
            if managed.app.generic_name:
                self._remove_name_mapping(managed, managed.app.generic_name)
            managed.rank = rank
            managed.app = new_app
        else:
            try:
                new_app = self._load(filename)
            except DisabledError as exc:
                logger.debug("App is disabled: %s", exc)
                return
            managed = _ManagedApplication(new_app, rank)
            self._applications[desktop_id] = managed

        self._replace_name_mapping(managed, managed.app.name, False)
        if managed.app.generic_name:
            self._replace_name_mapping(managed, managed.app.generic_name, True)

    def __len__(self) -> int:
        return len(self._applications)

    def name_mapping(self) -> Mapping[str, ResolvedApplication]:
        """Return a read-only view of the name to application mapping."""
        return MappingProxyType(self._names)

    def check_inner_state(self) -> None:
        """Verify the internal bookkeeping; raise InconsistentStateError."""
        for desktop_id, managed in self._applications.items():
            if not desktop_id:
                raise InconsistentStateError(
                    "A managed application has an empty desktop file ID!"
                )
            if managed.rank < 0:
                raise InconsistentStateError(
                    "A managed application has a negative rank!"
                )
            if not managed.app.exec:
                raise InconsistentStateError(
                    "A managed application might not have been constructed!"
                )

        for name, resolved in self._names.items():
            if not name:
                raise InconsistentStateError("A name in the name mapping is empty!")
            if not any(
                name in (m.app.name, m.app.generic_name)
                for m in self._applications.values()
            ):
                raise InconsistentStateError(
                    f"Name '{name}' does not belong to any managed application!"
                )
            if not any(m.app is resolved.app for m in self._applications.values()):
                raise InconsistentStateError(
                    f"Name '{name}' points to an unknown application!"
                )

    def lookup_by_id(self, desktop_id: str) -> Application | None:
        """Return the application with the given desktop file ID, if any."""
        managed = self._applications.get(desktop_id)
        return managed.app if managed is not None else None

    def _remove_name_mapping(self, to_remove: _ManagedApplication, name: str) -> None:
        resolved = self._names.get(name)
        if resolved is None:
            raise InconsistentStateError(
                f"Tried to remove application name '{name}' which isn't saved!"
            )
        if resolved.app is not to_remove.app:
            return
        del self._names[name]

        best: ResolvedApplication | None = None
        best_rank: int | None = None
        for managed in self._applications.values():
            if managed is to_remove:
                continue
            app = managed.app
            if name not in (app.name, app.generic_name):
                continue
            if best_rank is not None and managed.rank >= best_rank:
                continue
            best = ResolvedApplication(app, app.name != name)
            best_rank = managed.rank
        if best is not None:
            self._names[name] = best

    def _replace_name_mapping(
        self, to_add: _ManagedApplication, name: str, is_generic: bool
    ) -> None:
        existing = self._names.get(name)
        if existing is None:
            self._names[name] = ResolvedApplication(to_add.app, is_generic)
            return
        colliding = next(
            (m for m in self._applications.values() if m.app is existing.app),
            None,
        )
        if colliding is None:
            raise InconsistentStateError(
                f"Couldn't find the application for name '{name}' when there "
                "should be one."
            )
        if to_add.rank < colliding.rank:
            self._names[name] = ResolvedApplication(to_add.app, is_generic)