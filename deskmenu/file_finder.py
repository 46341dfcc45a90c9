"""Recursive listing of the files below a directory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class FoundEntry:
    """A file or directory found by find_files."""

    path: str
    is_dir: bool


def find_files(path: str) -> Iterator[FoundEntry]:
    """Yield every non-hidden entry below ``path``, descending into directories.

    Paths are built by appending the entry name to ``path`` as given, so
    ``path`` should end with a slash. Names starting with a dot are skipped.
    All entries of a directory are yielded before its subdirectories are
    visited; entries of one directory come in inode order.
    """
    stack = [path]
    while stack:
        current = stack.pop()
        with os.scandir(current) as entries:
            listed = sorted(
                ((entry.inode(), entry.name) for entry in entries
                 if not entry.name.startswith(".")),
            )
        for _, name in listed:
            full = current + name
            is_dir = os.path.isdir(full)
            if is_dir:
                stack.append(full + "/")
            yield FoundEntry(full, is_dir)