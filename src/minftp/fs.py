from __future__ import annotations

import logging
import os
from typing import Iterator, TextIO

from .constants import ENCODING
from .listing import EntryKind, ListingEntry


def _kind_of(entry: os.DirEntry) -> EntryKind:
    if entry.is_symlink():
        return EntryKind.SYMLINK
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.OTHER


def _size_of(entry: os.DirEntry) -> int:
    try:
        return entry.stat().st_size
    except OSError:
        return -1


def _make_entry(entry: os.DirEntry, include_size: bool, parent: str | None = None) -> ListingEntry:
    return ListingEntry(
        name=entry.name,
        kind=_kind_of(entry),
        hidden=entry.name.startswith("."),
        size=_size_of(entry) if include_size else None,
        parent=parent,
    )


def list_directory(path: str, include_hidden: bool = False, include_size: bool = False) -> list[ListingEntry]:
    """Entries of a single directory, in the order the filesystem returns them."""
    with os.scandir(path) as it:
        return [
            _make_entry(entry, include_size)
            for entry in it
            if include_hidden or not entry.name.startswith(".")
        ]


def _scan(path: str) -> list[os.DirEntry]:
    with os.scandir(path) as it:
        return list(it)


def _walk(
    entries: list[os.DirEntry], prefix: str, include_hidden: bool, include_size: bool
) -> Iterator[ListingEntry]:
    for entry in entries:
        if not include_hidden and entry.name.startswith("."):
            continue
        listed = _make_entry(entry, include_size, parent=prefix)
        yield listed
        if listed.kind is not EntryKind.DIRECTORY:
            continue
        try:
            children = _scan(entry.path)
        except OSError as e:
            logging.warning("Skipping unreadable directory %s: %s", listed.display_name, e)
            continue
        yield from _walk(children, f"{prefix}/{entry.name}", include_hidden, include_size)


def list_directory_recursive(
    path: str, include_hidden: bool = False, include_size: bool = False
) -> list[ListingEntry]:
    """Depth-first listing below ``path``; each directory is followed by its contents.

    Entry names carry a "./sub/dir" style parent prefix. Symlinked directories
    are listed but not descended into, and subdirectories that cannot be read
    are listed without their contents.
    """
    return list(_walk(_scan(path), ".", include_hidden, include_size))


def file_is_accessible(path: str) -> bool:
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def open_for_line_reading(path: str) -> TextIO:
    return open(path, "r", encoding=ENCODING, errors="surrogateescape")
