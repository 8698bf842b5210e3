from __future__ import annotations

import enum
from dataclasses import dataclass

from .ansi import Color, in_color, strip_ansi
from .constants import SIZE_COLUMN


class EntryKind(enum.Enum):
    DIRECTORY = "dir"
    SYMLINK = "link"
    FILE = "file"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class ListingEntry:
    name: str
    kind: EntryKind
    hidden: bool = False
    size: int | None = None
    parent: str | None = None  # set for recursive listings, e.g. "./docs"

    @property
    def display_name(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent}/{self.name}"


@dataclass(frozen=True, slots=True)
class ListingLine:
    name: str
    size: int | None = None


_KIND_COLORS = {
    EntryKind.DIRECTORY: Color.BLUE,
    EntryKind.SYMLINK: Color.RED,
    EntryKind.FILE: Color.WHITE,
}


def render_entry(entry: ListingEntry) -> str:
    """Colour the entry name by kind; hidden entries are always magenta."""
    if entry.hidden:
        rendered = in_color(entry.name, Color.MAGENTA)
    elif entry.kind in _KIND_COLORS:
        rendered = in_color(entry.name, _KIND_COLORS[entry.kind])
    else:
        rendered = entry.name

    if entry.parent is None:
        return rendered
    return f"{entry.parent}/{rendered}"


def format_entry(entry: ListingEntry, with_size: bool = False, color: bool = True) -> str:
    text = render_entry(entry) if color else entry.display_name
    if not with_size:
        return text

    size = -1 if entry.size is None else entry.size
    padding = max(1, SIZE_COLUMN - len(entry.display_name))
    return f"{text}{' ' * padding}{size}"


def parse_listing_line(line: str, with_size: bool = False) -> ListingLine:
    """Recover the name (and size) from a line produced by format_entry.

    Names that end in whitespace cannot be told apart from the size padding
    and come back trimmed.
    """
    text = strip_ansi(line)
    if not with_size:
        return ListingLine(name=text)

    name, sep, size = text.rstrip().rpartition(" ")
    if not sep:
        raise ValueError(f"listing line has no size column: {line!r}")
    try:
        value = int(size)
    except ValueError:
        raise ValueError(f"listing line has a non-numeric size: {line!r}") from None
    return ListingLine(name=name.rstrip(" "), size=value)
