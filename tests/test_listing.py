from __future__ import annotations

import os

import pytest

from minftp import fs
from minftp.ansi import Color, Format, in_color, strip_ansi
from minftp.listing import EntryKind, ListingEntry, format_entry, parse_listing_line, render_entry


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.txt").write_text("hello\n")
    (tmp_path / ".secret").write_text("xyz")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "b.txt").write_text("12345")
    (sub / ".hidden_dir").mkdir()
    (sub / ".hidden_dir" / "c.txt").write_text("c")
    return tmp_path


def test_in_color_codes():
    assert in_color("x", Color.BLUE) == "\x1b[0;34;49mx\x1b[0m"
    assert in_color("x", Color.WHITE, Color.BLACK, Format.BOLD) == "\x1b[1;97;40mx\x1b[0m"
    assert strip_ansi(in_color("name", Color.MAGENTA)) == "name"


def test_render_entry_colors_by_kind():
    assert render_entry(ListingEntry("d", EntryKind.DIRECTORY)) == in_color("d", Color.BLUE)
    assert render_entry(ListingEntry("l", EntryKind.SYMLINK)) == in_color("l", Color.RED)
    assert render_entry(ListingEntry("f", EntryKind.FILE)) == in_color("f", Color.WHITE)
    assert render_entry(ListingEntry("p", EntryKind.OTHER)) == "p"


def test_hidden_entries_are_magenta():
    assert render_entry(ListingEntry(".git", EntryKind.DIRECTORY, hidden=True)) == in_color(".git", Color.MAGENTA)


def test_parent_prefix_is_not_colored():
    e = ListingEntry("b.txt", EntryKind.FILE, parent="./sub")
    assert render_entry(e) == "./sub/" + in_color("b.txt", Color.WHITE)


def test_size_column():
    line = format_entry(ListingEntry("a.txt", EntryKind.FILE, size=6), with_size=True, color=False)
    assert line == "a.txt" + " " * 35 + "6"


def test_long_names_keep_one_space_before_size():
    name = "n" * 50
    line = format_entry(ListingEntry(name, EntryKind.FILE, size=1), with_size=True, color=False)
    assert line == name + " 1"


def test_round_trip_keeps_order_and_size():
    entries = [
        ListingEntry("my notes.txt", EntryKind.FILE, size=120),
        ListingEntry(".cache", EntryKind.DIRECTORY, hidden=True, size=4096),
        ListingEntry("link", EntryKind.SYMLINK, size=-1),
        ListingEntry("b.txt", EntryKind.FILE, size=5, parent="./sub"),
    ]
    for with_size in (False, True):
        lines = [format_entry(e, with_size=with_size) for e in entries]
        parsed = [parse_listing_line(line, with_size=with_size) for line in lines]
        assert [p.name for p in parsed] == [e.display_name for e in entries]
        if with_size:
            assert [p.size for p in parsed] == [e.size for e in entries]
        else:
            assert all(p.size is None for p in parsed)


def test_parse_rejects_missing_size():
    with pytest.raises(ValueError):
        parse_listing_line("lonely", with_size=True)
    with pytest.raises(ValueError):
        parse_listing_line("name    big", with_size=True)


def test_list_directory_hides_dotfiles(tree):
    names = {e.name for e in fs.list_directory(str(tree))}
    assert names == {"a.txt", "sub"}


def test_list_directory_all(tree):
    entries = {e.name: e for e in fs.list_directory(str(tree), include_hidden=True)}
    assert set(entries) == {"a.txt", "sub", ".secret"}
    assert entries[".secret"].hidden
    assert entries["sub"].kind is EntryKind.DIRECTORY
    assert entries["a.txt"].kind is EntryKind.FILE
    assert all(e.size is None for e in entries.values())


def test_list_directory_sizes(tree):
    entries = {e.name: e for e in fs.list_directory(str(tree), include_hidden=True, include_size=True)}
    assert entries["a.txt"].size == 6
    assert entries[".secret"].size == 3


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_symlinks_are_reported_and_not_followed(tree):
    os.symlink(tree / "sub", tree / "link")
    entries = {e.display_name: e for e in fs.list_directory_recursive(str(tree), include_hidden=True)}
    assert entries["./link"].kind is EntryKind.SYMLINK
    assert "./link/b.txt" not in entries


def test_recursive_listing(tree):
    entries = fs.list_directory_recursive(str(tree), include_hidden=True, include_size=True)
    names = [e.display_name for e in entries]
    assert sorted(names) == sorted(
        ["./a.txt", "./.secret", "./sub", "./sub/b.txt", "./sub/.hidden_dir", "./sub/.hidden_dir/c.txt"]
    )
    # a directory comes before its contents
    assert names.index("./sub") < names.index("./sub/b.txt")
    assert names.index("./sub/.hidden_dir") < names.index("./sub/.hidden_dir/c.txt")
    sizes = {e.display_name: e.size for e in entries}
    assert sizes["./sub/b.txt"] == 5


def test_recursive_listing_without_hidden(tree):
    names = {e.display_name for e in fs.list_directory_recursive(str(tree))}
    assert names == {"./a.txt", "./sub", "./sub/b.txt"}


def test_recursive_listing_skips_unreadable_subdirectory(tree, monkeypatch):
    real_scandir = os.scandir
    locked = str(tree / "sub")

    def scandir(path):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", locked)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", scandir)
    names = {e.display_name for e in fs.list_directory_recursive(str(tree), include_hidden=True)}
    assert names == {"./a.txt", "./.secret", "./sub"}


def test_recursive_listing_of_unreadable_root_raises(tree, monkeypatch):
    def scandir(path):
        raise PermissionError(13, "Permission denied", os.fspath(path))

    monkeypatch.setattr(os, "scandir", scandir)
    with pytest.raises(PermissionError):
        fs.list_directory_recursive(str(tree))


def test_file_is_accessible(tree):
    assert fs.file_is_accessible(str(tree / "a.txt"))
    assert not fs.file_is_accessible(str(tree / "missing.txt"))
    assert not fs.file_is_accessible(str(tree / "sub"))


def test_open_for_line_reading(tree):
    with fs.open_for_line_reading(str(tree / "a.txt")) as f:
        assert list(f) == ["hello\n"]
