from __future__ import annotations

import enum
import re

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")


class Color(enum.Enum):
    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    MAGENTA = "magenta"
    CYAN = "cyan"
    WHITE = "white"
    GREY = "grey"
    DEFAULT = "default"
    INVISIBLE = "invisible"


class Format(enum.Enum):
    DEFAULT = "default"
    BOLD = "bold"
    DIM = "dim"
    UNDERLINED = "underlined"
    BLINK = "blink"
    REVERSE = "reverse"
    HIDDEN = "hidden"


_FOREGROUND = {
    Color.DEFAULT: "39",
    Color.BLACK: "30",
    Color.RED: "31",
    Color.GREEN: "32",
    Color.YELLOW: "33",
    Color.BLUE: "34",
    Color.MAGENTA: "35",
    Color.CYAN: "36",
    Color.WHITE: "97",
    Color.GREY: "37",
    Color.INVISIBLE: "",
}

_BACKGROUND = {
    Color.DEFAULT: "49",
    Color.BLACK: "40",
    Color.RED: "41",
    Color.GREEN: "42",
    Color.YELLOW: "43",
    Color.BLUE: "44",
    Color.MAGENTA: "45",
    Color.CYAN: "46",
    Color.WHITE: "107",
    Color.GREY: "47",
    Color.INVISIBLE: "",
}

# only the "set" half is emitted; every sequence ends with a full reset
_FORMAT = {
    Format.DEFAULT: "0",
    Format.BOLD: "1",
    Format.DIM: "2",
    Format.UNDERLINED: "3",
    Format.BLINK: "5",
    Format.REVERSE: "7",
    Format.HIDDEN: "8",
}

RESET = "\x1b[0m"


def in_color(
    content: str,
    fg: Color = Color.DEFAULT,
    bg: Color = Color.DEFAULT,
    fmt: Format = Format.DEFAULT,
) -> str:
    return f"\x1b[{_FORMAT[fmt]};{_FOREGROUND[fg]};{_BACKGROUND[bg]}m{content}{RESET}"


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)
