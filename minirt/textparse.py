"""Reading a scene file and parsing its words, numbers, colours and points."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Sequence

from minirt.vector import Vector

IDENTIFIERS = ("A", "C", "L", "sp", "pl", "cy")
MIN_LINE_LENGTH = 12
SCENE_EXTENSION = ".rt"


def split_words(text: str, sep: str) -> list[str]:
    """Split ``text`` on ``sep``, dropping the empty pieces runs of it leave."""
    return [word for word in text.split(sep) if word]


def read_scene_lines(path: str | os.PathLike[str]) -> list[str]:
    """The non-empty lines of a scene file, up to its first blank line.

    A file whose first line is blank, or an empty file, gives an empty list.
    Errors opening the file propagate as :class:`OSError`.
    """
    collected: list[str] = []
    with open(path, encoding="utf-8", errors="replace", newline="\n") as handle:
        for line in handle:
            if line.startswith("\n"):
                break
            collected.append(line)
    return split_words("".join(collected), "\n")


def parse_float(text: str) -> float:
    """Read a decimal number from the start of ``text``.

    An optional leading ``-``, digits, then an optional ``.`` and digits;
    reading stops at the first other character. Nothing readable gives 0.
    """
    if text is None:
        raise ValueError("missing number")
    sign = 1
    pos = 0
    if text[:1] == "-":
        sign = -1
        pos = 1
    result = 0.0
    while pos < len(text) and text[pos].isdigit() and text[pos].isascii():
        result = result * 10.0 + (ord(text[pos]) - ord("0"))
        pos += 1
    if text[pos : pos + 1] == ".":
        pos += 1
        fraction = 1.0
        while pos < len(text) and text[pos].isdigit() and text[pos].isascii():
            result = result * 10.0 + (ord(text[pos]) - ord("0"))
            fraction *= 10.0
            pos += 1
        result /= fraction
    return result * sign


def parse_int(text: str) -> int:
    """Parse an optionally negative run of decimal digits, all of ``text``."""
    if not text:
        raise ValueError("missing integer")
    sign = 1
    digits = text
    if text[0] == "-":
        sign = -1
        digits = text[1:]
    value = 0
    for char in digits:
        if not ("0" <= char <= "9"):
            raise ValueError(f"invalid integer: {text!r}")
        value = value * 10 + ord(char) - ord("0")
    return value * sign


def parse_color(text: str) -> int:
    """Turn ``"r,g,b"`` into ``0xRRGGBB``.

    A malformed component writes ``COLOR `` to standard error; it and the
    components after it count as 0. A component outside 0..255 raises
    ValueError.
    """
    if text is None:
        raise ValueError("missing colour")
    tokens = split_words(text, ",")
    components = [0, 0, 0]
    for index in range(3):
        try:
            components[index] = parse_int(tokens[index] if index < len(tokens) else "")
        except ValueError:
            sys.stderr.write("COLOR ")
            break
    for value in components:
        if not 0 <= value <= 255:
            raise ValueError(f"colour component out of range: {text!r}")
    red, green, blue = components
    return (red << 16) | (green << 8) | blue


def parse_point(text: str) -> Vector:
    """Turn ``"x,y,z"`` into a vector; fewer than three coordinates is an error."""
    if text is None:
        raise ValueError("missing point")
    coords = split_words(text, ",")
    if len(coords) < 3:
        raise ValueError(f"expected three coordinates: {text!r}")
    return Vector(parse_float(coords[0]), parse_float(coords[1]), parse_float(coords[2]), 0.0)


def has_rt_extension(path: str) -> bool:
    """Whether everything from the first dot of ``path`` on is exactly ``.rt``."""
    dot = path.find(".")
    return dot >= 0 and path[dot:] == SCENE_EXTENSION


def valid_char(c: str) -> bool:
    """Whether ``c`` may appear in a scene line."""
    return (
        c in " .,-"
        or "a" <= c <= "z"
        or "A" <= c <= "Z"
        or "0" <= c <= "9"
    )


def valid_identifier(line: str) -> bool:
    """Whether the first character of ``line`` starts exactly one known identifier."""
    if not line:
        return False
    matches = sum(1 for ident in IDENTIFIERS if ident[0] == line[0])
    return matches == 1


def lines_are_valid(lines: Iterable[str]) -> bool:
    """Every line is long enough, starts with an identifier and holds only valid characters."""
    return all(
        len(line) >= MIN_LINE_LENGTH
        and valid_identifier(line)
        and all(valid_char(c) for c in line)
        for line in lines
    )


def prefix_matches(s1: str, s2: str, n: int) -> bool:
    """Whether the first ``n`` characters agree, as far as both strings go."""
    return all(a == b for a, b in zip(s1[:n], s2[:n]))


def has_required_elements(lines: Iterable[str]) -> bool:
    """Whether there is an ambient light, a camera, a light and at least one shape."""
    ambient = camera = light = shape = False
    for line in lines:
        first = line[:1]
        ambient |= first == "A"
        camera |= first == "C"
        light |= first == "L"
        shape |= any(prefix_matches(line, ident, 2) for ident in ("sp", "pl", "cy"))
    return ambient and camera and light and shape


def count_shapes(lines: Sequence[str]) -> int:
    """How many lines describe a sphere, a plane or a cylinder."""
    count = 0
    for line in lines:
        first, second = line[0:1], line[1:2]
        for lead, follow in ("sp", "pl", "cy"):
            if first == lead or second == follow:
                count += 1
    return count