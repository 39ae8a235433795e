from __future__ import annotations

from dataclasses import dataclass

from ..errors import ParseError


@dataclass(frozen=True, order=True)
class Position:
    line: int
    character: int

    def to_json(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True, order=True)
class Location:
    """A single-line range inside a project-relative document."""

    uri: str
    start: Position
    end: Position

    def __post_init__(self) -> None:
        if self.start.line != self.end.line:
            raise ParseError(
                f"expected range {self.uri}:{self.start.line}:{self.start.character} to end on the same line, "
                f"but it ends on line {self.end.line}"
            )

    @property
    def key(self) -> str:
        return range_key(self.uri, self.start.line, self.start.character)

    def sort_key(self) -> tuple[str, int, int]:
        return (self.uri, self.start.line, self.start.character)


@dataclass(frozen=True)
class FilePosition:
    uri: str
    position: Position


def range_key(uri: str, line: int, character: int) -> str:
    # The end position is deliberately not part of the identity.
    return f"{uri}:{line}:{character}"


def make_location(uri: str, line: int, start_col: int, end_col: int) -> Location:
    return Location(uri=uri, start=Position(line, start_col), end=Position(line, end_col))


def parse_file_position(value: str) -> FilePosition:
    """Parse `path/to/file.cpp:<line>:<column>`.

    The path itself may contain colons; only the last two components are
    treated as numbers.
    """
    components = value.split(":")
    if len(components) < 3:
        raise ParseError(f"expected path of the form path/to/file.cpp:<line>:<column>, got {value}")
    path = ":".join(components[:-2])
    try:
        line = int(components[-2])
        character = int(components[-1])
    except ValueError:
        raise ParseError(f"expected numeric line and column in {value}") from None
    if not path:
        raise ParseError(f"missing path in {value}")
    return FilePosition(uri=path, position=Position(line, character))


def parse_location(start: str, end: str) -> Location:
    start_p = parse_file_position(start)
    end_p = parse_file_position(end)
    if start_p.uri != end_p.uri:
        raise ParseError(
            f"expected start and end of range to be in the same file, but were {start} and {end}"
        )
    return Location(uri=start_p.uri, start=start_p.position, end=end_p.position)


def parse_span(value: str, *, one_based: bool = True) -> tuple[int, int, int]:
    """Parse a wire range of the form `line:startCol-endCol`.

    Returns zero-based `(line, start_col, end_col)`.
    """
    try:
        line_s, cols = value.split(":", 1)
        start_s, end_s = cols.split("-", 1)
        line, start_col, end_col = int(line_s), int(start_s), int(end_s)
    except ValueError:
        raise ParseError(f"expected range of the form <line>:<startCol>-<endCol>, got {value!r}") from None
    if one_based:
        line -= 1
    if line < 0 or start_col < 0 or end_col < start_col:
        raise ParseError(f"range out of bounds: {value!r}")
    return line, start_col, end_col
