"""Reader for per-file merlin-style dumps (one JSON record per line).

    {"start": {"line": 100, "col": 62}, "end": {"line": 100, "col": 68},
     "definition": {"file": "*buffer*", "pos": {"line": 58, "col": 4}},
     "type": "[< `Path of string | `String of string ]"}

Lines are 1-based on the wire. `*buffer*` means the file being described.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Iterator

from ..errors import ParseError
from ..graph.locations import Location, Position
from ..index.facts import Fact


BUFFER = "*buffer*"
UNKNOWN_TYPE = "<unknown>"


def _pos(p: dict[str, Any]) -> Position:
    line, col = int(p["line"]) - 1, int(p["col"])
    if line < 0 or col < 0:
        raise ParseError(f"position out of bounds: line {p['line']}, col {p['col']}")
    return Position(line, col)


def parse_record(rec: dict[str, Any], *, source_file: str, hover_max_chars: int = 200) -> Fact | None:
    """Turn one record into a fact; returns None for records that are dropped."""
    start = _pos(rec["start"])
    end = _pos(rec["end"])
    loc = Location(uri=source_file, start=start, end=end)

    definition = rec.get("definition")
    if definition is None:
        return Fact(range=loc)

    def_file = str(definition["file"])
    if def_file == BUFFER:
        def_file = source_file
    elif def_file.startswith("/"):
        # Outside the project (stdlib, opam switch, ...).
        return None

    def_pos = _pos(definition["pos"])
    hover = str(rec.get("type") or UNKNOWN_TYPE)[:hover_max_chars]
    return Fact(range=loc, definition=Location(uri=def_file, start=def_pos, end=def_pos), hover=hover)


def parse_lines(lines: Iterable[str], *, source_file: str, hover_max_chars: int = 200) -> Iterator[Fact]:
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            rec = json.loads(line)
            if not isinstance(rec, dict) or "start" not in rec:
                continue
            fact = parse_record(rec, source_file=source_file, hover_max_chars=hover_max_chars)
        except ParseError as e:
            raise ParseError(f"{source_file}:{lineno}: {e}") from e
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise ParseError(f"{source_file}:{lineno}: invalid record: {e}") from e
        if fact is not None:
            yield fact
