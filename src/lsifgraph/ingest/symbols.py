"""Reader for symbol/reference streams.

    {"symbol": {"file": "a.cpp", "range": "1:0-1", "hover": "int"}}
    {"references": {"file": "b.cpp", "ranges": ["2:0-11"]}}

A `references` record belongs to the most recent `symbol`. Lines are 1-based.
"""

from __future__ import annotations

import json
import os
from typing import Any, Iterable, Iterator

from ..errors import ParseError
from ..graph.locations import Location, make_location, parse_span
from ..index.facts import Fact
from .utils import relpath


def _file(value: Any, root: str | os.PathLike[str] | None) -> str:
    path = str(value)
    if root is not None and os.path.isabs(path):
        return relpath(path, root)
    return path


def parse_lines(lines: Iterable[str], *, root: str | os.PathLike[str] | None = None, name: str = "<input>") -> Iterator[Fact]:
    current: Location | None = None
    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            rec = json.loads(line)
            if "symbol" in rec:
                sym = rec["symbol"]
                current = make_location(_file(sym["file"], root), *parse_span(str(sym["range"])))
                yield Fact(range=current, definition=current, hover=sym.get("hover"))
            elif "references" in rec:
                refs = rec["references"]
                if current is None:
                    raise ParseError("references record before any symbol")
                doc = _file(refs["file"], root)
                for span in refs["ranges"]:
                    yield Fact(range=make_location(doc, *parse_span(str(span))), definition=current)
        except ParseError as e:
            raise ParseError(f"{name}:{lineno}: {e}") from e
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ParseError(f"{name}:{lineno}: invalid record: {e}") from e
