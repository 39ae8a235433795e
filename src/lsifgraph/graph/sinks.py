from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, TextIO

from ..errors import SinkError


def dumps(item: dict[str, Any]) -> str:
    return json.dumps(item, ensure_ascii=False, separators=(",", ":"))


class ListSink:
    def __init__(self) -> None:
        self.items: list[dict[str, Any]] = []

    def __call__(self, item: dict[str, Any]) -> None:
        self.items.append(item)

    def lines(self) -> list[str]:
        return [dumps(item) for item in self.items]


class JsonlSink:
    """Appends one JSON document per line to `path`."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self._fh: TextIO | None = None

    def open(self) -> "JsonlSink":
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("a", encoding="utf-8")
        except OSError as e:
            raise SinkError(f"Unable to open {self.path}: {e}") from e
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "JsonlSink":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def __call__(self, item: dict[str, Any]) -> None:
        if self._fh is None:
            raise SinkError(f"{self.path} is not open")
        try:
            self._fh.write(dumps(item) + "\n")
        except OSError as e:
            raise SinkError(f"Unable to write to {self.path}: {e}") from e


def remove_stale(path: str | os.PathLike[str]) -> bool:
    """Delete output left over from a previous run. Returns True if a file was removed."""
    p = Path(path)
    if not p.exists():
        return False
    p.unlink()
    return True


def load_items(path: str | os.PathLike[str]) -> list[dict[str, Any]]:
    items = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line:
            continue
        items.append(json.loads(line))
    return items
