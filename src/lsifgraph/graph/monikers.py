from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..errors import ParseError
from .locations import Location, parse_file_position, range_key


MONIKER_KINDS = ("import", "export")


@dataclass(frozen=True)
class Moniker:
    identifier: str
    package: str
    kind: str


class MonikerResolver(Protocol):
    def import_moniker_of(self, loc: Location) -> Moniker | None: ...

    def export_moniker_of(self, loc: Location) -> Moniker | None: ...


class NullMonikerResolver:
    """Resolves nothing. Every symbol is treated as local to the project."""

    def import_moniker_of(self, loc: Location) -> Moniker | None:
        return None

    def export_moniker_of(self, loc: Location) -> Moniker | None:
        return None


class StaticMonikerResolver(NullMonikerResolver):
    """Lookup table of monikers keyed by range identity."""

    def __init__(self, monikers: list[tuple[str, Moniker]] | None = None) -> None:
        self._by_key: dict[tuple[str, str], Moniker] = {}
        for key, moniker in monikers or []:
            self.add(key, moniker)

    def __len__(self) -> int:
        return len(self._by_key)

    def add(self, key: str, moniker: Moniker) -> None:
        if moniker.kind not in MONIKER_KINDS:
            raise ParseError(f"unknown moniker kind {moniker.kind!r} for {key}")
        self._by_key[(key, moniker.kind)] = moniker

    def import_moniker_of(self, loc: Location) -> Moniker | None:
        return self._by_key.get((loc.key, "import"))

    def export_moniker_of(self, loc: Location) -> Moniker | None:
        return self._by_key.get((loc.key, "export"))

    @classmethod
    def load(cls, path: str | Path) -> "StaticMonikerResolver":
        """Load `{"range", "kind", "identifier", "package"}` records from a JSONL file."""
        resolver = cls()
        p = Path(path)
        try:
            text = p.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"{p}: not valid UTF-8: {e}") from e
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue
            try:
                rec = json.loads(line)
                pos = parse_file_position(str(rec["range"]))
                moniker = Moniker(
                    identifier=str(rec["identifier"]),
                    package=str(rec["package"]),
                    kind=str(rec["kind"]),
                )
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                raise ParseError(f"{p}:{lineno}: invalid moniker record: {e}") from e
            resolver.add(range_key(pos.uri, pos.position.line, pos.position.character), moniker)
        return resolver
