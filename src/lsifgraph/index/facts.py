"""Fact store: collects facts and correlates them into a read-only index.

Facts go into SQLite in one batch. `finalize()` then assigns every range a
small integer id in `(document, line, column)` order and groups references
per definition. Everything downstream iterates those ids, so output order
never depends on insertion order.
"""

from __future__ import annotations

import sqlite3
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..errors import UnknownRangeError
from ..graph.locations import Location, make_location, range_key
from . import sqlite_store


@dataclass(frozen=True)
class Fact:
    range: Location
    definition: Location | None = None
    hover: str | None = None

    @property
    def is_definition_site(self) -> bool:
        return self.definition is not None and self.definition.key == self.range.key


@dataclass(frozen=True)
class CorrelatedIndex:
    documents: tuple[str, ...]
    # Range id -> location; ids are positions in this tuple.
    ranges: tuple[Location, ...]
    ranges_by_document: dict[str, tuple[int, ...]]
    references_by_definition: dict[int, tuple[int, ...]]
    hover_by_definition: dict[int, str]
    _ids_by_key: dict[str, int] = field(default_factory=dict, repr=False)

    def get(self, range_id: int) -> Location | None:
        if 0 <= range_id < len(self.ranges):
            return self.ranges[range_id]
        return None

    def range_id(self, key: str) -> int | None:
        return self._ids_by_key.get(key)

    def find_location(self, key: str) -> Location | None:
        rid = self._ids_by_key.get(key)
        return None if rid is None else self.ranges[rid]

    def location_of(self, key: str) -> Location:
        loc = self.find_location(key)
        if loc is None:
            raise UnknownRangeError(key)
        return loc

    def definitions(self) -> Iterator[int]:
        return iter(sorted(self.references_by_definition))


class FactStore:
    """Batch fact collection backed by SQLite tables."""

    def __init__(self, conn: sqlite3.Connection | None = None, *, db_path: str = ":memory:") -> None:
        self._owns_conn = conn is None
        self.conn = conn if conn is not None else sqlite_store.connect(db_path)
        sqlite_store.init_db(self.conn)
        sqlite_store.clear_facts(self.conn)

    def __enter__(self) -> "FactStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_conn:
            self.conn.close()

    def __len__(self) -> int:
        return sqlite_store.count_facts(self.conn)

    def insert(self, fact: Fact) -> None:
        self.insert_many([fact])

    def insert_many(self, facts: Iterable[Fact]) -> None:
        sqlite_store.insert_facts(self.conn, (_fact_row(f) for f in facts))
        self.conn.commit()

    def finalize(self) -> CorrelatedIndex:
        locations = [
            make_location(str(r[0]), int(r[1]), int(r[2]), int(r[3]))
            for r in sqlite_store.iter_ranges(self.conn)
        ]
        ordered = sorted(locations, key=Location.sort_key)
        ids = {loc.key: i for i, loc in enumerate(ordered)}

        ranges_by_doc: dict[str, list[int]] = defaultdict(list)
        for i, loc in enumerate(ordered):
            ranges_by_doc[loc.uri].append(i)

        grouped: dict[int, set[int]] = defaultdict(set)
        for r in sqlite_store.iter_references(self.conn):
            def_id = ids[range_key(r["def_file"], r["def_line"], r["def_start_col"])]
            ref_id = ids[range_key(r["file"], r["line"], r["start_col"])]
            refs = grouped[def_id]
            # The definition site is linked through its own item edges, not as a reference.
            if ref_id != def_id:
                refs.add(ref_id)

        hovers: dict[int, str] = {}
        for r in sqlite_store.iter_hovers(self.conn):
            # The fact that carried a hover may since have been replaced.
            def_id = ids.get(range_key(r["def_file"], r["def_line"], r["def_start_col"]))
            if def_id is not None and def_id in grouped:
                hovers[def_id] = str(r["hover"])

        return CorrelatedIndex(
            documents=tuple(sorted(ranges_by_doc)),
            ranges=tuple(ordered),
            ranges_by_document={d: tuple(v) for d, v in sorted(ranges_by_doc.items())},
            references_by_definition={d: tuple(sorted(grouped[d])) for d in sorted(grouped)},
            hover_by_definition=hovers,
            _ids_by_key=ids,
        )


def _fact_row(fact: Fact) -> dict:
    row = {
        "file": fact.range.uri,
        "line": fact.range.start.line,
        "start_col": fact.range.start.character,
        "end_col": fact.range.end.character,
        "hover": fact.hover,
    }
    if fact.definition is not None:
        row.update(
            def_file=fact.definition.uri,
            def_line=fact.definition.start.line,
            def_start_col=fact.definition.start.character,
            def_end_col=fact.definition.end.character,
        )
    return row
