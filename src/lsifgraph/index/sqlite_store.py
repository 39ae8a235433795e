from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Any, Iterable


def connect(db_path: str | os.PathLike[str] = ":memory:") -> sqlite3.Connection:
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA synchronous=OFF;")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    # One row per range; (file, line, start_col) is the range identity.
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS facts (
          seq INTEGER PRIMARY KEY,
          file TEXT NOT NULL,
          line INTEGER NOT NULL,
          start_col INTEGER NOT NULL,
          end_col INTEGER NOT NULL,
          def_file TEXT,
          def_line INTEGER,
          def_start_col INTEGER,
          def_end_col INTEGER,
          UNIQUE (file, line, start_col)
        );
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS idx_facts_def ON facts(def_file, def_line, def_start_col);")

    # Hovers belong to the definition, not to the fact row that carried them,
    # so replacing a fact never drops a hover. Append-only; latest seq wins.
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS hovers (
          seq INTEGER PRIMARY KEY,
          def_file TEXT NOT NULL,
          def_line INTEGER NOT NULL,
          def_start_col INTEGER NOT NULL,
          hover TEXT NOT NULL
        );
        """
    )
    conn.commit()


def clear_facts(conn: sqlite3.Connection) -> None:
    conn.execute("DELETE FROM facts;")
    conn.execute("DELETE FROM hovers;")
    conn.commit()


def insert_facts(conn: sqlite3.Connection, rows: Iterable[dict[str, Any]]) -> int:
    """Insert fact rows; an existing row for the same range is replaced.

    Replacing assigns a fresh `seq`, so later writes also sort last.
    """
    rows = list(rows)
    cur = conn.executemany(
        """
        INSERT OR REPLACE INTO facts(
          file, line, start_col, end_col, def_file, def_line, def_start_col, def_end_col
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                str(r["file"]),
                int(r["line"]),
                int(r["start_col"]),
                int(r["end_col"]),
                r.get("def_file"),
                r.get("def_line"),
                r.get("def_start_col"),
                r.get("def_end_col"),
            )
            for r in rows
        ],
    )
    conn.executemany(
        "INSERT INTO hovers(def_file, def_line, def_start_col, hover) VALUES (?, ?, ?, ?)",
        [
            (str(r["def_file"]), int(r["def_line"]), int(r["def_start_col"]), str(r["hover"]))
            for r in rows
            if r.get("hover") is not None and r.get("def_file") is not None
        ],
    )
    return int(cur.rowcount)


def count_facts(conn: sqlite3.Connection) -> int:
    return int(conn.execute("SELECT COUNT(*) AS n FROM facts").fetchone()["n"])


def iter_ranges(conn: sqlite3.Connection) -> Iterable[sqlite3.Row]:
    """Every distinct range, whether it is a fact's own range or only a definition target.

    A fact's own range wins over the same range seen as a definition target;
    among definition targets the most recently written end column wins.
    """
    cur = conn.execute(
        """
        SELECT file, line, start_col, end_col FROM facts
        UNION ALL
        SELECT d.def_file, d.def_line, d.def_start_col, d.def_end_col
        FROM (
          SELECT def_file, def_line, def_start_col, def_end_col, MAX(seq) AS last_seq
          FROM facts
          WHERE def_file IS NOT NULL
          GROUP BY def_file, def_line, def_start_col
        ) AS d
        WHERE NOT EXISTS (
          SELECT 1 FROM facts f
          WHERE f.file = d.def_file AND f.line = d.def_line AND f.start_col = d.def_start_col
        )
        ORDER BY 1, 2, 3
        """
    )
    yield from cur


def iter_references(conn: sqlite3.Connection) -> Iterable[sqlite3.Row]:
    cur = conn.execute(
        """
        SELECT def_file, def_line, def_start_col, file, line, start_col
        FROM facts
        WHERE def_file IS NOT NULL
        ORDER BY def_file, def_line, def_start_col, file, line, start_col
        """
    )
    yield from cur


def iter_hovers(conn: sqlite3.Connection) -> Iterable[sqlite3.Row]:
    # Oldest first, so the caller can let later rows overwrite earlier ones.
    cur = conn.execute(
        """
        SELECT def_file, def_line, def_start_col, hover
        FROM hovers
        ORDER BY seq
        """
    )
    yield from cur
