from __future__ import annotations

import glob
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..errors import EmptyInputError, ParseError
from ..index.facts import Fact
from . import merlin, symbols
from .utils import source_file_for


DIALECTS = ("merlin", "symbols")


@dataclass(frozen=True)
class IngestOptions:
    root: Path
    dialect: str = "merlin"
    hover_max_chars: int = 200


def expand_inputs(pattern: str) -> list[Path]:
    files = sorted(Path(p) for p in glob.glob(pattern, recursive=True) if os.path.isfile(p))
    if not files:
        raise EmptyInputError(pattern)
    return files


def iter_file_facts(path: Path, options: IngestOptions) -> Iterator[Fact]:
    if options.dialect not in DIALECTS:
        raise ValueError(f"unknown dialect {options.dialect!r}; expected one of {', '.join(DIALECTS)}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            if options.dialect == "symbols":
                yield from symbols.parse_lines(fh, root=options.root, name=str(path))
            else:
                yield from merlin.parse_lines(
                    fh,
                    source_file=source_file_for(path, options.root),
                    hover_max_chars=options.hover_max_chars,
                )
        except UnicodeDecodeError as e:
            raise ParseError(f"{path}: not valid UTF-8: {e}") from e
