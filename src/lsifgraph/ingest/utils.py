from __future__ import annotations

import os
from pathlib import Path


INPUT_SUFFIX = ".lsif.in"


def relpath(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> str:
    """Project-relative path with forward slashes."""
    return Path(os.path.relpath(Path(path), Path(root))).as_posix()


def source_file_for(in_file: str | os.PathLike[str], root: str | os.PathLike[str]) -> str:
    # src/foo.ml.lsif.in -> src/foo.ml
    rel = relpath(in_file, root)
    if rel.endswith(INPUT_SUFFIX):
        rel = rel[: -len(INPUT_SUFFIX)]
    return rel
