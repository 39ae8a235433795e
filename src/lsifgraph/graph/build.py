from __future__ import annotations

from pathlib import Path
from typing import Any

from rich.console import Console

from ..config import Settings
from ..index.facts import FactStore
from ..ingest.runner import IngestOptions, expand_inputs, iter_file_facts
from .emit import Emit, EmitOptions, emit_graph
from .monikers import MonikerResolver


def write_lsif(
    *,
    in_file_glob: str,
    root: str | Path,
    emit: Emit,
    dialect: str = "merlin",
    settings: Settings | None = None,
    monikers: MonikerResolver | None = None,
    include_contents: bool = False,
    console: Console | None = None,
) -> dict[str, Any]:
    """Read every input matching `in_file_glob` and emit the LSIF graph for it."""
    settings = settings or Settings()
    root = Path(root)
    inputs = expand_inputs(in_file_glob)

    options = IngestOptions(
        root=root,
        dialect=dialect,
        hover_max_chars=settings.hover_max_chars,
    )

    with FactStore(db_path=settings.store_path) as store:
        for i, path in enumerate(inputs, start=1):
            store.insert_many(iter_file_facts(path, options))
            if console is not None and i % 100 == 0:
                console.print(f"Read {i}/{len(inputs)} files")
        facts = len(store)
        index = store.finalize()

    if console is not None:
        console.print(
            f"Correlated {facts} facts: {len(index.documents)} documents, "
            f"{len(index.ranges)} ranges, {len(index.references_by_definition)} definitions"
        )

    items = emit_graph(
        index,
        emit,
        monikers=monikers,
        options=EmitOptions(
            language_id=settings.language_id,
            tool_name=settings.tool_name,
            tool_version=settings.tool_version,
            tool_args=(in_file_glob, str(root)),
            package_version=settings.package_version,
            root=root,
            include_contents=include_contents,
        ),
    )

    return {
        "files": len(inputs),
        "facts": facts,
        "documents": len(index.documents),
        "ranges": len(index.ranges),
        "definitions": len(index.references_by_definition),
        "items": items,
    }
