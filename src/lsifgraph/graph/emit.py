"""Graph emission: turns a correlated index into a stream of LSIF items.

Shape of one definition group:

    (def) --next--> (resultSet) --textDocument/definition--> (definitionResult) --item--> (def)
                        |  \\-----textDocument/hover--------> (hoverResult)
                        \\------textDocument/references---> (referenceResult) --item--> (def), (refs per document)
    (ref) --next--> (resultSet)

An import moniker replaces the definitionResult branch and the
`definitions` item; an export moniker is attached after the references.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from itertools import groupby
from pathlib import Path
from typing import Any, Callable

from ..errors import UnknownRangeError
from ..index.facts import CorrelatedIndex
from . import protocol as P
from .locations import Location
from .monikers import Moniker, MonikerResolver, NullMonikerResolver


Emit = Callable[[dict[str, Any]], None]


@dataclass(frozen=True)
class EmitOptions:
    language_id: str = "cpp"
    tool_name: str = "lsif-cpp"
    tool_version: str = "dev"
    tool_args: tuple[str, ...] = ()
    package_version: str = "1.0"
    # Only read when include_contents is set.
    root: Path | None = None
    include_contents: bool = False


@dataclass
class GraphEmitter:
    index: CorrelatedIndex
    emit: Emit
    monikers: MonikerResolver = field(default_factory=NullMonikerResolver)
    options: EmitOptions = field(default_factory=EmitOptions)
    emitted: int = 0
    _packages: set[str] = field(default_factory=set)

    def run(self) -> int:
        o = self.options
        self._put(P.make_meta(tool_name=o.tool_name, tool_version=o.tool_version, args=list(o.tool_args)))
        self._put(P.make_project(o.language_id))
        self._put(P.event("projectBegin", data="project", scope="project", kind="begin"))

        for doc in self.index.documents:
            self._document_begin(doc)

        for rid in range(len(self.index.ranges)):
            self._put(P.make_range(self._loc(rid)))

        definitions = set(self.index.references_by_definition)
        for def_id in self.index.definitions():
            self._definition_group(def_id, definitions)

        for doc in self.index.documents:
            self._document_end(doc)

        self._put(
            P.edge(
                "projectContains",
                P.CONTAINS,
                out_v="project",
                in_vs=[P.document_id(doc) for doc in self.index.documents],
            )
        )
        self._put(P.event("projectEnd", data="project", scope="project", kind="end"))
        return self.emitted

    def _put(self, item: dict[str, Any]) -> None:
        # The sink returns only once the item is handed off, which keeps output order fixed.
        self.emit(item)
        self.emitted += 1

    def _loc(self, range_id: int) -> Location:
        loc = self.index.get(range_id)
        if loc is None:
            raise UnknownRangeError(f"#{range_id}")
        return loc

    def _document_begin(self, doc: str) -> None:
        contents = ""
        if self.options.include_contents and self.options.root is not None:
            try:
                contents = base64.b64encode((Path(self.options.root) / doc).read_bytes()).decode("ascii")
            except OSError:
                # Documents that are gone from disk still get a vertex.
                contents = ""
        self._put(P.make_document(doc, language_id=self.options.language_id, contents=contents))
        self._put(P.event("documentBegin:" + doc, data=P.document_id(doc), scope="document", kind="begin"))

    def _document_end(self, doc: str) -> None:
        self._put(
            P.edge(
                "contains:" + doc,
                P.CONTAINS,
                out_v=P.document_id(doc),
                in_vs=[self._loc(rid).key for rid in self.index.ranges_by_document.get(doc, ())],
            )
        )
        self._put(P.event("documentEnd:" + doc, data=P.document_id(doc), scope="document", kind="end"))

    def _definition_group(self, def_id: int, definitions: set[int]) -> None:
        def_loc = self._loc(def_id)
        d = def_loc.key
        result_set = "resultSet:" + d

        self._put(P.vertex(result_set, P.RESULT_SET))
        self._put(P.edge("next:" + d, P.NEXT, out_v=d, in_v=result_set))

        import_moniker = self.monikers.import_moniker_of(def_loc)
        if import_moniker is not None:
            # Imported symbols have no local definition site.
            self._moniker(import_moniker, d, result_set)
        else:
            self._put(P.vertex("definition:" + d, P.DEFINITION_RESULT))
            self._put(
                P.edge("textDocument/definition:" + d, P.TEXT_DOCUMENT_DEFINITION, out_v=result_set, in_v="definition:" + d)
            )
            self._put(
                P.edge(
                    "item:textDocument/definition:" + d,
                    P.ITEM,
                    out_v="definition:" + d,
                    in_vs=[d],
                    document=P.document_id(def_loc.uri),
                )
            )

        hover = self.index.hover_by_definition.get(def_id)
        if hover:
            self._put(P.vertex("hover:" + d, P.HOVER_RESULT, result={"contents": hover}))
            self._put(P.edge("textDocument/hover:" + d, P.TEXT_DOCUMENT_HOVER, out_v=result_set, in_v="hover:" + d))

        self._put(P.vertex("reference:" + d, P.REFERENCE_RESULT))
        self._put(
            P.edge("textDocument/references:" + d, P.TEXT_DOCUMENT_REFERENCES, out_v=result_set, in_v="reference:" + d)
        )

        if import_moniker is None:
            self._put(
                P.edge(
                    "item:textDocument/references:definitions:" + d,
                    P.ITEM,
                    out_v="reference:" + d,
                    in_vs=[d],
                    property=P.DEFINITIONS,
                    document=P.document_id(def_loc.uri),
                )
            )

        refs = [self._loc(rid) for rid in self.index.references_by_definition[def_id]]
        for rid, ref in zip(self.index.references_by_definition[def_id], refs):
            # A reference that is itself a definition already points at its own result set.
            if rid in definitions:
                continue
            self._put(P.edge("next:" + ref.key, P.NEXT, out_v=ref.key, in_v=result_set))

        # Item edges are scoped to a single document.
        for uri, group in groupby(sorted(refs, key=Location.sort_key), key=lambda loc: loc.uri):
            self._put(
                P.edge(
                    f"item:textDocument/references:references:{d}:{uri}",
                    P.ITEM,
                    out_v="reference:" + d,
                    in_vs=[loc.key for loc in group],
                    property=P.REFERENCES,
                    document=P.document_id(uri),
                )
            )

        export_moniker = self.monikers.export_moniker_of(def_loc)
        if export_moniker is not None:
            self._moniker(export_moniker, d, result_set)

    def _moniker(self, moniker: Moniker, d: str, result_set: str) -> None:
        moniker_id = f"moniker:{moniker.kind}:{d}"
        package_id = "package:" + moniker.package
        self._put(
            P.vertex(
                moniker_id,
                P.MONIKER,
                identifier=moniker.identifier,
                kind=moniker.kind,
                scheme=self.options.language_id,
            )
        )
        self._put(P.edge(f"monikerEdge:{moniker.kind}:{d}", P.MONIKER, out_v=result_set, in_v=moniker_id))
        # Several symbols may live in one package; its vertex is emitted once.
        if moniker.package not in self._packages:
            self._packages.add(moniker.package)
            self._put(
                P.vertex(
                    package_id,
                    P.PACKAGE_INFORMATION,
                    manager=self.options.language_id,
                    name=moniker.package,
                    version=self.options.package_version,
                )
            )
        self._put(
            P.edge(f"packageEdge:{moniker.kind}:{d}", P.PACKAGE_INFORMATION, out_v=moniker_id, in_v=package_id)
        )


def emit_graph(
    index: CorrelatedIndex,
    emit: Emit,
    *,
    monikers: MonikerResolver | None = None,
    options: EmitOptions | None = None,
) -> int:
    """Emit the whole graph for `index` into `emit`; returns the number of items."""
    emitter = GraphEmitter(
        index=index,
        emit=emit,
        monikers=NullMonikerResolver() if monikers is None else monikers,
        options=EmitOptions() if options is None else options,
    )
    return emitter.run()
