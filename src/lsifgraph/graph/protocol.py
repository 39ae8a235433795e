from __future__ import annotations

from typing import Any

from .locations import Location


LSIF_VERSION = "0.4.0"
POSITION_ENCODING = "utf-16"

VERTEX = "vertex"
EDGE = "edge"

# Vertex labels
META_DATA = "metaData"
PROJECT = "project"
DOCUMENT = "document"
RANGE = "range"
RESULT_SET = "resultSet"
DEFINITION_RESULT = "definitionResult"
REFERENCE_RESULT = "referenceResult"
HOVER_RESULT = "hoverResult"
MONIKER = "moniker"
PACKAGE_INFORMATION = "packageInformation"
EVENT = "$event"

# Edge labels (moniker and packageInformation share their vertex label)
CONTAINS = "contains"
NEXT = "next"
ITEM = "item"
TEXT_DOCUMENT_DEFINITION = "textDocument/definition"
TEXT_DOCUMENT_REFERENCES = "textDocument/references"
TEXT_DOCUMENT_HOVER = "textDocument/hover"

# Item edge properties
DEFINITIONS = "definitions"
REFERENCES = "references"


def vertex(id_: str, label: str, **fields: Any) -> dict[str, Any]:
    return {"id": id_, "type": VERTEX, "label": label, **fields}


def edge(
    id_: str,
    label: str,
    *,
    out_v: str,
    in_v: str | None = None,
    in_vs: list[str] | None = None,
    **fields: Any,
) -> dict[str, Any]:
    item: dict[str, Any] = {"id": id_, "type": EDGE, "label": label, "outV": out_v}
    if in_v is not None:
        item["inV"] = in_v
    if in_vs is not None:
        item["inVs"] = list(in_vs)
    item.update(fields)
    return item


def event(id_: str, *, data: str, scope: str, kind: str) -> dict[str, Any]:
    return vertex(id_, EVENT, kind=kind, scope=scope, data=data)


def document_id(doc: str) -> str:
    return "document:" + doc


def make_meta(*, tool_name: str, tool_version: str, args: list[str]) -> dict[str, Any]:
    return vertex(
        "meta",
        META_DATA,
        version=LSIF_VERSION,
        positionEncoding=POSITION_ENCODING,
        projectRoot="file:///",
        toolInfo={"name": tool_name, "args": list(args), "version": tool_version},
    )


def make_project(kind: str) -> dict[str, Any]:
    return vertex("project", PROJECT, kind=kind)


def make_document(doc: str, *, language_id: str, contents: str = "") -> dict[str, Any]:
    return vertex(document_id(doc), DOCUMENT, uri="file:///" + doc, languageId=language_id, contents=contents)


def make_range(loc: Location) -> dict[str, Any]:
    return vertex(loc.key, RANGE, start=loc.start.to_json(), end=loc.end.to_json())
