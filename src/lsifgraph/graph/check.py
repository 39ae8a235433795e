"""Structural checks over an emitted item stream.

These do not need the fact store: everything is derived from the items
themselves, so they work on a dump read back from disk as well.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable

from . import protocol as P


@dataclass
class CheckReport:
    items: int = 0
    duplicate_ids: dict[str, int] = field(default_factory=dict)
    # (edge id, endpoint id) pairs whose endpoint was not emitted earlier
    dangling: list[tuple[str, str]] = field(default_factory=list)
    partition_errors: list[str] = field(default_factory=list)
    multi_line_ranges: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.duplicate_ids or self.dangling or self.partition_errors or self.multi_line_ranges)


def _endpoints(item: dict[str, Any]) -> list[str]:
    out = [str(item["outV"])]
    if "inV" in item:
        out.append(str(item["inV"]))
    out.extend(str(v) for v in item.get("inVs", []))
    if "document" in item:
        out.append(str(item["document"]))
    return out


def check_items(items: Iterable[dict[str, Any]]) -> CheckReport:
    items = list(items)
    report = CheckReport(items=len(items))

    counts = Counter(str(item["id"]) for item in items)
    report.duplicate_ids = {k: n for k, n in sorted(counts.items()) if n > 1}

    seen: set[str] = set()
    range_doc: dict[str, str] = {}
    next_into: dict[str, set[str]] = defaultdict(set)
    refs_edge: dict[str, str] = {}
    reference_items: list[dict[str, Any]] = []

    for item in items:
        if item["type"] == P.EDGE:
            for v in _endpoints(item):
                if v not in seen:
                    report.dangling.append((str(item["id"]), v))
            label = item["label"]
            if label == P.NEXT:
                next_into[str(item["inV"])].add(str(item["outV"]))
            elif label == P.TEXT_DOCUMENT_REFERENCES:
                refs_edge[str(item["inV"])] = str(item["outV"])
            elif label == P.CONTAINS and str(item["outV"]).startswith("document:"):
                for r in item.get("inVs", []):
                    range_doc[str(r)] = str(item["outV"])
            elif label == P.ITEM and item.get("property") == P.REFERENCES:
                reference_items.append(item)
        elif item["label"] == P.RANGE:
            if item["start"]["line"] != item["end"]["line"]:
                report.multi_line_ranges.append(str(item["id"]))
        seen.add(str(item["id"]))

    covered: dict[str, set[str]] = defaultdict(set)
    for item in reference_items:
        result = str(item["outV"])
        doc = str(item["document"])
        for r in (str(v) for v in item["inVs"]):
            if range_doc.get(r) != doc:
                report.partition_errors.append(f"{item['id']}: range {r} is not contained in {doc}")
            if r in covered[result]:
                report.partition_errors.append(f"{item['id']}: range {r} listed more than once for {result}")
            covered[result].add(r)

    for result, result_set in sorted(refs_edge.items()):
        # The definition range links to its own result set and is not a reference.
        expected = {r for r in next_into.get(result_set, set()) if "resultSet:" + r != result_set}
        for r in sorted(expected - covered.get(result, set())):
            report.partition_errors.append(f"{result}: reference {r} is not listed in any item edge")

    return report
