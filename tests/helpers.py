from __future__ import annotations

from lsifgraph.graph.locations import make_location
from lsifgraph.index.facts import Fact, FactStore


def loc(doc: str, line: int, start: int, end: int):
    return make_location(doc, line, start, end)


def finalize(facts: list[Fact]):
    with FactStore() as store:
        store.insert_many(facts)
        return store.finalize()


def scenario_one_facts() -> list[Fact]:
    # Definition in A, referenced once from B.
    return [Fact(range=loc("B", 1, 0, 11), definition=loc("A", 0, 0, 1), hover="int")]
