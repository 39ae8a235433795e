"""LSIF graph emission.

Takes a correlated fact index and writes the vertex/edge stream for it. The
output is fully determined by the index: ranges, documents and definition
groups are always visited in sorted order.
"""
