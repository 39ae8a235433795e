from __future__ import annotations


class LsifError(RuntimeError):
    pass


class ParseError(LsifError, ValueError):
    """A range or location string could not be parsed."""


class UnknownRangeError(LsifError, LookupError):
    """A range key was referenced but never registered in the index."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Unable to look up location for range {key}")
        self.key = key


class EmptyInputError(LsifError):
    def __init__(self, pattern: str) -> None:
        super().__init__(f"glob {pattern} did not match any files")
        self.pattern = pattern


class SinkError(LsifError):
    """Writing an emitted item failed."""
