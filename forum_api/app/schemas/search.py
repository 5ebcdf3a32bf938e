"""
Search result containers.

A ``SearchResult`` holds the searched pattern and one ``MatchResult``
per item that matched at least once, in the order the items were
scanned.  ``item`` is a ``Post`` or a ``Comment``.
"""

from typing import Any, Iterable, List

from pydantic import BaseModel, Field


class MatchResult(BaseModel):
    item: Any
    indexes: List[int]


class SearchResult(BaseModel):
    pattern: str
    matches: List[MatchResult] = Field(default_factory=list)

    def add_match(self, item: Any, indexes: Iterable[int]) -> None:
        self.matches.append(MatchResult(item=item, indexes=list(indexes)))

    def has_matches(self) -> bool:
        return bool(self.matches)

    def count_matches(self) -> int:
        """Total number of match offsets across all items."""
        return sum(len(match.indexes) for match in self.matches)
