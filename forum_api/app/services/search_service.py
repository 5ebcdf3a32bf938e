"""
Case-insensitive substring search (Knuth-Morris-Pratt).

``search`` returns the start offset of every occurrence of a pattern in
a text, overlapping occurrences included, in O(len(text) + len(pattern)).
``search_items`` applies it to a sequence of records and collects the
matching ones into a ``SearchResult``.
"""

from typing import Callable, Iterable, List, Sequence, Tuple, TypeVar

from ..schemas.search import SearchResult

T = TypeVar("T")


def build_failure_table(pattern: str) -> List[int]:
    """KMP failure function.

    ``table[i]`` is the length of the longest proper prefix of
    ``pattern[:i + 1]`` that is also a suffix of it.
    """
    table = [0] * len(pattern)
    k = 0
    for i in range(1, len(pattern)):
        while k and pattern[i] != pattern[k]:
            k = table[k - 1]
        if pattern[i] == pattern[k]:
            k += 1
        table[i] = k
    return table


def _fold(text: str) -> Tuple[str, Sequence[int]]:
    """Lower-case ``text``; ``origin[j]`` is the source index of char ``j``."""
    if text.isascii():
        return text.lower(), range(len(text))
    parts: List[str] = []
    origin: List[int] = []
    for index, char in enumerate(text):
        lowered = char.lower()
        parts.append(lowered)
        origin.extend([index] * len(lowered))
    return "".join(parts), origin


def search(haystack: str, needle: str) -> List[int]:
    """Return the 0-based offsets of ``needle`` in ``haystack``.

    Both inputs are lower-cased before matching.  An empty needle, or one
    longer than the haystack, matches nowhere.

    Offsets always index ``haystack`` itself, also when lower-casing
    changes the length of a character (``"İ".lower()`` is two code
    points).

    >>> search("aaa", "aa")
    [0, 1]
    >>> search("İx test", "TEST")
    [3]
    """
    text, origin = _fold(haystack)
    pattern, _ = _fold(needle)
    if not pattern or len(pattern) > len(text):
        return []
    table = build_failure_table(pattern)
    m = len(pattern)
    offsets: List[int] = []
    k = 0
    for i, char in enumerate(text):
        while k and char != pattern[k]:
            k = table[k - 1]
        if char == pattern[k]:
            k += 1
        if k == m:
            start = origin[i - m + 1]
            # Two matches inside one expanded character share a source index.
            if not offsets or offsets[-1] != start:
                offsets.append(start)
            k = table[k - 1]
    return offsets


def search_items(items: Iterable[T], pattern: str, field: Callable[[T], str]) -> SearchResult:
    """Search ``field(item)`` of every item; keep items with a match."""
    result = SearchResult(pattern=pattern)
    for item in items:
        offsets = search(field(item), pattern)
        if offsets:
            result.add_match(item, offsets)
    return result
