from typing import Iterable, Iterator, List, Optional


class OrderedSet:
    """
    An insertion-ordered collection of strings that drops duplicates.

    Two values are duplicates when they are equal after casefolding. The first
    spelling seen is the one kept, so `first()` always returns the earliest
    mention.
    """

    def __init__(self, values: Optional[Iterable[str]] = None):
        self._items: List[str] = []
        self._keys = set()
        for value in values or []:
            self.add(value)

    @staticmethod
    def _normalize(value: str) -> str:
        return value.casefold()

    def add(self, value: str) -> bool:
        """Adds a value, returning False if an equivalent one is already present."""
        key = self._normalize(value)
        if key in self._keys:
            return False
        self._keys.add(key)
        self._items.append(value)
        return True

    def update(self, values: Iterable[str]) -> None:
        for value in values:
            self.add(value)

    def first(self) -> Optional[str]:
        return self._items[0] if self._items else None

    def to_list(self) -> List[str]:
        return list(self._items)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and self._normalize(value) in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedSet):
            return self._items == other._items
        return NotImplemented

    def __repr__(self) -> str:
        return f"OrderedSet({self._items!r})"
