"""Per-key LIFO stack of pooled entries."""

from __future__ import annotations

from typing import Iterator, List

from .entry import PoolEntry


class EntryStack:
    """Stack of :class:`PoolEntry` objects for one pool key.

    ``push``/``pop`` work on the top (last stored) entry. ``swap_remove``
    deletes an arbitrary position in O(1) by moving the top entry into the
    hole, so it does not keep the order of the remaining entries.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[PoolEntry] = []

    def push(self, entry: PoolEntry) -> None:
        self._items.append(entry)

    def pop(self) -> PoolEntry:
        """Remove and return the most recently pushed entry.

        Raises
        ------
        IndexError
            If the stack is empty.
        """
        return self._items.pop()

    def swap_remove(self, index: int) -> PoolEntry:
        """Remove the entry at ``index`` and return it."""
        items = self._items
        removed = items[index]
        last = items.pop()
        if index < len(items):
            items[index] = last
        return removed

    def remove_expired(self, now: float) -> List[PoolEntry]:
        """Remove and return every entry expired at ``now``."""
        expired: List[PoolEntry] = []
        i = 0
        while i < len(self._items):
            if self._items[i].expired(now):
                expired.append(self.swap_remove(i))
                # the swapped-in entry now sits at ``i`` and still needs a look
                continue
            i += 1
        return expired

    def drain(self) -> List[PoolEntry]:
        """Remove and return all entries, bottom first."""
        items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[PoolEntry]:
        return iter(list(self._items))
