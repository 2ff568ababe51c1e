# Ordered bin storage for the streaming histogram.
# Bins form a singly linked chain in strictly ascending key order. The list
# remembers the last bin it touched (the cursor) and resumes searches from it
# whenever the next key is not smaller, which makes a run of non-decreasing
# updates O(1) amortized instead of O(bins) per call.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

from .codec import _check_value

if TYPE_CHECKING:
    from .codec import Codec
    from .iterator import BinIterator

logger = logging.getLogger(__name__)


class Bin:
    """A bin key, the frequency recorded for it and the next (higher) bin."""

    __slots__ = ("key", "freq", "next")

    def __init__(self, key: int, freq: int = 0, next: Optional["Bin"] = None):
        self.key = key
        self.freq = freq
        self.next = next

    def update(self, freq: int) -> None:
        self.freq += freq

    def __repr__(self) -> str:
        return f"Bin(key={self.key}, freq={self.freq})"


class BinList:
    """
    Ascending chain of :class:`Bin` objects with an insertion cursor.

    Bins are created lazily by :meth:`update` and never removed. ``length`` is
    the number of distinct bins and ``total_freq`` the sum of every frequency
    increment applied so far. ``restarts`` counts the searches that had to go
    back to the head because the key was smaller than the cursor's; it stays
    at zero for non-decreasing key sequences.
    """

    __slots__ = ("length", "total_freq", "restarts", "_head", "_curr")

    def __init__(self) -> None:
        self.length = 0
        self.total_freq = 0
        self.restarts = 0
        self._head: Optional[Bin] = None
        self._curr: Optional[Bin] = None

    # ------------------------------- Public API --------------------------------
    def update(self, key: int, freq: int) -> None:
        """Add ``freq`` to the bin for ``key``, creating the bin if needed.

        ``key`` and ``freq`` must be unsigned integers; anything else raises
        :class:`~hstg.errors.InvalidArgumentError` before the list is touched.
        """
        key = _check_value(key, "key")
        freq = _check_value(freq, "freq")
        assert not (self._head is None and self._curr is not None), (
            "cursor set on an empty bin list"
        )

        curr = self._curr
        if curr is None:
            # First use: start from the head even when the chain is empty.
            bin_ = self._bin_for(self._head, key)
        elif key < curr.key:
            # Already past the insertion point, go back to the start.
            self.restarts += 1
            bin_ = self._bin_for(self._head, key)
        else:
            bin_ = self._bin_for(curr, key)

        self._curr = bin_
        bin_.update(freq)
        self.total_freq += freq

    def first(self) -> Optional[Bin]:
        return self._head

    def last(self) -> Optional[Bin]:
        # O(length); only percentile(100) needs it.
        bin_ = self._head
        while bin_ is not None and bin_.next is not None:
            bin_ = bin_.next
        return bin_

    def iter(self, codec: "Codec") -> "BinIterator":
        from .iterator import BinIterator

        return BinIterator(self, codec)

    def items(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(key, freq)`` pairs in ascending key order."""
        for bin_ in self:
            yield bin_.key, bin_.freq

    def __iter__(self) -> Iterator[Bin]:
        bin_ = self._head
        while bin_ is not None:
            yield bin_
            bin_ = bin_.next

    def __len__(self) -> int:
        return self.length

    def __repr__(self) -> str:
        return f"BinList(length={self.length}, total_freq={self.total_freq})"

    # ------------------------------- Internals ---------------------------------
    def _bin_for(self, start: Optional[Bin], key: int) -> Bin:
        """
        Find or splice in the bin for ``key``, scanning forward from ``start``.

        Callers only resume from the cursor when ``key >= cursor.key``, so a
        new bin is never spliced in front of a cursor start.
        """
        prev: Optional[Bin] = None
        curr = start
        while curr is not None and curr.key < key:
            prev, curr = curr, curr.next

        if curr is not None and curr.key == key:
            return curr

        # Either the chain ended or we passed the spot: insert before ``curr``.
        created = Bin(key, 0, curr)
        if prev is None:
            assert curr is self._head, "splice point lost from the head of the chain"
            self._head = created
        else:
            prev.next = created
        self.length += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("created bin key=%d (bins=%d)", key, self.length)
        return created
