"""Forward, read-only cursor over the bins of a :class:`~hstg.bins.BinList`."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .errors import IteratorExhaustedError

if TYPE_CHECKING:
    from .bins import Bin, BinList
    from .codec import Codec


class BinIterator:
    """
    Walks the bins from the lowest key, tracking the frequency already passed.

    The iterator is a view: it must not be held across an ``update`` on the
    underlying list. Usage::

        it = hist.iter()
        while not it.done():
            print(it.percentile(), it.freq(), it.p_rank())
            it.next()

    Accessors raise :class:`IteratorExhaustedError` once ``done()`` is true.
    """

    __slots__ = ("_bin_list", "_curr", "_cum_freq", "_codec")

    def __init__(self, bin_list: "BinList", codec: "Codec"):
        self._bin_list = bin_list
        self._curr: Optional["Bin"] = bin_list.first()
        self._cum_freq = 0
        self._codec = codec

    @property
    def cum_freq(self) -> int:
        """Total frequency of the bins strictly before the current one."""
        return self._cum_freq

    def bin(self) -> "Bin":
        if self._curr is None:
            raise IteratorExhaustedError("iterator is exhausted")
        return self._curr

    def done(self) -> bool:
        return self._curr is None

    def next(self) -> None:
        curr = self.bin()
        self._cum_freq += curr.freq
        self._curr = curr.next

    def key(self) -> int:
        return self.bin().key

    def freq(self) -> int:
        return self.bin().freq

    def percentile(self) -> int:
        """Representative value (lower bound) of the current bin."""
        return self._codec.decode(self.bin().key)

    def p_rank(self) -> float:
        """Percentage of all observations recorded in bins before this one.

        Bins created with a zero frequency leave the total at 0; every bin of
        such a list ranks at 0.0.
        """
        if self._curr is None:
            raise IteratorExhaustedError("iterator is exhausted")
        total = self._bin_list.total_freq
        if total == 0:
            return 0.0
        return (self._cum_freq / total) * 100.0
