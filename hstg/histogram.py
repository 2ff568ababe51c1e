# Streaming binned histogram (Python)
# - Pluggable bin codec (fixed width or logarithmic)
# - Ascending bin chain with cursor-resumed insertion (O(1) amortized for
#   non-decreasing input)
# - Percentile queries by a fresh scan of the bins; no per-query caching
# - Merge of histograms sharing a codec
# Python 3.9+

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from .bins import Bin, BinList
from .codec import Codec, LinearCodec, LogCodec
from .config import HistogramConfig
from .errors import InvalidArgumentError
from .iterator import BinIterator

logger = logging.getLogger(__name__)


class Histogram:
    """
    Streaming histogram over unsigned integer observations.

    Observations are never stored. Each one is mapped to a bin key by the codec
    and only the per-bin frequency is kept, so memory is bounded by the number
    of distinct bins, which the codec granularity controls. Percentiles are
    answered with the resolution of a bin: the value returned is the lower
    bound (``codec.decode``) of the bin the requested rank falls in.

    Not thread-safe: callers that share a histogram must serialize access, and
    a :class:`BinIterator` must not be held across an :meth:`update`.

    Public API:
      update(x), extend(xs), percentile(rank), percentiles_at(ranks), median(),
      rank(x), bin_count(), total_freq(), iter(), items(), merge(other)
    """

    _MIN_RANK: float = 0.0
    _MAX_RANK: float = 100.0

    __slots__ = ("_codec", "_bins")

    def __init__(self, codec: Codec):
        if not isinstance(codec, (LinearCodec, LogCodec)):
            raise TypeError(f"unsupported codec: {codec!r}")
        self._codec = codec
        self._bins = BinList()
        logger.debug("created histogram with %r", codec)

    @classmethod
    def from_config(cls, config: HistogramConfig | Mapping[str, object]) -> "Histogram":
        """Build a histogram from a :class:`HistogramConfig` or a plain mapping."""
        if not isinstance(config, HistogramConfig):
            config = HistogramConfig.from_mapping(config)
        return cls(config.make_codec())

    @property
    def codec(self) -> Codec:
        return self._codec

    # ------------------------------- Ingestion ---------------------------------
    def update(self, value: int) -> None:
        """Record one observation of ``value``."""
        self._bins.update(self._codec.encode(value), 1)

    def extend(self, values: Iterable[int]) -> None:
        for value in values:
            self.update(value)

    def merge(self, other: "Histogram") -> None:
        """Add every bin of ``other`` into this histogram.

        Both histograms must use the same codec, otherwise their keys do not
        describe the same value ranges. Bins are folded in ascending order, so
        the merge costs one pass over each histogram.
        """
        if not isinstance(other, Histogram):
            raise TypeError("merge expects Histogram")
        if other._codec != self._codec:
            raise InvalidArgumentError(
                f"cannot merge histograms with different codecs: {self._codec!r} != {other._codec!r}"
            )
        if other is self:
            pairs: Iterable[Tuple[int, int]] = list(other._bins.items())
        else:
            pairs = other._bins.items()
        for key, freq in pairs:
            self._bins.update(key, freq)
        logger.debug(
            "merged %d bins (%d observations); now %d bins",
            other.bin_count(),
            other.total_freq(),
            self.bin_count(),
        )

    # --------------------------------- Queries ---------------------------------
    def bin_count(self) -> int:
        return self._bins.length

    def total_freq(self) -> int:
        return self._bins.total_freq

    def iter(self) -> BinIterator:
        return self._bins.iter(self._codec)

    def items(self) -> Iterator[Tuple[int, int]]:
        """Yield ``(representative value, frequency)`` for each bin, ascending."""
        decode = self._codec.decode
        for key, freq in self._bins.items():
            yield decode(key), freq

    def percentile(self, rank: float) -> int:
        """
        Value at percentile ``rank`` (0.0 to 100.0) of the recorded data.

        An empty histogram answers ``codec.decode(0)`` for every rank. Rank 0
        and rank 100 return the lowest and the highest bin. Any other rank
        returns the last bin whose percentile rank (share of observations in
        earlier bins) does not exceed ``rank``. O(bins) per call.
        """
        rank = self._check_rank(rank)
        if self._bins.length == 0:
            return self._codec.decode(0)
        if rank == self._MIN_RANK:
            bin_ = self._bins.first()
        elif rank == self._MAX_RANK:
            bin_ = self._bins.last()
        else:
            it = self.iter()
            bin_ = it.bin()
            while not it.done():
                if it.p_rank() > rank:
                    break
                bin_ = it.bin()
                it.next()
        assert bin_ is not None
        return self._codec.decode(bin_.key)

    def percentiles_at(self, ranks: Iterable[float]) -> List[int]:
        """Return :meth:`percentile` for each entry of ``ranks``.

        All ranks are answered from a single pass over the bins, which is much
        cheaper than repeated :meth:`percentile` calls for large batches.
        """
        rs = [self._check_rank(r) for r in ranks]
        if not rs:
            return []
        if self._bins.length == 0:
            return [self._codec.decode(0)] * len(rs)

        decode = self._codec.decode
        first = self._bins.first()
        last: Optional[Bin] = None
        out = [0] * len(rs)

        it = self.iter()
        candidate = it.bin()
        for idx, r in sorted(enumerate(rs), key=lambda item: item[1]):
            if r == self._MIN_RANK:
                assert first is not None
                out[idx] = decode(first.key)
                continue
            if r == self._MAX_RANK:
                if last is None:
                    last = self._bins.last()
                assert last is not None
                out[idx] = decode(last.key)
                continue
            # Ranks are visited in ascending order, so the walk only moves forward.
            while not it.done() and it.p_rank() <= r:
                candidate = it.bin()
                it.next()
            out[idx] = decode(candidate.key)
        return out

    def median(self) -> int:
        return self.percentile(50.0)

    def rank(self, value: int) -> float:
        """Percentage of observations recorded in bins below the bin of ``value``."""
        key = self._codec.encode(value)
        if self._bins.total_freq == 0:
            return 0.0
        it = self.iter()
        while not it.done() and it.key() < key:
            it.next()
        return (it.cum_freq / self._bins.total_freq) * 100.0

    def __repr__(self) -> str:
        return (
            f"Histogram(codec={self._codec!r}, bins={self.bin_count()}, "
            f"total_freq={self.total_freq()})"
        )

    # ------------------------------- Internals ---------------------------------
    @classmethod
    def _check_rank(cls, rank: float) -> float:
        # float() would happily parse "50" and True
        if isinstance(rank, (bool, str, bytes)):
            raise InvalidArgumentError(f"invalid rank: {rank!r}")
        try:
            rv = float(rank)
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"invalid rank: {rank!r}") from None
        if not (cls._MIN_RANK <= rv <= cls._MAX_RANK):
            raise InvalidArgumentError(f"invalid rank: {rank!r}")
        return rv


def new_linear(bin_width: int) -> Histogram:
    """Histogram with fixed-width bins of ``bin_width`` (must be >= 1)."""
    return Histogram(LinearCodec(bin_width))


def new_logarithmic(log_base: int) -> Histogram:
    """Histogram with logarithmic bins in base ``log_base`` (must be >= 2)."""
    return Histogram(LogCodec(log_base))

