# Bin codecs for the streaming histogram.
# A codec maps a raw observation to a bin key (encode) and a bin key back to
# the representative value of that bin (decode). The mapping is lossy:
# decode(encode(v)) is the lower bound of the bin holding v, not v itself.

from __future__ import annotations

import math
import operator
from dataclasses import dataclass
from typing import Tuple, Union

from .errors import InvalidArgumentError, InvalidConfigurationError


def _check_value(value: int, what: str = "value") -> int:
    # bool is an int subclass but never a meaningful observation
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{what} must be an unsigned integer, got {value!r}")
    try:
        value = operator.index(value)
    except TypeError:
        # Integral floats (and NumPy float scalars) are accepted like the ints they hold.
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        else:
            raise InvalidArgumentError(
                f"{what} must be an unsigned integer, got {value!r}"
            ) from None
    if value < 0:
        raise InvalidArgumentError(f"{what} must be >= 0, got {value}")
    return value


@dataclass(frozen=True)
class LinearCodec:
    """Fixed-width bins: key ``k`` covers ``[k * bin_width, (k + 1) * bin_width)``."""

    bin_width: int

    def __post_init__(self) -> None:
        if isinstance(self.bin_width, bool) or not isinstance(self.bin_width, int):
            raise InvalidConfigurationError(f"invalid bin width: {self.bin_width!r}")
        if self.bin_width <= 0:
            raise InvalidConfigurationError(f"invalid bin width: {self.bin_width}")

    def encode(self, value: int) -> int:
        return _check_value(value) // self.bin_width

    def decode(self, key: int) -> int:
        return _check_value(key, "key") * self.bin_width

    def bounds(self, key: int) -> Tuple[int, int]:
        low = self.decode(key)
        return low, low + self.bin_width


@dataclass(frozen=True)
class LogCodec:
    """Logarithmic bins for heavy-tailed data.

    Key ``k`` holds the observations ``v`` with ``floor(log_base(v + 1)) == k``,
    i.e. ``[log_base**k - 1, log_base**(k + 1) - 1)``, so for base 2 every bin
    is twice as wide as the one before it. ``decode`` returns the lower bound
    ``log_base**k - 1``, which keeps ``decode(0) == 0``.
    """

    log_base: int

    MIN_LOG_BASE = 2

    def __post_init__(self) -> None:
        if isinstance(self.log_base, bool) or not isinstance(self.log_base, int):
            raise InvalidConfigurationError(f"invalid log base: {self.log_base!r}")
        if self.log_base < self.MIN_LOG_BASE:
            raise InvalidConfigurationError(f"invalid log base: {self.log_base}")

    def encode(self, value: int) -> int:
        value = _check_value(value)
        base = self.log_base
        # Estimate from the bit length so values beyond float range still encode;
        # the integer loops below settle the exact floor.
        key = int(((value + 1).bit_length() - 1) / math.log2(base))
        while key > 0 and base ** key - 1 > value:
            key -= 1
        while base ** (key + 1) - 1 <= value:
            key += 1
        return key

    def decode(self, key: int) -> int:
        return self.log_base ** _check_value(key, "key") - 1

    def bounds(self, key: int) -> Tuple[int, int]:
        return self.decode(key), self.decode(key + 1)


Codec = Union[LinearCodec, LogCodec]
