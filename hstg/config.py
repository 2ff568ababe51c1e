"""Declarative histogram configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Mapping

from .codec import Codec, LinearCodec, LogCodec
from .errors import InvalidConfigurationError

DEFAULT_BIN_WIDTH: int = 1
DEFAULT_LOG_BASE: int = 2

LINEAR = "linear"
LOG = "log"


@dataclass(frozen=True)
class HistogramConfig:
    """Which codec a histogram uses and its parameter.

    ``bin_width`` is read only for the ``"linear"`` codec and ``log_base`` only
    for the ``"log"`` codec. Parameter validation is left to the codec.
    """

    codec: str = LINEAR
    bin_width: int = DEFAULT_BIN_WIDTH
    log_base: int = DEFAULT_LOG_BASE

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "HistogramConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise InvalidConfigurationError(f"unknown histogram settings: {', '.join(unknown)}")
        return cls(**mapping)  # type: ignore[arg-type]

    def make_codec(self) -> Codec:
        if self.codec == LINEAR:
            return LinearCodec(self.bin_width)
        if self.codec == LOG:
            return LogCodec(self.log_base)
        raise InvalidConfigurationError(
            f"unknown codec {self.codec!r}; expected {LINEAR!r} or {LOG!r}"
        )
