"""hstg package public API."""
from ._metadata import __version__
from .bins import Bin, BinList
from .codec import Codec, LinearCodec, LogCodec
from .config import HistogramConfig
from .errors import (
    HstgError,
    InvalidArgumentError,
    InvalidConfigurationError,
    IteratorExhaustedError,
)
from .histogram import Histogram, new_linear, new_logarithmic
from .iterator import BinIterator

__all__ = [
    "Bin",
    "BinIterator",
    "BinList",
    "Codec",
    "Histogram",
    "HistogramConfig",
    "HstgError",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "IteratorExhaustedError",
    "LinearCodec",
    "LogCodec",
    "__version__",
    "new_linear",
    "new_logarithmic",
]
