"""Exceptions raised by :mod:`hstg`."""

from __future__ import annotations


class HstgError(Exception):
    """Base class for every error raised by the histogram package."""


class InvalidConfigurationError(HstgError, ValueError):
    """A codec or histogram was configured with an unusable parameter."""


class InvalidArgumentError(HstgError, ValueError):
    """An operation received an argument outside its domain."""


class IteratorExhaustedError(HstgError, RuntimeError):
    """A :class:`~hstg.iterator.BinIterator` accessor was used after ``done()``."""
