"""Deterministic regression tests for :class:`hstg.Histogram`."""
from __future__ import annotations

import importlib.metadata
import logging
import math
import random

import pytest

from hstg import (
    Histogram,
    HistogramConfig,
    InvalidArgumentError,
    InvalidConfigurationError,
    LinearCodec,
    LogCodec,
    new_linear,
    new_logarithmic,
)


def _exact_percentile(values: list[int], rank: float) -> int:
    ordered = sorted(values)
    return ordered[int(rank / 100.0 * (len(ordered) - 1))]


def test_factories_validate_parameters() -> None:
    with pytest.raises(InvalidConfigurationError):
        new_linear(0)
    with pytest.raises(InvalidConfigurationError):
        new_logarithmic(0)
    with pytest.raises(InvalidConfigurationError):
        new_logarithmic(1)
    assert new_linear(1).codec == LinearCodec(1)
    assert new_logarithmic(2).codec == LogCodec(2)


def test_histogram_rejects_unknown_codec() -> None:
    with pytest.raises(TypeError):
        Histogram(object())  # type: ignore[arg-type]


def test_unit_width_counts_and_extremes() -> None:
    hist = new_linear(1)
    hist.extend([0, 1, 2, 3, 4])

    assert hist.bin_count() == 5
    assert hist.total_freq() == 5
    assert hist.percentile(0) == 0
    assert hist.percentile(100) == 4


def test_width_two_groups_values() -> None:
    hist = new_linear(2)
    for value in [0, 1, 2, 3, 4]:
        hist.update(value)

    assert hist.bin_count() == 3
    assert hist.total_freq() == 5
    assert list(hist.items()) == [(0, 2), (2, 2), (4, 1)]


@pytest.mark.parametrize("rank, expected", [(10.0, 0), (30.0, 1), (50.0, 2), (70.0, 3), (90.0, 4)])
def test_interior_percentiles(rank: float, expected: int) -> None:
    # Bins 0..4 sit at percentile ranks 0, 20, 40, 60 and 80.
    hist = new_linear(1)
    hist.extend(range(5))
    assert hist.percentile(rank) == expected


def test_log_histogram_percentiles() -> None:
    hist = new_logarithmic(2)
    hist.extend(range(16))

    # keys 0..4 hold 1, 2, 4, 8 and 1 observations
    assert hist.bin_count() == 5
    assert list(hist.items()) == [(0, 1), (1, 2), (3, 4), (7, 8), (15, 1)]
    assert hist.percentile(0) == 0
    assert hist.percentile(100) == 15
    assert hist.median() == 7
    assert hist.percentile(10.0) == 1


@pytest.mark.parametrize(
    "rank", [-0.1, 100.1, float("nan"), float("inf"), "abc", "50", b"50", None, True, False]
)
def test_invalid_ranks_raise(rank: object) -> None:
    hist = new_linear(1)
    hist.update(3)
    with pytest.raises(InvalidArgumentError):
        hist.percentile(rank)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        hist.percentiles_at([50.0, rank])  # type: ignore[list-item]


@pytest.mark.parametrize("hist", [new_linear(1), new_linear(7), new_logarithmic(2), new_logarithmic(10)])
@pytest.mark.parametrize("rank", [0.0, 12.5, 50.0, 99.9, 100.0])
def test_empty_histogram_returns_decoded_zero(hist: Histogram, rank: float) -> None:
    assert hist.percentile(rank) == hist.codec.decode(0) == 0


def test_empty_histogram_batch_and_rank() -> None:
    hist = new_linear(3)
    assert hist.percentiles_at([0.0, 50.0, 100.0]) == [0, 0, 0]
    assert hist.percentiles_at([]) == []
    assert hist.rank(10) == 0.0


def test_update_rejects_negative_values() -> None:
    hist = new_linear(1)
    with pytest.raises(InvalidArgumentError):
        hist.update(-3)
    assert hist.total_freq() == 0


def test_percentiles_at_matches_single_queries() -> None:
    rng = random.Random(42)
    hist = new_linear(5)
    hist.extend(rng.randrange(0, 1_000) for _ in range(3_000))

    ranks = [99.0, 0.0, 12.5, 50.0, 100.0, 50.0, 73.3, 1.0]
    assert hist.percentiles_at(ranks) == [hist.percentile(r) for r in ranks]


def test_percentile_tracks_exact_within_a_few_bins() -> None:
    rng = random.Random(3)
    values = [int(rng.expovariate(1 / 200.0)) for _ in range(10_000)]
    width = 10
    hist = new_linear(width)
    hist.extend(values)

    for rank in [1.0, 10.0, 25.0, 50.0, 75.0, 90.0, 99.0]:
        estimate = hist.percentile(rank)
        exact = _exact_percentile(values, rank)
        assert abs(estimate - exact) <= 5 * width


def test_rank_reports_share_below_bin() -> None:
    hist = new_linear(1)
    hist.extend(range(5))

    assert hist.rank(0) == 0.0
    assert hist.rank(2) == pytest.approx(40.0)
    assert hist.rank(4) == pytest.approx(80.0)
    assert hist.rank(10) == pytest.approx(100.0)


def test_sorted_stream_does_not_restart_insertion() -> None:
    hist = new_logarithmic(2)
    hist.extend(range(10_000))
    assert hist._bins.restarts == 0
    assert hist.bin_count() == LogCodec(2).encode(9_999) + 1


def test_iter_exposes_bins() -> None:
    hist = new_linear(1)
    hist.extend([3, 1, 1, 2])

    seen = []
    it = hist.iter()
    while not it.done():
        seen.append((it.percentile(), it.freq(), it.p_rank()))
        it.next()
    assert seen == [(1, 2, 0.0), (2, 1, 50.0), (3, 1, 75.0)]


def test_merge_adds_bins_of_other_histogram() -> None:
    a = new_linear(10)
    b = new_linear(10)
    a.extend([5, 15, 25])
    b.extend([15, 35, 105])

    a.merge(b)

    assert a.bin_count() == 5
    assert a.total_freq() == 6
    assert list(a.items()) == [(0, 1), (10, 2), (20, 1), (30, 1), (100, 1)]
    # the source is left untouched
    assert b.total_freq() == 3


def test_merge_matches_single_stream() -> None:
    rng = random.Random(321)
    left = [rng.randrange(0, 5_000) for _ in range(2_000)]
    right = [rng.randrange(0, 5_000) for _ in range(2_000)]

    merged = new_logarithmic(2)
    merged.extend(left + right)

    a = new_logarithmic(2)
    b = new_logarithmic(2)
    a.extend(left)
    b.extend(right)
    a.merge(b)

    assert list(a.items()) == list(merged.items())
    for rank in [0.0, 1.0, 50.0, 99.0, 100.0]:
        assert a.percentile(rank) == merged.percentile(rank)


def test_merge_with_itself_doubles_frequencies() -> None:
    hist = new_linear(1)
    hist.extend([1, 2, 2])
    hist.merge(hist)
    assert list(hist.items()) == [(1, 2), (2, 4)]
    assert hist.total_freq() == 6


def test_merge_rejects_mismatched_inputs() -> None:
    hist = new_linear(2)
    with pytest.raises(InvalidArgumentError):
        hist.merge(new_linear(3))
    with pytest.raises(InvalidArgumentError):
        hist.merge(new_logarithmic(2))
    with pytest.raises(TypeError):
        hist.merge([1, 2, 3])  # type: ignore[arg-type]


def test_from_config() -> None:
    assert Histogram.from_config(HistogramConfig()).codec == LinearCodec(1)
    assert Histogram.from_config({"codec": "log", "log_base": 10}).codec == LogCodec(10)
    assert Histogram.from_config({"bin_width": 25}).codec == LinearCodec(25)

    with pytest.raises(InvalidConfigurationError):
        Histogram.from_config({"codec": "linear", "bin_width": 0})
    with pytest.raises(InvalidConfigurationError):
        Histogram.from_config({"codec": "cubic"})
    with pytest.raises(InvalidConfigurationError):
        Histogram.from_config({"codec": "log", "base": 2})


def test_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="hstg"):
        hist = new_linear(4)
        hist.extend([1, 9])
    messages = [record.getMessage() for record in caplog.records]
    assert any("created histogram" in m for m in messages)
    assert sum("created bin" in m for m in messages) == 2


def test_repr() -> None:
    hist = new_linear(2)
    hist.extend([1, 3, 5])
    assert repr(hist) == "Histogram(codec=LinearCodec(bin_width=2), bins=3, total_freq=3)"
    assert math.isclose(hist.rank(3), 100.0 / 3)


def test_version_matches_installed_distribution() -> None:
    import hstg

    try:
        installed = importlib.metadata.version("hstg")
    except importlib.metadata.PackageNotFoundError:
        pytest.skip("hstg is not installed")
    assert hstg.__version__ == installed


def test_huge_values_land_in_their_log_bin() -> None:
    hist = new_logarithmic(2)
    hist.extend([1, 2**1100])
    assert hist.bin_count() == 2
    assert hist.percentile(100) == 2**1100 - 1
