"""Opt-in gate for the histogram micro-benchmarks."""
from __future__ import annotations

from pathlib import Path

import pytest

BENCH_OUTPUT = Path("bench_out/pytest")


def _benchmarks_requested(config: pytest.Config) -> bool:
    # Any ``-m`` expression means the caller picked the suite by hand.
    return bool(config.getoption("-m"))


def pytest_configure(config: pytest.Config) -> None:
    if _benchmarks_requested(config):
        # pytest-benchmark writes its JSON report here and will not create it.
        BENCH_OUTPUT.mkdir(parents=True, exist_ok=True)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if _benchmarks_requested(config):
        return
    skip = pytest.mark.skip(reason="timing a histogram is slow; select with -m benchmark")
    for item in items:
        if item.get_closest_marker("benchmark") is not None:
            item.add_marker(skip)
