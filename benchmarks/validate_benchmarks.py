#!/usr/bin/env python3
"""Check histogram benchmark outputs against regression thresholds.

Run after ``benchmarks/bench_hstg.py``. Reads the CSVs from ``bench_out`` (or
the directory given on the command line), evaluates each check per codec and
writes a markdown summary next to the inputs. Exits non-zero when any check
fails so CI surfaces the regression.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Dict, List, NamedTuple

import pandas as pd


# Percentile answers are bin lower bounds, so the error is measured in bins:
# one bin for the binning itself plus one for the rank rounding.
ACCURACY_ERROR_BINS_MAX = 2.0
THROUGHPUT_MIN_UPS = 20_000
LATENCY_P95_MAX_US = 5_000.0
MERGE_TIME_MAX_S = 1.0
# Sorted input must not be slower than shuffled input of the same shape.
SORTED_SPEEDUP_MIN = 1.0

REQUIRED_ARTIFACTS = ("accuracy.csv", "update_throughput.csv", "query_latency.csv", "merge.csv")


class Check(NamedTuple):
    threshold: str
    observed: Dict[str, float]
    ok: bool


def _load_artifacts(outdir: Path) -> Dict[str, pd.DataFrame]:
    frames: Dict[str, pd.DataFrame] = {}
    for name in REQUIRED_ARTIFACTS:
        path = outdir / name
        if not path.exists():
            raise FileNotFoundError(f"Expected benchmark artifact missing: {path}")
        frames[name] = pd.read_csv(path)
    return frames


def _per_codec(df: pd.DataFrame, column: str, how: str) -> Dict[str, float]:
    if df.empty:
        return {}
    grouped = df.groupby("codec")[column]
    if how == "max":
        series = grouped.max()
    elif how == "min":
        series = grouped.min()
    else:
        series = grouped.quantile(0.95)
    return {codec: round(float(value), 4) for codec, value in series.items()}


def _check_accuracy(df: pd.DataFrame) -> Check:
    observed = _per_codec(df, "error_bins", "max")
    ok = all(v <= ACCURACY_ERROR_BINS_MAX for v in observed.values())
    return Check(f"<= {ACCURACY_ERROR_BINS_MAX} bins", observed, ok)


def _check_throughput(df: pd.DataFrame) -> Check:
    observed = _per_codec(df, "updates_per_sec", "min")
    ok = all(v >= THROUGHPUT_MIN_UPS for v in observed.values())
    return Check(f">= {THROUGHPUT_MIN_UPS} updates/sec", observed, ok)


def _check_latency(df: pd.DataFrame) -> Check:
    observed = _per_codec(df, "latency_us", "p95")
    ok = all(v <= LATENCY_P95_MAX_US for v in observed.values())
    return Check(f"p95 <= {LATENCY_P95_MAX_US} µs", observed, ok)


def _check_merge(df: pd.DataFrame) -> Check:
    observed = _per_codec(df, "merge_time_s", "max")
    ok = all(v <= MERGE_TIME_MAX_S for v in observed.values())
    return Check(f"<= {MERGE_TIME_MAX_S} s", observed, ok)


def _check_sorted_speedup(df: pd.DataFrame) -> Check:
    # The "sorted" stream is the "exponential" sample in ascending order.
    pivot = df[df["distribution"].isin(["sorted", "exponential"])].pivot_table(
        index=["codec", "N"], columns="distribution", values="updates_per_sec"
    )
    if pivot.empty or not {"sorted", "exponential"} <= set(pivot.columns):
        return Check("skipped (needs sorted + exponential runs)", {}, True)
    ratio = (pivot["sorted"] / pivot["exponential"]).groupby(level="codec").min()
    observed = {codec: round(float(v), 3) for codec, v in ratio.items()}
    ok = all(v >= SORTED_SPEEDUP_MIN for v in observed.values())
    return Check(f">= {SORTED_SPEEDUP_MIN}x", observed, ok)


def _summarise(results: Dict[str, Check]) -> str:
    lines: List[str] = ["# Histogram benchmark validation", ""]
    lines.append("| Check | Threshold | Worst codec | Status |")
    lines.append("| --- | --- | --- | --- |")
    for name, check in results.items():
        worst = ", ".join(f"{codec}={value}" for codec, value in check.observed.items()) or "n/a"
        status = "PASS" if check.ok else "FAIL"
        lines.append(f"| {name} | {check.threshold} | {worst} | {status} |")
    lines.append("")
    lines.append("```json")
    lines.append(json.dumps({name: check._asdict() for name, check in results.items()}, indent=2, sort_keys=True))
    lines.append("```")
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("outdir", nargs="?", default="bench_out", help="Directory containing benchmark CSVs")
    parser.add_argument("--summary", default="bench_summary.md", help="Filename for the generated markdown summary")
    args = parser.parse_args()

    outdir = Path(args.outdir)
    frames = _load_artifacts(outdir)

    results = {
        "Accuracy": _check_accuracy(frames["accuracy.csv"]),
        "Update throughput": _check_throughput(frames["update_throughput.csv"]),
        "Sorted-input speedup": _check_sorted_speedup(frames["update_throughput.csv"]),
        "Query latency": _check_latency(frames["query_latency.csv"]),
        "Merge time": _check_merge(frames["merge.csv"]),
    }

    summary_path = outdir / args.summary
    summary_path.write_text(_summarise(results), encoding="utf-8")
    print(summary_path.read_text(encoding="utf-8"))

    if not all(check.ok for check in results.values()):
        raise SystemExit("Benchmark regression detected; see summary above.")


if __name__ == "__main__":
    main()
