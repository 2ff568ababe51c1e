#!/usr/bin/env python3
"""Benchmark runner for the local hstg histogram."""

from __future__ import annotations

import argparse
import hashlib
import math
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from hstg import Histogram, HistogramConfig


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--outdir", default="bench_out", help="Directory for benchmark CSV outputs")
    parser.add_argument("--seed", type=int, default=42, help="Base RNG seed for reproducibility")
    parser.add_argument("--Ns", nargs="+", default=["1e4", "1e5"], help="Population sizes to benchmark")
    parser.add_argument(
        "--widths", nargs="+", default=["50", "500"], help="Linear codec bin widths to benchmark"
    )
    parser.add_argument("--bases", nargs="+", default=["2", "10"], help="Log codec bases to benchmark")
    parser.add_argument(
        "--distributions",
        nargs="+",
        default=["uniform", "exponential", "lognormal", "pareto", "sorted"],
        help="Synthetic latency-like distributions to sample",
    )
    parser.add_argument(
        "--ranks",
        nargs="+",
        default=["1", "5", "10", "25", "50", "75", "90", "95", "99"],
        help="Percentile ranks (0-100) to evaluate",
    )
    parser.add_argument("--shards", type=int, default=8, help="Number of shards for the merge benchmark")
    return parser.parse_args()


def _to_int_list(values: Iterable[str]) -> List[int]:
    return [int(float(v)) for v in values]


def _to_float_list(values: Iterable[str]) -> List[float]:
    return [float(v) for v in values]


def _hash_seed(seed: int, *parts: object) -> int:
    material = "::".join(str(p) for p in (seed,) + parts)
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


def _uniform(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.integers(0, 10_000, size)


def _exponential(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.exponential(scale=500.0, size=size)


def _lognormal(rng: np.random.Generator, size: int) -> np.ndarray:
    return rng.lognormal(mean=6.0, sigma=1.0, size=size)


def _pareto(rng: np.random.Generator, size: int) -> np.ndarray:
    return (rng.pareto(a=1.5, size=size) + 1.0) * 100.0


def _sorted(rng: np.random.Generator, size: int) -> np.ndarray:
    # Monotonic stream: the insertion cursor never goes back to the head.
    return np.sort(rng.exponential(scale=500.0, size=size))


DATA_GENERATORS: Dict[str, Callable[[np.random.Generator, int], np.ndarray]] = {
    "uniform": _uniform,
    "exponential": _exponential,
    "lognormal": _lognormal,
    "pareto": _pareto,
    "sorted": _sorted,
}


def _validate_distributions(names: Sequence[str]) -> None:
    unknown = sorted(set(names) - DATA_GENERATORS.keys())
    if unknown:
        raise ValueError(f"Unknown distributions requested: {', '.join(unknown)}")


def _configs(widths: Sequence[int], bases: Sequence[int]) -> List[Tuple[str, HistogramConfig]]:
    out = [(f"linear/{w}", HistogramConfig(codec="linear", bin_width=w)) for w in widths]
    out.extend((f"log/{b}", HistogramConfig(codec="log", log_base=b)) for b in bases)
    return out


def main() -> None:
    args = _parse_args()

    Ns = _to_int_list(args.Ns)
    ranks = _to_float_list(args.ranks)
    configs = _configs(_to_int_list(args.widths), _to_int_list(args.bases))
    _validate_distributions(args.distributions)

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    accuracy_records: List[Dict[str, object]] = []
    throughput_records: List[Dict[str, object]] = []
    latency_records: List[Dict[str, object]] = []
    merge_records: List[Dict[str, object]] = []

    for dist in args.distributions:
        for N in Ns:
            combo_seed = _hash_seed(args.seed, dist, N)
            data_rng = np.random.default_rng(combo_seed)
            generator = DATA_GENERATORS[dist]
            data = np.floor(generator(data_rng, N)).astype(np.int64)
            values = data.tolist()

            exact_values = np.percentile(data, ranks, method="inverted_cdf")
            exact_map = dict(zip(ranks, (int(v) for v in exact_values)))

            for label, config in configs:
                hist = Histogram.from_config(config)
                start = time.perf_counter()
                for value in values:
                    hist.update(value)
                update_elapsed = time.perf_counter() - start
                updates_per_sec = (N / update_elapsed) if update_elapsed > 0 else math.inf

                throughput_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "codec": label,
                        "bins": hist.bin_count(),
                        "update_time_s": update_elapsed,
                        "updates_per_sec": updates_per_sec,
                    }
                )

                codec = hist.codec
                for rank in ranks:
                    r_start = time.perf_counter()
                    approx = hist.percentile(rank)
                    r_elapsed = time.perf_counter() - r_start
                    latency_records.append(
                        {
                            "distribution": dist,
                            "N": int(N),
                            "codec": label,
                            "bins": hist.bin_count(),
                            "rank": rank,
                            "latency_us": r_elapsed * 1e6,
                        }
                    )
                    exact = exact_map[rank]
                    low, high = codec.bounds(codec.encode(exact))
                    accuracy_records.append(
                        {
                            "distribution": dist,
                            "N": int(N),
                            "codec": label,
                            "mode": "single",
                            "rank": rank,
                            "estimate": approx,
                            "exact": exact,
                            "abs_error": abs(approx - exact),
                            "error_bins": abs(approx - exact) / (high - low),
                        }
                    )

                shard_hists = []
                for shard in np.array_split(data, args.shards):
                    shard_hist = Histogram.from_config(config)
                    shard_hist.extend(shard.tolist())
                    shard_hists.append(shard_hist)

                merge_target = Histogram.from_config(config)
                merge_start = time.perf_counter()
                for shard_hist in shard_hists:
                    merge_target.merge(shard_hist)
                merge_elapsed = time.perf_counter() - merge_start

                merge_records.append(
                    {
                        "distribution": dist,
                        "N": int(N),
                        "codec": label,
                        "shards": int(args.shards),
                        "merge_time_s": merge_elapsed,
                    }
                )

                for rank, approx in zip(ranks, merge_target.percentiles_at(ranks)):
                    exact = exact_map[rank]
                    low, high = codec.bounds(codec.encode(exact))
                    accuracy_records.append(
                        {
                            "distribution": dist,
                            "N": int(N),
                            "codec": label,
                            "mode": "merged",
                            "rank": rank,
                            "estimate": approx,
                            "exact": exact,
                            "abs_error": abs(approx - exact),
                            "error_bins": abs(approx - exact) / (high - low),
                        }
                    )

    accuracy_path = outdir / "accuracy.csv"
    throughput_path = outdir / "update_throughput.csv"
    latency_path = outdir / "query_latency.csv"
    merge_path = outdir / "merge.csv"

    pd.DataFrame.from_records(accuracy_records).to_csv(accuracy_path, index=False)
    pd.DataFrame.from_records(throughput_records).to_csv(throughput_path, index=False)
    pd.DataFrame.from_records(latency_records).to_csv(latency_path, index=False)
    pd.DataFrame.from_records(merge_records).to_csv(merge_path, index=False)

    print("Benchmark artifacts written to:")
    print(f"  {accuracy_path}")
    print(f"  {throughput_path}")
    print(f"  {latency_path}")
    print(f"  {merge_path}")


if __name__ == "__main__":
    main()
