# Jacob Mitchell, Kyle Axtell
# CS 456 - Data Compression
# experiments.py

"""
Experiment runner for the Huffman code-table core

Runs repeated build / save / load / encode / translate passes over
synthetic datasets and records timings, sizes and code quality

Outputs (in --outdir):
  - metrics.csv     (raw row per run per configuration)
  - summary.csv     (grouped mean/stdev)
  - depth.csv       (tree depth for maximally skewed weight tables)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 64 --no_exp2
  python experiments.py --outdir results --exp1_generators uniform256,zipf128,english_like

Notes:
  Timings include the code table text round trip, so they are not a
  pure measure of tree construction.
"""

from __future__ import annotations

import argparse
import csv
import io
import math
import random
import statistics
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import matplotlib.pyplot as plt

import huffman as huff
from bitstream import BitInputStream, BitOutputStream
from compressor import encode, freq_table


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(ft: List[int]) -> float:
    # bits per symbol lower bound for any prefix code on this distribution
    total = sum(ft)
    return -sum((c / total) * math.log2(c / total) for c in ft if c > 0)


# Synthetic dataset generators

def _sample(rng: random.Random, cdf: List[float]) -> int:
    r = rng.random()
    lo, hi = 0, len(cdf) - 1
    while lo < hi:
        mid = (lo + hi) // 2
        if r <= cdf[mid]:
            hi = mid
        else:
            lo = mid + 1
    return lo

def _cdf(weights: List[float]) -> List[float]:
    total = sum(weights)
    cdf = []
    acc = 0.0
    for w in weights:
        acc += w / total
        cdf.append(acc)
    cdf[-1] = 1.0
    return cdf

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(0, alphabet) for _ in range(size))

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    others = [i for i in range(256) if i != dominant]
    return bytes(dominant if rng.random() < dom_frac else rng.choice(others) for _ in range(size))

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([1.0 / ((i + 1) ** s) for i in range(alphabet)])
    return bytes(_sample(rng, cdf) for _ in range(size))

ENGLISH_CHARS = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"

def _english_weight(ch: str) -> float:
    if ch == ' ':
        return 13.0
    if ch == '\n':
        return 1.5
    if ch.lower() in "etaoinshrdlu":
        return 6.0
    if ch.lower() in "cmfwgypbvk":
        return 2.5
    return 1.2

def gen_english_like(size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    cdf = _cdf([_english_weight(ch) for ch in ENGLISH_CHARS])
    return bytes(ord(ENGLISH_CHARS[_sample(rng, cdf)]) for _ in range(size))

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform16": lambda size, seed: gen_uniform(size, alphabet=16, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf256": lambda size, seed: gen_zipf_like(size, alphabet=256, s=1.5, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> Tuple[str, bytes]:
    """
    Unknown dataset names fall back to uniform256 so one typo does not
    throw away a whole batch of runs
    """
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        print(f"WARNING: unknown generator {name!r}, using uniform256")
        return f"{name}_fallback_uniform256", gen_uniform(size_bytes, alphabet=256, seed=seed)
    return name, fn(size_bytes, seed)

def doubling_weights(n: int) -> Dict[int, int]:
    # 1, 1, 2, 4, 8, ... makes every merge absorb the previous subtree,
    # giving a tree of depth n - 1
    weights = {0: 1}
    for symbol in range(1, n):
        weights[symbol] = 1 << (symbol - 1)
    return weights


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int
    tree_depth: int

    build_ms: float
    save_ms: float
    load_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    table_bytes: int
    compressed_bytes: int
    compression_ratio: float
    mean_code_bits: float
    entropy_bits: float

    table_roundtrip_ok: int  # 1 or 0
    correctness_ok: int  # 1 or 0


def run_one(data: bytes) -> MetricRow:
    ft = freq_table(data)

    t0 = now_ns()
    root = huff.build_huffman_tree(ft)
    t1 = now_ns()

    table = io.StringIO()
    huff.save_code_table(root, table)
    t2 = now_ns()

    loaded = huff.load_code_table(io.StringIO(table.getvalue()))
    t3 = now_ns()

    codes = huff.generate_huffman_codes(root)
    payload = io.BytesIO()
    bits = BitOutputStream(payload)
    encode(data, codes, bits)
    pad_bits = bits.close()
    t4 = now_ns()

    decoded = bytearray()
    if isinstance(loaded, huff.Leaf):
        decoded.extend([loaded.symbol] * len(data))
    else:
        huff.translate(loaded, BitInputStream(payload.getvalue(), pad_bits), decoded)
    t5 = now_ns()

    build_ms = ns_to_ms(t1 - t0)
    save_ms = ns_to_ms(t2 - t1)
    load_ms = ns_to_ms(t3 - t2)
    encode_ms = ns_to_ms(t4 - t3)
    decode_ms = ns_to_ms(t5 - t4)

    n = max(1, len(data))
    compressed = len(payload.getvalue())
    return MetricRow(
        exp_name="",
        dataset_name="",
        file_size_bytes=len(data),
        run_id=0,
        unique_symbols=len(codes),
        tree_depth=huff.tree_depth(root),
        build_ms=build_ms,
        save_ms=save_ms,
        load_ms=load_ms,
        encode_ms=encode_ms,
        decode_ms=decode_ms,
        total_ms=build_ms + save_ms + load_ms + encode_ms + decode_ms,
        table_bytes=len(table.getvalue().encode("utf-8")),
        compressed_bytes=compressed,
        compression_ratio=compressed / n,
        mean_code_bits=bits.bits_written / n,
        entropy_bits=shannon_entropy(ft),
        table_roundtrip_ok=1 if huff.generate_huffman_codes(loaded) == codes else 0,
        correctness_ok=1 if bytes(decoded) == data else 0,
    )


def depth_experiment(max_alphabet: int = 256) -> List[Tuple[int, int, float]]:
    """(alphabet size, tree depth, save+load ms) for doubling weight tables"""
    results = []
    n = 2
    while n <= max_alphabet:
        root = huff.build_huffman_tree(doubling_weights(n))
        t0 = now_ns()
        table = io.StringIO()
        huff.save_code_table(root, table)
        huff.load_code_table(io.StringIO(table.getvalue()))
        t1 = now_ns()
        results.append((n, huff.tree_depth(root), ns_to_ms(t1 - t0)))
        n *= 2
    return results


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    fields = list(MetricRow.__dataclass_fields__.keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in fields})


SUMMARY_METRICS = ("compression_ratio", "mean_code_bits", "build_ms", "load_ms", "decode_ms", "total_ms")

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.exp_name, r.dataset_name, r.file_size_bytes), []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs", "entropy_bits"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b), items in sorted(key_to.items()):
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "entropy_bits": statistics.mean(x.entropy_bits for x in items),
                "correctness_ok_rate": sum(x.correctness_ok and x.table_roundtrip_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)



# Plotting

def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    x = list(range(len(datasets)))

    def mean_for(dataset: str, field: str) -> float:
        return statistics.mean(getattr(r, field) for r in exp_rows if r.dataset_name == dataset)

    plt.figure()
    plt.plot(x, [mean_for(d, "mean_code_bits") for d in datasets], marker="o", label="huffman")
    plt.plot(x, [mean_for(d, "entropy_bits") for d in datasets], marker="x", linestyle="--", label="entropy")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Code Length vs Entropy by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_code_length.png", dpi=200)
    plt.close()

    plt.figure()
    for field in ("build_ms", "load_ms", "decode_ms"):
        plt.plot(x, [mean_for(d, field) for d in datasets], marker="o", label=field[:-3])
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Time (ms)")
    plt.title("Experiment 1: Stage Time by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_stage_time.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))

        def mean_size(size: int, field: str) -> float:
            return statistics.mean(getattr(r, field) for r in dist_rows if r.file_size_bytes == size)

        plt.figure()
        for field in ("encode_ms", "decode_ms", "total_ms"):
            plt.plot(sizes, [mean_size(s, field) for s in sizes], marker="o", label=field[:-3])
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Runtime vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_time_{dist}.png", dpi=200)
        plt.close()


def plot_depth(results: List[Tuple[int, int, float]], outdir: Path) -> None:
    if not results:
        return
    sizes = [n for n, _, _ in results]

    plt.figure()
    plt.plot(sizes, [d for _, d, _ in results], marker="o")
    plt.xlabel("Alphabet Size")
    plt.ylabel("Tree Depth")
    plt.title("Experiment 3: Depth of Doubling-Weight Trees")
    plt.tight_layout()
    plt.savefig(outdir / "exp3_depth.png", dpi=200)
    plt.close()




# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (skewed tree depth)")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=256, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str, default="uniform256,zipf128,repetitive90,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_kb", type=int, default=2048, help="Experiment 2 max size in KB (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,english_like",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--exp3_max_alphabet", type=int, default=256, help="Largest alphabet for the depth experiment")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                dataset_name, data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                row = run_one(data)
                row.exp_name = "exp1_distribution"
                row.dataset_name = dataset_name
                row.run_id = run_id
                rows.append(row)

    # Experiment 2: size scaling (powers of 2)
    if not args.no_exp2:
        max_bytes = max(1, args.exp2_max_kb) * 1024
        sizes: List[int] = []
        s = max(1, args.exp2_min_kb) * 1024
        while s <= max_bytes:
            sizes.append(s)
            s *= 2

        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    dataset_name, data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    row = run_one(data)
                    row.exp_name = "exp2_size_scaling"
                    row.dataset_name = dataset_name
                    row.run_id = run_id
                    rows.append(row)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)
    plot_experiment_1(rows, outdir)
    plot_experiment_2(rows, outdir)

    # Experiment 3: doubling weights push depth to alphabet size - 1
    if not args.no_exp3:
        depth_results = depth_experiment(min(256, max(2, args.exp3_max_alphabet)))
        with (outdir / "depth.csv").open("w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["alphabet_size", "tree_depth", "table_roundtrip_ms"])
            w.writerows(depth_results)
        plot_depth(depth_results, outdir)

    ok_rate = sum(r.correctness_ok and r.table_roundtrip_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    print("Charts saved in:", outdir.resolve())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
