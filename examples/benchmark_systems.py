#!/usr/bin/env python
"""
Benchmark causalSURD on synthetic systems with known causal structure.

Each registered benchmark system is decomposed and its redundant, unique
and synergistic causality is printed next to the expected dominant
component. Binary systems use 2 bins per variable, continuous ones 8.
"""

import logging

import numpy as np

from causalsurd import decompose_from_data, run_diagnostics
from causalsurd.simulation import BENCHMARK_SYSTEMS, generate_benchmark_system

EXPECTED = {
    "duplicated": "redundant",
    "independent": "unique",
    "xor": "synergistic",
    "redundant_sources": "redundant",
    "mediator_chain": "unique",
}

BINARY_SYSTEMS = {"duplicated", "independent", "xor"}


def run_benchmark(n: int = 10000, seed: int = 0):
    """Decompose every benchmark system and print a summary table."""
    print("=" * 72)
    print("causalSURD Benchmark: Synergistic-Unique-Redundant Decomposition")
    print("=" * 72)
    print(f"\nSamples per system: {n}")
    print("-" * 72)
    print(f"{'System':<20} {'R':>8} {'U':>8} {'S':>8} {'Leak':>8}  {'Dominant':<12} ")
    print("-" * 72)

    hits = []
    for name in BENCHMARK_SYSTEMS:
        data = generate_benchmark_system(name, n=n, seed=seed)
        bins = [2, 2, 2] if name in BINARY_SYSTEMS else [8, 8, 8]
        result = decompose_from_data(data, bins)

        totals = {
            "redundant": result.total_redundant,
            "unique": result.total_unique,
            "synergistic": result.total_synergistic,
        }
        dominant = max(totals, key=totals.get)
        correct = dominant == EXPECTED[name]
        hits.append(correct)

        print(f"{name:<20} {totals['redundant']:>8.3f} {totals['unique']:>8.3f} "
              f"{totals['synergistic']:>8.3f} {result.info_leak:>8.3f}  "
              f"{dominant:<12} {'✓' if correct else '✗'}")

        diagnostics = run_diagnostics(result)
        if not diagnostics.all_passed:
            print(f"  {diagnostics}")

    print("\n" + "=" * 72)
    print(f"Dominant component matches expectation: {np.mean(hits):.0%}")
    return hits


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_benchmark()
    print("\nDone!")
