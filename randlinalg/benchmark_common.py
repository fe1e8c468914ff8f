"""Shared benchmarking infrastructure for randomized low-rank approximations.

This module provides common classes and utilities for benchmarking the
randomized decompositions against an exact truncated SVD across different
matrix types and ranks.
"""

import time
import tracemalloc
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .algos import (
    gaussian_sample,
    rrange_si,
    rsvd,
    rsvd_fnkz,
    rsvd_srft,
    svd_re,
    svd_restricted,
)
from .svd_lowrank import numpy_svd_lowrank, reconstruction_error


@dataclass
class BenchmarkResult:
    """Store results for a single algorithm at a single rank."""

    method_name: str
    rank: int
    time_sec: float
    error_spectral: float
    error_frobenius: float
    memory_bytes: int
    success: bool = True
    error_message: str = ""


class AlgorithmBenchmark:
    """Benchmark a single algorithm."""

    def __init__(self, name: str, func: Callable):
        """
        Args:
            name: Display name for algorithm
            func: Function ``(A, rank) -> (U, S, Vt)`` implementing algorithm
        """
        self.name = name
        self.func = func

    def run(self, A: np.ndarray, rank: int) -> BenchmarkResult:
        """
        Run benchmark for given matrix and rank.

        Failures are recorded in the result rather than raised, so that one
        algorithm rejecting a rank does not abort the whole sweep.

        Args:
            A: input matrix
            rank: desired rank

        Returns:
            BenchmarkResult with all metrics
        """
        try:
            tracemalloc.start()

            start_time = time.perf_counter()
            factors = self.func(A.copy(), rank)
            time_sec = time.perf_counter() - start_time

            _, peak = tracemalloc.get_traced_memory()
            tracemalloc.stop()

            error_spectral, error_frobenius = self._compute_error(A, factors)

            return BenchmarkResult(
                method_name=self.name,
                rank=rank,
                time_sec=time_sec,
                error_spectral=error_spectral,
                error_frobenius=error_frobenius,
                memory_bytes=peak,
                success=True,
            )

        except (ValueError, NotImplementedError, np.linalg.LinAlgError) as e:
            if tracemalloc.is_tracing():
                tracemalloc.stop()
            return BenchmarkResult(
                method_name=self.name,
                rank=rank,
                time_sec=0.0,
                error_spectral=np.inf,
                error_frobenius=np.inf,
                memory_bytes=0,
                success=False,
                error_message=str(e),
            )

    @staticmethod
    def _compute_error(A_original: np.ndarray, factors) -> tuple:
        """Compute both spectral and Frobenius norm errors.

        Returns:
            tuple: (error_spectral, error_frobenius)
        """
        error_spectral = float(reconstruction_error(A_original, factors, ord=2))
        error_frobenius = float(reconstruction_error(A_original, factors, ord="fro"))
        return error_spectral, error_frobenius


def default_algorithms(
    oversamples: int = 10, power_iters: int = 1, seed: int = 42
) -> List[AlgorithmBenchmark]:
    """The randomized SVD variants compared by the CLI, plus the exact baseline."""

    def rsvd_si(A, k):
        Q = rrange_si(A, k, q=power_iters, p=oversamples, rng=seed)
        return svd_restricted(A, Q, k)

    def rsvd_re(A, k):
        Y = A @ gaussian_sample(A.shape[1], k, A.dtype, rng=seed)
        return svd_re(A, Y, rng=seed)

    return [
        AlgorithmBenchmark("rSVD", lambda A, k: rsvd(A, k, p=oversamples, rng=seed)),
        AlgorithmBenchmark("rSVD-SI", rsvd_si),
        AlgorithmBenchmark(
            "rSVD-SRFT",
            lambda A, k: rsvd_srft(A, k, p=oversamples, q=power_iters, rng=seed),
        ),
        AlgorithmBenchmark("rSVD-RE", rsvd_re),
        AlgorithmBenchmark("FNKZ", lambda A, k: rsvd_fnkz(A, k, rng=seed)),
        AlgorithmBenchmark("NumPy SVD", numpy_svd_lowrank),
    ]


class ComparisonRunner:
    """Run comparison across multiple algorithms and ranks."""

    def __init__(
        self,
        matrix: Optional[np.ndarray] = None,
        matrix_generator: Optional[Callable[[], np.ndarray]] = None,
        max_rank: int = None,
        num_ranks: Optional[int] = None,
        algorithms: Optional[List[AlgorithmBenchmark]] = None,
        matrix_description: str = "test matrix",
    ):
        """
        Initialize comparison runner.

        Accepts matrix input in two modes:
        1. Pre-generated matrix
        2. Generator function, called by ``setup()``

        Args:
            matrix: Pre-generated matrix (optional)
            matrix_generator: Function that returns matrix (optional)
            max_rank: maximum rank to test
            num_ranks: number of ranks to test (evenly distributed from 1 to max_rank)
                       if None, tests every rank from 1 to max_rank
            algorithms: algorithms to compare (default: ``default_algorithms()``)
            matrix_description: description for progress output
        """
        if (matrix is None) == (matrix_generator is None):
            raise ValueError("Must provide exactly one of: matrix or matrix_generator")

        self.matrix = matrix
        self.matrix_generator = matrix_generator
        self.max_rank = max_rank
        self.num_ranks = num_ranks
        self.matrix_description = matrix_description
        self.algorithms = algorithms if algorithms is not None else default_algorithms()
        self.A: Optional[np.ndarray] = None
        self.results: List[BenchmarkResult] = []

    def setup(self):
        """Generate/validate test matrix and validate inputs."""
        if self.matrix is not None:
            self.A = self.matrix
            print(f"Using provided {self.matrix_description}...")
        else:
            print(f"Generating {self.matrix_description}...")
            self.A = self.matrix_generator()

        self._validate_inputs()

    def ranks_to_test(self) -> List[int]:
        if self.num_ranks is None:
            return list(range(1, self.max_rank + 1))
        ranks = np.linspace(1, self.max_rank, self.num_ranks, dtype=int)
        return sorted(set(int(r) for r in ranks))

    def run_all(self) -> List[BenchmarkResult]:
        """Run all algorithms for all ranks."""
        if self.A is None:
            raise RuntimeError("Must call setup() before run_all()")

        ranks = self.ranks_to_test()
        print(f"Running comparisons for {len(ranks)} ranks up to {self.max_rank}...")
        print(f"Testing ranks: {ranks}\n")

        for idx, rank in enumerate(ranks, 1):
            print(f"Rank {rank} ({idx}/{len(ranks)}):")

            for algo in self.algorithms:
                result = algo.run(self.A, rank)
                self.results.append(result)

                if result.success:
                    print(
                        f"  {algo.name:12s}: {result.time_sec:.4f}s, "
                        f"spectral={result.error_spectral:.4e}, "
                        f"frobenius={result.error_frobenius:.4e}, "
                        f"mem={result.memory_bytes // 1024}KB"
                    )
                else:
                    print(f"  {algo.name:12s}: FAILED - {result.error_message}")

            print()

        return self.results

    def _validate_inputs(self):
        """Validate matrix dimensions, max_rank, and num_ranks."""
        if self.A is None:
            raise RuntimeError("Matrix not initialized")

        m, n = self.A.shape

        if m < 2 or n < 2:
            raise ValueError(f"Matrix dimensions must be at least 2×2, got {m}×{n}")

        if self.max_rank is None or self.max_rank < 1:
            raise ValueError(f"Max rank must be at least 1, got {self.max_rank}")

        if self.max_rank >= min(m, n):
            raise ValueError(
                f"Max rank ({self.max_rank}) must be less than "
                f"min matrix dimension ({min(m, n)})"
            )

        if self.num_ranks is not None:
            if self.num_ranks < 1:
                raise ValueError(
                    f"Number of ranks must be at least 1, got {self.num_ranks}"
                )
            if self.num_ranks > self.max_rank:
                raise ValueError(
                    f"Number of ranks ({self.num_ranks}) cannot exceed "
                    f"max rank ({self.max_rank})"
                )


def results_to_frame(results: List[BenchmarkResult]) -> pd.DataFrame:
    """One row per (method, rank) run."""
    return pd.DataFrame([asdict(r) for r in results])


class ResultsVisualizer:
    """Create visualization plots from benchmark results."""

    colors = {
        "rSVD": "#1f77b4",
        "rSVD-SI": "#17becf",
        "rSVD-SRFT": "#ff7f0e",
        "rSVD-RE": "#2ca02c",
        "FNKZ": "#9467bd",
        "NumPy SVD": "#8c564b",
    }
    markers = {
        "rSVD": "o",
        "rSVD-SI": "v",
        "rSVD-SRFT": "s",
        "rSVD-RE": "^",
        "FNKZ": "D",
        "NumPy SVD": "P",
    }

    # (attribute, file name, title, y label, log scale, scale factor)
    plots = [
        ("time_sec", "time_vs_rank.png", "Execution Time vs Rank", "Time (seconds)", True, 1.0),
        ("error_spectral", "error_spectral_vs_rank.png",
         "Approximation Error (Spectral Norm) vs Rank", "Spectral Norm Error", True, 1.0),
        ("error_frobenius", "error_frobenius_vs_rank.png",
         "Approximation Error (Frobenius Norm) vs Rank", "Frobenius Norm Error", True, 1.0),
        ("memory_bytes", "memory_vs_rank.png",
         "Peak Memory Usage vs Rank", "Memory (MB)", False, 1.0 / (1024 * 1024)),
    ]

    def __init__(self, results: List[BenchmarkResult], matrix_type_label: str = "results"):
        """
        Initialize visualizer.

        Args:
            results: List of benchmark results
            matrix_type_label: subfolder name for the plots (e.g., "lowrank_r25_n500")
        """
        self.results = results
        self.matrix_type_label = matrix_type_label
        self.methods = sorted(set(r.method_name for r in results if r.success))

    def plot_all(self, save_dir: str = ".") -> Path:
        """Generate all plots into ``save_dir/matrix_type_label``."""
        experiment_dir = Path(save_dir) / self.matrix_type_label
        experiment_dir.mkdir(parents=True, exist_ok=True)

        for attr, filename, title, ylabel, log_scale, factor in self.plots:
            self.plot_metric(attr, experiment_dir / filename, title, ylabel, log_scale, factor)

        print(f"\nPlots saved to {experiment_dir}:")
        for _, filename, *_ in self.plots:
            print(f"  - {filename}")
        return experiment_dir

    def plot_metric(
        self,
        attr: str,
        save_path: Path,
        title: str,
        ylabel: str,
        use_log_scale: bool = False,
        factor: float = 1.0,
    ):
        """Plot one result attribute vs rank for all methods."""
        fig, ax = plt.subplots(figsize=(10, 6))

        for method in self.methods:
            data = [
                (r.rank, getattr(r, attr) * factor)
                for r in self.results
                if r.method_name == method and r.success
            ]
            if data:
                ranks, values = zip(*data)
                ax.plot(
                    ranks,
                    values,
                    marker=self.markers.get(method, "o"),
                    color=self.colors.get(method, "gray"),
                    linewidth=2,
                    markersize=6,
                    label=method,
                )

        ax.set_title(title, fontsize=14, fontweight="bold")
        ax.set_xlabel("Rank", fontsize=12)
        ax.set_ylabel(ylabel, fontsize=12)
        ax.grid(True, alpha=0.3, linestyle="--")
        ax.legend(fontsize=10, loc="best")
        if use_log_scale:
            ax.set_yscale("log")

        fig.savefig(save_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
