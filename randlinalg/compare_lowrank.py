"""Randomized Low-Rank Approximation Comparison Framework.

Benchmarks the randomized SVD variants against an exact truncated SVD
across a sweep of ranks, measuring execution time, approximation error, and
memory usage.
"""

import argparse
from pathlib import Path

import numpy as np

from .benchmark_common import (
    ComparisonRunner,
    ResultsVisualizer,
    default_algorithms,
    results_to_frame,
)
from .matrix_generators import MatrixGenerator

MATRIX_TYPES = ("random", "lowrank", "decay")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="randlinalg-compare",
        description="Compare randomized low-rank approximation algorithms",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 500×500 Gaussian matrix, test ranks 1-50 (outputs to results/)
  randlinalg-compare --matrix-size 500 --max-rank 50

  # Rank-25 signal plus light noise, 10 evenly-spaced ranks up to 100
  randlinalg-compare -n 500 -r 100 --num-ranks 10 --matrix-type lowrank --true-rank 25

  # Geometric singular value decay, two power iterations, no plots
  randlinalg-compare -n 1000 -r 60 --matrix-type decay --power-iters 2 --no-plots
        """,
    )

    parser.add_argument(
        "--matrix-size",
        "-n",
        type=int,
        required=True,
        help="Size N of N×N test matrix",
    )
    parser.add_argument(
        "--max-rank",
        "-r",
        type=int,
        required=True,
        help="Maximum rank to test",
    )
    parser.add_argument(
        "--num-ranks",
        "-k",
        type=int,
        default=None,
        help="Number of ranks to test (evenly distributed from 1 to max-rank). "
        "If not specified, tests every rank from 1 to max-rank.",
    )
    parser.add_argument(
        "--matrix-type",
        choices=MATRIX_TYPES,
        default="random",
        help="Test matrix family (default: random)",
    )
    parser.add_argument(
        "--true-rank",
        type=int,
        default=10,
        help="Signal rank for --matrix-type lowrank (default: 10)",
    )
    parser.add_argument(
        "--noise-level",
        type=float,
        default=0.1,
        help="Noise standard deviation for --matrix-type lowrank (default: 0.1)",
    )
    parser.add_argument(
        "--decay",
        type=float,
        default=0.9,
        help="Singular value ratio for --matrix-type decay (default: 0.9)",
    )
    parser.add_argument(
        "--oversamples",
        "-p",
        type=int,
        default=10,
        help="Oversampling for the randomized range finders (default: 10)",
    )
    parser.add_argument(
        "--power-iters",
        "-q",
        type=int,
        default=1,
        help="Subspace iterations for rSVD-SI and rSVD-SRFT (default: 1)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=str,
        default="results",
        help="Directory to save the CSV and plots (default: results)",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Only write the CSV, skip the matplotlib figures",
    )
    return parser


def make_generator(args):
    """Matrix factory and a label describing it."""
    n, seed = args.matrix_size, args.seed
    if args.matrix_type == "lowrank":
        label = f"lowrank_r{args.true_rank}_noise{args.noise_level}_n{n}"
        return (
            lambda: MatrixGenerator.lowrank_with_noise(n, n, args.true_rank, args.noise_level, seed),
            label,
        )
    if args.matrix_type == "decay":
        label = f"decay{args.decay}_n{n}"
        return lambda: MatrixGenerator.decaying_spectrum(n, n, args.decay, seed), label
    return lambda: MatrixGenerator.random_matrix(n, n, seed), f"n{n}"


def print_summary(results, methods):
    print("\n" + "=" * 60)
    print("SUMMARY STATISTICS")
    print("=" * 60)

    successful_results = [r for r in results if r.success]
    for method in methods:
        method_results = [r for r in successful_results if r.method_name == method]
        if method_results:
            avg_time = np.mean([r.time_sec for r in method_results])
            avg_error_spectral = np.mean([r.error_spectral for r in method_results])
            avg_error_frobenius = np.mean([r.error_frobenius for r in method_results])
            avg_mem_kb = np.mean([r.memory_bytes / 1024 for r in method_results])
            print(f"\n{method}:")
            print(f"  Average time:            {avg_time:.4f}s")
            print(f"  Average spectral error:  {avg_error_spectral:.4e}")
            print(f"  Average Frobenius error: {avg_error_frobenius:.4e}")
            print(f"  Average memory:          {avg_mem_kb:.1f} KB")

    failed_results = [r for r in results if not r.success]
    if failed_results:
        print(f"\n{len(failed_results)} algorithm runs failed:")
        for r in failed_results:
            print(f"  {r.method_name} at rank {r.rank}: {r.error_message}")


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    generator, label = make_generator(args)

    runner = ComparisonRunner(
        matrix_generator=generator,
        max_rank=args.max_rank,
        num_ranks=args.num_ranks,
        algorithms=default_algorithms(args.oversamples, args.power_iters, args.seed),
        matrix_description=f"{args.matrix_type} test matrix ({label}, seed={args.seed})",
    )
    runner.setup()

    info = MatrixGenerator.get_matrix_info(runner.A)
    print("\nMatrix statistics:")
    print(f"  Shape: {info['shape']}")
    print(f"  Range: [{info['min']:.4f}, {info['max']:.4f}]")
    print(f"  Mean: {info['mean']:.4f}, Std: {info['std']:.4f}")
    print(f"  Numerical rank: {info['estimated_rank']}\n")

    results = runner.run_all()

    output_dir = Path(args.output_dir) / label
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / "results.csv"
    results_to_frame(results).to_csv(csv_path, index=False)
    print(f"Results written to {csv_path}")

    visualizer = ResultsVisualizer(results, matrix_type_label=label)
    if not args.no_plots:
        print("Generating plots...")
        visualizer.plot_all(save_dir=args.output_dir)

    print_summary(results, visualizer.methods)
    print("\nComparison complete!")
    return results


if __name__ == "__main__":
    main()
