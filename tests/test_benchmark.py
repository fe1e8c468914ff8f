import warnings

import numpy as np
import pandas as pd
import pytest

from randlinalg.algos import ConvergenceWarning
from randlinalg.benchmark_common import (
    AlgorithmBenchmark,
    ComparisonRunner,
    ResultsVisualizer,
    default_algorithms,
    results_to_frame,
)
from randlinalg.compare_lowrank import build_parser, main
from randlinalg.matrix_generators import MatrixGenerator
from randlinalg.svd_lowrank import numpy_svd_lowrank, optimal_error, reconstruction_error


@pytest.fixture(autouse=True)
def _quiet_convergence():
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        yield


class TestMatrixGenerator:
    def test_decaying_spectrum(self):
        A = MatrixGenerator.decaying_spectrum(30, 20, decay=0.8, seed=1)
        np.testing.assert_allclose(
            np.linalg.svd(A, compute_uv=False), 0.8 ** np.arange(20), atol=1e-12
        )

    def test_lowrank_with_noise(self):
        A = MatrixGenerator.lowrank_with_noise(40, 30, 4, 0.0, seed=2)
        assert np.linalg.matrix_rank(A) == 4
        noisy = MatrixGenerator.lowrank_with_noise(40, 30, 4, 0.5, seed=2)
        assert np.linalg.matrix_rank(noisy) == 30

    @pytest.mark.parametrize("true_rank, noise", [(0, 0.1), (30, 0.1), (4, -1.0)])
    def test_lowrank_with_noise_validation(self, true_rank, noise):
        with pytest.raises(ValueError):
            MatrixGenerator.lowrank_with_noise(40, 30, true_rank, noise)

    def test_psd_matrix(self):
        A = MatrixGenerator.psd_matrix(15, seed=3)
        np.testing.assert_allclose(A, A.T)
        assert np.linalg.eigvalsh(A).min() > 0

    def test_matrix_info(self):
        info = MatrixGenerator.get_matrix_info(np.eye(4))
        assert info["shape"] == (4, 4)
        assert info["estimated_rank"] == 4


class TestBaseline:
    def test_numpy_svd_lowrank_is_optimal(self):
        A = MatrixGenerator.random_matrix(20, 15, seed=4)
        F = numpy_svd_lowrank(A, 5)
        assert reconstruction_error(A, F) == pytest.approx(optimal_error(A, 5))
        assert reconstruction_error(A, F, ord="fro") == pytest.approx(
            optimal_error(A, 5, ord="fro")
        )

    def test_numpy_svd_lowrank_validation(self):
        A = np.ones((6, 4))
        with pytest.raises(ValueError):
            numpy_svd_lowrank(A, 0)
        with pytest.raises(ValueError):
            numpy_svd_lowrank(A, 5)

    def test_optimal_error_full_rank(self):
        assert optimal_error(np.eye(3), 3) == 0.0
        with pytest.raises(ValueError):
            optimal_error(np.eye(3), 1, ord=1)


class TestAlgorithmBenchmark:
    def test_success(self):
        A = MatrixGenerator.random_matrix(20, 20, seed=5)
        result = AlgorithmBenchmark("NumPy SVD", numpy_svd_lowrank).run(A, 3)
        assert result.success
        assert result.error_frobenius == pytest.approx(
            reconstruction_error(A, numpy_svd_lowrank(A, 3), ord="fro")
        )
        assert result.error_spectral == pytest.approx(optimal_error(A, 3))
        assert result.time_sec >= 0

    def test_failure_is_recorded(self):
        def reject(A, k):
            raise ValueError("rank too large")

        result = AlgorithmBenchmark("broken", reject).run(np.eye(3), 2)
        assert not result.success
        assert result.error_message == "rank too large"
        assert result.error_spectral == np.inf

    def test_default_algorithms(self):
        names = [a.name for a in default_algorithms()]
        assert names == ["rSVD", "rSVD-SI", "rSVD-SRFT", "rSVD-RE", "FNKZ", "NumPy SVD"]


class TestComparisonRunner:
    def test_requires_exactly_one_matrix_source(self):
        with pytest.raises(ValueError):
            ComparisonRunner(max_rank=2)
        with pytest.raises(ValueError):
            ComparisonRunner(matrix=np.eye(4), matrix_generator=lambda: np.eye(4), max_rank=2)

    def test_run_before_setup(self):
        runner = ComparisonRunner(matrix=np.eye(4), max_rank=2)
        with pytest.raises(RuntimeError):
            runner.run_all()

    @pytest.mark.parametrize("max_rank, num_ranks", [(0, None), (10, None), (3, 5), (3, 0)])
    def test_validation(self, max_rank, num_ranks):
        runner = ComparisonRunner(matrix=np.eye(10), max_rank=max_rank, num_ranks=num_ranks)
        with pytest.raises(ValueError):
            runner.setup()

    def test_ranks_to_test(self):
        runner = ComparisonRunner(matrix=np.eye(50), max_rank=20, num_ranks=5)
        assert runner.ranks_to_test() == [1, 5, 10, 15, 20]
        runner.num_ranks = None
        assert runner.ranks_to_test() == list(range(1, 21))

    def test_run_all(self):
        A = MatrixGenerator.lowrank_with_noise(30, 30, 3, 0.01, seed=6)
        runner = ComparisonRunner(matrix=A, max_rank=3)
        runner.setup()
        results = runner.run_all()
        assert len(results) == 3 * 6
        assert all(r.success for r in results)
        frame = results_to_frame(results)
        assert isinstance(frame, pd.DataFrame)
        assert set(frame["method_name"]) == {a.name for a in default_algorithms()}
        assert {"rank", "time_sec", "error_spectral", "memory_bytes"} <= set(frame.columns)
        baseline = frame[frame["method_name"] == "NumPy SVD"]
        assert (baseline["error_spectral"] > 0).all()


def test_visualizer_writes_plots(tmp_path):
    A = MatrixGenerator.random_matrix(25, 25, seed=7)
    runner = ComparisonRunner(matrix=A, max_rank=2)
    runner.setup()
    out = ResultsVisualizer(runner.run_all(), matrix_type_label="demo").plot_all(tmp_path)
    assert out == tmp_path / "demo"
    for _, filename, *_ in ResultsVisualizer.plots:
        assert (out / filename).exists()


class TestCli:
    def test_parser_defaults(self):
        args = build_parser().parse_args(["-n", "50", "-r", "5"])
        assert args.matrix_type == "random"
        assert args.oversamples == 10
        assert args.power_iters == 1
        assert not args.no_plots

    def test_parser_requires_size(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["-r", "5"])

    def test_main_prints_matrix_statistics(self, tmp_path, capsys):
        main(["-n", "20", "-r", "1", "--matrix-type", "lowrank", "--true-rank", "2",
              "--noise-level", "0", "--no-plots", "-o", str(tmp_path)])
        out = capsys.readouterr().out
        assert "Matrix statistics:" in out
        assert "Shape: (20, 20)" in out
        assert "Numerical rank: 2" in out

    def test_main_writes_csv(self, tmp_path):
        results = main(["-n", "30", "-r", "3", "--no-plots", "-o", str(tmp_path)])
        csv_path = tmp_path / "n30" / "results.csv"
        assert csv_path.exists()
        frame = pd.read_csv(csv_path)
        assert len(frame) == len(results) == 18
        assert not list((tmp_path / "n30").glob("*.png"))

    def test_main_decay_with_plots(self, tmp_path):
        main([
            "-n", "40", "-r", "4", "-k", "2", "--matrix-type", "decay",
            "--decay", "0.7", "-o", str(tmp_path),
        ])
        out = tmp_path / "decay0.7_n40"
        assert (out / "results.csv").exists()
        assert (out / "time_vs_rank.png").exists()

    def test_main_lowrank_label(self, tmp_path):
        main([
            "-n", "30", "-r", "2", "--matrix-type", "lowrank", "--true-rank", "3",
            "--noise-level", "0.05", "--no-plots", "-o", str(tmp_path),
        ])
        assert (tmp_path / "lowrank_r3_noise0.05_n30" / "results.csv").exists()
