# Randomized numerical linear algebra package

from .algos import *  # noqa: F401,F403
from .algos import __all__ as _algos_all
from .benchmark_common import BenchmarkResult, AlgorithmBenchmark, ComparisonRunner, ResultsVisualizer
from .matrix_generators import MatrixGenerator

__version__ = "0.1.0"

__all__ = list(_algos_all) + [
    'BenchmarkResult',
    'AlgorithmBenchmark',
    'ComparisonRunner',
    'ResultsVisualizer',
    'MatrixGenerator',
]
