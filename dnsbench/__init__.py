"""
dnsbench - DNS resolver latency benchmarking tool.

Times UDP, DNS-over-HTTPS and DNS-over-TLS resolution across public
resolvers and aggregates repeated samples.
"""

__version__ = "1.0.0"

from .models import ResolveResult, ResolverConfig, BenchmarkResult
from .query_engine import ResolverProbe
from .runner import BenchmarkRunner
from .statistics import aggregate

__all__ = [
    "__version__",
    "ResolveResult",
    "ResolverConfig",
    "BenchmarkResult",
    "ResolverProbe",
    "BenchmarkRunner",
    "aggregate",
]
