"""
Benchmark runner.

Orchestrates benchmark execution:
- One concurrent pipeline per resolver
- Domains benchmarked in list order within each pipeline
- Repeated samples per domain with a randomized pause in between
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Awaitable, Callable, Optional

from .models import BenchmarkResult, ResolveResult, ResolverConfig
from .progress import ProgressFactory, ProgressSink, null_progress
from .query_engine import ResolverProbe
from .results import ResultStore

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_COUNT = 10

# Pause between samples, in seconds
DEFAULT_DELAY_RANGE = (0.2, 1.0)

Sleep = Callable[[float], Awaitable[None]]
ProbeFactory = Callable[[ResolverConfig], ResolverProbe]


def validate_delay_range(delay_range: tuple[float, float]) -> tuple[float, float]:
    low, high = delay_range
    if low < 0 or high < low:
        raise ValueError(f"Invalid delay range: {delay_range}")
    return low, high


async def collect_samples(
    probe: ResolverProbe,
    domain: str,
    sample_count: int,
    delay_range: tuple[float, float] = DEFAULT_DELAY_RANGE,
    rng: Optional[random.Random] = None,
    sleep: Sleep = asyncio.sleep,
) -> list[ResolveResult]:
    """
    Probe a domain repeatedly through one resolver.

    Samples run one after another; a uniformly random pause from
    ``delay_range`` separates consecutive samples.

    Args:
        probe: Resolver probe to sample with
        domain: Domain name to resolve
        sample_count: Number of samples to take
        delay_range: (min, max) pause between samples in seconds
        rng: Random source for the pauses
        sleep: Coroutine used to pause

    Returns:
        Samples in the order they were taken
    """
    if sample_count < 1:
        raise ValueError(f"Sample count must be positive, got {sample_count}")
    low, high = validate_delay_range(delay_range)
    rng = rng or random.Random()

    samples: list[ResolveResult] = []
    for index in range(sample_count):
        samples.append(await probe.probe(domain))
        if index < sample_count - 1:
            await sleep(rng.uniform(low, high))

    return samples


class BenchmarkRunner:
    """
    Orchestrates DNS benchmark runs.

    Every resolver gets its own pipeline; pipelines run concurrently
    and write into a shared ResultStore.
    """

    def __init__(
        self,
        resolvers: list[ResolverConfig],
        sample_count: int = DEFAULT_SAMPLE_COUNT,
        delay_range: tuple[float, float] = DEFAULT_DELAY_RANGE,
        timeout: float = 5.0,
        probe_factory: Optional[ProbeFactory] = None,
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the runner.

        Args:
            resolvers: Resolvers to benchmark
            sample_count: Samples per resolver and domain
            delay_range: (min, max) pause between samples in seconds
            timeout: Query timeout in seconds
            probe_factory: Builds the probe for a resolver (defaults to
                real network clients)
            rng: Random source for the pauses between samples
            sleep: Coroutine used to pause between samples
        """
        if not resolvers:
            raise ValueError("At least one resolver is required")
        names = [r.name for r in resolvers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate resolver names: {duplicates}")
        if sample_count < 1:
            raise ValueError(f"Sample count must be positive, got {sample_count}")

        self.resolvers = list(resolvers)
        self.sample_count = sample_count
        self.delay_range = validate_delay_range(delay_range)
        self.rng = rng or random.Random()
        self.sleep = sleep

        if probe_factory is None:
            def probe_factory(resolver: ResolverConfig) -> ResolverProbe:
                return ResolverProbe(resolver, timeout=timeout)

        self.probes = [probe_factory(resolver) for resolver in self.resolvers]

    async def _run_pipeline(
        self,
        probe: ResolverProbe,
        store: ResultStore,
        progress: ProgressSink,
    ) -> None:
        """Benchmark every domain, in order, against one resolver."""
        name = probe.resolver.name
        logger.info("Starting %s (%d domains)", name, len(store))
        progress.start()

        try:
            for domain in store.domains:
                samples = await collect_samples(
                    probe,
                    domain,
                    self.sample_count,
                    delay_range=self.delay_range,
                    rng=self.rng,
                    sleep=self.sleep,
                )
                store.set_result(domain, name, samples)
                progress.increment(1)
        finally:
            progress.stop()

        logger.info("Finished %s with %d failures", name, len(probe.failures))

    async def run(
        self,
        domains: list[str],
        progress_factory: Optional[ProgressFactory] = None,
    ) -> BenchmarkResult:
        """
        Run the benchmark for all resolvers.

        Args:
            domains: Domains to benchmark, in order
            progress_factory: Creates a progress sink per resolver

        Returns:
            BenchmarkResult with all samples and failures
        """
        store = ResultStore(domains)
        if not len(store):
            raise ValueError("At least one domain is required")

        progress_factory = progress_factory or null_progress
        for probe in self.probes:
            probe.failures.clear()
        started_at = datetime.now()

        await asyncio.gather(*(
            self._run_pipeline(
                probe,
                store,
                progress_factory(probe.resolver, len(store)),
            )
            for probe in self.probes
        ))

        result = BenchmarkResult(
            started_at=started_at,
            completed_at=datetime.now(),
            sample_count=self.sample_count,
            resolvers=self.resolvers,
            rows=store.rows(),
            failures={
                probe.resolver.name: list(probe.failures)
                for probe in self.probes
            },
        )
        logger.info(
            "Benchmark finished in %.1fs with %d failures",
            result.duration_seconds, result.failure_count,
        )
        return result

    async def close(self):
        """Clean up resources."""
        for probe in self.probes:
            await probe.close()
