import asyncio
import random

import pytest

from conftest import FakeClient, fake_clients, make_resolver, no_sleep
from dnsbench.models import Transport
from dnsbench.query_engine import ResolverProbe
from dnsbench.runner import BenchmarkRunner, collect_samples


class RecordingProgress:
    def __init__(self, resolver, total):
        self.resolver = resolver
        self.total = total
        self.events = []

    def start(self):
        self.events.append("start")

    def increment(self, by=1):
        self.events.append(by)

    def stop(self):
        self.events.append("stop")


def healthy_factory(resolver):
    return ResolverProbe(resolver, clients=fake_clients())


def broken_factory(broken_names):
    def factory(resolver):
        if resolver.name in broken_names:
            clients = {
                t: FakeClient(t, exc=OSError(f"{t.value} down")) for t in Transport
            }
        else:
            clients = fake_clients()
        return ResolverProbe(resolver, clients=clients)
    return factory


def test_collect_returns_samples_in_order(healthy_probe):
    samples = asyncio.run(collect_samples(healthy_probe, "example.com", 5, sleep=no_sleep))

    assert len(samples) == 5
    for transport in Transport:
        assert healthy_probe.clients[transport].calls == ["example.com"] * 5


def test_collect_sleeps_between_samples_only(healthy_probe):
    delays = []

    async def record_sleep(delay):
        delays.append(delay)

    asyncio.run(collect_samples(
        healthy_probe,
        "example.com",
        4,
        delay_range=(0.2, 1.0),
        rng=random.Random(7),
        sleep=record_sleep,
    ))

    assert len(delays) == 3
    assert all(0.2 <= d <= 1.0 for d in delays)


def test_collect_single_sample_never_sleeps(healthy_probe):
    delays = []

    async def record_sleep(delay):
        delays.append(delay)

    asyncio.run(collect_samples(healthy_probe, "example.com", 1, sleep=record_sleep))
    assert delays == []


def test_collect_keeps_all_failed_samples(resolver):
    probe = ResolverProbe(
        resolver,
        clients={t: FakeClient(t, error="SERVFAIL") for t in Transport},
    )
    samples = asyncio.run(collect_samples(probe, "example.com", 3, sleep=no_sleep))

    assert len(samples) == 3
    assert all(s.udp_ms is None and s.doh_ms is None and s.dot_ms is None for s in samples)
    assert len(probe.failures) == 9


@pytest.mark.parametrize("count", [0, -1])
def test_collect_rejects_bad_sample_count(healthy_probe, count):
    with pytest.raises(ValueError):
        asyncio.run(collect_samples(healthy_probe, "example.com", count, sleep=no_sleep))


def test_run_fills_every_slot():
    resolvers = [make_resolver(n) for n in ("Alpha", "Beta", "Gamma")]
    domains = ["a.com", "b.com", "c.com"]
    runner = BenchmarkRunner(
        resolvers,
        sample_count=4,
        probe_factory=healthy_factory,
        sleep=no_sleep,
    )
    result = asyncio.run(runner.run(domains))

    assert [row.domain for row in result.rows] == domains
    for row in result.rows:
        for r in resolvers:
            assert len(row.samples_for(r.name)) == 4
    assert not result.has_failures
    assert result.sample_count == 4
    assert result.duration_seconds >= 0


def test_run_isolates_failing_resolver():
    resolvers = [make_resolver(n) for n in ("Good", "Broken", "Fine")]
    domains = ["a.com", "b.com"]
    runner = BenchmarkRunner(
        resolvers,
        sample_count=3,
        probe_factory=broken_factory({"Broken"}),
        sleep=no_sleep,
    )
    result = asyncio.run(runner.run(domains))

    for row in result.rows:
        for name in ("Good", "Fine"):
            samples = row.samples_for(name)
            assert len(samples) == 3
            assert all(s.udp_ms is not None and s.doh_ms is not None and s.dot_ms is not None
                       for s in samples)
        broken = row.samples_for("Broken")
        assert len(broken) == 3
        assert all(s.udp_ms is None and s.doh_ms is None and s.dot_ms is None for s in broken)

    assert result.failures["Good"] == []
    assert result.failures["Fine"] == []
    assert len(result.failures["Broken"]) == len(domains) * 3 * 3
    assert result.failure_count == 18


def test_run_walks_domains_in_order():
    resolvers = [make_resolver("Alpha"), make_resolver("Beta")]
    runner = BenchmarkRunner(
        resolvers,
        sample_count=2,
        probe_factory=healthy_factory,
        sleep=no_sleep,
    )
    asyncio.run(runner.run(["first.com", "second.com", "third.com"]))

    for probe in runner.probes:
        for client in probe.clients.values():
            assert client.calls == [
                "first.com", "first.com",
                "second.com", "second.com",
                "third.com", "third.com",
            ]


def test_run_drops_duplicate_domains():
    runner = BenchmarkRunner(
        [make_resolver("Alpha")],
        sample_count=2,
        probe_factory=healthy_factory,
        sleep=no_sleep,
    )
    result = asyncio.run(runner.run(["a.com", "b.com", "a.com"]))

    assert [row.domain for row in result.rows] == ["a.com", "b.com"]
    assert len(result.rows[0].samples_for("Alpha")) == 2


def test_run_reports_progress_per_resolver():
    resolvers = [make_resolver("Alpha"), make_resolver("Beta")]
    sinks = []

    def progress_factory(resolver, total):
        sink = RecordingProgress(resolver, total)
        sinks.append(sink)
        return sink

    runner = BenchmarkRunner(
        resolvers,
        sample_count=1,
        probe_factory=healthy_factory,
        sleep=no_sleep,
    )
    asyncio.run(runner.run(["a.com", "b.com", "c.com"], progress_factory=progress_factory))

    assert sorted(s.resolver.name for s in sinks) == ["Alpha", "Beta"]
    for sink in sinks:
        assert sink.total == 3
        assert sink.events == ["start", 1, 1, 1, "stop"]


def test_resolver_pipelines_run_concurrently():
    resolvers = [make_resolver(n) for n in ("Alpha", "Beta", "Gamma", "Delta")]

    def slow_factory(resolver):
        clients = {t: FakeClient(t, delay=0.05) for t in Transport}
        return ResolverProbe(resolver, clients=clients)

    runner = BenchmarkRunner(resolvers, sample_count=2, probe_factory=slow_factory, sleep=no_sleep)
    result = asyncio.run(runner.run(["a.com"]))

    # Sequential execution would take 4 resolvers x 2 samples x 50ms
    assert result.duration_seconds < 0.3


def test_repeated_run_starts_with_empty_failures():
    runner = BenchmarkRunner(
        [make_resolver("Broken")],
        sample_count=1,
        probe_factory=broken_factory({"Broken"}),
        sleep=no_sleep,
    )
    asyncio.run(runner.run(["a.com"]))
    result = asyncio.run(runner.run(["a.com"]))

    assert len(result.failures["Broken"]) == 3


@pytest.mark.parametrize("kwargs", [
    {"resolvers": []},
    {"resolvers": [make_resolver("Same"), make_resolver("Same")]},
    {"resolvers": [make_resolver("Alpha")], "sample_count": 0},
    {"resolvers": [make_resolver("Alpha")], "delay_range": (1.0, 0.2)},
    {"resolvers": [make_resolver("Alpha")], "delay_range": (-0.1, 0.2)},
])
def test_runner_rejects_bad_configuration(kwargs):
    with pytest.raises(ValueError):
        BenchmarkRunner(probe_factory=healthy_factory, **kwargs)


def test_run_rejects_empty_domain_list():
    runner = BenchmarkRunner([make_resolver("Alpha")], probe_factory=healthy_factory)
    with pytest.raises(ValueError):
        asyncio.run(runner.run([]))


def test_close_releases_clients():
    runner = BenchmarkRunner([make_resolver("Alpha")], probe_factory=healthy_factory)
    asyncio.run(runner.close())

    assert all(c.closed for c in runner.probes[0].clients.values())


class CrashingResolver(ResolverProbe):
    """Raises once it reaches a given domain."""

    def __init__(self, resolver, crash_on):
        super().__init__(resolver, clients=fake_clients())
        self.crash_on = crash_on

    async def probe(self, domain):
        if domain == self.crash_on:
            raise RuntimeError(f"crashed on {domain}")
        return await super().probe(domain)


def test_run_stops_progress_when_pipeline_raises():
    sinks = []

    def progress_factory(resolver, total):
        sink = RecordingProgress(resolver, total)
        sinks.append(sink)
        return sink

    runner = BenchmarkRunner(
        [make_resolver("Alpha")],
        sample_count=1,
        probe_factory=lambda r: CrashingResolver(r, crash_on="b.com"),
        sleep=no_sleep,
    )
    with pytest.raises(RuntimeError, match="crashed on b.com"):
        asyncio.run(runner.run(["a.com", "b.com", "c.com"], progress_factory=progress_factory))

    assert sinks[0].events == ["start", 1, "stop"]
