"""
Data models for dnsbench.

Defines structured types for resolver configurations, per-attempt
outcomes, combined per-sample results and benchmark outputs.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class Transport(Enum):
    """DNS transport protocols."""
    UDP = "udp"
    DOH = "doh"  # DNS over HTTPS
    DOT = "dot"  # DNS over TLS

    @property
    def label(self) -> str:
        """Display label used in tables and CSV headers."""
        return _TRANSPORT_LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, "Transport"]) -> "Transport":
        """Look up a transport by value or label (case-insensitive)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for transport in cls:
            if key == transport.value:
                return transport
        raise ValueError(
            f"Unknown transport: {value}. Available: {[t.value for t in cls]}"
        )


_TRANSPORT_LABELS = {
    Transport.UDP: "UDP",
    Transport.DOH: "DoH",
    Transport.DOT: "DoT",
}


class Statistic(Enum):
    """Aggregate functions over repeated samples."""
    MINIMUM = "min"
    MAXIMUM = "max"
    AVERAGE = "avg"
    MEDIAN = "median"

    @classmethod
    def parse(cls, value: Union[str, "Statistic"]) -> "Statistic":
        """Look up a statistic by value or name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for statistic in cls:
            if key in (statistic.value, statistic.name.lower()):
                return statistic
        raise ValueError(
            f"Unknown statistic: {value}. Available: {[s.value for s in cls]}"
        )


@dataclass(frozen=True)
class ResolverConfig:
    """Configuration for a DNS resolver offering UDP, DoH and DoT."""
    name: str
    udp_address: str
    doh_url: str
    dot_hostname: str
    description: Optional[str] = None

    def endpoint(self, transport: Transport) -> str:
        """Target address used for the given transport."""
        if transport == Transport.UDP:
            return self.udp_address
        if transport == Transport.DOH:
            return self.doh_url
        if transport == Transport.DOT:
            return self.dot_hostname
        raise ValueError(f"Unknown transport type: {transport}")


@dataclass(frozen=True)
class Success:
    """Successful resolve attempt."""
    latency_ms: float


@dataclass(frozen=True)
class Failure:
    """Failed resolve attempt (DNS error or raised exception)."""
    message: str
    exception: bool = False


# Result of a single timed resolve attempt
Outcome = Union[Success, Failure]


@dataclass(frozen=True)
class ResolveResult:
    """
    Latencies of one sample across all three transports.

    A field is None when that transport's attempt failed.
    """
    udp_ms: Optional[float] = None
    doh_ms: Optional[float] = None
    dot_ms: Optional[float] = None

    def latency(self, transport: Transport) -> Optional[float]:
        """Latency for the given transport, or None if it failed."""
        if transport == Transport.UDP:
            return self.udp_ms
        if transport == Transport.DOH:
            return self.doh_ms
        if transport == Transport.DOT:
            return self.dot_ms
        raise ValueError(f"Unknown transport type: {transport}")

    def to_dict(self) -> dict[str, Optional[float]]:
        return {
            Transport.UDP.value: self.udp_ms,
            Transport.DOH.value: self.doh_ms,
            Transport.DOT.value: self.dot_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ResolveResult":
        """Build a result from to_dict() output, validating every latency."""
        return cls(**{
            f"{transport.value}_ms": _parse_latency(data.get(transport.value), transport)
            for transport in Transport
        })


def _parse_latency(value, transport: Transport) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Invalid {transport.label} latency: {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Invalid {transport.label} latency: {value!r}")
    return float(value)


@dataclass(frozen=True)
class FailureRecord:
    """A single failed transport attempt."""
    domain: str
    resolver: str
    transport: Transport
    message: str
    endpoint: str = ""
    exception: bool = False

    @property
    def kind(self) -> str:
        return "Exception" if self.exception else "Error"


@dataclass
class ResultRow:
    """All samples collected for one domain, keyed by resolver name."""
    domain: str
    samples: dict[str, list[ResolveResult]] = field(default_factory=dict)

    def set_samples(self, resolver: str, samples: list[ResolveResult]) -> None:
        """Store the finished sample sequence for one resolver."""
        self.samples[resolver] = list(samples)

    def samples_for(self, resolver: str) -> list[ResolveResult]:
        """Sample sequence for a resolver (empty if not benchmarked)."""
        return self.samples.get(resolver, [])


@dataclass
class BenchmarkResult:
    """Complete benchmark result for all resolvers."""
    started_at: datetime
    completed_at: datetime
    sample_count: int
    resolvers: list[ResolverConfig]
    rows: list[ResultRow] = field(default_factory=list)
    failures: dict[str, list[FailureRecord]] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Total benchmark duration in seconds."""
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def failure_count(self) -> int:
        return sum(len(records) for records in self.failures.values())

    @property
    def has_failures(self) -> bool:
        return self.failure_count > 0
