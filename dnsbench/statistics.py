"""
Statistical aggregation of benchmark samples.

Calculates minimum, maximum, average and median latency for one
resolver and transport. Failed attempts are not data points; a
statistic over no successful attempts is None.
"""

from typing import Iterable, Optional

import numpy as np

from .models import ResolveResult, ResultRow, Statistic, Transport


def present_latencies(
    samples: Iterable[ResolveResult],
    transport: Transport,
) -> list[float]:
    """Latencies for one transport, skipping failed attempts."""
    if not isinstance(transport, Transport):
        raise ValueError(f"Unknown transport type: {transport}")
    return [
        latency
        for latency in (sample.latency(transport) for sample in samples)
        if latency is not None
    ]


def aggregate(
    samples: Iterable[ResolveResult],
    transport: Transport,
    statistic: Statistic,
) -> Optional[float]:
    """
    Compute one statistic over a resolver's samples.

    Args:
        samples: Sample sequence for one resolver and domain
        transport: Transport to project the samples to
        statistic: Aggregate function to apply

    Returns:
        The statistic in milliseconds, or None if no attempt succeeded

    Raises:
        ValueError: If transport or statistic is not recognized
    """
    if not isinstance(statistic, Statistic):
        raise ValueError(f"Unknown statistic: {statistic}")

    values = present_latencies(samples, transport)
    if not values:
        return None

    latencies = np.array(values)
    if statistic == Statistic.MINIMUM:
        return float(np.min(latencies))
    if statistic == Statistic.MAXIMUM:
        return float(np.max(latencies))
    if statistic == Statistic.AVERAGE:
        return float(np.mean(latencies))
    return float(np.median(latencies))


def summarize(
    samples: Iterable[ResolveResult],
    transport: Transport,
) -> dict[Statistic, Optional[float]]:
    """All aggregate statistics for one resolver and transport."""
    samples = list(samples)
    return {
        statistic: aggregate(samples, transport, statistic)
        for statistic in Statistic
    }


def row_statistics(
    row: ResultRow,
    resolvers: list[str],
    transport: Transport,
    statistic: Statistic,
) -> list[Optional[float]]:
    """One statistic per resolver for a single domain row."""
    return [
        aggregate(row.samples_for(name), transport, statistic)
        for name in resolvers
    ]
