"""
Core DNS query engine.

Times individual resolve attempts and combines the three transports
of one resolver into a single per-sample result.
"""

import asyncio
import logging
import time
from typing import Optional

from .clients import BaseClient, create_client
from .models import (
    Failure,
    FailureRecord,
    Outcome,
    ResolveResult,
    ResolverConfig,
    Success,
    Transport,
)

logger = logging.getLogger(__name__)


async def attempt(client: BaseClient, domain: str) -> Outcome:
    """
    Execute one timed resolve through a single client.

    Args:
        client: Transport client to resolve with
        domain: Domain name to resolve

    Returns:
        Success with the elapsed milliseconds, or Failure with the
        DNS error or exception message
    """
    try:
        start = time.perf_counter_ns()
        response = await client.resolve(domain)
        end = time.perf_counter_ns()
    except Exception as e:
        return Failure(str(e) or e.__class__.__name__, exception=True)

    if response.error:
        return Failure(response.error)

    return Success((end - start) / 1_000_000)


class ResolverProbe:
    """
    Per-resolver benchmarking state.

    Holds one client per transport and the failures recorded for
    this resolver during a run.
    """

    def __init__(
        self,
        resolver: ResolverConfig,
        clients: Optional[dict[Transport, BaseClient]] = None,
        timeout: float = 5.0,
    ):
        """
        Initialize the probe.

        Args:
            resolver: Resolver to query
            clients: Clients keyed by transport (created from the
                resolver configuration when omitted)
            timeout: Query timeout in seconds for created clients
        """
        self.resolver = resolver
        if clients is None:
            clients = {
                transport: create_client(transport, resolver, timeout=timeout)
                for transport in Transport
            }
        missing = [t.value for t in Transport if t not in clients]
        if missing:
            raise ValueError(f"Resolver {resolver.name} has no client for {missing}")
        self.clients = clients
        self.failures: list[FailureRecord] = []

    async def probe(self, domain: str) -> ResolveResult:
        """
        Resolve a domain over all transports concurrently.

        Failed transports are left empty in the result and recorded
        in ``self.failures``.
        """
        transports = list(Transport)
        outcomes = await asyncio.gather(*(
            attempt(self.clients[transport], domain)
            for transport in transports
        ))

        latencies: dict[Transport, Optional[float]] = {}
        for transport, outcome in zip(transports, outcomes):
            if isinstance(outcome, Success):
                latencies[transport] = outcome.latency_ms
                continue

            latencies[transport] = None
            self.failures.append(FailureRecord(
                domain=domain,
                resolver=self.resolver.name,
                transport=transport,
                message=outcome.message,
                endpoint=self.clients[transport].endpoint,
                exception=outcome.exception,
            ))
            logger.debug(
                "%s (%s) failed for %s: %s",
                self.resolver.name, transport.label, domain, outcome.message,
            )

        return ResolveResult(
            udp_ms=latencies[Transport.UDP],
            doh_ms=latencies[Transport.DOH],
            dot_ms=latencies[Transport.DOT],
        )

    async def close(self):
        """Close all transport connections."""
        for client in self.clients.values():
            await client.close()
