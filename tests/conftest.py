import asyncio
from typing import Optional

import pytest

from dnsbench.clients import BaseClient, ResolveResponse
from dnsbench.models import ResolverConfig, Transport
from dnsbench.query_engine import ResolverProbe


class FakeClient(BaseClient):
    """Client answering from memory instead of the network."""

    def __init__(
        self,
        transport: Transport,
        error: Optional[str] = None,
        exc: Optional[Exception] = None,
        delay: float = 0.0,
        tracker: Optional["InFlightTracker"] = None,
    ):
        super().__init__()
        self.transport_type = transport
        self.error = error
        self.exc = exc
        self.delay = delay
        self.tracker = tracker
        self.calls: list[str] = []
        self.closed = False

    @property
    def endpoint(self) -> str:
        return f"fake-{self.transport_type.value}"

    async def resolve(self, domain: str) -> ResolveResponse:
        self.calls.append(domain)
        if self.tracker:
            self.tracker.enter()
        try:
            await asyncio.sleep(self.delay)
        finally:
            if self.tracker:
                self.tracker.leave()
        if self.exc is not None:
            raise self.exc
        return ResolveResponse(error=self.error, answers=[] if self.error else ["192.0.2.1"])

    async def close(self) -> None:
        self.closed = True


class InFlightTracker:
    """Counts concurrent resolve calls."""

    def __init__(self):
        self.current = 0
        self.peak = 0

    def enter(self):
        self.current += 1
        self.peak = max(self.peak, self.current)

    def leave(self):
        self.current -= 1


def make_resolver(name: str) -> ResolverConfig:
    slug = name.lower().replace(" ", "-")
    return ResolverConfig(
        name=name,
        udp_address="192.0.2.53",
        doh_url=f"https://{slug}.example/dns-query",
        dot_hostname=f"{slug}.example",
    )


def fake_clients(**overrides) -> dict[Transport, FakeClient]:
    """One FakeClient per transport; keyword overrides per transport value."""
    return {
        transport: FakeClient(transport, **overrides.get(transport.value, {}))
        for transport in Transport
    }


@pytest.fixture
def resolver() -> ResolverConfig:
    return make_resolver("Example DNS")


@pytest.fixture
def healthy_probe(resolver) -> ResolverProbe:
    return ResolverProbe(resolver, clients=fake_clients())


async def no_sleep(delay: float) -> None:
    pass
