"""
DNS transport clients.

Provides one client class per transport:
- UDP (standard DNS)
- DoH (DNS over HTTPS)
- DoT (DNS over TLS)

Each client exposes a single ``resolve(domain)`` coroutine. DNS-level
errors (non-NOERROR rcodes) are returned in the response; network and
protocol problems are raised.
"""

import asyncio
import ssl
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import dns.asyncquery
import dns.message
import dns.rcode
import dns.rdatatype
import httpx

from .models import ResolverConfig, Transport

DNS_PORT = 53
DOT_PORT = 853


@dataclass
class ResolveResponse:
    """Response of a single resolve call."""
    error: Optional[str] = None
    answers: list[str] = field(default_factory=list)


def make_query(domain: str, record_type: str = "A") -> dns.message.Message:
    """Create a DNS query message."""
    rdtype = dns.rdatatype.from_text(record_type)
    return dns.message.make_query(domain, rdtype)


def parse_response(response: dns.message.Message) -> ResolveResponse:
    """Turn a DNS response into answers, or an error for non-NOERROR rcodes."""
    rcode = response.rcode()
    if rcode != dns.rcode.NOERROR:
        return ResolveResponse(error=dns.rcode.to_text(rcode))

    answers = []
    for rrset in response.answer:
        for rdata in rrset:
            answers.append(str(rdata))
    return ResolveResponse(answers=answers)


class BaseClient(ABC):
    """Base class for DNS transport clients."""

    transport_type: Transport

    def __init__(self, timeout: float = 5.0, record_type: str = "A"):
        self.timeout = timeout
        self.record_type = record_type

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Address, hostname or URL the client talks to."""

    @abstractmethod
    async def resolve(self, domain: str) -> ResolveResponse:
        """Resolve a domain through this transport."""

    async def close(self) -> None:
        """Release any pooled connections."""


class UDPClient(BaseClient):
    """Standard DNS over UDP."""

    transport_type = Transport.UDP

    def __init__(self, address: str, **kwargs):
        super().__init__(**kwargs)
        self.address = address

    @property
    def endpoint(self) -> str:
        return self.address

    async def resolve(self, domain: str) -> ResolveResponse:
        message = make_query(domain, self.record_type)
        response = await dns.asyncquery.udp(
            message,
            self.address,
            timeout=self.timeout,
            port=DNS_PORT,
        )
        return parse_response(response)


class DoTClient(BaseClient):
    """DNS over TLS (DoT)."""

    transport_type = Transport.DOT

    def __init__(self, hostname: str, port: int = DOT_PORT, **kwargs):
        """
        Initialize DoT client.

        Args:
            hostname: Server hostname, used both to connect and for
                certificate verification
            port: Server port
        """
        super().__init__(**kwargs)
        self.hostname = hostname
        self.port = port

    @property
    def endpoint(self) -> str:
        return self.hostname

    async def _connect(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open the TLS stream to the server."""
        ssl_context = ssl.create_default_context()
        return await asyncio.wait_for(
            asyncio.open_connection(
                self.hostname,
                self.port,
                ssl=ssl_context,
                server_hostname=self.hostname,
            ),
            timeout=self.timeout,
        )

    async def resolve(self, domain: str) -> ResolveResponse:
        reader, writer = await self._connect()

        try:
            # DNS over TCP/TLS requires length prefix
            wire = make_query(domain, self.record_type).to_wire()
            writer.write(struct.pack("!H", len(wire)) + wire)
            await writer.drain()

            length_data = await asyncio.wait_for(
                reader.readexactly(2),
                timeout=self.timeout,
            )
            response_length = struct.unpack("!H", length_data)[0]

            response_data = await asyncio.wait_for(
                reader.readexactly(response_length),
                timeout=self.timeout,
            )
        finally:
            # No TLS shutdown handshake: teardown must not wait or raise
            writer.transport.abort()

        return parse_response(dns.message.from_wire(response_data))


class DoHClient(BaseClient):
    """DNS over HTTPS (DoH)."""

    transport_type = Transport.DOH

    def __init__(self, url: str, **kwargs):
        """
        Initialize DoH client.

        Args:
            url: DoH endpoint URL (e.g., https://dns.google/dns-query)
        """
        super().__init__(**kwargs)
        self.url = url
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def endpoint(self) -> str:
        return self.url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP/2 client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                http2=True,
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    async def resolve(self, domain: str) -> ResolveResponse:
        client = self._get_client()
        wire = make_query(domain, self.record_type).to_wire()

        response = await client.post(
            self.url,
            content=wire,
            headers={
                "Content-Type": "application/dns-message",
                "Accept": "application/dns-message",
            },
        )
        response.raise_for_status()

        return parse_response(dns.message.from_wire(response.content))

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


def create_client(
    transport_type: Transport,
    resolver: ResolverConfig,
    timeout: float = 5.0,
) -> BaseClient:
    """
    Create a client for the given transport and resolver.

    Args:
        transport_type: Type of transport to create
        resolver: ResolverConfig instance
        timeout: Per-query timeout in seconds

    Returns:
        Appropriate client instance
    """
    if transport_type == Transport.UDP:
        return UDPClient(resolver.udp_address, timeout=timeout)
    elif transport_type == Transport.DOH:
        return DoHClient(resolver.doh_url, timeout=timeout)
    elif transport_type == Transport.DOT:
        return DoTClient(resolver.dot_hostname, timeout=timeout)
    else:
        raise ValueError(f"Unknown transport type: {transport_type}")
