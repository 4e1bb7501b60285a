import asyncio
import struct

import dns.message
import dns.rcode
import dns.rdatatype
import dns.rrset
import pytest

from dnsbench.clients import (
    DoHClient,
    DoTClient,
    UDPClient,
    create_client,
    make_query,
    parse_response,
)
from dnsbench.models import Failure, Success, Transport
from dnsbench.query_engine import attempt
from dnsbench.resolvers import get_resolver


def test_make_query_asks_for_a_record():
    message = make_query("example.com")

    assert len(message.question) == 1
    assert message.question[0].name.to_text() == "example.com."
    assert dns.rdatatype.to_text(message.question[0].rdtype) == "A"


def test_parse_response_answers():
    response = dns.message.make_response(make_query("example.com"))
    response.answer.append(
        dns.rrset.from_text("example.com.", 300, "IN", "A", "192.0.2.1", "192.0.2.2")
    )
    parsed = parse_response(response)

    assert parsed.error is None
    assert sorted(parsed.answers) == ["192.0.2.1", "192.0.2.2"]


@pytest.mark.parametrize("rcode", [dns.rcode.NXDOMAIN, dns.rcode.SERVFAIL, dns.rcode.REFUSED])
def test_parse_response_error_rcode(rcode):
    response = dns.message.make_response(make_query("example.com"))
    response.set_rcode(rcode)

    assert parse_response(response).error == dns.rcode.to_text(rcode)


def test_create_client_per_transport():
    resolver = get_resolver("cloudflare")

    udp = create_client(Transport.UDP, resolver, timeout=2.0)
    doh = create_client(Transport.DOH, resolver)
    dot = create_client(Transport.DOT, resolver)

    assert isinstance(udp, UDPClient) and udp.endpoint == "1.1.1.1"
    assert udp.timeout == 2.0
    assert isinstance(doh, DoHClient) and doh.endpoint == "https://dns.cloudflare.com/dns-query"
    assert isinstance(dot, DoTClient) and dot.endpoint == "one.one.one.one"


def test_create_client_rejects_unknown_transport():
    with pytest.raises(ValueError):
        create_client("tcp", get_resolver("cloudflare"))


class StalledTransport:
    def __init__(self):
        self.aborted = False

    def abort(self):
        self.aborted = True


class StalledWriter:
    """Stream writer whose graceful close never completes."""

    def __init__(self):
        self.transport = StalledTransport()
        self.sent = b""

    def write(self, data):
        self.sent += data

    async def drain(self):
        pass

    def close(self):
        pass

    async def wait_closed(self):
        await asyncio.sleep(3600)


class CannedDoTClient(DoTClient):
    """DoT client answering from an in-memory stream."""

    def __init__(self, response: bytes, **kwargs):
        super().__init__("dot.example", **kwargs)
        self.response = response
        self.writer = StalledWriter()

    async def _connect(self):
        reader = asyncio.StreamReader()
        reader.feed_data(struct.pack("!H", len(self.response)) + self.response)
        reader.feed_eof()
        return reader, self.writer


def test_dot_teardown_is_not_timed():
    response = dns.message.make_response(make_query("example.com"))
    response.answer.append(dns.rrset.from_text("example.com.", 300, "IN", "A", "192.0.2.1"))
    client = CannedDoTClient(response.to_wire(), timeout=0.5)

    outcome = asyncio.run(asyncio.wait_for(attempt(client, "example.com"), timeout=2.0))

    assert isinstance(outcome, Success)
    assert outcome.latency_ms < 500
    assert client.writer.transport.aborted
    sent_length = struct.unpack("!H", client.writer.sent[:2])[0]
    assert sent_length == len(client.writer.sent) - 2


def test_dot_read_error_still_aborts_connection():
    client = CannedDoTClient(b"", timeout=0.5)

    outcome = asyncio.run(attempt(client, "example.com"))

    assert isinstance(outcome, Failure)
    assert client.writer.transport.aborted
