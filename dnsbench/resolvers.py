"""
Built-in resolver configurations.

Provides pre-configured profiles for public DNS resolvers that offer
UDP, DoH and DoT, and loading of custom resolver lists from JSON.
"""

import json
from pathlib import Path

from .models import ResolverConfig


# Pre-configured resolver profiles
RESOLVERS: dict[str, ResolverConfig] = {
    "cloudflare": ResolverConfig(
        name="Cloudflare",
        udp_address="1.1.1.1",
        doh_url="https://dns.cloudflare.com/dns-query",
        dot_hostname="one.one.one.one",
        description="Cloudflare's privacy-focused DNS resolver"
    ),
    "quad9-malware": ResolverConfig(
        name="Quad9 Malware",
        udp_address="9.9.9.9",
        doh_url="https://dns.quad9.net/dns-query",
        dot_hostname="dns.quad9.net",
        description="Quad9 with malware blocking"
    ),
    "controld-malware": ResolverConfig(
        name="ControlD Malware",
        udp_address="76.76.2.1",
        doh_url="https://freedns.controld.com/p1",
        dot_hostname="p1.freedns.controld.com",
        description="Control D with malware blocking"
    ),
    "controld-ads-tracking": ResolverConfig(
        name="ControlD Ads & Tracking",
        udp_address="76.76.2.2",
        doh_url="https://freedns.controld.com/p2",
        dot_hostname="p2.freedns.controld.com",
        description="Control D with ads, tracking and malware blocking"
    ),
    "controld-family": ResolverConfig(
        name="ControlD Family",
        udp_address="76.76.2.4",
        doh_url="https://freedns.controld.com/p4",
        dot_hostname="p4.freedns.controld.com",
        description="Control D family filter"
    ),
    "dns0-zero": ResolverConfig(
        name="Dns0 Zero",
        udp_address="193.110.81.9",
        doh_url="https://zero.dns0.eu/",
        dot_hostname="zero.dns0.eu",
        description="dns0.eu hardened filtering"
    ),
    "dns0-kids": ResolverConfig(
        name="Dns0 Kids",
        udp_address="193.110.81.1",
        doh_url="https://kids.dns0.eu/",
        dot_hostname="kids.dns0.eu",
        description="dns0.eu child-safe filtering"
    ),
}

# All built-in resolvers are benchmarked by default
DEFAULT_RESOLVERS = list(RESOLVERS)


def get_resolver(name: str) -> ResolverConfig:
    """Get a resolver by name (case-insensitive)."""
    key = name.lower()
    if key in RESOLVERS:
        return RESOLVERS[key]
    raise ValueError(f"Unknown resolver: {name}. Available: {list(RESOLVERS.keys())}")


def list_resolvers() -> list[str]:
    """List all available resolver names."""
    return list(RESOLVERS.keys())


def load_resolvers(path: Path) -> list[ResolverConfig]:
    """
    Load resolver configurations from a JSON file.

    The file holds a list of objects with ``name``, ``udp``, ``doh``
    and ``dot`` keys and an optional ``description``.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: invalid JSON ({e})") from e

    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of resolvers")

    resolvers = []
    for index, entry in enumerate(data):
        try:
            resolvers.append(ResolverConfig(
                name=entry["name"],
                udp_address=entry["udp"],
                doh_url=entry["doh"],
                dot_hostname=entry["dot"],
                description=entry.get("description"),
            ))
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"{path}: resolver #{index + 1} is missing {e}") from e

    return resolvers
