"""
Domain lists for benchmarking.

Loads domains from a text or CSV file (first column, optional
``domain`` header) or falls back to a bundled list of popular sites.
"""

import random
from pathlib import Path
from typing import Optional


# Fallback list used when no domain file is given
DEFAULT_DOMAINS = [
    "google.com",
    "youtube.com",
    "facebook.com",
    "instagram.com",
    "wikipedia.org",
    "amazon.com",
    "apple.com",
    "microsoft.com",
    "github.com",
    "cloudflare.com",
    "netflix.com",
    "reddit.com",
    "linkedin.com",
    "twitter.com",
    "whatsapp.com",
    "yahoo.com",
    "bing.com",
    "office.com",
    "zoom.us",
    "stackoverflow.com",
]


def parse_domains(lines) -> list[str]:
    """
    Extract domains from lines of text.

    Takes the first comma-separated column, skips blanks, ``#`` comments
    and a leading ``domain`` header, and drops duplicates.
    """
    domains = []
    for line in lines:
        value = line.split(",", 1)[0].strip().strip('"').rstrip(".").lower()
        if not value or value.startswith("#"):
            continue
        if not domains and value == "domain":
            continue
        domains.append(value)

    return list(dict.fromkeys(domains))


def load_domains(
    path: Optional[Path] = None,
    limit: Optional[int] = None,
    shuffle: bool = False,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """
    Load the domains to benchmark.

    Args:
        path: Domain file (bundled list if None)
        limit: Keep at most this many domains
        shuffle: Randomize order before applying the limit
        rng: Random source for shuffling

    Returns:
        Unique domains in benchmark order
    """
    if path is None:
        domains = list(DEFAULT_DOMAINS)
    else:
        with open(path, "r", encoding="utf-8") as f:
            domains = parse_domains(f)

    if not domains:
        raise ValueError(f"No domains found in {path}")

    if shuffle:
        (rng or random.Random()).shuffle(domains)

    if limit is not None:
        if limit < 1:
            raise ValueError(f"Limit must be positive, got {limit}")
        domains = domains[:limit]

    return domains
