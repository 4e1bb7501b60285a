"""
Shared result store.

One ResultRow per benchmarked domain, created up front from the domain
list. Resolver pipelines only ever write their own slot of each row.
"""

from typing import Iterable, Iterator

from .models import ResolveResult, ResultRow


class ResultStore:
    """Mapping from domain name to its ResultRow, in domain-list order."""

    def __init__(self, domains: Iterable[str]):
        # Duplicates keep their first position
        self._rows: dict[str, ResultRow] = {
            domain: ResultRow(domain=domain)
            for domain in dict.fromkeys(domains)
        }

    @property
    def domains(self) -> list[str]:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[ResultRow]:
        return iter(self._rows.values())

    def __getitem__(self, domain: str) -> ResultRow:
        return self._rows[domain]

    def set_result(
        self,
        domain: str,
        resolver: str,
        samples: list[ResolveResult],
    ) -> None:
        """Store a resolver's finished samples for a domain."""
        if domain not in self._rows:
            raise KeyError(f"Unknown domain: {domain}")
        self[domain].set_samples(resolver, samples)

    def rows(self) -> list[ResultRow]:
        return list(self)
