"""
Output formatting for DNS benchmark results.

Provides multiple output formats:
- JSON: Raw samples per domain and resolver (can be loaded back)
- CSV: One row per domain and sample index, one column per
  resolver and transport
- Human-readable: Rich terminal tables and failure reports
"""

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from .models import (
    FailureRecord,
    ResolveResult,
    ResultRow,
    Statistic,
    Transport,
)
from .statistics import row_statistics


def format_latency(value: Optional[float]) -> str:
    """Latency for display, rounded to 3 decimals (empty if absent)."""
    if value is None:
        return ""
    return f"{round(value, 3)}ms"


def format_csv_value(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(round(value, 3))


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def format(rows: list[ResultRow], indent: Optional[int] = 2) -> str:
        """
        Format result rows as JSON.

        Args:
            rows: Result rows to format
            indent: JSON indentation level

        Returns:
            JSON string
        """
        data = [
            {
                "domain": row.domain,
                "results": {
                    resolver: [sample.to_dict() for sample in samples]
                    for resolver, samples in row.samples.items()
                },
            }
            for row in rows
        ]
        return json.dumps(data, indent=indent)

    @staticmethod
    def save(rows: list[ResultRow], path: Path) -> None:
        """Save result rows to a JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            f.write(JSONOutput.format(rows))

    @staticmethod
    def parse(text: str) -> list[ResultRow]:
        """Parse result rows from JSON produced by format()."""
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError("Expected a list of result rows")

        rows = []
        for entry in data:
            try:
                rows.append(ResultRow(
                    domain=entry["domain"],
                    samples={
                        resolver: [ResolveResult.from_dict(s) for s in samples]
                        for resolver, samples in entry["results"].items()
                    },
                ))
            except (KeyError, TypeError, AttributeError, ValueError) as e:
                raise ValueError(f"Malformed result row: {entry!r}") from e
        return rows

    @staticmethod
    def load(path: Path) -> list[ResultRow]:
        """Load result rows from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        try:
            return JSONOutput.parse(text)
        except ValueError as e:
            raise ValueError(f"{path}: {e}") from e


class CSVOutput:
    """CSV output formatter."""

    @staticmethod
    def headers(resolvers: list[str]) -> list[str]:
        return ["Domain"] + [
            f"{resolver} ({transport.label})"
            for resolver in resolvers
            for transport in Transport
        ]

    @staticmethod
    def format(
        rows: list[ResultRow],
        resolvers: list[str],
        sample_count: int,
    ) -> str:
        """
        Format result rows as CSV.

        Every domain gets ``sample_count`` lines; line N holds sample N
        of every resolver and transport.

        Args:
            rows: Result rows to format
            resolvers: Resolver names, in column order
            sample_count: Samples per resolver and domain

        Returns:
            CSV string
        """
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSVOutput.headers(resolvers))

        for row in rows:
            for index in range(sample_count):
                line = [row.domain]
                for resolver in resolvers:
                    samples = row.samples_for(resolver)
                    sample = samples[index] if index < len(samples) else ResolveResult()
                    line.extend(
                        format_csv_value(sample.latency(transport))
                        for transport in Transport
                    )
                writer.writerow(line)

        return output.getvalue()

    @staticmethod
    def save(
        rows: list[ResultRow],
        resolvers: list[str],
        sample_count: int,
        path: Path,
    ) -> None:
        """Save result rows to a CSV file."""
        with open(path, "w", newline="", encoding="utf-8") as f:
            f.write(CSVOutput.format(rows, resolvers, sample_count))


def resolvers_in(rows: list[ResultRow]) -> list[str]:
    """Resolver names present in the rows, in first-seen order."""
    names: dict[str, None] = {}
    for row in rows:
        names.update(dict.fromkeys(row.samples))
    return list(names)


class RichConsoleOutput:
    """Rich library console output with tables."""

    @staticmethod
    def build_table(
        rows: list[ResultRow],
        resolvers: list[str],
        transport: Transport,
        statistic: Statistic,
    ) -> Table:
        """Table of one statistic per domain (rows) and resolver (columns)."""
        table = Table(
            title=f"{transport.label} resolve times ({statistic.name.lower()})",
            box=box.ROUNDED,
            header_style="bold magenta",
        )

        table.add_column("Domain", style="cyan")
        for resolver in resolvers:
            table.add_column(resolver, justify="right")

        for row in rows:
            values = row_statistics(row, resolvers, transport, statistic)
            table.add_row(row.domain, *(format_latency(v) for v in values))

        return table

    @staticmethod
    def print_table(
        rows: list[ResultRow],
        resolvers: list[str],
        transport: Transport,
        statistic: Statistic,
        console: Optional[Console] = None,
    ) -> None:
        console = console or Console()
        console.print(RichConsoleOutput.build_table(rows, resolvers, transport, statistic))
        console.print()

    @staticmethod
    def print_failures(
        failures: dict[str, list[FailureRecord]],
        console: Optional[Console] = None,
    ) -> None:
        """Print recorded failures grouped by resolver."""
        console = console or Console()

        for resolver, records in failures.items():
            if not records:
                continue

            console.print(Rule(f"[red]{resolver} Errors[/red]"))
            for record in records:
                line = Text()
                line.append(f"{record.kind} while resolving ")
                line.append(record.domain, style="deep_sky_blue1 italic")
                line.append(" using DNS ")
                line.append(record.resolver, style="chartreuse3")
                line.append(f" ({record.transport.label})", style="dim")
                if record.endpoint:
                    line.append(f" via {record.endpoint}", style="dim")
                line.append(": ")
                line.append(record.message, style="bold red")
                console.print(line)
            console.print()
