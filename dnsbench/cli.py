"""
Command-line interface for dnsbench.

Runs the UDP / DoH / DoT latency benchmark, shows aggregate tables
and exports raw samples as CSV or JSON.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import click
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .domains import load_domains
from .models import BenchmarkResult, ResultRow, Statistic, Transport
from .output import CSVOutput, JSONOutput, RichConsoleOutput, resolvers_in
from .progress import RichProgress
from .resolvers import (
    RESOLVERS,
    DEFAULT_RESOLVERS,
    get_resolver,
    list_resolvers,
    load_resolvers,
)
from .runner import DEFAULT_SAMPLE_COUNT, BenchmarkRunner

TRANSPORT_CHOICES = [t.value for t in Transport]
STATISTIC_CHOICES = [s.value for s in Statistic]


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def print_tables(
    rows: list[ResultRow],
    resolvers: list[str],
    views: tuple,
    statistic: str,
    console: Console,
) -> None:
    transports = [Transport.parse(v) for v in views] or list(Transport)
    for transport in transports:
        RichConsoleOutput.print_table(
            rows,
            resolvers,
            transport,
            Statistic.parse(statistic),
            console=console,
        )


def save_result(result: BenchmarkResult, path: Path) -> None:
    suffix = path.suffix.lower()
    if suffix == ".json":
        JSONOutput.save(result.rows, path)
    elif suffix == ".csv":
        CSVOutput.save(
            result.rows,
            [r.name for r in result.resolvers],
            result.sample_count,
            path,
        )
    else:
        raise click.ClickException(f"Unsupported output format: {path} (use .csv or .json)")


@click.group()
@click.version_option(__version__)
def main():
    """
    dnsbench - DNS resolver latency benchmarking.

    Times UDP, DNS-over-HTTPS and DNS-over-TLS resolution of a domain
    list across several public resolvers.
    """
    pass


@main.command()
@click.option(
    "--resolver", "-r",
    multiple=True,
    help="Resolver to test (can specify multiple). Options: " + ", ".join(list_resolvers()),
)
@click.option(
    "--resolvers-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with custom resolvers (name, udp, doh, dot)",
)
@click.option(
    "--domains-file", "-d",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="File with one domain per line (or CSV, first column)",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    help="Benchmark at most this many domains",
)
@click.option(
    "--shuffle",
    is_flag=True,
    help="Randomize the domain order (before --limit)",
)
@click.option(
    "--samples", "-n",
    type=click.IntRange(min=1),
    default=DEFAULT_SAMPLE_COUNT,
    show_default=True,
    help="Samples per resolver and domain",
)
@click.option(
    "--min-delay",
    type=click.IntRange(min=0),
    default=200,
    show_default=True,
    help="Minimum pause between samples (ms)",
)
@click.option(
    "--max-delay",
    type=click.IntRange(min=0),
    default=1000,
    show_default=True,
    help="Maximum pause between samples (ms)",
)
@click.option(
    "--timeout",
    type=float,
    default=5.0,
    show_default=True,
    help="Query timeout in seconds",
)
@click.option(
    "--view",
    multiple=True,
    type=click.Choice(TRANSPORT_CHOICES),
    help="Transport table(s) to show (default: all)",
)
@click.option(
    "--statistic", "-s",
    type=click.Choice(STATISTIC_CHOICES),
    default=Statistic.MEDIAN.value,
    show_default=True,
    help="Statistic shown in the tables",
)
@click.option(
    "--output", "-o",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file path (JSON or CSV based on extension, can specify multiple)",
)
@click.option(
    "--show-errors",
    is_flag=True,
    help="Print every failed attempt after the run",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress progress output and tables",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable debug logging",
)
def run(
    resolver: tuple,
    resolvers_file: Optional[Path],
    domains_file: Optional[Path],
    limit: Optional[int],
    shuffle: bool,
    samples: int,
    min_delay: int,
    max_delay: int,
    timeout: float,
    view: tuple,
    statistic: str,
    output: tuple,
    show_errors: bool,
    quiet: bool,
    verbose: bool,
):
    """
    Run the DNS benchmark.

    Examples:

    \b
      # All built-in resolvers, bundled domain list
      dnsbench run

    \b
      # Compare two resolvers on your own domains
      dnsbench run -r cloudflare -r dns0-zero -d domains.csv

    \b
      # Quick run, export CSV and JSON
      dnsbench run --limit 5 -n 3 -o results.csv -o results.json
    """
    setup_logging(verbose)
    console = Console()

    if min_delay > max_delay:
        raise click.BadParameter("--min-delay must not exceed --max-delay")

    try:
        resolvers_list = [get_resolver(name) for name in resolver]
        if resolvers_file:
            resolvers_list.extend(load_resolvers(resolvers_file))
        if not resolvers_list:
            resolvers_list = [get_resolver(name) for name in DEFAULT_RESOLVERS]

        domains = load_domains(domains_file, limit=limit, shuffle=shuffle)

        runner = BenchmarkRunner(
            resolvers=resolvers_list,
            sample_count=samples,
            delay_range=(min_delay / 1000, max_delay / 1000),
            timeout=timeout,
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    async def run_benchmark(progress_factory):
        try:
            return await runner.run(domains, progress_factory=progress_factory)
        finally:
            await runner.close()

    if quiet:
        result = asyncio.run(run_benchmark(None))
    else:
        with RichProgress(console=console) as progress:
            result = asyncio.run(run_benchmark(progress))

    if result.has_failures:
        console.print(
            f"[yellow]Resolving phase completed with {result.failure_count} errors.[/yellow]"
        )
        if show_errors:
            RichConsoleOutput.print_failures(result.failures, console=console)

    if not quiet:
        console.print(
            f"[dim]Benchmarked {len(result.rows)} domains x {len(result.resolvers)} "
            f"resolvers in {result.duration_seconds:.1f}s[/dim]"
        )
        print_tables(
            result.rows,
            [r.name for r in result.resolvers],
            view,
            statistic,
            console,
        )

    for path in output:
        save_result(result, path)
        if not quiet:
            console.print(f"[green]Results saved to {path}[/green]")


@main.command()
@click.argument("results_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--view",
    multiple=True,
    type=click.Choice(TRANSPORT_CHOICES),
    help="Transport table(s) to show (default: all)",
)
@click.option(
    "--statistic", "-s",
    type=click.Choice(STATISTIC_CHOICES),
    default=Statistic.MEDIAN.value,
    show_default=True,
    help="Statistic shown in the tables",
)
def show(results_file: Path, view: tuple, statistic: str):
    """Show aggregate tables for a saved JSON result file."""
    try:
        rows = JSONOutput.load(results_file)
    except ValueError as e:
        raise click.ClickException(str(e))

    print_tables(rows, resolvers_in(rows), view, statistic, Console())


@main.command()
def list_available():
    """List all built-in DNS resolvers."""
    console = Console()
    table = Table(
        title="Available DNS Resolvers",
        box=box.ROUNDED,
        header_style="bold cyan",
    )

    table.add_column("Name", style="green")
    for transport, style in zip(Transport, ("cyan", "magenta", "yellow")):
        table.add_column(transport.label, style=style)
    table.add_column("Description")

    for name, resolver in RESOLVERS.items():
        table.add_row(
            name,
            *(resolver.endpoint(transport) for transport in Transport),
            resolver.description or "",
        )

    console.print(table)


if __name__ == "__main__":
    main()
