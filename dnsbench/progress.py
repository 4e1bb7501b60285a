"""
Progress reporting for benchmark pipelines.

Each resolver pipeline reports to its own sink: start() before the
first domain, increment() after each finished domain, stop() at the end.
"""

from typing import Callable, Optional, Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .models import ResolverConfig


class ProgressSink(Protocol):
    """Observer of a single resolver pipeline."""

    def start(self) -> None: ...

    def increment(self, by: int = 1) -> None: ...

    def stop(self) -> None: ...


# Creates the sink for a resolver, given the number of domains
ProgressFactory = Callable[[ResolverConfig, int], ProgressSink]


class NullProgress:
    """Sink that ignores all updates."""

    def start(self) -> None:
        pass

    def increment(self, by: int = 1) -> None:
        pass

    def stop(self) -> None:
        pass


def null_progress(resolver: ResolverConfig, total: int) -> NullProgress:
    return NullProgress()


class RichTaskProgress:
    """Sink backed by one task of a rich Progress display."""

    def __init__(self, progress: Progress, task_id: TaskID):
        self.progress = progress
        self.task_id = task_id

    def start(self) -> None:
        self.progress.start_task(self.task_id)

    def increment(self, by: int = 1) -> None:
        self.progress.advance(self.task_id, by)

    def stop(self) -> None:
        self.progress.stop_task(self.task_id)


class RichProgress:
    """
    Rich progress display with one bar per resolver.

    Use as a context manager; the instance itself is the progress
    factory passed to the runner.
    """

    def __init__(self, console: Optional[Console] = None):
        self.progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            SpinnerColumn(),
            TimeRemainingColumn(),
            console=console,
            transient=True,
        )

    def __enter__(self) -> "RichProgress":
        self.progress.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.progress.stop()

    def __call__(self, resolver: ResolverConfig, total: int) -> RichTaskProgress:
        task_id = self.progress.add_task(resolver.name, total=total, start=False)
        return RichTaskProgress(self.progress, task_id)
