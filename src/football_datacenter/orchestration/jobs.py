"""Dependency-ordered execution of ingestion jobs.

A `JobGraph` runs every job as its own task. A job first waits on the
completion events of its dependencies, then runs only if all of them
succeeded; otherwise it is marked skipped. Failures are logged and recorded,
never raised, so one broken job cannot take down the scheduler.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class JobStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class IngestionJob:
    name: str
    run: Callable[[], Awaitable[Any]]
    depends_on: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def create(
        cls, name: str, run: Callable[[], Awaitable[Any]], depends_on: Iterable[str] = ()
    ) -> IngestionJob:
        return cls(name=name, run=run, depends_on=frozenset(depends_on))


@dataclass(frozen=True)
class JobOutcome:
    name: str
    status: JobStatus
    result: Any = None
    error: BaseException | None = None
    skipped_because: tuple[str, ...] = ()
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is JobStatus.SUCCEEDED


@dataclass(frozen=True)
class RunReport:
    outcomes: dict[str, JobOutcome]

    @property
    def succeeded(self) -> list[str]:
        return [n for n, o in self.outcomes.items() if o.status is JobStatus.SUCCEEDED]

    @property
    def failed(self) -> list[str]:
        return [n for n, o in self.outcomes.items() if o.status is JobStatus.FAILED]

    @property
    def skipped(self) -> list[str]:
        return [n for n, o in self.outcomes.items() if o.status is JobStatus.SKIPPED]

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes.values())


def _check_acyclic(jobs: dict[str, IngestionJob]) -> None:
    visiting: set[str] = set()
    done: set[str] = set()

    def visit(name: str, path: tuple[str, ...]) -> None:
        if name in done:
            return
        if name in visiting:
            cycle = " -> ".join((*path, name))
            raise ValueError(f"Job dependency cycle: {cycle}")
        visiting.add(name)
        for dep in sorted(jobs[name].depends_on):
            visit(dep, (*path, name))
        visiting.discard(name)
        done.add(name)

    for name in jobs:
        visit(name, ())


class JobGraph:
    def __init__(self, jobs: Sequence[IngestionJob]) -> None:
        by_name: dict[str, IngestionJob] = {}
        for job in jobs:
            if job.name in by_name:
                raise ValueError(f"Duplicate job name: {job.name}")
            by_name[job.name] = job

        for job in by_name.values():
            unknown = sorted(job.depends_on - by_name.keys())
            if unknown:
                raise ValueError(f"Job {job.name} depends on unknown jobs: {unknown}")

        _check_acyclic(by_name)
        self._jobs = by_name

    @property
    def names(self) -> list[str]:
        return list(self._jobs)

    def subset(self, names: Iterable[str]) -> JobGraph:
        """Graph restricted to `names` plus everything they transitively depend on."""

        wanted: set[str] = set()
        stack = list(names)
        while stack:
            name = stack.pop()
            if name not in self._jobs:
                raise ValueError(f"Unknown job: {name}")
            if name in wanted:
                continue
            wanted.add(name)
            stack.extend(self._jobs[name].depends_on)
        return JobGraph([j for n, j in self._jobs.items() if n in wanted])

    async def run(self) -> RunReport:
        finished = {name: asyncio.Event() for name in self._jobs}
        outcomes: dict[str, JobOutcome] = {}

        async def execute(job: IngestionJob) -> None:
            try:
                for dep in job.depends_on:
                    await finished[dep].wait()

                blocked = tuple(
                    sorted(d for d in job.depends_on if d not in outcomes or not outcomes[d].ok)
                )
                if blocked:
                    logger.warning(
                        "Skipping job %s: dependencies did not succeed %s", job.name, blocked
                    )
                    outcomes[job.name] = JobOutcome(
                        name=job.name, status=JobStatus.SKIPPED, skipped_because=blocked
                    )
                    return

                logger.info("Starting job %s", job.name)
                started = time.monotonic()
                try:
                    result = await job.run()
                except Exception as exc:
                    logger.exception("Job %s failed", job.name)
                    outcomes[job.name] = JobOutcome(
                        name=job.name,
                        status=JobStatus.FAILED,
                        error=exc,
                        duration_s=time.monotonic() - started,
                    )
                else:
                    outcomes[job.name] = JobOutcome(
                        name=job.name,
                        status=JobStatus.SUCCEEDED,
                        result=result,
                        duration_s=time.monotonic() - started,
                    )
            finally:
                finished[job.name].set()

        await asyncio.gather(*(execute(job) for job in self._jobs.values()))

        report = RunReport(outcomes={name: outcomes[name] for name in self._jobs})
        logger.info(
            "Job run finished: succeeded=%s failed=%s skipped=%s",
            report.succeeded,
            report.failed,
            report.skipped,
        )
        return report
