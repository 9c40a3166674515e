"""
Fixed-size worker pool for concurrent breach checks.

The job queue is filled and closed before any worker starts, so the close
marker is the only way a worker learns there is nothing left to do.
Results are drained only after every worker has returned.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import asyncio
import logging
from typing import Iterable, Mapping, Protocol

from pwnaudit.config import DEFAULT_WORKERS
from pwnaudit.exceptions import BreachCheckError
from pwnaudit.hibp.models import PasswordCheckResult
from pwnaudit.scan.models import CheckResult

logger = logging.getLogger(__name__)

# Close marker for both queues
_CLOSED = object()


class BreachChecker(Protocol):
    """What the pool needs from a breach-check client."""

    async def check_password(self, password: str) -> PasswordCheckResult:
        ...


class CheckPool:
    """Run breach checks for a decrypted store with N concurrent workers."""

    def __init__(self, checker: BreachChecker, workers: int = DEFAULT_WORKERS):
        """Initialize the pool.

        Args:
            checker: Breach-check client shared by all workers
            workers: Number of concurrent workers (default: 10)
        """
        if workers < 1:
            raise ValueError("CheckPool needs at least one worker")
        self.checker = checker
        self.workers = workers

    async def run(
        self,
        secrets: Mapping[str, str],
        jobs: Iterable[str] | None = None,
    ) -> list[CheckResult]:
        """Check every entry and return exactly one result per job.

        Args:
            secrets: Read-only entry -> secret mapping from the decryption phase
            jobs: Entries to check (default: every key of ``secrets``)

        Returns:
            Results in completion order
        """
        job_list = list(secrets) if jobs is None else list(jobs)
        if not job_list:
            return []

        job_queue: asyncio.Queue = asyncio.Queue(maxsize=len(job_list) + self.workers)
        result_queue: asyncio.Queue = asyncio.Queue(maxsize=len(job_list) + 1)

        for entry in job_list:
            job_queue.put_nowait(entry)
        # Close the job queue: one marker per worker
        for _ in range(self.workers):
            job_queue.put_nowait(_CLOSED)

        logger.debug(f"Dispatching {len(job_list)} checks to {self.workers} workers")
        await asyncio.gather(*(
            self._worker(worker_id, secrets, job_queue, result_queue)
            for worker_id in range(1, self.workers + 1)
        ))

        # All workers are done, nothing else can be produced
        result_queue.put_nowait(_CLOSED)

        results = []
        while True:
            item = result_queue.get_nowait()
            if item is _CLOSED:
                break
            results.append(item)
        return results

    async def _worker(
        self,
        worker_id: int,
        secrets: Mapping[str, str],
        jobs: asyncio.Queue,
        results: asyncio.Queue,
    ) -> None:
        handled = 0
        while True:
            entry = await jobs.get()
            if entry is _CLOSED:
                break
            await results.put(await self._check(entry, secrets))
            handled += 1
        logger.debug(f"Worker {worker_id} finished after {handled} checks")

    async def _check(self, entry: str, secrets: Mapping[str, str]) -> CheckResult:
        secret = secrets.get(entry)
        if not secret:
            logger.error(f"No decrypted secret for {entry}; check skipped")
            return CheckResult(entry=entry, skipped=True)

        try:
            outcome = await self.checker.check_password(secret)
        except BreachCheckError as e:
            logger.debug(f"Check failed for {entry}: {e}")
            return CheckResult(entry=entry, error=e)
        except Exception as e:
            logger.exception(f"Unexpected error checking {entry}")
            return CheckResult(entry=entry, error=e)

        return CheckResult(
            entry=entry,
            is_breached=outcome.is_pwned,
            occurrences=outcome.occurrences,
        )
