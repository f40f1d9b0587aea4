"""In-memory job registry shared by the publish and video handlers.

Append-only, process-lifetime log of job records. Insertion order is
iteration order. Nothing is evicted or persisted; on process restart the
records are lost. All access goes through a single lock so fan-out threads
can append concurrently.
"""

import logging
import threading
from typing import Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """A terminal transition was requested on a job that already finished."""


class JobNotFoundError(KeyError):
    """No job with the given id exists in the registry."""


class TrackedJob(Protocol):
    id: str

    @property
    def is_terminal(self) -> bool: ...

    def mark_succeeded(self, *args, **kwargs) -> None: ...

    def mark_failed(self, error: str) -> None: ...


JobT = TypeVar("JobT", bound=TrackedJob)


class JobRegistry(Generic[JobT]):
    def __init__(self, name: str = "jobs"):
        self.name = name
        self._jobs: dict[str, JobT] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def append(self, job: JobT) -> None:
        """Add a job. Its id must already be assigned and unused."""
        with self._lock:
            if job.id in self._jobs:
                raise ValueError(f"Duplicate job id in {self.name}: {job.id}")
            self._jobs[job.id] = job
        logger.debug("%s: appended %s", self.name, job.id)

    def get(self, job_id: str) -> JobT | None:
        with self._lock:
            return self._jobs.get(job_id)

    def list(self, limit: int = 50) -> list[JobT]:
        """Return the ``limit`` most recently appended jobs, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            jobs = list(self._jobs.values())
        return jobs[-limit:]

    def total(self) -> int:
        with self._lock:
            return len(self._jobs)

    def complete(self, job_id: str, **details) -> JobT:
        """Apply the success transition; ``details`` go to ``mark_succeeded``."""
        with self._lock:
            job = self._require(job_id)
            job.mark_succeeded(**details)
        logger.info("%s: %s succeeded", self.name, job_id)
        return job

    def fail(self, job_id: str, error: str) -> JobT:
        """Apply the failure transition with a human-readable reason."""
        with self._lock:
            job = self._require(job_id)
            job.mark_failed(error)
        logger.info("%s: %s failed: %s", self.name, job_id, error)
        return job

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, job_id: str) -> JobT:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if job.is_terminal:
            raise InvalidTransitionError(
                f"Job {job_id} already finished with status '{job.status.value}'"
            )
        return job
