"""In-memory job tracking and the async transcode service.

The HTTP layer never blocks on a transcode: each submitted upload becomes
a job whose pipeline runs on a worker thread via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path

from hlsladder.domain.models import PublishedAsset
from hlsladder.pipeline.exceptions import EncodeCancelled, PipelineError
from hlsladder.pipeline.runner import TranscodePipeline

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """Lifecycle of a transcode job."""

    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class JobRecord:
    """State of one submitted upload."""

    job_id: str
    asset_id: str
    source_path: Path
    status: JobStatus = JobStatus.QUEUED
    stage: str | None = None
    error: PipelineError | None = None
    result: PublishedAsset | None = None
    created_at: datetime = field(default_factory=_now)
    finished_at: datetime | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event)

    def to_dict(self) -> dict:
        body: dict = {
            "job_id": self.job_id,
            "asset_id": self.asset_id,
            "status": self.status.value,
            "stage": self.stage,
            "created_at": self.created_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
        if self.error is not None:
            body["error"] = self.error.to_dict()
        if self.result is not None:
            body["result"] = self.result.to_dict()
        return body


class JobRegistry:
    """Thread-safe map of job id to JobRecord.

    Finished records are pruned whenever a job is created: those finished
    more than ``retention`` seconds ago go first, then the oldest beyond
    ``max_finished``. Queued and running records are always kept.
    """

    def __init__(self, retention: float = 3600.0, max_finished: int = 1000) -> None:
        self.retention = timedelta(seconds=retention)
        self.max_finished = max_finished
        self._jobs: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def create(self, asset_id: str, source_path: Path) -> JobRecord:
        record = JobRecord(
            job_id=uuid.uuid4().hex, asset_id=asset_id, source_path=source_path
        )
        with self._lock:
            self._prune()
            self._jobs[record.job_id] = record
        return record

    def _prune(self) -> None:
        cutoff = _now() - self.retention
        finished = sorted(
            (r for r in self._jobs.values() if r.finished_at is not None),
            key=lambda r: r.finished_at,
        )
        expired = [r for r in finished if r.finished_at < cutoff]
        kept = finished[len(expired):]
        if len(kept) > self.max_finished:
            expired.extend(kept[: len(kept) - self.max_finished])
        for record in expired:
            del self._jobs[record.job_id]
        if expired:
            logger.debug("Pruned %d finished job(s)", len(expired))

    def get(self, job_id: str) -> JobRecord | None:
        with self._lock:
            return self._jobs.get(job_id)

    def list(self) -> list[JobRecord]:
        with self._lock:
            return sorted(self._jobs.values(), key=lambda r: r.created_at)

    def update(self, job_id: str, **changes) -> None:
        with self._lock:
            record = self._jobs[job_id]
            for key, value in changes.items():
                setattr(record, key, value)


class TranscodeService:
    """Submits uploads to the pipeline and tracks them as jobs."""

    def __init__(
        self,
        pipeline: TranscodePipeline,
        job_retention: float = 3600.0,
        max_retained_jobs: int = 1000,
    ) -> None:
        self.pipeline = pipeline
        self.registry = JobRegistry(
            retention=job_retention, max_finished=max_retained_jobs
        )
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def store(self):
        return self.pipeline.store

    def submit(self, source_path: Path, original_name: str) -> JobRecord:
        """Allocate an asset and start its pipeline in the background.

        Must be called from a running event loop.
        """
        asset_id = self.store.allocate(original_name)
        record = self.registry.create(asset_id, source_path)
        task = asyncio.create_task(asyncio.to_thread(self._run_job, record.job_id))
        self._tasks[record.job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(record.job_id, None))
        logger.info(
            "Queued job %s for %s", record.job_id, asset_id,
            extra={"source": str(source_path)},
        )
        return record

    async def wait(self, job_id: str) -> JobRecord:
        """Wait for a job to reach a terminal state.

        Raises:
            KeyError: If the job is unknown.
        """
        record = self.registry.get(job_id)
        if record is None:
            raise KeyError(job_id)
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.shield(task)
        return record

    def get(self, job_id: str) -> JobRecord | None:
        return self.registry.get(job_id)

    def cancel(self, job_id: str) -> JobRecord | None:
        """Request cancellation of a job.

        A queued job never starts; a running encode is killed. Terminal
        jobs are left unchanged.
        """
        record = self.registry.get(job_id)
        if record is None:
            return None
        if not record.status.is_terminal:
            logger.info("Cancelling job %s", job_id)
            record.cancel_event.set()
        return record

    async def shutdown(self, timeout: float) -> None:
        """Cancel outstanding jobs and wait up to timeout for them to stop."""
        pending = list(self._tasks.values())
        for record in self.registry.list():
            if not record.status.is_terminal:
                record.cancel_event.set()
        if pending:
            logger.info("Waiting for %d job(s) to stop", len(pending))
            _, still_running = await asyncio.wait(pending, timeout=timeout)
            if still_running:
                logger.warning("%d job(s) did not stop in time", len(still_running))

    def _run_job(self, job_id: str) -> None:
        record = self.registry.get(job_id)
        assert record is not None
        try:
            self._run_pipeline(record)
        finally:
            self.store.release_upload(record.source_path)

    def _run_pipeline(self, record: JobRecord) -> None:
        job_id = record.job_id

        if record.cancel_event.is_set():
            self.store.discard(record.asset_id)
            self.registry.update(
                job_id, status=JobStatus.CANCELLED, finished_at=_now()
            )
            return

        self.registry.update(job_id, status=JobStatus.RUNNING)

        def on_stage(stage: str) -> None:
            self.registry.update(job_id, stage=stage)

        try:
            result = self.pipeline.run(
                record.source_path,
                asset_id=record.asset_id,
                cancel_event=record.cancel_event,
                on_stage=on_stage,
            )
        except EncodeCancelled as e:
            self.registry.update(
                job_id, status=JobStatus.CANCELLED, error=e, finished_at=_now()
            )
        except PipelineError as e:
            self.registry.update(
                job_id, status=JobStatus.FAILED, error=e, finished_at=_now()
            )
        except Exception as e:
            logger.exception("Job %s crashed", job_id)
            self.registry.update(
                job_id,
                status=JobStatus.FAILED,
                error=PipelineError(f"Internal error: {e}"),
                finished_at=_now(),
            )
        else:
            self.registry.update(
                job_id, status=JobStatus.SUCCEEDED, result=result, finished_at=_now()
            )
