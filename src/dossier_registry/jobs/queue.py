import threading
from collections import deque
from dataclasses import dataclass

from dossier_registry.jobs.base import JobOutcome, JobState
from dossier_registry.jobs.executor import JobExecutor
from dossier_registry.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class JobMessage:
    job_name: str
    etablissement_id: int
    procedure_id: int


@dataclass
class WorkerRunStats:
    processed: int = 0
    succeeded: int = 0
    suppressed: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "suppressed": self.suppressed,
            "failed": self.failed,
        }


class JobQueue:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._messages: deque[JobMessage] = deque()

    def enqueue(self, job_name: str, etablissement_id: int, procedure_id: int) -> JobMessage:
        msg = JobMessage(job_name=job_name, etablissement_id=etablissement_id, procedure_id=procedure_id)
        with self._lock:
            self._messages.append(msg)
        logger.debug("enqueued %s", msg)
        return msg

    def dequeue(self) -> JobMessage | None:
        with self._lock:
            return self._messages.popleft() if self._messages else None

    def pending_count(self) -> int:
        with self._lock:
            return len(self._messages)


class Worker:
    def __init__(self, queue: JobQueue, executor: JobExecutor) -> None:
        self.queue = queue
        self.executor = executor
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None
        self.totals = WorkerRunStats()

    def run_once(self) -> dict[str, int]:
        stats = WorkerRunStats()
        while True:
            msg = self.queue.dequeue()
            if msg is None:
                break
            stats.processed += 1
            run = self.executor.perform_now(msg.job_name, msg.etablissement_id, msg.procedure_id)
            if run.state is JobState.SUCCEEDED:
                stats.succeeded += 1
            elif run.outcome in (JobOutcome.NOT_FOUND, JobOutcome.BAD_REQUEST):
                stats.suppressed += 1
            else:
                stats.failed += 1
        return stats.as_dict()

    def run_forever(self, poll_interval: float = 1.0) -> None:
        logger.info("worker started")
        while not self._stopped.is_set():
            stats = self.run_once()
            for key, value in stats.items():
                setattr(self.totals, key, getattr(self.totals, key) + value)
            if not stats["processed"]:
                self._stopped.wait(poll_interval)
        logger.info("worker stopped")

    def start(self, poll_interval: float = 1.0) -> threading.Thread:
        """Run the worker on a daemon thread, off the caller's request path."""
        if self._thread is None or not self._thread.is_alive():
            self._stopped.clear()
            self._thread = threading.Thread(
                target=self.run_forever,
                kwargs={"poll_interval": poll_interval},
                name="api-entreprise-worker",
                daemon=True,
            )
            self._thread.start()
        return self._thread

    def stop(self, timeout: float | None = None) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join(timeout)
