import time
from collections.abc import Callable

from sqlalchemy.orm import sessionmaker
from tenacity import RetryCallState

from dossier_registry.clients.api_entreprise import ApiEntrepriseClient
from dossier_registry.db import session_scope
from dossier_registry.jobs.api_entreprise import JOBS
from dossier_registry.jobs.base import ApiEntrepriseJob, JobOutcome, JobRun, JobState
from dossier_registry.jobs.reporting import ErrorReporter, LoggingErrorReporter
from dossier_registry.jobs.retry import RetryPolicy
from dossier_registry.logger import get_logger

logger = get_logger(__name__)


class JobExecutor:
    """Runs registry jobs with a retry policy and reports what cannot be retried away.

    Each attempt gets its own session; a failed attempt is rolled back so
    retries always start from the committed row.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker,
        client: ApiEntrepriseClient,
        policy: RetryPolicy | None = None,
        reporter: ErrorReporter | None = None,
        jobs: dict[str, type[ApiEntrepriseJob]] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session_factory = session_factory
        self._client = client
        self.policy = policy or RetryPolicy.from_settings()
        self._reporter = reporter or LoggingErrorReporter()
        self._jobs = jobs or JOBS
        self._sleep = sleep

    @property
    def job_names(self) -> list[str]:
        return sorted(self._jobs)

    def perform_now(self, job_name: str, etablissement_id: int, procedure_id: int) -> JobRun:
        try:
            job = self._jobs[job_name](self._client)
        except KeyError:
            raise ValueError(f"unknown job: {job_name!r}") from None

        run = JobRun(job_name=job_name, etablissement_id=etablissement_id, procedure_id=procedure_id)

        def _before_sleep(state: RetryCallState) -> None:
            run.transition(JobState.FAILED_RETRYABLE)
            logger.warning(
                "%s for etablissement %s failed (attempt %s/%s), retrying: %r",
                job_name,
                etablissement_id,
                state.attempt_number,
                self.policy.max_attempts,
                state.outcome.exception() if state.outcome else None,
            )

        try:
            for attempt in self.policy.retrying(sleep=self._sleep, before_sleep=_before_sleep):
                with attempt:
                    run.attempts = attempt.retry_state.attempt_number
                    run.transition(JobState.RUNNING)
                    with session_scope(self._session_factory) as session:
                        run.outcome = job.perform(session, etablissement_id, procedure_id)
        except Exception as exc:
            run.error = exc
            run.transition(JobState.FAILED_TERMINAL)
            self._reporter.report(
                job_name,
                exc,
                context={
                    "etablissement_id": etablissement_id,
                    "procedure_id": procedure_id,
                    "attempts": run.attempts,
                },
            )
            run.reported = True
            return run

        if run.outcome is JobOutcome.SYNCED:
            run.transition(JobState.SUCCEEDED)
        else:
            run.transition(JobState.FAILED_TERMINAL)
        return run
