import time
from collections.abc import Callable
from dataclasses import dataclass

from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from dossier_registry.errors import ApiEntrepriseError, RecordNotFound
from dossier_registry.settings import Settings, settings

# Retrying these cannot change the outcome.
NON_RETRYABLE: tuple[type[BaseException], ...] = (RecordNotFound, ApiEntrepriseError)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    wait_multiplier: float = 3.0
    wait_min: float = 3.0
    wait_max: float = 600.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    @classmethod
    def from_settings(cls, app_settings: Settings = settings) -> "RetryPolicy":
        return cls(
            max_attempts=app_settings.max_attempts_api_entreprise_jobs,
            wait_multiplier=app_settings.job_retry_wait_multiplier,
            wait_min=app_settings.job_retry_wait_min,
            wait_max=app_settings.job_retry_wait_max,
        )

    def is_retryable(self, exc: BaseException) -> bool:
        return isinstance(exc, Exception) and not isinstance(exc, NON_RETRYABLE)

    def retrying(
        self,
        *,
        sleep: Callable[[float], None] = time.sleep,
        before_sleep: Callable[[RetryCallState], None] | None = None,
    ) -> Retrying:
        return Retrying(
            retry=retry_if_exception(self.is_retryable),
            wait=wait_exponential(multiplier=self.wait_multiplier, min=self.wait_min, max=self.wait_max),
            stop=stop_after_attempt(self.max_attempts),
            sleep=sleep,
            before_sleep=before_sleep,
            reraise=True,
        )
