from typing import Protocol

from dossier_registry.logger import get_logger

logger = get_logger(__name__)


class ErrorReporter(Protocol):
    """Operator-facing channel for failures that need a human."""

    def report(self, job_name: str, exc: BaseException, *, context: dict[str, object]) -> None: ...


class LoggingErrorReporter:
    def report(self, job_name: str, exc: BaseException, *, context: dict[str, object]) -> None:
        logger.error("job %s failed: %r context=%s", job_name, exc, context, exc_info=exc)
