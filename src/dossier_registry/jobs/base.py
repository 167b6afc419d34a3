from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel
from sqlalchemy.orm import Session

from dossier_registry.adapters import ApiEntrepriseAdapter, BadRequest, Fetched, NotFound
from dossier_registry.clients.api_entreprise import ApiEntrepriseClient
from dossier_registry.errors import DossierRegistryError
from dossier_registry.logger import get_logger
from dossier_registry.records import Etablissement

logger = get_logger(__name__)


class JobState(str, Enum):
    ENQUEUED = "enqueued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED_RETRYABLE = "failed_retryable"
    FAILED_TERMINAL = "failed_terminal"


class JobOutcome(str, Enum):
    SYNCED = "synced"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"


class TransientFetchError(DossierRegistryError):
    """The registry call failed in a way that may succeed on a later attempt."""


@dataclass
class JobRun:
    job_name: str
    etablissement_id: int
    procedure_id: int
    state: JobState = JobState.ENQUEUED
    attempts: int = 0
    outcome: JobOutcome | None = None
    error: BaseException | None = None
    reported: bool = False
    history: list[JobState] = field(default_factory=lambda: [JobState.ENQUEUED])

    def transition(self, state: JobState) -> None:
        self.state = state
        self.history.append(state)


class ApiEntrepriseJob:
    """Fetches one API Entreprise resource for an etablissement and stores it.

    Expected registry answers (unknown or malformed SIRET) end the job with
    a ``JobOutcome``. Anything else is raised as ``TransientFetchError`` and
    left to the executor's retry policy.
    """

    name = ""
    adapter_class: type[ApiEntrepriseAdapter] = ApiEntrepriseAdapter

    def __init__(self, client: ApiEntrepriseClient) -> None:
        self.client = client

    def persist(self, etablissement: Etablissement, attributes: BaseModel) -> None:
        raise NotImplementedError

    def perform(self, session: Session, etablissement_id: int, procedure_id: int) -> JobOutcome:
        etablissement = Etablissement.find(session, etablissement_id)
        result = self.adapter_class(etablissement.siret, procedure_id, self.client).fetch()

        if isinstance(result, Fetched):
            self.persist(etablissement, result.attributes)
            return JobOutcome.SYNCED

        if isinstance(result, NotFound):
            logger.info("%s: %s unknown to the registry, skipping", self.name, result.resource)
            return JobOutcome.NOT_FOUND

        if isinstance(result, BadRequest):
            logger.warning("%s: registry rejected %s as malformed, skipping", self.name, result.resource)
            return JobOutcome.BAD_REQUEST

        raise TransientFetchError(f"{self.name} for etablissement {etablissement_id}") from result.error
