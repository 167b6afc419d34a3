from sqlalchemy.orm import Session, sessionmaker

from dossier_registry.adapters import BadRequest, EtablissementAdapter, NotFound, TransientError
from dossier_registry.clients.api_entreprise import ApiEntrepriseClient
from dossier_registry.db import session_scope
from dossier_registry.errors import InvalidSiret, RecordNotFound, RegistryUnavailable, SiretAlreadyCaptured
from dossier_registry.jobs.api_entreprise import AssociationJob, EntrepriseJob, ExercicesJob
from dossier_registry.jobs.queue import JobQueue
from dossier_registry.logger import get_logger
from dossier_registry.records import Dossier, Etablissement, Procedure
from dossier_registry.siret import validate_siret

logger = get_logger(__name__)


class DossierService:
    """Dossier creation and SIRET capture.

    The establishment itself is looked up synchronously so the user gets
    immediate feedback on the SIRET; company, association and fiscal-year
    data are left to background jobs.
    """

    def __init__(self, *, session_factory: sessionmaker, client: ApiEntrepriseClient, queue: JobQueue) -> None:
        self._session_factory = session_factory
        self._client = client
        self._queue = queue

    def create(self, procedure_id: int) -> int:
        with session_scope(self._session_factory) as session:
            procedure = session.get(Procedure, procedure_id)
            if procedure is None or not procedure.published or procedure.archived:
                raise RecordNotFound(f"Procedure {procedure_id}")
            dossier = Dossier(procedure=procedure, state="draft")
            session.add(dossier)
            session.flush()
            return dossier.id

    def siret_informations(self, dossier_id: int, siret: str) -> int:
        siret = validate_siret(siret)

        with session_scope(self._session_factory) as session:
            dossier = self._dossier_awaiting_siret(session, dossier_id)
            procedure_id = dossier.procedure_id
            ask_exercices = dossier.procedure.ask_exercices

        # No transaction is held while the registry answers.
        result = EtablissementAdapter(siret, procedure_id, self._client).fetch()
        if isinstance(result, (NotFound, BadRequest)):
            raise InvalidSiret(f"SIRET {siret} rejected by the registry")
        if isinstance(result, TransientError):
            raise RegistryUnavailable(f"registry lookup failed for SIRET {siret}") from result.error

        with session_scope(self._session_factory) as session:
            dossier = self._dossier_awaiting_siret(session, dossier_id)
            etablissement = Etablissement(siret=siret, dossier=dossier)
            etablissement.apply(result.attributes)
            session.add(etablissement)
            session.flush()
            etablissement_id = etablissement.id

        job_names = [EntrepriseJob.name, AssociationJob.name]
        if ask_exercices:
            job_names.append(ExercicesJob.name)
        for job_name in job_names:
            self._queue.enqueue(job_name, etablissement_id, procedure_id)
        logger.info("dossier %s: SIRET %s captured, %d jobs enqueued", dossier_id, siret, len(job_names))
        return etablissement_id

    @staticmethod
    def _dossier_awaiting_siret(session: Session, dossier_id: int) -> Dossier:
        dossier = session.get(Dossier, dossier_id)
        if dossier is None:
            raise RecordNotFound(f"Dossier {dossier_id}")
        if dossier.etablissement is not None:
            raise SiretAlreadyCaptured(f"Dossier {dossier_id} already has SIRET {dossier.etablissement.siret}")
        return dossier

    def change_siret(self, dossier_id: int) -> None:
        with session_scope(self._session_factory) as session:
            dossier = session.get(Dossier, dossier_id)
            if dossier is None:
                raise RecordNotFound(f"Dossier {dossier_id}")
            dossier.reset()

    def etablissement(self, dossier_id: int) -> Etablissement | None:
        with session_scope(self._session_factory) as session:
            dossier = session.get(Dossier, dossier_id)
            if dossier is None:
                raise RecordNotFound(f"Dossier {dossier_id}")
            etablissement = dossier.etablissement
            if etablissement is not None:
                # Loaded before the session closes.
                list(etablissement.exercices)
            return etablissement
