import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from dossier_registry.db import create_schema, make_session_factory
from dossier_registry.models import (
    ApiAssociationResponse,
    ApiEntrepriseResponse,
    ApiEtablissementResponse,
    ApiExercicesResponse,
)
from dossier_registry.records import Etablissement, Procedure


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    create_schema(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def procedure_id(session_factory) -> int:
    with session_factory() as session:
        procedure = Procedure(libelle="Aide aux entreprises", published=True, ask_exercices=True)
        session.add(procedure)
        session.commit()
        return procedure.id


@pytest.fixture()
def etablissement_id(session_factory) -> int:
    with session_factory() as session:
        etablissement = Etablissement(siret="12345678901234")
        session.add(etablissement)
        session.commit()
        return etablissement.id


class FakeApiEntrepriseClient:
    """Stands in for ``ApiEntrepriseClient``.

    ``answers`` maps a resource name to a payload dict, an exception to
    raise, or a list of those consumed in order (the last one repeats).
    """

    def __init__(self, answers: dict[str, object]) -> None:
        self._answers = answers
        self.calls: list[tuple[str, str, int]] = []

    def _answer(self, resource: str, identifier: str, procedure_id: int, model):
        self.calls.append((resource, identifier, procedure_id))
        answer = self._answers[resource]
        if isinstance(answer, list):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, BaseException):
            raise answer
        return model.model_validate(answer)

    def entreprise(self, siren: str, procedure_id: int) -> ApiEntrepriseResponse:
        return self._answer("entreprises", siren, procedure_id, ApiEntrepriseResponse)

    def etablissement(self, siret: str, procedure_id: int) -> ApiEtablissementResponse:
        return self._answer("etablissements", siret, procedure_id, ApiEtablissementResponse)

    def exercices(self, siret: str, procedure_id: int) -> ApiExercicesResponse:
        return self._answer("exercices", siret, procedure_id, ApiExercicesResponse)

    def association(self, siret: str, procedure_id: int) -> ApiAssociationResponse:
        return self._answer("associations", siret, procedure_id, ApiAssociationResponse)


@pytest.fixture()
def fake_client():
    return FakeApiEntrepriseClient
