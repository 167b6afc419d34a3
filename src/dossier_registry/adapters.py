from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from dossier_registry.clients.api_entreprise import ApiEntrepriseClient
from dossier_registry.errors import BadFormatRequest, ResourceNotFound
from dossier_registry.models import (
    ApiAdresse,
    AssociationAttributes,
    EntrepriseAttributes,
    EtablissementAttributes,
    ExerciceAttributes,
    ExercicesAttributes,
)
from dossier_registry.siret import siren_of

# API Entreprise timestamps mark midnight, Paris time.
PARIS = ZoneInfo("Europe/Paris")


@dataclass(frozen=True)
class Fetched:
    attributes: BaseModel


@dataclass(frozen=True)
class NotFound:
    resource: str


@dataclass(frozen=True)
class BadRequest:
    resource: str


@dataclass(frozen=True)
class TransientError:
    error: Exception


FetchResult = Fetched | NotFound | BadRequest | TransientError


def _date_from_timestamp(ts: int | None) -> date | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=PARIS).date()


def _inline_lines(adresse: ApiAdresse) -> str | None:
    lines = [adresse.l1, adresse.l2, adresse.l3, adresse.l4, adresse.l5, adresse.l6, adresse.l7]
    kept = [line for line in lines if line]
    return "\r\n".join(kept) if kept else None


class ApiEntrepriseAdapter:
    """Turns one API Entreprise resource into an attribute set for an Etablissement.

    ``to_params`` raises the client's errors. ``fetch`` never raises: it
    wraps the outcome so the caller decides what each failure means.
    """

    resource = ""

    def __init__(self, siret: str, procedure_id: int, client: ApiEntrepriseClient) -> None:
        self.siret = siret
        self.procedure_id = procedure_id
        self.client = client

    def to_params(self) -> BaseModel:
        raise NotImplementedError

    def fetch(self) -> FetchResult:
        try:
            return Fetched(self.to_params())
        except ResourceNotFound:
            return NotFound(f"{self.resource}/{self.siret}")
        except BadFormatRequest:
            return BadRequest(f"{self.resource}/{self.siret}")
        except Exception as exc:
            return TransientError(exc)


class EntrepriseAdapter(ApiEntrepriseAdapter):
    resource = "entreprises"

    def to_params(self) -> EntrepriseAttributes:
        e = self.client.entreprise(siren_of(self.siret), self.procedure_id).entreprise
        tranche = e.tranche_effectif_salarie_entreprise

        return EntrepriseAttributes(
            siren=e.siren,
            capital_social=e.capital_social,
            numero_tva_intracommunautaire=e.numero_tva_intracommunautaire,
            forme_juridique=e.forme_juridique,
            forme_juridique_code=e.forme_juridique_code,
            nom_commercial=e.nom_commercial,
            raison_sociale=e.raison_sociale,
            siret_siege_social=e.siret_siege_social,
            code_effectif_entreprise=tranche.code if tranche else None,
            date_creation=_date_from_timestamp(e.date_creation),
            nom=e.nom,
            prenom=e.prenom,
        )


class EtablissementAdapter(ApiEntrepriseAdapter):
    resource = "etablissements"

    def to_params(self) -> EtablissementAttributes:
        e = self.client.etablissement(self.siret, self.procedure_id).etablissement
        adresse = e.adresse or ApiAdresse()

        return EtablissementAttributes(
            siret=e.siret,
            siege_social=e.siege_social,
            naf=e.naf,
            libelle_naf=e.libelle_naf,
            adresse=_inline_lines(adresse),
            numero_voie=adresse.numero_voie,
            type_voie=adresse.type_voie,
            nom_voie=adresse.nom_voie,
            complement_adresse=adresse.complement_adresse,
            code_postal=adresse.code_postal,
            localite=adresse.localite,
            code_insee_localite=adresse.code_insee_localite,
        )


class ExercicesAdapter(ApiEntrepriseAdapter):
    resource = "exercices"

    def to_params(self) -> ExercicesAttributes:
        resp = self.client.exercices(self.siret, self.procedure_id)

        return ExercicesAttributes(
            exercices=[
                ExerciceAttributes(
                    ca=x.ca,
                    date_fin_exercice=x.date_fin_exercice,
                    date_fin_exercice_timestamp=x.date_fin_exercice_timestamp,
                )
                for x in resp.exercices
            ]
        )


class AssociationAdapter(ApiEntrepriseAdapter):
    resource = "associations"

    def to_params(self) -> AssociationAttributes:
        a = self.client.association(self.siret, self.procedure_id).association

        return AssociationAttributes(
            association_rna=a.id,
            association_titre=a.titre,
            association_objet=a.objet,
            association_date_creation=a.date_creation,
            association_date_declaration=a.date_declaration,
            association_date_publication=a.date_publication,
        )
