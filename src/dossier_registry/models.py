from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


# ── API Entreprise payloads ───────────────────────────────────────────────────


class ApiTrancheEffectif(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str | None = None
    intitule: str | None = None


class ApiEntreprise(BaseModel):
    model_config = ConfigDict(extra="ignore")

    siren: str
    capital_social: int | None = None
    numero_tva_intracommunautaire: str | None = None
    forme_juridique: str | None = None
    forme_juridique_code: str | None = None
    nom_commercial: str | None = None
    raison_sociale: str | None = None
    siret_siege_social: str | None = None
    tranche_effectif_salarie_entreprise: ApiTrancheEffectif | None = None
    # Unix timestamp.
    date_creation: int | None = None
    nom: str | None = None
    prenom: str | None = None


class ApiEntrepriseResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entreprise: ApiEntreprise


class ApiAdresse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    l1: str | None = None
    l2: str | None = None
    l3: str | None = None
    l4: str | None = None
    l5: str | None = None
    l6: str | None = None
    l7: str | None = None
    numero_voie: str | None = None
    type_voie: str | None = None
    nom_voie: str | None = None
    complement_adresse: str | None = None
    code_postal: str | None = None
    localite: str | None = None
    code_insee_localite: str | None = None


class ApiEtablissement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    siret: str
    siege_social: bool | None = None
    naf: str | None = None
    libelle_naf: str | None = None
    adresse: ApiAdresse | None = None


class ApiEtablissementResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    etablissement: ApiEtablissement


class ApiExercice(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    ca: str | None = None
    date_fin_exercice: datetime | None = None
    date_fin_exercice_timestamp: int | None = None


class ApiExercicesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    exercices: list[ApiExercice]


class ApiAssociation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    titre: str | None = None
    objet: str | None = None
    date_creation: date | None = None
    date_declaration: date | None = None
    date_publication: date | None = None


class ApiAssociationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    association: ApiAssociation


# ── Attribute sets persisted onto an Etablissement ────────────────────────────
#
# Only fields declared here can reach the database.


class EntrepriseAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    siren: str | None = None
    capital_social: int | None = None
    numero_tva_intracommunautaire: str | None = None
    forme_juridique: str | None = None
    forme_juridique_code: str | None = None
    nom_commercial: str | None = None
    raison_sociale: str | None = None
    siret_siege_social: str | None = None
    code_effectif_entreprise: str | None = None
    date_creation: date | None = None
    nom: str | None = None
    prenom: str | None = None


class EtablissementAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    siret: str = Field(min_length=1)
    siege_social: bool | None = None
    naf: str | None = None
    libelle_naf: str | None = None
    adresse: str | None = None
    numero_voie: str | None = None
    type_voie: str | None = None
    nom_voie: str | None = None
    complement_adresse: str | None = None
    code_postal: str | None = None
    localite: str | None = None
    code_insee_localite: str | None = None


class ExerciceAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, coerce_numbers_to_str=True)

    ca: str | None = None
    date_fin_exercice: datetime | None = None
    date_fin_exercice_timestamp: int | None = None


class ExercicesAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    exercices: list[ExerciceAttributes]


class AssociationAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    association_rna: str | None = None
    association_titre: str | None = None
    association_objet: str | None = None
    association_date_creation: date | None = None
    association_date_declaration: date | None = None
    association_date_publication: date | None = None


# ── Read-only projection used for display ─────────────────────────────────────


class Entreprise(BaseModel):
    model_config = ConfigDict(frozen=True)

    siren: str | None = None
    capital_social: int | None = None
    numero_tva_intracommunautaire: str | None = None
    forme_juridique: str | None = None
    forme_juridique_code: str | None = None
    nom_commercial: str | None = None
    raison_sociale: str | None = None
    siret_siege_social: str | None = None
    code_effectif_entreprise: str | None = None
    date_creation: date | None = None
    nom: str | None = None
    prenom: str | None = None
    inline_adresse: str | None = None

    @property
    def display_name(self) -> str:
        if self.raison_sociale:
            return self.raison_sociale
        person = " ".join(p for p in [self.prenom, self.nom] if p)
        return person or self.siren or ""
