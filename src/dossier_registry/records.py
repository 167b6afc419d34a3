import re

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Session, relationship, validates

from dossier_registry.db import Base
from dossier_registry.errors import RecordNotFound
from dossier_registry.models import (
    AssociationAttributes,
    Entreprise,
    EntrepriseAttributes,
    EtablissementAttributes,
    ExercicesAttributes,
)

_SPACES = re.compile(r" {2,}")


class Procedure(Base):
    __tablename__ = "procedures"

    id = Column(Integer, primary_key=True)
    libelle = Column(String(255), nullable=False)
    # Overrides the default API Entreprise token when set.
    api_entreprise_token = Column(Text)
    ask_exercices = Column(Boolean, nullable=False, default=False)
    published = Column(Boolean, nullable=False, default=False)
    archived = Column(Boolean, nullable=False, default=False)

    dossiers = relationship("Dossier", back_populates="procedure")


class Dossier(Base):
    __tablename__ = "dossiers"

    id = Column(Integer, primary_key=True)
    procedure_id = Column(Integer, ForeignKey("procedures.id"), nullable=False, index=True)
    state = Column(String(30), nullable=False, default="draft")

    procedure = relationship("Procedure", back_populates="dossiers")
    etablissement = relationship(
        "Etablissement",
        back_populates="dossier",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def reset(self) -> None:
        """Drop the captured etablissement so a new SIRET can be entered."""
        self.etablissement = None


class Etablissement(Base):
    __tablename__ = "etablissements"

    id = Column(Integer, primary_key=True)
    dossier_id = Column(Integer, ForeignKey("dossiers.id"), unique=True, nullable=True)
    siret = Column(String(14), nullable=False, index=True)

    siege_social = Column(Boolean)
    naf = Column(String(10))
    libelle_naf = Column(Text)
    adresse = Column(Text)
    numero_voie = Column(String(20))
    type_voie = Column(String(50))
    nom_voie = Column(Text)
    complement_adresse = Column(Text)
    code_postal = Column(String(10))
    localite = Column(String(255))
    code_insee_localite = Column(String(10))

    siren = Column(String(9), index=True)
    capital_social = Column(Integer)
    numero_tva_intracommunautaire = Column(String(20))
    forme_juridique = Column(String(255))
    forme_juridique_code = Column(String(10))
    nom_commercial = Column(Text)
    raison_sociale = Column(Text)
    siret_siege_social = Column(String(14))
    code_effectif_entreprise = Column(String(5))
    date_creation = Column(Date)
    nom = Column(String(255))
    prenom = Column(String(255))

    association_rna = Column(String(20))
    association_titre = Column(Text)
    association_objet = Column(Text)
    association_date_creation = Column(Date)
    association_date_declaration = Column(Date)
    association_date_publication = Column(Date)

    dossier = relationship("Dossier", back_populates="etablissement")
    exercices = relationship(
        "Exercice",
        back_populates="etablissement",
        cascade="all, delete-orphan",
        order_by="Exercice.date_fin_exercice",
    )

    @validates("siret")
    def _validate_siret(self, key: str, value: str | None) -> str:
        if not value or not value.strip():
            raise ValueError("siret can't be blank")
        return value

    @classmethod
    def find(cls, session: Session, etablissement_id: int) -> "Etablissement":
        etablissement = session.get(cls, etablissement_id)
        if etablissement is None:
            raise RecordNotFound(f"Etablissement {etablissement_id}")
        return etablissement

    def apply(self, attributes: EntrepriseAttributes | EtablissementAttributes | AssociationAttributes) -> None:
        for name, value in attributes.model_dump().items():
            setattr(self, name, value)

    def replace_exercices(self, attributes: ExercicesAttributes) -> None:
        self.exercices = [Exercice(**x.model_dump()) for x in attributes.exercices]

    @property
    def is_association(self) -> bool:
        return bool(self.association_rna)

    @property
    def geo_adresse(self) -> str:
        parts = [
            self.numero_voie,
            self.type_voie,
            self.nom_voie,
            self.complement_adresse,
            self.code_postal,
            self.localite,
        ]
        return " ".join(p or "" for p in parts)

    @property
    def inline_adresse(self) -> str:
        voie = f"{self.numero_voie or ''} {self.type_voie or ''} {self.nom_voie or ''}"
        ville = f"{self.code_postal or ''} {self.localite or ''}"
        parts = [p for p in [voie, self.complement_adresse, ville] if p and p.strip()]
        return _SPACES.sub(" ", ", ".join(p.strip() for p in parts))

    def search_terms(self) -> list[str | None]:
        return [
            self.siren,
            self.numero_tva_intracommunautaire,
            self.forme_juridique,
            self.forme_juridique_code,
            self.nom_commercial,
            self.raison_sociale,
            self.siret_siege_social,
            self.nom,
            self.prenom,
            self.association_rna,
            self.association_titre,
            self.association_objet,
            self.siret,
            self.naf,
            self.libelle_naf,
            self.adresse,
            self.code_postal,
            self.localite,
            self.code_insee_localite,
        ]

    def entreprise(self) -> Entreprise:
        return Entreprise(
            siren=self.siren,
            capital_social=self.capital_social,
            numero_tva_intracommunautaire=self.numero_tva_intracommunautaire,
            forme_juridique=self.forme_juridique,
            forme_juridique_code=self.forme_juridique_code,
            nom_commercial=self.nom_commercial,
            raison_sociale=self.raison_sociale,
            siret_siege_social=self.siret_siege_social,
            code_effectif_entreprise=self.code_effectif_entreprise,
            date_creation=self.date_creation,
            nom=self.nom,
            prenom=self.prenom,
            inline_adresse=self.inline_adresse,
        )


class Exercice(Base):
    __tablename__ = "exercices"

    id = Column(Integer, primary_key=True)
    etablissement_id = Column(Integer, ForeignKey("etablissements.id"), nullable=False, index=True)
    ca = Column(String(40))
    date_fin_exercice = Column(DateTime(timezone=True))
    date_fin_exercice_timestamp = Column(Integer)

    etablissement = relationship("Etablissement", back_populates="exercices")

    @property
    def annee(self) -> int | None:
        return self.date_fin_exercice.year if self.date_fin_exercice else None


def procedure_token_resolver(session_factory):
    """Per-procedure API Entreprise token lookup for ``ApiEntrepriseClient``."""

    def resolve(procedure_id: int) -> str | None:
        with session_factory() as session:
            procedure = session.get(Procedure, procedure_id)
            return procedure.api_entreprise_token if procedure else None

    return resolve
