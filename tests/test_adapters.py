from datetime import date

import httpx
import pytest
from pydantic import ValidationError

from dossier_registry.adapters import (
    AssociationAdapter,
    BadRequest,
    EntrepriseAdapter,
    EtablissementAdapter,
    ExercicesAdapter,
    Fetched,
    NotFound,
    TransientError,
)
from dossier_registry.errors import BadFormatRequest, ResourceNotFound
from dossier_registry.models import EntrepriseAttributes

SIRET = "73282932000074"


def test_entreprise_adapter_maps_company_fields(fake_client) -> None:
    client = fake_client(
        {
            "entreprises": {
                "entreprise": {
                    "siren": "732829320",
                    "raison_sociale": "ACME",
                    "forme_juridique": "SARL",
                    "forme_juridique_code": "5499",
                    "capital_social": 50000,
                    "tranche_effectif_salarie_entreprise": {"code": "11", "intitule": "10 a 19 salaries"},
                    "date_creation": 1104537600,
                }
            }
        }
    )

    params = EntrepriseAdapter(SIRET, 7, client).to_params()

    assert params.siren == "732829320"
    assert params.raison_sociale == "ACME"
    assert params.code_effectif_entreprise == "11"
    assert params.date_creation == date(2005, 1, 1)
    assert client.calls == [("entreprises", "732829320", 7)]


def test_etablissement_adapter_flattens_address(fake_client) -> None:
    client = fake_client(
        {
            "etablissements": {
                "etablissement": {
                    "siret": SIRET,
                    "siege_social": True,
                    "naf": "6201Z",
                    "libelle_naf": "Programmation informatique",
                    "adresse": {
                        "l1": "ACME",
                        "l4": "1 RUE DE LA PAIX",
                        "l6": "75002 PARIS",
                        "numero_voie": "1",
                        "type_voie": "RUE",
                        "nom_voie": "DE LA PAIX",
                        "code_postal": "75002",
                        "localite": "PARIS",
                        "code_insee_localite": "75102",
                    },
                }
            }
        }
    )

    params = EtablissementAdapter(SIRET, 1, client).to_params()

    assert params.siret == SIRET
    assert params.adresse == "ACME\r\n1 RUE DE LA PAIX\r\n75002 PARIS"
    assert params.nom_voie == "DE LA PAIX"
    assert params.code_insee_localite == "75102"


def test_exercices_adapter_keeps_every_fiscal_year(fake_client) -> None:
    client = fake_client(
        {
            "exercices": {
                "exercices": [
                    {"ca": "100000", "date_fin_exercice": "2022-12-31T00:00:00+01:00"},
                    {"ca": "90000", "date_fin_exercice": "2021-12-31T00:00:00+01:00"},
                ]
            }
        }
    )

    params = ExercicesAdapter(SIRET, 1, client).to_params()

    assert [x.ca for x in params.exercices] == ["100000", "90000"]
    assert params.exercices[0].date_fin_exercice.year == 2022


def test_association_adapter_prefixes_fields(fake_client) -> None:
    client = fake_client(
        {"associations": {"association": {"id": "W751080001", "titre": "Les amis", "date_creation": "1990-05-04"}}}
    )

    params = AssociationAdapter(SIRET, 1, client).to_params()

    assert params.association_rna == "W751080001"
    assert params.association_titre == "Les amis"
    assert params.association_date_creation == date(1990, 5, 4)


def test_fetch_wraps_success(fake_client) -> None:
    client = fake_client({"entreprises": {"entreprise": {"siren": "732829320"}}})

    result = EntrepriseAdapter(SIRET, 1, client).fetch()

    assert isinstance(result, Fetched)
    assert result.attributes.siren == "732829320"


def test_fetch_maps_expected_registry_failures(fake_client) -> None:
    client = fake_client({"entreprises": ResourceNotFound("x"), "exercices": BadFormatRequest("y")})

    assert EntrepriseAdapter(SIRET, 1, client).fetch() == NotFound(f"entreprises/{SIRET}")
    assert ExercicesAdapter(SIRET, 1, client).fetch() == BadRequest(f"exercices/{SIRET}")


def test_fetch_keeps_other_errors_as_transient(fake_client) -> None:
    boom = httpx.ConnectError("down")
    client = fake_client({"entreprises": boom, "exercices": {"unexpected": []}})

    network = EntrepriseAdapter(SIRET, 1, client).fetch()
    shape = ExercicesAdapter(SIRET, 1, client).fetch()

    assert isinstance(network, TransientError)
    assert network.error is boom
    assert isinstance(shape, TransientError)
    assert isinstance(shape.error, ValidationError)


def test_attribute_sets_reject_unexpected_fields() -> None:
    with pytest.raises(ValidationError):
        EntrepriseAttributes(raison_sociale="ACME", tranche_effectif="11")


def test_creation_timestamp_is_read_in_paris_time(fake_client) -> None:
    # 2005-01-27 00:00 Europe/Paris, i.e. 2005-01-26 23:00 UTC.
    client = fake_client({"entreprises": {"entreprise": {"siren": "732829320", "date_creation": 1106780400}}})

    params = EntrepriseAdapter(SIRET, 1, client).to_params()

    assert params.date_creation == date(2005, 1, 27)


def test_creation_timestamp_in_summer_time(fake_client) -> None:
    # 2019-07-01 00:00 Europe/Paris (UTC+2).
    client = fake_client({"entreprises": {"entreprise": {"siren": "732829320", "date_creation": 1561932000}}})

    params = EntrepriseAdapter(SIRET, 1, client).to_params()

    assert params.date_creation == date(2019, 7, 1)


def test_numeric_turnover_is_kept_as_text(fake_client) -> None:
    client = fake_client({"exercices": {"exercices": [{"ca": 100000, "date_fin_exercice": "2022-12-31T00:00:00+01:00"}]}})

    params = ExercicesAdapter(SIRET, 1, client).to_params()

    assert params.exercices[0].ca == "100000"
