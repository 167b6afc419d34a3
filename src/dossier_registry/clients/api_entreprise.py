from collections.abc import Callable

import httpx

from dossier_registry.errors import BadFormatRequest, ResourceNotFound
from dossier_registry.logger import get_logger
from dossier_registry.models import (
    ApiAssociationResponse,
    ApiEntrepriseResponse,
    ApiEtablissementResponse,
    ApiExercicesResponse,
)
from dossier_registry.settings import Settings, settings

logger = get_logger(__name__)

TokenResolver = Callable[[int], str | None]


class ApiEntrepriseClient:
    """Read-only client for the v2 endpoints of API Entreprise.

    404 and 400 answers are mapped to ``ResourceNotFound`` and
    ``BadFormatRequest``. Any other HTTP error surfaces as
    ``httpx.HTTPStatusError`` and transport failures propagate as raised by
    httpx.
    """

    def __init__(
        self,
        *,
        app_settings: Settings = settings,
        http: httpx.Client | None = None,
        token_resolver: TokenResolver | None = None,
    ) -> None:
        self._settings = app_settings
        self._token_resolver = token_resolver
        self._http = http or httpx.Client(
            base_url=self._settings.api_entreprise_base_url,
            timeout=httpx.Timeout(self._settings.http_timeout_seconds),
            headers={"user-agent": "dossier-registry/0.1"},
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ApiEntrepriseClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def token_for(self, procedure_id: int) -> str | None:
        if self._token_resolver is not None:
            token = self._token_resolver(procedure_id)
            if token:
                return token
        return self._settings.api_entreprise_token

    def _params(self, procedure_id: int) -> dict[str, str]:
        params = {
            "context": self._settings.api_entreprise_context,
            "recipient": self._settings.api_entreprise_recipient,
            "object": f"procedure_id: {procedure_id}",
        }
        token = self.token_for(procedure_id)
        if token:
            params["token"] = token
        return params

    def _get_json(self, resource: str, identifier: str, procedure_id: int) -> dict:
        path = f"/v2/{resource}/{identifier}"
        resp = self._http.get(path, params=self._params(procedure_id))

        if resp.status_code == 404:
            logger.info("api entreprise: %s %s not found", resource, identifier)
            raise ResourceNotFound(f"{resource}/{identifier}")
        if resp.status_code == 400:
            logger.warning("api entreprise: %s %s rejected as malformed", resource, identifier)
            raise BadFormatRequest(f"{resource}/{identifier}")

        resp.raise_for_status()
        return resp.json()

    def entreprise(self, siren: str, procedure_id: int) -> ApiEntrepriseResponse:
        data = self._get_json("entreprises", siren, procedure_id)
        return ApiEntrepriseResponse.model_validate(data)

    def etablissement(self, siret: str, procedure_id: int) -> ApiEtablissementResponse:
        data = self._get_json("etablissements", siret, procedure_id)
        return ApiEtablissementResponse.model_validate(data)

    def exercices(self, siret: str, procedure_id: int) -> ApiExercicesResponse:
        data = self._get_json("exercices", siret, procedure_id)
        return ApiExercicesResponse.model_validate(data)

    def association(self, siret: str, procedure_id: int) -> ApiAssociationResponse:
        data = self._get_json("associations", siret, procedure_id)
        return ApiAssociationResponse.model_validate(data)
