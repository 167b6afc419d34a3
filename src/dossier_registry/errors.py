"""Exception hierarchy for the registry synchronization package."""


class DossierRegistryError(Exception):
    """Root of every error raised by this package."""


# ── Business registry ─────────────────────────────────────────────────────────

class ApiEntrepriseError(DossierRegistryError):
    """Raised when API Entreprise answers with an expected failure."""


class ResourceNotFound(ApiEntrepriseError):
    """The SIRET/SIREN is unknown to the registry (HTTP 404)."""


class BadFormatRequest(ApiEntrepriseError):
    """The registry rejected the request as malformed (HTTP 400)."""


# ── Records and dossiers ──────────────────────────────────────────────────────

class RecordNotFound(DossierRegistryError):
    """A row referenced by id does not exist."""


class InvalidSiret(DossierRegistryError):
    """The SIRET is malformed or unknown to the registry."""


class SiretAlreadyCaptured(DossierRegistryError):
    """The dossier already has an etablissement; reset it first."""


class RegistryUnavailable(DossierRegistryError):
    """The registry could not be reached or answered unexpectedly."""
