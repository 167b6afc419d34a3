from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_entreprise_base_url: str = "https://entreprise.api.gouv.fr"
    api_entreprise_token: str | None = None
    api_entreprise_context: str = "demarches-simplifiees"
    # SIRET of the administration requesting the data.
    api_entreprise_recipient: str = "13002526500013"
    http_timeout_seconds: float = 20.0

    max_attempts_api_entreprise_jobs: int = 5
    job_retry_wait_multiplier: float = 3.0
    job_retry_wait_min: float = 3.0
    job_retry_wait_max: float = 600.0

    database_url: str = "sqlite:///dossier_registry.sqlite3"
    log_level: str = "INFO"


settings = Settings()
