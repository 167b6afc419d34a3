from dossier_registry.adapters import AssociationAdapter, EntrepriseAdapter, ExercicesAdapter
from dossier_registry.jobs.base import ApiEntrepriseJob
from dossier_registry.models import AssociationAttributes, EntrepriseAttributes, ExercicesAttributes
from dossier_registry.records import Etablissement


class EntrepriseJob(ApiEntrepriseJob):
    name = "entreprise"
    adapter_class = EntrepriseAdapter

    def persist(self, etablissement: Etablissement, attributes: EntrepriseAttributes) -> None:
        etablissement.apply(attributes)


class ExercicesJob(ApiEntrepriseJob):
    name = "exercices"
    adapter_class = ExercicesAdapter

    def persist(self, etablissement: Etablissement, attributes: ExercicesAttributes) -> None:
        etablissement.replace_exercices(attributes)


class AssociationJob(ApiEntrepriseJob):
    name = "association"
    adapter_class = AssociationAdapter

    def persist(self, etablissement: Etablissement, attributes: AssociationAttributes) -> None:
        etablissement.apply(attributes)


JOBS: dict[str, type[ApiEntrepriseJob]] = {
    job.name: job for job in (EntrepriseJob, ExercicesJob, AssociationJob)
}
