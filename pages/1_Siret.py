import streamlit as st

from dossier_registry.clients.api_entreprise import ApiEntrepriseClient
from dossier_registry.db import create_schema, make_engine, make_session_factory
from dossier_registry.dossiers import DossierService
from dossier_registry.errors import DossierRegistryError
from dossier_registry.jobs.executor import JobExecutor
from dossier_registry.jobs.queue import JobQueue, Worker
from dossier_registry.records import procedure_token_resolver
from dossier_registry.siret import validate_siret

st.set_page_config(layout="wide")


@st.cache_resource
def _runtime() -> tuple[DossierService, JobQueue, Worker]:
    engine = make_engine()
    create_schema(engine)
    session_factory = make_session_factory(engine)
    client = ApiEntrepriseClient(token_resolver=procedure_token_resolver(session_factory))
    queue = JobQueue()
    service = DossierService(session_factory=session_factory, client=client, queue=queue)
    worker = Worker(queue, JobExecutor(session_factory=session_factory, client=client))
    worker.start()
    return service, queue, worker


service, queue, worker = _runtime()

with st.sidebar:
    with st.form("dossier_form", border=False):
        procedure_id = st.number_input("Procedure", min_value=1, step=1)
        siret_in = st.text_input("SIRET", placeholder="e.g. 41816609600069")
        submitted = st.form_submit_button("Submit")

if submitted:
    try:
        siret = validate_siret(siret_in)
        # A draft left by a rejected SIRET is reused for the same procedure.
        draft = st.session_state.get("draft")
        if draft and draft[0] == int(procedure_id):
            dossier_id = draft[1]
        else:
            dossier_id = service.create(int(procedure_id))
            st.session_state["draft"] = (int(procedure_id), dossier_id)
        service.siret_informations(dossier_id, siret)
    except DossierRegistryError as exc:
        st.error(str(exc))
    else:
        st.session_state.pop("draft", None)
        st.session_state["dossier_id"] = dossier_id

dossier_id = st.session_state.get("dossier_id")
if not dossier_id:
    st.info("Enter a procedure and a SIRET to start a dossier.")
    st.stop()

action_cols = st.columns([1, 1, 4])
with action_cols[0]:
    if st.button("Refresh"):
        st.rerun()
with action_cols[1]:
    if st.button("Change SIRET", type="secondary"):
        service.change_siret(dossier_id)
        st.session_state.pop("dossier_id", None)
        st.rerun()

totals = worker.totals
st.caption(
    f"{queue.pending_count()} jobs pending · {totals.succeeded} synced · "
    f"{totals.suppressed} skipped · {totals.failed} failed"
)

etablissement = service.etablissement(dossier_id)
if etablissement is None:
    st.warning("No etablissement attached to this dossier.")
    st.stop()

entreprise = etablissement.entreprise()
st.markdown(f"## {entreprise.display_name or etablissement.siret}")

metrics = st.columns(4)
metrics[0].metric("SIRET", etablissement.siret)
metrics[1].metric("SIREN", entreprise.siren or "—")
metrics[2].metric("Forme juridique", entreprise.forme_juridique or "—")
metrics[3].metric("Capital", f"{entreprise.capital_social:,}" if entreprise.capital_social else "—")

st.caption(entreprise.inline_adresse or "Adresse: —")

if etablissement.is_association:
    with st.container(border=True):
        st.markdown(f"**{etablissement.association_titre or etablissement.association_rna}**")
        st.caption(etablissement.association_objet or "—")

st.subheader("Exercices")
if not etablissement.exercices:
    st.info("No fiscal years synchronized.")
else:
    st.dataframe(
        [{"année": x.annee, "chiffre d'affaires": x.ca} for x in etablissement.exercices],
        use_container_width=True,
    )
