import streamlit as st

st.set_page_config(page_title="Dossier Registry", layout="wide")

nav = st.navigation(
    [
        st.Page("pages/1_Siret.py", title="SIRET", default=True, url_path="siret"),
    ]
)
nav.run()
