import streamlit as st

from src.config import APP_NAME, configure_logging
from src.ui.capa import capa_page

st.set_page_config(page_title=f"CAPA • {APP_NAME}", layout="wide")

configure_logging()

capa_page()
