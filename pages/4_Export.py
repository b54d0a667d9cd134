import streamlit as st

from src.config import APP_NAME, configure_logging
from src.ui.export import export_page

st.set_page_config(page_title=f"Export • {APP_NAME}", layout="wide")

configure_logging()

export_page()
