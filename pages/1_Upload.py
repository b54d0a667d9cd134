import streamlit as st

from src.config import APP_NAME, configure_logging
from src.ui.upload import upload_page

st.set_page_config(page_title=f"Upload • {APP_NAME}", layout="wide")

configure_logging()

upload_page()
