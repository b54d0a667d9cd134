import streamlit as st

from src.config import APP_NAME, configure_logging
from src.ui.review import review_page

st.set_page_config(page_title=f"Review • {APP_NAME}", layout="wide")

configure_logging()

review_page()
