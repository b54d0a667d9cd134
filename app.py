from __future__ import annotations

import streamlit as st

from src.config import APP_NAME, configure_logging
from src.ui.dashboard import dashboard_page

st.set_page_config(page_title=APP_NAME, layout="wide")

configure_logging()

dashboard_page()
