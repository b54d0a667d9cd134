from unittest.mock import MagicMock

import pytest

from src.config import APP_NAME, APP_VERSION
from src.schemas.state import AppState
from src.services import capa, findings, state_store
from src.ui import components


@pytest.mark.parametrize("module", [state_store, findings, capa])
def test_service_modules_keep_docstrings(module):
    assert module.__doc__
    assert module.__doc__.strip()


def test_sidebar_shows_name_and_version(monkeypatch):
    fake_st = MagicMock()
    monkeypatch.setattr(components, "st", fake_st)

    components.sidebar_status(AppState.empty("2025-03-01T12:00:00.000Z"))

    header = fake_st.markdown.call_args.args[0]
    assert APP_NAME in header
    assert APP_VERSION in header
