from __future__ import annotations

import pytest

from exchange_fixtures import ENV_VARS, make_deployment


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def dep():
    return make_deployment()
