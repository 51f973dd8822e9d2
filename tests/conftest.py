from datetime import date

import pytest

from genmemo.application.ledger import ProgressLedger
from genmemo.infrastructure.stores import InMemoryRecordStore

TODAY = date(2024, 1, 12)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def ledger(store, today):
    return ProgressLedger(store, clock=lambda: today)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and the default data dir
    monkeypatch.setenv("HOME", str(home))
    for var in ("GENMEMO_TOKEN", "GENMEMO_SERVER_URL", "GENMEMO_DATA_DIR", "GENMEMO_SEED"):
        monkeypatch.delenv(var, raising=False)
    return home
