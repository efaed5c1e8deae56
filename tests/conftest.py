import pytest

from config import JsonStore
from models import EqualSplitEntry, ItemizedCost, ItemizedSplitEntry


@pytest.fixture(autouse=True)
def voicesplit_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("VOICESPLIT_HOME", str(home))
    for var in ("GEMINI_API_KEY", "VOICESPLIT_MODEL", "VOICESPLIT_STORE", "VOICESPLIT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def store(tmp_path):
    return JsonStore(str(tmp_path / "store.json"))


@pytest.fixture
def pizza():
    return EqualSplitEntry("1", "Pizza", 250.0, "John", ["Alice", "Bob", "Charlie"])


@pytest.fixture
def drinks():
    return ItemizedSplitEntry("2", "Drinks", 60.0, "Aryan", [
        ItemizedCost("arun", "lemon", 10.0),
        ItemizedCost("mohit", "soda", 20.0),
        ItemizedCost("gurjot", "mojito", 30.0),
    ])
