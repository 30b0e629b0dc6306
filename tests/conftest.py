from datetime import datetime, timezone

import pytest

from flashchar.domain.defaults import default_settings
from flashchar.domain.models import Card


@pytest.fixture
def settings():
    return default_settings()


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_card(now):
    """Factory for cards due at `now` unless overridden."""

    def _make(card_id: str, status: int = 0, **kwargs) -> Card:
        defaults = {
            "characters": card_id,
            "meaning": f"meaning of {card_id}",
            "due_at": now,
            "created_at": now,
            "updated_at": now,
        }
        defaults.update(kwargs)
        return Card(id=card_id, status=status, **defaults)

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config and data files from the real user directory
    monkeypatch.setenv("HOME", str(home))
    for var in ("FLASHCHAR_DATA_FILE", "FLASHCHAR_VERBOSE"):
        monkeypatch.delenv(var, raising=False)
    return home
