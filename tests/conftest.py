import json

import pytest

from services.storage.settings_store import SettingsStore


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "web" / "settings.json"


@pytest.fixture
def store(settings_path):
    return SettingsStore(settings_path)


@pytest.fixture
def write_settings(settings_path):
    def _write(payload):
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        text = payload if isinstance(payload, str) else json.dumps(payload)
        settings_path.write_text(text, encoding="utf-8")
        return settings_path

    return _write
