import json
from json import JSONDecodeError
from pathlib import Path

import msgspec
import pytest

from autoupdater.models.settings import (
    DEFAULT_MANIFEST_URL,
    DISABLE_UPDATER_ENV,
    UpdaterSettings,
    load_settings,
    save_settings,
    updater_disabled,
)


def test_defaults() -> None:
    settings = UpdaterSettings()

    assert settings.manifest_url == DEFAULT_MANIFEST_URL
    assert settings.staging_folder == "temp"
    assert settings.version_comparison == "exact"
    assert settings.staging_path == (Path.cwd() / "temp").resolve()
    assert settings.install_path == settings.staging_path.parent


def test_load_writes_defaults_when_missing(tmp_path: Path) -> None:
    settings_file = tmp_path / "config" / "settings.json"

    settings = load_settings(settings_file)

    assert settings == UpdaterSettings()
    assert json.loads(settings_file.read_text())["staging_folder"] == "temp"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings = UpdaterSettings(
        manifest_url="https://example.com/update.xml",
        download_timeout=60,
        version_comparison="semantic",
    )

    save_settings(settings, settings_file)

    assert load_settings(settings_file) == settings


def test_load_ignores_unknown_keys(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"staging_folder": "cache", "theme": "dark"}))

    settings = load_settings(settings_file)

    assert settings.staging_folder == "cache"


def test_load_rejects_invalid_json(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{not json")

    with pytest.raises(JSONDecodeError):
        load_settings(settings_file)


def test_load_rejects_wrong_types(tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"version_comparison": "fuzzy"}))

    with pytest.raises(msgspec.ValidationError):
        load_settings(settings_file)


def test_updater_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(DISABLE_UPDATER_ENV, raising=False)
    assert updater_disabled() is False

    monkeypatch.setenv(DISABLE_UPDATER_ENV, "1")
    assert updater_disabled() is True
