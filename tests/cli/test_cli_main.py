"""
Tests for the launcher CLI.
"""

from pathlib import Path
from typing import Callable
from unittest.mock import patch

import pytest
from click.testing import CliRunner, Result
from conftest import app_entry

from autoupdater.cli.main import cli
from autoupdater.models.settings import DISABLE_UPDATER_ENV, UpdaterSettings
from autoupdater.models.update_state import UpdateOutcome


def last_line(result: Result) -> str:
    # Log records may share the captured output, the outcome is echoed last
    return result.output.strip().splitlines()[-1]


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.delenv(DISABLE_UPDATER_ENV, raising=False)
    return CliRunner()


def test_missing_arguments_exit_cleanly(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["App", "1.0"])

    assert result.exit_code == 0
    assert last_line(result) == UpdateOutcome.SKIPPED.value


def test_disabled_updater_exits_cleanly(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(DISABLE_UPDATER_ENV, "1")

    with patch("autoupdater.cli.main.run_update") as mock_run:
        result = runner.invoke(cli, ["App", "1.0", "update.xml", "--headless"])

    assert result.exit_code == 0
    assert last_line(result) == UpdateOutcome.SKIPPED.value
    mock_run.assert_not_called()


def test_headless_update(
    runner: CliRunner,
    tmp_path: Path,
    write_manifest: Callable[..., Path],
    make_zip: Callable[..., Path],
) -> None:
    archive = make_zip({"app.exe": "v2"})
    manifest = write_manifest(app_entry(download_link=archive.as_uri()))
    install_folder = tmp_path / "install"
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(
        f'{{"staging_folder": "{(install_folder / "temp").as_posix()}"}}'
    )

    result = runner.invoke(
        cli,
        [
            "App",
            "1.0",
            str(manifest),
            "--headless",
            "--settings-file",
            str(settings_file),
        ],
    )

    assert result.exit_code == 0
    assert last_line(result) == UpdateOutcome.UPDATED.value
    assert (install_folder / "app.exe").read_text() == "v2"
    assert not (install_folder / "temp").exists()


def test_manifest_failure_exits_cleanly(runner: CliRunner, tmp_path: Path) -> None:
    settings_file = tmp_path / "settings.json"

    result = runner.invoke(
        cli,
        [
            "App",
            "1.0",
            str(tmp_path / "missing.xml"),
            "--headless",
            "--settings-file",
            str(settings_file),
        ],
    )

    assert result.exit_code == 0
    assert last_line(result) == UpdateOutcome.MANIFEST_UNREACHABLE.value


def test_invalid_settings_fall_back_to_defaults(
    runner: CliRunner, tmp_path: Path
) -> None:
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{broken")

    with patch(
        "autoupdater.cli.main.run_update", return_value=UpdateOutcome.UP_TO_DATE
    ) as mock_run:
        result = runner.invoke(
            cli,
            [
                "App",
                "1.0",
                "update.xml",
                "--headless",
                "--settings-file",
                str(settings_file),
            ],
        )

    assert result.exit_code == 0
    assert mock_run.call_args.args[3] == UpdaterSettings()


def test_window_is_used_by_default(
    runner: CliRunner, tmp_path: Path, qapp: object
) -> None:
    settings_file = tmp_path / "settings.json"

    with patch(
        "autoupdater.cli.main.run_update", return_value=UpdateOutcome.UP_TO_DATE
    ) as mock_run:
        result = runner.invoke(
            cli, ["App", "1.0", "update.xml", "--settings-file", str(settings_file)]
        )

    assert result.exit_code == 0
    assert last_line(result) == UpdateOutcome.UP_TO_DATE.value
    observer = mock_run.call_args.kwargs["observer"]
    assert observer.isVisible() is False
