"""
Launcher CLI for AutoUpdater.

Every run exits with code 0; how the update ended is logged and echoed as an
UpdateOutcome value.
"""

from json import JSONDecodeError
from pathlib import Path
from typing import Optional

import click
import msgspec
from loguru import logger

from autoupdater.controllers.update_controller import run_update
from autoupdater.models.settings import (
    DISABLE_UPDATER_ENV,
    UpdaterSettings,
    load_settings,
    updater_disabled,
)
from autoupdater.models.update_state import UpdateOutcome
from autoupdater.utils.app_info import AppInfo


def _load_settings_or_defaults(settings_file: Optional[Path]) -> UpdaterSettings:
    try:
        return load_settings(settings_file)
    except (JSONDecodeError, msgspec.ValidationError) as e:
        logger.error(f"Invalid settings file, using defaults: {e}")
    except OSError as e:
        logger.error(f"Could not read or write settings, using defaults: {e}")
    return UpdaterSettings()


def _run_with_window(
    program_name: str,
    current_version: str,
    manifest_url: str,
    settings: UpdaterSettings,
) -> UpdateOutcome:
    # Qt is only imported when a window is requested
    from PySide6.QtWidgets import QApplication

    from autoupdater.views.launcher_window import LauncherWindow

    app = QApplication.instance() or QApplication([])
    window = LauncherWindow(title=f"{AppInfo().app_name} - {program_name}")
    window.show()
    app.processEvents()
    try:
        return run_update(
            program_name,
            current_version,
            manifest_url,
            settings=settings,
            observer=window,
        )
    finally:
        window.finish()
        app.processEvents()


@click.command()
@click.version_option(version=AppInfo().app_version, prog_name="AutoUpdater")
@click.argument("program_name", required=False)
@click.argument("current_version", required=False)
@click.argument("manifest_url", required=False)
@click.option(
    "--headless",
    is_flag=True,
    default=False,
    help="Do not show the status window.",
)
@click.option(
    "--settings-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings JSON file. Defaults to settings.json in the user data folder.",
)
def cli(
    program_name: Optional[str],
    current_version: Optional[str],
    manifest_url: Optional[str],
    headless: bool,
    settings_file: Optional[Path],
) -> None:
    """Update PROGRAM_NAME from CURRENT_VERSION using the manifest at MANIFEST_URL.

    MANIFEST_URL may be an http(s) URL, a file:// URL or a local path.
    """
    if not (program_name and current_version and manifest_url):
        logger.error(
            "Missing arguments: expected PROGRAM_NAME CURRENT_VERSION MANIFEST_URL"
        )
        click.echo(UpdateOutcome.SKIPPED.value)
        return

    if updater_disabled():
        logger.debug(f"{DISABLE_UPDATER_ENV} is set, skipping update check silently.")
        click.echo(UpdateOutcome.SKIPPED.value)
        return

    settings = _load_settings_or_defaults(settings_file)

    if headless:
        outcome = run_update(program_name, current_version, manifest_url, settings)
    else:
        outcome = _run_with_window(
            program_name, current_version, manifest_url, settings
        )

    logger.info(f"Update finished for {program_name}: {outcome.value}")
    click.echo(outcome.value)


if __name__ == "__main__":
    cli()
