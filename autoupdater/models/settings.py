import json
import os
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import msgspec
from loguru import logger

from autoupdater.utils.app_info import AppInfo

DEFAULT_MANIFEST_URL = "http://borjadev.me/aurora/update.xml"
DISABLE_UPDATER_ENV = "AUTOUPDATER_DISABLE_UPDATER"


class UpdaterSettings(msgspec.Struct):
    """
    Persistent updater configuration.

    Stored as JSON in the user data folder. Pure data class, loading and
    saving are done by the module level helpers below.
    """

    # Used when no manifest source is given to the updater
    manifest_url: str = DEFAULT_MANIFEST_URL
    # Downloads are staged here; its parent folder is the install folder
    staging_folder: str = "temp"

    # Network
    manifest_timeout: float = 15
    download_timeout: float = 30
    download_chunk_size: int = 131072  # 128KB

    # Launcher
    launcher_display_delay: float = 0.5

    # "exact" compares version strings, "semantic" orders them with packaging
    version_comparison: Literal["exact", "semantic"] = "exact"

    @property
    def staging_path(self) -> Path:
        return Path(self.staging_folder).resolve()

    @property
    def install_path(self) -> Path:
        return self.staging_path.parent

    def as_dict(self) -> Dict[str, Any]:
        return msgspec.to_builtins(self)


def load_settings(settings_file: Optional[Path] = None) -> UpdaterSettings:
    """
    Load settings from disk, writing the defaults out when no file exists yet.

    :param settings_file: Path to settings.json. Defaults to the file in the user data folder.
    :return: The loaded settings.
    :raises JSONDecodeError: If the settings file is not valid JSON.
    :raises msgspec.ValidationError: If a setting has the wrong type.
    """
    if settings_file is None:
        settings_file = AppInfo().app_settings_file

    try:
        with open(str(settings_file), "r", encoding="utf-8") as file:
            data = json.load(file)
    except FileNotFoundError:
        logger.info(f"No settings file found, writing defaults to: {settings_file}")
        settings = UpdaterSettings()
        save_settings(settings, settings_file)
        return settings
    except JSONDecodeError:
        logger.error(f"Settings file is not valid JSON: {settings_file}")
        raise

    if not isinstance(data, dict):
        raise msgspec.ValidationError(
            f"Expected a JSON object in {settings_file}, got {type(data).__name__}"
        )

    # Unknown keys are ignored
    settings = msgspec.convert(data, UpdaterSettings)
    logger.debug(f"Loaded settings from {settings_file}")
    return settings


def save_settings(
    settings: UpdaterSettings, settings_file: Optional[Path] = None
) -> None:
    if settings_file is None:
        settings_file = AppInfo().app_settings_file

    Path(settings_file).parent.mkdir(parents=True, exist_ok=True)
    with open(str(settings_file), "w", encoding="utf-8") as file:
        json.dump(settings.as_dict(), file, indent=4)


def updater_disabled() -> bool:
    """Check the environment for the updater kill switch."""
    return bool(os.getenv(DISABLE_UPDATER_ENV))
