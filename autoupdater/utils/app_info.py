from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path

from platformdirs import PlatformDirs


class AppInfo:
    """
    Singleton class that provides information about the application and its related directories.

    The directories are determined using the `platformdirs` package, ensuring
    platform-specific conventions are adhered to.

    Examples:
        >>> print(AppInfo().app_name)
        >>> print(AppInfo().user_log_folder)
    """

    _instance: "None | AppInfo" = None

    def __new__(cls) -> "AppInfo":
        if not cls._instance:
            cls._instance = super(AppInfo, cls).__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_is_initialized") and self._is_initialized:
            return

        # Application metadata

        self._app_name = "AutoUpdater"

        try:
            self._app_version = package_version("autoupdater")
        except PackageNotFoundError:
            self._app_version = "Unknown version"

        # Define important directories using platformdirs

        platform_dirs = PlatformDirs(appname=self._app_name, appauthor=False)
        self._app_storage_folder: Path = Path(platform_dirs.user_data_dir)
        self._user_log_folder: Path = Path(platform_dirs.user_log_dir)
        self._settings_file: Path = self._app_storage_folder / "settings.json"

        # Make sure important directories exist

        self._app_storage_folder.mkdir(parents=True, exist_ok=True)
        self._user_log_folder.mkdir(parents=True, exist_ok=True)

        self._is_initialized: bool = True

    @property
    def app_name(self) -> str:
        return self._app_name

    @property
    def app_version(self) -> str:
        """
        Get the installed package version.

        Returns:
            str: The version, or "Unknown version" when running from an uninstalled source tree.
        """
        return self._app_version

    @property
    def app_storage_folder(self) -> Path:
        """
        Get the user data folder. Holds settings.json and the DEBUG marker file.

        Returns:
            Path: The path to the application storage folder.
        """
        return self._app_storage_folder

    @property
    def user_log_folder(self) -> Path:
        return self._user_log_folder

    @property
    def app_settings_file(self) -> Path:
        return self._settings_file
