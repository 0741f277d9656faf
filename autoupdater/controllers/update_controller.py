import time
from typing import Optional

from loguru import logger

from autoupdater.models.manifest import UpdateManifest, UpdateSession
from autoupdater.models.settings import UpdaterSettings
from autoupdater.models.update_state import (
    ApplyReport,
    UpdateObserver,
    UpdateOutcome,
)
from autoupdater.utils import manifest_resolver
from autoupdater.utils.exception import ManifestResolutionError, UpdateError
from autoupdater.utils.update_utils import UpdateApplier, update_available


class AutoUpdater:
    """
    Updates a program from the manifest published for it.

    The manifest is an XML document with one element per program, see
    `autoupdater.utils.manifest_resolver`. It is resolved when the updater is
    constructed, unless `resolve_now` is False; call `resolve()` later in that case.

    Examples:
        >>> updater = AutoUpdater("MyApp", "1.0", "https://example.com/update.xml")
        >>> if updater.update_available():
        ...     updater.update_application()
    """

    def __init__(
        self,
        program_name: str,
        current_version: str,
        manifest_source: Optional[str] = None,
        settings: Optional[UpdaterSettings] = None,
        observer: Optional[UpdateObserver] = None,
        resolve_now: bool = True,
    ) -> None:
        """
        :param program_name: Tag of the program entry in the manifest.
        :param current_version: Version currently installed.
        :param manifest_source: http(s) URL, file:// URL or path of the manifest.
            Defaults to the configured manifest URL.
        :param settings: Updater settings, defaults are used when omitted.
        :param observer: Optional receiver of progress notifications.
        :param resolve_now: Resolve the manifest immediately.
        :raises ValueError: If program_name is empty.
        :raises ManifestUnreachableError: If the manifest cannot be fetched.
        :raises ManifestMalformedError: If the manifest cannot be parsed or is incomplete.
        """
        if not program_name:
            raise ValueError("program_name must not be empty")

        self.settings = settings or UpdaterSettings()
        self.observer = observer
        self.session = UpdateSession(
            program_name=program_name,
            manifest_source=manifest_source or self.settings.manifest_url,
            current_version=current_version,
        )

        if resolve_now:
            self.resolve()

    def resolve(self) -> UpdateManifest:
        """Resolve the manifest once; later calls return the resolved manifest."""
        if self.session.manifest is not None:
            return self.session.manifest

        self.session.manifest = manifest_resolver.resolve(
            self.session.program_name,
            self.session.manifest_source,
            self.session.current_version,
            timeout=self.settings.manifest_timeout,
        )
        return self.session.manifest

    # Status

    @property
    def is_resolved(self) -> bool:
        return self.session.is_resolved

    @property
    def manifest(self) -> Optional[UpdateManifest]:
        return self.session.manifest

    @property
    def current_version(self) -> str:
        return self.session.current_version

    @property
    def update_version(self) -> Optional[str]:
        return self.manifest.version if self.manifest else None

    @property
    def changelog(self) -> Optional[str]:
        return self.manifest.changelog if self.manifest else None

    @property
    def file_name(self) -> Optional[str]:
        return self.manifest.file_name if self.manifest else None

    @property
    def download_link(self) -> Optional[str]:
        return self.manifest.download_link if self.manifest else None

    def update_available(self) -> bool:
        """
        Check if the published version differs from the current one.

        Always False while the manifest is unresolved.
        """
        if self.manifest is None:
            return False
        return update_available(
            self.session.current_version,
            self.manifest.version,
            self.settings.version_comparison,
        )

    def update_application(self) -> Optional[ApplyReport]:
        """
        Download and apply the update if one is available.

        :return: Report of the applied update, or None when there was nothing to do.
        :raises DownloadFailedError: If the download fails.
        :raises CleanupFailedError: If the staging folder cannot be removed.
        """
        if self.manifest is None or not self.update_available():
            logger.info(
                f"{self.session.program_name} {self.session.current_version} is up to date"
            )
            return None

        applier = UpdateApplier(self.settings, self.observer)
        return applier.apply(self.manifest)


def run_update(
    program_name: str,
    current_version: str,
    manifest_source: str,
    settings: Optional[UpdaterSettings] = None,
    observer: Optional[UpdateObserver] = None,
) -> UpdateOutcome:
    """
    Run a whole update attempt and report how it ended.

    Update errors are logged and turned into an outcome, never raised.
    When an observer is shown, waits `launcher_display_delay` seconds
    before applying an update so the observer is visible.
    """
    settings = settings or UpdaterSettings()

    try:
        updater = AutoUpdater(
            program_name,
            current_version,
            manifest_source,
            settings=settings,
            observer=observer,
        )
    except ManifestResolutionError as e:
        logger.warning(f"Could not resolve the update manifest: {e}")
        return UpdateOutcome.from_error(e)

    if not updater.update_available():
        logger.info(
            f"Already running the latest version of {program_name}: {current_version}"
        )
        return UpdateOutcome.UP_TO_DATE

    logger.info(
        f"Update available for {program_name}: {current_version} -> {updater.update_version}"
    )
    if observer is not None and settings.launcher_display_delay > 0:
        time.sleep(settings.launcher_display_delay)

    try:
        report = updater.update_application()
    except UpdateError as e:
        logger.error(f"Update process failed: {e}")
        return UpdateOutcome.from_error(e)

    if report is not None and not report.extraction.success:
        logger.warning(f"Update applied without extraction: {report.extraction.error}")
    return UpdateOutcome.UPDATED
