import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

import requests
from loguru import logger
from packaging import version

from autoupdater.models.manifest import UpdateManifest
from autoupdater.models.settings import UpdaterSettings
from autoupdater.models.update_state import (
    ApplyReport,
    ExtractResult,
    UpdateObserver,
    UpdateStage,
)
from autoupdater.utils.exception import DownloadFailedError
from autoupdater.utils.generic import (
    file_extension,
    format_file_size,
    is_remote_source,
    local_source_path,
    rmtree,
)
from autoupdater.utils.zip_extractor import extract_zip

ZIP_EXTENSION = "zip"

# Emit download progress approximately every 512KB
PROGRESS_EMIT_BYTES = 512 * 1024


def update_available(
    current_version: str, resolved_version: str, comparison: str = "exact"
) -> bool:
    """
    Check whether the published version should replace the current one.

    With "exact" comparison any difference between the two strings counts as an
    update, so "1.0" and "1.0.0" are different versions. With "semantic"
    comparison the published version must be newer; strings that are not valid
    versions fall back to the exact comparison.

    :param current_version: Version currently installed.
    :param resolved_version: Version published in the manifest.
    :param comparison: "exact" or "semantic".
    :return: True if an update is available.
    """
    if comparison == "semantic":
        try:
            return version.parse(resolved_version) > version.parse(current_version)
        except version.InvalidVersion as e:
            logger.warning(
                f"Cannot compare versions semantically ({e}), comparing as strings"
            )
    elif comparison != "exact":
        raise ValueError(f"Unknown version comparison: {comparison}")

    return current_version != resolved_version


def is_zip_file(file_name: str) -> bool:
    """Check if the text after the first "." of the file name is "zip"."""
    return file_extension(file_name) == ZIP_EXTENSION


class UpdateApplier:
    """
    Applies a resolved update: download, conditional extraction and cleanup.

    The downloaded file is staged in the staging folder, ZIP packages are
    extracted into the install folder (the staging folder's parent), and the
    staging folder is always removed once extraction has been attempted.
    """

    def __init__(
        self,
        settings: Optional[UpdaterSettings] = None,
        observer: Optional[UpdateObserver] = None,
    ) -> None:
        self.settings = settings or UpdaterSettings()
        self.observer = observer
        self.staging_folder: Path = self.settings.staging_path
        self.install_folder: Path = self.settings.install_path

    def apply(self, manifest: UpdateManifest) -> ApplyReport:
        """
        Download, extract and clean up in strict sequence.

        :param manifest: The resolved manifest.
        :return: Report of the applied update. Extraction failures are in the report.
        :raises DownloadFailedError: If the download fails. Nothing is extracted or cleaned up.
        :raises CleanupFailedError: If the staging folder cannot be removed.
        """
        start_time = datetime.now()
        logger.info(
            f"Applying update {manifest.version} from {manifest.download_link}"
        )
        self._notify(UpdateStage.STARTED, 0, "Starting update...")

        staged_file = self._download_update(manifest)
        extraction = self._extract_update(staged_file, manifest.file_name)
        if not extraction.success:
            logger.warning(
                f"Continuing update without extraction: {extraction.error}"
            )
        self._cleanup()

        total_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Update {manifest.version} applied in {total_time:.2f}s")
        self._notify(UpdateStage.DONE, 100, "Update complete")

        return ApplyReport(
            staged_file=staged_file,
            install_folder=self.install_folder,
            extraction=extraction,
        )

    def _notify(self, stage: UpdateStage, percent: int, message: str) -> None:
        if self.observer is not None:
            self.observer.update_progress(stage, percent, message)

    def _staged_file_path(self, file_name: str) -> Path:
        destination = (self.staging_folder / file_name).resolve()
        if not destination.is_relative_to(self.staging_folder) or (
            destination == self.staging_folder
        ):
            raise DownloadFailedError(
                f"File name {file_name!r} does not point inside the staging folder"
            )
        return destination

    def _download_update(self, manifest: UpdateManifest) -> Path:
        """
        Download the update package into the staging folder.

        Raises:
            DownloadFailedError: If download fails
        """
        destination = self._staged_file_path(manifest.file_name)
        url = manifest.download_link
        logger.info(f"Starting download from {url} to {destination}")
        self._notify(UpdateStage.DOWNLOADING, -1, "Downloading...")

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if is_remote_source(url):
                self._download_remote(url, destination)
            else:
                self._copy_local(url, destination)
        except requests.RequestException as e:
            logger.error(f"Download failed: {e}")
            raise DownloadFailedError(f"Failed to download update: {e}") from e
        except OSError as e:
            logger.error(f"I/O error during download: {e}")
            raise DownloadFailedError(f"Failed to download update: {e}") from e

        logger.info(
            f"Downloaded {format_file_size(destination.stat().st_size)} to {destination}"
        )
        return destination

    def _download_remote(self, url: str, destination: Path) -> None:
        response = requests.get(url, timeout=self.settings.download_timeout, stream=True)
        try:
            response.raise_for_status()
            logger.debug(f"HTTP response status: {response.status_code}")
            total_size = self._content_length(response)
            if total_size:
                logger.info(f"File size: {format_file_size(total_size)}")

            downloaded_size = 0
            downloaded_since_last_emit = 0
            with open(destination, "wb") as out_file:
                for chunk in response.iter_content(
                    chunk_size=self.settings.download_chunk_size
                ):
                    if not chunk:
                        continue
                    out_file.write(chunk)
                    downloaded_size += len(chunk)
                    downloaded_since_last_emit += len(chunk)

                    if downloaded_since_last_emit >= PROGRESS_EMIT_BYTES:
                        self._notify_download_progress(downloaded_size, total_size)
                        downloaded_since_last_emit = 0
        finally:
            response.close()

        self._notify(
            UpdateStage.DOWNLOADING,
            100,
            f"Download complete ({format_file_size(downloaded_size)})",
        )

    @staticmethod
    def _content_length(response: requests.Response) -> int:
        header = response.headers.get("content-length")
        try:
            return max(int(header or 0), 0)
        except ValueError:
            logger.warning(f"Ignoring invalid Content-Length header: {header!r}")
            return 0

    def _notify_download_progress(self, downloaded_size: int, total_size: int) -> None:
        if total_size > 0:
            progress = min(downloaded_size / total_size * 100, 100)
            self._notify(
                UpdateStage.DOWNLOADING,
                int(progress),
                f"Downloading... {progress:.1f}% ({format_file_size(downloaded_size)}/{format_file_size(total_size)})",
            )
        else:
            self._notify(
                UpdateStage.DOWNLOADING,
                -1,
                f"Downloading... {format_file_size(downloaded_size)}",
            )

    def _copy_local(self, source: str, destination: Path) -> None:
        source_path = local_source_path(source)
        logger.debug(f"Copying local update package {source_path}")
        with open(source_path, "rb") as src, open(destination, "wb") as out_file:
            shutil.copyfileobj(src, out_file, self.settings.download_chunk_size)
        self._notify(UpdateStage.DOWNLOADING, 100, "Download complete")

    def _extract_update(self, staged_file: Path, file_name: str) -> ExtractResult:
        """
        Extract the staged file into the install folder if it is a ZIP file.

        Never raises; failures are returned in the result.
        """
        if not is_zip_file(file_name):
            logger.info(f"{file_name} is not a ZIP file, skipping extraction")
            return ExtractResult.skip()

        logger.info(f"Extracting update into {self.install_folder}")
        self._notify(UpdateStage.EXTRACTING, 0, "Extracting files...")
        return extract_zip(
            staged_file,
            self.install_folder,
            progress_callback=lambda percent, message: self._notify(
                UpdateStage.EXTRACTING, percent, message
            ),
        )

    def _cleanup(self) -> None:
        """
        Remove the staging folder and everything in it.

        Raises:
            CleanupFailedError: If the staging folder cannot be removed
        """
        logger.info(f"Removing staging folder {self.staging_folder}")
        self._notify(UpdateStage.CLEANING_UP, -1, "Cleaning up...")
        rmtree(self.staging_folder)
