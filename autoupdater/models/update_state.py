"""
State models for tracking an update attempt.

This module defines the stages reported while an update is applied, the
Result-style outcome of the extraction step, and the outcome of a whole
launcher run.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from autoupdater.utils.exception import (
    CleanupFailedError,
    DownloadFailedError,
    ExtractFailedError,
    ManifestMalformedError,
    ManifestUnreachableError,
    UpdateError,
)


class UpdateStage(Enum):
    """Stage of the update sequence."""

    STARTED = "started"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    CLEANING_UP = "cleaning_up"
    DONE = "done"


class UpdateObserver(Protocol):
    """
    Receives progress notifications from the update sequence.

    percent is 0-100, or -1 when progress is indeterminate.
    """

    def update_progress(self, stage: UpdateStage, percent: int, message: str) -> None:
        ...


@dataclass(frozen=True)
class ExtractResult:
    """
    Outcome of the conditional extraction step.

    Extraction failures are not fatal to an update, so they are
    returned here instead of being raised.
    """

    success: bool
    extracted_files: int = 0
    skipped: bool = False
    error: Optional[ExtractFailedError] = None

    @classmethod
    def skip(cls) -> "ExtractResult":
        return cls(success=True, skipped=True)

    @classmethod
    def failed(cls, error: ExtractFailedError) -> "ExtractResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class ApplyReport:
    """Summary of an applied update."""

    staged_file: Path
    install_folder: Path
    extraction: ExtractResult


class UpdateOutcome(str, Enum):
    """Final outcome of a launcher run."""

    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    SKIPPED = "skipped"
    MANIFEST_UNREACHABLE = "manifest_unreachable"
    MANIFEST_MALFORMED = "manifest_malformed"
    DOWNLOAD_FAILED = "download_failed"
    CLEANUP_FAILED = "cleanup_failed"

    @classmethod
    def from_error(cls, error: UpdateError) -> "UpdateOutcome":
        if isinstance(error, ManifestUnreachableError):
            return cls.MANIFEST_UNREACHABLE
        if isinstance(error, ManifestMalformedError):
            return cls.MANIFEST_MALFORMED
        if isinstance(error, DownloadFailedError):
            return cls.DOWNLOAD_FAILED
        if isinstance(error, CleanupFailedError):
            return cls.CLEANUP_FAILED
        raise ValueError(f"No outcome for error type: {type(error).__name__}")
