"""ZIP extraction with progress reporting and a Result-style outcome."""

import time
from pathlib import Path
from typing import Callable, Optional
from zipfile import BadZipFile, ZipFile

from loguru import logger

from autoupdater.models.update_state import ExtractResult
from autoupdater.utils.exception import ExtractFailedError

# Export for use in other modules
__all__ = [
    "extract_zip",
    "BadZipFile",
]


def extract_zip(
    zip_path: str | Path,
    target_path: str | Path,
    progress_callback: Optional[Callable[[int, str], None]] = None,
) -> ExtractResult:
    """Extract every entry of a ZIP file into a directory.

    Existing files in the target are overwritten. Entry names are sanitized
    by ZipFile.extract, so entries cannot be written outside the target.
    Errors are never raised, they are returned in the result.

    Args:
        zip_path: Path to ZIP file to extract
        target_path: Destination directory for extraction
        progress_callback: Optional callback function(percentage, message)

    Returns:
        ExtractResult with the number of extracted entries, or the error.
    """
    start = time.perf_counter()

    try:
        Path(target_path).mkdir(parents=True, exist_ok=True)
        with ZipFile(zip_path) as zipobj:
            file_list = zipobj.infolist()
            total_files = len(file_list)
            update_interval = max(1, total_files // 100)

            for i, zip_info in enumerate(file_list):
                zipobj.extract(zip_info, path=target_path)

                if progress_callback and (
                    i % update_interval == 0 or i == total_files - 1
                ):
                    percent = int((i + 1) / total_files * 100)
                    progress_callback(
                        percent, f"Extracting: {i + 1} / {total_files} files"
                    )
    except Exception as e:
        # Corrupt entry data surfaces as zlib.error or EOFError, not BadZipFile
        logger.error(f"ZIP extraction failed: {e}")
        error = ExtractFailedError(f"Failed to extract {zip_path}: {e}")
        error.__cause__ = e
        return ExtractResult.failed(error)

    elapsed = time.perf_counter() - start
    logger.info(
        f"Extracted {total_files} entries: {zip_path} → {target_path} "
        f"({elapsed:.2f} seconds)"
    )
    return ExtractResult(success=True, extracted_files=total_files)
