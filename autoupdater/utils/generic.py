import os
import shutil
import sys
from errno import EACCES
from pathlib import Path
from stat import S_IRWXG, S_IRWXO, S_IRWXU
from typing import Any, Callable
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from loguru import logger

from autoupdater.utils.exception import CleanupFailedError

REMOTE_SCHEMES = ("http", "https")


def is_remote_source(source: str) -> bool:
    """Check if the source is an http(s) URL rather than a local file."""
    return urlparse(source).scheme.lower() in REMOTE_SCHEMES


def local_source_path(source: str) -> Path:
    """
    Convert a file:// URL or plain path into a filesystem path.

    :param source: file:// URL or local path
    :return: Path to the local file
    """
    parsed = urlparse(source)
    if parsed.scheme.lower() == "file":
        netloc = f"//{parsed.netloc}" if parsed.netloc else ""
        return Path(url2pathname(unquote(netloc + parsed.path)))
    return Path(source)


def file_extension(file_name: str) -> str:
    """
    Return the text after the first "." of a file name.

    "app.zip" gives "zip" and "app.tar.gz" gives "tar.gz".
    Names without a "." have no extension and give "".
    """
    _, dot, extension = file_name.partition(".")
    return extension if dot else ""


def format_file_size(size_in_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(size_in_bytes)
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024.0
        i += 1
    if i == 0:
        return f"{int(size)} {units[i]}"
    return f"{size:.1f} {units[i]}"


def attempt_chmod(
    func: Callable[[str], Any], path: str, excinfo: BaseException
) -> None:
    """
    shutil.rmtree error handler that makes a read-only entry writable and retries.
    Any other error is re-raised.
    """
    if (
        isinstance(excinfo, OSError)
        and func in (os.rmdir, os.remove, os.unlink)
        and excinfo.errno == EACCES
    ):
        os.chmod(path, S_IRWXU | S_IRWXG | S_IRWXO)  # 0777
        func(path)
        return
    raise excinfo


def rmtree(path: str | Path) -> None:
    """Wrapper for improved rmtree error handling.
    Checks if the path is a directory before attempting to delete it.
    Read-only files are made writable and retried.

    :param path: Path to directory to be deleted.
    :type path: str | Path
    :raises CleanupFailedError: If the path is not a directory or could not be deleted.
    """
    if isinstance(path, str):
        path = Path(path)

    if not path.is_dir():
        logger.error(f"rmtree path is not a directory: {path}")
        raise CleanupFailedError(f"Path is not a directory: {path}")

    try:
        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=attempt_chmod)
        else:
            shutil.rmtree(
                path,
                onerror=lambda func, p, exc_info: attempt_chmod(func, p, exc_info[1]),
            )
    except OSError as e:
        if sys.platform == "win32":
            error_code = e.winerror
        else:
            error_code = e.errno
        logger.error(
            f"Failed to remove directory: {e.strerror} occurred at {e.filename} with error code {error_code}"
        )
        raise CleanupFailedError(f"Failed to remove directory {path}: {e}") from e
