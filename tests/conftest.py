import os
import zipfile
from pathlib import Path
from typing import Callable, Generator, Union

import pytest

# Qt tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from autoupdater.models.settings import UpdaterSettings  # noqa: E402

MANIFEST_ENTRY = """
    <{program}>
        <version>{version}</version>
        <changelog>{changelog}</changelog>
        <file-name>{file_name}</file-name>
        <download-link>{download_link}</download-link>
    </{program}>"""


def manifest_xml(*entries: dict[str, str]) -> str:
    """Build a manifest document from entry dictionaries."""
    body = "".join(MANIFEST_ENTRY.format(**entry) for entry in entries)
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<root>{body}\n</root>\n'


def app_entry(**overrides: str) -> dict[str, str]:
    entry = {
        "program": "App",
        "version": "2.0",
        "changelog": "fixes",
        "file_name": "app.zip",
        "download_link": "http://x/app.zip",
    }
    entry.update(overrides)
    return entry


@pytest.fixture(scope="function")
def qapp() -> Generator[Union[QApplication, QCoreApplication], None, None]:
    """Create a QApplication instance for Qt tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Write a manifest document to a temporary file and return its path."""

    def _write(*entries: dict[str, str], content: str | None = None) -> Path:
        path = tmp_path / "update.xml"
        path.write_text(
            content if content is not None else manifest_xml(*entries),
            encoding="utf-8",
        )
        return path

    return _write


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Create a ZIP archive from a mapping of entry names to contents."""

    def _make(entries: dict[str, str], name: str = "package.zip") -> Path:
        path = tmp_path / "source" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as zipobj:
            for entry_name, content in entries.items():
                zipobj.writestr(entry_name, content)
        return path

    return _make


@pytest.fixture
def install_folder(tmp_path: Path) -> Path:
    folder = tmp_path / "install"
    folder.mkdir()
    return folder


@pytest.fixture
def settings(install_folder: Path) -> UpdaterSettings:
    """Settings staging into install/temp, without the launcher display delay."""
    return UpdaterSettings(
        staging_folder=str(install_folder / "temp"),
        launcher_display_delay=0,
    )
