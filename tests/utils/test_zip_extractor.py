import zipfile
from pathlib import Path
from typing import Callable

from autoupdater.utils.exception import ExtractFailedError
from autoupdater.utils.zip_extractor import BadZipFile, extract_zip


def test_extract_zip_writes_all_entries(
    make_zip: Callable[..., Path], tmp_path: Path
) -> None:
    archive = make_zip({"app.exe": "binary", "lib/core.dll": "library"})
    target = tmp_path / "target"

    result = extract_zip(archive, target)

    assert result.success is True
    assert result.extracted_files == 2
    assert (target / "app.exe").read_text() == "binary"
    assert (target / "lib" / "core.dll").read_text() == "library"


def test_extract_zip_overwrites_existing_files(
    make_zip: Callable[..., Path], tmp_path: Path
) -> None:
    archive = make_zip({"app.exe": "new"})
    target = tmp_path / "target"
    target.mkdir()
    (target / "app.exe").write_text("old")

    extract_zip(archive, target)

    assert (target / "app.exe").read_text() == "new"


def test_extract_zip_reports_progress(
    make_zip: Callable[..., Path], tmp_path: Path
) -> None:
    archive = make_zip({f"file{i}.txt": str(i) for i in range(3)})
    progress: list[int] = []

    extract_zip(
        archive, tmp_path / "target", progress_callback=lambda p, _m: progress.append(p)
    )

    assert progress[-1] == 100


def test_extract_zip_keeps_entries_inside_target(tmp_path: Path) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as zipobj:
        zipobj.writestr("../escaped.txt", "nope")
    target = tmp_path / "target"

    result = extract_zip(archive, target)

    assert result.success is True
    assert not (tmp_path / "escaped.txt").exists()
    assert (target / "escaped.txt").exists()


def test_extract_zip_returns_failure_for_corrupt_archive(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"not a zip file")

    result = extract_zip(archive, tmp_path / "target")

    assert result.success is False
    assert isinstance(result.error, ExtractFailedError)
    assert isinstance(result.error.__cause__, BadZipFile)


def test_extract_zip_returns_failure_for_missing_archive(tmp_path: Path) -> None:
    result = extract_zip(tmp_path / "missing.zip", tmp_path / "target")

    assert result.success is False
    assert result.error is not None
