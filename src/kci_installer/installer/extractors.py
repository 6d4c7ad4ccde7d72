from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tarfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Callable, Iterator

from kci_installer.common.errors import ExtractionError
from kci_installer.common.url_safety import validate_archive_member_path


log = logging.getLogger(__name__)

_COPY_BUFFER = 1024 * 1024

Entry = tuple[str, bool, "Callable[[], BinaryIO] | None"]


class ArchiveExtractor:
    """Unpacks one archive format into a directory.

    Subclasses yield ``(member_name, is_dir, opener)`` for every entry and reject
    entry kinds that cannot be written as plain files. Path validation and the
    actual writes happen here so both formats get the same checks.
    """

    suffix = ""

    def _entries(self, archive: Path) -> Iterator[Entry]:
        raise NotImplementedError

    def extract(self, archive: Path, target: Path) -> Path:
        target.mkdir(parents=True, exist_ok=True)
        try:
            with contextlib.closing(self._entries(archive)) as entries:
                _write_entries(entries, target)
        except (ValueError, OSError, EOFError, zlib.error, zipfile.BadZipFile, tarfile.TarError) as exc:
            raise ExtractionError(f"Failed to extract {archive.name}: {exc}") from exc
        log.debug("Extracted %s into %s", archive.name, target)
        return target


def _write_entries(entries: Iterator[Entry], target: Path) -> None:
    root = target.resolve()
    for name, is_dir, opener in entries:
        if is_dir and name.replace("\\", "/").strip("/") in {"", "."}:
            continue
        member = validate_archive_member_path(name)
        dest_path = (target / Path(*member.parts)).resolve()
        if not str(dest_path).startswith(str(root) + os.sep) and dest_path != root:
            raise ValueError(f"Archive entry escapes extraction root: {name}")

        if is_dir or opener is None:
            dest_path.mkdir(parents=True, exist_ok=True)
            continue

        dest_path.parent.mkdir(parents=True, exist_ok=True)
        with opener() as src, dest_path.open("wb") as dst:
            shutil.copyfileobj(src, dst, length=_COPY_BUFFER)


class ZipExtractor(ArchiveExtractor):
    suffix = "zip"

    def _entries(self, archive: Path) -> Iterator[Entry]:
        with zipfile.ZipFile(archive, "r") as zf:
            for info in zf.infolist():
                # Block symlinks from archives.
                mode = (info.external_attr >> 16) & 0o170000
                if mode == 0o120000:
                    raise ValueError(f"Archive contains a symbolic link entry: {info.filename}")
                if info.is_dir():
                    yield info.filename, True, None
                    continue
                yield info.filename, False, lambda info=info: zf.open(info, "r")


class TarGzExtractor(ArchiveExtractor):
    suffix = "tar.gz"

    def _entries(self, archive: Path) -> Iterator[Entry]:
        with tarfile.open(archive, "r:gz") as tf:
            for member in tf:
                if member.issym() or member.islnk():
                    raise ValueError(f"Archive contains a link entry: {member.name}")
                if member.isdir():
                    yield member.name, True, None
                    continue
                if not member.isfile():
                    raise ValueError(f"Archive contains a special file entry: {member.name}")
                yield member.name, False, lambda member=member: _tar_member(tf, member)


def _tar_member(tf: tarfile.TarFile, member: tarfile.TarInfo) -> BinaryIO:
    fh = tf.extractfile(member)
    if fh is None:
        raise ValueError(f"Archive entry has no data: {member.name}")
    return fh


EXTRACTORS: dict[str, ArchiveExtractor] = {
    ZipExtractor.suffix: ZipExtractor(),
    TarGzExtractor.suffix: TarGzExtractor(),
}


def locate_binary(extracted: Path, file_name: str) -> Path:
    direct = extracted / file_name
    if direct.is_file():
        return direct
    matches = sorted(p for p in extracted.rglob(file_name) if p.is_file())
    if not matches:
        contents = ", ".join(str(PurePosixPath(p.relative_to(extracted))) for p in extracted.rglob("*")) or "<empty>"
        raise ExtractionError(f"Binary {file_name!r} not found in archive. Contents: {contents}")
    return matches[0]
