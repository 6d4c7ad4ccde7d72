from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path

import requests


BINARY_NAME = "kicad-component-importer"


def make_tar_gz(path: Path, files: dict[str, bytes]) -> Path:
    with tarfile.open(path, "w:gz") as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return path


def make_zip(path: Path, files: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return path


class FakeResponse:
    def __init__(self, url: str, body: bytes = b"", status_code: int = 200):
        self.url = url
        self.body = body
        self.status_code = status_code
        self.headers = {"Content-Length": str(len(body))}

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error: Not Found for url: {self.url}")

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start : start + chunk_size]


class FakeSession:
    """Records every GET and answers with a canned body or status."""

    def __init__(self, body: bytes = b"", status_code: int = 200, error: Exception | None = None):
        self.body = body
        self.status_code = status_code
        self.error = error
        self.calls: list[str] = []
        self.mounted: dict[str, object] = {}

    def mount(self, prefix: str, adapter: object) -> None:
        self.mounted[prefix] = adapter

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return FakeResponse(url, self.body, self.status_code)
