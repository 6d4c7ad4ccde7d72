from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from kci_installer.common.config import RuntimeConfig
from kci_installer.common.errors import DownloadError
from kci_installer.common.types import InstallerProgress
from kci_installer.common.url_safety import validate_trusted_url


log = logging.getLogger(__name__)


class ReleaseDownloader:
    def __init__(self, runtime: RuntimeConfig):
        self.runtime = runtime
        self.session = requests.Session()
        # Retries stay off unless KCI_MAX_RETRIES asks for them.
        retry = Retry(
            total=runtime.max_retries,
            connect=runtime.max_retries,
            read=runtime.max_retries,
            status=runtime.max_retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "HEAD"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _validate(self, url: str) -> None:
        try:
            validate_trusted_url(
                url,
                self.runtime.trusted_release_hosts,
                allow_http=self.runtime.allow_insecure_http,
            )
        except ValueError as exc:
            raise DownloadError(str(exc)) from exc

    def download(
        self,
        url: str,
        destination: Path,
        progress_callback: Callable[[InstallerProgress], None] | None = None,
    ) -> Path:
        self._validate(url)
        log.info("Downloading %s", url)
        bytes_done = 0
        last_emitted = 0
        emit_threshold = max(4 * 1024 * 1024, self.runtime.download_chunk_size * 4)
        try:
            with self.session.get(
                url,
                stream=True,
                timeout=(self.runtime.connect_timeout_seconds, self.runtime.read_timeout_seconds),
            ) as resp:
                resp.raise_for_status()
                self._validate(str(resp.url))
                content_len_raw = resp.headers.get("Content-Length", "").strip()
                bytes_total = int(content_len_raw) if content_len_raw.isdigit() else None
                with destination.open("wb") as fh:
                    for chunk in resp.iter_content(chunk_size=self.runtime.download_chunk_size):
                        if not chunk:
                            continue
                        fh.write(chunk)
                        bytes_done += len(chunk)
                        if progress_callback is not None and (bytes_done - last_emitted) >= emit_threshold:
                            progress_callback(
                                InstallerProgress(
                                    phase="download-progress",
                                    message=f"Downloading {destination.name}",
                                    bytes_done=bytes_done,
                                    bytes_total=bytes_total,
                                )
                            )
                            last_emitted = bytes_done
        except requests.RequestException as exc:
            raise DownloadError(f"Download failed: {url}: {exc}") from exc

        if progress_callback is not None:
            progress_callback(
                InstallerProgress(
                    phase="download-progress",
                    message=f"Downloaded {destination.name}",
                    bytes_done=bytes_done,
                    bytes_total=bytes_total if bytes_total is not None else bytes_done,
                )
            )
        log.info("Downloaded %s (%d bytes)", destination.name, bytes_done)
        return destination
