from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from kci_installer.common.types import LATEST


DEFAULT_REPOSITORY = "american-sensing/kicad-component-importer"
DEFAULT_BINARY_NAME = "kicad-component-importer"
DEFAULT_GITHUB_URL = "https://github.com"

# GitHub answers release downloads with a redirect to one of these.
TRUSTED_RELEASE_HOSTS: tuple[str, ...] = (
    "github.com",
    "objects.githubusercontent.com",
    "release-assets.githubusercontent.com",
    "github-releases.githubusercontent.com",
)


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


def _env_flag(name: str) -> bool:
    return _env(name).lower() in {"1", "true", "yes", "on"}


def default_install_dir(os_name: str, binary_name: str = DEFAULT_BINARY_NAME) -> Path:
    if os_name == "windows":
        local_app_data = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
        return local_app_data / binary_name / "bin"
    return Path.home() / ".local" / "bin"


@dataclass(frozen=True)
class InstallConfig:
    repository: str = DEFAULT_REPOSITORY
    binary_name: str = DEFAULT_BINARY_NAME
    version: str = LATEST
    # None means the per-user default for the detected OS.
    install_dir: Path | None = None

    @classmethod
    def from_env(cls) -> "InstallConfig":
        install_dir = _env("KCI_INSTALL_DIR")
        return cls(
            version=_env("KCI_VERSION") or LATEST,
            install_dir=Path(install_dir).expanduser() if install_dir else None,
        )


@dataclass(frozen=True)
class RuntimeConfig:
    github_url: str = DEFAULT_GITHUB_URL
    download_chunk_size: int = 1024 * 1024
    connect_timeout_seconds: int = 10
    read_timeout_seconds: int = 60
    max_retries: int = 0
    allow_insecure_http: bool = False
    temp_parent: Path | None = None
    log_level: str = "WARNING"
    log_file: Path | None = None

    @property
    def trusted_release_hosts(self) -> tuple[str, ...]:
        host = urlparse(self.github_url).hostname or ""
        if host and host not in TRUSTED_RELEASE_HOSTS:
            return (*TRUSTED_RELEASE_HOSTS, host)
        return TRUSTED_RELEASE_HOSTS

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        temp_parent = _env("KCI_TMPDIR")
        log_file = _env("KCI_LOG_FILE")
        return cls(
            github_url=(_env("KCI_GITHUB_URL") or DEFAULT_GITHUB_URL).rstrip("/"),
            download_chunk_size=int(os.environ.get("KCI_DOWNLOAD_CHUNK", str(1024 * 1024))),
            connect_timeout_seconds=int(os.environ.get("KCI_CONNECT_TIMEOUT", "10")),
            read_timeout_seconds=int(os.environ.get("KCI_READ_TIMEOUT", "60")),
            max_retries=int(os.environ.get("KCI_MAX_RETRIES", "0")),
            allow_insecure_http=_env_flag("KCI_ALLOW_HTTP"),
            temp_parent=Path(temp_parent) if temp_parent else None,
            log_level=_env("KCI_LOG_LEVEL") or "WARNING",
            log_file=Path(log_file) if log_file else None,
        )
