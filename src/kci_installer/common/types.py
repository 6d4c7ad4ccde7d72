from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


LATEST = "latest"


@dataclass(frozen=True)
class TargetPlatform:
    os: str
    arch: str

    @property
    def tag(self) -> str:
        return f"{self.os}-{self.arch}"


@dataclass(frozen=True)
class ReleaseRef:
    repository: str
    version: str = LATEST

    @property
    def is_latest(self) -> bool:
        return self.version == LATEST


@dataclass(frozen=True)
class InstallerProgress:
    phase: str
    message: str
    bytes_done: int | None = None
    bytes_total: int | None = None


@dataclass(frozen=True)
class InstallResult:
    platform: TargetPlatform
    asset_name: str
    url: str
    install_dir: Path
    binary_path: Path
    on_path: bool
