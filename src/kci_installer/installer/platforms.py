"""Host detection and the table of platforms that have a prebuilt release asset."""

from __future__ import annotations

import platform
from dataclasses import dataclass

from kci_installer.common.errors import UnsupportedPlatformError
from kci_installer.common.types import ReleaseRef, TargetPlatform
from kci_installer.installer.extractors import EXTRACTORS, ArchiveExtractor


_OS_NAMES = {
    "linux": "linux",
    "darwin": "macos",
    "windows": "windows",
}

_ARCH_NAMES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}


@dataclass(frozen=True)
class PlatformCapability:
    archive_suffix: str
    executable_suffix: str = ""
    posix_permissions: bool = True
    # Copy every extracted file into the install dir, not just the binary.
    install_whole_archive: bool = False

    @property
    def extractor(self) -> ArchiveExtractor:
        return EXTRACTORS[self.archive_suffix]


SUPPORTED_PLATFORMS: dict[TargetPlatform, PlatformCapability] = {
    TargetPlatform("linux", "x86_64"): PlatformCapability("tar.gz"),
    TargetPlatform("macos", "aarch64"): PlatformCapability("tar.gz"),
    TargetPlatform("macos", "x86_64"): PlatformCapability("tar.gz"),
    TargetPlatform("windows", "x86_64"): PlatformCapability(
        "zip",
        executable_suffix=".exe",
        posix_permissions=False,
        install_whole_archive=True,
    ),
}


def detect_platform(system: str | None = None, machine: str | None = None) -> TargetPlatform:
    raw_system = platform.system() if system is None else system
    raw_machine = platform.machine() if machine is None else machine

    os_name = _OS_NAMES.get(raw_system.strip().lower())
    if os_name is None:
        raise UnsupportedPlatformError(f"Unsupported OS: {raw_system}")
    arch = _ARCH_NAMES.get(raw_machine.strip().lower())
    if arch is None:
        raise UnsupportedPlatformError(f"Unsupported arch: {raw_machine}")
    return TargetPlatform(os_name, arch)


def capability_for(target: TargetPlatform) -> PlatformCapability:
    capability = SUPPORTED_PLATFORMS.get(target)
    if capability is None:
        raise UnsupportedPlatformError(f"No prebuilt binary for {target.tag}")
    return capability


def asset_name(binary_name: str, target: TargetPlatform) -> str:
    capability = capability_for(target)
    return f"{binary_name}-{target.os}-{target.arch}.{capability.archive_suffix}"


def executable_name(binary_name: str, target: TargetPlatform) -> str:
    return binary_name + capability_for(target).executable_suffix


def download_url(github_url: str, release: ReleaseRef, asset: str) -> str:
    releases_root = f"{github_url.rstrip('/')}/{release.repository}/releases"
    if release.is_latest:
        return f"{releases_root}/latest/download/{asset}"
    return f"{releases_root}/download/{release.version}/{asset}"
