from kci_installer.common.config import InstallConfig, RuntimeConfig
from kci_installer.common.errors import (
    DownloadError,
    ExtractionError,
    InstallerError,
    UnsupportedPlatformError,
)
from kci_installer.common.types import InstallResult, ReleaseRef, TargetPlatform

__all__ = [
    "InstallConfig",
    "RuntimeConfig",
    "InstallerError",
    "UnsupportedPlatformError",
    "DownloadError",
    "ExtractionError",
    "InstallResult",
    "ReleaseRef",
    "TargetPlatform",
]
