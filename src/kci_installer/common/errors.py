from __future__ import annotations


class InstallerError(RuntimeError):
    """Fatal installer failure. The message is shown to the user as-is."""


class UnsupportedPlatformError(InstallerError):
    pass


class DownloadError(InstallerError):
    pass


class ExtractionError(InstallerError):
    pass


class PlacementError(InstallerError):
    pass
