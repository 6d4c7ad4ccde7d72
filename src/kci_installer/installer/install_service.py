from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Callable

from kci_installer.common.config import InstallConfig, RuntimeConfig, default_install_dir
from kci_installer.common.errors import PlacementError
from kci_installer.common.types import InstallerProgress, InstallResult, ReleaseRef, TargetPlatform
from kci_installer.installer import platforms
from kci_installer.installer.download_service import ReleaseDownloader
from kci_installer.installer.extractors import locate_binary


log = logging.getLogger(__name__)


def dir_on_path(directory: Path, path_value: str | None = None, windows: bool = False) -> bool:
    raw = os.environ.get("PATH", "") if path_value is None else path_value

    def norm(value: str) -> str:
        text = os.path.normpath(value.strip())
        return text.lower() if windows else text

    wanted = norm(str(directory))
    return any(norm(part) == wanted for part in raw.split(os.pathsep) if part.strip())


def _place(source: Path, destination: Path) -> None:
    if source.is_dir() and destination.is_dir():
        shutil.copytree(source, destination, dirs_exist_ok=True)
        return
    if destination.is_dir() and not destination.is_symlink():
        shutil.rmtree(destination)
    elif destination.exists() or destination.is_symlink():
        destination.unlink()
    shutil.move(str(source), str(destination))


class Installer:
    def __init__(
        self,
        config: InstallConfig,
        runtime: RuntimeConfig,
        downloader: ReleaseDownloader | None = None,
    ):
        self.config = config
        self.runtime = runtime
        self.downloader = downloader or ReleaseDownloader(runtime)

    def _emit(
        self,
        callback: Callable[[InstallerProgress], None] | None,
        progress: InstallerProgress,
    ) -> None:
        if callback is None:
            return
        try:
            callback(progress)
        except Exception:
            log.exception("Installer progress callback failed.")

    def install(
        self,
        target: TargetPlatform | None = None,
        progress_callback: Callable[[InstallerProgress], None] | None = None,
    ) -> InstallResult:
        # Everything up to the URL is pure, so unsupported hosts fail before any IO.
        if target is None:
            target = platforms.detect_platform()
        capability = platforms.capability_for(target)
        asset = platforms.asset_name(self.config.binary_name, target)
        release = ReleaseRef(self.config.repository, self.config.version)
        url = platforms.download_url(self.runtime.github_url, release, asset)
        binary_file = platforms.executable_name(self.config.binary_name, target)
        install_dir = self.config.install_dir or default_install_dir(target.os, self.config.binary_name)
        log.info("Resolved %s (%s) for %s", asset, release.version, target.tag)
        self._emit(progress_callback, InstallerProgress(phase="resolve", message=f"Resolved {asset}"))

        if self.runtime.temp_parent is not None:
            self.runtime.temp_parent.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory(prefix="kci-", dir=self.runtime.temp_parent) as td:
            workspace = Path(td)
            self._emit(progress_callback, InstallerProgress(phase="download-start", message=f"Downloading {url}"))
            archive = self.downloader.download(
                url,
                workspace / asset,
                progress_callback=lambda p: self._emit(progress_callback, p),
            )

            self._emit(progress_callback, InstallerProgress(phase="extract", message=f"Extracting {asset}"))
            extracted = capability.extractor.extract(archive, workspace / "extracted")
            source = locate_binary(extracted, binary_file)

            self._emit(progress_callback, InstallerProgress(phase="install", message=f"Installing into {install_dir}"))
            try:
                install_dir.mkdir(parents=True, exist_ok=True)
                if capability.install_whole_archive:
                    for child in extracted.iterdir():
                        _place(child, install_dir / child.name)
                    destination = install_dir / source.relative_to(extracted)
                else:
                    destination = install_dir / binary_file
                    _place(source, destination)

                if capability.posix_permissions:
                    mode = destination.stat().st_mode
                    destination.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            except OSError as exc:
                raise PlacementError(f"Failed to install into {install_dir}: {exc}") from exc

        on_path = dir_on_path(install_dir, windows=target.os == "windows")
        result = InstallResult(
            platform=target,
            asset_name=asset,
            url=url,
            install_dir=install_dir,
            binary_path=destination.resolve(),
            on_path=on_path,
        )
        self._emit(progress_callback, InstallerProgress(phase="complete", message=f"Installed {result.binary_path}"))
        log.info("Installed %s to %s", self.config.binary_name, result.binary_path)
        return result
