from __future__ import annotations

import argparse
import contextlib
import dataclasses
import logging
import signal
import threading
from pathlib import Path

from kci_installer import __version__ as KCI_INSTALLER_VERSION
from kci_installer.common.config import InstallConfig, RuntimeConfig
from kci_installer.common.errors import InstallerError
from kci_installer.common.logging_utils import configure_logging
from kci_installer.common.types import InstallerProgress
from kci_installer.installer.install_service import Installer


log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kci-install",
        usage="kci-install [--version <tag>] [--install-dir <dir>]",
        description=f"Install a prebuilt kicad-component-importer release (installer {KCI_INSTALLER_VERSION}).",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show this message and exit.")
    parser.add_argument(
        "-v",
        "--version",
        "-Version",
        dest="version",
        metavar="<tag>",
        help="Release tag to install (default: $KCI_VERSION or latest).",
    )
    parser.add_argument(
        "-d",
        "--install-dir",
        "-InstallDir",
        dest="install_dir",
        metavar="<dir>",
        help="Directory to place the binary in (default: $KCI_INSTALL_DIR or a per-user bin dir).",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: $KCI_LOG_LEVEL or WARNING).")
    return parser


SIGTERM_EXIT_CODE = 128 + int(signal.SIGTERM)


def _raise_exit(signum, frame) -> None:
    raise SystemExit(128 + int(signum))


@contextlib.contextmanager
def exit_on_sigterm():
    # Turning SIGTERM into SystemExit lets the temp workspace context clean up.
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGTERM, _raise_exit)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def _log_progress(progress: InstallerProgress) -> None:
    if progress.phase == "download-progress":
        log.debug("%s (%s/%s bytes)", progress.message, progress.bytes_done, progress.bytes_total)
        return
    log.info("[%s] %s", progress.phase, progress.message)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        print(f"Unknown option: {unknown[0]}")
        parser.print_usage()
        return 1
    if args.help:
        parser.print_help()
        return 0

    runtime_cfg = RuntimeConfig.from_env()
    if args.log_level:
        runtime_cfg = dataclasses.replace(runtime_cfg, log_level=args.log_level)
    configure_logging(runtime_cfg.log_level, runtime_cfg.log_file)

    config = InstallConfig.from_env()
    if args.version is not None:
        config = dataclasses.replace(config, version=args.version)
    if args.install_dir:
        config = dataclasses.replace(config, install_dir=Path(args.install_dir).expanduser())

    try:
        with exit_on_sigterm():
            result = Installer(config, runtime_cfg).install(progress_callback=_log_progress)
    except InstallerError as exc:
        log.debug("Install failed", exc_info=True)
        print(str(exc))
        return 1
    except KeyboardInterrupt:
        print("Interrupted")
        return 130

    if not result.on_path:
        print(f"Add {result.install_dir} to PATH to use {config.binary_name}")
    print(f"Installed {config.binary_name} to {result.binary_path}")
    return 0
