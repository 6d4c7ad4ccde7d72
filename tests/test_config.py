from __future__ import annotations

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from kci_installer.common.config import (
    DEFAULT_BINARY_NAME,
    DEFAULT_REPOSITORY,
    InstallConfig,
    RuntimeConfig,
    default_install_dir,
)
from kci_installer.common.url_safety import validate_archive_member_path, validate_trusted_url


class ConfigTests(unittest.TestCase):
    def test_install_config_defaults(self) -> None:
        with patch.dict(os.environ, {"KCI_VERSION": "", "KCI_INSTALL_DIR": ""}):
            cfg = InstallConfig.from_env()
        self.assertEqual(cfg.repository, DEFAULT_REPOSITORY)
        self.assertEqual(cfg.binary_name, DEFAULT_BINARY_NAME)
        self.assertEqual(cfg.version, "latest")
        self.assertIsNone(cfg.install_dir)

    def test_install_config_from_env(self) -> None:
        with patch.dict(os.environ, {"KCI_VERSION": " v1.2.3 ", "KCI_INSTALL_DIR": "/opt/kci/bin"}):
            cfg = InstallConfig.from_env()
        self.assertEqual(cfg.version, "v1.2.3")
        self.assertEqual(cfg.install_dir, Path("/opt/kci/bin"))

    def test_default_install_dirs(self) -> None:
        with patch.dict(os.environ, {"LOCALAPPDATA": "/appdata"}):
            self.assertEqual(
                default_install_dir("windows"),
                Path("/appdata") / DEFAULT_BINARY_NAME / "bin",
            )
        self.assertEqual(default_install_dir("linux"), Path.home() / ".local" / "bin")

    def test_runtime_config_from_env(self) -> None:
        env = {
            "KCI_GITHUB_URL": "https://mirror.example.org/",
            "KCI_MAX_RETRIES": "2",
            "KCI_ALLOW_HTTP": "yes",
            "KCI_TMPDIR": "/scratch",
        }
        with patch.dict(os.environ, env):
            runtime = RuntimeConfig.from_env()
        self.assertEqual(runtime.github_url, "https://mirror.example.org")
        self.assertEqual(runtime.max_retries, 2)
        self.assertTrue(runtime.allow_insecure_http)
        self.assertEqual(runtime.temp_parent, Path("/scratch"))
        self.assertIn("mirror.example.org", runtime.trusted_release_hosts)

    def test_retries_default_off(self) -> None:
        self.assertEqual(RuntimeConfig().max_retries, 0)


class UrlSafetyTests(unittest.TestCase):
    def test_trusted_hosts(self) -> None:
        hosts = RuntimeConfig().trusted_release_hosts
        validate_trusted_url("https://github.com/a/b/releases/latest/download/x.tar.gz", hosts)
        validate_trusted_url("https://objects.githubusercontent.com/github-production-release-asset/1", hosts)
        with self.assertRaises(ValueError):
            validate_trusted_url("https://evil.example.com/x.tar.gz", hosts)
        with self.assertRaises(ValueError):
            validate_trusted_url("http://github.com/x.tar.gz", hosts)
        validate_trusted_url("http://github.com/x.tar.gz", hosts, allow_http=True)
        with self.assertRaises(ValueError):
            validate_trusted_url("ftp://github.com/x.tar.gz", hosts, allow_http=True)

    def test_archive_member_paths(self) -> None:
        self.assertEqual(str(validate_archive_member_path("./bin/tool")), "bin/tool")
        for bad in ("", "/etc/passwd", "../x", "a/../../x", "C:/x", "..\\x"):
            with self.subTest(member=bad):
                with self.assertRaises(ValueError):
                    validate_archive_member_path(bad)


if __name__ == "__main__":
    unittest.main()
