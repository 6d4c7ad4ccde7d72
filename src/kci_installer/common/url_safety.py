from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterable
from urllib.parse import urlparse


def _normalize_host(host: str) -> str:
    return str(host or "").strip().lower().rstrip(".")


def _is_allowed_host(host: str, allowed_hosts: Iterable[str]) -> bool:
    normalized = _normalize_host(host)
    if not normalized:
        return False
    allowed = {_normalize_host(v) for v in allowed_hosts}
    if normalized in allowed:
        return True
    return any(normalized.endswith("." + entry) for entry in allowed)


def validate_trusted_url(url: str, allowed_hosts: Iterable[str], allow_http: bool = False) -> None:
    parsed = urlparse(str(url))
    scheme = (parsed.scheme or "").lower()
    if scheme != "https" and not (allow_http and scheme == "http"):
        raise ValueError(f"Untrusted URL scheme for release asset: {url}")
    host = parsed.hostname or ""
    if not _is_allowed_host(host, allowed_hosts):
        raise ValueError(f"Untrusted release host: {host or '<none>'}")


def validate_archive_member_path(member_name: str) -> PurePosixPath:
    # Normalize as posix so zip and tar entries are checked the same way.
    normalized = str(member_name or "").replace("\\", "/").strip()
    if not normalized:
        raise ValueError("Archive contains an empty path entry.")

    path = PurePosixPath(normalized)
    parts = path.parts
    if not parts:
        raise ValueError("Archive path entry has no parts.")
    if path.is_absolute():
        raise ValueError(f"Archive entry is absolute path: {member_name}")
    if any(part == ".." for part in parts):
        raise ValueError(f"Archive entry contains traversal segment: {member_name}")
    if ":" in parts[0]:
        raise ValueError(f"Archive entry contains drive designator: {member_name}")
    return path
