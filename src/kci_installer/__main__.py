from __future__ import annotations

from kci_installer.installer.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
