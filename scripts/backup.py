"""Backup the per-user cache file.

Note: Copies DATA_FILE to backups/data_<timestamp>.json; run it before upgrades.
"""

from __future__ import annotations

import importlib
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import get_settings_module


def backup(data_file: Path, out_dir: Path, *, now: Optional[datetime] = None) -> Path:
    if not data_file.exists():
        raise SystemExit(f"Nothing to back up: {data_file} does not exist.")

    out_dir.mkdir(parents=True, exist_ok=True)
    ts = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"data_{ts}.json"
    shutil.copy2(data_file, out_file)
    return out_file


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    out_dir = Path(__file__).resolve().parents[1] / "backups"

    out_file = backup(Path(settings.DATA_FILE), out_dir)
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
