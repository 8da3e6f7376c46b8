from __future__ import annotations

import os
from pathlib import Path

# Base data dir: repository_root/data (we are in backend/taskify)
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def data_dir() -> Path:
    return Path(os.getenv("APP_DATA_DIR", str(DEFAULT_DATA_DIR)))


def database_url() -> str:
    url = os.getenv("DATABASE_URL", "")
    if url:
        return url
    return f"sqlite:///{data_dir() / 'taskify.db'}"


def guest_dir() -> Path:
    return data_dir() / "guest"


def search_debounce_seconds() -> float:
    try:
        return int(os.getenv("SEARCH_DEBOUNCE_MS", "300")) / 1000.0
    except ValueError:
        return 0.3


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
