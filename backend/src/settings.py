from __future__ import annotations

import os
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent
BACKEND_DIR = SRC_DIR.parent
REPO_ROOT = BACKEND_DIR.parent

ARTIFACTS_DIR = REPO_ROOT / "artifacts"
DB_PATH = Path(os.getenv("PORTAL_DB_PATH", str(ARTIFACTS_DIR / "portal.db")))

HADESWEB_API_BASE_URL = os.getenv("HADESWEB_API_BASE_URL", "https://api.hadesweb.com.br/api/v1")
HADESWEB_API_TOKEN = os.getenv("HADESWEB_API_TOKEN", "")
PLACEHOLDER_TOKEN = "your_hadesweb_api_token_here"

REQUEST_TIMEOUT = float(os.getenv("PORTAL_REQUEST_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("PORTAL_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("PORTAL_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]


def ensure_runtime_dirs() -> None:
    for directory in (ARTIFACTS_DIR, DB_PATH.parent):
        directory.mkdir(parents=True, exist_ok=True)
