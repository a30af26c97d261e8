"""Application configuration."""

import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("DATA_DIR", str(Path(__file__).parent.parent / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)

# Sandbox root: every stored file lives under FILES_DIR/<upload id>/
FILES_DIR = Path(os.environ.get("FILES_DIR", str(DATA_DIR / "files")))
FILES_DIR.mkdir(parents=True, exist_ok=True)

DATABASE_URL = os.environ.get("DATABASE_URL", f"sqlite:///{DATA_DIR}/trackdrop.db")

# Offline GeoLite2 City database; geography is "unknown" when it is absent
GEOIP_DB_PATH = Path(os.environ.get("GEOIP_DB_PATH", str(DATA_DIR / "GeoLite2-City.mmdb")))

# Public base URL for share links, derived from the request when empty
BASE_URL = os.environ.get("BASE_URL", "").strip().rstrip("/")

MAX_FILE_SIZE = int(os.environ.get("MAX_FILE_SIZE", str(50 * 1024 * 1024)))

TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "").strip().lower() in ("1", "true", "yes")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
