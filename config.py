"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "subtrack")
DB_USER: str = os.getenv("DB_USER", "subtrack_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = (
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

# ── Storage ───────────────────────────────────────────────
# 'postgres' (hosted, multi-device) or 'local' (one JSON file per workspace)
STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "postgres").strip().lower()
LOCAL_STORE_DIR: str = os.getenv("LOCAL_STORE_DIR", "data")
CACHE_TTL_SECONDS: int = int(os.getenv("CACHE_TTL_SECONDS", "300"))

# ── Sharing ───────────────────────────────────────────────
SHARE_BASE_URL: str = os.getenv("SHARE_BASE_URL", "")

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Currency ──────────────────────────────────────────────
REFERENCE_CURRENCY: str = "SAR"
