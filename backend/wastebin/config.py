# wastebin/config.py

import base64
import os
from dataclasses import dataclass, field
from typing import Optional

from wastebin.core.crypto import ScryptParams, check_server_key

# =========================
# DATABASE
# =========================

def _database_url() -> str:
    """
    DATABASE_URL if set, otherwise a PostgreSQL URL built from DB_* variables.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("DB_USER", "wastebin")
    password = os.getenv("DB_PASS", "wastebin")
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "wastebin")
    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


def _load_at_rest_key() -> Optional[bytes]:
    raw = os.getenv("WASTEBIN_AT_REST_KEY", "").strip()
    if not raw:
        return None
    return check_server_key(base64.urlsafe_b64decode(raw))


def _env_int(name: str, default: int):
    return lambda: int(os.getenv(name, str(default)))


@dataclass
class Settings:
    database_url: str = field(default_factory=_database_url)
    title: str = field(default_factory=lambda: os.getenv("WASTEBIN_TITLE", "wastebin"))
    id_length: int = field(default_factory=_env_int("WASTEBIN_ID_LENGTH", 12))
    max_id_attempts: int = field(default_factory=_env_int("WASTEBIN_MAX_ID_ATTEMPTS", 5))
    max_body_size: int = field(default_factory=_env_int("WASTEBIN_MAX_BODY_SIZE", 1024 * 1024))
    sweep_interval: int = field(default_factory=_env_int("WASTEBIN_SWEEP_INTERVAL", 300))
    at_rest_key: Optional[bytes] = field(default_factory=_load_at_rest_key)
    scrypt: ScryptParams = field(default_factory=lambda: ScryptParams(
        n=int(os.getenv("WASTEBIN_SCRYPT_N", str(2 ** 15))),
        r=int(os.getenv("WASTEBIN_SCRYPT_R", "8")),
        p=int(os.getenv("WASTEBIN_SCRYPT_P", "1")),
    ))


def get_settings() -> Settings:
    """Read the environment afresh on every call."""
    return Settings()
