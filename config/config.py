import os
import tempfile
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]


def _minutes(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "quelio-secret"

    # Upstream portal
    KELIO_URL = os.environ.get("KELIO_URL", "https://your-company.kelio.io").rstrip("/")
    KELIO_TIMEOUT = float(os.environ.get("KELIO_TIMEOUT", "15"))
    KELIO_VERIFY_SSL = bool(int(os.environ.get("KELIO_VERIFY_SSL", "1")))
    # The portal returns 4 rows per page, so three pages cover the visible period
    KELIO_PAGE_OFFSETS = tuple(int(x) for x in os.environ.get("KELIO_PAGE_OFFSETS", "0,4,8").split(",") if x.strip())

    TIMEZONE = os.environ.get("APP_TIMEZONE", "Europe/Paris")

    # Business rules (minutes since midnight unless stated otherwise)
    PAUSE_TIME = _minutes("PAUSE_TIME", 7)
    START_LIMIT_MINUTES = _minutes("START_LIMIT_MINUTES", 8 * 60 + 30)
    END_LIMIT_MINUTES = _minutes("END_LIMIT_MINUTES", 18 * 60 + 30)
    MORNING_BREAK_THRESHOLD = _minutes("MORNING_BREAK_THRESHOLD", 11 * 60)
    AFTERNOON_BREAK_THRESHOLD = _minutes("AFTERNOON_BREAK_THRESHOLD", 16 * 60)
    NOON_BREAK_START = _minutes("NOON_BREAK_START", 12 * 60)
    NOON_BREAK_END = _minutes("NOON_BREAK_END", 14 * 60)
    NOON_MINIMUM_BREAK = _minutes("NOON_MINIMUM_BREAK", 60)

    # Storage
    DATA_FILE = os.environ.get("DATA_FILE", str(BASE_DIR / "data" / "data.json"))
    RATE_LIMIT_FILE = os.environ.get("RATE_LIMIT_FILE", str(Path(tempfile.gettempdir()) / "quelio_rate_limit.json"))

    # Auth
    RATE_LIMIT_MAX_ATTEMPTS = int(os.environ.get("RATE_LIMIT_MAX_ATTEMPTS", "5"))
    RATE_LIMIT_WINDOW = int(os.environ.get("RATE_LIMIT_WINDOW", "900"))
    ENCRYPTION_KEY = os.environ.get("ENCRYPTION_KEY", "")
    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", "0"))
    ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "")


# Module-level names are what create_app() reads
SECRET_KEY = Config.SECRET_KEY
KELIO_URL = Config.KELIO_URL
KELIO_TIMEOUT = Config.KELIO_TIMEOUT
KELIO_VERIFY_SSL = Config.KELIO_VERIFY_SSL
KELIO_PAGE_OFFSETS = Config.KELIO_PAGE_OFFSETS
TIMEZONE = Config.TIMEZONE

PAUSE_TIME = Config.PAUSE_TIME
START_LIMIT_MINUTES = Config.START_LIMIT_MINUTES
END_LIMIT_MINUTES = Config.END_LIMIT_MINUTES
MORNING_BREAK_THRESHOLD = Config.MORNING_BREAK_THRESHOLD
AFTERNOON_BREAK_THRESHOLD = Config.AFTERNOON_BREAK_THRESHOLD
NOON_BREAK_START = Config.NOON_BREAK_START
NOON_BREAK_END = Config.NOON_BREAK_END
NOON_MINIMUM_BREAK = Config.NOON_MINIMUM_BREAK

DATA_FILE = Config.DATA_FILE
RATE_LIMIT_FILE = Config.RATE_LIMIT_FILE
RATE_LIMIT_MAX_ATTEMPTS = Config.RATE_LIMIT_MAX_ATTEMPTS
RATE_LIMIT_WINDOW = Config.RATE_LIMIT_WINDOW
ENCRYPTION_KEY = Config.ENCRYPTION_KEY
TOKEN_MAX_AGE = Config.TOKEN_MAX_AGE
ADMIN_USERNAME = Config.ADMIN_USERNAME
ADMIN_PASSWORD = Config.ADMIN_PASSWORD

DEBUG = bool(int(os.environ.get("DEBUG", "1")))
