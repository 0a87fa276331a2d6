import os
import tempfile
from pathlib import Path

from config.config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

ENCRYPTION_KEY = "dGVzdC1lbmNyeXB0aW9uLWtleS1mb3ItcXVlbC1pby0="

_tmp = Path(tempfile.gettempdir())
DATA_FILE = os.getenv("DATA_FILE", str(_tmp / "quelio_test_data.json"))
RATE_LIMIT_FILE = os.getenv("RATE_LIMIT_FILE", str(_tmp / "quelio_test_rate_limit.json"))

DEBUG = False
TESTING = True
