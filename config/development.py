import os

from config.config import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Fixed dev key so tokens survive restarts; never use it in production
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY", "ZGV2LWVuY3J5cHRpb24ta2V5LWRvLW5vdC11c2UtMDE=")

DEBUG = True
