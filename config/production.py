import os

from config.config import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

# Empty key makes build_container() refuse to start
ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY", "")

DEBUG = False
