import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "study_room_test"),
}

JWT_SECRET = "test-jwt-secret"
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_DAYS = 1

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

QA_STRICT_ANSWER = False

AUTO_INIT_DB = False
AUTO_SEED_DB = False
