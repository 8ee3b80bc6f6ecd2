import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./pin_reset.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = data.get("CACHE_BACKEND", "redis")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # PIN reset policy
    INSTITUTION_DOMAIN = data.get("INSTITUTION_DOMAIN", "curaj.ac.in")
    RESET_TOKEN_TTL_MINUTES = data.get("RESET_TOKEN_TTL_MINUTES", 30)
    RATE_LIMIT_MAX_ATTEMPTS = data.get("RATE_LIMIT_MAX_ATTEMPTS", 3)
    RATE_LIMIT_WINDOW_SECONDS = data.get("RATE_LIMIT_WINDOW_SECONDS", 3600)
    PIN_MIN_LENGTH = data.get("PIN_MIN_LENGTH", 4)
    PIN_MAX_LENGTH = data.get("PIN_MAX_LENGTH", 6)
    BCRYPT_ROUNDS = data.get("BCRYPT_ROUNDS", 10)

    # Secrets have no defaults; settings construction fails when they are missing
    APP_URL = data.get("APP_URL")
    RESET_TOKEN_SECRET = data.get("RESET_TOKEN_SECRET")

    # Outbound mail
    MAIL_HOST = data.get("MAIL_HOST", "smtp.gmail.com")
    MAIL_PORT = data.get("MAIL_PORT", 587)
    MAIL_USER = data.get("MAIL_USER")
    MAIL_PASSWORD = data.get("MAIL_PASSWORD")
    MAIL_FROM_NAME = data.get("MAIL_FROM_NAME", "Blind CURAJ")
    MAIL_TIMEOUT_SECONDS = data.get("MAIL_TIMEOUT_SECONDS", 10)
