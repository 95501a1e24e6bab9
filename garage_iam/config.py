import os
import yaml

ROOT_PATH = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_FILE_PATH = os.environ.get(
    "GARAGE_IAM_CONFIG", os.path.join(ROOT_PATH, "env.yaml")
)

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./garage_iam.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")

    # Transactional email (Resend); empty key means log-only delivery
    RESEND_API_KEY = data.get("RESEND_API_KEY", "")
    RESEND_API_URL = data.get("RESEND_API_URL", "https://api.resend.com/emails")
    EMAIL_FROM = data.get("EMAIL_FROM", "onboarding@resend.dev")
    EMAIL_MAX_RETRIES = int(data.get("EMAIL_MAX_RETRIES", 3))
    EMAIL_TIMEOUT_SECONDS = float(data.get("EMAIL_TIMEOUT_SECONDS", 10.0))

    # Frontend base URL used to build invite links
    APP_PUBLIC_URL = data.get("APP_PUBLIC_URL", "http://localhost:5173")

    # Per-IP limit on invite acceptance
    ACCEPT_RATE_LIMIT = int(data.get("ACCEPT_RATE_LIMIT", 5))
    ACCEPT_RATE_WINDOW_MINUTES = int(data.get("ACCEPT_RATE_WINDOW_MINUTES", 15))
