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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./discuss_board.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = data.get("JWT_ISSUER", "autobe")
    ACCESS_TOKEN_TTL_SECONDS = int(data.get("ACCESS_TOKEN_TTL_SECONDS", 60 * 60))
    REFRESH_TOKEN_TTL_SECONDS = int(
        data.get("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60)
    )
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
    REQUIRE_EMAIL_VERIFICATION = bool(data.get("REQUIRE_EMAIL_VERIFICATION", False))
