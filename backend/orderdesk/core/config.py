"""Application configuration loaded from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings:
    # SQLite by default; point at Postgres in production
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'order_desk.db'}"
    )

    # API server
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))

    # Auth – bearer ID tokens from the identity provider
    AUTH_ENABLED: bool = os.getenv("AUTH_ENABLED", "false").lower() == "true"
    AUTH_SECRET: str = os.getenv("AUTH_SECRET", "changeme")
    AUTH_ALGORITHM: str = os.getenv("AUTH_ALGORITHM", "HS256")
    AUTH_AUDIENCE: str = os.getenv("AUTH_AUDIENCE", "")
    # Subject reported for every caller while AUTH_ENABLED is off
    AUTH_DEV_SUBJECT: str = os.getenv("AUTH_DEV_SUBJECT", "local-dev")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "logs/app.log")

    # CORS
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
        ).split(",")
        if o.strip()
    ]

    # Order numbers: {PREFIX}-DD-MM-YY-{sequence padded to ORDER_SEQ_WIDTH}
    ORDER_NO_PREFIX: str = os.getenv("ORDER_NO_PREFIX", "SQ")
    ORDER_SEQ_WIDTH: int = int(os.getenv("ORDER_SEQ_WIDTH", "4"))


settings = Settings()
