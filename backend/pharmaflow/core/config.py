"""Application configuration with security-first defaults.

Environment variables override all defaults.
CRITICAL: SECRET_KEY must be set in .env - will fail fast if missing in production.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load .env for local development (no-op when the file is absent)
_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _csv(name: str, default: str) -> List[str]:
    return [part.strip() for part in os.getenv(name, default).split(",") if part.strip()]


class Settings:
    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmaflow.db")

    # JWT Security - CRITICAL
    SECRET_KEY: str = os.getenv("SECRET_KEY", None)
    if not SECRET_KEY:
        # Generate with: python -c "import secrets; print(secrets.token_urlsafe(32))"
        if os.getenv("ENVIRONMENT", "development") == "production":
            raise ValueError(
                "CRITICAL: SECRET_KEY must be set in production environment. "
                "Generate with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
            )
        import warnings
        warnings.warn(
            "SECRET_KEY not set in environment. Using development default. "
            "Set SECRET_KEY in .env to a strong random value before production.",
            RuntimeWarning
        )
        SECRET_KEY = "development-only-weak-default-change-in-production"

    ALGORITHM: str = "HS256"
    # A register session lasts a working shift
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))
    AUTH_COOKIE_NAME: str = "pharmaflow_token"

    # CORS (Restrictive - specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _csv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    )
    ALLOWED_HOSTS: List[str] = _csv("ALLOWED_HOSTS", "localhost,127.0.0.1")

    # Security Headers
    SECURE_COOKIES: bool = os.getenv("ENVIRONMENT", "development") == "production"
    SAME_SITE_COOKIE: str = "strict"

    # LLM drug assistant (Groq)
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_MODEL: str = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")

    # Rate Limiting
    RATE_LIMIT_REQUESTS: int = int(os.getenv("RATE_LIMIT_REQUESTS", "300"))
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Password Policy
    MIN_PASSWORD_LENGTH: int = 8

    # Point of sale rules
    TRANSACTION_TIME_TOLERANCE_SECONDS: int = int(os.getenv("TRANSACTION_TIME_TOLERANCE_SECONDS", "5"))
    GUEST_CUSTOMER_NAME: str = os.getenv("GUEST_CUSTOMER_NAME", "Guest Customer")
    SALE_SERIAL_START: int = int(os.getenv("SALE_SERIAL_START", "100001"))
    LOW_STOCK_THRESHOLD_PACKS: int = int(os.getenv("LOW_STOCK_THRESHOLD_PACKS", "10"))
    EXPIRY_ALERT_DAYS: int = int(os.getenv("EXPIRY_ALERT_DAYS", "90"))
    CURRENCY: str = os.getenv("CURRENCY", "L.E")
    PHARMACY_NAME: str = os.getenv("PHARMACY_NAME", "PharmaFlow Pharmacy")

    # Security Features
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
