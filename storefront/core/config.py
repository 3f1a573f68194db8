# storefront/core/config.py
"""
Application Settings - Storefront API
=====================================

Centralized, typed management of environment variables.
"""

from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load .env from the project root
load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent.parent / ".env")


class Config(BaseSettings):
    """Centralized application settings"""

    # ═══════════════════════════════════════════════════════════
    # 🌍 ENVIRONMENT
    # ═══════════════════════════════════════════════════════════

    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # ═══════════════════════════════════════════════════════════
    # 🔗 COMMERCE BACKEND
    # ═══════════════════════════════════════════════════════════

    BACKEND_API_URL: str = "http://localhost:5000"
    BACKEND_TIMEOUT_SECONDS: float = 15.0

    # ═══════════════════════════════════════════════════════════
    # 🔐 JWT (CUSTOMER TOKENS)
    # ═══════════════════════════════════════════════════════════

    USER_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # ═══════════════════════════════════════════════════════════
    # 🛡️ CSRF
    # ═══════════════════════════════════════════════════════════

    CSRF_COOKIE_NAME: str = "csrf-token"
    CSRF_HEADER_NAME: str = "X-CSRF-Token"
    CSRF_COOKIE_MAX_AGE: int = 60 * 60 * 24

    # ═══════════════════════════════════════════════════════════
    # 🛒 CART
    # ═══════════════════════════════════════════════════════════

    CART_COOKIE_NAME: str = "cart-id"
    CART_MAX_ENTRIES: int = 10_000
    CART_IDLE_SECONDS: int = 60 * 60 * 24

    # ═══════════════════════════════════════════════════════════
    # ⭐ REVIEWS
    # ═══════════════════════════════════════════════════════════

    # Locally created reviews are shown to their author until the backend lists them
    REVIEW_PENDING_TTL_SECONDS: int = 60 * 10

    # ═══════════════════════════════════════════════════════════
    # 🌐 CORS / LANGUAGE
    # ═══════════════════════════════════════════════════════════

    ALLOWED_ORIGINS: str = "http://localhost:3000"
    DEFAULT_LANGUAGE: str = "ar"

    # ═══════════════════════════════════════════════════════════
    # 🚦 RATE LIMIT
    # ═══════════════════════════════════════════════════════════

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: Optional[str] = None

    # ═══════════════════════════════════════════════════════════
    # 🖥️ SERVER
    # ═══════════════════════════════════════════════════════════

    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    def get_allowed_origins_list(self) -> list[str]:
        """Returns the list of allowed CORS origins"""
        origins = [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

        if self.is_development:
            origins.extend([
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            ])

        # Remove duplicates keeping order
        return list(dict.fromkeys(origins))

    # ═══════════════════════════════════════════════════════════
    # 🔧 USEFUL PROPERTIES
    # ═══════════════════════════════════════════════════════════

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_test(self) -> bool:
        return self.ENVIRONMENT.lower() == "test"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# ✅ Global instance
config = Config()


def validate_config():
    """Validates critical settings"""
    errors = []

    if len(config.USER_JWT_SECRET.strip()) < 32:
        errors.append("USER_JWT_SECRET too short (minimum 32 characters)")

    if config.ENVIRONMENT not in ["development", "test", "production"]:
        errors.append("ENVIRONMENT must be: development, test or production")

    if not config.BACKEND_API_URL.startswith(("http://", "https://")):
        errors.append("BACKEND_API_URL must be an http(s) URL")

    if config.DEFAULT_LANGUAGE not in ["ar", "en"]:
        errors.append("DEFAULT_LANGUAGE must be: ar or en")

    if errors:
        raise ValueError(
            "❌ Configuration errors:\n" + "\n".join(f"  • {e}" for e in errors)
        )


validate_config()
