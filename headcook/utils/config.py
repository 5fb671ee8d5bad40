"""Configuration management for Head Cook AI.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Recipe text model. Default: gemini-2.5-flash (fast, cost-effective)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Recipe photo model (Imagen family, served through the same Gemini API key)
        self.IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "imagen-4.0-generate-001")
        # Number of recipes requested from the model per search. Default: 3
        self.RECIPE_COUNT: int = int(os.getenv("RECIPE_COUNT", "3"))
        # Temperature: 0.7 leaves room for varied recipes on repeated searches
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: 1500 fits three recipes with detailed steps
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "1500"))
        # Thinking Budget: tokens the model may spend reasoning before answering.
        # Default: 0 (disabled) so the whole output budget goes to recipes.
        # Set to an empty string to leave the model default (required for models that cannot disable thinking)
        thinking_budget = os.getenv("THINKING_BUDGET", "0")
        self.THINKING_BUDGET: Optional[int] = int(thinking_budget) if thinking_budget.strip() else None
        # Image aspect ratio: fixed square photo per recipe
        self.IMAGE_ASPECT_RATIO: str = os.getenv("IMAGE_ASPECT_RATIO", "1:1")
        # Upstream timeouts (seconds). A hung model call must not hang the search.
        self.GENERATION_TIMEOUT: float = float(os.getenv("GENERATION_TIMEOUT", "60"))
        self.IMAGE_TIMEOUT: float = float(os.getenv("IMAGE_TIMEOUT", "60"))

        # Firebase: service-account JSON path. If unset, application default credentials are used
        self.FIREBASE_CREDENTIALS: Optional[str] = os.getenv("FIREBASE_CREDENTIALS")
        self.FIREBASE_PROJECT_ID: Optional[str] = os.getenv("FIREBASE_PROJECT_ID")
        # User Store: "firestore" (production) or "memory" (local development, counts lost on restart)
        self.USER_STORE: str = os.getenv("USER_STORE", "firestore")
        self.USERS_COLLECTION: str = os.getenv("USERS_COLLECTION", "users")

        # Quota Policy: "counter" or "single-use"
        # "counter": persisted search counter, rejects once SEARCH_LIMIT is reached (0 = never rejects)
        # "single-use": one free search per identity (searchCount must still be 0)
        self.QUOTA_POLICY: str = os.getenv("QUOTA_POLICY", "counter")
        self.SEARCH_LIMIT: int = int(os.getenv("SEARCH_LIMIT", "0"))

        # Server
        self.PORT: int = int(os.getenv("PORT", "8080"))
        self.CORS_ORIGINS: list[str] = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        ]
        self.DEBUG: bool = _as_bool(os.getenv("DEBUG", "false"))

        # Client
        self.API_BASE_URL: str = os.getenv("API_BASE_URL", f"http://localhost:{self.PORT}")
        self.CLIENT_TIMEOUT: float = float(os.getenv("CLIENT_TIMEOUT", "120"))

    def validate(self) -> None:
        """Validate server configuration.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if self.USER_STORE not in ("firestore", "memory"):
            raise ValueError(f"USER_STORE must be 'firestore' or 'memory', got: {self.USER_STORE}")
        if self.QUOTA_POLICY not in ("counter", "single-use"):
            raise ValueError(f"QUOTA_POLICY must be 'counter' or 'single-use', got: {self.QUOTA_POLICY}")
        if self.SEARCH_LIMIT < 0:
            raise ValueError(f"SEARCH_LIMIT must be 0 (unlimited) or positive, got: {self.SEARCH_LIMIT}")
        if not (1 <= self.RECIPE_COUNT <= 10):
            raise ValueError(f"RECIPE_COUNT must be between 1 and 10, got: {self.RECIPE_COUNT}")
        if not (0.0 <= self.TEMPERATURE <= 1.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 1.0, got: {self.TEMPERATURE}")
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}")
        if self.GENERATION_TIMEOUT <= 0 or self.IMAGE_TIMEOUT <= 0:
            raise ValueError(
                f"GENERATION_TIMEOUT and IMAGE_TIMEOUT must be positive, got: "
                f"{self.GENERATION_TIMEOUT}, {self.IMAGE_TIMEOUT}"
            )


# Module-level config instance. Validated by the server factory, not at import,
# so the client side runs without server credentials.
config = Config()
