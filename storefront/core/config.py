"""
Configuración centralizada de la aplicación

Settings are loaded once from the environment (or .env) and handed explicitly
to the database handle, the auth layer and the services.
"""
import json
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # API Settings
    API_TITLE: str = "Storefront API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Product catalog, cart and checkout API"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    DB_CONNECT_TIMEOUT: int = 10
    DB_MAX_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0

    # Supabase (user sync)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Identity provider session tokens
    AUTH_SECRET: str = ""
    AUTH_ALGORITHM: str = "RS256"
    AUTH_ISSUER: Optional[str] = None

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://shop.example.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    # Catalog
    PER_PAGE: int = 12
    POPULAR_PRODUCTS_LIMIT: int = 8

    # Requests per minute
    RATE_LIMIT_AUTHENTICATED: int = 600
    RATE_LIMIT_UNAUTHENTICATED: int = 120

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide Settings instance"""
    return Settings()
