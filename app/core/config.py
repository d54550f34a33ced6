from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

DEFAULT_CATALOG_PATH = str(Path(__file__).resolve().parents[1] / "data" / "catalog.json")

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "ShoppingAssistant"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo (orders). Optional: order routes answer 503 without it
    MONGO_URI: Optional[str] = None
    MONGO_DB: str = "shopping_assistant"

    # Redis (session profiles + carts). Optional: in-process store without it
    REDIS_URL: Optional[str] = None

    # Session storage
    session_ttl: int = 7 * 24 * 3600           # 7 days
    cart_ttl: int = 7 * 24 * 3600              # 7 days
    session_key_prefix: str = "sess"           # redis key namespace
    session_lock_ttl: int = 5                  # seconds; serializes event writes
    session_lock_wait: int = 5                 # seconds to wait for a busy lock

    # Catalog
    catalog_path: str = DEFAULT_CATALOG_PATH

    # Recommendations
    max_recommendations: int = 6

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
