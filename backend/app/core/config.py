from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "Crop Yield Estimator API"
    APP_VERSION: str = "1.0"

    # Async SQLAlchemy URL (saved estimator inputs)
    DATABASE_URL: str = "sqlite+aiosqlite:///./yield_estimator.db"

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # Optional JSON file overriding the yield model (baselines, factor bounds)
    YIELD_MODEL_CONFIG_PATH: Optional[str] = None

    # Storage key prefix for saved estimator inputs
    SAVED_INPUT_NAMESPACE: str = "yield_estimator_v1"

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"

settings = Settings()
