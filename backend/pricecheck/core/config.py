"""Application configuration"""
from pydantic_settings import BaseSettings
from typing import List, Literal


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./pricecheck.db"
    ENVIRONMENT: str = "development"

    # Where price records live: the SQL document store or process memory
    STORAGE_BACKEND: Literal["sql", "memory"] = "sql"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    # Anomaly detection
    ANOMALY_DEVIATION_THRESHOLD: float = 0.5
    ANOMALY_MIN_CONFIDENCE: float = 0.8

    # Store name used when the vision model could not read one
    AI_DEFAULT_STORE_NAME: str = "AI Recognition"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
