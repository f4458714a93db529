"""
Application configuration from environment variables
"""
from pydantic_settings import BaseSettings
from typing import List, Optional

from survey_insights.stage1_ingest import config as ingest_config
from survey_insights.stage2_analyst import config as analyst_config


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # LLM backend
    LLM_API_KEY: str = ""
    LLM_API_URL: str = analyst_config.DEFAULT_API_URL
    LLM_MODEL: str = analyst_config.DEFAULT_MODEL
    LLM_TEMPERATURE: Optional[float] = analyst_config.DEFAULT_TEMPERATURE
    LLM_TIMEOUT_SECONDS: Optional[float] = None

    # Batching
    BATCH_SIZE: int = analyst_config.DEFAULT_BATCH_SIZE

    # Column selection
    UNIQUE_VALUE_THRESHOLD: int = analyst_config.UNIQUE_VALUE_THRESHOLD
    COLUMN_ADMISSION_POLICY: str = analyst_config.DEFAULT_ADMISSION_POLICY
    COLUMN_MARKERS: List[str] = list(analyst_config.DEFAULT_COLUMN_MARKERS)
    COLUMN_BLACKLIST_PATTERNS: List[str] = list(analyst_config.DEFAULT_BLACKLIST_PATTERNS)
    IDENTITY_COLUMNS: List[str] = []
    IDENTITY_COLUMN_COUNT: int = analyst_config.DEFAULT_IDENTITY_COLUMN_COUNT
    NO_ANSWER_SENTINELS: List[str] = list(ingest_config.NO_ANSWER_SENTINELS)

    # Classification
    CLASSIFICATION_PROGRESS_INTERVAL: int = analyst_config.CLASSIFICATION_PROGRESS_INTERVAL

    # Limits
    MAX_FILE_SIZE_MB: int = 50
    MAX_CONCURRENT_RUNS: int = 2

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
