# config.py
"""Configuration settings for the card news generator.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

import os

import structlog
from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = structlog.get_logger()

SUPPORTED_ASPECT_RATIOS: tuple[str, ...] = ("4:5", "1:1", "9:16")


class CardNewsSettings(BaseSettings):
    """Full configuration for the card news generator."""

    # API and Model Configuration
    GOOGLE_API_KEY: str = ""
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"

    EMBEDDING_MODEL: str = "text-embedding-004"
    PLAN_MODEL: str = "gemini-2.0-flash"
    IMAGE_MODEL: str = "gemini-3-pro-image-preview"
    EXPECTED_EMBEDDING_DIM: int = 768
    EMBEDDING_DTYPE: str = "float32"

    # LLM Call Settings
    LLM_RETRY_ATTEMPTS: int = 3
    LLM_RETRY_DELAY_SECONDS: float = 2.0
    HTTPX_TIMEOUT: float = 300.0
    REFERENCE_FETCH_TIMEOUT: float = 30.0
    EMBEDDING_CACHE_SIZE: int = 128
    PLAN_TEMPERATURE: float = 0.7
    PLAN_MAX_OUTPUT_TOKENS: int = 4096

    # Style corpus (metadata + 8-bit quantized embeddings)
    RAG_DATA_DIR: str = "data"
    RAG_META_FILE: str = "cardnews_meta.json"
    RAG_EMBEDDINGS_FILE: str = "embeddings_q8.json"

    # Retrieval tuning
    POOL_CAP_FILTERED: int = 100
    POOL_CAP_UNFILTERED: int = 15
    REFERENCE_SAMPLE_SIZE: int = 2
    PLAN_EXAMPLE_COUNT: int = 3
    MAX_REFERENCE_IMAGES: int = 2

    # Queue pacing
    INTER_TASK_DELAY_SECONDS: float = 0.5

    # Text limits
    MAX_QUERY_CHARS: int = 1000
    MAX_DOCUMENT_CHARS: int = 8000
    PLAN_QUERY_CHARS: int = 500

    # Generation defaults
    DEFAULT_ASPECT_RATIO: str = "4:5"
    DEFAULT_TONE: str = "friendly"
    REFERENCE_QUERY_TEMPLATE: str = "{tone} style {page_type} design"

    # Output and File Paths
    BASE_OUTPUT_DIR: str = "cardnews_output"
    IMAGES_DIR: str = "images"
    STATS_FILE: str = "stats.json"

    # Logging & UI
    LOG_LEVEL_STR: str = Field("INFO", alias="CARDNEWS_LOG_LEVEL")
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_FILE: str | None = "cardnews_run.log"
    ENABLE_RICH_PROGRESS: bool = True

    @field_validator("DEFAULT_ASPECT_RATIO")
    @classmethod
    def check_aspect_ratio(cls, value: str) -> str:
        if value not in SUPPORTED_ASPECT_RATIOS:
            raise ValueError(
                f"DEFAULT_ASPECT_RATIO must be one of {SUPPORTED_ASPECT_RATIOS}, got {value!r}"
            )
        return value

    @field_validator(
        "POOL_CAP_FILTERED",
        "POOL_CAP_UNFILTERED",
        "REFERENCE_SAMPLE_SIZE",
        "PLAN_EXAMPLE_COUNT",
        "EXPECTED_EMBEDDING_DIM",
    )
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be a positive integer")
        return value

    @field_validator("INTER_TASK_DELAY_SECONDS")
    @classmethod
    def check_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("INTER_TASK_DELAY_SECONDS cannot be negative")
        return value

    @model_validator(mode="after")
    def warn_missing_api_key(self) -> CardNewsSettings:
        if not self.GOOGLE_API_KEY:
            logger.warning(
                "GOOGLE_API_KEY is not set. Style search and generation calls will be skipped."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", populate_by_name=True, extra="ignore"
    )


settings = CardNewsSettings()

RAG_META_PATH = os.path.join(settings.RAG_DATA_DIR, settings.RAG_META_FILE)
RAG_EMBEDDINGS_PATH = os.path.join(settings.RAG_DATA_DIR, settings.RAG_EMBEDDINGS_FILE)
IMAGES_OUTPUT_DIR = os.path.join(settings.BASE_OUTPUT_DIR, settings.IMAGES_DIR)
STATS_FILE_PATH = os.path.join(settings.BASE_OUTPUT_DIR, settings.STATS_FILE)
