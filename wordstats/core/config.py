from typing import ClassVar, List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wordstats.constants.config import (
    DEFAULT_AGGREGATOR_SHARDS,
    DEFAULT_BOOK_SOURCES,
    DEFAULT_PROCESS_WORKERS,
    DEFAULT_TOP_N,
    DEFAULT_USER_AGENT,
    FETCH_BASE_BACKOFF_SECONDS,
    FETCH_MAX_BACKOFF_SECONDS,
    FETCH_MAX_RETRIES,
    FETCH_TIMEOUT_SECONDS,
    GUTENBERG_END_MARKER,
    GUTENBERG_START_MARKER,
)
from wordstats.core.schemas import BookSource


class Settings(BaseSettings):
    # Reporting
    TOP_N: int = Field(default=DEFAULT_TOP_N, ge=0, description="Number of ranked words in the report")

    # Boilerplate markers
    START_MARKER: str = Field(default=GUTENBERG_START_MARKER, description="Marker opening the document body")
    END_MARKER: str = Field(default=GUTENBERG_END_MARKER, description="Marker closing the document body")

    # Fetching
    USER_AGENT: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header sent by the HTTP fetcher")
    FETCH_TIMEOUT_SECONDS: float = Field(default=FETCH_TIMEOUT_SECONDS, gt=0)
    FETCH_MAX_RETRIES: int = Field(default=FETCH_MAX_RETRIES, ge=0)
    FETCH_BASE_BACKOFF_SECONDS: float = Field(default=FETCH_BASE_BACKOFF_SECONDS, ge=0)
    FETCH_MAX_BACKOFF_SECONDS: float = Field(default=FETCH_MAX_BACKOFF_SECONDS, ge=0)

    # Processing
    PROCESS_WORKERS: int = Field(default=DEFAULT_PROCESS_WORKERS, ge=1, description="Threads for the process phase")
    AGGREGATOR_SHARDS: int = Field(default=DEFAULT_AGGREGATOR_SHARDS, ge=1, description="Lock stripes in the table")
    FAIL_FAST: bool = Field(
        default=False, description="Cancel sibling fetches on the first failure instead of joining all of them"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # JSON list of {"name": ..., "url": ...} objects when set from the environment
    BOOK_SOURCES: List[BookSource] = Field(
        default_factory=lambda: [BookSource(**item) for item in DEFAULT_BOOK_SOURCES]
    )

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
