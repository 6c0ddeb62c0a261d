from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BookSource(BaseModel):
    """One document to fetch."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)


class FetchedDocument(BaseModel):
    """Raw text of a source, owned by the fetch phase until processing picks it up."""

    model_config = ConfigDict(frozen=True)

    source: BookSource
    text: str


class RankedEntry(BaseModel):
    word: str
    count: int = Field(ge=1)


class PhaseTimings(BaseModel):
    fetch_seconds: float = 0.0
    process_seconds: float = 0.0
    ranking_seconds: float = 0.0


class WordStatsReport(BaseModel):
    run_id: str
    sources: List[BookSource]
    top_n: int
    entries: List[RankedEntry]
    total_words: int
    unique_words: int
    timings: PhaseTimings
    completed_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
