"""
Word-frequency pipeline: main orchestrator.

TWO-BARRIER ARCHITECTURE:
    1. Fetching: one asyncio task per source; wait for all of them
    2. Processing: clean -> count -> merge per document on a thread pool,
       all into one shared FrequencyAggregator; wait for all of them
    3. Ranking: single-threaded top-N over the frozen table

Processing never starts before every document is fetched, and ranking never
reads the table before every merge has completed. A failure in either
concurrent phase moves the pipeline to FAILED and raises PipelineError; no
partial report or table is exposed.
"""

import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence

from wordstats.core.config import settings
from wordstats.core.errors import PipelineError
from wordstats.core.logger import get_logger
from wordstats.core.schemas import BookSource, PhaseTimings, RankedEntry, WordStatsReport
from wordstats.services.counting.aggregator import FrequencyAggregator
from wordstats.services.fetcher import Fetcher
from wordstats.services.pipeline.fetch_phase import fetch_all
from wordstats.services.pipeline.process_phase import process_all
from wordstats.services.pipeline.ranking_phase import rank_words

logger = get_logger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PROCESSING = "processing"
    RANKING = "ranking"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.FETCHING}),
    PipelineState.FETCHING: frozenset({PipelineState.PROCESSING, PipelineState.FAILED}),
    PipelineState.PROCESSING: frozenset({PipelineState.RANKING, PipelineState.FAILED}),
    PipelineState.RANKING: frozenset({PipelineState.DONE}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class WordStatsPipeline:
    """
    One run of the word-frequency pipeline.

    The fetcher is injected and owned by the caller; the pipeline never opens
    or closes it. An instance runs once: create a new one per run.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        top_n: Optional[int] = None,
        start_marker: Optional[str] = None,
        end_marker: Optional[str] = None,
        process_workers: Optional[int] = None,
        aggregator_shards: Optional[int] = None,
        fail_fast: Optional[bool] = None,
    ) -> None:
        self.fetcher = fetcher
        self.top_n = settings.TOP_N if top_n is None else top_n
        if self.top_n < 0:
            raise ValueError("top_n must be >= 0")
        self.start_marker = settings.START_MARKER if start_marker is None else start_marker
        self.end_marker = settings.END_MARKER if end_marker is None else end_marker
        self.process_workers = process_workers or settings.PROCESS_WORKERS
        self.aggregator_shards = aggregator_shards or settings.AGGREGATOR_SHARDS
        self.fail_fast = settings.FAIL_FAST if fail_fast is None else fail_fast

        self.run_id = uuid.uuid4().hex[:8]
        self.timings = PhaseTimings()
        self.error: Optional[PipelineError] = None
        self._state = PipelineState.IDLE
        self._aggregator: Optional[FrequencyAggregator] = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def frequencies(self) -> Dict[str, int]:
        """The global frequency table, available only once the run is DONE."""
        if self._state is not PipelineState.DONE or self._aggregator is None:
            raise RuntimeError(f"Frequencies are not available in state '{self._state.value}'")
        return self._aggregator.snapshot()

    def _transition(self, new_state: PipelineState) -> None:
        if new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Illegal pipeline transition {self._state.value} -> {new_state.value}")
        logger.debug(f"[WordStatsPipeline:{self.run_id}] {self._state.value} -> {new_state.value}")
        self._state = new_state

    def _fail(self, error: PipelineError) -> None:
        self.error = error
        self._aggregator = None
        self._transition(PipelineState.FAILED)
        logger.error(f"[WordStatsPipeline:{self.run_id}] {error}")
        for reason in error.reasons:
            logger.error(f"[WordStatsPipeline:{self.run_id}]   {reason}")

    async def run(self, sources: Sequence[BookSource]) -> WordStatsReport:
        """
        Fetch, process and rank the given sources.

        Raises:
            PipelineError: a fetch or processing task failed
            RuntimeError: the pipeline has already been run
        """
        if self._state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already ran (state '{self._state.value}')")

        sources = list(sources)
        logger.info(
            f"[WordStatsPipeline:{self.run_id}] Starting run over {len(sources)} source(s) "
            f"(top_n={self.top_n}, fail_fast={self.fail_fast})"
        )

        # 1) Fetching
        self._transition(PipelineState.FETCHING)
        started = time.perf_counter()
        try:
            documents = await fetch_all(self.fetcher, sources, self.run_id, fail_fast=self.fail_fast)
        except PipelineError as e:
            self.timings.fetch_seconds = time.perf_counter() - started
            self._fail(e)
            raise
        self.timings.fetch_seconds = time.perf_counter() - started

        # 2) Processing
        self._transition(PipelineState.PROCESSING)
        aggregator = FrequencyAggregator(shards=self.aggregator_shards)
        started = time.perf_counter()
        workers = max(1, min(self.process_workers, len(documents)))
        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="wordstats-process") as executor:
                await process_all(
                    documents,
                    aggregator,
                    self.run_id,
                    executor=executor,
                    start_marker=self.start_marker,
                    end_marker=self.end_marker,
                )
        except PipelineError as e:
            self.timings.process_seconds = time.perf_counter() - started
            self._fail(e)
            raise
        aggregator.freeze()
        self.timings.process_seconds = time.perf_counter() - started

        # 3) Ranking
        self._transition(PipelineState.RANKING)
        started = time.perf_counter()
        frozen = aggregator.snapshot()
        entries: List[RankedEntry] = rank_words(frozen, self.top_n)
        self.timings.ranking_seconds = time.perf_counter() - started

        self._aggregator = aggregator
        self._transition(PipelineState.DONE)

        report = WordStatsReport(
            run_id=self.run_id,
            sources=sources,
            top_n=self.top_n,
            entries=entries,
            total_words=sum(frozen.values()),
            unique_words=len(frozen),
            timings=self.timings.model_copy(),
        )
        logger.info(
            f"[WordStatsPipeline:{self.run_id}] Done: {report.total_words} words, "
            f"{report.unique_words} unique (fetch {self.timings.fetch_seconds:.2f}s, "
            f"process {self.timings.process_seconds:.2f}s)"
        )
        return report


async def run_pipeline(fetcher: Fetcher, sources: Sequence[BookSource], **options) -> WordStatsReport:
    """Build a pipeline with the given options and run it once."""
    return await WordStatsPipeline(fetcher, **options).run(sources)


__all__ = ["PipelineState", "WordStatsPipeline", "run_pipeline"]
