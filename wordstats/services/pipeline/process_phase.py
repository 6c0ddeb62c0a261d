"""
Process Phase: clean, count and merge every document on a worker pool.
"""

import asyncio
from concurrent.futures import Executor
from typing import List, Optional, Sequence, Tuple

from wordstats.core.errors import PipelineError
from wordstats.core.logger import get_logger
from wordstats.core.schemas import FetchedDocument
from wordstats.services.common.text_cleaner import strip_boilerplate
from wordstats.services.counting.aggregator import FrequencyAggregator
from wordstats.services.counting.word_counter import count_words

logger = get_logger(__name__)


def process_document(
    document: FetchedDocument,
    aggregator: FrequencyAggregator,
    start_marker: Optional[str],
    end_marker: Optional[str],
) -> int:
    """Clean one document, count its words and merge them. Returns the token count."""
    cleaned = strip_boilerplate(document.text, start_marker, end_marker)
    local = count_words(cleaned)
    aggregator.merge(local)
    return sum(local.values())


async def process_all(
    documents: Sequence[FetchedDocument],
    aggregator: FrequencyAggregator,
    run_id: str,
    executor: Optional[Executor] = None,
    start_marker: Optional[str] = None,
    end_marker: Optional[str] = None,
) -> List[int]:
    """
    Run process_document for every document concurrently and wait for all of them.

    Args:
        documents: Fetched documents
        aggregator: Shared global frequency table
        run_id: Run identifier for logging
        executor: Thread pool for the CPU-bound work (loop default when None)
        start_marker: Boilerplate start marker
        end_marker: Boilerplate end marker

    Returns:
        Token count per document, in document order

    Raises:
        PipelineError: if any document failed to process
    """
    if not documents:
        return []

    loop = asyncio.get_running_loop()
    futures = [
        loop.run_in_executor(executor, process_document, document, aggregator, start_marker, end_marker)
        for document in documents
    ]
    results = await asyncio.gather(*futures, return_exceptions=True)

    counts: List[int] = []
    failures: List[Tuple[str, BaseException]] = []
    for document, result in zip(documents, results):
        if isinstance(result, Exception):
            logger.error(f"[ProcessPhase:{run_id}] '{document.source.name}' failed: {result}")
            failures.append((document.source.name, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            logger.info(f"[ProcessPhase:{run_id}] '{document.source.name}': {result} words merged")
            counts.append(result)

    if failures:
        raise PipelineError("process", failures)

    return counts
