"""
Fetch Phase: retrieve every source concurrently behind a join barrier.
"""

import asyncio
from typing import List, Sequence, Tuple

from wordstats.core.errors import PipelineError
from wordstats.core.logger import get_logger
from wordstats.core.schemas import BookSource, FetchedDocument
from wordstats.services.fetcher import Fetcher

logger = get_logger(__name__)


async def _fetch_one(fetcher: Fetcher, source: BookSource, run_id: str) -> FetchedDocument:
    logger.info(f"[FetchPhase:{run_id}] Fetching '{source.name}' from {source.url}")
    text = await fetcher.fetch(source.url)
    logger.info(f"[FetchPhase:{run_id}] Fetched '{source.name}' ({len(text)} chars)")
    return FetchedDocument(source=source, text=text)


async def fetch_all(
    fetcher: Fetcher,
    sources: Sequence[BookSource],
    run_id: str,
    fail_fast: bool = False,
) -> List[FetchedDocument]:
    """
    Fetch every source, one asyncio task per source.

    Failure policy:
        fail_fast=False: join-then-fail. Every task runs to completion before
            failures are reported, so all of them are listed.
        fail_fast=True: the first failure cancels the in-flight siblings; the
            failures that completed before cancellation are reported.

    Args:
        fetcher: Fetcher capability
        sources: Sources in caller order
        run_id: Run identifier for logging
        fail_fast: Cancel sibling fetches on the first failure

    Returns:
        Fetched documents in the same order as sources

    Raises:
        PipelineError: if any fetch failed (no documents are returned)
    """
    if not sources:
        return []

    tasks = [asyncio.create_task(_fetch_one(fetcher, source, run_id)) for source in sources]
    try:
        if fail_fast:
            _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            if pending:
                logger.warning(f"[FetchPhase:{run_id}] Fetch failed, cancelling {len(pending)} in-flight fetch(es)")
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
        else:
            await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()

    documents: List[FetchedDocument] = []
    failures: List[Tuple[str, BaseException]] = []
    for source, task in zip(sources, tasks):
        if task.cancelled():
            continue
        exc = task.exception()
        if exc is None:
            documents.append(task.result())
            continue
        if not isinstance(exc, Exception):
            raise exc
        logger.error(f"[FetchPhase:{run_id}] '{source.name}' failed: {exc}")
        failures.append((source.name, exc))

    if failures or len(documents) != len(sources):
        raise PipelineError("fetch", failures)

    return documents
