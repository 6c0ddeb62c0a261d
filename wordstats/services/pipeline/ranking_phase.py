"""
Ranking Phase: deterministic top-N over the frozen frequency table.
"""

import heapq
from typing import List, Mapping

from wordstats.core.schemas import RankedEntry


def rank_words(frequencies: Mapping[str, int], top_n: int) -> List[RankedEntry]:
    """
    Order by count descending, then word ascending by code point, and keep top_n.

    Ties never depend on locale or on the table's iteration order.
    """
    if top_n < 0:
        raise ValueError("top_n must be >= 0")
    if top_n == 0:
        return []

    top = heapq.nsmallest(top_n, frequencies.items(), key=lambda kv: (-kv[1], kv[0]))
    return [RankedEntry(word=word, count=count) for word, count in top]
