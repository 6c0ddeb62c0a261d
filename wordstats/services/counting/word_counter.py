"""
Tokenizer and per-document word counts.

A token is a run of Unicode letters and decimal digits, lower-cased, which may
contain apostrophes between two word characters ("don't", "o'clock").
Leading, trailing and doubled apostrophes split or end a token.
"""

import unicodedata
from typing import Dict, Iterator, List, Optional

APOSTROPHE = "'"


def is_word_char(ch: str) -> bool:
    """True for Unicode letters (L*) and decimal digits (Nd)."""
    if ch.isascii():
        return ch.isalnum()
    category = unicodedata.category(ch)
    return category[0] == "L" or category == "Nd"


def _lower_char(ch: str) -> str:
    # U+0130 lowers to "i" + U+0307 (a combining mark); keep only word characters
    lowered = ch.lower()
    if len(lowered) == 1:
        return lowered
    return "".join(c for c in lowered if is_word_char(c)) or ch


def iter_tokens(text: Optional[str]) -> Iterator[str]:
    """Lazily yield normalized tokens from text in a single left-to-right scan."""
    if not text:
        return

    buffer: List[str] = []
    last = len(text) - 1

    for i, ch in enumerate(text):
        if is_word_char(ch):
            buffer.append(_lower_char(ch))
            continue

        if ch == APOSTROPHE and buffer and i < last and is_word_char(text[i + 1]):
            buffer.append(ch)
            continue

        if buffer:
            yield "".join(buffer)
            buffer.clear()

    if buffer:
        yield "".join(buffer)


def count_words(text: Optional[str]) -> Dict[str, int]:
    """
    Build the frequency mapping for one document.

    Args:
        text: Cleaned document text

    Returns:
        Mapping token -> count (every count >= 1); empty for empty input
    """
    local: Dict[str, int] = {}
    for token in iter_tokens(text):
        local[token] = local.get(token, 0) + 1
    return local
