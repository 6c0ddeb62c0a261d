"""
Boilerplate removal for raw documents.

Project Gutenberg texts wrap the book between a "*** START OF ..." line and an
"*** END OF ..." line, with licence and preamble text outside them.
"""

import re
from typing import Optional

from wordstats.constants.config import GUTENBERG_END_MARKER, GUTENBERG_START_MARKER


def _find_marker(text: str, marker: Optional[str]) -> Optional[re.Match]:
    if not marker:
        return None
    return re.search(re.escape(marker), text, flags=re.IGNORECASE)


def strip_boilerplate(
    text: Optional[str],
    start_marker: Optional[str] = GUTENBERG_START_MARKER,
    end_marker: Optional[str] = GUTENBERG_END_MARKER,
) -> str:
    """
    Cut a document down to the content between its start and end markers.

    Markers match case-insensitively. The start trim drops everything up to and
    including the line holding the start marker; when that line is the last one,
    only the text following the marker itself is kept. The end trim then drops
    the end marker and everything after it. A missing marker leaves its side of
    the text untouched, and an empty marker disables that side.

    Args:
        text: Raw document text
        start_marker: Marker opening the body (None or "" to skip)
        end_marker: Marker closing the body (None or "" to skip)

    Returns:
        Cleaned text ("" for empty or whitespace-only input)
    """
    if not text or text.isspace():
        return ""

    start = _find_marker(text, start_marker)
    if start is not None:
        line_end = text.find("\n", start.end())
        if 0 <= line_end < len(text) - 1:
            text = text[line_end + 1 :]
        else:
            text = text[start.end() :]

    end = _find_marker(text, end_marker)
    if end is not None:
        text = text[: end.start()]

    return text
