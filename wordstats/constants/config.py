"""
Application configuration constants.
Centralized defaults for boilerplate markers, fetching, processing and reporting.
"""

import os

# ============================================================================
# REPORTING
# ============================================================================

# Number of ranked entries in the final report
DEFAULT_TOP_N = 10

# ============================================================================
# BOILERPLATE MARKERS (Project Gutenberg front/back matter)
# ============================================================================

GUTENBERG_START_MARKER = "*** START OF"
GUTENBERG_END_MARKER = "*** END OF"

# ============================================================================
# FETCHING
# ============================================================================

DEFAULT_USER_AGENT = "GutenbergWordStats/1.0"

# Per-request timeout for the HTTP client (seconds)
FETCH_TIMEOUT_SECONDS = 30.0

# Retries for transport errors, 429 and 5xx responses
FETCH_MAX_RETRIES = 3

# Exponential backoff: base * 2^attempt, capped
FETCH_BASE_BACKOFF_SECONDS = 0.5
FETCH_MAX_BACKOFF_SECONDS = 10.0

# Status codes worth another attempt
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

# ============================================================================
# PROCESSING
# ============================================================================

# Worker threads for the processing phase (same default as ThreadPoolExecutor)
DEFAULT_PROCESS_WORKERS = min(32, (os.cpu_count() or 1) + 4)

# Lock stripes in the global frequency table
DEFAULT_AGGREGATOR_SHARDS = 16

# ============================================================================
# DEFAULT CORPUS
# ============================================================================

DEFAULT_BOOK_SOURCES = [
    {"name": "Pride and Prejudice", "url": "https://www.gutenberg.org/cache/epub/1342/pg1342.txt"},
    {"name": "Frankenstein", "url": "https://www.gutenberg.org/cache/epub/84/pg84.txt"},
]

# ============================================================================
# LOGGING
# ============================================================================

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] → %(message)s"
