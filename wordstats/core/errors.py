from __future__ import annotations

from typing import List, Optional, Tuple


class FetchError(Exception):
    """A single document could not be retrieved."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class PipelineError(Exception):
    """
    Aggregate failure of one pipeline phase.

    Carries every failure observed in the phase as (source name, exception)
    pairs. Raised instead of returning any partial result.
    """

    def __init__(self, phase: str, failures: List[Tuple[str, BaseException]]) -> None:
        self.phase = phase
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(f"{phase} phase failed for {len(self.failures)} source(s): {names}")

    @property
    def reasons(self) -> List[str]:
        return [f"{name}: {exc}" for name, exc in self.failures]
