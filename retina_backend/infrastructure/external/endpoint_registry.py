# Standard library imports
import logging
from typing import Iterable, Optional, Tuple

# Local application imports
from ...domain.models.endpoint import EndpointCandidate

logger = logging.getLogger(__name__)


class EndpointRegistry:
    """
    Ordered inference-service candidates with a cursor on the preferred one.

    The candidate list is fixed at construction. Only the cursor moves.
    """

    def __init__(self, base_urls: Iterable[str]) -> None:
        candidates = tuple(EndpointCandidate(base_url=url) for url in base_urls)
        if not candidates:
            raise ValueError("At least one inference endpoint URL is required")
        self._candidates: Tuple[EndpointCandidate, ...] = candidates
        self._index = 0

    @property
    def candidates(self) -> Tuple[EndpointCandidate, ...]:
        return self._candidates

    @property
    def active_index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._candidates)

    def current_endpoint(self) -> EndpointCandidate:
        return self._candidates[self._index]

    def advance(self) -> EndpointCandidate:
        """Move the cursor to the next candidate, wrapping at the end"""
        self._index = (self._index + 1) % len(self._candidates)
        endpoint = self._candidates[self._index]
        logger.info(f"Switching to alternate inference API URL: {endpoint.base_url}")
        return endpoint

    def has_cycled(self, start_index: int) -> bool:
        """True once the cursor is back where a probe cycle started"""
        return self._index == start_index

    def index_of(self, base_url: str) -> Optional[int]:
        for index, candidate in enumerate(self._candidates):
            if candidate.base_url == base_url:
                return index
        return None

    def move_to(self, index: int) -> EndpointCandidate:
        if not 0 <= index < len(self._candidates):
            raise ValueError(f"Endpoint index {index} out of range")
        self._index = index
        return self._candidates[index]

    def restore(self, base_url: str) -> bool:
        """
        Point the cursor at a known URL.

        Returns:
            True if the URL is registered; otherwise the cursor falls back to
            the primary candidate and False is returned.
        """
        index = self.index_of(base_url)
        if index is None:
            self._index = 0
            return False
        self._index = index
        return True
