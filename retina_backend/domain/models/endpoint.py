# Standard library imports
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class EndpointCandidate:
    """One configured base URL for the inference service"""
    base_url: str

    def url_for(self, route: str) -> str:
        """Join a route (e.g. "/predict") onto the base URL"""
        return f"{self.base_url.rstrip('/')}{route}"


@dataclass
class EndpointStatus:
    """
    Availability of the inference service as last observed by the health prober.

    One instance is owned by the prober and shared read-only with everyone
    else. Timestamps are epoch milliseconds.
    """
    active_index: int = 0
    active_url: Optional[str] = None  # last endpoint that answered a probe
    available: bool = False
    simulation_active: bool = False
    checked: bool = False
    last_checked_at: Optional[int] = None
    last_info: Optional[Dict[str, Any]] = None
    last_error: Optional[Dict[str, Any]] = None
    consecutive_failure_count: int = 0

    def is_fresh(self, now_ms: int, ttl_ms: int) -> bool:
        """True when the last probe is young enough to be reused"""
        if not self.checked or self.last_checked_at is None:
            return False
        return now_ms - self.last_checked_at < ttl_ms

    def to_status_dict(self) -> Dict[str, Any]:
        """Caller-facing status shape"""
        return {
            "available": self.available,
            "simulation": self.simulation_active,
            "lastCheck": self.last_checked_at,
            "info": self.last_info,
        }


@dataclass
class RetryState:
    """Per-call retry bookkeeping; created at call start and discarded at the end"""
    max_attempts: int
    base_delay_ms: int
    attempt_count: int = 0
    delay_ms: int = 0
    delays_ms: List[int] = field(default_factory=list)

    def can_retry(self) -> bool:
        return self.attempt_count < self.max_attempts

    def next_delay_ms(self) -> int:
        """Linear backoff: the wait after attempt N is N x base delay"""
        self.delay_ms = self.base_delay_ms * self.attempt_count
        self.delays_ms.append(self.delay_ms)
        return self.delay_ms
