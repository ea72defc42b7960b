"""
Watch models: the resource under regeneration and the state of one watch.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from jetpack_admin.models.invoice import Invoice


class WatchedResource(BaseModel):
    id: str
    version: int = 1
    # Opaque; compared by equality only.
    last_modified_at: Optional[str] = None

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "WatchedResource":
        return cls(id=invoice.id, version=invoice.version, last_modified_at=invoice.generated_at)


class WatchStatus(str, Enum):
    COMPLETED_VIA_POLL = "completed-via-poll"
    COMPLETED_VIA_REQUEST = "completed-via-request"
    TIMED_OUT = "timed-out"
    UNREACHABLE = "unreachable"
    FAILED = "failed"


class WatchSession(BaseModel):
    """Ephemeral state of one watch. `completed` only ever moves False -> True."""
    baseline_version: int
    baseline_modified_at: Optional[str] = None
    max_attempts: int
    poll_interval: float
    attempts_made: int = 0
    consecutive_failures: int = 0
    completed: bool = False

    @classmethod
    def start(cls, baseline: WatchedResource, max_attempts: int, poll_interval: float) -> "WatchSession":
        return cls(
            baseline_version=baseline.version,
            baseline_modified_at=baseline.last_modified_at,
            max_attempts=max_attempts,
            poll_interval=poll_interval,
        )

    def claim(self) -> bool:
        """Check-and-set the completion flag. True only for the first caller."""
        if self.completed:
            return False
        self.completed = True
        return True

    def diverged(self, current: WatchedResource) -> bool:
        return (
            current.version > self.baseline_version
            or current.last_modified_at != self.baseline_modified_at
        )

    @property
    def exhausted(self) -> bool:
        return self.attempts_made >= self.max_attempts


class WatchOutcome(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: WatchStatus
    resource_id: str
    final_state: Optional[WatchedResource] = None
    job_result: Optional[Any] = None
    attempts_made: int = 0
    elapsed: float = 0.0
    error: Optional[Exception] = Field(default=None, exclude=True)

    @property
    def completed(self) -> bool:
        return self.status in (WatchStatus.COMPLETED_VIA_POLL, WatchStatus.COMPLETED_VIA_REQUEST)

    @property
    def timed_out(self) -> bool:
        return self.status in (WatchStatus.TIMED_OUT, WatchStatus.UNREACHABLE)
