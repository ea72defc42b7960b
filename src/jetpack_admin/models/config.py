"""
Watch configuration: poll cadence and attempt budget.
"""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_POLL_INTERVAL_S = 2.0
DEFAULT_MAX_ATTEMPTS = 150  # 150 * 2s = 5 minutes


class WatchConfig(BaseModel):
    poll_interval: float = Field(DEFAULT_POLL_INTERVAL_S, gt=0)
    max_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, gt=0)
    # None disables the "endpoint unreachable" early exit.
    max_consecutive_failures: Optional[int] = Field(None, gt=0)

    @property
    def budget_s(self) -> float:
        return self.poll_interval * self.max_attempts

    def build_watcher(self, **kwargs):
        from jetpack_admin.watcher import CompletionWatcher
        return CompletionWatcher(
            poll_interval=self.poll_interval,
            max_attempts=self.max_attempts,
            max_consecutive_failures=self.max_consecutive_failures,
            **kwargs,
        )
