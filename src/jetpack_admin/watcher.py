"""
Completion watcher: detect when a server-side job has finished without a push channel.

Two asyncio tasks race per watch:
- Request path: awaits the start action (job acceptance, not job completion).
- Poll path: every poll_interval re-reads the resource and compares it to the
  baseline captured before the start action was issued.

Whichever path claims the session first resolves it; the other re-checks the
session after each suspension and does nothing once it is claimed. In-flight
network calls are never cancelled on resolution.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from jetpack_admin.errors import StartActionError, TransientPollError
from jetpack_admin.models.config import DEFAULT_MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL_S
from jetpack_admin.models.watch import WatchedResource, WatchOutcome, WatchSession, WatchStatus

logger = logging.getLogger(__name__)

StartAction = Callable[[], Awaitable[Any]]
FetchCurrent = Callable[[], Awaitable[Optional[WatchedResource]]]
OutcomeCallback = Callable[[WatchOutcome], None]


class CompletionWatcher:
    def __init__(
        self,
        poll_interval: float = DEFAULT_POLL_INTERVAL_S,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_consecutive_failures: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._max_consecutive_failures = max_consecutive_failures
        self._sleep = sleep
        self._clock = clock
        # Request and poll tasks of every watch, kept until they settle.
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def watch(
        self,
        resource_id: str,
        start_action: StartAction,
        fetch_current: FetchCurrent,
        *,
        baseline: WatchedResource,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> WatchOutcome:
        """Run start_action and poll fetch_current until one of them signals completion.

        baseline must have been read before this call so a fast completion is not
        missed. Returns the outcome for completed, timed-out and unreachable
        sessions; raises StartActionError when the start action failed and
        polling had not already observed completion. on_outcome is invoked
        exactly once with the terminal outcome, failures included.
        """
        session = WatchSession.start(baseline, self._max_attempts, self._poll_interval)
        started = self._clock()
        resolved: asyncio.Future[WatchOutcome] = asyncio.get_running_loop().create_future()

        def outcome(status: WatchStatus, **kwargs: Any) -> WatchOutcome:
            return WatchOutcome(
                status=status,
                resource_id=resource_id,
                attempts_made=session.attempts_made,
                elapsed=self._clock() - started,
                **kwargs,
            )

        def finish(result: WatchOutcome) -> None:
            logger.info(
                "watch %s resolved %s after %d poll(s)",
                resource_id, result.status.value, result.attempts_made,
            )
            if not resolved.done():
                resolved.set_result(result)

        async def request_path() -> None:
            try:
                job_result = await start_action()
            except Exception as e:
                if not session.claim():
                    logger.debug("watch %s: start action failed after completion, ignored: %s", resource_id, e)
                    return
                error = e if isinstance(e, StartActionError) else StartActionError(str(e), resource_id=resource_id)
                if error is not e:
                    error.__cause__ = e
                logger.warning("watch %s: start action failed: %s", resource_id, e)
                finish(outcome(WatchStatus.FAILED, error=error))
                return
            if not session.claim():
                logger.debug("watch %s: start action settled after completion, ignored", resource_id)
                return
            # Authoritative refresh; a failed read leaves final_state empty.
            try:
                final_state = await fetch_current()
            except Exception as e:
                logger.debug("watch %s: refresh after request failed: %s", resource_id, e)
                final_state = None
            finish(outcome(WatchStatus.COMPLETED_VIA_REQUEST, final_state=final_state, job_result=job_result))

        async def poll_path() -> None:
            while not session.completed and not session.exhausted:
                await self._sleep(session.poll_interval)
                if session.completed:
                    return
                session.attempts_made += 1
                try:
                    current = await fetch_current()
                except Exception as e:
                    self._skip(session, resource_id, TransientPollError(str(e), session.attempts_made))
                    current = None
                else:
                    if current is None:
                        self._skip(session, resource_id, None)
                if current is None:
                    if self._unreachable(session):
                        if session.claim():
                            finish(outcome(WatchStatus.UNREACHABLE))
                        return
                    continue
                session.consecutive_failures = 0
                if session.diverged(current):
                    if session.claim():
                        finish(outcome(WatchStatus.COMPLETED_VIA_POLL, final_state=current))
                    return
                logger.debug("watch %s: poll %d unchanged (v%d)", resource_id, session.attempts_made, current.version)
            if session.claim():
                logger.warning(
                    "watch %s: no change after %d polls (%.0fs)",
                    resource_id, session.attempts_made, session.poll_interval * session.attempts_made,
                )
                finish(outcome(WatchStatus.TIMED_OUT))

        def propagate(task: "asyncio.Task[None]") -> None:
            # A path that dies before finish() settles the watch with its error.
            if resolved.done():
                return
            if task.cancelled():
                session.claim()
                resolved.cancel()
                return
            exc = task.exception()
            if exc is not None:
                session.claim()
                resolved.set_exception(exc)

        for path in (request_path(), poll_path()):
            task = asyncio.ensure_future(path)
            task.add_done_callback(propagate)
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        result = await resolved

        if on_outcome is not None:
            on_outcome(result)
        if result.status is WatchStatus.FAILED and result.error is not None:
            raise result.error
        return result

    def _skip(self, session: WatchSession, resource_id: str, error: Optional[TransientPollError]) -> None:
        session.consecutive_failures += 1
        if error is not None:
            logger.debug("watch %s: poll %d failed, skipping: %s", resource_id, session.attempts_made, error)
        else:
            logger.debug("watch %s: poll %d returned no state, skipping", resource_id, session.attempts_made)

    def _unreachable(self, session: WatchSession) -> bool:
        limit = self._max_consecutive_failures
        return limit is not None and session.consecutive_failures >= limit

    async def aclose(self) -> None:
        """Cancel every outstanding path.

        Losing paths of resolved watches are dropped; a watch still running
        raises CancelledError.
        """
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
