"""
CompletionMonitor: waits for an agent session to finish.

The remote service can report "idle" for a moment while a reply is still
streaming, so idle alone is not trusted. A session is complete only after
its message count has stayed the same, non-zero, for `stability_threshold`
consecutive idle polls.
"""

import logging
import threading
import time
from collections.abc import Callable

from designlab.domain.exceptions import CompletionCancelled, CompletionTimeout
from designlab.domain.interfaces import AgentClientInterface
from designlab.domain.models import SessionState, SessionStatus

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_STABILITY_THRESHOLD = 3
DEFAULT_MAX_WAIT = 600.0
PROGRESS_LOG_EVERY = 10


class CompletionMonitor:
    """
    Polls a session until its output is stable.

    Each await_completion() call owns a fresh SessionState; the monitor
    itself holds only configuration and can be shared between calls.
    """

    def __init__(
        self,
        client: AgentClientInterface,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        stability_threshold: int = DEFAULT_STABILITY_THRESHOLD,
        max_wait: float = DEFAULT_MAX_WAIT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            client: Agent service exposing get_status/get_messages
            poll_interval: Seconds between polls
            stability_threshold: Consecutive stable idle polls required
            max_wait: Seconds before giving up with CompletionTimeout
            clock: Monotonic time source (injectable for tests)
            sleep: Sleep function (injectable for tests)
        """
        self._client = client
        self.poll_interval = poll_interval
        self.stability_threshold = stability_threshold
        self.max_wait = max_wait
        self._clock = clock
        self._sleep = sleep

    def await_completion(
        self, session_id: str, cancel_event: threading.Event | None = None
    ) -> SessionState:
        """
        Block until the session's output has stabilized.

        Args:
            session_id: Session to watch
            cancel_event: Set by the caller to abandon the wait

        Returns:
            The final SessionState

        Raises:
            CompletionTimeout: If max_wait elapses first
            CompletionCancelled: If cancel_event is set between polls
        """
        state = SessionState(session_id=session_id)
        started = self._clock()

        while True:
            self._check_cancelled(state, cancel_event)
            self._sleep(self.poll_interval)
            self._check_cancelled(state, cancel_event)

            state.elapsed = self._clock() - started
            if state.elapsed > self.max_wait:
                logger.error(
                    "Session %s timed out after %.1fs (%d polls)",
                    session_id,
                    state.elapsed,
                    state.polls,
                )
                raise CompletionTimeout(session_id, state.elapsed, state.polls)

            if self._observe(state):
                logger.info(
                    "Session %s completed after %d polls (%.1fs, %d messages)",
                    session_id,
                    state.polls,
                    state.elapsed,
                    state.last_observed_count,
                )
                return state

    def _observe(self, state: SessionState) -> bool:
        """Take one status observation. Returns True once stable."""
        status = self._client.get_status(state.session_id)
        state.polls += 1

        if state.polls % PROGRESS_LOG_EVERY == 0:
            logger.info(
                "Waiting on session %s: status=%s polls=%d elapsed=%.1fs",
                state.session_id,
                status.value,
                state.polls,
                state.elapsed,
            )

        if status is SessionStatus.RUNNING:
            state.consecutive_stable_observations = 0
            state.last_observed_count = 0
            return False

        count = len(self._client.get_messages(state.session_id))
        if count > 0 and count == state.last_observed_count:
            state.consecutive_stable_observations += 1
            logger.debug(
                "Session %s stable %d/%d (%d messages)",
                state.session_id,
                state.consecutive_stable_observations,
                self.stability_threshold,
                count,
            )
            return state.consecutive_stable_observations >= self.stability_threshold

        state.consecutive_stable_observations = 0
        state.last_observed_count = count
        return False

    def _check_cancelled(
        self, state: SessionState, cancel_event: threading.Event | None
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(
                "Cancelled wait on session %s after %d polls", state.session_id, state.polls
            )
            raise CompletionCancelled(state.session_id)
