"""
Loading escalation state machine.

Tracks one aggregate "is anything still loading" signal. Entering LOADING arms
a timer; if the signal is still true when it fires the machine moves to
ESCALATED, which switches the view to the long-wait message. Any exit from
LOADING or ESCALATED cancels the timer.

    IDLE --loading--> LOADING --timer--> ESCALATED
      ^                  |                   |
      +----settled-------+-------settled-----+
"""

import asyncio
from typing import Callable, Optional

from ..logging.config import get_state_logger, log_state_transition
from .models import LoadingPhase

state_logger = get_state_logger(__name__)

PhaseListener = Callable[[LoadingPhase, LoadingPhase], None]


class LoadingEscalator:
    """Time-boxed IDLE → LOADING → ESCALATED state machine."""

    def __init__(
        self,
        delay_seconds: float = 15.0,
        on_transition: Optional[PhaseListener] = None
    ):
        if delay_seconds <= 0:
            raise ValueError("delay_seconds must be positive")
        self.delay_seconds = delay_seconds
        self.on_transition = on_transition
        self._phase = LoadingPhase.IDLE
        self._episode = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def phase(self) -> LoadingPhase:
        return self._phase

    @property
    def escalated(self) -> bool:
        return self._phase == LoadingPhase.ESCALATED

    @property
    def episode(self) -> int:
        return self._episode

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def update(self, loading: bool) -> LoadingPhase:
        """Feed the current aggregate loading signal."""
        if self._closed:
            return self._phase

        if loading and self._phase == LoadingPhase.IDLE:
            self._enter_loading("loading_started")
        elif not loading and self._phase != LoadingPhase.IDLE:
            self._cancel_timer()
            self._transition(LoadingPhase.IDLE, "loading_settled")

        return self._phase

    def restart(self, loading: bool) -> LoadingPhase:
        """Begin a new episode, discarding any escalation from the previous one."""
        if self._closed:
            return self._phase

        self._cancel_timer()
        if self._phase != LoadingPhase.IDLE:
            self._transition(LoadingPhase.IDLE, "episode_restarted")

        return self.update(loading)

    def close(self) -> None:
        """Cancel any pending timer and stop reacting to updates."""
        self._cancel_timer()
        self._closed = True

    def _enter_loading(self, trigger: str) -> None:
        self._episode += 1
        self._transition(LoadingPhase.LOADING, trigger)

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay_seconds, self._on_timer, self._episode)

    def _on_timer(self, episode: int) -> None:
        if episode != self._episode or self._phase != LoadingPhase.LOADING:
            state_logger.debug(
                "Ignoring stale escalation timer",
                timer_episode=episode,
                current_episode=self._episode
            )
            return

        self._timer = None
        self._transition(LoadingPhase.ESCALATED, "escalation_timer")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _transition(self, new_phase: LoadingPhase, trigger: str) -> None:
        old_phase = self._phase
        self._phase = new_phase

        log_state_transition(
            state_logger,
            machine="loading_escalator",
            from_state=old_phase.value,
            to_state=new_phase.value,
            trigger=trigger,
            context={
                "episode": self._episode,
                "delay_seconds": self.delay_seconds
            }
        )

        if self.on_transition is not None:
            self.on_transition(old_phase, new_phase)
