"""Live scoring session controller.

Drives one scoring session on the scoring device through its phases::

    checking_session -> resume_prompt | scoring -> confirm_end -> closed

It owns the ``ScoringState`` exclusively, persists it after every change,
keeps the screen awake while scoring and submits the final score once the
operator confirms the end of the match.
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from .engine import (
    IN_PROGRESS,
    MatchInfo,
    ScoringAction,
    ScoringState,
    ScorePoint,
    SelectServiceBox,
    SetServer,
    Restore,
    Undo,
    can_undo,
    initialize,
    other_box,
    reduce,
)
from .persistence import ScoringPersistence, StoredSession, sweep_expired
from .submit import SubmitResult

logger = logging.getLogger(__name__)

CHECKING_SESSION = "checking_session"
RESUME_PROMPT = "resume_prompt"
SCORING = "scoring"
CONFIRM_END = "confirm_end"
CLOSED = "closed"

PORTRAIT = "portrait"
LANDSCAPE = "landscape"

VISIBILITY_CHANGED = "visibility_changed"
ORIENTATION_CHANGED = "orientation_changed"


class DeviceEvents:
    """Subscriptions to device events (visibility, orientation)."""

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = defaultdict(list)

    def subscribe(self, event: str, handler: Callable) -> Callable[[], None]:
        self._handlers[event].append(handler)
        return lambda: self.unsubscribe(event, handler)

    def unsubscribe(self, event: str, handler: Callable) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, *args) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(*args)

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))


class NullWakeLock:
    """Wake lock for devices that can't keep the screen on."""

    is_active = False

    def request(self) -> None:
        pass

    def release(self) -> None:
        pass


class LiveScoringSession:
    def __init__(self, match_info: MatchInfo, store, submitter, wake_lock=None,
                 events: Optional[DeviceEvents] = None, clock: Callable[[], float] = time.time,
                 orientation: str = PORTRAIT):
        self.match_info = match_info
        self.store = store
        self.submitter = submitter
        self.wake_lock = wake_lock or NullWakeLock()
        self.events = events or DeviceEvents()
        self.clock = clock
        self.persistence = ScoringPersistence(store, match_info.id, clock=clock)
        self.orientation = orientation
        self.visible = True
        self.phase = CHECKING_SESSION
        self.state: ScoringState = initialize(match_info, now=self._now())
        self.existing_session: Optional[StoredSession] = None
        self.submit_error: Optional[str] = None
        self.is_submitting = False
        self._unsubscribers: List[Callable[[], None]] = []

    def _now(self) -> int:
        return int(self.clock() * 1000)

    # =========================================================
    # LIFECYCLE
    # =========================================================

    def mount(self) -> str:
        """Look for a resumable session and pick the first phase."""
        if self.phase != CHECKING_SESSION:
            return self.phase
        if not self._unsubscribers:
            self._unsubscribers = [
                self.events.subscribe(VISIBILITY_CHANGED, self.handle_visibility_change),
                self.events.subscribe(ORIENTATION_CHANGED, self.handle_orientation_change),
            ]

        sweep_expired(self.store, clock=self.clock)
        session = self.persistence.load_if_fresh()
        if session is not None and session.state.status == IN_PROGRESS:
            logger.info(f"[live-scoring] match={self.match_info.id} resumable session found")
            self.existing_session = session
            self.phase = RESUME_PROMPT
        else:
            self._enter_scoring()
        return self.phase

    def resume(self) -> None:
        if self.phase != RESUME_PROMPT or self.existing_session is None:
            return
        self.state = reduce(self.state, Restore(self.existing_session.state))
        self._enter_scoring()

    def start_fresh(self) -> None:
        if self.phase != RESUME_PROMPT:
            return
        self.persistence.clear()
        self.existing_session = None
        self.state = initialize(self.match_info, now=self._now())
        self._enter_scoring()

    def end_match(self) -> None:
        if self.phase == SCORING:
            self._leave_scoring(CONFIRM_END)

    def cancel_end(self) -> None:
        if self.phase != CONFIRM_END or self.is_submitting:
            return
        self.submit_error = None
        self._enter_scoring()

    def confirm_end(self) -> bool:
        """Submit the final score; True once it was accepted."""
        if self.phase != CONFIRM_END or self.is_submitting:
            return False
        self.is_submitting = True
        self.submit_error = None
        try:
            result = self.submitter(self.state.match_id, self.state.score_a, self.state.score_b)
        except Exception as exc:
            logger.error(f"[live-scoring] match={self.match_info.id} submit raised: {exc}")
            result = SubmitResult.failed(str(exc))
        finally:
            self.is_submitting = False

        if not result.success:
            self.submit_error = result.message
            return False

        logger.info(
            f"[live-scoring] match={self.match_info.id} final {self.state.score_a}-{self.state.score_b} submitted"
        )
        self.persistence.clear()
        self._close()
        return True

    def close(self) -> None:
        """Leave the scoring screen; sessions with points stay resumable."""
        if self.phase == CLOSED:
            return
        keep = self.state.points_played or (
            self.phase == RESUME_PROMPT and self.existing_session is not None
        )
        if not keep:
            self.persistence.clear()
        self._close()

    def unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._release_wake_lock()

    def _close(self) -> None:
        self.phase = CLOSED
        self.unmount()

    def _enter_scoring(self) -> None:
        self.phase = SCORING
        self._acquire_wake_lock()
        self.persistence.save(self.state)

    def _leave_scoring(self, phase: str) -> None:
        self.phase = phase
        self._release_wake_lock()

    # =========================================================
    # SCORING
    # =========================================================

    def dispatch(self, action: ScoringAction) -> ScoringState:
        if self.phase != SCORING:
            return self.state
        self.state = reduce(self.state, action, now=self._now())
        self.persistence.save(self.state)
        return self.state

    def score_point(self, scorer: str) -> ScoringState:
        return self.dispatch(ScorePoint(scorer))

    def select_service_box(self, box: str) -> ScoringState:
        return self.dispatch(SelectServiceBox(box))

    def tap_service_box(self, side: str) -> ScoringState:
        """Tapping the server's box during a handout swaps to the other box."""
        if self.state.server == side and self.state.is_handout:
            return self.select_service_box(other_box(self.state.service_box))
        return self.state

    def set_server(self, side: str) -> ScoringState:
        return self.dispatch(SetServer(side))

    def undo(self) -> ScoringState:
        return self.dispatch(Undo())

    @property
    def can_undo(self) -> bool:
        return can_undo(self.state)

    def elapsed_ms(self) -> int:
        return max(0, self._now() - self.state.match_start_time)

    def format_elapsed(self) -> str:
        total_seconds = self.elapsed_ms() // 1000
        return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}"

    # =========================================================
    # DEVICE EVENTS
    # =========================================================

    def handle_visibility_change(self, visible: bool) -> None:
        self.visible = bool(visible)
        if not self.visible:
            self._release_wake_lock()
        elif self.phase == SCORING:
            self._acquire_wake_lock()

    def handle_orientation_change(self, orientation: str) -> bool:
        if orientation not in (PORTRAIT, LANDSCAPE) or orientation == self.orientation:
            return False
        self.orientation = orientation
        return True

    def _acquire_wake_lock(self) -> None:
        if not self.visible or self.wake_lock.is_active:
            return
        try:
            self.wake_lock.request()
        except Exception as exc:
            logger.warning(f"[live-scoring] wake lock request failed: {exc}")

    def _release_wake_lock(self) -> None:
        if not self.wake_lock.is_active:
            return
        try:
            self.wake_lock.release()
        except Exception as exc:
            logger.warning(f"[live-scoring] wake lock release failed: {exc}")
