"""
Challenge session: the verification window shown after an alarm fires.

Holds the phrase and the local attempt counter, checks typed or spoken
attempts, and runs the countdown that fails the challenge when the window
closes. Only a correct attempt or the countdown expiry writes to the store;
a wrong attempt just bumps the local counter.

Attempt convention: ``attemptsMade`` is the total number of submissions,
the final correct one included.
"""

import asyncio
import inspect
import logging
import random
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from ..core.app_state import ActiveChallenge, AppState
from ..core.config import Settings, get_settings
from ..domain.errors import ChallengeAlreadyResolved, NoActiveChallenge, SpeechCaptureFailure
from ..domain.ports.speech_capture import SpeechCapture
from ..utils.formatting import format_countdown
from .challenge_tracker import ChallengeTracker
from .phrase_matcher import DEFAULT_MATCH_THRESHOLD, generate_phrase, validate_phrase

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MINUTES = 15
DEFAULT_TICK_SECONDS = 1.0

TickCallback = Callable[[timedelta], Any]


class ChallengeSession:
    """Controller for the single open challenge window."""

    def __init__(
        self,
        state: AppState,
        tracker: ChallengeTracker,
        phrases: Optional[Sequence[str]] = None,
        timeout_minutes: float = DEFAULT_TIMEOUT_MINUTES,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        match_threshold: float = DEFAULT_MATCH_THRESHOLD,
        clock: Callable[[], datetime] = datetime.now,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.state = state
        self.tracker = tracker
        self.phrases = list(phrases) if phrases else None
        self.timeout = timedelta(minutes=timeout_minutes)
        self.tick_seconds = tick_seconds
        self.match_threshold = match_threshold
        self._clock = clock
        self._rng = rng
        self._countdown: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls,
        state: AppState,
        tracker: ChallengeTracker,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "ChallengeSession":
        settings = settings or get_settings()
        return cls(
            state,
            tracker,
            phrases=settings.challenge_phrases,
            timeout_minutes=settings.challenge_timeout_minutes,
            tick_seconds=settings.countdown_tick_seconds,
            match_threshold=settings.phrase_match_threshold,
            clock=clock,
        )

    @property
    def active(self) -> Optional[ActiveChallenge]:
        return self.state.active_challenge

    @property
    def countdown_running(self) -> bool:
        return self._countdown is not None and not self._countdown.done()

    def _require_active(self) -> ActiveChallenge:
        challenge = self.state.active_challenge
        if challenge is None:
            raise NoActiveChallenge("No challenge window is open")
        return challenge

    # -- Window --

    def open(
        self,
        alarm_id: str,
        challenge_id: str,
        started_at: Optional[datetime] = None,
    ) -> ActiveChallenge:
        """Open the window with a fresh phrase.

        If a window is already open it is returned unchanged, so the phrase
        never changes mid-challenge.
        """
        if self.state.active_challenge is not None:
            logger.info(
                f"Challenge window already open for alarm "
                f"{self.state.active_challenge.alarm_id}, keeping it"
            )
            return self.state.active_challenge

        challenge = ActiveChallenge(
            alarm_id=alarm_id,
            challenge_id=challenge_id,
            phrase=generate_phrase(self.phrases, self._rng),
            started_at=started_at or self._clock(),
        )
        self.state.set_active_challenge(challenge)
        return challenge

    def remaining(self, now: Optional[datetime] = None) -> timedelta:
        """Time left before the window expires, never negative."""
        challenge = self._require_active()
        elapsed = (now or self._clock()) - challenge.started_at
        return max(self.timeout - elapsed, timedelta(0))

    def countdown_text(self, now: Optional[datetime] = None) -> str:
        return format_countdown(self.remaining(now))

    async def close(self) -> None:
        """Dismiss the window and tear down its countdown."""
        await self._stop_countdown()
        self.state.clear_active_challenge()

    # -- Attempts --

    async def submit(self, candidate: str) -> bool:
        """Check one attempt.

        A correct attempt resolves the challenge as success with the total
        attempt count and closes the window. A wrong attempt only increments
        the local counter. Once the deadline has passed no attempt is
        accepted: the challenge is failed instead and False is returned.
        Store failures propagate and leave the window open.
        """
        challenge = self._require_active()
        if self.remaining() <= timedelta(0):
            logger.info(
                f"Attempt after the deadline for challenge {challenge.challenge_id}"
            )
            await self.expire()
            return False

        if not validate_phrase(challenge.phrase, candidate, self.match_threshold):
            challenge.attempts += 1
            logger.info(
                f"Wrong attempt {challenge.attempts} for challenge {challenge.challenge_id}"
            )
            return False

        attempts = challenge.attempts + 1
        await self.tracker.resolve_success(
            challenge.challenge_id, attempts, challenge.alarm_id
        )
        challenge.attempts = attempts
        await self._stop_countdown()
        self.state.clear_active_challenge(challenge.challenge_id)
        return True

    async def submit_speech(self, capture: SpeechCapture) -> bool:
        """Listen once and submit the last transcription.

        Raises:
            SpeechCaptureFailure: If capture fails or hears nothing. The
                challenge stays pending and the counter is not touched.
        """
        self._require_active()
        try:
            results = await capture.listen()
        except Exception as e:
            logger.warning(f"Speech capture failed: {e}")
            raise SpeechCaptureFailure(f"Speech capture failed: {e}") from e

        if not results:
            raise SpeechCaptureFailure("No speech was recognized")
        return await self.submit(results[-1])

    # -- Countdown --

    def start_countdown(self, on_tick: Optional[TickCallback] = None) -> asyncio.Task:
        """Start (or keep) the countdown task for the open window.

        *on_tick* receives the remaining time on every tick; it may be a
        plain function or a coroutine function.
        """
        challenge = self._require_active()
        if self.countdown_running:
            return self._countdown
        self._countdown = asyncio.create_task(
            self._run_countdown(challenge, on_tick),
            name=f"challenge-countdown-{challenge.challenge_id}",
        )
        return self._countdown

    async def _run_countdown(
        self, challenge: ActiveChallenge, on_tick: Optional[TickCallback]
    ) -> None:
        while self.state.active_challenge is challenge:
            remaining = self.remaining()
            if on_tick is not None:
                result = on_tick(remaining)
                if inspect.isawaitable(result):
                    await result
            if remaining <= timedelta(0):
                try:
                    await self.expire()
                    return
                except Exception:
                    logger.exception(
                        f"Failed to expire challenge {challenge.challenge_id}, retrying"
                    )
                await asyncio.sleep(self.tick_seconds)
                continue
            await asyncio.sleep(min(self.tick_seconds, remaining.total_seconds()))

    async def expire(self) -> None:
        """Fail the open challenge with the current attempt count.

        Store failures propagate and leave the window open.
        """
        challenge = self.state.active_challenge
        if challenge is None:
            return

        logger.info(f"Challenge {challenge.challenge_id} timed out")
        try:
            await self.tracker.resolve_failure(
                challenge.challenge_id, challenge.attempts, challenge.alarm_id
            )
        except ChallengeAlreadyResolved as e:
            logger.info(f"Challenge already resolved before expiry: {e}")

        await self._stop_countdown()
        self.state.clear_active_challenge(challenge.challenge_id)

    async def _stop_countdown(self) -> None:
        task, self._countdown = self._countdown, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
