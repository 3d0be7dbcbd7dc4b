"""
Feed navigation: one active video at a time, moved by wheel / swipe gestures.

The sequence is shuffled once when the navigator is built (one page load). A transition starts a
settle window (0.5s); every gesture inside the window is ignored so one long swipe or a burst of
wheel events moves exactly one slide. There is no wraparound.

Time comes from an injected clock, so the settle window is evaluated on read instead of with a timer.
Players are any objects with play() / pause() / preload(); the active one plays, the next one is
preloaded, all others are paused.
"""
import enum
import logging
import random
import time
from typing import Any, Callable, Sequence

logger = logging.getLogger(__name__)

SETTLE_DELAY_SECONDS = 0.5
SWIPE_THRESHOLD_PX = 50


class Playback(str, enum.Enum):
    PLAYING = "playing"
    PRELOAD = "preload"
    PAUSED = "paused"


class FeedNavigator:
    def __init__(
        self,
        videos: Sequence[Any],
        *,
        shuffle: bool = True,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        settle_delay: float = SETTLE_DELAY_SECONDS,
        swipe_threshold: float = SWIPE_THRESHOLD_PX,
        on_scroll: Callable[[int], None] | None = None,
    ):
        items = list(videos)
        if shuffle:
            (rng or random.Random()).shuffle(items)
        self.sequence: tuple = tuple(items)
        self.current_index = 0
        self.settle_delay = settle_delay
        self.swipe_threshold = swipe_threshold
        self._clock = clock
        self._on_scroll = on_scroll
        self._settles_at: float | None = None
        self._players: list = []

    def __len__(self) -> int:
        return len(self.sequence)

    @property
    def is_empty(self) -> bool:
        return not self.sequence

    @property
    def current(self) -> Any | None:
        return self.sequence[self.current_index] if self.sequence else None

    @property
    def transitioning(self) -> bool:
        if self._settles_at is None:
            return False
        if self._clock() >= self._settles_at:
            self._settles_at = None
            return False
        return True

    def can_advance(self) -> bool:
        return self.current_index < len(self.sequence) - 1

    def can_retreat(self) -> bool:
        return self.current_index > 0

    def advance(self) -> bool:
        """Move to the next video. No-op (False) at the end, on an empty feed, or while settling."""
        if self.transitioning or not self.can_advance():
            return False
        self._go_to(self.current_index + 1)
        return True

    def retreat(self) -> bool:
        if self.transitioning or not self.can_retreat():
            return False
        self._go_to(self.current_index - 1)
        return True

    def _go_to(self, index: int) -> None:
        self._settles_at = self._clock() + self.settle_delay
        self.current_index = index
        if self._on_scroll is not None:
            self._on_scroll(index)
        self._sync_players()

    # Gestures

    def on_wheel(self, delta_y: float) -> bool:
        """Positive delta scrolls down (next video), negative up."""
        if delta_y > 0:
            return self.advance()
        if delta_y < 0:
            return self.retreat()
        return False

    def on_touch(self, start_y: float, end_y: float) -> bool:
        """Swipe up (finger moves toward the top) advances; shorter drags than the threshold are ignored."""
        diff = start_y - end_y
        if abs(diff) <= self.swipe_threshold:
            return False
        return self.advance() if diff > 0 else self.retreat()

    # Playback

    def scroll_offset(self, viewport_height: float) -> float:
        return self.current_index * viewport_height

    def playback_plan(self) -> list[Playback]:
        """What each slide should be doing for the current index."""
        plan = []
        for index in range(len(self.sequence)):
            if index == self.current_index:
                plan.append(Playback.PLAYING)
            elif index == self.current_index + 1:
                plan.append(Playback.PRELOAD)
            else:
                plan.append(Playback.PAUSED)
        return plan

    def attach_players(self, players: Sequence[Any]) -> None:
        """One player per slide, in sequence order."""
        if len(players) != len(self.sequence):
            raise ValueError(f"Expected {len(self.sequence)} players, got {len(players)}")
        self._players = list(players)
        self._sync_players()

    def _sync_players(self) -> None:
        for player, state in zip(self._players, self.playback_plan()):
            if state is Playback.PLAYING:
                try:
                    player.play()
                except Exception as e:
                    # Stays paused on this slide; the user can still swipe away.
                    logger.error("Play error for slide %d: %s", self.current_index, e)
            else:
                player.pause()
                if state is Playback.PRELOAD:
                    player.preload()
