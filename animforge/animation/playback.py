"""Timeline playback controller.

Advances a logical clock at a fixed frame rate, independent of rendering.
The controller never touches a Project: every time change is reported through
the ``on_update`` callback, and the host decides what to do with it (usually
``ProjectStore.set_current_time``).

The clock can be driven two ways:

- threaded (default): an internal daemon thread calls ``tick()`` every
  ``tick_interval`` seconds while playing
- host-driven: ``threaded=False``, the host calls ``tick()`` from its own
  loop or timer, optionally passing ``now`` explicitly

Example:
    from animforge.animation import PlaybackController, PlaybackConfig

    config = PlaybackConfig(fps=30, duration=2.0, loop=True)
    controller = PlaybackController(config, on_update=store.set_current_time)

    controller.play()
    controller.seek(1.0)
    controller.pause()
    controller.close()
"""

from __future__ import annotations

import bisect
import logging
import math
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from animforge.config import settings

from .timebase import clamp_time, round_half_up, snap_to_frame

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    """Playback state machine."""

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


StateListener = Callable[[PlaybackState], None]


@dataclass
class PlaybackConfig:
    """Configuration for timeline playback."""

    fps: float = 30.0
    duration: float = 5.0  # Seconds
    loop: bool = False

    # Ticker settings
    tick_interval: Optional[float] = None  # Seconds, defaults to one frame
    threaded: bool = True

    # Speed options
    speed_options: tuple[float, ...] = (0.25, 0.5, 0.75, 1.0, 1.25, 1.5, 2.0, 4.0)
    default_speed: float = 1.0

    @property
    def interval(self) -> float:
        if self.tick_interval is not None:
            return self.tick_interval
        return 1.0 / self.fps if self.fps > 0 else 1.0 / 30.0


class PlaybackController:
    """Play/pause/stop/seek/loop state machine over a logical clock.

    Time is accumulated unsnapped internally so that ticks shorter than a
    frame still add up; the time handed to ``on_update`` is always snapped to
    the nearest frame boundary.

    Every tick runs under the controller lock, and ``stop()``/``close()``
    invalidate the running ticker under the same lock. Once they return, no
    further ``on_update`` call is made.
    """

    MIN_SPEED = 0.1
    MAX_SPEED = 8.0

    def __init__(
        self,
        config: PlaybackConfig | None = None,
        on_update: Callable[[float], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize playback controller.

        :param config: Playback configuration (uses defaults if None)
        :param on_update: Called with the new frame-snapped time
        :param clock: Monotonic time source in seconds
        """
        self.config = config or PlaybackConfig()
        self._on_update = on_update
        self._clock = clock

        self._lock = threading.RLock()
        self._state = PlaybackState.STOPPED
        self._time = 0.0
        self._last_tick: float = 0.0
        self._speed = self.config.default_speed
        self._closed = False

        # Ticker thread bookkeeping; a bumped generation retires the thread
        self._generation = 0
        self._thread: threading.Thread | None = None
        self._wake: threading.Event | None = None

        # Callbacks
        self._state_listeners: list[StateListener] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        """Current playback state."""
        return self._state

    @property
    def current_time(self) -> float:
        """Current position in seconds, snapped to a frame."""
        with self._lock:
            return self._snapped(self._time)

    @property
    def duration(self) -> float:
        return self.config.duration

    @property
    def fps(self) -> float:
        return self.config.fps

    @property
    def loop(self) -> bool:
        return self.config.loop

    @property
    def speed(self) -> float:
        """Current playback speed multiplier."""
        return self._speed

    @property
    def current_frame(self) -> int:
        return round_half_up(self.current_time * self.fps)

    @property
    def progress(self) -> float:
        """Current progress as 0.0-1.0."""
        if self.duration > 0:
            return self.current_time / self.duration
        return 0.0

    @property
    def is_playing(self) -> bool:
        return self._state == PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self._state == PlaybackState.PAUSED

    @property
    def is_closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Playback Control
    # -------------------------------------------------------------------------

    def play(self) -> None:
        """Start or resume playback from the current time.

        Playing again after a non-looping run reached the end restarts at 0.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("PlaybackController is closed")
            if self._state == PlaybackState.PLAYING:
                return
            if not self.loop and self._time >= self.duration:
                self._time = 0.0
                self._notify(0.0)
            self._last_tick = self._clock()
            self._set_state(PlaybackState.PLAYING)
            if self.config.threaded:
                self._start_ticker()

    def pause(self) -> None:
        """Pause playback, freezing the current time."""
        with self._lock:
            if self._state != PlaybackState.PLAYING:
                return
            self._generation += 1
            self._set_state(PlaybackState.PAUSED)
        self._join_ticker()

    def toggle(self) -> None:
        """Toggle between play and pause."""
        if self._state == PlaybackState.PLAYING:
            self.pause()
        else:
            self.play()

    def stop(self) -> None:
        """Stop playback and reset the time to 0."""
        with self._lock:
            self._generation += 1
            self._time = 0.0
            if not self._closed:
                self._notify(0.0)
            self._set_state(PlaybackState.STOPPED)
        self._join_ticker()

    def close(self) -> None:
        """Stop for good. No callback fires after this returns."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._generation += 1
            self._set_state(PlaybackState.STOPPED)
        self._join_ticker()

    def __enter__(self) -> 'PlaybackController':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Seeking
    # -------------------------------------------------------------------------

    def seek(self, t: float) -> None:
        """Jump to ``t`` (clamped to the timeline) without changing state."""
        with self._lock:
            self._seek(t)
            self._notify(self._snapped(self._time))

    def step_forward(self) -> None:
        """Move one frame forward."""
        self.seek(self.current_time + 1.0 / self.fps)

    def step_backward(self) -> None:
        """Move one frame back."""
        self.seek(self.current_time - 1.0 / self.fps)

    def seek_to_start(self) -> None:
        self.seek(0.0)

    def seek_to_end(self) -> None:
        self.seek(self.duration)

    def sync_time(self, stored_time: float, playing: Optional[bool] = None) -> bool:
        """Follow time and play flag changes made outside the controller.

        The stored time is only adopted while not playing and when it differs
        from the controller's by more than ``Settings.SEEK_EPSILON``. Time
        written back from our own ticks is therefore never re-seeked.

        :param stored_time: Time held by the host (e.g. ``Project.current_time``)
        :param playing: Host's play flag; starts or pauses playback to match
        :return: True if the controller seeked
        """
        if playing is True and not self.is_playing:
            self.play()
        elif playing is False and self.is_playing:
            self.pause()

        with self._lock:
            if self.is_playing:
                return False
            if abs(self._snapped(self._time) - stored_time) <= settings.SEEK_EPSILON:
                return False
            self._seek(stored_time)
            return True

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_loop(self, loop: bool) -> None:
        with self._lock:
            self.config.loop = loop

    def set_timebase(self, fps: Optional[float] = None, duration: Optional[float] = None) -> None:
        """Apply new project frame rate or duration, re-clamping the time."""
        with self._lock:
            if fps is not None:
                if fps <= 0:
                    raise ValueError("fps must be positive")
                self.config.fps = fps
            if duration is not None:
                self.config.duration = max(0.0, duration)
            self._time = clamp_time(self._time, self.duration)

    def set_speed(self, multiplier: float) -> None:
        """Set playback speed."""
        with self._lock:
            self._speed = max(self.MIN_SPEED, min(self.MAX_SPEED, multiplier))

    def step_speed(self, steps: int) -> float:
        """Move ``steps`` entries along ``config.speed_options``.

        A speed between two options counts as sitting on the lower one when
        stepping up and on the upper one when stepping down. The result is
        held at the first/last option and never moves against ``steps``.

        :return: The new speed
        """
        options = sorted(set(self.config.speed_options))
        if not options or steps == 0:
            return self._speed
        with self._lock:
            if steps > 0:
                index = bisect.bisect_right(options, self._speed + 1e-9) - 1 + steps
            else:
                index = bisect.bisect_left(options, self._speed - 1e-9) + steps
            target = options[max(0, min(len(options) - 1, index))]
            if (target - self._speed) * steps > 0:
                self.set_speed(target)
            return self._speed

    def speed_up(self) -> float:
        return self.step_speed(1)

    def speed_down(self) -> float:
        return self.step_speed(-1)

    # -------------------------------------------------------------------------
    # Ticking
    # -------------------------------------------------------------------------

    def tick(self, now: Optional[float] = None) -> Optional[float]:
        """Advance time by the clock time elapsed since the previous tick.

        :param now: Clock reading to use instead of calling the clock
        :return: The new snapped time, or None when not playing
        """
        with self._lock:
            return self._tick(now)

    def _tick(self, now: Optional[float]) -> Optional[float]:
        if self._state != PlaybackState.PLAYING:
            return None
        if now is None:
            now = self._clock()
        elapsed = max(0.0, now - self._last_tick) * self._speed
        self._last_tick = now

        t = self._time + elapsed
        reached_end = False
        if t >= self.duration:
            if self.loop and self.duration > 0:
                t = math.fmod(t, self.duration)
            else:
                t = self.duration
                reached_end = True
        self._time = t

        snapped = self._snapped(t)
        self._notify(snapped)
        if reached_end:
            # Keep the last frame on screen
            self._generation += 1
            self._set_state(PlaybackState.PAUSED)
        return snapped

    def _start_ticker(self) -> None:
        self._generation += 1
        generation = self._generation
        wake = threading.Event()
        self._wake = wake
        self._thread = threading.Thread(
            target=self._run,
            args=(generation, wake),
            daemon=True,
            name="animforge-playback",
        )
        self._thread.start()

    def _run(self, generation: int, wake: threading.Event) -> None:
        interval = self.config.interval
        while not wake.wait(interval):
            with self._lock:
                if generation != self._generation:
                    return
                self._tick(None)
                if self._state != PlaybackState.PLAYING:
                    return

    def _join_ticker(self) -> None:
        thread, wake = self._thread, self._wake
        if wake is not None:
            wake.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _seek(self, t: float) -> None:
        self._time = clamp_time(t, self.duration)
        self._last_tick = self._clock()

    def _snapped(self, t: float) -> float:
        return min(snap_to_frame(t, self.fps), self.duration)

    def _notify(self, t: float) -> None:
        if self._on_update is not None:
            self._on_update(t)

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def on_state_change(self, callback: StateListener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._state_listeners.append(callback)

        def remove() -> None:
            if callback in self._state_listeners:
                self._state_listeners.remove(callback)

        return remove

    def _set_state(self, state: PlaybackState) -> None:
        if state == self._state:
            return
        previous, self._state = self._state, state
        logger.debug("Playback %s -> %s at t=%.3f", previous.value, state.value, self._time)
        for listener in list(self._state_listeners):
            listener(state)


def format_timecode(seconds: float, fps: float) -> str:
    """Format seconds as MM:SS:FF (frames within the second)."""
    if seconds < 0:
        seconds = 0
    total_frames = round_half_up(seconds * fps)
    frames_per_second = max(1, round_half_up(fps))
    whole_seconds, frames = divmod(total_frames, frames_per_second)
    minutes, secs = divmod(whole_seconds, 60)
    return f"{minutes:02d}:{secs:02d}:{frames:02d}"
