"""
Tests the timeline playback controller
"""

import threading
import time

import pytest

from animforge.animation.playback import (
    PlaybackConfig,
    PlaybackController,
    PlaybackState,
    format_timecode,
)


def make_controller(clock, duration=1.0, fps=30, loop=False, updates=None):
    config = PlaybackConfig(fps=fps, duration=duration, loop=loop, threaded=False)
    on_update = updates.append if updates is not None else None
    return PlaybackController(config, on_update=on_update, clock=clock)


class TestPlayPauseStop:
    """State machine transitions."""

    def test_initial_state(self, clock):
        controller = make_controller(clock)
        assert controller.state == PlaybackState.STOPPED
        assert controller.current_time == 0.0
        assert controller.speed == 1.0

    def test_play_advances_with_clock(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        controller.play()
        clock.advance(0.5)
        assert controller.tick() == pytest.approx(0.5)
        assert updates[-1] == pytest.approx(0.5)
        assert controller.current_frame == 15

    def test_tick_ignored_when_not_playing(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        clock.advance(0.5)
        assert controller.tick() is None
        assert updates == []

    def test_pause_freezes_time(self, clock):
        controller = make_controller(clock)
        controller.play()
        controller.tick(clock.advance(0.2))
        controller.pause()
        assert controller.is_paused
        clock.advance(0.5)
        assert controller.tick() is None
        controller.play()
        controller.tick(clock.advance(0.1))
        assert controller.current_time == pytest.approx(0.3)

    def test_toggle(self, clock):
        controller = make_controller(clock)
        controller.toggle()
        assert controller.is_playing
        controller.toggle()
        assert controller.is_paused

    def test_stop_resets_and_notifies(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        controller.play()
        controller.tick(clock.advance(0.5))
        controller.stop()
        assert controller.state == PlaybackState.STOPPED
        assert controller.current_time == 0.0
        assert updates[-1] == 0.0

    def test_state_change_callbacks(self, clock):
        states = []
        controller = make_controller(clock)
        controller.on_state_change(states.append)
        controller.play()
        controller.play()
        controller.pause()
        controller.stop()
        assert states == [PlaybackState.PLAYING, PlaybackState.PAUSED, PlaybackState.STOPPED]

    def test_state_listener_can_be_removed(self, clock):
        states = []
        controller = make_controller(clock)
        remove = controller.on_state_change(states.append)
        controller.play()
        remove()
        remove()
        controller.pause()
        assert states == [PlaybackState.PLAYING]


class TestTiming:
    """Frame snapping, looping and the end of the timeline."""

    def test_sub_frame_ticks_accumulate(self, clock):
        controller = make_controller(clock)
        controller.play()
        assert controller.tick(clock.advance(0.01)) == 0.0
        assert controller.tick(clock.advance(0.01)) == pytest.approx(1 / 30)

    def test_loop_wraps_around(self, clock):
        controller = make_controller(clock, loop=True)
        controller.play()
        assert controller.tick(clock.advance(1.1)) == pytest.approx(0.1)
        assert controller.is_playing

    def test_end_without_loop_pauses_at_duration(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        controller.play()
        assert controller.tick(clock.advance(3.0)) == 1.0
        assert controller.state == PlaybackState.PAUSED
        assert controller.progress == 1.0

    def test_play_after_end_restarts(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        controller.play()
        controller.tick(clock.advance(3.0))
        controller.play()
        assert updates[-1] == 0.0
        assert controller.tick(clock.advance(0.5)) == pytest.approx(0.5)

    def test_reported_time_never_exceeds_duration(self, clock):
        controller = make_controller(clock, duration=1.02)
        controller.seek(1.02)
        assert controller.current_time == 1.02

    def test_speed_scales_elapsed_time(self, clock):
        controller = make_controller(clock, duration=5.0)
        controller.set_speed(2.0)
        controller.play()
        assert controller.tick(clock.advance(0.25)) == pytest.approx(0.5)

    def test_zero_duration_loop(self, clock):
        controller = make_controller(clock, duration=0.0, loop=True)
        controller.play()
        assert controller.tick(clock.advance(1.0)) == 0.0


class TestSeeking:
    """Seeking and syncing with externally stored time."""

    def test_seek_clamps_and_notifies(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        controller.seek(5.0)
        assert controller.current_time == 1.0
        controller.seek(-1.0)
        assert updates == [1.0, 0.0]

    def test_seek_keeps_state(self, clock):
        controller = make_controller(clock)
        controller.play()
        controller.seek(0.5)
        assert controller.is_playing
        assert controller.tick(clock.advance(0.1)) == pytest.approx(0.6)

    def test_step_forward_and_backward(self, clock):
        controller = make_controller(clock)
        controller.step_forward()
        controller.step_forward()
        assert controller.current_frame == 2
        controller.step_backward()
        assert controller.current_frame == 1
        controller.seek_to_end()
        assert controller.current_time == 1.0
        controller.seek_to_start()
        assert controller.current_time == 0.0

    def test_sync_time_adopts_external_change(self, clock):
        controller = make_controller(clock)
        assert controller.sync_time(0.5) is True
        assert controller.current_time == pytest.approx(0.5)

    def test_sync_time_ignores_small_difference(self, clock):
        controller = make_controller(clock)
        controller.seek(0.5)
        assert controller.sync_time(0.505) is False

    def test_sync_time_ignored_while_playing(self, clock):
        controller = make_controller(clock)
        assert controller.sync_time(0.5, playing=True) is False
        assert controller.is_playing
        assert controller.current_time == 0.0

    def test_sync_time_pauses_to_match_host(self, clock):
        controller = make_controller(clock)
        controller.play()
        controller.sync_time(0.0, playing=False)
        assert controller.is_paused


class TestConfiguration:
    """Speed, loop and timebase changes."""

    def test_speed_is_clamped(self, clock):
        controller = make_controller(clock)
        controller.set_speed(100)
        assert controller.speed == 8.0
        controller.set_speed(0)
        assert controller.speed == 0.1

    def test_speed_steps_through_options(self, clock):
        controller = make_controller(clock)
        controller.speed_up()
        assert controller.speed == 1.25
        controller.speed_down()
        controller.speed_down()
        assert controller.speed == 0.75

    def test_speed_steps_hold_at_the_ends(self, clock):
        controller = make_controller(clock)
        controller.set_speed(4.0)
        assert controller.speed_up() == 4.0
        controller.set_speed(0.25)
        assert controller.speed_down() == 0.25
        controller.set_speed(0.1)
        assert controller.speed_down() == 0.1
        assert controller.speed_up() == 0.25

    def test_speed_between_options_snaps_to_neighbour(self, clock):
        controller = make_controller(clock)
        controller.set_speed(1.1)
        assert controller.speed_up() == 1.25
        controller.set_speed(1.1)
        assert controller.speed_down() == 1.0
        assert controller.step_speed(3) == 2.0

    def test_set_timebase_reclamps(self, clock):
        controller = make_controller(clock, duration=2.0)
        controller.seek(1.5)
        controller.set_timebase(duration=1.0)
        assert controller.current_time == 1.0
        with pytest.raises(ValueError):
            controller.set_timebase(fps=0)

    def test_set_loop(self, clock):
        controller = make_controller(clock)
        controller.set_loop(True)
        assert controller.loop


class TestClose:
    """Shutdown behavior."""

    def test_no_updates_after_close(self, clock):
        updates = []
        controller = make_controller(clock, updates=updates)
        controller.play()
        controller.close()
        assert controller.is_closed
        assert controller.tick(clock.advance(0.5)) is None
        assert updates == []
        with pytest.raises(RuntimeError):
            controller.play()

    def test_context_manager_closes(self, clock):
        with make_controller(clock) as controller:
            controller.play()
        assert controller.is_closed

    def test_threaded_ticker_stops_calling_back(self):
        updates = []
        ticked = threading.Event()

        def on_update(t):
            updates.append(t)
            ticked.set()

        config = PlaybackConfig(fps=30, duration=10.0, tick_interval=0.005)
        controller = PlaybackController(config, on_update=on_update)
        controller.play()
        assert ticked.wait(2.0)
        controller.stop()
        count = len(updates)
        time.sleep(0.05)
        assert len(updates) == count
        assert updates[-1] == 0.0
        controller.close()


def test_format_timecode():
    """
    Tests MM:SS:FF formatting
    """
    assert format_timecode(0, 30) == "00:00:00"
    assert format_timecode(61.5, 30) == "01:01:15"
    assert format_timecode(-1, 30) == "00:00:00"
