import random

import pytest

from app.feed.navigator import FeedNavigator, Playback


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def tick(self, seconds):
        self.now += seconds


class FakePlayer:
    def __init__(self, fail_play=False):
        self.state = "idle"
        self.preloaded = False
        self.fail_play = fail_play

    def play(self):
        if self.fail_play:
            raise RuntimeError("decode error")
        self.state = "playing"

    def pause(self):
        self.state = "paused"

    def preload(self):
        self.preloaded = True


def make_nav(n, clock=None, **kwargs):
    return FeedNavigator(list(range(n)), shuffle=False, clock=clock or FakeClock(), **kwargs)


def test_initial_state():
    nav = make_nav(3)
    assert nav.current_index == 0
    assert nav.current == 0
    assert not nav.transitioning


def test_shuffle_is_a_permutation():
    videos = list(range(20))
    nav = FeedNavigator(videos, rng=random.Random(7), clock=FakeClock())
    assert sorted(nav.sequence) == videos
    assert nav.sequence != tuple(videos)


def test_no_shuffle_keeps_order():
    assert make_nav(4).sequence == (0, 1, 2, 3)


def test_advance_starts_settle_window():
    clock = FakeClock()
    nav = make_nav(3, clock)
    assert nav.advance()
    assert nav.current_index == 1
    assert nav.transitioning
    clock.tick(0.5)
    assert not nav.transitioning


def test_gestures_inside_settle_window_are_ignored():
    clock = FakeClock()
    nav = make_nav(5, clock)
    assert nav.advance()
    for _ in range(4):
        clock.tick(0.1)
        assert not nav.advance()
        assert not nav.retreat()
    assert nav.current_index == 1
    clock.tick(0.2)
    assert nav.advance()
    assert nav.current_index == 2


def test_n_minus_one_advances_reach_the_end():
    clock = FakeClock()
    nav = make_nav(6, clock)
    for _ in range(5):
        assert nav.advance()
        clock.tick(0.6)
    assert nav.current_index == 5
    assert not nav.advance()
    assert nav.current_index == 5


def test_retreat_at_start_is_noop():
    nav = make_nav(3)
    assert not nav.retreat()
    assert nav.current_index == 0
    assert not nav.transitioning


def test_random_gestures_stay_in_bounds_and_debounced():
    rng = random.Random(42)
    clock = FakeClock()
    nav = make_nav(7, clock)
    change_times = []
    for _ in range(500):
        before = nav.current_index
        if rng.random() < 0.5:
            nav.on_wheel(rng.choice([-120, -3, 0, 3, 120]))
        else:
            nav.on_touch(400, 400 + rng.uniform(-300, 300))
        assert 0 <= nav.current_index <= 6
        if nav.current_index != before:
            assert abs(nav.current_index - before) == 1
            change_times.append(clock.now)
        clock.tick(rng.uniform(0.0, 0.4))
    assert change_times
    gaps = [b - a for a, b in zip(change_times, change_times[1:])]
    assert all(gap >= 0.5 - 1e-9 for gap in gaps)


def test_wheel_direction():
    clock = FakeClock()
    nav = make_nav(3, clock)
    assert nav.on_wheel(100)
    clock.tick(1)
    assert nav.on_wheel(-100)
    assert nav.current_index == 0
    clock.tick(1)
    assert not nav.on_wheel(0)


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (500, 400, 1),  # swipe up 100px -> next
        (500, 450, 0),  # exactly 50px is not enough
        (500, 449, 1),
        (500, 520, 0),
    ],
)
def test_touch_threshold(start, end, expected):
    nav = make_nav(3)
    nav.on_touch(start, end)
    assert nav.current_index == expected


def test_touch_down_retreats():
    clock = FakeClock()
    nav = make_nav(3, clock)
    nav.advance()
    clock.tick(1)
    assert nav.on_touch(300, 500)
    assert nav.current_index == 0


def test_empty_feed_accepts_no_gestures():
    nav = make_nav(0)
    assert nav.is_empty
    assert nav.current is None
    assert not nav.advance()
    assert not nav.retreat()
    assert not nav.on_wheel(100)
    assert not nav.on_touch(500, 100)
    assert nav.playback_plan() == []


def test_scroll_callback_and_offset():
    scrolled = []
    nav = make_nav(3, on_scroll=scrolled.append)
    nav.advance()
    assert scrolled == [1]
    assert nav.scroll_offset(800) == 800


def test_playback_plan_plays_current_and_preloads_next():
    clock = FakeClock()
    nav = make_nav(4, clock)
    assert nav.playback_plan() == [Playback.PLAYING, Playback.PRELOAD, Playback.PAUSED, Playback.PAUSED]
    nav.advance()
    assert nav.playback_plan() == [Playback.PAUSED, Playback.PLAYING, Playback.PRELOAD, Playback.PAUSED]


def test_players_follow_current_index():
    clock = FakeClock()
    nav = make_nav(3, clock)
    players = [FakePlayer() for _ in range(3)]
    nav.attach_players(players)
    assert [p.state for p in players] == ["playing", "paused", "paused"]
    assert players[1].preloaded
    nav.advance()
    assert [p.state for p in players] == ["paused", "playing", "paused"]
    assert players[2].preloaded


def test_player_error_is_logged_without_transition(caplog):
    clock = FakeClock()
    nav = make_nav(2, clock)
    players = [FakePlayer(), FakePlayer(fail_play=True)]
    nav.attach_players(players)
    nav.advance()
    assert nav.current_index == 1
    assert players[1].state == "paused"
    assert "Play error" in caplog.text
    clock.tick(1)
    assert not nav.advance()


def test_attach_players_requires_one_per_slide():
    nav = make_nav(3)
    with pytest.raises(ValueError):
        nav.attach_players([FakePlayer()])
