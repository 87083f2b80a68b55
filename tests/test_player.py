import asyncio
import logging

import pytest

from vtmusic.player.controller import PlaybackController, PlaybackStatus, Track


class FakeDevice:
    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    async def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    async def load(self, locator):
        await self._record("load", locator)

    async def play(self):
        await self._record("play")

    async def pause(self):
        await self._record("pause")

    async def seek(self, position_seconds):
        await self._record("seek", position_seconds)


def track(n, duration=180):
    return Track(id=n, title=f"Track {n}", video_url=f"https://youtu.be/t{n}", duration=duration)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def device():
    return FakeDevice()


@pytest.fixture()
def player(device):
    return PlaybackController(device)


def test_play_sets_state_and_commands_device(player, device):
    run(player.play(track(1, duration=243)))

    st = player.state
    assert st.current_song.id == 1
    assert st.is_playing is True
    assert st.position == 0
    assert st.duration == 243
    assert st.confirmed is None
    assert device.calls == [("load", "https://youtu.be/t1"), ("play",)]


def test_play_resets_position_of_previous_song(player):
    run(player.play(track(1)))
    run(player.seek_to(90))
    run(player.play(track(2, duration=60)))

    assert player.state.position == 0
    assert player.state.duration == 60


def test_pause_resume_and_seek_update_optimistically(player, device):
    run(player.play(track(1)))
    run(player.pause())
    assert player.state.is_playing is False
    run(player.resume())
    assert player.state.is_playing is True
    run(player.seek_to(42.5))
    assert player.state.position == 42.5
    assert device.calls[-3:] == [("pause",), ("play",), ("seek", 42.5)]


def test_transport_is_noop_without_current_song(player, device):
    run(player.pause())
    run(player.resume())
    run(player.seek_to(10))
    assert device.calls == []
    assert player.state.is_playing is False


def test_device_failures_are_swallowed_and_state_stays_optimistic(caplog):
    device = FakeDevice(fail_on={"pause", "seek", "load"})
    player = PlaybackController(device)

    with caplog.at_level(logging.ERROR, logger="vtmusic.player.controller"):
        run(player.play(track(1)))
        run(player.pause())
        run(player.seek_to(30))

    assert player.state.current_song.id == 1
    assert player.state.is_playing is False
    assert player.state.position == 30
    # load failed, so play was never sent
    assert ("play",) not in device.calls
    assert "failed" in caplog.text


def test_play_next_wraps_around(player):
    for n in (1, 2, 3):
        player.add_to_queue(track(n))
    player.state.queue_index = 2

    run(player.play_next())

    assert player.state.queue_index == 0
    assert player.state.current_song.id == 1


@pytest.mark.parametrize("k", [1, 2, 5])
def test_play_next_and_previous_move_modulo_queue_length(player, k):
    for n in range(k):
        player.add_to_queue(track(n))
    for i in range(k):
        player.state.queue_index = i
        run(player.play_next())
        assert player.state.queue_index == (i + 1) % k

    player.state.queue_index = 0
    run(player.play_previous())
    assert player.state.queue_index == k - 1
    assert player.state.current_song.id == k - 1


def test_next_and_previous_are_noops_on_empty_queue(player, device):
    run(player.play_next())
    run(player.play_previous())
    assert player.state.current_song is None
    assert device.calls == []


def test_add_to_queue_does_not_touch_playback(player, device):
    run(player.play(track(1)))
    calls = list(device.calls)
    player.add_to_queue(track(2))
    assert player.state.current_song.id == 1
    assert [t.id for t in player.state.queue] == [2]
    assert device.calls == calls


def test_clear_queue_empties_and_resets_index(player):
    run(player.play(track(9)))
    for n in (1, 2, 3):
        player.add_to_queue(track(n))
    player.state.queue_index = 2

    player.add_to_queue(track(4))
    player.clear_queue()

    assert player.state.queue == []
    assert player.state.queue_index == 0
    assert player.state.current_song.id == 9


def test_status_callback_reconciles_state(player):
    run(player.play(track(1, duration=200)))
    status = PlaybackStatus(position_seconds=12.0, duration_seconds=199.5, is_playing=False)

    run(player.handle_status(status))

    assert player.state.position == 12.0
    assert player.state.duration == 199.5
    assert player.state.is_playing is False
    assert player.state.confirmed == status


def test_status_is_ignored_without_current_song(player):
    run(player.handle_status(PlaybackStatus(5, 10, True)))
    assert player.state.position == 0
    assert player.state.confirmed is None


def test_finished_song_auto_advances(player, device):
    for n in (1, 2):
        player.add_to_queue(track(n))
    run(player.play(player.state.queue[0]))

    run(player.handle_status(PlaybackStatus(180, 180, False, did_finish=True)))

    assert player.state.current_song.id == 2
    assert player.state.queue_index == 1
    assert device.calls[-2:] == [("load", "https://youtu.be/t2"), ("play",)]


def test_user_pause_does_not_advance(player):
    for n in (1, 2):
        player.add_to_queue(track(n))
    run(player.play(player.state.queue[0]))

    run(player.handle_status(PlaybackStatus(30, 180, False, did_finish=False)))

    assert player.state.current_song.id == 1


def test_newer_play_supersedes_inflight_load():
    class SlowDevice(FakeDevice):
        def __init__(self):
            super().__init__()
            self.gate = None

        async def load(self, locator):
            await self._record("load", locator)
            if locator.endswith("t1"):
                await self.gate.wait()

    async def scenario():
        device = SlowDevice()
        device.gate = asyncio.Event()
        player = PlaybackController(device)

        first = asyncio.create_task(player.play(track(1)))
        await asyncio.sleep(0)
        await player.play(track(2))
        device.gate.set()
        await first
        return player, device

    player, device = run(scenario())

    assert player.state.current_song.id == 2
    assert device.calls == [
        ("load", "https://youtu.be/t1"),
        ("load", "https://youtu.be/t2"),
        ("play",),
    ]


def test_track_from_song_schema(db, make_vtuber, make_song):
    from vtmusic.db import schemas as s

    song = make_song(make_vtuber("AZKi"), title="千本桜 (Cover)", duration=241)
    t = Track.from_song(s.Song.model_validate(song))

    assert (t.id, t.title, t.duration, t.vtuber_name) == (song.id, "千本桜 (Cover)", 241, "AZKi")


def test_pause_during_load_is_not_overridden():
    class SlowDevice(FakeDevice):
        def __init__(self):
            super().__init__()
            self.gate = None

        async def load(self, locator):
            await self._record("load", locator)
            await self.gate.wait()

    async def scenario():
        device = SlowDevice()
        device.gate = asyncio.Event()
        player = PlaybackController(device)

        loading = asyncio.create_task(player.play(track(1)))
        await asyncio.sleep(0)
        await player.pause()
        device.gate.set()
        await loading
        return player, device

    player, device = run(scenario())

    assert player.state.is_playing is False
    assert device.calls == [("load", "https://youtu.be/t1"), ("pause",)]


def test_late_finish_from_replaced_song_does_not_advance(player, device):
    for n in (1, 2, 3):
        player.add_to_queue(track(n))
    run(player.play(player.state.queue[0]))
    run(player.play_next())

    stale = PlaybackStatus(180, 180, False, did_finish=True, locator="https://youtu.be/t1")
    run(player.handle_status(stale))

    assert player.state.current_song.id == 2
    assert player.state.queue_index == 1
    assert player.state.confirmed is None


def test_status_for_current_locator_is_applied(player):
    run(player.play(track(1)))
    status = PlaybackStatus(3.0, 180, True, locator="https://youtu.be/t1")
    run(player.handle_status(status))
    assert player.state.confirmed == status
