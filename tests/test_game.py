import numpy as np
import pytest

from motioncatch.audio import AudioSynthesizer
from motioncatch.config import GameConfig
from motioncatch.game import Game, Quit, SelectPreset, StartGame, TogglePause
from motioncatch.types import FlashKind, Note

from conftest import FakeOutput, ScriptedSensor

SMALL = (120, 160, 3)  # detection resolution, so frames are used as-is


def _frame(value):
    return np.full(SMALL, value, dtype=np.uint8)


def _game(sensor=None, output=None, seed=0):
    output = output or FakeOutput()
    rng = np.random.default_rng(seed)
    synth = AudioSynthesizer(output, rng=rng)
    return Game(GameConfig(), sensor=sensor, synthesizer=synth, rng=rng), output


def test_nothing_happens_before_start():
    game, _ = _game()
    assert game.tick(0) is None
    assert game.snapshot().notes == ()


def test_tick_spawns_and_moves_notes():
    game, _ = _game()
    game.handle_input(StartGame(), 0)
    result = game.tick(0)
    assert len(result.snapshot.notes) == 1
    note = result.snapshot.notes[0]
    assert note.y == pytest.approx(-25 + 2.0)

    game.tick(16)
    assert game.snapshot().notes[0].y == pytest.approx(-25 + 4.0)


def test_catch_with_real_frames_through_the_sensor():
    game, output = _game()
    game.start(0)

    first = game.tick(0, _frame(0))
    assert first.catches == []  # only one frame so far

    second = game.tick(16, _frame(255))
    assert len(second.catches) == 1
    assert second.catches[0].combo == 1
    assert second.snapshot.score == 1
    assert second.snapshot.notes == ()
    assert len(output.played) == 2  # strike + burst
    assert len(second.snapshot.particles) == 12
    assert [t.text for t in second.snapshot.texts] == ["+1"]


def test_a_tick_without_a_new_frame_reports_no_motion():
    game, output = _game()
    game.start(0)
    game.tick(0, _frame(0))
    assert len(game.tick(16, _frame(255)).catches) == 1

    # next note spawns at 1500 ms; no capture arrived since the last movement
    result = game.tick(1600)
    assert result.catches == []
    assert len(result.snapshot.notes) == 1
    assert result.snapshot.score == 1
    assert len(output.played) == 2


def test_scripted_sensor_sees_every_tick_frame():
    sensor = ScriptedSensor()
    game, _ = _game(sensor=sensor)
    game.start(0)
    frame = _frame(7)
    game.tick(0, frame)
    game.tick(16)
    assert sensor.frames[0] is frame
    assert sensor.frames[1] is None


def test_no_catches_when_the_camera_is_unavailable():
    game, output = _game()
    game.handle_input(StartGame(camera_ok=False), 0)
    assert not game.sensor.enabled
    for i, v in enumerate([0, 255, 0, 255]):
        result = game.tick(i * 16, _frame(v))
        assert result.catches == []
    assert output.played == []

    # restarting with a working camera re-enables sensing
    game.handle_input(StartGame(camera_ok=True), 100)
    assert game.sensor.enabled


def test_high_combo_catch_triggers_a_flash_and_bigger_burst():
    game, _ = _game(sensor=ScriptedSensor(lambda x, y, r: True))
    game.start(0)
    game.state.playfield.combo_state.combo = 5
    result = game.tick(0)
    assert result.catches[0].combo == 6
    assert result.snapshot.flash_kind == FlashKind.DIM
    assert result.snapshot.flash_alpha == pytest.approx(0.2)
    assert len(result.snapshot.particles) == 30
    assert result.snapshot.texts[0].text == "+6 Combo!"


def test_effects_decay_on_following_ticks():
    hits = {"on": True}
    game, _ = _game(sensor=ScriptedSensor(lambda x, y, r: hits["on"]))
    game.start(0)
    game.state.playfield.combo_state.combo = 9
    game.tick(0)
    hits["on"] = False
    snap = game.tick(16).snapshot
    assert snap.flash_alpha == pytest.approx(0.35)
    assert all(p.life == pytest.approx(0.98) for p in snap.particles)


def test_miss_reports_combo_change():
    game, _ = _game(sensor=ScriptedSensor())
    game.start(0)
    game.state.playfield.combo_state.combo = 4
    game.state.playfield.add(
        Note(x=100, y=625, radius=25, fall_speed=2.0, color=(0, 0, 0), shape="circle", born_at=0)
    )
    result = game.tick(0)
    assert result.combo_changed is not None
    assert result.snapshot.combo == 0


def test_pause_stops_ticks_and_resume_shifts_the_clocks():
    game, _ = _game()
    game.start(0)
    game.tick(0)  # first spawn at t=0
    game.handle_input(TogglePause(), 1000)
    assert game.paused
    assert game.tick(2000) is None
    assert game.tick(9000) is None

    game.handle_input(TogglePause(), 6000)  # paused for 5000 ms
    assert not game.paused
    assert game.state.difficulty.last_step_at == 5000
    assert game.state.playfield.last_spawn_at == 5000

    # 1500 ms of active play since the last spawn only at t=6500
    assert len(game.tick(6499).snapshot.notes) == 1
    assert len(game.tick(6500).snapshot.notes) == 2


def test_difficulty_runs_on_active_time_only():
    game, _ = _game()
    game.start(0)
    game.pause(4000)
    game.resume(24000)
    assert game.tick(24000 + 5999).difficulty_stepped is False
    assert game.tick(24000 + 6000).difficulty_stepped is True


def test_difficulty_progress_reaches_the_synthesizer():
    game, _ = _game()
    game.start(0)
    for i in range(1, 31):
        game.tick(i * 10000)
    assert game.synthesizer.progress == pytest.approx(game.state.difficulty.progress)
    assert game.synthesizer.progress > 0


def test_pause_before_start_is_ignored():
    game, _ = _game()
    game.handle_input(TogglePause(), 0)
    assert not game.paused


def test_select_preset_previews_known_presets_only():
    game, output = _game()
    game.handle_input(SelectPreset("chime"), 0)
    assert game.synthesizer.preset_name == "chime"
    assert len(output.played) == 1

    game.handle_input(SelectPreset("kazoo"), 0)
    assert game.synthesizer.preset_name == "chime"
    assert len(output.played) == 1
    assert game.snapshot().preset == "chime"


def test_quit_stops_the_game():
    game, _ = _game()
    game.start(0)
    assert game.running
    game.handle_input(Quit(), 10)
    assert not game.running
    assert game.tick(20) is None


def test_unknown_input_is_rejected():
    game, _ = _game()
    with pytest.raises(TypeError):
        game.handle_input("jump", 0)


def test_snapshot_is_detached_from_game_state():
    game, _ = _game()
    game.start(0)
    snap = game.tick(0).snapshot
    snap.notes[0].y = 9999
    assert game.snapshot().notes[0].y != 9999


def test_start_resets_score_and_notes():
    game, _ = _game(sensor=ScriptedSensor(lambda x, y, r: True))
    game.start(0)
    game.tick(0)
    assert game.snapshot().score == 1
    game.start(100)
    snap = game.snapshot()
    assert snap.score == 0
    assert snap.notes == ()
    assert snap.particles == ()


def test_game_without_audio_still_plays():
    game = Game(GameConfig(), sensor=ScriptedSensor(lambda x, y, r: True), rng=np.random.default_rng(0))
    game.start(0)
    result = game.tick(0)
    assert result.catches[0].combo == 1
    assert result.snapshot.preset == "marimba"
