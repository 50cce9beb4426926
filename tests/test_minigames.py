"""Tests for minigames and their input/output channels."""

import threading

import pytest

from escapade.engine.minigames import (
    LockpickMiniGame,
    MiniGameRegistry,
    MiniGameResult,
    Prompt,
    ScriptedIO,
    ThreadedIO,
    default_minigames,
)


def _lockpick(answers, tries=5):
    io = ScriptedIO(answers)
    return LockpickMiniGame("lockpick", max_tries=tries, io=io), io


def _wrong_code(code: str) -> str:
    return "".join(str((int(d) + 1) % 10) for d in code)


def test_secret_code_is_reproducible():
    first = LockpickMiniGame("a").secret_code()
    assert first == LockpickMiniGame("b").secret_code()
    assert len(first) == 3
    assert 100 <= int(first) <= 999


def test_lockpick_win(small_game, state):
    code = LockpickMiniGame("lockpick").secret_code()
    minigame, io = _lockpick([code])
    result = minigame.play(small_game, state)
    assert result.success
    assert result.message == "You hear a satisfying click."
    assert io.transcript[0] == "[Lockpick] Guess the 3-digit code. You have 5 tries."
    assert io.transcript[1] == "Try 1/5: "


def test_malformed_guess_costs_no_try(small_game, state):
    code = LockpickMiniGame("lockpick").secret_code()
    minigame, io = _lockpick(["12", "abc", code], tries=1)
    assert minigame.play(small_game, state).success
    assert io.transcript.count("Enter exactly 3 digits.") == 2
    assert io.transcript.count("Try 1/1: ") == 3


def test_lockpick_loss(small_game, state):
    code = LockpickMiniGame("lockpick").secret_code()
    wrong = _wrong_code(code)
    minigame, io = _lockpick([wrong, wrong], tries=2)
    result = minigame.play(small_game, state)
    assert not result.success
    assert result.message == "The pick snaps. The lock holds."
    assert "Close... digits in correct position: 0" in io.transcript


def test_hint_counts_matching_positions(small_game, state):
    code = LockpickMiniGame("lockpick").secret_code()
    guess = code[:2] + _wrong_code(code)[2]
    minigame, io = _lockpick([guess], tries=1)
    minigame.play(small_game, state)
    assert io.transcript[-1] == "Close... digits in correct position: 2"


def test_running_out_of_input_loses(small_game, state):
    minigame, _ = _lockpick([])
    assert not minigame.play(small_game, state).success


def test_minigame_does_not_touch_state(small_game, state):
    before = dict(state.object_locations)
    minigame, _ = _lockpick([])
    minigame.play(small_game, state)
    assert state.object_locations == before
    assert state.turns == 0


def test_result_constructors():
    assert MiniGameResult.ok("yes", ["a", "b"]).produced_object_ids == ("a", "b")
    assert MiniGameResult.fail("no").produced_object_ids == ()


def test_registry():
    registry = MiniGameRegistry()
    assert len(registry) == 0
    minigame = LockpickMiniGame("lockpick")
    registry.register(minigame)
    assert "lockpick" in registry
    assert registry.get("lockpick") is minigame
    assert registry.get("duel") is None


def test_default_minigames_cover_the_bundled_world(game):
    registry = default_minigames(ScriptedIO([]))
    for rule in game.minigame_rules:
        assert rule.minigame_id in registry


def test_threaded_io_rendezvous():
    io = ThreadedIO()
    answers = []

    def worker():
        io.tell("Hello.")
        answers.append(io.ask("Name? "))
        io.tell("Bye.")
        io.finish()

    thread = threading.Thread(target=worker)
    thread.start()
    assert io.next_prompt() == Prompt("Name? ", ("Hello.",))
    io.answer("Ada")
    assert io.next_prompt() is None
    thread.join(timeout=5)
    assert answers == ["Ada"]
    assert io.drain() == ("Bye.",)
    assert io.drain() == ()


def test_threaded_io_abandon():
    io = ThreadedIO()
    errors = []

    def worker():
        try:
            io.ask("Still there? ")
        except EOFError as exc:
            errors.append(exc)
        io.finish()

    thread = threading.Thread(target=worker)
    thread.start()
    assert io.next_prompt().text == "Still there? "
    io.abandon()
    assert io.next_prompt() is None
    thread.join(timeout=5)
    assert len(errors) == 1


@pytest.mark.parametrize("tries", [1, 3])
def test_tries_are_announced(small_game, state, tries):
    minigame, io = _lockpick([], tries=tries)
    minigame.play(small_game, state)
    assert io.transcript[0].endswith(f"You have {tries} tries.")
