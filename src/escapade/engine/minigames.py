"""Pluggable minigames launched by MiniGameRules.

A minigame is a blocking procedure: `play(game, state)` returns only when
the challenge is won or lost. It may read the world for context but never
moves objects or advances turns itself; the dispatcher applies the result.
"""

import queue
import random
import re
from dataclasses import dataclass, field
from typing import Protocol

from .state import GameState
from .world import Game


@dataclass(frozen=True)
class MiniGameResult:
    success: bool
    message: str
    produced_object_ids: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, message: str, produced_object_ids=()) -> "MiniGameResult":
        return cls(True, message, tuple(produced_object_ids))

    @classmethod
    def fail(cls, message: str) -> "MiniGameResult":
        return cls(False, message)


class MiniGame(Protocol):
    id: str

    def play(self, game: Game, state: GameState) -> MiniGameResult: ...


class MiniGameRegistry:
    """Lookup table of minigame implementations by id."""

    def __init__(self, minigames=()):
        self._minigames: dict[str, MiniGame] = {}
        for minigame in minigames:
            self.register(minigame)

    def register(self, minigame: MiniGame) -> None:
        self._minigames[minigame.id] = minigame

    def get(self, minigame_id: str) -> MiniGame | None:
        return self._minigames.get(minigame_id)

    def __contains__(self, minigame_id: object) -> bool:
        return minigame_id in self._minigames

    def __len__(self) -> int:
        return len(self._minigames)


# --- Input/output -----------------------------------------------------------


class MiniGameIO(Protocol):
    """How an interactive minigame talks to the player."""

    def ask(self, prompt: str) -> str: ...

    def tell(self, text: str) -> None: ...


class ConsoleIO:
    """Talk to the player on the terminal."""

    def ask(self, prompt: str) -> str:
        return input(prompt)

    def tell(self, text: str) -> None:
        print(text)


class ScriptedIO:
    """Feed canned answers; collects everything the minigame says."""

    def __init__(self, answers):
        self._answers = iter(answers)
        self.transcript: list[str] = []

    def ask(self, prompt: str) -> str:
        self.transcript.append(prompt)
        try:
            return next(self._answers)
        except StopIteration:
            raise EOFError("no more scripted answers") from None

    def tell(self, text: str) -> None:
        self.transcript.append(text)


@dataclass(frozen=True)
class Prompt:
    """A minigame is waiting for an answer."""

    text: str
    transcript: tuple[str, ...] = ()


class ThreadedIO:
    """Rendezvous between a minigame on a worker thread and request handlers.

    The worker blocks in ask() until a handler calls answer(). Lines passed
    to tell() are buffered and handed over with the next prompt, or left
    for drain() once the command finishes. The worker calls finish() when
    its command is done so a waiting handler wakes up.
    """

    def __init__(self):
        self._events: queue.Queue[Prompt | None] = queue.Queue()
        self._answers: queue.Queue[str | None] = queue.Queue()
        self._pending: list[str] = []

    # Worker side

    def ask(self, prompt: str) -> str:
        self._events.put(Prompt(prompt, tuple(self._pending)))
        self._pending = []
        answer = self._answers.get()
        if answer is None:
            raise EOFError("player walked away")
        return answer

    def tell(self, text: str) -> None:
        self._pending.append(text)

    def finish(self) -> None:
        self._events.put(None)

    # Handler side

    def answer(self, text: str) -> None:
        self._answers.put(text)

    def abandon(self) -> None:
        """Make the waiting ask() give up, so the minigame resolves as lost."""
        self._answers.put(None)

    def next_prompt(self) -> Prompt | None:
        """Block until the worker asks something (a Prompt) or finishes (None)."""
        return self._events.get()

    def drain(self) -> tuple[str, ...]:
        """Lines told since the last prompt."""
        pending, self._pending = tuple(self._pending), []
        return pending


# --- Bundled minigames ------------------------------------------------------

CODE_PATTERN = re.compile(r"\d{3}")


class LockpickMiniGame:
    """Guess a 3-digit code within a number of tries.

    After each wrong guess the player learns how many digits sit in the
    right position. Malformed guesses do not cost a try.
    """

    def __init__(self, id: str, max_tries: int = 5, seed: int | None = 2212,
                 io: MiniGameIO | None = None):
        self.id = id
        self.max_tries = max_tries
        self.seed = seed
        self.io = io or ConsoleIO()

    def secret_code(self) -> str:
        rng = random.Random(self.seed)
        return str(rng.randint(100, 999))

    def play(self, game: Game, state: GameState) -> MiniGameResult:
        code = self.secret_code()
        self.io.tell(
            f"[Lockpick] Guess the 3-digit code. You have {self.max_tries} tries."
        )
        tries = 0
        while tries < self.max_tries:
            try:
                guess = self.io.ask(f"Try {tries + 1}/{self.max_tries}: ").strip()
            except EOFError:
                break
            if not CODE_PATTERN.fullmatch(guess):
                self.io.tell("Enter exactly 3 digits.")
                continue
            tries += 1
            if guess == code:
                return MiniGameResult.ok("You hear a satisfying click.")
            self.io.tell(
                f"Close... digits in correct position: {_bulls(code, guess)}"
            )
        return MiniGameResult.fail("The pick snaps. The lock holds.")


def _bulls(code: str, guess: str) -> int:
    return sum(1 for a, b in zip(code, guess) if a == b)


def default_minigames(io: MiniGameIO | None = None, lockpick_tries: int = 5) -> MiniGameRegistry:
    """Minigames the bundled world refers to."""
    return MiniGameRegistry([
        LockpickMiniGame("lockpick_crypt", lockpick_tries, io=io),
    ])
