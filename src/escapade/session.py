"""Session layer bridging the game engine, minigames and the database.

Play sessions live in memory, one per player. Each session runs its
commands on its own single worker thread so a minigame can block waiting for the player's next answer while
the request that started it returns. Until that minigame resolves, the
session accepts answers but no new commands.
"""

import datetime as dt
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from sqlmodel import Session

from .engine.commands import (
    describe_location,
    get_exits,
    get_inventory,
    get_visible_characters,
    get_visible_objects,
    handle_command,
)
from .engine.dispatcher import CommandDispatcher, CommandResult
from .engine.minigames import MiniGameRegistry, Prompt, ThreadedIO, default_minigames
from .engine.state import GameState, is_game_over, new_game_state
from .engine.world import Game
from .logging import get_logger
from .models import Player, Playthrough

logger = get_logger(__name__)


@dataclass(frozen=True)
class Reply:
    """What a command produced: a result, or a question from a minigame."""

    message: str
    success: bool = True
    prompt: Prompt | None = None

    @property
    def awaiting_answer(self) -> bool:
        return self.prompt is not None


def outcome_of(game: Game, state: GameState) -> str:
    if state.current_location_id in game.end_location_ids:
        return "escaped"
    if game.turn_limit is not None and state.turns >= game.turn_limit:
        return "out_of_time"
    if state.gift_ended:
        return "ended"
    return "abandoned"


class PlaySession:
    """One playthrough: state, dispatcher and the pending minigame, if any."""

    def __init__(
        self,
        game: Game,
        lockpick_tries: int = 5,
        minigames: MiniGameRegistry | None = None,
    ):
        self.game = game
        # A pending minigame blocks only this session's worker.
        self.executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="escapade-play",
        )
        self.io = ThreadedIO()
        self.state = new_game_state(game)
        self.dispatcher = CommandDispatcher(
            game,
            self.state,
            minigames if minigames is not None else default_minigames(self.io, lockpick_tries),
        )
        self.started_at = dt.datetime.now(dt.UTC)
        self.pending: Future | None = None
        self.recorded = False
        self._lock = threading.Lock()

    @property
    def is_finished(self) -> bool:
        return is_game_over(self.game, self.state)

    def _run(self, raw_input: str) -> CommandResult:
        try:
            return handle_command(self.dispatcher, raw_input)
        finally:
            self.io.finish()

    def _wait(self, future: Future) -> Reply:
        """Block until the command asks a question or completes."""
        prompt = self.io.next_prompt()
        if prompt is not None:
            self.pending = future
            lines = [*prompt.transcript, prompt.text]
            return Reply("\n".join(lines), prompt=prompt)

        self.pending = None
        result = future.result()
        lines = [*self.io.drain(), result.message]
        return Reply("\n".join(lines), success=result.success)

    def process_command(self, raw_input: str) -> Reply:
        """Run a command line."""
        with self._lock:
            if self.pending is not None:
                return Reply("Finish the current challenge first.", success=False)
            future = self.executor.submit(self._run, raw_input)
            reply = self._wait(future)
        logger.debug(
            "command_processed",
            command=raw_input,
            success=reply.success,
            turns=self.state.turns,
        )
        return reply

    def answer(self, text: str) -> Reply:
        """Hand the player's answer to the waiting minigame."""
        with self._lock:
            if self.pending is None:
                return Reply("Nothing is waiting for an answer.", success=False)
            self.io.answer(text)
            return self._wait(self.pending)

    def abandon(self) -> None:
        """Resolve a waiting minigame as lost so its worker thread exits."""
        with self._lock:
            if self.pending is not None:
                self.io.abandon()
                self._wait(self.pending)

    def close(self) -> None:
        """Abandon any waiting minigame and stop the worker thread."""
        self.abandon()
        self.executor.shutdown(wait=True)

    # Read-only views for the presentation layer

    def get_room_description(self) -> str:
        return describe_location(self.game, self.state)

    def get_exits(self) -> list[str]:
        return get_exits(self.game, self.state)

    def get_visible_objects(self) -> list[str]:
        return get_visible_objects(self.game, self.state)

    def get_visible_characters(self) -> list[str]:
        return get_visible_characters(self.game, self.state)

    def get_inventory(self) -> list[str]:
        return get_inventory(self.game, self.state)


class SessionStore:
    """In-memory play sessions keyed by player fingerprint."""

    def __init__(self, game: Game, lockpick_tries: int = 5):
        self.game = game
        self.lockpick_tries = lockpick_tries
        self._sessions: dict[str, PlaySession] = {}
        self._lock = threading.Lock()

    def _new_session(self) -> PlaySession:
        return PlaySession(self.game, self.lockpick_tries)

    def get(self, fingerprint: str) -> PlaySession:
        with self._lock:
            play = self._sessions.get(fingerprint)
            if play is None:
                play = self._sessions[fingerprint] = self._new_session()
                logger.info("new_game_started", fingerprint=fingerprint)
            return play

    def reset(self, fingerprint: str) -> PlaySession:
        """Throw away the player's current session and start over."""
        with self._lock:
            old = self._sessions.pop(fingerprint, None)
            play = self._sessions[fingerprint] = self._new_session()
        if old is not None:
            old.close()
        logger.info("game_reset", fingerprint=fingerprint)
        return play

    def shutdown(self) -> None:
        with self._lock:
            sessions, self._sessions = list(self._sessions.values()), {}
        for play in sessions:
            play.close()


def record_playthrough(db_session: Session, player: Player, play: PlaySession) -> Playthrough | None:
    """Store how a playthrough went. Each session is recorded once."""
    if play.recorded:
        return None
    record = Playthrough(
        player_id=player.id,
        title=play.game.title,
        turns=play.state.turns,
        outcome=outcome_of(play.game, play.state),
        final_location=play.state.current_location_id,
        started_at=play.started_at,
        finished_at=dt.datetime.now(dt.UTC),
    )
    db_session.add(record)
    db_session.commit()
    play.recorded = True
    logger.info(
        "playthrough_recorded",
        fingerprint=player.fingerprint,
        turns=record.turns,
        outcome=record.outcome,
    )
    return record
