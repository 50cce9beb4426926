"""Play in a terminal.

Reads commands from stdin and prints results, checking for the end of the
game after every command. Minigames run inline on the same thread.
"""

import argparse
import sys
from pathlib import Path
from typing import TextIO

from .config import Config
from .engine.commands import USAGE, describe_location, handle_command
from .engine.dispatcher import CommandDispatcher
from .engine.loader import WorldError, bundled_world_path, load_game
from .engine.minigames import MiniGameIO, MiniGameRegistry, default_minigames
from .engine.state import new_game_state
from .engine.world import Game
from .logging import configure_logging, get_logger

logger = get_logger(__name__)

QUIT_WORDS = ("quit", "exit")


class StreamIO:
    """Minigame input/output on the console streams."""

    def __init__(self, stdin: TextIO, stdout: TextIO):
        self.stdin = stdin
        self.stdout = stdout

    def ask(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n")

    def tell(self, text: str) -> None:
        print(text, file=self.stdout)


def run_console(
    game: Game,
    minigames: MiniGameRegistry | None = None,
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
    io: MiniGameIO | None = None,
    lockpick_tries: int = 5,
) -> int:
    """Run the read-eval loop until the game ends or input runs out.

    Returns the number of turns taken.
    """
    io = io or StreamIO(stdin, stdout)
    if minigames is None:
        minigames = default_minigames(io, lockpick_tries)
    state = new_game_state(game)
    dispatcher = CommandDispatcher(game, state, minigames)

    def say(text: str) -> None:
        print(text, file=stdout)

    say(game.title)
    say(game.start_message)
    say(USAGE)
    say(describe_location(game, state))

    while True:
        stdout.write("> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            break
        line = line.strip()
        if line.lower() in QUIT_WORDS:
            break
        if not line:
            continue

        result = handle_command(dispatcher, line)
        say(result.message)

        if state.current_location_id in game.end_location_ids:
            say(f"Game ended. Turns: {state.turns}")
            break
        if game.turn_limit is not None and state.turns >= game.turn_limit:
            say(f"You ran out of time. Turns: {state.turns}/{game.turn_limit}")
            break
        if state.gift_ended:
            say(f"Game ended. Turns: {state.turns}")
            break

    say("Bye.")
    logger.info("console_session_ended", turns=state.turns)
    return state.turns


def main(argv: list[str] | None = None) -> int:
    """Entry point for the console game."""
    config = Config.from_env()
    parser = argparse.ArgumentParser(
        prog="escapade-console", description="Play an Escapade world in the terminal.",
    )
    parser.add_argument(
        "world", nargs="?", type=Path, default=config.world_file,
        help="World file (JSON); defaults to the bundled crypt",
    )
    parser.add_argument(
        "--lockpick-tries", type=int, default=config.lockpick_tries,
        help="Tries allowed in the lockpick challenge",
    )
    args = parser.parse_args(argv)

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
        stream=sys.stderr,
    )

    try:
        game = load_game(args.world or bundled_world_path())
    except (OSError, WorldError) as exc:
        print(f"Could not load world: {exc}", file=sys.stderr)
        return 1

    run_console(game, lockpick_tries=args.lockpick_tries)
    return 0
