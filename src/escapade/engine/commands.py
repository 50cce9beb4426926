"""Command parsing and read-only presentation queries.

handle_command(dispatcher, raw_input) -> CommandResult is the main entry
point. It tokenizes the line and routes it to the dispatcher through a
verb table. `look`, unknown verbs and malformed commands are answered
here without reaching the dispatcher, so they never cost a turn.
"""

from collections.abc import Callable

from .dispatcher import CommandDispatcher, CommandResult
from .selectors import parse_selector
from .state import (
    CARRIED,
    GameState,
    WorldDataError,
    characters_at,
    connections_from,
    get_character,
    get_location,
    get_object,
    objects_in,
)
from .world import Game

USAGE = (
    "Type: go <label> | pickup <id> | drop <id> | inv | ex <id> | "
    "use <id|@attr> [with <id|@attr>] | talk <charId> | give <objId> <charId> | look"
)


def _usage(text: str) -> CommandResult:
    return CommandResult.fail(f"Usage: {text}")


def _cmd_go(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    if not args:
        return _usage("go <label>")
    return dispatcher.go(" ".join(args))


def _cmd_pickup(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    if not args:
        return _usage("pickup <id>")
    return dispatcher.pick_up(args[0])


def _cmd_drop(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    if not args:
        return _usage("drop <id>")
    return dispatcher.drop(args[0])


def _cmd_inventory(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    return dispatcher.inventory()


def _cmd_examine(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    """Examine an object, or a character if no object has that id."""
    if not args:
        return _usage("ex <id>")
    target = args[0]
    if target not in dispatcher.game.objects and target in dispatcher.game.characters:
        return dispatcher.examine_character(target)
    return dispatcher.examine_object(target)


def _cmd_talk(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    if not args:
        return _usage("talk <charId>")
    return dispatcher.talk(args[0])


def _cmd_give(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    if len(args) < 2:
        return _usage("give <objId> <charId>")
    return dispatcher.give(args[0], args[1])


def _cmd_use(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    if not args:
        return _usage("use <id|@attr> [with <id|@attr>]")
    primary = parse_selector(args[0])
    secondary = None
    if len(args) >= 3 and args[1].lower() == "with":
        secondary = parse_selector(args[2])
    return dispatcher.use(primary, secondary)


def _cmd_look(dispatcher: CommandDispatcher, args: list[str]) -> CommandResult:
    return CommandResult.ok(describe_location(dispatcher.game, dispatcher.state))


_VERB_DISPATCH: dict[str, Callable[[CommandDispatcher, list[str]], CommandResult]] = {
    **dict.fromkeys(("go", "walk"), _cmd_go),
    **dict.fromkeys(("pickup", "take", "get"), _cmd_pickup),
    "drop": _cmd_drop,
    **dict.fromkeys(("inv", "i", "inventory"), _cmd_inventory),
    **dict.fromkeys(("ex", "x", "examine"), _cmd_examine),
    "talk": _cmd_talk,
    "give": _cmd_give,
    "use": _cmd_use,
    **dict.fromkeys(("look", "l"), _cmd_look),
}


def handle_command(dispatcher: CommandDispatcher, raw_input: str) -> CommandResult:
    """Process one command line and return its result."""
    words = raw_input.strip().split()
    if not words:
        return CommandResult.fail("I beg your pardon?")

    handler = _VERB_DISPATCH.get(words[0].lower())
    if handler is None:
        return CommandResult.fail("Unknown command.")

    try:
        return handler(dispatcher, words[1:])
    except WorldDataError as exc:
        return CommandResult.fail(f"Error: {exc}")


# --- Presentation queries ---------------------------------------------------


def get_exits(game: Game, state: GameState) -> list[str]:
    """Exit labels of the current location, unlocked ones last."""
    return [c.label for c in connections_from(game, state, state.current_location_id)]


def get_visible_objects(game: Game, state: GameState) -> list[str]:
    """Names and ids of objects lying in the current location."""
    return [
        f"{get_object(game, obj_id).name} ({obj_id})"
        for obj_id in objects_in(state, state.current_location_id)
    ]


def get_visible_characters(game: Game, state: GameState) -> list[str]:
    return [
        f"{get_character(game, char_id).name} ({char_id})"
        for char_id in characters_at(state, state.current_location_id)
    ]


def get_inventory(game: Game, state: GameState) -> list[str]:
    return [
        f"{get_object(game, obj_id).name} ({obj_id})"
        for obj_id in objects_in(state, CARRIED)
    ]


def describe_location(game: Game, state: GameState) -> str:
    """Describe the current location with its exits and contents."""
    location = get_location(game, state.current_location_id)
    lines = [f"== {location.name} ==", location.description]
    if exits := get_exits(game, state):
        lines.append("Connections: " + ", ".join(exits))
    if objects := get_visible_objects(game, state):
        lines.append("Here: " + ", ".join(objects))
    if characters := get_visible_characters(game, state):
        lines.append("You see: " + ", ".join(characters))
    return "\n".join(lines)
