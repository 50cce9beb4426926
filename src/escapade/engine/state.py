"""Mutable per-playthrough game state.

Holds only strings, ints and plain containers, no World references. The
world definition never changes; everything that moves during play is
recorded here instead:

- object_locations maps every placed object to exactly one container: a
  location id, CARRIED or NOWHERE. Moving an object deletes and re-inserts
  its key, so dict order is arrival order and filtering by container gives
  each location's ordered contents and the insertion-ordered inventory.
- character_locations does the same for characters.
- extra_connections holds exits unlocked during play.
"""

from collections import deque
from dataclasses import dataclass, field

from .world import Connection, Game, GameCharacter, GameObject, Location

# Special containers for objects
CARRIED = "<carried>"
NOWHERE = "<nowhere>"

LOG_CAPACITY = 200


class WorldDataError(KeyError):
    """An id referenced during play is missing from the world definition."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "missing world data"


@dataclass
class GameState:
    """All mutable per-player state."""

    current_location_id: str = ""
    object_locations: dict[str, str] = field(default_factory=dict)
    character_locations: dict[str, str] = field(default_factory=dict)
    extra_connections: dict[str, list[Connection]] = field(default_factory=dict)

    turns: int = 0
    talk_cursors: dict[str, int] = field(default_factory=dict)
    log: deque[str] = field(default_factory=lambda: deque(maxlen=LOG_CAPACITY))

    # Set when a gift rule that ends the game has fired
    gift_ended: bool = False

    @property
    def inventory(self) -> list[str]:
        """Carried object ids in the order they were picked up."""
        return objects_in(self, CARRIED)

    def add_log(self, line: str) -> None:
        self.log.append(line)


def new_game_state(game: Game) -> GameState:
    """Create a fresh game state with everything in its starting position."""
    state = GameState(current_location_id=game.start_location_id)
    for location in game.locations.values():
        for obj_id in location.object_ids:
            place_object(state, obj_id, location.id)
        for char_id in location.character_ids:
            place_character(state, char_id, location.id)
    return state


# --- Lookups --------------------------------------------------------------


def get_location(game: Game, location_id: str) -> Location:
    try:
        return game.locations[location_id]
    except KeyError:
        raise WorldDataError(f"unknown location '{location_id}'") from None


def get_object(game: Game, obj_id: str) -> GameObject:
    try:
        return game.objects[obj_id]
    except KeyError:
        raise WorldDataError(f"unknown object '{obj_id}'") from None


def get_character(game: Game, char_id: str) -> GameCharacter:
    try:
        return game.characters[char_id]
    except KeyError:
        raise WorldDataError(f"unknown character '{char_id}'") from None


def objects_in(state: GameState, container: str) -> list[str]:
    """Object ids in a container, in arrival order."""
    return [
        obj_id for obj_id, where in state.object_locations.items()
        if where == container
    ]


def characters_at(state: GameState, location_id: str) -> list[str]:
    return [
        char_id for char_id, where in state.character_locations.items()
        if where == location_id
    ]


def is_at(state: GameState, obj_id: str, container: str) -> bool:
    return state.object_locations.get(obj_id, NOWHERE) == container


def is_carrying(state: GameState, obj_id: str) -> bool:
    return is_at(state, obj_id, CARRIED)


def is_here(state: GameState, obj_id: str) -> bool:
    """Check if an object is in the current location."""
    return is_at(state, obj_id, state.current_location_id)


def is_in_play(state: GameState, obj_id: str) -> bool:
    """Carried or lying in some location."""
    return state.object_locations.get(obj_id, NOWHERE) != NOWHERE


def is_character_here(state: GameState, char_id: str) -> bool:
    return state.character_locations.get(char_id, NOWHERE) == state.current_location_id


def connections_from(game: Game, state: GameState, location_id: str) -> list[Connection]:
    """Static exits of a location followed by the ones unlocked during play."""
    location = get_location(game, location_id)
    return list(location.connections) + state.extra_connections.get(location_id, [])


# --- Mutators -------------------------------------------------------------


def place_object(state: GameState, obj_id: str, container: str) -> None:
    """Move an object into a container, leaving whatever held it before.

    Placing an object where it already is keeps its position.
    """
    if state.object_locations.get(obj_id) == container:
        return
    state.object_locations.pop(obj_id, None)
    state.object_locations[obj_id] = container


def remove_object(state: GameState, obj_id: str) -> None:
    """Take an object out of play."""
    place_object(state, obj_id, NOWHERE)


def place_character(state: GameState, char_id: str, location_id: str) -> None:
    if state.character_locations.get(char_id) == location_id:
        return
    state.character_locations.pop(char_id, None)
    state.character_locations[char_id] = location_id


def remove_character(state: GameState, char_id: str) -> None:
    place_character(state, char_id, NOWHERE)


def add_connection(state: GameState, location_id: str, connection: Connection) -> None:
    """Unlock an exit. Adding the same connection twice is a no-op."""
    extra = state.extra_connections.setdefault(location_id, [])
    if connection not in extra:
        extra.append(connection)


# --- End of game ----------------------------------------------------------


def is_game_over(game: Game, state: GameState) -> bool:
    """Check whether the session has ended.

    Callers check this after each command; the dispatcher never refuses
    to run once the game has logically ended.
    """
    if state.current_location_id in game.end_location_ids:
        return True
    if game.turn_limit is not None and state.turns >= game.turn_limit:
        return True
    return state.gift_ended
