"""Parse a JSON world file into a Game.

Layout of the file (every list may be omitted):

    {
      "title": "...", "start_message": "...",
      "start_location": "loc_id", "end_locations": ["loc_id"], "turn_limit": 50,
      "objects": [{"id", "name", "description", "can_pick_up",
                   "attributes": [...], "contains": [...]}],
      "characters": [{"id", "name", "description", "phrases": [...],
                      "wants": [{"object": id} | {"attribute": tag}]}],
      "locations": [{"id", "name", "description", "image",
                     "objects": [...], "characters": [...],
                     "connections": [{"label", "to"}]}],
      "use_rules": [{"use", "with", "text", "produces": [...],
                     "unlocks": [{"location", "label", "to"}]}],
      "minigame_rules": [{"use", "with", "minigame", "rewards": [...],
                          "success_text", "failure_text"}],
      "give_rules": [{"character", "item", "text", "grants": [...],
                      "ends_game"}]
    }

Operands ("use", "with", "item") use command syntax: an id, or @attribute.
The whole world is validated on load; dangling references fail fast.
"""

import json
from importlib import resources
from pathlib import Path
from typing import Any

from .selectors import Selector, parse_selector
from .world import (
    Connection,
    Game,
    GameCharacter,
    GameObject,
    GiveRule,
    Location,
    MiniGameRule,
    Unlock,
    UseRule,
    Want,
)


class WorldError(ValueError):
    """The world file is malformed or refers to things that don't exist."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("invalid world:\n" + "\n".join(f"  {p}" for p in problems))


def _require(entry: dict, key: str, what: str) -> Any:
    try:
        return entry[key]
    except KeyError:
        raise WorldError([f"{what} is missing '{key}'"]) from None


def _parse_object(entry: dict) -> GameObject:
    obj_id = _require(entry, "id", "object")
    return GameObject(
        id=obj_id,
        name=entry.get("name", obj_id),
        description=entry.get("description", ""),
        can_pick_up=bool(entry.get("can_pick_up", False)),
        attributes=frozenset(entry.get("attributes", ())),
        contained_object_ids=tuple(entry.get("contains", ())),
    )


def _parse_want(entry: dict) -> Want:
    return Want(object_id=entry.get("object"), attribute=entry.get("attribute"))


def _parse_character(entry: dict) -> GameCharacter:
    char_id = _require(entry, "id", "character")
    return GameCharacter(
        id=char_id,
        name=entry.get("name", char_id),
        description=entry.get("description", ""),
        phrases=tuple(entry.get("phrases", ())),
        wants=tuple(_parse_want(w) for w in entry.get("wants", ())),
    )


def _parse_connection(entry: dict) -> Connection:
    return Connection(
        label=_require(entry, "label", "connection"),
        target_location_id=_require(entry, "to", "connection"),
    )


def _parse_location(entry: dict) -> Location:
    loc_id = _require(entry, "id", "location")
    return Location(
        id=loc_id,
        name=entry.get("name", loc_id),
        description=entry.get("description", ""),
        image=entry.get("image"),
        object_ids=tuple(entry.get("objects", ())),
        character_ids=tuple(entry.get("characters", ())),
        connections=tuple(_parse_connection(c) for c in entry.get("connections", ())),
    )


def _optional_selector(token: str | None) -> Selector | None:
    return parse_selector(token) if token else None


def _parse_use_rule(entry: dict) -> UseRule:
    unlocks = tuple(
        Unlock(
            location_id=_require(u, "location", "unlock"),
            connection=_parse_connection(u),
        )
        for u in entry.get("unlocks", ())
    )
    return UseRule(
        primary=parse_selector(_require(entry, "use", "use rule")),
        with_=_optional_selector(entry.get("with")),
        result_text=entry.get("text", ""),
        produced_object_ids=tuple(entry.get("produces", ())),
        unlocks=unlocks,
    )


def _parse_minigame_rule(entry: dict) -> MiniGameRule:
    return MiniGameRule(
        primary=parse_selector(_require(entry, "use", "minigame rule")),
        with_=_optional_selector(entry.get("with")),
        minigame_id=_require(entry, "minigame", "minigame rule"),
        reward_object_ids=tuple(entry.get("rewards", ())),
        success_text=entry.get("success_text", ""),
        failure_text=entry.get("failure_text", ""),
    )


def _parse_give_rule(entry: dict) -> GiveRule:
    return GiveRule(
        character_id=_require(entry, "character", "give rule"),
        given=parse_selector(_require(entry, "item", "give rule")),
        result_text=entry.get("text", ""),
        objects_to_player=tuple(entry.get("grants", ())),
        ends_game=bool(entry.get("ends_game", False)),
    )


def _index(entries, kind: str, problems: list[str]) -> dict:
    table = {}
    for entry in entries:
        if entry.id in table:
            problems.append(f"duplicate {kind} id '{entry.id}'")
        table[entry.id] = entry
    return table


def parse_game(data: dict) -> Game:
    """Build and validate a Game from already-decoded JSON."""
    problems: list[str] = []
    objects = _index(map(_parse_object, data.get("objects", ())), "object", problems)
    characters = _index(
        map(_parse_character, data.get("characters", ())), "character", problems,
    )
    locations = _index(
        map(_parse_location, data.get("locations", ())), "location", problems,
    )
    turn_limit = data.get("turn_limit")

    game = Game(
        title=data.get("title", "Untitled"),
        start_message=data.get("start_message", ""),
        start_location_id=_require(data, "start_location", "world"),
        end_location_ids=frozenset(data.get("end_locations", ())),
        turn_limit=int(turn_limit) if turn_limit is not None else None,
        locations=locations,
        objects=objects,
        characters=characters,
        use_rules=tuple(map(_parse_use_rule, data.get("use_rules", ()))),
        give_rules=tuple(map(_parse_give_rule, data.get("give_rules", ()))),
        minigame_rules=tuple(map(_parse_minigame_rule, data.get("minigame_rules", ()))),
    )

    problems.extend(validate_game(game))
    if problems:
        raise WorldError(problems)
    return game


def bundled_world_path() -> Path:
    """Locate the bundled sample world (works when installed in a venv)."""
    return resources.files("escapade.data").joinpath("crypt.json")


def load_game(path: Path) -> Game:
    """Read a world file and return a validated Game."""
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise WorldError([f"{path}: {exc}"]) from exc
    return parse_game(data)


# --- Validation -------------------------------------------------------------


def _check_ids(ids, table: dict, what: str, problems: list[str]) -> None:
    for ref in ids:
        if ref not in table:
            problems.append(f"{what} refers to unknown id '{ref}'")


def _check_selector(
    selector: Selector | None, tables: tuple[dict, ...], what: str, problems: list[str],
) -> None:
    if selector is None or selector.object_id is None:
        return
    if not any(selector.object_id in table for table in tables):
        problems.append(f"{what} refers to unknown id '{selector.object_id}'")


def _check_placed_once(ids, placed: dict[str, str], where: str, problems: list[str]) -> None:
    for ref in ids:
        if ref in placed:
            problems.append(f"{where} lists '{ref}', already placed in {placed[ref]}")
        else:
            placed[ref] = where


def _validate_locations(game: Game, problems: list[str]) -> None:
    placed_objects: dict[str, str] = {}
    placed_characters: dict[str, str] = {}
    for loc in game.locations.values():
        where = f"location '{loc.id}'"
        _check_placed_once(loc.object_ids, placed_objects, where, problems)
        _check_placed_once(loc.character_ids, placed_characters, where, problems)
        _check_ids(loc.object_ids, game.objects, where, problems)
        _check_ids(loc.character_ids, game.characters, where, problems)
        labels: set[str] = set()
        for connection in loc.connections:
            _check_ids(
                [connection.target_location_id], game.locations,
                f"{where} exit '{connection.label}'", problems,
            )
            label = connection.label.lower()
            if label in labels:
                problems.append(f"{where} has duplicate exit '{connection.label}'")
            labels.add(label)


def _validate_rules(game: Game, problems: list[str]) -> None:
    objects = (game.objects,)
    for n, rule in enumerate(game.use_rules, 1):
        where = f"use rule {n}"
        _check_selector(rule.primary, objects, where, problems)
        _check_selector(rule.with_, objects, where, problems)
        _check_ids(rule.produced_object_ids, game.objects, where, problems)
        for unlock in rule.unlocks:
            _check_ids(
                [unlock.location_id, unlock.connection.target_location_id],
                game.locations, where, problems,
            )

    for n, rule in enumerate(game.minigame_rules, 1):
        where = f"minigame rule {n}"
        _check_selector(rule.primary, objects, where, problems)
        _check_selector(rule.with_, (game.objects, game.characters), where, problems)
        _check_ids(rule.reward_object_ids, game.objects, where, problems)

    for n, rule in enumerate(game.give_rules, 1):
        where = f"give rule {n}"
        _check_ids([rule.character_id], game.characters, where, problems)
        _check_selector(rule.given, objects, where, problems)
        _check_ids(rule.objects_to_player, game.objects, where, problems)


def validate_game(game: Game) -> list[str]:
    """List every dangling reference in the world; empty means consistent."""
    problems: list[str] = []
    if game.start_location_id not in game.locations:
        problems.append(f"start location '{game.start_location_id}' does not exist")
    _check_ids(sorted(game.end_location_ids), game.locations, "end locations", problems)
    _validate_locations(game, problems)
    for obj in game.objects.values():
        _check_ids(obj.contained_object_ids, game.objects, f"object '{obj.id}'", problems)
    _validate_rules(game, problems)
    return problems
