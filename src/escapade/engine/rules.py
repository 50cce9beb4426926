"""Rule resolution for `use` and `give`.

Rule tables are ordered and first-match-wins. `use` walks one combined
table, all UseRules then all MiniGameRules, so a static transformation
always beats a minigame for the same operands.

Resolution only decides what happens; the dispatcher applies it.
"""

from dataclasses import dataclass

from .selectors import Selector
from .state import (
    CARRIED,
    GameState,
    get_object,
    is_character_here,
    is_here,
    objects_in,
)
from .world import Game, GameObject, GiveRule, MiniGameRule, UseRule


@dataclass(frozen=True)
class Transform:
    """A UseRule fired: consume the operands and produce its objects."""

    rule: UseRule
    primary: GameObject | None
    secondary: GameObject | None
    scope: str


@dataclass(frozen=True)
class LaunchMiniGame:
    """A MiniGameRule matched: run the minigame, then settle the outcome."""

    rule: MiniGameRule
    primary: GameObject | None
    secondary: GameObject | None
    scope: str


@dataclass(frozen=True)
class NoMatch:
    """No rule applies."""


Outcome = Transform | LaunchMiniGame | NoMatch


def candidate_pool(game: Game, state: GameState) -> list[GameObject]:
    """Objects an attribute operand can pick from: location first, then inventory."""
    ids = objects_in(state, state.current_location_id) + objects_in(state, CARRIED)
    return [game.objects[obj_id] for obj_id in ids if obj_id in game.objects]


def use_scope(state: GameState, primary: Selector, secondary: Selector | None) -> str:
    """Where produced objects land.

    The current location if either operand names an object lying there,
    else the inventory.
    """
    for operand in (primary, secondary):
        if operand is not None and operand.object_id is not None:
            if is_here(state, operand.object_id):
                return state.current_location_id
    return CARRIED


def _match_operand(
    game: Game,
    pool: list[GameObject],
    operand: Selector,
    required: Selector,
) -> tuple[bool, GameObject | None]:
    """Match what the player typed against what a rule requires.

    An id operand is looked up directly in the world; it does not have to
    be visible or carried. An attribute operand takes the first object in
    the pool that has the attribute and also satisfies the rule.
    """
    if operand.object_id is not None:
        obj = game.objects.get(operand.object_id)
        if obj is None:
            return False, None
        return required.matches(obj), obj
    if operand.attribute is not None:
        for candidate in pool:
            if operand.attribute in candidate.attributes and required.matches(candidate):
                return True, candidate
    return False, None


def _match_rule(
    game: Game,
    state: GameState,
    pool: list[GameObject],
    rule: UseRule | MiniGameRule,
    primary: Selector,
    secondary: Selector | None,
) -> tuple[bool, GameObject | None, GameObject | None]:
    matched, primary_obj = _match_operand(game, pool, primary, rule.primary)
    if not matched:
        return False, None, None

    if secondary is None and rule.with_ is None:
        return True, primary_obj, None
    if secondary is None or rule.with_ is None:
        return False, None, None

    matched, secondary_obj = _match_operand(game, pool, secondary, rule.with_)
    if matched:
        return True, primary_obj, secondary_obj

    # A minigame may be played against a character standing here.
    if (
        isinstance(rule, MiniGameRule)
        and secondary_obj is None
        and secondary.object_id is not None
        and is_character_here(state, secondary.object_id)
        and rule.with_.object_id == secondary.object_id
    ):
        return True, primary_obj, None
    return False, None, None


def resolve_interaction(
    game: Game,
    state: GameState,
    primary: Selector,
    secondary: Selector | None = None,
) -> Outcome:
    """Decide what `use primary [with secondary]` does."""
    scope = use_scope(state, primary, secondary)
    pool = candidate_pool(game, state)

    for rule in game.interaction_rules:
        matched, primary_obj, secondary_obj = _match_rule(
            game, state, pool, rule, primary, secondary,
        )
        if not matched:
            continue
        match rule:
            case UseRule():
                return Transform(rule, primary_obj, secondary_obj, scope)
            case MiniGameRule():
                return LaunchMiniGame(rule, primary_obj, secondary_obj, scope)
    return NoMatch()


def resolve_gift(game: Game, obj_id: str, char_id: str) -> GiveRule | None:
    """Find the first gift rule for this character that accepts the object."""
    obj = get_object(game, obj_id)
    for rule in game.give_rules:
        if rule.character_id != char_id:
            continue
        if rule.given.matches(obj):
            return rule
    return None
