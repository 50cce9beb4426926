"""The command dispatcher: one method per verb.

Every recognized command costs exactly one turn, whether it succeeds or
not. Successful commands append a line to the event log. Lookups run
before any mutation, so a WorldDataError leaves the state untouched.
"""

from dataclasses import dataclass

from ..logging import get_logger
from .minigames import MiniGameRegistry, MiniGameResult
from .rules import LaunchMiniGame, NoMatch, Transform, resolve_gift, resolve_interaction
from .selectors import Selector
from .state import (
    CARRIED,
    GameState,
    add_connection,
    connections_from,
    get_character,
    get_location,
    get_object,
    is_carrying,
    is_character_here,
    is_here,
    is_in_play,
    place_object,
    remove_object,
)
from .world import Game, GameObject

logger = get_logger(__name__)

END_MARKER = " [END]"


@dataclass(frozen=True)
class CommandResult:
    success: bool
    message: str

    @classmethod
    def ok(cls, message: str) -> "CommandResult":
        return cls(True, message)

    @classmethod
    def fail(cls, message: str) -> "CommandResult":
        return cls(False, message)


class CommandDispatcher:
    """Applies player commands to one playthrough.

    Not thread-safe: at most one command may be in flight per state.
    """

    def __init__(
        self,
        game: Game,
        state: GameState,
        minigames: MiniGameRegistry | None = None,
    ):
        self.game = game
        self.state = state
        self.minigames = minigames if minigames is not None else MiniGameRegistry()

    def _fail(self, message: str) -> CommandResult:
        self.state.turns += 1
        return CommandResult.fail(message)

    def _ok(self, message: str) -> CommandResult:
        self.state.turns += 1
        self.state.add_log(message)
        return CommandResult.ok(message)

    # --- Movement ---------------------------------------------------------

    def go(self, label: str) -> CommandResult:
        """Follow the exit whose label matches, ignoring case."""
        exits = connections_from(self.game, self.state, self.state.current_location_id)
        for connection in exits:
            if connection.label.lower() != label.lower():
                continue
            target = get_location(self.game, connection.target_location_id)
            self.state.current_location_id = target.id
            msg = f"You arrive at {target.name}: {target.description}"
            if target.id in self.game.end_location_ids:
                msg += END_MARKER
            logger.debug("location_changed", location=target.id)
            return self._ok(msg)
        return self._fail(f"You cannot go via '{label}'.")

    # --- Objects ----------------------------------------------------------

    def pick_up(self, obj_id: str) -> CommandResult:
        if not is_here(self.state, obj_id):
            return self._fail("You don't see that here.")
        obj = self.game.objects.get(obj_id)
        if obj is None or not obj.can_pick_up:
            return self._fail("You cannot pick that up.")
        place_object(self.state, obj_id, CARRIED)
        return self._ok(f"Picked up {obj.name}.")

    def drop(self, obj_id: str) -> CommandResult:
        if not is_carrying(self.state, obj_id):
            return self._fail("It's not in your inventory.")
        obj = get_object(self.game, obj_id)
        place_object(self.state, obj_id, self.state.current_location_id)
        return self._ok(f"Dropped {obj.name}.")

    def inventory(self) -> CommandResult:
        names = [get_object(self.game, obj_id).name for obj_id in self.state.inventory]
        return self._ok("Inventory: " + (", ".join(names) if names else "(empty)"))

    def examine_object(self, obj_id: str) -> CommandResult:
        """Describe an object and reveal what it contains.

        Contained objects land in the current location, even when the
        examined object is carried. Contents already in play (carried, or
        lying in some location) stay where they are.
        """
        if not (is_here(self.state, obj_id) or is_carrying(self.state, obj_id)):
            return self._fail("You don't have or see that.")
        obj = get_object(self.game, obj_id)
        for contained_id in obj.contained_object_ids:
            if is_in_play(self.state, contained_id):
                continue
            place_object(self.state, contained_id, self.state.current_location_id)
        return self._ok(obj.description)

    # --- Characters -------------------------------------------------------

    def examine_character(self, char_id: str) -> CommandResult:
        if not is_character_here(self.state, char_id):
            return self._fail("You don't see them here.")
        return self._ok(get_character(self.game, char_id).description)

    def talk(self, char_id: str) -> CommandResult:
        """Say the character's next phrase, cycling through them."""
        if not is_character_here(self.state, char_id):
            return self._fail("They're not here.")
        character = get_character(self.game, char_id)
        if not character.phrases:
            return self._ok("They have nothing to say.")
        cursor = self.state.talk_cursors.get(char_id, 0)
        self.state.talk_cursors[char_id] = cursor + 1
        return self._ok(character.phrases[cursor % len(character.phrases)])

    def give(self, obj_id: str, char_id: str) -> CommandResult:
        if not is_carrying(self.state, obj_id):
            return self._fail("You don't have that.")
        if not is_character_here(self.state, char_id):
            return self._fail("They're not here.")
        get_character(self.game, char_id)
        rule = resolve_gift(self.game, obj_id, char_id)
        if rule is None:
            return self._fail("They don't need that.")

        remove_object(self.state, obj_id)
        for granted_id in rule.objects_to_player:
            place_object(self.state, granted_id, CARRIED)
        msg = rule.result_text
        if rule.ends_game:
            self.state.gift_ended = True
            msg += END_MARKER
        logger.info("gift_accepted", item=obj_id, character=char_id)
        return self._ok(msg)

    # --- Use --------------------------------------------------------------

    def use(self, primary: Selector, secondary: Selector | None = None) -> CommandResult:
        """Apply the first matching use rule, or launch a minigame."""
        outcome = resolve_interaction(self.game, self.state, primary, secondary)
        match outcome:
            case Transform():
                return self._transform(outcome)
            case LaunchMiniGame():
                return self._play_minigame(outcome)
            case NoMatch():
                return self._fail("Nothing happens.")

    def _consume(self, *objects: GameObject | None) -> None:
        for obj in objects:
            if obj is not None:
                remove_object(self.state, obj.id)

    def _produce(self, obj_ids: tuple[str, ...], scope: str) -> None:
        for obj_id in obj_ids:
            place_object(self.state, obj_id, scope)

    def _transform(self, outcome: Transform) -> CommandResult:
        rule = outcome.rule
        self._consume(outcome.primary, outcome.secondary)
        self._produce(rule.produced_object_ids, outcome.scope)
        for unlock in rule.unlocks:
            add_connection(self.state, unlock.location_id, unlock.connection)
        logger.debug("use_rule_fired", primary=str(rule.primary), scope=outcome.scope)
        return self._ok(rule.result_text)

    def _play_minigame(self, outcome: LaunchMiniGame) -> CommandResult:
        rule = outcome.rule
        minigame = self.minigames.get(rule.minigame_id)
        if minigame is None:
            logger.warning("minigame_missing", minigame=rule.minigame_id)
            return self._fail(f"Mini-game not found: {rule.minigame_id}")

        logger.info("minigame_started", minigame=rule.minigame_id)
        try:
            result: MiniGameResult = minigame.play(self.game, self.state)
        except Exception as exc:
            logger.exception("minigame_error", minigame=rule.minigame_id)
            return self._fail(f"Mini-game error: {exc}")
        logger.info(
            "minigame_finished", minigame=rule.minigame_id, success=result.success,
        )

        if not result.success:
            msg = rule.failure_text or result.message
            self.state.add_log(msg)
            return self._fail(msg)

        # Characters are never consumed, only objects.
        self._consume(outcome.primary, outcome.secondary)
        rewards = result.produced_object_ids or rule.reward_object_ids
        self._produce(rewards, outcome.scope)
        return self._ok(rule.success_text or result.message)
