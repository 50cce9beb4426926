"""Immutable data structures for the game world.

These are loaded once from a world file at startup and shared across all
players. Nothing here changes during play: where objects and characters
currently are lives in GameState.
"""

from dataclasses import dataclass, field

from .selectors import Selector


@dataclass(frozen=True)
class Connection:
    """A labelled exit from one location to another."""

    label: str
    target_location_id: str


@dataclass(frozen=True)
class Location:
    """A place in the world with its starting contents."""

    id: str
    name: str
    description: str = ""
    image: str | None = None
    object_ids: tuple[str, ...] = ()
    character_ids: tuple[str, ...] = ()
    connections: tuple[Connection, ...] = ()


@dataclass(frozen=True)
class GameObject:
    """An object that can be seen, carried, used or given."""

    id: str
    name: str
    description: str = ""
    can_pick_up: bool = False
    attributes: frozenset[str] = frozenset()
    contained_object_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Want:
    """Something a character accepts: a specific object or any with an attribute."""

    object_id: str | None = None
    attribute: str | None = None


@dataclass(frozen=True)
class GameCharacter:
    """A non-pickup entity you can talk to and give items to."""

    id: str
    name: str
    description: str = ""
    phrases: tuple[str, ...] = ()
    wants: tuple[Want, ...] = ()


@dataclass(frozen=True)
class Unlock:
    """A connection appended to a location when a rule fires."""

    location_id: str
    connection: Connection


@dataclass(frozen=True)
class UseRule:
    """Using primary (optionally with a second operand) transforms the world."""

    primary: Selector
    with_: Selector | None = None
    result_text: str = ""
    produced_object_ids: tuple[str, ...] = ()
    unlocks: tuple[Unlock, ...] = ()


@dataclass(frozen=True)
class MiniGameRule:
    """Using primary (optionally with a second operand) launches a minigame."""

    primary: Selector
    with_: Selector | None = None
    minigame_id: str = ""
    reward_object_ids: tuple[str, ...] = ()
    success_text: str = ""
    failure_text: str = ""


@dataclass(frozen=True)
class GiveRule:
    """Giving a matching object to a character rewards the player."""

    character_id: str
    given: Selector
    result_text: str = ""
    objects_to_player: tuple[str, ...] = ()
    ends_game: bool = False


@dataclass(frozen=True)
class Game:
    """The complete world definition plus its interaction rules."""

    title: str
    start_message: str
    start_location_id: str
    end_location_ids: frozenset[str] = frozenset()
    turn_limit: int | None = None
    locations: dict[str, Location] = field(default_factory=dict)
    objects: dict[str, GameObject] = field(default_factory=dict)
    characters: dict[str, GameCharacter] = field(default_factory=dict)
    use_rules: tuple[UseRule, ...] = ()
    give_rules: tuple[GiveRule, ...] = ()
    minigame_rules: tuple[MiniGameRule, ...] = ()

    @property
    def interaction_rules(self) -> tuple[UseRule | MiniGameRule, ...]:
        """Every rule `use` may fire, static transformations first."""
        return self.use_rules + self.minigame_rules
