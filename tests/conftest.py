"""Shared test fixtures for Escapade."""

from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from escapade.app import create_app
from escapade.config import Config
from escapade.engine.dispatcher import CommandDispatcher
from escapade.engine.loader import bundled_world_path, load_game
from escapade.engine.minigames import MiniGameRegistry
from escapade.engine.selectors import Selector
from escapade.engine.state import GameState, new_game_state
from escapade.engine.world import (
    Connection,
    Game,
    GameCharacter,
    GameObject,
    GiveRule,
    Location,
    MiniGameRule,
    UseRule,
)
from escapade.models import Player


@pytest.fixture
def game() -> Game:
    return load_game(bundled_world_path())


def _obj(obj_id: str, *attributes: str, pick: bool = False, contains=()) -> GameObject:
    return GameObject(
        id=obj_id,
        name=obj_id.replace("_", " ").title(),
        description=f"It is a {obj_id}.",
        can_pick_up=pick,
        attributes=frozenset(attributes),
        contained_object_ids=tuple(contains),
    )


@pytest.fixture
def small_game() -> Game:
    """A two-room world exercising every rule kind."""
    objects = [
        _obj("pole", "long", pick=True),
        _obj("rope", "long", pick=True),
        _obj("coffin"),
        _obj("passage"),
        _obj("lockpicks", "lockpick", pick=True),
        _obj("locked_chest"),
        _obj("open_chest"),
        _obj("box", pick=True, contains=("coin",)),
        _obj("coin", "shiny", pick=True),
        _obj("cup_water", "drink", pick=True),
        _obj("brass_key", "key", pick=True),
        _obj("crown", pick=True),
        _obj("statue"),
    ]
    characters = [
        GameCharacter("patient", "Patient", "Parched and weak.",
                      phrases=("I'm so thirsty...", "Do you have water?")),
        GameCharacter("guard", "Guard", "Stern.", phrases=("Halt!", "Move along.", "...")),
        GameCharacter("mute", "Mute", "Says nothing."),
        GameCharacter("king", "King", "Wants his crown."),
    ]
    locations = [
        Location(
            "A", "Hall", "A long hall.",
            object_ids=("pole", "coffin", "lockpicks", "locked_chest", "box"),
            character_ids=("patient", "guard", "mute"),
            connections=(Connection("north", "B"), Connection("Out Door", "END")),
        ),
        Location(
            "B", "Cellar", "Damp and dark.",
            object_ids=("rope", "statue"),
            character_ids=("king",),
            connections=(Connection("south", "A"),),
        ),
        Location("END", "Outside", "Fresh air."),
    ]
    return Game(
        title="Test World",
        start_message="Welcome.",
        start_location_id="A",
        end_location_ids=frozenset({"END"}),
        turn_limit=20,
        locations={loc.id: loc for loc in locations},
        objects={obj.id: obj for obj in objects},
        characters={ch.id: ch for ch in characters},
        use_rules=(
            UseRule(Selector.by_attribute("long"), Selector.by_id("coffin"),
                    "You pry open the coffin.", ("passage",)),
            UseRule(Selector.by_id("coin"), None, "You flip the coin.", ()),
        ),
        give_rules=(
            GiveRule("patient", Selector.by_id("cup_water"),
                     "Thank you. Take this key.", ("brass_key",)),
            GiveRule("king", Selector.by_id("crown"), "The king is restored.",
                     (), ends_game=True),
            GiveRule("guard", Selector.by_attribute("shiny"), "The guard pockets it.", ()),
        ),
        minigame_rules=(
            MiniGameRule(Selector.by_id("lockpicks"), Selector.by_id("locked_chest"),
                         "lockpick", ("open_chest",)),
            MiniGameRule(Selector.by_attribute("lockpick"), Selector.by_id("guard"),
                         "duel", ("crown",), "You outfence the guard.", "The guard wins."),
        ),
    )


@pytest.fixture
def state(small_game: Game) -> GameState:
    return new_game_state(small_game)


@pytest.fixture
def dispatcher(small_game: Game, state: GameState) -> CommandDispatcher:
    return CommandDispatcher(small_game, state, MiniGameRegistry())


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_player(db_session: Session) -> Player:
    player = Player(fingerprint="test-fingerprint-abc123")
    db_session.add(player)
    db_session.commit()
    db_session.refresh(player)
    return player


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db")


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any logging configuration a test applied (e.g. via console.main)."""
    import structlog

    yield
    structlog.reset_defaults()
