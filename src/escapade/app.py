"""Xitzin application factory for Escapade."""

from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .engine.loader import bundled_world_path, load_game
from .logging import get_logger
from .session import SessionStore

logger = get_logger(__name__)


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    templates_dir = Path(__file__).parent / "templates"

    app = Xitzin(
        title="Escapade",
        version="0.1.0",
        templates_dir=templates_dir,
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Initialize database and load the game world."""
        SQLModel.metadata.create_all(engine)
        logger.debug("database_setup_complete")

        world_path = config.world_file or bundled_world_path()
        game = load_game(world_path)
        app.state.game = game
        app.state.sessions = SessionStore(game, lockpick_tries=config.lockpick_tries)
        logger.info(
            "world_loaded",
            title=game.title,
            locations=len(game.locations),
            objects=len(game.objects),
            characters=len(game.characters),
            rules=len(game.use_rules) + len(game.give_rules) + len(game.minigame_rules),
        )
        logger.info("startup_complete")

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app


def get_session(app: Xitzin) -> Session:
    """Get a database session from the app."""
    return Session(app.state.engine)
