"""Gameplay routes."""

from contextlib import contextmanager

from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..app import get_session
from ..session import PlaySession, Reply, record_playthrough
from ..users import get_or_create_player, list_playthroughs


@contextmanager
def _game_session(request: Request):
    """Load the player and their play session, closing the database session after."""
    identity = get_identity(request)
    db_session = get_session(request.app)
    try:
        player = get_or_create_player(db_session, identity.fingerprint)
        play = request.app.state.sessions.get(identity.fingerprint)
        yield db_session, player, play
    finally:
        db_session.close()


def _render_play(app: Xitzin, play: PlaySession, message: str = ""):
    """Render the main play view."""
    return app.template(
        "play.gmi",
        title=play.game.title,
        description=play.get_room_description(),
        exits=play.get_exits(),
        message=message,
        turns=play.state.turns,
        turn_limit=play.game.turn_limit,
        is_finished=play.is_finished,
        awaiting_answer=play.pending is not None,
    )


def _after_reply(db_session, player, play: PlaySession, reply: Reply) -> str:
    if play.is_finished:
        record_playthrough(db_session, player, play)
    return reply.message


def _register_action_routes(app: Xitzin) -> None:
    """Register command and movement routes."""

    def run(request: Request, command: str):
        with _game_session(request) as (db_session, player, play):
            if play.is_finished:
                return _render_play(app, play, message="The game is over.")
            reply = play.process_command(command)
            message = _after_reply(db_session, player, play, reply)
            return _render_play(app, play, message=message)

    @app.gemini("/play", name="play")
    @require_certificate
    def play_view(request: Request):
        """Main game view."""
        with _game_session(request) as (_, _player, play):
            return _render_play(app, play, message=play.game.start_message)

    @app.gemini("/go/{label}", name="go")
    @require_certificate
    def go(request: Request, label: str):
        """Movement via clickable link."""
        return run(request, f"go {label}")

    @app.input("/cmd", prompt="What do you want to do?", name="cmd")
    @require_certificate
    def cmd(request: Request, query: str):
        """Freeform command entry."""
        return run(request, query)

    @app.gemini("/look", name="look")
    @require_certificate
    def look(request: Request):
        """Look around."""
        return run(request, "look")

    @app.input("/answer", prompt="Your answer:", name="answer")
    @require_certificate
    def answer(request: Request, query: str):
        """Answer the minigame in progress."""
        with _game_session(request) as (db_session, player, play):
            reply = play.answer(query)
            message = _after_reply(db_session, player, play, reply)
            return _render_play(app, play, message=message)


def _register_info_routes(app: Xitzin) -> None:
    """Register inventory, history, and game management routes."""

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        """Show carried items without spending a turn."""
        with _game_session(request) as (_, _player, play):
            items = play.get_inventory()
            if not items:
                message = "You're not carrying anything."
            else:
                message = "You are currently holding:\n" + "\n".join(
                    f"  {item}" for item in items
                )
            return _render_play(app, play, message=message)

    @app.gemini("/history", name="history")
    @require_certificate
    def history(request: Request):
        """Past playthroughs."""
        with _game_session(request) as (db_session, player, _play):
            return app.template(
                "history.gmi", playthroughs=list_playthroughs(db_session, player),
            )

    @app.input(
        "/new",
        prompt="Are you sure you want to start over? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset game with confirmation."""
        with _game_session(request) as (db_session, player, play):
            if query.strip().upper() != "YES":
                return Redirect("/play")
            record_playthrough(db_session, player, play)
            fresh = request.app.state.sessions.reset(player.fingerprint)
            return _render_play(
                app, fresh, message="A new adventure begins!",
            )


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_info_routes(app)
