"""Home, help, and about routes."""

from xitzin import Request, Xitzin

from ..engine.commands import USAGE


def register_routes(app: Xitzin) -> None:
    """Register pages that need no certificate."""

    @app.gemini("/", name="home")
    def home(request: Request):
        game = request.app.state.game
        return app.template(
            "home.gmi", title=game.title, start_message=game.start_message,
        )

    @app.gemini("/help", name="help")
    def help_page(request: Request):
        return app.template("help.gmi", usage=USAGE)

    @app.gemini("/about", name="about")
    def about(request: Request):
        return app.template("about.gmi")
