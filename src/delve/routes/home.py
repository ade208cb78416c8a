"""Landing, help, and about pages."""

from xitzin import Request, Xitzin

from ..engine.input import KEY_ACTIONS, KEY_DIRECTIONS


def register_routes(app: Xitzin) -> None:
    """Register home routes."""

    @app.gemini("/", name="home")
    def home(request: Request):
        return app.template("home.gmi")

    @app.gemini("/help", name="help")
    def help_page(request: Request):
        return app.template(
            "help.gmi",
            directions=sorted(KEY_DIRECTIONS.items()),
            actions=sorted(KEY_ACTIONS.items()),
        )

    @app.gemini("/about", name="about")
    def about(request: Request):
        return app.template("about.gmi")
