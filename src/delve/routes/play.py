"""Gameplay routes."""

from contextlib import contextmanager

from xitzin import Redirect, Request, Xitzin
from xitzin.auth import get_identity, require_certificate

from ..app import get_session
from ..engine.commands import DIRECTION_DELTAS
from ..logging import bind_request_context
from ..session import DelveSession
from ..storage import get_or_create_player

GAME_OVER_MESSAGE = "The game is over. Start a new run to play again."


@contextmanager
def _game_session(request: Request):
    """Load the player's run with auto-close."""
    identity = get_identity(request)
    bind_request_context(fingerprint=identity.fingerprint)
    config = request.app.state.config
    db_session = get_session(request.app)
    try:
        player = get_or_create_player(db_session, identity.fingerprint)
        yield DelveSession.load_or_create(
            db_session, player, seed=config.seed, view_radius=config.view_radius,
        )
    finally:
        db_session.close()


def _render_play(app: Xitzin, game: DelveSession, message: str = ""):
    """Render the main play view."""
    return app.template(
        "play.gmi",
        map=game.get_map(),
        status=game.get_status(),
        floor=game.get_floor(),
        messages=game.get_messages(),
        message=message,
        directions=list(DIRECTION_DELTAS),
        game_over=game.state.game_over,
    )


def _register_action_routes(app: Xitzin) -> None:
    """Register movement and action routes."""

    @app.gemini("/play", name="play")
    @require_certificate
    def play(request: Request):
        """Main game view."""
        with _game_session(request) as game:
            game.save()
            return _render_play(app, game)

    @app.gemini("/go/{direction}", name="go")
    @require_certificate
    def go(request: Request, direction: str):
        """Move or bump-attack in one of eight directions."""
        with _game_session(request) as game:
            if game.state.game_over:
                return _render_play(app, game, message=GAME_OVER_MESSAGE)
            if direction not in DIRECTION_DELTAS:
                return _render_play(app, game, message="You can't go that way.")
            game.move(direction)
            game.save()
            return _render_play(app, game)

    @app.input("/key", prompt="Key (wasd/1-9 move, e pick up, < > stairs):", name="key")
    @require_certificate
    def key(request: Request, query: str):
        """Freeform key entry, mapped through the key bindings."""
        with _game_session(request) as game:
            if game.state.game_over:
                return _render_play(app, game, message=GAME_OVER_MESSAGE)
            pressed = query.strip() or " "
            if pressed in ("i", "I"):
                return Redirect("/inventory")
            game.press(pressed)
            game.save()
            return _render_play(app, game)

    @app.gemini("/wait", name="wait")
    @require_certificate
    def wait(request: Request):
        with _game_session(request) as game:
            game.wait()
            game.save()
            return _render_play(app, game)

    @app.gemini("/pickup", name="pickup")
    @require_certificate
    def pickup(request: Request):
        with _game_session(request) as game:
            if not game.pickup():
                return _render_play(app, game, message="There is nothing here.")
            game.save()
            return _render_play(app, game)

    @app.gemini("/interact", name="interact")
    @require_certificate
    def interact(request: Request):
        """Pick up, or take the stairs, whatever is underfoot."""
        with _game_session(request) as game:
            game.interact()
            game.save()
            return _render_play(app, game)

    @app.gemini("/stairs/{direction}", name="stairs")
    @require_certificate
    def stairs(request: Request, direction: str):
        with _game_session(request) as game:
            if not game.stairs(direction):
                return _render_play(
                    app, game, message=f"You can't go {direction} from here.",
                )
            game.save()
            return _render_play(app, game)


def _register_inventory_routes(app: Xitzin) -> None:
    """Register inventory and game management routes."""

    @app.gemini("/inventory", name="inventory")
    @require_certificate
    def inventory(request: Request):
        """List carried items with links to use them."""
        with _game_session(request) as game:
            return app.template(
                "inventory.gmi",
                items=game.get_inventory(),
                status=game.get_status(),
            )

    @app.gemini("/use/{item_id}", name="use")
    @require_certificate
    def use(request: Request, item_id: str):
        with _game_session(request) as game:
            if game.state.game_over:
                return _render_play(app, game, message=GAME_OVER_MESSAGE)
            if not game.use(item_id):
                return _render_play(app, game, message="You don't have that.")
            game.save()
            return _render_play(app, game)

    @app.input(
        "/new",
        prompt="Abandon this run and start over? Type YES to confirm:",
        name="new_game",
    )
    @require_certificate
    def new_game(request: Request, query: str):
        """Reset the run with confirmation."""
        with _game_session(request) as game:
            if query.strip().upper() == "YES":
                game.reset()
                game.save()
                return _render_play(app, game, message="A new descent begins!")
            return Redirect("/play")


def register_routes(app: Xitzin) -> None:
    """Register gameplay routes."""
    _register_action_routes(app)
    _register_inventory_routes(app)
