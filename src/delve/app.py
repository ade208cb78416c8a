"""Xitzin application factory for Delve."""

from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine
from xitzin import Xitzin

from .config import Config
from .logging import get_logger

logger = get_logger(__name__)


def create_app(config: Config | None = None) -> Xitzin:
    """Create and configure the Xitzin application."""
    config = config or Config.from_env()

    templates_dir = Path(__file__).parent / "templates"

    app = Xitzin(
        title="Delve",
        version="0.1.0",
        templates_dir=templates_dir,
    )

    engine = create_engine(config.database_url)
    app.state.engine = engine
    app.state.config = config

    @app.on_startup
    async def startup():
        """Create tables before the first request."""
        SQLModel.metadata.create_all(engine)
        logger.info(
            "startup_complete",
            seeded=config.seed is not None,
            view_radius=config.view_radius,
        )

    from .routes import home, play

    home.register_routes(app)
    play.register_routes(app)

    return app


def get_session(app: Xitzin) -> Session:
    """Get a database session from the app."""
    return Session(app.state.engine)
