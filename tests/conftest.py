"""Shared test fixtures for Delve."""

import random
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from delve.app import create_app
from delve.config import Config
from delve.engine.entities import Item, Mob, create_player
from delve.engine.state import GameState
from delve.engine.world import FLOOR, Dungeon, Position, new_grid
from delve.models import Player


class FixedRandom(random.Random):
    """A generator whose random() always returns the same value.

    Integer draws (randint, choice) still come from the seeded stream.
    """

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value

    # Defined here so integer draws keep using getrandbits, not random()
    def getrandbits(self, k: int) -> int:
        return super().getrandbits(k)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def lucky_rng() -> random.Random:
    """Every probability roll succeeds."""
    return FixedRandom(0.0)


@pytest.fixture
def unlucky_rng() -> random.Random:
    """Every probability roll fails."""
    return FixedRandom(0.99)


@pytest.fixture
def fixed_rng():
    """Factory for generators whose probability rolls return a chosen value."""
    return FixedRandom


@pytest.fixture
def open_dungeon() -> Dungeon:
    """A 20x20 level that is floor everywhere."""
    return Dungeon(level=1, width=20, height=20, tiles=new_grid(20, 20, FLOOR))


@pytest.fixture
def make_state(open_dungeon: Dungeon):
    """Build a GameState on the open dungeon with the given entities."""

    def _make(
        player_pos: Position = Position(5, 5),
        mobs: list[Mob] | None = None,
        items: list[Item] | None = None,
        dungeon: Dungeon | None = None,
    ) -> GameState:
        return GameState(
            player=create_player(player_pos, 1),
            dungeon=dungeon or open_dungeon,
            mobs=list(mobs or []),
            items=list(items or []),
            messages=["Welcome to the dungeon!"],
        )

    return _make


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
    return Config(database_url=f"sqlite:///{tmp_path}/test.db", seed=42)


@pytest.fixture
def app(test_config: Config, db_engine):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
