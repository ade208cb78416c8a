"""Session layer bridging the game engine, the save slot and the routes."""

import random

from sqlmodel import Session

from .engine import commands, render
from .engine.input import key_to_action
from .engine.state import BASE_VIEW_RADIUS, GameState
from .logging import get_logger
from .models import Player
from .storage import SaveStore

logger = get_logger(__name__)


def make_rng(seed: int | None, state: GameState | None = None) -> random.Random:
    """A generator for one request.

    With a fixed seed the stream is derived from the seed and the turn
    count, so replaying the same inputs rebuilds the same dungeon.
    """
    if seed is None:
        return random.Random()
    if state is None:
        return random.Random(seed)
    return random.Random(f"{seed}:{state.player.level}:{state.turns}:{len(state.messages)}")


class DelveSession:
    """Wraps a Player, their save slot and the in-memory GameState."""

    def __init__(
        self,
        db_session: Session,
        player: Player,
        store: SaveStore,
        game_state: GameState,
        seed: int | None = None,
        view_radius: int = BASE_VIEW_RADIUS,
    ):
        self.db_session = db_session
        self.player = player
        self.store = store
        self.state = game_state
        self.seed = seed
        self.view_radius = view_radius

    @classmethod
    def load_or_create(
        cls,
        db_session: Session,
        player: Player,
        seed: int | None = None,
        view_radius: int = BASE_VIEW_RADIUS,
    ) -> "DelveSession":
        """Resume the player's run, or start a new one if there is none to resume."""
        store = SaveStore(db_session, player)
        game_state = store.load()

        if game_state is not None and not game_state.game_over:
            logger.debug(
                "game_loaded",
                fingerprint=player.fingerprint,
                depth=game_state.player.level,
                turns=game_state.turns,
            )
        else:
            game_state = commands.initialize_game(make_rng(seed), view_radius)
            logger.info("new_game_started", fingerprint=player.fingerprint)

        return cls(db_session, player, store, game_state, seed, view_radius)

    @property
    def rng(self) -> random.Random:
        return make_rng(self.seed, self.state)

    def _advance(self, new_state: GameState) -> bool:
        """Adopt new_state; return True if the action changed anything."""
        changed = new_state is not self.state
        if new_state.game_over and not self.state.game_over:
            logger.info(
                "player_defeated",
                fingerprint=self.player.fingerprint,
                depth=new_state.player.level,
                turns=new_state.turns,
            )
        elif new_state.player.level != self.state.player.level:
            logger.info(
                "level_changed",
                fingerprint=self.player.fingerprint,
                depth=new_state.player.level,
            )
        self.state = new_state
        return changed

    def press(self, key: str) -> bool:
        """Handle a raw key press through the key bindings."""
        action = key_to_action(key)
        return self._advance(
            commands.handle_action(action, self.state, self.rng, self.view_radius)
        )

    def move(self, direction: str) -> bool:
        if direction not in commands.DIRECTION_DELTAS:
            return False
        return self._advance(
            commands.handle_player_move(
                direction, self.state, self.rng, self.view_radius
            )
        )

    def wait(self) -> bool:
        return self._advance(commands.wait_turn(self.state, self.rng, self.view_radius))

    def pickup(self) -> bool:
        return self._advance(commands.pickup_item(self.state))

    def interact(self) -> bool:
        return self._advance(
            commands.handle_interact(self.state, self.rng, self.view_radius)
        )

    def use(self, item_id: str) -> bool:
        return self._advance(commands.use_item(item_id, self.state, self.rng))

    def stairs(self, direction: str) -> bool:
        return self._advance(
            commands.change_level(direction, self.state, self.rng, self.view_radius)
        )

    def save(self) -> None:
        self.store.save(self.state)

    def reset(self) -> None:
        """Throw away the current run and start over."""
        self.store.clear()
        self.state = commands.initialize_game(make_rng(self.seed), self.view_radius)
        logger.info("game_reset", fingerprint=self.player.fingerprint)

    def get_map(self) -> str:
        return render.render_map(self.state)

    def get_status(self) -> str:
        return render.describe_status(self.state)

    def get_floor(self) -> str | None:
        return render.describe_floor(self.state)

    def get_inventory(self) -> list[tuple[str, str]]:
        return render.describe_inventory(self.state)

    def get_messages(self) -> list[str]:
        return render.recent_messages(self.state)
