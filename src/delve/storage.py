"""Save slot storage: one GameState blob per player and slot key."""

import datetime as dt
import pickle
import zlib

from sqlmodel import Session, select

from .engine.state import GameState
from .logging import get_logger
from .models import Player, SavedGame

logger = get_logger(__name__)

SAVE_SLOT = "dungeon-crawler-save"

# Everything a truncated, garbled or stale blob can raise while unpickling
_DECODE_ERRORS = (
    zlib.error,
    pickle.UnpicklingError,
    EOFError,
    AttributeError,
    ImportError,
    IndexError,
    KeyError,
    OverflowError,
    TypeError,
    ValueError,
)


def dump_state(state: GameState) -> bytes:
    return zlib.compress(pickle.dumps(state))


def load_state(blob: bytes) -> GameState | None:
    """Decode a saved blob, or None if it is not a usable GameState."""
    try:
        state = pickle.loads(zlib.decompress(blob))
    except _DECODE_ERRORS as exc:
        logger.warning("save_corrupt", error=type(exc).__name__)
        return None
    if not isinstance(state, GameState):
        logger.warning("save_corrupt", error="unexpected_payload")
        return None
    return state


class SaveStore:
    """Key-value access to a player's single save slot."""

    def __init__(self, db_session: Session, player: Player, slot: str = SAVE_SLOT):
        self.db_session = db_session
        self.player = player
        self.slot = slot

    def _record(self) -> SavedGame | None:
        statement = select(SavedGame).where(
            SavedGame.player_id == self.player.id, SavedGame.slot == self.slot
        )
        return self.db_session.exec(statement).first()

    def has(self) -> bool:
        return self._record() is not None

    def load(self) -> GameState | None:
        """The saved state, or None when there is no save or it won't decode."""
        record = self._record()
        if record is None:
            return None
        return load_state(record.state_blob)

    def save(self, state: GameState) -> None:
        now = dt.datetime.now(dt.UTC)
        blob = dump_state(state)
        record = self._record()

        if record is None:
            record = SavedGame(
                player_id=self.player.id,
                slot=self.slot,
                state_blob=blob,
                depth=state.player.level,
                turns=state.turns,
                is_finished=state.game_over,
                started_at=now,
                last_played=now,
            )
            self.db_session.add(record)
        else:
            record.state_blob = blob
            record.depth = state.player.level
            record.turns = state.turns
            record.is_finished = state.game_over
            record.last_played = now

        self.db_session.commit()
        logger.debug(
            "game_saved",
            fingerprint=self.player.fingerprint,
            depth=state.player.level,
            turns=state.turns,
        )

    def clear(self) -> None:
        record = self._record()
        if record is None:
            return
        self.db_session.delete(record)
        self.db_session.commit()
        logger.debug("save_cleared", fingerprint=self.player.fingerprint)


def get_or_create_player(db_session: Session, fingerprint: str) -> Player:
    """Look up the player behind a certificate fingerprint, creating one if new."""
    player = db_session.exec(
        select(Player).where(Player.fingerprint == fingerprint)
    ).first()

    if player is None:
        player = Player(fingerprint=fingerprint)
        db_session.add(player)
        logger.info("player_created", fingerprint=fingerprint)
    else:
        player.last_seen = dt.datetime.now(dt.UTC)

    db_session.commit()
    db_session.refresh(player)
    return player
