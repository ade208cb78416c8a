"""The complete per-player game state.

GameState holds only dataclasses, strings, ints and containers of those, so
it pickles cleanly for persistence. Turn transitions treat it as a value:
they clone before changing anything and hand back the new state.
"""

import copy
from dataclasses import dataclass, field

from .entities import Item, Mob, Player
from .world import Dungeon, Position

BASE_VIEW_RADIUS = 7

WELCOME_MESSAGE = "Welcome to the dungeon!"
DEFEAT_MESSAGE = "You have been defeated!"


@dataclass
class GameState:
    player: Player
    dungeon: Dungeon
    mobs: list[Mob] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    game_over: bool = False
    turns: int = 0

    def clone(self, share_dungeon: bool = False) -> "GameState":
        """Deep copy, so the original is never aliased.

        With share_dungeon the tile grid is carried over as-is; only use it
        for transitions that never touch tiles.
        """
        if share_dungeon:
            return copy.deepcopy(self, {id(self.dungeon): self.dungeon})
        return copy.deepcopy(self)

    def mob_at(self, pos: Position) -> Mob | None:
        for mob in self.mobs:
            if mob.position == pos:
                return mob
        return None

    def item_at(self, pos: Position) -> Item | None:
        for item in self.items:
            if item.position == pos:
                return item
        return None
