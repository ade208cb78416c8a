"""Plain-text views of the game state for the Gemini front end.

Everything here only reads the state.
"""

from typing import assert_never

from .effects import display_name
from .entities import DRAGON, GOBLIN, SKELETON, TROLL, Armor, Food, Item, Potion, Weapon
from .state import GameState
from .world import CORRIDOR, FLOOR, STAIR_DOWN, STAIR_UP, UNEXPLORED, VISIBLE, WALL

TILE_GLYPHS = {
    WALL: "#",
    FLOOR: ".",
    CORRIDOR: ",",
    STAIR_UP: "<",
    STAIR_DOWN: ">",
}

MOB_GLYPHS = {
    GOBLIN: "g",
    SKELETON: "s",
    TROLL: "T",
    DRAGON: "D",
}

PLAYER_GLYPH = "@"

VIEWPORT_WIDTH = 60
VIEWPORT_HEIGHT = 21


def item_glyph(item: Item) -> str:
    match item:
        case Weapon():
            return ")"
        case Armor():
            return "["
        case Potion():
            return "!"
        case Food():
            return "%"
        case _:
            assert_never(item)


def _camera_origin(center: int, view: int, size: int) -> int:
    if size <= view:
        return 0
    return min(max(0, center - view // 2), size - view)


def render_map(
    state: GameState,
    width: int = VIEWPORT_WIDTH,
    height: int = VIEWPORT_HEIGHT,
) -> str:
    """Draw a viewport centred on the player.

    Unexplored cells are blank. Remembered cells show terrain only; mobs
    and items are drawn only where the player can currently see.
    """
    dungeon = state.dungeon
    left = _camera_origin(state.player.position.x, width, dungeon.width)
    top = _camera_origin(state.player.position.y, height, dungeon.height)

    overlay: dict[tuple[int, int], str] = {}
    for item in state.items:
        if item.position is not None:
            overlay[(item.position.x, item.position.y)] = item_glyph(item)
    for mob in state.mobs:
        overlay[(mob.position.x, mob.position.y)] = MOB_GLYPHS[mob.type]
    overlay[(state.player.position.x, state.player.position.y)] = PLAYER_GLYPH

    lines = []
    for y in range(top, min(top + height, dungeon.height)):
        row = []
        for x in range(left, min(left + width, dungeon.width)):
            tile = dungeon.tiles[y][x]
            if tile.visibility == UNEXPLORED:
                row.append(" ")
            elif tile.visibility == VISIBLE and (x, y) in overlay:
                row.append(overlay[(x, y)])
            else:
                row.append(TILE_GLYPHS[tile.type])
        lines.append("".join(row).rstrip())
    return "\n".join(lines)


def describe_status(state: GameState) -> str:
    player = state.player
    parts = [
        f"Depth {player.level}",
        f"HP {player.health}/{player.max_health}",
        f"STR {player.strength}",
    ]
    if player.weapon is not None:
        parts.append(f"Wielding {player.weapon.name}")
    if player.armor is not None:
        parts.append(f"Wearing {player.armor.name}")
    for effect in player.active_effects:
        parts.append(f"{effect.type.capitalize()} ({effect.duration})")
    return " | ".join(parts)


def describe_inventory(state: GameState) -> list[tuple[str, str]]:
    """(item id, display name) for everything in the pack."""
    known = state.player.identified_potions
    return [(item.id, display_name(item, known)) for item in state.player.inventory]


def describe_floor(state: GameState) -> str | None:
    """What lies under the player, if anything worth mentioning."""
    item = state.item_at(state.player.position)
    if item is not None:
        return f"You see {display_name(item, state.player.identified_potions)} here."
    tile_type = state.dungeon.tile_at(state.player.position).type
    if tile_type == STAIR_DOWN:
        return "There is a staircase leading down here."
    if tile_type == STAIR_UP:
        return "There is a staircase leading up here."
    return None


def recent_messages(state: GameState, count: int = 5) -> list[str]:
    return state.messages[-count:]
