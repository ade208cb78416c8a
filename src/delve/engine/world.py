"""Grid structures for a single dungeon level.

A Dungeon is rebuilt from scratch on every level transition. Its tile grid
is only ever mutated by the generator (terrain) and by the visibility
engine (fog of war).
"""

from dataclasses import dataclass, field

# Dungeon dimensions
DUNGEON_WIDTH = 80
DUNGEON_HEIGHT = 50

# Tile types
FLOOR = "floor"
WALL = "wall"
CORRIDOR = "corridor"
STAIR_UP = "stair_up"
STAIR_DOWN = "stair_down"

TILE_TYPES = (FLOOR, WALL, CORRIDOR, STAIR_UP, STAIR_DOWN)

# Visibility states (fog of war)
UNEXPLORED = "unexplored"
EXPLORED = "explored"
VISIBLE = "visible"


@dataclass(frozen=True)
class Position:
    """An integer grid coordinate."""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass
class Tile:
    """A single cell of the dungeon grid."""

    position: Position
    type: str = WALL
    visibility: str = UNEXPLORED


@dataclass(frozen=True)
class Room:
    """An axis-aligned rectangular room, used while generating a level."""

    x: int
    y: int
    width: int
    height: int

    @property
    def center(self) -> Position:
        return Position(self.x + self.width // 2, self.y + self.height // 2)

    def contains(self, pos: Position) -> bool:
        return (
            self.x <= pos.x < self.x + self.width
            and self.y <= pos.y < self.y + self.height
        )


@dataclass(frozen=True)
class Corridor:
    """An L-shaped connection between two room centers."""

    start: Position
    end: Position


@dataclass
class Dungeon:
    """One depth level: the tile grid plus the rooms it was carved from."""

    level: int
    width: int = DUNGEON_WIDTH
    height: int = DUNGEON_HEIGHT
    tiles: list[list[Tile]] = field(default_factory=list)
    rooms: list[Room] = field(default_factory=list)
    corridors: list[Corridor] = field(default_factory=list)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def tile_at(self, pos: Position) -> Tile:
        """Return the tile at pos. Rows are indexed by y, columns by x."""
        return self.tiles[pos.y][pos.x]

    def is_wall(self, pos: Position) -> bool:
        """True for walls and for anything off the grid."""
        return not self.in_bounds(pos) or self.tile_at(pos).type == WALL

    def find_tile(self, tile_type: str) -> Position | None:
        """Position of the first tile of the given type, scanning row by row."""
        for row in self.tiles:
            for tile in row:
                if tile.type == tile_type:
                    return tile.position
        return None


def new_grid(width: int, height: int, tile_type: str = WALL) -> list[list[Tile]]:
    """Build a fully unexplored grid filled with one tile type."""
    return [
        [Tile(position=Position(x, y), type=tile_type) for x in range(width)]
        for y in range(height)
    ]
