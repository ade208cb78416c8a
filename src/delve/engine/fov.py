"""Distance, line of sight and fog-of-war visibility."""

import math

from .world import EXPLORED, VISIBLE, WALL, Dungeon, Position


def distance(a: Position, b: Position) -> float:
    """Euclidean distance between two grid positions."""
    return math.hypot(b.x - a.x, b.y - a.y)


def is_in_view_radius(center: Position, target: Position, radius: float) -> bool:
    return distance(center, target) <= radius


def line_positions(start: Position, end: Position) -> list[Position]:
    """Every lattice point on the Bresenham line from start to end, inclusive."""
    points = []
    dx = abs(end.x - start.x)
    dy = abs(end.y - start.y)
    sx = 1 if start.x < end.x else -1
    sy = 1 if start.y < end.y else -1
    err = dx - dy
    x, y = start.x, start.y

    while True:
        points.append(Position(x, y))
        if x == end.x and y == end.y:
            return points
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def has_line_of_sight(start: Position, end: Position, dungeon: Dungeon) -> bool:
    """True if no wall (or grid edge) lies on the raster line up to and including end.

    The start cell itself is never checked, so a viewer standing anywhere can
    see its own tile.
    """
    for pos in line_positions(start, end)[1:]:
        if not dungeon.in_bounds(pos):
            return False
        if dungeon.tile_at(pos).type == WALL:
            return False
    return True


def update_visibility(dungeon: Dungeon, center: Position, radius: int) -> None:
    """Recompute fog of war around center, in place.

    Tiles seen last turn fall back to explored, then everything inside the
    circular radius with a clear line of sight becomes visible. Explored
    tiles never revert to unexplored.
    """
    for row in dungeon.tiles:
        for tile in row:
            if tile.visibility == VISIBLE:
                tile.visibility = EXPLORED

    min_x = max(0, center.x - radius)
    max_x = min(dungeon.width - 1, center.x + radius)
    min_y = max(0, center.y - radius)
    max_y = min(dungeon.height - 1, center.y + radius)

    for y in range(min_y, max_y + 1):
        for x in range(min_x, max_x + 1):
            pos = Position(x, y)
            if not is_in_view_radius(center, pos, radius):
                continue
            if has_line_of_sight(center, pos, dungeon):
                dungeon.tiles[y][x].visibility = VISIBLE
