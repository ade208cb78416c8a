"""Tests for distance, line of sight and fog of war."""

from delve.engine.fov import (
    distance,
    has_line_of_sight,
    is_in_view_radius,
    line_positions,
    update_visibility,
)
from delve.engine.world import EXPLORED, UNEXPLORED, VISIBLE, WALL, Dungeon, Position


def _wall_column(dungeon: Dungeon, x: int) -> None:
    for row in dungeon.tiles:
        row[x].type = WALL


def test_distance_is_euclidean():
    assert distance(Position(0, 0), Position(3, 4)) == 5
    assert distance(Position(7, 2), Position(7, 2)) == 0


def test_view_radius_boundary_is_inclusive():
    assert is_in_view_radius(Position(0, 0), Position(3, 4), 5)
    assert not is_in_view_radius(Position(0, 0), Position(3, 4), 4.9)


def test_line_positions_endpoints_and_steps():
    line = line_positions(Position(1, 1), Position(6, 3))
    assert line[0] == Position(1, 1)
    assert line[-1] == Position(6, 3)
    for a, b in zip(line, line[1:]):
        assert abs(a.x - b.x) <= 1 and abs(a.y - b.y) <= 1


def test_line_of_sight_open_floor(open_dungeon: Dungeon):
    assert has_line_of_sight(Position(2, 2), Position(15, 9), open_dungeon)


def test_line_of_sight_to_self(open_dungeon: Dungeon):
    assert has_line_of_sight(Position(4, 4), Position(4, 4), open_dungeon)


def test_line_of_sight_blocked_by_wall(open_dungeon: Dungeon):
    _wall_column(open_dungeon, 10)
    assert not has_line_of_sight(Position(5, 5), Position(15, 5), open_dungeon)
    assert has_line_of_sight(Position(5, 5), Position(9, 5), open_dungeon)


def test_line_of_sight_out_of_bounds(open_dungeon: Dungeon):
    assert not has_line_of_sight(Position(5, 5), Position(25, 5), open_dungeon)


def test_visibility_marks_center(open_dungeon: Dungeon):
    update_visibility(open_dungeon, Position(5, 5), 3)
    assert open_dungeon.tiles[5][5].visibility == VISIBLE


def test_visibility_is_circular(open_dungeon: Dungeon):
    update_visibility(open_dungeon, Position(10, 10), 5)
    assert open_dungeon.tiles[10][15].visibility == VISIBLE
    # Corner of the bounding box lies outside the circle
    assert open_dungeon.tiles[15][15].visibility == UNEXPLORED


def test_visibility_previous_tiles_become_explored(open_dungeon: Dungeon):
    update_visibility(open_dungeon, Position(3, 3), 2)
    update_visibility(open_dungeon, Position(15, 15), 2)
    assert open_dungeon.tiles[3][3].visibility == EXPLORED
    assert open_dungeon.tiles[15][15].visibility == VISIBLE

    # Explored tiles never go back to unexplored
    update_visibility(open_dungeon, Position(15, 3), 2)
    assert open_dungeon.tiles[3][3].visibility == EXPLORED
    assert open_dungeon.tiles[15][15].visibility == EXPLORED


def test_visibility_stops_at_walls(open_dungeon: Dungeon):
    _wall_column(open_dungeon, 10)
    update_visibility(open_dungeon, Position(7, 5), 8)
    assert open_dungeon.tiles[5][9].visibility == VISIBLE
    assert open_dungeon.tiles[5][12].visibility == UNEXPLORED
    assert open_dungeon.tiles[5][14].visibility == UNEXPLORED
