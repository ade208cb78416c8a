"""Tests for procedural level generation."""

import itertools
import random

import pytest

from delve.engine.entities import (
    FOOD,
    GOBLIN,
    ITEM_KINDS,
    POTION_EFFECTS,
    Food,
    Potion,
)
from delve.engine.generator import (
    MIN_SEPARATION,
    carve_corridor,
    connect_rooms,
    generate_dungeon,
    generate_mobs,
    generate_rooms,
    is_room_overlapping,
    place_stairs,
    populate_room,
    roll_mob_type,
)
from delve.engine.world import (
    CORRIDOR,
    FLOOR,
    STAIR_DOWN,
    STAIR_UP,
    UNEXPLORED,
    WALL,
    Corridor,
    Dungeon,
    Position,
    Room,
    new_grid,
)


class ScriptedRandom(random.Random):
    """Hands out a fixed sequence of room indices from randrange."""

    def __init__(self, picks: list[int]):
        super().__init__(0)
        self.picks = iter(picks)

    def randrange(self, *args, **kwargs) -> int:
        return next(self.picks)


def _count_tiles(dungeon: Dungeon, tile_type: str) -> int:
    return sum(tile.type == tile_type for row in dungeon.tiles for tile in row)


@pytest.mark.parametrize("seed", range(10))
def test_generated_rooms_fit_and_keep_apart(seed: int):
    rooms = generate_rooms(10, 80, 50, random.Random(seed))
    assert 1 <= len(rooms) <= 10
    for room in rooms:
        assert 5 <= room.width <= 12
        assert 5 <= room.height <= 12
        assert room.x >= 1 and room.y >= 1
        assert room.x + room.width < 80 - 1
        assert room.y + room.height < 50 - 1
    for a, b in itertools.combinations(rooms, 2):
        assert not is_room_overlapping(a, b, MIN_SEPARATION)


def test_generate_rooms_gives_up_when_crowded(rng: random.Random):
    rooms = generate_rooms(50, 30, 30, rng)
    assert len(rooms) < 50


def test_room_overlap_respects_separation():
    a = Room(x=1, y=1, width=5, height=5)
    assert is_room_overlapping(a, Room(x=7, y=1, width=5, height=5), 2)
    assert not is_room_overlapping(a, Room(x=8, y=1, width=5, height=5), 2)


def test_connect_rooms_chains_in_order():
    rooms = [
        Room(x=1, y=1, width=5, height=5),
        Room(x=20, y=1, width=6, height=6),
        Room(x=1, y=20, width=7, height=5),
    ]
    corridors = connect_rooms(rooms)
    assert corridors == [
        Corridor(start=Position(3, 3), end=Position(23, 4)),
        Corridor(start=Position(23, 4), end=Position(4, 22)),
    ]
    assert connect_rooms(rooms[:1]) == []
    assert connect_rooms([]) == []


def test_carve_corridor_is_l_shaped():
    tiles = new_grid(20, 20)
    tiles[2][5].type = FLOOR
    carve_corridor(tiles, Corridor(start=Position(2, 2), end=Position(10, 8)))

    # Horizontal along the start row, vertical along the end column
    assert tiles[2][2].type == CORRIDOR
    assert tiles[2][10].type == CORRIDOR
    assert tiles[8][10].type == CORRIDOR
    assert tiles[5][10].type == CORRIDOR
    # Floor is left alone, the inside of the L is untouched
    assert tiles[2][5].type == FLOOR
    assert tiles[8][2].type == WALL


def _dungeon_with_rooms(level: int, rooms: list[Room]) -> Dungeon:
    return Dungeon(level=level, tiles=new_grid(80, 50), rooms=rooms)


def test_place_stairs_level_one_has_only_down(rng: random.Random):
    dungeon = _dungeon_with_rooms(
        1, [Room(x=1, y=1, width=5, height=5), Room(x=20, y=20, width=5, height=5)]
    )
    place_stairs(dungeon, rng)
    assert _count_tiles(dungeon, STAIR_DOWN) == 1
    assert _count_tiles(dungeon, STAIR_UP) == 0


def test_place_stairs_up_retries_away_from_down_room():
    rooms = [Room(x=1, y=1, width=5, height=5), Room(x=20, y=20, width=5, height=5)]
    dungeon = _dungeon_with_rooms(3, rooms)
    # Down in room 0; the first two up picks collide and are retried
    place_stairs(dungeon, ScriptedRandom([0, 0, 0, 1]))
    assert dungeon.find_tile(STAIR_DOWN) == rooms[0].center
    assert dungeon.find_tile(STAIR_UP) == rooms[1].center


def test_place_stairs_accepts_same_room_after_retries():
    rooms = [Room(x=1, y=1, width=5, height=5), Room(x=20, y=20, width=5, height=5)]
    dungeon = _dungeon_with_rooms(3, rooms)
    place_stairs(dungeon, ScriptedRandom([1] * 12))
    assert dungeon.tile_at(rooms[1].center).type == STAIR_UP
    assert dungeon.find_tile(STAIR_DOWN) is None


def test_place_stairs_single_room_stairs_coincide(rng: random.Random):
    room = Room(x=1, y=1, width=5, height=5)
    dungeon = _dungeon_with_rooms(2, [room])
    place_stairs(dungeon, rng)
    assert dungeon.tile_at(room.center).type == STAIR_UP
    assert _count_tiles(dungeon, STAIR_DOWN) == 0


def test_place_stairs_without_rooms(rng: random.Random):
    dungeon = _dungeon_with_rooms(2, [])
    place_stairs(dungeon, rng)
    assert _count_tiles(dungeon, STAIR_DOWN) == 0
    assert _count_tiles(dungeon, STAIR_UP) == 0


def test_populate_room_places_items_inside(rng: random.Random):
    room = Room(x=10, y=10, width=8, height=6)
    for _ in range(20):
        items = populate_room(room, 2, rng)
        assert len(items) <= 5
        for item in items:
            assert item.kind in ITEM_KINDS
            assert room.x + 1 <= item.position.x < room.x + room.width - 1
            assert room.y + 1 <= item.position.y < room.y + room.height - 1
            if isinstance(item, Potion):
                assert item.unknown
                assert item.name == "Unknown Potion"
                assert item.true_effect in POTION_EFFECTS
            if isinstance(item, Food):
                assert 1 <= item.restore_amount <= 3


def test_populate_room_bonus_is_food(lucky_rng: random.Random):
    room = Room(x=10, y=10, width=8, height=6)
    items = populate_room(room, 1, lucky_rng)
    # Every roll succeeds, so every item (bonus included) is food
    assert items
    assert all(item.kind == FOOD for item in items)


def test_generate_mobs_skips_most_rooms(unlucky_rng: random.Random):
    assert generate_mobs(Room(x=1, y=1, width=6, height=6), 3, unlucky_rng) == []


def test_generate_mobs_level_one_goblins(lucky_rng: random.Random):
    room = Room(x=4, y=4, width=7, height=7)
    mobs = generate_mobs(room, 1, lucky_rng)
    assert 1 <= len(mobs) <= 3
    for mob in mobs:
        assert mob.type == GOBLIN
        assert room.x + 1 <= mob.position.x < room.x + room.width - 1
        assert room.y + 1 <= mob.position.y < room.y + room.height - 1


@pytest.mark.parametrize(
    ("level", "roll", "expected"),
    [
        (5, 0.05, "dragon"),
        (4, 0.05, "troll"),
        (3, 0.25, "troll"),
        (2, 0.25, "skeleton"),
        (5, 0.45, "skeleton"),
        (1, 0.05, "goblin"),
        (9, 0.75, "goblin"),
    ],
)
def test_roll_mob_type_is_level_gated(fixed_rng, level: int, roll: float, expected: str):
    assert roll_mob_type(level, fixed_rng(roll)) == expected


def test_generate_dungeon_layout(rng: random.Random):
    dungeon = generate_dungeon(1, rng)
    assert dungeon.level == 1
    assert (dungeon.width, dungeon.height) == (80, 50)
    assert len(dungeon.tiles) == 50 and all(len(row) == 80 for row in dungeon.tiles)
    assert 1 <= len(dungeon.rooms) <= 10
    assert len(dungeon.corridors) == len(dungeon.rooms) - 1
    assert all(t.visibility == UNEXPLORED for row in dungeon.tiles for t in row)
    assert _count_tiles(dungeon, STAIR_DOWN) == 1
    assert _count_tiles(dungeon, STAIR_UP) == 0
    for room in dungeon.rooms:
        corner = Position(room.x, room.y)
        assert dungeon.tile_at(corner).type == FLOOR
    # The outer border is never carved
    assert all(tile.type == WALL for tile in dungeon.tiles[0])
    assert all(row[0].type == WALL for row in dungeon.tiles)


def test_generate_dungeon_is_reproducible():
    a = generate_dungeon(3, random.Random(99))
    b = generate_dungeon(3, random.Random(99))
    assert a == b
