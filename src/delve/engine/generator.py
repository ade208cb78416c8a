"""Procedural level generation: rooms, corridors, stairs and population.

generate_dungeon(level, rng) builds the terrain only. Populating rooms with
mobs and items is a separate step driven by the caller.
"""

import random

from ..logging import get_logger
from .entities import (
    DRAGON,
    FOOD,
    GOBLIN,
    ITEM_KINDS,
    SKELETON,
    TROLL,
    Item,
    Mob,
    create_item,
    create_mob,
)
from .world import (
    CORRIDOR,
    DUNGEON_HEIGHT,
    DUNGEON_WIDTH,
    FLOOR,
    STAIR_DOWN,
    STAIR_UP,
    WALL,
    Corridor,
    Dungeon,
    Position,
    Room,
    Tile,
    new_grid,
)

logger = get_logger(__name__)

MIN_ROOM_SIZE = 5
MAX_ROOM_SIZE = 12
MIN_SEPARATION = 2
MIN_ROOMS = 5
MAX_ROOMS = 10
STAIR_RETRIES = 10

MOB_ROOM_CHANCE = 0.4
FOOD_BONUS_CHANCE = 0.3
FOOD_CHANCE = 0.3


def is_room_overlapping(a: Room, b: Room, min_separation: int) -> bool:
    """True unless the rooms are at least min_separation tiles apart on some axis."""
    return not (
        a.x + a.width + min_separation <= b.x
        or b.x + b.width + min_separation <= a.x
        or a.y + a.height + min_separation <= b.y
        or b.y + b.height + min_separation <= a.y
    )


def generate_rooms(count: int, width: int, height: int, rng: random.Random) -> list[Room]:
    """Place up to count non-overlapping rooms by rejection sampling.

    Gives up after 10 attempts per requested room, so fewer rooms than asked
    for is a normal outcome.
    """
    rooms: list[Room] = []
    for _ in range(count * 10):
        if len(rooms) >= count:
            break
        room_width = rng.randint(MIN_ROOM_SIZE, MAX_ROOM_SIZE)
        room_height = rng.randint(MIN_ROOM_SIZE, MAX_ROOM_SIZE)
        x_span = width - room_width - 2
        y_span = height - room_height - 2
        if x_span <= 0 or y_span <= 0:
            continue
        candidate = Room(
            x=1 + rng.randrange(x_span),
            y=1 + rng.randrange(y_span),
            width=room_width,
            height=room_height,
        )
        if not any(is_room_overlapping(candidate, r, MIN_SEPARATION) for r in rooms):
            rooms.append(candidate)
    return rooms


def connect_rooms(rooms: list[Room]) -> list[Corridor]:
    """Chain each room to the next one in generation order."""
    return [
        Corridor(start=first.center, end=second.center)
        for first, second in zip(rooms, rooms[1:])
    ]


def horizontal_run(x1: int, x2: int, y: int) -> list[Position]:
    return [Position(x, y) for x in range(min(x1, x2), max(x1, x2) + 1)]


def vertical_run(y1: int, y2: int, x: int) -> list[Position]:
    return [Position(x, y) for y in range(min(y1, y2), max(y1, y2) + 1)]


def carve_room(tiles: list[list[Tile]], room: Room) -> None:
    for y in range(room.y, room.y + room.height):
        for x in range(room.x, room.x + room.width):
            if 0 <= y < len(tiles) and 0 <= x < len(tiles[y]):
                tiles[y][x].type = FLOOR


def carve_corridor(tiles: list[list[Tile]], corridor: Corridor) -> None:
    """Carve horizontally along the start row, then vertically along the end column.

    Only walls are turned into corridor; room floor stays floor.
    """
    start, end = corridor.start, corridor.end
    path = horizontal_run(start.x, end.x, start.y) + vertical_run(start.y, end.y, end.x)
    for pos in path:
        if 0 <= pos.y < len(tiles) and 0 <= pos.x < len(tiles[pos.y]):
            tile = tiles[pos.y][pos.x]
            if tile.type == WALL:
                tile.type = CORRIDOR


def place_stairs(dungeon: Dungeon, rng: random.Random) -> None:
    """Put the down stairs in a random room, and up stairs too below level 1.

    The up stairs avoid the down-stair room for a bounded number of retries;
    after that they may share it (and so the same center tile).
    """
    if not dungeon.rooms:
        return

    down_index = rng.randrange(len(dungeon.rooms))
    down = dungeon.rooms[down_index].center
    dungeon.tiles[down.y][down.x].type = STAIR_DOWN

    if dungeon.level <= 1:
        return

    up_index = rng.randrange(len(dungeon.rooms))
    attempts = 0
    while up_index == down_index and attempts < STAIR_RETRIES:
        up_index = rng.randrange(len(dungeon.rooms))
        attempts += 1
    up = dungeon.rooms[up_index].center
    dungeon.tiles[up.y][up.x].type = STAIR_UP


def random_interior_position(room: Room, rng: random.Random) -> Position:
    """A position inside the room, keeping one tile away from its edge."""
    return Position(
        room.x + 1 + rng.randrange(room.width - 2),
        room.y + 1 + rng.randrange(room.height - 2),
    )


def populate_room(room: Room, level: int, rng: random.Random) -> list[Item]:
    """Scatter 0-4 items in a room, with a 30% chance of an extra ration."""
    item_count = rng.randrange(5)
    bonus = 1 if rng.random() < FOOD_BONUS_CHANCE else 0

    items = []
    for i in range(item_count + bonus):
        if i >= item_count or rng.random() < FOOD_CHANCE:
            kind = FOOD
        else:
            kind = rng.choice(ITEM_KINDS)
        items.append(create_item(kind, random_interior_position(room, rng), level, rng))
    return items


def roll_mob_type(level: int, rng: random.Random) -> str:
    """Deeper levels unlock nastier mobs; goblins fill the remainder."""
    roll = rng.random()
    if level >= 5 and roll < 0.1:
        return DRAGON
    if level >= 3 and roll < 0.3:
        return TROLL
    if level >= 2 and roll < 0.5:
        return SKELETON
    return GOBLIN


def generate_mobs(room: Room, level: int, rng: random.Random) -> list[Mob]:
    if rng.random() > MOB_ROOM_CHANCE:
        return []
    count = rng.randint(1, 3)
    mobs = []
    for _ in range(count):
        mob_type = roll_mob_type(level, rng)
        mobs.append(
            create_mob(mob_type, random_interior_position(room, rng), level, rng)
        )
    return mobs


def generate_dungeon(level: int, rng: random.Random) -> Dungeon:
    """Build the terrain for one depth level."""
    tiles = new_grid(DUNGEON_WIDTH, DUNGEON_HEIGHT)
    rooms = generate_rooms(
        rng.randint(MIN_ROOMS, MAX_ROOMS), DUNGEON_WIDTH, DUNGEON_HEIGHT, rng
    )
    for room in rooms:
        carve_room(tiles, room)

    corridors = connect_rooms(rooms)
    for corridor in corridors:
        carve_corridor(tiles, corridor)

    dungeon = Dungeon(
        level=level,
        width=DUNGEON_WIDTH,
        height=DUNGEON_HEIGHT,
        tiles=tiles,
        rooms=rooms,
        corridors=corridors,
    )
    place_stairs(dungeon, rng)

    logger.debug(
        "level_generated",
        level=level,
        rooms=len(rooms),
        corridors=len(corridors),
    )
    return dungeon
