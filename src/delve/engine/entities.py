"""Items, mobs and the player, plus the factories that build them.

Items form a tagged union: every item dataclass carries a ``kind`` string,
and consumers match on the concrete class. A position of None means the
item is held (inventory or equipment) rather than lying in the world.
"""

import math
import random
from dataclasses import dataclass, field, replace
from typing import TypeAlias

from .world import Position

# Item kinds
WEAPON = "weapon"
ARMOR = "armor"
POTION_HEALTH = "potion_health"
POTION_STRENGTH = "potion_strength"
FOOD = "food"

ITEM_KINDS = (WEAPON, ARMOR, POTION_HEALTH, POTION_STRENGTH, FOOD)
POTION_KINDS = (POTION_HEALTH, POTION_STRENGTH)

# True potion effects, decoupled from the potion's declared kind
STRENGTH = "strength"
BLINDNESS = "blindness"
SPAWN_MONSTER = "spawn_monster"
POISON = "poison"
VITALITY = "vitality"

POTION_EFFECTS = (STRENGTH, BLINDNESS, SPAWN_MONSTER, POISON, VITALITY)

UNKNOWN_POTION_NAME = "Unknown Potion"

# Mob types
GOBLIN = "goblin"
SKELETON = "skeleton"
TROLL = "troll"
DRAGON = "dragon"

MOB_TYPES = (GOBLIN, SKELETON, TROLL, DRAGON)

# type → (base health, base strength, view range, drop table)
MOB_STATS: dict[str, tuple[int, int, int, tuple[str, ...]]] = {
    GOBLIN: (20, 5, 6, (FOOD, WEAPON)),
    SKELETON: (30, 8, 8, (WEAPON, ARMOR)),
    TROLL: (50, 12, 7, (WEAPON, ARMOR, POTION_HEALTH)),
    DRAGON: (100, 20, 10, (WEAPON, ARMOR, POTION_HEALTH, POTION_STRENGTH)),
}

PLAYER_START_HEALTH = 100
PLAYER_START_STRENGTH = 10
MAX_INVENTORY_SIZE = 20


def new_id(prefix: str, rng: random.Random) -> str:
    """Entity id drawn from the game's generator so seeded runs repeat."""
    return f"{prefix}_{rng.getrandbits(48):012x}"


@dataclass
class Weapon:
    id: str
    name: str
    damage: int
    position: Position | None = None
    kind: str = field(default=WEAPON, init=False)


@dataclass
class Armor:
    id: str
    name: str
    defense: int
    position: Position | None = None
    kind: str = field(default=ARMOR, init=False)


@dataclass
class Potion:
    """A potion. Unknown potions apply ``true_effect`` instead of restoring."""

    id: str
    kind: str
    name: str
    restore_amount: int
    position: Position | None = None
    unknown: bool = False
    true_effect: str | None = None


@dataclass
class Food:
    id: str
    name: str
    restore_amount: int
    position: Position | None = None
    kind: str = field(default=FOOD, init=False)


Item: TypeAlias = Weapon | Armor | Potion | Food


@dataclass
class ActiveEffect:
    """A timed effect on the player; duration counts remaining turns."""

    type: str
    duration: int
    magnitude: int


@dataclass
class Mob:
    id: str
    type: str
    position: Position
    health: int
    strength: int
    view_range: int
    drops: tuple[str, ...] = ()


@dataclass
class Player:
    position: Position
    health: int = PLAYER_START_HEALTH
    max_health: int = PLAYER_START_HEALTH
    strength: int = PLAYER_START_STRENGTH
    weapon: Weapon | None = None
    armor: Armor | None = None
    inventory: list[Item] = field(default_factory=list)
    level: int = 1  # current dungeon depth
    active_effects: list[ActiveEffect] = field(default_factory=list)
    identified_potions: set[str] = field(default_factory=set)


# --- Factories ---


def create_mob(mob_type: str, position: Position, level: int, rng: random.Random) -> Mob:
    """Build a mob of the given type with stats scaled by dungeon level."""
    if mob_type not in MOB_STATS:
        raise ValueError(f"Unknown mob type: {mob_type!r}")
    health, strength, view_range, drops = MOB_STATS[mob_type]
    return Mob(
        id=new_id(mob_type, rng),
        type=mob_type,
        position=position,
        health=health + level * 10,
        strength=strength + math.floor(level * 2),
        view_range=view_range,
        drops=drops,
    )


def weapon_damage(level: int, rng: random.Random) -> int:
    return 3 + math.floor(level * 1.5) + rng.randint(0, 2)


def armor_defense(level: int, rng: random.Random) -> int:
    return 2 + math.floor(level * 1.2) + rng.randint(0, 1)


def create_unknown_potion(
    kind: str, position: Position | None, rng: random.Random
) -> Potion:
    """A potion whose true effect has nothing to do with its declared kind."""
    return Potion(
        id=new_id(kind, rng),
        kind=kind,
        name=UNKNOWN_POTION_NAME,
        restore_amount=0,
        position=position,
        unknown=True,
        true_effect=rng.choice(POTION_EFFECTS),
    )


def create_item(
    kind: str,
    position: Position | None,
    level: int,
    rng: random.Random,
    unknown: bool = True,
) -> Item:
    """Build an item of the given kind, scaled by dungeon level.

    Potions come out unidentified unless ``unknown`` is False, in which case
    they restore health (30 + 5 per level) or strength (5 + 2 per level).
    """
    if kind == WEAPON:
        damage = weapon_damage(level, rng)
        return Weapon(
            id=new_id(kind, rng), name=f"Weapon +{damage}", damage=damage,
            position=position,
        )
    if kind == ARMOR:
        defense = armor_defense(level, rng)
        return Armor(
            id=new_id(kind, rng), name=f"Armor +{defense}", defense=defense,
            position=position,
        )
    if kind in POTION_KINDS:
        if unknown:
            return create_unknown_potion(kind, position, rng)
        if kind == POTION_HEALTH:
            name, amount = "Health Potion", 30 + math.floor(level * 5)
        else:
            name, amount = "Strength Potion", 5 + math.floor(level * 2)
        return Potion(
            id=new_id(kind, rng), kind=kind, name=name, restore_amount=amount,
            position=position,
        )
    if kind == FOOD:
        amount = rng.randint(1, 3)
        return Food(
            id=new_id(kind, rng), name=f"Food (+{amount})", restore_amount=amount,
            position=position,
        )
    raise ValueError(f"Unknown item kind: {kind!r}")


def generate_loot(mob: Mob, level: int, rng: random.Random) -> list[Item]:
    """Roll each entry of the mob's drop table at 50%; drops land where it died."""
    return [
        create_item(kind, mob.position, level, rng)
        for kind in mob.drops
        if rng.random() < 0.5
    ]


def damage_mob(mob: Mob, amount: int) -> Mob:
    return replace(mob, health=max(0, mob.health - amount))


# --- Player ---


def create_player(position: Position, level: int = 1) -> Player:
    return Player(position=position, level=level)


def can_carry_more(player: Player) -> bool:
    return len(player.inventory) < MAX_INVENTORY_SIZE


def add_to_inventory(player: Player, item: Item) -> Player:
    """Return a player holding item, or the same player if the pack is full."""
    if not can_carry_more(player):
        return player
    return replace(player, inventory=[*player.inventory, replace(item, position=None)])


def remove_from_inventory(player: Player, item_id: str) -> Player:
    return replace(
        player, inventory=[item for item in player.inventory if item.id != item_id]
    )


def find_in_inventory(player: Player, item_id: str) -> Item | None:
    for item in player.inventory:
        if item.id == item_id:
            return item
    return None


def equip_weapon(player: Player, weapon: Weapon) -> Player:
    """Wield weapon; any previously wielded weapon goes back into the pack."""
    inventory = [item for item in player.inventory if item.id != weapon.id]
    if player.weapon is not None:
        inventory.append(replace(player.weapon, position=None))
    return replace(
        player, weapon=replace(weapon, position=None), inventory=inventory
    )


def equip_armor(player: Player, armor: Armor) -> Player:
    """Wear armor; any previously worn armor goes back into the pack."""
    inventory = [item for item in player.inventory if item.id != armor.id]
    if player.armor is not None:
        inventory.append(replace(player.armor, position=None))
    return replace(player, armor=replace(armor, position=None), inventory=inventory)


def heal_player(player: Player, amount: int) -> Player:
    return replace(player, health=min(player.max_health, player.health + amount))


def increase_strength(player: Player, amount: int) -> Player:
    return replace(player, strength=player.strength + amount)


def damage_player(player: Player, amount: int) -> Player:
    return replace(player, health=max(0, player.health - amount))
