"""Damage formula and combat resolution.

resolve_combat never touches the combatants; callers apply the damage and
remove the dead.
"""

import random
from dataclasses import dataclass, field
from typing import TypeAlias

from .entities import Item, Mob, Player, generate_loot

Combatant: TypeAlias = Player | Mob


@dataclass
class CombatResult:
    damage: int
    killed: bool
    attacker_name: str
    defender_name: str
    loot: list[Item] = field(default_factory=list)


def calculate_damage(attacker: Combatant, defender: Combatant) -> int:
    """Strength plus wielded weapon minus worn armor, never below 1."""
    damage = attacker.strength
    if isinstance(attacker, Player) and attacker.weapon is not None:
        damage += attacker.weapon.damage
    if isinstance(defender, Player) and defender.armor is not None:
        damage -= defender.armor.defense
    return max(1, damage)


def resolve_combat(
    attacker: Combatant,
    defender: Combatant,
    attacker_name: str,
    defender_name: str,
    rng: random.Random,
) -> CombatResult:
    """Work out one blow. A hit equal to the defender's health is lethal.

    Killing a mob rolls its drop table at the attacker's depth (level 1 when
    the attacker is itself a mob).
    """
    damage = calculate_damage(attacker, defender)
    killed = damage >= defender.health
    loot: list[Item] = []
    if killed and isinstance(defender, Mob):
        level = attacker.level if isinstance(attacker, Player) else 1
        loot = generate_loot(defender, level, rng)
    return CombatResult(
        damage=damage,
        killed=killed,
        attacker_name=attacker_name,
        defender_name=defender_name,
        loot=loot,
    )
