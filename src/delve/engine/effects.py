"""Potion effects and the timed status effects they leave behind."""

import random
from dataclasses import dataclass, field, replace
from typing import assert_never

from .entities import (
    BLINDNESS,
    GOBLIN,
    POISON,
    POTION_EFFECTS,
    SPAWN_MONSTER,
    STRENGTH,
    VITALITY,
    ActiveEffect,
    Armor,
    Food,
    Item,
    Mob,
    Player,
    Potion,
    Weapon,
    create_mob,
)

POTION_NAMES = {
    STRENGTH: "Potion of Strength",
    BLINDNESS: "Potion of Blindness",
    SPAWN_MONSTER: "Potion of Summoning",
    POISON: "Potion of Poison",
    VITALITY: "Potion of Vitality",
}

# effect → (duration, magnitude)
TIMED_EFFECTS = {
    BLINDNESS: (15, 3),
    POISON: (15, 1),
    VITALITY: (10, 1),
}

EXPIRY_MESSAGES = {
    POISON: "The poison wears off",
    VITALITY: "The vitality effect wears off",
    BLINDNESS: "Your vision clears",
}


@dataclass
class EffectResult:
    player: Player
    messages: list[str] = field(default_factory=list)
    spawned_mob: Mob | None = None


def get_random_potion_effect(rng: random.Random) -> str:
    return rng.choice(POTION_EFFECTS)


def get_potion_name(effect: str, identified: bool) -> str:
    if not identified:
        return "Unknown Potion"
    return POTION_NAMES[effect]


def display_name(item: Item, identified_potions: set[str]) -> str:
    """The name the player sees, revealing potions whose effect they know."""
    match item:
        case Potion(unknown=True, true_effect=effect) if effect is not None:
            return get_potion_name(effect, effect in identified_potions)
        case Weapon() | Armor() | Potion() | Food():
            return item.name
        case _:
            assert_never(item)


def apply_potion_effect(player: Player, effect: str, rng: random.Random) -> EffectResult:
    """Apply a potion's true effect and mark that effect as identified.

    A summoning potion leaves the player untouched and hands back a goblin
    for the caller to place.
    """
    identified = player.identified_potions | {effect}
    if effect == STRENGTH:
        return EffectResult(
            player=replace(
                player, strength=player.strength + 1, identified_potions=identified
            ),
            messages=["You feel stronger! +1 strength permanently"],
        )
    if effect == SPAWN_MONSTER:
        return EffectResult(
            player=replace(player, identified_potions=identified),
            messages=["The potion summons a monster!"],
            spawned_mob=create_mob(GOBLIN, player.position, player.level, rng),
        )
    if effect in TIMED_EFFECTS:
        duration, magnitude = TIMED_EFFECTS[effect]
        messages = {
            BLINDNESS: f"Your vision blurs! View radius reduced for {duration} steps",
            POISON: f"You feel sick! Losing {magnitude} HP per step for {duration} steps",
            VITALITY: (
                f"You feel revitalized! Gaining {magnitude} HP per step "
                f"for {duration} steps"
            ),
        }
        return EffectResult(
            player=replace(
                player,
                active_effects=[
                    *player.active_effects,
                    ActiveEffect(type=effect, duration=duration, magnitude=magnitude),
                ],
                identified_potions=identified,
            ),
            messages=[messages[effect]],
        )
    raise ValueError(f"Unknown potion effect: {effect!r}")


def process_active_effects(player: Player) -> tuple[Player, list[str]]:
    """Tick every active effect once.

    Expiry is announced on the turn an effect's last step is spent, and the
    effect is dropped in the same tick.
    """
    messages = []
    health = player.health
    remaining = []
    for effect in player.active_effects:
        if effect.type == POISON:
            health = max(0, health - effect.magnitude)
        elif effect.type == VITALITY:
            health = min(player.max_health, health + effect.magnitude)

        if effect.duration == 1:
            messages.append(EXPIRY_MESSAGES[effect.type])
        ticked = replace(effect, duration=effect.duration - 1)
        if ticked.duration > 0:
            remaining.append(ticked)

    return replace(player, health=health, active_effects=remaining), messages


def get_adjusted_view_radius(player: Player, base_radius: int) -> int:
    """Shrink the view radius while the player is blinded, down to 1."""
    for effect in player.active_effects:
        if effect.type == BLINDNESS:
            return max(1, base_radius - effect.magnitude)
    return base_radius
