"""Tests for damage and combat resolution."""

import random

from delve.engine.combat import calculate_damage, resolve_combat
from delve.engine.entities import Armor, Mob, Weapon, create_player
from delve.engine.world import Position


def _goblin(health: int = 30, strength: int = 7) -> Mob:
    return Mob(
        id="goblin_1",
        type="goblin",
        position=Position(6, 5),
        health=health,
        strength=strength,
        view_range=6,
        drops=("food", "weapon"),
    )


def test_player_damage_includes_weapon():
    """Wielded weapon adds to the player's strength."""
    player = create_player(Position(5, 5))
    assert calculate_damage(player, _goblin()) == 10
    player.weapon = Weapon(id="w", name="Weapon +4", damage=4)
    assert calculate_damage(player, _goblin()) == 14


def test_armor_reduces_mob_damage():
    """Worn armor is subtracted from incoming damage."""
    player = create_player(Position(5, 5))
    player.armor = Armor(id="a", name="Armor +3", defense=3)
    assert calculate_damage(_goblin(strength=7), player) == 4


def test_damage_never_below_one():
    player = create_player(Position(5, 5))
    player.armor = Armor(id="a", name="Armor +50", defense=50)
    assert calculate_damage(_goblin(strength=7), player) == 1


def test_exact_health_hit_is_lethal(rng: random.Random):
    player = create_player(Position(5, 5))
    result = resolve_combat(player, _goblin(health=10), "You", "goblin", rng)
    assert result.damage == 10
    assert result.killed
    assert result.attacker_name == "You"
    assert result.defender_name == "goblin"


def test_survivor_is_not_killed(rng: random.Random):
    player = create_player(Position(5, 5))
    result = resolve_combat(player, _goblin(health=11), "You", "goblin", rng)
    assert not result.killed
    assert result.loot == []


def test_kill_rolls_loot(lucky_rng: random.Random):
    """Killing a mob rolls its whole drop table at the player's depth."""
    player = create_player(Position(5, 5), level=3)
    result = resolve_combat(player, _goblin(health=5), "You", "goblin", lucky_rng)
    assert result.killed
    assert [item.kind for item in result.loot] == ["food", "weapon"]
    assert all(item.position == Position(6, 5) for item in result.loot)


def test_combatants_are_untouched(rng: random.Random):
    player = create_player(Position(5, 5))
    goblin = _goblin(health=5)
    resolve_combat(player, goblin, "You", "goblin", rng)
    resolve_combat(goblin, player, "goblin", "You", rng)
    assert goblin.health == 5
    assert player.health == 100


def test_mob_killing_player_drops_nothing(rng: random.Random):
    player = create_player(Position(5, 5))
    player.health = 3
    result = resolve_combat(_goblin(), player, "goblin", "You", rng)
    assert result.killed
    assert result.loot == []
