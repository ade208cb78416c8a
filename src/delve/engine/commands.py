"""Turn orchestration: every player action as a state transition.

Each public function takes a GameState and returns the GameState that
follows from it. A rejected action returns the very same object; an
accepted one works on copies, so the caller's state is never touched.

handle_action(action, state, rng) is the main entry point for input.
"""

import copy
import random
from dataclasses import replace
from typing import assert_never

from .combat import resolve_combat
from .effects import (
    apply_potion_effect,
    display_name,
    get_adjusted_view_radius,
    process_active_effects,
)
from .entities import (
    POTION_HEALTH,
    Armor,
    Food,
    Item,
    Mob,
    Potion,
    Weapon,
    add_to_inventory,
    can_carry_more,
    create_player,
    damage_mob,
    damage_player,
    equip_armor,
    equip_weapon,
    find_in_inventory,
    heal_player,
    increase_strength,
    remove_from_inventory,
)
from .fov import distance, has_line_of_sight, update_visibility
from .generator import generate_dungeon, generate_mobs, populate_room
from .input import Action
from .state import BASE_VIEW_RADIUS, DEFEAT_MESSAGE, WELCOME_MESSAGE, GameState
from .world import STAIR_DOWN, STAIR_UP, Dungeon, Position

DIRECTION_DELTAS = {
    "n": (0, -1),
    "ne": (1, -1),
    "e": (1, 0),
    "se": (1, 1),
    "s": (0, 1),
    "sw": (-1, 1),
    "w": (-1, 0),
    "nw": (-1, -1),
}

# Where a summoned mob may appear, in order of preference
SPAWN_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))

PLAYER_NAME = "You"


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def _populate(
    dungeon: Dungeon, level: int, rng: random.Random
) -> tuple[list[Mob], list[Item]]:
    mobs = [mob for room in dungeon.rooms for mob in generate_mobs(room, level, rng)]
    items = [item for room in dungeon.rooms for item in populate_room(room, level, rng)]
    return mobs, items


def _refresh_view(state: GameState, view_radius: int) -> None:
    radius = get_adjusted_view_radius(state.player, view_radius)
    update_visibility(state.dungeon, state.player.position, radius)


def _defeat(state: GameState) -> None:
    state.messages.append(DEFEAT_MESSAGE)
    state.game_over = True


def initialize_game(rng: random.Random, view_radius: int = BASE_VIEW_RADIUS) -> GameState:
    """Start a new run on level 1, in the middle of the first room."""
    dungeon = generate_dungeon(1, rng)
    player = create_player(dungeon.rooms[0].center, 1)
    mobs, items = _populate(dungeon, 1, rng)
    update_visibility(dungeon, player.position, view_radius)
    return GameState(
        player=player,
        dungeon=dungeon,
        mobs=mobs,
        items=items,
        messages=[WELCOME_MESSAGE],
    )


# --- Mobs ---


def can_see_player(mob: Mob, target: Position, dungeon: Dungeon) -> bool:
    if distance(mob.position, target) > mob.view_range:
        return False
    return has_line_of_sight(mob.position, target, dungeon)


def step_toward(mob: Mob, target: Position, dungeon: Dungeon) -> Position:
    """One greedy step toward target along the longer axis.

    If that cell is a wall the other axis is tried; if that is blocked too
    the mob stays put.
    """
    dx = target.x - mob.position.x
    dy = target.y - mob.position.y
    if dx == 0 and dy == 0:
        return mob.position

    if abs(dx) > abs(dy):
        first = mob.position.offset(_sign(dx), 0)
        second = mob.position.offset(0, _sign(dy))
    else:
        first = mob.position.offset(0, _sign(dy))
        second = mob.position.offset(_sign(dx), 0)

    if not dungeon.is_wall(first):
        return first
    if not dungeon.is_wall(second):
        return second
    return mob.position


def _update_mobs(state: GameState, rng: random.Random) -> None:
    """Move or attack with every mob that can see the player, in place.

    Each mob decides against the positions at the start of the pass, so mobs
    ignore one another's moves this turn.
    """
    target = state.player.position
    updated = []
    for mob in state.mobs:
        if not can_see_player(mob, target, state.dungeon):
            updated.append(mob)
            continue

        step = step_toward(mob, target, state.dungeon)
        if step != target:
            updated.append(replace(mob, position=step))
            continue

        updated.append(mob)
        if state.game_over:
            continue
        result = resolve_combat(mob, state.player, mob.type, PLAYER_NAME, rng)
        state.messages.append(
            f"{result.attacker_name} attacked you for {result.damage} damage!"
        )
        state.player = damage_player(state.player, result.damage)
        if state.player.health <= 0:
            _defeat(state)
    state.mobs = updated


def update_mobs(state: GameState, rng: random.Random) -> GameState:
    if state.game_over:
        return state
    new_state = state.clone()
    _update_mobs(new_state, rng)
    return new_state


# --- Player actions ---


def _bump_attack(state: GameState, mob: Mob, rng: random.Random) -> None:
    """Player attacks the mob in the way; a survivor always strikes back."""
    result = resolve_combat(state.player, mob, PLAYER_NAME, mob.type, rng)
    state.messages.append(
        f"You attacked {result.defender_name} for {result.damage} damage!"
    )

    if result.killed:
        state.messages.append(f"You defeated the {result.defender_name}!")
        state.mobs = [m for m in state.mobs if m.id != mob.id]
        state.items = [*state.items, *result.loot]
        return

    wounded = damage_mob(mob, result.damage)
    state.mobs = [wounded if m.id == mob.id else m for m in state.mobs]

    counter = resolve_combat(wounded, state.player, mob.type, PLAYER_NAME, rng)
    state.messages.append(
        f"{counter.attacker_name} counter-attacks for {counter.damage} damage!"
    )
    state.player = damage_player(state.player, counter.damage)
    if state.player.health <= 0:
        _defeat(state)


def _tick_effects(state: GameState) -> bool:
    """Advance status effects; return False if they killed the player."""
    state.player, messages = process_active_effects(state.player)
    state.messages.extend(messages)
    if state.player.health <= 0:
        _defeat(state)
        return False
    return True


def handle_player_move(
    direction: str,
    state: GameState,
    rng: random.Random,
    view_radius: int = BASE_VIEW_RADIUS,
) -> GameState:
    """Step the player one tile, or fight whatever stands there.

    Walking into a wall or off the map costs nothing: the same state comes
    back. A combat turn skips effects, visibility and the mob pass.
    """
    if state.game_over:
        return state
    if direction not in DIRECTION_DELTAS:
        raise ValueError(f"Unknown direction: {direction!r}")

    dx, dy = DIRECTION_DELTAS[direction]
    target = state.player.position.offset(dx, dy)
    if state.dungeon.is_wall(target):
        return state

    # Combat leaves the tiles alone, so the grid is shared
    new_state = state.clone(share_dungeon=state.mob_at(target) is not None)
    new_state.turns += 1

    mob = new_state.mob_at(target)
    if mob is not None:
        _bump_attack(new_state, mob, rng)
        return new_state

    new_state.player = replace(new_state.player, position=target)
    if not _tick_effects(new_state):
        return new_state
    _refresh_view(new_state, view_radius)
    _update_mobs(new_state, rng)
    return new_state


def wait_turn(
    state: GameState, rng: random.Random, view_radius: int = BASE_VIEW_RADIUS
) -> GameState:
    """Stand still for a turn: effects tick and the mobs act."""
    if state.game_over:
        return state
    new_state = state.clone()
    new_state.turns += 1
    if not _tick_effects(new_state):
        return new_state
    _refresh_view(new_state, view_radius)
    _update_mobs(new_state, rng)
    return new_state


def _place_summoned(state: GameState, mob: Mob) -> None:
    """Put a summoned mob on the first free cardinal neighbour, if any."""
    origin = state.player.position
    for dx, dy in SPAWN_OFFSETS:
        pos = origin.offset(dx, dy)
        if state.dungeon.is_wall(pos) or state.mob_at(pos) is not None:
            continue
        state.mobs = [*state.mobs, replace(mob, position=pos)]
        return


def _drink(state: GameState, potion: Potion, rng: random.Random) -> None:
    if potion.unknown and potion.true_effect is not None:
        outcome = apply_potion_effect(state.player, potion.true_effect, rng)
        state.player = outcome.player
        state.messages.extend(outcome.messages)
        if outcome.spawned_mob is not None:
            _place_summoned(state, outcome.spawned_mob)
    elif potion.kind == POTION_HEALTH:
        state.player = heal_player(state.player, potion.restore_amount)
        state.messages.append(
            f"Used {potion.name}, restored {potion.restore_amount} health"
        )
    else:
        state.player = increase_strength(state.player, potion.restore_amount)
        state.messages.append(
            f"Used {potion.name}, increased strength by {potion.restore_amount}"
        )
    state.player = remove_from_inventory(state.player, potion.id)


def use_item(item_id: str, state: GameState, rng: random.Random) -> GameState:
    """Equip or consume an inventory item. Using an item is not a turn."""
    if state.game_over:
        return state
    item = find_in_inventory(state.player, item_id)
    if item is None:
        return state

    new_state = state.clone(share_dungeon=True)
    name = display_name(item, state.player.identified_potions)
    match item:
        case Weapon():
            new_state.player = equip_weapon(new_state.player, item)
            new_state.messages.append(f"Equipped {name}")
        case Armor():
            new_state.player = equip_armor(new_state.player, item)
            new_state.messages.append(f"Equipped {name}")
        case Potion():
            _drink(new_state, item, rng)
        case Food():
            new_state.player = remove_from_inventory(
                heal_player(new_state.player, item.restore_amount), item.id
            )
            new_state.messages.append(
                f"Ate {name}, restored {item.restore_amount} health"
            )
        case _:
            assert_never(item)
    return new_state


def pickup_item(state: GameState) -> GameState:
    """Move the item under the player into the pack, space permitting."""
    if state.game_over:
        return state
    item = state.item_at(state.player.position)
    if item is None:
        return state

    new_state = state.clone(share_dungeon=True)
    if not can_carry_more(state.player):
        new_state.messages.append("Inventory is full!")
        return new_state

    new_state.player = add_to_inventory(new_state.player, item)
    new_state.items = [i for i in new_state.items if i.id != item.id]
    new_state.messages.append(
        f"Picked up {display_name(item, state.player.identified_potions)}"
    )
    return new_state


def change_level(
    direction: str,
    state: GameState,
    rng: random.Random,
    view_radius: int = BASE_VIEW_RADIUS,
) -> GameState:
    """Take the stairs under the player to a freshly generated level.

    Levels are never revisited: going back up builds a brand new shallower
    level and drops the player on its down stairs.
    """
    if state.game_over:
        return state
    tile = state.dungeon.tile_at(state.player.position)
    if direction == "down" and tile.type == STAIR_DOWN:
        new_level, arrival, verb = state.player.level + 1, STAIR_UP, "Descended"
    elif direction == "up" and tile.type == STAIR_UP and state.player.level > 1:
        new_level, arrival, verb = state.player.level - 1, STAIR_DOWN, "Ascended"
    else:
        return state

    dungeon = generate_dungeon(new_level, rng)
    position = dungeon.find_tile(arrival) or dungeon.rooms[0].center
    mobs, items = _populate(dungeon, new_level, rng)

    # The old dungeon is discarded, so only the player and log are copied
    new_state = replace(
        state,
        player=replace(
            copy.deepcopy(state.player), position=position, level=new_level
        ),
        dungeon=dungeon,
        mobs=mobs,
        items=items,
        messages=list(state.messages),
    )
    _refresh_view(new_state, view_radius)
    new_state.messages.append(f"{verb} to level {new_level}")
    return new_state


def handle_interact(
    state: GameState, rng: random.Random, view_radius: int = BASE_VIEW_RADIUS
) -> GameState:
    """Pick up what is underfoot, else take the stairs, else say so."""
    if state.game_over:
        return state
    if state.item_at(state.player.position) is not None:
        return pickup_item(state)

    tile_type = state.dungeon.tile_at(state.player.position).type
    if tile_type == STAIR_UP:
        return change_level("up", state, rng, view_radius)
    if tile_type == STAIR_DOWN:
        return change_level("down", state, rng, view_radius)

    new_state = state.clone(share_dungeon=True)
    new_state.messages.append("Nothing to interact with here.")
    return new_state


def handle_action(
    action: Action | None,
    state: GameState,
    rng: random.Random,
    view_radius: int = BASE_VIEW_RADIUS,
) -> GameState:
    """Dispatch a mapped input action. Presentation-only actions change nothing."""
    if action is None:
        return state
    match action.type:
        case "move":
            return handle_player_move(action.direction, state, rng, view_radius)
        case "pickup":
            return pickup_item(state)
        case "wait":
            return wait_turn(state, rng, view_radius)
        case "stairs_up":
            return change_level("up", state, rng, view_radius)
        case "stairs_down":
            return change_level("down", state, rng, view_radius)
        case "inventory" | "menu":
            return state
        case _:
            raise ValueError(f"Unknown action: {action.type!r}")
