"""Key bindings: raw key names to game actions."""

from dataclasses import dataclass

KEY_DIRECTIONS = {
    # WASD
    "w": "n",
    "a": "w",
    "s": "s",
    "d": "e",
    # Arrow keys
    "ArrowUp": "n",
    "ArrowLeft": "w",
    "ArrowDown": "s",
    "ArrowRight": "e",
    # Numpad, with diagonals
    "8": "n",
    "9": "ne",
    "6": "e",
    "3": "se",
    "2": "s",
    "1": "sw",
    "4": "w",
    "7": "nw",
}

KEY_ACTIONS = {
    "e": "pickup",
    "i": "inventory",
    " ": "wait",
    "Escape": "menu",
    "<": "stairs_up",
    ">": "stairs_down",
}


@dataclass(frozen=True)
class Action:
    type: str  # move, pickup, inventory, wait, menu, stairs_up, stairs_down
    direction: str | None = None


def key_to_direction(key: str) -> str | None:
    return KEY_DIRECTIONS.get(key)


def is_movement_key(key: str) -> bool:
    return key in KEY_DIRECTIONS


def is_action_key(key: str) -> bool:
    return key in KEY_ACTIONS


def key_to_action(key: str) -> Action | None:
    """Map a key to an action, or None for keys with no binding."""
    direction = key_to_direction(key)
    if direction is not None:
        return Action(type="move", direction=direction)
    action_type = KEY_ACTIONS.get(key)
    if action_type is None:
        return None
    return Action(type=action_type)
