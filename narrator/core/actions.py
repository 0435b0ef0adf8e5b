"""
Input action definitions.

Actions abstract raw input (keys) into the semantic actions a dialogue
box needs: moving the highlight between choices and confirming one.

Usage:
    action = action_for_key(event.key)
    if action is not None:
        sink.handle_action(action)
"""

from enum import Enum, auto

import pygame


class Action(Enum):
    """Semantic input actions for choice navigation."""
    MENU_UP = auto()
    MENU_DOWN = auto()
    CONFIRM = auto()
    CANCEL = auto()


DEFAULT_KEY_BINDINGS: dict[Action, list[int]] = {
    Action.MENU_UP: [pygame.K_UP, pygame.K_w],
    Action.MENU_DOWN: [pygame.K_DOWN, pygame.K_s],
    Action.CONFIRM: [pygame.K_RETURN, pygame.K_SPACE, pygame.K_z],
    Action.CANCEL: [pygame.K_ESCAPE, pygame.K_x],
}


def action_for_key(
    key: int,
    bindings: dict[Action, list[int]] | None = None,
) -> Action | None:
    """Map a pygame key code to an Action, or None if unbound."""
    bindings = bindings or DEFAULT_KEY_BINDINGS
    for action, keys in bindings.items():
        if key in keys:
            return action
    return None
