"""
Presentation sink - the single-slot display the sequencer drives.

The sequencer only ever issues two commands: show a message (with
optional bound choices) and hide it. Anything that can honour those
commands can present dialogue: a UI widget, a console, a test double.
StateSink is the stock implementation; it keeps the visible message in
a PresentationState that a renderer can read each frame and handles
choice navigation input.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from narrator.core.actions import Action, action_for_key
from narrator.core.events import EventBus, PresentationEvent
from narrator.dialogue.content import BoundChoice


class PresentationSink(ABC):
    """
    Display surface for the current dialogue message.

    Holds at most one visible message. show() replaces whatever is
    visible (last write wins). hide() is idempotent.
    """

    @abstractmethod
    def show(
        self,
        message: str,
        avatar: str,
        speaker_name: str,
        choices: Optional[Sequence[BoundChoice]] = None,
    ) -> None:
        pass

    @abstractmethod
    def hide(self) -> None:
        pass


@dataclass
class PresentationState:
    """
    What is on screen right now.

    Attributes:
        visible: Whether a message is displayed
        message: Message text
        avatar: Portrait reference
        speaker_name: Speaker shown above the text
        choices: Bound choices, or None for a plain message
        selected_choice: Highlighted choice index
    """
    visible: bool = False
    message: str = ""
    avatar: str = ""
    speaker_name: str = ""
    choices: Optional[list[BoundChoice]] = None
    selected_choice: int = 0

    @property
    def has_choices(self) -> bool:
        return bool(self.choices)

    def set_message(
        self,
        message: str,
        avatar: str,
        speaker_name: str,
        choices: Optional[Sequence[BoundChoice]],
    ) -> None:
        self.visible = True
        self.message = message
        self.avatar = avatar
        self.speaker_name = speaker_name
        self.choices = list(choices) if choices else None
        self.selected_choice = 0

    def clear(self) -> None:
        self.visible = False
        self.message = ""
        self.avatar = ""
        self.speaker_name = ""
        self.choices = None
        self.selected_choice = 0


class StateSink(PresentationSink):
    """
    PresentationSink backed by a PresentationState.

    Publishes MESSAGE_SHOWN / MESSAGE_HIDDEN / SELECTION_CHANGED when an
    event bus is given. Choice input goes through select_next(),
    select_prev(), confirm() or choose(); handle_action() and handle_key()
    map input actions and pygame keys onto those.
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.state = PresentationState()
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    @property
    def visible(self) -> bool:
        return self.state.visible

    def show(
        self,
        message: str,
        avatar: str,
        speaker_name: str,
        choices: Optional[Sequence[BoundChoice]] = None,
    ) -> None:
        self.state.set_message(message, avatar, speaker_name, choices)
        self.logger.debug(f"Showing dialogue from {speaker_name or '?'}: {message}")

        if self.event_bus:
            self.event_bus.publish(
                PresentationEvent.MESSAGE_SHOWN,
                message=message,
                avatar=avatar,
                speaker_name=speaker_name,
                choices=self.state.choices,
            )

    def hide(self) -> None:
        if not self.state.visible:
            return

        self.state.clear()
        self.logger.debug("Hiding dialogue")

        if self.event_bus:
            self.event_bus.publish(PresentationEvent.MESSAGE_HIDDEN)

    # --- Choice navigation ---

    def select_next(self) -> None:
        """Move the highlight to the next choice (wraps)."""
        if self.state.choices:
            self._select((self.state.selected_choice + 1) % len(self.state.choices))

    def select_prev(self) -> None:
        """Move the highlight to the previous choice (wraps)."""
        if self.state.choices:
            self._select((self.state.selected_choice - 1) % len(self.state.choices))

    def _select(self, index: int) -> None:
        self.state.selected_choice = index
        if self.event_bus:
            self.event_bus.publish(PresentationEvent.SELECTION_CHANGED, index=index)

    def choose(self, index: int) -> bool:
        """
        Select the choice at index and run its action.

        Returns:
            True if a visible choice was selected
        """
        choices = self.state.choices
        if not self.state.visible or not choices:
            return False
        if not 0 <= index < len(choices):
            raise IndexError(f"Choice {index} out of range (0..{len(choices) - 1})")

        self.state.selected_choice = index
        choices[index].select()
        return True

    def confirm(self) -> bool:
        """Select the highlighted choice."""
        return self.choose(self.state.selected_choice)

    def handle_action(self, action: Action) -> bool:
        """
        Apply an input action. CANCEL is ignored: choices cannot be dismissed.

        Returns:
            True if the action was consumed
        """
        if not self.state.has_choices:
            return False

        if action == Action.MENU_UP:
            self.select_prev()
        elif action == Action.MENU_DOWN:
            self.select_next()
        elif action == Action.CONFIRM:
            return self.confirm()
        else:
            return False
        return True

    def handle_key(self, key: int) -> bool:
        """Apply a pygame key code through the default bindings."""
        action = action_for_key(key)
        if action is None:
            return False
        return self.handle_action(action)
