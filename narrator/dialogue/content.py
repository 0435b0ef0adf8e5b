"""
Dialogue content - messages, choices and the tagged content variant.

Catalog content is pure data. Actions are only attached at play time,
when the sequencer turns each Choice into a BoundChoice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union


ChoiceAction = Callable[[], None]


def noop() -> None:
    """Action for choices nobody bound."""


@dataclass(frozen=True)
class DialogueMessage:
    """A single line of dialogue."""
    message: str
    avatar: str = ""
    speaker_name: str = ""


@dataclass(frozen=True)
class Choice:
    """An authored choice option (no action)."""
    text: str


@dataclass(frozen=True)
class BoundChoice:
    """A choice with its play-time action, as handed to the sink."""
    text: str
    action: ChoiceAction = noop

    def select(self) -> None:
        self.action()


@dataclass(frozen=True)
class Plain:
    """Content without choices; the sequence advances on a timer."""
    dialogue: DialogueMessage

    @property
    def has_choices(self) -> bool:
        return False


@dataclass(frozen=True)
class WithChoices:
    """Content that stops the sequence until the user picks a choice."""
    dialogue: DialogueMessage
    choices: tuple[Choice, ...]

    def __post_init__(self):
        if not self.choices:
            raise ValueError("WithChoices needs at least one choice; use Plain instead")

    @property
    def has_choices(self) -> bool:
        return True


DialogueContent = Union[Plain, WithChoices]


def make_content(
    message: str,
    avatar: str = "",
    speaker_name: str = "",
    choices: list[str] | tuple[str, ...] | None = None,
) -> DialogueContent:
    """Build Plain or WithChoices depending on whether choices are given."""
    dialogue = DialogueMessage(message=message, avatar=avatar, speaker_name=speaker_name)
    if choices:
        return WithChoices(dialogue, tuple(Choice(text) for text in choices))
    return Plain(dialogue)
