import os
import sys
import pytest
from unittest.mock import MagicMock, patch

# Ensure narrator can be imported from a source checkout
sys.path.append(os.getcwd())

from narrator.core.config import SequencerConfig
from narrator.core.events import EventBus
from narrator.core.timers import Scheduler
from narrator.dialogue.catalog import DialogueCatalog
from narrator.dialogue.sequencer import SequencePlayer
from narrator.dialogue.sink import StateSink


@pytest.fixture(autouse=True)
def mock_pygame():
    """
    Global mock for pygame to allow headless testing.
    Autoused for all tests to prevent accidental window creation.
    """
    with patch('pygame.init'), \
         patch('pygame.display'), \
         patch('pygame.event'), \
         patch('pygame.time'), \
         patch('pygame.key'):

        import pygame
        pygame.time.get_ticks = MagicMock(return_value=0)

        yield


class RecordingSink(StateSink):
    """StateSink that also keeps a log of every command it received."""

    def __init__(self, event_bus=None):
        super().__init__(event_bus)
        self.calls = []

    def show(self, message, avatar, speaker_name, choices=None):
        self.calls.append(("show", message, avatar, speaker_name, choices))
        super().show(message, avatar, speaker_name, choices)

    def hide(self):
        self.calls.append(("hide",))
        super().hide()

    @property
    def shown(self):
        """Messages shown so far, in order."""
        return [call[1] for call in self.calls if call[0] == "show"]

    @property
    def last_choices(self):
        for call in reversed(self.calls):
            if call[0] == "show":
                return call[4]
        return None


CATALOG_DATA = {
    "A": {"message": "m1", "avatar": "/avatars/a.jpg", "speakerName": "Alice"},
    "B": {"message": "m2", "avatar": "/avatars/b.jpg", "speakerName": "Bob"},
    "C": {"message": "m3", "avatar": "/avatars/a.jpg", "speakerName": "Alice"},
    "ask": {
        "message": "hi",
        "avatar": "/avatars/a.jpg",
        "speakerName": "Alice",
        "choices": [{"text": "yes"}, {"text": "no"}],
    },
    "confirm": {
        "message": "sure?",
        "speakerName": "Bob",
        "choices": [{"text": "ok"}],
    },
}


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def scheduler():
    """Fresh Scheduler at t=0."""
    return Scheduler()


@pytest.fixture
def catalog():
    return DialogueCatalog.from_dict("test", CATALOG_DATA)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def config():
    return SequencerConfig()


@pytest.fixture
def player(catalog, sink, scheduler, config):
    return SequencePlayer(catalog, sink, scheduler, config=config)
