"""
Core module.

Exports:
- EventBus, Event, SequenceEvent, PresentationEvent: Event system
- Scheduler, TimerHandle: Cooperative timers
- FrameClock: Feeds pygame ticks into a Scheduler
- SequencerConfig, OverlapPolicy: Configuration
- Action, action_for_key: Input actions
"""

from narrator.core.events import EventBus, Event, SequenceEvent, PresentationEvent
from narrator.core.timers import Scheduler, TimerHandle
from narrator.core.clock import FrameClock
from narrator.core.config import SequencerConfig, OverlapPolicy
from narrator.core.actions import Action, DEFAULT_KEY_BINDINGS, action_for_key

__all__ = [
    # Events
    "EventBus",
    "Event",
    "SequenceEvent",
    "PresentationEvent",
    # Timing
    "Scheduler",
    "TimerHandle",
    "FrameClock",
    # Config
    "SequencerConfig",
    "OverlapPolicy",
    # Input
    "Action",
    "DEFAULT_KEY_BINDINGS",
    "action_for_key",
]
