"""
Audio Puzzle Demo: Branching dialogue in the terminal

Demonstrates:
- Loading a dialogue catalog from JSON
- Timed sequence playback on a cooperative scheduler
- Choices driven through the presentation sink
- A continuation graph walking the whole conversation

The demo runs headless with a fixed 60 FPS timestep and picks the
highlighted choice a moment after each one is offered.

Run: python -m demos.audio_puzzle_demo
"""

import logging

from narrator.core import EventBus, PresentationEvent, Scheduler
from narrator.dialogue import SequencePlayer, StateSink
from narrator.scenes import AudioPuzzleDialogue, load_catalog


FIXED_DT = 1 / 60
THINK_TIME = 1.0  # Seconds before the "player" answers a choice


def on_shown(event):
    print(f"[{event['speaker_name']}] {event['message']}")
    for i, choice in enumerate(event['choices'] or []):
        print(f"    {i + 1}. {choice.text}")


def main():
    logging.basicConfig(level=logging.INFO)

    event_bus = EventBus()
    event_bus.subscribe(PresentationEvent.MESSAGE_SHOWN, on_shown)

    scheduler = Scheduler()
    sink = StateSink(event_bus)
    player = SequencePlayer(load_catalog(), sink, scheduler, event_bus=event_bus)
    dialogue = AudioPuzzleDialogue(player)

    finished = []
    dialogue.play_main_sequence(on_complete=lambda: finished.append(True))

    waiting = 0.0
    while not finished:
        scheduler.update(FIXED_DT)

        if sink.state.has_choices:
            waiting += FIXED_DT
            if waiting >= THINK_TIME:
                waiting = 0.0
                print(f"  > {sink.state.choices[sink.state.selected_choice].text}")
                sink.confirm()

    print(f"Embodiment insight: {dialogue.insight}")


if __name__ == "__main__":
    main()
