"""
Audio puzzle conversation.

Mission Control introduces the waveform puzzle; at 30% progress the
Engineer and C.C. notice the player is answering them. The player steers
the exchange through four choice points, and the scene ends with the
session being terminated and one embodiment insight gained.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from narrator.dialogue.branching import ContinuationGraph, GraphNode, GraphWalker
from narrator.dialogue.catalog import DialogueCatalog
from narrator.dialogue.sequencer import SequencePlayer, SequencerRun, SequenceStep


CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "audio_puzzle.json"

BEAT_MS = 3000
LONG_BEAT_MS = 6000


def load_catalog() -> DialogueCatalog:
    """Load the audio puzzle dialogue catalog shipped with the package."""
    return DialogueCatalog.from_json_file(CATALOG_PATH)


def build_graph(on_insight: Callable[[], None], lead_in_ms: float = 500) -> ContinuationGraph:
    """
    The main conversation as a continuation graph.

    Args:
        on_insight: Effect run once the finale has played
        lead_in_ms: Pause before C.C.'s question after the second choice
    """
    return ContinuationGraph(
        [
            GraphNode(
                "opening",
                [
                    SequenceStep("engineerFirst", delay_ms=BEAT_MS),
                    SequenceStep("ccNotice", delay_ms=BEAT_MS),
                    SequenceStep("engineerDismissal", delay_ms=BEAT_MS),
                    SequenceStep("ccWorking"),
                ],
                branches=["cc_excited", "engineer_excited"],
            ),
            GraphNode(
                "cc_excited",
                [SequenceStep("ccExcited", delay_ms=BEAT_MS)],
                next="interrupted",
            ),
            GraphNode(
                "engineer_excited",
                [SequenceStep("engineerExcited", delay_ms=BEAT_MS)],
                next="interrupted",
            ),
            GraphNode(
                "interrupted",
                [
                    SequenceStep("ccDontMess", delay_ms=BEAT_MS),
                    SequenceStep("engineerInterrupted", delay_ms=BEAT_MS),
                    SequenceStep("engineerSurprised"),
                ],
                branches="believed",
            ),
            GraphNode(
                "believed",
                [SequenceStep("ccQuestion")],
                branches="apology",
                lead_in_ms=lead_in_ms,
            ),
            GraphNode(
                "apology",
                [
                    SequenceStep("ccApologetic", delay_ms=BEAT_MS),
                    SequenceStep("ccQuestion2"),
                ],
                branches="finale",
            ),
            GraphNode(
                "finale",
                [
                    SequenceStep("ccPlayful", delay_ms=LONG_BEAT_MS),
                    SequenceStep("engineerAngry", delay_ms=BEAT_MS),
                    SequenceStep("systemTerminate"),
                ],
                effects=[on_insight],
            ),
        ],
        start="opening",
    )


class AudioPuzzleDialogue:
    """
    Dialogue for the audio puzzle scene.

    Usage:
        dialogue = AudioPuzzleDialogue(player)
        dialogue.show_introduction()
        ...
        dialogue.play_main_sequence(on_complete=scene.finish)
    """

    def __init__(self, player: SequencePlayer):
        self.player = player
        self.insight = 0
        self.graph = build_graph(self._gain_insight, player.config.branch_lead_in_ms)
        self.walker = GraphWalker(player, self.graph)
        self.logger = logging.getLogger(__name__)

    def show_introduction(self) -> SequencerRun:
        return self.player.play_single("introduction")

    def show_wave_filter_success(self) -> SequencerRun:
        return self.player.play_single("waveFilterSuccess")

    def play_main_sequence(self, on_complete: Optional[Callable[[], None]] = None) -> None:
        """Play the branching conversation; on_complete runs after the finale."""
        self.walker.start(on_finish=on_complete)

    def _gain_insight(self) -> None:
        self.insight += 1
        self.logger.info(f"Embodiment insight gained ({self.insight})")
