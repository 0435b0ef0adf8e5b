"""
Shipped dialogue scenarios.
"""

from narrator.scenes.audio_puzzle import AudioPuzzleDialogue, build_graph, load_catalog

__all__ = [
    "AudioPuzzleDialogue",
    "build_graph",
    "load_catalog",
]
