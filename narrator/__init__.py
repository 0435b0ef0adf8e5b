"""
narrator - timed, branching dialogue sequences.

Sub-packages:
- narrator.core: events, timers, frame clock, config, input actions
- narrator.dialogue: catalog, presentation sink, sequence player, branching
- narrator.scenes: shipped scenarios
"""

__version__ = "0.1.0"
