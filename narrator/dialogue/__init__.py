"""
Dialogue module - scripted, branching dialogue sequences.

Provides:
- Dialogue content and catalogs (JSON, schema-validated)
- The presentation sink contract and a state-backed sink
- Timed sequence playback with choice binding
- Branch helpers and continuation graphs
"""

from narrator.dialogue.content import (
    DialogueMessage,
    Choice,
    BoundChoice,
    Plain,
    WithChoices,
    DialogueContent,
    make_content,
)
from narrator.dialogue.catalog import DialogueCatalog
from narrator.dialogue.errors import (
    ContentNotFoundError,
    CatalogError,
    GraphError,
    RunInProgressError,
)
from narrator.dialogue.sink import PresentationSink, PresentationState, StateSink
from narrator.dialogue.sequencer import (
    SequenceStep,
    SequencerRun,
    SequencePlayer,
    RunState,
    bind_choices,
)
from narrator.dialogue.branching import (
    then_play,
    chain,
    GraphNode,
    ContinuationGraph,
    GraphWalker,
)

__all__ = [
    "DialogueMessage",
    "Choice",
    "BoundChoice",
    "Plain",
    "WithChoices",
    "DialogueContent",
    "make_content",
    "DialogueCatalog",
    "ContentNotFoundError",
    "CatalogError",
    "GraphError",
    "RunInProgressError",
    "PresentationSink",
    "PresentationState",
    "StateSink",
    "SequenceStep",
    "SequencerRun",
    "SequencePlayer",
    "RunState",
    "bind_choices",
    "then_play",
    "chain",
    "GraphNode",
    "ContinuationGraph",
    "GraphWalker",
]
