"""
Branch composition - what happens after the user picks a choice.

Two ways to build branching conversations:

- Handlers: then_play() and chain() build zero-argument callables that
  can be passed straight into SequenceStep.choice_actions.
- Continuation graph: each GraphNode is a step list plus where to go
  next (per choice, or on natural completion). A GraphWalker plays the
  graph, so a whole branching scene is data instead of nested closures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional, Sequence, Union

from narrator.dialogue.content import WithChoices
from narrator.dialogue.errors import ContentNotFoundError, GraphError
from narrator.dialogue.sequencer import (
    CompletionCallback,
    SequencePlayer,
    SequenceStep,
    SequencerRun,
    bind_choices,
)


logger = logging.getLogger(__name__)

BranchHandler = Callable[[], None]


def then_play(
    player: SequencePlayer,
    steps: Sequence[SequenceStep],
    on_complete: Optional[CompletionCallback] = None,
    lead_in_ms: float = 0,
) -> BranchHandler:
    """
    Handler that hides the current message and plays steps.

    With lead_in_ms the new run starts after that pause, unless some
    other run started in the meantime.
    """
    steps = list(steps)

    def handler() -> None:
        player.hide()
        if lead_in_ms > 0:
            player.defer(lead_in_ms, lambda: player.play_sequence(steps, on_complete))
        else:
            player.play_sequence(steps, on_complete)

    return handler


def chain(*handlers: Optional[BranchHandler]) -> BranchHandler:
    """Handler that calls each handler in order (None entries skipped)."""
    def handler() -> None:
        for h in handlers:
            if h is not None:
                h()

    return handler


@dataclass
class GraphNode:
    """
    A node of a continuation graph.

    Attributes:
        id: Unique node id
        steps: Steps played when the node is entered
        branches: Where each choice of the final step leads - a list by
                  choice index (None ends the walk) or one id for all
        next: Node entered when the steps complete without a choice
        lead_in_ms: Pause before the steps start
        effects: Side effects run when the steps complete without a choice
    """
    id: str
    steps: list[SequenceStep]
    branches: Union[str, Sequence[Optional[str]], None] = None
    next: Optional[str] = None
    lead_in_ms: float = 0
    effects: Sequence[Callable[[], None]] = field(default_factory=tuple)

    def targets(self) -> list[str]:
        """Every node id this node can lead to."""
        found = []
        if isinstance(self.branches, str):
            found.append(self.branches)
        elif self.branches is not None:
            found.extend(t for t in self.branches if t is not None)
        if self.next is not None:
            found.append(self.next)
        return found

    def branch_target(self, index: int) -> Optional[str]:
        if isinstance(self.branches, str):
            return self.branches
        if self.branches is not None and index < len(self.branches):
            return self.branches[index]
        return None


class ContinuationGraph:
    """
    A validated set of GraphNodes with a start node.

    Raises:
        GraphError: On duplicate ids, a missing start node, or a
                    branch/next target that does not exist
    """

    def __init__(self, nodes: Iterable[GraphNode], start: str):
        self.nodes: dict[str, GraphNode] = {}
        for node in nodes:
            if node.id in self.nodes:
                raise GraphError(f"Duplicate graph node id: {node.id}")
            self.nodes[node.id] = node

        if start not in self.nodes:
            raise GraphError(f"Start node not found: {start}")
        self.start = start

        for node in self.nodes.values():
            for target in node.targets():
                if target not in self.nodes:
                    raise GraphError(f"Node '{node.id}' leads to unknown node '{target}'")

    def __getitem__(self, node_id: str) -> GraphNode:
        return self.nodes[node_id]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def keys(self) -> list[str]:
        """Catalog keys used by any node, in node order, without repeats."""
        found: dict[str, None] = {}
        for node in self.nodes.values():
            for step in node.steps:
                if step.key is not None:
                    found[step.key] = None
        return list(found)


class GraphWalker:
    """
    Plays a ContinuationGraph on a SequencePlayer.

    Entering a node through a choice hides the chosen message first.
    Following a node's `next` holds its final beat for that step's delay,
    hides it and waits the usual gap before the next node starts. A node
    with nowhere left to go finishes the walk.

    Usage:
        walker = GraphWalker(player, graph)
        walker.start(on_finish=lambda: print("done"))
    """

    def __init__(self, player: SequencePlayer, graph: ContinuationGraph):
        self.player = player
        self.graph = graph
        self.path: list[str] = []
        self.finished = False
        self._on_finish: Optional[Callable[[], None]] = None

    @property
    def current_node(self) -> Optional[GraphNode]:
        return self.graph[self.path[-1]] if self.path else None

    def start(
        self,
        on_finish: Optional[Callable[[], None]] = None,
        node_id: Optional[str] = None,
    ) -> None:
        """
        Play the graph from its start node (or node_id).

        Every catalog key in the graph is checked first, so a missing entry
        fails here instead of midway through the conversation.

        Raises:
            ContentNotFoundError: If a key is not in the catalog (the player
                                  is stopped and the display hidden first)
        """
        try:
            self.player.catalog.require(self.graph.keys())
        except ContentNotFoundError as e:
            logger.error(f"Dialogue graph cannot start: {e}")
            self.player.stop()
            raise

        self.path = []
        self.finished = False
        self._on_finish = on_finish
        self._enter(node_id or self.graph.start)

    def _enter(self, node_id: str) -> None:
        node = self.graph[node_id]
        self.path.append(node_id)
        logger.debug(f"Entering dialogue node '{node_id}'")

        if node.lead_in_ms > 0:
            self.player.defer(node.lead_in_ms, lambda: self._play(node))
        else:
            self._play(node)

    def _play(self, node: GraphNode) -> SequencerRun:
        steps = list(node.steps)
        if steps:
            last = steps[-1]
            content = self.player.resolve(last)
            if isinstance(content, WithChoices):
                # Authored actions run before the walker moves on
                authored = bind_choices(content, last.choice_actions)
                steps[-1] = replace(
                    last,
                    choice_actions=[
                        chain(bound.action, self._choice_handler(node, i))
                        for i, bound in enumerate(authored)
                    ],
                )

        return self.player.play_sequence(steps, on_complete=lambda: self._node_completed(node))

    def _choice_handler(self, node: GraphNode, index: int) -> Callable[[], None]:
        def handler() -> None:
            self.player.hide()
            target = node.branch_target(index)
            if target is None:
                self._finish()
            else:
                self._enter(target)

        return handler

    def _node_completed(self, node: GraphNode) -> None:
        for effect in node.effects:
            effect()

        if node.next is None:
            self._finish()
            return

        last = node.steps[-1] if node.steps else None
        hold = self.player.config.default_delay_ms
        if last is not None and last.delay_ms is not None:
            hold = last.delay_ms

        def leave() -> None:
            self.player.hide()
            self.player.defer(self.player.config.message_gap_ms, lambda: self._enter(node.next))

        self.player.defer(hold, leave)

    def _finish(self) -> None:
        if self.finished:
            return
        self.finished = True
        logger.info(f"Dialogue graph finished after {' -> '.join(self.path)}")
        if self._on_finish:
            self._on_finish()
