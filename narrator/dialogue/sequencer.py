"""
Sequence player - plays ordered dialogue steps with timed pacing.

A run walks its steps one at a time:

    show step 0 -> wait step delay -> hide -> wait gap -> show step 1 -> ...

A step whose content carries choices stops the walk. The run then waits,
with no timeout, until the user picks a choice; the bound action takes
over from there (usually by starting another run). A run that reaches
the end of its steps without stopping on a choice calls on_complete.

Every deferred callback is tagged with the run generation it was
scheduled under. Starting a run bumps the generation, so timers left
over from an earlier run discard themselves instead of touching the
display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Optional, Sequence, Union

from narrator.core.config import OverlapPolicy, SequencerConfig
from narrator.core.events import EventBus, SequenceEvent
from narrator.core.timers import Scheduler, TimerHandle
from narrator.dialogue.catalog import DialogueCatalog
from narrator.dialogue.content import (
    BoundChoice,
    ChoiceAction,
    DialogueContent,
    WithChoices,
    noop,
)
from narrator.dialogue.errors import ContentNotFoundError, RunInProgressError
from narrator.dialogue.sink import PresentationSink


logger = logging.getLogger(__name__)

ChoiceActions = Union[ChoiceAction, Sequence[Optional[ChoiceAction]], None]
CompletionCallback = Callable[[], None]

INLINE_KEY = "<inline>"


@dataclass
class SequenceStep:
    """
    One beat of a sequence.

    Attributes:
        key: Catalog key of the content to show
        delay_ms: How long the beat stays up before the next one
                  (config default when None; ignored on the last step)
        choice_actions: Actions for the content's choices - a list bound
                        by index, or one callable shared by every choice
        content: Already resolved content, shown instead of a catalog entry

    Exactly one of key and content must be given.
    """
    key: Optional[str] = None
    delay_ms: Optional[float] = None
    choice_actions: ChoiceActions = None
    content: Optional[DialogueContent] = None

    def __post_init__(self):
        if (self.key is None) == (self.content is None):
            raise ValueError("SequenceStep needs exactly one of key or content")

    @property
    def label(self) -> str:
        """Name used in logs and events."""
        return self.key if self.key is not None else INLINE_KEY


class RunState(Enum):
    """Lifecycle of a SequencerRun."""
    IDLE = auto()
    PLAYING = auto()
    AWAITING_CHOICE = auto()
    COMPLETED = auto()
    SUPERSEDED = auto()
    ABORTED = auto()


class SequencerRun:
    """
    State of one play_sequence() call.

    Attributes:
        generation: Player generation this run was started under
        steps: The steps being played
        index: Index of the step currently (or last) shown
        state: Current RunState
        completed: True once the run reached its end, either naturally or
                   by stopping on a choice in its final step
        chosen_index: Choice the user picked, if the run ended on one
    """

    def __init__(
        self,
        generation: int,
        steps: list[SequenceStep],
        on_complete: Optional[CompletionCallback] = None,
    ):
        self.generation = generation
        self.steps = steps
        self.on_complete = on_complete
        self.index = 0
        self.state = RunState.IDLE
        self.completed = False
        self.chosen_index: Optional[int] = None
        self.contents: list[DialogueContent] = []
        self.timer: Optional[TimerHandle] = None

    @property
    def is_active(self) -> bool:
        return self.state in (RunState.PLAYING, RunState.AWAITING_CHOICE)

    @property
    def current_step(self) -> Optional[SequenceStep]:
        if 0 <= self.index < len(self.steps):
            return self.steps[self.index]
        return None

    def __repr__(self) -> str:
        return (
            f"SequencerRun(generation={self.generation}, index={self.index}/"
            f"{len(self.steps)}, state={self.state.name})"
        )


def bind_choices(content: WithChoices, choice_actions: ChoiceActions = None) -> list[BoundChoice]:
    """
    Attach actions to a content's choices by position.

    - list: action i goes to choice i
    - callable: the same action for every choice
    - None: every choice is inert

    Missing or None list entries bind a no-op (and log a warning) so a
    scripted scene can never soft-lock on a choice that does nothing.
    """
    count = len(content.choices)

    if choice_actions is None:
        actions: list[ChoiceAction] = [noop] * count
    elif callable(choice_actions):
        actions = [choice_actions] * count
    else:
        provided = list(choice_actions)
        actions = []
        for i in range(count):
            action = provided[i] if i < len(provided) else None
            if action is None:
                logger.warning(
                    f"No action bound for choice {i} ({content.choices[i].text!r}); using a no-op"
                )
                action = noop
            actions.append(action)
        if len(provided) > count:
            logger.warning(f"{len(provided) - count} extra choice action(s) ignored")

    return [BoundChoice(choice.text, action) for choice, action in zip(content.choices, actions)]


class SequencePlayer:
    """
    Drives a PresentationSink through sequences of catalog content.

    Usage:
        player = SequencePlayer(catalog, sink, scheduler)
        player.play_sequence(
            [
                SequenceStep("engineerFirst", delay_ms=3000),
                SequenceStep("ccWorking", choice_actions=[on_yes, on_no]),
            ],
            on_complete=on_done,
        )

        # Each frame
        scheduler.update(dt)
    """

    def __init__(
        self,
        catalog: DialogueCatalog,
        sink: PresentationSink,
        scheduler: Scheduler,
        config: SequencerConfig | None = None,
        event_bus: EventBus | None = None,
    ):
        self.catalog = catalog
        self.sink = sink
        self.scheduler = scheduler
        self.config = config or SequencerConfig()
        self.event_bus = event_bus

        self._generation = 0
        self._current: Optional[SequencerRun] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current_run(self) -> Optional[SequencerRun]:
        return self._current

    @property
    def is_playing(self) -> bool:
        return self._current is not None and self._current.is_active

    # --- Public API ---

    def play_sequence(
        self,
        steps: Iterable[SequenceStep],
        on_complete: Optional[CompletionCallback] = None,
    ) -> SequencerRun:
        """
        Start a new run over steps.

        Every key is resolved before anything is shown. An empty step
        list completes immediately.

        Raises:
            ContentNotFoundError: If a key is not in the catalog (the sink
                                  is hidden first)
            RunInProgressError: If another run is playing and the overlap
                                policy is REJECT
        """
        run = self._begin_run(list(steps), on_complete)

        try:
            run.contents = [self.resolve(step) for step in run.steps]
        except ContentNotFoundError as e:
            self._abort(run, e)
            raise

        if not run.steps:
            self._complete(run)
        else:
            self._show_step(run, 0)
        return run

    def play_contents(
        self,
        contents: Iterable[DialogueContent],
        delays: Optional[Sequence[Optional[float]]] = None,
        on_complete: Optional[CompletionCallback] = None,
    ) -> SequencerRun:
        """
        Play already resolved content in order.

        delays[i] is how long content i stays up; missing or None entries
        use the config default. Choices on the content are inert unless the
        caller binds them through play_sequence() instead.
        """
        delays = list(delays or [])
        steps = [
            SequenceStep(content=content, delay_ms=delays[i] if i < len(delays) else None)
            for i, content in enumerate(contents)
        ]
        return self.play_sequence(steps, on_complete)

    def play_single(
        self,
        content: Union[str, DialogueContent],
        choice_actions: ChoiceActions = None,
    ) -> SequencerRun:
        """Show one message (a catalog key or resolved content) right away."""
        if isinstance(content, str):
            step = SequenceStep(key=content, choice_actions=choice_actions)
        else:
            step = SequenceStep(content=content, choice_actions=choice_actions)
        return self.play_sequence([step])

    def resolve(self, step: SequenceStep) -> DialogueContent:
        """Content a step shows: its inline content or its catalog entry."""
        if step.content is not None:
            return step.content
        return self.catalog.get(step.key)

    def hide(self) -> None:
        """Hide whatever is currently displayed."""
        self.sink.hide()

    def stop(self) -> None:
        """
        Hide the display and end the current run.

        Pending timers and deferred callbacks of the run are dropped and
        its choices stop responding.
        """
        if self._current is not None and self._current.is_active:
            self._supersede(self._current)
        self._generation += 1
        self.sink.hide()

    def defer(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule callback, dropping it if a new run starts before it fires.
        """
        return self.scheduler.schedule(delay_ms, self._guarded(self._generation, callback))

    # --- Run lifecycle ---

    def _begin_run(
        self,
        steps: list[SequenceStep],
        on_complete: Optional[CompletionCallback],
    ) -> SequencerRun:
        previous = self._current
        if previous is not None and previous.is_active:
            if (
                self.config.overlap_policy == OverlapPolicy.REJECT
                and previous.state == RunState.PLAYING
            ):
                raise RunInProgressError(
                    f"Run {previous.generation} is still playing step {previous.index}"
                )
            self._supersede(previous)

        self._generation += 1
        run = SequencerRun(self._generation, steps, on_complete)
        run.state = RunState.PLAYING
        self._current = run

        logger.debug(f"Run {run.generation} started with {len(steps)} step(s)")
        self._publish(SequenceEvent.RUN_STARTED, run=run)
        return run

    def _supersede(self, run: SequencerRun) -> None:
        if run.timer is not None:
            run.timer.cancel()
            run.timer = None
        run.state = RunState.SUPERSEDED
        logger.debug(f"Run {run.generation} superseded at step {run.index}")
        self._publish(SequenceEvent.RUN_SUPERSEDED, run=run)

    def _abort(self, run: SequencerRun, error: Exception) -> None:
        self.sink.hide()
        run.state = RunState.ABORTED
        logger.error(f"Run {run.generation} aborted: {error}")
        self._publish(SequenceEvent.RUN_ABORTED, run=run, error=error)

    def _complete(self, run: SequencerRun) -> None:
        run.state = RunState.COMPLETED
        run.completed = True
        run.timer = None
        logger.info(f"Run {run.generation} completed ({len(run.steps)} step(s))")
        self._publish(SequenceEvent.RUN_COMPLETED, run=run)

        if run.on_complete:
            run.on_complete()

    # --- Stepping ---

    def _show_step(self, run: SequencerRun, index: int) -> None:
        run.index = index
        run.timer = None
        step = run.steps[index]
        content = run.contents[index]
        dialogue = content.dialogue
        is_last = index == len(run.steps) - 1

        if isinstance(content, WithChoices):
            choices = [
                BoundChoice(bound.text, self._choice_action(run, i, bound.action))
                for i, bound in enumerate(bind_choices(content, step.choice_actions))
            ]
            self.sink.show(dialogue.message, dialogue.avatar, dialogue.speaker_name, choices)
            run.state = RunState.AWAITING_CHOICE

            if is_last:
                run.completed = True
            else:
                logger.warning(
                    f"Step '{step.label}' has choices; "
                    f"{len(run.steps) - index - 1} later step(s) will not play"
                )

            logger.debug(f"Run {run.generation} waiting for a choice on '{step.label}'")
            self._publish(SequenceEvent.STEP_SHOWN, run=run, key=step.label, index=index)
            self._publish(SequenceEvent.AWAITING_CHOICE, run=run, key=step.label, choices=choices)
            return

        self.sink.show(dialogue.message, dialogue.avatar, dialogue.speaker_name)
        logger.debug(f"Run {run.generation} showed '{step.label}' ({index + 1}/{len(run.steps)})")
        self._publish(SequenceEvent.STEP_SHOWN, run=run, key=step.label, index=index)

        if is_last:
            self._complete(run)
            return

        delay = step.delay_ms if step.delay_ms is not None else self.config.default_delay_ms
        run.timer = self.scheduler.schedule(
            delay, self._guarded(run.generation, lambda: self._advance(run))
        )

    def _advance(self, run: SequencerRun) -> None:
        self.sink.hide()
        next_index = run.index + 1
        run.timer = self.scheduler.schedule(
            self.config.message_gap_ms,
            self._guarded(run.generation, lambda: self._show_step(run, next_index)),
        )

    def _choice_action(
        self,
        run: SequencerRun,
        index: int,
        action: ChoiceAction,
    ) -> ChoiceAction:
        def select() -> None:
            if run.generation != self._generation or run.state != RunState.AWAITING_CHOICE:
                logger.warning(
                    f"Ignoring choice {index} of run {run.generation} ({run.state.name})"
                )
                return

            run.state = RunState.COMPLETED
            run.chosen_index = index
            logger.debug(f"Run {run.generation} choice {index} selected")
            self._publish(SequenceEvent.CHOICE_SELECTED, run=run, index=index)
            action()

        return select

    def _guarded(self, generation: int, callback: Callable[[], None]) -> Callable[[], None]:
        def fire() -> None:
            if generation != self._generation:
                logger.debug(
                    f"Discarding stale callback from run {generation} "
                    f"(current {self._generation})"
                )
                return
            callback()

        return fire

    def _publish(self, event_type: SequenceEvent, **data) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)
