"""
Sequencer configuration.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any, Mapping


class OverlapPolicy(Enum):
    """What happens when a run starts while another is still playing."""
    SUPERSEDE = auto()  # new run wins, old timers are orphaned
    REJECT = auto()     # RunInProgressError


class SequencerConfig:
    """Timing and policy configuration for the sequence player."""

    def __init__(
        self,
        default_delay_ms: float = 3000,
        message_gap_ms: float = 500,
        branch_lead_in_ms: float = 500,
        overlap_policy: OverlapPolicy = OverlapPolicy.SUPERSEDE,
    ):
        for name, value in (
            ("default_delay_ms", default_delay_ms),
            ("message_gap_ms", message_gap_ms),
            ("branch_lead_in_ms", branch_lead_in_ms),
        ):
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        self.default_delay_ms = default_delay_ms
        self.message_gap_ms = message_gap_ms
        self.branch_lead_in_ms = branch_lead_in_ms
        self.overlap_policy = overlap_policy

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SequencerConfig:
        """
        Build a config from plain data (e.g. a parsed JSON settings file).

        The overlap policy may be given by name ("supersede" / "reject").

        Raises:
            ValueError: On unknown keys, an unknown policy or negative timings
        """
        known = {"default_delay_ms", "message_gap_ms", "branch_lead_in_ms", "overlap_policy"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown sequencer config keys: {sorted(unknown)}")

        kwargs = dict(data)
        policy = kwargs.get("overlap_policy")
        if isinstance(policy, str):
            try:
                kwargs["overlap_policy"] = OverlapPolicy[policy.upper()]
            except KeyError:
                raise ValueError(f"Unknown overlap policy: {policy}") from None

        return cls(**kwargs)

    def __repr__(self) -> str:
        return (
            f"SequencerConfig(default_delay_ms={self.default_delay_ms}, "
            f"message_gap_ms={self.message_gap_ms}, "
            f"branch_lead_in_ms={self.branch_lead_in_ms}, "
            f"overlap_policy={self.overlap_policy.name})"
        )
