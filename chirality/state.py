"""Round state — single source of truth passed through the round graph."""

from typing import Literal, TypedDict

from chirality.contracts import U, W, Finals, LearningTrace, Problem


class RoundState(TypedDict):
    problem: Problem  # Validated input. Immutable after init.
    finals: Finals  # Latest accepted Triple per kind.
    deltas: dict[str, W]  # Per-kind changes within the current round.
    warnings: dict[str, list[str]]  # Per-kind warnings raised within the current round.
    round: int  # Current round number. Starts at 1.
    max_rounds: int  # Round ceiling for this run.
    convergence: U | None  # Verdict of the latest completed round.
    traces: list[LearningTrace]  # One entry per completed round, in order.
    status: Literal["in_progress", "closed", "max_rounds_reached"]
