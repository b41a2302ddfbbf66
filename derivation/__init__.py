"""Logimaster step-by-step derivation package."""

from .stepwise import (
    Candidate,
    MoveResult,
    MoveStatus,
    ReductionSession,
    Step,
    StepKind,
    legal_moves,
    reducible_tokens,
    solve_strictly,
    strip_literal_parens,
)

__all__ = [
    "Candidate",
    "MoveResult",
    "MoveStatus",
    "ReductionSession",
    "Step",
    "StepKind",
    "legal_moves",
    "reducible_tokens",
    "solve_strictly",
    "strip_literal_parens",
]
