"""
Strict step-by-step reduction of fully substituted boolean expressions.

A reduction session works on a token list where every variable has already
been replaced by ``0`` or ``1``. At each step only the operators whose
operands are already literals may fire, and among those only the ones with the
highest precedence rank. After every reduction, parenthesized single literals
``( v )`` collapse to ``v`` until none remain.

Usage:
    session = ReductionSession("(P ∧ Q) ∨ ¬ R", {"P": 1, "Q": 0, "R": 1})
    session.substitute()          # ((1 ∧ 0) ∨ (¬ 1))
    session.legal_moves()         # only the ¬, it outranks the ∧
    session.select(index)         # MoveResult(APPLIED | ORDER_VIOLATION | ...)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from normalization.ast_canon import DEFAULT_MAX_DEPTH, parse_detailed, tokenize
from normalization.symbols import (
    BINARY_CONNECTIVES,
    BITS,
    BIT_TRUE,
    LPAREN,
    NOT,
    PRECEDENCE,
    RPAREN,
    bit,
    is_literal,
    literal_value,
)
from normalization.taut import apply_connective, normalize_assignment

logger = logging.getLogger(__name__)

Tokens = Tuple[str, ...]


# ---------------------------------------------------------------------------
# Token-level operations
# ---------------------------------------------------------------------------

def format_tokens(tokens: Sequence[str]) -> str:
    """Join tokens with single spaces, without padding inside parentheses."""
    out = ""
    prev = None
    for tok in tokens:
        if prev is not None and prev != LPAREN and tok != RPAREN:
            out += " "
        out += tok
        prev = tok
    return out


@dataclass(frozen=True)
class Candidate:
    """An operator token whose operands are already literals."""
    index: int
    op: str
    rank: int


def _is_bit(tokens: Sequence[str], i: int) -> bool:
    return 0 <= i < len(tokens) and tokens[i] in BITS


def reducible_tokens(tokens: Sequence[str]) -> List[Candidate]:
    """Every operator that could fire now, with its precedence rank."""
    found = []
    for i, tok in enumerate(tokens):
        if tok == NOT and _is_bit(tokens, i + 1):
            found.append(Candidate(i, tok, PRECEDENCE[tok]))
        elif tok in BINARY_CONNECTIVES and _is_bit(tokens, i - 1) and _is_bit(tokens, i + 1):
            found.append(Candidate(i, tok, PRECEDENCE[tok]))
    return found


def legal_moves(tokens: Sequence[str]) -> List[Candidate]:
    """Reducible operators whose rank is the current maximum."""
    candidates = reducible_tokens(tokens)
    if not candidates:
        return []
    top = max(c.rank for c in candidates)
    return [c for c in candidates if c.rank == top]


def reduce_at(tokens: Sequence[str], index: int) -> Tokens:
    """Fire the operator at ``index`` and splice the resulting literal in.

    Raises ValueError if the token is not reducible.
    """
    tok = tokens[index] if 0 <= index < len(tokens) else None
    if tok == NOT and _is_bit(tokens, index + 1):
        value = tokens[index + 1] != BIT_TRUE
        return tuple(tokens[:index]) + (bit(value),) + tuple(tokens[index + 2:])
    if tok in BINARY_CONNECTIVES and _is_bit(tokens, index - 1) and _is_bit(tokens, index + 1):
        left = tokens[index - 1] == BIT_TRUE
        right = tokens[index + 1] == BIT_TRUE
        value = apply_connective(tok, left, right)
        return tuple(tokens[:index - 1]) + (bit(value),) + tuple(tokens[index + 2:])
    raise ValueError(f"Token {tok!r} at {index} is not reducible")


def strip_literal_parens(tokens: Sequence[str]) -> Tokens:
    """Collapse ``( v )`` to ``v`` repeatedly until no such group remains."""
    current = tuple(tokens)
    changed = True
    while changed:
        changed = False
        out: List[str] = []
        i = 0
        while i < len(current):
            if (
                current[i] == LPAREN
                and i + 2 < len(current)
                and current[i + 1] in BITS
                and current[i + 2] == RPAREN
            ):
                out.append(current[i + 1])
                i += 3
                changed = True
            else:
                out.append(current[i])
                i += 1
        current = tuple(out)
    return current


def substitute(tokens: Sequence[str], assignment: Mapping[str, Any]) -> Tokens:
    """Replace variables and T/F literals by 0/1. Unassigned variables become 0."""
    values = normalize_assignment(assignment)
    out = []
    for tok in tokens:
        if tok in PRECEDENCE or tok in (LPAREN, RPAREN) or tok in BITS:
            out.append(tok)
        elif is_literal(tok):
            out.append(bit(literal_value(tok)))
        else:
            out.append(bit(values.get(tok.upper(), False)))
    return tuple(out)


def is_terminal(tokens: Sequence[str]) -> bool:
    return len(tokens) == 1 and tokens[0] in BITS


def solve_strictly(tokens: Sequence[str]) -> List[Tokens]:
    """Reduce to a single literal, always firing the leftmost legal move.

    Returns the successive states after each reduction. Stops early if the
    sequence gets stuck (no reducible operator but not terminal).
    """
    current = strip_literal_parens(tokens)
    states: List[Tokens] = []
    while not is_terminal(current):
        moves = legal_moves(current)
        if not moves:
            logger.warning(f"Reduction stuck at {format_tokens(current)!r}")
            break
        current = strip_literal_parens(reduce_at(current, moves[0].index))
        states.append(current)
    return states


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class StepKind(Enum):
    FORMULA = "formula"
    SUBSTITUTED = "substituted"
    REDUCTION = "reduction"


@dataclass(frozen=True)
class Step:
    index: int
    kind: StepKind
    tokens: Tokens

    @property
    def content(self) -> str:
        return format_tokens(self.tokens)

    def to_record(self) -> Dict[str, Any]:
        return {"step": self.index, "kind": self.kind.value, "content": self.content}


class MoveStatus(Enum):
    APPLIED = "applied"
    ORDER_VIOLATION = "order_violation"
    NOT_REDUCIBLE = "not_reducible"
    NOT_READY = "not_ready"
    SOLVED = "solved"


_MOVE_MESSAGES = {
    MoveStatus.APPLIED: "",
    MoveStatus.ORDER_VIOLATION: "Wrong order! Reduce the higher-precedence operators first.",
    MoveStatus.NOT_REDUCIBLE: "That token cannot be reduced yet.",
    MoveStatus.NOT_READY: "Substitute the variable values first.",
    MoveStatus.SOLVED: "The expression is already fully reduced.",
}


@dataclass(frozen=True)
class MoveResult:
    status: MoveStatus
    step: Optional[Step] = None

    @property
    def accepted(self) -> bool:
        return self.status is MoveStatus.APPLIED

    @property
    def message(self) -> str:
        return _MOVE_MESSAGES[self.status]


class ReductionSession:
    """One formula reduced one user action at a time.

    History is append-only: step 0 is the formula, step 1 the substituted
    token list, every later step one accepted reduction.
    """

    def __init__(self, formula: str, assignment: Optional[Mapping[str, Any]] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.formula = formula
        self.assignment = normalize_assignment(assignment)
        # Rank-only move checks are sound on fully parenthesized input.
        outcome = parse_detailed(tokenize(formula), max_depth)
        tokens = tokenize(outcome.expr.render()) if outcome.ok else tokenize(formula)
        self._history: List[Step] = [Step(0, StepKind.FORMULA, tuple(tokens))]

    @classmethod
    def from_tokens(cls, tokens: Sequence[str]) -> "ReductionSession":
        """Start from an already substituted 0/1 token list."""
        session = cls.__new__(cls)
        session.formula = format_tokens(tokens)
        session.assignment = {}
        session._history = [Step(0, StepKind.SUBSTITUTED, strip_literal_parens(tokens))]
        return session

    @property
    def history(self) -> Tuple[Step, ...]:
        return tuple(self._history)

    @property
    def current(self) -> Step:
        return self._history[-1]

    @property
    def tokens(self) -> Tokens:
        return self.current.tokens

    @property
    def substituted(self) -> bool:
        return self.current.kind is not StepKind.FORMULA

    @property
    def is_solved(self) -> bool:
        return self.substituted and is_terminal(self.tokens)

    @property
    def result(self) -> Optional[bool]:
        if not self.is_solved:
            return None
        return self.tokens[0] == BIT_TRUE

    def substitute(self) -> Optional[Step]:
        """Append the substituted state; ignored once history has moved on."""
        if len(self._history) != 1 or self.substituted:
            logger.warning("Substitution ignored, values are already substituted")
            return None
        tokens = strip_literal_parens(substitute(self.tokens, self.assignment))
        return self._append(StepKind.SUBSTITUTED, tokens)

    def reducible(self) -> List[Candidate]:
        if not self.substituted:
            return []
        return reducible_tokens(self.tokens)

    def legal_moves(self) -> List[Candidate]:
        if not self.substituted:
            return []
        return legal_moves(self.tokens)

    def select(self, index: int) -> MoveResult:
        """Try to fire the operator token at ``index`` of the current state."""
        if not self.substituted:
            return MoveResult(MoveStatus.NOT_READY)
        if self.is_solved:
            return MoveResult(MoveStatus.SOLVED)

        candidates = self.reducible()
        chosen = next((c for c in candidates if c.index == index), None)
        if chosen is None:
            return MoveResult(MoveStatus.NOT_REDUCIBLE)

        top = max(c.rank for c in candidates)
        if chosen.rank < top:
            logger.warning(
                f"Rejected {chosen.op} at {index}: rank {chosen.rank} while rank {top} is reducible"
            )
            return MoveResult(MoveStatus.ORDER_VIOLATION)

        tokens = strip_literal_parens(reduce_at(self.tokens, index))
        step = self._append(StepKind.REDUCTION, tokens)
        if self.is_solved:
            logger.info(f"Solved {self.formula!r} in {len(self._history) - 1} steps: {tokens[0]}")
        return MoveResult(MoveStatus.APPLIED, step)

    def solve(self) -> Optional[bool]:
        """Substitute if needed and play the leftmost legal move until solved."""
        if not self.substituted:
            self.substitute()
        while not self.is_solved:
            moves = self.legal_moves()
            if not moves:
                logger.warning(f"Session stuck at {self.current.content!r}")
                break
            self.select(moves[0].index)
        return self.result

    def to_records(self) -> List[Dict[str, Any]]:
        return [step.to_record() for step in self._history]

    def _append(self, kind: StepKind, tokens: Tokens) -> Step:
        step = Step(len(self._history), kind, tokens)
        self._history.append(step)
        logger.debug(f"Step {step.index} ({kind.value}): {step.content}")
        return step


__all__ = [
    "format_tokens",
    "Candidate",
    "reducible_tokens",
    "legal_moves",
    "reduce_at",
    "strip_literal_parens",
    "substitute",
    "is_terminal",
    "solve_strictly",
    "StepKind",
    "Step",
    "MoveStatus",
    "MoveResult",
    "ReductionSession",
]
