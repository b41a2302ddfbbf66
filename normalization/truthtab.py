# -*- coding: utf-8 -*-
"""
Truth tables with one column per sub-expression, used as a grading oracle.

Rows run from the all-true assignment down to the all-false one: the
assignment integer counts down from 2^n - 1 and the first sorted variable
takes the most significant bit.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from .ast_canon import (
    DEFAULT_MAX_DEPTH,
    Binary,
    Expr,
    Not,
    parse_detailed,
    tokenize,
    variables_of,
)
from .taut import evaluate

logger = logging.getLogger(__name__)

_ENTRY_VALUES = {"1": True, "0": False, "": None}


def _collect(expr: Expr, out: Dict[str, Expr]) -> Dict[str, Expr]:
    if isinstance(expr, Not):
        out.setdefault(expr.render(), expr)
        _collect(expr.operand, out)
    elif isinstance(expr, Binary):
        out.setdefault(expr.render(), expr)
        _collect(expr.left, out)
        _collect(expr.right, out)
    return out


def collect_subexpressions(expr: Expr) -> FrozenSet[str]:
    """Canonical strings of every compound node, the root included.

    Atoms contribute nothing; structurally identical sub-trees collapse.
    """
    return frozenset(_collect(expr, {}))


def assignments(variables: List[str]) -> List[Dict[str, bool]]:
    """All assignments of ``variables``, all-true first, all-false last."""
    n = len(variables)
    rows = []
    for i in range((1 << n) - 1, -1, -1):
        rows.append({
            v: bool((i >> (n - 1 - idx)) & 1)
            for idx, v in enumerate(variables)
        })
    return rows


class CellStatus(Enum):
    IDLE = "idle"
    CORRECT = "correct"
    ERROR = "error"


@dataclass
class Cell:
    """Expected value of one column in one row plus the learner's entry."""
    expected: bool
    entered: Optional[bool] = None
    status: CellStatus = CellStatus.IDLE

    def grade(self) -> CellStatus:
        self.status = CellStatus.CORRECT if self.entered == self.expected else CellStatus.ERROR
        return self.status


@dataclass
class TruthTableRow:
    inputs: Dict[str, bool]
    cells: Dict[str, Cell] = field(default_factory=dict)
    final: Optional[Cell] = None

    def all_cells(self) -> List[Cell]:
        out = list(self.cells.values())
        if self.final is not None:
            out.append(self.final)
        return out


@dataclass(frozen=True)
class GradeSummary:
    correct: int
    errors: int

    @property
    def total(self) -> int:
        return self.correct + self.errors

    @property
    def all_correct(self) -> bool:
        return self.total > 0 and self.errors == 0


class TruthTable:
    """Truth table for a single formula.

    ``columns`` holds the intermediate sub-expressions (neither atoms nor the
    full formula), shortest first. Each row carries one ``Cell`` per column
    and a ``final`` cell for the whole formula. A formula that does not parse
    or has no variables gets no rows.
    """

    def __init__(self, formula: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.formula = formula
        tokens = tokenize(formula)
        self.variables: List[str] = variables_of(tokens)
        self.columns: List[str] = []
        self.rows: List[TruthTableRow] = []
        self.canonical: Optional[str] = None

        outcome = parse_detailed(tokens, max_depth)
        if not outcome.ok:
            logger.warning(f"Truth table not applicable, {formula!r} does not parse ({outcome.failure.value})")
            return
        if not self.variables:
            logger.warning(f"Truth table not applicable, {formula!r} has no variables")
            return

        tree = outcome.expr
        self.canonical = tree.render()
        nodes = _collect(tree, {})
        nodes.pop(self.canonical, None)
        self.columns = sorted(nodes, key=lambda s: (len(s), s))

        for inputs in assignments(self.variables):
            row = TruthTableRow(inputs=inputs)
            for column in self.columns:
                row.cells[column] = Cell(expected=evaluate(nodes[column], inputs))
            row.final = Cell(expected=evaluate(tree, inputs))
            self.rows.append(row)
        logger.debug(f"Built {len(self.rows)} rows x {len(self.columns)} columns for {self.canonical}")

    @property
    def applicable(self) -> bool:
        return bool(self.rows)

    def cell(self, row_index: int, column: Optional[str] = None) -> Cell:
        """Cell at ``row_index``; ``column=None`` selects the full-formula column."""
        row = self.rows[row_index]
        if column is None:
            return row.final
        return row.cells[column]

    def enter(self, row_index: int, column: Optional[str], value: str) -> bool:
        """Record a learner entry; only "1", "0" and "" (clear) are accepted."""
        if value not in _ENTRY_VALUES:
            return False
        target = self.cell(row_index, column)
        target.entered = _ENTRY_VALUES[value]
        target.status = CellStatus.IDLE
        return True

    def grade(self) -> GradeSummary:
        correct = errors = 0
        for row in self.rows:
            for c in row.all_cells():
                if c.grade() is CellStatus.CORRECT:
                    correct += 1
                else:
                    errors += 1
        logger.info(f"Graded {self.canonical}: {correct} correct, {errors} errors")
        return GradeSummary(correct, errors)

    def fill_expected(self) -> None:
        """Enter every expected value; used to reveal the solution."""
        for row in self.rows:
            for c in row.all_cells():
                c.entered = c.expected
                c.status = CellStatus.IDLE


def build_truth_table(formula: str, max_depth: int = DEFAULT_MAX_DEPTH) -> TruthTable:
    return TruthTable(formula, max_depth)


__all__ = [
    "collect_subexpressions",
    "assignments",
    "CellStatus",
    "Cell",
    "TruthTableRow",
    "GradeSummary",
    "TruthTable",
    "build_truth_table",
]
