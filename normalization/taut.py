"""
Two-valued evaluation of expression trees.

Evaluation is total: the parse-error atom and unknown variables are false.
"""

import logging
from itertools import product
from typing import Any, Dict, Mapping, Optional

from .ast_canon import (
    DEFAULT_MAX_DEPTH,
    Atom,
    Binary,
    Expr,
    Not,
    is_parse_error,
    parse,
    parse_formula,
    tokenize,
    variables_of,
)
from .symbols import AND, IFF, IMPLIES, OR, is_literal, literal_value

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"1", "T", "TRUE"})


def normalize_assignment(assignment: Optional[Mapping[str, Any]]) -> Dict[str, bool]:
    """Upper-case variable names and coerce values to bool.

    Strings are read as truth values ("1", "T", "true"); anything else goes
    through ``bool``.
    """
    if not assignment:
        return {}
    out: Dict[str, bool] = {}
    for name, value in assignment.items():
        if isinstance(value, str):
            out[name.upper()] = value.strip().upper() in _TRUE_STRINGS
        else:
            out[name.upper()] = bool(value)
    return out


def apply_connective(op: str, left: bool, right: bool) -> bool:
    """Truth function of a binary connective."""
    if op == AND:
        return left and right
    if op == OR:
        return left or right
    if op == IMPLIES:
        return (not left) or right
    if op == IFF:
        return left == right
    return False


def evaluate(expr: Expr, assignment: Optional[Mapping[str, Any]] = None) -> bool:
    """Value of ``expr`` under ``assignment`` (missing variables are false)."""
    return _evaluate(expr, normalize_assignment(assignment))


def _evaluate(expr: Expr, values: Dict[str, bool]) -> bool:
    if isinstance(expr, Atom):
        if is_parse_error(expr):
            return False
        if is_literal(expr.name):
            return literal_value(expr.name)
        return values.get(expr.name.upper(), False)

    if isinstance(expr, Not):
        return not _evaluate(expr.operand, values)

    if isinstance(expr, Binary):
        left = _evaluate(expr.left, values)
        right = _evaluate(expr.right, values)
        return apply_connective(expr.op, left, right)

    return False


def evaluate_formula(
    formula: str,
    assignment: Optional[Mapping[str, Any]] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> bool:
    """Tokenize, parse and evaluate a raw formula string."""
    return evaluate(parse_formula(formula, max_depth), assignment)


def is_tautology(formula: str) -> bool:
    """
    Check whether a formula is true under every assignment of its variables.

    Returns False for formulas without variables and for malformed input.
    """
    tokens = tokenize(formula)
    atoms = variables_of(tokens)
    if not atoms:
        return False

    tree = parse(tokens)
    if is_parse_error(tree):
        return False

    for bits in product([True, False], repeat=len(atoms)):
        if not _evaluate(tree, dict(zip(atoms, bits))):
            logger.debug(f"{formula!r} falsified by {dict(zip(atoms, bits))}")
            return False
    return True


__all__ = [
    "normalize_assignment",
    "apply_connective",
    "evaluate",
    "evaluate_formula",
    "is_tautology",
]
