"""Grouping checks against the canonical fully-parenthesized form.

Two exercises are supported:

- ``classify_grouping``: any learner-typed formula is CORRECT when it is
  already in strict canonical form, LOOSE when it parses but is grouped
  differently, and INVALID when it does not parse at all.
- ``check_answer``: the learner parenthesizes a generated flat formula; a
  wrong answer is diagnosed as UNBALANCED, MODIFIED (symbols changed) or
  WRONG_GROUPING.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .ast_canon import (
    DEFAULT_MAX_DEPTH,
    ParseFailure,
    is_balanced,
    parse_detailed,
    strip_whitespace,
    to_glyphs,
    tokenize,
)
from .symbols import LPAREN, RPAREN

logger = logging.getLogger(__name__)


class GroupingStatus(Enum):
    CORRECT = "correct"
    LOOSE = "valid_but_loose"
    INVALID = "invalid"
    UNBALANCED = "unbalanced"
    MODIFIED = "modified"
    WRONG_GROUPING = "wrong_grouping"


_MESSAGES = {
    GroupingStatus.CORRECT: "",
    GroupingStatus.LOOSE: "Valid syntax, but not in strict grouping.",
    GroupingStatus.INVALID: "Syntax error: invalid structure.",
    GroupingStatus.UNBALANCED: "Unbalanced parentheses.",
    GroupingStatus.MODIFIED: "Variables or connectives were modified.",
    GroupingStatus.WRONG_GROUPING: "Incorrect grouping. Check the precedence order.",
}


@dataclass(frozen=True)
class GroupingVerdict:
    status: GroupingStatus
    canonical: Optional[str] = None
    failure: Optional[ParseFailure] = None

    @property
    def message(self) -> str:
        return _MESSAGES[self.status]

    @property
    def correct(self) -> bool:
        return self.status is GroupingStatus.CORRECT


def compact(s: str) -> str:
    """Glyph-mapped, whitespace-free form used for all string comparisons."""
    return strip_whitespace(to_glyphs(s))


def canonical_form(s: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Optional[str]:
    """Canonical rendering of ``s``, or None when it does not parse."""
    outcome = parse_detailed(tokenize(s), max_depth)
    if not outcome.ok:
        return None
    return outcome.expr.render()


def classify_grouping(s: str, max_depth: int = DEFAULT_MAX_DEPTH) -> GroupingVerdict:
    outcome = parse_detailed(tokenize(s), max_depth)
    if not outcome.ok:
        return GroupingVerdict(GroupingStatus.INVALID, failure=outcome.failure)

    ideal = outcome.expr.render()
    if compact(s) == compact(ideal):
        return GroupingVerdict(GroupingStatus.CORRECT, ideal)
    return GroupingVerdict(GroupingStatus.LOOSE, ideal)


@dataclass(frozen=True)
class SyntaxProblem:
    """Flat formula plus the canonical grouping the learner must reproduce."""
    raw: str
    expected: str


def check_answer(problem: SyntaxProblem, answer: str) -> GroupingVerdict:
    """Grade a parenthesization of ``problem.raw`` against ``problem.expected``."""
    expected = problem.expected
    clean_answer = compact(answer)
    if clean_answer == compact(expected):
        return GroupingVerdict(GroupingStatus.CORRECT, expected)

    if not is_balanced(clean_answer):
        status = GroupingStatus.UNBALANCED
    elif _without_parens(clean_answer) != _without_parens(compact(problem.raw)):
        status = GroupingStatus.MODIFIED
    else:
        status = GroupingStatus.WRONG_GROUPING
    logger.debug(f"Answer {answer!r} rejected for {problem.raw!r}: {status.value}")
    return GroupingVerdict(status, expected)


def _without_parens(s: str) -> str:
    return s.replace(LPAREN, "").replace(RPAREN, "")


__all__ = [
    "GroupingStatus",
    "GroupingVerdict",
    "SyntaxProblem",
    "compact",
    "canonical_form",
    "classify_grouping",
    "check_answer",
]
