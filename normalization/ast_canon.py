"""
Tokenizer, precedence parser and canonical renderer for propositional formulas.

The pipeline is:

1. ``tokenize`` maps ASCII aliases onto the connective glyphs, drops all
   whitespace and splits on connectives and parentheses.
2. ``parse`` builds an immutable expression tree. Splits happen at the
   lowest-precedence connective found outside every parenthesized group,
   scanning right to left so that the rightmost occurrence of the loosest
   operator becomes the root. Negation is never a split point; a leading ``¬``
   only becomes unary negation when no binary split exists.
3. ``render`` prints the unique fully-parenthesized form.

Usage:
    from normalization.ast_canon import tokenize, parse, render

    tree = parse(tokenize("P ∨ Q ∧ R"))
    render(tree)   # "(P ∨ (Q ∧ R))"

Parsing is total: malformed input produces ``PARSE_ERROR`` instead of raising.
``parse_detailed`` additionally reports why parsing failed.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

from .symbols import (
    BINARY_CONNECTIVES,
    LPAREN,
    NOT,
    PRECEDENCE,
    RPAREN,
    SYMBOL_ALIASES,
    VARIABLES,
    is_atom_token,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 200


# ---------------------------------------------------------------------------
# AST Node Types
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Expr(ABC):
    """Base class for expression trees."""

    @abstractmethod
    def render(self) -> str:
        """Fully-parenthesized canonical string."""
        ...

    @abstractmethod
    def atoms(self) -> FrozenSet[str]:
        """Variable names (upper-cased) referenced by the tree."""
        ...

    @abstractmethod
    def depth(self) -> int:
        ...

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class Atom(Expr):
    """Variable reference or boolean literal."""
    name: str

    def render(self) -> str:
        return self.name

    def atoms(self) -> FrozenSet[str]:
        upper = self.name.upper()
        if upper in VARIABLES and not is_literal_name(upper):
            return frozenset({upper})
        return frozenset()

    def depth(self) -> int:
        return 0


@dataclass(frozen=True, slots=True)
class Not(Expr):
    """Negation."""
    operand: Expr

    def render(self) -> str:
        return f"({NOT} {self.operand.render()})"

    def atoms(self) -> FrozenSet[str]:
        return self.operand.atoms()

    def depth(self) -> int:
        return 1 + self.operand.depth()


@dataclass(frozen=True, slots=True)
class Binary(Expr):
    """Binary connective with exactly two operands."""
    op: str
    left: Expr
    right: Expr

    def __post_init__(self):
        if self.op not in BINARY_CONNECTIVES:
            raise ValueError(f"Not a binary connective: {self.op!r}")

    def render(self) -> str:
        return f"({self.left.render()} {self.op} {self.right.render()})"

    def atoms(self) -> FrozenSet[str]:
        return self.left.atoms() | self.right.atoms()

    def depth(self) -> int:
        return 1 + max(self.left.depth(), self.right.depth())


PARSE_ERROR = Atom("ERR")


def is_parse_error(expr: Expr) -> bool:
    return expr == PARSE_ERROR


def is_literal_name(name: str) -> bool:
    # T doubles as a variable letter; as a value it is always the literal.
    return name in ("T", "F", "0", "1")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
_SPLIT_RE = re.compile(r"([¬∧∨⇒⇔()])")


def to_glyphs(s: str) -> str:
    """Map ASCII and alternative Unicode connectives onto the canonical glyphs."""
    if s is None:
        return ""
    for alias, glyph in SYMBOL_ALIASES:
        if alias in s:
            s = s.replace(alias, glyph)
    return s


def strip_whitespace(s: str) -> str:
    return _WHITESPACE_RE.sub("", s)


def tokenize(s: str) -> List[str]:
    """Split a formula into connective, parenthesis and atom tokens.

    Never fails; malformed input simply yields a token list the parser rejects.
    """
    compact = strip_whitespace(to_glyphs(s))
    return [t for t in _SPLIT_RE.split(compact) if t]


def variables_of(tokens: Union[str, Iterable[str]]) -> List[str]:
    """Sorted distinct variable names, upper-cased. ``T``/``F`` are literals."""
    if isinstance(tokens, str):
        tokens = tokenize(tokens)
    found = set()
    for tok in tokens:
        upper = tok.upper()
        if upper in VARIABLES and not is_literal_name(upper):
            found.add(upper)
    return sorted(found)


def is_balanced(tokens: Iterable[str]) -> bool:
    """Equal open/close counts and the depth never goes negative."""
    depth = 0
    for tok in tokens:
        if tok == LPAREN:
            depth += 1
        elif tok == RPAREN:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


# ---------------------------------------------------------------------------
# Precedence Parser
# ---------------------------------------------------------------------------

class ParseFailure(Enum):
    """Why a token sequence could not be resolved into a tree."""
    EMPTY_OPERAND = "empty_operand"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    UNRECOGNIZED_TOKEN = "unrecognized_token"
    MALFORMED = "malformed"
    TOO_DEEP = "too_deep"


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    expr: Expr
    failure: Optional[ParseFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class _Abort(Exception):
    def __init__(self, failure: ParseFailure):
        super().__init__(failure.value)
        self.failure = failure


class Parser:
    """Right-to-left, balance-aware precedence splitter."""

    def __init__(self, tokens: Sequence[str], max_depth: int = DEFAULT_MAX_DEPTH):
        self.tokens: Tuple[str, ...] = tuple(tokens)
        self.max_depth = max_depth

    def parse(self) -> Expr:
        if not is_balanced(self.tokens):
            raise _Abort(ParseFailure.UNBALANCED_PARENTHESES)
        return self.parse_slice(0, len(self.tokens), 0)

    def parse_slice(self, lo: int, hi: int, depth: int) -> Expr:
        if depth > self.max_depth:
            raise _Abort(ParseFailure.TOO_DEEP)

        lo, hi = self.strip_outer(lo, hi)

        if hi == lo:
            raise _Abort(ParseFailure.EMPTY_OPERAND)
        if hi - lo == 1:
            tok = self.tokens[lo]
            if not is_atom_token(tok):
                raise _Abort(ParseFailure.UNRECOGNIZED_TOKEN)
            return Atom(tok)

        split = self.find_split(lo, hi)
        if split is not None:
            return Binary(
                self.tokens[split],
                self.parse_slice(lo, split, depth + 1),
                self.parse_slice(split + 1, hi, depth + 1),
            )

        if self.tokens[lo] == NOT:
            return Not(self.parse_slice(lo + 1, hi, depth + 1))

        raise _Abort(ParseFailure.MALFORMED)

    def strip_outer(self, lo: int, hi: int) -> Tuple[int, int]:
        """Drop matching outer parenthesis pairs whose contents are balanced."""
        while (
            hi - lo >= 2
            and self.tokens[lo] == LPAREN
            and self.tokens[hi - 1] == RPAREN
            and is_balanced(self.tokens[lo + 1:hi - 1])
        ):
            lo += 1
            hi -= 1
        return lo, hi

    def find_split(self, lo: int, hi: int) -> Optional[int]:
        """Index of the lowest-precedence connective at balance zero.

        The right-to-left scan keeps the first candidate seen at each new
        minimum, so repeated operators split at their rightmost occurrence and
        chains group to the left.
        """
        balance = 0
        split = None
        min_rank = None
        for i in range(hi - 1, lo - 1, -1):
            tok = self.tokens[i]
            if tok == RPAREN:
                balance += 1
            elif tok == LPAREN:
                balance -= 1
            elif balance == 0 and tok != NOT:
                rank = PRECEDENCE.get(tok)
                if rank is not None and (min_rank is None or rank < min_rank):
                    min_rank = rank
                    split = i
        return split


def parse_detailed(tokens: Sequence[str], max_depth: int = DEFAULT_MAX_DEPTH) -> ParseOutcome:
    """Parse tokens, reporting the failure cause alongside ``PARSE_ERROR``."""
    try:
        return ParseOutcome(Parser(tokens, max_depth).parse())
    except _Abort as e:
        logger.debug(f"Parse failed ({e.failure.value}) for tokens {list(tokens)}")
        return ParseOutcome(PARSE_ERROR, e.failure)
    except RecursionError:
        # max_depth set above what the interpreter stack allows
        logger.warning(f"Parse exceeded the interpreter recursion limit (max_depth={max_depth})")
        return ParseOutcome(PARSE_ERROR, ParseFailure.TOO_DEEP)


def parse(tokens: Sequence[str], max_depth: int = DEFAULT_MAX_DEPTH) -> Expr:
    """Build an expression tree; returns ``PARSE_ERROR`` on malformed input."""
    return parse_detailed(tokens, max_depth).expr


def parse_formula(s: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Expr:
    """Tokenize and parse a raw formula string."""
    return parse(tokenize(s), max_depth)


def render(expr: Expr) -> str:
    """Canonical fully-parenthesized form of ``expr``."""
    return expr.render()


__all__ = [
    # AST types
    "Expr",
    "Atom",
    "Not",
    "Binary",
    "PARSE_ERROR",
    "is_parse_error",
    # Tokenizing
    "to_glyphs",
    "strip_whitespace",
    "tokenize",
    "variables_of",
    "is_balanced",
    # Parsing
    "Parser",
    "ParseFailure",
    "ParseOutcome",
    "parse",
    "parse_detailed",
    "parse_formula",
    "DEFAULT_MAX_DEPTH",
    # Rendering
    "render",
]
