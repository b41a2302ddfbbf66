"""
Connective glyphs, precedence ranks and the atom alphabet.

Every table here is read-only and shared by the parser, the evaluator and the
strict reduction engine.
"""

from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

NOT = "¬"
AND = "∧"
OR = "∨"
IMPLIES = "⇒"
IFF = "⇔"
LPAREN = "("
RPAREN = ")"

CONNECTIVES: Tuple[str, ...] = (NOT, AND, OR, IMPLIES, IFF)
BINARY_CONNECTIVES: Tuple[str, ...] = (AND, OR, IMPLIES, IFF)
PARENS: Tuple[str, ...] = (LPAREN, RPAREN)

# NOT binds tightest but is never a split point; IFF binds loosest.
PRECEDENCE: Mapping[str, int] = MappingProxyType({
    NOT: 5,
    AND: 4,
    OR: 3,
    IMPLIES: 2,
    IFF: 1,
})

VARIABLES: Tuple[str, ...] = ("P", "Q", "R", "S", "T", "U")

TRUE_LITERALS: FrozenSet[str] = frozenset({"1", "T"})
FALSE_LITERALS: FrozenSet[str] = frozenset({"0", "F"})
LITERALS: FrozenSet[str] = TRUE_LITERALS | FALSE_LITERALS

# Only 0/1 appear in a fully substituted reduction sequence.
BIT_TRUE = "1"
BIT_FALSE = "0"
BITS: FrozenSet[str] = frozenset({BIT_TRUE, BIT_FALSE})

# Longest aliases first so "<->" is not read as "<" + "->".
SYMBOL_ALIASES: Tuple[Tuple[str, str], ...] = (
    ("<->", IFF), ("<=>", IFF), ("↔", IFF),
    ("->", IMPLIES), ("=>", IMPLIES), ("→", IMPLIES), ("⟹", IMPLIES),
    ("/\\", AND), ("&", AND), ("⋀", AND),
    ("\\/", OR), ("|", OR), ("⋁", OR),
    ("~", NOT), ("!", NOT), ("￢", NOT),
    ("（", LPAREN), ("）", RPAREN),
)

NAMES: Mapping[str, str] = MappingProxyType({
    NOT: "NOT",
    AND: "AND",
    OR: "OR",
    IMPLIES: "IMPLIES",
    IFF: "IFF",
})


def is_connective(token: str) -> bool:
    return token in PRECEDENCE


def is_literal(token: str) -> bool:
    return token.upper() in LITERALS


def is_atom_token(token: str) -> bool:
    """Variables and boolean literals, case-insensitive."""
    upper = token.upper()
    return upper in VARIABLES or upper in LITERALS


def literal_value(token: str) -> bool:
    return token.upper() in TRUE_LITERALS


def bit(value: bool) -> str:
    return BIT_TRUE if value else BIT_FALSE


__all__ = [
    "NOT", "AND", "OR", "IMPLIES", "IFF", "LPAREN", "RPAREN",
    "CONNECTIVES", "BINARY_CONNECTIVES", "PARENS", "PRECEDENCE",
    "VARIABLES", "LITERALS", "TRUE_LITERALS", "FALSE_LITERALS",
    "BIT_TRUE", "BIT_FALSE", "BITS", "SYMBOL_ALIASES", "NAMES",
    "is_connective", "is_literal", "is_atom_token", "literal_value", "bit",
]
