"""
Practice-problem generator for Logimaster.

Produces three kinds of formulas, all drawn from a caller-supplied
``random.Random`` so a seed reproduces a problem set:

- flat, unparenthesized formulas for the grouping exercise;
- fully parenthesized formulas for step-by-step evaluation;
- small fully parenthesized formulas over P, Q, R for truth tables.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from backend.config import GeneratorConfig
from normalization.ast_canon import parse, render, tokenize, variables_of
from normalization.canon import SyntaxProblem
from normalization.symbols import AND, BINARY_CONNECTIVES, IFF, IMPLIES, NOT, OR, VARIABLES

logger = logging.getLogger(__name__)

# T doubles as the "true" literal, so it is never drawn as a variable.
GENERATOR_VARIABLES = tuple(v for v in VARIABLES if v != "T")

NEGATION_PROBABILITY = 0.3
LEAF_PROBABILITY = 0.2


def random_variable(rng: random.Random, variables: Sequence[str] = GENERATOR_VARIABLES) -> str:
    return rng.choice(list(variables))


def random_term(rng: random.Random, variables: Sequence[str] = GENERATOR_VARIABLES) -> str:
    """A variable, negated with probability 0.3."""
    if rng.random() < NEGATION_PROBABILITY:
        return f"{NOT} {random_variable(rng, variables)}"
    return random_variable(rng, variables)


def random_connective(rng: random.Random) -> str:
    roll = rng.random()
    if roll < 0.25:
        return OR
    if roll < 0.5:
        return IMPLIES
    if roll < 0.75:
        return IFF
    return AND


def generate_flat_formula(rng: random.Random, length: int = 3,
                          variables: Sequence[str] = GENERATOR_VARIABLES) -> str:
    """``length`` binary connectives between terms, no parentheses."""
    parts = [random_term(rng, variables)]
    for _ in range(length):
        parts.append(random_connective(rng))
        parts.append(random_term(rng, variables))
    return " ".join(parts)


def generate_structured_formula(rng: random.Random, max_depth: int = 3,
                                variables: Sequence[str] = GENERATOR_VARIABLES,
                                depth: int = 0, leaf_probability: float = LEAF_PROBABILITY) -> str:
    """Fully parenthesized formula of bounded depth.

    Below the root a leaf appears with ``leaf_probability``; otherwise a
    negation ``¬ (sub)`` with probability 0.3, else ``(left op right)``.
    """
    if depth >= max_depth or (depth > 0 and rng.random() < leaf_probability):
        return random_variable(rng, variables)

    if rng.random() < NEGATION_PROBABILITY:
        inner = generate_structured_formula(rng, max_depth, variables, depth + 1, leaf_probability)
        return f"{NOT} ({inner})"

    left = generate_structured_formula(rng, max_depth, variables, depth + 1, leaf_probability)
    right = generate_structured_formula(rng, max_depth, variables, depth + 1, leaf_probability)
    op = rng.choice(list(BINARY_CONNECTIVES))
    return f"({left} {op} {right})"


def generate_min_length(rng: random.Random, max_depth: int, min_length: int,
                        variables: Sequence[str], max_attempts: int) -> str:
    """Structured formula at least ``min_length`` characters long.

    After ``max_attempts`` misses, leaves are only placed at ``max_depth``.
    """
    for _ in range(max_attempts):
        formula = generate_structured_formula(rng, max_depth, variables)
        if len(formula) >= min_length:
            return formula
    logger.debug(f"No formula of length {min_length} after {max_attempts} attempts, forcing full depth")
    return generate_structured_formula(rng, max_depth, variables, leaf_probability=0.0)


@dataclass(frozen=True)
class EvaluationProblem:
    formula: str
    assignment: Dict[str, bool]


def generate_syntax_problem(rng: random.Random, config: Optional[GeneratorConfig] = None) -> SyntaxProblem:
    """Flat formula whose canonical form adds more than one pair of parentheses."""
    config = config or GeneratorConfig()
    raw = expected = ""
    for attempt in range(config.syntax_attempts):
        raw = generate_flat_formula(rng, rng.randint(config.syntax_min_terms, config.syntax_max_terms))
        expected = render(parse(tokenize(raw)))
        if len(expected) > len(raw) + 2:
            break
    else:
        logger.debug(f"Keeping {raw!r} after {config.syntax_attempts} attempts")
    return SyntaxProblem(raw, expected)


def generate_evaluation_problem(rng: random.Random,
                                config: Optional[GeneratorConfig] = None) -> EvaluationProblem:
    """Formula for step-by-step reduction with a random 0/1 assignment."""
    config = config or GeneratorConfig()
    formula = generate_min_length(
        rng, config.evaluation_max_depth, config.evaluation_min_length,
        GENERATOR_VARIABLES, config.max_attempts,
    )
    assignment = {v: rng.random() < 0.5 for v in variables_of(formula)}
    return EvaluationProblem(formula, assignment)


def generate_table_formula(rng: random.Random, config: Optional[GeneratorConfig] = None) -> str:
    """Small formula over the table variables for truth-table practice."""
    config = config or GeneratorConfig()
    return generate_min_length(
        rng, config.table_max_depth, config.table_min_length,
        config.table_variables, config.max_attempts,
    )
