#!/usr/bin/env python3
"""
Logimaster Control CLI (logictl)

Command-line interface for the propositional logic trainer.

Commands:
    canon       Print the canonical grouping of a formula and grade its grouping
    eval        Evaluate a formula under an assignment
    table       Print the truth table with one column per sub-expression
    reduce      Substitute values and reduce step by step in strict order
    generate    Print generated practice problems

Exit status is 0 on success and 1 when the formula is structurally invalid.
"""

import argparse
import logging
import random
import sys
import uuid
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv

from backend.config import LogimasterConfig, load_config_from_env
from backend.generator.propgen import (
    generate_evaluation_problem,
    generate_syntax_problem,
    generate_table_formula,
)
from backend.logging.jsonl_writer import JsonlWriter
from derivation.stepwise import ReductionSession
from normalization.ast_canon import parse_detailed, tokenize
from normalization.canon import GroupingStatus, classify_grouping
from normalization.symbols import bit
from normalization.taut import evaluate, normalize_assignment
from normalization.truthtab import TruthTable

logger = logging.getLogger("logictl")


def assignment_pair(text: str) -> Tuple[str, str]:
    """argparse type for ``NAME=VALUE`` pairs."""
    name, sep, value = text.partition("=")
    if not sep or not name.strip() or value.strip().upper() not in ("0", "1", "T", "F", "TRUE", "FALSE"):
        raise argparse.ArgumentTypeError(f"expected NAME=0|1, got {text!r}")
    return name.strip(), value.strip()


def _assignment(pairs: Optional[List[Tuple[str, str]]]) -> Dict[str, bool]:
    return normalize_assignment(dict(pairs or []))


class LogicCtl:
    """Logimaster command implementations; each returns an exit status."""

    def __init__(self, config: Optional[LogimasterConfig] = None, out=None):
        self.config = config or LogimasterConfig()
        self.out = out or sys.stdout

    def emit(self, line: str = "") -> None:
        print(line, file=self.out)

    def canon(self, formula: str) -> int:
        verdict = classify_grouping(formula, self.config.max_parse_depth)
        if verdict.status is GroupingStatus.INVALID:
            self.emit(f"INVALID: {verdict.message} ({verdict.failure.value})")
            return 1
        self.emit(verdict.canonical)
        self.emit(f"{verdict.status.value.upper()}{': ' + verdict.message if verdict.message else ''}")
        return 0

    def eval(self, formula: str, pairs: Optional[List[Tuple[str, str]]] = None) -> int:
        outcome = parse_detailed(tokenize(formula), self.config.max_parse_depth)
        if not outcome.ok:
            self.emit(f"INVALID: {outcome.failure.value}")
            return 1
        self.emit(bit(evaluate(outcome.expr, _assignment(pairs))))
        return 0

    def table(self, formula: str) -> int:
        table = TruthTable(formula, self.config.max_parse_depth)
        if not table.applicable:
            if not parse_detailed(tokenize(formula), self.config.max_parse_depth).ok:
                self.emit("INVALID: formula does not parse")
                return 1
            self.emit("Truth table not applicable: formula has no variables")
            return 0

        headers = table.variables + table.columns + [table.canonical]
        self.emit(" | ".join(headers))
        for row in table.rows:
            cells = [bit(row.inputs[v]) for v in table.variables]
            cells += [bit(row.cells[c].expected) for c in table.columns]
            cells.append(bit(row.final.expected))
            self.emit(" | ".join(value.center(len(h)) for value, h in zip(cells, headers)))
        return 0

    def reduce(self, formula: str, pairs: Optional[List[Tuple[str, str]]] = None,
               history_log: Optional[str] = None) -> int:
        if not parse_detailed(tokenize(formula), self.config.max_parse_depth).ok:
            self.emit("INVALID: formula does not parse")
            return 1

        session = ReductionSession(formula, _assignment(pairs), self.config.max_parse_depth)
        session.solve()
        for step in session.history:
            self.emit(f"{step.index:3d} [{step.kind.value}] {step.content}")

        path = history_log or self.config.history_log
        if path:
            with JsonlWriter(path) as writer:
                count = writer.write_session(uuid.uuid4().hex, formula, session.to_records())
            logger.info(f"Appended {count} steps to {path}")
        return 0

    def generate(self, kind: str, count: int = 1, seed: Optional[int] = None) -> int:
        rng = random.Random(seed if seed is not None else self.config.seed)
        gen = self.config.generator
        for _ in range(count):
            if kind == "syntax":
                problem = generate_syntax_problem(rng, gen)
                self.emit(f"{problem.raw}\t{problem.expected}")
            elif kind == "evaluation":
                problem = generate_evaluation_problem(rng, gen)
                values = " ".join(f"{k}={bit(v)}" for k, v in problem.assignment.items())
                self.emit(f"{problem.formula}\t{values}")
            else:
                self.emit(generate_table_formula(rng, gen))
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logictl", description="Propositional logic trainer")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("canon", help="Canonical grouping and grouping verdict")
    p.add_argument("formula")

    p = sub.add_parser("eval", help="Evaluate under an assignment")
    p.add_argument("formula")
    p.add_argument("--set", dest="pairs", nargs="*", type=assignment_pair, default=[],
                   metavar="NAME=VALUE", help="Variable values, e.g. P=1 Q=0")

    p = sub.add_parser("table", help="Truth table with sub-expression columns")
    p.add_argument("formula")

    p = sub.add_parser("reduce", help="Strict step-by-step reduction")
    p.add_argument("formula")
    p.add_argument("--set", dest="pairs", nargs="*", type=assignment_pair, default=[],
                   metavar="NAME=VALUE", help="Variable values, e.g. P=1 Q=0")
    p.add_argument("--history-log", default=None, help="Append the steps to this JSONL file")

    p = sub.add_parser("generate", help="Generate practice problems")
    p.add_argument("kind", choices=["syntax", "evaluation", "table"])
    p.add_argument("--count", type=int, default=1)
    p.add_argument("--seed", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = load_config_from_env()

    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ctl = LogicCtl(config)
    if args.command == "canon":
        return ctl.canon(args.formula)
    if args.command == "eval":
        return ctl.eval(args.formula, args.pairs)
    if args.command == "table":
        return ctl.table(args.formula)
    if args.command == "reduce":
        return ctl.reduce(args.formula, args.pairs, args.history_log)
    return ctl.generate(args.kind, args.count, args.seed)


if __name__ == "__main__":
    sys.exit(main())
