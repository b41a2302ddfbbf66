"""
Tests for derivation/stepwise.py strict reduction.
"""

import itertools

import pytest

from derivation.stepwise import (
    MoveStatus,
    ReductionSession,
    StepKind,
    format_tokens,
    is_terminal,
    legal_moves,
    reduce_at,
    reducible_tokens,
    solve_strictly,
    strip_literal_parens,
    substitute,
)
from normalization.ast_canon import parse_formula, render, tokenize
from normalization.taut import evaluate_formula


class TestReducibleTokens:
    def test_not_needs_literal_on_right(self):
        assert [c.index for c in reducible_tokens(["¬", "1"])] == [0]
        assert reducible_tokens(["¬", "(", "1", "∧", "0", ")"])[0].op == "∧"
        assert all(c.op != "¬" for c in reducible_tokens(["¬", "(", "1", "∧", "0", ")"]))

    def test_binary_needs_literals_on_both_sides(self):
        tokens = ["(", "1", "∧", "0", ")", "∨", "1"]
        assert [(c.index, c.op) for c in reducible_tokens(tokens)] == [(2, "∧")]

    def test_ranks(self):
        tokens = ["1", "∧", "0", "∨", "1"]
        assert [(c.op, c.rank) for c in reducible_tokens(tokens)] == [("∧", 4), ("∨", 3)]

    def test_legal_moves_keep_highest_rank(self):
        tokens = ["1", "∧", "0", "∨", "1"]
        assert [c.op for c in legal_moves(tokens)] == ["∧"]

    def test_legal_moves_empty(self):
        assert legal_moves(["1"]) == []


class TestReduceAt:
    def test_reduce_not(self):
        assert reduce_at(["¬", "1"], 0) == ("0",)

    def test_reduce_binary(self):
        assert reduce_at(["1", "⇒", "0", "∨", "1"], 1) == ("0", "∨", "1")

    @pytest.mark.parametrize(
        "op, table",
        [
            ("∧", "0001"),
            ("∨", "0111"),
            ("⇒", "1101"),
            ("⇔", "1001"),
        ],
    )
    def test_truth_functions(self, op, table):
        for (left, right), expected in zip(itertools.product("01", repeat=2), table):
            assert reduce_at([left, op, right], 1) == (expected,)

    def test_reduce_non_candidate_raises(self):
        with pytest.raises(ValueError):
            reduce_at(["(", "1", ")"], 0)


class TestStripLiteralParens:
    def test_single(self):
        assert strip_literal_parens(["(", "0", ")"]) == ("0",)

    def test_nested_to_fixed_point(self):
        assert strip_literal_parens(["(", "(", "(", "1", ")", ")", ")"]) == ("1",)

    def test_leaves_compound_groups(self):
        tokens = ("(", "1", "∧", "0", ")")
        assert strip_literal_parens(tokens) == tokens

    def test_inside_larger_expression(self):
        tokens = ["(", "(", "1", ")", "∨", "(", "0", ")", ")"]
        assert strip_literal_parens(tokens) == ("(", "1", "∨", "0", ")")


class TestSubstitute:
    def test_variables_and_literals(self):
        tokens = tokenize("(P ∧ q) ∨ T ⇒ F")
        assert substitute(tokens, {"p": True, "Q": 0}) == (
            "(", "1", "∧", "0", ")", "∨", "1", "⇒", "0",
        )

    def test_missing_variables_are_false(self):
        assert substitute(["R"], {}) == ("0",)


class TestFormatTokens:
    def test_no_padding_inside_parentheses(self):
        assert format_tokens(["(", "(", "¬", "1", ")", "∧", "0", ")"]) == "((¬ 1) ∧ 0)"

    def test_single(self):
        assert format_tokens(["1"]) == "1"


class TestSolveStrictly:
    def test_precedence_example(self):
        states = solve_strictly(["1", "∧", "0", "∨", "1"])
        assert states == [("0", "∨", "1"), ("1",)]

    def test_terminal_input(self):
        assert solve_strictly(["(", "1", ")"]) == []

    def test_stuck_sequence_stops(self):
        states = solve_strictly(["1", "1"])
        assert states == []
        assert not is_terminal(["1", "1"])

    @pytest.mark.parametrize(
        "formula",
        [
            "¬ (P ∧ Q) ∨ R",
            "(P ⇒ Q) ⇔ (¬ Q ⇒ ¬ P)",
            "¬ ¬ P ∧ (Q ∨ ¬ R) ⇒ S",
            "P ∨ Q ∧ R ⇔ ¬ S ∧ U",
        ],
    )
    def test_agrees_with_evaluator_on_canonical_form(self, formula):
        canonical = render(parse_formula(formula))
        for bits in itertools.product([True, False], repeat=5):
            values = dict(zip("PQRSU", bits))
            states = solve_strictly(substitute(tokenize(canonical), values))
            assert states[-1] == ("1" if evaluate_formula(formula, values) else "0",)


class TestReductionSession:
    def test_history_starts_with_formula(self):
        session = ReductionSession("P ∧ Q", {"P": 1, "Q": 0})
        assert len(session.history) == 1
        assert session.current.kind is StepKind.FORMULA
        assert session.current.content == "(P ∧ Q)"
        assert not session.substituted

    def test_select_before_substitution(self):
        session = ReductionSession("P ∧ Q", {"P": 1, "Q": 0})
        assert session.select(2).status is MoveStatus.NOT_READY
        assert session.legal_moves() == []

    def test_substitute(self):
        session = ReductionSession("P ∧ Q", {"P": 1, "Q": 0})
        step = session.substitute()
        assert step.kind is StepKind.SUBSTITUTED
        assert step.content == "(1 ∧ 0)"
        assert session.substitute() is None
        assert len(session.history) == 2

    def test_substitution_uses_canonical_grouping(self):
        session = ReductionSession("¬ (P) ∧ Q", {"P": 1, "Q": 1})
        session.substitute()
        assert session.current.content == "((¬ 1) ∧ 1)"

    def test_starting_tokens_are_normalized(self):
        session = ReductionSession.from_tokens(["¬", "(", "1", ")"])
        assert session.tokens == ("¬", "1")
        assert [c.op for c in session.legal_moves()] == ["¬"]

    def test_order_violation_is_rejected(self):
        session = ReductionSession.from_tokens(["1", "∧", "0", "∨", "1"])
        result = session.select(3)
        assert result.status is MoveStatus.ORDER_VIOLATION
        assert not result.accepted
        assert "order" in result.message.lower()
        assert len(session.history) == 1
        assert session.tokens == ("1", "∧", "0", "∨", "1")

    def test_strict_order_reduction(self):
        session = ReductionSession.from_tokens(["1", "∧", "0", "∨", "1"])
        first = session.select(1)
        assert first.accepted
        assert first.step.tokens == ("0", "∨", "1")
        second = session.select(1)
        assert second.accepted
        assert session.tokens == ("1",)
        assert session.is_solved
        assert session.result is True

    def test_not_inside_parentheses_normalizes(self):
        session = ReductionSession.from_tokens(["(", "¬", "1", ")"])
        result = session.select(1)
        assert result.step.tokens == ("0",)
        assert session.result is False

    def test_not_reducible_token(self):
        session = ReductionSession.from_tokens(["(", "1", "∧", "0", ")", "∨", "1"])
        assert session.select(5).status is MoveStatus.NOT_REDUCIBLE
        assert session.select(0).status is MoveStatus.NOT_REDUCIBLE
        assert session.select(99).status is MoveStatus.NOT_REDUCIBLE

    def test_solved_session_rejects_moves(self):
        session = ReductionSession.from_tokens(["1"])
        assert session.is_solved
        assert session.select(0).status is MoveStatus.SOLVED

    def test_history_is_append_only(self):
        session = ReductionSession("¬ P ∨ Q", {"P": 0, "Q": 0})
        session.substitute()
        before = session.history
        session.select(session.legal_moves()[0].index)
        assert session.history[:len(before)] == before
        assert [s.index for s in session.history] == list(range(len(session.history)))

    def test_solve(self):
        session = ReductionSession("(P ⇒ Q) ∧ ¬ R", {"P": 1, "Q": 0, "R": 0})
        assert session.solve() is False
        kinds = [s.kind for s in session.history]
        assert kinds[0] is StepKind.FORMULA
        assert kinds[1] is StepKind.SUBSTITUTED
        assert all(k is StepKind.REDUCTION for k in kinds[2:])

    def test_loose_formula_reduced_in_canonical_form(self):
        # Without canonical grouping the outer ∨ could fire before the ∧
        session = ReductionSession("1 ∨ 0 ∧ (1 ∨ 0)")
        session.substitute()
        assert session.current.content == "(1 ∨ (0 ∧ (1 ∨ 0)))"
        assert session.solve() is True

    def test_max_depth_above_default_keeps_canonical_grouping(self):
        formula = "¬ " * 210 + "(P ∨ Q ∧ (R ⇔ Q))"
        values = {"P": 1, "Q": 0, "R": 1}
        session = ReductionSession(formula, values, max_depth=300)
        assert session.current.content == render(parse_formula(formula, 300))
        assert session.solve() is evaluate_formula(formula, values, 300) is True

    def test_to_records(self):
        session = ReductionSession("P", {"P": 1})
        session.solve()
        assert session.to_records() == [
            {"step": 0, "kind": "formula", "content": "P"},
            {"step": 1, "kind": "substituted", "content": "1"},
        ]
