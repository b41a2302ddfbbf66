from .ast_canon import PARSE_ERROR, parse, parse_detailed, parse_formula, render, tokenize, variables_of
from .canon import GroupingStatus, SyntaxProblem, canonical_form, check_answer, classify_grouping
from .taut import evaluate, evaluate_formula, is_tautology
from .truthtab import TruthTable, collect_subexpressions
