import numpy as np
import pytest

from boolsim import UpdateRule, compile_rule, RuleCompilationError, StateMismatchError


# ------------------------------------------------------------
# 1 Operators and precedence
# ------------------------------------------------------------

@pytest.mark.parametrize("text", ["A && B", "A & B", "A and B", "A AND B"])
def test_and_spellings(text):
    rule = compile_rule(text)
    assert np.array_equal(rule.get_truth_table(), [0, 0, 0, 1])


@pytest.mark.parametrize("text", ["A || B", "A | B", "A or B", "A OR B"])
def test_or_spellings(text):
    rule = compile_rule(text)
    assert np.array_equal(rule.get_truth_table(), [0, 1, 1, 1])


@pytest.mark.parametrize("text", ["!A", "~A", "not A", "NOT A"])
def test_not_spellings(text):
    rule = compile_rule(text)
    assert rule({'A': False}) is True
    assert rule({'A': True}) is False


def test_not_binds_tighter_than_and():
    rule = compile_rule("!A && B")
    assert rule({'A': False, 'B': True}) is True
    assert rule({'A': True, 'B': False}) is False
    assert rule({'A': False, 'B': False}) is False


def test_and_binds_tighter_than_or():
    rule = compile_rule("A || B && C")
    # A || (B && C)
    assert rule({'A': True, 'B': False, 'C': False}) is True
    assert rule({'A': False, 'B': True, 'C': False}) is False


def test_parentheses_override_precedence():
    rule = compile_rule("(A || B) && C")
    assert rule({'A': True, 'B': False, 'C': False}) is False
    assert rule({'A': True, 'B': False, 'C': True}) is True


def test_nested_negation():
    rule = compile_rule("!!A")
    assert rule({'A': True}) is True


@pytest.mark.parametrize("text,expected", [
    ("true", True), ("false", False), ("True", True), ("FALSE", False),
    ("A || true", True), ("A && false", False),
])
def test_literals(text, expected):
    assert compile_rule(text)({'A': False}) is expected


def test_whitespace_variations():
    f1 = compile_rule("A&&!(B||C)").get_truth_table()
    f2 = compile_rule("  A  &&  ! ( B || C )  ").get_truth_table()
    assert np.array_equal(f1, f2)


# ------------------------------------------------------------
# 2 Regulators and truth tables
# ------------------------------------------------------------

def test_regulators_in_order_of_first_occurrence():
    rule = compile_rule("C && (A || C) && !B_2")
    assert rule.regulators == ['C', 'A', 'B_2']
    assert rule.n == 3


def test_truth_table_of_constant_rule():
    assert np.array_equal(compile_rule("true").get_truth_table(), [1])
    assert np.array_equal(compile_rule("false").get_truth_table(), [0])


def test_truth_table_first_regulator_is_most_significant():
    rule = compile_rule("A && !B")
    assert np.array_equal(rule.get_truth_table(), [0, 0, 1, 0])


def test_rule_only_reads_the_state_passed_in():
    rule = compile_rule("A || B")
    state = {'A': False, 'B': False, 'C': True}
    assert rule(state) is False
    assert state == {'A': False, 'B': False, 'C': True}


# ------------------------------------------------------------
# 3 Errors
# ------------------------------------------------------------

@pytest.mark.parametrize("text", [
    "", "   ", "A &&", "&& A", "(A || B", "A || B)", "A B", "A + B", "A == B", "!",
])
def test_malformed_rules_raise(text):
    with pytest.raises(RuleCompilationError):
        compile_rule(text)


def test_unknown_identifier_raises_at_compile_time():
    with pytest.raises(RuleCompilationError) as excinfo:
        compile_rule("A && X", variables=['A', 'B'], name='B')
    assert "'X'" in str(excinfo.value)
    assert excinfo.value.node == 'B'


def test_compilation_error_is_a_value_error():
    with pytest.raises(ValueError):
        compile_rule("A &&")


def test_missing_regulator_in_state_raises():
    rule = compile_rule("A && B", name='C')
    with pytest.raises(StateMismatchError):
        rule({'A': True})


# ------------------------------------------------------------
# 4 Rendering
# ------------------------------------------------------------

def test_to_expression_default_keeps_text():
    assert compile_rule("A && !B || true").to_expression() == "A && !B || true"


def test_to_expression_preserves_parentheses():
    rule = UpdateRule("!(A||B)&&C")
    assert rule.to_expression('and', 'or', 'not') == "not (A or B) and C"
    assert rule.to_expression('&', '|', '!') == "!(A | B) & C"
