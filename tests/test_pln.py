import pytest

from einlogic import (
    PLNTensor,
    ShapeError,
    TruthValue,
    create_pln_tensor,
    create_truth_value,
    from_vector,
    pln_conjunction,
    pln_deduction,
    pln_disjunction,
    pln_negation,
    pln_revision,
    pln_tensor_conjunction,
)


def _tv(strength, confidence=1.0):
    return create_truth_value(strength, confidence)


def test_truth_values_are_clamped():
    assert create_truth_value(1.5, -0.2) == TruthValue(1.0, 0.0)
    assert create_truth_value(0.3, 0.7) == TruthValue(0.3, 0.7)


def test_connectives():
    a, b = _tv(0.8, 0.9), _tv(0.5, 0.5)
    both = pln_conjunction(a, b)
    assert both.strength == pytest.approx(0.4)
    assert both.confidence == pytest.approx(0.45)
    either = pln_disjunction(a, b)
    assert either.strength == pytest.approx(0.9)
    assert either.confidence == 0.5
    negated = pln_negation(a)
    assert negated.strength == pytest.approx(0.2)
    assert negated.confidence == 0.9


def test_deduction():
    result = pln_deduction(_tv(0.9), _tv(0.8), _tv(0.5), _tv(0.5), _tv(0.6))
    assert result.strength == pytest.approx(0.76)
    assert result.confidence == pytest.approx(1.0)
    halves = [_tv(s, 0.5) for s in (0.9, 0.8, 0.5, 0.5, 0.6)]
    assert pln_deduction(*halves).confidence == pytest.approx(0.5)


def test_deduction_guards_certain_middle_term():
    result = pln_deduction(_tv(0.0), _tv(0.0), _tv(0.5), _tv(1.0), _tv(1.0))
    assert result.strength == 1.0


def test_revision_weights_by_confidence():
    merged = pln_revision(_tv(0.2), _tv(0.4))
    assert merged.strength == pytest.approx(0.3)
    assert merged.confidence == pytest.approx(2 / 3)
    assert pln_revision(_tv(1.0, 0.5), _tv(0.0, 0.5)) == TruthValue(0.5, 0.5)
    assert pln_revision(_tv(0.9, 0.0), _tv(0.1, 0.0)) == TruthValue(0.5, 0.0)
    assert pln_revision(_tv(0.5, 1.0), _tv(0.5, 1.0)).confidence <= 0.99


def test_tensor_conjunction():
    facts = create_pln_tensor(from_vector("F", "i", [0.5, 2.0]))
    assert facts.strengths == [0.5, 1.0]
    assert facts.confidences == [0.9, 0.9]
    rules = create_pln_tensor(from_vector("R", "i", [0.4, 0.5]), confidence=0.5)
    joined = pln_tensor_conjunction(facts, rules)
    assert joined.tensor.data.tolist() == [0.2, 1.0]
    assert joined.strengths == pytest.approx([0.2, 0.5])
    assert joined.confidences == pytest.approx([0.45, 0.45])


def test_tensor_shapes_must_agree():
    short = create_pln_tensor(from_vector("S", "i", [0.5]))
    long = create_pln_tensor(from_vector("L", "i", [0.5, 0.5]))
    with pytest.raises(ShapeError, match="matching shapes"):
        pln_tensor_conjunction(short, long)
    with pytest.raises(ShapeError, match="truth value"):
        PLNTensor(tensor=from_vector("T", "i", [0.1, 0.2]), truth_values=[_tv(0.1)])


def test_pln_tensor_copies_its_input():
    source = from_vector("F", "i", [0.5])
    facts = create_pln_tensor(source)
    source.data[0] = 0.0
    assert facts.tensor.data.tolist() == [0.5]
