import pytest
from judge import MISS_PENALTY, judge_answer, judge_order, judge_stop, round_half_up
from models import SimilarityRound, TargetInterval, Verdict

def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(66.66) == 67
    assert round_half_up(-0.5) == 0

def test_order_perfect_and_tiers():
    truth = ["a", "b", "c", "d", "e"]
    assert judge_order(truth, truth).verdict is Verdict.PERFECT
    assert judge_order(truth, truth).accuracy == 100

    # 4 of 5 positions right is impossible with a permutation; swap two -> 3/5
    r = judge_order(["b", "a", "c", "d", "e"], truth)
    assert (r.matches, r.accuracy, r.verdict) == (3, 60, Verdict.PRACTICE)

    truth10 = list("abcdefghij")
    r = judge_order(list("bacdefghij"), truth10)
    assert (r.accuracy, r.verdict) == (80, Verdict.GOOD)

def test_order_is_idempotent():
    truth = ("a", "b", "c")
    current = ["c", "b", "a"]
    assert judge_order(current, truth) == judge_order(current, truth)
    assert current == ["c", "b", "a"]

def test_order_accuracy_rounds_to_integer():
    r = judge_order(["a", "c", "b"], ["a", "b", "c"])
    assert r.accuracy == 33

def test_order_message():
    assert judge_order(["a", "b", "c"], ["a", "b", "c"]).message.startswith("Perfect")
    assert "Keep practicing" in judge_order(["c", "a", "b"], ["a", "b", "c"]).message

def test_stop_scores():
    target = TargetInterval(start=40.0, end=60.0)
    assert judge_stop(50.0, target) == 100
    assert judge_stop(40.0, target) == 1
    assert judge_stop(60.0, target) == 1
    assert judge_stop(45.0, target) == 50
    assert judge_stop(39.99, target) == MISS_PENALTY
    assert judge_stop(60.01, target) == -20

def test_stop_near_boundary_never_below_one():
    target = TargetInterval(start=10.0, end=16.0)
    assert judge_stop(10.001, target) == 1

@pytest.mark.parametrize("left,right,said,expected", [
    ("#123456", "#123456", True, 1),
    ("#123456", "#123456", False, -1),
    ("#123456", "#123457", False, 1),
    ("#123456", "#123457", True, -1),
])
def test_answer(left, right, said, expected):
    assert judge_answer(SimilarityRound(left=left, right=right), said) == expected
