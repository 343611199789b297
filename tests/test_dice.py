"""Evaluator tests, using seeded and scripted random sources."""

import random

import pytest

from conftest import CountingRandom
from troller.dice import evaluate
from troller.errors import DivisionByZero, NumberTooLarge
from troller.parser import parse_expression


@pytest.mark.parametrize(("count", "sides"), [(1, 1), (1, 20), (3, 6), (10, 20), (100, 2)])
def test_plain_dice_total_in_range(count, sides):
    node = parse_expression(f"{count}d{sides}")
    rng = random.Random(1234)
    for _ in range(50):
        total, trace = evaluate(node, rng)
        assert count <= total <= count * sides
        assert len(trace) == count
        assert all(c.kept for c in trace)


def test_keep_highest_of_two():
    node = parse_expression("2d20h1")
    for seed in range(50):
        total, trace = evaluate(node, random.Random(seed))
        kept = [c for c in trace if c.kept]
        assert len(trace) == 2
        assert len(kept) == 1
        assert total == kept[0].value
        assert kept[0].value == max(c.value for c in trace)


def test_keep_highest_three_of_four():
    node = parse_expression("4d6h3")
    for seed in range(50):
        total, trace = evaluate(node, random.Random(seed))
        values = [c.value for c in trace]
        assert len(trace) == 4
        assert sum(c.kept for c in trace) == 3
        assert total == sum(sorted(values, reverse=True)[:3])


def test_keep_highest_ties_go_to_first_rolled(scripted):
    total, trace = evaluate(parse_expression("4d6h3"), scripted([3, 5, 3, 3]))
    assert total == 11
    assert [c.value for c in trace] == [3, 5, 3, 3]
    assert [c.kept for c in trace] == [True, True, True, False]


def test_keep_lowest_ties_go_to_first_rolled(scripted):
    total, trace = evaluate(parse_expression("4d6l3"), scripted([4, 2, 4, 6]))
    assert total == 10
    assert [c.kept for c in trace] == [True, True, True, False]

    total, trace = evaluate(parse_expression("3d6l1"), scripted([2, 2, 2]))
    assert total == 2
    assert [c.kept for c in trace] == [True, False, False]


def test_seeded_source_is_reproducible():
    node = parse_expression("4d6h3 + 2d8 * 3")
    assert evaluate(node, random.Random(42)) == evaluate(node, random.Random(42))


def test_scalar_times_dice_rolls_count_dice_once():
    node = parse_expression("5 * 3d6")
    for seed in range(50):
        rng = CountingRandom(random.Random(seed))
        total, trace = evaluate(node, rng)
        assert rng.calls == 3
        assert len(trace) == 3
        assert all(1 <= c.value <= 6 for c in trace)
        assert total == 5 * sum(c.value for c in trace)


def test_dice_times_dice_multiplies_totals(scripted):
    total, trace = evaluate(parse_expression("2d6 * 1d4"), scripted([3, 4, 2]))
    assert total == 14
    assert [(c.term, c.sides) for c in trace] == [(0, 6), (0, 6), (1, 4)]


def test_left_operand_rolls_first(scripted):
    rng = scripted([2, 7])
    total, trace = evaluate(parse_expression("1d6 + 1d8"), rng)
    assert total == 9
    assert rng.calls == [(1, 6), (1, 8)]
    assert [(c.term, c.value) for c in trace] == [(0, 2), (1, 7)]


@pytest.mark.parametrize(
    ("text", "total"),
    [
        ("1 + 2 * 3", 7),
        ("(1 + 2) * 3", 9),
        ("10 - 4 - 3", 3),
        ("7 / 2", 3),
        ("-7 / 2", -3),
        ("7 / -2", -3),
        ("-7 / -2", 3),
        ("8 / 2 / 2", 2),
        ("-(2 + 3) * 2", -10),
        ("1d1 * 5", 5),
        ("3d1h2 - 10", -8),
    ],
)
def test_arithmetic(text, total):
    assert evaluate(parse_expression(text))[0] == total


@pytest.mark.parametrize("text", ["1d6 / 0", "1d6 / (2 - 2)", "4 / (1d1 - 1)"])
def test_division_by_zero(text):
    with pytest.raises(DivisionByZero) as exc:
        evaluate(parse_expression(text))
    assert str(exc.value).startswith("[DIVISION_BY_ZERO]")


def test_constants_leave_no_trace():
    assert evaluate(parse_expression("2 + 3")) == (5, [])


def test_result_digit_cap():
    node = parse_expression("1000 * 1000")
    assert evaluate(node, max_digits=7) == (1_000_000, [])
    with pytest.raises(NumberTooLarge):
        evaluate(node, max_digits=6)
