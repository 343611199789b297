from __future__ import annotations

import logging
import secrets

from .config import settings
from .errors import DiceError, DivisionByZero, EntryError, NumberTooLarge
from .models import (
    BinaryOpNode,
    ConstantNode,
    DiceNode,
    DieContribution,
    EntryResult,
    Expression,
    RandomSource,
    RollOutcome,
    RollRequest,
)
from .parser import parse_expression
from .splitter import split_request


logger = logging.getLogger(__name__)

# os.urandom backed, so concurrent draws from several threads are fine.
_default_rng = secrets.SystemRandom()


def _divide(left: int, right: int) -> int:
    if right == 0:
        raise DivisionByZero("Cannot divide by zero. Example: '1d20 / 2'.")
    quotient = abs(left) // abs(right)
    return quotient if (left >= 0) == (right > 0) else -quotient


def _kept_indices(rolls: list[int], node: DiceNode) -> set[int]:
    if node.keep is None:
        return set(range(len(rolls)))

    # sorted() is stable: on equal values the earlier roll is kept.
    if node.keep.mode == "highest":
        order = sorted(range(len(rolls)), key=lambda i: -rolls[i])
    else:
        order = sorted(range(len(rolls)), key=lambda i: rolls[i])
    return set(order[: node.keep.n])


class _Evaluator:
    def __init__(self, rng: RandomSource, max_digits: int | None = None) -> None:
        self.rng = rng
        self.max_digits = max_digits
        self.limit = 10**max_digits if max_digits is not None else None
        self.trace: list[DieContribution] = []
        self.terms = 0

    def bounded(self, value: int) -> int:
        if self.limit is not None and abs(value) >= self.limit:
            raise NumberTooLarge(f"Result has more than {self.max_digits} digits")
        return value

    def roll_dice(self, node: DiceNode) -> int:
        term = self.terms
        self.terms += 1

        rolls = [self.rng.randint(1, node.sides) for _ in range(node.count)]
        kept = _kept_indices(rolls, node)

        total = 0
        for i, value in enumerate(rolls):
            self.trace.append(DieContribution(term=term, sides=node.sides, value=value, kept=i in kept))
            if i in kept:
                total += value
        return total

    def eval(self, node: Expression) -> int:
        if isinstance(node, ConstantNode):
            return node.value
        if isinstance(node, DiceNode):
            return self.roll_dice(node)
        if isinstance(node, BinaryOpNode):
            left = self.eval(node.left)
            right = self.eval(node.right)
            if node.op == "+":
                return self.bounded(left + right)
            if node.op == "-":
                return self.bounded(left - right)
            if node.op == "*":
                return self.bounded(left * right)
            if node.op == "/":
                return _divide(left, right)
            raise TypeError(f"Unknown operator: {node.op!r}")
        raise TypeError(f"Unknown expression node: {node!r}")


def evaluate(
    node: Expression,
    rng: RandomSource | None = None,
    *,
    max_digits: int | None = None,
) -> tuple[int, list[DieContribution]]:
    """Evaluate a tree into its total and the trace of every die rolled.

    The left operand is always evaluated before the right one, so a seeded
    source produces the same draws for the same tree. With ``max_digits`` set,
    any intermediate result that long raises NumberTooLarge.
    """

    evaluator = _Evaluator(rng if rng is not None else _default_rng, max_digits)
    total = evaluator.bounded(evaluator.eval(node))
    return total, evaluator.trace


def roll_request(
    request: RollRequest,
    rng: RandomSource | None = None,
    *,
    max_dice: int | None = None,
    max_sides: int | None = None,
) -> RollOutcome:
    """Parse and evaluate one entry. Raises DiceError; nothing partial is returned."""

    node = parse_expression(
        request.expression,
        max_dice=settings.max_dice if max_dice is None else max_dice,
        max_sides=settings.max_sides if max_sides is None else max_sides,
        max_digits=settings.max_literal_digits,
    )
    total, trace = evaluate(node, rng, max_digits=settings.max_result_digits)
    return RollOutcome(name=request.name, expression=node, total=total, contributions=tuple(trace))


def roll_entries(text: str, rng: RandomSource | None = None) -> list[EntryResult]:
    """Roll every comma-separated entry, keeping failures isolated per entry.

    Only an empty input fails the whole call (MalformedRequest).
    """

    results: list[EntryResult] = []
    for request in split_request(text):
        try:
            outcome = roll_request(request, rng)
        except DiceError as e:
            logger.warning("Entry %d (%s) failed: %s", request.index, request.name or "unnamed", e)
            results.append(EntryResult(request=request, error=e))
            continue

        logger.debug("Entry %d (%s) rolled %d", request.index, request.name or "unnamed", outcome.total)
        results.append(EntryResult(request=request, outcome=outcome))
    return results


def roll_from_text(text: str, rng: RandomSource | None = None) -> list[RollOutcome]:
    """Strict variant of roll_entries: the first failed entry raises EntryError."""

    outcomes: list[RollOutcome] = []
    for result in roll_entries(text, rng):
        if result.error is not None:
            raise EntryError(result.request.index, result.request.name, result.error) from result.error
        if result.outcome is not None:
            outcomes.append(result.outcome)
    return outcomes
