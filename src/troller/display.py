from __future__ import annotations

from itertools import groupby

from .models import DiceNode, DieContribution, EntryResult, RollOutcome
from .parser import render_expression


def _die_text(contribution: DieContribution) -> str:
    # Natural ones and max faces stand out.
    if contribution.value == 1 or contribution.value == contribution.sides:
        return f"**{contribution.value}**"
    return str(contribution.value)


def _term_text(node: DiceNode, dice: list[DieContribution]) -> str:
    if node.keep is None:
        shown = dice
        split = len(dice)
    else:
        reverse = node.keep.mode == "highest"
        kept = sorted((d for d in dice if d.kept), key=lambda d: d.value, reverse=reverse)
        dropped = sorted((d for d in dice if not d.kept), key=lambda d: d.value, reverse=reverse)
        shown = kept + dropped
        split = len(kept)

    parts: list[str] = []
    for i, die in enumerate(shown):
        if i == 0:
            parts.append(_die_text(die))
        elif i == split:
            parts.append(f" | {_die_text(die)}")
        else:
            parts.append(f", {_die_text(die)}")

    text = "".join(parts)
    return f"[{text}]" if len(shown) > 1 else text


def format_rolls(outcome: RollOutcome) -> str:
    """Write the expression with every dice term replaced by what it rolled."""

    by_term = {
        term: list(dice)
        for term, dice in groupby(outcome.contributions, key=lambda c: c.term)
    }
    counter = iter(range(len(by_term)))

    def dice_text(node: DiceNode) -> str:
        return _term_text(node, by_term[next(counter)])

    return render_expression(outcome.expression, dice_text)


def format_outcome(outcome: RollOutcome, index: int) -> tuple[str, str]:
    title = outcome.name or f"Roll {index + 1}"
    return title, f"{format_rolls(outcome)} => {outcome.total}"


def format_results(results: list[EntryResult]) -> list[tuple[str, str]]:
    lines: list[tuple[str, str]] = []
    for result in results:
        if result.outcome is not None:
            lines.append(format_outcome(result.outcome, result.request.index))
        else:
            title = result.request.name or f"Roll {result.request.index + 1}"
            lines.append((title, f"Error: {result.error}"))
    return lines
