from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import settings
from .dice import roll_entries
from .display import format_outcome
from .errors import DiceError
from .models import EntryResult
from .parser import render_expression


logger = logging.getLogger(__name__)

mcp = FastMCP(settings.server_name)


def _entry_payload(result: EntryResult) -> dict[str, Any]:
    request = result.request
    payload: dict[str, Any] = {
        "index": request.index,
        "name": request.name,
        "input": request.expression,
    }

    if result.outcome is None:
        error = result.error
        payload["error"] = {
            "code": getattr(error, "code", "DICE_ERROR"),
            "message": str(error),
        }
        return payload

    outcome = result.outcome
    title, display = format_outcome(outcome, request.index)
    payload.update(
        {
            "title": title,
            "expression": render_expression(outcome.expression),
            "total": outcome.total,
            "rolls": [
                {"term": c.term, "sides": c.sides, "value": c.value, "kept": c.kept}
                for c in outcome.contributions
            ],
            "display": display,
        }
    )
    return payload


@mcp.tool()
def roll_dice(dice_string: str):
    """Roll one or more dice expressions.

    Input: dice_string, e.g. "2d20h1 + 5" or "hit: 1d20 + 5, damage: 1d8 + 4"
    Output: one result per comma-separated entry, in input order

    Entries fail independently; an empty input is a hard error.
    """

    try:
        results = roll_entries(dice_string)
    except DiceError as e:
        raise ValueError(str(e)) from None

    entries = [_entry_payload(r) for r in results]
    return {
        "input": dice_string,
        "ok": all(r.ok for r in results),
        "results": entries,
    }


def run() -> None:
    # stdout carries the stdio transport, so logs go to stderr.
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting %s MCP server", settings.server_name)
    mcp.run()


if __name__ == "__main__":
    run()
