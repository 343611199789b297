from __future__ import annotations

import re

from .errors import MalformedRequest
from .models import RollRequest


# Anything that could start a dice or arithmetic token.
_EXPRESSION_CHARS = re.compile(r"[0-9+\-*/()]")


def _split_name(segment: str) -> tuple[str | None, str]:
    head, colon, rest = segment.partition(":")
    if not colon or _EXPRESSION_CHARS.search(head):
        return None, segment.strip()

    name = head.strip()
    return (name or None), rest.strip()


def split_request(text: str) -> list[RollRequest]:
    """Split a full roll string into ordered, optionally named entries.

    Commas never appear inside a single expression, so every comma is an entry
    boundary. A segment is named when it has a colon and nothing before that
    colon looks like part of an expression:

        >>> [r.name for r in split_request("hit: 1d20 + 5, damage: 1d8 + 4")]
        ['hit', 'damage']

    Empty segments are kept so they can fail on their own later.
    """

    if not text or not text.strip():
        raise MalformedRequest("Empty input. Example: '1d20 + 5' or 'hit: 1d20 + 5, damage: 1d8 + 4'.")

    requests: list[RollRequest] = []
    for index, segment in enumerate(text.split(",")):
        name, expression = _split_name(segment)
        requests.append(RollRequest(name=name, expression=expression, index=index))
    return requests
