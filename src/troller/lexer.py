from __future__ import annotations

import re

from .errors import InvalidDiceSpec, NumberTooLarge, UnexpectedCharacter
from .models import KeepRule, Token, TokenKind


_WHITESPACE = " \t\r\n\f\v"

_OPERATORS: dict[str, TokenKind] = {
    "+": "plus",
    "-": "minus",
    "*": "star",
    "/": "slash",
    "(": "lparen",
    ")": "rparen",
}

# Python refuses int() on digit strings past 4300 characters; stay well below.
MAX_DIGITS = 1000

_NUMBER_RE = re.compile(r"[0-9]+")

# Digits are optional everywhere so missing pieces can be reported precisely.
_DICE_RE = re.compile(
    r"(?P<count>[0-9]*)[dD](?P<sides>[0-9]*)(?:(?P<keep>[hHlL])(?P<n>[0-9]*))?"
)

# A dice term right after one of these would take it as its count.
_NO_DICE_AFTER: set[str] = {"number", "dice", "rparen"}


def _to_int(digits: str, pos: int, max_digits: int) -> int:
    if len(digits) > max_digits:
        raise NumberTooLarge(f"Number at position {pos} has more than {max_digits} digits")
    return int(digits)


def _dice_token(
    m: re.Match[str],
    text: str,
    *,
    max_dice: int | None,
    max_sides: int | None,
    max_digits: int,
) -> Token:
    pos = m.start()
    count_str = m.group("count")
    sides_str = m.group("sides")

    if not sides_str:
        if text[m.end():].lstrip(_WHITESPACE).startswith("("):
            raise InvalidDiceSpec("Dice sides must be a plain number, not an expression", pos)
        raise InvalidDiceSpec("Dice term is missing its number of sides. Example: '2d6'", pos)

    count = _to_int(count_str, pos, max_digits) if count_str else 1
    sides = _to_int(sides_str, pos, max_digits)

    if count <= 0:
        raise InvalidDiceSpec("Dice count must be a positive integer", pos)
    if sides <= 0:
        raise InvalidDiceSpec("Dice must have at least one side", pos)
    if max_dice is not None and count > max_dice:
        raise InvalidDiceSpec(f"Too many dice: {count} (max {max_dice})", pos)
    if max_sides is not None and sides > max_sides:
        raise InvalidDiceSpec(f"Too many sides: {sides} (max {max_sides})", pos)

    keep: KeepRule | None = None
    keep_char = m.group("keep")
    if keep_char:
        n_str = m.group("n")
        if not n_str:
            raise InvalidDiceSpec(f"Keep rule '{keep_char}' needs a number. Example: '4d6h3'", pos)
        n = _to_int(n_str, pos, max_digits)
        if n <= 0 or n > count:
            raise InvalidDiceSpec(f"Cannot keep {n} of {count} dice", pos)
        keep = KeepRule(mode="highest" if keep_char in "hH" else "lowest", n=n)

    return Token(kind="dice", pos=pos, count=count, sides=sides, keep=keep)


def tokenize(
    text: str,
    *,
    max_dice: int | None = None,
    max_sides: int | None = None,
    max_digits: int = MAX_DIGITS,
) -> list[Token]:
    """Scan a single expression into tokens, always ending with an 'end' token.

    Number literals and dice parts longer than ``max_digits`` raise
    NumberTooLarge; ``max_digits`` never goes above MAX_DIGITS.
    """

    max_digits = min(max_digits, MAX_DIGITS)
    tokens: list[Token] = []
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]

        if ch in _WHITESPACE:
            i += 1
            continue

        kind = _OPERATORS.get(ch)
        if kind is not None:
            tokens.append(Token(kind=kind, pos=i))
            i += 1
            continue

        m = _DICE_RE.match(text, i)
        if m:
            if tokens and tokens[-1].kind in _NO_DICE_AFTER:
                raise InvalidDiceSpec("Dice count must be a plain number, not an expression", i)
            tokens.append(
                _dice_token(m, text, max_dice=max_dice, max_sides=max_sides, max_digits=max_digits)
            )
            i = m.end()
            continue

        m = _NUMBER_RE.match(text, i)
        if m:
            tokens.append(Token(kind="number", pos=i, value=_to_int(m.group(), i, max_digits)))
            i = m.end()
            continue

        raise UnexpectedCharacter(i, ch)

    tokens.append(Token(kind="end", pos=length))
    return tokens
