from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, TypeAlias

from .errors import DiceError


KeepMode: TypeAlias = Literal["highest", "lowest"]
Op: TypeAlias = Literal["+", "-", "*", "/"]
TokenKind: TypeAlias = Literal[
    "number",
    "dice",
    "plus",
    "minus",
    "star",
    "slash",
    "lparen",
    "rparen",
    "end",
]


@dataclass(frozen=True)
class KeepRule:
    mode: KeepMode
    n: int


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    pos: int
    value: int = 0
    count: int = 0
    sides: int = 0
    keep: KeepRule | None = None

    def describe(self) -> str:
        if self.kind == "number":
            return f"number {self.value}"
        if self.kind == "dice":
            return f"dice term '{render_dice(self.count, self.sides, self.keep)}'"
        if self.kind == "end":
            return "end of input"
        return f"'{TOKEN_SYMBOLS[self.kind]}'"


TOKEN_SYMBOLS: dict[str, str] = {
    "plus": "+",
    "minus": "-",
    "star": "*",
    "slash": "/",
    "lparen": "(",
    "rparen": ")",
}


@dataclass(frozen=True)
class ConstantNode:
    value: int


@dataclass(frozen=True)
class DiceNode:
    count: int
    sides: int
    keep: KeepRule | None = None


@dataclass(frozen=True)
class BinaryOpNode:
    op: Op
    left: Expression
    right: Expression


Expression: TypeAlias = ConstantNode | DiceNode | BinaryOpNode


@dataclass(frozen=True)
class RollRequest:
    name: str | None
    expression: str
    index: int = 0


@dataclass(frozen=True)
class DieContribution:
    term: int
    sides: int
    value: int
    kept: bool = True


@dataclass(frozen=True)
class RollOutcome:
    name: str | None
    expression: Expression
    total: int
    contributions: tuple[DieContribution, ...]

    def kept(self) -> list[DieContribution]:
        return [c for c in self.contributions if c.kept]

    def dropped(self) -> list[DieContribution]:
        return [c for c in self.contributions if not c.kept]


@dataclass(frozen=True)
class EntryResult:
    request: RollRequest
    outcome: RollOutcome | None = None
    error: DiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RandomSource(Protocol):
    """Anything that can draw a uniform integer in [a, b], like random.Random."""

    def randint(self, a: int, b: int) -> int: ...


def render_dice(count: int, sides: int, keep: KeepRule | None = None) -> str:
    base = f"{count}d{sides}"
    if keep is None:
        return base
    return f"{base}{'h' if keep.mode == 'highest' else 'l'}{keep.n}"
