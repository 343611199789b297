from __future__ import annotations

from typing import Callable, Sequence, TypeAlias

from .errors import UnexpectedToken
from .lexer import MAX_DIGITS, tokenize
from .models import (
    BinaryOpNode,
    ConstantNode,
    DiceNode,
    Expression,
    Op,
    Token,
    render_dice,
)


_ADDITIVE: dict[str, Op] = {"plus": "+", "minus": "-"}
_MULTIPLICATIVE: dict[str, Op] = {"star": "*", "slash": "/"}

_PRECEDENCE: dict[str, int] = {"+": 1, "-": 1, "*": 2, "/": 2}

_OPERAND = "a number, dice term or '('"

DiceRenderer: TypeAlias = Callable[[DiceNode], str]


class _Parser:
    """Recursive descent over a token list.

    expression := term (('+' | '-') term)*
    term       := unary (('*' | '/') unary)*
    unary      := '-' unary | primary
    primary    := NUMBER | DICE | '(' expression ')'
    """

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = tokens
        self.index = 0

    def peek(self) -> Token:
        return self.tokens[self.index]

    def advance(self) -> Token:
        tok = self.tokens[self.index]
        if tok.kind != "end":
            self.index += 1
        return tok

    def expect(self, kind: str, expected: str) -> Token:
        tok = self.peek()
        if tok.kind != kind:
            raise UnexpectedToken(expected, tok.describe(), tok.pos)
        return self.advance()

    def parse(self) -> Expression:
        node = self.expression()
        tok = self.peek()
        if tok.kind != "end":
            expected = "an operator or end of input"
            if tok.kind == "rparen":
                expected += " (unmatched ')')"
            raise UnexpectedToken(expected, tok.describe(), tok.pos)
        return node

    def expression(self) -> Expression:
        node = self.term()
        while self.peek().kind in _ADDITIVE:
            op = _ADDITIVE[self.advance().kind]
            node = BinaryOpNode(op=op, left=node, right=self.term())
        return node

    def term(self) -> Expression:
        node = self.unary()
        while self.peek().kind in _MULTIPLICATIVE:
            op = _MULTIPLICATIVE[self.advance().kind]
            node = BinaryOpNode(op=op, left=node, right=self.unary())
        return node

    def unary(self) -> Expression:
        if self.peek().kind != "minus":
            return self.primary()

        self.advance()
        operand = self.unary()
        if isinstance(operand, ConstantNode):
            return ConstantNode(value=-operand.value)
        return BinaryOpNode(op="-", left=ConstantNode(value=0), right=operand)

    def primary(self) -> Expression:
        tok = self.peek()
        if tok.kind == "number":
            self.advance()
            return ConstantNode(value=tok.value)
        if tok.kind == "dice":
            self.advance()
            return DiceNode(count=tok.count, sides=tok.sides, keep=tok.keep)
        if tok.kind == "lparen":
            self.advance()
            node = self.expression()
            self.expect("rparen", "')'")
            return node
        raise UnexpectedToken(_OPERAND, tok.describe(), tok.pos)


def parse_expression(
    source: str | Sequence[Token],
    *,
    max_dice: int | None = None,
    max_sides: int | None = None,
    max_digits: int = MAX_DIGITS,
) -> Expression:
    """Build an expression tree from a single (unnamed) expression.

    Multiplication applies to evaluated results, never to dice counts:
    ``5 * 3d6`` rolls three dice once and multiplies their sum by five.
    """

    if isinstance(source, str):
        tokens = tokenize(source, max_dice=max_dice, max_sides=max_sides, max_digits=max_digits)
    else:
        tokens = list(source)
    return _Parser(tokens).parse()


def _default_dice_text(node: DiceNode) -> str:
    return render_dice(node.count, node.sides, node.keep)


def _render_child(child: Expression, parent_op: Op, dice_text: DiceRenderer, *, right: bool) -> str:
    text = render_expression(child, dice_text)
    if not isinstance(child, BinaryOpNode):
        return text

    child_prec = _PRECEDENCE[child.op]
    parent_prec = _PRECEDENCE[parent_op]
    if child_prec < parent_prec or (right and child_prec == parent_prec):
        return f"({text})"
    return text


def render_expression(node: Expression, dice_text: DiceRenderer | None = None) -> str:
    """Render a tree as canonical notation; parsing the result gives back an equal tree.

    ``dice_text`` replaces how dice terms are written. It is called once per
    dice term, left to right, which is also the order they are rolled in.
    """

    if dice_text is None:
        dice_text = _default_dice_text

    if isinstance(node, ConstantNode):
        return str(node.value)
    if isinstance(node, DiceNode):
        return dice_text(node)
    if isinstance(node, BinaryOpNode):
        left = _render_child(node.left, node.op, dice_text, right=False)
        right = _render_child(node.right, node.op, dice_text, right=True)
        return f"{left} {node.op} {right}"
    raise TypeError(f"Unknown expression node: {node!r}")
