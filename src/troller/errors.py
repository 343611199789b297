from __future__ import annotations


class DiceError(ValueError):
    """User-facing dice errors. Messages start with a stable bracketed code."""

    code = "DICE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(f"[{self.code}] {message}")
        self.detail = message


class MalformedRequest(DiceError):
    code = "MALFORMED_REQUEST"


class UnexpectedCharacter(DiceError):
    code = "UNEXPECTED_CHARACTER"

    def __init__(self, pos: int, char: str) -> None:
        super().__init__(f"Unexpected character {char!r} at position {pos}. Example: '2d6 + 3'.")
        self.pos = pos
        self.char = char


class InvalidDiceSpec(DiceError):
    code = "INVALID_DICE_SPEC"

    def __init__(self, message: str, pos: int | None = None) -> None:
        if pos is not None:
            message = f"{message} (at position {pos})"
        super().__init__(message)
        self.pos = pos


class UnexpectedToken(DiceError):
    code = "UNEXPECTED_TOKEN"

    def __init__(self, expected: str, found: str, pos: int) -> None:
        super().__init__(f"Expected {expected} but found {found} at position {pos}.")
        self.expected = expected
        self.found = found
        self.pos = pos


class DivisionByZero(DiceError):
    code = "DIVISION_BY_ZERO"


class EntryError(DiceError):
    """Wraps the failure of a single comma-separated entry."""

    def __init__(self, index: int, name: str | None, cause: DiceError) -> None:
        self.code = cause.code
        label = repr(name) if name else f"#{index + 1}"
        super().__init__(f"Entry {label}: {cause.detail}")
        self.index = index
        self.name = name
        self.cause = cause


class NumberTooLarge(DiceError):
    code = "NUMBER_TOO_LARGE"
