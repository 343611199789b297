import pytest


class ScriptedRandom:
    """Returns a fixed sequence of draws, checking each fits the requested range."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        value = self.values.pop(0)
        assert a <= value <= b, f"scripted value {value} outside [{a}, {b}]"
        self.calls.append((a, b))
        return value


class CountingRandom:
    def __init__(self, rng):
        self.rng = rng
        self.calls = 0

    def randint(self, a, b):
        self.calls += 1
        return self.rng.randint(a, b)


@pytest.fixture
def scripted():
    return ScriptedRandom
