"""
tests/conftest.py
Shared fixtures: seeded and scripted random sources, and record builders.
"""
import logging
from collections import deque
from typing import Iterable

import pytest

from keygenie import config
from keygenie.qubit import Basis
from keygenie.random_source import RandomSource
from keygenie.session_result import QubitRecord

R = Basis.RECTILINEAR
D = Basis.DIAGONAL


class ScriptedSource(RandomSource):
    """
    Replays queued values instead of drawing them.  Each queue is consumed
    in call order; running dry fails the test loudly.
    """

    def __init__(self, bits: Iterable[int] = (), bases: Iterable[Basis] = (),
                 chances: Iterable[bool] = ()):
        super().__init__(seed=0)
        self.bits = deque(bits)
        self.bases = deque(bases)
        self.chances = deque(chances)
        self.probabilities = []

    def bit(self) -> int:
        return self.bits.popleft()

    def basis(self) -> Basis:
        return self.bases.popleft()

    def chance(self, probability: float) -> bool:
        self.probabilities.append(probability)
        return self.chances.popleft()


def make_record(index: int, alice_bit: int, alice_basis: Basis, bob_basis: Basis,
                bob_measurement: int, **flags) -> QubitRecord:
    return QubitRecord(
        index=index,
        alice_bit=alice_bit,
        alice_basis=alice_basis,
        bob_basis=bob_basis,
        bob_measurement=bob_measurement,
        **flags,
    )


@pytest.fixture
def seeded() -> RandomSource:
    return RandomSource(seed=84)


@pytest.fixture(autouse=True)
def _log_dir(tmp_path, monkeypatch) -> None:
    """Keep any configure_logging() call inside the test's tmp dir."""
    monkeypatch.setattr(config, "LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture(autouse=True)
def _release_log_handlers():
    """Drop handlers installed by configure_logging() so streams do not leak between tests."""
    yield
    from keygenie.logging_config import LOGGER_NAMES
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
