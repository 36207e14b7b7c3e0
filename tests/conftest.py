"""Shared fixtures: in-memory vaults with a deterministic logical clock."""

import pytest

from chunkvault import Vault
from chunkvault.core.auth import CallerAuthorizer
from chunkvault.storage.ledger import MemoryLedger

ADMIN = "GADMIN"


class TickClock:
    """Logical clock advancing by one on every read."""

    def __init__(self, start: int = 1000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


@pytest.fixture
def clock():
    return TickClock()


@pytest.fixture
def vault(clock):
    """Initialized vault; writes must pass caller=ADMIN."""
    v = Vault(ledger=MemoryLedger(), authorizer=CallerAuthorizer(), clock=clock)
    v.initialize(ADMIN)
    return v
