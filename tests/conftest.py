# tests/conftest.py
"""
Fixtures compartidos.

Rate limiting is switched off before any ``app`` module is imported: the
limiter is built at import time from the process settings.
"""
import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import dataclasses
import threading
import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.errors import CardNotFound, CardStatusConflict, RemoteCallFailure
from app.domain.entities.card import CardSnapshot, CardStatus
from app.infra.db.models.charge import Charge
from app.infra.db.session import Database
from app.main import create_card_app, create_charge_app


class FakeCardGateway:
    """Card service en memoria, sin red."""

    def __init__(self, enforce_expected: bool = True):
        self.cards = {}
        self.calls = []
        self.enforce_expected = enforce_expected
        self.fail_fetch: Exception | None = None
        self.fail_update: Exception | None = None
        self.fetch_barrier: threading.Barrier | None = None
        # Latencia simulada y timeout de lectura del cliente: pasado el
        # timeout la llamada falla y el cambio no se aplica.
        self.fetch_delay = 0.0
        self.update_delay = 0.0
        self.timeout: float | None = None
        self._lock = threading.Lock()

    def add_card(self, amount="100.00", currency="USD", status=CardStatus.ACTIVE) -> str:
        card_id = str(uuid.uuid4())
        self.cards[card_id] = CardSnapshot(
            id=card_id,
            status=CardStatus(status),
            amount=Decimal(amount),
            currency=currency,
        )
        return card_id

    def status_of(self, card_id: str) -> CardStatus:
        return self.cards[card_id].status

    def updates(self):
        return [c for c in self.calls if c[0] == "set_status"]

    def _wait(self, delay: float) -> None:
        if self.timeout is not None and delay > self.timeout:
            threading.Event().wait(self.timeout)
            raise RemoteCallFailure(f"Card service call timed out after {self.timeout}s")
        if delay:
            threading.Event().wait(delay)

    def fetch_card(self, card_id: str) -> CardSnapshot:
        self.calls.append(("fetch", card_id))
        self._wait(self.fetch_delay)
        if self.fail_fetch is not None:
            raise self.fail_fetch
        if self.fetch_barrier is not None:
            self.fetch_barrier.wait(timeout=5)
        with self._lock:
            card = self.cards.get(card_id)
        if card is None:
            raise CardNotFound()
        return card

    def set_card_status(self, card_id, status, expected_status=None) -> CardSnapshot:
        self.calls.append(("set_status", card_id, CardStatus(status), expected_status))
        self._wait(self.update_delay)
        if self.fail_update is not None:
            raise self.fail_update
        with self._lock:
            card = self.cards.get(card_id)
            if card is None:
                raise CardNotFound()
            if self.enforce_expected and expected_status is not None and card.status != expected_status:
                raise CardStatusConflict()
            card = dataclasses.replace(card, status=CardStatus(status))
            self.cards[card_id] = card
        return card


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        ENVIRONMENT="test",
        CARD_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'cards.db'}",
        CHARGE_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'charges.db'}",
        CARD_SERVICE_URL="http://testserver",
        CARD_SERVICE_TIMEOUT=2.0,
        RATE_LIMIT_ENABLED=False,
        API_KEY=None,
    )


@pytest.fixture
def card_gateway() -> FakeCardGateway:
    return FakeCardGateway()


@pytest.fixture
def card_client(test_settings):
    with TestClient(create_card_app(test_settings)) as client:
        yield client


@pytest.fixture
def charge_client(test_settings, card_gateway):
    with TestClient(create_charge_app(test_settings, card_gateway=card_gateway)) as client:
        yield client


@pytest.fixture
async def charge_db(test_settings):
    database = Database(test_settings.CHARGE_DATABASE_URL, tables=[Charge.__table__])
    await database.init_models()
    yield database
    await database.dispose()


@pytest.fixture
def naive_card_gateway() -> FakeCardGateway:
    """Acepta cualquier cambio de estado, sin compare-and-swap."""
    return FakeCardGateway(enforce_expected=False)
