# app/infra/clients/card_client.py
import logging
import threading
from typing import Any, Dict, List, Protocol, Tuple

import requests

from app.core.errors import CardNotFound, CardStatusConflict, RemoteCallFailure
from app.domain.entities.card import CardSnapshot, CardStatus

logger = logging.getLogger(__name__)


class CardGateway(Protocol):
    """Interfaz síncrona hacia el card service."""

    def fetch_card(self, card_id: str) -> CardSnapshot:
        ...

    def set_card_status(
        self,
        card_id: str,
        status: CardStatus,
        expected_status: CardStatus | None = None,
    ) -> CardSnapshot:
        ...


class CardServiceClient:
    """
    Cliente HTTP (requests) del card service.

    ``timeout`` goes straight to requests: a float or a ``(connect, read)``
    tuple. It is the only bound on a call; the caller waits for the call to
    finish so a timed-out update is never applied behind its back. 404 maps
    to ``CardNotFound``, 409 to ``CardStatusConflict``; transport errors,
    timeouts and any other non-2xx response raise ``RemoteCallFailure``.

    Calls arrive from ``asyncio.to_thread`` workers, and a ``requests.Session``
    is not thread-safe, so each worker thread gets its own session. An
    injected ``session`` is used as-is for every thread.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | Tuple[float, float] = (3.05, 3.0),
        session: Any = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._injected_session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @property
    def session(self):
        if self._injected_session is not None:
            return self._injected_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _url(self, card_id: str, suffix: str = "") -> str:
        return f"{self.base_url}/api/v1/cards/{card_id}{suffix}"

    def _handle(self, resp, card_id: str) -> Dict[str, Any]:
        if resp.status_code == 404:
            raise CardNotFound()
        if resp.status_code == 409:
            raise CardStatusConflict()
        if not 200 <= resp.status_code < 300:
            raise RemoteCallFailure(f"Card service returned {resp.status_code} for card {card_id}")
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteCallFailure(f"Card service returned an invalid body for card {card_id}") from exc

    def _snapshot(self, payload: Dict[str, Any], card_id: str) -> CardSnapshot:
        try:
            return CardSnapshot.from_payload(payload)
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise RemoteCallFailure(f"Card service returned a malformed card {card_id}") from exc

    def fetch_card(self, card_id: str) -> CardSnapshot:
        try:
            resp = self.session.get(self._url(card_id), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"❌ Card service unreachable (GET {card_id}): {exc}")
            raise RemoteCallFailure(f"Card service unreachable: {exc}") from exc
        return self._snapshot(self._handle(resp, card_id), card_id)

    def set_card_status(
        self,
        card_id: str,
        status: CardStatus,
        expected_status: CardStatus | None = None,
    ) -> CardSnapshot:
        body: Dict[str, Any] = {"status": CardStatus(status).value}
        if expected_status is not None:
            body["expectedStatus"] = CardStatus(expected_status).value
        try:
            resp = self.session.put(self._url(card_id, "/status"), json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"❌ Card service unreachable (PUT {card_id}/status): {exc}")
            raise RemoteCallFailure(f"Card service unreachable: {exc}") from exc
        return self._snapshot(self._handle(resp, card_id), card_id)

    def close(self) -> None:
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
