# app/domain/services/charge_orchestrator.py
import asyncio
import logging
from typing import Any, Callable, Mapping, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import (
    CardNotChargeable,
    CardNotFound,
    CardStatusConflict,
    CardUpdateFailed,
    CurrencyMismatch,
    InsufficientFunds,
    InternalError,
    RemoteCallFailure,
    ServiceError,
)
from app.domain.entities.card import CardSnapshot, CardStatus
from app.domain.entities.charge import ChargeStatus
from app.domain.services.charge_store import ChargeStore
from app.infra.clients.card_client import CardGateway
from app.infra.db.models.charge import Charge
from app.schemas.charge_schemas import ChargeCreate, validate_charge_request

logger = logging.getLogger(__name__)


class ChargeOrchestrator:
    """
    Flujo de creación de cargos.

    1. validate the request
    2. open a transaction on the charge store
    3. fetch the card from the card service and check it can take the charge
    4. insert the charge (``succeeded``) inside the open transaction
    5. ask the card service to move the card to ``used``; on failure roll back
    6. commit and return the charge

    The commit happens only after the card update succeeded. If that commit
    then fails the card stays ``used`` without a charge; that window is not
    compensated and is logged with both ids.

    With ``guard_card_status`` the update in step 5 is conditional on the card
    still being ``active`` (compare-and-swap on the card service), so two
    concurrent charges against the same card cannot both succeed. Without it
    the update is unconditional and that race is possible.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        card_gateway: CardGateway,
        guard_card_status: bool = True,
    ):
        self.sessionmaker = sessionmaker
        self.cards = card_gateway
        self.guard_card_status = guard_card_status

    async def _call_card_service(self, fn: Callable, *args):
        # El cliente es síncrono (requests): se ejecuta en un thread.
        # Sin wait_for: el timeout es el del cliente y siempre se espera
        # el resultado, así un update lento no se aplica tras un rollback.
        return await asyncio.to_thread(fn, *args)

    async def _fetch_card(self, card_id: str) -> CardSnapshot:
        try:
            return await self._call_card_service(self.cards.fetch_card, card_id)
        except CardNotFound:
            logger.warning(f"Charge rejected: card {card_id} not found")
            raise
        except RemoteCallFailure as exc:
            logger.error(f"❌ Could not fetch card {card_id}: {exc.message}")
            raise InternalError("Card service unavailable") from exc

    @staticmethod
    def _check_chargeable(card: CardSnapshot, request: ChargeCreate) -> None:
        if card.status != CardStatus.ACTIVE:
            raise CardNotChargeable(f"Card cannot be charged because it is {card.status.value}")
        if card.amount < request.amount:
            raise InsufficientFunds()
        if card.currency != request.currency.value:
            raise CurrencyMismatch()

    async def _mark_card_used(self, card_id: str) -> CardSnapshot:
        expected = CardStatus.ACTIVE if self.guard_card_status else None
        try:
            return await self._call_card_service(
                self.cards.set_card_status, card_id, CardStatus.USED, expected
            )
        except CardStatusConflict as exc:
            logger.warning(f"Charge rejected: card {card_id} was used by a concurrent charge")
            raise CardNotChargeable("Card cannot be charged because it is used") from exc
        except (RemoteCallFailure, CardNotFound) as exc:
            logger.error(f"❌ Error updating card {card_id} status: {exc.message}")
            raise CardUpdateFailed() from exc

    async def create_charge(self, data: Union[ChargeCreate, Mapping[str, Any]]) -> Charge:
        request = validate_charge_request(data)
        card_id = str(request.card_id)

        async with self.sessionmaker() as db:
            tx = await db.begin()
            try:
                card = await self._fetch_card(card_id)
                self._check_chargeable(card, request)

                charge = await ChargeStore(db).create(
                    card_id=request.card_id,
                    amount=request.amount,
                    currency=request.currency.value,
                    status=ChargeStatus.SUCCEEDED,
                    description=request.description,
                    metadata=request.metadata,
                )

                await self._mark_card_used(card_id)
            except ServiceError as exc:
                await tx.rollback()
                if isinstance(exc, (CardNotChargeable, InsufficientFunds, CurrencyMismatch)):
                    logger.warning(f"Charge rejected for card {card_id}: {exc.code}")
                raise
            except Exception as exc:
                await tx.rollback()
                logger.exception(f"❌ Charge for card {card_id} failed")
                raise InternalError() from exc

            try:
                await tx.commit()
            except Exception as exc:
                logger.error(
                    f"❌ Card {card_id} marked used but charge {charge.id} was not committed: {exc}"
                )
                raise InternalError() from exc

        logger.info(f"✅ Charge {charge.id} committed ({charge.amount} {charge.currency}, card {card_id})")
        return charge
