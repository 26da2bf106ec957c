# app/domain/services/card_service.py
import logging
import secrets
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Tuple
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import CardNotFound, CardStatusConflict, InvalidIdentifier, ValidationError
from app.domain.entities.card import CardStatus, Currency
from app.infra.db.models.card import Card
from app.schemas.common import parse_uuid

logger = logging.getLogger(__name__)

CARD_NUMBER_PREFIX = "4"
CARD_NUMBER_LENGTH = 16


def parse_card_id(raw: str | UUID) -> UUID:
    return parse_uuid(raw, "card ID")


def generate_card_number() -> str:
    digits = "".join(secrets.choice("0123456789") for _ in range(CARD_NUMBER_LENGTH - 1))
    return CARD_NUMBER_PREFIX + digits


def generate_expiry(now: datetime | None = None) -> Tuple[int, int]:
    """Vence en el mismo mes del año siguiente."""
    now = now or datetime.utcnow()
    return now.month, now.year + 1


def generate_cvv() -> str:
    return str(100 + secrets.randbelow(900))


def _validate_amount(amount: Any) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("amount: must be a number")
    if not value.is_finite() or value <= 0:
        raise ValidationError("amount: must be a positive number")
    if value.as_tuple().exponent < -2:
        raise ValidationError("amount: must have at most 2 decimal places")
    return value.quantize(Decimal("0.01"))


def _validate_currency(currency: Any) -> str:
    try:
        return Currency(currency).value
    except ValueError:
        allowed = ", ".join(c.value for c in Currency)
        raise ValidationError(f"currency: must be one of [{allowed}]")


async def create_card(
    db: AsyncSession,
    amount: Any,
    currency: Any,
    metadata: Dict[str, Any] | None = None,
) -> Card:
    card = Card(
        status=CardStatus.ACTIVE.value,
        amount=_validate_amount(amount),
        currency=_validate_currency(currency),
        card_number=generate_card_number(),
        cvv=generate_cvv(),
        metadata_=metadata or {},
    )
    card.expiry_month, card.expiry_year = generate_expiry()

    db.add(card)
    await db.commit()
    await db.refresh(card)

    logger.info(f"💳 Card issued {card.id} ({card.amount} {card.currency}, ****{card.last4})")
    return card


async def get_card(db: AsyncSession, card_id: str | UUID) -> Card:
    try:
        key = parse_card_id(card_id)
    except InvalidIdentifier:
        raise CardNotFound()

    res = await db.execute(select(Card).where(Card.id == key))
    card = res.scalars().first()
    if card is None:
        raise CardNotFound()
    return card


async def update_card_status(
    db: AsyncSession,
    card_id: str | UUID,
    status: CardStatus | str,
    expected_status: CardStatus | str | None = None,
) -> Card:
    """
    Cambia el estado de la tarjeta.

    Without ``expected_status`` the status is overwritten unconditionally.
    With it, the update only applies while the card is still in
    ``expected_status`` (single conditional UPDATE); losing that race raises
    ``CardStatusConflict``.
    """
    try:
        new_status = CardStatus(status)
        expected = CardStatus(expected_status) if expected_status is not None else None
    except ValueError:
        allowed = ", ".join(s.value for s in CardStatus)
        raise ValidationError(f"status: must be one of [{allowed}]")

    if expected is not None and not expected.can_transition_to(new_status):
        raise ValidationError(f"status: transition {expected.value} -> {new_status.value} is not allowed")

    card = await get_card(db, card_id)

    stmt = (
        update(Card)
        .where(Card.id == card.id)
        .values(status=new_status.value, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if expected is not None:
        stmt = stmt.where(Card.status == expected.value)

    res = await db.execute(stmt)
    if res.rowcount == 0:
        await db.rollback()
        logger.warning(
            f"Card {card.id} status update to {new_status.value} rejected: "
            f"expected {expected.value if expected else '-'}"
        )
        raise CardStatusConflict(f"Card is no longer {expected.value if expected else 'updatable'}")

    await db.commit()
    await db.refresh(card)

    logger.info(f"🔄 Card {card.id} status -> {card.status}")
    return card
