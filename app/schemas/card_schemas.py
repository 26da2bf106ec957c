# app/schemas/card_schemas.py
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import Field

from app.domain.entities.card import CardStatus, Currency, mask_card_number
from app.schemas.common import AmountOut, CamelModel, CamelRequest, PositiveAmount


class CardCreate(CamelRequest):
    amount: PositiveAmount
    currency: Currency
    metadata: Optional[Dict[str, Any]] = None


class CardStatusUpdate(CamelRequest):
    status: CardStatus
    expected_status: Optional[CardStatus] = Field(
        None,
        description="Compare-and-swap: solo actualiza si el estado actual coincide",
    )


class CardRead(CamelModel):
    id: UUID
    status: CardStatus
    amount: AmountOut
    currency: str
    card_number: str = Field(..., description="Número enmascarado (últimos 4 dígitos)")
    expiry_month: int
    expiry_year: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_card(cls, card, **extra) -> "CardRead":
        return cls(
            id=card.id,
            status=card.status,
            amount=card.amount,
            currency=card.currency,
            card_number=mask_card_number(card.card_number),
            expiry_month=card.expiry_month,
            expiry_year=card.expiry_year,
            created_at=card.created_at,
            updated_at=card.updated_at,
            metadata=card.metadata_ or {},
            **extra,
        )


class CardCreated(CardRead):
    # Solo se devuelve al crear la tarjeta
    cvv: str
