# app/domain/entities/card.py
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class CardStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "CardStatus") -> bool:
        return target in CARD_TRANSITIONS[self]


# used / expired / cancelled son terminales
CARD_TRANSITIONS: Dict[CardStatus, FrozenSet[CardStatus]] = {
    CardStatus.ACTIVE: frozenset({CardStatus.USED, CardStatus.EXPIRED, CardStatus.CANCELLED}),
    CardStatus.USED: frozenset(),
    CardStatus.EXPIRED: frozenset(),
    CardStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class CardSnapshot:
    """Vista de una tarjeta tal como la devuelve el card service."""

    id: str
    status: CardStatus
    amount: Decimal
    currency: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CardSnapshot":
        return cls(
            id=str(payload["id"]),
            status=CardStatus(payload["status"]),
            amount=Decimal(str(payload["amount"])),
            currency=payload["currency"],
            metadata=payload.get("metadata") or {},
        )


def mask_card_number(card_number: str) -> str:
    """Reemplaza todo salvo los últimos 4 dígitos por ``*``."""
    return card_number[-4:].rjust(len(card_number), "*")
