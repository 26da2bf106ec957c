# app/schemas/charge_schemas.py
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union
from uuid import UUID

from pydantic import Field, ValidationError as PydanticValidationError

from app.core.errors import InvalidRequest
from app.domain.entities.card import Currency
from app.domain.entities.charge import ChargeStatus
from app.schemas.common import (
    AmountOut, CamelModel, CamelRequest, PositiveAmount, describe_validation_errors
)


class ChargeCreate(CamelRequest):
    card_id: UUID
    amount: PositiveAmount
    currency: Currency
    description: Optional[str] = Field(None, max_length=1000)
    metadata: Optional[Dict[str, Any]] = None


class ChargeRead(CamelModel):
    id: UUID
    card_id: UUID
    status: ChargeStatus
    amount: AmountOut
    currency: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_charge(cls, charge) -> "ChargeRead":
        return cls(
            id=charge.id,
            card_id=charge.card_id,
            status=charge.status,
            amount=charge.amount,
            currency=charge.currency,
            description=charge.description,
            created_at=charge.created_at,
            updated_at=charge.updated_at,
            metadata=charge.metadata_ or {},
        )


def validate_charge_request(data: Union[ChargeCreate, Mapping[str, Any]]) -> ChargeCreate:
    """Valida el payload de un cargo; lanza ``InvalidRequest`` si no cumple el esquema."""
    if isinstance(data, ChargeCreate):
        return data
    try:
        return ChargeCreate.model_validate(data)
    except PydanticValidationError as exc:
        raise InvalidRequest(describe_validation_errors(exc.errors())) from exc
