# app/domain/services/charge_store.py
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ChargeNotFound
from app.domain.entities.charge import ChargeStatus
from app.infra.db.models.charge import Charge


class ChargeStore:
    """Persistencia de cargos sobre la sesión (y transacción) que le pasan."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        card_id: UUID,
        amount: Decimal,
        currency: str,
        status: ChargeStatus = ChargeStatus.SUCCEEDED,
        description: str | None = None,
        metadata: Dict[str, Any] | None = None,
    ) -> Charge:
        """Inserta el cargo sin hacer commit; queda visible solo al confirmar la transacción."""
        charge = Charge(
            card_id=card_id,
            status=ChargeStatus(status).value,
            amount=amount,
            currency=currency,
            description=description,
            metadata_=metadata or {},
        )
        self.db.add(charge)
        await self.db.flush()
        await self.db.refresh(charge)
        return charge

    async def get(self, charge_id: UUID) -> Charge:
        res = await self.db.execute(select(Charge).where(Charge.id == charge_id))
        charge = res.scalars().first()
        if charge is None:
            raise ChargeNotFound()
        return charge

    async def list_for_card(self, card_id: UUID, limit: int = 50) -> List[Charge]:
        stmt = (
            select(Charge)
            .where(Charge.card_id == card_id)
            .order_by(desc(Charge.created_at))
            .limit(limit)
        )
        res = await self.db.execute(stmt)
        return list(res.scalars().all())
