# app/infra/db/models/charge.py
import uuid

from sqlalchemy import (
    Column, String, Text, DateTime, Numeric, JSON, Uuid,
    CheckConstraint, Index, func
)

from app.infra.db.base import Base


class Charge(Base):
    __tablename__ = "charges"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'succeeded', 'failed')", name="ck_charges_status"),
        CheckConstraint("amount > 0", name="ck_charges_amount_positive"),
        CheckConstraint("currency IN ('USD', 'EUR', 'GBP')", name="ck_charges_currency"),
        Index("idx_charges_card_id", "card_id"),
        Index("idx_charges_status", "status"),
        Index("idx_charges_created_at", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # La tarjeta vive en otra base (card service): sin ForeignKey
    card_id = Column(Uuid(as_uuid=True), nullable=False)
    status = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    description = Column(Text, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Charge {self.id} card={self.card_id} {self.status} {self.amount} {self.currency}>"
