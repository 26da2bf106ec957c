# app/infra/db/models/card.py
import uuid

from sqlalchemy import (
    Column, String, Integer, DateTime, Numeric, JSON, Uuid,
    CheckConstraint, Index, func
)

from app.infra.db.base import Base


class Card(Base):
    __tablename__ = "cards"
    __table_args__ = (
        CheckConstraint("status IN ('active', 'used', 'expired', 'cancelled')", name="ck_cards_status"),
        CheckConstraint("amount > 0", name="ck_cards_amount_positive"),
        CheckConstraint("currency IN ('USD', 'EUR', 'GBP')", name="ck_cards_currency"),
        CheckConstraint("expiry_month BETWEEN 1 AND 12", name="ck_cards_expiry_month"),
        Index("idx_cards_status", "status"),
        Index("idx_cards_created_at", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    status = Column(String(20), nullable=False, default="active")
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)

    card_number = Column(String(16), nullable=False)
    expiry_month = Column(Integer, nullable=False)
    expiry_year = Column(Integer, nullable=False)
    cvv = Column(String(3), nullable=False)

    # "metadata" está reservado por SQLAlchemy en la clase declarativa
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def last4(self) -> str:
        return self.card_number[-4:]

    def __repr__(self) -> str:
        return f"<Card {self.id} {self.status} ****{self.last4}>"
