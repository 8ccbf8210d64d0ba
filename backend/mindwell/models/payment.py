"""
MindWell Backend — Payment SQLAlchemy Model
===========================================

What:  ORM model for `payments`, one row per payment intent.
How:   status follows pending → confirmed → premium_granted, or
       pending → failed (→ confirmed on a retried charge). The transition
       rules live on PaymentStatus; the table only stores the current value.
Who:   BillingService through SQLAlchemyStore.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from mindwell.database import Base


class PaymentModel(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)

    intent_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Payment processor intent identifier (pi_...)",
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False, comment="Minor units (cents)")
    currency: Mapped[str] = mapped_column(String(10), nullable=False)

    status: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        server_default=text("'pending'"),
        comment="pending, confirmed, premium_granted, failed",
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = ({"sqlite_autoincrement": True},)

    def __repr__(self) -> str:
        return f"<PaymentModel(id={self.id}, intent='{self.intent_id}', status='{self.status}')>"
