import uuid
import enum
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import String, Text, Date, DateTime, Numeric, Enum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class MatchStatus(str, enum.Enum):
    UNMATCHED = "unmatched"
    MATCHED = "matched"


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class BankTransaction(Base):
    """Bank feed transaction awaiting (or linked by) reconciliation."""

    __tablename__ = "bank_transactions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=True)
    reference: Mapped[str] = mapped_column(String(255), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="VND")
    match_status: Mapped[MatchStatus] = mapped_column(
        Enum(MatchStatus, name="matchstatus", values_callable=_enum_values),
        default=MatchStatus.UNMATCHED,
        nullable=False,
    )
    # Set iff match_status is MATCHED
    matched_invoice_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("invoices.id"), nullable=True
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    matched_invoice: Mapped["Invoice"] = relationship(
        "Invoice", back_populates="transactions"
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def abs_amount(self) -> Decimal:
        return abs(self.amount)

    def __repr__(self) -> str:
        return f"<BankTransaction {self.id}: {self.amount} {self.currency}>"
