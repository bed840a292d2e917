import uuid
import enum
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import String, Date, DateTime, Numeric, Enum, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class InvoiceStatus(str, enum.Enum):
    ISSUED = "issued"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    CANCELLED = "cancelled"
    CLOSED = "closed"


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


# Invoices in these states never receive further payments
CLOSED_STATUSES = frozenset(
    {InvoiceStatus.PAID, InvoiceStatus.CANCELLED, InvoiceStatus.CLOSED}
)


class Invoice(Base):
    """Customer invoice (accounts receivable)."""

    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    customer_id: Mapped[str] = mapped_column(String(36), nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0")
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="VND")
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus, name="invoicestatus", values_callable=_enum_values),
        default=InvoiceStatus.ISSUED,
        nullable=False,
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    transactions: Mapped[list["BankTransaction"]] = relationship(
        "BankTransaction", back_populates="matched_invoice"
    )
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="invoice"
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def remaining_amount(self) -> Decimal:
        return (self.total_amount or Decimal("0")) - (self.paid_amount or Decimal("0"))

    @property
    def is_open(self) -> bool:
        """Eligible for matching: not settled/cancelled and something left to pay."""
        return self.status not in CLOSED_STATUSES and self.remaining_amount > 0

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number}: {self.paid_amount}/{self.total_amount}>"
