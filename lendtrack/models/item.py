import enum
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Numeric, Enum as SAEnum, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from lendtrack.database import Base


class ItemCategory(str, enum.Enum):
    furniture = "Furniture"
    equipment = "Equipment"
    tools = "Tools"
    electronics = "Electronics"
    software = "Software"
    other = "Other"


class ItemUsage(str, enum.Enum):
    none = "None"
    staff = "Staff"
    members = "Members"
    others = "Others"


class ItemStatus(str, enum.Enum):
    """Stav položky: vždy odvozen z množství, nikdy nastavován přímo."""

    available = "Available"
    partially_available = "Partially Available"
    loaned_out = "Loaned Out"
    damaged = "Damaged"
    maintenance = "Maintenance"


def _values(e):
    return [x.value for x in e]


class Item(Base):
    __tablename__ = "items"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_nonneg"),
        CheckConstraint("quantity_available >= 0", name="ck_items_available_nonneg"),
        CheckConstraint("quantity_loaned >= 0", name="ck_items_loaned_nonneg"),
        CheckConstraint("quantity_damaged >= 0", name="ck_items_damaged_nonneg"),
        CheckConstraint(
            "quantity_available + quantity_loaned + quantity_damaged = quantity",
            name="ck_items_quantity_balance",
        ),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[ItemCategory] = mapped_column(
        SAEnum(ItemCategory, values_callable=_values), nullable=False
    )
    usage: Mapped[ItemUsage] = mapped_column(
        SAEnum(ItemUsage, values_callable=_values), default=ItemUsage.none, nullable=False
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_loaned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    quantity_damaged: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Kumulativně vyřazené kusy (životní cyklus), do součtu se nezapočítávají
    quantity_retired: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[ItemStatus] = mapped_column(
        SAEnum(ItemStatus, values_callable=_values), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    loans: Mapped[list["Loan"]] = relationship(back_populates="item", order_by="Loan.id")
    lifecycle_events: Mapped[list["LifecycleEvent"]] = relationship(back_populates="item")
    quantity_events: Mapped[list["QuantityEvent"]] = relationship(back_populates="item")
