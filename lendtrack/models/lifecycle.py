import enum
from datetime import datetime, timezone, date
from sqlalchemy import Integer, ForeignKey, String, DateTime, Date, JSON, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from lendtrack.database import Base


class LifecycleStatus(str, enum.Enum):
    decommissioned = "Decommissioned"
    beyond_repair = "Damaged Beyond Repair (DBR)"
    disposed = "Scrapped or Disposed"
    written_off = "Written-off"
    lost = "Lost Items"


class RetirementSource(str, enum.Enum):
    """Ze kterého fondu jsou vyřazené kusy odečteny."""

    available = "available"
    damaged = "damaged"


class QuantityAction(str, enum.Enum):
    register = "register"
    loan = "loan"
    return_ = "return"
    damage = "damage"
    repair = "repair"
    remove = "remove"
    retire = "retire"


def _values(e):
    return [x.value for x in e]


class LifecycleEvent(Base):
    """Záznam o vyřazení kusů (životní cyklus), append-only."""

    __tablename__ = "lifecycle_events"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int | None] = mapped_column(ForeignKey("items.id", ondelete="SET NULL"), nullable=True, index=True)
    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    statuses: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str] = mapped_column(String(2000), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[RetirementSource] = mapped_column(
        SAEnum(RetirementSource, values_callable=_values),
        default=RetirementSource.available,
        nullable=False,
    )
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    item: Mapped["Item | None"] = relationship(back_populates="lifecycle_events")


class QuantityEvent(Base):
    """Append-only historie pohybů množství položky (výpůjčka, vrácení, poškození, ...)."""

    __tablename__ = "quantity_events"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_id: Mapped[int | None] = mapped_column(ForeignKey("items.id", ondelete="SET NULL"), nullable=True, index=True)
    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[QuantityAction] = mapped_column(
        SAEnum(QuantityAction, values_callable=_values), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    # Stav po operaci
    quantity_total: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_loaned: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_damaged: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    item: Mapped["Item | None"] = relationship(back_populates="quantity_events")
