import enum
from datetime import datetime, timezone, date
from sqlalchemy import Integer, ForeignKey, String, DateTime, Date, Enum as SAEnum, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from lendtrack.database import Base


class BorrowerType(str, enum.Enum):
    staff = "Staff"
    member = "Member"
    student = "Student"
    organization = "Other Organization"
    other = "Other"


class LoanStatus(str, enum.Enum):
    """Uložený stav: Ongoing -> Returned (jednosměrně)."""

    ongoing = "Ongoing"
    returned = "Returned"


class LoanDisplayStatus(str, enum.Enum):
    ongoing = "Ongoing"
    overdue = "Overdue"
    returned = "Returned"


def display_status(status: LoanStatus, expected_return_date: date, today: date | None = None) -> LoanDisplayStatus:
    """Zobrazovaný stav. Overdue se počítá při čtení, nikdy se neukládá."""
    if status == LoanStatus.returned:
        return LoanDisplayStatus.returned
    today = today or date.today()
    if today > expected_return_date:
        return LoanDisplayStatus.overdue
    return LoanDisplayStatus.ongoing


def _values(e):
    return [x.value for x in e]


class LoanGroup(Base):
    """Hromadná zápůjčka: jeden vypůjčitel, jedno období, více položek."""

    __tablename__ = "loan_groups"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str | None] = mapped_column(String(32), unique=True, index=True, nullable=True)
    borrower_name: Mapped[str] = mapped_column(String(255), nullable=False)
    borrower_type: Mapped[BorrowerType] = mapped_column(
        SAEnum(BorrowerType, values_callable=_values), nullable=False
    )
    borrower_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    loan_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_return_date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_return_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[LoanStatus] = mapped_column(
        SAEnum(LoanStatus, values_callable=_values), default=LoanStatus.ongoing, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    loans: Mapped[list["Loan"]] = relationship(back_populates="loan_group", order_by="Loan.id")

    @property
    def display_status(self) -> LoanDisplayStatus:
        return display_status(self.status, self.expected_return_date)


class Loan(Base):
    __tablename__ = "loans"

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_loans_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    # Nullable: po úplném odstranění položky zůstává zápůjčka v historii
    item_id: Mapped[int | None] = mapped_column(ForeignKey("items.id", ondelete="SET NULL"), nullable=True, index=True)
    item_code: Mapped[str] = mapped_column(String(64), nullable=False)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    loan_group_id: Mapped[int | None] = mapped_column(ForeignKey("loan_groups.id"), nullable=True, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    borrower_name: Mapped[str] = mapped_column(String(255), nullable=False)
    borrower_type: Mapped[BorrowerType] = mapped_column(
        SAEnum(BorrowerType, values_callable=_values), nullable=False
    )
    borrower_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    loan_date: Mapped[date] = mapped_column(Date, nullable=False)
    expected_return_date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_return_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[LoanStatus] = mapped_column(
        SAEnum(LoanStatus, values_callable=_values), default=LoanStatus.ongoing, nullable=False
    )
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    item: Mapped["Item | None"] = relationship(back_populates="loans")
    loan_group: Mapped["LoanGroup | None"] = relationship(back_populates="loans")

    @property
    def display_status(self) -> LoanDisplayStatus:
        return display_status(self.status, self.expected_return_date)
