import enum
from datetime import datetime, timezone
from sqlalchemy import ForeignKey, String, Text, DateTime, JSON, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column
from lendtrack.database import Base


class DocumentType(str, enum.Enum):
    acquisition = "Acquisition"
    loan = "Loan"


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    type: Mapped[DocumentType] = mapped_column(
        SAEnum(DocumentType, values_callable=lambda e: [x.value for x in e]),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    related_ref: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)  # kód položky / skupiny
    content: Mapped[str] = mapped_column(Text, nullable=False)  # JSON data položky / zápůjčky
    signed_by: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
