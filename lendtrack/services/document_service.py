"""Dokumenty o pořízení a zápůjčce.

Dokument se vytváří jako reakce na doménovou událost (ItemRegistered,
LoanCreated, LoanGroupCreated). Obsahem jsou pouze data položky / zápůjčky
ve formátu JSON, šablonu si skládá klient. Správce může dokument založit
i ručně (create_document), pak se obsah ukládá tak, jak přišel.

Protokoly o pořízení (DOC-ACQ) a ruční dokumenty ostatních typů (DOC-MISC)
sdílejí číselnou řadu v rámci roku, aby se ruční a automatické kódy nikdy
nepotkaly.
"""
import json
import logging
import math
import re
import threading
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lendtrack import events
from lendtrack.exceptions import AlreadySignedError, DuplicateCodeError, NotFoundError
from lendtrack.models.document import Document, DocumentType
from lendtrack.models.item import Item
from lendtrack.models.loan import Loan, LoanGroup
from lendtrack.models.user import User
from lendtrack.schemas.document import DocumentCreate
from lendtrack.schemas.item import ItemResponse
from lendtrack.schemas.loan import LoanResponse, LoanGroupDetail
from lendtrack.schemas.pagination import Page
from lendtrack.services.activity_service import log_activity
from lendtrack.services.locking import ItemLocks

logger = logging.getLogger(__name__)

# Stejný registr zámků jako u položek, klíčem je id dokumentu
document_locks = ItemLocks(label="Dokument")

_code_lock = threading.Lock()


def _year() -> int:
    return datetime.now(timezone.utc).year


def _next_code(db: Session, kind: str) -> str:
    """Další volný kód DOC-{kind}-{rok}-NNN (ACQ a MISC mají jednu řadu)."""
    year = _year()
    pattern = re.compile(rf"^DOC-(?:ACQ|MISC)-{year}-(\d+)$")
    codes = db.scalars(
        select(Document.code).where(
            Document.code.like(f"DOC-ACQ-{year}-%") | Document.code.like(f"DOC-MISC-{year}-%")
        )
    ).all()
    numbers = [int(m.group(1)) for m in map(pattern.match, codes) if m]
    return f"DOC-{kind}-{year}-{(max(numbers) if numbers else 0) + 1:03d}"


def _add(db: Session, code: str, doc_type: DocumentType, title: str, related_ref: str, payload: dict,
         user_id: int | None) -> Document:
    doc = Document(
        code=code,
        type=doc_type,
        title=title,
        related_ref=related_ref,
        content=json.dumps(payload, ensure_ascii=False, default=str),
        signed_by=[],
        created_by=user_id,
    )
    db.add(doc)
    logger.info("Vygenerován dokument %s (%s)", code, title)
    return doc


def on_item_registered(db: Session, event: events.ItemRegistered) -> None:
    item = db.get(Item, event.item_id)
    with _code_lock:
        code = _next_code(db, "ACQ")
    _add(
        db,
        code=code,
        doc_type=DocumentType.acquisition,
        title=f"Protokol o pořízení - {item.name}",
        related_ref=item.code,
        payload={"item": ItemResponse.model_validate(item).model_dump(mode="json")},
        user_id=event.user_id,
    )


def on_loan_created(db: Session, event: events.LoanCreated) -> None:
    loan = db.get(Loan, event.loan_id)
    item = loan.item
    _add(
        db,
        code=f"DOC-LOAN-{_year()}-{loan.id:03d}",
        doc_type=DocumentType.loan,
        title=f"Zápůjční list - {loan.item_name}",
        related_ref=loan.item_code,
        payload={
            "item": ItemResponse.model_validate(item).model_dump(mode="json"),
            "loan": LoanResponse.model_validate(loan).model_dump(mode="json"),
        },
        user_id=event.user_id,
    )


def on_loan_group_created(db: Session, event: events.LoanGroupCreated) -> None:
    group = db.get(LoanGroup, event.loan_group_id)
    _add(
        db,
        code=f"DOC-GRP-{_year()}-{group.id:03d}",
        doc_type=DocumentType.loan,
        title=f"Zápůjční list - {group.borrower_name}",
        related_ref=group.code,
        payload={"loan_group": LoanGroupDetail.model_validate(group).model_dump(mode="json")},
        user_id=event.user_id,
    )


def register_handlers() -> None:
    events.subscribe(events.ItemRegistered, on_item_registered)
    events.subscribe(events.LoanCreated, on_loan_created)
    events.subscribe(events.LoanGroupCreated, on_loan_group_created)


def get_documents(
    db: Session,
    page: int = 1,
    size: int = 50,
    doc_type: DocumentType | None = None,
    related_ref: str | None = None,
) -> Page:
    query = select(Document)
    if doc_type is not None:
        query = query.where(Document.type == doc_type)
    if related_ref:
        query = query.where(Document.related_ref == related_ref)
    query = query.order_by(Document.id.desc())

    total = db.scalar(select(func.count()).select_from(query.subquery()))
    rows = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(
        items=rows,
        total=total,
        page=page,
        pages=math.ceil(total / size) if total else 1,
        size=size,
    )


def create_document(db: Session, data: DocumentCreate, user_id: int | None = None) -> Document:
    with _code_lock:
        code = data.code or _next_code(db, "ACQ" if data.type == DocumentType.acquisition else "MISC")
        if db.scalar(select(Document.id).where(Document.code == code)):
            raise DuplicateCodeError(f"Kód dokumentu {code} již existuje")
        doc = Document(
            code=code,
            type=data.type,
            title=data.title,
            related_ref=data.related_ref,
            content=data.content,
            signed_by=[],
            created_by=user_id,
        )
        try:
            db.add(doc)
            db.flush()
            log_activity(db, user_id, "Create", "Document", doc.id, f"Vytvořen dokument: {doc.title} ({doc.code})")
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateCodeError(f"Kód dokumentu {code} již existuje")
        except Exception:
            db.rollback()
            raise
    logger.info("Ručně vytvořen dokument %s (%s)", code, data.title)
    db.refresh(doc)
    return doc


def get_document(db: Session, document_id: int) -> Document:
    doc = db.get(Document, document_id)
    if not doc:
        raise NotFoundError("Dokument", document_id)
    return doc


def _lock_document(db: Session, document_id: int) -> Document:
    doc = db.scalar(
        select(Document)
        .where(Document.id == document_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not doc:
        raise NotFoundError("Dokument", document_id)
    return doc


def sign_document(db: Session, document_id: int, user_id: int) -> Document:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("Uživatel", user_id)
    with document_locks.hold([document_id]):
        try:
            doc = _lock_document(db, document_id)
            signed = list(doc.signed_by or [])
            if user.name in signed:
                raise AlreadySignedError(f"Dokument {doc.code} již byl podepsán uživatelem {user.name}")
            # nový list, aby SQLAlchemy zaznamenal změnu JSON sloupce
            doc.signed_by = signed + [user.name]
            log_activity(db, user_id, "Sign", "Document", doc.id, f"Podepsán dokument: {doc.title} ({doc.code})")
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(doc)
    return doc
