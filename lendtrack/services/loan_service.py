"""Zápůjčky jednotlivých položek a hromadné zápůjčky (skupiny).

Stav zápůjčky i skupiny: Ongoing -> Returned, bez cesty zpět. Overdue se
neukládá, počítá se při čtení (Loan.display_status).
"""
import math
import logging
from datetime import date

from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from lendtrack import events
from lendtrack.exceptions import (
    AlreadyReturnedError,
    InsufficientQuantityError,
    NotFoundError,
    ValidationError,
)
from lendtrack.models.item import Item
from lendtrack.models.loan import Loan, LoanGroup, LoanStatus, LoanDisplayStatus
from lendtrack.schemas.loan import LoanCreate, LoanGroupCreate
from lendtrack.schemas.pagination import Page
from lendtrack.services import ledger_service as ledger
from lendtrack.services.activity_service import log_activity
from lendtrack.services.locking import item_transaction

logger = logging.getLogger(__name__)


def _loan_dates(loan_date: date | None, expected_return_date: date) -> tuple[date, date]:
    loan_date = loan_date or date.today()
    if expected_return_date < loan_date:
        raise ValidationError("Předpokládané datum vrácení nesmí být před datem zápůjčky")
    return loan_date, expected_return_date


def _paged(db: Session, query, page: int, size: int) -> Page:
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    rows = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(
        items=rows,
        total=total,
        page=page,
        pages=math.ceil(total / size) if total else 1,
        size=size,
    )


def _status_filter(query, model, status: LoanDisplayStatus | None, today: date):
    if status == LoanDisplayStatus.returned:
        return query.where(model.status == LoanStatus.returned)
    if status == LoanDisplayStatus.overdue:
        return query.where(model.status == LoanStatus.ongoing, model.expected_return_date < today)
    if status == LoanDisplayStatus.ongoing:
        return query.where(model.status == LoanStatus.ongoing, model.expected_return_date >= today)
    return query


# ── Jednotlivé zápůjčky ──────────────────────────────────────────────────────

def get_loan(db: Session, loan_id: int) -> Loan:
    loan = db.get(Loan, loan_id)
    if not loan:
        raise NotFoundError("Zápůjčka", loan_id)
    return loan


def get_loans(
    db: Session,
    page: int = 1,
    size: int = 50,
    status: LoanDisplayStatus | None = None,
    item_id: int | None = None,
    include_grouped: bool = False,
) -> Page:
    query = select(Loan)
    if not include_grouped:
        query = query.where(Loan.loan_group_id.is_(None))
    if item_id is not None:
        query = query.where(Loan.item_id == item_id)
    query = _status_filter(query, Loan, status, date.today())
    query = query.order_by(Loan.id.desc())
    return _paged(db, query, page, size)


def get_recent_loans(db: Session, limit: int = 5) -> list[Loan]:
    return db.scalars(select(Loan).order_by(Loan.id.desc()).limit(limit)).all()


def create_loan(db: Session, data: LoanCreate, user_id: int | None = None) -> Loan:
    loan_date, expected = _loan_dates(data.loan_date, data.expected_return_date)
    ledger.require_positive(data.quantity)

    with item_transaction(db, [data.item_id]):
        item = ledger.lock_item(db, data.item_id)
        ledger.apply_loan(db, item, data.quantity, user_id=user_id)
        loan = Loan(
            item=item,
            item_code=item.code,
            item_name=item.name,
            quantity=data.quantity,
            borrower_name=data.borrower_name,
            borrower_type=data.borrower_type,
            borrower_contact=data.borrower_contact,
            loan_date=loan_date,
            expected_return_date=expected,
            status=LoanStatus.ongoing,
            notes=data.notes,
            created_by=user_id,
        )
        db.add(loan)
        db.flush()
        events.publish(db, events.LoanCreated(loan_id=loan.id, user_id=user_id))
        log_activity(
            db, user_id, "Create", "Loan", loan.id,
            f"Zápůjčka {loan.quantity} ks: {item.name} ({item.code}) pro {loan.borrower_name}",
        )

    db.refresh(loan)
    return loan


def _return_loan(db: Session, loan: Loan, item: Item | None, returned_on: date, user_id: int | None) -> None:
    if item is None:
        # Ongoing zápůjčka vždy odkazuje na existující položku (nelze ji smazat)
        raise NotFoundError("Položka", loan.item_code)
    ledger.apply_return(db, item, loan.quantity, user_id=user_id)
    loan.status = LoanStatus.returned
    loan.actual_return_date = returned_on


def return_loan(
    db: Session,
    loan_id: int,
    actual_return_date: date | None = None,
    user_id: int | None = None,
) -> Loan:
    loan = get_loan(db, loan_id)
    item_ids = [loan.item_id] if loan.item_id is not None else []

    with item_transaction(db, item_ids):
        db.refresh(loan)
        if loan.status == LoanStatus.returned:
            raise AlreadyReturnedError(f"Zápůjčka {loan_id} již byla vrácena")
        item = ledger.lock_item(db, loan.item_id) if loan.item_id is not None else None
        _return_loan(db, loan, item, actual_return_date or date.today(), user_id)
        log_activity(db, user_id, "Return", "Loan", loan.id, f"Vrácena zápůjčka #{loan.id} ({loan.item_code})")

    db.refresh(loan)
    return loan


# ── Hromadné zápůjčky ────────────────────────────────────────────────────────

def get_loan_group(db: Session, group_id: int) -> LoanGroup:
    group = db.scalar(
        select(LoanGroup).where(LoanGroup.id == group_id).options(selectinload(LoanGroup.loans))
    )
    if not group:
        raise NotFoundError("Skupina zápůjček", group_id)
    return group


def get_loan_group_by_code(db: Session, code: str) -> LoanGroup:
    group = db.scalar(
        select(LoanGroup).where(LoanGroup.code == code).options(selectinload(LoanGroup.loans))
    )
    if not group:
        raise NotFoundError("Skupina zápůjček", code)
    return group


def get_loan_groups(
    db: Session,
    page: int = 1,
    size: int = 50,
    status: LoanDisplayStatus | None = None,
) -> Page:
    query = _status_filter(select(LoanGroup), LoanGroup, status, date.today())
    query = query.order_by(LoanGroup.id.desc())
    return _paged(db, query, page, size)


def get_recent_loan_groups(db: Session, limit: int = 5) -> list[LoanGroup]:
    return db.scalars(
        select(LoanGroup).order_by(LoanGroup.created_at.desc(), LoanGroup.id.desc()).limit(limit)
    ).all()


def _merge_lines(data: LoanGroupCreate) -> dict[int, int]:
    """Sloučí řádky se stejnou položkou, zachová pořadí prvního výskytu."""
    lines: dict[int, int] = {}
    for line in data.items:
        ledger.require_positive(line.quantity)
        lines[line.item_id] = lines.get(line.item_id, 0) + line.quantity
    return lines


def create_loan_group(db: Session, data: LoanGroupCreate, user_id: int | None = None) -> LoanGroup:
    """Hromadná zápůjčka: vše, nebo nic.

    Nejdřív se ověří dostupnost všech položek. Pokud kterákoli nestačí,
    vyhodí se jediná InsufficientQuantityError se seznamem všech problémových
    položek a nic se nezmění.
    """
    if not data.items:
        raise ValidationError("Zápůjčka musí obsahovat alespoň jednu položku")
    loan_date, expected = _loan_dates(data.loan_date, data.expected_return_date)
    lines = _merge_lines(data)

    with item_transaction(db, lines.keys()):
        items = {item_id: ledger.lock_item(db, item_id) for item_id in sorted(lines)}

        shortages = [
            ledger.shortage(items[item_id], qty, items[item_id].quantity_available)
            for item_id, qty in lines.items()
            if qty > items[item_id].quantity_available
        ]
        if shortages:
            logger.warning("Hromadná zápůjčka zamítnuta: %s", shortages)
            raise InsufficientQuantityError(shortages)

        group = LoanGroup(
            borrower_name=data.borrower_name,
            borrower_type=data.borrower_type,
            borrower_contact=data.borrower_contact,
            loan_date=loan_date,
            expected_return_date=expected,
            status=LoanStatus.ongoing,
            notes=data.notes,
            created_by=user_id,
        )
        db.add(group)
        db.flush()
        group.code = f"LOAN-{loan_date.year}-{group.id:03d}"

        for item_id, qty in lines.items():
            item = items[item_id]
            ledger.apply_loan(db, item, qty, user_id=user_id)
            db.add(Loan(
                item=item,
                item_code=item.code,
                item_name=item.name,
                loan_group=group,
                quantity=qty,
                borrower_name=data.borrower_name,
                borrower_type=data.borrower_type,
                borrower_contact=data.borrower_contact,
                loan_date=loan_date,
                expected_return_date=expected,
                status=LoanStatus.ongoing,
                notes=data.notes,
                created_by=user_id,
            ))
        db.flush()
        events.publish(db, events.LoanGroupCreated(loan_group_id=group.id, user_id=user_id))
        log_activity(
            db, user_id, "Create", "LoanGroup", group.id,
            f"Hromadná zápůjčka {group.code}: {len(lines)} položek pro {group.borrower_name}",
        )

    logger.info("Vytvořena hromadná zápůjčka %s (%d položek)", group.code, len(lines))
    return get_loan_group(db, group.id)


def return_loan_group(
    db: Session,
    group_id: int,
    actual_return_date: date | None = None,
    user_id: int | None = None,
) -> LoanGroup:
    group = get_loan_group(db, group_id)
    item_ids = [loan.item_id for loan in group.loans if loan.item_id is not None]

    with item_transaction(db, item_ids):
        db.refresh(group)
        if group.status == LoanStatus.returned:
            raise AlreadyReturnedError(f"Skupina zápůjček {group.code} již byla vrácena")
        returned_on = actual_return_date or date.today()
        open_loans = db.scalars(
            select(Loan)
            .where(Loan.loan_group_id == group.id, Loan.status == LoanStatus.ongoing)
            .order_by(Loan.id)
            .execution_options(populate_existing=True)
        ).all()
        for loan in open_loans:
            item = ledger.lock_item(db, loan.item_id) if loan.item_id is not None else None
            _return_loan(db, loan, item, returned_on, user_id)
        group.status = LoanStatus.returned
        group.actual_return_date = returned_on
        log_activity(
            db, user_id, "Return", "LoanGroup", group.id,
            f"Vrácena hromadná zápůjčka {group.code} ({len(open_loans)} položek)",
        )

    logger.info("Hromadná zápůjčka %s vrácena", group.code)
    return get_loan_group(db, group.id)
