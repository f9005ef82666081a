import math
import logging
from datetime import date

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from lendtrack.exceptions import ValidationError
from lendtrack.models.lifecycle import LifecycleEvent, LifecycleStatus, RetirementSource
from lendtrack.schemas.lifecycle import LifecycleRequest
from lendtrack.schemas.pagination import Page
from lendtrack.services import ledger_service as ledger
from lendtrack.services.activity_service import log_activity
from lendtrack.services.locking import item_transaction

logger = logging.getLogger(__name__)


def _validate(data: LifecycleRequest) -> list[LifecycleStatus]:
    if not data.statuses:
        raise ValidationError("Vyberte alespoň jeden stav životního cyklu")
    if not data.reason or not data.reason.strip():
        raise ValidationError("Důvod je povinný")
    if data.event_date is None:
        raise ValidationError("Datum je povinné")
    ledger.require_positive(data.quantity)
    # zachová pořadí, odstraní duplicity
    return list(dict.fromkeys(data.statuses))


def record_lifecycle_event(
    db: Session,
    item_id: int,
    data: LifecycleRequest,
    user_id: int | None = None,
) -> LifecycleEvent:
    """Zapíše vyřazení kusů a zároveň je trvale odečte z ledgeru.

    Kusy se berou z fondu `available` (nebo `damaged` při source=damaged)
    a o stejný počet se sníží celkové množství. Položka zůstává v evidenci
    i když její celkové množství klesne na nulu.
    """
    statuses = _validate(data)
    from_damaged = data.source == RetirementSource.damaged
    labels = ", ".join(s.value for s in statuses)

    with item_transaction(db, [item_id]):
        item = ledger.lock_item(db, item_id)
        ledger.apply_retirement(
            db, item, data.quantity,
            from_damaged=from_damaged,
            reason=f"{labels}: {data.reason.strip()}",
            user_id=user_id,
        )
        event = LifecycleEvent(
            item=item,
            item_code=item.code,
            statuses=[s.value for s in statuses],
            event_date=data.event_date,
            reason=data.reason.strip(),
            quantity=data.quantity,
            source=data.source,
            created_by=user_id,
        )
        db.add(event)
        log_activity(
            db, user_id, "Lifecycle", "Item", item.id,
            f"Vyřazeno {data.quantity} ks ({labels}): {item.name} ({item.code})",
        )

    logger.info("Životní cyklus %s: %d ks [%s]", event.item_code, event.quantity, labels)
    db.refresh(event)
    return event


def list_history(db: Session, item_id: int) -> list[LifecycleEvent]:
    """Historie vyřazení položky, nejnovější první."""
    ledger.get_item(db, item_id)
    return db.scalars(
        select(LifecycleEvent)
        .where(LifecycleEvent.item_id == item_id)
        .order_by(LifecycleEvent.event_date.desc(), LifecycleEvent.id.desc())
    ).all()


def list_all_history(
    db: Session,
    page: int = 1,
    size: int = 50,
    date_from: date | None = None,
    date_to: date | None = None,
) -> Page:
    query = select(LifecycleEvent)
    if date_from is not None:
        query = query.where(LifecycleEvent.event_date >= date_from)
    if date_to is not None:
        query = query.where(LifecycleEvent.event_date <= date_to)
    query = query.order_by(LifecycleEvent.event_date.desc(), LifecycleEvent.id.desc())

    total = db.scalar(select(func.count()).select_from(query.subquery()))
    rows = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(
        items=rows,
        total=total,
        page=page,
        pages=math.ceil(total / size) if total else 1,
        size=size,
    )
