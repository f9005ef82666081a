import math
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from lendtrack.models.activity import ActivityLog
from lendtrack.schemas.pagination import Page


def log_activity(
    db: Session,
    user_id: int | None,
    action: str,
    entity_type: str,
    entity_id,
    details: str | None = None,
) -> ActivityLog:
    """Přidá záznam do auditního logu. Commit provádí volající transakce."""
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        details=details,
    )
    db.add(entry)
    return entry


def get_activity(
    db: Session,
    page: int = 1,
    size: int = 50,
    entity_type: str | None = None,
    user_id: int | None = None,
) -> Page:
    query = select(ActivityLog)
    if entity_type:
        query = query.where(ActivityLog.entity_type == entity_type)
    if user_id is not None:
        query = query.where(ActivityLog.user_id == user_id)
    query = query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())

    total = db.scalar(select(func.count()).select_from(query.subquery()))
    rows = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(
        items=rows,
        total=total,
        page=page,
        pages=math.ceil(total / size) if total else 1,
        size=size,
    )


def get_recent_activity(db: Session, limit: int = 5) -> list[ActivityLog]:
    return db.scalars(
        select(ActivityLog)
        .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .limit(limit)
    ).all()
