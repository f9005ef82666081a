from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.schemas.lifecycle import LifecycleEventResponse
from lendtrack.schemas.pagination import Page
from lendtrack.routers.auth import require_session_user
import lendtrack.services.lifecycle_service as svc

router = APIRouter(prefix="/api/lifecycle", tags=["lifecycle"])


@router.get("", response_model=Page[LifecycleEventResponse])
def list_lifecycle_events(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    date_from: date | None = Query(None, description="Od data (včetně)"),
    date_to: date | None = Query(None, description="Do data (včetně)"),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.list_all_history(db, page=page, size=size, date_from=date_from, date_to=date_to)
