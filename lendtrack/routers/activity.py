from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.schemas.activity import ActivityResponse
from lendtrack.schemas.pagination import Page
from lendtrack.routers.auth import require_session_user
import lendtrack.services.activity_service as svc

router = APIRouter(prefix="/api/activity", tags=["activity"])


@router.get("", response_model=Page[ActivityResponse])
def list_activity(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    entity_type: str | None = Query(None, description="Item, Loan, LoanGroup, Document, User"),
    user_id: int | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_activity(db, page=page, size=size, entity_type=entity_type, user_id=user_id)


@router.get("/recent", response_model=list[ActivityResponse])
def recent_activity(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_recent_activity(db, limit=limit)
