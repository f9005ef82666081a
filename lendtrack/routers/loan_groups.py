from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.models.loan import LoanDisplayStatus
from lendtrack.schemas.loan import LoanGroupCreate, LoanGroupResponse, LoanGroupDetail, ReturnRequest
from lendtrack.schemas.pagination import Page
from lendtrack.routers.auth import require_session_user, require_session_manager, current_user_id
import lendtrack.services.loan_service as svc

router = APIRouter(prefix="/api/loan-groups", tags=["loan-groups"])


@router.get("", response_model=Page[LoanGroupResponse])
def list_loan_groups(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: LoanDisplayStatus | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_loan_groups(db, page=page, size=size, status=status)


@router.get("/recent", response_model=list[LoanGroupResponse])
def recent_loan_groups(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_recent_loan_groups(db, limit=limit)


@router.post("", response_model=LoanGroupDetail, status_code=201)
def create_loan_group(request: Request, data: LoanGroupCreate, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.create_loan_group(db, data, user_id=current_user_id(request))


@router.get("/by-code/{code}", response_model=LoanGroupDetail)
def get_loan_group_by_code(code: str, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_loan_group_by_code(db, code)


@router.get("/{group_id}", response_model=LoanGroupDetail)
def get_loan_group(group_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_loan_group(db, group_id)


@router.post("/{group_id}/return", response_model=LoanGroupDetail)
def return_loan_group(
    request: Request,
    group_id: int,
    data: ReturnRequest | None = None,
    db: Session = Depends(get_db),
    _=Depends(require_session_manager),
):
    returned_on = data.actual_return_date if data else None
    return svc.return_loan_group(db, group_id, actual_return_date=returned_on, user_id=current_user_id(request))
