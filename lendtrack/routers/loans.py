from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.models.loan import LoanDisplayStatus
from lendtrack.schemas.loan import LoanCreate, LoanResponse, ReturnRequest
from lendtrack.schemas.pagination import Page
from lendtrack.routers.auth import require_session_user, require_session_manager, current_user_id
import lendtrack.services.loan_service as svc

router = APIRouter(prefix="/api/loans", tags=["loans"])


@router.get("", response_model=Page[LoanResponse])
def list_loans(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    status: LoanDisplayStatus | None = Query(None, description="Ongoing, Overdue nebo Returned"),
    item_id: int | None = Query(None),
    include_grouped: bool = Query(False, description="Zahrnout i zápůjčky z hromadných zápůjček"),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_loans(db, page=page, size=size, status=status, item_id=item_id, include_grouped=include_grouped)


@router.get("/recent", response_model=list[LoanResponse])
def recent_loans(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_recent_loans(db, limit=limit)


@router.post("", response_model=LoanResponse, status_code=201)
def create_loan(request: Request, data: LoanCreate, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.create_loan(db, data, user_id=current_user_id(request))


@router.get("/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_loan(db, loan_id)


@router.post("/{loan_id}/return", response_model=LoanResponse)
def return_loan(
    request: Request,
    loan_id: int,
    data: ReturnRequest | None = None,
    db: Session = Depends(get_db),
    _=Depends(require_session_manager),
):
    returned_on = data.actual_return_date if data else None
    return svc.return_loan(db, loan_id, actual_return_date=returned_on, user_id=current_user_id(request))
