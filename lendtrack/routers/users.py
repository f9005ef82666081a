from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.schemas.user import UserCreate, UserUpdate, UserResponse
from lendtrack.routers.auth import require_session_admin, current_user_id
import lendtrack.services.user_service as svc

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db), _=Depends(require_session_admin)):
    return svc.list_users(db)


@router.post("", response_model=UserResponse, status_code=201)
def create_user(request: Request, data: UserCreate, db: Session = Depends(get_db), _=Depends(require_session_admin)):
    return svc.create_user(db, data, user_id=current_user_id(request))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(request: Request, user_id: int, data: UserUpdate, db: Session = Depends(get_db), _=Depends(require_session_admin)):
    return svc.update_user(db, user_id, data, user_id=current_user_id(request))
