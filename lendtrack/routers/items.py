from fastapi import APIRouter, Depends, Query, Request, HTTPException
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.models.item import ItemCategory, ItemStatus
from lendtrack.schemas.item import (
    ItemCreate,
    ItemUpdate,
    ItemResponse,
    QuantityRequest,
    PartialDeleteRequest,
    PartialDeleteResponse,
    QuantityEventResponse,
    InventoryStats,
)
from lendtrack.schemas.lifecycle import LifecycleRequest, LifecycleEventResponse
from lendtrack.schemas.pagination import Page
from lendtrack.routers.auth import require_session_user, require_session_manager, current_user_id
import lendtrack.services.ledger_service as svc
import lendtrack.services.lifecycle_service as lifecycle_svc

router = APIRouter(prefix="/api/items", tags=["items"])


@router.get("", response_model=Page[ItemResponse])
def list_items(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    search: str = Query(""),
    category: ItemCategory | None = Query(None),
    status: ItemStatus | None = Query(None),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_items(
        db, page=page, size=size, search=search,
        category=category.value if category else "",
        status=status.value if status else "",
    )


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(request: Request, data: ItemCreate, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.register_item(db, data, user_id=current_user_id(request))


@router.get("/stats", response_model=InventoryStats)
def inventory_stats(db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_stats(db)


@router.get("/by-code/{code}", response_model=ItemResponse)
def get_item_by_code(code: str, db: Session = Depends(get_db), _=Depends(require_session_user)):
    item = svc.get_item_by_code(db, code)
    if not item:
        raise HTTPException(status_code=404, detail="Položka nenalezena")
    return item


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_item(db, item_id)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(request: Request, item_id: int, data: ItemUpdate, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.update_item(db, item_id, data, user_id=current_user_id(request))


@router.delete("/{item_id}", status_code=204)
def delete_item(request: Request, item_id: int, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    svc.delete_item(db, item_id, user_id=current_user_id(request))


@router.post("/{item_id}/damage", response_model=ItemResponse)
def mark_damaged(request: Request, item_id: int, data: QuantityRequest, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.mark_damaged(db, item_id, data.quantity, data.reason, user_id=current_user_id(request))


@router.post("/{item_id}/repair", response_model=ItemResponse)
def mark_repaired(request: Request, item_id: int, data: QuantityRequest, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.mark_repaired(db, item_id, data.quantity, data.reason, user_id=current_user_id(request))


@router.post("/{item_id}/partial-delete", response_model=PartialDeleteResponse)
def partial_delete(request: Request, item_id: int, data: PartialDeleteRequest, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    item = svc.partial_remove(db, item_id, data.quantity, user_id=current_user_id(request))
    return {"deleted": item is None, "item": item}


@router.get("/{item_id}/transactions", response_model=list[QuantityEventResponse])
def item_transactions(item_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_item_transactions(db, item_id)


@router.post("/{item_id}/lifecycle", response_model=LifecycleEventResponse, status_code=201)
def record_lifecycle(request: Request, item_id: int, data: LifecycleRequest, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return lifecycle_svc.record_lifecycle_event(db, item_id, data, user_id=current_user_id(request))


@router.get("/{item_id}/lifecycle", response_model=list[LifecycleEventResponse])
def lifecycle_history(item_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return lifecycle_svc.list_history(db, item_id)
