from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from lendtrack.database import get_db
from lendtrack.models.document import DocumentType
from lendtrack.schemas.document import DocumentCreate, DocumentResponse
from lendtrack.schemas.pagination import Page
from lendtrack.routers.auth import require_session_user, require_session_manager, current_user_id
import lendtrack.services.document_service as svc

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=Page[DocumentResponse])
def list_documents(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    type: DocumentType | None = Query(None),
    related_ref: str | None = Query(None, description="Kód položky nebo skupiny zápůjček"),
    db: Session = Depends(get_db),
    _=Depends(require_session_user),
):
    return svc.get_documents(db, page=page, size=size, doc_type=type, related_ref=related_ref)


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(request: Request, data: DocumentCreate, db: Session = Depends(get_db), _=Depends(require_session_manager)):
    return svc.create_document(db, data, user_id=current_user_id(request))


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(document_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.get_document(db, document_id)


@router.post("/{document_id}/sign", response_model=DocumentResponse)
def sign_document(request: Request, document_id: int, db: Session = Depends(get_db), _=Depends(require_session_user)):
    return svc.sign_document(db, document_id, user_id=request.session["user_id"])
