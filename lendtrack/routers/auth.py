import logging
import time
from collections import defaultdict

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from lendtrack.database import get_db
from lendtrack.models.user import User
from lendtrack.schemas.user import LoginRequest, UserResponse
from lendtrack.services.user_service import verify_password, get_user_by_username

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

MANAGER_ROLES = {"spravce", "admin"}

# ── Rate limiting (in-memory, per IP) ──────────────────────────────────────
_login_attempts: dict[str, list[float]] = defaultdict(list)
_RATE_LIMIT_WINDOW = 60   # seconds
_RATE_LIMIT_MAX = 10      # max attempts per window


def _check_rate_limit(ip: str) -> bool:
    now = time.time()
    _login_attempts[ip] = [t for t in _login_attempts[ip] if now - t < _RATE_LIMIT_WINDOW]
    if len(_login_attempts[ip]) >= _RATE_LIMIT_MAX:
        return False
    _login_attempts[ip].append(now)
    return True


def _reset_rate_limit(ip: str) -> None:
    """Clear failed attempts after successful login."""
    _login_attempts.pop(ip, None)


def current_user_id(request: Request) -> int | None:
    """Identita volajícího pro audit, None u nepřihlášeného požadavku."""
    return request.session.get("user_id")


def require_session_user(request: Request) -> None:
    """Light session-only check, any authenticated user."""
    if not request.session.get("user_id"):
        raise HTTPException(status_code=401, detail="Přihlášení vyžadováno")


def require_session_manager(request: Request) -> None:
    """Light session-only check for API mutation routes."""
    if not request.session.get("user_id"):
        raise HTTPException(status_code=401, detail="Přihlášení vyžadováno")
    role = request.session.get("role", "")
    if role not in MANAGER_ROLES:
        raise HTTPException(status_code=403, detail="Nedostatečná oprávnění")


def require_session_admin(request: Request) -> None:
    """Light session-only check, admin only."""
    if not request.session.get("user_id"):
        raise HTTPException(status_code=401, detail="Přihlášení vyžadováno")
    if request.session.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Pouze pro administrátory")


@router.post("/login", response_model=UserResponse)
def login(request: Request, data: LoginRequest, db: Session = Depends(get_db)):
    ip = request.client.host if request.client else "unknown"
    if not _check_rate_limit(ip):
        raise HTTPException(status_code=429, detail="Příliš mnoho pokusů. Zkuste to za chvíli.")
    user = get_user_by_username(db, data.username)
    if not user or not verify_password(data.password, user.hashed_password):
        logger.warning(f"AUDIT: neúspěšné přihlášení pro uživatele '{data.username}' z IP {ip}")
        raise HTTPException(status_code=401, detail="Nesprávné jméno nebo heslo.")
    if not user.is_active:
        logger.warning(f"AUDIT: pokus o přihlášení deaktivovaného účtu '{data.username}' z IP {ip}")
        raise HTTPException(status_code=403, detail="Účet je deaktivován.")
    _reset_rate_limit(ip)
    logger.info(f"AUDIT: přihlášení '{data.username}' (role={user.role}) z IP {ip}")
    request.session["user_id"] = user.id
    request.session["username"] = user.username
    request.session["role"] = user.role
    return user


@router.post("/logout", status_code=204)
def logout(request: Request):
    request.session.clear()


@router.get("/me", response_model=UserResponse)
def me(request: Request, db: Session = Depends(get_db), _=Depends(require_session_user)):
    user = db.get(User, request.session["user_id"])
    if not user or not user.is_active:
        request.session.clear()
        raise HTTPException(status_code=401, detail="Přihlášení vyžadováno")
    return user
