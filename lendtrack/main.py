from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.sessions import SessionMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
import os

from lendtrack.database import engine, SessionLocal
from lendtrack.database import Base
import lendtrack.models  # noqa: F401  register all models
from lendtrack.models.user import User
from lendtrack.config import settings
from lendtrack.exceptions import LendTrackError
from lendtrack.logging_config import configure_logging
from lendtrack.services.user_service import hash_password
from lendtrack.services import document_service
from lendtrack.routers import health, auth, users, items, loans, loan_groups, lifecycle, documents, activity
import logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    configure_logging()
    # Ensure DB exists and tables are created (for dev mode without alembic)
    if settings.DATABASE_URL.startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)
    Base.metadata.create_all(bind=engine)

    # Create first admin user if no users exist yet
    db = SessionLocal()
    try:
        if not db.query(User).first():
            admin = User(
                username=settings.FIRST_ADMIN_USER,
                name="Administrátor",
                email=f"{settings.FIRST_ADMIN_USER}@lendtrack.cz",
                hashed_password=hash_password(settings.FIRST_ADMIN_PASS),
                role="admin",
                is_active=True,
            )
            db.add(admin)
            db.commit()
            logger.info("Vytvořen první admin uživatel: %s", settings.FIRST_ADMIN_USER)
    finally:
        db.close()

    yield


document_service.register_handlers()

app = FastAPI(
    title="LendTrack",
    description="Evidence majetku a zápůjček",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    https_only=settings.APP_ENV == "production",
    same_site="lax",
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.APP_ENV == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


app.add_middleware(SecurityHeadersMiddleware)


@app.exception_handler(LendTrackError)
async def lendtrack_error_handler(request: Request, exc: LendTrackError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, **exc.extra()},
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(items.router)
app.include_router(loans.router)
app.include_router(loan_groups.router)
app.include_router(lifecycle.router)
app.include_router(documents.router)
app.include_router(activity.router)
