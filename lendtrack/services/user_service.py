from sqlalchemy.orm import Session
from sqlalchemy import select
from passlib.context import CryptContext
from lendtrack.exceptions import DuplicateCodeError, NotFoundError
from lendtrack.models.user import User
from lendtrack.schemas.user import UserCreate, UserUpdate
from lendtrack.services.activity_service import log_activity

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("Uživatel", user_id)
    return user


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def list_users(db: Session) -> list[User]:
    return db.scalars(select(User).order_by(User.id)).all()


def create_user(db: Session, data: UserCreate, user_id: int | None = None) -> User:
    if get_user_by_username(db, data.username):
        raise DuplicateCodeError("Uživatelské jméno již existuje")
    user = User(
        username=data.username,
        name=data.name,
        email=data.email,
        hashed_password=hash_password(data.password),
        role=data.role,
        is_active=data.is_active,
    )
    db.add(user)
    db.flush()
    log_activity(db, user_id, "Create", "User", user.id, f"Vytvořen uživatel: {user.username} ({user.role})")
    db.commit()
    db.refresh(user)
    return user


def update_user(db: Session, target_id: int, data: UserUpdate, user_id: int | None = None) -> User:
    user = get_user(db, target_id)
    update_data = data.model_dump(exclude_unset=True)
    if "password" in update_data:
        update_data["hashed_password"] = hash_password(update_data.pop("password"))
    for field, value in update_data.items():
        setattr(user, field, value)
    log_activity(db, user_id, "Update", "User", user.id, f"Upraven uživatel: {user.username}")
    db.commit()
    db.refresh(user)
    return user
