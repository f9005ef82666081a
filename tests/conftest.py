import os

# Testy nesmí sahat na ./data/lendtrack.db (lifespan aplikace volá create_all)
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from lendtrack.database import Base
import lendtrack.models  # noqa: F401  register all models
from lendtrack.models.user import User
from lendtrack.models.loan import BorrowerType
from lendtrack.schemas.item import ItemCreate
from lendtrack.schemas.loan import LoanCreate, LoanGroupCreate, LoanGroupLine
from lendtrack.services import document_service, ledger_service


TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db():
    document_service.register_handlers()
    engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(engine)


@pytest.fixture
def user(db):
    user = User(username="spravce", name="Jana Nováková", email="spravce@test.com",
                hashed_password="x", role="spravce")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_item(db, user):
    """Továrna na položky: make_item(quantity=10, name=...)."""

    def _make(quantity=10, name="Skládací stůl", **kwargs):
        return ledger_service.register_item(db, ItemCreate(name=name, quantity=quantity, **kwargs), user_id=user.id)

    return _make


@pytest.fixture
def loan_request():
    """Sestaví LoanCreate s rozumnými výchozími hodnotami."""

    def _build(item_id, quantity=1, days=7, **kwargs):
        data = {
            "item_id": item_id,
            "quantity": quantity,
            "borrower_name": "Marie Dvořáková",
            "borrower_type": BorrowerType.staff,
            "loan_date": date.today(),
            "expected_return_date": date.today() + timedelta(days=days),
        }
        data.update(kwargs)
        return LoanCreate(**data)

    return _build


@pytest.fixture
def group_request():
    def _build(lines, days=7, **kwargs):
        data = {
            "borrower_name": "ZŠ Komenského",
            "borrower_type": BorrowerType.organization,
            "loan_date": date.today(),
            "expected_return_date": date.today() + timedelta(days=days),
            "items": [LoanGroupLine(item_id=item_id, quantity=qty) for item_id, qty in lines],
        }
        data.update(kwargs)
        return LoanGroupCreate(**data)

    return _build
