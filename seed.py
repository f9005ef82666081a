"""Seed script: naplní DB testovacími daty."""
import os
import sys
from datetime import date, timedelta
from decimal import Decimal

# Ensure we're in the project root
sys.path.insert(0, os.path.dirname(__file__))

from lendtrack.database import Base, engine, SessionLocal
from lendtrack.logging_config import configure_logging
import lendtrack.models  # noqa: F401  register all models
from lendtrack.models.item import ItemCategory, ItemUsage
from lendtrack.models.lifecycle import LifecycleStatus
from lendtrack.models.loan import BorrowerType
from lendtrack.models.user import User
from lendtrack.schemas.item import ItemCreate
from lendtrack.schemas.lifecycle import LifecycleRequest
from lendtrack.schemas.loan import LoanCreate, LoanGroupCreate, LoanGroupLine
from lendtrack.schemas.user import UserCreate
from lendtrack.services import document_service, ledger_service, lifecycle_service, loan_service, user_service


def seed():
    configure_logging()
    if engine.url.get_backend_name() == "sqlite":
        os.makedirs("data", exist_ok=True)
    Base.metadata.create_all(bind=engine)
    document_service.register_handlers()
    db = SessionLocal()

    # Uživatelé
    users_data = [
        UserCreate(username="admin", name="Administrátor", email="admin@lendtrack.cz",
                   password="admin12345", role="admin"),
        UserCreate(username="spravce", name="Jana Nováková", email="spravce@lendtrack.cz",
                   password="spravce12345", role="spravce"),
        UserCreate(username="host", name="Petr Svoboda", email="host@lendtrack.cz",
                   password="host123456", role="user"),
    ]
    for data in users_data:
        if not user_service.get_user_by_username(db, data.username):
            user_service.create_user(db, data)

    admin = db.query(User).filter_by(username="admin").first()

    if ledger_service.get_items(db).total:
        db.close()
        print("Položky už existují, seed přeskočen.")
        return

    # Položky
    items_data = [
        ("Projektor Epson EB-X41", "EB-X41", ItemCategory.electronics, ItemUsage.members, "Sklad A", 14500, 3),
        ("Notebook Lenovo ThinkPad", "T14 Gen 3", ItemCategory.electronics, ItemUsage.staff, "Kancelář 101", 32000, 5),
        ("Skládací stůl", None, ItemCategory.furniture, ItemUsage.members, "Sál", 2400, 20),
        ("Židle konferenční", None, ItemCategory.furniture, ItemUsage.others, "Sál", 900, 60),
        ("Aku vrtačka Makita", "DDF485", ItemCategory.tools, ItemUsage.staff, "Dílna", 5200, 2),
        ("Reproduktor JBL EON", "EON712", ItemCategory.equipment, ItemUsage.members, "Sklad A", 11900, 4),
    ]
    items = []
    for name, model, cat, usage, location, price, qty in items_data:
        items.append(ledger_service.register_item(
            db,
            ItemCreate(name=name, model=model, category=cat, usage=usage, location=location,
                       price=Decimal(price), quantity=qty),
            user_id=admin.id,
        ))
    projector, notebook, table, chair, drill, speaker = items

    today = date.today()

    # Jednotlivé zápůjčky (jedna po termínu)
    loan_service.create_loan(db, LoanCreate(
        item_id=notebook.id, quantity=1,
        borrower_name="Marie Dvořáková", borrower_type=BorrowerType.staff,
        borrower_contact="marie@example.org",
        loan_date=today - timedelta(days=3), expected_return_date=today + timedelta(days=11),
    ), user_id=admin.id)
    loan_service.create_loan(db, LoanCreate(
        item_id=drill.id, quantity=1,
        borrower_name="Tomáš Černý", borrower_type=BorrowerType.member,
        loan_date=today - timedelta(days=20), expected_return_date=today - timedelta(days=6),
    ), user_id=admin.id)

    # Hromadná zápůjčka na akci
    loan_service.create_loan_group(db, LoanGroupCreate(
        borrower_name="ZŠ Komenského", borrower_type=BorrowerType.organization,
        borrower_contact="+420 777 123 456",
        loan_date=today, expected_return_date=today + timedelta(days=2),
        notes="Školní akademie",
        items=[
            LoanGroupLine(item_id=table.id, quantity=6),
            LoanGroupLine(item_id=chair.id, quantity=40),
            LoanGroupLine(item_id=speaker.id, quantity=2),
            LoanGroupLine(item_id=projector.id, quantity=1),
        ],
    ), user_id=admin.id)

    # Poškození, oprava, vyřazení
    ledger_service.mark_damaged(db, chair.id, 3, "Prasklá opěradla", user_id=admin.id)
    ledger_service.mark_repaired(db, chair.id, 1, "Vyměněno opěradlo", user_id=admin.id)
    lifecycle_service.record_lifecycle_event(db, chair.id, LifecycleRequest(
        statuses=[LifecycleStatus.beyond_repair, LifecycleStatus.disposed],
        event_date=today, reason="Neopravitelné, odvezeno do sběrného dvora",
        quantity=2, source="damaged",
    ), user_id=admin.id)

    db.close()
    print("Seed dokončen!")


if __name__ == "__main__":
    seed()
