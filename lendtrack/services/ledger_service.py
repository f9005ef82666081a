"""Ledger množství položek.

Každá položka drží čtyři čísla: celkem, k dispozici, vypůjčeno, poškozeno.
Platí `available + loaned + damaged == total` a všechna jsou >= 0. Stav
položky se po každé změně přepočítá funkcí derive_status(), nikdy se
nenastavuje zvenku.

Veřejné funkce (register_item, loan_units, ...) jsou samostatné transakce.
Funkce apply_* mění množství bez commitu a volají je jiné služby uvnitř
vlastní transakce (hromadná zápůjčka, životní cyklus).
"""
import logging
import math
import re
import threading

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lendtrack import events
from lendtrack.config import settings
from lendtrack.exceptions import (
    DuplicateCodeError,
    InsufficientQuantityError,
    InvariantViolation,
    ItemInUseError,
    NotFoundError,
    ValidationError,
)
from lendtrack.models.item import Item, ItemStatus
from lendtrack.models.lifecycle import QuantityEvent, QuantityAction
from lendtrack.models.loan import Loan, LoanStatus
from lendtrack.schemas.item import ItemCreate, ItemUpdate
from lendtrack.schemas.pagination import Page
from lendtrack.services.activity_service import log_activity
from lendtrack.services.locking import item_transaction

logger = logging.getLogger(__name__)

_register_lock = threading.Lock()


def derive_status(available: int, loaned: int, damaged: int) -> ItemStatus:
    if available > 0:
        if loaned == 0 and damaged == 0:
            return ItemStatus.available
        return ItemStatus.partially_available
    if available == 0:
        if loaned > 0 and damaged == 0:
            return ItemStatus.loaned_out
        if damaged > 0 and loaned == 0:
            return ItemStatus.damaged
        if loaned > 0 and damaged > 0:
            return ItemStatus.partially_available
    return ItemStatus.maintenance


def shortage(item: Item, requested: int, available: int) -> dict:
    return {
        "item_id": item.id,
        "item_code": item.code,
        "requested": requested,
        "available": available,
    }


def require_positive(quantity, what: str = "Množství") -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f"{what} musí být kladné celé číslo")
    return quantity


# ── Čtení ────────────────────────────────────────────────────────────────────

def get_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise NotFoundError("Položka", item_id)
    return item


def get_item_by_code(db: Session, code: str) -> Item | None:
    return db.scalar(select(Item).where(Item.code == code))


def lock_item(db: Session, item_id: int) -> Item:
    """Načte položku znovu z DB s řádkovým zámkem (kde jej dialekt podporuje)."""
    item = db.scalar(
        select(Item)
        .where(Item.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not item:
        raise NotFoundError("Položka", item_id)
    return item


def get_items(
    db: Session,
    page: int = 1,
    size: int = 50,
    search: str = "",
    category: str = "",
    status: str = "",
) -> Page:
    query = select(Item)
    if search:
        query = query.where(
            Item.name.ilike(f"%{search}%")
            | Item.code.ilike(f"%{search}%")
            | Item.model.ilike(f"%{search}%")
        )
    if category:
        query = query.where(Item.category == category)
    if status:
        query = query.where(Item.status == status)
    query = query.order_by(Item.id)
    total = db.scalar(select(func.count()).select_from(query.subquery()))
    items = db.scalars(query.offset((page - 1) * size).limit(size)).all()
    return Page(
        items=items,
        total=total,
        page=page,
        pages=math.ceil(total / size) if total else 1,
        size=size,
    )


def get_stats(db: Session) -> dict:
    row = db.execute(
        select(
            func.coalesce(func.sum(Item.quantity), 0),
            func.coalesce(func.sum(Item.quantity_available), 0),
            func.coalesce(func.sum(Item.quantity_loaned), 0),
            func.coalesce(func.sum(Item.quantity_damaged), 0),
        )
    ).one()
    categories = db.execute(
        select(Item.category, func.count(Item.id)).group_by(Item.category).order_by(Item.category)
    ).all()
    return {
        "total": row[0],
        "available": row[1],
        "loaned": row[2],
        "damaged": row[3],
        "categories": [{"category": c.value, "count": n} for c, n in categories],
    }


def get_item_transactions(db: Session, item_id: int) -> list[QuantityEvent]:
    get_item(db, item_id)
    return db.scalars(
        select(QuantityEvent)
        .where(QuantityEvent.item_id == item_id)
        .order_by(QuantityEvent.created_at.desc(), QuantityEvent.id.desc())
    ).all()


# ── Jádro: změna množství bez commitu ────────────────────────────────────────

def _apply(
    db: Session,
    item: Item,
    action: QuantityAction,
    quantity: int,
    *,
    total: int = 0,
    available: int = 0,
    loaned: int = 0,
    damaged: int = 0,
    reason: str | None = None,
    user_id: int | None = None,
) -> Item:
    new_total = item.quantity + total
    new_available = item.quantity_available + available
    new_loaned = item.quantity_loaned + loaned
    new_damaged = item.quantity_damaged + damaged

    if min(new_total, new_available, new_loaned, new_damaged) < 0:
        raise InvariantViolation(
            f"Operace {action.value} by u položky {item.code} vedla k zápornému množství"
        )
    if new_available + new_loaned + new_damaged != new_total:
        raise InvariantViolation(
            f"Operace {action.value} by u položky {item.code} porušila součet množství"
        )

    item.quantity = new_total
    item.quantity_available = new_available
    item.quantity_loaned = new_loaned
    item.quantity_damaged = new_damaged
    item.status = derive_status(new_available, new_loaned, new_damaged)

    db.add(QuantityEvent(
        item=item,
        item_code=item.code,
        action=action,
        quantity=quantity,
        reason=reason,
        quantity_total=new_total,
        quantity_available=new_available,
        quantity_loaned=new_loaned,
        quantity_damaged=new_damaged,
        created_by=user_id,
    ))
    logger.info(
        "%s %s x%d -> total=%d available=%d loaned=%d damaged=%d (%s)",
        action.value, item.code, quantity,
        new_total, new_available, new_loaned, new_damaged, item.status.value,
    )
    return item


def _insufficient(item: Item, requested: int, available: int, what: str) -> InsufficientQuantityError:
    logger.warning("Zamítnuto %s %s: požadováno %d, k dispozici %d", what, item.code, requested, available)
    return InsufficientQuantityError([shortage(item, requested, available)])


def apply_loan(db: Session, item: Item, quantity: int, user_id: int | None = None) -> Item:
    require_positive(quantity)
    if quantity > item.quantity_available:
        raise _insufficient(item, quantity, item.quantity_available, "výpůjčka")
    return _apply(db, item, QuantityAction.loan, quantity, available=-quantity, loaned=quantity, user_id=user_id)


def apply_return(db: Session, item: Item, quantity: int, user_id: int | None = None) -> Item:
    require_positive(quantity)
    if quantity > item.quantity_loaned:
        raise InvariantViolation(
            f"Nelze vrátit {quantity} ks položky {item.code}, vypůjčeno je jen {item.quantity_loaned}"
        )
    return _apply(db, item, QuantityAction.return_, quantity, available=quantity, loaned=-quantity, user_id=user_id)


def apply_retirement(
    db: Session,
    item: Item,
    quantity: int,
    from_damaged: bool = False,
    reason: str | None = None,
    user_id: int | None = None,
) -> Item:
    """Trvalé vyřazení kusů: sníží fond (available/damaged) i celkový počet."""
    require_positive(quantity)
    pool = item.quantity_damaged if from_damaged else item.quantity_available
    if quantity > pool:
        raise _insufficient(item, quantity, pool, "vyřazení")
    item.quantity_retired += quantity
    if from_damaged:
        return _apply(db, item, QuantityAction.retire, quantity, total=-quantity, damaged=-quantity,
                      reason=reason, user_id=user_id)
    return _apply(db, item, QuantityAction.retire, quantity, total=-quantity, available=-quantity,
                  reason=reason, user_id=user_id)


# ── Veřejné operace (každá je samostatná transakce) ─────────────────────────

def _next_item_code(db: Session) -> str:
    prefix = settings.ITEM_CODE_PREFIX
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    codes = db.scalars(select(Item.code).where(Item.code.like(f"{prefix}%"))).all()
    numbers = [int(m.group(1)) for m in map(pattern.match, codes) if m]
    return f"{prefix}{(max(numbers) if numbers else 0) + 1:04d}"


def register_item(db: Session, data: ItemCreate, user_id: int | None = None) -> Item:
    if isinstance(data.quantity, bool) or data.quantity < 1:
        raise ValidationError("Celkové množství musí být alespoň 1")

    with _register_lock:
        code = data.code or _next_item_code(db)
        if get_item_by_code(db, code):
            raise DuplicateCodeError(f"Kód položky {code} již existuje")

        fields = data.model_dump(exclude={"code", "quantity"})
        item = Item(
            **fields,
            code=code,
            quantity=data.quantity,
            quantity_available=data.quantity,
            quantity_loaned=0,
            quantity_damaged=0,
            quantity_retired=0,
            status=derive_status(data.quantity, 0, 0),
        )
        try:
            db.add(item)
            db.flush()
            db.add(QuantityEvent(
                item=item,
                item_code=item.code,
                action=QuantityAction.register,
                quantity=item.quantity,
                quantity_total=item.quantity,
                quantity_available=item.quantity,
                quantity_loaned=0,
                quantity_damaged=0,
                created_by=user_id,
            ))
            events.publish(db, events.ItemRegistered(item_id=item.id, user_id=user_id))
            log_activity(db, user_id, "Create", "Item", item.id, f"Přidána položka: {item.name} ({item.code})")
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateCodeError(f"Kód položky {code} již existuje")
        except Exception:
            db.rollback()
            raise

    logger.info("Registrována položka %s (%s) x%d", item.code, item.name, item.quantity)
    db.refresh(item)
    return item


def loan_units(db: Session, item_id: int, quantity: int, user_id: int | None = None) -> Item:
    with item_transaction(db, [item_id]):
        item = lock_item(db, item_id)
        apply_loan(db, item, quantity, user_id=user_id)
        log_activity(db, user_id, "Loan", "Item", item.id, f"Vypůjčeno {quantity} ks: {item.name} ({item.code})")
    db.refresh(item)
    return item


def return_units(db: Session, item_id: int, quantity: int, user_id: int | None = None) -> Item:
    with item_transaction(db, [item_id]):
        item = lock_item(db, item_id)
        apply_return(db, item, quantity, user_id=user_id)
        log_activity(db, user_id, "Return", "Item", item.id, f"Vráceno {quantity} ks: {item.name} ({item.code})")
    db.refresh(item)
    return item


def mark_damaged(db: Session, item_id: int, quantity: int, reason: str | None, user_id: int | None = None) -> Item:
    require_positive(quantity)
    if not reason or not reason.strip():
        raise ValidationError("Důvod poškození je povinný")
    with item_transaction(db, [item_id]):
        item = lock_item(db, item_id)
        if quantity > item.quantity_available:
            raise _insufficient(item, quantity, item.quantity_available, "poškození")
        _apply(db, item, QuantityAction.damage, quantity, available=-quantity, damaged=quantity,
               reason=reason.strip(), user_id=user_id)
        log_activity(db, user_id, "Damage", "Item", item.id,
                     f"Poškozeno {quantity} ks: {item.name} ({item.code}) - {reason.strip()}")
    db.refresh(item)
    return item


def mark_repaired(db: Session, item_id: int, quantity: int, reason: str | None, user_id: int | None = None) -> Item:
    require_positive(quantity)
    if not reason or not reason.strip():
        raise ValidationError("Popis opravy je povinný")
    with item_transaction(db, [item_id]):
        item = lock_item(db, item_id)
        if quantity > item.quantity_damaged:
            raise _insufficient(item, quantity, item.quantity_damaged, "oprava")
        _apply(db, item, QuantityAction.repair, quantity, available=quantity, damaged=-quantity,
               reason=reason.strip(), user_id=user_id)
        log_activity(db, user_id, "Repair", "Item", item.id,
                     f"Opraveno {quantity} ks: {item.name} ({item.code}) - {reason.strip()}")
    db.refresh(item)
    return item


def partial_remove(db: Session, item_id: int, quantity: int, user_id: int | None = None) -> Item | None:
    """Odebere kusy z evidence. Vrací None, pokud byla položka odstraněna celá."""
    require_positive(quantity)
    deleted = False
    with item_transaction(db, [item_id]):
        item = lock_item(db, item_id)
        if quantity > item.quantity:
            raise ValidationError(
                f"Nelze odebrat {quantity} ks, položka {item.code} má celkem {item.quantity} ks"
            )
        if quantity > item.quantity_available:
            # Vypůjčené a poškozené kusy nelze odebrat, dokud nejsou vráceny / opraveny
            raise _insufficient(item, quantity, item.quantity_available, "odebrání")
        _apply(db, item, QuantityAction.remove, quantity, total=-quantity, available=-quantity, user_id=user_id)
        if item.quantity == 0:
            log_activity(db, user_id, "Delete", "Item", item.id, f"Odstraněna položka: {item.name} ({item.code})")
            # Záznam "remove" musí být v DB dřív, než se historii nastaví item_id = NULL
            db.flush()
            db.delete(item)
            deleted = True
        else:
            log_activity(db, user_id, "Update", "Item", item.id,
                         f"Odebráno {quantity} ks: {item.name} ({item.code})")
    if deleted:
        logger.info("Položka %s odstraněna (odebrány všechny kusy)", item_id)
        return None
    db.refresh(item)
    return item


def update_item(db: Session, item_id: int, data: ItemUpdate, user_id: int | None = None) -> Item:
    item = get_item(db, item_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(item, field, value)
    log_activity(db, user_id, "Update", "Item", item.id, f"Upravena položka: {item.name} ({item.code})")
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: int, user_id: int | None = None) -> None:
    with item_transaction(db, [item_id]):
        item = lock_item(db, item_id)
        open_loans = db.scalar(
            select(func.count())
            .select_from(Loan)
            .where(Loan.item_id == item_id, Loan.status == LoanStatus.ongoing)
        )
        if open_loans:
            raise ItemInUseError(f"Položka {item.code} má {open_loans} nevrácených zápůjček")
        log_activity(db, user_id, "Delete", "Item", item.id, f"Odstraněna položka: {item.name} ({item.code})")
        db.delete(item)
    logger.info("Položka %s odstraněna", item_id)
