"""Doménové události ledgeru a jednoduchý synchronní dispatcher.

Handlery běží uvnitř stejné transakce jako operace, která událost vyvolala
(dostávají stejnou Session), takže vygenerovaný dokument se uloží, nebo
zahodí, spolu se zápůjčkou.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemRegistered:
    item_id: int
    user_id: int | None = None


@dataclass(frozen=True)
class LoanCreated:
    loan_id: int
    user_id: int | None = None


@dataclass(frozen=True)
class LoanGroupCreated:
    loan_group_id: int
    user_id: int | None = None


Handler = Callable[[Session, object], None]

_handlers: dict[type, list[Handler]] = defaultdict(list)


def subscribe(event_type: type, handler: Handler) -> None:
    if handler not in _handlers[event_type]:
        _handlers[event_type].append(handler)


def unsubscribe(event_type: type, handler: Handler) -> None:
    if handler in _handlers[event_type]:
        _handlers[event_type].remove(handler)


def publish(db: Session, event: object) -> None:
    for handler in list(_handlers[type(event)]):
        logger.debug("Událost %s -> %s", type(event).__name__, handler.__name__)
        handler(db, event)
