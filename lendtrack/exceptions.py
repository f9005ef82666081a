"""Doménové výjimky evidence zápůjček.

Služby vyhazují tyto typované výjimky, HTTP vrstva je v main.py převádí
na JSON odpověď ve tvaru {"detail": ..., "code": ..., **extra}.

    LendTrackError
    +-- ValidationError            422  chybný nebo chybějící vstup
    +-- NotFoundError              404  neznámá položka / zápůjčka / skupina
    +-- InsufficientQuantityError  409  požadované množství převyšuje dostupné
    +-- InvariantViolation         409  operace by porušila součet množství
    +-- AlreadyReturnedError       409  opakované vrácení
    +-- DuplicateCodeError         409  kód položky nebo dokumentu již existuje
    +-- ItemInUseError             409  položka má otevřené zápůjčky
    +-- ItemBusyError              409  zámek položky nelze získat včas
    +-- AlreadySignedError         409  dokument už uživatel podepsal
"""


class LendTrackError(Exception):
    code = "LENDTRACK_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict:
        return {}


class ValidationError(LendTrackError):
    code = "VALIDATION_ERROR"
    status_code = 422


class NotFoundError(LendTrackError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} nenalezen(a)")
        self.entity = entity
        self.entity_id = entity_id


class InsufficientQuantityError(LendTrackError):
    """Nedostatek kusů. `shortages` obsahuje každou problematickou položku."""

    code = "INSUFFICIENT_QUANTITY"
    status_code = 409

    def __init__(self, shortages: list[dict], message: str | None = None):
        if message is None:
            parts = [
                f"{s['item_code']}: požadováno {s['requested']}, k dispozici {s['available']}"
                for s in shortages
            ]
            message = "Nedostatečné množství (" + "; ".join(parts) + ")"
        super().__init__(message)
        self.shortages = shortages

    @property
    def requested(self) -> int:
        return sum(s["requested"] for s in self.shortages)

    @property
    def available(self) -> int:
        return sum(s["available"] for s in self.shortages)

    def extra(self) -> dict:
        return {"shortages": self.shortages}


class InvariantViolation(LendTrackError):
    code = "INVARIANT_VIOLATION"
    status_code = 409


class AlreadyReturnedError(LendTrackError):
    code = "ALREADY_RETURNED"
    status_code = 409


class DuplicateCodeError(LendTrackError):
    code = "DUPLICATE_CODE"
    status_code = 409


class ItemInUseError(LendTrackError):
    code = "ITEM_IN_USE"
    status_code = 409


class ItemBusyError(LendTrackError):
    code = "ITEM_BUSY"
    status_code = 409


class AlreadySignedError(LendTrackError):
    code = "ALREADY_SIGNED"
    status_code = 409
