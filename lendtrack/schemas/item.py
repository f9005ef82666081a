from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from lendtrack.models.item import ItemCategory, ItemUsage, ItemStatus
from lendtrack.models.lifecycle import QuantityAction


class ItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    model: str | None = None
    category: ItemCategory = ItemCategory.other
    usage: ItemUsage = ItemUsage.none
    location: str | None = None
    price: Decimal | None = None
    notes: str | None = None


class ItemCreate(ItemBase):
    code: str | None = Field(None, max_length=64)  # None -> vygeneruje se BVGJK####
    quantity: int = 1


class ItemUpdate(BaseModel):
    # Množství a stav nejsou editovatelné, mění je pouze ledger
    name: str | None = Field(None, min_length=1, max_length=255)
    model: str | None = None
    category: ItemCategory | None = None
    usage: ItemUsage | None = None
    location: str | None = None
    price: Decimal | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _required_not_null(self):
        for field in ("name", "category", "usage"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"Pole {field} nelze vymazat")
        return self


class ItemResponse(ItemBase):
    id: int
    code: str
    quantity: int
    quantity_available: int
    quantity_loaned: int
    quantity_damaged: int
    quantity_retired: int
    status: ItemStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class QuantityRequest(BaseModel):
    quantity: int
    reason: str | None = None


class PartialDeleteRequest(BaseModel):
    quantity: int


class PartialDeleteResponse(BaseModel):
    deleted: bool
    item: ItemResponse | None = None


class QuantityEventResponse(BaseModel):
    id: int
    item_id: int | None
    item_code: str
    action: QuantityAction
    quantity: int
    reason: str | None
    quantity_total: int
    quantity_available: int
    quantity_loaned: int
    quantity_damaged: int
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class CategoryCount(BaseModel):
    category: str
    count: int


class InventoryStats(BaseModel):
    total: int
    available: int
    loaned: int
    damaged: int
    categories: list[CategoryCount]
