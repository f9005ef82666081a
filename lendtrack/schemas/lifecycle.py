from datetime import datetime, date
from pydantic import BaseModel
from lendtrack.models.lifecycle import LifecycleStatus, RetirementSource


class LifecycleRequest(BaseModel):
    statuses: list[LifecycleStatus]
    event_date: date | None = None
    reason: str = ""
    quantity: int
    source: RetirementSource = RetirementSource.available


class LifecycleEventResponse(BaseModel):
    id: int
    item_id: int | None
    item_code: str
    statuses: list[LifecycleStatus]
    event_date: date
    reason: str
    quantity: int
    source: RetirementSource
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}
