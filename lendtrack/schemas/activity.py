from datetime import datetime
from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: int
    user_id: int | None
    action: str
    entity_type: str
    entity_id: str
    details: str | None
    timestamp: datetime

    model_config = {"from_attributes": True}
