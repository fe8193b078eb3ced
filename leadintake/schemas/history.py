from typing import Any, Dict, Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from uuid import UUID
from datetime import datetime

from leadintake.models.enums import HistoryAction


class HistoryActor(BaseModel):
    name: Optional[str]
    email: str


class HistoryEntryOut(BaseModel):
    id: UUID
    action: HistoryAction
    changed_at: datetime
    changed_by: HistoryActor
    diff: Dict[str, Any]

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}
