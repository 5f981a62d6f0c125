from pydantic import BaseModel
from typing import Optional


class EventUpdate(BaseModel):
    budget: Optional[float] = None
    guest_count: Optional[int] = None
