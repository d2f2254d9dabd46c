import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class WaitingListCreate(BaseModel):
    event_id: uuid.UUID
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=30)


class WaitingListResponse(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    name: str
    email: str
    phone: str | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}
