from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class ContactResolution(BaseModel):
    id: int
    created: bool


class ContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
