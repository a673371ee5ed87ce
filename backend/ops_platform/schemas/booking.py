from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from ops_platform.models.booking import BookingStatus


class BookingTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    duration_minutes: int
    location: Optional[str] = None
    is_online: bool = False


class AvailabilityWindowIn(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str


class AvailabilityWindowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    booking_type_id: Optional[int] = None
    day_of_week: int
    start_time: str
    end_time: str


class BookingRequest(BaseModel):
    """Customer slot request as accepted by the public booking page."""

    booking_type_id: int
    scheduled_at: datetime
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class BookingCreated(BaseModel):
    booking_id: int
    contact_id: int


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    contact_id: int
    booking_type_id: int
    scheduled_at: datetime
    status: BookingStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingListItem(BookingResponse):
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    booking_type_name: str
    duration_minutes: int
