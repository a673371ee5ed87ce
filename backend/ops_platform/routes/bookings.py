from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from ops_platform.database import get_db
from ops_platform.dependencies import get_workspace_member, require_owner
from ops_platform.models.booking import BookingStatus
from ops_platform.models.user import WorkspaceUser
from ops_platform.schemas.booking import (
    AvailabilityWindowIn,
    AvailabilityWindowResponse,
    BookingListItem,
    BookingResponse,
    BookingTypeResponse,
)
from ops_platform.services import availability, booking_workflow

router = APIRouter()


class BookingTypeCreate(BaseModel):
    name: str
    duration_minutes: int = Field(gt=0)
    location: Optional[str] = None
    is_online: bool = False


class AvailabilityReplace(BaseModel):
    # None replaces the workspace-wide windows
    booking_type_id: Optional[int] = None
    # Required: an explicit empty list clears the scope
    slots: List[AvailabilityWindowIn]


class UpdateBookingStatus(BaseModel):
    status: BookingStatus


@router.get("/{workspace_id}/booking-types", response_model=List[BookingTypeResponse])
def get_booking_types(workspace_id: int, member: WorkspaceUser = Depends(get_workspace_member), db: Session = Depends(get_db)):
    return booking_workflow.list_booking_types(db, workspace_id)


@router.post("/{workspace_id}/booking-types", response_model=BookingTypeResponse, status_code=status.HTTP_201_CREATED)
def create_booking_type(
    workspace_id: int,
    data: BookingTypeCreate,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    return booking_workflow.create_booking_type(
        db,
        workspace_id,
        name=data.name,
        duration_minutes=data.duration_minutes,
        location=data.location,
        is_online=data.is_online,
    )


@router.get("/{workspace_id}/availability", response_model=List[AvailabilityWindowResponse])
def get_availability(
    workspace_id: int,
    booking_type_id: Optional[int] = Query(None, alias="bookingTypeId"),
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return availability.list_availability(db, workspace_id, booking_type_id)


@router.put("/{workspace_id}/availability", response_model=List[AvailabilityWindowResponse])
def replace_availability(
    workspace_id: int,
    data: AvailabilityReplace,
    owner: WorkspaceUser = Depends(require_owner),
    db: Session = Depends(get_db)
):
    """Replace every window of one scope (a booking type, or workspace-wide)"""
    return availability.set_availability(db, workspace_id, data.booking_type_id, data.slots)


@router.get("/{workspace_id}/bookings", response_model=List[BookingListItem])
def get_bookings(
    workspace_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: Optional[BookingStatus] = None,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return booking_workflow.list_bookings(db, workspace_id, start=start, end=end, status=status)


@router.patch("/{workspace_id}/bookings/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    workspace_id: int,
    booking_id: int,
    update: UpdateBookingStatus,
    member: WorkspaceUser = Depends(get_workspace_member),
    db: Session = Depends(get_db)
):
    return booking_workflow.update_booking_status(db, workspace_id, booking_id, update.status)
