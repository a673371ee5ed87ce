from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import date
from ops_platform.database import get_db
from ops_platform.errors import InvalidInput
from ops_platform.schemas.booking import BookingRequest
from ops_platform.services import availability, booking_workflow, forms_service, public_service

router = APIRouter()

# ============== CONTACT FORM ROUTES ==============

class ContactSubmission(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None


@router.get("/contact-form/{workspace_ref}")
def get_contact_form(workspace_ref: str, db: Session = Depends(get_db)):
    """Contact form definition, addressed by workspace id or name"""
    return public_service.get_public_contact_form(db, workspace_ref)


@router.post("/contact-form/{workspace_id}/submit", status_code=status.HTTP_201_CREATED)
def submit_contact_form(workspace_id: int, data: ContactSubmission, db: Session = Depends(get_db)):
    """Submit contact form - resolves the contact, threads the message, sends the welcome"""
    return public_service.submit_contact_form(
        db,
        workspace_id,
        name=data.name,
        email=data.email,
        phone=data.phone,
        message=data.message,
    )

# ============== BOOKING ROUTES ==============

@router.get("/booking/{workspace_ref}")
def get_booking_page(workspace_ref: str, db: Session = Depends(get_db)):
    return public_service.get_public_booking_page(db, workspace_ref)


@router.get("/booking/{workspace_id}/slots")
def get_slots(
    workspace_id: int,
    booking_type_id: Optional[int] = Query(None, alias="bookingTypeId"),
    on_date: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db)
):
    """Open start times (UTC) for one booking type on one local date"""
    if booking_type_id is None or not on_date:
        raise InvalidInput("bookingTypeId and date required")
    try:
        day = date.fromisoformat(on_date)
    except ValueError:
        raise InvalidInput("date must be YYYY-MM-DD")

    slots = availability.compute_slots(db, workspace_id, booking_type_id, day)
    return {"slots": [slot.isoformat() for slot in slots]}


@router.post("/booking/{workspace_id}", status_code=status.HTTP_201_CREATED)
def create_booking(workspace_id: int, data: BookingRequest, db: Session = Depends(get_db)):
    created = booking_workflow.create_booking(db, workspace_id, data)
    return {"success": True, "bookingId": created.booking_id, "contactId": created.contact_id}

# ============== POST-BOOKING FORM ROUTES ==============

@router.get("/form/{submission_id}")
def get_form(submission_id: int, db: Session = Depends(get_db)):
    return forms_service.get_form_for_submission(db, submission_id)


@router.post("/form/{submission_id}/submit")
def submit_form(submission_id: int, data: Dict[str, Any], db: Session = Depends(get_db)):
    return forms_service.submit_form(db, submission_id, data)
