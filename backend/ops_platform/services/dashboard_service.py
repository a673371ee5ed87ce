"""Owner dashboard and sidebar counters.

"Today" is the calendar day in the workspace timezone.
"""

from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from ops_platform.models.booking import Booking, BookingStatus
from ops_platform.models.conversation import Conversation, ConversationStatus
from ops_platform.models.form import FormStatus, FormSubmission
from ops_platform.models.integration import Integration
from ops_platform.schemas.inventory import InventoryItemResponse
from ops_platform.services.availability import local_day_bounds_utc, workspace_zone
from ops_platform.services.booking_workflow import booking_rows, to_list_item
from ops_platform.services.inbox_service import is_unread
from ops_platform.services.inventory_service import get_low_stock_items
from ops_platform.services.workspace_service import get_workspace

UPCOMING_LIMIT = 10


def _today_bounds(workspace) -> tuple[datetime, datetime]:
    tz = workspace_zone(workspace)
    local_today = datetime.now(timezone.utc).astimezone(tz).date()
    return local_day_bounds_utc(local_today, tz)


def _derive_alerts(low_stock, overdue_forms: int, failing: list[Integration]) -> list[dict]:
    alerts = []
    for item in low_stock:
        alerts.append({
            "type": "low_stock",
            "message": f"{item.name} is running low ({item.quantity_available} {item.unit} left)",
            "inventory_item_id": item.id,
        })
    if overdue_forms:
        alerts.append({
            "type": "overdue_forms",
            "message": f"{overdue_forms} form(s) overdue",
        })
    for integration in failing:
        alerts.append({
            "type": "integration_error",
            "message": f"{integration.type.value} delivery failing: {integration.last_error}",
        })
    return alerts


def get_dashboard(db: Session, workspace_id: int) -> dict:
    workspace = get_workspace(db, workspace_id)
    day_start, day_end = _today_bounds(workspace)

    live = booking_rows(db, workspace_id).filter(Booking.status != BookingStatus.CANCELLED)
    today = live.filter(
        Booking.scheduled_at >= day_start,
        Booking.scheduled_at < day_end,
    ).order_by(Booking.scheduled_at).all()
    upcoming = live.filter(
        Booking.scheduled_at >= day_end,
    ).order_by(Booking.scheduled_at).limit(UPCOMING_LIMIT).all()

    today_counts = dict(
        db.query(Booking.status, func.count(Booking.id)).filter(
            Booking.workspace_id == workspace_id,
            Booking.scheduled_at >= day_start,
            Booking.scheduled_at < day_end,
        ).group_by(Booking.status).all()
    )

    open_count = db.query(func.count(Conversation.id)).filter(
        Conversation.workspace_id == workspace_id,
        Conversation.status == ConversationStatus.OPEN,
    ).scalar()

    form_counts = dict(
        db.query(FormSubmission.status, func.count(FormSubmission.id)).filter(
            FormSubmission.workspace_id == workspace_id
        ).group_by(FormSubmission.status).all()
    )

    low_stock = get_low_stock_items(db, workspace_id)
    failing = db.query(Integration).filter(
        Integration.workspace_id == workspace_id,
        Integration.is_active == True,  # noqa: E712
        Integration.last_error.isnot(None),
    ).all()

    return {
        "bookings": {
            "today": [to_list_item(*row) for row in today],
            "upcoming": [to_list_item(*row) for row in upcoming],
            "completedToday": today_counts.get(BookingStatus.COMPLETED, 0),
            "noShowToday": today_counts.get(BookingStatus.NO_SHOW, 0),
        },
        "conversations": {
            "openCount": open_count or 0,
        },
        "forms": {
            "pending": form_counts.get(FormStatus.PENDING, 0),
            "overdue": form_counts.get(FormStatus.OVERDUE, 0),
            "completed": form_counts.get(FormStatus.COMPLETED, 0),
        },
        "inventory": {
            "lowStock": [InventoryItemResponse.model_validate(item) for item in low_stock],
        },
        "alerts": _derive_alerts(low_stock, form_counts.get(FormStatus.OVERDUE, 0), failing),
    }


def get_nav_counts(db: Session, workspace_id: int) -> dict:
    conversations = db.query(Conversation).filter(Conversation.workspace_id == workspace_id).all()
    unread = sum(1 for conversation in conversations if is_unread(db, conversation))

    confirmed = db.query(func.count(Booking.id)).filter(
        Booking.workspace_id == workspace_id,
        Booking.status == BookingStatus.CONFIRMED,
    ).scalar()

    return {"inbox": unread, "bookings": confirmed or 0}
