"""Periodic jobs. Run hourly from cron or any scheduler:

    python -m ops_platform.tasks.reminders
"""

import logging
from datetime import timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from ops_platform.database import SessionLocal, utcnow
from ops_platform.models.booking import Booking, BookingStatus
from ops_platform.models.conversation import Conversation
from ops_platform.models.form import FormStatus, FormSubmission
from ops_platform.models.integration import IntegrationType
from ops_platform.services.availability import workspace_zone
from ops_platform.services.notifications import Notifier, deliver, send_best_effort
from ops_platform.services.sms_service import SMS_MAX_LENGTH

logger = logging.getLogger(__name__)

REMINDER_WINDOW_START = timedelta(hours=23)
REMINDER_WINDOW_END = timedelta(hours=25)


def mark_overdue_form_submissions(db: Session) -> int:
    """Pending submissions past their due date become overdue."""
    count = db.query(FormSubmission).filter(
        FormSubmission.status == FormStatus.PENDING,
        FormSubmission.due_at < utcnow(),
    ).update({FormSubmission.status: FormStatus.OVERDUE}, synchronize_session=False)
    db.commit()

    if count:
        logger.info(f"Marked {count} form submission(s) overdue")
    return count


def _automation_paused(db: Session, booking: Booking, now) -> bool:
    conversation = db.query(Conversation).filter(
        Conversation.workspace_id == booking.workspace_id,
        Conversation.contact_id == booking.contact_id,
    ).first()
    return bool(
        conversation
        and conversation.automation_paused_until
        and conversation.automation_paused_until > now
    )


def send_booking_reminders(db: Optional[Session] = None, notifier: Notifier = deliver) -> int:
    """Remind contacts of confirmed bookings starting 23 to 25 hours from now.

    Each booking is reminded once it has been delivered. Failed deliveries and
    conversations with automation paused by a manual reply are retried on the
    next run.
    """
    owns_session = db is None
    if owns_session:
        db = SessionLocal()

    try:
        now = utcnow()
        bookings = db.query(Booking).filter(
            Booking.status == BookingStatus.CONFIRMED,
            Booking.scheduled_at >= now + REMINDER_WINDOW_START,
            Booking.scheduled_at <= now + REMINDER_WINDOW_END,
            Booking.reminder_sent_at.is_(None),
        ).order_by(Booking.scheduled_at).all()

        sent = 0
        for booking in bookings:
            if _automation_paused(db, booking, now):
                logger.info(f"Reminder for booking {booking.id} skipped: automation paused")
                continue

            contact = booking.contact
            local = booking.scheduled_at.replace(tzinfo=timezone.utc).astimezone(workspace_zone(booking.workspace))
            text = (
                f"Reminder: your booking for {booking.booking_type.name} "
                f"is on {local.strftime('%Y-%m-%d %H:%M')}."
            )

            if contact.email:
                delivered = send_best_effort(
                    notifier, db, booking.workspace_id, IntegrationType.EMAIL,
                    contact.email, text, subject="Booking reminder",
                )
            elif contact.phone:
                delivered = send_best_effort(
                    notifier, db, booking.workspace_id, IntegrationType.SMS,
                    contact.phone, text[:SMS_MAX_LENGTH],
                )
            else:
                logger.warning(f"Contact {contact.id} has no email or phone, no reminder for booking {booking.id}")
                continue

            if not delivered:
                logger.info(f"Reminder for booking {booking.id} not delivered, will retry")
                continue

            booking.reminder_sent_at = utcnow()
            db.commit()
            sent += 1

        logger.info(f"Sent {sent} booking reminder(s)")
        return sent
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    session = SessionLocal()
    try:
        mark_overdue_form_submissions(session)
        send_booking_reminders(session)
    finally:
        session.close()
