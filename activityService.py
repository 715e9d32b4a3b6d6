from flask import current_app
from models import db, Activity
from appUtils import send_email

# footer appended to confirmation emails
email_msg = '''
Please arrive 10-15 minutes early to ensure a smooth check-in process.
If you need to cancel, you can do so from your bookings page.

Warm regards,
Healthcare Booking Team'''


def create_activity(activity_type, message, actor, target_id=None, target_model=None, metadata=None):
    """
    Persists an activity record. Failures are logged and swallowed: the
    booking that triggered the event has already been committed.
    """
    try:
        activity = Activity(
            type=activity_type,
            message=message,
            actor_id=actor.id if actor is not None else None,
            target_id=target_id,
            target_model=target_model,
            details=metadata or {},
        )
        db.session.add(activity)
        db.session.commit()
        return activity
    except Exception as e:
        db.session.rollback()
        current_app.logger.warning(f"[create_activity] Failed to record {activity_type}: {e}")
        return None


def send_booking_confirmation(booking):
    if not current_app.config.get("BOOKING_EMAILS_ENABLED") or not booking.patient_email:
        return False

    body = (
        f"Appointment Confirmed!\n\n"
        f"Booking ID: {booking.booking_ref}\n"
        f"Patient: {booking.patient_name}\n"
        f"Doctor: Dr. {booking.doctor.name}\n"
        f"Date: {booking.appointment_date.isoformat()}\n"
        f"Time: {booking.appointment_time}\n"
        f"Fee: {booking.consultation_fee}\n"
    )
    try:
        send_email(booking.patient_email, "Appointment Confirmation", body + email_msg)
        return True
    except Exception as e:
        current_app.logger.warning(f"[send_booking_confirmation] Email sending failed for {booking.booking_ref}: {e}")
        return False
