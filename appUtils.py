import re
from datetime import datetime
from flask import current_app, request
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

PAYMENT_METHODS = ("card", "upi", "wallet", "cash")
MAX_PAGE_SIZE = 100


def validate_email(email):
    return bool(re.fullmatch(r"[^@]+@[^@]+\.[^@]+", email.strip()))


def validate_mobile(mobile):
    return bool(re.fullmatch(r"[6-9]\d{9}", mobile.strip()))


def validate_date(date_str):
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def get_page_args(default_limit):
    """Reads ?page=&limit= from the current request, clamped to sane values."""
    page = request.args.get("page", 1, type=int) or 1
    limit = request.args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)


def pagination_dict(page_obj):
    return {
        "total": page_obj.total,
        "page": page_obj.page,
        "pages": page_obj.pages,
        "limit": page_obj.per_page,
    }


def send_email(to_email, subject, body):
    message = Mail(
        from_email=current_app.config["MAIL_FROM"],  # must be verified in SendGrid
        to_emails=to_email,
        subject=subject,
        plain_text_content=body
    )
    sg = SendGridAPIClient(current_app.config["SENDGRID_API_KEY"])
    response = sg.send(message)
    current_app.logger.info(f"[send_email] Email sent to {to_email}, Status: {response.status_code}")
