# app.py
import os
from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException
from models import db
from errors import BadRequest, BookingError
from auth import login_required
from appUtils import get_page_args, pagination_dict
import bookingService

load_dotenv()

app = Flask(__name__)

# ---------- Configuration ----------
app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv("DATABASE_URL", "sqlite:///bookings.db")
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
app.config['SECRET_KEY'] = os.getenv("SECRET_KEY", "change-me")
app.config['TOKEN_MAX_AGE'] = int(os.getenv("TOKEN_MAX_AGE", 7 * 24 * 3600))
app.config['SENDGRID_API_KEY'] = os.getenv("SENDGRID_API_KEY")
app.config['MAIL_FROM'] = os.getenv("MAIL_FROM", "bookings@example.com")
app.config['BOOKING_EMAILS_ENABLED'] = os.getenv("BOOKING_EMAILS_ENABLED", "false").lower() in ("1", "true", "yes")
app.logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

db.init_app(app)

with app.app_context():
    db.create_all()


@app.before_request
def log_request():
    app.logger.debug(f"[request] {request.method} {request.path}")


# ======================================
# Error handlers
# ======================================

@app.errorhandler(BookingError)
def handle_booking_error(err):
    return jsonify(err.to_dict()), err.status_code


@app.errorhandler(HTTPException)
def handle_http_error(err):
    return jsonify({"success": False, "message": err.description, "error": err.name.lower().replace(" ", "_")}), err.code


@app.errorhandler(Exception)
def handle_unexpected_error(err):
    # details stay in the server log
    app.logger.exception(f"[error] Unhandled error on {request.method} {request.path}")
    db.session.rollback()
    return jsonify({"success": False, "message": "Internal server error", "error": "internal"}), 500


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


# ======================================
# Booking APIs
# ======================================

@app.route("/bookings", methods=["POST"])
@login_required
def create_booking():
    booking = bookingService.create_booking(g.current_user, get_json_body())
    return jsonify({
        "success": True,
        "message": "Appointment booked successfully",
        "booking": booking.to_dict(),
    }), 201


@app.route("/bookings/admin", methods=["GET"])
@login_required
def list_all_bookings():
    page, limit = get_page_args(default_limit=50)
    result = bookingService.list_all_bookings(
        g.current_user, status=request.args.get("status"), page=page, limit=limit
    )
    return jsonify({
        "success": True,
        "bookings": [b.to_dict() for b in result.items],
        "pagination": pagination_dict(result),
    })


@app.route("/bookings/user/<int:user_id>", methods=["GET"])
@login_required
def list_user_bookings(user_id):
    page, limit = get_page_args(default_limit=10)
    result = bookingService.list_patient_bookings(
        g.current_user, user_id, status=request.args.get("status"), page=page, limit=limit
    )
    return jsonify({
        "success": True,
        "bookings": [bookingService.enrich_for_patient(b) for b in result.items],
        "pagination": pagination_dict(result),
    })


@app.route("/bookings/doctor/<int:doctor_id>", methods=["GET"])
@login_required
def list_doctor_bookings(doctor_id):
    page, limit = get_page_args(default_limit=20)
    result = bookingService.list_doctor_bookings(
        g.current_user,
        doctor_id,
        date=request.args.get("date"),
        status=request.args.get("status"),
        page=page,
        limit=limit,
    )
    return jsonify({
        "success": True,
        "bookings": [b.to_dict(include=("patient",)) for b in result.items],
        "pagination": pagination_dict(result),
    })


@app.route("/bookings/<int:booking_id>", methods=["GET"])
@login_required
def get_booking(booking_id):
    booking = bookingService.get_booking(g.current_user, booking_id)
    return jsonify({"success": True, "booking": booking.to_dict()})


@app.route("/bookings/<int:booking_id>/status", methods=["PUT"])
@login_required
def update_booking_status(booking_id):
    booking = bookingService.update_booking(g.current_user, booking_id, get_json_body())
    return jsonify({
        "success": True,
        "message": "Booking updated successfully",
        "booking": booking.to_dict(),
    })


@app.route("/bookings/<int:booking_id>", methods=["DELETE"])
@login_required
def cancel_booking(booking_id):
    reason = get_json_body().get("reason")
    booking = bookingService.cancel_booking(g.current_user, booking_id, reason)
    return jsonify({
        "success": True,
        "message": "Booking cancelled successfully",
        "booking": booking.to_dict(),
    })


if __name__ == "__main__":
    app.run(port=8000, debug=True)
