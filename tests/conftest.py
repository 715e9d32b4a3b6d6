"""
Shared pytest fixtures: an in-memory database per test, users for every
role, doctors and signed bearer headers.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["BOOKING_EMAILS_ENABLED"] = "false"

import pytest

from app import app as flask_app
from auth import generate_token
from models import db, Doctor, Clinic, User


@pytest.fixture
def app():
    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make_user(role="patient", doctor=None, is_active=True, **overrides):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            first_name=overrides.pop("first_name", f"User{n}"),
            last_name=overrides.pop("last_name", "Test"),
            email=overrides.pop("email", f"user{n}@example.com"),
            phone=overrides.pop("phone", f"98765432{n:02d}"),
            role=role,
            is_active=is_active,
            doctor_id=doctor.id if doctor is not None else None,
            **overrides,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def doctor(app):
    doc = Doctor(name="Nia Sharma", specialization="Cardiologist", consultation_fee=800)
    db.session.add(doc)
    db.session.commit()
    return doc


@pytest.fixture
def other_doctor(app):
    doc = Doctor(name="Rakesh Jaha", specialization="Dermatologist", consultation_fee=700)
    db.session.add(doc)
    db.session.commit()
    return doc


@pytest.fixture
def clinic(app):
    c = Clinic(name="City Care", address="12 MG Road", phone="9876500000")
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def patient(make_user):
    return make_user("patient", first_name="Asha", last_name="Rao")


@pytest.fixture
def other_patient(make_user):
    return make_user("patient", first_name="Vikram", last_name="Iyer")


@pytest.fixture
def doctor_user(make_user, doctor):
    return make_user("doctor", doctor=doctor)


@pytest.fixture
def other_doctor_user(make_user, other_doctor):
    return make_user("doctor", doctor=other_doctor)


@pytest.fixture
def admin(make_user):
    return make_user("admin")


@pytest.fixture
def superuser(make_user):
    return make_user("superuser")


@pytest.fixture
def auth_header():
    def _auth_header(user):
        return {"Authorization": f"Bearer {generate_token(user)}"}

    return _auth_header


@pytest.fixture
def book(client, auth_header, doctor):
    """Books `doctor` through the API and returns the response."""

    def _book(user, date="2025-06-01", time="10:00", doctor_id=None, **extra):
        body = {
            "doctorId": doctor_id if doctor_id is not None else doctor.id,
            "appointmentDate": date,
            "appointmentTime": time,
            **extra,
        }
        return client.post("/bookings", json=body, headers=auth_header(user))

    return _book
