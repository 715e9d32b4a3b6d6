# models.py
import random
import string
import time
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


def generate_booking_ref():
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"BK{int(time.time() * 1000)}{suffix}"


# database model for USER table (patients, doctors, admins)
class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(20), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="patient")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    # set only for doctor accounts
    doctor_id = db.Column(db.Integer, db.ForeignKey("doctor.id"))

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def summary(self):
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
        }


# database model for DOCTOR table
class Doctor(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    specialization = db.Column(db.String(120), nullable=False)
    consultation_fee = db.Column(db.Float, nullable=False)
    phone = db.Column(db.String(20))
    address = db.Column(db.String(255))

    def summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "specialization": self.specialization,
            "consultationFee": self.consultation_fee,
            "phone": self.phone,
            "address": self.address,
        }


class Clinic(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255))
    phone = db.Column(db.String(20))

    def summary(self):
        return {"id": self.id, "name": self.name, "address": self.address, "phone": self.phone}


# database model for BOOKING table
class Booking(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    booking_ref = db.Column(db.String(40), unique=True, nullable=False, default=generate_booking_ref)
    patient_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    doctor_id = db.Column(db.Integer, db.ForeignKey("doctor.id"), nullable=False)
    clinic_id = db.Column(db.Integer, db.ForeignKey("clinic.id"))
    appointment_date = db.Column(db.Date, nullable=False)
    appointment_time = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending")

    # snapshot of the contact details at booking time
    patient_name = db.Column(db.String(160), nullable=False)
    patient_email = db.Column(db.String(120))
    patient_phone = db.Column(db.String(20), nullable=False)
    patient_age = db.Column(db.Integer)
    patient_gender = db.Column(db.String(10))

    symptoms = db.Column(db.Text)
    reason_for_visit = db.Column(db.Text)
    diagnosis = db.Column(db.Text)
    prescription = db.Column(db.Text)
    notes = db.Column(db.Text)
    follow_up_date = db.Column(db.Date)
    is_emergency = db.Column(db.Boolean, nullable=False, default=False)

    # copied from the doctor at creation, never recomputed
    consultation_fee = db.Column(db.Float, nullable=False)
    payment_status = db.Column(db.String(20), nullable=False, default="pending")
    payment_method = db.Column(db.String(20), nullable=False, default="card")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    patient = db.relationship("User", foreign_keys=[patient_id])
    doctor = db.relationship("Doctor")
    clinic = db.relationship("Clinic")

    __table_args__ = (
        # one active booking per (doctor, date, time); cancelled/completed rows don't count
        db.Index(
            "uq_booking_active_slot",
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=text("status IN ('pending', 'confirmed')"),
            postgresql_where=text("status IN ('pending', 'confirmed')"),
        ),
        db.Index("ix_booking_patient_date", "patient_id", "appointment_date"),
        db.Index("ix_booking_doctor_date", "doctor_id", "appointment_date"),
        db.Index("ix_booking_status", "status"),
    )

    def to_dict(self, include=("doctor", "patient", "clinic")):
        data = {
            "id": self.id,
            "bookingId": self.booking_ref,
            "patient": self.patient_id,
            "doctor": self.doctor_id,
            "clinic": self.clinic_id,
            "appointmentDate": self.appointment_date.isoformat(),
            "appointmentTime": self.appointment_time,
            "status": self.status,
            "patientDetails": {
                "name": self.patient_name,
                "email": self.patient_email,
                "phone": self.patient_phone,
                "age": self.patient_age,
                "gender": self.patient_gender,
            },
            "symptoms": self.symptoms,
            "reasonForVisit": self.reason_for_visit,
            "diagnosis": self.diagnosis,
            "prescription": self.prescription,
            "notes": self.notes,
            "followUpDate": self.follow_up_date.isoformat() if self.follow_up_date else None,
            "isEmergency": self.is_emergency,
            "consultationFee": self.consultation_fee,
            "paymentStatus": self.payment_status,
            "paymentMethod": self.payment_method,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if "doctor" in include and self.doctor is not None:
            data["doctor"] = self.doctor.summary()
        if "patient" in include and self.patient is not None:
            data["patient"] = self.patient.summary()
        if "clinic" in include and self.clinic is not None:
            data["clinic"] = self.clinic.summary()
        return data


# database model for ACTIVITY table (audit trail written by activityService)
class Activity(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(60), nullable=False)
    message = db.Column(db.String(255), nullable=False)
    actor_id = db.Column(db.Integer, db.ForeignKey("user.id"))
    target_id = db.Column(db.Integer)
    target_model = db.Column(db.String(40))
    details = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
