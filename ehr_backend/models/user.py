"""User model definitions."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, String
from sqlalchemy.orm import relationship

from ehr_backend.database import Base


class Role(str, enum.Enum):
    PATIENT = 'patient'
    DOCTOR = 'doctor'
    ADMIN = 'admin'


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Represents a patient, doctor or admin. Holds no credential secret."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String, nullable=False, default=Role.PATIENT.value)  # patient/doctor/admin
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String)
    dob = Column(Date)
    gender = Column(String)  # male/female/other
    address = Column(String)
    medical_history = Column(String)
    specialization = Column(String)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    availability_slots = relationship(
        "DoctorAvailability",
        cascade="all, delete-orphan",
        order_by="DoctorAvailability.day_of_week",
    )
