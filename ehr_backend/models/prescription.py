"""Prescription model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ehr_backend.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Prescription(Base):
    """A prescription issued for one appointment."""
    __tablename__ = "prescriptions"
    __table_args__ = (
        Index('idx_prescriptions_patient_issued', 'patient_id', 'issued_at'),
        Index('idx_prescriptions_doctor_issued', 'doctor_id', 'issued_at'),
    )

    id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), index=True, nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    notes = Column(String)
    issued_at = Column(DateTime, default=_utcnow, nullable=False)

    appointment = relationship("Appointment", lazy="joined")
    doctor = relationship("User", foreign_keys=[doctor_id], lazy="joined")
    patient = relationship("User", foreign_keys=[patient_id], lazy="joined")
    medications = relationship(
        "Medication",
        cascade="all, delete-orphan",
        order_by="Medication.position",
        lazy="selectin",
    )


class Medication(Base):
    """One line of a prescription. ``position`` keeps the prescribed order."""
    __tablename__ = "prescription_medications"

    id = Column(Integer, primary_key=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), index=True, nullable=False)
    position = Column(Integer, nullable=False)
    name = Column(String, nullable=False)
    dose = Column(String, nullable=False)
    frequency = Column(String, nullable=False)
    duration = Column(String, nullable=False)
    instructions = Column(String)
