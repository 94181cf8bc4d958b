"""Availability model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from ehr_backend.database import Base


class DoctorAvailability(Base):
    """A weekly recurring window in which a doctor sees patients."""
    __tablename__ = "doctor_availability"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String, nullable=False)
    end_time = Column(String, nullable=False)
