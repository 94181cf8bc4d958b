"""Issuing and reading prescriptions.

A prescription is an append-only record hanging off one appointment. Issuing
one reads the appointment to check ownership and never changes it.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ehr_backend.core.errors import AccessDenied, NotFound, StoreError, ValidationError
from ehr_backend.models.appointment import AppointmentStatus
from ehr_backend.models.prescription import Medication, Prescription
from ehr_backend.models.user import Role
from ehr_backend.services import access, appointment_scheduler
from ehr_backend.services.access import Requester

logger = logging.getLogger(__name__)

PRESCRIBABLE_STATUSES = {AppointmentStatus.CONFIRMED.value, AppointmentStatus.COMPLETED.value}


@dataclass
class MedicationLine:
    name: str
    dose: str
    frequency: str
    duration: str
    instructions: str | None = None

    def is_complete(self) -> bool:
        return all(
            value and value.strip()
            for value in (self.name, self.dose, self.frequency, self.duration)
        )


def issue_prescription(
    db: Session,
    requester: Requester,
    appointment_id: int,
    medications: list[MedicationLine],
    notes: str | None = None,
    patient_id: int | None = None,
) -> Prescription:
    if requester.role is not Role.DOCTOR:
        raise AccessDenied('Only doctors can issue prescriptions.')

    if not appointment_id or not medications:
        raise ValidationError('Appointment and at least one medication are required.')

    for line in medications:
        if not line.is_complete():
            raise ValidationError('Each medication needs a name, dose, frequency, and duration.')

    appointment = appointment_scheduler.get_appointment(db, appointment_id, requester)

    if not access.can_prescribe(requester, appointment):
        raise AccessDenied()

    if patient_id is not None and patient_id != appointment.patient_id:
        raise ValidationError('Patient does not match the appointment.')

    if appointment.status not in PRESCRIBABLE_STATUSES:
        raise ValidationError('Prescriptions can only be issued for confirmed or completed appointments.')

    prescription = Prescription(
        appointment_id=appointment.id,
        doctor_id=appointment.doctor_id,
        patient_id=appointment.patient_id,
        notes=notes,
        medications=[
            Medication(
                position=position,
                name=line.name.strip(),
                dose=line.dose.strip(),
                frequency=line.frequency.strip(),
                duration=line.duration.strip(),
                instructions=line.instructions,
            )
            for position, line in enumerate(medications)
        ],
    )

    try:
        db.add(prescription)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to issue prescription for appointment %s', appointment_id)
        raise StoreError() from exc

    db.refresh(prescription)
    logger.info(
        'Doctor %s issued prescription %s for appointment %s',
        requester.user_id,
        prescription.id,
        appointment_id,
    )
    return prescription


def list_prescriptions(db: Session, requester: Requester) -> list[Prescription]:
    filters = access.scope_filters(requester, Prescription.patient_id, Prescription.doctor_id)

    try:
        return db.query(Prescription).filter(*filters).order_by(
            Prescription.issued_at.desc(),
            Prescription.id.desc(),
        ).all()
    except SQLAlchemyError as exc:
        raise StoreError() from exc


def get_prescription(db: Session, prescription_id: int, requester: Requester) -> Prescription:
    try:
        prescription = db.get(Prescription, prescription_id)
    except SQLAlchemyError as exc:
        raise StoreError() from exc

    if prescription is None:
        raise NotFound('Prescription not found.')

    if not requester.is_admin and requester.user_id not in (prescription.patient_id, prescription.doctor_id):
        raise AccessDenied()
    return prescription


def list_for_appointment(db: Session, appointment_id: int, requester: Requester) -> list[Prescription]:
    appointment_scheduler.get_appointment(db, appointment_id, requester)

    try:
        return db.query(Prescription).filter(
            Prescription.appointment_id == appointment_id,
        ).order_by(Prescription.issued_at.desc(), Prescription.id.desc()).all()
    except SQLAlchemyError as exc:
        raise StoreError() from exc
