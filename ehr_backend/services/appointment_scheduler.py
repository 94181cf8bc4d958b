"""Appointment booking, status transitions and cancellation.

A slot is the ``(doctor_id, date, start_time)`` triple. While an appointment
holding it is pending or confirmed no other appointment may hold it. Booking
checks this up front for a readable error, and the partial unique index on
the appointments table rejects whatever slips past the check when two
requests race.
"""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ehr_backend.core import config
from ehr_backend.core.errors import AccessDenied, NotFound, SlotConflict, StoreError, ValidationError
from ehr_backend.models.appointment import ACTIVE_STATUSES, Appointment, AppointmentStatus
from ehr_backend.services import access, user_directory
from ehr_backend.services.access import Requester

logger = logging.getLogger(__name__)

_UNSET = object()


def coerce_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError as exc:
        raise ValidationError(
            'Status must be one of: ' + ', '.join(s.value for s in AppointmentStatus) + '.'
        ) from exc


def find_active_slot_holder(
    db: Session,
    doctor_id: int,
    appointment_date: date,
    start_time: str,
) -> Appointment | None:
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == appointment_date,
        Appointment.start_time == start_time,
        Appointment.status.in_(ACTIVE_STATUSES),
    ).first()


def _commit(db: Session, appointment: Appointment) -> Appointment:
    appointment_id = appointment.id
    slot = (appointment.doctor_id, appointment.date, appointment.start_time)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning('Slot already held for doctor %s on %s at %s', *slot)
        raise SlotConflict() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to write appointment %s; check DATABASE_URL and the database server', appointment_id)
        raise StoreError() from exc

    db.refresh(appointment)
    return appointment


def _load(db: Session, appointment_id: int) -> Appointment:
    try:
        appointment = db.get(Appointment, appointment_id)
    except SQLAlchemyError as exc:
        raise StoreError() from exc

    if appointment is None:
        raise NotFound('Appointment not found.')
    return appointment


def book_appointment(
    db: Session,
    requester: Requester,
    doctor_id: int,
    appointment_date: date | None,
    start_time: str | None,
    end_time: str | None,
    reason: str | None = None,
) -> Appointment:
    if not access.can_book(requester):
        raise AccessDenied('Only patients can book appointments.')

    if not doctor_id or not appointment_date or not start_time or not end_time:
        raise ValidationError('Doctor, date, start time, and end time are required.')

    user_directory.get_doctor(db, doctor_id)

    try:
        existing = find_active_slot_holder(db, doctor_id, appointment_date, start_time)
    except SQLAlchemyError as exc:
        raise StoreError() from exc

    if existing is not None:
        logger.info('Rejected booking for doctor %s on %s at %s: slot taken', doctor_id, appointment_date, start_time)
        raise SlotConflict()

    appointment = Appointment(
        patient_id=requester.user_id,
        doctor_id=doctor_id,
        date=appointment_date,
        start_time=start_time,
        end_time=end_time,
        reason=reason,
        status=AppointmentStatus.PENDING.value,
    )
    db.add(appointment)
    _commit(db, appointment)

    logger.info(
        'Patient %s booked appointment %s with doctor %s on %s at %s',
        requester.user_id,
        appointment.id,
        doctor_id,
        appointment_date,
        start_time,
    )
    return appointment


def list_appointments(
    db: Session,
    requester: Requester,
    status: AppointmentStatus | str | None = None,
    upcoming_only: bool = False,
    today: date | None = None,
) -> list[Appointment]:
    filters = access.scope_filters(requester, Appointment.patient_id, Appointment.doctor_id)

    if status:
        filters.append(Appointment.status == coerce_status(status).value)

    if upcoming_only:
        filters.append(Appointment.date >= (today or date.today()))

    try:
        return db.query(Appointment).filter(*filters).order_by(
            Appointment.date.asc(),
            Appointment.start_time.asc(),
        ).all()
    except SQLAlchemyError as exc:
        raise StoreError() from exc


def get_appointment(db: Session, appointment_id: int, requester: Requester) -> Appointment:
    appointment = _load(db, appointment_id)

    if not access.can_view(requester, appointment):
        raise AccessDenied()
    return appointment


def transition_status(
    db: Session,
    appointment_id: int,
    requester: Requester,
    new_status: AppointmentStatus | str,
    notes=_UNSET,
) -> Appointment:
    target = coerce_status(new_status)
    appointment = _load(db, appointment_id)

    if not access.can_transition(requester, appointment):
        raise AccessDenied()

    current = AppointmentStatus(appointment.status)
    if config.ENFORCE_STATUS_TRANSITIONS and not access.is_transition_allowed(current, target):
        raise ValidationError(f'Cannot change an appointment from {current.value} to {target.value}.')

    appointment.status = target.value
    if notes is not _UNSET:
        appointment.notes = notes

    _commit(db, appointment)
    logger.info(
        'Appointment %s moved from %s to %s by %s %s',
        appointment.id,
        current.value,
        target.value,
        requester.role.value,
        requester.user_id,
    )
    return appointment


def edit_appointment(
    db: Session,
    appointment_id: int,
    requester: Requester,
    appointment_date: date | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    reason=_UNSET,
    notes=_UNSET,
) -> Appointment:
    """Apply the given field changes.

    Rescheduling does not repeat the booking-time slot lookup; moving onto a
    held slot is still refused by the unique index and surfaces as
    ``SlotConflict``.
    """
    appointment = _load(db, appointment_id)

    if not access.can_edit(requester, appointment):
        raise AccessDenied()

    if appointment_date:
        appointment.date = appointment_date
    if start_time:
        appointment.start_time = start_time
    if end_time:
        appointment.end_time = end_time
    if reason is not _UNSET:
        appointment.reason = reason
    if notes is not _UNSET:
        appointment.notes = notes

    return _commit(db, appointment)


def cancel_appointment(db: Session, appointment_id: int, requester: Requester) -> Appointment:
    appointment = _load(db, appointment_id)

    if not access.can_cancel(requester, appointment):
        raise AccessDenied()

    if appointment.status == AppointmentStatus.CANCELLED.value:
        return appointment

    appointment.status = AppointmentStatus.CANCELLED.value
    _commit(db, appointment)
    logger.info('Appointment %s cancelled by %s %s', appointment.id, requester.role.value, requester.user_id)
    return appointment
