"""Lookup and profile maintenance for patients, doctors and admins."""

import logging
import re
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ehr_backend.core.errors import AccessDenied, NotFound, StoreError, ValidationError
from ehr_backend.models.availability import DoctorAvailability
from ehr_backend.models.user import Role, User
from ehr_backend.services.access import Requester

logger = logging.getLogger(__name__)

TIME_OF_DAY_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
GENDERS = {'male', 'female', 'other'}


def resolve_user(db: Session, user_id: int) -> User:
    try:
        user = db.get(User, user_id)
    except SQLAlchemyError as exc:
        raise StoreError() from exc

    if user is None:
        raise NotFound('User not found.')
    return user


def get_doctor(db: Session, doctor_id: int) -> User:
    try:
        doctor = db.query(User).filter(User.id == doctor_id, User.role == Role.DOCTOR.value).first()
    except SQLAlchemyError as exc:
        raise StoreError() from exc

    if doctor is None:
        raise NotFound('Doctor not found.')
    return doctor


def list_doctors(db: Session, specialization: str | None = None) -> list[User]:
    query = db.query(User).filter(User.role == Role.DOCTOR.value)

    if specialization and specialization.strip():
        query = query.filter(User.specialization.ilike(f'%{specialization.strip()}%'))

    try:
        return query.order_by(User.name.asc()).all()
    except SQLAlchemyError as exc:
        raise StoreError() from exc


def list_patients(db: Session, requester: Requester) -> list[User]:
    if requester.role not in (Role.DOCTOR, Role.ADMIN):
        raise AccessDenied('Only doctors and admins can list patients.')

    try:
        return db.query(User).filter(User.role == Role.PATIENT.value).order_by(User.name.asc()).all()
    except SQLAlchemyError as exc:
        raise StoreError() from exc


def _commit(db: Session, user: User) -> User:
    user_id = user.id

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update user %s', user_id)
        raise StoreError() from exc

    db.refresh(user)
    return user


def update_profile(
    db: Session,
    user: User,
    name: str | None = None,
    phone: str | None = None,
    dob: date | None = None,
    gender: str | None = None,
    address: str | None = None,
    medical_history: str | None = None,
) -> User:
    """Update the caller's own profile. ``None`` leaves a field as it is."""
    if name is not None:
        if not name.strip():
            raise ValidationError('Name cannot be blank.')
        user.name = name.strip()
    if phone is not None:
        user.phone = phone
    if dob is not None:
        user.dob = dob
    if gender is not None:
        if gender not in GENDERS:
            raise ValidationError('Gender must be male, female, or other.')
        user.gender = gender
    if address is not None:
        user.address = address
    if medical_history is not None:
        user.medical_history = medical_history

    return _commit(db, user)


def set_doctor_availability(
    db: Session,
    requester: Requester,
    doctor_id: int,
    slots: list[tuple[int, str, str]],
) -> User:
    """Replace a doctor's weekly availability with ``(day_of_week, start, end)`` windows."""
    if requester.role is Role.DOCTOR and requester.user_id != doctor_id:
        raise AccessDenied()
    if requester.role not in (Role.DOCTOR, Role.ADMIN):
        raise AccessDenied('Only doctors and admins can change availability.')

    doctor = get_doctor(db, doctor_id)

    for day_of_week, start_time, end_time in slots:
        if not 0 <= day_of_week <= 6:
            raise ValidationError('Day of week must be between 0 and 6.')
        if not TIME_OF_DAY_PATTERN.match(start_time) or not TIME_OF_DAY_PATTERN.match(end_time):
            raise ValidationError('Times must use the 24-hour HH:mm format.')

    doctor.availability_slots = [
        DoctorAvailability(day_of_week=day_of_week, start_time=start_time, end_time=end_time)
        for day_of_week, start_time, end_time in slots
    ]
    _commit(db, doctor)
    logger.info('Availability for doctor %s replaced with %d windows', doctor_id, len(slots))
    return doctor
