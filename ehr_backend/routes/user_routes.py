from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ehr_backend.auth.dependencies import get_current_user
from ehr_backend.core.errors import SchedulerError, to_http_exception
from ehr_backend.database import get_db
from ehr_backend.models.user import User
from ehr_backend.schemas import UpdateAvailabilityRequest, UpdateProfileRequest, UserProfile, UserSummary
from ehr_backend.services import user_directory
from ehr_backend.services.access import Requester

router = APIRouter(tags=['users'])


@router.get('/me', response_model=UserProfile)
def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put('/me', response_model=UserProfile)
def update_my_profile(
    data: UpdateProfileRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return user_directory.update_profile(db, current_user, **data.model_dump(exclude_none=True))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/doctors', response_model=list[UserProfile])
def list_doctors(
    specialization: str | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    del current_user
    try:
        return user_directory.list_doctors(db, specialization)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/patients', response_model=list[UserProfile])
def list_patients(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return user_directory.list_patients(db, Requester.from_user(current_user))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/{user_id}', response_model=UserSummary)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    del current_user
    try:
        return user_directory.resolve_user(db, user_id)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.put('/doctors/{doctor_id}/availability', response_model=UserProfile)
def update_doctor_availability(
    doctor_id: int,
    data: UpdateAvailabilityRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    slots = [(slot.day_of_week, slot.start_time, slot.end_time) for slot in data.availability_slots]

    try:
        return user_directory.set_doctor_availability(db, Requester.from_user(current_user), doctor_id, slots)
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc
