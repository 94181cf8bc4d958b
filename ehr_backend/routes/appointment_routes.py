from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ehr_backend.auth.dependencies import get_current_user
from ehr_backend.core.errors import SchedulerError, to_http_exception
from ehr_backend.database import get_db
from ehr_backend.models.appointment import AppointmentStatus
from ehr_backend.models.user import User
from ehr_backend.schemas import (
    AppointmentResponse,
    CancelAppointmentResponse,
    CreateAppointmentRequest,
    UpdateAppointmentRequest,
    UpdateStatusRequest,
)
from ehr_backend.services import appointment_scheduler
from ehr_backend.services.access import Requester

router = APIRouter(tags=['appointments'])


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return appointment_scheduler.book_appointment(
            db,
            Requester.from_user(current_user),
            doctor_id=data.doctor_id,
            appointment_date=data.date,
            start_time=data.start_time,
            end_time=data.end_time,
            reason=data.reason,
        )
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/my-appointments', response_model=list[AppointmentResponse])
def list_my_appointments(
    status_filter: AppointmentStatus | None = Query(default=None, alias='status'),
    upcoming: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return appointment_scheduler.list_appointments(
            db,
            Requester.from_user(current_user),
            status=status_filter,
            upcoming_only=upcoming,
        )
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return appointment_scheduler.get_appointment(db, appointment_id, Requester.from_user(current_user))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.put('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = data.model_dump(include={'notes'}, exclude_unset=True)

    try:
        return appointment_scheduler.transition_status(
            db,
            appointment_id,
            Requester.from_user(current_user),
            data.status,
            **changes,
        )
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: UpdateAppointmentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = data.model_dump(exclude_unset=True)
    if 'date' in changes:
        changes['appointment_date'] = changes.pop('date')

    try:
        return appointment_scheduler.edit_appointment(
            db,
            appointment_id,
            Requester.from_user(current_user),
            **changes,
        )
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/{appointment_id}', response_model=CancelAppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        appointment = appointment_scheduler.cancel_appointment(db, appointment_id, Requester.from_user(current_user))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc

    return CancelAppointmentResponse(
        message='Appointment cancelled successfully',
        appointment=AppointmentResponse.model_validate(appointment),
    )
