from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ehr_backend.auth.dependencies import get_current_user
from ehr_backend.core.errors import SchedulerError, to_http_exception
from ehr_backend.database import get_db
from ehr_backend.models.user import User
from ehr_backend.schemas import CreatePrescriptionRequest, PrescriptionResponse
from ehr_backend.services import prescriptions
from ehr_backend.services.access import Requester
from ehr_backend.services.prescriptions import MedicationLine

router = APIRouter(tags=['prescriptions'])


@router.post('', response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
def create_prescription(
    data: CreatePrescriptionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return prescriptions.issue_prescription(
            db,
            Requester.from_user(current_user),
            appointment_id=data.appointment_id,
            medications=[MedicationLine(**item.model_dump()) for item in data.medications],
            notes=data.notes,
            patient_id=data.patient_id,
        )
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/my-prescriptions', response_model=list[PrescriptionResponse])
def list_my_prescriptions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return prescriptions.list_prescriptions(db, Requester.from_user(current_user))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/appointment/{appointment_id}', response_model=list[PrescriptionResponse])
def list_appointment_prescriptions(
    appointment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return prescriptions.list_for_appointment(db, appointment_id, Requester.from_user(current_user))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc


@router.get('/{prescription_id}', response_model=PrescriptionResponse)
def get_prescription(
    prescription_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return prescriptions.get_prescription(db, prescription_id, Requester.from_user(current_user))
    except SchedulerError as exc:
        raise to_http_exception(exc) from exc
