import datetime as dt

from pydantic import BaseModel, field_validator

from ehr_backend.models.appointment import AppointmentStatus
from ehr_backend.services.user_directory import TIME_OF_DAY_PATTERN

MAX_APPOINTMENT_TEXT_LENGTH = 600


def normalize_time_of_day(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not TIME_OF_DAY_PATTERN.match(normalized):
        raise ValueError('Times must use the 24-hour HH:mm format.')
    return normalized


def normalize_free_text(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if len(normalized) > MAX_APPOINTMENT_TEXT_LENGTH:
        raise ValueError(f'Text must be {MAX_APPOINTMENT_TEXT_LENGTH} characters or fewer.')
    return normalized


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    role: str
    specialization: str | None = None

    class Config:
        from_attributes = True


class AvailabilitySlot(BaseModel):
    day_of_week: int
    start_time: str
    end_time: str

    class Config:
        from_attributes = True


class UserProfile(UserSummary):
    phone: str | None = None
    dob: dt.date | None = None
    gender: str | None = None
    address: str | None = None
    medical_history: str | None = None
    availability_slots: list[AvailabilitySlot] = []
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    dob: dt.date | None = None
    gender: str | None = None
    address: str | None = None
    medical_history: str | None = None


class UpdateAvailabilityRequest(BaseModel):
    availability_slots: list[AvailabilitySlot]


class CreateAppointmentRequest(BaseModel):
    doctor_id: int
    date: dt.date
    start_time: str
    end_time: str
    reason: str | None = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_times(cls, value: str) -> str:
        return normalize_time_of_day(value)

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return normalize_free_text(value)


class UpdateAppointmentRequest(BaseModel):
    date: dt.date | None = None
    start_time: str | None = None
    end_time: str | None = None
    reason: str | None = None
    notes: str | None = None

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_times(cls, value: str | None) -> str | None:
        return normalize_time_of_day(value)

    @field_validator('reason', 'notes')
    @classmethod
    def validate_text(cls, value: str | None) -> str | None:
        return normalize_free_text(value)


class UpdateStatusRequest(BaseModel):
    status: AppointmentStatus
    notes: str | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return normalize_free_text(value)


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    patient: UserSummary
    doctor: UserSummary
    date: dt.date
    start_time: str
    end_time: str
    status: AppointmentStatus
    reason: str | None = None
    notes: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    class Config:
        from_attributes = True


class CancelAppointmentResponse(BaseModel):
    message: str
    appointment: AppointmentResponse


class MedicationItem(BaseModel):
    name: str
    dose: str
    frequency: str
    duration: str
    instructions: str | None = None

    class Config:
        from_attributes = True


class CreatePrescriptionRequest(BaseModel):
    appointment_id: int
    patient_id: int | None = None
    medications: list[MedicationItem]
    notes: str | None = None


class PrescriptionResponse(BaseModel):
    id: int
    appointment_id: int
    doctor_id: int
    patient_id: int
    appointment: AppointmentResponse
    doctor: UserSummary
    patient: UserSummary
    medications: list[MedicationItem]
    notes: str | None = None
    issued_at: dt.datetime

    class Config:
        from_attributes = True
