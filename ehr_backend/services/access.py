"""Who may do what with an appointment.

Every operation has its own capability check. Roles never change behaviour
through subclassing; callers build a ``Requester`` from the authenticated
user and ask the matching ``can_*`` function.
"""

from dataclasses import dataclass

from ehr_backend.models.appointment import Appointment, AppointmentStatus
from ehr_backend.models.user import Role, User


@dataclass(frozen=True)
class Requester:
    user_id: int
    role: Role

    @classmethod
    def from_user(cls, user: User) -> 'Requester':
        return cls(user_id=user.id, role=Role(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


# Applied only when ENFORCE_STATUS_TRANSITIONS is on.
ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


def is_participant(requester: Requester, appointment: Appointment) -> bool:
    return requester.user_id in (appointment.patient_id, appointment.doctor_id)


def can_book(requester: Requester) -> bool:
    return requester.role is Role.PATIENT


def can_view(requester: Requester, appointment: Appointment) -> bool:
    return requester.is_admin or is_participant(requester, appointment)


def can_edit(requester: Requester, appointment: Appointment) -> bool:
    return requester.is_admin or is_participant(requester, appointment)


def can_cancel(requester: Requester, appointment: Appointment) -> bool:
    return can_edit(requester, appointment)


def can_transition(requester: Requester, appointment: Appointment) -> bool:
    if requester.is_admin:
        return True
    return requester.role is Role.DOCTOR and appointment.doctor_id == requester.user_id


def can_prescribe(requester: Requester, appointment: Appointment) -> bool:
    return requester.role is Role.DOCTOR and appointment.doctor_id == requester.user_id


def is_transition_allowed(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return current == target or target in ALLOWED_TRANSITIONS[current]


def scope_filters(requester: Requester, patient_column, doctor_column) -> list:
    """Row filters limiting a query to what the requester may list."""
    if requester.role is Role.PATIENT:
        return [patient_column == requester.user_id]
    if requester.role is Role.DOCTOR:
        return [doctor_column == requester.user_id]
    return []
