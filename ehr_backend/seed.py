"""Reset the database to a demo data set and print bearer tokens for it.

Usage:
    python -m ehr_backend.seed
"""
import logging
from datetime import date, timedelta

from ehr_backend.auth.jwt_handler import create_access_token
from ehr_backend.database import Base, SessionLocal, engine
from ehr_backend.models.appointment import Appointment, AppointmentStatus
from ehr_backend.models.availability import DoctorAvailability
from ehr_backend.models.prescription import Medication, Prescription
from ehr_backend.models.user import Role, User

logger = logging.getLogger(__name__)

WEEKDAY_HOURS = [(day, '09:00', '17:00') for day in range(1, 6)]


def seed(db) -> list[User]:
    admin = User(name='Admin User', email='admin@ehr.com', role=Role.ADMIN.value, phone='+1234567890')
    cardiologist = User(
        name='Dr. Sarah Johnson',
        email='sarah.johnson@ehr.com',
        role=Role.DOCTOR.value,
        specialization='Cardiology',
        availability_slots=[
            DoctorAvailability(day_of_week=day, start_time=start, end_time=end)
            for day, start, end in WEEKDAY_HOURS
        ],
    )
    neurologist = User(
        name='Dr. Michael Chen',
        email='michael.chen@ehr.com',
        role=Role.DOCTOR.value,
        specialization='Neurology',
        availability_slots=[
            DoctorAvailability(day_of_week=day, start_time='10:00', end_time='18:00')
            for day in (1, 2, 4, 5)
        ],
    )
    patient = User(
        name='John Smith',
        email='john.smith@email.com',
        role=Role.PATIENT.value,
        gender='male',
        dob=date(1985, 5, 15),
        medical_history='Hypertension, controlled with medication',
    )
    db.add_all([admin, cardiologist, neurologist, patient])
    db.flush()

    tomorrow = date.today() + timedelta(days=1)
    last_week = date.today() - timedelta(days=7)
    upcoming = Appointment(
        patient_id=patient.id,
        doctor_id=cardiologist.id,
        date=tomorrow,
        start_time='10:00',
        end_time='10:30',
        status=AppointmentStatus.CONFIRMED.value,
        reason='Regular checkup',
    )
    past = Appointment(
        patient_id=patient.id,
        doctor_id=neurologist.id,
        date=last_week,
        start_time='14:00',
        end_time='14:30',
        status=AppointmentStatus.COMPLETED.value,
        reason='Recurring headaches',
        notes='Prescribed pain relief, follow up in a month.',
    )
    db.add_all([upcoming, past])
    db.flush()

    db.add(
        Prescription(
            appointment_id=past.id,
            doctor_id=neurologist.id,
            patient_id=patient.id,
            notes='Avoid screens before bed.',
            medications=[
                Medication(position=0, name='Ibuprofen', dose='400mg', frequency='Twice daily', duration='7 days'),
            ],
        )
    )
    db.commit()
    return [admin, cardiologist, neurologist, patient]


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        users = seed(db)
        for seeded_user in users:
            token = create_access_token(subject=str(seeded_user.id), role=seeded_user.role)
            print(f"{seeded_user.role:<8} {seeded_user.email:<24} {token}")
    finally:
        db.close()
    logger.info('Seeded %d users', len(users))


if __name__ == "__main__":
    main()
