import os
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from ehr_backend.database import Base  # noqa: E402
from ehr_backend.models import appointment, availability, prescription  # noqa: E402,F401
from ehr_backend.models.appointment import Appointment  # noqa: E402
from ehr_backend.models.user import Role, User  # noqa: E402


@pytest.fixture
def db():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db):
    def _make_user(name: str, role: Role, specialization: str | None = None) -> User:
        user = User(
            name=name,
            email=f"{name.lower().replace(' ', '.')}@ehr.test",
            role=role.value,
            specialization=specialization,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def patient(make_user):
    return make_user('Pat Patient', Role.PATIENT)


@pytest.fixture
def other_patient(make_user):
    return make_user('Pam Other', Role.PATIENT)


@pytest.fixture
def doctor(make_user):
    return make_user('Dr Dana', Role.DOCTOR, specialization='Cardiology')


@pytest.fixture
def other_doctor(make_user):
    return make_user('Dr Ezra', Role.DOCTOR, specialization='Neurology')


@pytest.fixture
def admin(make_user):
    return make_user('Ada Admin', Role.ADMIN)


@pytest.fixture
def make_appointment(db):
    def _make_appointment(
        patient_user: User,
        doctor_user: User,
        appointment_date: date = date(2024, 6, 10),
        start_time: str = '10:00',
        end_time: str = '10:30',
        status: str = 'pending',
    ) -> Appointment:
        appointment_row = Appointment(
            patient_id=patient_user.id,
            doctor_id=doctor_user.id,
            date=appointment_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        db.add(appointment_row)
        db.commit()
        db.refresh(appointment_row)
        return appointment_row

    return _make_appointment


@pytest.fixture
def break_commit(db, monkeypatch: pytest.MonkeyPatch):
    """Make every later commit on ``db`` flush its changes and then fail."""

    def _break_commit() -> None:
        def _failing_commit() -> None:
            db.flush()
            raise OperationalError('COMMIT', {}, Exception('database is locked'))

        monkeypatch.setattr(db, 'commit', _failing_commit)

    return _break_commit
