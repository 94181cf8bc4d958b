import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from ehr_backend.auth import jwt_handler
from ehr_backend.auth.dependencies import get_current_user
from ehr_backend.core import config
from ehr_backend.routes import auth_routes


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_create_access_token_carries_subject_and_role() -> None:
    token = jwt_handler.create_access_token(subject='7', role='doctor')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == '7'
    assert payload['role'] == 'doctor'
    assert payload['exp'] > payload['iat']


def test_get_current_user_resolves_token_subject(db, patient) -> None:
    token = jwt_handler.create_access_token(subject=str(patient.id), role=patient.role)

    user = get_current_user(credentials=_credentials(token), db=db)

    assert user.id == patient.id


def test_get_current_user_rejects_garbage_token(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials('not-a-token'), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid token'


def test_get_current_user_rejects_token_signed_with_other_key(db, patient) -> None:
    token = jwt.encode({'sub': str(patient.id)}, 'some-other-secret', algorithm=config.JWT_ALGORITHM)

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials(token), db=db)

    assert exception_info.value.status_code == 401


def test_get_current_user_rejects_non_numeric_subject(db) -> None:
    token = jwt_handler.create_access_token(subject='someone@example.com', role='patient')

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials(token), db=db)

    assert exception_info.value.detail == 'Invalid token subject'


def test_get_current_user_rejects_unknown_user(db) -> None:
    token = jwt_handler.create_access_token(subject='999', role='patient')

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials(token), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'User not found'


def test_me_returns_identity(doctor) -> None:
    assert auth_routes.me(current_user=doctor) == {
        'id': doctor.id,
        'email': 'dr.dana@ehr.test',
        'role': 'doctor',
    }
