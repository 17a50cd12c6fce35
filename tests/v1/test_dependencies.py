# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

from datetime import timedelta

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from kemotown.api.v1.dependencies import create_access_token, get_current_user, get_optional_user
from kemotown.core.settings import settings


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestOptionalUser:
    """Test bearer token resolution."""

    def test_no_credentials_is_anonymous(self, db_session):
        assert get_optional_user(None, db_session) is None

    def test_valid_token(self, db_session, alice):
        user = get_optional_user(_credentials(create_access_token(alice.id)), db_session)
        assert user is alice

    def test_token_subject_is_user_id(self, alice):
        payload = jwt.decode(
            create_access_token(alice.id),
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        assert payload["sub"] == alice.id

    def test_expired_token(self, db_session, alice):
        token = create_access_token(alice.id, expires_in=timedelta(seconds=-5))
        with pytest.raises(HTTPException) as exc_info:
            get_optional_user(_credentials(token), db_session)
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    def test_garbage_token(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            get_optional_user(_credentials("not-a-jwt"), db_session)
        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED

    def test_unknown_user(self, db_session):
        with pytest.raises(HTTPException) as exc_info:
            get_optional_user(_credentials(create_access_token("ghost")), db_session)
        assert exc_info.value.detail == "User not found"


def test_current_user_requires_authentication(alice):
    assert get_current_user(alice) is alice
    with pytest.raises(HTTPException) as exc_info:
        get_current_user(None)
    assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
