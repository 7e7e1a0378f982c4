"""
CourseHub Backend: Authentication Tests
=======================================

What:  JWT minting/validation and the auth dependencies as seen over HTTP.
"""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from coursehub.config import settings
from coursehub.exceptions import AuthenticationError
from coursehub.models import User
from coursehub.security import create_access_token, decode_access_token


class TestTokens:

    def test_round_trip_returns_user_id(self):
        user = User(id=uuid4(), username="u", name="U", email="u@example.edu", role="student")
        token = create_access_token(user)
        assert decode_access_token(token) == user.id

    def test_expired_token(self):
        user = User(id=uuid4(), username="u", name="U", email="u@example.edu", role="student")
        token = create_access_token(user, expires_delta=timedelta(seconds=-5))

        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Token has expired"

    def test_wrong_signature(self):
        token = jwt.encode({"sub": str(uuid4()), "exp": 9999999999}, "another-secret",
                           algorithm="HS256")
        with pytest.raises(AuthenticationError) as exc_info:
            decode_access_token(token)
        assert exc_info.value.message == "Invalid token"

    def test_missing_subject(self):
        token = jwt.encode({"exp": 9999999999}, settings.jwt_secret_key, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_non_uuid_subject(self):
        token = jwt.encode({"sub": "42", "exp": 9999999999}, settings.jwt_secret_key,
                           algorithm="HS256")
        with pytest.raises(AuthenticationError):
            decode_access_token(token)


class TestAuthOverHttp:

    @pytest.mark.asyncio
    async def test_garbage_token(self, test_client, seed):
        response = await test_client.get("/api/notifications/unread-count",
                                         headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, test_client, seed):
        ghost = User(id=uuid4(), username="ghost", name="Ghost", email="g@example.edu",
                     role="student")
        response = await test_client.get(
            "/api/notifications/unread-count",
            headers={"Authorization": f"Bearer {create_access_token(ghost)}"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "User belonging to this token no longer exists"

    @pytest.mark.asyncio
    async def test_role_is_case_insensitive(self, test_client, db_session, seed, auth_headers):
        seed.other_instructor.role = "Instructor"
        await db_session.commit()

        response = await test_client.get("/api/forum/all",
                                         headers=auth_headers(seed.other_instructor))
        assert response.status_code == 200
