"""
Tests for bearer-token authentication and the /auth endpoints.

Tests: token issue/decode, require_token_subject, register/login/me/logout.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException

from config import settings
from middleware.auth import (
    JWT_ALGORITHM,
    decode_access_token,
    issue_access_token,
    require_token_subject,
)


class TestAccessTokens:

    @pytest.mark.unit
    def test_issue_and_decode_round_trip_claims(self):
        token = issue_access_token(user_id=7, role="admin")
        payload = decode_access_token(token)
        assert payload["sub"] == "7"
        assert payload["role"] == "admin"
        assert payload["iss"] == settings.jwt_issuer
        assert payload["exp"] - payload["iat"] >= settings.jwt_access_ttl_days * 86400 - 1

    @pytest.mark.unit
    def test_expired_token_raises_401(self):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        token = jwt.encode(
            {
                "iss": settings.jwt_issuer,
                "sub": "1",
                "role": "customer",
                "iat": int((past - timedelta(hours=1)).timestamp()),
                "exp": int(past.timestamp()),
            },
            settings.jwt_secret,
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)
        assert exc_info.value.status_code == 401
        assert "expired" in exc_info.value.detail

    @pytest.mark.unit
    def test_wrong_secret_raises_401(self):
        token = jwt.encode({"sub": "1"}, "some-other-secret", algorithm=JWT_ALGORITHM)
        with pytest.raises(HTTPException) as exc_info:
            decode_access_token(token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid access token."

    @pytest.mark.unit
    def test_missing_secret_raises_500(self, monkeypatch):
        monkeypatch.setattr(settings, "jwt_secret", "")
        with pytest.raises(HTTPException) as exc_info:
            issue_access_token(user_id=1, role="customer")
        assert exc_info.value.status_code == 500


class TestRequireTokenSubject:

    @pytest.mark.unit
    async def test_valid_header_returns_user_id(self):
        token = issue_access_token(user_id=12, role="customer")
        assert await require_token_subject(authorization=f"Bearer {token}") == 12

    @pytest.mark.unit
    @pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer "])
    async def test_missing_or_malformed_header_raises_401(self, header):
        with pytest.raises(HTTPException) as exc_info:
            await require_token_subject(authorization=header)
        assert exc_info.value.status_code == 401
        assert "Authentication required" in exc_info.value.detail


class TestAuthEndpoints:

    @pytest.mark.api
    async def test_register_returns_201_with_token(self, client):
        response = await client.post(
            "/auth/register",
            json={"name": "Jamie", "email": "Jamie@Example.com", "password": "hunter22"},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["email"] == "jamie@example.com"
        assert data["user"]["role"] == "customer"
        assert "passwordHash" not in data["user"]
        assert decode_access_token(data["token"])["sub"] == str(data["user"]["id"])

    @pytest.mark.api
    async def test_register_duplicate_email_returns_400(self, client, customer):
        response = await client.post(
            "/auth/register",
            json={"name": "Again", "email": "casey@example.com", "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "User already exists with this email"

    @pytest.mark.api
    async def test_register_short_password_is_validation_error(self, client):
        response = await client.post(
            "/auth/register",
            json={"name": "Jamie", "email": "jamie@example.com", "password": "123"},
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert any(d["field"] == "password" for d in error["details"])

    @pytest.mark.api
    async def test_login_success_sets_last_login(self, client, customer):
        response = await client.post(
            "/auth/login", json={"email": "casey@example.com", "password": "secret123"}
        )
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["lastLogin"] is not None

    @pytest.mark.api
    async def test_login_wrong_password_returns_401(self, client, customer):
        response = await client.post(
            "/auth/login", json={"email": "casey@example.com", "password": "nope-nope"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid credentials"

    @pytest.mark.api
    async def test_login_unknown_email_returns_same_401(self, client):
        response = await client.post(
            "/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid credentials"

    @pytest.mark.api
    async def test_me_returns_current_user(self, client, customer, customer_headers):
        response = await client.get("/auth/me", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == customer.id

    @pytest.mark.api
    async def test_me_for_deleted_user_returns_404(self, client):
        headers = {"Authorization": f"Bearer {issue_access_token(user_id=999, role='customer')}"}
        response = await client.get("/auth/me", headers=headers)
        assert response.status_code == 404

    @pytest.mark.api
    async def test_me_without_token_returns_401(self, client):
        response = await client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "http_error"

    @pytest.mark.api
    async def test_logout(self, client, customer_headers):
        response = await client.post("/auth/logout", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"
