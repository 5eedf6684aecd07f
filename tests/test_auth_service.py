import pytest
from datetime import timedelta
from fastapi import status

from hrms.services import auth as auth_service

def test_token_round_trip_keeps_claims():
    token = auth_service.create_access_token(data={"sub": "ada@example.com", "role": "hr", "employee_id": "E1"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "ada@example.com"
    assert payload["role"] == "hr"
    assert payload["type"] == "access"

def test_expired_token_is_reported():
    token = auth_service.create_access_token(data={"sub": "ada@example.com"}, expires_delta=timedelta(minutes=-5))
    assert auth_service.decode_access_token(token) == {"error": "TOKEN_EXPIRED"}

def test_tampered_token_is_rejected():
    token = auth_service.create_access_token(data={"sub": "ada@example.com"})
    assert auth_service.decode_access_token(token[:-4] + "abcd") is None

def test_expired_token_returns_401(client):
    token = auth_service.create_access_token(data={"sub": "ada@example.com"}, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/leaves", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["errors"][0]["msg"] == "TOKEN_EXPIRED"

def test_refresh_token_is_not_accepted(client):
    token = auth_service.create_access_token(data={"sub": "ada@example.com", "type": "refresh"})
    response = client.get("/api/leaves", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_unknown_role_is_rejected(client):
    token = auth_service.create_access_token(data={"sub": "ada@example.com", "role": "superuser"})
    response = client.get("/api/leaves", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

def test_garbage_token_is_rejected(client):
    response = client.get("/api/leaves", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
