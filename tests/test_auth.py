"""
Authentication tests: registration, login, profile, and the guard that
turns an ``Authorization`` header into a verified claim.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from blog_api.dependencies import extract_bearer_token, get_current_user, get_optional_user
from blog_api.exceptions import MalformedCredentials, MissingCredentials
from blog_api.schemas import TokenPayload
from blog_api.security import token_service


async def _register(
    client: AsyncClient,
    name: str = "Test User",
    email: str = "test@example.com",
    password: str = "Test123",
):
    return await client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
    })


def _request(authorization: str | None = None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


# ---------------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_returns_user_and_token(async_client: AsyncClient):
    resp = await _register(async_client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    user = body["data"]["user"]
    assert user["email"] == "test@example.com"
    assert user["name"] == "Test User"
    assert "password" not in user

    claim = token_service.verify(body["data"]["token"])
    assert claim.subject_id == user["id"]
    assert claim.email == "test@example.com"


@pytest.mark.asyncio
async def test_register_normalises_email(async_client: AsyncClient):
    resp = await _register(async_client, email="Mixed.Case@Example.COM")
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["email"] == "mixed.case@example.com"


@pytest.mark.asyncio
async def test_register_duplicate_email_returns_409(async_client: AsyncClient):
    await _register(async_client)
    resp = await _register(async_client, name="Someone Else")
    assert resp.status_code == 409
    assert resp.json() == {
        "success": False,
        "message": "User with this email already exists",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["short", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
async def test_register_rejects_weak_password(async_client: AsyncClient, password: str):
    resp = await _register(async_client, password=password)
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert [e["field"] for e in body["errors"]] == ["password"]


@pytest.mark.asyncio
async def test_password_with_surrounding_spaces_logs_in_as_typed(async_client: AsyncClient):
    assert (await _register(async_client, password=" Test123 ")).status_code == 201

    as_typed = await async_client.post("/api/auth/login", json={
        "email": "test@example.com",
        "password": " Test123 ",
    })
    trimmed = await async_client.post("/api/auth/login", json={
        "email": "test@example.com",
        "password": "Test123",
    })

    assert as_typed.status_code == 200
    assert trimmed.status_code == 401


@pytest.mark.asyncio
async def test_register_trims_name(async_client: AsyncClient):
    resp = await _register(async_client, name="  Spaced Name  ")
    assert resp.json()["data"]["user"]["name"] == "Spaced Name"


@pytest.mark.asyncio
async def test_login_returns_token(async_client: AsyncClient):
    await _register(async_client)
    resp = await async_client.post("/api/auth/login", json={
        "email": "test@example.com",
        "password": "Test123",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Login successful"
    assert token_service.verify(body["data"]["token"]).email == "test@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("email, password", [
    ("test@example.com", "Wrong123"),
    ("nobody@example.com", "Test123"),
])
async def test_login_failure_does_not_reveal_which_part_was_wrong(
    async_client: AsyncClient, email: str, password: str
):
    await _register(async_client)
    resp = await async_client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


# ---------------------------------------------------------------------------
# Profile (guarded route)
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_profile_with_valid_token(async_client: AsyncClient):
    token = (await _register(async_client)).json()["data"]["token"]
    resp = await async_client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["email"] == "test@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("headers, message", [
    ({}, "Access denied. No token provided."),
    ({"Authorization": "Token abc"}, "Invalid authorization format. Use: Bearer <token>"),
    ({"Authorization": "Bearer"}, "Invalid authorization format. Use: Bearer <token>"),
    ({"Authorization": "Bearer a b"}, "Invalid authorization format. Use: Bearer <token>"),
    ({"Authorization": "Bearer not-a-jwt"}, "Invalid token"),
])
async def test_profile_rejects_bad_credentials(
    async_client: AsyncClient, headers: dict, message: str
):
    resp = await async_client.get("/api/auth/profile", headers=headers)
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": message}


@pytest.mark.asyncio
async def test_profile_rejects_expired_token(async_client: AsyncClient):
    user = (await _register(async_client)).json()["data"]["user"]
    token = token_service.issue(
        TokenPayload(subject_id=user["id"], email=user["email"]),
        expires_in=timedelta(seconds=-10),
    )
    resp = await async_client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token has expired"


@pytest.mark.asyncio
async def test_profile_for_deleted_account_returns_404(async_client: AsyncClient):
    token = token_service.issue(TokenPayload(subject_id=999, email="ghost@example.com"))
    resp = await async_client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_optional_auth_route_ignores_bad_token(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/posts", headers={"Authorization": "Bearer garbage"}
    )
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Guard dependencies
# ---------------------------------------------------------------------------

def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
    with pytest.raises(MissingCredentials):
        extract_bearer_token(None)
    with pytest.raises(MissingCredentials):
        extract_bearer_token("")
    with pytest.raises(MalformedCredentials):
        extract_bearer_token("bearer abc")


@pytest.mark.asyncio
async def test_get_current_user_attaches_claim():
    token = token_service.issue(TokenPayload(subject_id=3, email="c@example.com"))
    request = _request(f"Bearer {token}")

    claim = await get_current_user(request)

    assert claim.subject_id == 3
    assert request.state.user == claim


@pytest.mark.asyncio
async def test_get_optional_user_without_header_attaches_nothing():
    request = _request()
    assert await get_optional_user(request) is None
    assert not hasattr(request.state, "user")


@pytest.mark.asyncio
async def test_get_optional_user_with_expired_token_attaches_nothing():
    token = token_service.issue(
        TokenPayload(subject_id=3, email="c@example.com"),
        expires_in=timedelta(seconds=-10),
    )
    request = _request(f"Bearer {token}")
    assert await get_optional_user(request) is None
    assert not hasattr(request.state, "user")
