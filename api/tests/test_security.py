from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest
from fastapi import HTTPException

from career_pages.core.auth import Principal
from career_pages.core.security import _fetch_supabase_user, bearer_token, principal_from_user


@pytest.mark.parametrize(
    ("header", "detail"),
    [
        (None, "owner auth requires bearer token"),
        ("Basic abc", "owner auth requires bearer token"),
        ("Bearer   ", "empty bearer token"),
    ],
)
def test_bearer_token_rejects_malformed_headers(header: str | None, detail: str) -> None:
    with pytest.raises(HTTPException) as exc_info:
        bearer_token(header)

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == detail


def test_bearer_token_accepts_any_scheme_case() -> None:
    assert bearer_token("bearer owner-token") == "owner-token"


def test_principal_from_user_requires_id() -> None:
    with pytest.raises(HTTPException) as exc_info:
        principal_from_user({"email": "owner@example.com"})

    assert exc_info.value.status_code == 401


def test_principal_from_user_keeps_email() -> None:
    principal = principal_from_user({"id": "user-1", "email": "owner@example.com"})

    assert principal == Principal(subject="user-1", email="owner@example.com")
    assert principal.owns("user-1")
    assert not principal.owns(None)
    with pytest.raises(PermissionError):
        principal.require_owner("someone-else")


def _install_client(monkeypatch, status_code: int, payload: Any, captured: dict[str, Any]) -> None:
    class FakeAsyncClient:
        async def __aenter__(self) -> "FakeAsyncClient":
            return self

        async def __aexit__(self, exc_type, exc, tb) -> None:
            return None

        async def get(self, url: str, headers: dict[str, str]) -> httpx.Response:
            captured.update(url=url, headers=headers)
            return httpx.Response(status_code=status_code, json=payload, request=httpx.Request("GET", url))

    monkeypatch.setattr(httpx, "AsyncClient", lambda *args, **kwargs: FakeAsyncClient())


def test_fetch_supabase_user_sends_token_and_anon_key(monkeypatch) -> None:
    captured: dict[str, Any] = {}
    _install_client(monkeypatch, 200, {"id": "user-1"}, captured)

    user = asyncio.run(
        _fetch_supabase_user(
            supabase_url="http://supabase.local/",
            supabase_anon_key="anon",
            token="owner-token",
            timeout_seconds=1.0,
        )
    )

    assert user == {"id": "user-1"}
    assert captured["url"] == "http://supabase.local/auth/v1/user"
    assert captured["headers"] == {"Authorization": "Bearer owner-token", "apikey": "anon"}


@pytest.mark.parametrize(("status_code", "expected"), [(401, 401), (403, 401), (500, 503)])
def test_fetch_supabase_user_maps_failures(monkeypatch, status_code: int, expected: int) -> None:
    _install_client(monkeypatch, status_code, {"msg": "nope"}, {})

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(
            _fetch_supabase_user(
                supabase_url="http://supabase.local",
                supabase_anon_key="anon",
                token="bad",
                timeout_seconds=1.0,
            )
        )

    assert exc_info.value.status_code == expected
