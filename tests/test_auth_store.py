from __future__ import annotations

import pytest

from pytienda.models.user import User, UserRole
from pytienda.state.auth import AuthStore, StaticCredentialVerifier
from pytienda.storage import MemoryStorage, load_snapshot


@pytest.mark.asyncio
async def test_login_with_accepted_pair_sets_admin_user() -> None:
    auth = AuthStore(storage=MemoryStorage())

    assert await auth.login("admin@tienda.com", "admin123") is True

    assert auth.authenticated is True
    assert auth.user == User(id="1", email="admin@tienda.com", name="Administrador", role=UserRole.ADMIN)
    assert auth.check_auth() is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "password"),
    [
        ("admin@tienda.com", "wrong"),
        ("someone@tienda.com", "admin123"),
        ("", ""),
    ],
)
async def test_rejected_login_leaves_state_unchanged(email: str, password: str) -> None:
    auth = AuthStore(storage=MemoryStorage())
    before = auth.state

    assert await auth.login(email, password) is False

    assert auth.state is before
    assert auth.check_auth() is False


@pytest.mark.asyncio
async def test_logout_clears_user_and_flag() -> None:
    auth = AuthStore(storage=MemoryStorage())
    await auth.login("admin@tienda.com", "admin123")

    auth.logout()

    assert auth.user is None
    assert auth.authenticated is False
    assert auth.check_auth() is False


@pytest.mark.asyncio
async def test_failed_login_after_success_keeps_session() -> None:
    auth = AuthStore(storage=MemoryStorage())
    await auth.login("admin@tienda.com", "admin123")

    assert await auth.login("admin@tienda.com", "nope") is False
    assert auth.check_auth() is True


@pytest.mark.asyncio
async def test_check_auth_requires_admin_role() -> None:
    shopper = User(id="42", email="ana@example.com", name="Ana", role=UserRole.USER)
    auth = AuthStore(
        storage=MemoryStorage(),
        verifier=StaticCredentialVerifier("ana@example.com", "pw", user=shopper),
    )

    assert await auth.login("ana@example.com", "pw") is True
    assert auth.authenticated is True
    assert auth.check_auth() is False


class _ExplodingVerifier:
    async def verify(self, email: str, password: str) -> User | None:
        raise ConnectionError("backend down")


@pytest.mark.asyncio
async def test_verifier_error_reports_failed_login() -> None:
    auth = AuthStore(storage=MemoryStorage(), verifier=_ExplodingVerifier())

    assert await auth.login("admin@tienda.com", "admin123") is False
    assert auth.user is None


@pytest.mark.asyncio
async def test_auth_state_is_persisted_in_full() -> None:
    storage = MemoryStorage()
    auth = AuthStore(storage=storage)

    await auth.login("admin@tienda.com", "admin123")
    snapshot = load_snapshot(storage.get_item("auth-storage"))
    assert snapshot is not None
    assert snapshot["isAuthenticated"] is True
    assert snapshot["user"]["role"] == "admin"

    auth.logout()
    assert load_snapshot(storage.get_item("auth-storage")) == {"user": None, "isAuthenticated": False}
