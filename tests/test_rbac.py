import itertools

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from apps.helpdesk.dependencies.auth import Role, User, resolve_user_from_token, roles_required
from apps.helpdesk.dependencies.capabilities import CAPABILITIES, Operation, capability_required
from apps.helpdesk.main import create_app


@pytest.mark.asyncio
async def test_roles_required_allows_authorized_user():
    dependency = roles_required(Role.ADMIN)
    user = User("u-1", "alice", Role.ADMIN)
    result = await dependency(user)  # type: ignore[arg-type]
    assert result.username == "alice"


@pytest.mark.asyncio
async def test_roles_required_rejects_unauthorized_user():
    dependency = roles_required(Role.ADMIN)
    user = User("u-2", "bob", Role.CLIENT)
    with pytest.raises(HTTPException) as exc:
        await dependency(user)  # type: ignore[arg-type]

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_resolve_user_from_token():
    user = resolve_user_from_token("technician-token")
    assert user.role is Role.TECHNICIAN
    assert user.has_role(Role.TECHNICIAN, Role.ADMIN)
    assert not user.has_role(Role.CLIENT)

    with pytest.raises(HTTPException) as exc:
        resolve_user_from_token("forged")
    assert exc.value.status_code == 401


def test_capability_table():
    expected = {
        Operation.CREATE_TICKET: {Role.CLIENT, Role.ADMIN},
        Operation.LIST_TICKETS: {Role.ADMIN},
        Operation.READ_TICKET: {Role.ADMIN, Role.TECHNICIAN, Role.CLIENT},
        Operation.LIST_CLIENT_TICKETS: {Role.CLIENT, Role.ADMIN},
        Operation.LIST_TECHNICIAN_TICKETS: {Role.TECHNICIAN, Role.ADMIN},
        Operation.CHANGE_STATUS: {Role.TECHNICIAN, Role.ADMIN},
        Operation.REASSIGN_TICKET: {Role.ADMIN},
        Operation.DELETE_TICKET: {Role.ADMIN},
    }
    assert dict(CAPABILITIES) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(("operation", "role"), list(itertools.product(Operation, Role)))
async def test_capability_required_follows_the_table(operation, role):
    dependency = capability_required(operation)
    user = User("u-3", "carol", role)

    if role in CAPABILITIES[operation]:
        assert await dependency(user) is user  # type: ignore[arg-type]
    else:
        with pytest.raises(HTTPException) as exc:
            await dependency(user)  # type: ignore[arg-type]
        assert exc.value.status_code == 403


def test_middleware_rejects_non_bearer_scheme():
    client = TestClient(create_app())

    response = client.get("/ping/whoami", headers={"Authorization": "Basic YWRtaW46YWRtaW4="})

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_middleware_sets_current_user():
    client = TestClient(create_app())

    response = client.get("/ping/whoami", headers={"Authorization": "Bearer admin-token"})

    assert response.status_code == 200
    assert response.json()["data"] == {
        "id": "7d1c2a9e-0000-4000-8000-000000000001",
        "username": "admin",
        "role": "admin",
    }
    assert response.json()["success"] is True


def test_public_route_passes_without_header():
    client = TestClient(create_app())

    assert client.get("/ping").status_code == 200
