from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.testclient import TestClient

from spacebook.controllers.auth_controller import router as auth_router
from spacebook.controllers.booking_controller import router as booking_router
from spacebook.controllers.company_controller import router as directory_router
from spacebook.controllers.envelope import install_error_handlers
from spacebook.controllers.space_controller import router as space_router
from spacebook.repository.data_repository import DataRepository
from spacebook.services.auth_service import AuthService
from spacebook.services.authorization_service import AuthorizationGuard
from spacebook.services.booking_service import ReservationService
from spacebook.services.directory_service import DirectoryService
from spacebook.services.space_service import SpaceService
from spacebook.services.token_service import TokenCodec
from spacebook.utils.config import get_settings


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
ADMIN_EMAIL = "root@spacebook.test"
ADMIN_PASSWORD = "correct horse battery staple"


def _build_test_settings(tmp_path, filename: str):
    return replace(
        get_settings(),
        database_path=tmp_path / filename,
        jwt_secret="directory-test-signing-secret-0123456789",
        booking_timezone="UTC",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        password_hash_iterations=1000,
    )


def _build_test_app(tmp_path) -> FastAPI:
    settings = _build_test_settings(tmp_path, "directory_flow.db")
    repository = DataRepository(settings)
    repository.initialize_database()

    token_codec = TokenCodec(settings=settings, clock=lambda: NOW)
    guard = AuthorizationGuard(repository=repository, settings=settings)
    auth_service = AuthService(repository=repository, token_codec=token_codec, settings=settings)
    assert auth_service.bootstrap_admin() is True
    assert auth_service.bootstrap_admin() is False

    app = FastAPI()
    app.include_router(auth_router)
    app.include_router(booking_router)
    app.include_router(space_router)
    app.include_router(directory_router)
    install_error_handlers(app)
    app.state.repository = repository
    app.state.token_codec = token_codec
    app.state.auth_service = auth_service
    app.state.reservation_service = ReservationService(
        repository=repository,
        guard=guard,
        settings=settings,
        clock=lambda: NOW,
    )
    app.state.directory_service = DirectoryService(
        repository=repository,
        guard=guard,
        auth_service=auth_service,
        settings=settings,
    )
    app.state.space_service = SpaceService(repository=repository, guard=guard, settings=settings)
    return app


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _admin_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/auth/admin/login", json={"email": ADMIN_EMAIL.upper(), "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    assert response.json()["data"]["token_type"] == "bearer"
    return _bearer(response.json()["data"]["token"])


def _create_company(client: TestClient, admin: dict[str, str], name: str, manager_email: str) -> dict:
    response = client.post(
        "/companies",
        json={
            "company_name": name,
            "about": f"{name} offices",
            "manager": {"name": "Mia", "position": "Office Lead", "email": manager_email},
        },
        headers=admin,
    )
    assert response.status_code == 201
    return response.json()["data"]


def _activate_and_login(client: TestClient, emp_id: str, activation_token: str, email: str) -> dict[str, str]:
    activated = client.patch(
        f"/employees/{emp_id}/verify",
        json={"password": "s3cret-pass"},
        headers=_bearer(activation_token),
    )
    assert activated.status_code == 202
    assert activated.json()["data"] == {"emp_id": emp_id, "activated": True}

    login = client.post("/auth/login/employee", json={"email": email, "password": "s3cret-pass"})
    assert login.status_code == 200
    return _bearer(login.json()["data"]["token"])


def test_admin_login_rejects_bad_credentials(tmp_path):
    client = TestClient(_build_test_app(tmp_path))

    wrong_password = client.post("/auth/admin/login", json={"email": ADMIN_EMAIL, "password": "nope"})
    unknown = client.post("/auth/admin/login", json={"email": "ghost@spacebook.test", "password": "nope"})

    assert wrong_password.status_code == 401
    assert unknown.status_code == 401
    assert wrong_password.json()["error"] == unknown.json()["error"]


def test_company_onboarding_and_employee_management(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    admin = _admin_headers(client)
    acme = _create_company(client, admin, "Acme", "mia@acme.test")

    # Invited accounts cannot log in and activation tokens are not access tokens.
    before = client.post("/auth/login/employee", json={"email": "mia@acme.test", "password": "s3cret-pass"})
    assert before.status_code == 401
    assert client.get("/me/company", headers=_bearer(acme["activation_token"])).status_code == 401

    manager = _activate_and_login(client, acme["manager_id"], acme["activation_token"], "mia@acme.test")

    reactivate = client.patch(
        f"/employees/{acme['manager_id']}/verify",
        json={"password": "another-pass"},
        headers=_bearer(acme["activation_token"]),
    )
    assert reactivate.status_code == 401
    assert reactivate.json()["error"]["message"] == "do not have access"

    own = client.get("/me/company", headers=manager)
    assert own.status_code == 200
    assert own.json()["data"]["company_name"] == "Acme"

    invited = client.post(
        "/employees",
        json={"name": "Eli", "position": "Engineer", "email": "Eli@Acme.test"},
        headers=manager,
    )
    assert invited.status_code == 201
    eli_id = invited.json()["data"]["emp_id"]

    duplicate = client.post(
        "/employees",
        json={"name": "Eli Two", "position": "Engineer", "email": "eli@acme.test"},
        headers=manager,
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "duplicate_email"

    # An activation token only activates the account it was issued for.
    mismatched = client.patch(
        f"/employees/{acme['manager_id']}/verify",
        json={"password": "hijack"},
        headers=_bearer(invited.json()["data"]["activation_token"]),
    )
    assert mismatched.status_code == 403

    listing = client.get("/employees", params={"limit": 10}, headers=manager)
    assert listing.status_code == 200
    assert listing.json()["data"]["total"] == 2
    assert {item["email"] for item in listing.json()["data"]["items"]} == {"mia@acme.test", "eli@acme.test"}
    assert all("password_hash" not in item for item in listing.json()["data"]["items"])

    updated = client.patch(f"/employees/{eli_id}", json={"position": "Staff Engineer"}, headers=manager)
    assert updated.status_code == 200
    assert updated.json()["data"]["position"] == "Staff Engineer"
    assert updated.json()["data"]["activated"] is False

    eli = _activate_and_login(client, eli_id, invited.json()["data"]["activation_token"], "eli@acme.test")
    assert client.get("/employees", headers=eli).status_code == 403
    assert client.get("/me/company", headers=eli).json()["data"]["comp_id"] == acme["comp_id"]

    self_delete = client.delete(f"/employees/{acme['manager_id']}", headers=manager)
    assert self_delete.status_code == 400
    assert self_delete.json()["error"]["code"] == "self_delete"

    assert client.delete(f"/employees/{eli_id}", headers=manager).status_code == 200
    assert client.get(f"/employees/{eli_id}", headers=manager).status_code == 404


def test_managers_are_scoped_to_their_own_company(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    admin = _admin_headers(client)
    acme = _create_company(client, admin, "Acme", "mia@acme.test")
    globex = _create_company(client, admin, "Globex", "otto@globex.test")
    acme_manager = _activate_and_login(client, acme["manager_id"], acme["activation_token"], "mia@acme.test")
    globex_manager = _activate_and_login(
        client,
        globex["manager_id"],
        globex["activation_token"],
        "otto@globex.test",
    )

    assert client.get(f"/employees/{acme['manager_id']}", headers=globex_manager).status_code == 404
    assert client.delete(f"/employees/{acme['manager_id']}", headers=globex_manager).status_code == 404
    assert client.get(f"/employees/{acme['manager_id']}", headers=acme_manager).status_code == 200

    # Administrators manage companies but have no company of their own.
    assert client.get("/me/company", headers=admin).status_code == 403
    assert client.get("/companies", headers=acme_manager).status_code == 403

    filtered = client.get("/companies", params={"company_name": "Acme"}, headers=admin)
    assert filtered.json()["data"]["total"] == 1
    assert client.get("/companies", headers=admin).json()["data"]["total"] == 2

    renamed = client.patch(f"/companies/{acme['comp_id']}", json={"company_name": "Acme Corp"}, headers=admin)
    assert renamed.json()["data"]["company_name"] == "Acme Corp"
    assert client.patch(f"/companies/{acme['comp_id']}", json={}, headers=admin).status_code == 400


def test_company_deletion_cascades_to_members(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    admin = _admin_headers(client)
    acme = _create_company(client, admin, "Acme", "mia@acme.test")
    manager = _activate_and_login(client, acme["manager_id"], acme["activation_token"], "mia@acme.test")

    space = client.post("/spaces", json={"name": "Orion", "size": 6}, headers=admin)
    space_id = space.json()["data"]["space_id"]
    booked = client.post(
        "/bookings",
        json={
            "space_id": space_id,
            "start_time": "2026-03-02T14:00:00Z",
            "end_time": "2026-03-02T15:00:00Z",
        },
        headers=manager,
    )
    assert booked.status_code == 201

    assert client.delete(f"/companies/{acme['comp_id']}", headers=admin).status_code == 200
    assert client.get(f"/companies/{acme['comp_id']}", headers=admin).status_code == 404

    # Outstanding tokens keep verifying, but the subject no longer resolves.
    gone = client.get("/me/company", headers=manager)
    assert gone.status_code == 404
    assert gone.json()["error"]["code"] == "identity_not_found"
    assert client.get(f"/spaces/{space_id}/bookings").json()["data"] == []


def test_space_administration(tmp_path):
    client = TestClient(_build_test_app(tmp_path))
    admin = _admin_headers(client)
    acme = _create_company(client, admin, "Acme", "mia@acme.test")
    manager = _activate_and_login(client, acme["manager_id"], acme["activation_token"], "mia@acme.test")

    assert client.post("/spaces", json={"name": "Nope", "size": 2}, headers=manager).status_code == 403
    assert client.post("/spaces", json={"name": "Zero", "size": 0}, headers=admin).status_code == 400

    orion = client.post("/spaces", json={"name": "Orion", "size": 6, "description": "Corner"}, headers=admin)
    vega = client.post("/spaces", json={"name": "Vega", "size": 4}, headers=admin)
    orion_id = orion.json()["data"]["space_id"]
    vega_id = vega.json()["data"]["space_id"]

    listing = client.get("/spaces", params={"size": 6})
    assert listing.status_code == 200
    assert [item["space_id"] for item in listing.json()["data"]["items"]] == [orion_id]
    assert client.get("/spaces", params={"limit": 1}).json()["data"]["total"] == 2

    assert client.get(f"/spaces/{orion_id}").json()["data"]["description"] == "Corner"
    resized = client.patch(f"/spaces/{orion_id}", json={"size": 8}, headers=admin)
    assert resized.json()["data"]["size"] == 8

    client.post(
        "/bookings",
        json={
            "space_id": orion_id,
            "start_time": "2026-03-02T14:00:00Z",
            "end_time": "2026-03-02T15:00:00Z",
        },
        headers=manager,
    )
    in_use = client.delete(f"/spaces/{orion_id}", headers=admin)
    assert in_use.status_code == 409
    assert in_use.json()["error"]["code"] == "space_in_use"

    assert client.delete(f"/spaces/{vega_id}", headers=admin).status_code == 200
    assert client.get(f"/spaces/{vega_id}").status_code == 404
