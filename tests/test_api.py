"""
Tests: HTTP API
=================================
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.db.models import Role
from app.services.v1 import UserService
from common.config import AppConfig, Environment, EnvLogLevel, LoggingConfig

from .conftest import (
    FACILITY_ID,
    OTHER_FACILITY_ID,
    create_schema,
    make_db_manager,
    seed_facility,
    seed_user,
)

AS_OF = {"as_of": "2025-01-06T06:00:00"}

TEMPLATE_BODY: dict[str, Any] = {
    "facility_id": FACILITY_ID,
    "name": "ICU Day RN",
    "department": "ICU",
    "specialty": "Registered Nurse",
    "min_staff": 2,
    "max_staff": 2,
    "start_time": "07:00",
    "end_time": "19:00",
    "days_of_week": [1, 3, 5],
    "days_posted_out": 7,
    "hourly_rate": "52.00",
}


def _config() -> AppConfig:
    return AppConfig(
        app_title="Staffing Scheduler API",
        app_version="1.0.0",
        environment=Environment.DEVELOPMENT,
        logging=LoggingConfig(log_level=EnvLogLevel.WARNING),
    )


@pytest.fixture
def api(tmp_path):
    manager = make_db_manager(tmp_path / "api.db")

    async def _setup() -> dict[str, str]:
        await create_schema(manager)
        await seed_facility(manager)
        await seed_facility(manager, OTHER_FACILITY_ID, "Lakeside Rehab")
        return {
            "admin": await seed_user(manager, Role.FACILITY_ADMIN),
            "coordinator": await seed_user(manager, Role.SCHEDULING_COORDINATOR),
            "contractor": await seed_user(manager, Role.CONTRACTOR),
            "inactive": await seed_user(manager, Role.FACILITY_ADMIN, email="gone@staffing.example"),
        }

    users = asyncio.run(_setup())

    async def _deactivate() -> None:
        async with manager.session() as session:
            user = await UserService(session).get_user(users["inactive"])
            user.is_active = False

    asyncio.run(_deactivate())

    app = create_app(_config(), db_manager=manager)
    with TestClient(app) as client:
        yield client, users
    asyncio.run(manager.dispose())


def _as(user_id: str) -> dict[str, str]:
    return {"X-User-ID": user_id}


class TestAuthentication:
    def test_missing_header(self, api):
        client, _ = api
        response = client.get("/api/v1/shift-templates")
        assert response.status_code == 401
        assert response.json()["error"] == "UNAUTHENTICATED"

    def test_unknown_and_inactive_users(self, api):
        client, users = api
        assert client.get("/api/v1/permissions/me", headers=_as("nobody")).status_code == 401
        assert client.get("/api/v1/permissions/me", headers=_as(users["inactive"])).status_code == 401

    def test_request_id_echoed(self, api):
        client, users = api
        response = client.get(
            "/api/v1/permissions/me",
            headers={**_as(users["admin"]), "X-Request-ID": "req-42"},
        )
        assert response.headers["X-Request-ID"] == "req-42"


class TestShiftTemplateRoutes:
    def test_create_and_list_shifts(self, api):
        client, users = api
        response = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=_as(users["coordinator"])
        )
        assert response.status_code == 201
        body = response.json()
        assert body["generation"]["created"] == 8
        template_id = body["template"]["template_id"]

        shifts = client.get(
            f"/api/v1/shift-templates/{template_id}/shifts", headers=_as(users["contractor"])
        ).json()
        assert [s["shift_date"] for s in shifts[::2]] == [
            "2025-01-06",
            "2025-01-08",
            "2025-01-10",
            "2025-01-13",
        ]

    def test_contractor_cannot_create(self, api):
        client, users = api
        response = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, headers=_as(users["contractor"])
        )
        assert response.status_code == 403
        assert response.json()["error"] == "PERMISSION_DENIED"

    def test_invalid_template_is_422(self, api):
        client, users = api
        response = client.post(
            "/api/v1/shift-templates",
            json={**TEMPLATE_BODY, "start_time": "19:00", "end_time": "07:00"},
            headers=_as(users["admin"]),
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "INVALID_TEMPLATE"
        assert body["details"]

    def test_regenerate_then_deactivate(self, api):
        client, users = api
        created = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=_as(users["admin"])
        ).json()
        template_id = created["template"]["template_id"]

        regenerated = client.post(
            f"/api/v1/shift-templates/{template_id}/regenerate", params=AS_OF, headers=_as(users["admin"])
        ).json()
        assert regenerated["created"] == 0
        assert regenerated["unchanged"] == 8

        deactivated = client.post(
            f"/api/v1/shift-templates/{template_id}/deactivate",
            params={"as_of": "2025-01-08T08:00:00"},
            headers=_as(users["admin"]),
        ).json()
        assert deactivated == {"template_id": template_id, "cancelled": 4}

        cancelled = client.get(
            f"/api/v1/shift-templates/{template_id}/shifts",
            params={"status": "cancelled"},
            headers=_as(users["admin"]),
        ).json()
        assert len(cancelled) == 4

    def test_patch_and_filter_list(self, api):
        client, users = api
        created = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=_as(users["admin"])
        ).json()
        template_id = created["template"]["template_id"]

        patched = client.patch(
            f"/api/v1/shift-templates/{template_id}",
            json={"is_active": False},
            params=AS_OF,
            headers=_as(users["coordinator"]),
        ).json()
        assert patched["template"]["is_active"] is False
        assert patched["cancelled"] == 8

        active = client.get(
            "/api/v1/shift-templates", params={"is_active": True}, headers=_as(users["admin"])
        ).json()
        assert active == []

    def test_regenerate_inactive_is_409(self, api):
        client, users = api
        created = client.post(
            "/api/v1/shift-templates",
            json={**TEMPLATE_BODY, "is_active": False},
            params=AS_OF,
            headers=_as(users["admin"]),
        ).json()
        template_id = created["template"]["template_id"]

        response = client.post(
            f"/api/v1/shift-templates/{template_id}/regenerate", params=AS_OF, headers=_as(users["admin"])
        )
        assert response.status_code == 409
        assert response.json()["error"] == "TEMPLATE_INACTIVE"

    def test_blank_name_patch_rejected(self, api):
        client, users = api
        created = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=_as(users["admin"])
        ).json()
        template_id = created["template"]["template_id"]

        response = client.patch(
            f"/api/v1/shift-templates/{template_id}", json={"name": ""}, headers=_as(users["admin"])
        )
        assert response.status_code == 422
        assert response.json()["error"] == "INVALID_REQUEST"

        stored = client.get(f"/api/v1/shift-templates/{template_id}", headers=_as(users["admin"])).json()
        assert stored["name"] == "ICU Day RN"

    def test_missing_template_is_404(self, api):
        client, users = api
        response = client.get("/api/v1/shift-templates/missing", headers=_as(users["admin"]))
        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_generation_tick(self, api):
        client, users = api
        client.post("/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=_as(users["admin"]))

        summary = client.post(
            "/api/v1/shift-templates/generate",
            params={"as_of": "2025-01-08T06:00:00"},
            headers=_as(users["admin"]),
        ).json()
        assert summary["templates_processed"] == 1
        assert summary["results"][0]["created"] == 2


class TestPermissionRoutes:
    def test_role_templates_are_public(self, api):
        client, _ = api
        roles = {r["role"]: r["permissions"] for r in client.get("/api/v1/permissions/roles").json()}
        assert roles["contractor"] == ["view_schedules"]

    def test_me_lists_effective_set_and_nav(self, api):
        client, users = api
        me = client.get("/api/v1/permissions/me", headers=_as(users["contractor"])).json()
        assert me["source"] == "role_template"
        assert me["permissions"] == ["view_schedules"]
        assert "schedule" in {item["key"] for item in me["nav_items"]}

    def test_check(self, api):
        client, users = api
        headers = _as(users["contractor"])
        def check(body):
            return client.post("/api/v1/permissions/check", json=body, headers=headers).json()

        assert check({"permissions": []})["allowed"] is True
        assert check({"permissions": ["view_schedules", "view_billing"], "mode": "any"})["allowed"] is True
        assert check({"permissions": ["view_schedules", "view_billing"], "mode": "all"})["allowed"] is False


class TestUserRoutes:
    def test_explicit_permissions_override_role(self, api):
        client, users = api
        target = users["coordinator"]

        response = client.put(
            f"/api/v1/users/{target}/permissions",
            json={"permissions": ["view_schedules"]},
            headers=_as(users["admin"]),
        )
        assert response.status_code == 200
        assert response.json()["permissions"] == ["view_schedules"]

        denied = client.post("/api/v1/shift-templates", json=TEMPLATE_BODY, headers=_as(target))
        assert denied.status_code == 403

        reset = client.put(
            f"/api/v1/users/{target}/permissions",
            json={"permissions": None},
            headers=_as(users["admin"]),
        ).json()
        assert reset["permissions"] is None

    def test_facility_override(self, api):
        client, users = api
        client.put(
            f"/api/v1/users/{users['contractor']}/permissions",
            json={"permissions": ["view_schedules", "create_shifts"], "facility_id": FACILITY_ID},
            headers=_as(users["admin"]),
        )
        response = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=_as(users["contractor"])
        )
        assert response.status_code == 201

    def test_change_role_requires_manage_permissions(self, api):
        client, users = api
        denied = client.put(
            f"/api/v1/users/{users['admin']}/role",
            json={"role": "viewer"},
            headers=_as(users["coordinator"]),
        )
        assert denied.status_code == 403

        changed = client.put(
            f"/api/v1/users/{users['contractor']}/role",
            json={"role": "employee"},
            headers=_as(users["admin"]),
        ).json()
        assert changed["role"] == "employee"


class TestFacilityScopedPermissions:
    """A per-facility grant only counts at the facility the request acts on."""

    @pytest.fixture
    def scoped(self, api):
        client, users = api
        client.put(
            f"/api/v1/users/{users['contractor']}/permissions",
            json={
                "permissions": ["view_schedules", "create_shifts", "edit_shifts"],
                "facility_id": FACILITY_ID,
            },
            headers=_as(users["admin"]),
        )
        other = client.post(
            "/api/v1/shift-templates",
            json={**TEMPLATE_BODY, "facility_id": OTHER_FACILITY_ID},
            params=AS_OF,
            headers=_as(users["admin"]),
        ).json()
        return client, _as(users["contractor"]), other["template"]["template_id"]

    def test_create_uses_body_facility(self, scoped):
        client, headers, _ = scoped
        elsewhere = client.post(
            "/api/v1/shift-templates",
            json={**TEMPLATE_BODY, "facility_id": OTHER_FACILITY_ID},
            params=AS_OF,
            headers=headers,
        )
        assert elsewhere.status_code == 403

        home = client.post("/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=headers)
        assert home.status_code == 201

    def test_query_parameter_cannot_borrow_another_facility(self, scoped):
        client, headers, _ = scoped
        response = client.post(
            "/api/v1/shift-templates",
            json={**TEMPLATE_BODY, "facility_id": OTHER_FACILITY_ID},
            params={**AS_OF, "facility_id": FACILITY_ID},
            headers=headers,
        )
        assert response.status_code == 403

    def test_template_routes_use_stored_facility(self, scoped):
        client, headers, other_id = scoped
        base = f"/api/v1/shift-templates/{other_id}"

        assert client.patch(base, json={"notes": "x"}, params=AS_OF, headers=headers).status_code == 403
        assert client.post(f"{base}/regenerate", params=AS_OF, headers=headers).status_code == 403
        assert client.post(f"{base}/deactivate", params=AS_OF, headers=headers).status_code == 403
        assert client.patch(
            base, json={"notes": "x"}, params={**AS_OF, "facility_id": FACILITY_ID}, headers=headers
        ).status_code == 403

    def test_edit_at_granted_facility(self, scoped):
        client, headers, _ = scoped
        home = client.post(
            "/api/v1/shift-templates", json=TEMPLATE_BODY, params=AS_OF, headers=headers
        ).json()
        response = client.patch(
            f"/api/v1/shift-templates/{home['template']['template_id']}",
            json={"notes": "Bring badge"},
            params=AS_OF,
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["template"]["notes"] == "Bring badge"

    def test_check_needs_named_facility(self, scoped):
        client, headers, _ = scoped

        def check(body):
            return client.post("/api/v1/permissions/check", json=body, headers=headers).json()

        assert check({"permissions": ["create_shifts"]})["allowed"] is False
        assert check({"permissions": ["create_shifts"], "facility_id": FACILITY_ID})["allowed"] is True
        assert check({"permissions": ["create_shifts"], "facility_id": OTHER_FACILITY_ID})["allowed"] is False


class TestHealth:
    def test_health_reports_database(self, api):
        client, _ = api
        body = client.get("/health").json()
        assert body["status"] == "Healthy"
        assert body["version"] == "1.0.0"
        assert body["database"]["healthy"] is True
