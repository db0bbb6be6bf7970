"""
Tests: Permission Resolution
=================================
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.db.models import Permission, Role
from app.db.schemas import AccessMode, PermissionSource
from app.services.v1 import (
    NAV_ITEMS,
    ROLE_TEMPLATES,
    PermissionSubject,
    can_access_page,
    effective_permissions,
    parse_permissions,
    resolve,
    visible_nav_items,
)

P = Permission


def _user(role: str = "viewer", permissions=None, facility_permissions=None):
    return SimpleNamespace(
        role=role,
        permissions=permissions,
        facility_permissions=facility_permissions,
    )


class TestEmptyRequirement:
    @pytest.mark.parametrize("role", [r.value for r in Role] + ["legacy_manager"])
    @pytest.mark.parametrize("mode", list(AccessMode))
    def test_empty_required_set_always_allows(self, role, mode):
        subject = PermissionSubject(role=role, explicit_permissions=frozenset())
        assert resolve(subject, [], mode) is True
        assert resolve(PermissionSubject(role=role), set(), mode) is True


class TestEffectivePermissions:
    def test_role_template_when_no_explicit_set(self):
        subject = PermissionSubject(role=Role.SCHEDULING_COORDINATOR.value)
        assert effective_permissions(subject) == ROLE_TEMPLATES[Role.SCHEDULING_COORDINATOR]

    def test_explicit_set_replaces_role_template(self):
        subject = PermissionSubject(
            role=Role.FACILITY_ADMIN.value,
            explicit_permissions=frozenset({P.VIEW_SCHEDULES}),
        )
        assert resolve(subject, [P.VIEW_SCHEDULES]) is True
        # facility_admin's template has it, the explicit set does not
        assert resolve(subject, [P.CREATE_SHIFTS]) is False

    def test_explicit_empty_grant_denies(self):
        subject = PermissionSubject.from_user(_user(role="facility_admin", permissions=[]))
        assert subject.source == PermissionSource.EXPLICIT
        assert resolve(subject, [P.VIEW_SCHEDULES]) is False

    def test_unknown_role_fails_closed(self):
        subject = PermissionSubject(role="regional_overlord")
        assert effective_permissions(subject) == frozenset()
        assert resolve(subject, [P.VIEW_SCHEDULES]) is False

    def test_super_admin_holds_every_permission(self):
        subject = PermissionSubject(role=Role.SUPER_ADMIN.value)
        assert resolve(subject, list(Permission), AccessMode.ALL) is True

    def test_every_role_has_a_template(self):
        assert set(ROLE_TEMPLATES) == set(Role)


class TestModes:
    def test_any_needs_one_overlap(self):
        subject = PermissionSubject(role=Role.CONTRACTOR.value)
        assert resolve(subject, [P.VIEW_SCHEDULES, P.VIEW_BILLING], AccessMode.ANY) is True
        assert resolve(subject, [P.VIEW_BILLING, P.EDIT_RATES], AccessMode.ANY) is False

    def test_all_needs_subset(self):
        subject = PermissionSubject(role=Role.BILLING.value)
        assert resolve(subject, [P.VIEW_BILLING, P.APPROVE_INVOICES], AccessMode.ALL) is True
        assert resolve(subject, [P.VIEW_BILLING, P.CREATE_SHIFTS], AccessMode.ALL) is False


class TestFromUser:
    def test_stored_unknown_tags_are_ignored(self):
        user = _user(permissions=["view_schedules", "launch_rockets"])
        subject = PermissionSubject.from_user(user)
        assert subject.explicit_permissions == frozenset({P.VIEW_SCHEDULES})

    def test_facility_override_wins(self):
        user = _user(
            role="viewer",
            permissions=["view_schedules"],
            facility_permissions={"fac-2": ["create_shifts", "view_schedules"]},
        )
        scoped = PermissionSubject.from_user(user, facility_id="fac-2")
        assert scoped.source == PermissionSource.FACILITY
        assert resolve(scoped, [P.CREATE_SHIFTS]) is True

        other = PermissionSubject.from_user(user, facility_id="fac-1")
        assert other.source == PermissionSource.EXPLICIT
        assert resolve(other, [P.CREATE_SHIFTS]) is False

    def test_no_override_uses_role(self):
        subject = PermissionSubject.from_user(_user(role="employee"))
        assert subject.source == PermissionSource.ROLE_TEMPLATE
        assert subject.explicit_permissions is None
        assert resolve(subject, [P.VIEW_FACILITY_PROFILE]) is True

    def test_parse_permissions_handles_none(self):
        assert parse_permissions(None) == frozenset()


class TestPagesAndNavigation:
    def test_unknown_page_is_accessible(self):
        subject = PermissionSubject(role="legacy", explicit_permissions=frozenset())
        assert can_access_page(subject, "help-center") is True

    def test_known_page_uses_any_mode(self):
        subject = PermissionSubject(role=Role.CONTRACTOR.value)
        assert can_access_page(subject, "dashboard") is True
        assert can_access_page(subject, "billing") is False

    def test_nav_items_follow_resolver(self):
        subject = PermissionSubject(role=Role.CONTRACTOR.value)
        keys = {item.key for item in visible_nav_items(subject)}
        assert "schedule" in keys
        assert "messaging" in keys  # ungated
        assert "billing" not in keys

    def test_super_admin_sees_everything(self):
        subject = PermissionSubject(role=Role.SUPER_ADMIN.value)
        assert visible_nav_items(subject) == list(NAV_ITEMS)

    def test_nobody_loses_ungated_items(self):
        subject = PermissionSubject(role="unknown", explicit_permissions=frozenset())
        assert [item.key for item in visible_nav_items(subject)] == [
            item.key for item in NAV_ITEMS if not item.permissions
        ]
