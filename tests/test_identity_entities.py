from dataclasses import replace
from datetime import timedelta

import pytest

from gatehouse.domain.errors import (
    CannotDeleteDefaultRoleError,
    InactiveUserError,
    InvalidValueError,
    PermissionAlreadyAssignedError,
    UserAlreadyHasRoleError,
    UserCannotRemoveLastRoleError,
    UserNotEligibleForRoleError,
)
from gatehouse.domain.identity.entities import Role, User
from gatehouse.domain.identity.value_objects import Email, PasswordHash, PersonName

from fakes import make_permission


def make_user(*roles: Role, **overrides) -> User:
    user = User.create(
        Email(overrides.pop("email", "jane@example.com")),
        PasswordHash("$argon2id$fake"),
        PersonName("Jane"),
        PersonName("Doe"),
    )
    return replace(user, roles=roles, **overrides) if roles or overrides else user


@pytest.fixture(name="member_role")
def member_role_fixture() -> Role:
    role = Role.create("member", "Regular member", is_default=True)
    role.add_permission(make_permission("user:read"))
    return role


@pytest.fixture(name="admin_role")
def admin_role_fixture() -> Role:
    role = Role.create("admin", "Administrators")
    role.add_permissions_on_creation([make_permission("user:create"), make_permission("role:update")])
    return role


class TestRole:
    def test_rejects_blank_name(self):
        with pytest.raises(InvalidValueError):
            Role.create("  ", "Something")

    def test_rejects_long_description(self):
        with pytest.raises(InvalidValueError):
            Role.create("editor", "x" * 501)

    def test_add_permission_bumps_updated_at(self):
        role = Role.create("editor", "Editors")
        before = role.updated_at
        role.add_permission(make_permission("storage:read"))
        assert role.has_permission_named("storage:read")
        assert role.updated_at >= before

    def test_add_same_permission_twice_fails(self):
        role = Role.create("editor", "Editors")
        permission = make_permission("storage:read")
        role.add_permission(permission)
        with pytest.raises(PermissionAlreadyAssignedError):
            role.add_permission(permission)

    def test_add_permission_with_duplicate_name_fails(self):
        role = Role.create("editor", "Editors")
        role.add_permission(make_permission("storage:read"))
        with pytest.raises(PermissionAlreadyAssignedError):
            role.add_permission(make_permission("storage:read"))

    def test_non_admin_role_cannot_receive_admin_permission(self):
        role = Role.create("editor", "Editors")
        with pytest.raises(PermissionAlreadyAssignedError):
            role.add_permission(make_permission("user:delete"))

    def test_admin_role_can_receive_admin_permission(self, admin_role):
        admin_role.add_permission(make_permission("role:delete"))
        assert admin_role.has_permission_named("role:delete")

    def test_creation_bypasses_assignment_rules(self):
        role = Role.create("ops", "Operations")
        role.add_permissions_on_creation([make_permission("user:delete")])
        assert role.is_admin_role()

    def test_remove_missing_permission_is_noop(self):
        role = Role.create("editor", "Editors")
        before = role.updated_at
        role.remove_permission(make_permission("storage:read").id)
        assert role.updated_at == before

    def test_remove_permission(self, member_role):
        permission = member_role.permissions[0]
        member_role.remove_permission(permission.id)
        assert member_role.permissions == ()

    def test_is_admin_role_by_name(self):
        assert Role.create("Site Administrator", "Runs the site").is_admin_role()
        assert not Role.create("viewer", "Read only").is_admin_role()

    def test_default_role_cannot_be_deleted(self, member_role):
        with pytest.raises(CannotDeleteDefaultRoleError):
            member_role.validate_for_deletion()

    def test_set_and_remove_default_are_idempotent(self):
        role = Role.create("viewer", "Read only")
        role.remove_as_default()
        assert not role.is_default
        role.set_as_default()
        role.set_as_default()
        assert role.is_default

    def test_permissions_are_a_snapshot(self, member_role):
        snapshot = member_role.permissions
        member_role.add_permission(make_permission("storage:read"))
        assert len(snapshot) == 1
        assert len(member_role.permissions) == 2


class TestUser:
    def test_create_sets_matching_timestamps(self):
        user = make_user()
        assert user.created_at == user.updated_at
        assert user.is_active
        assert user.roles == ()

    def test_two_factor_secret_requires_enabled_flag(self):
        with pytest.raises(InvalidValueError):
            make_user(otp_secret="ABC")

    def test_enabled_two_factor_requires_secret(self):
        with pytest.raises(InvalidValueError):
            make_user(otp_enabled=True)

    def test_updated_before_created_is_rejected(self):
        user = make_user()
        with pytest.raises(InvalidValueError):
            replace(user, updated_at=user.created_at - timedelta(seconds=1))

    def test_add_role(self, member_role):
        user = make_user()
        user.add_role(member_role)
        assert user.has_role(member_role.id)
        assert user.has_permission("user:read")

    def test_add_role_twice_fails(self, member_role):
        user = make_user(member_role)
        with pytest.raises(UserAlreadyHasRoleError):
            user.add_role(member_role)

    def test_inactive_user_cannot_receive_role(self, member_role):
        user = make_user(is_active=False)
        with pytest.raises(InactiveUserError):
            user.add_role(member_role)

    def test_regular_user_cannot_be_promoted_to_admin(self, member_role, admin_role):
        user = make_user(member_role)
        with pytest.raises(UserNotEligibleForRoleError):
            user.add_role(admin_role)

    def test_admin_can_receive_another_admin_role(self, admin_role):
        user = make_user(admin_role)
        user.add_role(Role.create("super admin", "Everything"))
        assert len(user.roles) == 2

    def test_cannot_remove_last_role(self, member_role):
        user = make_user(member_role)
        with pytest.raises(UserCannotRemoveLastRoleError):
            user.remove_role(member_role.id)

    def test_remove_role_not_held_is_noop(self, member_role, admin_role):
        user = make_user(member_role)
        before = user.updated_at
        user.remove_role(admin_role.id)
        assert user.updated_at == before

    def test_remove_role(self, member_role):
        other = Role.create("viewer", "Read only")
        user = make_user(member_role, other)
        user.remove_role(other.id)
        assert [r.name for r in user.roles] == ["member"]

    def test_deactivate_is_idempotent(self):
        user = make_user()
        user.deactivate()
        stamp = user.updated_at
        user.deactivate()
        assert not user.is_active
        assert user.updated_at == stamp

    def test_inactive_user_cannot_change_profile(self):
        user = make_user(is_active=False)
        with pytest.raises(InactiveUserError):
            user.update_profile(PersonName("June"))
        with pytest.raises(InactiveUserError):
            user.change_email(Email("june@example.com"))
        with pytest.raises(InactiveUserError):
            user.change_password(PasswordHash("$argon2id$other"))

    def test_update_profile_without_changes_keeps_timestamp(self):
        user = make_user()
        before = user.updated_at
        user.update_profile(PersonName("Jane"), PersonName("Doe"))
        assert user.updated_at == before

    def test_two_factor_round_trip(self):
        user = make_user()
        user.enable_two_factor("JBSWY3DPEHPK3PXP")
        assert user.otp_enabled and user.otp_secret
        user.disable_two_factor()
        assert not user.otp_enabled and user.otp_secret is None

    def test_enable_two_factor_rejects_blank_secret(self):
        with pytest.raises(InvalidValueError):
            make_user().enable_two_factor(" ")

    def test_record_login(self):
        user = make_user()
        user.record_login()
        assert user.last_login_at is not None

    def test_roles_are_a_snapshot(self, member_role):
        user = make_user(member_role)
        snapshot = user.roles
        user.add_role(Role.create("viewer", "Read only"))
        assert len(snapshot) == 1
