from dataclasses import replace

import pytest

from gatehouse.domain.errors import InvalidValueError
from gatehouse.domain.identity import specifications as specs
from gatehouse.domain.identity.authorization import UserAuthorizationService
from gatehouse.domain.identity.collections import PermissionsCollection, RolesCollection
from gatehouse.domain.identity.entities import Role, User
from gatehouse.domain.identity.value_objects import Email, PasswordHash, PersonName
from gatehouse.domain.specification import Specification

from fakes import make_permission


def _user(*roles: Role, **changes) -> User:
    user = User.create(Email("sam@example.com"), PasswordHash("$argon2id$x"), PersonName("Sam"), PersonName("Lee"))
    return replace(user, roles=roles, **changes)


def _role(name: str, *permission_names: str, is_default: bool = False) -> Role:
    role = Role.create(name, f"{name} role", is_default=is_default)
    role.add_permissions_on_creation([make_permission(n) for n in permission_names])
    return role


class TestPermissionsCollection:
    def test_rejects_duplicate_ids(self):
        permission = make_permission("user:read")
        with pytest.raises(InvalidValueError):
            PermissionsCollection([permission, permission])

    def test_rejects_duplicate_names(self):
        with pytest.raises(InvalidValueError):
            PermissionsCollection([make_permission("user:read"), make_permission("user:read")])

    def test_add_returns_new_collection(self):
        empty = PermissionsCollection()
        grown = empty.add(make_permission("user:read"))
        assert len(empty) == 0
        assert grown.names() == ["user:read"]

    def test_remove_missing_returns_same_collection(self):
        collection = PermissionsCollection([make_permission("user:read")])
        assert collection.remove(make_permission("user:read").id) is collection

    def test_filters_and_queries(self):
        collection = PermissionsCollection(
            make_permission(n) for n in ("user:read", "user:update", "storage:read")
        )
        assert collection.filter_by_resource("user").names() == ["user:read", "user:update"]
        assert collection.filter_by_action("read").names() == ["user:read", "storage:read"]
        assert collection.resources() == ["user", "storage"]
        assert collection.allows_access("storage", "read")
        assert not collection.allows_access("storage", "delete")
        assert collection.has_admin_permissions()

    def test_merge_and_intersect(self):
        shared = make_permission("user:read")
        left = PermissionsCollection([shared, make_permission("storage:read")])
        right = PermissionsCollection([shared])
        assert len(left.merge(right)) == 2
        assert left.intersect(right).names() == ["user:read"]

    def test_equality_ignores_order(self):
        a, b = make_permission("user:read"), make_permission("role:read")
        assert PermissionsCollection([a, b]) == PermissionsCollection([b, a])


class TestRolesCollection:
    def test_rejects_two_default_roles(self):
        with pytest.raises(InvalidValueError):
            RolesCollection([_role("a", is_default=True), _role("b", is_default=True)])

    def test_rejects_case_insensitive_duplicate_names(self):
        with pytest.raises(InvalidValueError):
            RolesCollection([_role("Editor"), _role("editor")])

    def test_all_permissions_deduplicates_by_name(self):
        collection = RolesCollection([_role("a", "user:read"), _role("b", "user:read", "storage:read")])
        assert sorted(collection.all_permissions().names()) == ["storage:read", "user:read"]

    def test_sort_by_privilege(self):
        collection = RolesCollection([
            _role("viewer", is_default=True),
            _role("editor"),
            _role("admin", "user:delete"),
        ])
        assert collection.sort_by_privilege().names() == ["admin", "editor", "viewer"]

    @pytest.mark.parametrize(
        "roles,level",
        [
            ((), "guest"),
            ((("viewer",),), "user"),
            ((("ops", "user:update"),), "admin"),
            ((("root", "role:delete"),), "superadmin"),
        ],
    )
    def test_highest_privilege_level(self, roles, level):
        collection = RolesCollection(_role(*spec) for spec in roles)
        assert collection.highest_privilege_level() == level

    def test_lookup_helpers(self):
        default = _role("viewer", is_default=True)
        collection = RolesCollection([default, _role("admin", "role:update")])
        assert collection.default_role() is default
        assert collection.get_by_name("VIEWER") is default
        assert collection.admin_roles().names() == ["admin"]
        assert collection.deletable_roles().names() == ["admin"]


class TestSpecification:
    def test_combinators(self):
        positive = Specification(lambda n: n > 0, "positive")
        even = Specification(lambda n: n % 2 == 0, "even")
        assert (positive & even)(4)
        assert not (positive & even)(3)
        assert (positive | even)(-2)
        assert (~positive)(-1)
        assert (positive & ~even).name == "(positive and not even)"


class TestUserSpecifications:
    def test_complete_account_needs_a_role(self):
        assert not specs.complete_user_account.is_satisfied_by(_user())
        assert specs.complete_user_account.is_satisfied_by(_user(_role("viewer")))

    def test_can_assign_role(self):
        admin_role = _role("admin", "user:create")
        assert not specs.can_assign_role(admin_role).is_satisfied_by(_user(_role("viewer")))
        assert specs.can_assign_role(_role("editor")).is_satisfied_by(_user(_role("viewer")))
        assert not specs.can_assign_role(_role("editor")).is_satisfied_by(_user(is_active=False))

    def test_admin_eligibility_needs_an_admin_role(self):
        assert not specs.eligible_for_admin_role.is_satisfied_by(_user(_role("viewer", "user:read")))
        assert specs.eligible_for_admin_role.is_satisfied_by(_user(_role("support-admin", "user:read")))
        assert not specs.eligible_for_admin_role.is_satisfied_by(_user(_role("admin"), is_active=False))

    def test_can_assign_permission_to_role(self):
        admin_permission = make_permission("role:delete")
        assert not specs.can_assign_permission_to_role(admin_permission).is_satisfied_by(_role("viewer"))
        assert specs.can_assign_permission_to_role(admin_permission).is_satisfied_by(_role("admins"))


class TestAuthorizationService:
    service = UserAuthorizationService()

    def test_admin_features_need_active_complete_admin(self):
        admin_role = _role("admin", "user:create")
        assert self.service.can_access_admin_features(_user(admin_role))
        assert not self.service.can_access_admin_features(_user(admin_role, is_active=False))
        assert not self.service.can_access_admin_features(_user(_role("viewer")))

    def test_sensitive_operations_need_two_factor(self):
        user = _user(_role("viewer"))
        assert not self.service.can_perform_sensitive_operations(user)
        user.enable_two_factor("JBSWY3DPEHPK3PXP")
        assert self.service.can_perform_sensitive_operations(user)

    def test_assigning_admin_role_needs_role_update(self):
        target = _user(_role("admin", "user:create"))
        new_admin_role = _role("super admin")
        without = _user(_role("admin", "user:create"))
        with_perm = _user(_role("admin", "user:create", "role:update"))
        assert not self.service.can_assign_role(without, target, new_admin_role)
        assert self.service.can_assign_role(with_perm, target, new_admin_role)

    def test_assigning_plain_role_needs_admin_access(self):
        target = _user(_role("viewer"))
        assert self.service.can_assign_role(_user(_role("admin", "user:create")), target, _role("editor"))
        assert not self.service.can_assign_role(_user(_role("viewer")), target, _role("editor"))

    def test_delete_role_needs_role_delete_and_non_default(self):
        deleter = _user(_role("admin", "role:delete"))
        assert self.service.can_delete_role(deleter, _role("editor"))
        assert not self.service.can_delete_role(deleter, _role("viewer", is_default=True))
        assert not self.service.can_delete_role(_user(_role("admin", "user:create")), _role("editor"))

    def test_can_access_resource(self):
        user = _user(_role("viewer", "storage:read"))
        assert self.service.can_access_resource(user, "storage", "read")
        assert not self.service.can_access_resource(user, "storage", "delete")
