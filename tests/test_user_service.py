import pytest

from gatehouse.domain.errors import (
    AuthenticationError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    ForbiddenActionError,
    InvalidValueError,
    UserCannotRemoveLastRoleError,
    UserNotEligibleForRoleError,
)
from gatehouse.domain.identity.entities import Role
from gatehouse.infrastructure.auth.password import verify_password

from fakes import store_admin


@pytest.fixture(name="users")
def users_fixture(facade):
    return facade.users


async def test_register_and_validate_credentials(users, roles):
    _, default_role = roles
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")

    assert [r.id for r in user.roles] == [default_role.id]
    assert str(user.password_hash) != "Password123!"

    found = await users.validate_credentials("a@b.com", "Password123!")
    assert found is not None and found.id == user.id
    assert await users.validate_credentials("a@b.com", "WrongPass1!") is None
    assert await users.validate_credentials("nobody@b.com", "Password123!") is None
    assert await users.validate_credentials("not-an-email", "Password123!") is None


async def test_create_without_default_role_leaves_user_roleless(users):
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    assert user.roles == ()


async def test_duplicate_email_is_rejected(users):
    await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    with pytest.raises(EntityAlreadyExistsError):
        await users.create_user("a@b.com", "Password123!", "Other", "Person")


async def test_weak_password_is_rejected(users):
    with pytest.raises(InvalidValueError):
        await users.create_user("a@b.com", "short", "Ada", "Byron")


async def test_inactive_user_cannot_log_in(users, roles):
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    await users.deactivate_user(user.id)
    assert await users.validate_credentials("a@b.com", "Password123!") is None


async def test_update_details_changes_profile_and_email(users, roles):
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    updated = await users.update_user_details(user.id, first_name="Augusta", email="ada@b.com")
    assert str(updated.first_name) == "Augusta"
    assert str(updated.email) == "ada@b.com"


async def test_update_details_rejects_taken_email(users, roles):
    await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    other = await users.create_user("c@d.com", "Password123!", "Charles", "Babbage")
    with pytest.raises(EntityAlreadyExistsError):
        await users.update_user_details(other.id, email="a@b.com")


async def test_role_swap_adds_before_removing(users, roles, backend):
    _, default_role = roles
    editor = Role.create("editor", "Editors")
    await backend.roles.save(editor)
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")

    updated = await users.update_user_details(user.id, role_ids=[editor.id])
    assert [r.id for r in updated.roles] == [editor.id]
    assert not updated.has_role(default_role.id)


async def test_empty_role_list_hits_last_role_rule(users, roles):
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    with pytest.raises(UserCannotRemoveLastRoleError):
        await users.update_user_details(user.id, role_ids=[])


async def test_reactivation_and_edit_in_one_call(users, roles):
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    await users.deactivate_user(user.id)
    updated = await users.update_user_details(user.id, is_active=True, last_name="King")
    assert updated.is_active
    assert str(updated.last_name) == "King"


async def test_change_password_checks_current(users, roles):
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    with pytest.raises(AuthenticationError):
        await users.change_password(user.id, "NewPassword1!", current_password="nope")

    updated = await users.change_password(user.id, "NewPassword1!", current_password="Password123!")
    assert verify_password("NewPassword1!", updated.password_hash)
    assert await users.verify_current_password(user.id, "NewPassword1!")


async def test_regular_user_cannot_be_given_admin_role(users, roles):
    admin_role, _ = roles
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    with pytest.raises(UserNotEligibleForRoleError):
        await users.assign_role_to_user(user.id, admin_role.id)


async def test_assigner_must_be_authorized(users, roles, backend):
    editor = Role.create("editor", "Editors")
    await backend.roles.save(editor)
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    peer = await users.create_user("c@d.com", "Password123!", "Charles", "Babbage")

    with pytest.raises(ForbiddenActionError):
        await users.assign_role_to_user(user.id, editor.id, assigner_id=peer.id)


async def test_admin_assigns_role(users, roles, admin, backend):
    editor = Role.create("editor", "Editors")
    await backend.roles.save(editor)
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")

    updated = await users.assign_role_to_user(user.id, editor.id, assigner_id=admin.id)
    assert updated.has_role(editor.id)
    stored = await backend.users.get_by_id(user.id)
    assert stored.has_role(editor.id)


async def test_role_list_update_checks_assigner(users, roles, backend):
    admin_role, _ = roles
    read = await backend.permissions.get_by_name("user:read")
    support = Role.create("support-admin", "Support staff")
    support.add_permissions_on_creation([read])
    await backend.roles.save(support)
    helper = await store_admin(backend, support, email="support@example.com")

    with pytest.raises(ForbiddenActionError):
        await users.update_user_details(helper.id, role_ids=[support.id, admin_role.id], assigner_id=helper.id)
    stored = await backend.users.get_by_id(helper.id)
    assert [r.name for r in stored.roles] == ["support-admin"]


async def test_role_list_update_by_admin(users, roles, admin, backend):
    editor = Role.create("editor", "Editors")
    await backend.roles.save(editor)
    user = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")

    updated = await users.update_user_details(user.id, role_ids=[editor.id], assigner_id=admin.id)
    assert [r.name for r in updated.roles] == ["editor"]


async def test_list_and_delete(users, roles):
    first = await users.create_user("a@b.com", "Password123!", "Ada", "Byron")
    await users.create_user("c@d.com", "Password123!", "Charles", "Babbage")

    page, total = await users.list_users(limit=1)
    assert total == 2
    assert len(page) == 1

    await users.delete_user(first.id)
    with pytest.raises(EntityNotFoundError):
        await users.get_user(first.id)
