from uuid import UUID, uuid4

import pytest

from gatehouse.domain.auth.value_objects import ThrottleLimit, Token, VerificationCode
from gatehouse.domain.errors import InvalidValueError
from gatehouse.domain.identity.value_objects import (
    ActionType,
    Email,
    Password,
    PasswordHash,
    PersonName,
    ResourceAction,
    ResourceType,
    parse_id,
)


class TestEmail:
    def test_accepts_valid_address(self):
        assert str(Email("a@b.com")) == "a@b.com"

    @pytest.mark.parametrize("value", ["", "no-at-sign", "a@b", "a@b.c", "@b.com"])
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidValueError):
            Email(value)

    def test_equality_is_by_value(self):
        assert Email("a@b.com") == Email("a@b.com")


class TestPassword:
    def test_accepts_strong_password(self):
        assert str(Password("Password123!")) == "Password123!"

    @pytest.mark.parametrize(
        "value,reason",
        [
            ("Pa1!", "at least 8"),
            ("PASSWORD123!", "lowercase"),
            ("password123!", "uppercase"),
            ("Password!!!!", "digit"),
            ("Password1234", "symbol"),
        ],
    )
    def test_rejects_weak_password(self, value, reason):
        with pytest.raises(InvalidValueError, match=reason):
            Password(value)

    def test_repr_hides_value(self):
        assert "Password123!" not in repr(Password("Password123!"))


def test_password_hash_cannot_be_blank():
    with pytest.raises(InvalidValueError):
        PasswordHash("   ")


class TestPersonName:
    def test_rejects_empty(self):
        with pytest.raises(InvalidValueError):
            PersonName(" ")

    def test_rejects_too_long(self):
        with pytest.raises(InvalidValueError):
            PersonName("x" * 51)

    def test_accepts_fifty_characters(self):
        assert len(str(PersonName("x" * 50))) == 50


class TestResourceAction:
    def test_builds_name(self):
        assert str(ResourceAction(ResourceType.USER, ActionType.READ)) == "user:read"

    def test_accepts_free_form_resource(self):
        assert str(ResourceAction("billing-report", "update")) == "billing-report:update"

    def test_parse_round_trips_name(self):
        ra = ResourceAction.parse("role:delete")
        assert ra.resource == "role"
        assert ra.action is ActionType.DELETE

    @pytest.mark.parametrize("name", ["user", "User:read", "user:fly", ":read"])
    def test_rejects_invalid_names(self, name):
        with pytest.raises(InvalidValueError):
            ResourceAction.parse(name)


class TestParseId:
    def test_passes_uuid_through(self):
        value = uuid4()
        assert parse_id(value) is value

    def test_parses_string(self):
        value = uuid4()
        assert parse_id(str(value)) == value

    def test_rejects_garbage(self):
        with pytest.raises(InvalidValueError):
            parse_id("not-a-uuid")


class TestAuthValueObjects:
    def test_generated_token_is_uuid(self):
        token = Token.generate()
        assert UUID(str(token))

    def test_token_rejects_non_uuid(self):
        with pytest.raises(InvalidValueError):
            Token("abc")

    def test_generated_code_has_six_digits(self):
        for _ in range(50):
            code = str(VerificationCode.generate())
            assert len(code) == 6 and code.isdigit()

    @pytest.mark.parametrize("code", ["12345", "1234567", "12a456", ""])
    def test_code_rejects_bad_format(self, code):
        with pytest.raises(InvalidValueError):
            VerificationCode(code)

    @pytest.mark.parametrize("ttl,limit", [(0, 1), (1, 0), (-5, 10)])
    def test_throttle_limit_requires_positive_values(self, ttl, limit):
        with pytest.raises(InvalidValueError):
            ThrottleLimit(ttl=ttl, limit=limit)
