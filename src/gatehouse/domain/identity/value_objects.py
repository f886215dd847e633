"""Immutable value objects for the Identity bounded context."""
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID
import re

from gatehouse.domain.errors import InvalidValueError

PASSWORD_MIN_LENGTH = 8
PASSWORD_SYMBOLS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?~`"
NAME_MAX_LENGTH = 50

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")
_RESOURCE_PATTERN = re.compile(r"^[a-z0-9-]+$")


def parse_id(value: UUID | str) -> UUID:
    """Coerce an identifier to UUID, raising InvalidValueError on bad input."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise InvalidValueError(f"Invalid identifier: {value}") from None


@dataclass(frozen=True)
class Email:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _EMAIL_PATTERN.match(self.value):
            raise InvalidValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, repr=False)
class Password:
    """A raw password as typed by the user. Validated once, hashed, then dropped."""
    value: str

    def __post_init__(self) -> None:
        v = self.value or ""
        if len(v) < PASSWORD_MIN_LENGTH:
            raise InvalidValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        if not any(c.islower() for c in v):
            raise InvalidValueError("Password must contain a lowercase letter")
        if not any(c.isupper() for c in v):
            raise InvalidValueError("Password must contain an uppercase letter")
        if not any(c.isdigit() for c in v):
            raise InvalidValueError("Password must contain a digit")
        if not any(c in PASSWORD_SYMBOLS for c in v):
            raise InvalidValueError("Password must contain a symbol")

    def __repr__(self) -> str:
        return "Password('********')"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PasswordHash:
    """Opaque wrapper for the hashed password string, never the raw password."""
    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise InvalidValueError("Password hash cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PersonName:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidValueError("Name cannot be empty")
        if len(self.value) > NAME_MAX_LENGTH:
            raise InvalidValueError(f"Name cannot exceed {NAME_MAX_LENGTH} characters")

    def __str__(self) -> str:
        return self.value


class ResourceType(StrEnum):
    USER = "user"
    ROLE = "role"
    STORAGE = "storage"
    AUDIT = "audit"


class ActionType(StrEnum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ResourceAction:
    """The atomic unit of permission: an action on a resource."""
    resource: str
    action: ActionType

    def __post_init__(self) -> None:
        resource = str(self.resource) if isinstance(self.resource, ResourceType) else self.resource
        if not isinstance(resource, str) or not _RESOURCE_PATTERN.match(resource):
            raise InvalidValueError(f"Invalid resource name: {self.resource!r}")
        try:
            action = ActionType(self.action)
        except ValueError:
            raise InvalidValueError(f"Invalid action type: {self.action!r}") from None
        object.__setattr__(self, "resource", resource)
        object.__setattr__(self, "action", action)

    @classmethod
    def parse(cls, name: str) -> "ResourceAction":
        """Build from a ``resource:action`` permission name."""
        resource, sep, action = (name or "").partition(":")
        if not sep:
            raise InvalidValueError(f"Invalid permission name: {name!r}")
        return cls(resource, action)

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"
