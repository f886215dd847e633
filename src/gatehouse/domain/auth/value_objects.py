"""Immutable value objects for the Auth bounded context."""
from dataclasses import dataclass
from secrets import randbelow
from uuid import uuid4
import re

from gatehouse.domain.errors import InvalidValueError

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_CODE_PATTERN = re.compile(r"^\d{6}$")


@dataclass(frozen=True)
class Token:
    """Opaque single-use token in canonical UUID text form."""
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _UUID_PATTERN.match(self.value):
            raise InvalidValueError("Invalid token format")

    @classmethod
    def generate(cls) -> "Token":
        return cls(str(uuid4()))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VerificationCode:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _CODE_PATTERN.match(self.value):
            raise InvalidValueError("Verification code must be exactly 6 digits")

    @classmethod
    def generate(cls) -> "VerificationCode":
        return cls(str(100000 + randbelow(900000)))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ThrottleLimit:
    ttl: int    # window length in seconds
    limit: int  # requests allowed per window

    def __post_init__(self) -> None:
        if self.ttl <= 0:
            raise InvalidValueError("Throttle TTL must be positive")
        if self.limit <= 0:
            raise InvalidValueError("Throttle limit must be positive")
