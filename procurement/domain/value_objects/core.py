"""Domain value objects for the procurement tracker.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import ClassVar

from procurement.domain.enums import Capability, RoleCode

_REQUEST_REF_RE = re.compile(r"^REQ-(\d{8})-(\d{4,})$")
_COMBINED_REF_RE = re.compile(r"^CMB-\d{14}$")


@dataclass(frozen=True)
class RequestReference:
    """Human-readable request reference REQ-YYYYMMDD-NNNN.

    NNNN is the zero-padded per-day sequence; it widens past 9999
    instead of wrapping.
    """

    value: str

    PREFIX: ClassVar[str] = "REQ"

    def __post_init__(self) -> None:
        if not _REQUEST_REF_RE.match(self.value):
            raise ValueError(
                f"Request reference must look like REQ-YYYYMMDD-NNNN, got {self.value!r}"
            )

    @classmethod
    def build(cls, period: str, sequence: int) -> "RequestReference":
        """Build a reference from a YYYYMMDD period and a positive sequence."""
        if sequence < 1:
            raise ValueError("Reference sequence must be positive")
        return cls(f"{cls.PREFIX}-{period}-{sequence:04d}")

    @staticmethod
    def period_for(moment: datetime) -> str:
        """Return the YYYYMMDD sequence period for a UTC moment."""
        return moment.strftime("%Y%m%d")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CombinedReference:
    """Combined request reference CMB-YYYYMMDDHHmmss (UTC, second resolution)."""

    value: str

    def __post_init__(self) -> None:
        if not _COMBINED_REF_RE.match(self.value):
            raise ValueError(
                f"Combined reference must look like CMB-YYYYMMDDHHmmss, got {self.value!r}"
            )

    @classmethod
    def from_timestamp(cls, moment: datetime) -> "CombinedReference":
        return cls(f"CMB-{moment.strftime('%Y%m%d%H%M%S')}")

    @property
    def moment(self) -> datetime:
        """UTC second encoded in the reference."""
        return datetime.strptime(self.value[4:], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)

    def next(self) -> "CombinedReference":
        """Reference for the following second."""
        return CombinedReference.from_timestamp(self.moment + timedelta(seconds=1))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Actor:
    """Resolved caller: identity, department and capabilities.

    Built once per HTTP request by the auth dependency; the core never
    looks at role names directly, only at capabilities.
    """

    user_id: int
    department_id: int | None
    role_codes: frozenset[RoleCode] = field(default_factory=frozenset)
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    def can(self, capability: Capability) -> bool:
        """Return whether the actor holds the capability."""
        return capability in self.capabilities

    @property
    def is_admin(self) -> bool:
        return RoleCode.ADMIN in self.role_codes
