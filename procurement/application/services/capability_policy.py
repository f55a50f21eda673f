"""Resolve capabilities from role codes.

Role membership is exact; capabilities are computed once per caller and
carried on the Actor. Unknown role strings are ignored.
"""

from collections.abc import Iterable
from types import MappingProxyType

from procurement.domain.enums import Capability, RoleCode
from procurement.domain.value_objects.core import Actor

ROLE_CAPABILITIES: MappingProxyType[RoleCode, frozenset[Capability]] = MappingProxyType(
    {
        RoleCode.ADMIN: frozenset(Capability),
        RoleCode.REQUESTER: frozenset(),
        RoleCode.DEPARTMENT_HEAD: frozenset({Capability.REVIEW_DEPARTMENT}),
        RoleCode.HEAD_OF_DIVISION: frozenset({Capability.REVIEW_DIVISION}),
        RoleCode.EXECUTIVE_DIRECTOR: frozenset({Capability.REVIEW_EXECUTIVE}),
        RoleCode.PROCUREMENT_OFFICER: frozenset(
            {
                Capability.REVIEW_PROCUREMENT,
                Capability.COMBINE_REQUESTS,
                Capability.COMBINE_ACROSS_DEPARTMENTS,
                Capability.RECEIVE_THRESHOLD_ALERTS,
            }
        ),
        RoleCode.PROCUREMENT_MANAGER: frozenset(
            {
                Capability.REVIEW_PROCUREMENT,
                Capability.COMBINE_REQUESTS,
                Capability.COMBINE_ACROSS_DEPARTMENTS,
                Capability.RECEIVE_THRESHOLD_ALERTS,
            }
        ),
        RoleCode.FINANCE_OFFICER: frozenset({Capability.REVIEW_FINANCE}),
        RoleCode.FINANCE_MANAGER: frozenset(
            {Capability.REVIEW_FINANCE, Capability.ACT_AS_FINANCE_MANAGER}
        ),
        RoleCode.BUDGET_MANAGER: frozenset({Capability.ACT_AS_FINANCE_MANAGER}),
        RoleCode.INNOVATION_COMMITTEE: frozenset({Capability.REVIEW_IDEAS}),
    }
)


def parse_role_codes(raw: Iterable[str]) -> frozenset[RoleCode]:
    """Return the known role codes among raw strings (exact match)."""
    known = set(RoleCode.values())
    return frozenset(RoleCode(code) for code in raw if code in known)


def resolve_capabilities(role_codes: Iterable[RoleCode]) -> frozenset[Capability]:
    """Union of the capabilities granted by each role."""
    granted: set[Capability] = set()
    for code in role_codes:
        granted |= ROLE_CAPABILITIES.get(code, frozenset())
    return frozenset(granted)


def build_actor(
    user_id: int,
    department_id: int | None,
    raw_role_codes: Iterable[str],
) -> Actor:
    """Build an Actor with capabilities resolved from its role codes."""
    roles = parse_role_codes(raw_role_codes)
    return Actor(
        user_id=user_id,
        department_id=department_id,
        role_codes=roles,
        capabilities=resolve_capabilities(roles),
    )


def roles_with(capability: Capability) -> frozenset[RoleCode]:
    """Role codes that grant the capability (used to pick notification recipients)."""
    return frozenset(code for code, caps in ROLE_CAPABILITIES.items() if capability in caps)
