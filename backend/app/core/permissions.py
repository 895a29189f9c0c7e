from __future__ import annotations

from enum import Enum

from app.models.user import UserRole


class Capability(str, Enum):
    manage_schedules = "manage_schedules"
    view_all_schedules = "view_all_schedules"
    view_own_schedule = "view_own_schedule"
    view_conflict_report = "view_conflict_report"
    manage_reference_data = "manage_reference_data"


_STAFF_CAPABILITIES = frozenset(
    {
        Capability.manage_schedules,
        Capability.view_all_schedules,
        Capability.view_conflict_report,
        Capability.manage_reference_data,
    }
)

ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.teacher: frozenset({Capability.view_own_schedule}),
    UserRole.principal: _STAFF_CAPABILITIES,
    UserRole.super_admin: _STAFF_CAPABILITIES,
}


def has_capability(role: UserRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())
