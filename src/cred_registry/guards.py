"""
Guards — the checks every mutating operation runs before touching state.

Each guard returns Result: the checked value on success, or the matching
rejection on the failure track. Chained with flat_map, the first failing
guard short-circuits the rest of the transition.

    require_role(state, caller, Role.OWNER)
        .flat_map(lambda _: require_principal(principal, "principal"))
        .flat_map(lambda _: require_text(name, "name"))
"""

from __future__ import annotations

from enum import Enum, unique

from railway import ResultFailures
from railway.result import Result

from cred_registry.domain.models import Principal, is_null_principal
from cred_registry.state import RegistryState


@unique
class Role(Enum):
    OWNER = "owner"
    INSTITUTION = "institution"


def require_role(state: RegistryState, caller: Principal, role: Role) -> Result[Principal]:
    """
    Admit the caller only if it currently holds `role`.

    OWNER means the caller is the registry's current owner.
    INSTITUTION means the caller is an authorized institution.
    """
    if is_null_principal(caller):
        return ResultFailures.unauthorized("Caller identity is required")
    match role:
        case Role.OWNER:
            allowed = caller == state.owner
        case Role.INSTITUTION:
            allowed = state.is_authorized(caller)
    if not allowed:
        return ResultFailures.unauthorized(f"Caller {caller} lacks the {role.value} role")
    return Result.success(caller)


def require_principal(principal: Principal | None, field: str) -> Result[Principal]:
    """Reject the null identity."""
    if is_null_principal(principal):
        return ResultFailures.invalid_argument(f"{field} must not be the null principal")
    return Result.success(principal)


def require_text(value: str | None, field: str) -> Result[str]:
    """Reject missing or blank text."""
    if value is None or not value.strip():
        return ResultFailures.invalid_argument(f"{field} must not be empty")
    return Result.success(value)
