"""Resource ownership rules for mutating operations."""

from typing import Literal

from app.errors import ApiError, not_found_error

MutationAction = Literal["update", "delete", "manage"]


def ensure_owner(
    *,
    owner_id: int | None,
    principal_id: int,
    action: MutationAction,
    resource: str = "event",
    hide_foreign: bool = False,
) -> None:
    """Allow the mutation only when the principal owns the resource.

    Existence is checked before entitlement. With ``hide_foreign`` the
    "not yours" outcome is reported exactly like a missing resource.
    """
    if owner_id is None:
        raise not_found_error()

    if owner_id != principal_id:
        if hide_foreign:
            raise not_found_error()
        raise ApiError(
            status_code=403,
            code="FORBIDDEN",
            message=f"Not authorized to {action} {resource}",
        )
