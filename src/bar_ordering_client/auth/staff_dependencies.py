"""FastAPI dependencies for the staff login gate.

The gate is off by default: staff screens are only hidden, not protected,
unless ``ENFORCE_STAFF_LOGIN`` is set.
"""

from fastapi import HTTPException

from bar_ordering_client.models.auth_models import StaffUser
from bar_ordering_client.services.auth_service import StaffAuthService


def require_staff_session(auth_service: StaffAuthService, enforce: bool) -> StaffUser | None:
    """Check that a staff member is logged in when the gate is enforced.

    Args:
        auth_service: Holder of the current staff session
        enforce: Whether an anonymous caller is rejected

    Returns:
        StaffUser: The logged-in staff member, or None when not enforced and nobody is logged in

    Raises:
        HTTPException: 401 if enforced and no staff member is logged in
    """
    if auth_service.user is None and enforce:
        raise HTTPException(status_code=401, detail="Staff login required")

    return auth_service.user
