"""Identity and ownership checks shared by the registry and the ledger."""

import logging
from typing import Optional

from work_hours.core.exceptions import NotAuthorizedError, UnauthenticatedError

logger = logging.getLogger(__name__)


def require_user(user: Optional[str], operation: str) -> str:
    """Return the user identity or reject the write operation.

    Args:
        user: Identity of the caller, None when unauthenticated
        operation: Operation name used in the error message

    Returns:
        The user identity

    Raises:
        UnauthenticatedError: If no identity is present
    """
    if not user:
        raise UnauthenticatedError(operation)
    return user


def check_owner(owner: str, user: str, message: str = "Unauthorized") -> None:
    """Reject access to a record the user does not own.

    Raises:
        NotAuthorizedError: If ``owner`` differs from ``user``
    """
    if owner != user:
        logger.warning(f"Rejected access by {user!r} to a record owned by another user")
        raise NotAuthorizedError(message)
