"""Request context for tenancy enforcement."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the authenticated user's identity.

    Used to enforce ownership boundaries in all document operations.
    """

    user_id: int
