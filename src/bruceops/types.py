"""Type definitions and enums for the BruceOps client."""

from enum import Enum


class SessionMode(str, Enum):
    """Mutually exclusive classification of the current client session."""

    PUBLIC = "public"  # Unauthenticated visitor
    DEMO = "demo"  # Demo flag set, canned data, no backend persistence
    AUTHENTICATED = "authenticated"  # Real user session


class IdentityStrategy(str, Enum):
    """How the live identity is resolved against the server."""

    DIRECT = "direct"  # GET /api/auth/user, 401 means no user
    TWO_STEP = "two_step"  # GET /api/me, then /api/auth/user for full profile


class UnauthorizedBehavior(str, Enum):
    """What a read query does with a 401 response."""

    RETURN_NULL = "return_null"
    THROW = "throw"


class IdeaStatus(str, Enum):
    """Lifecycle of a ThinkOps idea."""

    DRAFT = "draft"
    REALITY_CHECKED = "reality-checked"
    PARKED = "parked"
    PROMOTED = "promoted"
    SHIPPED = "shipped"
    DISCARDED = "discarded"
