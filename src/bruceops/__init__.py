"""BruceOps Python client - session-aware access to the BruceOps API."""

from .auth import AuthSnapshot, AuthState, use_auth_state
from .cache import QueryCache
from .client import BruceOpsClient
from .config import ClientSettings, load_settings
from .environment import (
    EnvironmentProvider,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    LocationEnvironment,
)
from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    BruceOpsError,
    NotFoundError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from .models import (
    DEMO_USER,
    PUBLIC_USER,
    DashboardStats,
    HarrisContent,
    HealthStatus,
    Idea,
    LogEntry,
    Setting,
    TeachingRequest,
    User,
)
from .session import SessionResolver
from .types import IdeaStatus, IdentityStrategy, SessionMode, UnauthorizedBehavior

__version__ = "0.1.0"

__all__ = [
    # Client and auth state
    "BruceOpsClient",
    "AuthState",
    "AuthSnapshot",
    "use_auth_state",
    "QueryCache",
    "SessionResolver",
    # Environment
    "EnvironmentProvider",
    "LocationEnvironment",
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    # Config
    "ClientSettings",
    "load_settings",
    # Models
    "User",
    "PUBLIC_USER",
    "DEMO_USER",
    "DashboardStats",
    "LogEntry",
    "Idea",
    "TeachingRequest",
    "HarrisContent",
    "Setting",
    "HealthStatus",
    # Types
    "SessionMode",
    "IdentityStrategy",
    "UnauthorizedBehavior",
    "IdeaStatus",
    # Exceptions
    "BruceOpsError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
]
