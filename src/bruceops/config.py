"""Configuration for the BruceOps client.

Settings are read from environment variables through a
``scitrera_app_framework.Variables`` instance, so tests can supply an
isolated ``Variables()`` with explicit values.
"""

from typing import Optional

from pydantic import BaseModel
from scitrera_app_framework import Variables, ext_parse_bool, get_variables

from .types import IdentityStrategy

# ============================================
# Server
# ============================================
BRUCEOPS_API_BASE = 'BRUCEOPS_API_BASE'
DEFAULT_BRUCEOPS_API_BASE = 'http://localhost:5000'

BRUCEOPS_API_TOKEN = 'BRUCEOPS_API_TOKEN'

BRUCEOPS_TIMEOUT = 'BRUCEOPS_TIMEOUT'
DEFAULT_BRUCEOPS_TIMEOUT = 30.0

# ============================================
# Identity
# ============================================
BRUCEOPS_IDENTITY_STRATEGY = 'BRUCEOPS_IDENTITY_STRATEGY'
DEFAULT_BRUCEOPS_IDENTITY_STRATEGY = IdentityStrategy.DIRECT

BRUCEOPS_AUTH_STALE_SECONDS = 'BRUCEOPS_AUTH_STALE_SECONDS'
DEFAULT_BRUCEOPS_AUTH_STALE_SECONDS = 300.0  # 5 minutes

# ============================================
# Query cache
# ============================================
BRUCEOPS_CACHE_MAXSIZE = 'BRUCEOPS_CACHE_MAXSIZE'
DEFAULT_BRUCEOPS_CACHE_MAXSIZE = 512

BRUCEOPS_REFETCH_ON_FOCUS = 'BRUCEOPS_REFETCH_ON_FOCUS'
DEFAULT_BRUCEOPS_REFETCH_ON_FOCUS = False

# ============================================
# Client-local state (demo flag persistence)
# ============================================
BRUCEOPS_STATE_FILE = 'BRUCEOPS_STATE_FILE'


class ClientSettings(BaseModel):
    """Resolved client configuration."""

    api_base: str = DEFAULT_BRUCEOPS_API_BASE
    api_token: Optional[str] = None
    timeout: float = DEFAULT_BRUCEOPS_TIMEOUT
    identity_strategy: IdentityStrategy = DEFAULT_BRUCEOPS_IDENTITY_STRATEGY
    auth_stale_seconds: float = DEFAULT_BRUCEOPS_AUTH_STALE_SECONDS
    cache_maxsize: int = DEFAULT_BRUCEOPS_CACHE_MAXSIZE
    refetch_on_focus: bool = DEFAULT_BRUCEOPS_REFETCH_ON_FOCUS
    state_file: Optional[str] = None


def load_settings(v: Optional[Variables] = None) -> ClientSettings:
    """Build :class:`ClientSettings` from ``v`` (default: the process variables)."""
    v = v or get_variables()
    return ClientSettings(
        api_base=v.environ(BRUCEOPS_API_BASE, default=DEFAULT_BRUCEOPS_API_BASE),
        api_token=v.environ(BRUCEOPS_API_TOKEN, default=None),
        timeout=v.environ(BRUCEOPS_TIMEOUT, default=DEFAULT_BRUCEOPS_TIMEOUT, type_fn=float),
        identity_strategy=IdentityStrategy(
            v.environ(BRUCEOPS_IDENTITY_STRATEGY, default=DEFAULT_BRUCEOPS_IDENTITY_STRATEGY.value)
        ),
        auth_stale_seconds=v.environ(
            BRUCEOPS_AUTH_STALE_SECONDS, default=DEFAULT_BRUCEOPS_AUTH_STALE_SECONDS, type_fn=float,
        ),
        cache_maxsize=v.environ(BRUCEOPS_CACHE_MAXSIZE, default=DEFAULT_BRUCEOPS_CACHE_MAXSIZE, type_fn=int),
        refetch_on_focus=v.environ(
            BRUCEOPS_REFETCH_ON_FOCUS, default=DEFAULT_BRUCEOPS_REFETCH_ON_FOCUS, type_fn=ext_parse_bool,
        ),
        state_file=v.environ(BRUCEOPS_STATE_FILE, default=None),
    )
