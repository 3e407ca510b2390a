"""Auth state - the consumer-facing view of who the client is."""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .client import BruceOpsClient
from .models import PUBLIC_USER, User
from .routes import AUTH_USER_KEY
from .types import SessionMode

logger = logging.getLogger(__name__)


class AuthSnapshot(BaseModel):
    """Auth state at one point in time; dumps camelCase with ``by_alias=True``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user: Optional[User] = None
    mode: SessionMode = SessionMode.PUBLIC
    is_loading: bool = False
    is_authenticated: bool = False
    is_public: bool = True
    is_demo: bool = False
    is_logging_out: bool = False


class AuthState:
    """
    Auth state backed by the client's query cache.

    Every consumer holding the same cache sees the same identity. Logout
    writes the public identity straight into the cache, so readers observe
    the logged-out state without waiting for a network round trip, and a
    slower identity fetch still in flight cannot revert it.

    Usage:
        auth = AuthState(client)
        state = await auth.load()
        if state.is_authenticated:
            ...
        await auth.logout()
    """

    def __init__(self, client: BruceOpsClient):
        self.client = client
        self._logging_out = False

    @property
    def user(self) -> Optional[User]:
        return self.client.cache.get_query_data(AUTH_USER_KEY)

    @property
    def is_loading(self) -> bool:
        """True while the identity has never resolved and a fetch is in flight."""
        return self.user is None and self.client.cache.is_fetching(AUTH_USER_KEY)

    @property
    def is_demo(self) -> bool:
        return self.client.is_demo()

    @property
    def is_public(self) -> bool:
        user = self.user
        return user is not None and user.is_public and not self.is_demo

    @property
    def is_authenticated(self) -> bool:
        user = self.user
        return user is not None and not user.is_public and not self.is_demo

    @property
    def is_logging_out(self) -> bool:
        return self._logging_out

    def snapshot(self) -> AuthSnapshot:
        """Current state without triggering a fetch."""
        user = self.user
        return AuthSnapshot(
            user=user,
            mode=self.client.resolver.resolve_mode(user),
            is_loading=self.is_loading,
            is_authenticated=self.is_authenticated,
            is_public=self.is_public,
            is_demo=self.is_demo,
            is_logging_out=self.is_logging_out,
        )

    async def load(self) -> AuthSnapshot:
        """Resolve the identity (from cache when fresh) and return the state."""
        await self.client.fetch_user()
        return self.snapshot()

    def login(self) -> None:
        self.client.environment.navigate_to(self.client.login_url)

    async def logout(self) -> None:
        """
        Log out of the current mode.

        Demo sessions clear the persisted flag and navigate to "/" without
        any network call. Live sessions navigate to the server's logout
        endpoint. Either way the cached identity becomes PUBLIC_USER and
        other cached reads are invalidated. A logout already in progress
        makes this a no-op.
        """
        if self._logging_out:
            logger.debug("Logout already in progress")
            return

        self._logging_out = True
        try:
            if self.client.is_demo():
                logger.info("Leaving demo mode")
                self.client.resolver.clear_demo()
                self.client.environment.navigate_to("/")
            else:
                logger.info("Logging out")
                self.client.environment.navigate_to(self.client.logout_url)
            self.client.cache.invalidate_queries(())
            self.client.cache.set_query_data(AUTH_USER_KEY, PUBLIC_USER)
        finally:
            self._logging_out = False


async def use_auth_state(client: BruceOpsClient) -> AuthSnapshot:
    """Load and return the auth state for ``client``."""
    return await AuthState(client).load()
