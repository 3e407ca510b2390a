"""Session mode resolution (public, demo, authenticated)."""

import logging
from typing import Optional

from .environment import EnvironmentProvider
from .models import User
from .types import SessionMode

logger = logging.getLogger(__name__)

DEMO_QUERY_PARAM = "demo"
DEMO_STORAGE_KEY = "demo-mode"
DEMO_FLAG_VALUE = "true"


class SessionResolver:
    """
    Decides which mode the current client session is in.

    Demo mode is detected locally, from the ``demo=true`` query parameter or
    the persisted ``demo-mode`` flag, and is sticky: seeing the parameter
    once writes the flag, so later locations without the parameter stay in
    demo mode until :meth:`clear_demo` is called. Without a demo signal the
    mode depends on the identity the server reported.

    Usage:
        resolver = SessionResolver(LocationEnvironment("/?demo=true"))
        resolver.resolve_mode()  # SessionMode.DEMO
    """

    def __init__(self, environment: EnvironmentProvider):
        self.environment = environment

    def is_demo(self) -> bool:
        """Check the demo signals, persisting the flag when the parameter is present."""
        if self.environment.get_query_param(DEMO_QUERY_PARAM) == DEMO_FLAG_VALUE:
            if self.environment.get_stored_flag(DEMO_STORAGE_KEY) != DEMO_FLAG_VALUE:
                logger.info("Demo mode activated from query parameter")
                self.environment.set_stored_flag(DEMO_STORAGE_KEY, DEMO_FLAG_VALUE)
            return True
        return self.environment.get_stored_flag(DEMO_STORAGE_KEY) == DEMO_FLAG_VALUE

    def resolve_mode(self, identity: Optional[User] = None) -> SessionMode:
        """
        Resolve the session mode.

        Args:
            identity: Identity reported by the server, if already known

        Returns:
            DEMO when a demo signal is present, AUTHENTICATED for a real
            (non-public) identity, PUBLIC otherwise
        """
        if self.is_demo():
            return SessionMode.DEMO
        if identity is not None and not identity.is_public:
            return SessionMode.AUTHENTICATED
        return SessionMode.PUBLIC

    def activate_demo(self) -> None:
        self.environment.set_stored_flag(DEMO_STORAGE_KEY, DEMO_FLAG_VALUE)
        logger.info("Demo mode activated")

    def clear_demo(self) -> None:
        self.environment.remove_stored_flag(DEMO_STORAGE_KEY)
        logger.info("Demo mode cleared")
