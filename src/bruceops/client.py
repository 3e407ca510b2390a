"""Main client for the BruceOps API."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional, Union

import httpx

from .cache import QueryCache, key_to_url
from .config import ClientSettings, DEFAULT_BRUCEOPS_API_BASE, DEFAULT_BRUCEOPS_AUTH_STALE_SECONDS
from .demo import demo_logs, get_demo_data
from .environment import EnvironmentProvider, LocationEnvironment
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
from .routes import (
    AUTH_USER_KEY,
    AUTH_USER_PATH,
    DASHBOARD_PATH,
    HARRIS_CONTENT_PATH,
    HARRIS_PATH,
    HEALTH_PATH,
    IDEA_PATH,
    IDEA_REALITY_CHECK_PATH,
    IDEAS_PATH,
    LOG_PATH,
    LOG_SUMMARY_PATH,
    LOGIN_PATH,
    LOGOUT_PATH,
    LOGS_PATH,
    ME_PATH,
    SETTING_PATH,
    SETTINGS_PATH,
    TEACHING_PATH,
    build_url,
)
from .session import SessionResolver
from .types import IdentityStrategy, SessionMode, UnauthorizedBehavior

logger = logging.getLogger(__name__)

DEMO_MUTATION_RESPONSE = {"success": True, "demo": True}


def _to_value(v: Any) -> Any:
    """Extract string value from an enum member, or return string as-is."""
    return v.value if hasattr(v, "value") else v


def _raise_for_status(response: httpx.Response) -> None:
    """
    Raise the matching :class:`BruceOpsError` for a non-2xx response.

    The message is ``"<status>: <body text>"``; the body falls back to the
    reason phrase when empty.
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    body = response.text
    message = f"{status}: {body or response.reason_phrase}"
    if status == 401:
        raise AuthenticationError(message, body=body)
    elif status == 403:
        raise AuthorizationError(message, body=body)
    elif status == 404:
        raise NotFoundError(message, body=body)
    elif status in (400, 422):
        raise ValidationError(message, status_code=status, body=body)
    elif status == 429:
        raise RateLimitError(message, body=body)
    elif status >= 500:
        raise ServerError(message, status_code=status, body=body)
    raise BruceOpsError(message, status_code=status, body=body)


def _decode(response: httpx.Response) -> Any:
    """Response JSON, or an empty dict for No Content / empty bodies."""
    if response.status_code == 204 or not response.content:
        return {}
    return response.json()


class BruceOpsClient:
    """
    Python client for the BruceOps API.

    Reads go through a :class:`QueryCache`; every fetch branches on the
    session mode. Demo sessions get canned data and never touch the
    network, live sessions call the API with the cookie jar (and bearer
    token, when configured) attached.

    Usage:
        async with BruceOpsClient(base_url="http://localhost:5000") as client:
            user = await client.fetch_user()
            logs = await client.logs()
            await client.create_log({"date": "2026-01-26", "energy": 7})
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BRUCEOPS_API_BASE,
        api_token: Optional[str] = None,
        environment: Optional[EnvironmentProvider] = None,
        cache: Optional[QueryCache] = None,
        identity_strategy: Union[str, IdentityStrategy] = IdentityStrategy.DIRECT,
        auth_stale_seconds: float = DEFAULT_BRUCEOPS_AUTH_STALE_SECONDS,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize BruceOps client.

        Args:
            base_url: API base URL (default: http://localhost:5000)
            api_token: Optional bearer token, sent alongside session cookies
            environment: Query parameters, persisted flags and navigation
                (default: in-memory environment at "/")
            cache: Query cache shared with other consumers (default: new cache)
            identity_strategy: "direct" or "two_step" identity resolution
            auth_stale_seconds: Staleness window of the cached identity
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport, mainly for testing
        """
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.environment = environment if environment is not None else LocationEnvironment()
        self.resolver = SessionResolver(self.environment)
        self.cache = cache if cache is not None else QueryCache()
        self.identity_strategy = IdentityStrategy(_to_value(identity_strategy))
        self.auth_stale_seconds = auth_stale_seconds
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        environment: Optional[EnvironmentProvider] = None,
        cache: Optional[QueryCache] = None,
    ) -> "BruceOpsClient":
        """Build a client (and its cache, unless given) from :class:`ClientSettings`."""
        if cache is None:
            cache = QueryCache(
                maxsize=settings.cache_maxsize,
                refetch_on_window_focus=settings.refetch_on_focus,
            )
        return cls(
            base_url=settings.api_base,
            api_token=settings.api_token,
            environment=environment,
            cache=cache,
            identity_strategy=settings.identity_strategy,
            auth_stale_seconds=settings.auth_stale_seconds,
            timeout=settings.timeout,
        )

    async def __aenter__(self) -> "BruceOpsClient":
        """Async context manager entry."""
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure client is initialized."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async with context manager.")
        return self._client

    # Session mode

    def is_demo(self) -> bool:
        return self.resolver.is_demo()

    def session_mode(self) -> SessionMode:
        """Session mode given the currently cached identity."""
        return self.resolver.resolve_mode(self.cache.get_query_data(AUTH_USER_KEY))

    @property
    def login_url(self) -> str:
        return f"{self.base_url}{LOGIN_PATH}"

    @property
    def logout_url(self) -> str:
        return f"{self.base_url}{LOGOUT_PATH}"

    # Transport

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Issue one HTTP request, without interpreting the status code.

        Raises:
            BruceOpsError: Transport failure or timeout (status_code is None)
        """
        client = self._ensure_client()
        try:
            return await client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as e:
            raise BruceOpsError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise BruceOpsError(f"HTTP error: {e}") from e

    async def api_request(self, method: str, url: str, data: Optional[Any] = None) -> Any:
        """
        Generic request for mutations.

        In demo mode this returns ``{"success": True, "demo": True}`` without
        contacting the network.

        Args:
            method: HTTP method
            url: API path
            data: JSON body

        Returns:
            Response JSON, or {} for empty responses

        Raises:
            AuthenticationError: No session (401)
            AuthorizationError: Forbidden (403)
            NotFoundError: Resource not found (404)
            ValidationError: Validation failed (400, 422)
            RateLimitError: Rate limit exceeded (429)
            ServerError: Server error (5xx)
            BruceOpsError: Other errors, including transport failures
        """
        if self.is_demo():
            logger.debug("Demo mode: skipping %s %s", method, url)
            return dict(DEMO_MUTATION_RESPONSE)

        response = await self._send(method, url, json=data)
        _raise_for_status(response)
        return _decode(response)

    # Reads

    async def _fetch_url(self, url: str, on_401: UnauthorizedBehavior) -> Any:
        if self.is_demo():
            return get_demo_data(url)

        response = await self._send("GET", url)
        if on_401 == UnauthorizedBehavior.RETURN_NULL and response.status_code == 401:
            return None
        _raise_for_status(response)
        return _decode(response)

    async def query(
        self,
        *key: str,
        on_401: Union[str, UnauthorizedBehavior] = UnauthorizedBehavior.THROW,
        stale_time: Optional[float] = None,
    ) -> Any:
        """
        Cached read of the URL formed by joining ``key`` with '/'.

        Args:
            key: Query key segments, e.g. ("/api/logs",) or ("/api/logs", "2026-01-26")
            on_401: "throw" (default) or "return_null"
            stale_time: Staleness window in seconds (default: cache default)

        Returns:
            Response JSON (canned data in demo mode)
        """
        url = key_to_url(key)
        behavior = UnauthorizedBehavior(_to_value(on_401))
        return await self.cache.fetch_query(
            key, lambda: self._fetch_url(url, behavior), stale_time=stale_time,
        )

    # Identity

    async def fetch_user(self) -> User:
        """
        Resolve the current identity, cached under "/api/auth/user".

        Never raises: demo sessions get DEMO_USER, and any failure to reach
        or understand the server degrades to PUBLIC_USER.
        """
        return await self.cache.fetch_query(
            AUTH_USER_KEY, self._resolve_identity, stale_time=self.auth_stale_seconds,
        )

    async def _resolve_identity(self) -> User:
        if self.is_demo():
            return DEMO_USER
        try:
            if self.identity_strategy == IdentityStrategy.TWO_STEP:
                return await self._resolve_identity_two_step()
            return await self._resolve_identity_direct()
        except (BruceOpsError, ValueError) as e:
            logger.warning("Identity resolution failed, falling back to public user: %s", e)
            return PUBLIC_USER

    async def _fetch_full_user(self) -> Optional[User]:
        response = await self._send("GET", AUTH_USER_PATH)
        if response.status_code == 401:
            return None
        _raise_for_status(response)
        user = User.model_validate(response.json())
        return user.model_copy(update={"is_public": False})

    async def _resolve_identity_direct(self) -> User:
        user = await self._fetch_full_user()
        if user is None:
            logger.debug("No authenticated session")
            return PUBLIC_USER
        return user

    async def _resolve_identity_two_step(self) -> User:
        response = await self._send("GET", ME_PATH)
        _raise_for_status(response)
        me = response.json()
        if isinstance(me, dict) and me.get("isPublic"):
            merged = {**PUBLIC_USER.model_dump(by_alias=True), **me}
            return User.model_validate(merged)

        user = await self._fetch_full_user()
        return user if user is not None else PUBLIC_USER

    # Mutations

    async def _mutate(
        self,
        method: str,
        path: str,
        data: Optional[dict[str, Any]] = None,
        invalidates: tuple = (),
        demo_id: Optional[Any] = None,
    ) -> Any:
        """
        Send a mutation and invalidate the cache keys it affects.

        Demo sessions get the payload echoed back with a synthetic id and
        creation time.
        """
        if self.is_demo():
            result = {
                "id": demo_id if demo_id is not None else int(time.time() * 1000),
                **(data or {}),
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
        else:
            result = await self.api_request(method, path, data)

        for key in invalidates:
            self.cache.invalidate_queries(key)
        return result

    # Dashboard

    async def dashboard(self) -> DashboardStats:
        data = await self.query(DASHBOARD_PATH)
        return DashboardStats.model_validate(data)

    async def health(self) -> HealthStatus:
        """
        Check API connectivity. Always hits the network, even in demo mode,
        and is never cached.
        """
        response = await self._send("GET", HEALTH_PATH)
        _raise_for_status(response)
        return HealthStatus.model_validate(_decode(response))

    # LifeOps

    async def logs(self) -> list[LogEntry]:
        data = await self.query(LOGS_PATH)
        return [LogEntry.model_validate(item) for item in data or []]

    async def log_by_date(self, date: str) -> Optional[LogEntry]:
        """
        Get the log for a day (YYYY-MM-DD).

        Returns:
            The log, or None when there is no log for that date
        """
        async def fetch() -> Optional[dict[str, Any]]:
            if self.is_demo():
                return next((log for log in demo_logs() if log["date"] == date), None)
            response = await self._send("GET", f"{LOGS_PATH}/{date}")
            if response.status_code == 404:
                return None
            _raise_for_status(response)
            return _decode(response)

        data = await self.cache.fetch_query((LOGS_PATH, date), fetch)
        return LogEntry.model_validate(data) if data else None

    def _log_keys(self, date: Optional[str]) -> tuple:
        keys = [(LOGS_PATH,), (DASHBOARD_PATH,)]
        if date:
            keys.append((LOGS_PATH, date))
        return tuple(keys)

    async def create_log(self, data: dict[str, Any]) -> LogEntry:
        result = await self._mutate("POST", LOGS_PATH, data, invalidates=self._log_keys(data.get("date")))
        return LogEntry.model_validate(result)

    async def update_log(self, log_id: int, data: dict[str, Any]) -> LogEntry:
        result = await self._mutate(
            "PUT", build_url(LOG_PATH, id=log_id), data,
            invalidates=self._log_keys(data.get("date")), demo_id=log_id,
        )
        return LogEntry.model_validate(result)

    async def generate_log_summary(self, date: str) -> str:
        """Ask the server for the AI summary of a day's log."""
        result = await self.api_request("POST", LOG_SUMMARY_PATH, {"date": date})
        self.cache.invalidate_queries((LOGS_PATH, date))
        return result.get("summary", "")

    # ThinkOps

    async def ideas(self) -> list[Idea]:
        data = await self.query(IDEAS_PATH)
        return [Idea.model_validate(item) for item in data or []]

    async def create_idea(self, data: dict[str, Any]) -> Idea:
        result = await self._mutate(
            "POST", IDEAS_PATH, data, invalidates=((IDEAS_PATH,), (DASHBOARD_PATH,)),
        )
        return Idea.model_validate(result)

    async def update_idea(self, idea_id: int, **fields: Any) -> Idea:
        """
        Update an idea.

        Args:
            idea_id: Idea ID
            **fields: Fields to change (status, title, promotedSpec, ...)
        """
        payload = {k: _to_value(v) for k, v in fields.items()}
        result = await self._mutate(
            "PUT", build_url(IDEA_PATH, id=idea_id), payload,
            invalidates=((IDEAS_PATH,),), demo_id=idea_id,
        )
        return Idea.model_validate(result)

    async def run_reality_check(self, idea_id: int) -> Idea:
        result = await self._mutate(
            "POST", build_url(IDEA_REALITY_CHECK_PATH, id=idea_id),
            invalidates=((IDEAS_PATH,),), demo_id=idea_id,
        )
        return Idea.model_validate(result)

    # Teaching assistant

    async def teaching_requests(self) -> list[TeachingRequest]:
        data = await self.query(TEACHING_PATH)
        return [TeachingRequest.model_validate(item) for item in data or []]

    async def create_teaching_request(self, data: dict[str, Any]) -> TeachingRequest:
        result = await self._mutate("POST", TEACHING_PATH, data, invalidates=((TEACHING_PATH,),))
        return TeachingRequest.model_validate(result)

    # Harris Wildlands

    async def harris_content(self) -> list[HarrisContent]:
        data = await self.query(HARRIS_CONTENT_PATH)
        return [HarrisContent.model_validate(item) for item in data or []]

    async def create_harris_content(self, data: dict[str, Any]) -> HarrisContent:
        result = await self._mutate("POST", HARRIS_PATH, data, invalidates=((HARRIS_CONTENT_PATH,),))
        return HarrisContent.model_validate(result)

    # Settings

    async def settings(self) -> list[Setting]:
        data = await self.query(SETTINGS_PATH)
        return [Setting.model_validate(item) for item in data or []]

    async def update_setting(self, key: str, value: str) -> Setting:
        result = await self._mutate(
            "PUT", build_url(SETTING_PATH, key=key), {"value": value},
            invalidates=((SETTINGS_PATH,),), demo_id=key,
        )
        if "key" not in result:
            result = {**result, "key": key}
        return Setting.model_validate(result)
