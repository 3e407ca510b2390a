"""API paths used by the client."""

# Identity and session
AUTH_USER_PATH = "/api/auth/user"
ME_PATH = "/api/me"
LOGIN_PATH = "/api/login"
LOGOUT_PATH = "/api/logout"

# Cache key for the resolved identity
AUTH_USER_KEY = (AUTH_USER_PATH,)

HEALTH_PATH = "/api/health"
DASHBOARD_PATH = "/api/dashboard"

# LifeOps
LOGS_PATH = "/api/logs"
LOG_PATH = "/api/logs/:id"
LOG_SUMMARY_PATH = "/api/logs/summary"

# ThinkOps
IDEAS_PATH = "/api/ideas"
IDEA_PATH = "/api/ideas/:id"
IDEA_REALITY_CHECK_PATH = "/api/ideas/:id/reality-check"

# Teaching assistant
TEACHING_PATH = "/api/teaching"

# Harris Wildlands
HARRIS_PATH = "/api/harris"
HARRIS_CONTENT_PATH = "/api/harris-content"

# Settings
SETTINGS_PATH = "/api/settings"
SETTING_PATH = "/api/settings/:key"


def build_url(path: str, **params) -> str:
    """
    Fill ``:name`` placeholders in ``path``.

    Parameters without a matching placeholder are ignored.

    Example:
        build_url(IDEA_PATH, id=3)  # "/api/ideas/3"
    """
    url = path
    for key, value in params.items():
        placeholder = f":{key}"
        if placeholder in url:
            url = url.replace(placeholder, str(value))
    return url
