"""Unit tests for the BruceOps client."""

import asyncio
import json

import httpx
import pytest
import respx
from httpx import Response

from bruceops import (
    DEMO_USER,
    PUBLIC_USER,
    AuthenticationError,
    BruceOpsClient,
    BruceOpsError,
    DashboardStats,
    Idea,
    IdeaStatus,
    IdentityStrategy,
    LogEntry,
    NotFoundError,
    ServerError,
    SessionMode,
    ValidationError,
)
from bruceops.routes import AUTH_USER_KEY, IDEA_REALITY_CHECK_PATH, SETTING_PATH, build_url


def test_build_url() -> None:
    assert build_url(IDEA_REALITY_CHECK_PATH, id=3) == "/api/ideas/3/reality-check"
    assert build_url(SETTING_PATH, key="theme", unused=1) == "/api/settings/theme"


def test_requires_context_manager(client: BruceOpsClient) -> None:
    with pytest.raises(RuntimeError):
        client._ensure_client()


# Identity resolution


@pytest.mark.asyncio
@respx.mock
async def test_fetch_user_authenticated(client: BruceOpsClient, base_url: str, user_payload: dict) -> None:
    respx.get(f"{base_url}/api/auth/user").mock(return_value=Response(200, json=user_payload))

    async with client:
        user = await client.fetch_user()

    assert user.id == "u1"
    assert user.email == "a@b.com"
    assert user.is_public is False
    assert user.display_name == "Ada Bruce"
    assert client.session_mode() == SessionMode.AUTHENTICATED


@pytest.mark.asyncio
@respx.mock
async def test_fetch_user_401_is_public(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/auth/user").mock(return_value=Response(401, json={"message": "Unauthorized"}))

    async with client:
        user = await client.fetch_user()

    assert user == PUBLIC_USER
    assert client.session_mode() == SessionMode.PUBLIC


@pytest.mark.asyncio
@respx.mock
async def test_fetch_user_server_error_degrades(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/auth/user").mock(return_value=Response(500, text="database down"))

    async with client:
        user = await client.fetch_user()

    assert user == PUBLIC_USER


@pytest.mark.asyncio
@respx.mock
async def test_fetch_user_transport_error_degrades(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/auth/user").mock(side_effect=httpx.ConnectError("refused"))

    async with client:
        user = await client.fetch_user()

    assert user == PUBLIC_USER


@pytest.mark.asyncio
@respx.mock
async def test_fetch_user_bad_payload_degrades(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/auth/user").mock(return_value=Response(200, text="<html>not json</html>"))

    async with client:
        user = await client.fetch_user()

    assert user == PUBLIC_USER


@pytest.mark.asyncio
@respx.mock
async def test_fetch_user_is_cached(client: BruceOpsClient, base_url: str, user_payload: dict) -> None:
    route = respx.get(f"{base_url}/api/auth/user").mock(return_value=Response(200, json=user_payload))

    async with client:
        await client.fetch_user()
        await client.fetch_user()

    assert route.call_count == 1
    assert client.cache.get_query_data(AUTH_USER_KEY).id == "u1"


@pytest.mark.asyncio
@respx.mock
async def test_two_step_public(base_url: str, environment, cache) -> None:
    respx.get(f"{base_url}/api/me").mock(
        return_value=Response(200, json={"isPublic": True, "displayName": "Guest"})
    )
    auth_route = respx.get(f"{base_url}/api/auth/user")
    client = BruceOpsClient(
        base_url=base_url, environment=environment, cache=cache, identity_strategy=IdentityStrategy.TWO_STEP,
    )

    async with client:
        user = await client.fetch_user()

    assert user.id == "public"
    assert user.is_public is True
    assert user.display_name == "Guest"
    assert not auth_route.called


@pytest.mark.asyncio
@respx.mock
async def test_two_step_authenticated(base_url: str, environment, cache, user_payload: dict) -> None:
    respx.get(f"{base_url}/api/me").mock(return_value=Response(200, json={"isPublic": False, "id": "u1"}))
    respx.get(f"{base_url}/api/auth/user").mock(return_value=Response(200, json=user_payload))
    client = BruceOpsClient(base_url=base_url, environment=environment, cache=cache, identity_strategy="two_step")

    async with client:
        user = await client.fetch_user()

    assert user.id == "u1"
    assert user.is_public is False


@pytest.mark.asyncio
@respx.mock
async def test_two_step_failure_degrades(base_url: str, environment, cache) -> None:
    respx.get(f"{base_url}/api/me").mock(return_value=Response(502, text="bad gateway"))
    client = BruceOpsClient(base_url=base_url, environment=environment, cache=cache, identity_strategy="two_step")

    async with client:
        user = await client.fetch_user()

    assert user == PUBLIC_USER


# Demo mode


@pytest.mark.asyncio
@respx.mock
async def test_demo_reads_never_hit_network(demo_client: BruceOpsClient, base_url: str) -> None:
    route = respx.get(f"{base_url}/api/logs").mock(return_value=Response(200, json=[]))

    async with demo_client:
        user = await demo_client.fetch_user()
        logs = await demo_client.query("/api/logs")
        ideas = await demo_client.ideas()
        unknown = await demo_client.query("/api/unknown")

    assert user == DEMO_USER
    assert logs[0]["topWin"] == "Completed the feature overhaul for BruceOps"
    assert len(ideas) == 3
    assert unknown == []
    assert not route.called


@pytest.mark.asyncio
async def test_demo_api_request_short_circuits(demo_client: BruceOpsClient) -> None:
    # no context manager: any network attempt would raise RuntimeError
    result = await demo_client.api_request("POST", "/api/logs", {"date": "2026-01-26"})

    assert result == {"success": True, "demo": True}


@pytest.mark.asyncio
async def test_demo_dashboard_and_log_by_date(demo_client: BruceOpsClient) -> None:
    stats = await demo_client.dashboard()
    today = (await demo_client.logs())[0].date

    assert isinstance(stats, DashboardStats)
    assert stats.open_loops == 2
    assert (await demo_client.log_by_date(today)).energy == 7
    assert await demo_client.log_by_date("1999-01-01") is None


@pytest.mark.asyncio
async def test_demo_mutations_echo_payload(demo_client: BruceOpsClient) -> None:
    log = await demo_client.create_log({"date": "2026-01-26", "energy": 6})
    idea = await demo_client.update_idea(2, status=IdeaStatus.PARKED)
    setting = await demo_client.update_setting("theme", "forest")

    assert isinstance(log, LogEntry)
    assert log.energy == 6
    assert log.id is not None
    assert log.created_at is not None
    assert idea.id == 2
    assert idea.status == "parked"
    assert setting.key == "theme"
    assert setting.value == "forest"


# Live requests


@pytest.mark.asyncio
@respx.mock
async def test_api_request_error_carries_status_and_body(client: BruceOpsClient, base_url: str) -> None:
    respx.post(f"{base_url}/api/ideas").mock(return_value=Response(503, text="maintenance"))

    async with client:
        with pytest.raises(ServerError) as exc_info:
            await client.api_request("POST", "/api/ideas", {"title": "x"})

    assert exc_info.value.status_code == 503
    assert exc_info.value.body == "maintenance"
    assert exc_info.value.message == "503: maintenance"


@pytest.mark.asyncio
@respx.mock
async def test_api_request_validation_error(client: BruceOpsClient, base_url: str) -> None:
    respx.post(f"{base_url}/api/logs").mock(
        return_value=Response(400, json={"message": "date required", "field": "date"})
    )

    async with client:
        with pytest.raises(ValidationError) as exc_info:
            await client.api_request("POST", "/api/logs", {})

    assert exc_info.value.status_code == 400
    assert "date required" in exc_info.value.body


@pytest.mark.asyncio
@respx.mock
async def test_api_request_other_4xx(client: BruceOpsClient, base_url: str) -> None:
    respx.delete(f"{base_url}/api/ideas/1").mock(return_value=Response(409, text="conflict"))

    async with client:
        with pytest.raises(BruceOpsError) as exc_info:
            await client.api_request("DELETE", "/api/ideas/1")

    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
@respx.mock
async def test_api_request_no_content(client: BruceOpsClient, base_url: str) -> None:
    respx.put(f"{base_url}/api/settings/theme").mock(return_value=Response(204))

    async with client:
        assert await client.api_request("PUT", "/api/settings/theme", {"value": "dark"}) == {}


@pytest.mark.asyncio
@respx.mock
async def test_api_request_transport_error(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/logs").mock(side_effect=httpx.ConnectError("refused"))

    async with client:
        with pytest.raises(BruceOpsError) as exc_info:
            await client.api_request("GET", "/api/logs")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
@respx.mock
async def test_query_on_401(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/settings").mock(return_value=Response(401, text="Unauthorized"))

    async with client:
        assert await client.query("/api/settings", on_401="return_null") is None
        client.cache.clear()
        with pytest.raises(AuthenticationError):
            await client.query("/api/settings")


@pytest.mark.asyncio
@respx.mock
async def test_bearer_token_sent(base_url: str, environment, cache) -> None:
    route = respx.get(f"{base_url}/api/dashboard").mock(
        return_value=Response(200, json={"logsToday": 0, "openLoops": 1, "driftFlags": ["sleep"]})
    )
    client = BruceOpsClient(base_url=base_url, api_token="secret", environment=environment, cache=cache)

    async with client:
        stats = await client.dashboard()

    assert route.calls.last.request.headers["Authorization"] == "Bearer secret"
    assert stats.drift_flags == ["sleep"]


@pytest.mark.asyncio
@respx.mock
async def test_create_log_invalidates_dependents(client: BruceOpsClient, base_url: str) -> None:
    logs_route = respx.get(f"{base_url}/api/logs").mock(return_value=Response(200, json=[]))
    dashboard_route = respx.get(f"{base_url}/api/dashboard").mock(
        return_value=Response(200, json={"logsToday": 0, "openLoops": 0, "driftFlags": []})
    )
    respx.post(f"{base_url}/api/logs").mock(
        return_value=Response(201, json={"id": 10, "date": "2026-01-26", "energy": 8})
    )

    async with client:
        await client.logs()
        await client.dashboard()
        created = await client.create_log({"date": "2026-01-26", "energy": 8})
        await client.logs()
        await client.dashboard()

    assert created.id == 10
    assert logs_route.call_count == 2
    assert dashboard_route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_log_by_date_missing(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/logs/2026-01-26").mock(return_value=Response(404, text="Not found"))

    async with client:
        assert await client.log_by_date("2026-01-26") is None


@pytest.mark.asyncio
@respx.mock
async def test_reality_check(client: BruceOpsClient, base_url: str) -> None:
    respx.post(f"{base_url}/api/ideas/3/reality-check").mock(
        return_value=Response(200, json={
            "id": 3,
            "title": "Scripture Memory System",
            "status": "reality-checked",
            "realityCheck": {"decision": "Worth a tiny test"},
        })
    )

    async with client:
        idea = await client.run_reality_check(3)

    assert isinstance(idea, Idea)
    assert idea.reality_check == {"decision": "Worth a tiny test"}


@pytest.mark.asyncio
@respx.mock
async def test_update_idea_missing(client: BruceOpsClient, base_url: str) -> None:
    respx.put(f"{base_url}/api/ideas/99").mock(return_value=Response(404, json={"message": "Idea not found"}))

    async with client:
        with pytest.raises(NotFoundError):
            await client.update_idea(99, status="parked")


@pytest.mark.asyncio
@respx.mock
async def test_generate_log_summary(client: BruceOpsClient, base_url: str) -> None:
    route = respx.post(f"{base_url}/api/logs/summary").mock(
        return_value=Response(200, json={"summary": "Steady day."})
    )

    async with client:
        assert await client.generate_log_summary("2026-01-26") == "Steady day."

    assert json.loads(route.calls.last.request.content) == {"date": "2026-01-26"}


@pytest.mark.asyncio
@respx.mock
async def test_health(client: BruceOpsClient, base_url: str) -> None:
    respx.get(f"{base_url}/api/health").mock(
        return_value=Response(200, json={"status": "ok", "version": "1.2.0", "ai_provider": "openai"})
    )

    async with client:
        health = await client.health()

    assert health.status == "ok"
    assert health.ai_provider == "openai"


@pytest.mark.asyncio
@respx.mock
async def test_update_log_invalidates_dependents(client: BruceOpsClient, base_url: str) -> None:
    logs_route = respx.get(f"{base_url}/api/logs").mock(return_value=Response(200, json=[]))
    day_route = respx.get(f"{base_url}/api/logs/2026-01-26").mock(
        return_value=Response(200, json={"id": 10, "date": "2026-01-26", "energy": 4})
    )
    update_route = respx.put(f"{base_url}/api/logs/10").mock(
        return_value=Response(200, json={"id": 10, "date": "2026-01-26", "energy": 9})
    )

    async with client:
        await client.logs()
        await client.log_by_date("2026-01-26")
        updated = await client.update_log(10, {"date": "2026-01-26", "energy": 9})
        await client.logs()
        await client.log_by_date("2026-01-26")

    assert updated.energy == 9
    assert json.loads(update_route.calls.last.request.content) == {"date": "2026-01-26", "energy": 9}
    assert logs_route.call_count == 2
    assert day_route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_create_log_while_list_in_flight(client: BruceOpsClient, base_url: str) -> None:
    """A list read that started before a create is not served as fresh afterwards."""
    release = asyncio.Event()
    responses = iter([[], [{"id": 10, "date": "2026-01-26"}]])

    async def slow_logs(request):
        await release.wait()
        return Response(200, json=next(responses))

    logs_route = respx.get(f"{base_url}/api/logs").mock(side_effect=slow_logs)
    respx.post(f"{base_url}/api/logs").mock(return_value=Response(201, json={"id": 10, "date": "2026-01-26"}))

    async with client:
        pending = asyncio.create_task(client.logs())
        await asyncio.sleep(0.01)
        await client.create_log({"date": "2026-01-26"})
        release.set()

        assert await pending == []
        assert client.cache.is_stale("/api/logs")
        logs = await client.logs()

    assert [log.id for log in logs] == [10]
    assert logs_route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_create_idea_invalidates_ideas_and_dashboard(client: BruceOpsClient, base_url: str) -> None:
    ideas_route = respx.get(f"{base_url}/api/ideas").mock(return_value=Response(200, json=[]))
    dashboard_route = respx.get(f"{base_url}/api/dashboard").mock(
        return_value=Response(200, json={"logsToday": 0, "openLoops": 0, "driftFlags": 0})
    )
    respx.post(f"{base_url}/api/ideas").mock(
        return_value=Response(201, json={"id": 4, "title": "Garage Workshop", "status": "draft"})
    )

    async with client:
        await client.ideas()
        await client.dashboard()
        idea = await client.create_idea({"title": "Garage Workshop"})
        await client.ideas()
        await client.dashboard()

    assert idea.id == 4
    assert ideas_route.call_count == 2
    assert dashboard_route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_idea_updates_invalidate_ideas_only(client: BruceOpsClient, base_url: str) -> None:
    ideas_route = respx.get(f"{base_url}/api/ideas").mock(return_value=Response(200, json=[]))
    dashboard_route = respx.get(f"{base_url}/api/dashboard").mock(
        return_value=Response(200, json={"logsToday": 0, "openLoops": 0, "driftFlags": 0})
    )
    update_route = respx.put(f"{base_url}/api/ideas/2").mock(
        return_value=Response(200, json={"id": 2, "status": "parked"})
    )
    respx.post(f"{base_url}/api/ideas/2/reality-check").mock(
        return_value=Response(200, json={"id": 2, "status": "reality-checked"})
    )

    async with client:
        await client.ideas()
        await client.dashboard()
        await client.update_idea(2, status=IdeaStatus.PARKED)
        await client.ideas()
        await client.run_reality_check(2)
        await client.ideas()
        await client.dashboard()

    assert json.loads(update_route.calls.last.request.content) == {"status": "parked"}
    assert ideas_route.call_count == 3
    assert dashboard_route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_create_teaching_request_invalidates_list(client: BruceOpsClient, base_url: str) -> None:
    list_route = respx.get(f"{base_url}/api/teaching").mock(
        return_value=Response(200, json=[{"id": 1, "grade": "5", "topic": "Fractions"}])
    )
    respx.post(f"{base_url}/api/teaching").mock(
        return_value=Response(201, json={"id": 2, "grade": "6", "topic": "Ratios", "output": {"lessonOutline": []}})
    )

    async with client:
        requests = await client.teaching_requests()
        created = await client.create_teaching_request({"grade": "6", "topic": "Ratios"})
        await client.teaching_requests()

    assert requests[0].topic == "Fractions"
    assert created.output == {"lessonOutline": []}
    assert list_route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_create_harris_content_invalidates_list(client: BruceOpsClient, base_url: str) -> None:
    list_route = respx.get(f"{base_url}/api/harris-content").mock(
        return_value=Response(200, json=[{"id": 1, "contentType": "social", "tone": "warm"}])
    )
    create_route = respx.post(f"{base_url}/api/harris").mock(
        return_value=Response(201, json={"id": 2, "contentType": "email", "generatedContent": "Hello"})
    )

    async with client:
        content = await client.harris_content()
        created = await client.create_harris_content({"contentType": "email", "topic": "Spring"})
        await client.harris_content()

    assert content[0].content_type == "social"
    assert created.generated_content == "Hello"
    assert create_route.called
    assert list_route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_update_setting_invalidates_list(client: BruceOpsClient, base_url: str) -> None:
    list_route = respx.get(f"{base_url}/api/settings").mock(
        return_value=Response(200, json=[{"key": "theme", "value": "light"}])
    )
    update_route = respx.put(f"{base_url}/api/settings/theme").mock(
        return_value=Response(200, json={"value": "dark"})
    )

    async with client:
        settings = await client.settings()
        updated = await client.update_setting("theme", "dark")
        await client.settings()

    assert settings[0].value == "light"
    assert updated.key == "theme"
    assert updated.value == "dark"
    assert json.loads(update_route.calls.last.request.content) == {"value": "dark"}
    assert list_route.call_count == 2
