"""Example usage of the BruceOps client."""

import asyncio

from bruceops import AuthState, BruceOpsClient, LocationEnvironment


async def example_live_session():
    """Example against a running server."""
    async with BruceOpsClient(base_url="http://localhost:5000") as client:
        auth = AuthState(client)
        state = await auth.load()
        print(f"Signed in as {state.user.display_name} ({state.mode.value})")

        if not state.is_authenticated:
            return

        # Capture today's log
        log = await client.create_log({"date": "2026-01-26", "energy": 7, "stress": 3, "mood": 8})
        print(f"Created log {log.id}")

        # The logs list was invalidated by the create, so this refetches
        logs = await client.logs()
        print(f"{len(logs)} logs on record")

        # Park an idea
        ideas = await client.ideas()
        if ideas:
            idea = await client.update_idea(ideas[0].id, status="parked")
            print(f"Parked: {idea.title}")


async def example_demo_session():
    """Example in demo mode: canned data, no network."""
    environment = LocationEnvironment("/?demo=true")
    async with BruceOpsClient(environment=environment) as client:
        auth = AuthState(client)
        state = await auth.load()
        print(f"Demo mode: {state.is_demo}, user: {state.user.display_name}")

        stats = await client.dashboard()
        print(f"Open loops: {stats.open_loops}")

        # Leaves demo mode and returns to "/"
        await auth.logout()
        print(f"Navigated to: {environment.navigations[-1]}")


if __name__ == "__main__":
    asyncio.run(example_demo_session())
