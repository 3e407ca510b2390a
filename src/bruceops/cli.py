"""BruceOps CLI - command line access to the BruceOps API."""

import asyncio
import json
import logging
from typing import Any, Optional

import click
from scitrera_app_framework import Variables, get_variables, init_framework_desktop

from .auth import AuthState
from .client import BruceOpsClient
from .config import load_settings
from .environment import InMemoryStore, JsonFileStore, LocationEnvironment
from .exceptions import BruceOpsError
from .session import SessionResolver

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s %(funcName)s() > %(message)s'


class CliContext:
    """Options shared by every command."""

    def __init__(
            self,
            base_url: Optional[str],
            token: Optional[str],
            demo: bool,
            state_file: Optional[str],
            v: Optional[Variables] = None,
    ):
        self.settings = load_settings(v)
        if base_url:
            self.settings.api_base = base_url
        if token:
            self.settings.api_token = token
        if state_file:
            self.settings.state_file = state_file
        self.demo = demo

    def environment(self) -> LocationEnvironment:
        store = JsonFileStore(self.settings.state_file) if self.settings.state_file else InMemoryStore()
        return LocationEnvironment("/?demo=true" if self.demo else "/", store=store)

    def client(self) -> BruceOpsClient:
        return BruceOpsClient.from_settings(self.settings, environment=self.environment())


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _run(coro) -> Any:
    try:
        return asyncio.run(coro)
    except BruceOpsError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logs")
@click.option("--base-url", default=None, help="BruceOps API base URL")
@click.option("--token", default=None, help="Bearer token for the API")
@click.option("--demo", is_flag=True, help="Run in demo mode (canned data, no network)")
@click.option("--state-file", default=None, help="File persisting client-local flags")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, base_url: str, token: str, demo: bool, state_file: str):
    """BruceOps - LifeOps, ThinkOps and friends from the terminal."""
    v = get_variables()
    if verbose:
        v.set("LOGGING_LEVEL", "DEBUG")
    # client-only process: no stateful root, no signal hooks
    init_framework_desktop(
        "bruceops",
        base_plugins=False,
        async_auto_enabled=False,
        log_format=LOG_FORMAT,
        log_level="WARNING",
        stateful=False,
        shutdown_hooks=False,
        fault_handler=False,
        v=v,
    )
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    ctx.obj = CliContext(base_url, token, demo, state_file, v=v)


@cli.command()
def version():
    """Show version information."""
    from . import __version__
    click.echo(f"bruceops v{__version__}")


@cli.command()
@click.pass_obj
def whoami(obj: CliContext):
    """Show the resolved identity and session mode."""
    async def fetch():
        async with obj.client() as client:
            state = await AuthState(client).load()
        return state.model_dump(mode="json", by_alias=True)

    _echo_json(_run(fetch()))


@cli.command()
@click.pass_obj
def health(obj: CliContext):
    """Check API connectivity."""
    async def fetch():
        async with obj.client() as client:
            return await client.health()

    status = _run(fetch())
    _echo_json({"apiBase": obj.settings.api_base, **status.model_dump(mode="json", by_alias=True)})
    if status.status != "ok":
        raise SystemExit(1)


@cli.command()
@click.pass_obj
def dashboard(obj: CliContext):
    """Show dashboard counters."""
    async def fetch():
        async with obj.client() as client:
            return await client.dashboard()

    _echo_json(_run(fetch()).model_dump(mode="json", by_alias=True))


@cli.command()
@click.option("--limit", default=5, type=int, help="Show at most N logs (default: 5)")
@click.pass_obj
def logs(obj: CliContext, limit: int):
    """List recent LifeOps logs."""
    async def fetch():
        async with obj.client() as client:
            return await client.logs()

    entries = _run(fetch())[:limit]
    _echo_json({
        "count": len(entries),
        "logs": [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in entries],
    })


@cli.command()
@click.option("--status", default=None, help="Only ideas with this status")
@click.pass_obj
def ideas(obj: CliContext, status: Optional[str]):
    """List ThinkOps ideas."""
    async def fetch():
        async with obj.client() as client:
            return await client.ideas()

    items = [i for i in _run(fetch()) if status is None or i.status == status]
    _echo_json({
        "count": len(items),
        "ideas": [i.model_dump(mode="json", by_alias=True, exclude_none=True) for i in items],
    })


@cli.command()
@click.pass_obj
def logout(obj: CliContext):
    """Log out (leaves demo mode when demo mode is active)."""
    environment = obj.environment()

    async def fetch():
        async with BruceOpsClient.from_settings(obj.settings, environment=environment) as client:
            auth = AuthState(client)
            await auth.logout()
            return auth.snapshot()

    state = _run(fetch())
    _echo_json({
        "navigatedTo": environment.navigations[-1] if environment.navigations else None,
        **state.model_dump(mode="json", by_alias=True, include={"is_authenticated", "is_public", "is_demo"}),
    })


@cli.command()
@click.option("--off", is_flag=True, help="Clear the persisted demo flag instead of setting it")
@click.pass_obj
def demo(obj: CliContext, off: bool):
    """Persist (or clear) demo mode for later invocations."""
    if not obj.settings.state_file:
        click.echo("Error: demo mode can only be persisted with --state-file or BRUCEOPS_STATE_FILE", err=True)
        raise SystemExit(1)
    resolver = SessionResolver(obj.environment())
    if off:
        resolver.clear_demo()
    else:
        resolver.activate_demo()
    click.echo(f"demo mode {'off' if off else 'on'}")


def main():
    cli()


if __name__ == "__main__":
    main()
