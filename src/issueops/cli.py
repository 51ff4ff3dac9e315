"""CLI entry point for the issue-ops engine."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, TypeVar

import click

from .core.config import load_settings
from .core.errors import IssueOpsError

T = TypeVar("T")

EXIT_DISPATCH_FAILED = 1
EXIT_NO_ACTION = 2


def _echo_json(obj: Any) -> None:
    click.echo(json.dumps(obj, indent=2))


def _run(ctx: click.Context, fn: Callable[[Any], Awaitable[T]]) -> T:
    """Build a runtime from the group options, run *fn*, always close."""
    from .main import build_runtime
    from .observability.logger import start_run

    async def _inner() -> T:
        runtime = build_runtime(ctx.obj["settings"])
        try:
            return await fn(runtime)
        finally:
            await runtime.close()

    start_run()
    try:
        return asyncio.run(_inner())
    except IssueOpsError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--log-level", default=None, help="Override log level")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Override log output format",
)
@click.option("--storage-root", default=None, help="Local storage root override")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    log_level: str | None,
    log_format: str | None,
    storage_root: str | None,
) -> None:
    """Chat-driven operations: dispatch actions against domain state."""
    from .observability.logger import setup_logging

    overrides: dict[str, Any] = {}
    if storage_root:
        overrides["storage"] = {"root": storage_root}
    try:
        settings = load_settings(config_path=config, overrides=overrides)
    except Exception as exc:
        raise click.ClickException(f"Invalid configuration: {exc}") from exc

    obs = settings.observability
    setup_logging(level=log_level or obs.log_level, format=log_format or obs.log_format)
    ctx.obj = {"settings": settings}


@main.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--user", "username", required=True, envvar="GITHUB_ACTOR",
              help="User issuing the action (defaults to $GITHUB_ACTOR)")
@click.option("--repo", default=None, help="owner/repo the action came from")
@click.option("--issue", "issue_number", type=int, default=None, help="Issue number")
@click.option("--yes", is_flag=True, help="Dispatch without asking for confirmation")
@click.pass_context
def dispatch(
    ctx: click.Context,
    source: Any,
    username: str,
    repo: str | None,
    issue_number: int | None,
    yes: bool,
) -> None:
    """Extract an action from SOURCE text (file or stdin) and dispatch it."""
    from .context import StaticContextProvider
    from .extraction import extract_action

    action = extract_action(source.read())
    if action is None:
        click.echo(
            "No action found. The text should contain a JSON object with "
            "domain, type, and payload properties.",
            err=True,
        )
        sys.exit(EXIT_NO_ACTION)

    repository = None
    if repo:
        owner, _, name = repo.partition("/")
        if not owner or not name:
            raise click.BadParameter("expected owner/repo", param_hint="--repo")
        repository = (owner, name)

    if not yes:
        _echo_json(action.model_dump())
        click.confirm("Apply this action?", abort=True, err=True)

    context = StaticContextProvider(
        username, repository=repository, issue_number=issue_number,
    ).context_for()
    result = _run(ctx, lambda rt: rt.dispatcher.dispatch(action, context))
    _echo_json(result.to_wire())
    if not result.success:
        sys.exit(EXIT_DISPATCH_FAILED)


@main.command()
@click.argument("domain")
@click.pass_context
def state(ctx: click.Context, domain: str) -> None:
    """Print the current state of DOMAIN."""
    _echo_json(_run(ctx, lambda rt: rt.state_store.get_state(domain)))


@main.command()
@click.argument("domain")
@click.option("--limit", type=int, default=None, help="Max entries (default from config)")
@click.pass_context
def log(ctx: click.Context, domain: str, limit: int | None) -> None:
    """Print DOMAIN's action log, most recent first."""
    n = limit if limit is not None else ctx.obj["settings"].log_limit

    async def _read(rt: Any) -> list[dict[str, Any]]:
        rt.registry.get_domain(domain)
        entries = await rt.state_store.get_action_log(domain, n)
        return [e.model_dump() for e in entries]

    _echo_json(_run(ctx, _read))


@main.command()
@click.argument("domain")
@click.pass_context
def replay(ctx: click.Context, domain: str) -> None:
    """Rebuild DOMAIN's state from its action log and print it."""
    _echo_json(_run(ctx, lambda rt: rt.state_store.replay_state(domain)))


@main.command()
@click.pass_context
def domains(ctx: click.Context) -> None:
    """List registered domains and their action types."""

    async def _summary(rt: Any) -> list[dict[str, Any]]:
        return rt.registry.summary()

    _echo_json(_run(ctx, _summary))


if __name__ == "__main__":
    main()
