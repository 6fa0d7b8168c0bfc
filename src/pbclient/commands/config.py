"""Config commands -- manage backend profiles.

Provides the ``pbclient config`` sub-command group for creating, listing,
inspecting, removing and selecting profiles. A profile names one backend and
the credential sources used to authenticate against it; secrets themselves
are never written to disk.
"""

from __future__ import annotations

from typing import Optional

import typer

from pbclient.commands.common import reported_errors
from pbclient.exceptions import InvalidUsageError
from pbclient.output import emit, get_output, info, success, suggest


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("add")
def config_add(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
    base_url: str = typer.Option(
        "http://127.0.0.1:8090", "--base-url", "-u", help="Backend base URL."
    ),
    mode: str = typer.Option(
        "none", "--mode", "-m", help="Auth mode: none, token, admin, collection."
    ),
    email: Optional[str] = typer.Option(None, "--email", help="Admin email (admin mode)."),
    identity: Optional[str] = typer.Option(
        None, "--identity", help="Email or username (collection mode)."
    ),
    collection: str = typer.Option(
        "users", "--collection", help="Auth collection (collection mode)."
    ),
    password_source: Optional[str] = typer.Option(
        None,
        "--password-source",
        help="Password source: env:VAR, file:/path, prompt, value:literal.",
    ),
    token_source: Optional[str] = typer.Option(
        None, "--token-source", help="API token source (token mode)."
    ),
    timeout: float = typer.Option(30, "--timeout", help="Request timeout in seconds."),
    no_verify_ssl: bool = typer.Option(
        False, "--no-verify-ssl", help="Skip SSL certificate verification."
    ),
    persist_tokens: bool = typer.Option(
        False, "--persist-tokens", help="Keep login tokens on disk between runs."
    ),
) -> None:
    """Create or replace a profile.

    Example::

        pbclient config add local --base-url http://127.0.0.1:8090 \\
            --mode admin --email admin@example.com --password-source env:PB_PASSWORD
    """
    from pydantic import ValidationError

    from pbclient.config import profile_exists, save_profile
    from pbclient.models import AuthProfile, Profile, RequestConfig, TokenCacheConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    with reported_errors():
        if profile_exists(name) and not force:
            raise InvalidUsageError(f"Profile '{name}' already exists. Use --force to replace it.")
        try:
            auth = AuthProfile(
                mode=mode,
                email=email,
                identity=identity,
                collection=collection,
                password_source=password_source,
                token_source=token_source,
            )
        except ValidationError as exc:
            raise InvalidUsageError(f"Invalid auth settings: {exc}") from exc

        profile = Profile(
            name=name,
            base_url=base_url,
            auth=auth,
            request=RequestConfig(timeout=timeout, verify_ssl=not no_verify_ssl),
            token_cache=TokenCacheConfig(persist=persist_tokens),
        )
        save_profile(profile)

    success(f'Profile "{name}" saved.')
    suggest(f"Test it: pbclient --profile {name} auth test")


@config_app.command("list")
def config_list() -> None:
    """List all profiles, marking the default one."""
    from pbclient.config import list_profiles, load_global_config, load_profile

    with reported_errors():
        names = list_profiles()
        default = load_global_config().default_profile

    if not names:
        info("No profiles configured.")
        suggest("Create one: pbclient config add <name> --base-url <url>")
        return

    rows: list[list[str]] = []
    for name in names:
        marker = "*" if name == default else ""
        with reported_errors():
            profile = load_profile(name)
        rows.append([marker, name, profile.base_url, profile.auth.mode.value])

    get_output().table(["", "Profile", "Base URL", "Auth"], rows, title="Profiles")


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Profile name (defaults to the active one)."),
) -> None:
    """Show a profile as stored on disk.

    Example::

        pbclient config show local --json
    """
    from pbclient.commands.common import active_profile
    from pbclient.config import get_config_dir, load_profile

    with reported_errors():
        profile = load_profile(name) if name else active_profile(ctx)
    info(f"Config directory: {get_config_dir()}")
    emit(profile.model_dump(mode="json"))


@config_app.command("remove")
def config_remove(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile name."),
) -> None:
    """Delete a profile. Asks for confirmation unless ``--force`` is active."""
    from pbclient.config import delete_profile, load_global_config, save_global_config

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm(f'Remove profile "{name}"?')
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    with reported_errors():
        delete_profile(name)
        global_cfg = load_global_config()
        if global_cfg.default_profile == name:
            global_cfg.default_profile = None
            save_global_config(global_cfg)
    success(f'Profile "{name}" removed.')


@config_app.command("use")
def config_use(
    name: str = typer.Argument(help="Profile to make the default."),
) -> None:
    """Make a profile the default for future invocations."""
    from pbclient.config import load_global_config, profile_exists, save_global_config

    with reported_errors():
        if not profile_exists(name):
            raise InvalidUsageError(f"Profile '{name}' does not exist.")
        global_cfg = load_global_config()
        global_cfg.default_profile = name
        save_global_config(global_cfg)
    success(f'Default profile set to "{name}".')
