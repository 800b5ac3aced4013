"""CLI interface for shell-profiler."""

from __future__ import annotations

import functools
import logging
import sys
from pathlib import Path

import click

from shell_profiler import __version__
from shell_profiler.config import DEFAULT_PROFILE_NAME, Settings, load_settings
from shell_profiler.engine import EngineState, ProfileEngine
from shell_profiler.errors import ProfilerError, ValidationError
from shell_profiler.models import ItemKind
from shell_profiler.registry import ItemRegistry
from shell_profiler.store import LocalStore


def styled(text: str, **kwargs) -> str:
    return click.style(text, **kwargs)


def info(msg: str) -> None:
    click.echo(f"  {msg}")


def success(msg: str) -> None:
    click.echo(f"  {styled(msg, fg='green')}")


def warn(msg: str) -> None:
    click.echo(f"  {styled(msg, fg='yellow')}")


def error(msg: str) -> None:
    click.echo(f"  {styled(msg, fg='red')}")


def heading(msg: str) -> None:
    click.echo(f"\n  {styled(msg, bold=True)}")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def handle_errors(func):
    """Report ProfilerErrors to the user and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ProfilerError as e:
            error(str(e))
            sys.exit(1)

    return wrapper


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _store(ctx: click.Context) -> LocalStore:
    return LocalStore(_settings(ctx).data_dir)


def _engine(ctx: click.Context) -> ProfileEngine:
    return ProfileEngine(_store(ctx), settings=_settings(ctx))


@click.group()
@click.version_option(version=__version__, prog_name="shell-profiler")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Manage shell aliases and functions, synced to a remote profile."""
    ctx.ensure_object(dict)
    try:
        settings = load_settings()
    except ValueError as e:
        raise click.UsageError(str(e))
    _setup_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


def choose_profile(engine: ProfileEngine, init_mode: bool = False) -> None:
    """Drive the engine from listing to an active profile with prompts."""
    info(f"Reading stored profiles from {engine.directory.display_name}...")
    state = engine.read_profiles(init_mode=init_mode)

    if state is EngineState.NO_PROFILE:
        warn("No profiles found.")
        return
    if state is EngineState.CREATING:
        info("No profiles found. Creating a new one...")
    else:
        info("At least one profile has been found.")

    while state in (EngineState.SELECTING, EngineState.CREATING):
        click.echo()
        if state is EngineState.SELECTING:
            for i, ref in enumerate(engine.refs):
                info(f"{i}) {styled(ref.name, fg='yellow')}")
            click.echo()
            answer = click.prompt(
                "  Type the number of the profile you want to use or N for a new one",
                type=str,
            )
        else:
            answer = click.prompt("  New profile name", default=DEFAULT_PROFILE_NAME)

        try:
            state = engine.next_input(answer)
        except ValidationError as e:
            error(str(e))

    click.echo()
    success(f"Profile in use has been updated to: {engine.profile_name}")


@cli.command()
@click.pass_context
@handle_errors
def init(ctx: click.Context) -> None:
    """Fresh setup: credentials, bashrc path and the profile to use.

    Erases all existing local shell-profiler data first.
    """
    click.echo()
    token = click.prompt("  GitHub authorization token", type=str)
    username = click.prompt("  GitHub username", type=str)
    bashrc_path = click.prompt(
        "  Your bashrc file absolute path", default="", show_default=False
    )
    click.echo()

    info(f"Token:       {token}")
    info(f"Username:    {username}")
    info(f"Bashrc path: {bashrc_path or '(none)'}")
    click.echo()
    warn(f"Existing local data in {_settings(ctx).data_dir} will be erased.")

    if not click.confirm("  Do you confirm?", default=True):
        info("Init aborted. Nothing was changed.")
        return

    engine = _engine(ctx)
    engine.initialize(token, username, bashrc_path)
    success("Local data initialized.")
    choose_profile(engine, init_mode=True)
    if engine.state is EngineState.ACTIVE:
        success("shell-profiler initialization completed!")
    click.echo()


@cli.command()
@click.pass_context
def stat(ctx: click.Context) -> None:
    """Check that local profile data is intact."""
    if _store(ctx).check_integrity():
        success("shell-profiler is happy! :)")
        return
    error(
        "There are issues with your configuration. "
        "Run the init command to make shell-profiler happy again."
    )
    sys.exit(1)


@cli.command("ls")
@click.option("--alias", "-a", "aliases", is_flag=True, help="List aliases.")
@click.option("--func", "-f", "functions", is_flag=True, help="List functions.")
@click.option("--profile", is_flag=True, help="Show the profile in use.")
@click.pass_context
@handle_errors
def ls_cmd(ctx: click.Context, aliases: bool, functions: bool, profile: bool) -> None:
    """List aliases, functions or the profile in use."""
    if not (aliases or functions or profile):
        raise ValidationError("Command is missing an option. Use --alias, --func or --profile")

    registry = ItemRegistry(_store(ctx))
    for kind, wanted in ((ItemKind.ALIAS, aliases), (ItemKind.FUNCTION, functions)):
        if not wanted:
            continue
        heading(kind.plural.capitalize())
        items = registry.listing(kind)
        if not items:
            info(f"No {kind.plural} available.")
        for item in items:
            info(f"{styled(item.name, bold=True)}  {item.desc}")

    if profile:
        name = _engine(ctx).profile_name
        if not name:
            raise ValidationError("No profile set. Set it with: shell-profiler set --profile")
        info(f"Profile in use: {styled(name, fg='yellow')}")
    click.echo()


def _prompt_item(registry: ItemRegistry, kind: ItemKind) -> None:
    label = kind.value.capitalize()
    name = click.prompt(f"  {label} name", type=str)
    desc = click.prompt(f"  {label} description", default="", show_default=False)
    body = click.prompt(f"  {label} body", type=str)

    item = registry.build_item(kind, name, desc, body)
    result = registry.upsert(kind, item)
    click.echo()
    if result.updated:
        success(f"{label} updated successfully!")
    else:
        success(f"{label} added successfully!")
    warn(f"Remember that you have to restart your shell in order to use this {kind.value}")


@cli.command("set")
@click.option("--alias", "-a", "alias", is_flag=True, help="Add or update an alias.")
@click.option("--func", "-f", "func", is_flag=True, help="Add or update a function.")
@click.option("--profile", is_flag=True, help="Choose the remote profile to use.")
@click.option("--token", default=None, help="Set the GitHub access token.")
@click.option("--username", default=None, help="Set the GitHub username.")
@click.option("--bashrc", default=None, help="Set the bashrc file path.")
@click.pass_context
@handle_errors
def set_cmd(
    ctx: click.Context,
    alias: bool,
    func: bool,
    profile: bool,
    token: str | None,
    username: str | None,
    bashrc: str | None,
) -> None:
    """Create items, choose a profile or set credentials."""
    if not (alias or func or profile) and token is None and username is None and bashrc is None:
        raise ValidationError(
            "Command is missing an option. "
            "Use --alias, --func, --profile, --token, --username or --bashrc"
        )

    click.echo()
    engine = _engine(ctx)
    if token is not None:
        engine.set_github_token(token)
        success("GitHub access token successfully set.")
    if username is not None:
        engine.set_github_username(username)
        success(f'Username successfully set to "{username.strip()}"')
    if bashrc is not None:
        if not Path(bashrc).expanduser().is_file():
            raise ValidationError(f"The path provided for the bashrc file is not valid: {bashrc}")
        engine.set_bashrc_path(bashrc)
        success(f'Bashrc path successfully set to "{bashrc}"')

    registry = ItemRegistry(engine.store)
    if alias:
        _prompt_item(registry, ItemKind.ALIAS)
    if func:
        _prompt_item(registry, ItemKind.FUNCTION)
    if profile:
        choose_profile(engine)
    click.echo()


def _delete_kind(registry: ItemRegistry, kind: ItemKind) -> None:
    heading(kind.plural.capitalize())
    items = registry.listing(kind)
    if not items:
        warn(f"No {kind.plural} available.")
        return

    for i, item in enumerate(items):
        info(f"{i}) {styled(item.name, bold=True)}  {item.desc}")
    selector = click.prompt(f"  Type the number of the {kind.value} to delete", type=str)

    try:
        preview = registry.resolve(kind, selector)
    except ValidationError as e:
        error(str(e))
        return
    if not preview.removed:
        warn(f"{preview.skipped} elements were skipped. [INVALID INDEX]")
        return

    names = ", ".join(i.name for i in preview.removed)
    if not click.confirm(f"  Delete {names}?", default=True):
        info("Nothing deleted.")
        return

    result = registry.delete(kind, selector)
    success(f"Deleted {len(result.removed)} {kind.plural if len(result.removed) != 1 else kind.value}.")
    if result.skipped:
        warn(f"{result.skipped} elements were skipped. [INVALID INDEX]")


@cli.command("del")
@click.option("--alias", "-a", "aliases", is_flag=True, help="Delete aliases.")
@click.option("--func", "-f", "functions", is_flag=True, help="Delete functions.")
@click.pass_context
@handle_errors
def del_cmd(ctx: click.Context, aliases: bool, functions: bool) -> None:
    """Delete aliases and/or functions by index (e.g. 2 or 0,3,4)."""
    if not (aliases or functions):
        raise ValidationError("Command is missing an option. Use --alias and/or --func")

    registry = ItemRegistry(_store(ctx))
    if aliases:
        _delete_kind(registry, ItemKind.ALIAS)
    if functions:
        _delete_kind(registry, ItemKind.FUNCTION)
    click.echo()


@cli.command()
@click.pass_context
@handle_errors
def push(ctx: click.Context) -> None:
    """Upload the local profile to its remote copy (last write wins)."""
    engine = _engine(ctx)
    click.echo()
    info(f"Serving to {engine.directory.display_name}...")
    profile = engine.push()
    success(f"Profile {profile.name} pushed.")
    click.echo()


@cli.command()
@click.pass_context
@handle_errors
def pull(ctx: click.Context) -> None:
    """Replace the local profile with its remote copy."""
    engine = _engine(ctx)
    click.echo()
    info(f"Requesting profile content from {engine.directory.display_name}...")
    profile = engine.pull()
    success(f"Profile {profile.name} pulled.")
    click.echo()


@cli.command()
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.pass_context
@handle_errors
def export(ctx: click.Context, path: str | None) -> None:
    """Write the profile's aliases and functions to a sourceable script."""
    target = Path(path) if path else _settings(ctx).script_path
    written = ItemRegistry(_store(ctx)).export_script(target)
    success(f"Script written to {written}")
    info(f"Source it from your bashrc: source {written}")
