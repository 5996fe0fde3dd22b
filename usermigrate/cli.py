"""Click-based CLI for usermigrate."""

from __future__ import annotations

import getpass
import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from usermigrate import __version__
from usermigrate.config import (
    MigrateConfig,
    MirrorBackend,
    ensure_config_exists,
    generate_default_config,
    get_config_path,
    load_config,
    validate_config_file,
    write_default_excludes,
)
from usermigrate.errors import MigrationError
from usermigrate.migrate.category import CATALOG
from usermigrate.migrate.engine import MigrationEngine, MigrationRequest
from usermigrate.output.console import Console, create_console
from usermigrate.utils.platform import default_homes_root


def _load(config_path: Optional[Path], console: Console) -> MigrateConfig:
    """Load configuration or exit with a readable error."""
    try:
        return load_config(config_path)
    except MigrationError as e:
        console.print_error(e.message)
        sys.exit(e.exit_code)
    except (ValidationError, yaml.YAMLError) as e:
        console.print_error(f"Invalid configuration: {e}")
        sys.exit(1)


def _apply_overrides(config: MigrateConfig, backend: Optional[str], verbose: bool) -> MigrateConfig:
    if backend:
        config.backend = MirrorBackend(backend)
    if verbose:
        config.output.verbose = True
    return config


def _run_engine(
    config: MigrateConfig,
    request: MigrationRequest,
    console: Console,
    *,
    verify_only: bool,
) -> None:
    engine = MigrationEngine(config, console=console.rich)
    try:
        if verify_only:
            result = engine.verify_only(request)
        else:
            result = engine.run(request)
    except MigrationError as e:
        console.print_error(e.message)
        sys.exit(e.exit_code)

    console.print_result(result, verify_only=verify_only)
    if not result.success:
        sys.exit(result.exit_code)


def common_options(f):
    """Options shared by ``run`` and ``verify``."""
    f = click.option("--verbose", "-v", is_flag=True, help="Echo copy tool output to the console")(f)
    f = click.option(
        "--backend",
        type=click.Choice([b.value for b in MirrorBackend]),
        default=None,
        help="Copy backend (default from config: rsync)",
    )(f)
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Configuration file (default: ~/.config/usermigrate/config.yaml)",
    )(f)
    f = click.option(
        "--exclude-file",
        "-e",
        type=click.Path(path_type=Path),
        default=None,
        help="Exclusion pattern file (default from config: exclude.txt)",
    )(f)
    f = click.option(
        "--to",
        "-t",
        "dest_user",
        prompt="New username (destination)",
        default="newuser",
        help="Destination account. Must already exist.",
    )(f)
    f = click.option(
        "--from",
        "-f",
        "source_user",
        prompt="Old username (source)",
        default=lambda: getpass.getuser(),
        help="Source account (default: current user)",
    )(f)
    return f


@click.group()
@click.version_option(version=__version__, prog_name="usermigrate")
def cli() -> None:
    """usermigrate - migrate personal data between local user accounts.

    Copies Desktop, Documents, Downloads, Pictures, Movies and Music from
    the old account's home to the new one, fixes ownership and verifies
    the copy with a checksum comparison.

    \b
    Workflow:
      usermigrate excludes init       # create exclude.txt
      usermigrate run --dry-run       # preview
      usermigrate run                 # copy, chown, verify
      usermigrate verify              # re-check a previous run
    """
    pass


@cli.command()
@common_options
@click.option("--dry-run", "-n", is_flag=True, envvar="DRYRUN", help="Show what would be copied, without copying")
@click.option(
    "--verify/--no-verify",
    default=None,
    envvar="VERIFY",
    help="Checksum verification after copy (default: enabled)",
)
def run(
    source_user: str,
    dest_user: str,
    exclude_file: Optional[Path],
    config_path: Optional[Path],
    backend: Optional[str],
    verbose: bool,
    dry_run: bool,
    verify: Optional[bool],
) -> None:
    """Copy the data folders, fix ownership and verify.

    Run from the old (source) account. The new account must already
    exist. Ownership is fixed with sudo; you may be asked for your
    password.

    \b
    Environment:
      DRYRUN=1   same as --dry-run
      VERIFY=0   same as --no-verify
    """
    console = create_console(verbose=verbose)
    config = _apply_overrides(_load(config_path, console), backend, verbose)
    console = create_console(verbose=config.output.verbose, colored=config.output.colored)

    request = MigrationRequest(
        source_user=source_user,
        dest_user=dest_user,
        dry_run=dry_run,
        verify=config.verify.enabled if verify is None else verify,
        exclude_file=exclude_file,
    )
    _run_engine(config, request, console, verify_only=False)


@cli.command()
@common_options
def verify(
    source_user: str,
    dest_user: str,
    exclude_file: Optional[Path],
    config_path: Optional[Path],
    backend: Optional[str],
    verbose: bool,
) -> None:
    """Verify a previous migration without copying.

    Compares every category folder present in the old home with the new
    home by checksum and fails if any differ.
    """
    console = create_console(verbose=verbose)
    config = _apply_overrides(_load(config_path, console), backend, verbose)
    console = create_console(verbose=config.output.verbose, colored=config.output.colored)

    request = MigrationRequest(
        source_user=source_user,
        dest_user=dest_user,
        verify=True,
        exclude_file=exclude_file,
    )
    _run_engine(config, request, console, verify_only=True)


@cli.command()
@click.option("--user", "-u", default=None, help="Show which folders exist in this user's home")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Configuration file")
def categories(user: Optional[str], config_path: Optional[Path]) -> None:
    """List the migrated folders in migration order."""
    console = create_console()
    if user is None:
        console.print_categories(catalog=CATALOG)
        return

    config = _load(config_path, console)
    homes_root = Path(config.homes_root) if config.homes_root else default_homes_root()
    home = homes_root / user
    if not home.is_dir():
        console.print_error(f"Home not found: {home}")
        sys.exit(2)
    console.print_categories(home, CATALOG)


# ============================================================================
# Exclusion file commands
# ============================================================================


@cli.group()
def excludes() -> None:
    """Exclusion pattern file commands."""
    pass


@excludes.command("init")
@click.argument("path", type=click.Path(path_type=Path), default="exclude.txt")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def excludes_init(path: Path, force: bool) -> None:
    """Write the default exclusion file to PATH (default: exclude.txt)."""
    console = create_console()
    if write_default_excludes(path, overwrite=force):
        console.print_success(f"Created exclusion file: {path}")
    else:
        console.print_warning(f"{path} already exists (use --force to overwrite)")


# ============================================================================
# Configuration commands
# ============================================================================


@cli.group()
def config() -> None:
    """Configuration file commands."""
    pass


@config.command("init")
def config_init() -> None:
    """Create the default configuration file."""
    console = create_console()
    path, created = ensure_config_exists()
    if created:
        console.print_success(f"Created configuration: {path}")
    else:
        console.print_info(f"Configuration already exists: {path}")


@config.command("show")
def config_show() -> None:
    """Print the active configuration file."""
    console = create_console()
    path = get_config_path()
    if path.exists():
        console.print_info(f"# {path}")
        console.print(path.read_text(encoding="utf-8"), markup=False, highlight=False)
    else:
        console.print_info("# No configuration file; built-in defaults:")
        console.print(generate_default_config(), markup=False, highlight=False)


@config.command("validate")
@click.argument("path", type=click.Path(path_type=Path), required=False)
def config_validate(path: Optional[Path]) -> None:
    """Validate a configuration file (default: the active one)."""
    console = create_console()
    valid, errors = validate_config_file(path)
    if valid:
        console.print_success("Configuration is valid")
        return
    for error in errors:
        console.print_error(error)
    sys.exit(1)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
