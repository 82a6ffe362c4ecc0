"""
rocktree — CLI entrypoint.

Usage:
    rocktree --help
    rocktree versions luasocket
    rocktree deploy luasocket 2.0.2-1
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from rocktree import __version__
from rocktree.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="rocktree")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to rocktree.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """rocktree — manage the packages deployed in a local tree."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
    )


@cli.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def versions(ctx: click.Context, name: str, as_json: bool) -> None:
    """List installed versions of a package."""
    from rocktree.core.use_cases.status import get_package_status

    result = get_package_status(name, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    if result.error:
        _fail(result.error)
    if not result.versions:
        click.secho(f"⚠️  {name} is not installed", fg="yellow")
        return

    click.secho(f"📦 {name}", fg="cyan", bold=True)
    for v in result.versions:
        click.echo(f"   • {v}")


@cli.command()
@click.argument("name")
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, name: str, version: str, as_json: bool) -> None:
    """Show the modules and commands an installed version provides."""
    from rocktree.core.use_cases.status import get_package_status

    result = get_package_status(name, version, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    if result.error:
        _fail(result.error)
    if not result.installed:
        _fail(f"{name} {version} is not installed")

    click.secho(f"\n📦 {name} {version}", fg="cyan", bold=True)
    if not result.managed:
        click.secho("   ⚠️  No manifest — not managed by rocktree", fg="yellow")

    if result.modules:
        click.secho(f"   Modules: {len(result.modules)}", bold=True)
        for module, path in sorted(result.modules.items()):
            click.echo(f"     • {module:<30} → {path}")
    if result.commands:
        click.secho(f"   Commands: {len(result.commands)}", bold=True)
        for command, path in sorted(result.commands.items()):
            click.echo(f"     • {command:<30} → {path}")
    if result.has_compiled_executables:
        click.echo("   Contains native executables")
    click.echo()


@cli.command()
@click.argument("name")
@click.argument("version")
@click.option("--no-hooks", is_flag=True, help="Skip the post_install hook.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def deploy(ctx: click.Context, name: str, version: str, no_hooks: bool, as_json: bool) -> None:
    """Deploy an installed version into the tree's deploy directories."""
    from rocktree.core.use_cases.deploy import run_deploy

    result = run_deploy(
        name,
        version,
        config_path=ctx.obj.get("config_path"),
        run_hooks=not no_hooks,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return
    if not result.ok:
        _fail(result.error or "deploy failed")

    if not ctx.obj.get("quiet"):
        click.secho(f"✅ Deployed {name} {version}", fg="green")
        if result.hook_ran:
            click.echo("   post_install hook ran")


@cli.command()
@click.argument("name")
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def remove(ctx: click.Context, name: str, version: str, as_json: bool) -> None:
    """Undeploy a version and delete it from the tree."""
    from rocktree.core.use_cases.deploy import run_remove

    result = run_remove(name, version, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return
    if not result.ok:
        _fail(result.error or "remove failed")

    if not ctx.obj.get("quiet"):
        click.secho(f"✅ Removed {name} {version}", fg="green")


# ── Register sub-command groups from rocktree/ui/cli/ ─────────────

from rocktree.ui.cli.manifest import manifest  # noqa: E402

cli.add_command(manifest)


if __name__ == "__main__":
    cli()
