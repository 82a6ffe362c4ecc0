"""
CLI commands for rock manifests.

Thin wrappers over ``rocktree.core.use_cases.manifest``.
"""

from __future__ import annotations

import json
import sys

import click
import yaml


@click.group()
def manifest() -> None:
    """Manifests — build and show per-instance file lists."""


@manifest.command()
@click.argument("name")
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def build(ctx: click.Context, name: str, version: str, as_json: bool) -> None:
    """Scan an install directory and write its rock_manifest.yml."""
    from rocktree.core.use_cases.manifest import make_manifest

    result = make_manifest(name, version, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"📝 Manifest written: {result.path}", fg="green")


@manifest.command("show")
@click.argument("name")
@click.argument("version")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show_cmd(ctx: click.Context, name: str, version: str, as_json: bool) -> None:
    """Print the stored manifest of an installed version."""
    from rocktree.core.use_cases.manifest import show_manifest

    result = show_manifest(name, version, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return
    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.echo(yaml.safe_dump(result.manifest, sort_keys=True, default_flow_style=False), nl=False)
