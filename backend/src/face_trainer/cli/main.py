"""
face-trainer CLI — inspect and manage tenant faces and classifiers.

Usage:
    face-trainer faces list <tenant>
    face-trainer faces delete-name <tenant> <name>
    face-trainer faces delete-id <tenant> <face_id>
    face-trainer faces delete-all <tenant>
    face-trainer train <tenant>
    face-trainer predict <tenant> <value>... [--count N]
    face-trainer init
    face-trainer version
"""

from __future__ import annotations

import json
import logging
from typing import Tuple

import click

from face_trainer import __version__
from face_trainer.exceptions import FaceTrainerError


def _runtime(ctx: click.Context):
    """Build the runtime once per invocation."""
    from face_trainer.runtime import Runtime

    if ctx.obj.get("runtime") is None:
        ctx.obj["runtime"] = Runtime.from_config(ctx.obj["config"])
        ctx.call_on_close(ctx.obj["runtime"].close)
    return ctx.obj["runtime"]


@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="Config file (default: ~/.face-trainer/config.json)")
@click.option("--database", "database_url", default=None, help="SQLAlchemy URL overriding the config")
@click.option("--log-level", default=None, help="Logging level (default: from config or INFO)")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, database_url: str | None, log_level: str | None) -> None:
    """Manage per-tenant faces, classifiers and predictions."""
    from face_trainer.config import load_config

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    if database_url:
        config["database"]["url"] = database_url

    level = (log_level or config["logging"].get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["runtime"] = None


@cli.command()
def version() -> None:
    """Print the installed version."""
    click.echo(f"face-trainer {__version__}")


@cli.command()
def init() -> None:
    """Create ~/.face-trainer/ with a default configuration."""
    from face_trainer.config import ensure_data_home, get_config_path, write_default_config

    data_home = ensure_data_home()
    click.echo(f"Data directory: {data_home}")

    config_path = get_config_path()
    if config_path.exists():
        click.echo(f"Config already exists: {config_path}")
    else:
        write_default_config(config_path)
        click.echo(f"Config created: {config_path}")


@cli.group()
def faces() -> None:
    """List and delete tenant faces."""


@faces.command("list")
@click.argument("tenant")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print faces as JSON")
@click.pass_context
def list_faces(ctx: click.Context, tenant: str, as_json: bool) -> None:
    """List the faces of TENANT."""
    try:
        found = _runtime(ctx).service.find_faces(tenant)
    except FaceTrainerError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps([face.to_dict() for face in found], indent=2))
        return

    for face in found:
        click.echo(f"{face.id}  {face.face_name}")
    click.echo(f"{len(found)} face(s)")


@faces.command("delete-name")
@click.argument("tenant")
@click.argument("name")
@click.pass_context
def delete_name(ctx: click.Context, tenant: str, name: str) -> None:
    """Delete every face of TENANT named NAME."""
    try:
        _runtime(ctx).service.delete_face_by_name(name, tenant)
    except FaceTrainerError as e:
        raise click.ClickException(str(e))
    click.echo(f"Deleted faces named '{name}'")


@faces.command("delete-id")
@click.argument("tenant")
@click.argument("face_id")
@click.pass_context
def delete_id(ctx: click.Context, tenant: str, face_id: str) -> None:
    """Delete the face FACE_ID of TENANT."""
    try:
        _runtime(ctx).service.delete_face_by_id(face_id, tenant)
    except FaceTrainerError as e:
        raise click.ClickException(str(e))
    click.echo(f"Deleted face {face_id}")


@faces.command("delete-all")
@click.argument("tenant")
@click.confirmation_option(prompt="Delete all faces of this tenant?")
@click.pass_context
def delete_all(ctx: click.Context, tenant: str) -> None:
    """Delete all faces of TENANT and evict its classifier."""
    try:
        deleted = _runtime(ctx).service.delete_faces_by_model(tenant)
    except FaceTrainerError as e:
        raise click.ClickException(str(e))
    click.echo(f"Deleted {len(deleted)} face(s)")


@cli.command()
@click.argument("tenant")
@click.pass_context
def train(ctx: click.Context, tenant: str) -> None:
    """Train and store the classifier of TENANT."""
    try:
        classifier = _runtime(ctx).registry.retrain(tenant)
    except FaceTrainerError as e:
        raise click.ClickException(str(e))
    click.echo(f"Trained classifier with {len(classifier.labels)} classes")


@cli.command()
@click.argument("tenant")
@click.argument("values", nargs=-1, required=True, type=float)
@click.option("--count", default=1, type=int, help="Number of results")
@click.pass_context
def predict(ctx: click.Context, tenant: str, values: Tuple[float, ...], count: int) -> None:
    """Predict face names of TENANT for an embedding given as VALUES."""
    try:
        result = _runtime(ctx).predictor.predict(tenant, list(values), count)
    except FaceTrainerError as e:
        raise click.ClickException(str(e))

    for confidence, label in result:
        click.echo(f"{confidence:.4f}  {label}")


if __name__ == "__main__":
    cli()
