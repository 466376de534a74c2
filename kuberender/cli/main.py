"""Click commands for rendering manifests outside the reconciliation loop."""

from __future__ import annotations

import posixpath

import click
import yaml

from kuberender import __version__
from kuberender.config import load_config, parse_key_values
from kuberender.errors import RenderError
from kuberender.models.request import ManifestInfo, OwnerInstance, ReconciliationRequest, Release
from kuberender.observability.logging import LOG_FORMATS, LOG_LEVELS, setup_logging
from kuberender.render.action import build_action


def _key_values(_ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    try:
        return parse_key_values(",".join(values))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param=param) from exc


def _manifest_info(root: str, manifest: str) -> ManifestInfo:
    if root and not posixpath.isabs(manifest):
        return ManifestInfo(path=root, source_path=manifest)
    return ManifestInfo(path=manifest)


@click.group()
@click.version_option(__version__, prog_name="kuberender")
def cli() -> None:
    """Render component manifests with ownership metadata."""


@cli.command()
@click.argument("manifests", nargs=-1, required=True)
@click.option("--namespace", "-n", required=True, help="Target namespace stamped on every resource.")
@click.option("--owner-kind", default="Component", show_default=True, help="Kind of the owning instance.")
@click.option("--owner-name", default="", help="Name of the owning instance.")
@click.option("--generation", type=int, default=0, show_default=True, help="Owner generation.")
@click.option("--release-name", default="OpenDataHub", show_default=True)
@click.option("--release-version", default="")
@click.option("--label", "-l", "labels", multiple=True, callback=_key_values, help="Extra label, key=value.")
@click.option(
    "--annotation", "-a", "annotations", multiple=True, callback=_key_values, help="Extra annotation, key=value."
)
@click.option("--log-level", type=click.Choice(list(LOG_LEVELS)), default=None, help="Overrides KUBERENDER_LOG_LEVEL.")
@click.option(
    "--log-format", type=click.Choice(list(LOG_FORMATS)), default=None, help="Overrides KUBERENDER_LOG_FORMAT."
)
def render(
    manifests: tuple[str, ...],
    namespace: str,
    owner_kind: str,
    owner_name: str,
    generation: int,
    release_name: str,
    release_version: str,
    labels: dict[str, str],
    annotations: dict[str, str],
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Render MANIFESTS and print them as a YAML stream."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.UsageError(f"invalid environment configuration: {exc}") from exc

    setup_logging(log_level or config.log.level, log_format or config.log.format)
    config.metadata.labels.update(labels)
    config.metadata.annotations.update(annotations)

    request = ReconciliationRequest(
        instance=OwnerInstance(kind=owner_kind, name=owner_name, generation=generation),
        namespace=namespace,
        release=Release(name=release_name, version=release_version),
        manifests=[_manifest_info(config.manifests_root, m) for m in manifests],
    )

    try:
        build_action(config)(request)
    except RenderError as exc:
        click.echo(f"error: {exc}", err=True)
        raise click.exceptions.Exit(1) from exc

    click.echo(yaml.safe_dump_all(request.resources, sort_keys=False), nl=False)
