"""kubecloud CLI — inspect what would be registered with the controller.

Commands:
    contexts        List the contexts of a kubeconfig
    inspect         Show the cloud and credential a kubeconfig produces
    fingerprint     Show fingerprint and comment of authorized SSH keys

Nothing here talks to the controller. ``inspect --create-service-account``
is the only command that contacts the Kubernetes cluster.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import click

from kubecloud import __version__
from kubecloud.clouds.builder import (
    build_cloud,
    build_credential,
    derive_host_cloud_region,
)
from kubecloud.config import KubeCloudConfig, load_config
from kubecloud.credentials import service_account
from kubecloud.credentials.resolver import CredentialResolver
from kubecloud.errors import KubeCloudError
from kubecloud.kubeconfig.parser import parse_kubeconfig, select_context
from kubecloud.sshkeys.fingerprint import key_fingerprint

REDACTED = "<redacted>"


def _resolve_cfg() -> KubeCloudConfig:
    """Load config from kubecloud.yaml (auto-discover, never error)."""
    try:
        return load_config()
    except Exception:
        return KubeCloudConfig()


def _read_kubeconfig(path: str | None) -> str:
    if path is None:
        click.echo(
            "Error: no kubeconfig given and none set in kubecloud.yaml", err=True,
        )
        sys.exit(1)
    try:
        return Path(path).expanduser().read_text(encoding="utf-8")
    except OSError as e:
        click.echo(f"Error: cannot read kubeconfig: {e}", err=True)
        sys.exit(1)


# --- Root group ---


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """kubecloud: register Kubernetes clusters as controller clouds."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# --- contexts command ---


@cli.command()
@click.argument("kubeconfig", required=False)
def contexts(kubeconfig: str | None) -> None:
    """List kubeconfig contexts (current context starred)."""
    cfg = _resolve_cfg()
    text = _read_kubeconfig(kubeconfig or cfg.kubeconfig)
    try:
        config = parse_kubeconfig(text)
    except KubeCloudError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not config.contexts:
        click.echo("No contexts found.")
        return

    for entry in config.contexts:
        marker = "*" if entry.name == config.current_context else " "
        click.echo(
            f"{marker} {entry.name:<30} cluster={entry.context.cluster} "
            f"user={entry.context.user}"
        )


# --- inspect command ---


@cli.command()
@click.argument("kubeconfig", required=False)
@click.option("--name", "-n", required=True, help="Cloud name")
@click.option("--context", default=None, help="Kubeconfig context to use")
@click.option("--parent-cloud", default=None, help="Parent cloud name")
@click.option("--parent-region", default=None, help="Parent cloud region")
@click.option("--storage-class", default=None, help="Storage class for operator and workload storage")
@click.option(
    "--create-service-account/--no-create-service-account", default=None,
    help="Provision a controller service account in the cluster (contacts the cluster)",
)
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.option("--show-secrets", is_flag=True, help="Do not redact credential attributes")
def inspect(
    kubeconfig: str | None,
    name: str,
    context: str | None,
    parent_cloud: str | None,
    parent_region: str | None,
    storage_class: str | None,
    create_service_account: bool | None,
    json_output: bool,
    show_secrets: bool,
) -> None:
    """Show the cloud and credential that would be registered."""
    cfg = _resolve_cfg()
    text = _read_kubeconfig(kubeconfig or cfg.kubeconfig)
    if create_service_account is None:
        create_service_account = cfg.create_service_account

    resolver = CredentialResolver(
        resolver_factory=lambda clock: service_account.AdminServiceAccountResolver(
            clock,
            api_factory=service_account.kubernetes_apis,
            timeout=cfg.service_account_timeout,
        ),
        clock=time.monotonic,
    )

    try:
        config = parse_kubeconfig(text)
        active = select_context(config, context or cfg.context)
        resolved = resolver.resolve(config, active, create_service_account)
        cloud = build_cloud(
            name,
            resolved,
            resolved.context,
            derive_host_cloud_region(
                parent_cloud if parent_cloud is not None else cfg.parent_cloud_name,
                parent_region if parent_region is not None else cfg.parent_cloud_region,
            ),
            storage_class if storage_class is not None else cfg.storage_class,
        )
        credential = build_credential(resolved, resolved.context)
    except KubeCloudError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    attributes = dict(credential.attributes)
    if not show_secrets:
        attributes = {key: REDACTED for key in attributes}

    data: dict[str, Any] = {
        "context": resolved.context,
        "cloud": cloud.model_dump(),
        "credential": {
            "name": name,
            "auth_type": credential.auth_type,
            "label": credential.label,
            "attributes": attributes,
        },
    }
    if resolved.credential_uid is not None:
        data["credential_uid"] = resolved.credential_uid

    if json_output:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"Context:           {resolved.context}")
    click.echo(f"Cloud:             {cloud.name} ({cloud.type})")
    click.echo(f"Endpoint:          {cloud.endpoint}")
    click.echo(f"Host cloud region: {cloud.host_cloud_region}")
    click.echo(f"CA certificates:   {len(cloud.ca_certificates)}")
    if cloud.config:
        for key, value in cloud.config.items():
            click.echo(f"  {key}: {value}")
    click.echo(f"Credential:        {name} ({credential.auth_type})")
    for key, value in attributes.items():
        click.echo(f"  {key}: {value}")


# --- fingerprint command ---


@cli.command()
@click.argument("key_file", type=click.Path(exists=True, dir_okay=False))
def fingerprint(key_file: str) -> None:
    """Print fingerprint and comment of each key in KEY_FILE."""
    lines = Path(key_file).read_text(encoding="utf-8").splitlines()
    failures = 0
    for line in lines:
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        try:
            fp, comment = key_fingerprint(line)
        except KubeCloudError as e:
            click.echo(click.style("INVALID", fg="red") + f"  {e}", err=True)
            failures += 1
            continue
        click.echo(f"{fp}  {comment}".rstrip())

    if failures:
        sys.exit(1)
