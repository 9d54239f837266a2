"""Project defaults read from ``kubecloud.yaml``.

The CLI falls back to these when an option is not given on the command
line.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from kubecloud.credentials.service_account import DEFAULT_TOKEN_TIMEOUT

CONFIG_FILENAME = "kubecloud.yaml"


@dataclass(frozen=True)
class KubeCloudConfig:
    """Parsed kubecloud project configuration."""

    config_path: Path | None = None
    kubeconfig: str | None = None
    context: str = ""
    parent_cloud_name: str = ""
    parent_cloud_region: str = ""
    storage_class: str = ""
    create_service_account: bool = False
    service_account_timeout: float = DEFAULT_TOKEN_TIMEOUT


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``kubecloud.yaml`` in *start* (default: cwd) or an ancestor."""
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: str | Path | None = None,
    *,
    auto_discover: bool = True,
) -> KubeCloudConfig:
    """Load project defaults.

    An explicit *path* must exist. Without one the file is discovered from
    the working directory when *auto_discover* is set; if nothing is found
    every setting keeps its default.

    Raises:
        FileNotFoundError: If an explicit *path* does not exist.
        ValueError: If the file is not a YAML mapping.
    """
    if path is not None:
        config_path = Path(path).resolve()
        if not config_path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        config_path = find_config() if auto_discover else None

    if config_path is None:
        return KubeCloudConfig()

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping in {config_path}, got {type(data).__name__}"
        )
    return KubeCloudConfig(
        config_path=config_path,
        kubeconfig=_kubeconfig_path(config_path, data.get("kubeconfig")),
        context=data.get("context") or "",
        parent_cloud_name=data.get("parent_cloud_name") or "",
        parent_cloud_region=data.get("parent_cloud_region") or "",
        storage_class=data.get("storage_class") or "",
        create_service_account=bool(data.get("create_service_account", False)),
        service_account_timeout=float(
            data.get("service_account_timeout", DEFAULT_TOKEN_TIMEOUT),
        ),
    )


def _kubeconfig_path(config_path: Path, value: str | None) -> str | None:
    # Relative kubeconfig paths are relative to the kubecloud.yaml holding them.
    if not value:
        return None
    return str((config_path.parent / Path(value).expanduser()).resolve())
