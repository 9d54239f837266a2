"""Kubeconfig parsing and context selection.

Decodes a raw kubeconfig document into a ClusterConfig and decides which
context is active: an explicit override wins, otherwise the document's own
``current-context``.
"""

from __future__ import annotations

import yaml
from pydantic import ValidationError

from kubecloud.errors import ContextNotFoundError, KubeconfigParseError
from kubecloud.models import ClusterConfig

PARSE_PHASE = "parsing kubernetes configuration data"


def parse_kubeconfig(data: bytes | str) -> ClusterConfig:
    """Parse kubeconfig bytes or text.

    An empty document yields an empty config.

    Raises:
        KubeconfigParseError: If the data is not valid YAML, not a mapping,
            or does not match the kubeconfig schema.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise KubeconfigParseError(
                f"kubeconfig is not UTF-8 text: {exc}", phase=PARSE_PHASE,
            ) from exc

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as exc:
        raise KubeconfigParseError(
            f"invalid YAML: {exc}", phase=PARSE_PHASE,
        ) from exc

    if not isinstance(raw, dict):
        raise KubeconfigParseError(
            f"expected a YAML mapping, got {type(raw).__name__}",
            phase=PARSE_PHASE,
        )

    try:
        return ClusterConfig.model_validate(raw)
    except ValidationError as exc:
        raise KubeconfigParseError(
            f"invalid kubeconfig: {exc}", phase=PARSE_PHASE,
        ) from exc


def select_context(config: ClusterConfig, override: str = "") -> str:
    """Return the name of the active context.

    The context must exist and reference a cluster and a user that exist.

    Raises:
        ContextNotFoundError: If no usable context can be selected.
    """
    name = override or config.current_context
    if not name:
        raise ContextNotFoundError(
            "no context given and the kubeconfig has no current-context",
            phase=PARSE_PHASE,
        )

    context = config.get_context(name)
    if context is None:
        available = ", ".join(config.context_names) or "none"
        raise ContextNotFoundError(
            f"kubernetes context {name!r} not found (available: {available})",
            phase=PARSE_PHASE,
        )
    if config.get_cluster(context.cluster) is None:
        raise ContextNotFoundError(
            f"kubernetes cluster {context.cluster!r} associated with "
            f"context {name!r} not found",
            phase=PARSE_PHASE,
        )
    if config.get_user(context.user) is None:
        raise ContextNotFoundError(
            f"kubernetes user {context.user!r} associated with "
            f"context {name!r} not found",
            phase=PARSE_PHASE,
        )
    return name


def load_kubeconfig(data: bytes | str, context_name: str = "") -> ClusterConfig:
    """Parse *data* and make the selected context the current one."""
    config = parse_kubeconfig(data)
    return config.with_current_context(select_context(config, context_name))
