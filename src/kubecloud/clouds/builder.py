"""Builds controller cloud and credential definitions from a kubeconfig.

Storage is only configured when the caller names a storage class; that one
class is used for both operator and workload storage. Picking a class
automatically would need a live connection to the cluster being added.
"""

from __future__ import annotations

import base64
import binascii

from kubecloud.clouds.region import HOST_CLOUD_REGION_SEPARATOR, K8S_CLOUD_OTHER
from kubecloud.errors import CloudConstructionError
from kubecloud.models import (
    AuthInfo,
    Cloud,
    CloudCredential,
    CloudRegion,
    ClusterInfo,
    ResolvedConfig,
)

# Model config keys naming the storage classes for operator and workload storage.
OPERATOR_STORAGE_KEY = "operator-storage"
WORKLOAD_STORAGE_KEY = "workload-storage"

KUBERNETES_CLOUD_TYPE = "kubernetes"
DEFAULT_REGION_NAME = "default"

# Credential auth types.
CERTIFICATE_AUTH = "certificate"
CLIENT_CERTIFICATE_AUTH = "clientcertificate"
OAUTH2_AUTH = "oauth2"
OAUTH2_WITH_CERT_AUTH = "oauth2withcert"
USERPASS_AUTH = "userpass"

SUPPORTED_AUTH_TYPES = [
    CERTIFICATE_AUTH,
    CLIENT_CERTIFICATE_AUTH,
    OAUTH2_AUTH,
    OAUTH2_WITH_CERT_AUTH,
    USERPASS_AUTH,
]


def derive_host_cloud_region(parent_cloud_name: str, parent_cloud_region: str) -> str:
    """Encode a parent cloud and region as ``<cloud>/<region>``.

    An empty side is kept as an empty segment; with neither side given the
    result is the ``"other"`` sentinel.
    """
    if parent_cloud_name or parent_cloud_region:
        return parent_cloud_name + HOST_CLOUD_REGION_SEPARATOR + parent_cloud_region
    return K8S_CLOUD_OTHER


def build_cloud(
    name: str,
    resolved: ResolvedConfig,
    active_context: str,
    host_cloud_region: str,
    storage_class_name: str = "",
) -> Cloud:
    """Derive the cloud definition for *active_context*.

    Raises:
        CloudConstructionError: If the context or its cluster is missing.
    """
    cluster = _lookup_cluster(resolved, active_context)

    ca_certificates: list[str] = []
    if cluster.certificate_authority_data:
        ca_certificates.append(
            _decode(cluster.certificate_authority_data, "certificate-authority-data"),
        )

    config: dict[str, str] = {}
    if storage_class_name:
        config[OPERATOR_STORAGE_KEY] = storage_class_name
        config[WORKLOAD_STORAGE_KEY] = storage_class_name

    return Cloud(
        name=name,
        type=KUBERNETES_CLOUD_TYPE,
        host_cloud_region=host_cloud_region,
        auth_types=list(SUPPORTED_AUTH_TYPES),
        endpoint=cluster.server,
        ca_certificates=ca_certificates,
        skip_tls_verify=cluster.insecure_skip_tls_verify,
        regions=[CloudRegion(name=DEFAULT_REGION_NAME, endpoint=cluster.server)],
        config=config,
    )


def build_credential(resolved: ResolvedConfig, active_context: str) -> CloudCredential:
    """Derive the credential of the user bound to *active_context*.

    Raises:
        CloudConstructionError: If the context or its user is missing, or
            the user carries no credential the controller supports.
    """
    context = resolved.config.get_context(active_context)
    if context is None:
        raise CloudConstructionError(
            f"kubernetes context {active_context!r} not found",
        )
    user = resolved.config.get_user(context.user)
    if user is None:
        raise CloudConstructionError(
            f"kubernetes user {context.user!r} associated with context "
            f"{active_context!r} not found",
        )

    auth_type, attributes = _credential_attributes(context.user, user)
    return CloudCredential(
        auth_type=auth_type,
        attributes=attributes,
        label=f'kubernetes credential "{context.user}"',
    )


def _lookup_cluster(resolved: ResolvedConfig, active_context: str) -> ClusterInfo:
    context = resolved.config.get_context(active_context)
    if context is None:
        raise CloudConstructionError(
            f"kubernetes context {active_context!r} not found",
        )
    cluster = resolved.config.get_cluster(context.cluster)
    if cluster is None:
        raise CloudConstructionError(
            f"kubernetes cluster {context.cluster!r} associated with context "
            f"{active_context!r} not found",
        )
    return cluster


def _credential_attributes(
    user_name: str, user: AuthInfo,
) -> tuple[str, dict[str, str]]:
    attrs: dict[str, str] = {}
    has_cert = bool(user.client_certificate_data)
    has_key = bool(user.client_key_data)
    if has_cert:
        attrs["ClientCertificateData"] = _decode(
            user.client_certificate_data, "client-certificate-data",
        )
    if has_key:
        attrs["ClientKeyData"] = _decode(user.client_key_data, "client-key-data")

    if user.token:
        attrs["Token"] = user.token
        if has_cert and has_key:
            return OAUTH2_WITH_CERT_AUTH, attrs
        return OAUTH2_AUTH, {"Token": user.token}
    if has_cert and has_key:
        return CLIENT_CERTIFICATE_AUTH, attrs
    if user.username and user.password:
        attrs["username"] = user.username
        attrs["password"] = user.password
        return USERPASS_AUTH, attrs

    raise CloudConstructionError(
        f"configuration for kubernetes user {user_name!r} not supported: "
        "expected a token, a client certificate and key, or a username "
        "and password",
    )


def _decode(value: str, field: str) -> str:
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as exc:
        raise CloudConstructionError(f"decoding {field}: {exc}") from exc
