"""Provisions a cluster-admin service account for the controller.

Uses the official ``kubernetes`` Python client to create, in the cluster
the kubeconfig context points at:

- a ClusterRole granting every verb on every resource,
- a ServiceAccount in ``kube-system``,
- a ClusterRoleBinding between the two,
- a service-account token Secret,

all named ``juju-credential-<uid>``. Objects that already exist are reused.
The token is then swapped in as the context's user.

Requires: ``pip install kubecloud[k8s]``
"""

from __future__ import annotations

import base64
import logging
import time
from collections.abc import Callable
from typing import Any

from kubecloud.models import AuthInfo, ClusterConfig, NamedContext, NamedUser

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_PREFIX = "juju-credential"
SERVICE_ACCOUNT_NAMESPACE = "kube-system"
CREDENTIAL_LABEL = "juju.is/credential"

DEFAULT_TOKEN_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 1.0

ApiFactory = Callable[[ClusterConfig, str], tuple[Any, Any]]


class ServiceAccountError(Exception):
    """Raised when the service account or its token cannot be provisioned."""


def _check_kubernetes_available() -> None:
    """Raise ImportError with helpful message if kubernetes is not installed."""
    try:
        import kubernetes  # noqa: F401
    except ImportError:
        raise ImportError(
            "The 'kubernetes' package is required to create service accounts. "
            "Install it with: pip install kubecloud[k8s]"
        ) from None


def kubernetes_apis(config: ClusterConfig, context_name: str) -> tuple[Any, Any]:
    """Build ``(CoreV1Api, RbacAuthorizationV1Api)`` for *context_name*."""
    _check_kubernetes_available()
    from kubernetes import client
    from kubernetes import config as kube_config

    api_client = kube_config.new_client_from_config_dict(
        config_dict=config.to_kubeconfig(),
        context=context_name,
        persist_config=False,
    )
    return client.CoreV1Api(api_client), client.RbacAuthorizationV1Api(api_client)


class AdminServiceAccountResolver:
    """Service-account resolver backed by the Kubernetes API.

    *clock* measures the token wait deadline; *sleep* pauses between polls.
    """

    def __init__(
        self,
        clock: Callable[[], float],
        sleep: Callable[[float], None] = time.sleep,
        api_factory: ApiFactory = kubernetes_apis,
        timeout: float = DEFAULT_TOKEN_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._clock = clock
        self._sleep = sleep
        self._api_factory = api_factory
        self._timeout = timeout
        self._poll_interval = poll_interval

    def __call__(
        self,
        credential_uid: str,
        config: ClusterConfig,
        context_name: str,
    ) -> ClusterConfig:
        core, rbac = self._api_factory(config, context_name)
        name = f"{SERVICE_ACCOUNT_PREFIX}-{credential_uid}"
        labels = {CREDENTIAL_LABEL: credential_uid}

        _create_or_reuse(
            rbac.create_cluster_role, body=_cluster_role_body(name, labels),
        )
        _create_or_reuse(
            core.create_namespaced_service_account,
            namespace=SERVICE_ACCOUNT_NAMESPACE,
            body=_service_account_body(name, labels),
        )
        _create_or_reuse(
            rbac.create_cluster_role_binding,
            body=_cluster_role_binding_body(name, labels),
        )
        _create_or_reuse(
            core.create_namespaced_secret,
            namespace=SERVICE_ACCOUNT_NAMESPACE,
            body=_token_secret_body(name, labels),
        )
        logger.debug("Ensured service account %s in %s", name, SERVICE_ACCOUNT_NAMESPACE)

        token = self._wait_for_token(core, name)
        return replace_context_user(config, context_name, name, token)

    def _wait_for_token(self, core: Any, name: str) -> str:
        deadline = self._clock() + self._timeout
        while True:
            secret = core.read_namespaced_secret(
                name=name, namespace=SERVICE_ACCOUNT_NAMESPACE,
            )
            token = (secret.data or {}).get("token")
            if token:
                return base64.b64decode(token).decode("utf-8")
            if self._clock() >= deadline:
                raise ServiceAccountError(
                    f"timed out after {self._timeout}s waiting for the token "
                    f"of service account {name!r}"
                )
            self._sleep(self._poll_interval)


def admin_service_account_resolver(clock: Callable[[], float]) -> AdminServiceAccountResolver:
    """Default resolver factory used by CredentialResolver."""
    return AdminServiceAccountResolver(clock=clock)


def replace_context_user(
    config: ClusterConfig,
    context_name: str,
    user_name: str,
    token: str,
) -> ClusterConfig:
    """Return a copy of *config* whose context authenticates with *token*."""
    users = [u for u in config.users if u.name != user_name]
    users.append(NamedUser(name=user_name, user=AuthInfo(token=token)))

    contexts = []
    for entry in config.contexts:
        if entry.name == context_name:
            entry = NamedContext(
                name=entry.name,
                context=entry.context.model_copy(update={"user": user_name}),
            )
        contexts.append(entry)

    return config.model_copy(update={
        "users": users,
        "contexts": contexts,
        "current_context": context_name,
    })


# --- Private: object creation ---


def _create_or_reuse(create: Callable[..., Any], **kwargs: Any) -> None:
    try:
        create(**kwargs)
    except Exception as exc:
        # Detect kubernetes ApiException by class name to avoid import
        if type(exc).__name__ == "ApiException" and getattr(exc, "status", None) == 409:
            return
        raise


def _metadata(
    name: str, labels: dict[str, str], namespace: str | None = None,
) -> dict[str, Any]:
    meta: dict[str, Any] = {"name": name, "labels": dict(labels)}
    if namespace is not None:
        meta["namespace"] = namespace
    return meta


def _cluster_role_body(name: str, labels: dict[str, str]) -> dict[str, Any]:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRole",
        "metadata": _metadata(name, labels),
        "rules": [
            {"apiGroups": ["*"], "resources": ["*"], "verbs": ["*"]},
            {"nonResourceURLs": ["*"], "verbs": ["*"]},
        ],
    }


def _service_account_body(name: str, labels: dict[str, str]) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": _metadata(name, labels, SERVICE_ACCOUNT_NAMESPACE),
    }


def _cluster_role_binding_body(name: str, labels: dict[str, str]) -> dict[str, Any]:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRoleBinding",
        "metadata": _metadata(name, labels),
        "roleRef": {
            "apiGroup": "rbac.authorization.k8s.io",
            "kind": "ClusterRole",
            "name": name,
        },
        "subjects": [{
            "kind": "ServiceAccount",
            "name": name,
            "namespace": SERVICE_ACCOUNT_NAMESPACE,
        }],
    }


def _token_secret_body(name: str, labels: dict[str, str]) -> dict[str, Any]:
    meta = _metadata(name, labels, SERVICE_ACCOUNT_NAMESPACE)
    meta["annotations"] = {"kubernetes.io/service-account.name": name}
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "type": "kubernetes.io/service-account-token",
        "metadata": meta,
    }
