"""Kubernetes cloud client — registers clusters as controller clouds.

Create, read, update and remove a Kubernetes cloud through the controller's
cloud facade. Each operation opens its own connection, closes it on every
exit path, and reports controller failures annotated with the phase that
failed. Nothing is retried and nothing is rolled back: a cloud whose
credential could not be added stays registered.

Usage::

    clouds = KubernetesCloudsClient(connections)
    credential = clouds.create(CreateKubernetesCloudInput(
        name="k8s",
        kubernetes_config=Path("~/.kube/config").expanduser().read_text(),
        storage_class_name="fast-ssd",
    ))
"""

from __future__ import annotations

import logging

from kubecloud.clouds.builder import (
    build_cloud,
    build_credential,
    derive_host_cloud_region,
)
from kubecloud.clouds.region import parent_cloud_and_region
from kubecloud.controller.api import (
    CloudAPIFactory,
    ConnectionProvider,
    default_cloud_api,
)
from kubecloud.controller.connection import controller_connection, current_user
from kubecloud.controller.tags import CloudTag, UserTag, cloud_credential_tag
from kubecloud.credentials.resolver import CredentialResolver
from kubecloud.errors import ControllerError, NotFoundError, controller_error
from kubecloud.kubeconfig.parser import parse_kubeconfig, select_context
from kubecloud.models import (
    Cloud,
    CreateKubernetesCloudInput,
    DestroyKubernetesCloudInput,
    ReadKubernetesCloudInput,
    ReadKubernetesCloudOutput,
    ResolvedConfig,
    UpdateKubernetesCloudInput,
)

logger = logging.getLogger(__name__)


class KubernetesCloudsClient:
    """Client for Kubernetes clouds.

    Holds no mutable state; safe to share between threads. Concurrent
    creates of the same cloud name are settled by the controller.
    """

    def __init__(
        self,
        connections: ConnectionProvider,
        cloud_api_factory: CloudAPIFactory | None = None,
        resolver: CredentialResolver | None = None,
    ) -> None:
        self._connections = connections
        self._cloud_api = cloud_api_factory or default_cloud_api
        self._resolver = resolver or CredentialResolver()

    def create(self, input: CreateKubernetesCloudInput) -> str:
        """Register the cloud and its credential; return the credential name.

        The credential is named after the cloud and owned by the user the
        controller connection is authenticated as.
        """
        with controller_connection(self._connections) as conn:
            api = self._cloud_api(conn)

            resolved = self._resolve(
                input.kubernetes_config,
                input.kubernetes_context_name,
                input.create_service_account,
            )
            cloud = build_cloud(
                input.name,
                resolved,
                resolved.context,
                derive_host_cloud_region(
                    input.parent_cloud_name, input.parent_cloud_region,
                ),
                input.storage_class_name,
            )
            self._call(
                "adding kubernetes cloud", api.add_cloud, cloud, False,
            )
            logger.info("Added kubernetes cloud %s", cloud.name)

            credential_name = input.name
            try:
                tag = cloud_credential_tag(
                    input.name, current_user(conn), credential_name,
                )
            except ValueError as exc:
                raise ControllerError(
                    str(exc), phase="getting cloud credential tag",
                ) from exc

            credential = build_credential(resolved, resolved.context)
            self._call(
                "adding kubernetes cloud credential",
                api.add_credential, str(tag), credential,
            )
            logger.info(
                "Added credential %s for kubernetes cloud %s",
                credential_name, cloud.name,
            )
            return credential_name

    def read(self, input: ReadKubernetesCloudInput) -> ReadKubernetesCloudOutput:
        """Fetch the cloud and the caller's credential for it.

        When the caller holds several credentials for the cloud, the first
        one the controller returns is reported.
        """
        with controller_connection(self._connections) as conn:
            api = self._cloud_api(conn)

            cloud: Cloud = self._call("getting clouds", api.cloud, CloudTag(input.name))

            user = current_user(conn)
            tags = self._call(
                "getting user credentials",
                api.user_credentials, UserTag(user), CloudTag(input.name),
            )
            if not tags:
                raise NotFoundError(
                    f"cloud credentials for user {user!r} not found",
                    phase="getting user credentials",
                )

            parent_cloud, parent_region = parent_cloud_and_region(
                cloud.host_cloud_region,
            )
            return ReadKubernetesCloudOutput(
                name=input.name,
                credential_name=tags[0].name,
                parent_cloud_name=parent_cloud,
                parent_cloud_region=parent_region,
            )

    def update(self, input: UpdateKubernetesCloudInput) -> None:
        """Replace the cloud definition wholesale.

        The controller has no partial cloud update, and credentials are
        left alone.
        """
        with controller_connection(self._connections) as conn:
            api = self._cloud_api(conn)

            resolved = self._resolve(
                input.kubernetes_config,
                input.kubernetes_context_name,
                input.create_service_account,
            )
            cloud = build_cloud(
                input.name,
                resolved,
                resolved.context,
                derive_host_cloud_region(
                    input.parent_cloud_name, input.parent_cloud_region,
                ),
            )
            self._call("updating kubernetes cloud", api.update_cloud, cloud)
            logger.info("Updated kubernetes cloud %s", cloud.name)

    def remove(self, input: DestroyKubernetesCloudInput) -> None:
        with controller_connection(self._connections) as conn:
            api = self._cloud_api(conn)
            self._call("removing kubernetes cloud", api.remove_cloud, input.name)
            logger.info("Removed kubernetes cloud %s", input.name)

    # --- Private ---

    def _resolve(
        self,
        kubernetes_config: str,
        context_name: str,
        create_service_account: bool,
    ) -> ResolvedConfig:
        config = parse_kubeconfig(kubernetes_config)
        active = select_context(config, context_name)
        return self._resolver.resolve(config, active, create_service_account)

    @staticmethod
    def _call(phase: str, method, *args):
        logger.debug("Controller call: %s", phase)
        try:
            return method(*args)
        except Exception as exc:
            raise controller_error(exc, phase) from exc
