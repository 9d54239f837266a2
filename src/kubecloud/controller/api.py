"""Protocols for the controller collaborators kubecloud talks to.

The controller connection and its facades are supplied by the caller.
Any object with the right methods satisfies these protocols; tests pass
in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from kubecloud.controller.tags import CloudCredentialTag, CloudTag, UserTag
from kubecloud.models import (
    Cloud,
    CloudCredential,
    ClusterConfig,
    ErrorResult,
    StringsResult,
)

FULL_KEYS = "full"
"""ListKeys format returning whole authorized-key lines."""


@runtime_checkable
class Connection(Protocol):
    """An open API connection to the controller."""

    def close(self) -> None: ...

    def auth_user(self) -> str:
        """Name of the user the connection is authenticated as."""
        ...


@runtime_checkable
class ConnectionProvider(Protocol):
    def get_connection(self, model_uuid: str | None = None) -> Connection:
        """Open a connection to the controller, or to one model if given."""
        ...


@runtime_checkable
class CloudAPIClient(Protocol):
    """The controller's cloud management facade."""

    def add_cloud(self, cloud: Cloud, force: bool) -> None: ...

    def cloud(self, tag: CloudTag) -> Cloud: ...

    def update_cloud(self, cloud: Cloud) -> None: ...

    def remove_cloud(self, name: str) -> None: ...

    def user_credentials(
        self, user: UserTag, cloud: CloudTag,
    ) -> list[CloudCredentialTag]: ...

    def add_credential(self, tag: str, credential: CloudCredential) -> None: ...


@runtime_checkable
class KeyManagerAPIClient(Protocol):
    """The controller's authorized SSH key facade.

    Keys are global per model; the user argument is accepted but does not
    partition the key set.
    """

    def add_keys(self, user: str, *keys: str) -> list[ErrorResult]: ...

    def list_keys(self, mode: str, *users: str) -> list[StringsResult]: ...

    def delete_keys(self, user: str, *keys: str) -> list[ErrorResult]: ...


ServiceAccountResolver = Callable[[str, ClusterConfig, str], ClusterConfig]
"""``(credential_uid, config, context_name) -> config``; swaps the context's
user for a service-account credential provisioned in the cluster."""

KeyFingerprinter = Callable[[str], tuple[str, str]]
"""``(authorized_key) -> (fingerprint, comment)``."""

CloudAPIFactory = Callable[[Connection], CloudAPIClient]
KeyManagerAPIFactory = Callable[[Connection], KeyManagerAPIClient]


def default_cloud_api(connection: Connection) -> CloudAPIClient:
    """Obtain the cloud facade bound to *connection*."""
    return connection.cloud_api()  # type: ignore[attr-defined]


def default_key_manager_api(connection: Connection) -> KeyManagerAPIClient:
    """Obtain the key manager facade bound to *connection*."""
    return connection.key_manager_api()  # type: ignore[attr-defined]
