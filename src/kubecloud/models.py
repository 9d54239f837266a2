"""Core data models for kubecloud.

Defines the schemas for:
- Kubeconfig documents (clusters, users, contexts)
- Resolved configuration handed from the credential resolver to the builder
- Cloud and credential definitions submitted to the controller
- Per-item results returned by controller facades
- Input/output records of the public cloud and SSH key operations
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Kubeconfig ---


def _check_base64(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"not valid base64 data: {exc}") from None
    return value


class _KubeModel(BaseModel):
    """Immutable model that accepts kubeconfig (hyphenated) keys.

    Keys without a field (``exec``, ``auth-provider``, ``extensions``, ...)
    are kept as extras so a parsed kubeconfig dumps back complete.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")


class ClusterInfo(_KubeModel):
    server: str = ""
    certificate_authority_data: str | None = Field(
        default=None, alias="certificate-authority-data",
    )
    insecure_skip_tls_verify: bool = Field(
        default=False, alias="insecure-skip-tls-verify",
    )

    @field_validator("certificate_authority_data")
    @classmethod
    def _validate_ca(cls, value: str | None) -> str | None:
        return _check_base64(value)


class AuthInfo(_KubeModel):
    """Credentials of a kubeconfig user entry."""

    client_certificate_data: str | None = Field(
        default=None, alias="client-certificate-data",
    )
    client_key_data: str | None = Field(default=None, alias="client-key-data")
    token: str | None = None
    username: str | None = None
    password: str | None = None

    @field_validator("client_certificate_data", "client_key_data")
    @classmethod
    def _validate_data(cls, value: str | None) -> str | None:
        return _check_base64(value)


class ContextInfo(_KubeModel):
    cluster: str
    user: str
    namespace: str | None = None


class NamedCluster(_KubeModel):
    name: str
    cluster: ClusterInfo


class NamedUser(_KubeModel):
    name: str
    user: AuthInfo = Field(default_factory=AuthInfo)


class NamedContext(_KubeModel):
    name: str
    context: ContextInfo


class ClusterConfig(_KubeModel):
    """A parsed kubeconfig document.

    ``*-data`` fields keep the base64 text as written in the document so
    that ``to_kubeconfig()`` yields a loadable kubeconfig again.
    """

    api_version: str = Field(default="v1", alias="apiVersion")
    kind: str = "Config"
    clusters: list[NamedCluster] = Field(default_factory=list)
    users: list[NamedUser] = Field(default_factory=list)
    contexts: list[NamedContext] = Field(default_factory=list)
    current_context: str = Field(default="", alias="current-context")

    @field_validator("clusters", "users", "contexts", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("current_context", mode="before")
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    def get_context(self, name: str) -> ContextInfo | None:
        for entry in self.contexts:
            if entry.name == name:
                return entry.context
        return None

    def get_cluster(self, name: str) -> ClusterInfo | None:
        for entry in self.clusters:
            if entry.name == name:
                return entry.cluster
        return None

    def get_user(self, name: str) -> AuthInfo | None:
        for entry in self.users:
            if entry.name == name:
                return entry.user
        return None

    @property
    def context_names(self) -> list[str]:
        return [entry.name for entry in self.contexts]

    def with_current_context(self, name: str) -> ClusterConfig:
        return self.model_copy(update={"current_context": name})

    def to_kubeconfig(self) -> dict[str, Any]:
        """Dump back to a kubeconfig mapping (hyphenated keys, no nulls)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ResolvedConfig(BaseModel):
    """A kubeconfig whose active context carries the credential to register."""

    model_config = ConfigDict(frozen=True)

    config: ClusterConfig
    context: str
    credential_uid: str | None = None
    """8 hex characters when a service account was synthesized."""


# --- Controller cloud schema ---


class CloudRegion(BaseModel):
    name: str
    endpoint: str = ""


class Cloud(BaseModel):
    """A cloud definition as registered with the controller."""

    name: str
    type: str = "kubernetes"
    host_cloud_region: str = ""
    auth_types: list[str] = Field(default_factory=list)
    endpoint: str = ""
    ca_certificates: list[str] = Field(default_factory=list)
    skip_tls_verify: bool = False
    regions: list[CloudRegion] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)


class CloudCredential(BaseModel):
    auth_type: str
    attributes: dict[str, str] = Field(default_factory=dict)
    label: str = ""


# --- Controller per-item results ---


class ErrorInfo(BaseModel):
    message: str
    code: str = ""


class ErrorResult(BaseModel):
    """Per-item result of a bulk facade call (e.g. AddKeys, DeleteKeys)."""

    error: ErrorInfo | None = None


class StringsResult(BaseModel):
    """Per-user result of ListKeys."""

    result: list[str] = Field(default_factory=list)
    error: ErrorInfo | None = None


# --- Kubernetes cloud operations ---


class CreateKubernetesCloudInput(BaseModel):
    name: str
    kubernetes_config: str
    kubernetes_context_name: str = ""
    parent_cloud_name: str = ""
    parent_cloud_region: str = ""
    create_service_account: bool = False
    storage_class_name: str = ""


class ReadKubernetesCloudInput(BaseModel):
    name: str


class ReadKubernetesCloudOutput(BaseModel):
    name: str
    credential_name: str
    parent_cloud_name: str = ""
    parent_cloud_region: str = ""


class UpdateKubernetesCloudInput(BaseModel):
    name: str
    kubernetes_config: str
    kubernetes_context_name: str = ""
    parent_cloud_name: str = ""
    parent_cloud_region: str = ""
    create_service_account: bool = False


class DestroyKubernetesCloudInput(BaseModel):
    name: str


# --- SSH key operations ---


class CreateSSHKeyInput(BaseModel):
    username: str
    model_uuid: str
    payload: str


class ReadSSHKeyInput(BaseModel):
    username: str
    model_uuid: str
    key_identifier: str


class ReadSSHKeyOutput(BaseModel):
    payload: str


class DeleteSSHKeyInput(BaseModel):
    username: str
    model_uuid: str
    key_identifier: str


class ListSSHKeysInput(BaseModel):
    username: str
    model_uuid: str
