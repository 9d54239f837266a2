"""kubecloud: register Kubernetes clusters as clouds with a model controller."""

__version__ = "0.4.0"

from kubecloud.clouds.client import KubernetesCloudsClient
from kubecloud.config import KubeCloudConfig, find_config, load_config
from kubecloud.credentials.resolver import CredentialResolver, new_credential_uid
from kubecloud.errors import (
    AlreadyExistsError,
    CloudConstructionError,
    ContextNotFoundError,
    ControllerError,
    CredentialResolutionError,
    InvalidKeyError,
    KubeCloudError,
    KubeconfigParseError,
    NotFoundError,
    PartialFailureError,
)
from kubecloud.kubeconfig.parser import load_kubeconfig, parse_kubeconfig, select_context
from kubecloud.models import (
    Cloud,
    CloudCredential,
    ClusterConfig,
    CreateKubernetesCloudInput,
    CreateSSHKeyInput,
    DeleteSSHKeyInput,
    DestroyKubernetesCloudInput,
    ListSSHKeysInput,
    ReadKubernetesCloudInput,
    ReadKubernetesCloudOutput,
    ReadSSHKeyInput,
    ReadSSHKeyOutput,
    ResolvedConfig,
    UpdateKubernetesCloudInput,
)
from kubecloud.sshkeys.guard import SSHKeysClient

__all__ = [
    "AlreadyExistsError",
    "Cloud",
    "CloudConstructionError",
    "CloudCredential",
    "ClusterConfig",
    "ContextNotFoundError",
    "ControllerError",
    "CreateKubernetesCloudInput",
    "CreateSSHKeyInput",
    "CredentialResolutionError",
    "CredentialResolver",
    "DeleteSSHKeyInput",
    "DestroyKubernetesCloudInput",
    "find_config",
    "InvalidKeyError",
    "KubeCloudConfig",
    "KubeCloudError",
    "KubeconfigParseError",
    "KubernetesCloudsClient",
    "ListSSHKeysInput",
    "load_config",
    "load_kubeconfig",
    "new_credential_uid",
    "NotFoundError",
    "parse_kubeconfig",
    "PartialFailureError",
    "ReadKubernetesCloudInput",
    "ReadKubernetesCloudOutput",
    "ReadSSHKeyInput",
    "ReadSSHKeyOutput",
    "ResolvedConfig",
    "select_context",
    "SSHKeysClient",
    "UpdateKubernetesCloudInput",
    "__version__",
]
