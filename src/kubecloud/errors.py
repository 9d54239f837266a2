"""kubecloud exceptions.

All exceptions inherit from KubeCloudError for easy catching. Errors raised
while talking to the controller carry the phase of the operation that failed
(e.g. ``"adding kubernetes cloud"``), which prefixes the message.
"""

from __future__ import annotations


class KubeCloudError(Exception):
    """Base exception for all kubecloud errors."""

    def __init__(self, message: str, *, phase: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.phase = phase

    def __str__(self) -> str:
        if self.phase:
            return f"{self.phase}: {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self)!r})"


class KubeconfigParseError(KubeCloudError):
    """The kubeconfig document is not well-formed."""


class ContextNotFoundError(KubeCloudError):
    """Neither the requested nor the current context exists in the kubeconfig."""


class CredentialResolutionError(KubeCloudError):
    """Generating a credential id or provisioning a service account failed."""


class CloudConstructionError(KubeCloudError):
    """The resolved kubeconfig cannot be turned into a cloud or credential."""


class InvalidKeyError(KubeCloudError):
    """An SSH public key could not be parsed."""


class ControllerError(KubeCloudError):
    """A controller facade call failed."""


class NotFoundError(ControllerError):
    """A cloud, credential or SSH key does not exist."""


class AlreadyExistsError(ControllerError):
    """The controller already holds an entity with that name."""


class PartialFailureError(ControllerError):
    """One or more items of a bulk facade call failed.

    The per-item messages are joined into the error message and kept
    in ``messages``.
    """

    def __init__(self, messages: list[str], *, phase: str = "") -> None:
        super().__init__("; ".join(messages), phase=phase)
        self.messages = list(messages)


def controller_error(exc: Exception, phase: str) -> ControllerError:
    """Classify a facade exception by its message.

    The controller reports missing and duplicate entities only through the
    error text, so the message decides the type.
    """
    text = str(exc)
    if "not found" in text:
        return NotFoundError(text, phase=phase)
    if "already exists" in text:
        return AlreadyExistsError(text, phase=phase)
    return ControllerError(text, phase=phase)
