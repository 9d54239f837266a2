"""Controller entity tags.

Tags are the addressing keys the controller facades expect, e.g.
``cloud-k8s`` or ``cloudcred-k8s_admin_k8s``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_CLOUD_SNIPPET = r"[a-zA-Z0-9][a-zA-Z0-9.-]*"
_USER_SNIPPET = r"(?:[a-zA-Z0-9][a-zA-Z0-9.+-]*[a-zA-Z0-9]|[a-zA-Z0-9])"
_DOMAIN_SNIPPET = r"(?:@[a-zA-Z0-9][a-zA-Z0-9.+-]*)?"
_CREDENTIAL_NAME_SNIPPET = r"[a-zA-Z][a-zA-Z0-9.@_-]*"

_VALID_CLOUD_CREDENTIAL = re.compile(
    rf"^({_CLOUD_SNIPPET})/({_USER_SNIPPET}{_DOMAIN_SNIPPET})/"
    rf"({_CREDENTIAL_NAME_SNIPPET})$"
)


def _quote_separator(value: str) -> str:
    return value.replace("_", "%5f")


@dataclass(frozen=True)
class CloudTag:
    name: str

    def __str__(self) -> str:
        return f"cloud-{self.name}"


@dataclass(frozen=True)
class UserTag:
    name: str

    def __str__(self) -> str:
        return f"user-{self.name}"


@dataclass(frozen=True)
class CloudCredentialTag:
    """Identifies a credential owned by a user on a cloud."""

    cloud: str
    owner: str
    name: str

    @property
    def id(self) -> str:
        return f"{self.cloud}/{self.owner}/{self.name}"

    def __str__(self) -> str:
        parts = (self.cloud, self.owner, self.name)
        return "cloudcred-" + "_".join(_quote_separator(p) for p in parts)

    @classmethod
    def from_id(cls, credential_id: str) -> CloudCredentialTag:
        """Build a tag from a ``cloud/owner/name`` id.

        Raises:
            ValueError: If the id is not a valid cloud credential id.
        """
        match = _VALID_CLOUD_CREDENTIAL.match(credential_id)
        if match is None:
            raise ValueError(f"invalid cloud credential id {credential_id!r}")
        return cls(cloud=match.group(1), owner=match.group(2), name=match.group(3))


def cloud_credential_tag(cloud: str, user: str, name: str) -> CloudCredentialTag:
    """Build the tag a credential is registered under.

    Raises:
        ValueError: If the combination is not a valid cloud credential id.
    """
    credential_id = f"{cloud}/{user}/{name}"
    if not _VALID_CLOUD_CREDENTIAL.match(credential_id):
        raise ValueError(
            f"invalid cloud credential to cloud {cloud} with user {user} "
            f"and credential name {name}"
        )
    return CloudCredentialTag(cloud=cloud, owner=user, name=name)
