"""Authorized SSH key parsing.

Computes the MD5 fingerprint (``aa:bb:...``) and the trailing comment of an
authorized-keys line, the two identifiers a key can be addressed by. Keys
are loaded with ``cryptography`` so malformed key material is rejected, not
just a malformed line.
"""

from __future__ import annotations

import base64
import hashlib

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
    load_ssh_public_key,
)

from kubecloud.errors import InvalidKeyError

_KEY_TYPE_PREFIXES = ("ssh-", "ecdsa-", "sk-")


def _is_key_type(token: str) -> bool:
    return token.startswith(_KEY_TYPE_PREFIXES)


def key_fingerprint(key: str) -> tuple[str, str]:
    """Return ``(fingerprint, comment)`` for an authorized-keys line.

    The line may start with an options field (``no-pty,from="..." ssh-rsa
    AAAA... comment``).

    Raises:
        InvalidKeyError: If the line is not a parseable public key.
    """
    fields = key.strip().split()
    if fields and not _is_key_type(fields[0]):
        fields = fields[1:]
    if len(fields) < 2 or not _is_key_type(fields[0]):
        raise InvalidKeyError(f"generating key fingerprint: invalid authorized_key {key!r}")

    try:
        public_key = load_ssh_public_key(f"{fields[0]} {fields[1]}".encode())
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyError(f"generating key fingerprint: {exc}") from exc

    # OpenSSH form is "<type> <base64 wire blob>"; the digest covers the blob.
    openssh = public_key.public_bytes(Encoding.OpenSSH, PublicFormat.OpenSSH)
    blob = base64.b64decode(openssh.split()[1])
    digest = hashlib.md5(blob, usedforsecurity=False).hexdigest()
    fingerprint = ":".join(digest[i:i + 2] for i in range(0, len(digest), 2))
    comment = " ".join(fields[2:])
    return fingerprint, comment
