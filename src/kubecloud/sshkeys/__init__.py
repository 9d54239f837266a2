"""Serialized access to a model's authorized SSH keys.

Clients: SSHKeysClient. Helpers: key_fingerprint, ReadWriteLock.
"""

from kubecloud.sshkeys.fingerprint import key_fingerprint
from kubecloud.sshkeys.guard import SSHKeysClient
from kubecloud.sshkeys.locking import ReadWriteLock

__all__ = [
    "key_fingerprint",
    "ReadWriteLock",
    "SSHKeysClient",
]
