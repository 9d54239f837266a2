"""SSH key client — serializes access to a model's authorized keys.

The controller keeps one global key set per model (the user argument of
the key facade does not partition it) and misbehaves when AddKeys,
ListKeys and DeleteKeys run concurrently against the same model. This
client holds a readers-writer lock across each whole controller round
trip: reads of a single key share it, every other operation holds it
alone.

The lock belongs to the client instance. Two clients for the same model,
in one process or several, do not coordinate with each other.
"""

from __future__ import annotations

import logging

from kubecloud.controller.api import (
    FULL_KEYS,
    ConnectionProvider,
    KeyFingerprinter,
    KeyManagerAPIFactory,
    default_key_manager_api,
)
from kubecloud.controller.connection import controller_connection
from kubecloud.errors import (
    ControllerError,
    InvalidKeyError,
    NotFoundError,
    PartialFailureError,
    controller_error,
)
from kubecloud.models import (
    CreateSSHKeyInput,
    DeleteSSHKeyInput,
    ErrorResult,
    ListSSHKeysInput,
    ReadSSHKeyInput,
    ReadSSHKeyOutput,
    StringsResult,
)
from kubecloud.sshkeys.fingerprint import key_fingerprint
from kubecloud.sshkeys.locking import ReadWriteLock

logger = logging.getLogger(__name__)


class SSHKeysClient:
    """Client for a model's authorized SSH keys."""

    def __init__(
        self,
        connections: ConnectionProvider,
        key_api_factory: KeyManagerAPIFactory | None = None,
        fingerprinter: KeyFingerprinter = key_fingerprint,
        lock: ReadWriteLock | None = None,
    ) -> None:
        self._connections = connections
        self._key_api = key_api_factory or default_key_manager_api
        self._fingerprint = fingerprinter
        self._lock = lock or ReadWriteLock()

    def create(self, input: CreateSSHKeyInput) -> None:
        """Add a key to the model.

        Raises:
            PartialFailureError: If the controller rejected the key.
        """
        with (
            self._lock.write_locked(),
            controller_connection(self._connections, input.model_uuid) as conn,
        ):
            api = self._key_api(conn)
            try:
                results = api.add_keys(input.username, input.payload)
            except Exception as exc:
                raise controller_error(exc, "adding ssh key") from exc
            _raise_for_results(results, "adding ssh key")

    def read(self, input: ReadSSHKeyInput) -> ReadSSHKeyOutput:
        """Find a key by fingerprint or comment.

        Raises:
            NotFoundError: If no key matches.
            InvalidKeyError: If the controller returned an unparseable key.
        """
        with (
            self._lock.read_locked(),
            controller_connection(self._connections, input.model_uuid) as conn,
        ):
            api = self._key_api(conn)
            for result in self._list(api, input.username):
                for key in result.result:
                    if self._matches(key, input.key_identifier):
                        return ReadSSHKeyOutput(payload=key)

        raise NotFoundError(f"no ssh key found for {input.key_identifier}")

    def delete(self, input: DeleteSSHKeyInput) -> None:
        """Remove a key from the model.

        The controller refuses to remove a model's last key, so deleting
        the only remaining key is skipped with a warning instead.

        Raises:
            PartialFailureError: If the controller rejected the deletion.
        """
        with (
            self._lock.write_locked(),
            controller_connection(self._connections, input.model_uuid) as conn,
        ):
            api = self._key_api(conn)

            results = self._list(api, input.username)
            if len(results) == 1 and len(results[0].result) == 1:
                if self._matches(results[0].result[0], input.key_identifier):
                    logger.warning(
                        "ssh key %s is the last one in model %s and will "
                        "not be removed",
                        input.key_identifier, input.model_uuid,
                    )
                    return

            try:
                results = api.delete_keys(input.username, input.key_identifier)
            except Exception as exc:
                raise controller_error(exc, "deleting ssh key") from exc
            _raise_for_results(results, "deleting ssh key")

    def list(self, input: ListSSHKeysInput) -> list[str]:
        """Return every authorized key of the model.

        Takes the exclusive lock so a listing never interleaves with an
        add or delete.
        """
        with (
            self._lock.write_locked(),
            controller_connection(self._connections, input.model_uuid) as conn,
        ):
            api = self._key_api(conn)
            results = self._list(api, input.username)
            if not results:
                return []
            # The controller answers per requested user; only one is asked for.
            result = results[0]
            if result.error is not None:
                raise ControllerError(result.error.message, phase="listing ssh keys")
            return list(result.result)

    # --- Private ---

    @staticmethod
    def _list(api, username: str) -> list[StringsResult]:
        try:
            return api.list_keys(FULL_KEYS, username)
        except Exception as exc:
            raise controller_error(exc, "listing ssh keys") from exc

    def _matches(self, key: str, identifier: str) -> bool:
        try:
            fingerprint, comment = self._fingerprint(key)
        except InvalidKeyError:
            raise
        except Exception as exc:
            raise InvalidKeyError(
                f"error getting fingerprint for ssh key: {exc}",
            ) from exc
        return identifier in (fingerprint, comment)


def _raise_for_results(results: list[ErrorResult], phase: str) -> None:
    messages = [r.error.message for r in results or [] if r.error is not None]
    messages = [m for m in messages if m]
    if messages:
        raise PartialFailureError(messages, phase=phase)
