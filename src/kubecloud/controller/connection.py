"""Scoped controller connections.

Every public operation opens exactly one connection and must release it on
every exit path. ``controller_connection()`` wraps that contract.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from kubecloud.controller.api import Connection, ConnectionProvider
from kubecloud.errors import ControllerError

logger = logging.getLogger(__name__)

CONNECT_PHASE = "connecting to controller"


@contextmanager
def controller_connection(
    provider: ConnectionProvider,
    model_uuid: str | None = None,
) -> Iterator[Connection]:
    """Open a connection and close it when the block exits.

    Raises:
        ControllerError: If the connection cannot be opened.
    """
    try:
        conn = provider.get_connection(model_uuid)
    except Exception as exc:
        raise ControllerError(str(exc), phase=CONNECT_PHASE) from exc

    try:
        yield conn
    finally:
        _close(conn)


def _close(conn: Connection) -> None:
    """Best-effort close. Logs on failure, never raises."""
    try:
        conn.close()
    except Exception:
        logger.warning("Closing controller connection failed", exc_info=True)


def current_user(conn: Connection) -> str:
    """Name of the user *conn* is authenticated as."""
    return conn.auth_user()
