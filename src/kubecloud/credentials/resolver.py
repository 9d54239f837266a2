"""Credential resolver — picks the credential a new cloud is registered with.

The resolver:
1. Takes a parsed kubeconfig and its active context
2. Either passes it through unchanged (the context's own user is used), or
3. Generates a fresh credential id and asks a service-account resolver to
   provision an admin service account in the cluster for the controller
4. Returns a ResolvedConfig naming the context to build the cloud from

Resolved credentials are never cached: each call yields a new id.
"""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable

from kubecloud.controller.api import ServiceAccountResolver
from kubecloud.errors import CredentialResolutionError
from kubecloud.models import ClusterConfig, ResolvedConfig

RESOLVE_PHASE = "resolving k8s credential"

Clock = Callable[[], float]
ResolverFactory = Callable[[Clock], ServiceAccountResolver]


def new_credential_uid() -> str:
    """Generate an opaque credential id (8 lowercase hex characters)."""
    return secrets.token_hex(4)


class CredentialResolver:
    """Resolves the credential for a kubeconfig context.

    Stateless. All context comes from the arguments; the service-account
    resolver is built per call from *resolver_factory* and *clock*.
    """

    def __init__(
        self,
        resolver_factory: ResolverFactory | None = None,
        clock: Clock | None = None,
        _uid_source: Callable[[], str] = new_credential_uid,
    ) -> None:
        if resolver_factory is None:
            from kubecloud.credentials.service_account import (
                admin_service_account_resolver,
            )

            resolver_factory = admin_service_account_resolver
        self._resolver_factory = resolver_factory
        self._clock = clock or time.monotonic
        self._uid_source = _uid_source

    def resolve(
        self,
        config: ClusterConfig,
        active_context: str,
        synthesize: bool,
    ) -> ResolvedConfig:
        """Resolve the credential for *active_context*.

        Args:
            config: The parsed kubeconfig.
            active_context: Context selected by the config parser.
            synthesize: When False the config is returned as-is; when True
                the context's user is replaced by a service account
                provisioned for the controller.

        Raises:
            CredentialResolutionError: If the credential id cannot be
                generated or the service account cannot be provisioned.
        """
        if not synthesize:
            return ResolvedConfig(config=config, context=active_context)

        try:
            credential_uid = self._uid_source()
        except Exception as exc:
            raise CredentialResolutionError(
                f"generating new credential UID: {exc}", phase=RESOLVE_PHASE,
            ) from exc

        resolver = self._resolver_factory(self._clock)
        try:
            resolved = resolver(
                credential_uid,
                config.with_current_context(active_context),
                active_context,
            )
        except Exception as exc:
            raise CredentialResolutionError(str(exc), phase=RESOLVE_PHASE) from exc

        return ResolvedConfig(
            config=resolved,
            context=resolved.current_context or active_context,
            credential_uid=credential_uid,
        )
