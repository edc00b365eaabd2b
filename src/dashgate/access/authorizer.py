"""
Request-time authorization of dashboard access by tenant API key.

One attempt runs four steps, each of which can end it:

1. extract the key (header, then query string)    -> MISSING_CREDENTIAL
2. extract the dashboard UID (path param, then the
   first segment of the catch-all remainder)        -> MISSING_RESOURCE
3. verify the key against every active stored hash -> INVALID_CREDENTIAL
4. look up the tenant's grant for the dashboard    -> PERMISSION_DENIED / ALLOWED

Stored hashes are salted, so step 3 cannot be an indexed lookup: the cost of
an attempt is one Argon2 verification per active key in the worst case.
The authorizer only reads.
"""

import asyncio
import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from dashgate.common.exceptions import (
    DashgateError,
    InvalidCredentialError,
    MissingCredentialError,
    MissingResourceError,
    PermissionDeniedError,
)
from dashgate.credentials.hasher import ApiKeyHasher
from dashgate.tenants.models import ApiKeyModel
from dashgate.tenants.store import TenantStore

logger = logging.getLogger(__name__)

DASHBOARD_UID_PARAM = "dashboard_uid"
REMAINDER_PARAM = "remainder"


class AuthorizationReason(str, enum.Enum):
    ALLOWED = "ALLOWED"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    MISSING_RESOURCE = "MISSING_RESOURCE"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    PERMISSION_DENIED = "PERMISSION_DENIED"


_REASON_ERRORS: dict[AuthorizationReason, type[DashgateError]] = {
    AuthorizationReason.MISSING_CREDENTIAL: MissingCredentialError,
    AuthorizationReason.MISSING_RESOURCE: MissingResourceError,
    AuthorizationReason.INVALID_CREDENTIAL: InvalidCredentialError,
    AuthorizationReason.PERMISSION_DENIED: PermissionDeniedError,
}


@dataclass(frozen=True)
class AuthorizationResult:
    """Outcome of one authorization attempt. Never carries key material."""

    allowed: bool
    reason: AuthorizationReason
    dashboard_uid: Optional[str] = None
    tenant_id: Optional[int] = None
    tenant_name: Optional[str] = None
    key_source: Optional[str] = None

    def raise_for_reason(self) -> None:
        """Raise the matching DashgateError if the attempt was denied."""
        if not self.allowed:
            raise _REASON_ERRORS[self.reason]()


@dataclass(frozen=True)
class Credential:
    value: str
    source: str  # "header" or "query"


class PermissionAuthorizer:
    """Decide whether an API key may access a dashboard."""

    def __init__(
        self,
        hasher: ApiKeyHasher,
        store: TenantStore | None = None,
        header_name: str = "X-Api-Key",
        query_param: str = "apiKey",
    ):
        self.hasher = hasher
        self.store = store or TenantStore()
        self.header_name = header_name
        self.query_param = query_param

    # ── Extraction ──

    def extract_credential(
        self, headers: Mapping[str, str], query: Mapping[str, str]
    ) -> Optional[Credential]:
        value = headers.get(self.header_name)
        if value:
            return Credential(value, "header")
        value = query.get(self.query_param)
        if value:
            return Credential(value, "query")
        return None

    @staticmethod
    def extract_dashboard_uid(path_params: Mapping[str, str]) -> Optional[str]:
        uid = path_params.get(DASHBOARD_UID_PARAM)
        if uid:
            return uid
        remainder = path_params.get(REMAINDER_PARAM) or ""
        for segment in remainder.split("/"):
            if segment:
                return segment
        return None

    # ── Matching ──

    async def match_key(
        self, session: AsyncSession, raw_key: str
    ) -> Optional[ApiKeyModel]:
        """Return the first active key whose hash verifies ``raw_key``.

        Each verification runs in a worker thread; cancelling the calling
        task stops the scan before the next key is tried.
        """
        active_keys = await self.store.list_active_keys(session)
        for key in active_keys:
            if await asyncio.to_thread(self.hasher.verify, raw_key, key.key_hash):
                return key
        return None

    # ── Full attempt ──

    async def authorize(
        self,
        session: AsyncSession,
        credential: Optional[Credential],
        dashboard_uid: Optional[str],
    ) -> AuthorizationResult:
        if credential is None:
            return self._finish(AuthorizationResult(False, AuthorizationReason.MISSING_CREDENTIAL))

        source = credential.source
        if not dashboard_uid:
            return self._finish(AuthorizationResult(
                False, AuthorizationReason.MISSING_RESOURCE, key_source=source,
            ))

        key = await self.match_key(session, credential.value)
        if key is None:
            return self._finish(AuthorizationResult(
                False, AuthorizationReason.INVALID_CREDENTIAL,
                dashboard_uid=dashboard_uid, key_source=source,
            ))

        tenant_id = key.tenant_id
        tenant_name = key.tenant.name
        if not await self.store.permission_exists(session, tenant_id, dashboard_uid):
            return self._finish(AuthorizationResult(
                False, AuthorizationReason.PERMISSION_DENIED,
                dashboard_uid=dashboard_uid, tenant_id=tenant_id,
                tenant_name=tenant_name, key_source=source,
            ))

        return self._finish(AuthorizationResult(
            True, AuthorizationReason.ALLOWED,
            dashboard_uid=dashboard_uid, tenant_id=tenant_id,
            tenant_name=tenant_name, key_source=source,
        ))

    async def authorize_request(
        self,
        session: AsyncSession,
        headers: Mapping[str, str],
        query: Mapping[str, str],
        path_params: Mapping[str, str],
    ) -> AuthorizationResult:
        """Extract credential and dashboard UID from request parts, then authorize."""
        return await self.authorize(
            session,
            self.extract_credential(headers, query),
            self.extract_dashboard_uid(path_params),
        )

    @staticmethod
    def _finish(result: AuthorizationResult) -> AuthorizationResult:
        extra = {
            "reason": result.reason.value,
            "tenant_id": result.tenant_id,
            "dashboard_uid": result.dashboard_uid,
            "key_source": result.key_source,
        }
        if result.allowed:
            logger.info(
                "Authorization succeeded for tenant %s (%s) to dashboard '%s'",
                result.tenant_id, result.tenant_name, result.dashboard_uid,
                extra=extra,
            )
        else:
            logger.warning("Authorization failed: %s", result.reason.value, extra=extra)
        return result
