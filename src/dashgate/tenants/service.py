"""Tenant and API key lifecycle: creation, key rotation, dashboard grants.

Plaintext keys exist only inside these methods and in their return values.
They are hashed before anything touches the session and are never logged.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from dashgate.common.exceptions import (
    ConflictError,
    InternalInconsistencyError,
    InvalidArgumentError,
    PermissionNotFoundError,
    TenantNotFoundError,
)
from dashgate.credentials.generator import DEFAULT_PREFIX, generate_api_key
from dashgate.credentials.hasher import ApiKeyHasher
from dashgate.tenants.models import ApiKeyModel, DashboardPermissionModel, TenantModel
from dashgate.tenants.store import TenantStore

logger = logging.getLogger(__name__)

KEYS_PER_TENANT = 2


class TenantService:
    """Administrative tenant operations. Never used on the request path."""

    def __init__(
        self,
        hasher: ApiKeyHasher,
        store: TenantStore | None = None,
        key_prefix: str = DEFAULT_PREFIX,
    ):
        self.hasher = hasher
        self.store = store or TenantStore()
        self.key_prefix = key_prefix

    async def _mint_key(self) -> tuple[str, str]:
        """Return (plaintext, hash) for a brand-new key."""
        raw_key = generate_api_key(self.key_prefix)
        key_hash = await asyncio.to_thread(self.hasher.hash, raw_key)
        return raw_key, key_hash

    async def _require_tenant(
        self, session: AsyncSession, tenant_id: int
    ) -> TenantModel:
        tenant = await self.store.get_tenant(session, tenant_id)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant with ID {tenant_id} not found")
        return tenant

    @staticmethod
    def _check_key_index(key_index: int) -> None:
        if key_index not in range(KEYS_PER_TENANT):
            raise InvalidArgumentError(
                f"Invalid key index {key_index}, must be 0 or 1"
            )

    async def _key_at(
        self, session: AsyncSession, tenant: TenantModel, key_index: int
    ) -> ApiKeyModel:
        keys = await self.store.list_keys(session, tenant.id)
        if len(keys) != KEYS_PER_TENANT:
            logger.error(
                "Tenant %s has %d API keys instead of %d",
                tenant.id, len(keys), KEYS_PER_TENANT,
                extra={"tenant_id": tenant.id, "key_count": len(keys)},
            )
            raise InternalInconsistencyError("Tenant key data is inconsistent")
        return keys[key_index]

    # ── Tenants ──

    async def create_tenant(
        self, session: AsyncSession, name: str, short_code: str
    ) -> tuple[TenantModel, list[str]]:
        """Create a tenant with two active keys. Returns (model, raw_api_keys)."""
        name = (name or "").strip()
        short_code = (short_code or "").strip()
        if not name:
            raise InvalidArgumentError("Tenant name cannot be empty")
        if not short_code:
            raise InvalidArgumentError("Tenant short code cannot be empty")

        if await self.store.get_tenant_by_name(session, name) is not None:
            raise ConflictError(f"Tenant with name '{name}' already exists", field="name")
        if await self.store.get_tenant_by_short_code(session, short_code) is not None:
            raise ConflictError(
                f"Tenant with short code '{short_code}' already exists",
                field="short_code",
            )

        raw_keys = []
        key_models = []
        for _ in range(KEYS_PER_TENANT):
            raw_key, key_hash = await self._mint_key()
            raw_keys.append(raw_key)
            key_models.append(ApiKeyModel(key_hash=key_hash, is_active=True))

        tenant = TenantModel(name=name, short_code=short_code, api_keys=key_models)
        await self.store.add_tenant(session, tenant)

        logger.info(
            "Created tenant '%s' with ID %s and %d API keys",
            tenant.name, tenant.id, KEYS_PER_TENANT,
            extra={"tenant_id": tenant.id},
        )
        return tenant, raw_keys

    async def get_tenant(self, session: AsyncSession, tenant_id: int) -> TenantModel:
        return await self._require_tenant(session, tenant_id)

    async def list_tenants(self, session: AsyncSession) -> list[TenantModel]:
        return await self.store.list_tenants(session)

    async def delete_tenant(self, session: AsyncSession, tenant_id: int) -> None:
        """Delete a tenant along with all of its keys and permissions."""
        tenant = await self._require_tenant(session, tenant_id)
        await self.store.delete_tenant(session, tenant)
        logger.info("Deleted tenant %s", tenant_id, extra={"tenant_id": tenant_id})

    # ── API keys ──

    async def list_keys(self, session: AsyncSession, tenant_id: int) -> list[ApiKeyModel]:
        await self._require_tenant(session, tenant_id)
        return await self.store.list_keys(session, tenant_id)

    async def regenerate_key(
        self, session: AsyncSession, tenant_id: int, key_index: int
    ) -> tuple[ApiKeyModel, str]:
        """Replace the key at ``key_index`` with a new one. Returns (model, raw_api_key).

        The other key of the tenant is left untouched, so clients can move to
        the new key while the old one is still being distributed.
        """
        self._check_key_index(key_index)
        tenant = await self._require_tenant(session, tenant_id)
        key = await self._key_at(session, tenant, key_index)

        raw_key, key_hash = await self._mint_key()
        key.key_hash = key_hash
        key.is_active = True
        await self.store.save_key(session, key)

        logger.info(
            "Regenerated API key at index %d for tenant '%s' (ID: %s)",
            key_index, tenant.name, tenant.id,
            extra={"tenant_id": tenant.id, "key_id": key.id},
        )
        return key, raw_key

    async def set_key_active(
        self, session: AsyncSession, tenant_id: int, key_index: int, active: bool
    ) -> ApiKeyModel:
        """Enable or disable a key without changing its secret."""
        self._check_key_index(key_index)
        tenant = await self._require_tenant(session, tenant_id)
        key = await self._key_at(session, tenant, key_index)
        if key.is_active != active:
            key.is_active = active
            await self.store.save_key(session, key)
            logger.info(
                "%s API key at index %d for tenant %s",
                "Activated" if active else "Deactivated", key_index, tenant.id,
                extra={"tenant_id": tenant.id, "key_id": key.id},
            )
        return key

    # ── Dashboard permissions ──

    async def grant_permission(
        self, session: AsyncSession, tenant_id: int, dashboard_uid: str
    ) -> DashboardPermissionModel:
        dashboard_uid = (dashboard_uid or "").strip()
        if not dashboard_uid:
            raise InvalidArgumentError("Dashboard UID cannot be empty")
        tenant = await self._require_tenant(session, tenant_id)

        if await self.store.permission_exists(session, tenant.id, dashboard_uid):
            logger.info(
                "Tenant %s already has permission for dashboard '%s'",
                tenant.id, dashboard_uid,
                extra={"tenant_id": tenant.id, "dashboard_uid": dashboard_uid},
            )
            raise ConflictError(
                f"Tenant already has permission for dashboard '{dashboard_uid}'",
                field="dashboard_uid",
            )

        permission = DashboardPermissionModel(tenant_id=tenant.id, dashboard_uid=dashboard_uid)
        await self.store.add_permission(session, permission)
        logger.info(
            "Granted tenant '%s' (ID: %s) access to dashboard '%s'",
            tenant.name, tenant.id, dashboard_uid,
            extra={"tenant_id": tenant.id, "dashboard_uid": dashboard_uid},
        )
        return permission

    async def list_permissions(
        self, session: AsyncSession, tenant_id: int
    ) -> list[DashboardPermissionModel]:
        await self._require_tenant(session, tenant_id)
        return await self.store.list_permissions(session, tenant_id)

    async def revoke_permission(
        self, session: AsyncSession, tenant_id: int, dashboard_uid: str
    ) -> None:
        await self._require_tenant(session, tenant_id)
        permission = await self.store.get_permission(session, tenant_id, dashboard_uid)
        if permission is None:
            raise PermissionNotFoundError(
                f"Tenant {tenant_id} has no permission for dashboard '{dashboard_uid}'"
            )
        await self.store.delete_permission(session, permission)
        logger.info(
            "Revoked tenant %s access to dashboard '%s'",
            tenant_id, dashboard_uid,
            extra={"tenant_id": tenant_id, "dashboard_uid": dashboard_uid},
        )
