"""Persistence operations for tenants, API keys, and dashboard permissions.

All writes go through ``flush()`` on the caller's session so that the
timestamp columns are stamped by the ORM in the same statement as the data,
and the caller's transaction decides when everything becomes visible.
"""

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from dashgate.common.exceptions import ConflictError
from dashgate.tenants.models import ApiKeyModel, DashboardPermissionModel, TenantModel

# Unique index name -> the field reported on conflict
_UNIQUE_INDEX_FIELDS = {
    "uq_tenants_name_lower": "name",
    "uq_tenants_short_code_lower": "short_code",
    "uq_permissions_tenant_dashboard_lower": "dashboard_uid",
}


def _conflict_from_integrity_error(exc: IntegrityError) -> ConflictError:
    text = str(exc.orig)
    for index_name, field in _UNIQUE_INDEX_FIELDS.items():
        if index_name in text:
            return ConflictError(f"A record with this {field} already exists", field=field)
    return ConflictError("A record with these values already exists")


class TenantStore:
    """Thin data-access layer; performs no business validation."""

    async def _flush(self, session: AsyncSession) -> None:
        try:
            await session.flush()
        except IntegrityError as exc:
            raise _conflict_from_integrity_error(exc) from exc

    # ── Tenants ──

    async def add_tenant(self, session: AsyncSession, tenant: TenantModel) -> TenantModel:
        """Insert a tenant together with any keys/permissions attached to it."""
        session.add(tenant)
        await self._flush(session)
        return tenant

    async def get_tenant(
        self, session: AsyncSession, tenant_id: int, with_keys: bool = False
    ) -> TenantModel | None:
        options = [selectinload(TenantModel.api_keys)] if with_keys else []
        return await session.get(TenantModel, tenant_id, options=options)

    async def get_tenant_by_name(
        self, session: AsyncSession, name: str
    ) -> TenantModel | None:
        result = await session.execute(
            select(TenantModel).where(func.lower(TenantModel.name) == func.lower(name))
        )
        return result.scalar_one_or_none()

    async def get_tenant_by_short_code(
        self, session: AsyncSession, short_code: str
    ) -> TenantModel | None:
        result = await session.execute(
            select(TenantModel).where(
                func.lower(TenantModel.short_code) == func.lower(short_code)
            )
        )
        return result.scalar_one_or_none()

    async def list_tenants(self, session: AsyncSession) -> list[TenantModel]:
        result = await session.execute(select(TenantModel).order_by(TenantModel.id))
        return list(result.scalars().all())

    async def delete_tenant(self, session: AsyncSession, tenant: TenantModel) -> None:
        # Keys and permissions go with it via ON DELETE CASCADE
        await session.delete(tenant)
        await session.flush()

    # ── API keys ──

    async def list_keys(self, session: AsyncSession, tenant_id: int) -> list[ApiKeyModel]:
        result = await session.execute(
            select(ApiKeyModel)
            .where(ApiKeyModel.tenant_id == tenant_id)
            .order_by(ApiKeyModel.id)
        )
        return list(result.scalars().all())

    async def save_key(self, session: AsyncSession, key: ApiKeyModel) -> ApiKeyModel:
        session.add(key)
        await self._flush(session)
        return key

    async def list_active_keys(self, session: AsyncSession) -> list[ApiKeyModel]:
        """Every active key across all tenants, with ``tenant`` loaded."""
        result = await session.execute(
            select(ApiKeyModel)
            .where(ApiKeyModel.is_active.is_(True))
            .options(selectinload(ApiKeyModel.tenant))
            .order_by(ApiKeyModel.id)
        )
        return list(result.scalars().all())

    # ── Dashboard permissions ──

    async def permission_exists(
        self, session: AsyncSession, tenant_id: int, dashboard_uid: str
    ) -> bool:
        result = await session.execute(
            select(
                exists().where(
                    DashboardPermissionModel.tenant_id == tenant_id,
                    func.lower(DashboardPermissionModel.dashboard_uid)
                    == func.lower(dashboard_uid),
                )
            )
        )
        return bool(result.scalar())

    async def get_permission(
        self, session: AsyncSession, tenant_id: int, dashboard_uid: str
    ) -> DashboardPermissionModel | None:
        result = await session.execute(
            select(DashboardPermissionModel).where(
                DashboardPermissionModel.tenant_id == tenant_id,
                func.lower(DashboardPermissionModel.dashboard_uid)
                == func.lower(dashboard_uid),
            )
        )
        return result.scalar_one_or_none()

    async def add_permission(
        self, session: AsyncSession, permission: DashboardPermissionModel
    ) -> DashboardPermissionModel:
        session.add(permission)
        await self._flush(session)
        return permission

    async def list_permissions(
        self, session: AsyncSession, tenant_id: int
    ) -> list[DashboardPermissionModel]:
        result = await session.execute(
            select(DashboardPermissionModel)
            .where(DashboardPermissionModel.tenant_id == tenant_id)
            .order_by(DashboardPermissionModel.id)
        )
        return list(result.scalars().all())

    async def delete_permission(
        self, session: AsyncSession, permission: DashboardPermissionModel
    ) -> None:
        await session.delete(permission)
        await session.flush()
