"""Tenant administration API router, guarded by the admin API key."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from dashgate.common.exceptions import (
    ConflictError,
    DashgateError,
    InternalInconsistencyError,
    InvalidArgumentError,
    NotFoundError,
)
from dashgate.common.security import require_admin_key
from dashgate.tenants.schemas import (
    ApiKeyResponse,
    DashboardPermissionCreate,
    DashboardPermissionResponse,
    RegenerateKeyResponse,
    TenantCreate,
    TenantCreateResponse,
    TenantDetailResponse,
    TenantResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["tenants"])


def _get_service():
    from dashgate.deps import get_tenant_service
    return get_tenant_service()


def _get_db():
    from dashgate.deps import get_db
    return get_db()


def _http_error(exc: DashgateError) -> HTTPException:
    if isinstance(exc, InvalidArgumentError):
        return HTTPException(status_code=400, detail=exc.message)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, ConflictError):
        return HTTPException(
            status_code=409, detail={"message": exc.message, "field": exc.field}
        )
    if isinstance(exc, InternalInconsistencyError):
        return HTTPException(status_code=500, detail=exc.message)
    logger.error("Unhandled service error %s: %s", exc.code, exc.message)
    return HTTPException(status_code=500, detail="Internal error")


@router.post("", response_model=TenantCreateResponse, status_code=201)
async def create_tenant(body: TenantCreate, _=Depends(require_admin_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            tenant, raw_keys = await svc.create_tenant(
                session, name=body.name, short_code=body.short_code
            )
    except DashgateError as e:
        raise _http_error(e)
    return TenantCreateResponse(
        id=tenant.id,
        name=tenant.name,
        short_code=tenant.short_code,
        created_at=tenant.created_at,
        last_modified_at=tenant.last_modified_at,
        generated_api_keys=raw_keys,
    )


@router.get("", response_model=list[TenantResponse])
async def list_tenants(_=Depends(require_admin_key)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        tenants = await svc.list_tenants(session)
        return [TenantResponse.model_validate(t) for t in tenants]


@router.get("/{tenant_id}", response_model=TenantDetailResponse)
async def get_tenant(tenant_id: int, _=Depends(require_admin_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            tenant = await svc.get_tenant(session, tenant_id)
            keys = await svc.list_keys(session, tenant_id)
            permissions = await svc.list_permissions(session, tenant_id)
            return TenantDetailResponse(
                id=tenant.id,
                name=tenant.name,
                short_code=tenant.short_code,
                created_at=tenant.created_at,
                last_modified_at=tenant.last_modified_at,
                api_keys=[
                    ApiKeyResponse(
                        id=k.id, index=i, is_active=k.is_active,
                        created_at=k.created_at, last_modified_at=k.last_modified_at,
                    )
                    for i, k in enumerate(keys)
                ],
                dashboards=[p.dashboard_uid for p in permissions],
            )
    except DashgateError as e:
        raise _http_error(e)


@router.delete("/{tenant_id}", status_code=204)
async def delete_tenant(tenant_id: int, _=Depends(require_admin_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.delete_tenant(session, tenant_id)
    except DashgateError as e:
        raise _http_error(e)


# ── API keys ──


@router.post("/{tenant_id}/regenerateKey/{key_index}", response_model=RegenerateKeyResponse)
async def regenerate_key(tenant_id: int, key_index: int, _=Depends(require_admin_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            _, raw_key = await svc.regenerate_key(session, tenant_id, key_index)
    except DashgateError as e:
        raise _http_error(e)
    return RegenerateKeyResponse(key_index=key_index, new_api_key=raw_key)


async def _set_key_active(tenant_id: int, key_index: int, active: bool) -> ApiKeyResponse:
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            key = await svc.set_key_active(session, tenant_id, key_index, active)
    except DashgateError as e:
        raise _http_error(e)
    return ApiKeyResponse(
        id=key.id, index=key_index, is_active=key.is_active,
        created_at=key.created_at, last_modified_at=key.last_modified_at,
    )


@router.post("/{tenant_id}/keys/{key_index}/deactivate", response_model=ApiKeyResponse)
async def deactivate_key(tenant_id: int, key_index: int, _=Depends(require_admin_key)):
    return await _set_key_active(tenant_id, key_index, False)


@router.post("/{tenant_id}/keys/{key_index}/activate", response_model=ApiKeyResponse)
async def activate_key(tenant_id: int, key_index: int, _=Depends(require_admin_key)):
    return await _set_key_active(tenant_id, key_index, True)


# ── Dashboard permissions ──


@router.post(
    "/{tenant_id}/dashboards",
    response_model=DashboardPermissionResponse,
    status_code=201,
)
async def add_dashboard_permission(
    tenant_id: int, body: DashboardPermissionCreate, _=Depends(require_admin_key)
):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            permission = await svc.grant_permission(session, tenant_id, body.dashboard_uid)
    except DashgateError as e:
        raise _http_error(e)
    return DashboardPermissionResponse.model_validate(permission)


@router.get("/{tenant_id}/dashboards", response_model=list[DashboardPermissionResponse])
async def list_dashboard_permissions(tenant_id: int, _=Depends(require_admin_key)):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            permissions = await svc.list_permissions(session, tenant_id)
            return [DashboardPermissionResponse.model_validate(p) for p in permissions]
    except DashgateError as e:
        raise _http_error(e)


@router.delete("/{tenant_id}/dashboards/{dashboard_uid}", status_code=204)
async def revoke_dashboard_permission(
    tenant_id: int, dashboard_uid: str, _=Depends(require_admin_key)
):
    svc = _get_service()
    db = _get_db()
    try:
        async with db.get_session() as session:
            await svc.revoke_permission(session, tenant_id, dashboard_uid)
    except DashgateError as e:
        raise _http_error(e)
