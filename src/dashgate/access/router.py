"""Forward-auth endpoints for the reverse proxy in front of the dashboards.

The proxy (nginx ``auth_request``, Traefik ``forwardAuth``, ...) calls these
with the tenant's original key and dashboard path, then forwards or rejects
the request based on the status code. Only the decision and the matched
tenant ID are returned.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from dashgate.access.authorizer import AuthorizationReason, AuthorizationResult

router = APIRouter(prefix="/authorize", tags=["authorization"])

TENANT_ID_HEADER = "X-Tenant-Id"


def _get_authorizer():
    from dashgate.deps import get_authorizer
    return get_authorizer()


def _get_db():
    from dashgate.deps import get_db
    return get_db()


async def require_dashboard_access(request: Request) -> AuthorizationResult:
    """FastAPI dependency: authorize the request or raise HTTPException.

    Invalid keys and missing grants get the same 403 so a caller cannot tell
    which one it hit; the distinction is only in the server logs.
    """
    authorizer = _get_authorizer()
    db = _get_db()
    async with db.get_session() as session:
        result = await authorizer.authorize_request(
            session,
            headers=request.headers,
            query=request.query_params,
            path_params=request.path_params,
        )

    if result.allowed:
        return result
    if result.reason is AuthorizationReason.MISSING_CREDENTIAL:
        raise HTTPException(status_code=401, detail="API key required")
    if result.reason is AuthorizationReason.MISSING_RESOURCE:
        raise HTTPException(status_code=400, detail="Dashboard UID missing from request path")
    raise HTTPException(status_code=403, detail="Access denied")


# Nested panel and API paths stay on this route; {rest} is not inspected
@router.get("/dashboards/{dashboard_uid}{rest:path}", status_code=204)
@router.get("/dashboards/", status_code=204)
async def authorize_dashboard(
    result: AuthorizationResult = Depends(require_dashboard_access),
):
    return Response(status_code=204, headers={TENANT_ID_HEADER: str(result.tenant_id)})


@router.get("/{remainder:path}", status_code=204)
async def authorize_path(
    result: AuthorizationResult = Depends(require_dashboard_access),
):
    return Response(status_code=204, headers={TENANT_ID_HEADER: str(result.tenant_id)})
