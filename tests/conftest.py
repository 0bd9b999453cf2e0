import asyncio
import logging
from typing import Any, AsyncGenerator, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request
from httpx import ASGITransport

from cmms_rbac.core import permissions as perms
from cmms_rbac.core.exceptions import GatewayError
from cmms_rbac.schemas.override import UserOverride
from cmms_rbac.schemas.rol import RolDefinition
from cmms_rbac.services.api_client import RbacApiClient
from cmms_rbac.services.resolution import PermissionResolver
from cmms_rbac.services.role_catalog import RoleCatalog

# Configuración básica de logging para los tests
logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] [%(name)s] [%(funcName)s] %(message)s')
logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG)

TEST_TOKEN = "token-de-prueba"

# =================================================================
# Roles por defecto de la aplicación
# =================================================================
SEED_ROLES: List[Dict[str, Any]] = [
    {
        "name": perms.OPERATOR_ROLE_NAME,
        "permissions": [
            perms.PERM_WORK_ORDERS_REQUEST, perms.PERM_WORK_ORDERS_UPDATE_STATUS, perms.PERM_WORK_ORDERS_ADD_NOTES,
            perms.PERM_ASSETS_VIEW, perms.PERM_PM_VIEW, perms.PERM_BREAKDOWN_REPORT,
            perms.PERM_INVENTORY_REQUEST, perms.PERM_DOWNTIME_LOG, perms.PERM_GUIDE_VIEW,
        ],
    },
    {
        "name": perms.MANAGER_ROLE_NAME,
        "permissions": [
            perms.PERM_WORK_ORDERS_APPROVE, perms.PERM_WORK_ORDERS_ASSIGN, perms.PERM_WORK_ORDERS_VIEW_ALL,
            perms.PERM_ASSETS_EDIT, perms.PERM_ASSETS_CREATE, perms.PERM_PM_MANAGE, perms.PERM_BREAKDOWN_VIEW,
            perms.PERM_INVENTORY_MANAGE, perms.PERM_INVENTORY_CREATE, perms.PERM_DOWNTIME_ANALYZE_TEAM,
            perms.PERM_KPI_VIEW_TEAM, perms.PERM_BUDGET_VIEW, perms.PERM_USERS_MANAGE_TEAM,
            perms.PERM_AUDIT_VIEW, perms.PERM_GUIDE_VIEW,
        ],
    },
    {
        "name": perms.PRODUCTION_MANAGER_ROLE_NAME,
        "permissions": [
            perms.PERM_WORK_ORDERS_REQUEST, perms.PERM_WORK_ORDERS_VIEW_ALL, perms.PERM_ASSETS_VIEW,
            perms.PERM_PM_VIEW, perms.PERM_BREAKDOWN_VIEW, perms.PERM_INVENTORY_REQUEST,
            perms.PERM_DOWNTIME_ANALYZE_TEAM, perms.PERM_KPI_VIEW_TEAM, perms.PERM_BUDGET_VIEW,
            perms.PERM_AUDIT_VIEW, perms.PERM_GUIDE_VIEW,
        ],
    },
    {
        "name": perms.MAINTENANCE_MANAGER_ROLE_NAME,
        "permissions": [
            perms.PERM_WORK_ORDERS_CREATE, perms.PERM_WORK_ORDERS_APPROVE, perms.PERM_WORK_ORDERS_ASSIGN,
            perms.PERM_WORK_ORDERS_CLOSE, perms.PERM_WORK_ORDERS_VIEW_ALL, perms.PERM_ASSETS_EDIT,
            perms.PERM_ASSETS_CREATE, perms.PERM_PM_MANAGE, perms.PERM_BREAKDOWN_VIEW,
            perms.PERM_INVENTORY_MANAGE, perms.PERM_INVENTORY_CREATE, perms.PERM_DOWNTIME_ANALYZE_TEAM,
            perms.PERM_KPI_VIEW_TEAM, perms.PERM_BUDGET_INPUT_MAINTENANCE_COSTS, perms.PERM_USERS_MANAGE_TEAM,
            perms.PERM_AUDIT_MAINTAIN, perms.PERM_AUDIT_VIEW, perms.PERM_GUIDE_VIEW,
        ],
    },
    {
        "name": perms.COO_ROLE_NAME,
        "permissions": [
            perms.PERM_WORK_ORDERS_VIEW_ALL, perms.PERM_ASSETS_VIEW, perms.PERM_PM_VIEW, perms.PERM_BREAKDOWN_VIEW,
            perms.PERM_INVENTORY_REQUEST, perms.PERM_DOWNTIME_ANALYZE_COMPANY, perms.PERM_KPI_VIEW_GLOBAL,
            perms.PERM_BUDGET_APPROVE, perms.PERM_USERS_MANAGE_TEAM, perms.PERM_AUDIT_VIEW, perms.PERM_GUIDE_VIEW,
        ],
    },
    {
        "name": perms.MD_ROLE_NAME,
        "permissions": [
            perms.PERM_WORK_ORDERS_VIEW_ALL, perms.PERM_ASSETS_VIEW, perms.PERM_PM_VIEW, perms.PERM_BREAKDOWN_VIEW,
            perms.PERM_INVENTORY_REQUEST, perms.PERM_DOWNTIME_ANALYZE_COMPANY, perms.PERM_KPI_VIEW_GLOBAL,
            perms.PERM_BUDGET_APPROVE, perms.PERM_USERS_MANAGE_ALL, perms.PERM_USERS_CREATE,
            perms.PERM_AUDIT_VIEW, perms.PERM_GUIDE_VIEW,
        ],
    },
    {
        "name": perms.MASTER_ROLE_NAME,
        "permissions": list(perms.ALL_PERMISSION_KEYS),
    },
]


@pytest.fixture(scope="function")
def seed_roles() -> List[RolDefinition]:
    return [RolDefinition(id=i + 1, **data) for i, data in enumerate(SEED_ROLES)]


@pytest.fixture(scope="function")
def catalog(seed_roles: List[RolDefinition]) -> RoleCatalog:
    """Catálogo ya hidratado con los roles por defecto."""
    return RoleCatalog(seed_roles)


@pytest.fixture(scope="function")
def resolver(catalog: RoleCatalog) -> PermissionResolver:
    return PermissionResolver(catalog)


# =================================================================
# Gateway en memoria
# =================================================================
class FakeGateway:
    """
    Implementa RbacGateway sin red. Permite forzar fallos y retener
    respuestas de roles con un Event para probar el orden de llegada.
    """

    def __init__(self, roles: List[RolDefinition], capabilities: Optional[List[str]] = None):
        self.roles = list(roles)
        self.capabilities = list(capabilities if capabilities is not None else perms.ALL_PERMISSION_KEYS)
        self.overrides: Dict[str, UserOverride] = {}
        self.fail_roles = False
        self.fail_capabilities = False
        self.fail_fetch_overrides = False
        self.fail_save = False
        self.role_gates: List[asyncio.Event] = []
        self.calls: Dict[str, int] = {"roles": 0, "capabilities": 0, "fetch_overrides": 0, "save_overrides": 0}
        self.saved: List[tuple] = []

    async def fetch_roles(self) -> List[RolDefinition]:
        self.calls["roles"] += 1
        roles = list(self.roles)
        if self.role_gates:
            await self.role_gates.pop(0).wait()
        if self.fail_roles:
            raise GatewayError("backend caído", status_code=503)
        return roles

    async def fetch_capabilities(self) -> List[str]:
        self.calls["capabilities"] += 1
        if self.fail_capabilities:
            raise GatewayError("backend caído", status_code=503)
        return list(self.capabilities)

    async def fetch_user_overrides(self, user_id: str) -> UserOverride:
        self.calls["fetch_overrides"] += 1
        if self.fail_fetch_overrides:
            raise GatewayError("backend caído", status_code=500)
        return self.overrides.get(user_id, UserOverride())

    async def save_user_overrides(self, user_id: str, overrides: UserOverride) -> UserOverride:
        self.calls["save_overrides"] += 1
        if self.fail_save:
            raise GatewayError("guardado rechazado", status_code=500)
        self.saved.append((user_id, overrides))
        self.overrides[user_id] = overrides
        return overrides


@pytest.fixture(scope="function")
def gateway(seed_roles: List[RolDefinition]) -> FakeGateway:
    return FakeGateway(seed_roles)


# =================================================================
# Backend FastAPI falso (servido al cliente vía ASGITransport)
# =================================================================
@pytest.fixture(scope="function")
def backend_state() -> Dict[str, Any]:
    return {
        "roles": [dict(data, id=str(i + 1)) for i, data in enumerate(SEED_ROLES)],
        "permissions": [{"key": key, "description": None} for key in perms.ALL_PERMISSION_KEYS],
        "overrides": {"u-1": {"allow": [perms.PERM_AUDIT_VIEW], "deny": [perms.PERM_PM_VIEW]}},
        "roles_payload": None,
        "permissions_payload": None,
        "roles_status": 200,
        "save_status": 200,
        "save_echo": True,
        "seen_auth": [],
    }


@pytest.fixture(scope="function")
def fake_backend(backend_state: Dict[str, Any]) -> FastAPI:
    app = FastAPI()

    def check_token(request: Request) -> None:
        auth = request.headers.get("authorization")
        backend_state["seen_auth"].append(auth)
        if auth != f"Bearer {TEST_TOKEN}":
            raise HTTPException(status_code=401, detail="No autenticado")

    @app.get("/rbac/roles")
    async def list_roles(request: Request):
        check_token(request)
        if backend_state["roles_status"] != 200:
            raise HTTPException(status_code=backend_state["roles_status"], detail="Error")
        if backend_state["roles_payload"] is not None:
            return backend_state["roles_payload"]
        return {"roles": backend_state["roles"]}

    @app.get("/rbac/permissions")
    async def list_permissions(request: Request):
        check_token(request)
        if backend_state["permissions_payload"] is not None:
            return backend_state["permissions_payload"]
        return {"permissions": backend_state["permissions"]}

    @app.get("/users/{user_id}/permissions")
    async def get_user_permissions(user_id: str, request: Request):
        check_token(request)
        return backend_state["overrides"].get(user_id, {})

    @app.put("/users/{user_id}/permissions")
    async def put_user_permissions(user_id: str, request: Request):
        check_token(request)
        if backend_state["save_status"] != 200:
            raise HTTPException(status_code=backend_state["save_status"], detail="Error")
        body = await request.json()
        backend_state["overrides"][user_id] = body
        if backend_state["save_echo"]:
            return {"id": user_id, **body}
        return {"success": True}

    return app


@pytest_asyncio.fixture(scope="function")
async def api_client(fake_backend: FastAPI) -> AsyncGenerator[RbacApiClient, None]:
    """Cliente RBAC real contra el backend falso, con token válido."""
    transport = ASGITransport(app=fake_backend)
    async with RbacApiClient("http://testserver", token_provider=lambda: TEST_TOKEN, transport=transport) as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def anonymous_client(fake_backend: FastAPI) -> AsyncGenerator[RbacApiClient, None]:
    transport = ASGITransport(app=fake_backend)
    async with RbacApiClient("http://testserver", transport=transport) as client:
        yield client


class _BrokenTransport(httpx.AsyncBaseTransport):
    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("conexión rechazada", request=request)


@pytest_asyncio.fixture(scope="function")
async def unreachable_client() -> AsyncGenerator[RbacApiClient, None]:
    async with RbacApiClient("http://testserver", transport=_BrokenTransport()) as client:
        yield client


@pytest.fixture(scope="function")
def test_token() -> str:
    return TEST_TOKEN
