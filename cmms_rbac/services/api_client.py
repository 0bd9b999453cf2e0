import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from cmms_rbac.core.config import settings
from cmms_rbac.core.exceptions import GatewayError, MalformedPayloadError
from cmms_rbac.schemas.capability import CapabilityCatalogResponse
from cmms_rbac.schemas.override import UserOverride, UserOverrideSaved
from cmms_rbac.schemas.rol import RolCatalogResponse, RolDefinition

logger = logging.getLogger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)

# Devuelve el access token actual (o None). Puede ser síncrono o asíncrono.
TokenProvider = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]


class RbacGateway(Protocol):
    """Contrato con la fuente externa de roles y overrides."""

    async def fetch_roles(self) -> List[RolDefinition]:
        ...

    async def fetch_capabilities(self) -> List[str]:
        ...

    async def fetch_user_overrides(self, user_id: str) -> UserOverride:
        ...

    async def save_user_overrides(self, user_id: str, overrides: UserOverride) -> UserOverride:
        ...


class RbacApiClient:
    """
    Cliente HTTP delgado para los endpoints RBAC del backend.

    Uso:
        async with RbacApiClient("http://backend:5000", token_provider=get_token) as client:
            roles = await client.fetch_roles()

    No refresca tokens ni reintenta: eso es responsabilidad del llamador.
    Todo payload se valida completo con pydantic; si no encaja se lanza
    MalformedPayloadError y no se aplica nada.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token_provider = token_provider
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "RbacApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    # --- Peticiones de bajo nivel ---
    async def _auth_headers(self) -> dict:
        if self.token_provider is None:
            return {}
        token = self.token_provider()
        if inspect.isawaitable(token):
            token = await token
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            headers = await self._auth_headers()
        except Exception as e:
            logger.error(f"El proveedor de token falló antes de {method} {path}: {type(e).__name__} - {e}")
            raise GatewayError(f"No se pudo obtener el token para {method} {path}.") from e
        try:
            response = await self.client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Error de transporte en {method} {self.base_url}{path}: {type(e).__name__} - {e}")
            raise GatewayError(f"No se pudo contactar el backend RBAC ({method} {path}).") from e

        if response.is_error:
            logger.warning(f"Respuesta HTTP {response.status_code} en {method} {path}: {response.text[:200]}")
            raise GatewayError(
                f"El backend RBAC respondió {response.status_code} en {method} {path}.",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Respuesta no JSON en {method} {path}: {response.text[:200]}")
            raise MalformedPayloadError(f"Respuesta no JSON en {method} {path}.") from e

    @staticmethod
    def _parse(schema: Type[SchemaType], data: Any, origin: str) -> SchemaType:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.error(f"Payload malformado desde {origin}: {e.error_count()} error(es). {e.errors()[:3]}")
            raise MalformedPayloadError(f"Payload malformado desde {origin}.") from e

    # --- Endpoints ---
    async def fetch_roles(self) -> List[RolDefinition]:
        """GET /rbac/roles -> lista completa de roles con sus claves."""
        data = await self._request("GET", settings.RBAC_ROLES_PATH)
        parsed = self._parse(RolCatalogResponse, data, settings.RBAC_ROLES_PATH)
        logger.debug(f"fetch_roles: {len(parsed.roles)} rol(es) recibidos.")
        return parsed.roles

    async def fetch_capabilities(self) -> List[str]:
        """GET /rbac/permissions -> claves de capacidad conocidas por el backend."""
        data = await self._request("GET", settings.RBAC_PERMISSIONS_PATH)
        parsed = self._parse(CapabilityCatalogResponse, data, settings.RBAC_PERMISSIONS_PATH)
        return parsed.keys()

    async def fetch_user_overrides(self, user_id: str) -> UserOverride:
        """GET /users/{id}/permissions. Campos ausentes equivalen a conjuntos vacíos."""
        path = settings.USER_PERMISSIONS_PATH.format(user_id=user_id)
        data = await self._request("GET", path)
        if data is None:
            return UserOverride()
        return self._parse(UserOverride, data, path)

    async def save_user_overrides(self, user_id: str, overrides: UserOverride) -> UserOverride:
        """PUT /users/{id}/permissions con el par completo (reemplazo, no parche)."""
        path = settings.USER_PERMISSIONS_PATH.format(user_id=user_id)
        data = await self._request("PUT", path, json=overrides.to_payload())
        # Algunos backends sólo confirman ({"success": true}); se asume lo enviado
        if not isinstance(data, dict) or ("allow" not in data and "deny" not in data):
            return overrides
        saved = self._parse(UserOverrideSaved, data, path)
        return UserOverride(allow=saved.allow, deny=saved.deny)
