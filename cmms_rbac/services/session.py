import asyncio
import logging
from typing import Dict, Iterable, Optional

from cmms_rbac.core.exceptions import PermissionDeniedError
from cmms_rbac.schemas.override import UserOverride
from cmms_rbac.schemas.usuario import SessionUser
from .access_summary import access_summary
from .api_client import RbacGateway
from .hydration import hydrate_capability_catalog, hydrate_role_catalog
from .resolution import PermissionResolver
from .role_catalog import RoleCatalog

logger = logging.getLogger(__name__)


class PermissionSession:
    """
    Estado de permisos de la aplicación para el actor actual.

    Mantiene el catálogo de roles, el actor logueado (id, rol, overrides) y
    una barrera "ready" que se libera tras el PRIMER intento de hidratación,
    haya salido bien o mal. Antes de esa barrera toda consulta devuelve False
    para que la interfaz no muestre un estado no autorizado provisional.
    """

    def __init__(self, gateway: RbacGateway, catalog: Optional[RoleCatalog] = None):
        self.gateway = gateway
        self.catalog = catalog if catalog is not None else RoleCatalog()
        self.resolver = PermissionResolver(self.catalog)
        self.user: Optional[SessionUser] = None
        # El Event se crea en wait_until_ready, dentro del loop que lo espera
        self._ready_event: Optional[asyncio.Event] = None
        self._released = False

    @property
    def ready(self) -> bool:
        return self._released

    def _release(self) -> None:
        self._released = True
        if self._ready_event is not None:
            self._ready_event.set()

    async def wait_until_ready(self) -> None:
        if self._released:
            return
        if self._ready_event is None:
            self._ready_event = asyncio.Event()
        await self._ready_event.wait()

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user else None

    @property
    def overrides(self) -> UserOverride:
        return self.user.permission_overrides if self.user else UserOverride()

    # --- Ciclo de vida ---
    async def hydrate(self) -> bool:
        """Rehidrata roles y capacidades. Devuelve si el catálogo de roles se actualizó."""
        roles_ok, _ = await asyncio.gather(
            hydrate_role_catalog(self.catalog, self.gateway),
            hydrate_capability_catalog(self.catalog, self.gateway),
        )
        return roles_ok

    async def start(self, user: Optional[SessionUser] = None) -> bool:
        """Arranque de la aplicación: primera hidratación y liberación de la barrera."""
        self.user = user
        try:
            return await self.hydrate()
        finally:
            self._release()
            logger.info(f"Sesión de permisos lista (catálogo hidratado: {self.catalog.is_hydrated}).")

    async def login(self, user: SessionUser) -> bool:
        """Nuevo actor: se guarda y se rehidrata el catálogo."""
        self.user = user
        logger.info(f"Login de '{user.email or user.id}' con rol '{self.catalog.role_label(user.role)}'.")
        try:
            return await self.hydrate()
        finally:
            self._release()

    def logout(self) -> None:
        if self.user:
            logger.info(f"Logout de '{self.user.email or self.user.id}'.")
        self.user = None

    def update_overrides(self, overrides: UserOverride) -> None:
        """Refleja en la sesión overrides recién guardados del propio actor."""
        if self.user is None:
            return
        self.user = self.user.model_copy(update={"permission_overrides": overrides})

    # --- Decisiones ---
    def can(self, key: str) -> bool:
        if not self.ready or self.user is None:
            return False
        return self.resolver.resolve(self.role, self.overrides, key)

    def has_any(self, keys: Iterable[str]) -> bool:
        if not self.ready or self.user is None:
            return False
        return self.resolver.resolve_any(self.role, self.overrides, keys)

    def require_any(self, keys: Iterable[str]) -> None:
        keys = frozenset(keys)
        if not self.has_any(keys):
            logger.warning(f"Acceso denegado a '{self.user.id if self.user else 'anónimo'}': requiere alguna de {sorted(keys)}")
            raise PermissionDeniedError(keys)

    def summary(self) -> Dict[str, bool]:
        if not self.ready or self.user is None:
            return access_summary(self.resolver, None, UserOverride())
        return access_summary(self.resolver, self.role, self.overrides)
