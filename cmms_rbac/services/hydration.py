import logging

from cmms_rbac.core.exceptions import HydrationError, RbacError
from .api_client import RbacGateway
from .role_catalog import RoleCatalog

logger = logging.getLogger(__name__)


async def _fetch_roles(gateway: RbacGateway):
    try:
        return await gateway.fetch_roles()
    except RbacError as e:
        raise HydrationError(f"No se pudo cargar el catálogo de roles: {e}") from e


async def hydrate_role_catalog(catalog: RoleCatalog, gateway: RbacGateway) -> bool:
    """
    Obtiene todos los roles y reemplaza el catálogo completo.

    Si falla (red, estado HTTP, payload malformado) el catálogo anterior se
    conserva y se devuelve False; el error nunca llega a quien resuelve
    permisos. Reintentos y backoff quedan a cargo del llamador.
    """
    seq = catalog.next_role_seq()
    logger.debug(f"Hidratación de roles #{seq} iniciada.")
    try:
        roles = await _fetch_roles(gateway)
    except HydrationError as e:
        logger.error(f"Hidratación de roles #{seq} fallida, se conserva el catálogo anterior ({len(catalog)} rol(es)). {e}")
        return False
    finally:
        catalog.hydration_attempted = True
    return catalog.replace_roles(roles, seq=seq)


async def hydrate_capability_catalog(catalog: RoleCatalog, gateway: RbacGateway) -> bool:
    """Igual que hydrate_role_catalog, para el catálogo de claves conocidas."""
    seq = catalog.next_capability_seq()
    try:
        keys = await gateway.fetch_capabilities()
    except RbacError as e:
        logger.error(f"Hidratación de capacidades #{seq} fallida, se conserva el catálogo anterior. {e}")
        return False
    return catalog.replace_capabilities(keys, seq=seq)
