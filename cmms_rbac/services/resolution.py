"""
Motor de resolución de permisos.

Precedencia estricta para una clave:

1. La clave está en `deny` del usuario  -> False.
2. La clave está en `allow` del usuario -> True.
3. En otro caso, la decide el rol (catálogo). Rol ausente o desconocido -> False.

`resolve_any` es la unión "alguna de": basta con que UNA clave resuelva a
True. Un deny sobre la clave A no bloquea el acceso concedido por la clave B
de la misma lista.

Son funciones totales: nunca lanzan excepciones, cualquier entrada inválida
resuelve a False. No se cachean decisiones porque el catálogo y los overrides
pueden cambiar entre llamadas.
"""
import logging
from typing import Iterable, Mapping, Optional

from pydantic import ValidationError

from cmms_rbac.schemas.override import UserOverride
from .role_catalog import RoleCatalog

logger = logging.getLogger(__name__)

_NO_OVERRIDES = UserOverride()


def _coerce_overrides(overrides: object) -> Optional[UserOverride]:
    """
    None equivale a overrides vacíos. Un dict con forma válida se acepta.
    Cualquier otra cosa devuelve None y la decisión es False (fail-closed):
    un deny ilegible no puede ignorarse.
    """
    if overrides is None:
        return _NO_OVERRIDES
    if isinstance(overrides, UserOverride):
        return overrides
    if isinstance(overrides, Mapping):
        try:
            return UserOverride.model_validate(overrides)
        except ValidationError:
            pass
    logger.debug(f"resolve: overrides con forma inválida ({type(overrides).__name__}), se deniega.")
    return None


def resolve(
    catalog: RoleCatalog,
    role: Optional[str],
    overrides: Optional[UserOverride],
    key: str,
) -> bool:
    """Decide una única clave de capacidad."""
    if not isinstance(key, str):
        return False
    overrides = _coerce_overrides(overrides)
    if overrides is None:
        return False
    if key in overrides.deny:
        return False
    if key in overrides.allow:
        return True
    return key in catalog.permissions_for(role)


def resolve_any(
    catalog: RoleCatalog,
    role: Optional[str],
    overrides: Optional[UserOverride],
    keys: Optional[Iterable[str]],
) -> bool:
    """True si al menos una clave resuelve a True. Lista vacía -> False."""
    if keys is None or isinstance(keys, str):
        return False
    try:
        return any(resolve(catalog, role, overrides, key) for key in keys)
    except TypeError:
        logger.debug(f"resolve_any: lista de claves no iterable ({type(keys).__name__}).")
        return False


class PermissionResolver:
    """
    Punto de entrada para decisiones de acceso ligado a un catálogo concreto.
    Ningún componente debe reimplementar la precedencia por su cuenta.
    """

    def __init__(self, catalog: RoleCatalog):
        self.catalog = catalog

    def resolve(self, role: Optional[str], overrides: Optional[UserOverride], key: str) -> bool:
        return resolve(self.catalog, role, overrides, key)

    def resolve_any(self, role: Optional[str], overrides: Optional[UserOverride], keys: Optional[Iterable[str]]) -> bool:
        return resolve_any(self.catalog, role, overrides, keys)
