import logging
from typing import Dict, Iterable, List, Tuple

from cmms_rbac.core import permissions as perms
from cmms_rbac.core.exceptions import UnknownFeatureGroupError
from cmms_rbac.schemas.feature_group import FeatureGroup

logger = logging.getLogger(__name__)

# =================================================================
# Registro de Grupos de Funcionalidades
# =================================================================
# Configuración estática (no se persiste ni se descarga). Debe
# mantenerse alineada con las claves que la aplicación consulta:
# una clave que no existe deshabilita en silencio esa categoría.
# =================================================================

FEATURE_GROUPS: Dict[str, FeatureGroup] = {
    group.name: group
    for group in (
        FeatureGroup(
            name="Dashboard",
            access=(perms.PERM_KPI_VIEW_TEAM, perms.PERM_KPI_VIEW_GLOBAL),
            access_allow_key=perms.PERM_KPI_VIEW_TEAM,
        ),
        FeatureGroup(
            name="Work Orders",
            access=(perms.PERM_WORK_ORDERS_REQUEST, perms.PERM_WORK_ORDERS_VIEW_ALL),
            access_allow_key=perms.PERM_WORK_ORDERS_VIEW_ALL,
            add=(perms.PERM_WORK_ORDERS_CREATE,),
            edit=(perms.PERM_WORK_ORDERS_APPROVE, perms.PERM_WORK_ORDERS_ASSIGN, perms.PERM_WORK_ORDERS_CLOSE),
        ),
        FeatureGroup(
            name="Assets",
            access=(perms.PERM_ASSETS_VIEW,),
            add=(perms.PERM_ASSETS_EDIT,),
            edit=(perms.PERM_ASSETS_EDIT,),
        ),
        FeatureGroup(
            name="Inventory",
            access=(perms.PERM_INVENTORY_REQUEST,),
            add=(perms.PERM_INVENTORY_MANAGE,),
            edit=(perms.PERM_INVENTORY_MANAGE,),
        ),
        FeatureGroup(
            name="Guide",
            access=(perms.PERM_GUIDE_VIEW,),
        ),
        FeatureGroup(
            name="Reports",
            access=(perms.PERM_DOWNTIME_ANALYZE_TEAM, perms.PERM_DOWNTIME_ANALYZE_COMPANY),
        ),
        FeatureGroup(
            name="Users",
            access=(perms.PERM_USERS_MANAGE_TEAM,),
            add=(perms.PERM_USERS_MANAGE_ALL,),
            edit=(perms.PERM_USERS_MANAGE_ALL,),
        ),
        FeatureGroup(
            name="Settings",
            access=(perms.PERM_USERS_MANAGE_TEAM,),
            add=(perms.PERM_USERS_MANAGE_ALL,),
            edit=(perms.PERM_USERS_MANAGE_ALL,),
        ),
    )
}

# =================================================================
# Secciones de la aplicación ("alguna de" estas claves da acceso)
# =================================================================
# Usadas por la navegación, las guardas de página y el resumen
# de "Acceso y Permisos".
# =================================================================

SECTION_GATES: Dict[str, Tuple[str, ...]] = {
    "Dashboard": (perms.PERM_KPI_VIEW_TEAM, perms.PERM_KPI_VIEW_GLOBAL),
    "Work Orders": (
        perms.PERM_WORK_ORDERS_REQUEST, perms.PERM_WORK_ORDERS_VIEW_ALL, perms.PERM_WORK_ORDERS_CREATE,
        perms.PERM_WORK_ORDERS_APPROVE, perms.PERM_WORK_ORDERS_ASSIGN, perms.PERM_WORK_ORDERS_CLOSE,
    ),
    "Assets": (perms.PERM_ASSETS_VIEW, perms.PERM_ASSETS_EDIT),
    "Inventory": (perms.PERM_INVENTORY_REQUEST, perms.PERM_INVENTORY_MANAGE),
    "Preventive Maintenance": (perms.PERM_PM_VIEW, perms.PERM_PM_MANAGE),
    "Guide": (perms.PERM_GUIDE_VIEW,),
    "Reports": (perms.PERM_DOWNTIME_ANALYZE_TEAM, perms.PERM_DOWNTIME_ANALYZE_COMPANY),
    "Users": (perms.PERM_USERS_MANAGE_TEAM, perms.PERM_USERS_MANAGE_ALL),
    "Settings": (perms.PERM_USERS_MANAGE_TEAM, perms.PERM_USERS_MANAGE_ALL),
}


def get_feature_group(name: str) -> FeatureGroup:
    try:
        return FEATURE_GROUPS[name]
    except KeyError:
        raise UnknownFeatureGroupError(f"Grupo de funcionalidades '{name}' no registrado.") from None


def find_unknown_keys(known_keys: Iterable[str]) -> Dict[str, List[str]]:
    """
    Compara el registro con el catálogo de capacidades del backend.
    Devuelve {grupo: [claves desconocidas]}; nunca lanza.
    """
    known = frozenset(known_keys)
    if not known:
        logger.warning("find_unknown_keys: catálogo de capacidades vacío, no se puede verificar el registro.")
        return {}
    unknown: Dict[str, List[str]] = {}
    for name, group in FEATURE_GROUPS.items():
        missing = [key for key in group.all_keys() if key not in known]
        if missing:
            logger.warning(f"Grupo '{name}': claves no presentes en el catálogo {missing}. Esas categorías quedarán sin efecto.")
            unknown[name] = missing
    return unknown
