import logging
from typing import Dict, Mapping, Optional, Tuple

from cmms_rbac.core.feature_groups import SECTION_GATES
from cmms_rbac.schemas.override import UserOverride
from .resolution import PermissionResolver

logger = logging.getLogger(__name__)


def access_summary(
    resolver: PermissionResolver,
    role: Optional[str],
    overrides: Optional[UserOverride],
    sections: Mapping[str, Tuple[str, ...]] = SECTION_GATES,
) -> Dict[str, bool]:
    """
    Resumen de "Acceso y Permisos": {sección: tiene acceso}.
    Cada sección se evalúa con resolve_any sobre sus claves, igual que la
    navegación y las guardas de página.
    """
    summary = {name: resolver.resolve_any(role, overrides, keys) for name, keys in sections.items()}
    logger.debug(f"Resumen de acceso para rol '{role}': {summary}")
    return summary
