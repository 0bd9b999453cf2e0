import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from cmms_rbac.schemas.capability import canonicalize_role
from cmms_rbac.schemas.rol import RolDefinition, RolCatalogSnapshot

logger = logging.getLogger(__name__)

_EMPTY: FrozenSet[str] = frozenset()


class RoleCatalog:
    """
    Almacén del catálogo rol -> capacidades (y del catálogo de capacidades conocidas).

    Empieza vacío. Cada hidratación reemplaza el mapeo completo de forma
    atómica; nunca se mezcla con el contenido anterior. Las respuestas de
    peticiones ya superadas se descartan mediante un número de secuencia
    monótono que se reserva ANTES de lanzar la petición.

    Se inyecta en quien lo necesite (resolver, sesión, tests); no es un global.
    """

    def __init__(self, roles: Optional[Iterable[RolDefinition]] = None):
        self._roles: RolCatalogSnapshot = {}
        self._capabilities: FrozenSet[str] = _EMPTY
        self._role_seq_issued = 0
        self._role_seq_applied = 0
        self._cap_seq_issued = 0
        self._cap_seq_applied = 0
        self.hydration_attempted = False
        self.is_hydrated = False
        if roles is not None:
            self.replace_roles(roles, seq=self.next_role_seq())

    # --- Secuencias ---
    def next_role_seq(self) -> int:
        self._role_seq_issued += 1
        return self._role_seq_issued

    def next_capability_seq(self) -> int:
        self._cap_seq_issued += 1
        return self._cap_seq_issued

    # --- Escritura (sólo hidratación) ---
    def replace_roles(self, roles: Iterable[RolDefinition], *, seq: int) -> bool:
        """
        Reemplaza todo el mapeo. Devuelve False si `seq` pertenece a una
        petición superada y la respuesta se ignora.
        """
        if seq <= self._role_seq_applied:
            logger.debug(f"Respuesta de roles #{seq} descartada: ya se aplicó la #{self._role_seq_applied}.")
            return False

        mapping: Dict[str, FrozenSet[str]] = {}
        for rol in roles:
            canonical = canonicalize_role(rol.name)
            if canonical is None:
                continue
            if canonical in mapping:
                logger.warning(f"Rol '{rol.name}' duplicado tras canonicalizar a '{canonical}'. Se conserva la última definición.")
            mapping[canonical] = frozenset(rol.permissions)

        self._roles = mapping
        self._role_seq_applied = seq
        self.is_hydrated = True
        logger.info(f"Catálogo de roles reemplazado (#{seq}): {len(mapping)} rol(es).")
        return True

    def replace_capabilities(self, keys: Iterable[str], *, seq: int) -> bool:
        if seq <= self._cap_seq_applied:
            logger.debug(f"Respuesta de capacidades #{seq} descartada: ya se aplicó la #{self._cap_seq_applied}.")
            return False
        self._capabilities = frozenset(keys)
        self._cap_seq_applied = seq
        logger.info(f"Catálogo de capacidades reemplazado (#{seq}): {len(self._capabilities)} clave(s).")
        return True

    # --- Lectura ---
    def permissions_for(self, role: Optional[str]) -> FrozenSet[str]:
        """Capacidades del rol. Rol ausente o desconocido -> conjunto vacío."""
        canonical = canonicalize_role(role)
        if canonical is None:
            return _EMPTY
        return self._roles.get(canonical, _EMPTY)

    def snapshot(self) -> RolCatalogSnapshot:
        return dict(self._roles)

    def role_names(self) -> List[str]:
        return sorted(self._roles)

    def role_label(self, role: Optional[str]) -> str:
        canonical = canonicalize_role(role)
        if canonical is not None and canonical in self._roles:
            return canonical
        return role or "Unknown"

    @property
    def capabilities(self) -> FrozenSet[str]:
        return self._capabilities

    def __contains__(self, role: object) -> bool:
        canonical = canonicalize_role(role) if isinstance(role, str) else None
        return canonical is not None and canonical in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    def __repr__(self) -> str:
        return f"<RoleCatalog(roles={len(self._roles)}, hydrated={self.is_hydrated})>"
