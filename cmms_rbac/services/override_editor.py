"""
Editor de overrides por grupo de funcionalidades (Access / Add / Edit).

Traduce toggles de tres estados (inherit / allow / deny) a contribuciones
concretas en los conjuntos allow/deny del usuario, y a la inversa.

Las dos piezas puras son `project_mode` (conjunto de claves x overrides ->
modo) y `category_contribution` (modo -> claves para allow / deny). El
resto es estado de la sesión de edición.
"""
import logging
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from cmms_rbac.core.config import settings
from cmms_rbac.core.exceptions import OverrideFetchError, UnknownFeatureGroupError
from cmms_rbac.core.feature_groups import FEATURE_GROUPS
from cmms_rbac.schemas.capability import canonicalize_role
from cmms_rbac.schemas.enums import OverrideModeEnum, PermissionCategoryEnum
from cmms_rbac.schemas.feature_group import FeatureGroup, ModeGroup
from cmms_rbac.schemas.override import UserOverride
from .resolution import PermissionResolver
from .user_override import UserOverrideService

logger = logging.getLogger(__name__)

INHERIT = OverrideModeEnum.INHERIT
ALLOW = OverrideModeEnum.ALLOW
DENY = OverrideModeEnum.DENY


# ==============================================================================
# Funciones puras
# ==============================================================================

def project_mode(keys: Iterable[str], overrides: UserOverride) -> OverrideModeEnum:
    """deny si alguna clave está denegada; si no, allow si alguna está concedida; si no, inherit."""
    keys = tuple(keys)
    if any(key in overrides.deny for key in keys):
        return DENY
    if any(key in overrides.allow for key in keys):
        return ALLOW
    return INHERIT


def read_modes(group: FeatureGroup, overrides: UserOverride) -> ModeGroup:
    """Modo inicial de cada categoría habilitada del grupo."""
    return {category: project_mode(group.keys_for(category), overrides) for category in group.categories()}


def category_contribution(
    group: FeatureGroup,
    category: PermissionCategoryEnum,
    mode: OverrideModeEnum,
) -> Tuple[FrozenSet[str], FrozenSet[str]]:
    """Claves que aporta una categoría a (allow, deny) según su modo."""
    keys = frozenset(group.keys_for(category))
    mode = OverrideModeEnum(mode)
    if mode is ALLOW:
        if category == PermissionCategoryEnum.ACCESS and group.access_allow_key:
            return frozenset({group.access_allow_key}), frozenset()
        return keys, frozenset()
    if mode is DENY:
        return frozenset(), keys
    return frozenset(), frozenset()


def build_overrides(
    modes: Mapping[str, ModeGroup],
    registry: Mapping[str, FeatureGroup] = FEATURE_GROUPS,
) -> UserOverride:
    """Unión de las contribuciones de todas las categorías de todos los grupos."""
    allow: set = set()
    deny: set = set()
    for name, group_modes in modes.items():
        group = registry.get(name)
        if group is None:
            logger.warning(f"build_overrides: grupo '{name}' no registrado, se ignora.")
            continue
        for category, mode in group_modes.items():
            if not group.keys_for(category):
                continue
            allow_part, deny_part = category_contribution(group, category, mode)
            allow |= allow_part
            deny |= deny_part
    return UserOverride(allow=frozenset(allow), deny=frozenset(deny))


def next_mode(checked: bool, inherited: bool) -> OverrideModeEnum:
    """
    Transición al hacer clic en un toggle:
    marcar algo que el rol ya concede vuelve a inherit; marcar algo que no
    concede pasa a allow; desmarcar algo del rol pasa a deny; desmarcar
    algo que no viene del rol vuelve a inherit.
    """
    if checked:
        return INHERIT if inherited else ALLOW
    return DENY if inherited else INHERIT


def effective_value(inherited: bool, mode: OverrideModeEnum) -> bool:
    """Valor que se muestra: el modo explícito manda; inherit muestra lo que concede el rol."""
    mode = OverrideModeEnum(mode)
    if mode is DENY:
        return False
    if mode is ALLOW:
        return True
    return inherited


def can_edit_overrides(editor_role: Optional[str]) -> bool:
    """Sólo ciertos roles (OVERRIDE_EDITOR_ROLES) pueden editar overrides de otros usuarios."""
    canonical = canonicalize_role(editor_role)
    return canonical is not None and canonical in settings.OVERRIDE_EDITOR_ROLES


# ==============================================================================
# Sesión de edición
# ==============================================================================

class OverrideEditor:
    """
    Estado de una sesión de edición de overrides para un usuario.

    Los valores "heredados" se calculan sólo con el rol base (overrides
    vacíos): durante la edición, los modos SON los overrides que se van a
    guardar. La sesión termina al guardar o cancelar; un guardado fallido no
    revierte los toggles.
    """

    def __init__(
        self,
        resolver: PermissionResolver,
        base_role: Optional[str],
        override_service: Optional[UserOverrideService] = None,
        registry: Mapping[str, FeatureGroup] = FEATURE_GROUPS,
    ):
        self.resolver = resolver
        self.base_role = base_role
        self.override_service = override_service
        self.registry = registry
        self.modes: Dict[str, ModeGroup] = {}
        self.start_blank()

    # --- Inicialización ---
    def start_blank(self) -> None:
        """Todos los grupos en inherit (alta de un usuario nuevo o tras reset)."""
        self.modes = {
            name: {category: INHERIT for category in group.categories()}
            for name, group in self.registry.items()
        }

    def initialize(self, overrides: UserOverride) -> None:
        self.modes = {name: read_modes(group, overrides) for name, group in self.registry.items()}

    async def load(self, user_id: str) -> bool:
        """
        Carga los overrides del usuario y proyecta los modos. Si la carga falla
        todo queda en inherit y se devuelve False.
        """
        if self.override_service is None:
            raise RuntimeError("OverrideEditor.load requiere un UserOverrideService.")
        try:
            overrides = await self.override_service.get(user_id)
        except OverrideFetchError as e:
            logger.warning(f"Editor: no se pudieron cargar overrides de {user_id}, se inicia en inherit. {e}")
            self.start_blank()
            return False
        self.initialize(overrides)
        return True

    # --- Consulta ---
    def _group(self, name: str) -> FeatureGroup:
        group = self.registry.get(name)
        if group is None:
            raise UnknownFeatureGroupError(f"Grupo de funcionalidades '{name}' no registrado.")
        return group

    def is_enabled(self, group_name: str, category: PermissionCategoryEnum) -> bool:
        return bool(self._group(group_name).keys_for(category))

    def mode(self, group_name: str, category: PermissionCategoryEnum) -> OverrideModeEnum:
        self._group(group_name)
        return self.modes.get(group_name, {}).get(PermissionCategoryEnum(category), INHERIT)

    def inherited(self, group_name: str, category: PermissionCategoryEnum) -> bool:
        keys = self._group(group_name).keys_for(category)
        return self.resolver.resolve_any(self.base_role, None, keys)

    def effective(self, group_name: str, category: PermissionCategoryEnum) -> bool:
        if not self.is_enabled(group_name, category):
            return False
        return effective_value(self.inherited(group_name, category), self.mode(group_name, category))

    # --- Edición ---
    def set_mode(self, group_name: str, category: PermissionCategoryEnum, mode: OverrideModeEnum) -> None:
        category = PermissionCategoryEnum(category)
        if not self.is_enabled(group_name, category):
            logger.debug(f"Editor: categoría '{category.value}' de '{group_name}' deshabilitada, se ignora.")
            return
        self.modes.setdefault(group_name, {})[category] = OverrideModeEnum(mode)

    def toggle(self, group_name: str, category: PermissionCategoryEnum, checked: bool) -> OverrideModeEnum:
        """Aplica un clic del usuario y devuelve el modo resultante."""
        category = PermissionCategoryEnum(category)
        if not self.is_enabled(group_name, category):
            return self.mode(group_name, category)
        new_mode = next_mode(bool(checked), self.inherited(group_name, category))
        self.set_mode(group_name, category, new_mode)
        return new_mode

    def to_overrides(self) -> UserOverride:
        return build_overrides(self.modes, self.registry)

    # --- Persistencia ---
    async def save(self, user_id: str) -> UserOverride:
        """Guarda el par completo. Un fallo lanza OverrideSaveError y NO revierte los toggles."""
        if self.override_service is None:
            raise RuntimeError("OverrideEditor.save requiere un UserOverrideService.")
        return await self.override_service.save(user_id, self.to_overrides())

    async def reset(self, user_id: Optional[str] = None) -> None:
        """Borra todos los overrides (conjuntos vacíos) y vuelve a inherit."""
        if user_id is not None:
            if self.override_service is None:
                raise RuntimeError("OverrideEditor.reset requiere un UserOverrideService.")
            await self.override_service.save(user_id, UserOverride())
        self.start_blank()
        logger.info(f"Editor: overrides reiniciados{f' para {user_id}' if user_id else ''}. Todo hereda del rol.")
