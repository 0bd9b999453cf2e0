# Capacidades
from .capability import (
    CapabilityKey,
    RoleName,
    canonicalize_role,
    Capability,
    CapabilityCatalogResponse,
)

# Roles
from .rol import RolDefinition, RolCatalogResponse, RolCatalogSnapshot

# Overrides
from .override import UserOverride, UserOverrideSaved

# Grupos de funcionalidades
from .enums import OverrideModeEnum, PermissionCategoryEnum
from .feature_group import FeatureGroup, ModeGroup

# Usuario de sesión
from .usuario import SessionUser
