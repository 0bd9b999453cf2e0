"""
Módulo de Servicios

Catálogo de roles, motor de resolución, almacén de overrides, editor de
tres estados, sesión de permisos y cliente HTTP del backend RBAC.
"""

from .role_catalog import RoleCatalog
from .resolution import PermissionResolver, resolve, resolve_any
from .api_client import RbacApiClient, RbacGateway
from .hydration import hydrate_role_catalog, hydrate_capability_catalog
from .user_override import UserOverrideService
from .override_editor import (
    OverrideEditor,
    project_mode,
    read_modes,
    category_contribution,
    build_overrides,
    next_mode,
    effective_value,
    can_edit_overrides,
)
from .access_summary import access_summary
from .session import PermissionSession

__all__ = [
    "RoleCatalog",
    "PermissionResolver",
    "resolve",
    "resolve_any",
    "RbacApiClient",
    "RbacGateway",
    "hydrate_role_catalog",
    "hydrate_capability_catalog",
    "UserOverrideService",
    "OverrideEditor",
    "project_mode",
    "read_modes",
    "category_contribution",
    "build_overrides",
    "next_mode",
    "effective_value",
    "can_edit_overrides",
    "access_summary",
    "PermissionSession",
]
