from typing import Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, Field, ConfigDict

from .capability import CapabilityKey, RoleName

# --- Schema de un Rol del backend ---
class RolDefinition(BaseModel):
    """
    Definición de un rol tal como la expone /rbac/roles.
    El nombre NO se canonicaliza aquí; lo hace el catálogo al indexar.
    """
    id: Optional[Union[str, int]] = Field(None, description="Identificador del rol en el backend")
    name: RoleName = Field(..., description="Nombre del rol (ej: OPERATOR)")
    permissions: List[CapabilityKey] = Field(default_factory=list, description="Claves de capacidad otorgadas al rol")

    model_config = ConfigDict(extra="ignore")

# --- Schema de la respuesta completa ---
class RolCatalogResponse(BaseModel):
    """
    Respuesta de /rbac/roles. La lista `roles` es obligatoria: un payload
    sin ella se considera malformado y se rechaza completo.
    """
    roles: List[RolDefinition]

    model_config = ConfigDict(extra="ignore")

# --- Snapshot de solo lectura ---
RolCatalogSnapshot = Dict[str, FrozenSet[str]]
