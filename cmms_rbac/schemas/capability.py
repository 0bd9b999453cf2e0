from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, ConfigDict

# ===============================================================
# Tipos base
# ===============================================================
# Una clave de capacidad es un string opaco y sensible a mayúsculas, sin límite de longitud.
# No hay jerarquía ni comodines: la comparación es exacta.
CapabilityKey = Annotated[str, Field(min_length=1)]

# Nombre de rol tal como llega del backend (se canonicaliza al indexar).
RoleName = Annotated[str, Field(min_length=1, max_length=100)]


def canonicalize_role(role: Optional[str]) -> Optional[str]:
    """Nombre canónico de un rol (mayúsculas). None si no hay rol utilizable."""
    if not isinstance(role, str):
        return None
    canonical = role.strip().upper()
    return canonical or None

# ===============================================================
# Schemas de respuesta de /rbac/permissions
# ===============================================================
class Capability(BaseModel):
    """Una capacidad del catálogo del backend."""
    key: CapabilityKey
    description: Optional[str] = Field(None, description="Descripción opcional de la capacidad")

    model_config = ConfigDict(extra="ignore")

class CapabilityCatalogResponse(BaseModel):
    """Respuesta completa del catálogo de capacidades."""
    permissions: List[Capability]

    def keys(self) -> List[str]:
        return [p.key for p in self.permissions]
