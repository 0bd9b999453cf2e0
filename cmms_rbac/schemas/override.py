from typing import Any, Dict, FrozenSet, List

from pydantic import BaseModel, Field, ConfigDict

from .capability import CapabilityKey

# ===============================================================
# Overrides por usuario
# ===============================================================
class UserOverride(BaseModel):
    """
    Par de conjuntos allow/deny de un usuario, independiente de su rol.
    Un usuario sin registro equivale a ambos conjuntos vacíos.
    Es inmutable: guardar reemplaza el par completo.
    """
    allow: FrozenSet[CapabilityKey] = Field(default_factory=frozenset, description="Claves concedidas explícitamente")
    deny: FrozenSet[CapabilityKey] = Field(default_factory=frozenset, description="Claves denegadas explícitamente (siempre ganan)")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def empty(cls) -> "UserOverride":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.allow and not self.deny

    def to_payload(self) -> Dict[str, List[str]]:
        """Cuerpo para PUT /users/{id}/permissions (listas ordenadas)."""
        return {"allow": sorted(self.allow), "deny": sorted(self.deny)}

# ===============================================================
# Respuesta del backend al guardar
# ===============================================================
class UserOverrideSaved(UserOverride):
    """Respuesta de PUT /users/{id}/permissions. Incluye el id del usuario si viene."""
    id: Any = Field(None, description="ID del usuario actualizado")
