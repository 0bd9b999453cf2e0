from typing import Dict, Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict, model_validator

from .capability import CapabilityKey
from .enums import OverrideModeEnum, PermissionCategoryEnum

# ===============================================================
# Grupo de funcionalidades (Access / Add / Edit)
# ===============================================================
class FeatureGroup(BaseModel):
    """
    Área de la interfaz con hasta tres conjuntos de claves. Una categoría
    sin claves queda deshabilitada permanentemente en el editor.
    """
    name: str = Field(..., min_length=1, description="Nombre visible (ej: Work Orders)")
    access: Tuple[CapabilityKey, ...] = Field(default_factory=tuple)
    access_allow_key: Optional[CapabilityKey] = Field(
        None,
        description="Clave única que se concede al marcar 'allow' en Access, en lugar de todo el conjunto"
    )
    add: Tuple[CapabilityKey, ...] = Field(default_factory=tuple)
    edit: Tuple[CapabilityKey, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_allow_key(self) -> "FeatureGroup":
        if self.access_allow_key is not None and self.access_allow_key not in self.access:
            raise ValueError(
                f"La clave primaria '{self.access_allow_key}' del grupo '{self.name}' no pertenece a su conjunto Access."
            )
        return self

    def keys_for(self, category: PermissionCategoryEnum) -> Tuple[str, ...]:
        return getattr(self, PermissionCategoryEnum(category).value)

    def categories(self) -> Tuple[PermissionCategoryEnum, ...]:
        """Categorías habilitadas (con al menos una clave), en orden de presentación."""
        return tuple(c for c in PermissionCategoryEnum if self.keys_for(c))

    def all_keys(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for category in PermissionCategoryEnum:
            for key in self.keys_for(category):
                seen.setdefault(key, None)
        return tuple(seen)

# Modos de un grupo durante una sesión de edición
ModeGroup = Dict[PermissionCategoryEnum, OverrideModeEnum]
