from typing import Any, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from .override import UserOverride

class SessionUser(BaseModel):
    """
    Actor autenticado tal como lo entrega el perfil (/auth/profile).
    Sólo se guardan los campos que usa el motor de permisos.
    """
    id: str = Field(..., min_length=1)
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = Field(None, description="Nombre del rol, sin canonicalizar")
    permission_overrides: UserOverride = Field(
        default_factory=UserOverride,
        alias="permissionOverrides",
        description="Overrides allow/deny del usuario"
    )

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("permission_overrides", mode="before")
    @classmethod
    def default_overrides(cls, v: Any) -> Any:
        # Un perfil sin overrides guardados llega con null
        return UserOverride() if v is None else v
