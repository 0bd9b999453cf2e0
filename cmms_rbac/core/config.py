import os
import json
from typing import List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """
    Configuraciones del motor de permisos, leídas desde variables de entorno.
    """
    # --- Configuración General del Proyecto ---
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "CMMS RBAC")

    # --- Configuración del Backend RBAC ---
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:5000")
    API_TIMEOUT_SECONDS: float = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
    RBAC_ROLES_PATH: str = os.getenv("RBAC_ROLES_PATH", "/rbac/roles")
    RBAC_PERMISSIONS_PATH: str = os.getenv("RBAC_PERMISSIONS_PATH", "/rbac/permissions")
    # Debe contener el marcador {user_id}
    USER_PERMISSIONS_PATH: str = os.getenv("USER_PERMISSIONS_PATH", "/users/{user_id}/permissions")

    # --- Editor de Overrides ---
    # Roles que pueden abrir el editor de overrides de otros usuarios.
    OVERRIDE_EDITOR_ROLES: Union[str, List[str]] = ["MD", "COO"]

    @field_validator("OVERRIDE_EDITOR_ROLES", mode='before')
    @classmethod
    def assemble_editor_roles(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and v:
            if v.startswith("[") and v.endswith("]"):
                try:
                    return [str(r).strip().upper() for r in json.loads(v) if str(r).strip()]
                except json.JSONDecodeError:
                    pass
            return [role.strip().upper() for role in v.split(",") if role.strip()]
        elif isinstance(v, list):
            return [str(role).strip().upper() for role in v if str(role).strip()]
        return []

    @field_validator("USER_PERMISSIONS_PATH")
    @classmethod
    def check_user_placeholder(cls, v: str) -> str:
        if "{user_id}" not in v:
            raise ValueError("USER_PERMISSIONS_PATH debe contener el marcador '{user_id}'.")
        return v

    # --- Configuración de Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "false").lower() in ("1", "true", "yes")
    LOGS_DIRECTORY: str = os.getenv("LOGS_DIRECTORY", "./logs")

    class Config:
        case_sensitive = True
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"

settings = Settings()
