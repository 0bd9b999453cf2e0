from typing import Optional


class RbacError(Exception):
    """Excepción base del motor de permisos."""


class GatewayError(RbacError):
    """
    Fallo de transporte o respuesta HTTP no exitosa del backend RBAC.
    `status_code` es None cuando la petición ni siquiera obtuvo respuesta.
    """
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedPayloadError(RbacError):
    """El payload no tiene la forma esperada. Se rechaza completo, nunca parcialmente."""


class HydrationError(RbacError):
    """No se pudo obtener el catálogo de roles o de capacidades."""


class OverrideFetchError(RbacError):
    """No se pudieron cargar los overrides de un usuario."""


class OverrideSaveError(RbacError):
    """El backend rechazó (o no recibió) el guardado de overrides de un usuario."""


class PermissionDeniedError(RbacError):
    """El actor actual no tiene ninguna de las capacidades requeridas."""
    def __init__(self, required: frozenset):
        super().__init__(f"Se requiere al menos una de las capacidades: {sorted(required)}")
        self.required = required


class UnknownFeatureGroupError(RbacError, KeyError):
    """Grupo de funcionalidades no registrado."""
