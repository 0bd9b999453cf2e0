"""
Motor de permisos (RBAC) del CMMS.

Decide, para un actor y una clave de capacidad, si una acción o superficie
de la interfaz está permitida: catálogo de roles hidratado desde el backend,
overrides allow/deny por usuario y el editor de tres estados por grupo de
funcionalidades.
"""

__version__ = "1.0.0"
