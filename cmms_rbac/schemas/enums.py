from enum import Enum

class OverrideModeEnum(str, Enum):
    """Posición de un toggle del editor de overrides para una categoría."""
    INHERIT = 'inherit'
    ALLOW = 'allow'
    DENY = 'deny'

class PermissionCategoryEnum(str, Enum):
    """Categorías de un grupo de funcionalidades, en el orden en que se muestran."""
    ACCESS = 'access'
    ADD = 'add'
    EDIT = 'edit'
