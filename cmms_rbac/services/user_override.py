import logging
from typing import Dict, Optional

from cmms_rbac.core.exceptions import OverrideFetchError, OverrideSaveError, RbacError
from cmms_rbac.schemas.override import UserOverride
from .api_client import RbacGateway

logger = logging.getLogger(__name__)


class UserOverrideService:
    """
    Almacén de overrides allow/deny por usuario.
    Se cargan de forma perezosa la primera vez que se piden y se guardan
    reemplazando el par completo. Nunca se parchean clave a clave.
    """

    def __init__(self, gateway: RbacGateway):
        self.gateway = gateway
        self._records: Dict[str, UserOverride] = {}

    def cached(self, user_id: str) -> Optional[UserOverride]:
        return self._records.get(user_id)

    async def get(self, user_id: str) -> UserOverride:
        """Overrides del usuario; sólo consulta el backend si aún no se cargaron."""
        record = self._records.get(user_id)
        if record is not None:
            return record
        return await self.refresh(user_id)

    async def refresh(self, user_id: str) -> UserOverride:
        try:
            record = await self.gateway.fetch_user_overrides(user_id)
        except RbacError as e:
            logger.warning(f"No se pudieron cargar los overrides del usuario {user_id}: {e}")
            raise OverrideFetchError(f"No se pudieron cargar los permisos del usuario {user_id}.") from e
        self._records[user_id] = record
        logger.debug(f"Overrides del usuario {user_id} cargados: allow={sorted(record.allow)}, deny={sorted(record.deny)}")
        return record

    async def save(self, user_id: str, overrides: UserOverride) -> UserOverride:
        """
        Reemplaza los overrides del usuario en el backend. El registro local
        sólo se actualiza si el backend confirma.
        """
        logger.info(f"Guardando overrides del usuario {user_id}: allow={sorted(overrides.allow)}, deny={sorted(overrides.deny)}")
        try:
            saved = await self.gateway.save_user_overrides(user_id, overrides)
        except RbacError as e:
            logger.error(f"Guardado de overrides del usuario {user_id} rechazado: {e}")
            raise OverrideSaveError(f"No se pudieron guardar los permisos del usuario {user_id}.") from e
        self._records[user_id] = saved
        return saved

    def invalidate(self, user_id: Optional[str] = None) -> None:
        """Olvida el registro de un usuario (o de todos si user_id es None)."""
        if user_id is None:
            self._records.clear()
        else:
            self._records.pop(user_id, None)
